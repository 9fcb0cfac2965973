"""
jobarray | synth.py

Read -> validate -> extract directives -> encode -> render. Nothing here
touches the scheduler; every failure is raised before submission.
"""

from __future__ import annotations

from pathlib import Path
from typing import IO, Optional, Union

from jobarray.config import SynthConfig
from jobarray.records.loader import read_records, read_table
from jobarray.slurm.directives import extract_directives
from jobarray.slurm.encode import bind_lines, bind_table
from jobarray.slurm.render import ArrayScript, render_script
from jobarray.submit import resolve_target

Pathish = Union[str, Path]


def synthesize_lines(
    source: Pathish,
    target: Pathish,
    *,
    config: Optional[SynthConfig] = None,
    stream: Optional[IO] = None,
) -> ArrayScript:
    """One task per retained line; the line's words become the target's argv."""
    cfg = config or SynthConfig()
    exe = resolve_target(target)
    records = read_records(source, stream)
    bindings = bind_lines(records)
    return render_script(
        "lines",
        bindings,
        target=str(exe),
        directives=extract_directives(exe, cfg.directive_prefix),
        source=records.source,
        config=cfg,
    )


def synthesize_table(
    source: Pathish,
    target: Pathish,
    *,
    config: Optional[SynthConfig] = None,
    stream: Optional[IO] = None,
) -> ArrayScript:
    """One task per data row; each column is exported as `_<header>`."""
    cfg = config or SynthConfig()
    exe = resolve_target(target)
    table = read_table(source, stream)
    bindings = bind_table(table)
    return render_script(
        "table",
        bindings,
        target=str(exe),
        directives=extract_directives(exe, cfg.directive_prefix),
        source=table.source,
        config=cfg,
    )
