from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from jobarray.config import SynthConfig
from jobarray.slurm.encode import TaskBinding

SCRIPT_TEMPLATES = {
    "lines": "lines.sbatch.j2",
    "table": "table.sbatch.j2",
}


def _template_root() -> Path:
    return Path(__file__).resolve().parent / "templates"


def get_script_env() -> Environment:
    """Jinja environment for array scripts; `q` is shlex.quote."""
    env = Environment(
        loader=FileSystemLoader(str(_template_root())),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["q"] = shlex.quote
    return env


@dataclass(frozen=True)
class ArrayScript:
    mode: str
    text: str
    ntasks: int
    directives: Tuple[str, ...] = ()

    def encode(self) -> bytes:
        return self.text.encode("utf-8", "surrogateescape")


def render_script(
    mode: str,
    bindings: Sequence[TaskBinding],
    *,
    target: str,
    directives: Sequence[str] = (),
    source: str = "<stdin>",
    config: Optional[SynthConfig] = None,
) -> ArrayScript:
    """
    Script Emitter: interpreter line, directives, embedded bindings and
    the final `exec` of the target, in that order.
    """
    if mode not in SCRIPT_TEMPLATES:
        raise ValueError(f"Unknown script mode '{mode}'")
    if not bindings:
        raise ValueError("cannot render an array script with no tasks")

    cfg = config or SynthConfig()
    tpl = get_script_env().get_template(SCRIPT_TEMPLATES[mode])
    text = tpl.render(
        shell=cfg.shell,
        task_var=cfg.task_id_var,
        mode=mode,
        directives=list(directives),
        bindings=list(bindings),
        ntasks=len(bindings),
        # keep the comment on one line
        source=" ".join(source.splitlines()),
        target=str(target),
    )
    return ArrayScript(mode=mode, text=text, ntasks=len(bindings), directives=tuple(directives))
