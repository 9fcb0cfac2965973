"""
jobarray | submit.py

SLURM submission for synthesized array scripts.

The script is streamed to sbatch on stdin; caller options are passed on
the command line so that sbatch's own precedence (command line over
#SBATCH) decides every conflict with the target's directives.
"""

from __future__ import annotations

import logging
import os
import re
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from jobarray.config import SynthConfig
from jobarray.errors import SchedulerNotFound, SubmissionError, TargetResolutionError
from jobarray.slurm.render import ArrayScript

logger = logging.getLogger(__name__)

Pathish = Union[str, Path]

_JOBID_RE = re.compile(r"Submitted batch job (\d+)|^(\d+)(?:;\S*)?$", re.MULTILINE)


# ---------------------------------------------------------------------------
# LOOKUP
# ---------------------------------------------------------------------------
def _is_executable(p: Path) -> bool:
    return p.is_file() and os.access(p, os.X_OK)


def resolve_target(name: Pathish, cwd: Optional[Pathish] = None) -> Path:
    """
    Resolve the target executable the way sbatch resolves a script name:
    a bare name is tried in the working directory first, then on PATH.
    """
    name = str(name)
    base = Path(cwd) if cwd else Path.cwd()

    if "/" in name:
        cand = Path(name)
        if not cand.is_absolute():
            cand = base / cand
    else:
        cand = base / name
        if not cand.exists():
            found = shutil.which(name)
            if not found:
                raise TargetResolutionError(f"target not found in . or PATH: {name}")
            cand = Path(found)

    if not cand.exists():
        raise TargetResolutionError(f"target not found: {name}")
    if not _is_executable(cand):
        raise TargetResolutionError(f"target is not an executable file: {name}")

    resolved = cand.resolve()
    logger.info("resolved target %s -> %s", name, resolved)
    return resolved


def locate_scheduler(command: str = "sbatch") -> str:
    found = shutil.which(command)
    if not found:
        raise SchedulerNotFound(f"scheduler command not found: {command}")
    return found


# ---------------------------------------------------------------------------
# COMMAND LINE
# ---------------------------------------------------------------------------
def array_range(ntasks: int, max_parallel: Optional[int] = None) -> str:
    if ntasks < 1:
        raise ValueError("ntasks must be >= 1")
    rng = f"1-{ntasks}"
    if max_parallel:
        rng += f"%{max_parallel}"
    return rng


def build_command(
    sbatch: str,
    options: Sequence[str],
    ntasks: int,
    max_parallel: Optional[int] = None,
) -> List[str]:
    """
    sbatch, caller options verbatim and in order, then the computed range.

    --array goes last so it wins over any range the caller passed.
    """
    return [sbatch, *options, f"--array={array_range(ntasks, max_parallel)}"]


# ---------------------------------------------------------------------------
# SUBMIT
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class SubmitResult:
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""
    job_id: Optional[str] = None


def parse_job_id(stdout: str) -> Optional[str]:
    m = _JOBID_RE.search(stdout)
    if not m:
        return None
    return m.group(1) or m.group(2)


def submit(
    script: ArrayScript,
    options: Sequence[str] = (),
    *,
    config: Optional[SynthConfig] = None,
    max_parallel: Optional[int] = None,
) -> SubmitResult:
    """
    Stream `script` into sbatch with `options` and --array=1-N.

    A non-zero sbatch exit status is returned, not raised.
    """
    cfg = config or SynthConfig()
    cmd = build_command(locate_scheduler(cfg.sbatch), options, script.ntasks, max_parallel)
    logger.info("submitting: %s", shlex.join(cmd))

    try:
        proc = subprocess.run(cmd, input=script.encode(), capture_output=True)
    except OSError as exc:
        raise SubmissionError(f"could not start {cmd[0]}: {exc.strerror}") from exc

    job_id = parse_job_id(proc.stdout.decode("utf-8", "replace"))
    if proc.returncode == 0:
        logger.info("submitted job %s (%d task(s))", job_id or "UNKNOWN", script.ntasks)
    else:
        logger.info("%s exited with status %d", cmd[0], proc.returncode)

    return SubmitResult(
        returncode=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
        job_id=job_id,
    )
