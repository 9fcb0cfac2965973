import stat
from pathlib import Path

import pytest


def write_executable(path: Path, body: str) -> Path:
    path.write_text(body, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def target(tmp_path: Path) -> Path:
    """A job script carrying two resource directives."""
    return write_executable(
        tmp_path / "job.sh",
        "#!/bin/sh\n"
        "#SBATCH --time=01:00:00\n"
        "#SBATCH --mem=2G\n"
        "echo \"$@\"\n",
    )


@pytest.fixture
def fake_sbatch(tmp_path: Path, monkeypatch) -> Path:
    """
    Stand-in for sbatch: records argv (one per line) and the script read
    from stdin next to itself, prints a job id, exits $FAKE_SBATCH_STATUS.
    """
    bindir = tmp_path / "fakebin"
    bindir.mkdir()
    exe = write_executable(
        bindir / "sbatch",
        "#!/bin/sh\n"
        "dir=$(dirname \"$0\")\n"
        "printf '%s\\n' \"$@\" > \"$dir/sbatch.args\"\n"
        "cat > \"$dir/sbatch.stdin\"\n"
        "echo 'Submitted batch job 4242'\n"
        "exit \"${FAKE_SBATCH_STATUS:-0}\"\n",
    )
    monkeypatch.setenv("JOBARRAY_SBATCH", str(exe))
    return exe


@pytest.fixture
def make_executable():
    return write_executable
