import os
from pathlib import Path

import pytest

from jobarray.config import SynthConfig
from jobarray.errors import (
    SchedulerNotFound,
    SubmissionError,
    TargetResolutionError,
)
from jobarray.slurm.encode import TaskBinding
from jobarray.slurm.render import render_script
from jobarray.submit import (
    array_range,
    build_command,
    locate_scheduler,
    parse_job_id,
    resolve_target,
    submit,
)


def _script(n=3):
    return render_script(
        "lines",
        [TaskBinding(index=i, argv=(str(i),)) for i in range(1, n + 1)],
        target="/bin/echo",
        directives=["#SBATCH --mem=1G"],
    )


# ==========================================================
# TARGET RESOLUTION
# ==========================================================

def test_bare_name_prefers_working_directory(tmp_path: Path, monkeypatch, make_executable):
    bindir = tmp_path / "bin"
    bindir.mkdir()
    make_executable(bindir / "step", "#!/bin/sh\n")
    local = make_executable(tmp_path / "step", "#!/bin/sh\n")

    monkeypatch.setenv("PATH", str(bindir))
    monkeypatch.chdir(tmp_path)

    assert resolve_target("step") == local.resolve()


def test_bare_name_falls_back_to_path(tmp_path: Path, monkeypatch, make_executable):
    bindir = tmp_path / "bin"
    bindir.mkdir()
    on_path = make_executable(bindir / "step", "#!/bin/sh\n")
    workdir = tmp_path / "work"
    workdir.mkdir()

    monkeypatch.setenv("PATH", str(bindir))
    monkeypatch.chdir(workdir)

    assert resolve_target("step") == on_path.resolve()


def test_relative_path_with_separator(tmp_path: Path, monkeypatch, make_executable):
    sub = tmp_path / "jobs"
    sub.mkdir()
    exe = make_executable(sub / "run.sh", "#!/bin/sh\n")
    monkeypatch.chdir(tmp_path)

    assert resolve_target("jobs/run.sh") == exe.resolve()
    assert resolve_target("run.sh", cwd=sub) == exe.resolve()


def test_unresolvable_target(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    with pytest.raises(TargetResolutionError, match="not found"):
        resolve_target("no-such-job")
    with pytest.raises(TargetResolutionError, match="not found"):
        resolve_target("./no-such-job")


@pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root can execute anything")
def test_non_executable_target(tmp_path: Path):
    p = tmp_path / "data.txt"
    p.write_text("x")
    p.chmod(0o644)
    with pytest.raises(TargetResolutionError, match="not an executable"):
        resolve_target(p)


def test_directory_is_not_a_target(tmp_path: Path):
    with pytest.raises(TargetResolutionError, match="not an executable"):
        resolve_target(tmp_path)


# ==========================================================
# COMMAND LINE
# ==========================================================

def test_array_range():
    assert array_range(1) == "1-1"
    assert array_range(12, max_parallel=4) == "1-12%4"
    with pytest.raises(ValueError):
        array_range(0)


def test_build_command_keeps_caller_order():
    cmd = build_command("/usr/bin/sbatch", ["-p", "short", "--mem=8G", "-J", "x"], 5)
    assert cmd == ["/usr/bin/sbatch", "-p", "short", "--mem=8G", "-J", "x", "--array=1-5"]


@pytest.mark.parametrize(
    "options",
    [
        ["--array=1-9"],
        ["--arr=1-9"],
        ["-a", "5-6"],
        ["-J", "-alpha"],
    ],
)
def test_computed_range_is_last(options):
    """Caller words pass through untouched; the computed range comes after them."""
    cmd = build_command("sbatch", options, 3)
    assert cmd[1:-1] == options
    assert cmd[-1] == "--array=1-3"


@pytest.mark.parametrize(
    "out, jid",
    [
        ("Submitted batch job 123\n", "123"),
        ("123\n", "123"),
        ("456;cluster\n", "456"),
        ("nothing here\n", None),
    ],
)
def test_parse_job_id(out, jid):
    assert parse_job_id(out) == jid


# ==========================================================
# SUBMIT
# ==========================================================

def test_missing_scheduler(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    with pytest.raises(SchedulerNotFound):
        locate_scheduler("sbatch")
    # both taxonomies apply
    with pytest.raises(SubmissionError):
        submit(_script(), config=SynthConfig(sbatch="sbatch"))
    with pytest.raises(TargetResolutionError):
        submit(_script(), config=SynthConfig(sbatch="sbatch"))


def test_submit_streams_script_and_range(fake_sbatch: Path):
    script = _script(3)
    res = submit(
        script,
        ["--mem=4G", "-p", "short"],
        config=SynthConfig(sbatch=str(fake_sbatch)),
        max_parallel=2,
    )

    assert res.returncode == 0
    assert res.job_id == "4242"
    assert b"Submitted batch job 4242" in res.stdout

    args = (fake_sbatch.parent / "sbatch.args").read_text().splitlines()
    assert args == ["--mem=4G", "-p", "short", "--array=1-3%2"]
    assert (fake_sbatch.parent / "sbatch.stdin").read_bytes() == script.encode()


def test_submit_returns_scheduler_status(fake_sbatch: Path, monkeypatch):
    monkeypatch.setenv("FAKE_SBATCH_STATUS", "3")
    res = submit(_script(1), config=SynthConfig(sbatch=str(fake_sbatch)))
    assert res.returncode == 3


def test_submit_start_failure(tmp_path: Path, monkeypatch):
    def boom(*a, **kw):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr("jobarray.submit.subprocess.run", boom)
    monkeypatch.setattr("jobarray.submit.shutil.which", lambda cmd: "/fake/sbatch")
    with pytest.raises(SubmissionError, match="could not start /fake/sbatch"):
        submit(_script(1))
