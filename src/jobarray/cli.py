from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from jobarray.config import load_config, preset_options
from jobarray.errors import ConfigError, JobArrayError
from jobarray.submit import submit
from jobarray.synth import synthesize_lines, synthesize_table

app = typer.Typer(help="jobarray CLI: one SLURM array task per input line or table row")

# every option we do not define is an sbatch option and is passed through
PASSTHROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}

SYNTHESIZERS = {
    "lines": synthesize_lines,
    "table": synthesize_table,
}


def _configure_logging(level: str) -> None:
    logger = logging.getLogger("jobarray")
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[jobarray] %(message)s"))
        logger.addHandler(h)
    try:
        logger.setLevel(level.upper())
    except ValueError as exc:
        raise ConfigError(f"invalid log level '{level}'") from exc


def _fail(message: str) -> None:
    typer.secho(f"jobarray: {message}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _run(
    mode: str,
    args: Optional[List[str]],
    *,
    dry_run: bool,
    max_parallel: Optional[int],
    preset: Optional[str],
    config_path: Optional[Path],
    log_level: Optional[str],
) -> None:
    args = args or []
    if len(args) < 2:
        _fail("expected [SBATCH_OPTS]... SOURCE TARGET")
    *options, source, target = args

    try:
        cfg = load_config(config_path)
        _configure_logging(log_level or cfg.log_level)
        options = preset_options(cfg, preset) + options

        script = SYNTHESIZERS[mode](source, target, config=cfg)
        if dry_run:
            typer.echo(script.encode(), nl=False)
            return

        result = submit(script, options, config=cfg, max_parallel=max_parallel)
    except JobArrayError as exc:
        _fail(str(exc))

    if result.stdout:
        typer.echo(result.stdout, nl=False)
    if result.stderr:
        typer.echo(result.stderr, nl=False, err=True)
    raise typer.Exit(code=result.returncode)


@app.command("lines", context_settings=PASSTHROUGH)
def lines_cmd(
    args: Optional[List[str]] = typer.Argument(None, metavar="[SBATCH_OPTS]... LIST|- TARGET"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the array script instead of submitting"),
    max_parallel: Optional[int] = typer.Option(None, "--max-parallel", min=1, help="Run at most K tasks at once"),
    preset: Optional[str] = typer.Option(None, "--preset", help="Prepend a named set of sbatch options"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ..."),
):
    """Submit TARGET once per non-blank, non-comment line of LIST; the line's words are its arguments."""
    _run(
        "lines", args,
        dry_run=dry_run, max_parallel=max_parallel, preset=preset,
        config_path=config_path, log_level=log_level,
    )


@app.command("table", context_settings=PASSTHROUGH)
def table_cmd(
    args: Optional[List[str]] = typer.Argument(None, metavar="[SBATCH_OPTS]... TABLE|- TARGET"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the array script instead of submitting"),
    max_parallel: Optional[int] = typer.Option(None, "--max-parallel", min=1, help="Run at most K tasks at once"),
    preset: Optional[str] = typer.Option(None, "--preset", help="Prepend a named set of sbatch options"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML configuration file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ..."),
):
    """Submit TARGET once per data row of a TSV TABLE; column NAME is exported as _NAME."""
    _run(
        "table", args,
        dry_run=dry_run, max_parallel=max_parallel, preset=preset,
        config_path=config_path, log_level=log_level,
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
