from __future__ import annotations

import os
from pathlib import Path

import typer

from shipit import __version__
from shipit.core.config import resolve_config
from shipit.core.errors import ErrorCode
from shipit.core.result import Err
from shipit.git.repository import find_repo_root
from shipit.output.console import ConsoleProtocol, RichConsole
from shipit.release.driver import ReleaseDriver
from shipit.release.errors import ReleaseAborted, ReleaseError

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _console() -> ConsoleProtocol:
    return RichConsole()


@app.command()
def release(
    server: str | None = typer.Option(
        None,
        "--server",
        "-s",
        metavar="SERVER",
        help="Release server ssh host (default: downloads.example.org)",
    ),
    path: str | None = typer.Option(
        None,
        "--path",
        "-p",
        metavar="PATH",
        help="Web root on the release server (default: www)",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="release.toml to use instead of the one in the repository root",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print build, publish and push commands instead of running them",
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Release the sbt project checked out around the current directory.

    Checks tools, wipes untracked files (after confirmation), runs the
    binary compatibility report, publishes signed artifacts, pushes to
    origin and uploads docs to the release server.
    """
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=int(ErrorCode.OK))

    console = _console()
    cwd = Path.cwd()
    resolved = resolve_config(
        find_repo_root(cwd) or cwd,
        config_path=config,
        server=server,
        path=path,
        environ=os.environ,
    )
    if isinstance(resolved, Err):
        bad = resolved.error
        error = ReleaseError(
            kind="invalid_config",
            message=bad.message,
            hint=f"fix or remove {bad.path}" if bad.path else None,
        )
        console.error(error.pretty())
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    driver = ReleaseDriver(resolved.value, console, dry_run=dry_run)
    try:
        result = driver.run()
    except ReleaseAborted:
        raise typer.Exit(code=int(ErrorCode.FAILURE))
    except KeyboardInterrupt:
        # SIGINT before the driver took over signal handling; nothing changed yet.
        console.error("interrupted, bailing out")
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    if isinstance(result, Err):
        raise typer.Exit(code=int(ErrorCode.FAILURE))


def main() -> None:
    app()
