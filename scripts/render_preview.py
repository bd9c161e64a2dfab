#!/usr/bin/env python3
"""
Preview Rendering CLI

Renders a LaTeX project to a standalone HTML preview page and keeps it up to
date while the sources are edited.

Commands:
    compile - Render a project once and print its diagnostics
    watch   - Re-render whenever a project file changes

Examples:\n

    render_preview.py compile thesis/                           # Writes thesis/preview.html

    render_preview.py compile thesis/ --entry chapter1.tex      # Compile a specific entry

    render_preview.py compile thesis/ -o /tmp/out.html -v       # Custom output, verbose log

    render_preview.py watch thesis/                             # Recompile on every edit
"""

import time
from pathlib import Path
from typing import Dict, Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from texpreview.contexts.rendering import CompileResult, CompileScheduler, compile_project, render_page
from texpreview.contexts.rendering.logger import setup_rendering_logger
from texpreview.utils import PreviewConfigError, load_preview_config
from texpreview.utils.timestamp import format_timestamp, now

load_dotenv()

DEFAULT_OUTPUT_NAME = "preview.html"

SEVERITY_COLORS = {
    "error": typer.colors.RED,
    "warning": typer.colors.YELLOW,
    "info": typer.colors.BLUE,
}


def display_path(path: Path) -> str:
    """Return path relative to the working directory for cleaner display."""
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def print_diagnostics(result: CompileResult) -> None:
    """Print diagnostics in log order, colored by severity."""
    for entry in result.diagnostics:
        location = f" ({entry.file})" if entry.file else ""
        typer.secho(
            f"  [{format_timestamp(entry.timestamp)}] {entry.severity.upper()}: {entry.message}{location}",
            fg=SEVERITY_COLORS.get(entry.severity),
        )


def write_preview(result: CompileResult, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(render_page(result), encoding="utf-8")


def collect_mtimes(project_dir: Path) -> Dict[Path, float]:
    """Modification times of the visible files under project_dir."""
    return {
        path: path.stat().st_mtime
        for path in project_dir.rglob("*")
        if path.is_file() and not any(part.startswith(".") for part in path.relative_to(project_dir).parts)
    }


def load_config_or_exit(config_path: Optional[Path]) -> dict:
    try:
        return load_preview_config(config_path)
    except PreviewConfigError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


app = typer.Typer(
    help="Render LaTeX projects to HTML previews",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("compile")
def compile_command(
    project_dir: Annotated[
        Path,
        typer.Argument(
            help="Project directory holding the .tex sources and images",
            exists=True,
            file_okay=False,
            dir_okay=True,
        ),
    ],
    entry: Annotated[
        Optional[str],
        typer.Option(
            "--entry",
            "-e",
            help="Entry file to compile (default: main.tex, else the first .tex file)",
        ),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help=f"HTML file to write (default: <project_dir>/{DEFAULT_OUTPUT_NAME})",
        ),
    ] = None,
    log_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--log-dir",
            help="Directory for a per-run log file (default: console only)",
        ),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="YAML file overriding the packaged preview settings",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show per-stage debug output",
        ),
    ] = False,
):
    """
    Render a project once and write the HTML preview.

    Exits with code 1 when the pass records an error diagnostic.

    Examples:\n

        $ render_preview.py compile thesis/                    # Render thesis/main.tex

        $ render_preview.py compile thesis/ --entry ch1.tex    # Render another entry
    """
    config = load_config_or_exit(config_path)
    run_log_dir = log_dir / f"preview_{now()}" if log_dir else None
    log_file = setup_rendering_logger(run_log_dir, entry=entry, verbose=verbose)

    typer.secho(f"\nCompiling: {display_path(project_dir)}", fg=typer.colors.BLUE, bold=True)
    typer.echo("")

    result = compile_project(project_dir, entry_name=entry, config=config)
    output = output or project_dir / DEFAULT_OUTPUT_NAME

    typer.echo("")
    if result.success:
        write_preview(result, output)
        typer.secho("✓ Compilation succeeded", fg=typer.colors.GREEN, bold=True)
        typer.echo(f"  Entry: {result.entry_file}")
        typer.echo(f"  Output: {display_path(output)}")
    else:
        typer.secho("✗ Compilation failed", fg=typer.colors.RED, bold=True)

    typer.echo("\nDiagnostics:")
    print_diagnostics(result)

    if log_file:
        typer.echo(f"\nLog: {display_path(log_file)}")
    typer.echo("")

    if not result.success:
        raise typer.Exit(code=1)


@app.command("watch")
def watch_command(
    project_dir: Annotated[
        Path,
        typer.Argument(
            help="Project directory holding the .tex sources and images",
            exists=True,
            file_okay=False,
            dir_okay=True,
        ),
    ],
    entry: Annotated[
        Optional[str],
        typer.Option("--entry", "-e", help="Entry file to compile"),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help=f"HTML file to write (default: <project_dir>/{DEFAULT_OUTPUT_NAME})"),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML file overriding the packaged preview settings"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show per-stage debug output"),
    ] = False,
):
    """
    Re-render the preview whenever a project file changes.

    Edits are debounced: a pass starts once no file has changed for the
    configured quiet interval. Stop with Ctrl+C.

    Examples:\n

        $ render_preview.py watch thesis/
    """
    config = load_config_or_exit(config_path)
    setup_rendering_logger(entry=entry, verbose=verbose)
    output = output or project_dir / DEFAULT_OUTPUT_NAME
    scheduler_config = config["scheduler"]

    def publish(result: CompileResult) -> None:
        if result.entry_file is not None:
            write_preview(result, output)
        print_diagnostics(result)

    scheduler = CompileScheduler(
        compile_fn=lambda: compile_project(project_dir, entry_name=entry, config=config),
        publish=publish,
        quiet_interval_s=scheduler_config["quiet_interval_s"],
    )

    typer.secho(f"\nWatching: {display_path(project_dir)}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Output: {display_path(output)}  (Ctrl+C to stop)\n")

    # Initial render
    scheduler.notify_edit()
    scheduler.flush()

    ignored = {output.resolve()}
    mtimes = collect_mtimes(project_dir)
    try:
        while True:
            time.sleep(scheduler_config["poll_interval_s"])
            current = collect_mtimes(project_dir)
            changed = {
                path for path in set(current) | set(mtimes) if current.get(path) != mtimes.get(path)
            }
            mtimes = current
            if any(path.resolve() not in ignored for path in changed):
                scheduler.notify_edit()
    except KeyboardInterrupt:
        scheduler.cancel()
        typer.echo("\nStopped watching.")


if __name__ == "__main__":
    app()
