"""
Integration tests for the render_preview.py CLI.
"""

import importlib.util
from pathlib import Path

import pytest
from loguru import logger
from typer.testing import CliRunner

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "render_preview.py"


def load_cli():
    spec = importlib.util.spec_from_file_location("render_preview", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


cli = load_cli()
runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop sinks bound to the runner's captured streams."""
    yield
    logger.remove()


@pytest.fixture
def project_dir(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    (project / "main.tex").write_text(
        "\\documentclass{article}\n\\begin{document}\n\\section{Intro}\nHello $x$.\n\\end{document}\n"
    )
    return project


@pytest.mark.integration
def test_compile_writes_preview(project_dir, tmp_path):
    output = tmp_path / "out" / "preview.html"
    result = runner.invoke(cli.app, ["compile", str(project_dir), "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert "Compilation succeeded" in result.output
    assert "INFO: Compilation finished" in result.output

    html = output.read_text(encoding="utf-8")
    assert html.startswith("<!DOCTYPE html>")
    assert "Intro</h2>" in html


@pytest.mark.integration
def test_compile_default_output_location(project_dir):
    result = runner.invoke(cli.app, ["compile", str(project_dir)])

    assert result.exit_code == 0, result.output
    assert (project_dir / "preview.html").exists()


@pytest.mark.integration
def test_compile_without_entry_fails(tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()
    result = runner.invoke(cli.app, ["compile", str(empty)])

    assert result.exit_code == 1
    assert "Compilation failed" in result.output
    assert "No main LaTeX file found to compile." in result.output
    assert not (empty / "preview.html").exists()


@pytest.mark.integration
def test_compile_with_log_dir(project_dir, tmp_path):
    log_dir = tmp_path / "logs"
    result = runner.invoke(cli.app, ["compile", str(project_dir), "--log-dir", str(log_dir)])

    assert result.exit_code == 0, result.output
    log_files = list(log_dir.glob("preview_*/render.log"))
    assert len(log_files) == 1
    logger.remove()
    assert "[render] Compiling main.tex" in log_files[0].read_text()


@pytest.mark.integration
def test_compile_with_bad_config(project_dir, tmp_path):
    result = runner.invoke(
        cli.app, ["compile", str(project_dir), "--config", str(tmp_path / "absent.yaml")]
    )

    assert result.exit_code == 1
    assert "Config file not found" in result.output


@pytest.mark.integration
def test_help_when_no_command():
    result = runner.invoke(cli.app, [])

    assert result.exit_code == 0
    assert "compile" in result.output
    assert "watch" in result.output


@pytest.mark.integration
def test_collect_mtimes_skips_hidden(project_dir):
    (project_dir / ".cache").mkdir()
    (project_dir / ".cache" / "state").write_text("x")

    mtimes = cli.collect_mtimes(project_dir)

    assert set(path.name for path in mtimes) == {"main.tex"}
