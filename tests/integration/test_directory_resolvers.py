"""
Integration tests for directory snapshots - real project folders under tmp_path.
"""

import pytest

from texpreview.contexts.assembly.resolvers import (
    DirectoryFileResolver,
    FileKind,
    open_project,
    snapshot_directory,
)
from texpreview.contexts.rendering.pipeline import compile_project
from texpreview.utils.config import load_preview_config

PNG_BYTES = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def project_dir(tmp_path):
    (tmp_path / "chapters").mkdir()
    (tmp_path / "figs").mkdir()
    (tmp_path / ".git").mkdir()

    (tmp_path / "main.tex").write_text(
        "\\documentclass{article}\n\\begin{document}\n"
        "\\section{Intro}\n\\input{chapters/intro}\n"
        "\\includegraphics{figs/plot}\n\\end{document}\n"
    )
    (tmp_path / "chapters" / "intro.tex").write_text("Intro text.")
    (tmp_path / "figs" / "plot.png").write_bytes(PNG_BYTES)
    (tmp_path / "notes.txt").write_text("notes")
    (tmp_path / ".git" / "config.tex").write_text("hidden")
    return tmp_path


@pytest.mark.integration
def test_snapshot_classifies_files(project_dir):
    snapshot = {source.name: source for source in snapshot_directory(project_dir)}

    assert set(snapshot) == {"main.tex", "intro.tex", "plot.png", "notes.txt"}
    assert snapshot["plot.png"].kind == FileKind.IMAGE
    assert snapshot["plot.png"].content == PNG_BYTES
    assert snapshot["intro.tex"].kind == FileKind.TEX
    assert snapshot["notes.txt"].kind == FileKind.OTHER


@pytest.mark.integration
def test_open_project(project_dir):
    files, assets = open_project(project_dir)

    assert sorted(files.names()) == ["intro.tex", "main.tex", "notes.txt"]
    assert files.lookup("intro.tex") == "Intro text."
    assert assets.keys() == ["plot.png"]
    assert assets.lookup("plot.png") == PNG_BYTES


@pytest.mark.integration
def test_snapshot_at_construction(project_dir):
    files = DirectoryFileResolver(project_dir)
    (project_dir / "main.tex").write_text("changed")

    assert files.lookup("main.tex") != "changed"


@pytest.mark.integration
def test_first_basename_wins(tmp_path):
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    (tmp_path / "a" / "part.tex").write_text("from a")
    (tmp_path / "b" / "part.tex").write_text("from b")

    assert DirectoryFileResolver(tmp_path).lookup("part.tex") == "from a"


@pytest.mark.integration
def test_undecodable_files_skipped(tmp_path):
    (tmp_path / "main.tex").write_text("ok")
    (tmp_path / "binary.dat").write_bytes(b"\xff\xfe\x00\x81")

    assert DirectoryFileResolver(tmp_path).names() == ["main.tex"]


@pytest.mark.integration
def test_compile_project(project_dir):
    result = compile_project(project_dir)
    html = result.rendered_output

    assert result.success
    assert result.entry_file == "main.tex"
    assert '<span class="heading-label">1</span> Intro' in html
    assert "Intro text." in html
    assert '<img src="data:image/png;base64,' in html
    assert [entry.severity for entry in result.diagnostics] == ["info"]


@pytest.mark.integration
def test_open_project_image_extensions(project_dir):
    (project_dir / "anim.gif").write_bytes(b"GIF89a")
    files, assets = open_project(project_dir, image_extensions=(".gif",))

    assert assets.keys() == ["anim.gif"]
    assert "plot.png" not in files.names()


@pytest.mark.integration
def test_compile_project_uses_configured_image_extensions(project_dir):
    config = load_preview_config(overrides={"assets": {"image_extensions": [".gif"]}})
    result = compile_project(project_dir, config=config)

    assert "missing image: plot" in result.rendered_output
    assert "<img" not in result.rendered_output
