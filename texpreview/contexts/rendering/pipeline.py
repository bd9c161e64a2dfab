"""
Compile pipeline.

One compile pass turns a project snapshot into rendered markup by running a
fixed sequence of text stages:

    imports -> strip -> structure -> environments -> format -> assets -> math

Each stage is a function (text, CompileContext) -> text. A stage that raises
unexpectedly is logged and its input passes through unchanged, so a pass always
returns a well-formed CompileResult.
"""

import re
import time
from dataclasses import dataclass, field
from datetime import date
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from texpreview.contexts.assembly.imports import resolve_imports
from texpreview.contexts.assembly.resolvers import (
    AssetResolver,
    FileResolver,
    open_project,
    select_entry_file,
)
from texpreview.contexts.assembly.stripper import strip_comments, strip_source
from texpreview.contexts.rendering.assets import bind_assets, build_asset_binding
from texpreview.contexts.rendering.diagnostics import CompileResult, DiagnosticLog
from texpreview.contexts.rendering.environments import transform_environments
from texpreview.contexts.rendering.formatter import format_text
from texpreview.contexts.rendering.logger import (
    _log_error,
    log_compile_result,
    log_compile_start,
    log_stage_complete,
    log_stage_failure,
)
from texpreview.contexts.rendering.math_renderer import render_math, typeset_math
from texpreview.contexts.rendering.structure import extract_title_metadata, transform_structure
from texpreview.utils.config import load_preview_config
from texpreview.utils.fragments import render_fragment
from texpreview.utils.latex_parsing_tools import LaTeXPatterns
from texpreview.utils.text_processing import format_size

NO_ENTRY_MESSAGE = "No main LaTeX file found to compile."
MISSING_DOCUMENTCLASS_MESSAGE = "Missing \\documentclass declaration. Preview may not render correctly."
FINISHED_MESSAGE = "Compilation finished. Output: {size}"

DOCUMENTCLASS_RE = re.compile(LaTeXPatterns.COMMAND.format(command="documentclass"))


@dataclass
class CompileContext:
    """
    Inputs and intermediate facts shared by the stages of one pass.

    Attributes:
        entry_name: Entry file being compiled
        file_resolver: Source files of the snapshot
        asset_resolver: Image assets of the snapshot
        config: Resolved preview configuration
        today: Date used for \\today
        resolved_source: Source after include resolution, recorded by the strip stage
    """

    entry_name: str
    file_resolver: FileResolver
    asset_resolver: AssetResolver
    config: Dict[str, Any]
    today: date = field(default_factory=date.today)
    resolved_source: Optional[str] = None


@dataclass(frozen=True)
class Stage:
    name: str
    run: Callable[[str, CompileContext], str]


def _imports_stage(text: str, ctx: CompileContext) -> str:
    return resolve_imports(
        text,
        ctx.file_resolver,
        entry_name=ctx.entry_name,
        default_extension=ctx.config["imports"]["default_extension"],
    )


def _strip_stage(text: str, ctx: CompileContext) -> str:
    ctx.resolved_source = text
    return strip_source(text, ctx.config["stripper"]["preamble_directives"])


def _structure_stage(text: str, ctx: CompileContext) -> str:
    metadata = extract_title_metadata(ctx.resolved_source or "", today=ctx.today)
    return transform_structure(text, metadata=metadata)


def _environments_stage(text: str, ctx: CompileContext) -> str:
    return transform_environments(text, ctx.config["environments"]["reference_width_cm"])


def _format_stage(text: str, ctx: CompileContext) -> str:
    return format_text(text, ctx.config["formatter"])


def _assets_stage(text: str, ctx: CompileContext) -> str:
    binding = build_asset_binding(ctx.asset_resolver, ctx.config["assets"]["raster_extensions"])
    return bind_assets(text, binding, ctx.config["environments"]["reference_width_cm"])


def _math_stage(text: str, ctx: CompileContext) -> str:
    math_config = ctx.config["math"]
    typesetter = partial(
        typeset_math,
        font_size=math_config["font_size"],
        fontset=math_config["fontset"],
        hash_salt=math_config["hash_salt"],
    )
    return render_math(text, typesetter)


PIPELINE_STAGES: Tuple[Stage, ...] = (
    Stage("imports", _imports_stage),
    Stage("strip", _strip_stage),
    Stage("structure", _structure_stage),
    Stage("environments", _environments_stage),
    Stage("format", _format_stage),
    Stage("assets", _assets_stage),
    Stage("math", _math_stage),
)


def run_stages(text: str, ctx: CompileContext, stages: Tuple[Stage, ...] = PIPELINE_STAGES) -> str:
    """Run stages in order; a failing stage passes its input through."""
    for stage in stages:
        try:
            output = stage.run(text, ctx)
        except Exception as e:
            log_stage_failure(stage.name, e)
            continue
        log_stage_complete(stage.name, len(text), len(output))
        text = output
    return text


def compile_document(
    entry_name: Optional[str],
    file_resolver: FileResolver,
    asset_resolver: AssetResolver,
    config: Optional[Dict[str, Any]] = None,
    today: Optional[date] = None,
) -> CompileResult:
    """
    Compile one project snapshot to rendered markup.

    Args:
        entry_name: Requested entry file (falls back to main.tex, then the first .tex)
        file_resolver: Source files of the snapshot
        asset_resolver: Image assets of the snapshot
        config: Resolved preview configuration (packaged defaults when None)
        today: Date used for \\today (defaults to the current date)

    Returns:
        CompileResult. Without any entry file the output is empty and the only
        diagnostic is an error; otherwise exactly one warning (no
        \\documentclass) or info entry (output size) is recorded.

    Example:
        >>> from texpreview.contexts.assembly import MappingAssetResolver, MappingFileResolver
        >>> files = MappingFileResolver({"main.tex": "Hello"})
        >>> result = compile_document(None, files, MappingAssetResolver())
        >>> [entry.severity for entry in result.diagnostics]
        ['warning']
    """
    start_time = time.time()
    config = config or load_preview_config()
    diagnostics = DiagnosticLog()

    selected = select_entry_file(
        file_resolver,
        requested=entry_name,
        default_name=config["entry"]["default_name"],
        extension=config["entry"]["extension"],
    )
    entry_content = file_resolver.lookup(selected) if selected else None

    if entry_content is None:
        _log_error(NO_ENTRY_MESSAGE)
        diagnostics.error(NO_ENTRY_MESSAGE)
        result = CompileResult(rendered_output="", diagnostics=diagnostics.entries, entry_file=None)
        log_compile_result(result, time.time() - start_time)
        return result

    log_compile_start(
        selected, len(list(file_resolver.names())), len(list(asset_resolver.keys()))
    )

    ctx = CompileContext(
        entry_name=selected,
        file_resolver=file_resolver,
        asset_resolver=asset_resolver,
        config=config,
        today=today or date.today(),
    )
    rendered = run_stages(entry_content, ctx).strip()

    resolved_source = ctx.resolved_source if ctx.resolved_source is not None else entry_content
    if not DOCUMENTCLASS_RE.search(strip_comments(resolved_source)):
        diagnostics.warning(MISSING_DOCUMENTCLASS_MESSAGE, file=selected)
    else:
        diagnostics.info(FINISHED_MESSAGE.format(size=format_size(len(rendered))), file=selected)

    result = CompileResult(
        rendered_output=rendered, diagnostics=diagnostics.entries, entry_file=selected
    )
    log_compile_result(result, time.time() - start_time)
    return result


def compile_project(
    project_dir: Path,
    entry_name: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
    today: Optional[date] = None,
) -> CompileResult:
    """Snapshot a project directory and compile it."""
    config = config or load_preview_config()
    file_resolver, asset_resolver = open_project(
        Path(project_dir), tuple(config["assets"]["image_extensions"])
    )
    return compile_document(entry_name, file_resolver, asset_resolver, config=config, today=today)


def render_page(result: CompileResult, title: Optional[str] = None) -> str:
    """
    Wrap a compile result in a standalone A4-styled HTML page.

    An empty result renders the "Document is empty" placeholder.
    """
    return render_fragment(
        "page", title=title or result.entry_file or "Preview", body=result.rendered_output
    )
