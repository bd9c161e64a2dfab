"""
Rendering Context

Responsibilities:
- Numbers and renders headings and the title block
- Converts environments, inline formatting and spacing into HTML fragments
- Binds \\includegraphics to embedded image data
- Typesets math spans to SVG
- Orchestrates compile passes and records diagnostics
- Debounces edits into compile passes

Owns: Stage order, rendered markup, diagnostics, compile scheduling
Never: Reads project storage directly (always through resolvers)
"""

from texpreview.contexts.rendering.diagnostics import (
    CompileResult,
    DiagnosticEntry,
    DiagnosticLog,
    Severity,
)
from texpreview.contexts.rendering.pipeline import (
    PIPELINE_STAGES,
    CompileContext,
    Stage,
    compile_document,
    compile_project,
    render_page,
)
from texpreview.contexts.rendering.scheduler import CompileScheduler

__all__ = [
    # Diagnostics
    "CompileResult",
    "DiagnosticEntry",
    "DiagnosticLog",
    "Severity",
    # Pipeline
    "PIPELINE_STAGES",
    "CompileContext",
    "Stage",
    "compile_document",
    "compile_project",
    "render_page",
    # Scheduling
    "CompileScheduler",
]
