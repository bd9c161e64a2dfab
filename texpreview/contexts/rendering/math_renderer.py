"""
Math rendering.

Math spans are typeset to SVG with matplotlib's mathtext engine. Typesetting
never raises: a span mathtext cannot parse is shown as its escaped source and
the rest of the document renders normally.
"""

import io
import re
from typing import Callable, Optional

import matplotlib
from matplotlib.figure import Figure
from matplotlib.font_manager import FontProperties
from matplotlib.mathtext import MathTextParser

from texpreview.contexts.rendering.logger import _log_debug
from texpreview.utils.fragments import render_fragment
from texpreview.utils.latex_parsing_tools import MATH_SPAN_RE

# Mathtext measures in points; one figure inch holds 72 of them
POINTS_PER_INCH = 72.0
DISPLAY_SCALE = 1.2

Typesetter = Callable[[str, bool], Optional[str]]

_PARSER = MathTextParser("path")


def typeset_math(
    source: str,
    display: bool = False,
    font_size: float = 12,
    fontset: str = "cm",
    hash_salt: str = "texpreview",
) -> Optional[str]:
    """
    Typeset one math expression to an inline SVG document.

    Args:
        source: Math source without delimiters
        display: Display style (set slightly larger)
        font_size: Base size in points
        fontset: mathtext fontset ("cm", "stix", "dejavusans", ...)
        hash_salt: Salt for SVG element ids, fixed so output is deterministic

    Returns:
        SVG markup starting at the <svg> element, or None if typesetting failed
    """
    expression = " ".join(source.split())
    if not expression:
        return None

    text = f"${expression}$"
    rc = {"svg.fonttype": "path", "svg.hashsalt": hash_salt}

    try:
        # The math font family is bound to the font properties, not read from rc
        prop = FontProperties(
            size=font_size * DISPLAY_SCALE if display else font_size, math_fontfamily=fontset
        )
        with matplotlib.rc_context(rc):
            width, height, depth, _, _ = _PARSER.parse(text, dpi=POINTS_PER_INCH, prop=prop)
            figure = Figure(figsize=(width / POINTS_PER_INCH, height / POINTS_PER_INCH))
            figure.text(0, depth / height, text, fontproperties=prop)

            buffer = io.StringIO()
            figure.savefig(buffer, format="svg", metadata={"Date": None}, transparent=True)
    except Exception as e:
        _log_debug(f"  mathtext could not typeset {expression!r}: {e}")
        return None

    svg = buffer.getvalue()
    return svg[svg.find("<svg") :].strip()


def render_math(body: str, typesetter: Typesetter = typeset_math) -> str:
    """
    Replace every math span with its typeset SVG.

    Display spans ($$...$$, \\[...\\], equation environments) become centered
    blocks, inline $...$ spans inline elements. Failed spans fall back to the
    escaped literal source.

    Args:
        body: Document body with math spans intact
        typesetter: (source, display) -> SVG or None

    Returns:
        Body with math rendered
    """

    def render(match: re.Match) -> str:
        inline = match.group("inline")
        display = inline is None
        source = inline if not display else (
            match.group("dollars") or match.group("brackets") or match.group("env_body") or ""
        )

        svg = typesetter(source, display)
        if svg is None:
            return render_fragment(
                "math_fallback", tag="div" if display else "span", source=match.group(0)
            )
        return render_fragment("math_display" if display else "math_inline", svg=svg)

    return MATH_SPAN_RE.sub(render, body)
