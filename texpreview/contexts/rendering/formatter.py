"""
Inline and block formatting.

Text styles, line and paragraph breaks, spacing, font-size scopes and escaped
specials. Math spans are skipped so their source reaches the math renderer
verbatim.
"""

import re
from typing import Dict, Optional

from texpreview.utils.fragments import render_fragment
from texpreview.utils.latex_parsing_tools import (
    LaTeXPatterns,
    map_outside_math,
    read_brace_argument,
    remove_command,
    replace_command,
)
from texpreview.utils.text_processing import extract_balanced_delimiters

TEXT_STYLES = {
    "textbf": ("<strong>", "</strong>"),
    "textit": ("<em>", "</em>"),
    "emph": ("<em>", "</em>"),
    "underline": ("<u>", "</u>"),
    "texttt": ("<code>", "</code>"),
    "textsc": ('<span class="smallcaps">', "</span>"),
}

FONT_SIZES = (
    "tiny",
    "scriptsize",
    "footnotesize",
    "small",
    "normalsize",
    "large",
    "Large",
    "LARGE",
    "huge",
    "Huge",
)

CSS_LENGTH_UNITS = ("pt", "pc", "in", "cm", "mm", "em", "ex", "px")
CSS_LENGTH_RE = re.compile(
    rf"^\s*(?P<value>[-+]?(?:\d+(?:\.\d*)?|\.\d+))\s*(?P<unit>{'|'.join(CSS_LENGTH_UNITS)})\s*$"
)

LINE_BREAK_TOKEN = r"\\\\\*?(?:[ \t]*\[[^\]]*\])?"
LINE_BREAK_TOKEN_RE = re.compile(LINE_BREAK_TOKEN)
# Consecutive \\ tokens; each one emits its own line break
LINE_BREAK_RE = re.compile(rf"(?<!\\)(?:{LINE_BREAK_TOKEN})+")
NEWLINE_RE = re.compile(LaTeXPatterns.COMMAND.format(command="newline"))
PAR_RE = re.compile(LaTeXPatterns.COMMAND.format(command="par"))
BLANK_LINES_RE = re.compile(r"\n[ \t]*(?:\n[ \t]*)+")
PAGE_BREAK_RE = re.compile(r"(?<!\\)\\(?:newpage|clearpage|pagebreak)(?![A-Za-z])")
FONT_SIZE_RE = re.compile(rf"(?<!\\)\\(?P<size>{'|'.join(FONT_SIZES)})(?![A-Za-z])\s?")
SPACE_COMMAND_RE = re.compile(r"(?<!\\)\\(?P<command>vspace|hspace)(?![A-Za-z])\*?")
# Opening brace of a group that is not a command argument or an escaped brace
GROUP_OPEN_RE = re.compile(r"(?<![\\A-Za-z@*\]}])\{")

# Escaped specials, applied last so the entities they produce are never re-read
SPECIAL_CHARACTERS = (
    (r"\%", "%"),
    (r"\&", "&amp;"),
    (r"\_", "_"),
    (r"\#", "#"),
    (r"\{", "{"),
    (r"\}", "}"),
    (r"\$", "&#36;"),
)

DEFAULT_SPACING = {
    "default_vspace": "1em",
    "default_hspace": "1em",
    "fixed_vspace": {"smallskip": "3pt", "medskip": "6pt", "bigskip": "12pt"},
    "fixed_hspace": {"quad": "1em", "qquad": "2em", "enspace": "0.5em"},
}


def css_length(spec: Optional[str], default: str) -> str:
    """
    Normalize a TeX length to a CSS length.

    Example:
        >>> css_length("12 pt", "1em")
        '12pt'
        >>> css_length(r"\\baselineskip", "1em")
        '1em'
    """
    if spec is None:
        return default
    match = CSS_LENGTH_RE.match(spec)
    if not match:
        return default
    return f"{match.group('value')}{match.group('unit')}"


def apply_text_styles(text: str) -> str:
    for command, (open_tag, close_tag) in TEXT_STYLES.items():
        text = replace_command(
            text, command, lambda content, o=open_tag, c=close_tag: f"{o}{content}{c}"
        )
    return text


def apply_spacing(text: str, spacing: Dict) -> str:
    """Render \\vspace, \\hspace and the fixed skip commands."""
    pieces = []
    pos = 0

    for match in SPACE_COMMAND_RE.finditer(text):
        if match.start() < pos:
            continue
        argument, end = read_brace_argument(text, match.end())
        if argument is None:
            continue

        pieces.append(text[pos : match.start()])
        if match.group("command") == "vspace":
            length = css_length(argument, spacing["default_vspace"])
            pieces.append(
                render_fragment("vspace", length=length, negative=length.startswith("-"))
            )
        else:
            pieces.append(
                render_fragment("hspace", length=css_length(argument, spacing["default_hspace"]))
            )
        pos = end

    pieces.append(text[pos:])
    text = "".join(pieces)

    for command, length in spacing["fixed_vspace"].items():
        pattern = LaTeXPatterns.COMMAND.format(command=command)
        block = render_fragment("vspace", length=length, negative=False)
        text = re.sub(pattern, lambda _, b=block: b, text)

    for command, length in spacing["fixed_hspace"].items():
        pattern = LaTeXPatterns.COMMAND.format(command=command)
        gap = render_fragment("hspace", length=length)
        text = re.sub(pattern, lambda _, g=gap: g, text)

    return text


def apply_breaks(text: str) -> str:
    paragraph = render_fragment("paragraph_break")
    page = render_fragment("page_break")

    text = PAGE_BREAK_RE.sub(lambda _: page, text)
    text = LINE_BREAK_RE.sub(lambda m: "<br/>" * len(LINE_BREAK_TOKEN_RE.findall(m.group(0))), text)
    text = NEWLINE_RE.sub("<br/>", text)
    text = PAR_RE.sub(lambda _: paragraph, text)
    return BLANK_LINES_RE.sub(lambda _: paragraph, text)


def unwrap_groups(text: str) -> str:
    """
    Drop the braces of bare {...} groups, keeping their content.

    Only groups that are not the argument of a command are unwrapped, so
    {\\small text} loses its braces while \\unknown{x} and escaped \\{ stay.

    Example:
        >>> unwrap_groups(r"{a {b}} \\foo{c}")
        'a b \\\\foo{c}'
    """
    pieces = []
    pos = 0

    for match in GROUP_OPEN_RE.finditer(text):
        if match.start() < pos:
            continue
        try:
            content, end = extract_balanced_delimiters(text, match.end())
        except ValueError:
            continue
        pieces.append(text[pos : match.start()])
        pieces.append(unwrap_groups(content))
        pos = end

    pieces.append(text[pos:])
    return "".join(pieces)


def apply_font_sizes(text: str) -> str:
    # Scopes are opened and never closed; the browser closes them at the parent end
    return FONT_SIZE_RE.sub(lambda m: render_fragment("font_size", size=m.group("size")), text)


def apply_special_characters(text: str) -> str:
    text = remove_command(text, "noindent")
    for escaped, literal in SPECIAL_CHARACTERS:
        text = text.replace(escaped, literal)
    return re.sub(r"(?<!\\)~", "&nbsp;", text)


def _format_segment(text: str, spacing: Dict) -> str:
    text = apply_text_styles(text)
    text = apply_spacing(text, spacing)
    text = apply_breaks(text)
    text = unwrap_groups(text)
    text = apply_font_sizes(text)
    return apply_special_characters(text)


def format_text(body: str, spacing: Optional[Dict] = None) -> str:
    """
    Apply inline and block formatting outside math spans.

    Args:
        body: Document body
        spacing: Formatter settings (default_vspace, default_hspace,
            fixed_vspace, fixed_hspace); defaults when None

    Returns:
        Formatted body. Math spans are returned exactly as written.

    Example:
        >>> format_text(r"\\textbf{bold} and $\\textbf{x}$")
        '<strong>bold</strong> and $\\\\textbf{x}$'
    """
    spacing = {**DEFAULT_SPACING, **(spacing or {})}
    return map_outside_math(body, lambda segment: _format_segment(segment, spacing))
