"""
LaTeX Parsing Tools

Fundamental scanning utilities for the LaTeX subset understood by the preview:
command arguments, comment detection, math span segmentation and lengths.

Self-contained module with no context dependencies - designed for reusability.
All LaTeX patterns are defined as constants below for visibility and maintainability.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from texpreview.utils.text_processing import extract_balanced_delimiters


@dataclass(frozen=True)
class LaTeXPatterns:
    """
    LaTeX pattern templates for parsing and manipulation.

    Templates accept command/environment names via .format().
    """

    # Command patterns (use with .format(command=name)); never matches a prefix of a longer name
    COMMAND: str = r"(?<!\\)\\{command}(?![A-Za-z])"
    COMMAND_STARRED: str = r"(?<!\\)\\{command}(?![A-Za-z])\*?"

    # Environment patterns (use with .format(env=name))
    BEGIN_ENV: str = r"\\begin\{{{env}\}}"
    END_ENV: str = r"\\end\{{{env}\}}"

    # Lengths: "2.5cm", "-3pt", ".5in"
    LENGTH: str = r"^\s*(?P<value>[-+]?(?:\d+(?:\.\d*)?|\.\d+))\s*(?P<unit>[a-zA-Z]+)\s*$"
    # Relative widths: "0.5\textwidth", "\linewidth"
    RELATIVE_WIDTH: str = (
        r"^\s*(?P<factor>[-+]?(?:\d+(?:\.\d*)?|\.\d+))?\s*"
        r"\\(?P<reference>textwidth|linewidth|columnwidth|hsize)\s*$"
    )

    # Math spans, display forms listed before inline so $$...$$ is never split in two
    MATH_SPAN: str = (
        r"(?<!\\)\$\$(?P<dollars>.+?)(?<!\\)\$\$"
        r"|(?<!\\)\\\[(?P<brackets>.+?)\\\]"
        r"|\\begin\{(?P<env>equation\*?)\}(?P<env_body>.+?)\\end\{(?P=env)\}"
        r"|(?<!\\)\$(?P<inline>(?:[^$\\]|\\.)+?)\$"
    )


MATH_SPAN_RE = re.compile(LaTeXPatterns.MATH_SPAN, re.DOTALL)

# Stands in for a math span while surrounding text is rewritten
MATH_PLACEHOLDER = "\x00{index}\x00"
MATH_PLACEHOLDER_RE = re.compile(r"\x00(?P<index>\d+)\x00")

# Conversion factors to centimetres for absolute TeX units
CM_PER_UNIT = {
    "cm": 1.0,
    "mm": 0.1,
    "in": 2.54,
    "pt": 2.54 / 72.27,
    "bp": 2.54 / 72.0,
    "pc": 12 * 2.54 / 72.27,
    "dd": 1238 / 1157 * 2.54 / 72.27,
    "cc": 12 * 1238 / 1157 * 2.54 / 72.27,
    "px": 2.54 / 96.0,
}


def find_comment_start(line: str) -> int:
    """
    Find the position of the first unescaped '%' in a line.

    Backslash escapes the next character, so '\\%' is literal while '\\\\%'
    (a line break followed by a comment) starts a comment.

    Returns:
        Index of the comment marker, or -1 if the line has no comment

    Example:
        >>> find_comment_start(r"50\\% done % note")
        10
        >>> find_comment_start(r"no comment here")
        -1
    """
    pos = 0
    while pos < len(line):
        char = line[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "%":
            return pos
        pos += 1
    return -1


def is_commented_out(text: str, pos: int) -> bool:
    """Whether pos sits after an unescaped '%' on its own line."""
    line_start = text.rfind("\n", 0, pos) + 1
    comment_pos = find_comment_start(text[line_start:pos])
    return comment_pos != -1


def read_optional_argument(text: str, pos: int) -> Tuple[Optional[str], int]:
    """
    Read one optional [...] argument starting at pos (spaces and tabs allowed before it).

    Returns:
        (content, end_pos); content is None and end_pos == pos when absent or unmatched
    """
    match = re.match(r"[ \t]*\[", text[pos:])
    if not match:
        return None, pos
    try:
        content, end_pos = extract_balanced_delimiters(text, pos + match.end(), "[", "]")
    except ValueError:
        return None, pos
    return content, end_pos


def read_brace_argument(text: str, pos: int) -> Tuple[Optional[str], int]:
    """
    Read one mandatory {...} argument starting at pos, handling nested braces.

    Returns:
        (content, end_pos); content is None and end_pos == pos when absent or unmatched

    Example:
        >>> read_brace_argument("{a {b} c} rest", 0)
        ('a {b} c', 9)
    """
    match = re.match(r"[ \t]*\{", text[pos:])
    if not match:
        return None, pos
    try:
        content, end_pos = extract_balanced_delimiters(text, pos + match.end())
    except ValueError:
        return None, pos
    return content, end_pos


def read_command_arguments(
    text: str, pos: int, optional: int = 0, mandatory: int = 0
) -> Tuple[List[Optional[str]], List[str], int]:
    """
    Read optional [...] then mandatory {...} arguments following a command.

    Args:
        text: LaTeX source
        pos: Position right after the command name
        optional: Number of optional arguments to try
        mandatory: Number of mandatory arguments to read

    Returns:
        (optional_args, mandatory_args, end_pos). Missing optional arguments are
        None; mandatory_args stops short if an argument is missing.

    Example:
        >>> read_command_arguments(r"[t]{0.5\\textwidth} body", 0, optional=1, mandatory=1)
        (['t'], ['0.5\\\\textwidth'], 18)
    """
    optional_args: List[Optional[str]] = []
    for _ in range(optional):
        value, pos = read_optional_argument(text, pos)
        optional_args.append(value)

    mandatory_args: List[str] = []
    for _ in range(mandatory):
        value, new_pos = read_brace_argument(text, pos)
        if value is None:
            break
        mandatory_args.append(value)
        pos = new_pos

    return optional_args, mandatory_args, pos


def replace_command(text: str, command: str, render: Callable[[str], str]) -> str:
    """
    Replace every \\command{content} with render(content).

    Handles nested braces using balanced delimiter matching. Nested uses of the
    same command are replaced outermost first; the inner ones are picked up on
    later iterations. Occurrences with unmatched braces are left as-is.

    Examples:
        >>> replace_command(r"Normal \\textbf{bold} text", "textbf", lambda c: f"<b>{c}</b>")
        'Normal <b>bold</b> text'
        >>> replace_command(r"\\emph{a \\emph{b}}", "emph", lambda c: f"<em>{c}</em>")
        '<em>a <em>b</em></em>'
    """
    pattern = re.compile(LaTeXPatterns.COMMAND.format(command=re.escape(command)) + r"[ \t]*\{")
    result = text
    search_from = 0

    while True:
        match = pattern.search(result, search_from)
        if not match:
            break
        try:
            content, end_pos = extract_balanced_delimiters(result, match.end())
        except ValueError:
            # Unmatched braces, skip this occurrence
            search_from = match.end()
            continue
        replacement = render(content)
        result = result[: match.start()] + replacement + result[end_pos:]
        search_from = match.start()

    return result


def remove_command(text: str, command: str) -> str:
    """
    Remove \\command (optionally starred) with its [...] and {...} arguments.

    All brace groups immediately following the command are consumed, so
    \\setlength{\\parindent}{0pt} disappears entirely.

    Example:
        >>> remove_command(r"a \\usepackage[utf8]{inputenc} b", "usepackage")
        'a  b'
    """
    pattern = re.compile(LaTeXPatterns.COMMAND_STARRED.format(command=re.escape(command)))
    pieces = []
    pos = 0

    for match in pattern.finditer(text):
        if match.start() < pos:
            continue
        end = match.end()
        while True:
            _, next_end = read_optional_argument(text, end)
            if next_end == end:
                break
            end = next_end
        while True:
            _, next_end = read_brace_argument(text, end)
            if next_end == end:
                break
            end = next_end
        pieces.append(text[pos : match.start()])
        pos = end

    pieces.append(text[pos:])
    return "".join(pieces)


def map_outside_math(text: str, transform: Callable[[str], str]) -> str:
    """
    Apply transform to the text around math spans, leaving the spans untouched.

    Math spans are swapped for placeholders while transform runs, so a command
    whose argument contains math (\\textbf{area $x$}) still sees balanced braces.

    Example:
        >>> map_outside_math("a $b$ c", str.upper)
        'A $b$ C'
    """
    spans: List[str] = []

    def stash(match: re.Match) -> str:
        spans.append(match.group(0))
        return MATH_PLACEHOLDER.format(index=len(spans) - 1)

    transformed = transform(MATH_SPAN_RE.sub(stash, text))
    return MATH_PLACEHOLDER_RE.sub(lambda m: spans[int(m.group("index"))], transformed)


def parse_length(spec: str) -> Optional[Tuple[float, str]]:
    """
    Parse a TeX length such as '2.5cm' or '-3pt'.

    Returns:
        (value, unit) or None when spec is not a plain number-plus-unit length

    Example:
        >>> parse_length("2.5cm")
        (2.5, 'cm')
        >>> parse_length(r"\\baselineskip") is None
        True
    """
    match = re.match(LaTeXPatterns.LENGTH, spec)
    if not match:
        return None
    return float(match.group("value")), match.group("unit")


def length_to_cm(spec: str) -> Optional[float]:
    """Convert an absolute TeX length to centimetres (None for relative/unknown units)."""
    parsed = parse_length(spec)
    if parsed is None:
        return None
    value, unit = parsed
    if unit not in CM_PER_UNIT:
        return None
    return value * CM_PER_UNIT[unit]


def width_to_percentage(spec: str, reference_width_cm: float) -> Optional[float]:
    """
    Convert a width argument into a percentage of the text width.

    Fractions of \\textwidth (and friends) map directly; absolute lengths are
    measured against reference_width_cm.

    Example:
        >>> width_to_percentage(r"0.5\\textwidth", 21.0)
        50.0
        >>> width_to_percentage("10.5cm", 21.0)
        50.0
        >>> width_to_percentage("huge", 21.0) is None
        True
    """
    relative = re.match(LaTeXPatterns.RELATIVE_WIDTH, spec)
    if relative:
        factor = relative.group("factor")
        return round((float(factor) if factor else 1.0) * 100, 2)

    cm = length_to_cm(spec)
    if cm is None:
        return None
    return round(cm / reference_width_cm * 100, 2)


def format_percentage(value: float) -> str:
    """
    Format a percentage for CSS.

    Example:
        >>> format_percentage(33.33)
        '33.33%'
        >>> format_percentage(50.0)
        '50%'
    """
    return f"{value:g}%"
