"""
Comment and preamble stripping.

Core functions for reducing an assembled LaTeX source to its visible body:
comments are removed while escaped percentages survive, the document body is
cut out of \\begin{document} ... \\end{document}, and setup-only directives
that produce no visual output are dropped.
"""

import re
from typing import Iterable

from texpreview.utils.latex_parsing_tools import find_comment_start, remove_command

BEGIN_DOCUMENT = r"\begin{document}"
END_DOCUMENT = r"\end{document}"

# Fallback when no allow-list is configured
DEFAULT_PREAMBLE_DIRECTIVES = (
    "documentclass",
    "usepackage",
    "selectlanguage",
    "setlength",
    "newlength",
    "hyphenation",
)


def is_comment_line(line: str) -> bool:
    """
    Check if a line holds nothing but a comment.

    Example:
        >>> is_comment_line("   % a note")
        True
        >>> is_comment_line(r"50\\% of it")
        False
    """
    return bool(re.match(r"^\s*%", line))


def strip_comments(content: str) -> str:
    """
    Remove comment text from every line.

    Full-line comments are dropped entirely so they never turn into paragraph
    breaks; inline comments are cut at the first unescaped '%'.

    Example:
        >>> strip_comments("a % note\\n% whole line\\nb \\\\% kept")
        'a \\nb \\\\% kept'
    """
    cleaned_lines = []

    for line in content.split("\n"):
        if is_comment_line(line):
            continue

        comment_pos = find_comment_start(line)
        if comment_pos != -1:
            line = line[:comment_pos]

        cleaned_lines.append(line)

    return "\n".join(cleaned_lines)


def extract_document_body(content: str) -> str:
    """
    Cut out the text between the first \\begin{document} and the last \\end{document}.

    When either marker is missing the whole input is treated as the body.
    """
    begin_pos = content.find(BEGIN_DOCUMENT)
    end_pos = content.rfind(END_DOCUMENT)

    if begin_pos == -1 or end_pos == -1 or end_pos < begin_pos:
        return content

    return content[begin_pos + len(BEGIN_DOCUMENT) : end_pos]


def strip_preamble_directives(content: str, directives: Iterable[str]) -> str:
    """Drop setup-only directives together with their arguments."""
    for directive in directives:
        content = remove_command(content, directive)
    return content


def strip_source(content: str, preamble_directives: Iterable[str] = DEFAULT_PREAMBLE_DIRECTIVES) -> str:
    """
    Reduce an assembled source to its visible body.

    Comments go first so a commented-out \\end{document} cannot cut the body short.

    Args:
        content: Source after include resolution
        preamble_directives: Command names (without backslash) to drop

    Returns:
        Body text ready for the rendering stages
    """
    content = strip_comments(content)
    content = extract_document_body(content)
    return strip_preamble_directives(content, preamble_directives)
