"""
Structural transformation: headings and the title block.

Headings are numbered in strict left-to-right order by threading a
SectionCounters value through the pass. \\subsubsection is rendered as an
unnumbered fourth level and never touches the counters.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from texpreview.contexts.assembly.stripper import strip_comments
from texpreview.contexts.rendering.numbering import SectionCounters, advance_counters
from texpreview.utils.fragments import render_fragment
from texpreview.utils.latex_parsing_tools import LaTeXPatterns, read_command_arguments
from texpreview.utils.timestamp import format_document_date

HEADING_RE = re.compile(
    r"(?<!\\)\\(?P<level>chapter|section|subsection|subsubsection)(?![A-Za-z])(?P<star>\*?)"
)
MAKETITLE_RE = re.compile(LaTeXPatterns.COMMAND.format(command="maketitle"))

HEADING_TAGS = {
    "chapter": "h1",
    "section": "h2",
    "subsection": "h3",
    "subsubsection": "h4",
}


@dataclass(frozen=True)
class TitleMetadata:
    """
    Document title information declared in the preamble.

    Attributes:
        title: \\title{...} content
        author: \\author{...} content, with \\and rendered as a comma
        date: \\date{...} content, \\today expanded to the compile date
        has_maketitle: Whether the body asks for a title block
    """

    title: str = ""
    author: str = ""
    date: str = ""
    has_maketitle: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.title or self.author or self.date)


def _first_argument(source: str, command: str) -> Optional[str]:
    match = re.search(LaTeXPatterns.COMMAND.format(command=command), source)
    if not match:
        return None
    _, args, _ = read_command_arguments(source, match.end(), optional=1, mandatory=1)
    return args[0].strip() if args else None


def extract_title_metadata(source: str, today: Optional[date] = None) -> TitleMetadata:
    """
    Read \\title, \\author and \\date from a resolved source.

    Args:
        source: Source after include resolution, before stripping
        today: Date used for \\today (defaults to the current date)

    Returns:
        TitleMetadata (fields empty when the command is absent)
    """
    source = strip_comments(source)

    title = _first_argument(source, "title") or ""
    author = _first_argument(source, "author") or ""
    author = re.sub(r"\s*\\and(?![A-Za-z])\s*", ", ", author)

    date_text = _first_argument(source, "date") or ""
    if re.fullmatch(r"\\today\s*", date_text):
        date_text = format_document_date(today or date.today())

    return TitleMetadata(
        title=title,
        author=author,
        date=date_text,
        has_maketitle=bool(MAKETITLE_RE.search(source)),
    )


def render_title_block(metadata: TitleMetadata) -> str:
    """Title block markup, or an empty string when nothing was declared."""
    if metadata.is_empty:
        return ""
    return render_fragment(
        "title_block", title=metadata.title, author=metadata.author, date=metadata.date
    )


def transform_structure(
    body: str,
    counters: Optional[SectionCounters] = None,
    metadata: Optional[TitleMetadata] = None,
) -> str:
    """
    Turn headings into numbered heading blocks and \\maketitle into a title block.

    Args:
        body: Stripped document body
        counters: Starting counters (fresh counters when None)
        metadata: Title information for \\maketitle (removed when None or empty)

    Returns:
        Body with headings rendered

    Example:
        >>> html = transform_structure(r"\\section{Intro} text")
        >>> '<span class="heading-label">1</span> Intro' in html
        True
    """
    counters = counters or SectionCounters()
    pieces = []
    pos = 0

    for match in HEADING_RE.finditer(body):
        if match.start() < pos:
            continue

        _, args, end = read_command_arguments(body, match.end(), optional=1, mandatory=1)
        if not args:
            # No title argument, leave the command as written
            continue

        level = match.group("level")
        starred = bool(match.group("star"))

        if level != "subsubsection":
            counters, label = advance_counters(counters, level, starred)
        else:
            label = ""

        pieces.append(body[pos : match.start()])
        pieces.append(
            render_fragment(
                "heading",
                tag=HEADING_TAGS[level],
                level=level,
                label=label,
                title=args[0].strip(),
            )
        )
        pos = end

    pieces.append(body[pos:])
    result = "".join(pieces)

    title_block = render_title_block(metadata) if metadata else ""
    return MAKETITLE_RE.sub(lambda _: title_block, result)
