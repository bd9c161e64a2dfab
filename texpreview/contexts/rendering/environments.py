"""
Environment handling: lists, abstract, minipage, center and figure blocks.

Environments are rewritten innermost first, so a list nested in a minipage is
already markup by the time the minipage itself is converted.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from texpreview.utils.fragments import render_fragment
from texpreview.utils.latex_parsing_tools import (
    LaTeXPatterns,
    format_percentage,
    read_command_arguments,
    read_optional_argument,
    remove_command,
    width_to_percentage,
)

ENVIRONMENT_NAMES = r"itemize|enumerate|abstract|center|figure\*?|minipage"

# Matches an environment whose body holds no other handled environment
INNERMOST_ENV_RE = re.compile(
    rf"\\begin\{{(?P<env>{ENVIRONMENT_NAMES})\}}"
    rf"(?P<body>(?:(?!\\begin\{{(?:{ENVIRONMENT_NAMES})\}}).)*?)"
    r"\\end\{(?P=env)\}",
    re.DOTALL,
)
ITEM_RE = re.compile(LaTeXPatterns.COMMAND.format(command="item"))
CAPTION_RE = re.compile(LaTeXPatterns.COMMAND.format(command="caption"))

LIST_TAGS = {"itemize": "ul", "enumerate": "ol"}
MINIPAGE_ALIGN = {"t": "top", "b": "bottom", "c": "middle"}
DEFAULT_REFERENCE_WIDTH_CM = 21.0


@dataclass(frozen=True)
class ListItem:
    body: str
    label: Optional[str] = None


def split_list_items(body: str) -> Tuple[str, List[ListItem]]:
    """
    Split a list body at its \\item markers.

    Each item runs up to the next \\item or the end of the body. An optional
    [label] right after \\item becomes the item's label.

    Returns:
        (text before the first item, items)

    Example:
        >>> preamble, items = split_list_items(r"\\item One \\item[b)] Two")
        >>> [(item.label, item.body) for item in items]
        [(None, 'One'), ('b)', 'Two')]
    """
    matches = list(ITEM_RE.finditer(body))
    if not matches:
        return body.strip(), []

    items = []
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(body)
        label, content_start = read_optional_argument(body, match.end())
        items.append(ListItem(body=body[content_start:end].strip(), label=label))

    return body[: matches[0].start()].strip(), items


def render_list(kind: str, body: str) -> str:
    # Optional list settings like [label=(\alph*)] are not rendered
    _, body_start = read_optional_argument(body, 0)
    preamble, items = split_list_items(body[body_start:])
    return render_fragment("list", tag=LIST_TAGS[kind], kind=kind, preamble=preamble, items=items)


def minipage_width(spec: Optional[str], reference_width_cm: float = DEFAULT_REFERENCE_WIDTH_CM) -> str:
    """
    CSS width for a minipage width argument.

    Fractions of the text width map to that percentage; absolute lengths are
    measured against the reference page width; anything else is full width.

    Example:
        >>> minipage_width(r"0.5\\textwidth")
        '50%'
        >>> minipage_width("7cm")
        '33.33%'
        >>> minipage_width(r"\\mywidth")
        '100%'
    """
    percentage = width_to_percentage(spec, reference_width_cm) if spec else None
    return format_percentage(percentage if percentage is not None else 100.0)


def render_minipage(body: str, reference_width_cm: float) -> str:
    optional_args, mandatory_args, content_start = read_command_arguments(
        body, 0, optional=3, mandatory=1
    )
    position = (optional_args[0] or "c").strip()
    return render_fragment(
        "minipage",
        align=MINIPAGE_ALIGN.get(position, "middle"),
        width=minipage_width(mandatory_args[0] if mandatory_args else None, reference_width_cm),
        body=body[content_start:].strip(),
    )


def render_figure(body: str) -> str:
    # Placement options ([htbp]) have no meaning in a scrolling preview
    _, body_start = read_optional_argument(body, 0)
    body = body[body_start:]

    caption = ""
    caption_match = CAPTION_RE.search(body)
    if caption_match:
        _, args, caption_end = read_command_arguments(body, caption_match.end(), optional=1, mandatory=1)
        if args:
            caption = args[0].strip()
            body = body[: caption_match.start()] + body[caption_end:]

    body = remove_command(body, "centering")
    return render_fragment("figure", body=body.strip(), caption=caption)


def transform_environments(body: str, reference_width_cm: float = DEFAULT_REFERENCE_WIDTH_CM) -> str:
    """
    Rewrite the supported environments into layout blocks.

    Args:
        body: Document body after structural transformation
        reference_width_cm: Page width absolute minipage widths are measured against

    Returns:
        Body with lists, abstract, minipage, center and figure environments rendered.
        Unmatched \\begin/\\end markers are left as written.
    """

    def render(match: re.Match) -> str:
        env = match.group("env")
        content = match.group("body")

        if env in LIST_TAGS:
            return render_list(env, content)
        if env == "abstract":
            return render_fragment("abstract", body=content.strip())
        if env == "minipage":
            return render_minipage(content, reference_width_cm)
        if env == "center":
            return render_fragment("center", body=content.strip())
        return render_figure(content)

    while True:
        rewritten = INNERMOST_ENV_RE.sub(render, body)
        if rewritten == body:
            return rewritten
        body = rewritten
