"""
Include resolution.

Expands \\input{...} and \\include{...} across project files into one logical
source. Each recursive expansion receives its own ImportFrame, so sibling
branches may include the same file (diamond includes) while a file that
re-enters its own ancestry is reported instead of expanded.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, Optional

from texpreview.contexts.assembly.logger import (
    log_include,
    log_inclusion_cycle,
    log_missing_include,
)
from texpreview.contexts.assembly.resolvers import FileResolver
from texpreview.utils.fragments import render_fragment
from texpreview.utils.latex_parsing_tools import is_commented_out

INCLUDE_RE = re.compile(r"(?<!\\)\\(?:input|include)\s*\{([^}]+)\}")

MISSING_FILE_MESSAGE = "missing file: {name}"
CYCLE_MESSAGE = "recursive loop detected: {name}"


@dataclass(frozen=True)
class ImportFrame:
    """
    Recursion state for one inclusion branch.

    Attributes:
        visited: Files already open on this branch (ancestors, including the entry file)
        depth: Nesting depth, 0 for the entry file
    """

    visited: FrozenSet[str] = frozenset()
    depth: int = 0

    def enter(self, name: str) -> "ImportFrame":
        """Frame for a child expansion of name; the current frame is left untouched."""
        return ImportFrame(visited=self.visited | {name}, depth=self.depth + 1)


def include_target_name(path: str, default_extension: str = ".tex") -> str:
    """
    Basename of an include path with the default extension appended when missing.

    Example:
        >>> include_target_name("chapters/intro")
        'intro.tex'
        >>> include_target_name("appendix.tex")
        'appendix.tex'
    """
    path = path.strip()
    filename = path.split("/")[-1] or path
    if not filename.endswith(default_extension):
        filename += default_extension
    return filename


def resolve_imports(
    entry_content: str,
    file_lookup: FileResolver,
    entry_name: Optional[str] = None,
    default_extension: str = ".tex",
) -> str:
    """
    Expand every include directive in entry_content, recursively.

    Args:
        entry_content: Source of the entry file
        file_lookup: Resolver serving included files by basename
        entry_name: Name of the entry file; seeds the cycle guard so a file
                    including the entry is reported as a loop on the entry
        default_extension: Extension appended to include targets without one

    Returns:
        Source with each directive replaced by the included content (between
        begin/end boundary comments) or by an inline marker. Text outside the
        directives is unchanged.
    """
    frame = ImportFrame(visited=frozenset([entry_name]) if entry_name else frozenset())
    return _expand(entry_content, file_lookup, frame, default_extension)


def _expand(content: str, file_lookup: FileResolver, frame: ImportFrame, default_extension: str) -> str:
    def substitute(match: re.Match) -> str:
        # Directives after a comment marker are left for the stripper
        if is_commented_out(content, match.start()):
            return match.group(0)

        name = include_target_name(match.group(1), default_extension)

        if name in frame.visited:
            log_inclusion_cycle(name, frame.visited)
            return render_fragment(
                "import_marker", kind="cycle", message=CYCLE_MESSAGE.format(name=name)
            )

        included = file_lookup.lookup(name)
        # An empty file has nothing to include and is reported like a missing one
        if not included:
            log_missing_include(name)
            return render_fragment(
                "import_marker", kind="missing", message=MISSING_FILE_MESSAGE.format(name=name)
            )

        child = frame.enter(name)
        log_include(name, child.depth)
        body = _expand(included, file_lookup, child, default_extension)

        return "\n".join(
            [
                render_fragment("import_boundary", edge="begin", name=name),
                body,
                render_fragment("import_boundary", edge="end", name=name),
            ]
        )

    return INCLUDE_RE.sub(substitute, content)
