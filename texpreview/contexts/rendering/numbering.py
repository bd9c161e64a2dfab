"""
Heading numbering.

SectionCounters is an immutable value: advancing it returns a new value and the
label of the heading that caused the advance. The structural transformer
threads one value through a single pass, so separate compiles never share
numbering state.
"""

from dataclasses import dataclass, replace
from typing import Tuple

CHAPTER = "chapter"
SECTION = "section"
SUBSECTION = "subsection"

LEVELS = (CHAPTER, SECTION, SUBSECTION)


@dataclass(frozen=True)
class SectionCounters:
    chapter: int = 0
    section: int = 0
    subsection: int = 0

    @property
    def has_chapter(self) -> bool:
        """Whether a numbered chapter has occurred in the document so far."""
        return self.chapter > 0

    def label(self, level: str) -> str:
        """Dotted label of the current counters at the given level."""
        if level == CHAPTER:
            parts = [self.chapter]
        elif level == SECTION:
            parts = [self.section]
        else:
            parts = [self.section, self.subsection]

        if level != CHAPTER and self.has_chapter:
            parts.insert(0, self.chapter)

        return ".".join(str(part) for part in parts)


def advance_counters(
    counters: SectionCounters, level: str, starred: bool = False
) -> Tuple[SectionCounters, str]:
    """
    Advance the counters for one heading.

    Args:
        counters: Counters before the heading
        level: CHAPTER, SECTION or SUBSECTION
        starred: Unnumbered variant; counters stay as they are

    Returns:
        (new_counters, label); label is "" for starred headings

    Raises:
        ValueError: If level is not a numbered heading level

    Example:
        >>> counters, label = advance_counters(SectionCounters(), CHAPTER)
        >>> counters, label = advance_counters(counters, SECTION)
        >>> label
        '1.1'
        >>> advance_counters(counters, CHAPTER, starred=True)[1]
        ''
    """
    if level not in LEVELS:
        raise ValueError(f"Unknown heading level: {level}")

    if starred:
        return counters, ""

    if level == CHAPTER:
        counters = SectionCounters(chapter=counters.chapter + 1, section=0, subsection=0)
    elif level == SECTION:
        counters = replace(counters, section=counters.section + 1, subsection=0)
    else:
        counters = replace(counters, subsection=counters.subsection + 1)

    return counters, counters.label(level)
