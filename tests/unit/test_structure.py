"""Unit tests for heading numbering and structural transformation."""

import re
from datetime import date

import pytest

from texpreview.contexts.rendering.numbering import (
    CHAPTER,
    SECTION,
    SUBSECTION,
    SectionCounters,
    advance_counters,
)
from texpreview.contexts.rendering.structure import (
    TitleMetadata,
    extract_title_metadata,
    render_title_block,
    transform_structure,
)

pytestmark = pytest.mark.unit


def heading_labels(html):
    """Labels of the rendered headings in order ('' for unnumbered ones)."""
    labels = []
    for heading in re.findall(r"<h\d[^>]*>.*?</h\d>", html):
        match = re.search(r'class="heading-label">([^<]*)<', heading)
        labels.append(match.group(1) if match else "")
    return labels


class TestAdvanceCounters:
    """Tests for advance_counters function."""

    def test_sections_count_up(self):
        counters = SectionCounters()
        labels = []
        for _ in range(3):
            counters, label = advance_counters(counters, SECTION)
            labels.append(label)

        assert labels == ["1", "2", "3"]

    def test_subsection_label(self):
        counters = SectionCounters(section=2)
        counters, label = advance_counters(counters, SUBSECTION)

        assert label == "2.1"
        assert counters == SectionCounters(section=2, subsection=1)

    def test_chapter_resets_lower_levels(self):
        counters = SectionCounters(chapter=1, section=3, subsection=2)
        counters, label = advance_counters(counters, CHAPTER)

        assert label == "2"
        assert counters == SectionCounters(chapter=2)

    def test_section_resets_subsection(self):
        counters, _ = advance_counters(SectionCounters(section=1, subsection=4), SECTION)
        assert counters.subsection == 0

    def test_labels_inside_chapter(self):
        counters, _ = advance_counters(SectionCounters(), CHAPTER)
        counters, section_label = advance_counters(counters, SECTION)
        counters, subsection_label = advance_counters(counters, SUBSECTION)

        assert section_label == "1.1"
        assert subsection_label == "1.1.1"

    def test_starred_leaves_counters_alone(self):
        counters = SectionCounters(section=2)
        new_counters, label = advance_counters(counters, CHAPTER, starred=True)

        assert label == ""
        assert new_counters is counters

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            advance_counters(SectionCounters(), "paragraph")


class TestTransformStructure:
    """Tests for transform_structure function."""

    def test_heading_markup(self):
        html = transform_structure(r"\section{Intro}")
        assert html == '<h2 class="heading heading-section"><span class="heading-label">1</span> Intro</h2>'

    def test_textual_order_numbering(self):
        html = transform_structure(r"\section{A} \section{B} \subsection{C} \section{D}")
        assert heading_labels(html) == ["1", "2", "2.1", "3"]

    def test_chapters_prefix_sections(self):
        html = transform_structure(r"\chapter{One} \section{A} \chapter{Two} \section{B}")
        assert heading_labels(html) == ["1", "1.1", "2", "2.1"]

    def test_starred_chapter_is_unlabeled_and_does_not_advance(self):
        html = transform_structure(r"\chapter*{Preface} \section{A} \chapter{One}")

        assert heading_labels(html) == ["", "1", "1"]
        assert "<h1" in html

    def test_optional_short_title_and_nested_braces(self):
        html = transform_structure(r"\section[Short]{Long {nested} title}")
        assert "Long {nested} title</h2>" in html
        assert "Short" not in html

    def test_subsubsection_is_unnumbered_h4(self):
        html = transform_structure(r"\section{A} \subsubsection{Detail} \subsection{B}")

        assert heading_labels(html) == ["1", "", "1.1"]
        assert '<h4 class="heading heading-subsubsection">Detail</h4>' in html

    def test_heading_without_argument_left_alone(self):
        assert transform_structure(r"\section no braces") == r"\section no braces"

    def test_fresh_counters_per_call(self):
        transform_structure(r"\section{A} \section{B}")
        assert heading_labels(transform_structure(r"\section{C}")) == ["1"]

    def test_maketitle_without_metadata_removed(self):
        assert transform_structure(r"\maketitle Body") == " Body"

    def test_maketitle_with_metadata(self):
        metadata = TitleMetadata(title="Report", author="Ada", date="Today")
        html = transform_structure(r"\maketitle", metadata=metadata)

        assert '<h1 class="title">Report</h1>' in html
        assert '<div class="author">Ada</div>' in html


class TestTitleMetadata:
    """Tests for title metadata extraction."""

    def test_extract(self):
        source = "\\title{Report}\n\\author{Ada \\and Grace}\n\\date{\\today}\n\\maketitle"
        metadata = extract_title_metadata(source, today=date(2025, 11, 14))

        assert metadata.title == "Report"
        assert metadata.author == "Ada, Grace"
        assert metadata.date == "November 14, 2025"
        assert metadata.has_maketitle

    def test_commented_title_ignored(self):
        metadata = extract_title_metadata("% \\title{Draft}\n\\title{Final}")
        assert metadata.title == "Final"

    def test_empty(self):
        metadata = extract_title_metadata("no title here")

        assert metadata.is_empty
        assert not metadata.has_maketitle
        assert render_title_block(metadata) == ""
