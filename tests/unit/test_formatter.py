"""Unit tests for inline and block formatting."""

import pytest

from texpreview.contexts.rendering.formatter import css_length, format_text

PARAGRAPH = '<div class="paragraph-break"></div>'
PAGE = '<div class="page-break"></div>'

pytestmark = pytest.mark.unit


class TestTextStyles:
    """Tests for text style commands."""

    @pytest.mark.parametrize(
        "source,expected",
        [
            (r"\textbf{a}", "<strong>a</strong>"),
            (r"\textit{a}", "<em>a</em>"),
            (r"\emph{a}", "<em>a</em>"),
            (r"\underline{a}", "<u>a</u>"),
            (r"\texttt{a}", "<code>a</code>"),
            (r"\textsc{a}", '<span class="smallcaps">a</span>'),
        ],
    )
    def test_style(self, source, expected):
        assert format_text(source) == expected

    def test_style_argument_containing_math(self):
        assert format_text(r"\textbf{area $x$ here}") == "<strong>area $x$ here</strong>"

    def test_nested_styles(self):
        assert format_text(r"\textbf{\textit{a}}") == "<strong><em>a</em></strong>"

    def test_escaped_braces_in_argument(self):
        assert format_text(r"\textbf{\{a\}}") == "<strong>{a}</strong>"


class TestBreaks:
    """Tests for line, paragraph and page breaks."""

    def test_double_backslash(self):
        assert format_text(r"a\\b") == "a<br/>b"

    def test_double_backslash_with_length(self):
        assert format_text(r"a\\[2pt]b") == "a<br/>b"

    def test_consecutive_double_backslashes(self):
        assert format_text(r"a\\\\b") == "a<br/><br/>b"

    def test_consecutive_breaks_with_lengths(self):
        assert format_text(r"a\\[2pt]\\*b") == "a<br/><br/>b"

    def test_newline_command(self):
        assert format_text(r"a\newline b") == "a<br/> b"

    def test_blank_line_run_is_one_paragraph_break(self):
        assert format_text("a\n\n\n\nb") == f"a{PARAGRAPH}b"

    def test_whitespace_only_lines_count_as_blank(self):
        assert format_text("a\n  \n\tb") == f"a{PARAGRAPH}b"

    def test_single_newline_kept(self):
        assert format_text("a\nb") == "a\nb"

    def test_par(self):
        assert format_text(r"a\par b") == f"a{PARAGRAPH} b"

    @pytest.mark.parametrize("command", ["newpage", "clearpage", "pagebreak"])
    def test_page_breaks(self, command):
        assert format_text(f"a\\{command} b") == f"a{PAGE} b"


class TestSpacing:
    """Tests for vertical and horizontal spacing."""

    def test_vspace(self):
        assert format_text(r"\vspace{12pt}") == '<div class="vspace" style="height: 12pt;"></div>'

    def test_negative_vspace_uses_margin(self):
        assert format_text(r"\vspace*{-3pt}") == '<div class="vspace" style="margin-top: -3pt;"></div>'

    def test_vspace_unknown_unit_uses_default(self):
        assert format_text(r"\vspace{\baselineskip}") == '<div class="vspace" style="height: 1em;"></div>'

    def test_vspace_configured_default(self):
        html = format_text(r"\vspace{\fill}", {"default_vspace": "2em"})
        assert html == '<div class="vspace" style="height: 2em;"></div>'

    @pytest.mark.parametrize("command,length", [("smallskip", "3pt"), ("medskip", "6pt"), ("bigskip", "12pt")])
    def test_fixed_skips(self, command, length):
        assert format_text(f"\\{command}") == f'<div class="vspace" style="height: {length};"></div>'

    def test_hspace(self):
        html = format_text(r"a\hspace{2cm}b")
        assert html == 'a<span class="hspace" style="display: inline-block; width: 2cm;"></span>b'

    def test_quad_and_qquad(self):
        assert "width: 1em;" in format_text(r"a\quad b")
        html = format_text(r"a\qquad b")
        assert "width: 2em;" in html
        assert "width: 1em;" not in html

    def test_css_length(self):
        assert css_length("1.5 cm", "1em") == "1.5cm"
        assert css_length(None, "1em") == "1em"
        assert css_length("3dd", "1em") == "1em"


class TestFontSizes:
    """Tests for font-size scope directives."""

    def test_scope_opens_span(self):
        assert format_text(r"\small text") == '<span class="fontsize-small">text'

    def test_scope_is_never_closed(self):
        html = format_text(r"{\Large Big} after")
        assert '<span class="fontsize-Large">' in html
        assert "</span>" not in html

    def test_case_distinguishes_sizes(self):
        assert 'fontsize-LARGE"' in format_text(r"\LARGE x")
        assert 'fontsize-huge"' in format_text(r"\huge x")

    def test_similar_command_not_a_size(self):
        assert "fontsize" not in format_text(r"\smallskip")


class TestGroups:
    """Tests for bare brace groups."""

    def test_group_braces_dropped(self):
        assert format_text(r"{\small text} after") == '<span class="fontsize-small">text after'

    def test_nested_groups(self):
        assert format_text("{a {b}} c") == "a b c"

    def test_command_arguments_kept(self):
        assert format_text(r"\unknown{x} and {plain}") == r"\unknown{x} and plain"

    def test_escaped_braces_are_text(self):
        assert format_text(r"\{x\}") == "{x}"

    def test_unbalanced_group_left_alone(self):
        assert format_text("{open") == "{open"


class TestSpecialCharacters:
    """Tests for escaped specials and ties."""

    def test_escaped_specials(self):
        assert format_text(r"50\% \& \_ \# \{x\}") == "50% &amp; _ # {x}"

    def test_escaped_dollar_becomes_entity(self):
        assert format_text(r"costs \$5") == "costs &#36;5"

    def test_tie(self):
        assert format_text("Fig.~1") == "Fig.&nbsp;1"

    def test_noindent_dropped(self):
        assert format_text(r"\noindent Text").strip() == "Text"


class TestMathProtection:
    """Math spans must reach the math renderer untouched."""

    def test_inline_math_untouched(self):
        html = format_text(r"\textbf{a} $\textbf{x}_1 \% y$")
        assert html == r"<strong>a</strong> $\textbf{x}_1 \% y$"

    def test_display_math_untouched(self):
        source = "\\[\na \\\\\n\nb\n\\]"
        assert format_text(source) == source
