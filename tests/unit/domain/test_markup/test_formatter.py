"""Tests for Markdown rendering."""

from __future__ import annotations

import pytest

from herald.domain.markup.formatter import MarkdownFormatter, MarkdownFormatterFactory
from herald.domain.markup.nodes import (
    Bold,
    Document,
    Heading,
    Image,
    Link,
    List,
    ListItem,
    ListStyle,
    Node,
    Paragraph,
    Text,
)
from herald.shared.exceptions import MarkupError

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def formatter() -> MarkdownFormatter:
    return MarkdownFormatter()


# =============================================================================
# Nodes
# =============================================================================


def test_heading(formatter: MarkdownFormatter) -> None:
    assert formatter.format(Heading(2, Text("Issues"))) == "## Issues\n"


def test_paragraph(formatter: MarkdownFormatter) -> None:
    assert formatter.format(Paragraph(Text("a"), Text("b"))) == "ab\n\n"


def test_bullet_list(formatter: MarkdownFormatter) -> None:
    node = List(ListStyle.BULLET, ListItem(Text("one")), ListItem(Text("two")))

    assert formatter.format(node) == "- one\n- two\n\n"


def test_image(formatter: MarkdownFormatter) -> None:
    rendered = formatter.format(Image("Bug", "https://i/bug.svg"))

    assert rendered == "![Bug](https://i/bug.svg)"


def test_link_with_label(formatter: MarkdownFormatter) -> None:
    assert formatter.format(Link("https://x", Text("X"))) == "[X](https://x)"


def test_link_without_label_shows_url(formatter: MarkdownFormatter) -> None:
    assert formatter.format(Link("https://x")) == "[https://x](https://x)"


def test_bold(formatter: MarkdownFormatter) -> None:
    assert formatter.format(Bold(Text("strong"))) == "**strong**"


def test_document_concatenates_children(formatter: MarkdownFormatter) -> None:
    document = Document(
        Heading(1, Text("Analysis Details")),
        Paragraph(Image("Passed", "https://i/passed.svg")),
        List(ListStyle.BULLET, ListItem(Image("Bug", "b.svg"), Text(" 1 Bug"))),
        Paragraph(Link("https://sonar/dashboard?id=p&pullRequest=1", Text("View"))),
    )

    assert formatter.format(document) == (
        "# Analysis Details\n"
        "![Passed](https://i/passed.svg)\n\n"
        "- ![Bug](b.svg) 1 Bug\n\n"
        "[View](https://sonar/dashboard?id=p&pullRequest=1)\n\n"
    )


# =============================================================================
# Escaping
# =============================================================================


def test_text_is_html_escaped(formatter: MarkdownFormatter) -> None:
    assert formatter.format(Text("a < b && c > d")) == "a &lt; b &amp;&amp; c &gt; d"


def test_quotes_are_not_escaped(formatter: MarkdownFormatter) -> None:
    assert formatter.format(Text('say "hi"')) == 'say "hi"'


def test_urls_are_not_escaped(formatter: MarkdownFormatter) -> None:
    assert formatter.format(Link("https://x?a=1&b=2", Text("a&b"))) == (
        "[a&amp;b](https://x?a=1&b=2)"
    )


# =============================================================================
# Unknown nodes
# =============================================================================


class _Custom(Node):
    __slots__ = ()


def test_unknown_node_is_rejected(formatter: MarkdownFormatter) -> None:
    with pytest.raises(MarkupError, match="Unknown node type _Custom"):
        formatter.format(Document(_Custom()))


def test_factory_supplies_markdown_formatter() -> None:
    formatter = MarkdownFormatterFactory().document_formatter()

    assert formatter.format(Bold(Text("x"))) == "**x**"
