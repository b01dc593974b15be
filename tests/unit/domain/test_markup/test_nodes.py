"""Tests for the markup document model."""

from __future__ import annotations

import pytest

from herald.domain.markup.nodes import (
    Bold,
    Document,
    Heading,
    Image,
    Link,
    List,
    ListItem,
    ListStyle,
    Paragraph,
    Text,
)
from herald.shared.exceptions import MarkupError

# =============================================================================
# Valid trees
# =============================================================================


def test_document_accepts_any_node() -> None:
    doc = Document(
        Heading(1, Text("t")),
        Paragraph(Text("p")),
        List(ListStyle.BULLET, ListItem(Text("i"))),
        Text("loose"),
    )

    assert len(doc.children) == 4


def test_children_are_immutable() -> None:
    paragraph = Paragraph(Text("a"), Bold(Text("b")))

    assert isinstance(paragraph.children, tuple)
    assert paragraph.children[1].children == (paragraph.children[1].children[0],)


def test_leaf_properties() -> None:
    image = Image("Bug", "https://img/bug.svg")
    link = Link("https://x", Text("x"))

    assert image.alt_text == "Bug"
    assert image.source == "https://img/bug.svg"
    assert link.url == "https://x"
    assert Text("hi").content == "hi"


# =============================================================================
# Construction-time validation
# =============================================================================


@pytest.mark.parametrize(
    ("build", "message"),
    [
        (lambda: Heading(1, Paragraph()), "Paragraph is not a valid child of Heading"),
        (lambda: Paragraph(Heading(2)), "Heading is not a valid child of Paragraph"),
        (
            lambda: List(ListStyle.BULLET, Text("x")),
            "Text is not a valid child of List",
        ),
        (lambda: Link("u", Bold(Text("b"))), "Bold is not a valid child of Link"),
        (lambda: Bold(Image("a", "s")), "Image is not a valid child of Bold"),
        (lambda: Paragraph(List(ListStyle.BULLET)), "List is not a valid child"),
    ],
)
def test_invalid_child_is_rejected(build, message: str) -> None:
    with pytest.raises(MarkupError, match=message):
        build()


def test_heading_level_must_be_positive() -> None:
    with pytest.raises(MarkupError, match="must be positive"):
        Heading(0, Text("x"))
