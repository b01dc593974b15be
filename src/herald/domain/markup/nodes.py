"""Document model used to build decoration reports.

A closed set of node variants. Each variant declares which children it
accepts and rejects anything else when it is constructed, so a tree that
exists is always renderable.
"""

from __future__ import annotations

from enum import StrEnum

from herald.shared.exceptions import MarkupError

# =============================================================================
# BASE
# =============================================================================


class Node:
    """A markup node owning an ordered, immutable tuple of children."""

    __slots__ = ("_children",)

    def __init__(self, *children: Node) -> None:
        for child in children:
            if not self.accepts(child):
                msg = (
                    f"{type(child).__name__} is not a valid child of "
                    f"{type(self).__name__}"
                )
                raise MarkupError(msg)
        self._children = tuple(children)

    @property
    def children(self) -> tuple[Node, ...]:
        return self._children

    def accepts(self, child: Node) -> bool:
        """Whether *child* may be nested directly under this node."""
        return True

    def __repr__(self) -> str:
        inner = ", ".join(repr(c) for c in self._children)
        return f"{type(self).__name__}({inner})"


# =============================================================================
# CONTAINERS
# =============================================================================


class Document(Node):
    """Root container, accepts any node."""

    __slots__ = ()


class ListItem(Node):
    __slots__ = ()


class Heading(Node):
    __slots__ = ("_level",)

    def __init__(self, level: int, *children: Node) -> None:
        if level < 1:
            msg = f"Heading level must be positive, got {level}"
            raise MarkupError(msg)
        self._level = level
        super().__init__(*children)

    @property
    def level(self) -> int:
        return self._level

    def accepts(self, child: Node) -> bool:
        return isinstance(child, (Text, Image, Link))


class Paragraph(Node):
    __slots__ = ()

    def accepts(self, child: Node) -> bool:
        return isinstance(child, (Text, Image, Link, Bold))


class ListStyle(StrEnum):
    BULLET = "BULLET"


class List(Node):
    __slots__ = ("_style",)

    def __init__(self, style: ListStyle, *children: Node) -> None:
        self._style = style
        super().__init__(*children)

    @property
    def style(self) -> ListStyle:
        return self._style

    def accepts(self, child: Node) -> bool:
        return isinstance(child, ListItem)


class Link(Node):
    __slots__ = ("_url",)

    def __init__(self, url: str, *children: Node) -> None:
        self._url = url
        super().__init__(*children)

    @property
    def url(self) -> str:
        return self._url

    def accepts(self, child: Node) -> bool:
        return isinstance(child, (Text, Image))


class Bold(Node):
    __slots__ = ()

    def accepts(self, child: Node) -> bool:
        return isinstance(child, Text)


# =============================================================================
# LEAVES
# =============================================================================


class Image(Node):
    __slots__ = ("_alt_text", "_source")

    def __init__(self, alt_text: str, source: str) -> None:
        self._alt_text = alt_text
        self._source = source
        super().__init__()

    @property
    def alt_text(self) -> str:
        return self._alt_text

    @property
    def source(self) -> str:
        return self._source

    def accepts(self, child: Node) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Image({self._alt_text!r}, {self._source!r})"


class Text(Node):
    __slots__ = ("_content",)

    def __init__(self, content: str) -> None:
        self._content = content
        super().__init__()

    @property
    def content(self) -> str:
        return self._content

    def accepts(self, child: Node) -> bool:
        return False

    def __repr__(self) -> str:
        return f"Text({self._content!r})"
