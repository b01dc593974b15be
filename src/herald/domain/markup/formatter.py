"""Renderers that turn a document tree into a platform's native markup."""

from __future__ import annotations

import html

from typing import Protocol

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
# PROTOCOLS
# =============================================================================


class Formatter(Protocol):
    def format(self, node: Node) -> str: ...


class FormatterFactory(Protocol):
    """Supplies the formatter a platform renders reports with."""

    def document_formatter(self) -> Formatter: ...


# =============================================================================
# MARKDOWN
# =============================================================================


class MarkdownFormatter:
    """Renders nodes as the Markdown dialect shared by the supported platforms."""

    def format(self, node: Node) -> str:
        """Render *node* and its subtree.

        Raises:
            MarkupError: If the node is not one of the known variants.
        """
        match node:
            case Document() | ListItem():
                return self._children(node)
            case Heading(level=level):
                return f"{'#' * level} {self._children(node)}\n"
            case Paragraph():
                return f"{self._children(node)}\n\n"
            case List(style=ListStyle.BULLET):
                items = "".join(f"- {self.format(child)}\n" for child in node.children)
                return f"{items}\n"
            case Link(url=url):
                label = self._children(node) if node.children else url
                return f"[{label}]({url})"
            case Image(alt_text=alt_text, source=source):
                return f"![{alt_text}]({source})"
            case Text(content=content):
                return html.escape(content, quote=False)
            case Bold():
                return f"**{self._children(node)}**"
            case _:
                msg = f"Unknown node type {type(node).__name__}"
                raise MarkupError(msg)

    def _children(self, node: Node) -> str:
        return "".join(self.format(child) for child in node.children)


class MarkdownFormatterFactory:
    def document_formatter(self) -> Formatter:
        return MarkdownFormatter()
