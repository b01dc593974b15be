"""Tests for RFC 5988 Link header parsing."""

from __future__ import annotations

import pytest

from herald.infrastructure.http.link_header import find_next_link


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        (None, None),
        ("", None),
        (
            '<https://gitlab.com/api/v4/projects/1/discussions?page=2>; rel="next"',
            "https://gitlab.com/api/v4/projects/1/discussions?page=2",
        ),
        (
            '<https://x/?page=1>; rel="prev", <https://x/?page=3>; rel="next", '
            '<https://x/?page=9>; rel="last"',
            "https://x/?page=3",
        ),
        ("<https://x/?page=2>; rel=next", "https://x/?page=2"),
        ('<https://x/?page=9>; rel="last"', None),
        ('https://x/?page=2; rel="next"', None),
        ("<https://x/?page=2>", None),
        ('garbage, <https://x/?page=4>; rel="next"', "https://x/?page=4"),
    ],
)
def test_find_next_link(header: str | None, expected: str | None) -> None:
    assert find_next_link(header) == expected
