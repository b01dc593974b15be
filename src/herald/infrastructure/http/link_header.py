"""Reader for RFC 5988 ``Link`` response headers."""

from __future__ import annotations


def find_next_link(header: str | None) -> str | None:
    """Return the URL of the entry with ``rel="next"``, if any.

    Malformed entries are skipped, so a missing or garbled header simply
    yields no next page.

    >>> find_next_link('<a>; rel="last", <b>; rel="next"')
    'b'
    """
    if not header:
        return None

    for entry in header.split(","):
        parts = entry.split(";")
        if len(parts) < 2:
            continue

        url_part = parts[0].strip()
        if not (url_part.startswith("<") and url_part.endswith(">")):
            continue

        for param in parts[1:]:
            name, _, value = param.strip().partition("=")
            if name.strip() == "rel" and value.strip() in ("next", '"next"'):
                return url_part[1:-1]

    return None
