"""Short display excerpts for search results."""
from __future__ import annotations

NO_CONTENT = "No content available"


def generate_snippet(
    content: str | None,
    query: str,
    *,
    radius: int = 40,
    fallback_length: int = 120,
) -> str:
    """Return a window around the first occurrence of ``query`` in ``content``.

    When the query does not occur verbatim the leading ``fallback_length``
    characters are used instead. Truncated ends are marked with ``...``.
    """

    if not content:
        return NO_CONTENT

    needle = query.strip().lower()
    position = content.lower().find(needle) if needle else -1
    if position != -1:
        start = max(0, position - radius)
        end = min(len(content), position + len(needle) + radius)
        prefix = "..." if start > 0 else ""
        suffix = "..." if end < len(content) else ""
        return f"{prefix}{content[start:end]}{suffix}"

    suffix = "..." if len(content) > fallback_length else ""
    return content[:fallback_length] + suffix


__all__ = ["generate_snippet", "NO_CONTENT"]
