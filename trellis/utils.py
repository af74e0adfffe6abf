"""
Utility functions for the Trellis application.
"""

import unicodedata
from datetime import datetime
from typing import Optional, Tuple


def title_sort_key(title: str) -> Tuple[str, str, str]:
    """
    Build a locale-aware collation key for a title.

    Primary comparison ignores case and accents, so "éclair" sorts next to
    "eclair" and "Zeta" after "alpha". Accents break ties first, then case
    with lowercase ahead of uppercase, which keeps the ordering total.

    Args:
        title: The title to build a key for.

    Returns:
        A tuple usable as a sort key.

    Examples:
        >>> sorted(["beta", "Alpha", "Éclair"], key=title_sort_key)
        ['Alpha', 'beta', 'Éclair']
        >>> sorted(["Apple", "apple"], key=title_sort_key)
        ['apple', 'Apple']
    """
    decomposed = unicodedata.normalize("NFKD", title)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), decomposed.casefold(), title.swapcase()


def format_timestamp(value: Optional[datetime]) -> str:
    """
    Format a timestamp for table and detail output.

    Args:
        value: The datetime to format, or None.

    Returns:
        'YYYY-MM-DD HH:MM' or '-' when no timestamp is set.
    """
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


def format_validation_error(error: Exception) -> str:
    """
    Turn a pydantic ValidationError into a short, readable message.

    Args:
        error: The pydantic error (other exceptions are passed through str()).

    Returns:
        One line per failing field, e.g. "title: Title is required ...".
    """
    errors = getattr(error, "errors", None)
    if not callable(errors):
        return str(error)

    lines = []
    for err in errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        message = err.get("msg", "invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        lines.append(f"{location}: {message}" if location else message)
    return "\n".join(lines)
