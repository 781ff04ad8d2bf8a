"""Named placeholder detection and rewriting.

A named placeholder is a colon followed by one ASCII letter and any number of
ASCII letters, digits or underscores (``:id``, ``:user_name2``). A colon that
directly follows another colon is a PostgreSQL cast (``::text``), not a
placeholder. SQL is not otherwise parsed: a ``:name`` inside a string literal
or comment is still treated as a placeholder.
"""

import re
from functools import lru_cache

# Compiled once, shared read-only by every invocation
NAMED_PARAMETER_PATTERN = re.compile(r"(?<!:):([a-zA-Z][a-zA-Z0-9_]*)")

# Placeholders plus literal percent signs, which %s drivers need doubled
_REWRITE_PATTERN = re.compile(NAMED_PARAMETER_PATTERN.pattern + r"|%")

SUPPORTED_PLACEHOLDERS = ("?", "%s")


def has_named_parameters(sql: str) -> bool:
    """
    Check whether a SQL template contains at least one named placeholder.

    Args:
        sql: SQL template

    Returns:
        True if the template should be bound by name
    """
    return NAMED_PARAMETER_PATTERN.search(sql) is not None


@lru_cache(maxsize=256)
def translate(sql: str, placeholder: str = "?") -> tuple[str, tuple[str, ...]]:
    """
    Rewrite named placeholders into positional ones.

    Every match is replaced by ``placeholder`` in one left-to-right pass. The
    names are returned in the order they were found; a name used twice in the
    template appears twice in the list.

    With the ``%s`` placeholder every literal ``%`` is written as ``%%`` in
    the same pass, since those drivers interpolate the statement with the
    ``%`` operator. With ``?`` the remaining text is kept verbatim.

    Args:
        sql: SQL template
        placeholder: Positional placeholder expected by the driver

    Returns:
        Tuple of (rewritten SQL, extracted parameter names)

    Raises:
        ValueError: If the placeholder style is not supported
    """
    if placeholder not in SUPPORTED_PLACEHOLDERS:
        raise ValueError(
            f"Unsupported placeholder: {placeholder!r}. "
            f"Supported: {', '.join(SUPPORTED_PLACEHOLDERS)}"
        )

    names: list[str] = []
    percent = "%%" if placeholder == "%s" else "%"

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name is None:
            return percent
        names.append(name)
        return placeholder

    rewritten = _REWRITE_PATTERN.sub(_replace, sql)
    return rewritten, tuple(names)
