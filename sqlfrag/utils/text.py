"""Small string helpers shared by the statement and metadata layers."""

import re
from functools import lru_cache

__all__ = (
    "make_placeholders",
    "snake_case",
)

_SNAKE_CASE_RE_ACRONYM_SEQUENCE = re.compile(r"([A-Z\d]+)([A-Z][a-z])")
_SNAKE_CASE_RE_LOWER_UPPER_TRANSITION = re.compile(r"([a-z\d])([A-Z])")
_SNAKE_CASE_RE_REPLACE_SEP = re.compile(r"[-\s.]+")
_SNAKE_CASE_RE_CLEAN_MULTIPLE_UNDERSCORE = re.compile(r"__+")


def make_placeholders(count: int, placeholder: str = "?") -> str:
    """Return ``count`` positional placeholders joined by commas.

    Args:
        count: Number of placeholders.
        placeholder: Placeholder token.

    Returns:
        str: e.g. ``"?,?,?"`` for a count of three.
    """
    return ",".join([placeholder] * count)


@lru_cache(maxsize=256)
def snake_case(string: str) -> str:
    """Convert a class or field name to snake_case.

    ``"HTTPRequest"`` becomes ``"http_request"`` and ``"UserGroup"`` becomes
    ``"user_group"``.

    Args:
        string: The string to convert.

    Returns:
        The snake_case version of the string.
    """
    if not string:
        return ""
    s = _SNAKE_CASE_RE_REPLACE_SEP.sub("_", string.strip())
    s = _SNAKE_CASE_RE_ACRONYM_SEQUENCE.sub(r"\1_\2", s)
    s = _SNAKE_CASE_RE_LOWER_UPPER_TRANSITION.sub(r"\1_\2", s)
    s = re.sub(r"[^\w_]", "", s, flags=re.UNICODE)
    s = _SNAKE_CASE_RE_CLEAN_MULTIPLE_UNDERSCORE.sub("_", s)
    return s.lower().strip("_")
