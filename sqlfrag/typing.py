from enum import Enum
from typing import Any, Final, Literal

from typing_extensions import TypeAlias

__all__ = (
    "Empty",
    "EmptyEnum",
    "EmptyType",
    "StatementParameters",
)


class EmptyEnum(Enum):
    """A sentinel enum used as placeholder for a value that should not take part in a statement."""

    EMPTY = 0


EmptyType: TypeAlias = Literal[EmptyEnum.EMPTY]
Empty: Final = EmptyEnum.EMPTY

StatementParameters: TypeAlias = list[Any]
"""Positional parameters bound to ``?`` placeholders, in textual order."""
