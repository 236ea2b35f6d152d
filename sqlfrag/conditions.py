"""Derive WHERE conditions from a populated model instance.

Every column of the table is inspected through a :class:`FieldKind` visitor
chosen from the column's declared Python type. A kind decides whether a value
counts as "unset" and what gets bound in its place. Set values become
``"column" = ?`` fragments; unset values are skipped.

The policy is "zero or empty means unspecified": a condition such as
``age = 0`` or ``name = ''`` cannot be expressed through an example object.
Use :meth:`Statement.where <sqlfrag.statement.Statement.where>` for those.
"""

import datetime
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from sqlfrag.typing import Empty, EmptyType
from sqlfrag.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlfrag.dialects import Dialect
    from sqlfrag.metadata import Column, MetadataRegistry, Table

__all__ = (
    "DerivedConditions",
    "FieldKind",
    "IntegerKind",
    "ReferenceKind",
    "TextKind",
    "TimeKind",
    "UnsupportedKind",
    "derive_conditions",
    "register_field_kind",
    "resolve_field_kind",
)

logger = get_logger("sqlfrag.conditions")


class FieldKind(ABC):
    """Inclusion policy for one kind of field value."""

    name: str = "field"

    @abstractmethod
    def is_unset(self, value: Any) -> bool:
        """Return True when ``value`` means "not specified"."""

    def bind(self, value: Any) -> "Any | EmptyType":
        """Return the value to bind, or ``Empty`` to leave the column out."""
        if value is None or self.is_unset(value):
            return Empty
        return value


class TextKind(FieldKind):
    name = "text"

    def is_unset(self, value: Any) -> bool:
        return value == ""


class IntegerKind(FieldKind):
    name = "integer"

    def is_unset(self, value: Any) -> bool:
        return value == 0


class TimeKind(FieldKind):
    """Date and datetime values; the minimum representable instant is unset."""

    name = "time"

    def is_unset(self, value: Any) -> bool:
        if isinstance(value, datetime.datetime):
            return value.replace(tzinfo=None) == datetime.datetime.min
        return value == datetime.date.min


class UnsupportedKind(FieldKind):
    name = "unsupported"

    def is_unset(self, value: Any) -> bool:
        return True


class ReferenceKind(FieldKind):
    """A field holding another mapped model; binds that model's primary key."""

    name = "reference"

    def __init__(self, table: "Table") -> None:
        self.table = table

    def is_unset(self, value: Any) -> bool:
        return self.bind(value) is Empty

    def bind(self, value: Any) -> "Any | EmptyType":
        if value is None:
            return Empty
        pk = self.table.primary_key
        pk_value = getattr(value, pk.field_name, None)
        return resolve_field_kind(pk.python_type, pk_value).bind(pk_value)


TEXT = TextKind()
INTEGER = IntegerKind()
TIME = TimeKind()
UNSUPPORTED = UnsupportedKind()

_KINDS_BY_TYPE: "dict[type, FieldKind]" = {
    bool: UNSUPPORTED,
    int: INTEGER,
    str: TEXT,
    datetime.datetime: TIME,
    datetime.date: TIME,
}


def register_field_kind(python_type: type, kind: FieldKind) -> None:
    """Use ``kind`` for fields declared as ``python_type`` or a subclass of it."""
    _KINDS_BY_TYPE[python_type] = kind


def resolve_field_kind(python_type: "Optional[type]", value: Any = None) -> FieldKind:
    """Find the kind for a declared type, falling back to the value's runtime type."""
    candidate = python_type if python_type is not None else type(value)
    for base in candidate.__mro__:
        if base in _KINDS_BY_TYPE:
            return _KINDS_BY_TYPE[base]
    return UNSUPPORTED


@dataclass(frozen=True)
class DerivedConditions:
    """Conditions derived from one object.

    ``fragments`` and ``parameters`` are index-aligned. ``skipped`` lists the
    columns left out because their kind is not supported.
    """

    fragments: "tuple[str, ...]" = ()
    parameters: "tuple[Any, ...]" = ()
    skipped: "tuple[str, ...]" = ()

    @property
    def condition_text(self) -> str:
        return " and ".join(self.fragments)

    def __len__(self) -> int:
        return len(self.fragments)


def _column_kind(registry: "MetadataRegistry", column: "Column", value: Any) -> FieldKind:
    declared = column.python_type
    if declared is None and value is not None and registry.is_model(type(value)):
        declared = type(value)
    if declared is not None and registry.is_model(declared):
        return ReferenceKind(registry.auto_map(declared))
    return resolve_field_kind(declared, value)


def derive_conditions(
    registry: "MetadataRegistry",
    dialect: "Dialect",
    table: "Table",
    obj: Any,
) -> DerivedConditions:
    """Turn the set fields of ``obj`` into ``"column" = ?`` conditions.

    Args:
        registry: Registry used to map referenced model types.
        dialect: Dialect used to quote column names.
        table: Table metadata of ``obj``.
        obj: The example object.

    Raises:
        MetadataError: If a referenced model has no primary key.

    Returns:
        DerivedConditions: Fragments and parameters in column declaration order.
    """
    fragments: list[str] = []
    parameters: list[Any] = []
    skipped: list[str] = []
    for column in table.columns:
        value = getattr(obj, column.field_name, None)
        kind = _column_kind(registry, column, value)
        if kind is UNSUPPORTED:
            skipped.append(column.name)
            continue
        bound = kind.bind(value)
        if bound is Empty:
            continue
        fragments.append(f"{dialect.quote(column.name)} = ?")
        parameters.append(bound)

    if skipped:
        logger.debug("Skipped unsupported columns of %s: %s", table.name, ", ".join(skipped))
    return DerivedConditions(tuple(fragments), tuple(parameters), tuple(skipped))
