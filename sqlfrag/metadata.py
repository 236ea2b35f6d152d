"""Table metadata reflected from model classes.

Models are plain dataclasses or ``msgspec.Struct`` subclasses. Column details
that cannot be inferred from the annotation are attached with
``Annotated[T, ColumnOptions(...)]``:

    >>> @dataclass
    ... class User:
    ...     id: int = 0
    ...     email: Annotated[str, ColumnOptions(length=320, unique=True)] = ""
    ...     group: Optional[Group] = None
    >>> registry = MetadataRegistry()
    >>> registry.register(User).primary_key.name
    'id'

The registry is always passed explicitly; there is no process-wide mapping.
"""

import dataclasses
import datetime
import decimal
import types
import typing
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Optional, Union

import msgspec

from sqlfrag.exceptions import MetadataError
from sqlfrag.utils.logging import get_logger
from sqlfrag.utils.text import snake_case

__all__ = (
    "Column",
    "ColumnOptions",
    "MapType",
    "MetadataRegistry",
    "Table",
)

logger = get_logger("sqlfrag.metadata")

_UNION_TYPES: "tuple[Any, ...]" = (Union, types.UnionType)


class MapType(Enum):
    """Direction in which a column takes part in statements."""

    BOTH = "both"
    ONLY_TO_DB = "only_to_db"
    """Write-only: never part of a SELECT projection."""
    ONLY_FROM_DB = "only_from_db"
    """Read-only: never written."""


@dataclass(frozen=True)
class ColumnOptions:
    """Column configuration attached to a field through ``typing.Annotated``.

    ``index`` and ``unique`` accept ``True`` (an index named after the column)
    or a name; fields sharing a name form a composite index.
    """

    name: "Optional[str]" = None
    sql_type: "Optional[str]" = None
    length: "Optional[int]" = None
    primary_key: bool = False
    auto_increment: bool = False
    nullable: "Optional[bool]" = None
    default: "Optional[str]" = None
    index: "Union[str, bool, None]" = None
    unique: "Union[str, bool, None]" = None
    map_type: MapType = MapType.BOTH
    ignore: bool = False


@dataclass
class Column:
    """A mapped column."""

    name: str
    field_name: str
    python_type: "Optional[type]" = None
    sql_type: str = "TEXT"
    map_type: MapType = MapType.BOTH
    nullable: bool = True
    primary_key: bool = False
    auto_increment: bool = False
    default: "Optional[str]" = None


@dataclass
class Table:
    """Schema description of a mapped model.

    ``indexes`` and ``uniques`` map an index name to its column names and keep
    declaration order.
    """

    name: str
    model: "Optional[type]" = None
    columns: "list[Column]" = field(default_factory=list)
    indexes: "dict[str, list[str]]" = field(default_factory=dict)
    uniques: "dict[str, list[str]]" = field(default_factory=dict)

    @property
    def primary_key(self) -> Column:
        """The primary key column.

        Raises:
            MetadataError: If no column is flagged as primary key.
        """
        for column in self.columns:
            if column.primary_key:
                return column
        msg = "Table has no primary key column"
        raise MetadataError(msg, table=self.name)

    @property
    def column_names(self) -> "list[str]":
        return [column.name for column in self.columns]

    def get_column(self, name: str) -> "Optional[Column]":
        for column in self.columns:
            if column.name == name:
                return column
        return None


def is_model_type(tp: Any) -> bool:
    """Check whether ``tp`` is a class the registry can reflect."""
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, msgspec.Struct)


def _model_field_names(model: type) -> "list[str]":
    if dataclasses.is_dataclass(model):
        return [f.name for f in dataclasses.fields(model)]
    return list(model.__struct_fields__)  # type: ignore[attr-defined]


def _unwrap_annotation(annotation: Any) -> "tuple[Any, Optional[ColumnOptions], bool]":
    """Split an annotation into (base type, column options, optional flag)."""
    options: Optional[ColumnOptions] = None
    optional = False
    if typing.get_origin(annotation) is Annotated:
        annotation, *extras = typing.get_args(annotation)
        options = next((extra for extra in extras if isinstance(extra, ColumnOptions)), None)
    if typing.get_origin(annotation) in _UNION_TYPES:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        optional = len(members) != len(typing.get_args(annotation))
        annotation = members[0] if len(members) == 1 else Any
    origin = typing.get_origin(annotation)
    if origin is not None:
        annotation = origin if isinstance(origin, type) else Any
    return annotation, options, optional


def _default_sql_type(python_type: Any, length: "Optional[int]") -> str:
    if is_model_type(python_type):
        return "BIGINT"
    if not isinstance(python_type, type):
        return "TEXT"
    if issubclass(python_type, bool):
        return "BOOLEAN"
    if issubclass(python_type, int):
        return "BIGINT"
    if issubclass(python_type, float):
        return "DOUBLE"
    if issubclass(python_type, decimal.Decimal):
        return "DECIMAL"
    if issubclass(python_type, str):
        return f"VARCHAR({length or 255})"
    if issubclass(python_type, datetime.datetime):
        return "TIMESTAMP"
    if issubclass(python_type, datetime.date):
        return "DATE"
    if issubclass(python_type, bytes):
        return "BLOB"
    return "TEXT"


def _index_name(value: "Union[str, bool, None]", column_name: str) -> "Optional[str]":
    if value is None or value is False:
        return None
    if value is True:
        return column_name
    return value


class MetadataRegistry:
    """Maps model types to their :class:`Table` metadata.

    Tables are reflected on first use and cached per registry instance.
    """

    __slots__ = ("_tables",)

    def __init__(self) -> None:
        self._tables: dict[type, Table] = {}

    def __contains__(self, model: object) -> bool:
        return model in self._tables

    def __len__(self) -> int:
        return len(self._tables)

    def get(self, model: type) -> "Optional[Table]":
        return self._tables.get(model)

    def is_model(self, tp: Any) -> bool:
        return is_model_type(tp)

    def auto_map(self, obj: Any) -> Table:
        """Return the table for a model instance or class, registering it on first use."""
        model = obj if isinstance(obj, type) else type(obj)
        return self.register(model)

    def register(self, model: type) -> Table:
        """Reflect ``model`` into a :class:`Table` and cache it.

        Args:
            model: A dataclass or ``msgspec.Struct`` subclass.

        Raises:
            MetadataError: If ``model`` is not a supported model type or its
                annotations cannot be resolved.

        Returns:
            Table: The registered table metadata.
        """
        table = self._tables.get(model)
        if table is not None:
            return table
        if not is_model_type(model):
            msg = f"Cannot map {model!r}: expected a dataclass or msgspec.Struct type"
            raise MetadataError(msg)

        table = self._reflect(model)
        self._tables[model] = table
        logger.debug(
            "Registered table %s for %s with %d columns",
            table.name,
            model.__qualname__,
            len(table.columns),
        )
        return table

    def clear(self) -> None:
        self._tables.clear()

    def _reflect(self, model: type) -> Table:
        table_name = getattr(model, "__tablename__", None) or snake_case(model.__name__)
        try:
            hints = typing.get_type_hints(model, include_extras=True)
        except NameError as e:
            msg = f"Cannot resolve annotations of {model.__qualname__}: {e}"
            raise MetadataError(msg, table=table_name) from e

        table = Table(name=table_name, model=model)
        for field_name in _model_field_names(model):
            python_type, options, optional = _unwrap_annotation(hints.get(field_name, Any))
            options = options or ColumnOptions()
            if options.ignore:
                continue
            column = Column(
                name=options.name or snake_case(field_name),
                field_name=field_name,
                python_type=python_type if isinstance(python_type, type) and python_type is not Any else None,
                sql_type=options.sql_type or _default_sql_type(python_type, options.length),
                map_type=options.map_type,
                nullable=optional if options.nullable is None else options.nullable,
                primary_key=options.primary_key,
                auto_increment=options.auto_increment,
                default=options.default,
            )
            table.columns.append(column)
            if (index_name := _index_name(options.index, column.name)) is not None:
                table.indexes.setdefault(index_name, []).append(column.name)
            if (unique_name := _index_name(options.unique, column.name)) is not None:
                table.uniques.setdefault(unique_name, []).append(column.name)

        if not any(column.primary_key for column in table.columns):
            candidate = table.get_column("id")
            if candidate is not None and candidate.python_type is int:
                candidate.primary_key = True
                candidate.auto_increment = True

        for column in table.columns:
            if column.primary_key:
                column.nullable = False
        return table
