"""Dialect rules for identifier quoting, type names and table options.

Quoting and type spelling are delegated to sqlglot, so any dialect sqlglot
knows can be registered with :func:`register_dialect`.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

from mypy_extensions import mypyc_attr
from sqlglot import exp
from sqlglot.errors import SqlglotError

from sqlfrag.exceptions import ImproperConfigurationError, SQLBuilderError

if TYPE_CHECKING:
    from sqlfrag.metadata import Column

__all__ = (
    "Dialect",
    "get_dialect",
    "is_registered_dialect",
    "list_registered_dialects",
    "register_dialect",
)


@mypyc_attr(allow_interpreted_subclasses=True)
@dataclass(frozen=True)
class Dialect:
    """Database-specific quoting and feature support.

    Attributes:
        name: sqlglot dialect name used for quoting and type rendering.
        engine_support: Whether ``ENGINE=`` may follow ``CREATE TABLE``.
        charset_support: Whether ``DEFAULT CHARSET`` may follow ``CREATE TABLE``.
        auto_increment: Keyword appended to auto-increment primary keys.
        serial_types: Replacement types for auto-increment columns, keyed by
            the rendered type. Takes precedence over ``auto_increment``.
    """

    name: str
    engine_support: bool = False
    charset_support: bool = False
    auto_increment: str = ""
    serial_types: "Mapping[str, str]" = field(default_factory=dict)

    def quote(self, identifier: str) -> str:
        """Quote an identifier; dotted names are quoted per part."""
        return ".".join(
            exp.to_identifier(part, quoted=True).sql(dialect=self.name) for part in identifier.split(".")
        )

    def supports_storage_engine(self) -> bool:
        return self.engine_support

    def supports_charset(self) -> bool:
        return self.charset_support

    def render_type(self, sql_type: str) -> str:
        """Spell ``sql_type`` the way this dialect expects.

        Raises:
            SQLBuilderError: If the type cannot be parsed.
        """
        try:
            return exp.DataType.build(sql_type, dialect=self.name).sql(dialect=self.name)
        except (SqlglotError, ValueError) as e:
            msg = f"Unsupported column type {sql_type!r} for dialect {self.name}: {e}"
            raise SQLBuilderError(msg) from e

    def column_definition(self, column: "Column") -> str:
        """Render the ``CREATE TABLE`` definition of a single column."""
        sql_type = self.render_type(column.sql_type)
        serial_type = self.serial_types.get(sql_type.upper()) if column.auto_increment else None
        parts = [self.quote(column.name), serial_type or sql_type]
        if column.primary_key:
            parts.append("PRIMARY KEY")
        if column.auto_increment and serial_type is None and self.auto_increment:
            parts.append(self.auto_increment)
        if not column.nullable:
            parts.append("NOT NULL")
        if column.default is not None:
            parts.append(f"DEFAULT {column.default}")
        return " ".join(parts)


_DIALECTS: "dict[str, Dialect]" = {}
_ALIASES = {"postgresql": "postgres", "sqlite3": "sqlite", "mariadb": "mysql"}


def register_dialect(dialect: Dialect) -> None:
    """Register a dialect under its name, replacing any previous registration."""
    _DIALECTS[dialect.name] = dialect


def get_dialect(dialect: "Union[str, Dialect]") -> Dialect:
    """Resolve a dialect by name.

    Args:
        dialect: Dialect name or an already resolved :class:`Dialect`.

    Raises:
        ImproperConfigurationError: When the dialect is unknown.

    Returns:
        The registered dialect.
    """
    if isinstance(dialect, Dialect):
        return dialect
    name = _ALIASES.get(dialect.lower(), dialect.lower())
    if name not in _DIALECTS:
        msg = f"Unknown dialect: {dialect}. Available: {', '.join(list_registered_dialects())}"
        raise ImproperConfigurationError(msg)
    return _DIALECTS[name]


def list_registered_dialects() -> "list[str]":
    return sorted(_DIALECTS)


def is_registered_dialect(name: str) -> bool:
    return _ALIASES.get(name.lower(), name.lower()) in _DIALECTS


register_dialect(Dialect("mysql", engine_support=True, charset_support=True, auto_increment="AUTO_INCREMENT"))
register_dialect(
    Dialect(
        "postgres",
        serial_types={"BIGINT": "BIGSERIAL", "INT": "SERIAL", "INTEGER": "SERIAL", "SMALLINT": "SMALLSERIAL"},
    )
)
register_dialect(Dialect("sqlite", auto_increment="AUTOINCREMENT"))
register_dialect(Dialect("duckdb"))
