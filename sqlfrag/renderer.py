"""Render accumulated statement fragments into SQL text.

The renderer never writes to the :class:`~sqlfrag.statement.Statement` it is
given. Conditions derived from an example object are threaded through as
local values, so the same statement can be rendered repeatedly.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from mypy_extensions import mypyc_attr

from sqlfrag.conditions import derive_conditions
from sqlfrag.exceptions import ImproperConfigurationError, MetadataError
from sqlfrag.metadata import MapType
from sqlfrag.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlfrag.dialects import Dialect
    from sqlfrag.metadata import MetadataRegistry, Table
    from sqlfrag.statement import Statement

__all__ = (
    "COUNT_PROJECTION",
    "SQLRenderer",
    "SafeQuery",
)

logger = get_logger("sqlfrag.renderer")

COUNT_PROJECTION = "count(*) as total"


@dataclass(frozen=True)
class SafeQuery:
    """SQL text with positional parameters in placeholder order."""

    sql: str
    parameters: "tuple[Any, ...]" = field(default_factory=tuple)


@mypyc_attr(allow_interpreted_subclasses=True)
class SQLRenderer:
    """Folds statement fragments and derived conditions into SQL.

    Args:
        registry: Metadata registry used to map example objects.
        dialect: Dialect used for quoting and table options.
    """

    __slots__ = ("dialect", "registry")

    def __init__(self, registry: "MetadataRegistry", dialect: "Dialect") -> None:
        self.registry = registry
        self.dialect = dialect

    def _require_table(self, statement: "Statement", table: "Optional[Table]") -> "Table":
        table = table if table is not None else statement.ref_table
        if table is None:
            msg = "Statement has no table metadata to render against"
            raise ImproperConfigurationError(msg)
        return table

    def render_select_columns(self, statement: "Statement", table: "Optional[Table]" = None) -> str:
        """Default projection: every readable column qualified by the table name.

        Raises:
            MetadataError: If the table has no readable columns.
        """
        table = self._require_table(statement, table)
        table_name = statement.resolve_table_name(table)
        quoted_table = self.dialect.quote(table_name)
        columns = [
            f"{quoted_table}.{self.dialect.quote(column.name)}"
            for column in table.columns
            if column.map_type is not MapType.ONLY_TO_DB
        ]
        if not columns:
            msg = "Cannot select from a table without readable columns"
            raise MetadataError(msg, table=table_name)
        return ", ".join(columns)

    def render_selected_columns(self, statement: "Statement") -> str:
        """Projection chosen with :meth:`Statement.cols`, quoted for this dialect."""
        return ", ".join(self.dialect.quote(column) for column in statement.selected_columns)

    def render_select(
        self,
        statement: "Statement",
        columns: str,
        table: "Optional[Table]" = None,
        condition: str = "",
    ) -> str:
        """Compose a SELECT statement.

        Args:
            statement: Fragments to render.
            columns: Projection text.
            table: Table metadata, defaults to ``statement.ref_table``.
            condition: Derived conditions, combined with the explicit WHERE
                fragment using ``and``.

        Returns:
            str: The SELECT statement.
        """
        table_name = statement.resolve_table_name(table if table is not None else statement.ref_table)
        if not table_name:
            msg = "Statement has no table to select from"
            raise ImproperConfigurationError(msg)

        sql = f"SELECT {columns} FROM {self.dialect.quote(table_name)}"
        if statement.joins:
            sql = f"{sql} {statement.join_str}"
        if statement.where_str and condition:
            sql = f"{sql} WHERE {statement.where_str} and {condition}"
        elif statement.where_str or condition:
            sql = f"{sql} WHERE {statement.where_str or condition}"
        if statement.group_by_str:
            keys = ",".join(self.dialect.quote(key.strip()) for key in statement.group_by_str.split(","))
            sql = f"{sql} GROUP BY {keys}"
        if statement.having_str:
            sql = f"{sql} HAVING {statement.having_str}"
        if statement.order_str:
            sql = f"{sql} ORDER BY {statement.order_str}"
        if statement.start > 0:
            sql = f"{sql} LIMIT {statement.limit_n} OFFSET {statement.start}"
        elif statement.limit_n > 0:
            sql = f"{sql} LIMIT {statement.limit_n}"
        return sql

    def render_get_by_example(self, statement: "Statement", obj: Any) -> SafeQuery:
        """SELECT rows matching the set fields of ``obj``."""
        return self._render_by_example(statement, obj, count=False)

    def render_count_by_example(self, statement: "Statement", obj: Any) -> SafeQuery:
        """SELECT the number of rows matching the set fields of ``obj``."""
        return self._render_by_example(statement, obj, count=True)

    def _render_by_example(self, statement: "Statement", obj: Any, count: bool) -> SafeQuery:
        table = self.registry.auto_map(obj)
        derived = derive_conditions(self.registry, self.dialect, table, obj)
        if count:
            columns = COUNT_PROJECTION
        else:
            columns = self.render_selected_columns(statement) or self.render_select_columns(statement, table)
        sql = self.render_select(statement, columns, table, derived.condition_text)
        logger.debug("Rendered %s with %d derived conditions", "count" if count else "select", len(derived))
        return SafeQuery(sql, (*statement.params, *derived.parameters))

    def render_create_table(self, statement: "Statement", table: "Optional[Table]" = None) -> str:
        """``CREATE TABLE IF NOT EXISTS`` with engine and charset options.

        Raises:
            MetadataError: If the table has no columns.
        """
        table = self._require_table(statement, table)
        table_name = statement.resolve_table_name(table)
        if not table.columns:
            msg = "Cannot create a table without columns"
            raise MetadataError(msg, table=table_name)

        definitions = ", ".join(self.dialect.column_definition(column).strip() for column in table.columns)
        sql = f"CREATE TABLE IF NOT EXISTS {self.dialect.quote(table_name)} ({definitions})"
        if self.dialect.supports_storage_engine() and statement.store_engine:
            sql += f" ENGINE={statement.store_engine}"
        if self.dialect.supports_charset() and statement.charset:
            sql += f" DEFAULT CHARSET {statement.charset}"
        return f"{sql};"

    def render_create_indexes(self, statement: "Statement", table: "Optional[Table]" = None) -> "list[str]":
        table = self._require_table(statement, table)
        return self._render_indexes(statement.resolve_table_name(table), table.indexes, unique=False)

    def render_create_unique_indexes(self, statement: "Statement", table: "Optional[Table]" = None) -> "list[str]":
        table = self._require_table(statement, table)
        return self._render_indexes(statement.resolve_table_name(table), table.uniques, unique=True)

    @staticmethod
    def _render_indexes(table_name: str, indexes: "dict[str, list[str]]", unique: bool) -> "list[str]":
        keyword, prefix = ("UNIQUE INDEX", "UQE") if unique else ("INDEX", "IDX")
        return [
            f"CREATE {keyword} {prefix}_{table_name}_{index_name} ON {table_name} ({','.join(columns)});"
            for index_name, columns in indexes.items()
        ]

    def render_drop_table(self, statement: "Statement", table: "Optional[Table]" = None) -> str:
        table_name = statement.resolve_table_name(table if table is not None else statement.ref_table)
        if not table_name:
            msg = "Statement has no table to drop"
            raise ImproperConfigurationError(msg)
        return f"DROP TABLE IF EXISTS {self.dialect.quote(table_name)};"
