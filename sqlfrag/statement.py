"""Fragment accumulator for a single logical SQL statement.

A :class:`Statement` collects trusted raw fragments through fluent setters.
Nothing is validated or rendered here; :class:`~sqlfrag.renderer.SQLRenderer`
folds the fragments into final SQL. Call :meth:`Statement.reset` before
reusing an instance for another query.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from typing_extensions import Self

from sqlfrag.dialects import Dialect, get_dialect
from sqlfrag.exceptions import SQLBuilderError
from sqlfrag.typing import StatementParameters
from sqlfrag.utils.text import make_placeholders

if TYPE_CHECKING:
    from sqlfrag.metadata import Table

__all__ = ("Statement",)


def _default_dialect() -> Dialect:
    return get_dialect("postgres")


@dataclass
class Statement:
    """Mutable builder state for one query.

    Example:
        >>> statement = Statement().where("age > ?", 18).order_by("name").limit(10, 20)
        >>> statement.in_("status", "new", "open").where_str
        'age > ? AND status IN (?,?)'
    """

    dialect: Dialect = field(default_factory=_default_dialect)
    ref_table: "Optional[Table]" = None
    alt_table_name: str = ""
    where_str: str = ""
    params: StatementParameters = field(default_factory=list)
    order_str: str = ""
    joins: "list[str]" = field(default_factory=list)
    group_by_str: str = ""
    having_str: str = ""
    column_str: str = ""
    column_map: "set[str]" = field(default_factory=set)
    selected_columns: "list[str]" = field(default_factory=list)
    raw_sql: str = ""
    raw_params: StatementParameters = field(default_factory=list)
    limit_n: int = 0
    start: int = 0
    use_cascade: bool = True
    use_auto_join: bool = False
    store_engine: str = ""
    charset: str = ""

    def reset(self) -> Self:
        """Clear every fragment so no state leaks into the next query.

        The dialect is configuration, not a fragment, and is kept.
        """
        self.ref_table = None
        self.alt_table_name = ""
        self.where_str = ""
        self.params = []
        self.order_str = ""
        self.joins = []
        self.group_by_str = ""
        self.having_str = ""
        self.column_str = ""
        self.column_map = set()
        self.selected_columns = []
        self.raw_sql = ""
        self.raw_params = []
        self.limit_n = 0
        self.start = 0
        self.use_cascade = True
        self.use_auto_join = False
        self.store_engine = ""
        self.charset = ""
        return self

    @property
    def table_name(self) -> str:
        """The override table name, else the metadata table name, else ``""``."""
        return self.resolve_table_name(self.ref_table)

    def resolve_table_name(self, table: "Optional[Table]") -> str:
        if self.alt_table_name:
            return self.alt_table_name
        if table is not None:
            return table.name
        return ""

    @property
    def has_raw_sql(self) -> bool:
        return bool(self.raw_sql)

    def raw(self, sql: str, *params: Any) -> Self:
        """Use ``sql`` verbatim instead of composing fragments.

        Raw SQL takes precedence over every other fragment when the statement
        is executed through a :class:`~sqlfrag.session.Session`.
        """
        self.raw_sql = sql
        self.raw_params = list(params)
        return self

    def where(self, condition: str, *params: Any) -> Self:
        """Replace the WHERE fragment and its parameters."""
        self.where_str = condition
        self.params = list(params)
        return self

    def table(self, name: str) -> Self:
        self.alt_table_name = name
        return self

    def id(self, value: Any) -> Self:
        """Add ``(id) = ?`` to the WHERE fragment."""
        return self._and_where("(id) = ?", [value])

    def in_(self, column: str, *values: Any) -> Self:
        """Add ``column IN (?,...)`` with one placeholder per value.

        Raises:
            SQLBuilderError: If no values are given.
        """
        if not values:
            msg = f"IN condition on {column!r} requires at least one value"
            raise SQLBuilderError(msg)
        return self._and_where(f"{column} IN ({make_placeholders(len(values))})", list(values))

    def cols(self, *columns: str) -> Self:
        """Select only ``columns`` and mark them as selected."""
        self.column_str = ", ".join(self.dialect.quote(column) for column in columns)
        self.selected_columns = list(columns)
        self.column_map.update(columns)
        return self

    def is_selected(self, column: str) -> bool:
        return column in self.column_map

    def limit(self, limit: int, start: "Optional[int]" = None) -> Self:
        """Cap the number of rows, optionally starting at ``start``.

        Raises:
            SQLBuilderError: If ``limit`` or ``start`` is negative.
        """
        if limit < 0 or (start is not None and start < 0):
            msg = f"LIMIT and OFFSET must not be negative, got {limit} and {start}"
            raise SQLBuilderError(msg)
        self.limit_n = limit
        if start is not None:
            self.start = start
        return self

    def order_by(self, order: str) -> Self:
        self.order_str = order
        return self

    def join(self, join_operator: str, table_name: str, condition: str) -> Self:
        """Append a JOIN fragment.

        Args:
            join_operator: Prepended to ``JOIN``, e.g. ``INNER``, ``LEFT OUTER`` or ``CROSS``.
            table_name: Joined table, used verbatim.
            condition: ``ON`` condition, used verbatim.

        Returns:
            The current statement for method chaining.
        """
        self.joins.append(f"{join_operator} JOIN {table_name} ON {condition}")
        return self

    @property
    def join_str(self) -> str:
        return " ".join(self.joins)

    def group_by(self, keys: str) -> Self:
        self.group_by_str = keys
        return self

    def having(self, conditions: str) -> Self:
        self.having_str = conditions
        return self

    def set_engine(self, store_engine: str) -> Self:
        self.store_engine = store_engine
        return self

    def set_charset(self, charset: str) -> Self:
        self.charset = charset
        return self

    def set_cascade(self, enabled: bool = True) -> Self:
        self.use_cascade = enabled
        return self

    def set_auto_join(self, enabled: bool = True) -> Self:
        self.use_auto_join = enabled
        return self

    def _and_where(self, condition: str, params: "list[Any]") -> Self:
        if self.where_str:
            self.where_str = f"{self.where_str} AND {condition}"
            self.params = [*self.params, *params]
        else:
            self.where_str = condition
            self.params = list(params)
        return self
