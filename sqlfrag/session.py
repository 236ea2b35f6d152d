"""Session facade pairing one statement with its registry, dialect and config.

A session produces :class:`~sqlfrag.renderer.SafeQuery` objects for an
external execution layer. Raw SQL set with :meth:`Session.raw` always wins
over composed fragments.
"""

from typing import TYPE_CHECKING, Any, Optional

from typing_extensions import Self

from sqlfrag.config import StatementConfig
from sqlfrag.dialects import get_dialect
from sqlfrag.exceptions import ImproperConfigurationError
from sqlfrag.metadata import MetadataRegistry
from sqlfrag.renderer import SafeQuery, SQLRenderer
from sqlfrag.statement import Statement
from sqlfrag.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlfrag.dialects import Dialect
    from sqlfrag.metadata import Table

__all__ = ("Session",)

logger = get_logger("sqlfrag.session")


class Session:
    """Fluent entry point for building statements against mapped models.

    Example:
        >>> session = Session(MetadataRegistry())
        >>> query = session.where("age > ?", 18).limit(10).get_query(User(name="a"))
        >>> query.sql
        'SELECT ... FROM "user" WHERE age > ? and "name" = ? LIMIT 10'
        >>> query.parameters
        (18, 'a')
    """

    __slots__ = ("config", "dialect", "registry", "renderer", "statement")

    def __init__(
        self,
        registry: "Optional[MetadataRegistry]" = None,
        config: "Optional[StatementConfig]" = None,
        dialect: "Optional[Dialect]" = None,
    ) -> None:
        self.config = config or StatementConfig()
        if errors := self.config.validate():
            msg = f"Invalid statement configuration: {'; '.join(errors)}"
            raise ImproperConfigurationError(msg)
        self.registry = registry if registry is not None else MetadataRegistry()
        self.dialect = dialect or get_dialect(self.config.dialect)
        self.renderer = SQLRenderer(self.registry, self.dialect)
        self.statement = Statement(dialect=self.dialect)
        self.reset()

    def reset(self) -> Self:
        """Start a new statement with the configured defaults."""
        self.statement.reset()
        self.statement.store_engine = self.config.store_engine
        self.statement.charset = self.config.charset
        self.statement.use_cascade = self.config.use_cascade
        return self

    def raw(self, sql: str, *params: Any) -> Self:
        self.statement.raw(sql, *params)
        return self

    def where(self, condition: str, *params: Any) -> Self:
        self.statement.where(condition, *params)
        return self

    def table(self, name: str) -> Self:
        self.statement.table(name)
        return self

    def id(self, value: Any) -> Self:
        self.statement.id(value)
        return self

    def in_(self, column: str, *values: Any) -> Self:
        self.statement.in_(column, *values)
        return self

    def cols(self, *columns: str) -> Self:
        self.statement.cols(*columns)
        return self

    def limit(self, limit: int, start: "Optional[int]" = None) -> Self:
        self.statement.limit(limit, start)
        return self

    def order_by(self, order: str) -> Self:
        self.statement.order_by(order)
        return self

    def join(self, join_operator: str, table_name: str, condition: str) -> Self:
        self.statement.join(join_operator, table_name, condition)
        return self

    def group_by(self, keys: str) -> Self:
        self.statement.group_by(keys)
        return self

    def having(self, conditions: str) -> Self:
        self.statement.having(conditions)
        return self

    def set_engine(self, store_engine: str) -> Self:
        self.statement.set_engine(store_engine)
        return self

    def set_charset(self, charset: str) -> Self:
        self.statement.set_charset(charset)
        return self

    def set_cascade(self, enabled: bool = True) -> Self:
        self.statement.set_cascade(enabled)
        return self

    def get_query(self, obj: Any) -> SafeQuery:
        """SELECT rows like ``obj``, or the raw SQL when one was set."""
        if (raw := self._raw_query()) is not None:
            return raw
        return self._finish(self.renderer.render_get_by_example(self.statement, obj))

    def count_query(self, obj: Any) -> SafeQuery:
        """Count rows like ``obj``, or the raw SQL when one was set."""
        if (raw := self._raw_query()) is not None:
            return raw
        return self._finish(self.renderer.render_count_by_example(self.statement, obj))

    def create_table_queries(self, model: "type[Any]") -> "list[SafeQuery]":
        """CREATE TABLE followed by its CREATE INDEX and CREATE UNIQUE INDEX statements."""
        table = self._map(model)
        statements = [
            self.renderer.render_create_table(self.statement, table),
            *self.renderer.render_create_indexes(self.statement, table),
            *self.renderer.render_create_unique_indexes(self.statement, table),
        ]
        return self._finish_all([SafeQuery(sql) for sql in statements])

    def drop_table_query(self, model: "type[Any]") -> SafeQuery:
        table = self._map(model)
        return self._finish(SafeQuery(self.renderer.render_drop_table(self.statement, table)))

    def _map(self, model: "type[Any]") -> "Table":
        table = self.registry.auto_map(model)
        self.statement.ref_table = table
        return table

    def _raw_query(self) -> "Optional[SafeQuery]":
        if not self.statement.has_raw_sql:
            return None
        if self.statement.where_str or self.statement.joins or self.statement.order_str or self.statement.limit_n:
            logger.debug("Raw SQL set; ignoring accumulated fragments")
        return self._finish(SafeQuery(self.statement.raw_sql, tuple(self.statement.raw_params)))

    def _finish(self, query: SafeQuery) -> SafeQuery:
        if self.config.auto_reset:
            self.reset()
        return query

    def _finish_all(self, queries: "list[SafeQuery]") -> "list[SafeQuery]":
        if self.config.auto_reset:
            self.reset()
        return queries
