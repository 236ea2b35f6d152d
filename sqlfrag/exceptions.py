from typing import Any, Optional

__all__ = (
    "ImproperConfigurationError",
    "MetadataError",
    "SQLBuilderError",
    "SQLFragError",
)


class SQLFragError(Exception):
    """Base exception class from which all sqlfrag exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLFragError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(SQLFragError):
    """Improper Configuration error.

    Raised when a statement, session or dialect is used in a state that cannot
    produce SQL, such as rendering without table metadata.
    """


class MetadataError(ImproperConfigurationError):
    """Table metadata cannot support the requested SQL.

    Raised for tables without columns, references to tables without a primary
    key, and model types that cannot be reflected.
    """

    table: Optional[str]

    def __init__(self, message: str, table: Optional[str] = None) -> None:
        detail_message = message
        if table:
            detail_message = f"{message} (Table: {table})"
        super().__init__(detail=detail_message)
        self.table = table


class SQLBuilderError(SQLFragError):
    """Issues Building or Generating SQL statements."""

    def __init__(self, message: Optional[str] = None) -> None:
        if message is None:
            message = "Issues building SQL statement."
        super().__init__(message)
