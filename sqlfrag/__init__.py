"""sqlfrag: fragment-accumulating SQL statement builder."""

from sqlfrag import config, exceptions, typing, utils
from sqlfrag.__metadata__ import __version__
from sqlfrag.conditions import DerivedConditions, FieldKind, derive_conditions, register_field_kind
from sqlfrag.config import StatementConfig, load_config_from_env
from sqlfrag.dialects import Dialect, get_dialect, register_dialect
from sqlfrag.exceptions import ImproperConfigurationError, MetadataError, SQLBuilderError, SQLFragError
from sqlfrag.metadata import Column, ColumnOptions, MapType, MetadataRegistry, Table
from sqlfrag.renderer import SafeQuery, SQLRenderer
from sqlfrag.session import Session
from sqlfrag.statement import Statement

__all__ = (
    "Column",
    "ColumnOptions",
    "DerivedConditions",
    "Dialect",
    "FieldKind",
    "ImproperConfigurationError",
    "MapType",
    "MetadataError",
    "MetadataRegistry",
    "SQLBuilderError",
    "SQLFragError",
    "SQLRenderer",
    "SafeQuery",
    "Session",
    "Statement",
    "StatementConfig",
    "Table",
    "__version__",
    "config",
    "derive_conditions",
    "exceptions",
    "get_dialect",
    "load_config_from_env",
    "register_dialect",
    "register_field_kind",
    "typing",
    "utils",
)
