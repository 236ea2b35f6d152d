from __future__ import annotations

from pathlib import Path

import pytest

from sqlfrag.dialects import Dialect, get_dialect
from sqlfrag.metadata import Column, MapType, MetadataRegistry, Table
from sqlfrag.renderer import SQLRenderer
from sqlfrag.statement import Statement

here = Path(__file__).parent
root_path = here.parent


@pytest.fixture
def registry() -> MetadataRegistry:
    return MetadataRegistry()


@pytest.fixture
def postgres() -> Dialect:
    return get_dialect("postgres")


@pytest.fixture
def mysql() -> Dialect:
    return get_dialect("mysql")


@pytest.fixture
def user_table() -> Table:
    """A hand-built table so renderer tests do not depend on reflection."""
    return Table(
        name="user",
        columns=[
            Column(name="id", field_name="id", python_type=int, sql_type="BIGINT", primary_key=True),
            Column(name="name", field_name="name", python_type=str, sql_type="VARCHAR(255)"),
            Column(name="age", field_name="age", python_type=int, sql_type="BIGINT"),
            Column(
                name="secret",
                field_name="secret",
                python_type=str,
                sql_type="VARCHAR(64)",
                map_type=MapType.ONLY_TO_DB,
            ),
        ],
        indexes={"age": ["age"], "name_age": ["name", "age"]},
        uniques={"name": ["name"]},
    )


@pytest.fixture
def statement(postgres: Dialect, user_table: Table) -> Statement:
    return Statement(dialect=postgres, ref_table=user_table)


@pytest.fixture
def renderer(registry: MetadataRegistry, postgres: Dialect) -> SQLRenderer:
    return SQLRenderer(registry, postgres)
