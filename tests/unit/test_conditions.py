"""Unit tests for deriving WHERE conditions from example objects."""

import datetime
from dataclasses import dataclass, field
from typing import Optional

import msgspec
import pytest

from sqlfrag.conditions import (
    FieldKind,
    IntegerKind,
    TextKind,
    TimeKind,
    UnsupportedKind,
    derive_conditions,
    register_field_kind,
    resolve_field_kind,
)
from sqlfrag.dialects import Dialect
from sqlfrag.exceptions import MetadataError
from sqlfrag.metadata import MetadataRegistry
from sqlfrag.typing import Empty


@dataclass
class Person:
    name: str = ""
    age: int = 0


@dataclass
class Group:
    id: int = 0
    name: str = ""


@dataclass
class Member:
    id: int = 0
    name: str = ""
    group: Optional[Group] = None


@dataclass
class Tag:
    label: str = ""


@dataclass
class Post:
    title: str = ""
    tag: Optional[Tag] = None


@dataclass
class Event:
    title: str = ""
    starts_at: datetime.datetime = datetime.datetime.min
    day: datetime.date = datetime.date.min


@dataclass
class Measurement:
    sensor: str = ""
    value: float = 0.0
    active: bool = False
    labels: "list[str]" = field(default_factory=list)


class Item(msgspec.Struct):
    id: int = 0
    title: str = ""


def test_zero_fields_are_excluded(registry: MetadataRegistry, postgres: Dialect) -> None:
    """{name: "a", age: 0} derives only the name condition."""
    table = registry.register(Person)

    derived = derive_conditions(registry, postgres, table, Person(name="a", age=0))

    assert derived.fragments == ('"name" = ?',)
    assert derived.parameters == ("a",)
    assert derived.condition_text == '"name" = ?'


def test_all_set_fields_follow_declaration_order(registry: MetadataRegistry, postgres: Dialect) -> None:
    table = registry.register(Person)

    derived = derive_conditions(registry, postgres, table, Person(name="a", age=3))

    assert derived.fragments == ('"name" = ?', '"age" = ?')
    assert derived.parameters == ("a", 3)
    assert derived.condition_text == '"name" = ? and "age" = ?'


@pytest.mark.parametrize(
    ("person", "expected"),
    [
        (Person(), ()),
        (Person(name="", age=0), ()),
        (Person(age=-1), ("age",)),
        (Person(name=" "), ("name",)),
        (Person(name="x", age=99), ("name", "age")),
    ],
)
def test_fragments_and_parameters_stay_aligned(
    registry: MetadataRegistry, postgres: Dialect, person: Person, expected: "tuple[str, ...]"
) -> None:
    table = registry.register(Person)

    derived = derive_conditions(registry, postgres, table, person)

    assert len(derived.fragments) == len(derived.parameters) == len(expected)
    assert derived.fragments == tuple(f'"{name}" = ?' for name in expected)


def test_reference_binds_primary_key(registry: MetadataRegistry, postgres: Dialect) -> None:
    table = registry.register(Member)

    derived = derive_conditions(registry, postgres, table, Member(group=Group(id=7, name="ops")))

    assert derived.fragments == ('"group" = ?',)
    assert derived.parameters == (7,)


def test_reference_without_primary_key_value_is_excluded(registry: MetadataRegistry, postgres: Dialect) -> None:
    table = registry.register(Member)

    derived = derive_conditions(registry, postgres, table, Member(name="a", group=Group(name="ops")))

    assert derived.fragments == ('"name" = ?',)
    assert derived.parameters == ("a",)


def test_reference_registers_nested_type(registry: MetadataRegistry, postgres: Dialect) -> None:
    """Meeting a referenced model maps it even when the field is empty."""
    table = registry.register(Member)
    assert Group not in registry

    derive_conditions(registry, postgres, table, Member())

    assert Group in registry


def test_reference_to_table_without_primary_key_raises(registry: MetadataRegistry, postgres: Dialect) -> None:
    table = registry.register(Post)

    with pytest.raises(MetadataError):
        derive_conditions(registry, postgres, table, Post(tag=Tag(label="x")))


def test_zero_instants_are_excluded(registry: MetadataRegistry, postgres: Dialect) -> None:
    table = registry.register(Event)

    assert len(derive_conditions(registry, postgres, table, Event())) == 0

    starts_at = datetime.datetime(2024, 5, 1, 12, 30)
    derived = derive_conditions(
        registry, postgres, table, Event(starts_at=starts_at, day=datetime.date(2024, 5, 1))
    )
    assert derived.fragments == ('"starts_at" = ?', '"day" = ?')
    assert derived.parameters == (starts_at, datetime.date(2024, 5, 1))


def test_unsupported_kinds_are_skipped_and_reported(registry: MetadataRegistry, postgres: Dialect) -> None:
    table = registry.register(Measurement)

    derived = derive_conditions(
        registry, postgres, table, Measurement(sensor="t1", value=2.5, active=True, labels=["a"])
    )

    assert derived.fragments == ('"sensor" = ?',)
    assert derived.parameters == ("t1",)
    assert derived.skipped == ("value", "active", "labels")


def test_msgspec_struct_models(registry: MetadataRegistry, postgres: Dialect) -> None:
    table = registry.register(Item)

    derived = derive_conditions(registry, postgres, table, Item(title="lamp"))

    assert derived.fragments == ('"title" = ?',)
    assert derived.parameters == ("lamp",)


def test_mysql_quoting(registry: MetadataRegistry, mysql: Dialect) -> None:
    table = registry.register(Person)

    derived = derive_conditions(registry, mysql, table, Person(name="a"))

    assert derived.fragments == ("`name` = ?",)


def test_resolve_field_kind() -> None:
    assert isinstance(resolve_field_kind(str), TextKind)
    assert isinstance(resolve_field_kind(int), IntegerKind)
    assert isinstance(resolve_field_kind(bool), UnsupportedKind)
    assert isinstance(resolve_field_kind(datetime.datetime), TimeKind)
    assert isinstance(resolve_field_kind(datetime.date), TimeKind)
    assert isinstance(resolve_field_kind(None, "runtime"), TextKind)
    assert isinstance(resolve_field_kind(dict), UnsupportedKind)


def test_none_is_unset_for_every_kind() -> None:
    for kind in (TextKind(), IntegerKind(), TimeKind(), UnsupportedKind()):
        assert kind.bind(None) is Empty


class Money:
    def __init__(self, cents: int) -> None:
        self.cents = cents


class MoneyKind(FieldKind):
    name = "money"

    def is_unset(self, value: "Money") -> bool:
        return value.cents == 0

    def bind(self, value: "Money") -> object:
        bound = super().bind(value)
        return bound if bound is not value else value.cents


@dataclass
class Invoice:
    number: str = ""
    total: Optional[Money] = None


def test_register_field_kind_extends_policy(registry: MetadataRegistry, postgres: Dialect) -> None:
    register_field_kind(Money, MoneyKind())
    table = registry.register(Invoice)

    derived = derive_conditions(registry, postgres, table, Invoice(total=Money(250)))
    empty = derive_conditions(registry, postgres, table, Invoice(total=Money(0)))

    assert derived.fragments == ('"total" = ?',)
    assert derived.parameters == (250,)
    assert len(empty) == 0
