"""Shared record models for form codec tests."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Annotated, Any, Self

import msgspec

from serde_form import Float32, Int8, Uint8


def form(tag: str) -> msgspec.Meta:
    """Return a msgspec Meta carrying a form tag.

    Returns
    -------
    msgspec.Meta
        Meta with ``extra={"form": tag}``.
    """
    return msgspec.Meta(extra={"form": tag})


class FormDate:
    """Date rendered as ``YYYY.MM.DD`` on the wire."""

    __slots__ = ("value",)

    def __init__(self, value: dt.date) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FormDate) and other.value == self.value

    def __hash__(self) -> int:
        return hash(self.value)

    def __repr__(self) -> str:
        return f"FormDate({self.value!r})"

    def __form_encode__(self) -> str:
        value = self.value
        return f"{value.year:04d}.{value.month:02d}.{value.day:02d}"

    @classmethod
    def __form_decode__(cls, text: str) -> Self:
        year, month, day = (int(part) for part in text.split("."))
        return cls(dt.date(year, month, day))


class Animal(IntEnum):
    """Pet kinds with a custom wire name."""

    UNKNOWN = 0
    GOPHER = 1
    ZEBRA = 2

    def __form_encode__(self) -> str:
        return self.name.lower()

    @classmethod
    def __form_decode__(cls, text: str) -> Animal:
        return cls.__members__.get(text.upper(), cls.UNKNOWN)


class Color(StrEnum):
    """Plain enum decoded by value."""

    RED = "red"
    BLUE = "blue"


class Person(msgspec.Struct):
    """Minimal record with an omitempty field."""

    name: Annotated[str, form("name")] = ""
    age: Annotated[int, form("age,omitempty")] = 0
    pronouns: Annotated[list[str], form("pronouns")] = []


class Address(msgspec.Struct):
    """Postal address."""

    street: Annotated[str, form("street")] = ""
    city: Annotated[str, form("city")] = ""
    state: Annotated[str, form("state")] = ""
    zip: Annotated[str, form("zip")] = ""


class User(msgspec.Struct):
    """Record with a nested record."""

    name: Annotated[str, form("name")] = ""
    age: Annotated[int, form("age,omitempty")] = 0
    address: Annotated[Address, form("address")] = msgspec.field(default_factory=Address)


class ComplexPerson(msgspec.Struct):
    """Record exercising hooks, ignore and optional fields."""

    id: Annotated[int, form("id")] = 0
    name: Annotated[str, form("name")] = ""
    age: Annotated[int, form("age,omitempty")] = 0
    pronouns: Annotated[list[str], form("pronouns,omitempty")] = []
    created_at: Annotated[FormDate, form("created_at")] = msgspec.field(
        default_factory=lambda: FormDate(dt.date(1, 1, 1))
    )
    private: Annotated[str, form("-")] = ""
    optional: Annotated[str | None, form("optional,omitempty")] = None


@dataclass
class IgnoredFieldsForm:
    """Dataclass covering every tag form."""

    public: str = field(default="", metadata={"form": "public"})
    private: str = field(default="", metadata={"form": "-"})
    ignored: str = field(default="", metadata={"form": ",ignore"})
    NoTag: str = ""
    Empty: str = field(default="", metadata={"form": ""})
    omitted: str = field(default="", metadata={"form": ",omitempty"})
    complex: FormDate | None = field(default=None, metadata={"form": "complex,omitempty"})


@dataclass(frozen=True)
class FrozenPoint:
    """Immutable record decoded via replacement."""

    x: int = 0
    y: int = 0
    label: str = ""


class PetOwner(msgspec.Struct):
    """Record with an enum carrying its own form hook."""

    owner_name: Annotated[str, form("owner_name")] = ""
    pet_type: Annotated[Animal, form("pet_type")] = Animal.UNKNOWN


class Widths(msgspec.Struct):
    """Record with bounded numeric fields."""

    small: Int8 = 0
    byte: Uint8 = 0
    ratio: Float32 = 0.0
    precise: float = 0.0
    flag: bool = False


class Catalog(msgspec.Struct):
    """Record mixing typed and dynamic slots."""

    title: str = ""
    tags: dict[str, list[str]] = {}
    attrs: dict[str, Any] = {}
    extra: Any = None
    owners: list[User] = []
    color: Color | None = None
    when: dt.date | None = None


class Unknown:
    """Class with no form hook."""


__all__ = [
    "Address",
    "Animal",
    "Catalog",
    "Color",
    "ComplexPerson",
    "FormDate",
    "FrozenPoint",
    "IgnoredFieldsForm",
    "Person",
    "PetOwner",
    "Unknown",
    "User",
    "Widths",
]
