"""Shared type aliases and hook protocols for form encoding."""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, Any, Protocol, Self, runtime_checkable

from msgspec import Meta

type DynamicValue = str | dict[str, DynamicValue] | list[DynamicValue]
type FormPairs = list[tuple[str, str]]

type EncHook = Callable[[Any], str]
type DecHook = Callable[[Any, str], Any]

FORM_BITS_KEY = "form_bits"

Int8 = Annotated[int, Meta(ge=-(2**7), le=2**7 - 1)]
Int16 = Annotated[int, Meta(ge=-(2**15), le=2**15 - 1)]
Int32 = Annotated[int, Meta(ge=-(2**31), le=2**31 - 1)]
Int64 = Annotated[int, Meta(ge=-(2**63), le=2**63 - 1)]
Uint8 = Annotated[int, Meta(ge=0, le=2**8 - 1)]
Uint16 = Annotated[int, Meta(ge=0, le=2**16 - 1)]
Uint32 = Annotated[int, Meta(ge=0, le=2**32 - 1)]
Uint64 = Annotated[int, Meta(ge=0, le=2**64 - 1)]
Float32 = Annotated[float, Meta(extra={FORM_BITS_KEY: 32})]
Float64 = float


@runtime_checkable
class FormMarshaler(Protocol):
    """Types that render themselves as a single form value."""

    def __form_encode__(self) -> str:
        """Return the form text for this value."""
        ...


@runtime_checkable
class FormUnmarshaler(Protocol):
    """Types that build themselves from a single form value."""

    @classmethod
    def __form_decode__(cls, text: str) -> Self:
        """Return an instance parsed from form text."""
        ...


def has_form_encode(obj: object) -> bool:
    """Return True when the object's type defines ``__form_encode__``.

    Returns
    -------
    bool
        True when the encode hook is present.
    """
    return callable(getattr(type(obj), "__form_encode__", None))


def has_form_decode(cls: object) -> bool:
    """Return True when the class defines ``__form_decode__``.

    Returns
    -------
    bool
        True when the decode hook is present.
    """
    return isinstance(cls, type) and callable(getattr(cls, "__form_decode__", None))


__all__ = [
    "FORM_BITS_KEY",
    "DecHook",
    "DynamicValue",
    "EncHook",
    "Float32",
    "Float64",
    "FormMarshaler",
    "FormPairs",
    "FormUnmarshaler",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "has_form_decode",
    "has_form_encode",
]
