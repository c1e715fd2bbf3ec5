"""Scalar coercion between form text and typed leaf values."""

from __future__ import annotations

import datetime as dt
import enum
import math
import re
import struct
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any

from msgspec import inspect as mi

from serde_form.core_types import FORM_BITS_KEY
from serde_form.errors import FormTypeError, type_name

_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_RE = re.compile(
    r"^[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)$",
    re.IGNORECASE,
)
_TRUE_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_LITERALS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_FLOAT32_MAX_DIGITS = 9


class CoercionError(FormTypeError):
    """Raised when a leaf string cannot become the target scalar."""

    def __init__(self, value: str, target: str, reason: str | None = None) -> None:
        self.value = value
        message = f"cannot coerce {value!r} to {target}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, target=target)


def float_bits(extra: dict[str, Any] | None) -> int:
    """Return the declared float width from field metadata (default 64)."""
    if extra and extra.get(FORM_BITS_KEY) == 32:
        return 32
    return 64


def _check_bounds(value: float, node: mi.IntType | mi.FloatType, text: str, target: str) -> None:
    if node.ge is not None and value < node.ge:
        raise CoercionError(text, target, f"value out of range (< {node.ge})")
    if node.gt is not None and value <= node.gt:
        raise CoercionError(text, target, f"value out of range (<= {node.gt})")
    if node.le is not None and value > node.le:
        raise CoercionError(text, target, f"value out of range (> {node.le})")
    if node.lt is not None and value >= node.lt:
        raise CoercionError(text, target, f"value out of range (>= {node.lt})")


def parse_int(text: str, node: mi.IntType) -> int:
    """Parse a base-10 integer honoring declared bounds.

    Returns
    -------
    int
        Parsed integer; ``0`` for the empty string.

    Raises
    ------
    CoercionError
        Raised for malformed numerals and out-of-range values.
    """
    if text == "":
        return 0
    if not _INT_RE.match(text):
        raise CoercionError(text, "int", "invalid syntax")
    value = int(text)
    _check_bounds(value, node, text, "int")
    return value


def _round_float32(value: float, text: str) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError as exc:
        raise CoercionError(text, "float32", "value out of range") from exc


def parse_float(text: str, node: mi.FloatType, *, bits: int = 64) -> float:
    """Parse a float at the declared width.

    Returns
    -------
    float
        Parsed value; ``0.0`` for the empty string.

    Raises
    ------
    CoercionError
        Raised for malformed numerals and values outside the width's range.
    """
    if text == "":
        return 0.0
    if not _FLOAT_RE.match(text):
        raise CoercionError(text, f"float{bits}", "invalid syntax")
    value = float(text)
    literal_inf = "inf" in text.lower()
    if math.isinf(value) and not literal_inf:
        raise CoercionError(text, f"float{bits}", "value out of range")
    if bits == 32 and math.isfinite(value):
        value = _round_float32(value, text)
    _check_bounds(value, node, text, f"float{bits}")
    return value


def parse_bool(text: str) -> bool:
    """Parse a permissive boolean literal.

    Returns
    -------
    bool
        Parsed value; ``False`` for the empty string.

    Raises
    ------
    CoercionError
        Raised for unrecognized literals.
    """
    if text == "" or text in _FALSE_LITERALS:
        return False
    if text in _TRUE_LITERALS:
        return True
    raise CoercionError(text, "bool", "invalid syntax")


def _parse_enum(text: str, cls: type[enum.Enum]) -> enum.Enum | None:
    if text == "":
        return None
    for member in cls:
        if str(member.value) == text:
            return member
    raise CoercionError(text, type_name(cls), "no member with this value")


def _parse_literal(text: str, node: mi.LiteralType) -> object:
    for value in node.values:
        if str(value) == text:
            return value
    raise CoercionError(text, f"Literal{list(node.values)!r}", "not an allowed value")


def _parse_temporal(text: str, node: mi.Type) -> object:
    if text == "":
        return None
    try:
        if isinstance(node, mi.DateTimeType):
            return dt.datetime.fromisoformat(text)
        if isinstance(node, mi.DateType):
            return dt.date.fromisoformat(text)
        return dt.time.fromisoformat(text)
    except ValueError as exc:
        raise CoercionError(text, type(node).__name__, str(exc)) from exc


def coerce_leaf(text: str, node: mi.Type, extra: dict[str, Any] | None = None) -> object:
    """Coerce a leaf string into the scalar described by ``node``.

    Parameters
    ----------
    text
        Leaf value from the flat multimap.
    node
        Resolved type node of the slot.
    extra
        Field metadata carrying the declared float width.

    Returns
    -------
    object
        Coerced scalar.

    Raises
    ------
    FormTypeError
        Raised when the node is not a scalar kind or coercion fails.
    """
    result: object
    if isinstance(node, mi.StrType):
        result = text
    elif isinstance(node, mi.BoolType):
        result = parse_bool(text)
    elif isinstance(node, mi.IntType):
        result = parse_int(text, node)
    elif isinstance(node, mi.FloatType):
        result = parse_float(text, node, bits=float_bits(extra))
    elif isinstance(node, mi.EnumType):
        result = _parse_enum(text, node.cls)
    elif isinstance(node, mi.LiteralType):
        result = _parse_literal(text, node)
    elif isinstance(node, (mi.DateTimeType, mi.DateType, mi.TimeType)):
        result = _parse_temporal(text, node)
    elif isinstance(node, mi.UUIDType):
        try:
            result = uuid.UUID(text) if text else None
        except ValueError as exc:
            raise CoercionError(text, "UUID", str(exc)) from exc
    elif isinstance(node, mi.DecimalType):
        try:
            result = Decimal(text) if text else Decimal(0)
        except InvalidOperation as exc:
            raise CoercionError(text, "Decimal", "invalid syntax") from exc
    else:
        msg = f"cannot assign a form value to {type(node).__name__}"
        raise FormTypeError(msg, target=type(node).__name__)
    return result


def zero_scalar(node: mi.Type) -> object:
    """Return the zero value of a scalar node, or None when it has none."""
    if isinstance(node, mi.StrType):
        return ""
    if isinstance(node, mi.BoolType):
        return False
    if isinstance(node, mi.IntType):
        return 0
    if isinstance(node, mi.FloatType):
        return 0.0
    if isinstance(node, mi.DecimalType):
        return Decimal(0)
    return None


def _format_float32(value: float) -> str:
    target = _round_float32(value, repr(value))
    for digits in range(1, _FLOAT32_MAX_DIGITS + 1):
        candidate = f"{value:.{digits}g}"
        if _round_float32(float(candidate), candidate) == target:
            return candidate
    return repr(value)


def format_float(value: float, *, bits: int = 64) -> str:
    """Render a float as its shortest round-trip decimal in positional form.

    Returns
    -------
    str
        Decimal text such as ``"3.14"`` or ``"12300000000"``.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    shortest = _format_float32(value) if bits == 32 else repr(value)
    return format(Decimal(shortest).normalize(), "f")


def render_scalar(value: object, *, bits: int = 64) -> str | None:
    """Render a scalar leaf value, or return None for non-scalars.

    Returns
    -------
    str | None
        Wire text, or None when ``value`` is not a known scalar kind.
    """
    rendered: str | None = None
    if isinstance(value, enum.Enum):
        rendered = render_scalar(value.value, bits=bits)
    elif isinstance(value, str):
        rendered = value
    elif isinstance(value, bool):
        rendered = "true" if value else "false"
    elif isinstance(value, int):
        rendered = str(value)
    elif isinstance(value, float):
        rendered = format_float(value, bits=bits)
    elif isinstance(value, (dt.datetime, dt.date, dt.time)):
        rendered = value.isoformat()
    elif isinstance(value, (uuid.UUID, Decimal)):
        rendered = str(value)
    return rendered


__all__ = [
    "CoercionError",
    "coerce_leaf",
    "float_bits",
    "format_float",
    "parse_bool",
    "parse_float",
    "parse_int",
    "render_scalar",
    "zero_scalar",
]
