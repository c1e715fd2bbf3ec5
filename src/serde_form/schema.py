"""Per-type schema cache backed by ``msgspec.inspect``.

Record types are described once and the description is reused by every
decode and encode call. Population is guarded by locks so concurrent first
access computes each entry once; published entries are immutable tuples and
are read without locking.
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import operator
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import UnionType
from typing import Annotated, Any, Union, get_args, get_origin

import msgspec
from msgspec import inspect as mi

from serde_form.core_types import DynamicValue
from serde_form.errors import FormTypeError, type_name
from serde_form.tags import FieldTag, parse_tag

logger = logging.getLogger(__name__)

DEFAULT_TAG_KEY = "form"

_DYNAMIC_MEMBERS = (mi.StrType, mi.DictType, mi.ListType)


@dataclass(frozen=True)
class FieldSchema:
    """Resolved metadata for one record field."""

    attr: str
    tag: FieldTag
    node: mi.Type
    extra: Mapping[str, Any]
    default: Any = msgspec.NODEFAULT
    default_factory: Any = msgspec.NODEFAULT
    init: bool = True

    @property
    def name(self) -> str:
        """Return the form name of the field."""
        return self.tag.name


def unwrap_metadata(node: mi.Type) -> tuple[mi.Type, dict[str, Any]]:
    """Strip ``Metadata`` wrappers and merge their ``extra`` payloads.

    Returns
    -------
    tuple[msgspec.inspect.Type, dict[str, Any]]
        Inner type node and merged extra metadata.
    """
    extra: dict[str, Any] = {}
    while isinstance(node, mi.Metadata):
        if node.extra:
            extra = {**node.extra, **extra}
        node = node.type
    return node, extra


def is_dynamic(node: mi.Type) -> bool:
    """Return True when the node describes an unresolved (dynamic) slot.

    ``Any``/``object`` and the ``str | dict[str, Any] | list[Any]`` union
    that ``DynamicValue`` resolves to both count. Narrower unions such as
    ``str | list[str]`` do not.

    Returns
    -------
    bool
        True for dynamic slots.
    """
    if isinstance(node, mi.AnyType):
        return True
    if isinstance(node, mi.UnionType):
        members = [unwrap_metadata(member)[0] for member in node.types]
        return {type(member) for member in members} == set(_DYNAMIC_MEMBERS) and all(
            _is_dynamic_member(member) for member in members
        )
    return False


def _is_dynamic_member(node: mi.Type) -> bool:
    if isinstance(node, mi.StrType):
        return True
    if isinstance(node, mi.DictType):
        key_node, _ = unwrap_metadata(node.key_type)
        value_node, _ = unwrap_metadata(node.value_type)
        return isinstance(key_node, mi.StrType) and isinstance(value_node, mi.AnyType)
    if isinstance(node, mi.ListType):
        item_node, _ = unwrap_metadata(node.item_type)
        return isinstance(item_node, mi.AnyType)
    return False


def optional_inner(node: mi.Type) -> mi.Type | None:
    """Return the inner node of ``T | None`` or None for other nodes.

    Returns
    -------
    msgspec.inspect.Type | None
        Inner node for optional slots.
    """
    if not isinstance(node, mi.UnionType) or not node.includes_none:
        return None
    rest = tuple(member for member in node.types if not isinstance(member, mi.NoneType))
    if len(rest) == 1:
        return rest[0]
    return mi.UnionType(types=rest)


def _resolve_alias(tp: object) -> object:
    # msgspec is handed ``Any`` wherever the recursive alias appears.
    if tp is DynamicValue:
        return Any
    origin = get_origin(tp)
    args = get_args(tp)
    if origin is None or origin is Annotated or not args:
        return tp
    resolved = tuple(_resolve_alias(arg) for arg in args)
    if resolved == args:
        return tp
    if origin in (Union, UnionType):
        return functools.reduce(operator.or_, resolved)
    return origin[resolved]


def is_record(node: mi.Type) -> bool:
    """Return True for struct and dataclass nodes."""
    return isinstance(node, (mi.StructType, mi.DataclassType))


class SchemaCache:
    """Process-lifetime cache of type descriptions and field schemas.

    Parameters
    ----------
    tag_key
        Metadata key that holds field tags.
    """

    def __init__(self, *, tag_key: str = DEFAULT_TAG_KEY) -> None:
        self.tag_key = tag_key
        self._types: dict[object, mi.Type] = {}
        self._fields: dict[type, tuple[FieldSchema, ...]] = {}
        self._type_lock = threading.Lock()
        self._field_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._fields)

    def clear(self) -> None:
        """Drop all cached entries."""
        with self._type_lock, self._field_lock:
            self._types.clear()
            self._fields.clear()

    def type_info(self, tp: object) -> mi.Type:
        """Return the memoized ``msgspec.inspect`` description of a type.

        Raises
        ------
        FormTypeError
            Raised when msgspec cannot describe the type.
        """
        cached = self._types.get(tp)
        if cached is not None:
            return cached
        with self._type_lock:
            cached = self._types.get(tp)
            if cached is None:
                try:
                    cached = mi.type_info(_resolve_alias(tp))
                except (TypeError, ValueError) as exc:
                    msg = f"unsupported type {type_name(tp)}"
                    raise FormTypeError(msg, target=type_name(tp)) from exc
                self._types[tp] = cached
        return cached

    def fields_of(self, record_type: type) -> tuple[FieldSchema, ...]:
        """Return the field schemas of a record type in declaration order.

        Non-record types yield an empty tuple. Tag syntax never fails: an
        unreadable tag degrades to the declared field name.

        Returns
        -------
        tuple[FieldSchema, ...]
            Field schemas for the record type.
        """
        cached = self._fields.get(record_type)
        if cached is not None:
            return cached
        with self._field_lock:
            cached = self._fields.get(record_type)
            if cached is None:
                cached = self._describe(record_type)
                self._fields[record_type] = cached
                logger.debug(
                    "Cached form schema for %s with %d field(s)",
                    type_name(record_type),
                    len(cached),
                )
        return cached

    def field_named(self, record_type: type, name: str) -> FieldSchema | None:
        """Return the non-ignored field carrying a form name.

        Returns
        -------
        FieldSchema | None
            Matching field, or None when the name is unknown or ignored.
        """
        for field in self.fields_of(record_type):
            if not field.tag.ignore and field.tag.name == name:
                return field
        return None

    def _describe(self, record_type: type) -> tuple[FieldSchema, ...]:
        node, _ = unwrap_metadata(self.type_info(record_type))
        if not is_record(node):
            return ()
        declared: dict[str, dataclasses.Field[Any]] = {}
        if dataclasses.is_dataclass(record_type):
            declared = {field.name: field for field in dataclasses.fields(record_type)}
        fields: list[FieldSchema] = []
        for info in node.fields:
            field_node, extra = unwrap_metadata(info.type)
            inner = optional_inner(field_node)
            if inner is not None:
                _, inner_extra = unwrap_metadata(inner)
                extra = {**inner_extra, **extra}
            dc_field = declared.get(info.name)
            raw_tag = extra.get(self.tag_key)
            if raw_tag is None and dc_field is not None:
                raw_tag = dc_field.metadata.get(self.tag_key)
            tag = parse_tag(raw_tag if isinstance(raw_tag, str) else None)
            if not tag.ignore and not tag.name:
                tag = dataclasses.replace(tag, name=info.encode_name)
            fields.append(
                FieldSchema(
                    attr=info.name,
                    tag=tag,
                    node=field_node,
                    extra=extra,
                    default=info.default,
                    default_factory=info.default_factory,
                    init=dc_field.init if dc_field is not None else True,
                )
            )
        return tuple(fields)


DEFAULT_SCHEMA_CACHE = SchemaCache()


__all__ = [
    "DEFAULT_SCHEMA_CACHE",
    "DEFAULT_TAG_KEY",
    "FieldSchema",
    "SchemaCache",
    "is_dynamic",
    "is_record",
    "optional_inner",
    "unwrap_metadata",
]
