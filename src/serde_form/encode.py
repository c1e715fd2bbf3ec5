"""Encode engine: linearize nested values into (path, leaf) pairs."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from operator import itemgetter
from typing import Any

import msgspec
from msgspec import inspect as mi

from serde_form.core_types import EncHook, FormPairs, has_form_encode
from serde_form.errors import FormStructureError, FormTypeError, type_name
from serde_form.paths import INDEX, PathSegment, render_path
from serde_form.scalars import float_bits, render_scalar
from serde_form.schema import SchemaCache, optional_inner, unwrap_metadata

logger = logging.getLogger(__name__)

type KeyPath = tuple[PathSegment, ...]


def _declared(
    node: mi.Type | None,
    extra: Mapping[str, Any] | None,
) -> tuple[mi.Type | None, dict[str, Any]]:
    # Strip metadata and optional wrappers, collecting extra along the way.
    merged = dict(extra or {})
    while node is not None:
        node, more = unwrap_metadata(node)
        merged = {**more, **merged}
        inner = optional_inner(node)
        if inner is None:
            break
        node = inner
    return node, merged


def _item_node(node: mi.Type | None, index: int) -> mi.Type | None:
    if isinstance(node, (mi.ListType, mi.VarTupleType)):
        return node.item_type
    if isinstance(node, mi.TupleType) and index < len(node.item_types):
        return node.item_types[index]
    return None


def is_record_value(value: object) -> bool:
    """Return True for struct and dataclass instances."""
    if isinstance(value, msgspec.Struct):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def is_empty_value(value: object) -> bool:
    """Return True for values that ``omitempty`` drops.

    Empty strings and collections, numeric zero, ``False`` and ``None`` are
    empty. Records and hook types never are.

    Returns
    -------
    bool
        True when the value is the zero value of its kind.
    """
    if value is None:
        return True
    if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    if isinstance(value, (bool, int, float, Decimal)):
        return value == 0
    return False


@dataclass(frozen=True)
class EncodeEngine:
    """Walk a value and emit flat form pairs.

    Parameters
    ----------
    cache
        Schema cache used to list record fields.
    enc_hook
        Fallback renderer for objects the engine does not know.
    """

    cache: SchemaCache
    enc_hook: EncHook | None = None

    def encode_pairs(self, value: object) -> FormPairs:
        """Return the key-sorted form pairs for a record or mapping.

        Returns
        -------
        FormPairs
            Pairs sorted by rendered key; repeated keys keep traversal order.

        Raises
        ------
        FormStructureError
            Raised when the root is not a record or string-keyed mapping.
        FormTypeError
            Raised when an unsupported kind is reached.
        """
        if value is None:
            return []
        if has_form_encode(value) or not (is_record_value(value) or isinstance(value, Mapping)):
            msg = "top-level value must be a record or mapping"
            raise FormStructureError(msg, target=type_name(type(value)))
        out: FormPairs = []
        self._walk(out, (), value)
        out.sort(key=itemgetter(0))
        logger.debug("Encoded %d form pair(s) from %s", len(out), type(value).__name__)
        return out

    def _walk(
        self,
        out: FormPairs,
        path: KeyPath,
        value: object,
        node: mi.Type | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        if value is None:
            return
        node, merged = _declared(node, extra)
        if has_form_encode(value):
            out.append((render_path(path), value.__form_encode__()))
        elif is_record_value(value):
            self._walk_record(out, path, value)
        elif isinstance(value, Mapping):
            self._walk_mapping(out, path, value, node)
        elif isinstance(value, (list, tuple)):
            self._walk_sequence(out, path, value, node)
        else:
            rendered = render_scalar(value, bits=float_bits(merged))
            if rendered is None:
                rendered = self._fallback(value, path)
            out.append((render_path(path), rendered))

    def _walk_record(self, out: FormPairs, path: KeyPath, value: object) -> None:
        for field in self.cache.fields_of(type(value)):
            if field.tag.ignore or not field.name:
                continue
            field_value = getattr(value, field.attr, None)
            if field.tag.omit_if_empty and is_empty_value(field_value):
                continue
            self._walk(
                out,
                (*path, PathSegment(field.name)),
                field_value,
                field.node,
                field.extra,
            )

    def _walk_mapping(
        self,
        out: FormPairs,
        path: KeyPath,
        value: Mapping[Any, Any],
        node: mi.Type | None,
    ) -> None:
        value_node = node.value_type if isinstance(node, mi.DictType) else None
        for key, item in value.items():
            if not isinstance(key, str):
                msg = "map keys must be strings"
                raise FormStructureError(
                    msg,
                    key=render_path(path) or None,
                    target=type_name(type(key)),
                )
            if item is None:
                continue
            self._walk(out, (*path, PathSegment(key)), item, value_node)

    def _walk_sequence(
        self,
        out: FormPairs,
        path: KeyPath,
        value: Sequence[Any],
        node: mi.Type | None,
    ) -> None:
        for index, item in enumerate(value):
            if item is None:
                continue
            self._walk(out, (*path, INDEX), item, _item_node(node, index))

    def _fallback(self, value: object, path: KeyPath) -> str:
        msg = f"unsupported type {type_name(type(value))}"
        if self.enc_hook is None:
            raise FormTypeError(msg, key=render_path(path), target=type_name(type(value)))
        try:
            return str(self.enc_hook(value))
        except NotImplementedError as exc:
            raise FormTypeError(
                msg,
                key=render_path(path),
                target=type_name(type(value)),
            ) from exc


__all__ = ["EncodeEngine", "is_empty_value", "is_record_value"]
