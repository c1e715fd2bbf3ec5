"""Decode engine: materialize typed values from (path, leaf) pairs."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import msgspec
from msgspec import inspect as mi

from serde_form.core_types import DecHook, has_form_decode
from serde_form.errors import (
    FormError,
    FormInvalidCallError,
    FormStructureError,
    FormTypeError,
    type_name,
)
from serde_form.infer import merge_dynamic
from serde_form.paths import PathSegment, parse_key
from serde_form.scalars import coerce_leaf, zero_scalar
from serde_form.schema import (
    SchemaCache,
    is_dynamic,
    is_record,
    optional_inner,
    unwrap_metadata,
)

logger = logging.getLogger(__name__)

_SEQUENCE_NODES = (mi.ListType, mi.VarTupleType)
_IMMUTABLE_TARGETS = (str, bytes, int, float, complex, tuple, frozenset)


def _node_class(node: mi.Type) -> type | None:
    cls = getattr(node, "cls", None)
    return cls if isinstance(cls, type) else None


def _is_frozen(record: object) -> bool:
    if isinstance(record, msgspec.Struct):
        return bool(record.__struct_config__.frozen)
    params = getattr(type(record), "__dataclass_params__", None)
    return bool(params is not None and params.frozen)


def _with_field(record: Any, attr: str, value: object) -> Any:
    if not _is_frozen(record):
        setattr(record, attr, value)
        return record
    if isinstance(record, msgspec.Struct):
        return msgspec.structs.replace(record, **{attr: value})
    return dataclasses.replace(record, **{attr: value})


def check_root(node: mi.Type, target_type: object) -> None:
    """Validate that a top-level node is a record or string-keyed mapping.

    Raises
    ------
    FormStructureError
        Raised for any other top-level shape.
    """
    if is_record(node):
        return
    if isinstance(node, mi.DictType):
        key_node, _ = unwrap_metadata(node.key_type)
        if isinstance(key_node, mi.StrType):
            return
        msg = "map keys must be strings"
        raise FormStructureError(msg, target=type_name(target_type))
    msg = "top-level value must be a record or mapping"
    raise FormStructureError(msg, target=type_name(target_type))


@dataclass(frozen=True)
class DecodeEngine:
    """Assign flat form pairs into nested values.

    Parameters
    ----------
    cache
        Schema cache used to resolve record fields and type nodes.
    dec_hook
        Fallback converter for classes without a ``__form_decode__`` hook.
    """

    cache: SchemaCache
    dec_hook: DecHook | None = None

    def decode_pairs(self, pairs: Iterable[tuple[str, str]], target_type: object) -> Any:
        """Build a fresh value of ``target_type`` from form pairs.

        Returns
        -------
        Any
            Decoded record or mapping.
        """
        node, _ = unwrap_metadata(self.cache.type_info(target_type))
        check_root(node, target_type)
        root = self.zero_value(node)
        return self.merge(node, root, pairs)

    def decode_into(self, pairs: Iterable[tuple[str, str]], target: object) -> Any:
        """Merge form pairs into an existing mutable record or dict.

        Returns
        -------
        Any
            The updated target.

        Raises
        ------
        FormInvalidCallError
            Raised for ``None``, classes, frozen records and immutable values.
        """
        if target is None:
            msg = "decode_into(None)"
            raise FormInvalidCallError(msg)
        if isinstance(target, type):
            msg = f"decode_into(type {type_name(target)}): pass an instance"
            raise FormInvalidCallError(msg, target=type_name(target))
        if isinstance(target, _IMMUTABLE_TARGETS):
            msg = f"decode_into(non-reference {type_name(type(target))})"
            raise FormInvalidCallError(msg, target=type_name(type(target)))
        if isinstance(target, dict):
            node = self.cache.type_info(dict[str, Any])
        else:
            node, _ = unwrap_metadata(self.cache.type_info(type(target)))
            check_root(node, type(target))
            if _is_frozen(target):
                msg = f"decode_into(frozen {type_name(type(target))})"
                raise FormInvalidCallError(msg, target=type_name(type(target)))
        return self.merge(node, target, pairs)

    def merge(self, node: mi.Type, root: Any, pairs: Iterable[tuple[str, str]]) -> Any:
        """Apply pairs in order; the first error aborts the whole call.

        Returns
        -------
        Any
            Updated root value.
        """
        count = 0
        for raw_key, leaf in pairs:
            path = parse_key(raw_key)
            try:
                root = self.assign(node, root, path, leaf)
            except FormError as exc:
                exc.with_key(raw_key)
                raise
            count += 1
        logger.debug("Decoded %d form pair(s) into %s", count, type(root).__name__)
        return root

    def assign(
        self,
        node: mi.Type,
        current: Any,
        path: Sequence[PathSegment],
        leaf: str,
        *,
        extra: dict[str, Any] | None = None,
    ) -> Any:
        """Return ``current`` updated with ``leaf`` placed at ``path``.

        Returns
        -------
        Any
            Updated slot value.

        Raises
        ------
        FormStructureError
            Raised when the path does not fit the slot's shape.
        FormTypeError
            Raised when the leaf cannot be coerced into the slot.
        """
        node, more = unwrap_metadata(node)
        if more:
            extra = {**(extra or {}), **more}
        if is_dynamic(node):
            return merge_dynamic(current, path, leaf)
        inner = optional_inner(node)
        if inner is not None:
            if current is None:
                current = self.zero_value(inner)
            return self.assign(inner, current, path, leaf, extra=extra)
        if not path:
            return self._assign_leaf(node, leaf, extra)
        if is_record(node):
            return self._assign_field(node, current, path, leaf)
        if isinstance(node, mi.DictType):
            return self._assign_entry(node, current, path, leaf)
        if isinstance(node, _SEQUENCE_NODES):
            if not path[0].is_index:
                msg = f"sequence requires an index marker, got [{path[0].key}]"
                raise FormStructureError(msg, target=type(node).__name__)
            return self._append(node, current, path[1:], leaf)
        msg = f"cannot address {type(node).__name__} with a path segment"
        raise FormStructureError(msg, target=type(node).__name__)

    def _assign_leaf(self, node: mi.Type, leaf: str, extra: dict[str, Any] | None) -> Any:
        cls = _node_class(node)
        if cls is not None and has_form_decode(cls):
            return cls.__form_decode__(leaf)
        if isinstance(node, mi.CustomType):
            if self.dec_hook is not None:
                try:
                    return self.dec_hook(node.cls, leaf)
                except NotImplementedError as exc:
                    msg = f"unsupported type {type_name(node.cls)}"
                    raise FormTypeError(msg, target=type_name(node.cls)) from exc
            msg = f"unsupported type {type_name(node.cls)}"
            raise FormTypeError(msg, target=type_name(node.cls))
        return coerce_leaf(leaf, node, extra)

    def _assign_field(
        self,
        node: mi.StructType | mi.DataclassType,
        current: Any,
        path: Sequence[PathSegment],
        leaf: str,
    ) -> Any:
        record = current if current is not None else self.zero_value(node)
        head = path[0]
        field = None if head.is_index else self.cache.field_named(node.cls, head.key)
        if field is None:
            msg = f"unknown field {head.key!r} in {type_name(node.cls)}"
            raise FormStructureError(msg, target=type_name(node.cls))
        child = getattr(record, field.attr, None)
        value = self.assign(field.node, child, path[1:], leaf, extra=dict(field.extra))
        return _with_field(record, field.attr, value)

    def _assign_entry(
        self,
        node: mi.DictType,
        current: Any,
        path: Sequence[PathSegment],
        leaf: str,
    ) -> Any:
        key_node, _ = unwrap_metadata(node.key_type)
        if not isinstance(key_node, mi.StrType):
            msg = "map keys must be strings"
            raise FormStructureError(msg, target=type(key_node).__name__)
        mapping = current if current is not None else {}
        key, rest = path[0].key, path[1:]
        value_node, value_extra = unwrap_metadata(node.value_type)
        existing = mapping.get(key)
        if is_dynamic(value_node):
            mapping[key] = merge_dynamic(existing, rest, leaf)
        elif isinstance(value_node, _SEQUENCE_NODES):
            if rest and rest[0].is_index:
                rest = rest[1:]
            mapping[key] = self._append(value_node, existing, rest, leaf)
        else:
            mapping[key] = self.assign(value_node, existing, rest, leaf, extra=value_extra)
        return mapping

    def _append(
        self,
        node: mi.ListType | mi.VarTupleType,
        current: Any,
        rest: Sequence[PathSegment],
        leaf: str,
    ) -> Any:
        item_node, item_extra = unwrap_metadata(node.item_type)
        if is_dynamic(item_node):
            element = merge_dynamic(None, rest, leaf)
        else:
            element = self.assign(
                item_node,
                self.zero_value(item_node),
                rest,
                leaf,
                extra=item_extra,
            )
        if isinstance(node, mi.VarTupleType):
            return (*(current or ()), element)
        items = current if current is not None else []
        items.append(element)
        return items

    def zero_value(self, node: mi.Type) -> Any:
        """Return a freshly allocated zero value for a slot.

        Records get their declared defaults and zero values for required
        fields; kinds without a natural zero yield None.

        Returns
        -------
        Any
            Zero value for the node.
        """
        node, _ = unwrap_metadata(node)
        if is_dynamic(node) or optional_inner(node) is not None:
            return None
        if is_record(node):
            return self._zero_record(node.cls)
        if isinstance(node, mi.DictType):
            return {}
        if isinstance(node, mi.ListType):
            return []
        if isinstance(node, mi.VarTupleType):
            return ()
        return zero_scalar(node)

    def _zero_record(self, cls: type) -> Any:
        kwargs: dict[str, Any] = {}
        for field in self.cache.fields_of(cls):
            if not field.init:
                continue
            if field.default is msgspec.NODEFAULT and field.default_factory is msgspec.NODEFAULT:
                kwargs[field.attr] = self.zero_value(field.node)
        try:
            return cls(**kwargs)
        except (TypeError, ValueError) as exc:
            msg = f"cannot construct {type_name(cls)}: {exc}"
            raise FormTypeError(msg, target=type_name(cls)) from exc


__all__ = ["DecodeEngine", "check_root"]
