"""Shape inference for dynamically-typed form slots."""

from __future__ import annotations

import copy
from collections.abc import Sequence

from serde_form.core_types import DynamicValue
from serde_form.paths import PathSegment


def merge_dynamic(
    existing: DynamicValue | None,
    path: Sequence[PathSegment],
    leaf: str,
) -> DynamicValue:
    """Place ``leaf`` at ``path`` inside ``existing``, updating it in place.

    Lists and mappings already present in ``existing`` are reused and
    returned; only missing or wrongly shaped containers are allocated.

    Returns
    -------
    DynamicValue
        Updated value for the slot.
    """
    if not path:
        return leaf
    head, rest = path[0], path[1:]
    if head.is_index:
        items = existing if isinstance(existing, list) else []
        items.append(merge_dynamic(None, rest, leaf))
        return items
    mapping = existing if isinstance(existing, dict) else {}
    mapping[head.key] = merge_dynamic(mapping.get(head.key), rest, leaf)
    return mapping


def infer(
    existing: DynamicValue | None,
    path: Sequence[PathSegment],
    leaf: str,
) -> DynamicValue:
    """Return the dynamic value produced by assigning ``leaf`` at ``path``.

    An exhausted path always yields the leaf string, so ``"007"`` stays
    ``"007"``. An index marker appends one new element to a list. A named
    segment merges into a mapping under that key. An existing value with the
    wrong shape for the next segment is replaced by a fresh container. The
    input value is never mutated.

    Parameters
    ----------
    existing
        Current value of the slot, if any.
    path
        Remaining path segments.
    leaf
        Leaf string to place.

    Returns
    -------
    DynamicValue
        Updated value for the slot.
    """
    return merge_dynamic(copy.deepcopy(existing), path, leaf)


__all__ = ["infer", "merge_dynamic"]
