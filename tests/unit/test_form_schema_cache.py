"""Tests for the per-type form schema cache."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Annotated, Any

import msgspec
import pytest
from msgspec import inspect as mi

from serde_form.core_types import DynamicValue
from serde_form.errors import FormTypeError
from serde_form.schema import SchemaCache, is_dynamic, optional_inner, unwrap_metadata
from tests.form_contract._support.models import ComplexPerson, IgnoredFieldsForm


class Renamed(msgspec.Struct, rename="camel"):
    """Struct whose encode names differ from attribute names."""

    first_name: str = ""
    last_name: Annotated[str, msgspec.Meta(extra={"form": "surname"})] = ""


class AltTagged(msgspec.Struct):
    """Struct tagged under an alternative metadata key."""

    value: Annotated[str, msgspec.Meta(extra={"query": "v"})] = ""


def test_fields_follow_declaration_order() -> None:
    """List fields in declaration order with parsed tags."""
    fields = SchemaCache().fields_of(ComplexPerson)
    assert [field.attr for field in fields] == [
        "id",
        "name",
        "age",
        "pronouns",
        "created_at",
        "private",
        "optional",
    ]
    by_attr = {field.attr: field for field in fields}
    assert by_attr["age"].tag.omit_if_empty
    assert by_attr["private"].tag.ignore
    assert by_attr["private"].name == ""


def test_dataclass_metadata_tags() -> None:
    """Read tags from dataclass field metadata."""
    cache = SchemaCache()
    names = {field.attr: field.name for field in cache.fields_of(IgnoredFieldsForm)}
    assert names == {
        "public": "public",
        "private": "",
        "ignored": "",
        "NoTag": "NoTag",
        "Empty": "Empty",
        "omitted": "omitted",
        "complex": "complex",
    }
    assert cache.field_named(IgnoredFieldsForm, "ignored") is None
    assert cache.field_named(IgnoredFieldsForm, "public") is not None


def test_default_name_uses_encode_name() -> None:
    """Fall back to the msgspec encode name for untagged fields."""
    cache = SchemaCache()
    field = cache.field_named(Renamed, "firstName")
    assert field is not None
    assert field.attr == "first_name"
    assert cache.field_named(Renamed, "surname") is not None


def test_tag_key_is_configurable() -> None:
    """Resolve tags under the configured metadata key only."""
    assert SchemaCache(tag_key="query").field_named(AltTagged, "v") is not None
    assert SchemaCache().field_named(AltTagged, "value") is not None


def test_non_record_types_have_no_fields() -> None:
    """Return an empty description for non-record types."""
    assert SchemaCache().fields_of(dict) == ()


def test_unsupported_type_raises() -> None:
    """Wrap msgspec inspection failures."""
    with pytest.raises(FormTypeError, match="unsupported type"):
        SchemaCache().type_info(Annotated)


def test_clear_drops_entries() -> None:
    """Empty the cache on clear."""
    cache = SchemaCache()
    cache.fields_of(ComplexPerson)
    assert len(cache) == 1
    cache.clear()
    assert len(cache) == 0


def test_concurrent_first_access_describes_once(monkeypatch: pytest.MonkeyPatch) -> None:
    """Compute each record description at most once under contention."""
    calls: list[type] = []
    original = SchemaCache._describe  # noqa: SLF001
    gate = threading.Barrier(8)

    def counting(self: SchemaCache, record_type: type) -> Any:
        calls.append(record_type)
        return original(self, record_type)

    monkeypatch.setattr(SchemaCache, "_describe", counting)
    cache = SchemaCache()

    def worker() -> int:
        gate.wait()
        return len(cache.fields_of(ComplexPerson))

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: worker(), range(8)))
    assert results == [7] * 8
    assert calls == [ComplexPerson]


def test_dynamic_alias_resolves_to_any() -> None:
    """Treat the recursive dynamic alias as an unresolved slot."""
    cache = SchemaCache()
    assert is_dynamic(cache.type_info(DynamicValue))
    node, _ = unwrap_metadata(cache.type_info(dict[str, DynamicValue]))
    assert isinstance(node, mi.DictType)
    assert is_dynamic(node.value_type)
    assert is_dynamic(cache.type_info(str | dict[str, Any] | list[Any]))
    assert not is_dynamic(cache.type_info(str | None))


def test_optional_inner() -> None:
    """Unwrap single and multi-member optionals."""
    cache = SchemaCache()
    assert isinstance(optional_inner(cache.type_info(int | None)), mi.IntType)
    assert isinstance(optional_inner(cache.type_info(int | str | None)), mi.UnionType)
    assert optional_inner(cache.type_info(int)) is None


def test_metadata_extra_is_merged() -> None:
    """Collect extra payloads from nested metadata wrappers."""
    node = mi.Metadata(
        type=mi.Metadata(type=mi.IntType(), extra={"a": 1}),
        extra={"b": 2},
    )
    inner, extra = unwrap_metadata(node)
    assert isinstance(inner, mi.IntType)
    assert extra == {"a": 1, "b": 2}


class OptionalTagged(msgspec.Struct):
    """Struct whose tags sit inside optional unions."""

    nick: Annotated[str, msgspec.Meta(extra={"form": "nickname,omitempty"})] | None = None
    secret: Annotated[str, msgspec.Meta(extra={"form": "-"})] | None = None


def test_optional_field_tags_are_read() -> None:
    """Read tags wrapped inside an optional union."""
    cache = SchemaCache()
    field = cache.field_named(OptionalTagged, "nickname")
    assert field is not None
    assert field.attr == "nick"
    assert field.tag.omit_if_empty
    secret = next(f for f in cache.fields_of(OptionalTagged) if f.attr == "secret")
    assert secret.tag.ignore


@pytest.mark.parametrize(
    "tp",
    [str | list[str], str | dict[str, str], str | dict[str, Any] | list[str], str | int],
)
def test_narrow_unions_are_not_dynamic(tp: object) -> None:
    """Count only the full dynamic union as an unresolved slot."""
    assert not is_dynamic(SchemaCache().type_info(tp))
