"""Form codec facade and module-level helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, cast

from serde_form.config import DEFAULT_CONFIG, FormCodecConfig
from serde_form.core_types import DecHook, EncHook, FormPairs
from serde_form.decode import DecodeEngine
from serde_form.encode import EncodeEngine
from serde_form.errors import FormLimitError
from serde_form.schema import DEFAULT_SCHEMA_CACHE, SchemaCache
from serde_form.wire import parse_form, serialize_form

_DEFAULT_TARGET: Any = dict[str, Any]


class FormCodec:
    """Decode and encode ``application/x-www-form-urlencoded`` payloads.

    Parameters
    ----------
    config
        Codec configuration; defaults to ``FormCodecConfig()``.
    schema_cache
        Cache of record schemas. Codecs using the default tag key share the
        process-wide cache unless one is supplied.
    enc_hook
        Renderer for objects the encoder does not support natively.
    dec_hook
        Converter ``(type, text) -> object`` for classes without a
        ``__form_decode__`` hook.
    """

    def __init__(
        self,
        config: FormCodecConfig | None = None,
        *,
        schema_cache: SchemaCache | None = None,
        enc_hook: EncHook | None = None,
        dec_hook: DecHook | None = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        if schema_cache is None:
            if self.config.tag_key == DEFAULT_SCHEMA_CACHE.tag_key:
                schema_cache = DEFAULT_SCHEMA_CACHE
            else:
                schema_cache = SchemaCache(tag_key=self.config.tag_key)
        self.schema_cache = schema_cache
        self._decoder = DecodeEngine(schema_cache, dec_hook=dec_hook)
        self._encoder = EncodeEngine(schema_cache, enc_hook=enc_hook)

    def parse(self, buf: bytes | str) -> FormPairs:
        """Parse a payload into pairs, enforcing configured limits.

        Returns
        -------
        FormPairs
            Parsed pairs.

        Raises
        ------
        FormLimitError
            Raised when the payload exceeds ``max_input_bytes`` or
            ``max_pairs``.
        """
        limit = self.config.max_input_bytes
        if limit is not None:
            size = len(buf) if isinstance(buf, bytes) else len(buf.encode(self.config.encoding))
            if size > limit:
                msg = f"payload of {size} bytes exceeds max_input_bytes={limit}"
                raise FormLimitError(msg)
        pairs = parse_form(buf, encoding=self.config.encoding)
        self._check_pairs(pairs)
        return pairs

    def _check_pairs(self, pairs: Sequence[tuple[str, str]]) -> None:
        limit = self.config.max_pairs
        if limit is not None and len(pairs) > limit:
            msg = f"{len(pairs)} pairs exceed max_pairs={limit}"
            raise FormLimitError(msg)

    def decode[T](self, buf: bytes | str, *, target_type: type[T] = _DEFAULT_TARGET) -> T:
        """Decode a payload into a new value of ``target_type``.

        Returns
        -------
        T
            Decoded value.
        """
        return self.decode_pairs(self.parse(buf), target_type=target_type)

    def decode_pairs[T](
        self,
        pairs: Iterable[tuple[str, str]],
        *,
        target_type: type[T] = _DEFAULT_TARGET,
    ) -> T:
        """Decode already-parsed pairs into a new value of ``target_type``.

        Returns
        -------
        T
            Decoded value.
        """
        items = list(pairs)
        self._check_pairs(items)
        return cast("T", self._decoder.decode_pairs(items, target_type))

    def decode_into[T](self, buf: bytes | str, target: T) -> T:
        """Merge a payload into an existing mutable record or dict.

        Returns
        -------
        T
            The updated target.
        """
        return cast("T", self._decoder.decode_into(self.parse(buf), target))

    def encode_pairs(self, value: object) -> FormPairs:
        """Return the canonical, key-sorted pairs for a value.

        Returns
        -------
        FormPairs
            Encoded pairs.
        """
        return self._encoder.encode_pairs(value)

    def encode(self, value: object) -> str:
        """Encode a value into an escaped form payload.

        Returns
        -------
        str
            Payload; empty for ``None``.
        """
        return serialize_form(self.encode_pairs(value), encoding=self.config.encoding)


DEFAULT_CODEC = FormCodec()


def loads_form[T](buf: bytes | str, *, target_type: type[T] = _DEFAULT_TARGET) -> T:
    """Deserialize a form payload into the requested type.

    Parameters
    ----------
    buf
        Form payload.
    target_type
        Record or string-keyed mapping type; defaults to ``dict[str, Any]``.

    Returns
    -------
    T
        Decoded payload.
    """
    return DEFAULT_CODEC.decode(buf, target_type=target_type)


def dumps_form(obj: object) -> str:
    """Serialize a record or mapping to a form payload.

    Parameters
    ----------
    obj
        Object to serialize.

    Returns
    -------
    str
        Form payload with keys sorted.
    """
    return DEFAULT_CODEC.encode(obj)


def decode_form_pairs[T](
    pairs: Iterable[tuple[str, str]],
    *,
    target_type: type[T] = _DEFAULT_TARGET,
) -> T:
    """Decode parsed form pairs into the requested type.

    Returns
    -------
    T
        Decoded payload.
    """
    return DEFAULT_CODEC.decode_pairs(pairs, target_type=target_type)


def encode_form_pairs(obj: object) -> FormPairs:
    """Encode an object into canonical form pairs.

    Returns
    -------
    FormPairs
        Key-sorted pairs.
    """
    return DEFAULT_CODEC.encode_pairs(obj)


__all__ = [
    "DEFAULT_CODEC",
    "FormCodec",
    "decode_form_pairs",
    "dumps_form",
    "encode_form_pairs",
    "loads_form",
]
