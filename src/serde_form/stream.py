"""Stream wrappers that read or write whole form payloads."""

from __future__ import annotations

from typing import IO, Any

from serde_form.codec import DEFAULT_CODEC, FormCodec


class FormDecoder:
    """Read a whole form payload from a stream and decode it.

    Parameters
    ----------
    stream
        Binary or text stream; it is read to the end before decoding.
    codec
        Codec to use; defaults to the process-wide codec.
    """

    def __init__(self, stream: IO[bytes] | IO[str], *, codec: FormCodec | None = None) -> None:
        self._stream = stream
        self._codec = codec or DEFAULT_CODEC

    def decode[T](self, target_type: type[T] = dict[str, Any]) -> T:  # type: ignore[assignment]
        """Read the stream and decode it into ``target_type``.

        Returns
        -------
        T
            Decoded value.
        """
        return self._codec.decode(self._stream.read(), target_type=target_type)


class FormEncoder:
    """Encode values and write them to a stream.

    Parameters
    ----------
    stream
        Binary or text stream. Binary streams receive encoded bytes.
    codec
        Codec to use; defaults to the process-wide codec.
    """

    def __init__(self, stream: IO[bytes] | IO[str], *, codec: FormCodec | None = None) -> None:
        self._stream = stream
        self._codec = codec or DEFAULT_CODEC

    def encode(self, value: object) -> None:
        """Encode ``value`` and write the payload."""
        payload = self._codec.encode(value)
        if _is_binary(self._stream):
            self._stream.write(payload.encode(self._codec.config.encoding))  # type: ignore[arg-type]
        else:
            self._stream.write(payload)  # type: ignore[arg-type]


def _is_binary(stream: IO[Any]) -> bool:
    mode = getattr(stream, "mode", None)
    if isinstance(mode, str):
        return "b" in mode
    return not hasattr(stream, "encoding")


__all__ = ["FormDecoder", "FormEncoder"]
