"""Type-erased, copyable container for heterogeneous sentence payloads."""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Type, TypeVar, Union

from .errors import (
    EmptyMessageError,
    InvalidMetadataError,
    PayloadCapabilityError,
    TypeMismatchError,
)
from .payload import (
    MESSAGE_CODE_LENGTH,
    TALKER_LENGTH,
    message_code_for,
    read_payload,
    registered_payload_types,
    supports_payload,
    write_payload,
)
from .reader import SentenceReader
from .writer import SentenceWriter

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CAPACITY = 256

_UNSET_TALKER = "\0" * TALKER_LENGTH
_UNSET_MESSAGE = "\0" * MESSAGE_CODE_LENGTH


class _Concept:
    """Operations every stored payload supports, whatever its type."""

    def clone(self) -> "_Concept":
        raise NotImplementedError

    def type(self) -> type:
        raise NotImplementedError

    def write(self, writer: SentenceWriter) -> None:
        raise NotImplementedError

    def read(self, reader: SentenceReader) -> None:
        raise NotImplementedError


class _Model(_Concept):
    """Binds one concrete payload value to its registered hooks."""

    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    def clone(self) -> "_Model":
        return _Model(copy.deepcopy(self.value))

    def type(self) -> type:
        return type(self.value)

    def write(self, writer: SentenceWriter) -> None:
        write_payload(self.value, writer)

    def read(self, reader: SentenceReader) -> None:
        read_payload(self.value, reader)


class AnyMessage:
    """
    Hold any payload type that has registered write/read hooks.

    ``AnyMessage(talker, message, payload)`` takes the message code
    explicitly; ``AnyMessage(talker, payload)`` looks it up from the
    registry filled by :func:`~nmeakit.sentence.payload.message_code`.
    Copies clone the payload; :meth:`take` moves it out instead.
    """

    def __init__(self, talker: Optional[str] = None, *args: Any):
        self._self: Optional[_Concept] = None
        self._talker = _UNSET_TALKER
        self._message = _UNSET_MESSAGE
        self.checksum = 0
        self.size = 0

        if talker is None and not args:
            return
        if len(args) == 2:
            message, payload = args
        elif len(args) == 1:
            payload = args[0]
            message = message_code_for(type(payload))
        else:
            raise TypeError("AnyMessage expects (talker, payload) or (talker, message, payload)")

        if not supports_payload(type(payload)):
            raise PayloadCapabilityError(
                f"{type(payload).__name__} has no registered write_payload/read_payload hooks"
            )
        self.set_talker(talker)
        self.set_message(message)
        self._self = _Model(payload)

    # -- copy / move ---------------------------------------------------------

    def copy(self) -> "AnyMessage":
        clone = AnyMessage()
        clone._self = self._self.clone() if self._self is not None else None
        clone._talker = self._talker
        clone._message = self._message
        clone.checksum = self.checksum
        clone.size = self.size
        return clone

    def __copy__(self) -> "AnyMessage":
        return self.copy()

    def __deepcopy__(self, memo: Dict[int, Any]) -> "AnyMessage":
        return self.copy()

    def take(self) -> "AnyMessage":
        """Move the payload and metadata into a new container, leaving this one empty."""
        moved = AnyMessage()
        moved._self, self._self = self._self, None
        moved._talker = self._talker
        moved._message = self._message
        moved.checksum = self.checksum
        moved.size = self.size
        self.reset()
        return moved

    # -- state ---------------------------------------------------------------

    def empty(self) -> bool:
        return self._self is None

    def __bool__(self) -> bool:
        return self._self is not None

    def reset(self) -> None:
        self._self = None
        self._talker = _UNSET_TALKER
        self._message = _UNSET_MESSAGE
        self.checksum = 0
        self.size = 0

    def __repr__(self) -> str:
        if self._self is None:
            return "AnyMessage(<empty>)"
        value = self._self.value  # type: ignore[attr-defined]
        return f"AnyMessage(talker={self.talker!r}, message={self.message!r}, payload={value!r})"

    # -- metadata ------------------------------------------------------------

    @property
    def talker(self) -> str:
        return self._talker

    @talker.setter
    def talker(self, value: str) -> None:
        self.set_talker(value)

    @property
    def message(self) -> str:
        return self._message

    @message.setter
    def message(self, value: str) -> None:
        self.set_message(value)

    def set_talker(self, talker: str) -> None:
        if not isinstance(talker, str) or len(talker) != TALKER_LENGTH:
            raise InvalidMetadataError(f"talker must be exactly {TALKER_LENGTH} chars, got {talker!r}")
        self._talker = talker

    def set_message(self, message: str) -> None:
        if not isinstance(message, str) or len(message) != MESSAGE_CODE_LENGTH:
            raise InvalidMetadataError(
                f"message code must be exactly {MESSAGE_CODE_LENGTH} chars, got {message!r}"
            )
        self._message = message

    def validate_header(self) -> None:
        if "\0" in self._talker:
            raise InvalidMetadataError("talker not set")
        if "\0" in self._message:
            raise InvalidMetadataError("message code not set")

    # -- typed access --------------------------------------------------------

    def type(self) -> type:
        return self._self.type() if self._self is not None else type(None)

    def is_type(self, cls: type) -> bool:
        return self._self is not None and self._self.type() is cls

    def try_get(self, cls: Type[T]) -> Optional[T]:
        if not self.is_type(cls):
            return None
        return self._self.value  # type: ignore[union-attr, attr-defined]

    def get(self, cls: Type[T]) -> T:
        if not self.is_type(cls):
            raise TypeMismatchError(f"AnyMessage holds {self.type().__name__}, not {cls.__name__}")
        return self._self.value  # type: ignore[union-attr, attr-defined]

    # -- payload streaming ---------------------------------------------------

    def serialize_payload(self, writer: SentenceWriter) -> None:
        """Write the payload fields only; framing stays with *writer*."""
        if self._self is None:
            raise EmptyMessageError("Empty AnyMessage")
        self._self.write(writer)

    def deserialize_payload(self, reader: SentenceReader) -> None:
        """Read the payload fields only from *reader*."""
        if self._self is None:
            raise EmptyMessageError("Empty AnyMessage")
        self._self.read(reader)


def encode_message(message: AnyMessage, capacity: int = DEFAULT_CAPACITY) -> bytes:
    """Frame, serialize and finalize *message* into a fresh buffer.

    The checksum and sentence size are cached on the container. A sentence
    that does not fit in *capacity* bytes, or that carries non-ASCII text,
    raises ``ValueError``.
    """
    message.validate_header()
    writer = SentenceWriter(bytearray(capacity), message.talker, message.message)
    message.serialize_payload(writer)
    writer.end()
    if writer.overflowed:
        raise ValueError(f"{message.talker}{message.message} sentence does not fit in {capacity} bytes")
    if writer.error is not None:
        raise ValueError(f"{message.talker}{message.message} sentence not encoded: {writer.error.value}")
    message.checksum = writer.checksum or 0
    message.size = len(writer)
    return writer.tobytes()


def decode_message(
    data: Any,
    payload_types: Union[Mapping[str, Type[Any]], Iterable[Type[Any]], None] = None,
) -> tuple[AnyMessage, SentenceReader]:
    """Decode one sentence into an :class:`AnyMessage`.

    The payload class is chosen by the sentence's message code from
    *payload_types* (a mapping of code to class, or an iterable of classes
    with registered codes); by default every registered payload type is
    considered. The reader is returned alongside so callers can inspect the
    checksum status and any field errors.
    """
    if payload_types is None:
        types = registered_payload_types()
    elif isinstance(payload_types, Mapping):
        types = dict(payload_types)
    else:
        types = {message_code_for(cls): cls for cls in payload_types}

    reader = SentenceReader(data)
    try:
        cls = types[reader.message]
    except KeyError:
        raise LookupError(f"No payload type for message code {reader.message!r}") from None

    message = AnyMessage(reader.talker, reader.message, cls())
    message.deserialize_payload(reader)
    if reader.expected_checksum is not None:
        message.checksum = reader.expected_checksum
    message.size = len(reader.sentence)
    if reader.has_error():
        logger.debug("Decoded %s%s with %d field errors", reader.talker, reader.message, len(reader.errors))
    return message, reader
