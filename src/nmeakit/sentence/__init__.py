"""
Serialization primitives for ``$TTMMM,f1,...,fn*HH\\r\\n`` sentences.

The subpackage exposes byte spans, checksum helpers, the writer and reader
streams and the type-erased :class:`AnyMessage` container. Everything here
is synchronous and single-owner: share instances across threads only with
external locking.
"""

from .checksum import checksum, format_checksum, looks_like_sentence, parse_hex2, validate_sentence
from .common import MemoryClass, MessageResult
from .errors import (
    EmptyMessageError,
    ErrorKind,
    FieldError,
    InvalidMetadataError,
    MessageCodeNotRegisteredError,
    NmeaError,
    PayloadCapabilityError,
    TypeMismatchError,
    WriterFinalizedError,
)
from .message import AnyMessage, decode_message, encode_message
from .payload import (
    message_code,
    message_code_for,
    read_payload,
    register_message_code,
    sentence_payload,
    supports_payload,
    write_payload,
)
from .reader import ChecksumStatus, SentenceReader
from .register import Register32
from .span import ByteSpan, MutableByteSpan, as_bytes, as_writable_bytes
from .tokenizer import tokenize, trim_trailing
from .writer import Dec, EmptyField, EndMsg, FloatFormat, Hex, NumericBase, SentenceWriter

__all__ = [
    "ByteSpan",
    "MutableByteSpan",
    "as_bytes",
    "as_writable_bytes",
    "checksum",
    "format_checksum",
    "looks_like_sentence",
    "parse_hex2",
    "validate_sentence",
    "tokenize",
    "trim_trailing",
    "Register32",
    "MessageResult",
    "MemoryClass",
    "SentenceWriter",
    "NumericBase",
    "FloatFormat",
    "Hex",
    "Dec",
    "EmptyField",
    "EndMsg",
    "SentenceReader",
    "ChecksumStatus",
    "write_payload",
    "read_payload",
    "supports_payload",
    "message_code",
    "message_code_for",
    "register_message_code",
    "sentence_payload",
    "AnyMessage",
    "encode_message",
    "decode_message",
    "ErrorKind",
    "FieldError",
    "NmeaError",
    "EmptyMessageError",
    "TypeMismatchError",
    "InvalidMetadataError",
    "WriterFinalizedError",
    "PayloadCapabilityError",
    "MessageCodeNotRegisteredError",
]
