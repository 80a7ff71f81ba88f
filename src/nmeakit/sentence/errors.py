"""Error kinds and exceptions shared by the sentence streams and containers.

Stream-level problems (short buffers, missing or malformed fields, checksum
trouble) are recorded as :class:`ErrorKind` values and queried after the
fact. Container-level problems are raised immediately.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ErrorKind(str, enum.Enum):
    BUFFER_TOO_SMALL = "buffer_too_small"
    NON_ASCII_TEXT = "non_ascii_text"
    FIELD_EXHAUSTED = "field_exhausted"
    MALFORMED_NUMBER = "malformed_number"
    CHECKSUM_UNVERIFIABLE = "checksum_unverifiable"
    CHECKSUM_MISMATCH = "checksum_mismatch"
    EMPTY_CONTAINER = "empty_container"
    TYPE_MISMATCH = "type_mismatch"
    INVALID_METADATA = "invalid_metadata"


@dataclass(frozen=True)
class FieldError:
    """One failed extraction: the field index it happened at and why."""

    index: int
    kind: ErrorKind
    text: str = ""


class NmeaError(Exception):
    kind: ErrorKind | None = None


class EmptyMessageError(NmeaError, RuntimeError):
    kind = ErrorKind.EMPTY_CONTAINER


class TypeMismatchError(NmeaError, TypeError):
    kind = ErrorKind.TYPE_MISMATCH


class InvalidMetadataError(NmeaError, ValueError):
    kind = ErrorKind.INVALID_METADATA


class WriterFinalizedError(NmeaError, RuntimeError):
    """Raised when a finalized writer is asked to write again."""


class PayloadCapabilityError(NmeaError, TypeError):
    """Raised when a payload type has no registered write/read hooks."""


class MessageCodeNotRegisteredError(NmeaError, LookupError):
    """Raised when a message code is deduced for an unregistered payload type."""
