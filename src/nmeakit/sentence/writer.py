"""Forward-only insertion stream building one sentence in a fixed buffer."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .checksum import FIELD_SEPARATOR, checksum, format_checksum
from .errors import ErrorKind, WriterFinalizedError
from .register import REGISTER_MASK, Register32
from .span import ByteSpan, MutableByteSpan, as_writable_bytes

logger = logging.getLogger(__name__)


class NumericBase(enum.IntEnum):
    DEC = 10
    HEX = 16


class FloatFormat(str, enum.Enum):
    FIXED = "f"
    SCIENTIFIC = "e"
    GENERAL = "g"


@dataclass(frozen=True)
class Hex:
    """Marker switching subsequent integer fields to ``0xHHHH`` form."""


@dataclass(frozen=True)
class Dec:
    """Marker switching subsequent integer fields back to decimal."""


@dataclass(frozen=True)
class EmptyField:
    """Marker writing an intentionally empty field."""


@dataclass(frozen=True)
class EndMsg:
    """Marker finalizing the sentence."""


class SentenceWriter:
    """
    Serialize typed fields into a caller-supplied buffer.

    The buffer never grows. When a token does not fit, nothing of it is
    written, :attr:`error` becomes ``BUFFER_TOO_SMALL`` and every later
    append is ignored; callers compare ``len(writer)`` against what they
    expected to detect truncation. Text fields must be ASCII: anything else
    is dropped the same way and flagged as ``NON_ASCII_TEXT``.
    """

    def __init__(self, buffer: Any, talker: str, message: str):
        self._buffer: MutableByteSpan = as_writable_bytes(buffer)
        self.talker = talker
        self.message = message
        self.base = NumericBase.DEC
        self.float_format = FloatFormat.FIXED
        self._pos = 0
        self._error: Optional[ErrorKind] = None
        self._finalized = False
        self._checksum: Optional[int] = None
        self._write_preamble()

    def _write_preamble(self) -> None:
        preamble = b"$" + self.talker.encode("ascii") + self.message.encode("ascii") + b","
        self._append(preamble)

    # -- state ---------------------------------------------------------------

    def __len__(self) -> int:
        return self._pos

    @property
    def capacity(self) -> int:
        return len(self._buffer)

    @property
    def remaining(self) -> int:
        return len(self._buffer) - self._pos

    @property
    def error(self) -> Optional[ErrorKind]:
        return self._error

    @property
    def overflowed(self) -> bool:
        return self._error is ErrorKind.BUFFER_TOO_SMALL

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def checksum(self) -> Optional[int]:
        return self._checksum

    def view(self) -> ByteSpan:
        """Read-only span over the bytes written so far."""
        return self._buffer.as_readonly()[: self._pos]

    def tobytes(self) -> bytes:
        return self.view().tobytes()

    def reset(self) -> None:
        """Rewind to an empty sentence and write the preamble again."""
        self._pos = 0
        self._error = None
        self._finalized = False
        self._checksum = None
        self.base = NumericBase.DEC
        self.float_format = FloatFormat.FIXED
        self._write_preamble()

    # -- low level -----------------------------------------------------------

    def _check_open(self) -> None:
        if self._finalized:
            raise WriterFinalizedError("sentence already finalized; call reset() to reuse the writer")

    def _append(self, token: bytes) -> bool:
        if self._error is not None:
            return False
        if len(token) > self.remaining:
            self._error = ErrorKind.BUFFER_TOO_SMALL
            logger.debug(
                "Buffer too small: %d bytes needed, %d of %d left",
                len(token),
                self.remaining,
                self.capacity,
            )
            return False
        self._pos = self._buffer.write(self._pos, token)
        return True

    def _field(self, text: str) -> "SentenceWriter":
        self._check_open()
        try:
            token = text.encode("ascii") + b","
        except UnicodeEncodeError:
            if self._error is None:
                self._error = ErrorKind.NON_ASCII_TEXT
                logger.debug("Non-ASCII field dropped: %r", text)
            return self
        self._append(token)
        return self

    # -- fields --------------------------------------------------------------

    def write_int(self, value: int) -> "SentenceWriter":
        value = int(value)
        if self.base is NumericBase.HEX:
            return self._field(f"0x{value & REGISTER_MASK:04X}")
        return self._field(str(value))

    def write_float(self, value: float) -> "SentenceWriter":
        return self._field(format(float(value), self.float_format.value))

    def write_str(self, text: str) -> "SentenceWriter":
        return self._field(text)

    def write_register(self, register: Register32) -> "SentenceWriter":
        return self.write_int(register.to_unsigned())

    def empty_field(self) -> "SentenceWriter":
        self._check_open()
        self._append(b",")
        return self

    def hex(self) -> "SentenceWriter":
        self.base = NumericBase.HEX
        return self

    def dec(self) -> "SentenceWriter":
        self.base = NumericBase.DEC
        return self

    def set_float_format(self, fmt: FloatFormat | str) -> "SentenceWriter":
        self.float_format = FloatFormat(fmt)
        return self

    def write(self, *values: Any) -> "SentenceWriter":
        """Append each value according to its type."""
        for value in values:
            if isinstance(value, Hex):
                self.hex()
            elif isinstance(value, Dec):
                self.dec()
            elif isinstance(value, FloatFormat):
                self.set_float_format(value)
            elif isinstance(value, EmptyField):
                self.empty_field()
            elif isinstance(value, EndMsg):
                self.end()
            elif isinstance(value, Register32):
                self.write_register(value)
            elif isinstance(value, (bool, int)):
                self.write_int(value)
            elif isinstance(value, float):
                self.write_float(value)
            elif isinstance(value, str):
                self.write_str(value)
            else:
                raise TypeError(f"Cannot write {type(value).__name__} as a sentence field")
        return self

    # -- finalize ------------------------------------------------------------

    def end(self) -> "SentenceWriter":
        """Strip the trailing separator and append ``*HH\\r\\n``.

        The writer is finalized afterwards; a later write raises
        :class:`WriterFinalizedError` until :meth:`reset` is called.
        """
        self._check_open()
        self._finalized = True
        if self._pos == 0 or self._error is not None:
            return self

        if self._buffer[self._pos - 1] == FIELD_SEPARATOR:
            self._pos -= 1

        value = checksum(self._buffer, self._pos)
        if not self._append(format_checksum(value)):
            return self
        self._checksum = value
        if self._pos < self.capacity:
            # debug convenience, not part of the sentence length
            self._buffer[self._pos] = 0
        return self
