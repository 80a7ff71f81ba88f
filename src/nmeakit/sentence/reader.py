"""Forward-only extraction stream over one received sentence."""

from __future__ import annotations

import enum
import logging
import re
from typing import Any, List, Optional, Type, TypeVar

from .checksum import CHECKSUM_DELIMITER, checksum, parse_hex2
from .errors import ErrorKind, FieldError
from .register import REGISTER_MASK, Register32
from .span import ByteSpan, as_bytes
from .tokenizer import FieldSequence, tokenize, trim_trailing

logger = logging.getLogger(__name__)

MALFORMED_TALKER = "XX"
MALFORMED_MESSAGE = "YYY"

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_INT_RE = re.compile(r"-?[0-9]+")
_UNSIGNED_RE = re.compile(r"[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)", re.IGNORECASE
)
_HEX_RE = re.compile(r"[0-9A-Fa-f]+")

E = TypeVar("E", bound=enum.IntEnum)


class ChecksumStatus(str, enum.Enum):
    VALID = "valid"
    MISMATCH = "mismatch"
    UNVERIFIABLE = "unverifiable"


class SentenceReader:
    """
    Tokenize a sentence and hand out its fields as typed values.

    Extraction never raises. A missing or malformed field sets the
    cumulative error flag, records a :class:`FieldError` and yields a zero
    default, so a damaged sentence still decodes as far as it can. Check
    :meth:`has_error` after a run of extractions.
    """

    def __init__(self, sentence: Any):
        self._sentence: ByteSpan = sentence if isinstance(sentence, ByteSpan) else as_bytes(sentence)
        self._index = 1
        self._errors: List[FieldError] = []
        self.expected_checksum: Optional[int] = None
        self.computed_checksum: Optional[int] = None
        self.checksum_status = ChecksumStatus.UNVERIFIABLE

        trimmed = trim_trailing(self._sentence)
        star = trimmed.rfind(CHECKSUM_DELIMITER)
        if star >= 0 and star + 3 <= len(trimmed):
            parsed = parse_hex2(trimmed[star + 1 : star + 3])
            if parsed is not None:
                self.expected_checksum = parsed
                self.computed_checksum = checksum(trimmed, star + 1)
                if parsed == self.computed_checksum:
                    self.checksum_status = ChecksumStatus.VALID
                else:
                    self.checksum_status = ChecksumStatus.MISMATCH
                    logger.debug(
                        "Checksum mismatch (expected=%02X, actual=%02X)",
                        parsed,
                        self.computed_checksum,
                    )

        self._fields: FieldSequence = tokenize(trimmed)
        if self._fields and len(self._fields[0]) >= 5:
            header = self._fields[0].decode()
            self.talker = header[:2]
            self.message = header[2:5]
        else:
            self.talker = MALFORMED_TALKER
            self.message = MALFORMED_MESSAGE

    # -- sentence level ------------------------------------------------------

    @property
    def sentence(self) -> ByteSpan:
        return self._sentence

    @property
    def fields(self) -> FieldSequence:
        return list(self._fields)

    def field(self, index: int) -> str:
        return self._fields[index].decode()

    def number_of_fields(self) -> int:
        return len(self._fields)

    def is_checksum_valid(self) -> bool:
        return self.checksum_status is ChecksumStatus.VALID

    @property
    def checksum_error(self) -> Optional[ErrorKind]:
        if self.checksum_status is ChecksumStatus.MISMATCH:
            return ErrorKind.CHECKSUM_MISMATCH
        if self.checksum_status is ChecksumStatus.UNVERIFIABLE:
            return ErrorKind.CHECKSUM_UNVERIFIABLE
        return None

    @property
    def position(self) -> int:
        return self._index

    def remaining(self) -> int:
        return max(len(self._fields) - self._index, 0)

    def has_error(self) -> bool:
        return bool(self._errors)

    @property
    def errors(self) -> List[FieldError]:
        return list(self._errors)

    def reset(self) -> None:
        """Rewind to the first value field, past the talker+message token."""
        self._index = 1

    # -- extraction ----------------------------------------------------------

    def _fail(self, index: int, kind: ErrorKind, text: str = "") -> None:
        self._errors.append(FieldError(index=index, kind=kind, text=text))
        logger.debug("Field %d of %s%s: %s %r", index, self.talker, self.message, kind.value, text)

    def next_field(self) -> ByteSpan:
        if self._index >= len(self._fields):
            self._fail(self._index, ErrorKind.FIELD_EXHAUSTED)
            self._index += 1
            return ByteSpan()
        span = self._fields[self._index]
        self._index += 1
        return span

    def _next_text(self) -> Optional[str]:
        index = self._index
        if index >= len(self._fields):
            self.next_field()
            return None
        return self.next_field().decode()

    def _number(self, pattern: "re.Pattern[str]") -> Optional[str]:
        index = self._index
        text = self._next_text()
        if text is None:
            return None
        if not pattern.fullmatch(text):
            self._fail(index, ErrorKind.MALFORMED_NUMBER, text)
            return None
        return text

    def read_int(self) -> int:
        index = self._index
        text = self._number(_INT_RE)
        if text is None:
            return 0
        value = int(text)
        if not INT32_MIN <= value <= INT32_MAX:
            self._fail(index, ErrorKind.MALFORMED_NUMBER, text)
            return 0
        return value

    def read_unsigned(self) -> int:
        index = self._index
        text = self._number(_UNSIGNED_RE)
        if text is None:
            return 0
        value = int(text)
        if value > REGISTER_MASK:
            self._fail(index, ErrorKind.MALFORMED_NUMBER, text)
            return 0
        return value

    def read_float(self) -> float:
        text = self._number(_FLOAT_RE)
        if text is None:
            return 0.0
        return float(text)

    def read_register(self) -> Register32:
        index = self._index
        text = self._next_text()
        if text is None:
            return Register32(0)
        digits = text[2:] if text[:2] in ("0x", "0X") else text
        if not _HEX_RE.fullmatch(digits):
            self._fail(index, ErrorKind.MALFORMED_NUMBER, text)
            return Register32(0)
        value = int(digits, 16)
        if value > REGISTER_MASK:
            self._fail(index, ErrorKind.MALFORMED_NUMBER, text)
            return Register32(0)
        return Register32(value)

    def read_str(self) -> str:
        return self.next_field().decode()

    def read_enum(self, enum_cls: Type[E], default: Optional[E] = None) -> Optional[E]:
        """Read an integer field and map it onto *enum_cls*."""
        index = self._index
        text = self._number(_INT_RE)
        if text is None:
            return default
        try:
            return enum_cls(int(text))
        except ValueError:
            self._fail(index, ErrorKind.MALFORMED_NUMBER, text)
            return default

    def read(self, kind: type) -> Any:
        """Read one field converted to *kind*."""
        if kind is Register32:
            return self.read_register()
        if isinstance(kind, type) and issubclass(kind, enum.IntEnum):
            return self.read_enum(kind)
        if kind is bool:
            return bool(self.read_int())
        if kind is int:
            return self.read_int()
        if kind is float:
            return self.read_float()
        if kind is str:
            return self.read_str()
        raise TypeError(f"Cannot read a sentence field as {kind!r}")
