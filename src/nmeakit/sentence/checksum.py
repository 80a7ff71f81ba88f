"""Sentence checksum and framing checks.

The checksum is the XOR of every byte between the ``$`` start marker and the
``*`` checksum delimiter, both excluded, written as two uppercase hex digits.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from .span import ByteSpan, as_bytes

START_MARKER = ord("$")
CHECKSUM_DELIMITER = ord("*")
FIELD_SEPARATOR = ord(",")
TERMINATOR = b"\r\n"

_HEX_DIGITS = "0123456789abcdefABCDEF"


def checksum(data: Any, length: Optional[int] = None) -> int:
    """XOR the bytes at offsets ``[1, length)``, stopping at the first ``*``.

    ``data`` is expected to start with the ``$`` marker, which is skipped.
    Works on any buffer without copying it.
    """
    span = data if isinstance(data, ByteSpan) else as_bytes(data)
    end = len(span) if length is None else min(length, len(span))
    if end <= 1:
        return 0
    body = np.frombuffer(span.memoryview(), dtype=np.uint8, count=end - 1, offset=1)
    stars = np.flatnonzero(body == CHECKSUM_DELIMITER)
    if stars.size:
        body = body[: stars[0]]
    if body.size == 0:
        return 0
    return int(np.bitwise_xor.reduce(body))


def looks_like_sentence(data: Any) -> bool:
    """Shape check only: the first byte is the ``$`` start marker."""
    span = data if isinstance(data, ByteSpan) else as_bytes(data)
    return len(span) > 0 and span[0] == START_MARKER


def format_checksum(value: int) -> bytes:
    return b"*%02X\r\n" % (value & 0xFF)


def parse_hex2(text: Any) -> Optional[int]:
    """Parse exactly two hex digits, or return ``None``."""
    if isinstance(text, ByteSpan):
        text = text.tobytes()
    if isinstance(text, (bytes, bytearray, memoryview)):
        text = bytes(text).decode("ascii", "replace")
    if len(text) < 2 or text[0] not in _HEX_DIGITS or text[1] not in _HEX_DIGITS:
        return None
    return int(text[:2], 16)


def validate_sentence(data: Any) -> bool:
    """Full framing check.

    True when the sentence starts with ``$`` followed by a five character
    talker/message header, carries a ``*HH`` checksum that matches its body,
    and ends with ``\\r\\n``.
    """
    raw = (data if isinstance(data, ByteSpan) else as_bytes(data)).tobytes()
    if not raw.endswith(TERMINATOR) or not looks_like_sentence(raw):
        return False
    body = raw[: -len(TERMINATOR)]
    star = body.rfind(b"*")
    if star < 0 or len(body) - star != 3:
        return False
    header = body[1:star].split(b",", 1)[0]
    if len(header) != 5 or not header.isalnum():
        return False
    expected = parse_hex2(body[star + 1 :])
    return expected is not None and expected == checksum(body, star + 1)
