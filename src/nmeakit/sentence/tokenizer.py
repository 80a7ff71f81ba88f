"""Split a framed sentence into field views."""

from __future__ import annotations

from typing import Any, List

from .checksum import CHECKSUM_DELIMITER, FIELD_SEPARATOR, START_MARKER
from .span import ByteSpan, as_bytes

FieldSequence = List[ByteSpan]

_TRAILING = frozenset(b"\x00\r\n\t\x0b\x0c ")


def trim_trailing(span: ByteSpan) -> ByteSpan:
    """Drop trailing NUL, CR, LF and whitespace bytes."""
    end = len(span)
    while end and span[end - 1] in _TRAILING:
        end -= 1
    return span[:end]


def tokenize(data: Any) -> FieldSequence:
    """Split a sentence into fields.

    Field 0 is the talker+message token. The checksum suffix is cut at the
    first ``*``. A trailing separator yields an explicit empty last field.
    Input that does not start with ``$`` produces no fields.
    """
    span = trim_trailing(data if isinstance(data, ByteSpan) else as_bytes(data))
    if not span or span[0] != START_MARKER:
        return []

    star = span.find(CHECKSUM_DELIMITER)
    if star >= 0:
        span = trim_trailing(span[:star])

    body = span[1:]
    fields: FieldSequence = []
    start = 0
    while True:
        comma = body.find(FIELD_SEPARATOR, start)
        if comma < 0:
            fields.append(body[start:])
            break
        fields.append(body[start:comma])
        start = comma + 1
    return fields
