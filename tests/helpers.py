from __future__ import annotations

from functools import reduce


def xor_body(sentence: bytes) -> int:
    """Reference checksum: XOR of everything between '$' and '*'."""
    body = sentence[1:].split(b"*", 1)[0]
    return reduce(lambda acc, byte: acc ^ byte, body, 0)


def frame(body: str) -> bytes:
    """Append a correct '*HH\\r\\n' suffix to a '$...' body."""
    raw = body.encode("ascii")
    return raw + b"*%02X\r\n" % xor_body(raw)
