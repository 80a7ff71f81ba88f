"""Enumerations shared by several sentence payloads."""

from __future__ import annotations

import enum


class MessageResult(enum.IntEnum):
    NACK = 0
    ACK = 1

    def __str__(self) -> str:
        return self.name


class MemoryClass(enum.IntEnum):
    VOLATILE = 1
    NONVOLATILE = 2

    def __str__(self) -> str:
        return self.name
