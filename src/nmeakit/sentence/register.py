"""Fixed-width 32-bit register value."""

from __future__ import annotations

from dataclasses import dataclass

REGISTER_MASK = 0xFFFFFFFF


@dataclass(frozen=True)
class Register32:
    """Opaque 32-bit register contents.

    Streams only see it through :meth:`to_unsigned` and its hex text form.
    """

    value: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.value <= REGISTER_MASK:
            raise ValueError(f"Register32 value out of range: {self.value}")

    def to_unsigned(self) -> int:
        return self.value

    def to_hex(self) -> str:
        return f"0x{self.value:08X}"

    @classmethod
    def from_hex(cls, text: str) -> "Register32":
        digits = text[2:] if text[:2] in ("0x", "0X") else text
        return cls(int(digits, 16))

    def __str__(self) -> str:
        return self.to_hex()
