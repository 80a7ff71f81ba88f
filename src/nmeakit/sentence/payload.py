"""Payload serialization hooks and the per-type message-code registry.

A payload type becomes storable in :class:`~nmeakit.sentence.message.AnyMessage`
by registering two free functions for it::

    @write_payload.register
    def _(value: GGAMessage, writer: SentenceWriter) -> None:
        writer.write(value.i, value.d, value.s)

    @read_payload.register
    def _(value: GGAMessage, reader: SentenceReader) -> None:
        value.i = reader.read_int()
        ...

Hooks write and read the payload fields only: the preamble and the
checksum belong to the streams. Dataclasses can use :func:`sentence_payload`
to get both hooks generated from their field list.
"""

from __future__ import annotations

import dataclasses
import enum
import typing
from functools import singledispatch
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from .errors import InvalidMetadataError, MessageCodeNotRegisteredError
from .reader import SentenceReader
from .register import Register32
from .writer import SentenceWriter

T = TypeVar("T")

MESSAGE_CODE_LENGTH = 3
TALKER_LENGTH = 2

_MESSAGE_CODES: Dict[type, str] = {}
_FIELD_KINDS = (bool, int, float, str, Register32)


@singledispatch
def write_payload(value: Any, writer: SentenceWriter) -> None:
    raise TypeError(f"No write_payload hook registered for {type(value).__name__}")


@singledispatch
def read_payload(value: Any, reader: SentenceReader) -> None:
    raise TypeError(f"No read_payload hook registered for {type(value).__name__}")


def _has_hook(hook: Callable[..., Any], cls: type) -> bool:
    return hook.dispatch(cls) is not hook.dispatch(object)  # type: ignore[attr-defined]


def supports_payload(cls: type) -> bool:
    """True when both serialization hooks are registered for *cls*."""
    return _has_hook(write_payload, cls) and _has_hook(read_payload, cls)


def _check_code(code: str) -> str:
    if not isinstance(code, str) or len(code) != MESSAGE_CODE_LENGTH:
        raise InvalidMetadataError(f"message code must be exactly {MESSAGE_CODE_LENGTH} chars, got {code!r}")
    return code


def register_message_code(cls: type, code: str) -> None:
    _MESSAGE_CODES[cls] = _check_code(code)


def message_code_for(cls: type) -> str:
    try:
        return _MESSAGE_CODES[cls]
    except KeyError:
        raise MessageCodeNotRegisteredError(
            f"No message code registered for {cls.__name__}; use @message_code or pass one explicitly"
        ) from None


def registered_payload_types() -> Dict[str, type]:
    """Registered payload types keyed by message code."""
    return {code: cls for cls, code in _MESSAGE_CODES.items()}


def message_code(code: str) -> Callable[[Type[T]], Type[T]]:
    """Class decorator registering the 3-character message code of a payload type."""

    def decorator(cls: Type[T]) -> Type[T]:
        register_message_code(cls, code)
        return cls

    return decorator


def _field_kind(name: str, annotation: Any) -> type:
    if isinstance(annotation, type) and (
        annotation in _FIELD_KINDS or issubclass(annotation, enum.IntEnum)
    ):
        return annotation
    raise TypeError(f"Field {name!r} has unsupported type {annotation!r} for a sentence payload")


def sentence_payload(code: Optional[str] = None) -> Callable[[Type[T]], Type[T]]:
    """
    Register field-wise hooks for a dataclass payload.

    Fields are written and read in declaration order. Supported field types
    are ``int``, ``bool``, ``float``, ``str``, :class:`Register32` and
    ``IntEnum`` subclasses. Register fields are always written in hex form,
    whatever the writer's current base. When *code* is given it is
    registered as the payload's message code as well.
    """

    def decorator(cls: Type[T]) -> Type[T]:
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"sentence_payload requires a dataclass, got {cls!r}")
        hints = typing.get_type_hints(cls)
        layout = [(f.name, _field_kind(f.name, hints[f.name])) for f in dataclasses.fields(cls)]

        def _write(value: Any, writer: SentenceWriter) -> None:
            for name, kind in layout:
                field_value = getattr(value, name)
                if kind is Register32:
                    # registers always go out as hex so read_register gets them back
                    base = writer.base
                    writer.hex().write_register(field_value)
                    writer.base = base
                else:
                    writer.write(field_value)

        def _read(value: Any, reader: SentenceReader) -> None:
            for name, kind in layout:
                result = reader.read(kind)
                if result is None:
                    # unknown enum value, keep the current one
                    continue
                setattr(value, name, result)

        write_payload.register(cls, _write)
        read_payload.register(cls, _read)
        if code is not None:
            register_message_code(cls, code)
        return cls

    return decorator
