from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .sentence.writer import FloatFormat, NumericBase

_BASES = {"dec": NumericBase.DEC, "hex": NumericBase.HEX}
_FLOAT_FORMATS = {"fixed": FloatFormat.FIXED, "scientific": FloatFormat.SCIENTIFIC, "general": FloatFormat.GENERAL}


@dataclass
class WriterSettings:
    capacity: int = 82
    talker: str = "GP"
    base: str = "dec"  # dec | hex
    float_format: str = "fixed"  # fixed | scientific | general

    @property
    def base_enum(self) -> NumericBase:
        key = self.base.lower()
        if key not in _BASES:
            raise ValueError(f"Unsupported base '{self.base}'")
        return _BASES[key]

    @property
    def float_format_enum(self) -> FloatFormat:
        key = self.float_format.lower()
        if key not in _FLOAT_FORMATS:
            raise ValueError(f"Unsupported float_format '{self.float_format}'")
        return _FLOAT_FORMATS[key]

    def validate(self) -> None:
        if self.base.lower() not in _BASES:
            raise ValueError(f"Unsupported base '{self.base}'")
        if self.float_format.lower() not in _FLOAT_FORMATS:
            raise ValueError(f"Unsupported float_format '{self.float_format}'")
        if self.capacity <= 0:
            raise ValueError("writer.capacity must be positive")
        if len(self.talker) != 2:
            raise ValueError(f"writer.talker must be exactly 2 chars, got '{self.talker}'")


@dataclass
class CaptureSettings:
    encoding: str = "ascii"
    skip_comments: bool = True
    strict: bool = False  # drop sentences whose checksum does not verify


@dataclass
class CodecConfig:
    writer: WriterSettings = field(default_factory=WriterSettings)
    capture: CaptureSettings = field(default_factory=CaptureSettings)


def _read_settings_file(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a JSON object")
    return data


def _deep_merge(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in extra.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = _deep_merge(current, value)
        result[key] = value
    return result


def load_config(path: Optional[Path | str] = None, overrides: Sequence[str] | None = None) -> CodecConfig:
    """
    Load codec settings from JSON (or defaults when *path* is None) and apply
    CLI-style overrides.

    Overrides are dotted `key=value` pairs, e.g.:
        ["writer.capacity=128", "capture.strict=true"]
    """
    data: Dict[str, Any] = _read_settings_file(Path(path)) if path is not None else {}
    override_data: Dict[str, Any] = {}
    for item in overrides or []:
        dotted_key, value = _split_override(item)
        _set_dotted(override_data, dotted_key, value)
    merged = _deep_merge(data, override_data)
    writer_data = merged.get("writer") or {}
    capture_data = merged.get("capture") or {}
    config = CodecConfig(
        writer=WriterSettings(
            capacity=int(writer_data.get("capacity", 82)),
            talker=str(writer_data.get("talker", "GP")),
            base=str(writer_data.get("base", "dec")),
            float_format=str(writer_data.get("float_format", "fixed")),
        ),
        capture=CaptureSettings(
            encoding=str(capture_data.get("encoding", "ascii")),
            skip_comments=bool(capture_data.get("skip_comments", True)),
            strict=bool(capture_data.get("strict", False)),
        ),
    )
    config.writer.validate()
    return config


def _split_override(item: str) -> tuple[str, Any]:
    dotted_key, sep, raw_value = item.partition("=")
    if not sep:
        raise ValueError(f"Override '{item}' must use key=value syntax")
    dotted_key = dotted_key.strip()
    if not dotted_key or "" in dotted_key.split("."):
        raise ValueError(f"Override '{item}' has an empty key")
    return dotted_key, _coerce_scalar(raw_value.strip())


def _coerce_scalar(raw: str) -> Any:
    lowered = raw.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    for convert in (int, float):
        try:
            return convert(raw)
        except ValueError:
            continue
    return raw


def _set_dotted(target: Dict[str, Any], dotted_key: str, value: Any) -> None:
    *sections, leaf = dotted_key.split(".")
    for section in sections:
        target = target.setdefault(section, {})
    target[leaf] = value
