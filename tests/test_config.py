from __future__ import annotations

from pathlib import Path

import pytest

from nmeakit.config import CodecConfig, load_config
from nmeakit.sentence import FloatFormat, NumericBase


def test_defaults_without_file():
    cfg = load_config()
    assert isinstance(cfg, CodecConfig)
    assert cfg.writer.capacity == 82
    assert cfg.writer.talker == "GP"
    assert cfg.writer.base_enum is NumericBase.DEC
    assert cfg.writer.float_format_enum is FloatFormat.FIXED
    assert cfg.capture.skip_comments is True


def test_load_config_overrides(tmp_path: Path) -> None:
    cfg_path = tmp_path / "codec.json"
    cfg_path.write_text(
        """
        {
          "writer": {"capacity": 256, "talker": "MW", "base": "hex"},
          "capture": {"encoding": "latin-1"}
        }
        """,
        encoding="utf-8",
    )
    cfg = load_config(cfg_path, overrides=["writer.capacity=128", "capture.strict=true", "writer.float_format=general"])
    assert cfg.writer.capacity == 128
    assert cfg.writer.talker == "MW"
    assert cfg.writer.base_enum is NumericBase.HEX
    assert cfg.writer.float_format_enum is FloatFormat.GENERAL
    assert cfg.capture.encoding == "latin-1"
    assert cfg.capture.strict is True


@pytest.mark.parametrize(
    "override",
    ["writer.base=octal", "writer.float_format=engineering", "writer.capacity=0", "writer.talker=GPS"],
)
def test_invalid_values_rejected(override):
    with pytest.raises(ValueError):
        load_config(overrides=[override])


@pytest.mark.parametrize("override", ["writer.capacity", "=5", "writer..capacity=5", "writer.=5"])
def test_malformed_override_syntax(override):
    with pytest.raises(ValueError):
        load_config(overrides=[override])


def test_override_values_are_typed() -> None:
    cfg = load_config(overrides=["writer.capacity=96", "capture.skip_comments=FALSE", "writer.talker=II"])
    assert cfg.writer.capacity == 96
    assert cfg.capture.skip_comments is False
    assert cfg.writer.talker == "II"


def test_settings_file_must_hold_an_object(tmp_path: Path) -> None:
    cfg_path = tmp_path / "codec.json"
    cfg_path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg_path)
