from __future__ import annotations

import math

import pytest

from nmeakit.sentence import (
    ChecksumStatus,
    ErrorKind,
    FloatFormat,
    MemoryClass,
    MessageResult,
    Register32,
    SentenceReader,
    SentenceWriter,
    as_bytes,
)

from helpers import frame, xor_body


def test_reader_scenario_with_wrong_checksum():
    sentence = b"$GPGGA,42,123.456,STRING*00\r\n"
    reader = SentenceReader(as_bytes(sentence))
    assert reader.talker == "GP"
    assert reader.message == "GGA"
    assert reader.number_of_fields() == 4
    assert xor_body(sentence) != 0
    assert reader.checksum_status is ChecksumStatus.MISMATCH
    assert reader.checksum_error is ErrorKind.CHECKSUM_MISMATCH
    assert not reader.is_checksum_valid()
    assert reader.read_int() == 42
    assert reader.read_float() == pytest.approx(123.456)
    assert reader.read_str() == "STRING"
    assert not reader.has_error()


def test_valid_checksum():
    reader = SentenceReader(frame("$GPGGA,1,2"))
    assert reader.checksum_status is ChecksumStatus.VALID
    assert reader.is_checksum_valid()
    assert reader.checksum_error is None
    assert reader.expected_checksum == reader.computed_checksum


def test_lowercase_checksum_digits_are_accepted():
    good = frame("$GPGGA,1,2")
    reader = SentenceReader(good[:-4] + good[-4:-2].lower() + b"\r\n")
    assert reader.is_checksum_valid()


def test_missing_checksum_is_unverifiable_not_invalid():
    reader = SentenceReader(b"$GPGGA,1,2\r\n")
    assert reader.checksum_status is ChecksumStatus.UNVERIFIABLE
    assert reader.checksum_error is ErrorKind.CHECKSUM_UNVERIFIABLE
    assert reader.expected_checksum is None
    assert reader.read_int() == 1
    assert reader.read_int() == 2


def test_truncated_checksum_is_unverifiable():
    reader = SentenceReader(b"$GPGGA,1*4\r\n")
    assert reader.checksum_status is ChecksumStatus.UNVERIFIABLE
    assert reader.read_int() == 1


def test_trailing_comma_yields_empty_last_field():
    reader = SentenceReader(frame("$GPGGA,1,2,"))
    assert reader.number_of_fields() == 4
    assert reader.read_str() == "1"
    assert reader.read_str() == "2"
    assert reader.read_str() == ""
    assert not reader.has_error()


def test_fields_are_views_into_the_sentence():
    backing = bytearray(frame("$GPGGA,abc"))
    reader = SentenceReader(as_bytes(backing))
    backing[7] = ord("X")
    assert reader.field(1) == "Xbc"


def test_past_the_end_extraction_sets_error_and_returns_defaults():
    reader = SentenceReader(frame("$GPGGA,5"))
    assert reader.read_int() == 5
    assert reader.read_int() == 0
    assert reader.read_float() == 0.0
    assert reader.read_register() == Register32(0)
    assert reader.read_str() == ""
    assert reader.has_error()
    assert {err.kind for err in reader.errors} == {ErrorKind.FIELD_EXHAUSTED}
    assert [err.index for err in reader.errors] == [2, 3, 4, 5]


def test_malformed_fields_accumulate_without_stopping():
    reader = SentenceReader(frame("$GPGGA,12x,7,1.5.2,9"))
    assert reader.read_int() == 0
    assert reader.read_int() == 7
    assert reader.read_float() == 0.0
    assert reader.read_int() == 9
    assert reader.has_error()
    assert [(err.index, err.kind) for err in reader.errors] == [
        (1, ErrorKind.MALFORMED_NUMBER),
        (3, ErrorKind.MALFORMED_NUMBER),
    ]
    assert reader.errors[0].text == "12x"


@pytest.mark.parametrize("text", ["", "+5", " 5", "0x10", "2147483648"])
def test_strict_integer_parse_rejects(text):
    reader = SentenceReader(frame(f"$GPGGA,{text}"))
    assert reader.read_int() == 0
    assert reader.has_error()


def test_integer_parse_accepts_negative_and_bounds():
    reader = SentenceReader(frame("$GPGGA,-42,2147483647,-2147483648"))
    assert reader.read_int() == -42
    assert reader.read_int() == 2**31 - 1
    assert reader.read_int() == -(2**31)
    assert not reader.has_error()


def test_unsigned_parse():
    reader = SentenceReader(frame("$GPGGA,4294967295,-1,4294967296"))
    assert reader.read_unsigned() == 0xFFFFFFFF
    assert reader.read_unsigned() == 0
    assert reader.read_unsigned() == 0
    assert len(reader.errors) == 2


@pytest.mark.parametrize("text", ["infx", "na", "0x1p3", "1e", "", "1.2.3"])
def test_strict_float_parse_rejects(text):
    reader = SentenceReader(frame(f"$GPGGA,{text}"))
    assert reader.read_float() == 0.0
    assert reader.has_error()


def test_float_parse_accepts_exponent_and_sign():
    reader = SentenceReader(frame("$GPGGA,-1.5e3,+.5,7"))
    assert reader.read_float() == -1500.0
    assert reader.read_float() == 0.5
    assert reader.read_float() == 7.0
    assert not reader.has_error()


def test_register_parse_is_lenient_on_width_and_prefix():
    reader = SentenceReader(frame("$GPGGA,0x2A,0XbeeF,ff,0x,0xG1,0x100000000"))
    assert reader.read_register() == Register32(0x2A)
    assert reader.read_register() == Register32(0xBEEF)
    assert reader.read_register() == Register32(0xFF)
    assert reader.read_register() == Register32(0)
    assert reader.read_register() == Register32(0)
    assert reader.read_register() == Register32(0)
    assert [err.index for err in reader.errors] == [4, 5, 6]


def test_enum_fields():
    reader = SentenceReader(frame("$GPACK,1,2,7"))
    assert reader.read_enum(MessageResult) is MessageResult.ACK
    assert reader.read_enum(MemoryClass) is MemoryClass.NONVOLATILE
    assert reader.read_enum(MemoryClass, MemoryClass.VOLATILE) is MemoryClass.VOLATILE
    assert str(MessageResult.ACK) == "ACK"
    assert len(reader.errors) == 1


def test_reset_replays_identical_values():
    reader = SentenceReader(frame("$GPGGA,42,1.25,TEXT,0x0F"))
    first = (reader.read_int(), reader.read_float(), reader.read_str(), reader.read_register())
    reader.reset()
    assert reader.position == 1
    second = (reader.read_int(), reader.read_float(), reader.read_str(), reader.read_register())
    assert first == second


def test_short_header_uses_sentinel_codes():
    reader = SentenceReader(frame("$GPG,1"))
    assert reader.talker == "XX"
    assert reader.message == "YYY"
    assert reader.read_int() == 1


def test_input_without_start_marker_has_no_fields():
    reader = SentenceReader(b"GPGGA,1,2\r\n")
    assert reader.number_of_fields() == 0
    assert reader.talker == "XX"
    assert reader.read_int() == 0
    assert reader.has_error()


def test_generic_read_dispatch():
    reader = SentenceReader(frame("$GPGGA,3,2.5,abc,0x10,1,0"))
    assert reader.read(int) == 3
    assert reader.read(float) == 2.5
    assert reader.read(str) == "abc"
    assert reader.read(Register32) == Register32(16)
    assert reader.read(MessageResult) is MessageResult.ACK
    assert reader.read(bool) is False
    with pytest.raises(TypeError):
        reader.read(list)


def test_write_then_read_round_trip():
    writer = SentenceWriter(bytearray(128), "GT", "RMC")
    writer.write_int(-17).write_float(3.14159).write_str("HELLO").empty_field()
    writer.hex().write_register(Register32(0x1234)).end()
    reader = SentenceReader(writer.view())
    assert reader.is_checksum_valid()
    assert (reader.talker, reader.message) == ("GT", "RMC")
    assert reader.read_int() == -17
    assert reader.read_float() == pytest.approx(3.14159, abs=1e-6)
    assert reader.read_str() == "HELLO"
    assert reader.read_str() == ""
    assert reader.read_register() == Register32(0x1234)
    assert not reader.has_error()
    assert reader.remaining() == 0


@pytest.mark.parametrize("fmt", [FloatFormat.FIXED, FloatFormat.SCIENTIFIC, FloatFormat.GENERAL])
def test_non_finite_floats_round_trip(fmt):
    writer = SentenceWriter(bytearray(64), "GP", "GGA")
    writer.set_float_format(fmt)
    writer.write_float(float("inf")).write_float(float("-inf")).write_float(float("nan")).end()
    assert writer.tobytes().startswith(b"$GPGGA,inf,-inf,nan*")

    reader = SentenceReader(writer.view())
    assert reader.read_float() == math.inf
    assert reader.read_float() == -math.inf
    assert math.isnan(reader.read_float())
    assert not reader.has_error()


def test_float_parse_accepts_spelled_out_infinity():
    reader = SentenceReader(frame("$GPGGA,+Infinity,NaN,-INF"))
    assert reader.read_float() == math.inf
    assert math.isnan(reader.read_float())
    assert reader.read_float() == -math.inf
    assert not reader.has_error()
