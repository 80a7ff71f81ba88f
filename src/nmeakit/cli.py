"""Command line interface for the nmeakit package."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional

import typer

from .capture import SentenceLog, records_to_dataframe, summarize
from .config import CodecConfig, load_config
from .sentence import (
    ChecksumStatus,
    SentenceReader,
    SentenceWriter,
    checksum,
    format_checksum,
    looks_like_sentence,
)
from .sentence.writer import NumericBase

_INT_TEXT = re.compile(r"-?[0-9]+")
_FLOAT_TEXT = re.compile(r"[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

app = typer.Typer(add_completion=False, context_settings={"help_option_names": ["-h", "--help"]})


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON codec settings.", exists=True, readable=True
    ),
    override: Optional[List[str]] = typer.Option(
        None,
        "--set",
        help="Override config keys, e.g. --set writer.capacity=128 --set capture.strict=true",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Encode, check and decode comma-delimited checksummed sentences."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = load_config(config_path, override)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--set") from exc


def _config(ctx: typer.Context) -> CodecConfig:
    return ctx.obj if isinstance(ctx.obj, CodecConfig) else CodecConfig()


def _write_value(writer: SentenceWriter, text: str) -> None:
    if text == "":
        writer.empty_field()
    elif _INT_TEXT.fullmatch(text):
        writer.write_int(int(text))
    elif _FLOAT_TEXT.fullmatch(text):
        writer.write_float(float(text))
    else:
        writer.write_str(text)


@app.command()
def encode(
    ctx: typer.Context,
    message: str = typer.Option(..., "--message", "-m", help="3-character message code."),
    values: List[str] = typer.Argument(None, help="Field values; integers and decimals are typed automatically."),
    talker: Optional[str] = typer.Option(None, "--talker", "-t", help="2-character talker (default from config)."),
    hex_ints: bool = typer.Option(False, "--hex", help="Write integers as 0xHHHH."),
    capacity: Optional[int] = typer.Option(None, "--capacity", help="Output buffer size in bytes."),
) -> None:
    """Build one sentence from the given field values."""

    settings = _config(ctx).writer
    talker = talker or settings.talker
    if len(talker) != 2:
        raise typer.BadParameter("Talker must be exactly 2 characters", param_hint="--talker")
    if len(message) != 3:
        raise typer.BadParameter("Message code must be exactly 3 characters", param_hint="--message")

    writer = SentenceWriter(bytearray(capacity or settings.capacity), talker, message)
    writer.set_float_format(settings.float_format_enum)
    if hex_ints or settings.base_enum is NumericBase.HEX:
        writer.hex()
    for value in values or []:
        _write_value(writer, value)
    writer.end()

    if writer.overflowed:
        typer.echo(f"Sentence does not fit in {writer.capacity} bytes", err=True)
        raise typer.Exit(code=1)
    if writer.error is not None:
        typer.echo(f"Sentence not encoded: {writer.error.value}", err=True)
        raise typer.Exit(code=1)
    typer.echo(writer.tobytes().decode("ascii").rstrip("\r\n"))


@app.command()
def check(sentence: str = typer.Argument(..., help="Sentence text, with or without CRLF.")) -> None:
    """Show the header, fields and checksum status of one sentence."""

    raw = sentence.encode("ascii", errors="replace")
    if not looks_like_sentence(raw):
        typer.echo("Not a sentence: missing '$' start marker", err=True)
        raise typer.Exit(code=2)
    reader = SentenceReader(raw)
    typer.echo(f"Talker: {reader.talker}")
    typer.echo(f"Message: {reader.message}")
    typer.echo(f"Fields: {reader.number_of_fields()}")
    for idx in range(1, reader.number_of_fields()):
        typer.echo(f"  [{idx}] {reader.field(idx)!r}")
    status = reader.checksum_status
    if status is ChecksumStatus.UNVERIFIABLE:
        typer.echo("Checksum: unverifiable (no *HH suffix)")
        return
    typer.echo(
        f"Checksum: {status.value} (sent={reader.expected_checksum:02X}, computed={reader.computed_checksum:02X})"
    )
    if status is ChecksumStatus.MISMATCH:
        raise typer.Exit(code=1)


@app.command("checksum")
def checksum_cmd(body: str = typer.Argument(..., help="Sentence body starting with '$', without '*HH'.")) -> None:
    """Print the '*HH' suffix for a sentence body."""

    raw = body.encode("ascii", errors="replace")
    if not looks_like_sentence(raw):
        raise typer.BadParameter("Body must start with '$'")
    typer.echo(format_checksum(checksum(raw)).decode("ascii").rstrip("\r\n"))


@app.command()
def decode(
    ctx: typer.Context,
    input_path: Path = typer.Option(..., "--in", help="Capture log, one sentence per line.", exists=True, readable=True),
    out: Optional[Path] = typer.Option(None, "--out", help="Write the decoded table as CSV."),
    summary: bool = typer.Option(False, "--summary", help="Print counts per talker/message instead of rows."),
) -> None:
    """Decode a capture log into a table."""

    log = SentenceLog(_config(ctx).capture)
    records = log.parse_file(input_path)
    df = records_to_dataframe(records)
    stats = log.stats()

    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(out, index=False)
        typer.echo(f"Table written to {out}")
    elif summary:
        typer.echo(summarize(df).to_string(index=False))
    else:
        typer.echo(df.to_string(index=False))

    typer.echo(
        "sentences={sentences} checksum_errors={checksum_errors} "
        "unverifiable={unverifiable} malformed={malformed}".format(**stats)
    )


def run() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    run()
