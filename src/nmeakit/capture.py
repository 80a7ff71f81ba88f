"""Decode sentence capture logs into records and tables."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

import pandas as pd

from .config import CaptureSettings
from .sentence import ChecksumStatus, SentenceReader, looks_like_sentence

BASE_COLUMNS = ["line_no", "talker", "message", "checksum", "n_fields"]


@dataclass
class SentenceRecord:
    """One decoded line of a capture log."""

    line_no: int
    talker: str
    message: str
    fields: List[str]
    checksum: ChecksumStatus
    raw: str = field(repr=False, default="")

    def as_dict(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "line_no": self.line_no,
            "talker": self.talker,
            "message": self.message,
            "checksum": self.checksum.value,
            "n_fields": len(self.fields),
        }
        for idx, value in enumerate(self.fields, start=1):
            row[f"field_{idx}"] = value
        return row


class SentenceLog:
    """
    Streaming decoder for text capture logs, one sentence per line.
    Blank lines and ``#`` comments are skipped; lines that do not start with
    ``$`` are counted as malformed and dropped.
    """

    def __init__(self, settings: Optional[CaptureSettings] = None):
        self.settings = settings or CaptureSettings()
        self._stats: Dict[str, int] = {
            "sentences": 0,
            "checksum_errors": 0,
            "unverifiable": 0,
            "malformed": 0,
        }
        self._log = logging.getLogger(__name__)

    def parse_lines(self, lines: Iterable[str]) -> Iterator[SentenceRecord]:
        for line_no, line in enumerate(lines, start=1):
            stripped = line.strip()
            if not stripped:
                continue
            if self.settings.skip_comments and stripped.startswith("#"):
                continue
            raw = stripped.encode(self.settings.encoding, errors="replace")
            if not looks_like_sentence(raw):
                self._stats["malformed"] += 1
                self._log.debug("Line %d is not a sentence: %r", line_no, stripped[:40])
                continue
            record = self._decode(line_no, raw, stripped)
            if record is not None:
                yield record

    def _decode(self, line_no: int, raw: bytes, text: str) -> Optional[SentenceRecord]:
        reader = SentenceReader(raw)
        status = reader.checksum_status
        if status is ChecksumStatus.MISMATCH:
            self._stats["checksum_errors"] += 1
            self._log.debug(
                "Checksum mismatch on line %d (expected=%02X, actual=%02X)",
                line_no,
                reader.expected_checksum,
                reader.computed_checksum,
            )
            if self.settings.strict:
                return None
        elif status is ChecksumStatus.UNVERIFIABLE:
            self._stats["unverifiable"] += 1
            if self.settings.strict:
                return None
        self._stats["sentences"] += 1
        values = [reader.read_str() for _ in range(reader.remaining())]
        return SentenceRecord(
            line_no=line_no,
            talker=reader.talker,
            message=reader.message,
            fields=values,
            checksum=status,
            raw=text,
        )

    def parse_file(self, path: Path | str) -> List[SentenceRecord]:
        path = Path(path)
        with path.open("r", encoding=self.settings.encoding, errors="replace") as fh:
            records = list(self.parse_lines(fh))
        self._log.info(
            "Decoded %d sentences from %s (checksum_errors=%d unverifiable=%d malformed=%d)",
            self._stats["sentences"],
            path,
            self._stats["checksum_errors"],
            self._stats["unverifiable"],
            self._stats["malformed"],
        )
        return records

    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def reset(self) -> None:
        for key in self._stats:
            self._stats[key] = 0


def records_to_dataframe(records: Iterable[SentenceRecord]) -> pd.DataFrame:
    """Tabulate records; sentences with fewer fields get empty trailing cells."""

    rows = [record.as_dict() for record in records]
    width = max((row["n_fields"] for row in rows), default=0)
    field_cols = [f"field_{idx}" for idx in range(1, width + 1)]
    df = pd.DataFrame(rows, columns=BASE_COLUMNS + field_cols)
    if field_cols:
        df[field_cols] = df[field_cols].fillna("")
    return df


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """Sentence counts per talker and message code, with checksum breakdown."""

    if df.empty:
        return pd.DataFrame(columns=["talker", "message", "count", "valid", "mismatch", "unverifiable"])
    counts = (
        df.groupby(["talker", "message", "checksum"]).size().unstack(fill_value=0)
    )
    for status in ChecksumStatus:
        if status.value not in counts.columns:
            counts[status.value] = 0
    counts = counts[[s.value for s in ChecksumStatus]]
    counts.insert(0, "count", counts.sum(axis=1))
    counts.columns.name = None
    return counts.reset_index()
