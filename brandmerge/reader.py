"""
CSV loading for the brand, source and verification exports.

Responsibilities:
- encoding detection + decoding
- newline normalization
- delimiter detection
- header / cell trimming, blank line skipping
- row length enforcement
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from charset_normalizer import from_bytes
from pydantic import BaseModel, Field

from .errors import CsvReadError
from .models import ReportItem
from .rules import CANDIDATE_DELIMITERS, DEFAULT_DELIMITER, TARGET_ENCODING

logger = logging.getLogger(__name__)


class CsvTable(BaseModel):
    label: str
    headers: List[str] = Field(default_factory=list)
    rows: List[Dict[str, str]] = Field(default_factory=list)
    encoding: str = TARGET_ENCODING
    delimiter: str = DEFAULT_DELIMITER
    warnings: List[ReportItem] = Field(default_factory=list)


def decode_bytes(raw: bytes) -> Tuple[str, str, bool]:
    """
    Decode export bytes to text.

    Rules:
    - UTF-8 (with or without BOM) is tried first; most exports are UTF-8.
    - Otherwise use charset-normalizer's best guess.
    - If that fails too, decode UTF-8 with replacement characters and flag it.

    Returns (text, encoding_used, lossy).
    """
    try:
        return raw.decode("utf-8-sig"), TARGET_ENCODING, False
    except UnicodeDecodeError:
        pass

    match = from_bytes(raw).best()
    if match is not None:
        try:
            return raw.decode(match.encoding), match.encoding, False
        except (LookupError, UnicodeDecodeError):
            pass

    return raw.decode(TARGET_ENCODING, errors="replace"), TARGET_ENCODING, True


def detect_delimiter(header_line: str) -> str:
    counts = {delim: header_line.count(delim) for delim in CANDIDATE_DELIMITERS}
    best = max(CANDIDATE_DELIMITERS, key=lambda d: counts[d])
    return best if counts[best] > 0 else DEFAULT_DELIMITER


def parse_csv_text(text: str, label: str) -> CsvTable:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    first_line = next((line for line in text.split("\n") if line.strip()), "")
    delimiter = detect_delimiter(first_line)

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    table = CsvTable(label=label, delimiter=delimiter)

    headers: Optional[List[str]] = None
    try:
        for raw_row in reader:
            cells = [cell.strip() for cell in raw_row]
            if not any(cells):
                continue

            if headers is None:
                headers = cells
                continue

            # header is line 1, so the first record is row 2
            row_no = len(table.rows) + 2
            if len(cells) > len(headers):
                raise CsvReadError(
                    label,
                    f"row {row_no} has {len(cells)} columns, expected {len(headers)}",
                )
            if len(cells) < len(headers):
                table.warnings.append(ReportItem(
                    row=row_no,
                    issue="row_too_short",
                    value=str(len(cells)),
                    action=f"padded_to_{len(headers)}",
                    message=f"Row {row_no} in {label} CSV has {len(cells)} of {len(headers)} columns, padded",
                ))
                cells = cells + [""] * (len(headers) - len(cells))

            table.rows.append(dict(zip(headers, cells)))
    except csv.Error as exc:
        raise CsvReadError(label, str(exc)) from exc

    table.headers = headers or []
    return table


def read_csv(path: Path, label: str) -> CsvTable:
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise CsvReadError(label, exc.strerror or str(exc)) from exc

    text, encoding, lossy = decode_bytes(raw)
    table = parse_csv_text(text, label)
    table.encoding = encoding
    if lossy:
        table.warnings.insert(0, ReportItem(
            issue="undecodable_bytes",
            value=str(path),
            action="replaced",
            message=f"{label} CSV is not valid in any detected encoding; undecodable bytes were replaced",
        ))

    logger.debug(
        "%s CSV: %d rows, encoding=%s, delimiter=%r",
        label, len(table.rows), table.encoding, table.delimiter,
    )
    return table
