#!/usr/bin/env python3
"""
Statement File Reader

Loads an uploaded CSV export into header + string rows with pandas, computes
the content hash used for duplicate-upload detection, and detects the dialect.
All input problems surface as ImportInputError before any batch is created.
"""

import hashlib
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from .detector import StatementFormat, detect_format

logger = logging.getLogger(__name__)

ENCODINGS = ("utf-8-sig", "cp1252")


class ImportInputError(ValueError):
    """The uploaded file (or its mapping) cannot be imported at all."""


def calculate_content_hash(content: bytes) -> str:
    """SHA-256 hex digest of the raw upload, used to spot re-imports."""
    return hashlib.sha256(content).hexdigest()


@dataclass
class StatementFile:
    """A decoded statement export."""

    filename: str
    header: list[str]
    rows: list[list[str]]
    content_hash: str
    format: StatementFormat = field(init=False)

    def __post_init__(self) -> None:
        self.header = [str(h).replace("\ufeff", "").strip() for h in self.header]
        self.format = detect_format(self.header)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def records(self) -> list[dict[str, Any]]:
        """Data rows keyed by header name."""
        return [dict(zip(self.header, row)) for row in self.rows]


def _decode(content: bytes) -> str:
    for encoding in ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ImportInputError(f"Unrecognized file encoding (tried {', '.join(ENCODINGS)})")


def read_statement(content: bytes, filename: str = "upload.csv") -> StatementFile:
    """
    Parse raw CSV bytes into a StatementFile.

    Args:
        content: Uploaded file bytes
        filename: Original filename, kept for the batch record

    Returns:
        StatementFile with header, data rows and detected format

    Raises:
        ImportInputError: Undecodable, malformed, or empty file
    """
    if not content or not content.strip():
        raise ImportInputError(f"{filename} is empty")

    text = _decode(content)

    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ImportInputError(f"Failed to parse {filename}: {e}") from e

    df = df.fillna("")
    table = df.values.tolist()
    if len(table) < 2:
        raise ImportInputError(f"{filename} has no data rows")

    header = [str(cell) for cell in table[0]]
    rows = [[str(cell) for cell in row] for row in table[1:]]

    statement = StatementFile(
        filename=filename,
        header=header,
        rows=rows,
        content_hash=calculate_content_hash(content),
    )
    logger.info(
        "Read %s: %d rows, format=%s, hash=%s...",
        filename,
        statement.row_count,
        statement.format.value,
        statement.content_hash[:8],
    )
    return statement


def read_statement_file(path: str | Path) -> StatementFile:
    """Read a statement export from disk."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Statement file not found: {path}")
    return read_statement(path.read_bytes(), filename=path.name)
