"""
Statement Formats Package

Reads CSV exports, detects their dialect and maps rows to transaction
candidates.

Key Components:
- reader: bytes -> StatementFile (pandas), content hashing
- detector: header row -> StatementFormat
- cards: American Express and Chase row mappers
- generic: caller-mapped columns
- parsers: StatementFormat -> DialectParser registry and parse_rows()
"""

from .context import ParseContext
from .detector import FORMAT_INFO, StatementFormat, detect_format
from .generic import GENERIC_FIELDS, normalize_column_mapping
from .parsers import PARSERS, DialectParser, parse_rows
from .reader import (
    ImportInputError,
    StatementFile,
    calculate_content_hash,
    read_statement,
    read_statement_file,
)

__all__ = [
    "DialectParser",
    "FORMAT_INFO",
    "GENERIC_FIELDS",
    "ImportInputError",
    "PARSERS",
    "ParseContext",
    "StatementFile",
    "StatementFormat",
    "calculate_content_hash",
    "detect_format",
    "normalize_column_mapping",
    "parse_rows",
    "read_statement",
    "read_statement_file",
]
