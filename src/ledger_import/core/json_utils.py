#!/usr/bin/env python3
"""
JSON Utilities Module

Centralized JSON reading/writing with consistent pretty-printing, plus a
converter that turns pipeline values (dates, enums) into JSON-safe data for
row snapshots and the on-disk workspace.
"""

import json
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from .dates import FinancialDate


def to_jsonable(value: Any) -> Any:
    """Recursively convert a value into JSON-compatible primitives."""
    if isinstance(value, FinancialDate):
        return value.to_iso_string()
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_jsonable(v) for v in value]
    return value


def write_json(filepath: str | Path, data: Any, ensure_ascii: bool = False, sort_keys: bool = False) -> None:
    """
    Write data to a JSON file with standard pretty-printing.

    Args:
        filepath: Path to the JSON file
        data: Data to write to the file
        ensure_ascii: If True, escape non-ASCII characters (default: False)
        sort_keys: If True, sort dictionary keys (default: False)
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(to_jsonable(data), f, indent=2, ensure_ascii=ensure_ascii, sort_keys=sort_keys)


def read_json(filepath: str | Path) -> Any:
    """Read data from a JSON file."""
    with open(filepath, encoding="utf-8") as f:
        return json.load(f)
