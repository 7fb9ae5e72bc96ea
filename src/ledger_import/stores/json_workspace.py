#!/usr/bin/env python3
"""
JSON Workspace

File-backed persistence for the command line: the in-memory stores are loaded
from one JSON document per workspace directory and written back after each
command.
"""

import logging
from pathlib import Path
from typing import Any

from ..batches.models import ImportBatch, ImportRow, TransactionMatch
from ..core.json_utils import read_json, write_json
from ..core.models import Transaction
from .memory import (
    InMemoryImportStore,
    InMemoryNameResolver,
    InMemoryTransactionStore,
    RecordingProgressSink,
)

logger = logging.getLogger(__name__)

WORKSPACE_FILENAME = "ledger.json"


class JsonWorkspace:
    """All stores of one workspace directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.transactions = InMemoryTransactionStore()
        self.imports = InMemoryImportStore()
        self.categories = InMemoryNameResolver("category")
        self.projects = InMemoryNameResolver("project")
        self.progress = RecordingProgressSink()

    @property
    def path(self) -> Path:
        return self.directory / WORKSPACE_FILENAME

    @classmethod
    def load(cls, directory: Path) -> "JsonWorkspace":
        """Open a workspace; a missing file yields an empty one."""
        workspace = cls(directory)
        if not workspace.path.exists():
            logger.debug("No workspace file at %s, starting empty", workspace.path)
            return workspace

        data = read_json(workspace.path)
        for item in data.get("transactions", []):
            workspace.transactions.add(Transaction.from_dict(item))

        imports = workspace.imports
        imports.batches = {b["id"]: ImportBatch.from_dict(b) for b in data.get("batches", [])}
        imports.rows = {r["id"]: ImportRow.from_dict(r) for r in data.get("rows", [])}
        imports.matches = {m["id"]: TransactionMatch.from_dict(m) for m in data.get("matches", [])}
        imports._batch_ids.advance_past(list(imports.batches))
        imports._row_ids.advance_past(list(imports.rows))
        imports._match_ids.advance_past(list(imports.matches))

        workspace.categories.records = {u: dict(r) for u, r in data.get("categories", {}).items()}
        workspace.projects.records = {u: dict(r) for u, r in data.get("projects", {}).items()}

        logger.debug(
            "Loaded workspace %s: %d transactions, %d batches",
            workspace.path,
            len(workspace.transactions.transactions),
            len(imports.batches),
        )
        return workspace

    def to_dict(self) -> dict[str, Any]:
        return {
            "transactions": [t.to_dict() for t in self.transactions.transactions.values()],
            "batches": [b.to_dict() for b in self.imports.batches.values()],
            "rows": [r.to_dict() for r in self.imports.rows.values()],
            "matches": [m.to_dict() for m in self.imports.matches.values()],
            "categories": self.categories.records,
            "projects": self.projects.records,
        }

    def save(self) -> Path:
        write_json(self.path, self.to_dict())
        logger.debug("Saved workspace %s", self.path)
        return self.path
