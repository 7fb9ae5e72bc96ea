#!/usr/bin/env python3
"""
Audit Events

The pipeline emits structured audit events; durable storage of those events
belongs to an external writer. LoggingAuditEmitter is the default emitter: it
logs each event and keeps it in memory so callers (and tests) can inspect
what was emitted.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class AuditAction(Enum):
    """Kinds of transaction history events."""

    CREATED = "created"
    MANUAL_EDIT = "manual_edit"
    CSV_MERGE = "csv_merge"
    MATCH_REVIEWED = "match_reviewed"


@dataclass(frozen=True)
class AuditEvent:
    """One audit event for one transaction."""

    transaction_id: str
    user_id: str
    action: AuditAction
    field_name: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)


class AuditEmitter(Protocol):
    """Sink for audit events."""

    def emit(
        self,
        transaction_id: str,
        user_id: str,
        action: AuditAction,
        field_name: str | None = None,
        **metadata: Any,
    ) -> None: ...


class LoggingAuditEmitter:
    """Audit emitter that logs events and retains them in memory."""

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    def emit(
        self,
        transaction_id: str,
        user_id: str,
        action: AuditAction,
        field_name: str | None = None,
        **metadata: Any,
    ) -> None:
        event = AuditEvent(
            transaction_id=transaction_id,
            user_id=user_id,
            action=action,
            field_name=field_name,
            metadata=metadata,
        )
        self.events.append(event)
        logger.debug(
            "audit %s transaction=%s user=%s field=%s %s",
            action.value,
            transaction_id,
            user_id,
            field_name,
            metadata,
        )

    def events_for(self, transaction_id: str) -> list[AuditEvent]:
        """Events recorded for one transaction, oldest first."""
        return [event for event in self.events if event.transaction_id == transaction_id]


def emit_created(
    emitter: AuditEmitter, transaction_id: str, user_id: str, *, source: str, **metadata: Any
) -> None:
    """Record the creation of a transaction."""
    emitter.emit(transaction_id, user_id, AuditAction.CREATED, source=source, **metadata)


def emit_csv_merge(
    emitter: AuditEmitter,
    transaction_id: str,
    user_id: str,
    merged_fields: list[str],
    **metadata: Any,
) -> None:
    """
    Record a statement merge, one event per changed field.

    A merge that only touched the last-matched timestamp emits nothing.
    """
    for field_name in merged_fields:
        emitter.emit(transaction_id, user_id, AuditAction.CSV_MERGE, field_name=field_name, **metadata)


def emit_match_reviewed(
    emitter: AuditEmitter, transaction_id: str, user_id: str, *, match_id: str, decision: str, **metadata: Any
) -> None:
    """Record a human approve/reject decision on a flagged match."""
    emitter.emit(
        transaction_id, user_id, AuditAction.MATCH_REVIEWED, match_id=match_id, decision=decision, **metadata
    )
