#!/usr/bin/env python3
"""
Core Data Models for Ledger Import

Common data structures shared by the dialect parsers, the matcher and the
batch orchestrator.

- TransactionCandidate: parsed, not-yet-persisted transaction from one input
  row (or one aggregated group of rows)
- Transaction: a record owned by the external transaction store
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .dates import FinancialDate
from .json_utils import to_jsonable


class TransactionType(Enum):
    """Direction of a transaction."""

    EXPENSE = "expense"
    INCOME = "income"
    OTHER = "other"

    @classmethod
    def from_value(cls, value: object) -> "TransactionType":
        """Lenient conversion used by the generic column mapper."""
        if isinstance(value, TransactionType):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return cls.OTHER


@dataclass
class TransactionCandidate:
    """
    Canonical transaction shape produced by every dialect parser.

    Amounts are integer minor units (cents) and always non-negative; the sign
    of the source amount is carried by `type`.
    """

    name: str | None = None
    merchant: str | None = None
    description: str | None = None
    total: int | None = None
    currency_code: str | None = None
    issued_at: FinancialDate | None = None
    type: TransactionType = TransactionType.EXPENSE
    import_reference: str | None = None

    # Hints resolved through the category/project resolver
    category_code: str | None = None
    project_code: str | None = None
    note: str | None = None

    items: list["TransactionCandidate"] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    # Original row(s) this candidate came from, kept for ImportRow.raw_data
    raw_data: dict[str, Any] = field(default_factory=dict)

    @property
    def has_amount_and_date(self) -> bool:
        """True when amount/date scoring is possible."""
        return self.total is not None and self.issued_at is not None

    @property
    def has_reference(self) -> bool:
        return bool(self.import_reference)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-safe dict (used for parsed-data and match snapshots)."""
        return {
            "name": self.name,
            "merchant": self.merchant,
            "description": self.description,
            "total": self.total,
            "currency_code": self.currency_code,
            "issued_at": self.issued_at.to_iso_string() if self.issued_at else None,
            "type": self.type.value,
            "import_reference": self.import_reference,
            "category_code": self.category_code,
            "project_code": self.project_code,
            "note": self.note,
            "items": [item.to_dict() for item in self.items],
            "files": list(self.files),
            "extra": to_jsonable(self.extra),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransactionCandidate":
        """Rebuild a candidate from a snapshot produced by to_dict()."""
        return cls(
            name=data.get("name"),
            merchant=data.get("merchant"),
            description=data.get("description"),
            total=data.get("total"),
            currency_code=data.get("currency_code"),
            issued_at=FinancialDate.from_value(data.get("issued_at")),
            type=TransactionType.from_value(data.get("type", "expense")),
            import_reference=data.get("import_reference"),
            category_code=data.get("category_code"),
            project_code=data.get("project_code"),
            note=data.get("note"),
            items=[cls.from_dict(item) for item in data.get("items", [])],
            files=list(data.get("files", [])),
            extra=dict(data.get("extra") or {}),
        )


@dataclass
class Transaction:
    """
    Stored transaction, owned by the external transaction store.

    `total` is an integer in minor units; matching compares it with exact
    integer equality.
    """

    id: str
    user_id: str
    total: int | None
    currency_code: str | None
    issued_at: FinancialDate | None

    name: str | None = None
    merchant: str | None = None
    description: str | None = None
    type: TransactionType = TransactionType.EXPENSE
    import_reference: str | None = None
    category_code: str | None = None
    project_code: str | None = None
    note: str | None = None
    items: list[dict[str, Any]] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None
    last_matched_at: datetime | None = None

    @classmethod
    def from_candidate(
        cls, transaction_id: str, user_id: str, candidate: TransactionCandidate, created_at: datetime | None = None
    ) -> "Transaction":
        """Build the stored shape of a freshly created transaction."""
        return cls(
            id=transaction_id,
            user_id=user_id,
            total=candidate.total,
            currency_code=candidate.currency_code,
            issued_at=candidate.issued_at,
            name=candidate.name,
            merchant=candidate.merchant,
            description=candidate.description,
            type=candidate.type,
            import_reference=candidate.import_reference,
            category_code=candidate.category_code,
            project_code=candidate.project_code,
            note=candidate.note,
            items=[item.to_dict() for item in candidate.items],
            files=list(candidate.files),
            extra=dict(candidate.extra),
            created_at=created_at or datetime.now(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "total": self.total,
            "currency_code": self.currency_code,
            "issued_at": self.issued_at.to_iso_string() if self.issued_at else None,
            "name": self.name,
            "merchant": self.merchant,
            "description": self.description,
            "type": self.type.value,
            "import_reference": self.import_reference,
            "category_code": self.category_code,
            "project_code": self.project_code,
            "note": self.note,
            "items": to_jsonable(self.items),
            "files": list(self.files),
            "extra": to_jsonable(self.extra),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "last_matched_at": self.last_matched_at.isoformat() if self.last_matched_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        """Create from dict (JSON deserialization)."""
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            total=data.get("total"),
            currency_code=data.get("currency_code"),
            issued_at=FinancialDate.from_value(data.get("issued_at")),
            name=data.get("name"),
            merchant=data.get("merchant"),
            description=data.get("description"),
            type=TransactionType.from_value(data.get("type", "expense")),
            import_reference=data.get("import_reference"),
            category_code=data.get("category_code"),
            project_code=data.get("project_code"),
            note=data.get("note"),
            items=list(data.get("items", [])),
            files=list(data.get("files", [])),
            extra=dict(data.get("extra") or {}),
            created_at=datetime.fromisoformat(data["created_at"]) if data.get("created_at") else datetime.now(),
            updated_at=datetime.fromisoformat(data["updated_at"]) if data.get("updated_at") else None,
            last_matched_at=(
                datetime.fromisoformat(data["last_matched_at"]) if data.get("last_matched_at") else None
            ),
        )
