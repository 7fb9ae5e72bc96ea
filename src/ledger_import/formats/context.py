#!/usr/bin/env python3
"""Per-import parsing context shared by all dialect parsers."""

from dataclasses import dataclass, field

from ..core.datastore import NameResolver


@dataclass
class ParseContext:
    """
    Everything a dialect parser needs beyond the rows themselves.

    Attributes:
        user_id: Owner of the import; resolver calls are scoped to it
        category_resolver: Looks up or creates categories named in the file
        project_resolver: Looks up or creates projects for PO mappings
        column_mapping: Generic dialect only, column index -> target field
        project_mappings: Amazon only, purchase order number -> project name
        currency_code: Currency assumed for dialects without a currency column
    """

    user_id: str
    category_resolver: NameResolver | None = None
    project_resolver: NameResolver | None = None
    column_mapping: dict[int, str] = field(default_factory=dict)
    project_mappings: dict[str, str] = field(default_factory=dict)
    currency_code: str = "USD"
