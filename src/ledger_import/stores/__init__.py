"""
Stores Package

Reference implementations of the collaborator protocols.
"""

from .json_workspace import JsonWorkspace
from .memory import (
    InMemoryImportStore,
    InMemoryNameResolver,
    InMemoryTransactionStore,
    RecordingProgressSink,
    code_from_name,
)

__all__ = [
    "InMemoryImportStore",
    "InMemoryNameResolver",
    "InMemoryTransactionStore",
    "JsonWorkspace",
    "RecordingProgressSink",
    "code_from_name",
]
