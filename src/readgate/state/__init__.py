"""Persisted state documents."""

from readgate.state.store import (
    StateDocument,
    StateModel,
    delete_document,
    load_document,
    utc_now,
    write_document,
)

__all__ = [
    "StateDocument",
    "StateModel",
    "delete_document",
    "load_document",
    "utc_now",
    "write_document",
]
