"""Record persistence for Simon Kawaii.

This package provides:
- The RecordStore contract consumed by the engine (load never fails, save
  replaces the single stored record or raises StorageError)
- An in-memory store used as the default collaborator and in tests
- A JSON key-value file store with atomic writes and backup recovery
- An SQLAlchemy-backed relational store (SQLite by default)
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .base import RecordStore
from .json_store import JsonRecordStore
from .memory import InMemoryRecordStore
from .sql_store import SqlRecordStore

if TYPE_CHECKING:
    from ..config import StorageSettings

logger = logging.getLogger(__name__)


def open_store(settings: "StorageSettings") -> RecordStore:
    """Build the record store selected by the storage settings."""
    backend = settings.backend
    if backend == "memory":
        store: RecordStore = InMemoryRecordStore()
    elif backend == "json":
        store = JsonRecordStore(Path(settings.path).expanduser() if settings.path else None)
    elif backend == "sql":
        url = None
        if settings.path:
            path = Path(settings.path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            url = f"sqlite:///{path}"
        store = SqlRecordStore(url)
    else:
        raise ValueError(f"Unknown storage backend: {backend!r}")
    logger.info("Using %s record store", backend)
    return store


__all__ = [
    "RecordStore",
    "InMemoryRecordStore",
    "JsonRecordStore",
    "SqlRecordStore",
    "open_store",
]
