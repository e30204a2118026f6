from __future__ import annotations

import logging
from typing import List, Optional

from ..models import Record
from .base import RecordStore

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """Process-local store. Default collaborator and test seam."""

    def __init__(self, initial: Optional[Record] = None) -> None:
        self._record = initial or Record()
        self.save_calls: List[Record] = []

    def load(self) -> Record:
        return self._record

    def save(self, record: Record) -> None:
        self.save_calls.append(record)
        self._record = record
        logger.debug("Stored record in memory: %s", record)
