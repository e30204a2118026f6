from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import Record


class RecordStore(ABC):
    """Durable home of the single best Record.

    Implementations keep at most one record: save() replaces whatever was
    stored before. load() must never raise; faults degrade to Record().
    """

    @abstractmethod
    def load(self) -> Record:
        """Return the persisted record, or Record() when none exists."""
        raise NotImplementedError

    @abstractmethod
    def save(self, record: Record) -> None:
        """Persist record as the sole current record.

        Raises:
            StorageError: if the record could not be written.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release any resources held by the store."""
