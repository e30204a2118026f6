from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import CorruptRecordError, StorageError
from ..models import Record
from .base import RecordStore
from .paths import JSON_FILE_NAME, default_data_root, ensure_dir

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


class JsonRecordStore(RecordStore):
    """Key-value file store for the record.

    Layout: {"version": 1, "high_score": <int>, "timestamp": <int ms>}.

    Writes are atomic (temp file, fsync, rename) and the previous file is kept
    as ``<name>.bak`` so a torn or corrupted primary can be recovered. A file
    written under another schema version is replaced by an empty record.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else default_data_root() / JSON_FILE_NAME
        self.backup_path = self.path.with_suffix(self.path.suffix + ".bak")

    def load(self) -> Record:
        try:
            data = self._read(self.path)
        except FileNotFoundError:
            logger.debug("No record file at %s; using default record", self.path)
            return Record()
        except (OSError, CorruptRecordError) as exc:
            logger.warning("Failed to read record from %s: %s", self.path, exc)
            return self._load_backup()

        if data.get("version") != SCHEMA_VERSION:
            logger.warning(
                "Record file %s has incompatible version %r (expected %d); recreating empty",
                self.path,
                data.get("version"),
                SCHEMA_VERSION,
            )
            self._recreate_empty()
            return Record()
        return self._decode(data, self.path)

    def save(self, record: Record) -> None:
        payload = json.dumps({"version": SCHEMA_VERSION, **record.to_dict()}, indent=2, sort_keys=True)
        try:
            self._atomic_write(payload)
        except OSError as exc:
            logger.error("I/O error while writing record to %s: %s", self.path, exc)
            raise StorageError(f"Could not write record to {self.path}: {exc}") from exc
        logger.info("Saved record %d to %s", record.high_score, self.path)

    # Internal utilities

    def _load_backup(self) -> Record:
        try:
            data = self._read(self.backup_path)
            if data.get("version") == SCHEMA_VERSION:
                logger.info("Recovered record from backup %s", self.backup_path)
                return self._decode(data, self.backup_path)
        except FileNotFoundError:
            pass
        except (OSError, CorruptRecordError) as exc:
            logger.warning("Backup record %s is unreadable too: %s", self.backup_path, exc)
        return Record()

    def _recreate_empty(self) -> None:
        try:
            self.save(Record())
        except StorageError:
            logger.warning("Could not recreate record file %s", self.path)

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        try:
            with path.open("r", encoding="utf-8") as f:
                text = f.read()
        except UnicodeDecodeError as exc:
            raise CorruptRecordError(f"Record file {path} is not valid UTF-8: {exc}") from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CorruptRecordError(f"Invalid JSON in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise CorruptRecordError(f"Record file {path} does not hold an object")
        return data

    @staticmethod
    def _decode(data: Dict[str, Any], path: Path) -> Record:
        try:
            return Record.from_dict(data)
        except (TypeError, ValueError, OverflowError) as exc:
            logger.warning("Record in %s is invalid: %s", path, exc)
            return Record()

    def _atomic_write(self, text: str) -> None:
        """Write text to self.path atomically, keeping a .bak of the previous file."""
        ensure_dir(self.path.parent)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if self.path.exists():
            shutil.copy2(str(self.path), str(self.backup_path))
        os.replace(tmp, self.path)
