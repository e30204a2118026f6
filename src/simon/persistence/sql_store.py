from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, Table, create_engine, delete, insert, inspect, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..errors import StorageError
from ..models import Record
from .base import RecordStore
from .paths import DB_FILE_NAME, default_data_root, ensure_dir

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

metadata = MetaData()

record_table = Table(
    "record_table",
    metadata,
    Column("high_score", Integer, nullable=False),
    Column("timestamp", Integer, nullable=False),  # ms since epoch
)

schema_info = Table(
    "schema_info",
    metadata,
    Column("version", Integer, nullable=False),
)


def default_database_url() -> str:
    root = ensure_dir(default_data_root())
    return f"sqlite:///{root / DB_FILE_NAME}"


class SqlRecordStore(RecordStore):
    """Embedded relational store for the record (SQLite by default).

    The table holds at most one row: save() deletes every row and inserts the
    new record in one transaction. A database created under another schema
    version is dropped and recreated empty the first time it is touched.
    """

    def __init__(self, url: Optional[str] = None, engine: Optional[Engine] = None) -> None:
        self.url = url or default_database_url()
        self._engine = engine or create_engine(self.url)
        self._schema_ready = False

    def load(self) -> Record:
        try:
            self._ensure_schema()
            with self._engine.connect() as conn:
                row = conn.execute(
                    select(record_table.c.high_score, record_table.c.timestamp)
                    .order_by(record_table.c.high_score.desc())
                    .limit(1)
                ).first()
        except SQLAlchemyError as exc:
            logger.warning("Failed to read record from %s: %s", self.url, exc)
            return Record()
        if row is None:
            logger.debug("No record stored in %s", self.url)
            return Record()
        try:
            record = Record.from_millis(row.high_score, row.timestamp)
        except (ValueError, OverflowError) as exc:
            logger.warning("Stored record in %s is invalid: %s", self.url, exc)
            return Record()
        logger.debug("SELECT: loaded record %d", record.high_score)
        return record

    def save(self, record: Record) -> None:
        try:
            self._ensure_schema()
            with self._engine.begin() as conn:
                conn.execute(delete(record_table))
                conn.execute(insert(record_table).values(**record.to_dict()))
        except SQLAlchemyError as exc:
            logger.error("Error saving record to %s: %s", self.url, exc)
            raise StorageError(f"Could not save record to {self.url}: {exc}") from exc
        logger.info("Saved record %d to %s", record.high_score, self.url)

    def close(self) -> None:
        self._engine.dispose()

    def _ensure_schema(self) -> None:
        if self._schema_ready:
            return
        with self._engine.begin() as conn:
            inspector = inspect(conn)
            version = None
            if inspector.has_table(schema_info.name):
                version = conn.execute(select(schema_info.c.version)).scalar()
            if version != SCHEMA_VERSION:
                if version is not None or inspector.has_table(record_table.name):
                    logger.warning(
                        "Record database schema version %r != %d; recreating tables", version, SCHEMA_VERSION
                    )
                metadata.drop_all(conn)
                metadata.create_all(conn)
                conn.execute(insert(schema_info).values(version=SCHEMA_VERSION))
                logger.info("Record table created in %s", self.url)
        self._schema_ready = True
