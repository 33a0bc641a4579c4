"""
Database Handler Module.

SQLite storage for case fields and item rows.

Tables:
    case_fields  one row per (case_id, key): value, confidence, provenance
    case_items   one row per (case_id, line_no): the latest item table

Every operation opens its own connection; the database file is the only
state shared between extraction passes.
"""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from order_extraction.utils.logger import get_logger
from order_extraction.utils.helpers import ensure_directory
from order_extraction.utils.exceptions import DatabaseError
from order_extraction.extraction.extraction_result import FieldRecord, LineItem

# Initialize module logger
logger = get_logger(__name__)

WRITTEN = "written"
PROTECTED = "protected"

DEFAULT_SOURCE_PRIORITY = {"ocr": 1, "vendor": 2, "admin": 3}

CREATE_FIELDS_SQL = """
CREATE TABLE IF NOT EXISTS case_fields (
    case_id TEXT NOT NULL,
    key TEXT NOT NULL,
    value_text TEXT,
    value_json TEXT,
    confidence REAL NOT NULL DEFAULT 0,
    source TEXT NOT NULL,
    last_updated_by TEXT,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (case_id, key)
)
"""

CREATE_ITEMS_SQL = """
CREATE TABLE IF NOT EXISTS case_items (
    case_id TEXT NOT NULL,
    line_no INTEGER NOT NULL,
    code TEXT,
    description TEXT NOT NULL,
    qty INTEGER,
    value_raw TEXT,
    value_num REAL,
    confidence_json TEXT,
    PRIMARY KEY (case_id, line_no)
)
"""

UPSERT_FIELD_SQL = """
INSERT INTO case_fields (
    case_id, key, value_text, value_json, confidence,
    source, last_updated_by, updated_at
) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT (case_id, key) DO UPDATE SET
    value_text = excluded.value_text,
    value_json = excluded.value_json,
    confidence = excluded.confidence,
    source = excluded.source,
    last_updated_by = excluded.last_updated_by,
    updated_at = excluded.updated_at
WHERE {stored_rank} <= ?
"""

INSERT_ITEM_SQL = """
INSERT INTO case_items (
    case_id, line_no, code, description, qty,
    value_raw, value_num, confidence_json
) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""


class DatabaseHandler:
    """
    Handles database operations for case fields and items.

    Attributes:
        db_path: Path to the SQLite database file
        source_priority: Rank per provenance source; higher wins

    Example:
        >>> db = DatabaseHandler("outputs/case_records.db")
        >>> db.upsert_field(record)
        'written'
        >>> db.replace_items("case-1", items)
        (3, 0)
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        source_priority: Optional[Mapping[str, int]] = None,
        config=None
    ) -> None:
        """
        Initialize the database handler.

        Args:
            db_path: Path to database file. If None, uses configuration.
            source_priority: Provenance ranking. If None, uses configuration.
            config: ConfigurationManager; defaults to config/settings.yaml.
        """
        if db_path is None or source_priority is None:
            if config is None:
                from config import get_default_config
                config = get_default_config()
            if db_path is None:
                output_dir = Path(config.get("paths.output_dir", "outputs"))
                db_path = output_dir / config.get("persistence.database.name", "case_records.db")
            if source_priority is None:
                source_priority = config.get(
                    "persistence.source_priority", DEFAULT_SOURCE_PRIORITY
                )

        self.db_path = Path(db_path)
        self.source_priority = dict(source_priority or DEFAULT_SOURCE_PRIORITY)
        stored_rank, self._rank_params = _rank_expression(self.source_priority)
        self._upsert_sql = UPSERT_FIELD_SQL.format(stored_rank=stored_rank)

        ensure_directory(self.db_path.parent)
        self._create_tables()

        logger.info(f"DatabaseHandler initialized (db: {self.db_path})")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _create_tables(self) -> None:
        """Create the required database tables."""
        try:
            conn = self._connect()
            try:
                conn.execute(CREATE_FIELDS_SQL)
                conn.execute(CREATE_ITEMS_SQL)
                conn.commit()
            finally:
                conn.close()
            logger.debug("Database tables created/verified")
        except sqlite3.Error as e:
            raise DatabaseError("create tables", str(e))

    def priority_of(self, source: Optional[str]) -> int:
        """Rank of a source; unknown sources rank lowest (0)."""
        return int(self.source_priority.get(source or "", 0))

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def upsert_field(self, record: FieldRecord) -> str:
        """
        Insert or update one field of a case.

        The write is refused when the stored value's source outranks the
        record's source.

        Args:
            record: FieldRecord bound to a case, with a non-None value.

        Returns:
            WRITTEN or PROTECTED.

        Raises:
            DatabaseError: If the record is unbound or the write fails.
        """
        if not record.case_id:
            raise DatabaseError("upsert_field", f"field '{record.key}' has no case_id")
        if record.value is None:
            raise DatabaseError("upsert_field", f"field '{record.key}' has no value")

        value_text, value_json = _split_value(record.value)

        params = (
            record.case_id,
            record.key,
            value_text,
            value_json,
            record.confidence,
            record.source,
            record.last_updated_by,
            datetime.now().isoformat(),
            *self._rank_params,
            self.priority_of(record.source),
        )

        # Rank check is part of the upsert statement: no read-then-write window.
        try:
            conn = self._connect()
            try:
                with conn:
                    changed = conn.execute(self._upsert_sql, params).rowcount
            finally:
                conn.close()
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise DatabaseError("upsert_field", f"{record.key}: {e}")

        if changed == 0:
            logger.debug(
                f"Kept '{record.key}' for case {record.case_id}: "
                f"stored source outranks '{record.source}'"
            )
            return PROTECTED
        return WRITTEN

    def get_field(self, case_id: str, key: str) -> Optional[Dict[str, Any]]:
        """
        Stored field as a dictionary, or None.

        The ``value`` entry holds the text or the decoded JSON value.
        """
        try:
            conn = self._connect()
            try:
                row = conn.execute(
                    "SELECT * FROM case_fields WHERE case_id = ? AND key = ?",
                    (case_id, key)
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise DatabaseError("get_field", str(e))

        return _field_row(row) if row else None

    def get_fields(self, case_id: str) -> Dict[str, Dict[str, Any]]:
        """All stored fields of a case, by key."""
        try:
            conn = self._connect()
            try:
                rows = conn.execute(
                    "SELECT * FROM case_fields WHERE case_id = ? ORDER BY key",
                    (case_id,)
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise DatabaseError("get_fields", str(e))

        return {row['key']: _field_row(row) for row in rows}

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def replace_items(self, case_id: str, items: Sequence[LineItem]) -> Tuple[int, int]:
        """
        Replace the item table of a case.

        Deletes every stored row of the case, then inserts ``items``, in one
        transaction. A row that fails to insert is logged and counted; the
        other rows still commit. An empty ``items`` clears the case.

        Returns:
            (rows_inserted, rows_failed)

        Raises:
            DatabaseError: If the delete or the commit fails.
        """
        inserted = 0
        failed = 0

        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute("DELETE FROM case_items WHERE case_id = ?", (case_id,))
                    for item in items:
                        try:
                            conn.execute(INSERT_ITEM_SQL, _item_values(case_id, item))
                            inserted += 1
                        except sqlite3.Error as e:
                            failed += 1
                            logger.error(
                                f"Item row {item.line_no} of case {case_id} failed: {e}"
                            )
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise DatabaseError("replace_items", str(e))

        logger.debug(f"Replaced items of case {case_id}: {inserted} inserted, {failed} failed")
        return inserted, failed

    def get_items(self, case_id: str) -> List[Dict[str, Any]]:
        """Stored rows of a case, ordered by line_no."""
        try:
            conn = self._connect()
            try:
                rows = conn.execute(
                    "SELECT * FROM case_items WHERE case_id = ? ORDER BY line_no",
                    (case_id,)
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise DatabaseError("get_items", str(e))

        results = []
        for row in rows:
            item = dict(row)
            item['confidence_json'] = json.loads(item['confidence_json'] or '{}')
            results.append(item)
        return results

    def count_items(self, case_id: str) -> int:
        try:
            conn = self._connect()
            try:
                count = conn.execute(
                    "SELECT COUNT(*) FROM case_items WHERE case_id = ?",
                    (case_id,)
                ).fetchone()[0]
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise DatabaseError("count_items", str(e))
        return count

    def close(self) -> None:
        """Connections are closed per operation; kept for interface consistency."""
        pass


def _rank_expression(priority: Mapping[str, int]) -> Tuple[str, tuple]:
    """SQL rank of the stored row's source, with its bound parameters."""
    if not priority:
        return "0", ()
    whens = ' '.join("WHEN ? THEN ?" for _ in priority)
    params = tuple(v for source, rank in priority.items() for v in (source, int(rank)))
    return f"CASE case_fields.source {whens} ELSE 0 END", params


def _split_value(value: Any) -> Tuple[Optional[str], Optional[str]]:
    """(value_text, value_json) columns for a field value."""
    if isinstance(value, str):
        return value, None
    return None, json.dumps(value, ensure_ascii=False)


def _field_row(row: sqlite3.Row) -> Dict[str, Any]:
    data = dict(row)
    if data['value_json'] is not None:
        data['value'] = json.loads(data['value_json'])
    else:
        data['value'] = data['value_text']
    return data


def _item_values(case_id: str, item: LineItem) -> tuple:
    confidence = {"source": "ocr", "value_raw": item.value_raw}
    return (
        case_id,
        item.line_no,
        item.code,
        item.description,
        item.qty,
        item.value_raw,
        item.value_num,
        json.dumps(confidence, ensure_ascii=False),
    )
