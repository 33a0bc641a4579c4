"""Tests for the SQLite store and the persistence writer."""

import sqlite3
from unittest.mock import Mock

import pytest

from order_extraction.extraction import ExtractionResult, FieldRecord, LineItem, OrderExtractor
from order_extraction.output_handler import PROTECTED, WRITTEN, DatabaseHandler, OutputHandler
from order_extraction.utils.exceptions import DatabaseError

CASE = "case-1"


def make_items(count: int):
    return [
        LineItem(line_no=i, code=f"A{i}", description=f"Item {i}", qty=1,
                 value_raw="10,00", value_num=10.0)
        for i in range(1, count + 1)
    ]


def record(key, value, source="ocr", confidence=0.8):
    return FieldRecord(key=key, value=value, confidence=confidence, source=source, case_id=CASE)


class TestDatabaseHandler:

    def test_upsert_inserts_then_updates(self, db: DatabaseHandler) -> None:
        assert db.upsert_field(record("name", "Maria")) == WRITTEN
        assert db.upsert_field(record("name", "Maria Silva", confidence=0.75)) == WRITTEN

        stored = db.get_field(CASE, "name")
        assert stored["value"] == "Maria Silva"
        assert stored["confidence"] == 0.75
        assert stored["source"] == "ocr"
        assert len(db.get_fields(CASE)) == 1

    def test_structured_value_round_trips_as_json(self, db: DatabaseHandler) -> None:
        db.upsert_field(record("payment", {"terms": "A VISTA", "parcels": [1, 2]}))

        stored = db.get_field(CASE, "payment")
        assert stored["value"] == {"terms": "A VISTA", "parcels": [1, 2]}
        assert stored["value_text"] is None

    def test_higher_priority_source_is_protected(self, db: DatabaseHandler) -> None:
        db.upsert_field(record("name", "Maria S. Souza", source="admin"))

        assert db.upsert_field(record("name", "Maria Silva", source="ocr")) == PROTECTED
        assert db.get_field(CASE, "name")["value"] == "Maria S. Souza"

    def test_higher_priority_source_overwrites_ocr(self, db: DatabaseHandler) -> None:
        db.upsert_field(record("name", "Maria Silva", source="ocr"))

        assert db.upsert_field(record("name", "Maria S. Souza", source="vendor")) == WRITTEN
        assert db.get_field(CASE, "name")["source"] == "vendor"

    def test_concurrent_admin_write_is_not_overwritten(self, db: DatabaseHandler, monkeypatch) -> None:
        connect = db._connect

        class AdminWritesFirst:
            """Connection whose field write is preceded by an admin edit on another connection."""

            def __init__(self, conn) -> None:
                self.conn = conn

            def execute(self, sql, params=()):
                if "INSERT INTO case_fields" in sql:
                    other = sqlite3.connect(db.db_path)
                    with other:
                        other.execute(
                            "INSERT INTO case_fields (case_id, key, value_text, confidence, source, updated_at) "
                            "VALUES (?, 'name', 'Maria S. Souza', 1.0, 'admin', '2026-01-05')",
                            (CASE,)
                        )
                    other.close()
                return self.conn.execute(sql, params)

            def __enter__(self):
                self.conn.__enter__()
                return self

            def __exit__(self, *exc_info):
                return self.conn.__exit__(*exc_info)

            def close(self) -> None:
                self.conn.close()

        monkeypatch.setattr(db, "_connect", lambda: AdminWritesFirst(connect()))

        assert db.upsert_field(record("name", "Maria Silva")) == PROTECTED

        monkeypatch.undo()
        stored = db.get_field(CASE, "name")
        assert stored["value"] == "Maria S. Souza"
        assert stored["source"] == "admin"

    def test_unbound_record_rejected(self, db: DatabaseHandler) -> None:
        with pytest.raises(DatabaseError):
            db.upsert_field(FieldRecord(key="name", value="Maria", confidence=0.8))

    def test_replace_items_is_full_replace(self, db: DatabaseHandler) -> None:
        assert db.replace_items(CASE, make_items(5)) == (5, 0)
        assert db.replace_items(CASE, make_items(2)) == (2, 0)

        items = db.get_items(CASE)
        assert [i["line_no"] for i in items] == [1, 2]
        assert items[0]["confidence_json"] == {"source": "ocr", "value_raw": "10,00"}

    def test_empty_replace_clears_items(self, db: DatabaseHandler) -> None:
        db.replace_items(CASE, make_items(5))
        assert db.count_items(CASE) == 5

        assert db.replace_items(CASE, []) == (0, 0)
        assert db.count_items(CASE) == 0

    def test_replace_counts_failed_rows(self, db: DatabaseHandler) -> None:
        items = make_items(3) + [LineItem(line_no=2, code="X", description="duplicate")]

        assert db.replace_items(CASE, items) == (3, 1)
        assert db.count_items(CASE) == 3

    def test_cases_are_independent(self, db: DatabaseHandler) -> None:
        db.replace_items(CASE, make_items(3))
        db.replace_items("case-2", [])

        assert db.count_items(CASE) == 3

    def test_default_path_from_config(self, config) -> None:
        handler = DatabaseHandler(config=config)

        assert handler.db_path.name == "case_records.db"
        assert handler.db_path.parent.exists()
        assert handler.priority_of("admin") == 3
        assert handler.priority_of("unknown") == 0


class TestOutputHandler:

    def test_write_counts(self, db: DatabaseHandler) -> None:
        result = ExtractionResult(
            fields=[
                FieldRecord(key="name", value="Maria Silva", confidence=0.75),
                FieldRecord(key="email", value=None, confidence=0.65),
            ],
            items=make_items(2),
        ).bind_case(CASE)

        summary = OutputHandler(db).write(result)

        assert summary.fields_written == 1
        assert summary.fields_skipped == 1
        assert summary.rows_inserted == 2
        assert summary.items_replaced is True
        assert summary.has_failures is False

    def test_null_value_leaves_stored_value(self, db: DatabaseHandler) -> None:
        db.upsert_field(record("email", "maria@example.com"))
        result = ExtractionResult(
            fields=[FieldRecord(key="email", value=None, confidence=0.65)]
        ).bind_case(CASE)

        OutputHandler(db).write(result)

        assert db.get_field(CASE, "email")["value"] == "maria@example.com"

    def test_empty_items_clear_previous_rows(self, db: DatabaseHandler) -> None:
        db.replace_items(CASE, make_items(5))

        summary = OutputHandler(db).write(ExtractionResult().bind_case(CASE))

        assert summary.items_replaced is True
        assert db.count_items(CASE) == 0

    def test_protected_fields_counted(self, db: DatabaseHandler) -> None:
        db.upsert_field(record("name", "Maria S. Souza", source="admin"))
        result = ExtractionResult(
            fields=[FieldRecord(key="name", value="Maria Silva", confidence=0.75)]
        ).bind_case(CASE)

        summary = OutputHandler(db).write(result)

        assert summary.fields_protected == 1
        assert summary.fields_written == 0

    def test_failed_field_does_not_abort_batch(self) -> None:
        database = Mock(spec=DatabaseHandler)
        database.upsert_field.side_effect = [DatabaseError("upsert_field", "locked"), WRITTEN]
        database.replace_items.return_value = (1, 0)
        result = ExtractionResult(
            fields=[
                FieldRecord(key="name", value="Maria", confidence=0.75),
                FieldRecord(key="city", value="Guarapuava", confidence=0.6),
            ],
            items=make_items(1),
        ).bind_case(CASE)

        summary = OutputHandler(database).write(result)

        assert summary.fields_failed == 1
        assert summary.fields_written == 1
        assert summary.rows_inserted == 1
        assert summary.has_failures is True

    def test_failed_item_replace_counted(self) -> None:
        database = Mock(spec=DatabaseHandler)
        database.replace_items.side_effect = DatabaseError("replace_items", "disk full")

        summary = OutputHandler(database).write(ExtractionResult(items=make_items(3)).bind_case(CASE))

        assert summary.items_replaced is False
        assert summary.rows_failed == 3

    def test_unbound_result_rejected(self, db: DatabaseHandler) -> None:
        with pytest.raises(DatabaseError):
            OutputHandler(db).write(ExtractionResult())

    def test_rewrite_is_idempotent(self, db: DatabaseHandler, sample_order_text) -> None:
        result = OrderExtractor().extract(sample_order_text, case_id=CASE)
        handler = OutputHandler(db)

        handler.write(result)
        first = {k: v["value"] for k, v in db.get_fields(CASE).items()}
        handler.write(result)
        second = {k: v["value"] for k, v in db.get_fields(CASE).items()}

        assert first == second
        assert first["name"] == "Maria Silva"
        assert db.count_items(CASE) == 2
