"""Tests for input intake, the pipeline, the workbook export, the CLI and logging."""

import json
import logging
from unittest.mock import Mock

import pytest
from openpyxl import load_workbook

import main
from config import ConfigurationManager, get_default_config, reset_default_config
from order_extraction.extraction import OrderExtractor
from order_extraction.input_handler import InputHandler
from order_extraction.output_handler import ExcelExporter
from order_extraction.pipeline import ExtractionPipeline
from order_extraction.utils.logger import get_case_logger, get_logger, setup_logger
from order_extraction.utils.exceptions import (
    ConfigurationError,
    EmptyOCRTextError,
    InputFileNotFoundError,
    UnsupportedFileTypeError,
)


class TestInputHandler:

    def test_reads_text_file(self, tmp_path) -> None:
        path = tmp_path / "pedido.txt"
        path.write_text("Nome: João", encoding="utf-8")

        assert InputHandler().load_text(path) == "Nome: João"

    def test_image_goes_through_ocr(self, tmp_path) -> None:
        path = tmp_path / "pedido.jpg"
        path.write_bytes(b"fake")
        engine = Mock()
        engine.extract_text.return_value = "Nome: Maria"

        loaded = InputHandler(ocr_engine=engine).load(path)

        assert loaded.file_type == "image"
        assert loaded.text == "Nome: Maria"
        engine.extract_text.assert_called_once_with(path)

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(InputFileNotFoundError):
            InputHandler().load(tmp_path / "nada.txt")

    def test_unsupported_extension(self, tmp_path) -> None:
        path = tmp_path / "pedido.pdf"
        path.write_bytes(b"%PDF")

        with pytest.raises(UnsupportedFileTypeError):
            InputHandler().load(path)


class TestExtractionPipeline:

    @pytest.fixture
    def pipeline(self, config, tmp_path) -> ExtractionPipeline:
        return ExtractionPipeline(config, db_path=str(tmp_path / "cases.db"))

    def test_run_text_reports_and_persists(self, pipeline, sample_order_text) -> None:
        report = pipeline.run_text(sample_order_text, "case-42")

        assert report["case_id"] == "case-42"
        assert report["total"] == 16027.0
        assert report["items"] == 2
        assert report["rows_parsed"] == 2
        assert report["write_summary"]["rows_inserted"] == 2
        assert report["write_summary"]["fields_failed"] == 0
        assert report["text_preview"].startswith("COMERCIAL AGRICOLA")
        assert report["excel_path"] is None

        database = pipeline.output_handler.database_handler
        assert database.get_field("case-42", "name")["value"] == "Maria Silva"
        assert database.count_items("case-42") == 2

    def test_run_file_with_image(self, config, tmp_path, sample_order_text) -> None:
        path = tmp_path / "pedido.png"
        path.write_bytes(b"fake")
        engine = Mock()
        engine.extract_text.return_value = sample_order_text
        pipeline = ExtractionPipeline(
            config,
            input_handler=InputHandler(ocr_engine=engine),
            db_path=str(tmp_path / "cases.db")
        )

        report = pipeline.run_image(path, "case-7")

        assert report["items"] == 2

    def test_empty_ocr_writes_nothing(self, config, tmp_path) -> None:
        path = tmp_path / "pedido.png"
        path.write_bytes(b"fake")
        engine = Mock()
        engine.extract_text.side_effect = EmptyOCRTextError(str(path), "tesseract")
        pipeline = ExtractionPipeline(
            config,
            input_handler=InputHandler(ocr_engine=engine),
            db_path=str(tmp_path / "cases.db")
        )

        with pytest.raises(EmptyOCRTextError):
            pipeline.run_file(path, "case-7")

        assert pipeline.output_handler.database_handler.get_fields("case-7") == {}

    def test_excel_review_written_when_enabled(self, tmp_path, sample_order_text) -> None:
        config = ConfigurationManager(overrides={
            "paths": {"output_dir": str(tmp_path)},
            "output": {"excel": {"enabled": True}},
        })
        report = ExtractionPipeline(config).run_text(sample_order_text, "case-9")

        assert report["excel_path"].endswith(".xlsx")
        assert "case-9" in report["excel_path"]


class TestExcelExporter:

    def test_fields_and_items_sheets(self, tmp_path, sample_order_text) -> None:
        result = OrderExtractor().extract(sample_order_text, case_id="case-1")

        path = ExcelExporter(output_dir=str(tmp_path)).export(result, filename="review.xlsx")
        workbook = load_workbook(path)

        assert workbook.sheetnames == ["Fields", "Items"]
        fields = {row[0]: row[1] for row in workbook["Fields"].iter_rows(min_row=2, values_only=True)}
        assert fields["name"] == "Maria Silva"
        items = list(workbook["Items"].iter_rows(min_row=2, values_only=True))
        assert items[0][:4] == (1, "A1", "Produto X", 2)


class TestConfiguration:

    def test_overrides_and_defaults(self) -> None:
        config = ConfigurationManager(overrides={"ocr": {"provider": "google_vision"}})

        assert config.get("ocr.provider") == "google_vision"
        assert config.get("ocr.tesseract.lang") == "por"
        assert config.get("persistence.source_priority.admin") == 3
        assert config.get("missing.key", "fallback") == "fallback"

    def test_env_placeholder_expanded(self, monkeypatch) -> None:
        monkeypatch.setenv("GOOGLE_VISION_API_KEY", "secret")

        assert ConfigurationManager().get("ocr.google_vision.api_key") == "secret"

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(ConfigurationError):
            ConfigurationManager(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("ocr: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ConfigurationManager(str(path))

    def test_reload_keeps_overrides(self, tmp_path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text("extraction:\n  max_items: 10\n", encoding="utf-8")
        config = ConfigurationManager(str(path), overrides={"ocr": {"provider": "easyocr"}})

        path.write_text("extraction:\n  max_items: 20\n", encoding="utf-8")
        config.reload()

        assert config.get("extraction.max_items") == 20
        assert config.get_all()["ocr"] == {"provider": "easyocr"}

    def test_default_config_helpers(self) -> None:
        reset_default_config()
        try:
            assert get_default_config().get("extraction.max_items") == 50
            assert get_default_config() is get_default_config()
        finally:
            reset_default_config()


class TestCommandLine:

    def test_prints_report(self, tmp_path, capsys, sample_order_text) -> None:
        path = tmp_path / "pedido.txt"
        path.write_text(sample_order_text, encoding="utf-8")

        code = main.main([
            "--input", str(path),
            "--case-id", "case-42",
            "--db", str(tmp_path / "cases.db"),
        ])

        assert code == 0
        report = json.loads(capsys.readouterr().out)
        assert report["case_id"] == "case-42"
        assert report["total"] == 16027.0
        assert "text_preview" not in report

    def test_missing_input_fails(self, tmp_path, capsys) -> None:
        code = main.main([
            "--input", str(tmp_path / "nada.txt"),
            "--case-id", "case-42",
            "--db", str(tmp_path / "cases.db"),
        ])

        assert code == 1
        assert "File not found" in capsys.readouterr().err


class TestLogging:

    def test_case_adapter_prefixes_messages(self) -> None:
        adapter = get_case_logger(get_logger("pipeline"), "case-42")

        assert adapter.process("12 fields written", {}) == ("[case-42] 12 fields written", {})
        assert adapter.logger.name == "order_extraction.pipeline"

    def test_setup_replaces_handlers(self, tmp_path) -> None:
        setup_logger(level="DEBUG", log_file=str(tmp_path / "logs" / "run.log"))
        app_logger = setup_logger(level="warning")

        assert len(app_logger.handlers) == 1
        assert app_logger.level == logging.WARNING

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValueError):
            setup_logger(level="LOUD")
