"""
Excel Exporter Module.

Writes one extraction result to an .xlsx review workbook with openpyxl:
a "Fields" sheet (key, value, confidence, source) and an "Items" sheet
(the reconstructed table).
"""

import json
from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from order_extraction.utils.logger import get_logger
from order_extraction.utils.helpers import ensure_directory, generate_timestamp, safe_filename
from order_extraction.utils.exceptions import ExcelExportError
from order_extraction.extraction.extraction_result import ExtractionResult

# Initialize module logger
logger = get_logger(__name__)

HEADER_FONT = Font(bold=True, color="FFFFFF")
THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)


class ExcelExporter:
    """
    Exports an extraction result to a review workbook.

    Attributes:
        output_dir: Directory for output files
        filename_prefix: Prefix of generated filenames

    Example:
        >>> exporter = ExcelExporter(output_dir="outputs")
        >>> path = exporter.export(result)
    """

    FIELD_COLUMNS = [
        ('Field', 'key'),
        ('Value', 'value'),
        ('Confidence', 'confidence'),
        ('Source', 'source'),
        ('Updated By', 'last_updated_by'),
    ]

    ITEM_COLUMNS = [
        ('Line', 'line_no'),
        ('Code', 'code'),
        ('Description', 'description'),
        ('Qty', 'qty'),
        ('Value (raw)', 'value_raw'),
        ('Value', 'value_num'),
    ]

    def __init__(
        self,
        output_dir: str = "outputs",
        filename_prefix: str = "order_review"
    ) -> None:
        self.output_dir = Path(output_dir)
        self.filename_prefix = filename_prefix

        logger.debug(f"ExcelExporter initialized (output_dir: {self.output_dir})")

    @classmethod
    def from_config(cls, config) -> 'ExcelExporter':
        return cls(
            output_dir=config.get("paths.output_dir", "outputs"),
            filename_prefix=config.get("output.excel.filename_prefix", "order_review")
        )

    def get_default_filename(self, case_id: Optional[str] = None) -> str:
        parts = [self.filename_prefix]
        if case_id:
            parts.append(case_id)
        parts.append(generate_timestamp())
        return safe_filename('_'.join(parts) + '.xlsx')

    def export(
        self,
        result: ExtractionResult,
        filename: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> str:
        """
        Export one extraction result.

        Args:
            result: Result to export.
            filename: Output filename. If None, auto-generated.
            output_dir: Output directory. If None, uses configured dir.

        Returns:
            Path to the created Excel file.

        Raises:
            ExcelExportError: If the workbook cannot be written.
        """
        out_dir = Path(output_dir) if output_dir else self.output_dir
        ensure_directory(out_dir)
        filepath = out_dir / (filename or self.get_default_filename(result.case_id))

        workbook = Workbook()
        self._create_fields_sheet(workbook, result)
        self._create_items_sheet(workbook, result)

        try:
            workbook.save(filepath)
        except (OSError, ValueError) as e:
            logger.error(f"Excel export failed: {e}")
            raise ExcelExportError(str(filepath), str(e))

        logger.info(
            f"Excel file saved: {filepath} "
            f"({len(result.fields)} fields, {len(result.items)} items)"
        )
        return str(filepath)

    def _create_fields_sheet(self, workbook: Workbook, result: ExtractionResult) -> None:
        sheet = workbook.active
        sheet.title = "Fields"
        self._write_header(sheet, self.FIELD_COLUMNS, "4472C4")

        row_num = 2
        for record in result.fields:
            if record.value is None:
                continue
            value = record.value if record.is_text else json.dumps(record.value, ensure_ascii=False)
            row = [record.key, value, record.confidence, record.source, record.last_updated_by]
            for col, cell_value in enumerate(row, 1):
                cell = sheet.cell(row=row_num, column=col, value=cell_value)
                cell.border = THIN_BORDER
                if col == 2:
                    cell.alignment = Alignment(wrap_text=True, vertical="top")
            row_num += 1

        self._fit_columns(sheet, self.FIELD_COLUMNS)

    def _create_items_sheet(self, workbook: Workbook, result: ExtractionResult) -> None:
        sheet = workbook.create_sheet(title="Items")
        self._write_header(sheet, self.ITEM_COLUMNS, "548235")

        for row_num, item in enumerate(result.items, 2):
            data = item.to_dict()
            for col, (_, attr) in enumerate(self.ITEM_COLUMNS, 1):
                cell = sheet.cell(row=row_num, column=col, value=data[attr])
                cell.border = THIN_BORDER
                if attr == 'description':
                    cell.alignment = Alignment(wrap_text=True, vertical="top")
                elif attr == 'value_num' and data[attr] is not None:
                    cell.number_format = '#,##0.00'

        self._fit_columns(sheet, self.ITEM_COLUMNS)

    @staticmethod
    def _write_header(sheet, columns, color: str) -> None:
        fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        for col, (header_name, _) in enumerate(columns, 1):
            cell = sheet.cell(row=1, column=col, value=header_name)
            cell.font = HEADER_FONT
            cell.fill = fill
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = THIN_BORDER
        sheet.freeze_panes = 'A2'

    @staticmethod
    def _fit_columns(sheet, columns) -> None:
        for col, (header_name, _) in enumerate(columns, 1):
            max_length = len(header_name)
            for row in range(2, sheet.max_row + 1):
                cell_value = sheet.cell(row=row, column=col).value
                if cell_value is not None:
                    longest = max(len(part) for part in str(cell_value).split('\n'))
                    max_length = max(max_length, longest)
            sheet.column_dimensions[get_column_letter(col)].width = min(max_length + 2, 60)
