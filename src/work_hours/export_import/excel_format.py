"""Excel export of work-hour rows with a totals line."""

from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import Any, Optional

import openpyxl  # type: ignore[import-untyped]
from openpyxl.styles import Alignment, Font, PatternFill  # type: ignore[import-untyped]
from openpyxl.utils import get_column_letter  # type: ignore[import-untyped]
from openpyxl.workbook import Workbook  # type: ignore[import-untyped]

from work_hours.analysis.summaries import ExportRow, format_hours_minutes
from work_hours.export_import.base import Exporter

HEADERS = ["Date", "Job", "Clock-in", "Clock-out", "Hours", "Rate", "Salary", "Notes"]

COLUMN_WIDTHS = [12, 15, 10, 10, 10, 10, 10, 20]

TOTAL_LABEL = "Total"


class ExcelExporter(Exporter):
    """Export work-hour rows to an Excel workbook."""

    def __init__(self, output_path: Path, currency_symbol: str = "₪"):
        """Initialize Excel exporter.

        Args:
            output_path: Path of the .xlsx file to write
            currency_symbol: Symbol shown in the rate and salary columns
        """
        super().__init__(output_path)
        self.currency_symbol = currency_symbol

    def get_file_extension(self) -> str:
        """Get Excel file extension.

        Returns:
            '.xlsx'
        """
        return ".xlsx"

    def export_rows(self, rows: list[ExportRow], **kwargs: Any) -> None:
        """Write rows to the output file.

        Args:
            rows: Export rows to write
            **kwargs: Additional options
                - sheet_title (str): Worksheet name (default: 'Work Hours')
        """
        self.ensure_output_path()
        wb = self.build_workbook(rows, kwargs.get("sheet_title"))
        wb.save(self.output_path)

    def render(self, rows: list[ExportRow], sheet_title: Optional[str] = None) -> bytes:
        """Build the workbook in memory and return the .xlsx bytes."""
        buffer = BytesIO()
        self.build_workbook(rows, sheet_title).save(buffer)
        return buffer.getvalue()

    def build_workbook(self, rows: list[ExportRow], sheet_title: Optional[str] = None) -> Workbook:
        """Create the workbook: header, one line per row, spacer and totals.

        Args:
            rows: Export rows
            sheet_title: Worksheet name

        Returns:
            openpyxl Workbook
        """
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = sheet_title or "Work Hours"

        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        header_font = Font(bold=True, color="FFFFFF")

        for col, header in enumerate(HEADERS, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = header_fill
            cell.font = header_font
            cell.alignment = Alignment(horizontal="center", vertical="center")

        money_format = f'"{self.currency_symbol}"#,##0.00'

        for row_idx, row in enumerate(rows, start=2):
            ws.cell(row_idx, 1, row.date)
            ws.cell(row_idx, 2, row.job_name)
            ws.cell(row_idx, 3, row.start_time)
            ws.cell(row_idx, 4, row.end_time)
            ws.cell(row_idx, 5, row.duration_formatted)
            ws.cell(row_idx, 6, float(row.hourly_rate)).number_format = money_format
            ws.cell(row_idx, 7, float(row.salary)).number_format = money_format
            ws.cell(row_idx, 8, row.notes)

        total_ms = sum(row.duration_ms for row in rows)
        total_salary = sum((row.salary for row in rows), Decimal("0"))

        # One empty spacer row between the entries and the totals
        totals_row = len(rows) + 3
        ws.cell(totals_row, 5, format_hours_minutes(total_ms))
        salary_cell = ws.cell(totals_row, 7, float(total_salary))
        salary_cell.number_format = money_format
        ws.cell(totals_row, 8, TOTAL_LABEL)
        for col in (5, 7, 8):
            ws.cell(totals_row, col).font = Font(bold=True)

        for col, width in enumerate(COLUMN_WIDTHS, start=1):
            ws.column_dimensions[get_column_letter(col)].width = width

        return wb
