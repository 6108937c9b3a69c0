"""Export functionality for Work Hours."""

from work_hours.export_import.base import Exporter, export_filename, month_name
from work_hours.export_import.excel_format import ExcelExporter
from work_hours.export_import.json_format import JSONExporter

__all__ = [
    "Exporter",
    "ExcelExporter",
    "JSONExporter",
    "export_filename",
    "month_name",
]
