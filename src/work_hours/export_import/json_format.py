"""JSON export functionality."""

import json
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from typing import Any

from work_hours.analysis.summaries import ExportRow
from work_hours.export_import.base import Exporter


def _row_to_dict(row: ExportRow) -> dict[str, Any]:
    data = asdict(row)
    for key, value in data.items():
        if isinstance(value, Decimal):
            data[key] = f"{value:.2f}"
    return data


class JSONExporter(Exporter):
    """Export work-hour rows to JSON format."""

    def get_file_extension(self) -> str:
        """Get JSON file extension.

        Returns:
            '.json'
        """
        return ".json"

    def export_rows(self, rows: list[ExportRow], **kwargs: Any) -> None:
        """Export rows to JSON file.

        Args:
            rows: Export rows to write
            **kwargs: Additional options
                - indent (int): JSON indentation level (default: 2)
                - include_metadata (bool): Include export metadata (default: True)
                - start_date (datetime): Window start recorded in metadata
                - end_date (datetime): Window end recorded in metadata
        """
        self.ensure_output_path()

        export_data: dict[str, Any] = {
            "rows": [_row_to_dict(row) for row in rows],
        }

        if kwargs.get("include_metadata", True):
            start_date = kwargs.get("start_date")
            end_date = kwargs.get("end_date")
            total_hours = sum((row.duration_hours for row in rows), Decimal("0"))
            total_salary = sum((row.salary for row in rows), Decimal("0"))
            export_data["metadata"] = {
                "export_date": datetime.now().isoformat(),
                "row_count": len(rows),
                "total_hours": f"{total_hours:.2f}",
                "total_salary": f"{total_salary:.2f}",
                "date_range": {
                    "start": start_date.isoformat() if start_date else None,
                    "end": end_date.isoformat() if end_date else None,
                },
                "format_version": "1.0",
            }

        indent = kwargs.get("indent", 2)
        with open(self.output_path, "w", encoding="utf-8") as f:
            json.dump(export_data, f, indent=indent, ensure_ascii=False)
