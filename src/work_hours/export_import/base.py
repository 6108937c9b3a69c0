"""Base class for export functionality."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from work_hours.analysis.summaries import ExportRow

HEBREW_MONTH_NAMES = [
    "ינואר",
    "פברואר",
    "מרץ",
    "אפריל",
    "מאי",
    "יוני",
    "יולי",
    "אוגוסט",
    "ספטמבר",
    "אוקטובר",
    "נובמבר",
    "דצמבר",
]

ENGLISH_MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

MONTH_NAMES = {"en": ENGLISH_MONTH_NAMES, "he": HEBREW_MONTH_NAMES}

DEFAULT_PREFIXES = {"en": "work_hours", "he": "שעות_עבודה"}


def month_name(month: int, locale: str = "en") -> str:
    """Localized name of a month (1-12).

    Raises:
        ValueError: If the locale is not supported
    """
    if locale not in MONTH_NAMES:
        raise ValueError(f"Unsupported locale: {locale}")
    return MONTH_NAMES[locale][month - 1]


def export_filename(
    year: int,
    month: int,
    extension: str = ".xlsx",
    locale: str = "en",
    prefix: Optional[str] = None,
) -> str:
    """Build the download name of a monthly report.

    Example:
        >>> export_filename(2025, 3)
        'work_hours_March_2025.xlsx'
    """
    if prefix is None:
        prefix = DEFAULT_PREFIXES.get(locale, DEFAULT_PREFIXES["en"])
    return f"{prefix}_{month_name(month, locale)}_{year}{extension}"


class Exporter(ABC):
    """Base class for all exporters."""

    def __init__(self, output_path: Path):
        """Initialize exporter.

        Args:
            output_path: Path where exported data will be written
        """
        self.output_path = Path(output_path)

    @abstractmethod
    def export_rows(self, rows: list[ExportRow], **kwargs: Any) -> None:
        """Export rows to the output format.

        Args:
            rows: Export rows to write
            **kwargs: Format-specific options
        """

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get the file extension for this format (e.g., '.json', '.xlsx').

        Returns:
            File extension including the dot
        """

    def ensure_output_path(self) -> None:
        """Ensure the output path's parent directory exists."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
