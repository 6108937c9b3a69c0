"""Work Hours - personal work-hour tracking with salary reports."""

__version__ = "0.1.0"
