"""Terminal report rendering for summaries and shifts."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]
from rich.text import Text  # type: ignore[import-not-found]

from work_hours.analysis.summaries import (
    JobSummary,
    compute_salary,
    format_elapsed,
    format_hours_minutes,
    round_money,
)
from work_hours.core.models import EntryWithJob, Job


class ReportGenerator:
    """Render summaries and entry lists as rich tables."""

    def __init__(
        self,
        console: Optional[Console] = None,
        currency_symbol: str = "₪",
        date_format: str = "%d.%m.%Y",
        time_format: str = "%H:%M",
        show_seconds: bool = True,
    ):
        """Initialize report generator.

        Args:
            console: Rich console for output. Creates default if None.
            currency_symbol: Symbol prefixed to money amounts
            date_format: strftime format for dates
            time_format: strftime format for clock times
            show_seconds: Show running time as H:MM:SS instead of H:MM
        """
        self.console = console or Console()
        self.currency_symbol = currency_symbol
        self.date_format = date_format
        self.time_format = time_format
        self.show_seconds = show_seconds

    def format_money(self, amount: Decimal) -> str:
        return f"{self.currency_symbol}{round_money(amount):.2f}"

    def format_running(self, duration_ms: int) -> str:
        if self.show_seconds:
            return format_elapsed(duration_ms)
        return format_hours_minutes(duration_ms)

    def _swatch(self, color: str, label: str) -> Text:
        text = Text()
        text.append("● ", style=color)
        text.append(label)
        return text

    def daily_report(self, summaries: list[JobSummary], day: datetime) -> None:
        """Display per-job hours and pay for one day, with each shift.

        Args:
            summaries: Output of ``ReportService.daily_summary``
            day: Start of the reported day
        """
        label = day.strftime(self.date_format)
        if not summaries:
            self.console.print(f"[yellow]No shifts recorded on {label}[/yellow]")
            return

        self.console.print(f"\n[bold cyan]Daily Summary - {label}[/bold cyan]\n")

        for summary in summaries:
            table = Table(title=self._swatch(summary.job_color, summary.job_name))
            table.add_column("Clock-in", style="cyan")
            table.add_column("Clock-out", style="cyan")
            table.add_column("Hours", style="magenta", justify="right")
            table.add_column("Notes")

            for entry in summary.entries:
                end = entry.end_time.strftime(self.time_format) if entry.end_time else "-"
                table.add_row(
                    entry.start_time.strftime(self.time_format),
                    end,
                    format_hours_minutes(entry.duration_ms or 0),
                    entry.notes or "",
                )

            self.console.print(table)
            self.console.print(
                f"  [dim]Total:[/dim] {format_hours_minutes(summary.total_duration_ms)}"
                f"  [dim]Salary:[/dim] {self.format_money(summary.total_salary)}\n"
            )

        self._totals(summaries)

    def monthly_report(self, summaries: list[JobSummary], month_label: str) -> None:
        """Display per-job totals for a month.

        Args:
            summaries: Output of ``ReportService.monthly_summary``
            month_label: Heading, e.g. "March 2025"
        """
        if not summaries:
            self.console.print(f"[yellow]No shifts recorded in {month_label}[/yellow]")
            return

        self.console.print(f"\n[bold cyan]Monthly Summary - {month_label}[/bold cyan]\n")

        table = Table()
        table.add_column("Job", style="bold")
        table.add_column("Shifts", justify="right")
        table.add_column("Hours", style="magenta", justify="right")
        table.add_column("Rate", justify="right")
        table.add_column("Salary", style="green", justify="right")

        for summary in summaries:
            table.add_row(
                self._swatch(summary.job_color, summary.job_name),
                str(summary.entries_count),
                format_hours_minutes(summary.total_duration_ms),
                self.format_money(summary.hourly_rate),
                self.format_money(summary.total_salary),
            )

        self.console.print(table)
        self._totals(summaries)

    def _totals(self, summaries: list[JobSummary]) -> None:
        total_ms = sum(s.total_duration_ms for s in summaries)
        total_salary = sum((s.total_salary for s in summaries), Decimal("0"))

        totals = Table(show_header=False, box=None, padding=(0, 2))
        totals.add_column(style="dim")
        totals.add_column(style="bold")
        totals.add_row("Total Hours:", format_hours_minutes(total_ms))
        totals.add_row("Total Salary:", self.format_money(total_salary))
        self.console.print(totals)

    def open_entries(self, items: list[EntryWithJob], now: datetime) -> None:
        """Display shifts that are still clocked in, with a running timer."""
        if not items:
            self.console.print("[yellow]Not clocked in to any job[/yellow]")
            return

        table = Table(title="Clocked In")
        table.add_column("Entry ID", style="dim")
        table.add_column("Job", style="bold")
        table.add_column("Since", style="cyan")
        table.add_column("Elapsed", style="magenta", justify="right")
        table.add_column("Earned", style="green", justify="right")

        for item in items:
            elapsed = item.entry.elapsed_ms(now)
            job_label = (
                self._swatch(item.job.color, item.job.name) if item.job else Text("(unknown job)")
            )
            earned = compute_salary(elapsed, item.job.hourly_rate) if item.job else Decimal("0")
            table.add_row(
                item.entry.id,
                job_label,
                item.entry.start_time.strftime(f"{self.date_format} {self.time_format}"),
                self.format_running(elapsed),
                self.format_money(earned),
            )

        self.console.print(table)

    def today_report(
        self, items: list[EntryWithJob], totals: list[tuple[Job, int]], now: datetime
    ) -> None:
        """Display today's shifts and per-job totals (open shifts count up to now)."""
        if not items:
            self.console.print("[yellow]No shifts today[/yellow]")
            return

        self.console.print(f"\n[bold cyan]Today - {now.strftime(self.date_format)}[/bold cyan]\n")
        self.entries_table(items, title="Shifts", now=now)

        summary = Table(title="Time by Job")
        summary.add_column("Job", style="bold")
        summary.add_column("Hours", style="magenta", justify="right")
        summary.add_column("Earned", style="green", justify="right")
        for job, duration in totals:
            summary.add_row(
                self._swatch(job.color, job.name),
                format_hours_minutes(duration),
                self.format_money(compute_salary(duration, job.hourly_rate)),
            )
        self.console.print(summary)

        total_ms = sum(duration for _, duration in totals)
        total = self.format_running(total_ms)
        self.console.print(f"\n[dim]Total today:[/dim] [bold]{total}[/bold]")

    def entries_table(
        self, items: list[EntryWithJob], title: str = "Shifts", now: Optional[datetime] = None
    ) -> None:
        """Display a list of entries, one row each."""
        table = Table(title=title)
        table.add_column("Entry ID", style="dim")
        table.add_column("Date", style="cyan")
        table.add_column("Job", style="bold")
        table.add_column("Clock-in")
        table.add_column("Clock-out")
        table.add_column("Hours", style="magenta", justify="right")
        table.add_column("Notes")

        for item in items:
            entry = item.entry
            if entry.is_open:
                end = "▶ running"
                hours = format_hours_minutes(entry.elapsed_ms(now)) if now else "-"
            else:
                end = entry.end_time.strftime(self.time_format) if entry.end_time else "-"
                hours = format_hours_minutes(entry.duration_ms or 0)
            table.add_row(
                entry.id,
                entry.start_time.strftime(self.date_format),
                item.job.name if item.job else "(unknown job)",
                entry.start_time.strftime(self.time_format),
                end,
                hours,
                entry.notes or "",
            )

        self.console.print(table)
