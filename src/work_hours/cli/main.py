"""Main CLI application."""

import json
import sys
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from work_hours import __version__
from work_hours.analysis.reports import ReportGenerator
from work_hours.analysis.summaries import ReportService, format_hours_minutes, month_bounds
from work_hours.cli.api_commands import api
from work_hours.cli.config_commands import config
from work_hours.core.config import ConfigManager
from work_hours.core.jobs import JobRegistry
from work_hours.core.ledger import TimeLedger, day_bounds
from work_hours.core.logging_setup import configure_logging, default_log_file
from work_hours.core.models import DEFAULT_JOB_COLOR
from work_hours.core.storage import StorageManager
from work_hours.export_import import (
    ExcelExporter,
    Exporter,
    JSONExporter,
    export_filename,
    month_name,
)

console = Console()
error_console = Console(stderr=True)


def fail(message: object) -> NoReturn:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


def get_config(ctx: click.Context) -> ConfigManager:
    config_mgr: ConfigManager = ctx.obj["config"]
    return config_mgr


def get_storage(ctx: click.Context) -> StorageManager:
    """Get StorageManager for ``--data-dir`` or the configured data directory."""
    data_dir = ctx.obj.get("data_dir")
    return StorageManager(Path(data_dir) if data_dir else get_config(ctx).data_dir)


def get_registry(ctx: click.Context) -> JobRegistry:
    return JobRegistry(get_storage(ctx))


def get_ledger(ctx: click.Context) -> TimeLedger:
    return TimeLedger(get_storage(ctx))


def get_reports(ctx: click.Context) -> ReportService:
    config_mgr = get_config(ctx)
    return ReportService(
        get_ledger(ctx),
        date_format=config_mgr.get("general.date_format", "%d.%m.%Y"),
        time_format=config_mgr.get("general.time_format", "%H:%M"),
    )


def get_report_generator(ctx: click.Context) -> ReportGenerator:
    config_mgr = get_config(ctx)
    return ReportGenerator(
        console,
        currency_symbol=config_mgr.get("export.currency_symbol", "₪"),
        date_format=config_mgr.get("general.date_format", "%d.%m.%Y"),
        time_format=config_mgr.get("general.time_format", "%H:%M"),
        show_seconds=config_mgr.get("display.show_seconds", True),
    )


def parse_time(time_str: str) -> datetime:
    """Parse ``YYYY-MM-DD HH:MM``, or ``HH:MM`` for today."""
    try:
        return datetime.strptime(time_str, "%Y-%m-%d %H:%M")
    except ValueError:
        pass

    try:
        time_part = datetime.strptime(time_str, "%H:%M").time()
        return datetime.combine(datetime.now().date(), time_part)
    except ValueError:
        raise ValueError(f"Invalid time format: {time_str}. Use 'HH:MM' or 'YYYY-MM-DD HH:MM'")


def end_of_day(day: datetime) -> datetime:
    """Last instant of the calendar day of ``day``."""
    return day_bounds(day)[1] - timedelta(microseconds=1)


def parse_date(date_str: str) -> datetime:
    """Parse ``YYYY-MM-DD``, ``today`` or ``yesterday`` to midnight of that day."""
    if date_str.lower() == "today":
        return day_bounds(datetime.now())[0]
    if date_str.lower() == "yesterday":
        return day_bounds(datetime.now())[0] - timedelta(days=1)
    try:
        return datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError:
        raise ValueError(f"Invalid date format: {date_str}. Use YYYY-MM-DD")


@click.group()
@click.version_option(version=__version__)
@click.option("--data-dir", help="Custom data directory", type=click.Path())
@click.option("--config", "config_path", help="Path to config file", type=click.Path())
@click.option(
    "--user",
    envvar="WORK_HOURS_USER",
    help="User identity (default: general.user_id from config)",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(
    ctx: click.Context,
    data_dir: Optional[str],
    config_path: Optional[str],
    user: Optional[str],
    no_color: bool,
) -> None:
    """Work Hours - track shifts per job and what they pay.

    Clock in and out of your jobs, review daily and monthly totals and
    export a month to Excel.
    """
    ctx.ensure_object(dict)

    try:
        config_mgr = ConfigManager(Path(config_path) if config_path else None)
    except ValueError as e:
        fail(e)

    ctx.obj["config"] = config_mgr
    ctx.obj["data_dir"] = data_dir
    ctx.obj["user"] = user or config_mgr.get("general.user_id", "local")

    if no_color:
        console.no_color = True

    resolved_dir = Path(data_dir) if data_dir else config_mgr.data_dir
    log_file = config_mgr.get("advanced.log_file")
    configure_logging(
        config_mgr.get("advanced.log_level", "INFO"),
        Path(log_file).expanduser() if log_file else default_log_file(resolved_dir),
    )

    if config_mgr.get("advanced.backup_on_start", False) and ctx.invoked_subcommand not in (
        "config",
        "api",
    ):
        get_storage(ctx).backup()


# ============================================================================
# Jobs
# ============================================================================


@cli.group()
def job() -> None:
    """Manage jobs (workplaces and their hourly rates)."""
    pass


@job.command("add")
@click.argument("name")
@click.option("--color", default=DEFAULT_JOB_COLOR, help="Display color (hex)")
@click.option("-r", "--rate", default="0", help="Hourly rate")
@click.pass_context
def job_add(ctx: click.Context, name: str, color: str, rate: str) -> None:
    """Add a new job.

    Example:
        work-hours job add "Cafe" --rate 45
    """
    try:
        created = get_registry(ctx).create(ctx.obj["user"], name, color, rate)
    except ValueError as e:
        fail(e)

    console.print(f"[green]✓[/green] Added job: {created.name}")
    console.print(f"  ID: {created.id}")
    console.print(f"  Rate: {created.hourly_rate}/h")


@job.command("list")
@click.option("-a", "--all", "show_all", is_flag=True, help="Include archived jobs")
@click.pass_context
def job_list(ctx: click.Context, show_all: bool) -> None:
    """List jobs.

    Example:
        work-hours job list
        work-hours job list --all
    """
    registry = get_registry(ctx)
    user = ctx.obj["user"]
    jobs = registry.list_all(user) if show_all else registry.list_active(user)

    if not jobs:
        console.print("[yellow]No jobs found[/yellow]")
        console.print('\nAdd one with: [cyan]work-hours job add "Job name" --rate 50[/cyan]')
        return

    table = Table(title="Jobs")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Rate", justify="right")
    table.add_column("Status")

    for j in jobs:
        status_label = "active" if j.is_active else "[dim]archived[/dim]"
        name = Text.assemble(("● ", j.color), j.name)
        table.add_row(j.id, name, f"{j.hourly_rate}", status_label)

    console.print(table)


@job.command("edit")
@click.argument("job_id")
@click.option("--name", help="New name")
@click.option("--color", help="New display color (hex)")
@click.option("-r", "--rate", help="New hourly rate")
@click.pass_context
def job_edit(
    ctx: click.Context,
    job_id: str,
    name: Optional[str],
    color: Optional[str],
    rate: Optional[str],
) -> None:
    """Change the name, color or rate of a job.

    Options left out keep their current value.

    Example:
        work-hours job edit <job-id> --rate 55
    """
    registry = get_registry(ctx)
    user = ctx.obj["user"]

    try:
        current = registry.get(user, job_id)
        updated = registry.update(
            user,
            job_id,
            name if name is not None else current.name,
            color if color is not None else current.color,
            rate if rate is not None else current.hourly_rate,
        )
    except ValueError as e:
        fail(e)

    console.print(f"[green]✓[/green] Updated job: {updated.name}")


@job.command("archive")
@click.argument("job_id")
@click.pass_context
def job_archive(ctx: click.Context, job_id: str) -> None:
    """Archive a job. Its shifts stay in reports."""
    try:
        archived = get_registry(ctx).archive(ctx.obj["user"], job_id)
    except ValueError as e:
        fail(e)
    console.print(f"[green]✓[/green] Archived job: {archived.name}")


@job.command("restore")
@click.argument("job_id")
@click.pass_context
def job_restore(ctx: click.Context, job_id: str) -> None:
    """Restore an archived job."""
    try:
        restored = get_registry(ctx).restore(ctx.obj["user"], job_id)
    except ValueError as e:
        fail(e)
    console.print(f"[green]✓[/green] Restored job: {restored.name}")


# ============================================================================
# Clocking in and out
# ============================================================================


@cli.command("in")
@click.argument("job_id")
@click.option("-n", "--notes", help="Shift notes")
@click.pass_context
def clock_in(ctx: click.Context, job_id: str, notes: Optional[str]) -> None:
    """Clock in to a job.

    Example:
        work-hours in <job-id> -n "Morning shift"
    """
    try:
        entry = get_ledger(ctx).clock_in(ctx.obj["user"], job_id, notes)
    except ValueError as e:
        fail(e)

    console.print("[green]✓[/green] Clocked in")
    console.print(f"  Entry ID: {entry.id}")
    console.print(f"  Started: {entry.start_time.strftime('%Y-%m-%d %H:%M:%S')}")


@cli.command("out")
@click.argument("entry_id", required=False)
@click.pass_context
def clock_out(ctx: click.Context, entry_id: Optional[str]) -> None:
    """Clock out of a shift.

    Without ENTRY_ID, closes the only open shift.

    Example:
        work-hours out
        work-hours out <entry-id>
    """
    ledger = get_ledger(ctx)
    user = ctx.obj["user"]

    if entry_id is None:
        open_items = ledger.list_open(user)
        if not open_items:
            fail("Not clocked in to any job")
        if len(open_items) > 1:
            fail("Clocked in to several jobs, pass the entry ID (see 'work-hours status')")
        entry_id = open_items[0].entry.id

    try:
        entry = ledger.clock_out(user, entry_id)
    except ValueError as e:
        fail(e)

    console.print("[green]✓[/green] Clocked out")
    console.print(f"  Duration: {format_hours_minutes(entry.duration_ms or 0)}")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show open shifts with their running time.

    Example:
        work-hours status
    """
    ledger = get_ledger(ctx)
    items = ledger.list_open(ctx.obj["user"])

    if not items:
        console.print("[yellow]Not clocked in to any job[/yellow]")
        console.print("\nClock in with: [cyan]work-hours in <job-id>[/cyan]")
        return

    get_report_generator(ctx).open_entries(items, ledger.clock())


@cli.command()
@click.pass_context
def today(ctx: click.Context) -> None:
    """Show today's shifts and time per job."""
    reports = get_reports(ctx)
    user = ctx.obj["user"]
    get_report_generator(ctx).today_report(
        reports.ledger.list_today(user), reports.today_totals(user), reports.ledger.clock()
    )


@cli.command()
@click.option("--from", "from_date", help="First day (YYYY-MM-DD, default: first of month)")
@click.option("--to", "to_date", help="Last day (YYYY-MM-DD, default: today)")
@click.option("-j", "--job", "job_id", help="Filter by job ID")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def log(
    ctx: click.Context,
    from_date: Optional[str],
    to_date: Optional[str],
    job_id: Optional[str],
    as_json: bool,
) -> None:
    """List closed shifts in a date range.

    Example:
        work-hours log
        work-hours log --from 2025-03-01 --to 2025-03-15
    """
    now = datetime.now()
    try:
        start = parse_date(from_date) if from_date else day_bounds(now)[0].replace(day=1)
        end_day = parse_date(to_date) if to_date else day_bounds(now)[0]
    except ValueError as e:
        fail(e)

    items = get_ledger(ctx).list_by_range(ctx.obj["user"], start, end_of_day(end_day))
    if job_id:
        items = [item for item in items if item.entry.job_id == job_id]

    if not items:
        console.print("[yellow]No entries found[/yellow]")
        return

    if as_json:
        print(json.dumps([item.entry.to_dict() for item in items], indent=2))
        return

    get_report_generator(ctx).entries_table(items, title=f"Shifts (showing {len(items)})")


@cli.command()
@click.argument("entry_id")
@click.option("--start", help="Clock-in time (YYYY-MM-DD HH:MM or HH:MM for today)")
@click.option("--end", help="Clock-out time (YYYY-MM-DD HH:MM or HH:MM for today)")
@click.option("-n", "--notes", help="Replace notes (empty string clears them)")
@click.pass_context
def edit(
    ctx: click.Context,
    entry_id: str,
    start: Optional[str],
    end: Optional[str],
    notes: Optional[str],
) -> None:
    """Correct the times or notes of a shift.

    Options left out keep their current value.

    Example:
        work-hours edit <entry-id> --start "2025-03-14 09:00" --end "2025-03-14 17:30"
    """
    ledger = get_ledger(ctx)
    user = ctx.obj["user"]

    try:
        entry = ledger.get_entry(user, entry_id)
        start_time = parse_time(start) if start else entry.start_time
        end_time = parse_time(end) if end else entry.end_time
        if end_time is None:
            raise ValueError("Shift is still open, pass --end or clock out first")

        updated = ledger.update_entry(
            user, entry_id, start_time, end_time, notes if notes is not None else entry.notes
        )
    except ValueError as e:
        fail(e)

    console.print(f"[green]✓[/green] Updated entry {updated.id}")
    console.print(f"  Duration: {format_hours_minutes(updated.duration_ms or 0)}")


@cli.command()
@click.argument("entry_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete(ctx: click.Context, entry_id: str, yes: bool) -> None:
    """Delete a shift permanently."""
    if not yes and not click.confirm(f"Delete entry {entry_id}?"):
        console.print("Cancelled")
        return

    try:
        get_ledger(ctx).delete_entry(ctx.obj["user"], entry_id)
    except ValueError as e:
        fail(e)
    console.print(f"[green]✓[/green] Deleted entry {entry_id}")


# ============================================================================
# Reports and export
# ============================================================================


@cli.group()
def report() -> None:
    """Daily and monthly summaries."""
    pass


@report.command("daily")
@click.option(
    "-d", "--date", "date_str", default="today", help="Day (YYYY-MM-DD, today or yesterday)"
)
@click.pass_context
def report_daily(ctx: click.Context, date_str: str) -> None:
    """Hours and pay per job for one day.

    Example:
        work-hours report daily
        work-hours report daily -d 2025-03-14
    """
    try:
        day_start = parse_date(date_str)
    except ValueError as e:
        fail(e)

    summaries = get_reports(ctx).daily_summary(ctx.obj["user"], day_start)
    get_report_generator(ctx).daily_report(summaries, day_start)


@report.command("monthly")
@click.option("-y", "--year", type=int, help="Year (default: current)")
@click.option("-m", "--month", type=click.IntRange(1, 12), help="Month 1-12 (default: current)")
@click.pass_context
def report_monthly(ctx: click.Context, year: Optional[int], month: Optional[int]) -> None:
    """Hours, shifts and salary per job for a month.

    Example:
        work-hours report monthly
        work-hours report monthly -y 2025 -m 3
    """
    now = datetime.now()
    year = year or now.year
    month = month or now.month
    locale = get_config(ctx).get("export.locale", "en")

    summaries = get_reports(ctx).monthly_summary(ctx.obj["user"], year, month)
    get_report_generator(ctx).monthly_report(summaries, f"{month_name(month, locale)} {year}")


@cli.command()
@click.option("-y", "--year", type=int, help="Year (default: current)")
@click.option("-m", "--month", type=click.IntRange(1, 12), help="Month 1-12 (default: current)")
@click.option("-j", "--job", "job_id", help="Only export this job")
@click.option(
    "-f",
    "--format",
    "export_format",
    type=click.Choice(["excel", "json"]),
    help="Output format (default: export.default_format)",
)
@click.option("-o", "--output", type=click.Path(), help="Output file (default: named after month)")
@click.pass_context
def export(
    ctx: click.Context,
    year: Optional[int],
    month: Optional[int],
    job_id: Optional[str],
    export_format: Optional[str],
    output: Optional[str],
) -> None:
    """Export a month of shifts to Excel or JSON.

    The Excel file ends with a totals row of hours and salary.

    Example:
        work-hours export -y 2025 -m 3
        work-hours export -f json -o march.json
    """
    config_mgr = get_config(ctx)
    now = datetime.now()
    year = year or now.year
    month = month or now.month
    export_format = export_format or config_mgr.get("export.default_format", "excel")

    start, end = month_bounds(year, month)
    rows = get_reports(ctx).export_range(ctx.obj["user"], start, end, job_id)

    extension = ".json" if export_format == "json" else ".xlsx"
    output_path = Path(
        output
        or export_filename(
            year,
            month,
            extension=extension,
            locale=config_mgr.get("export.locale", "en"),
            prefix=config_mgr.get("export.filename_prefix"),
        )
    )

    exporter: Exporter
    if export_format == "json":
        exporter = JSONExporter(output_path)
    else:
        exporter = ExcelExporter(
            output_path, currency_symbol=config_mgr.get("export.currency_symbol", "₪")
        )

    try:
        exporter.export_rows(rows, start_date=start, end_date=end)
    except OSError as e:
        fail(f"Could not write {exporter.output_path}: {e}")

    total_ms = sum(row.duration_ms for row in rows)
    total_salary = sum((row.salary for row in rows), Decimal("0"))
    console.print(
        Panel(
            f"[dim]Rows:[/dim] {len(rows)}\n"
            f"[dim]Hours:[/dim] {format_hours_minutes(total_ms)}\n"
            f"[dim]Salary:[/dim] {total_salary:.2f}",
            title=f"Exported to {exporter.output_path}",
            border_style="green",
        )
    )


cli.add_command(config)
cli.add_command(api)


if __name__ == "__main__":
    cli(obj={})
