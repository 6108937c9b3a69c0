"""CLI commands for configuration management."""

import json
import shutil
import sys
from typing import Any

import click  # type: ignore[import-not-found]
from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from work_hours.core.config import ConfigManager

console = Console()
error_console = Console(stderr=True)


def _config_manager(ctx: click.Context) -> ConfigManager:
    """Config loaded by the root command, or the default one."""
    if ctx.obj and ctx.obj.get("config") is not None:
        config_mgr: ConfigManager = ctx.obj["config"]
        return config_mgr
    return ConfigManager()


def convert_value(value: str) -> Any:
    """Convert a command-line string to bool, None, int, float or leave it as str."""
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    if lowered == "null":
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


@click.group()  # type: ignore[misc]
def config() -> None:
    """Manage Work Hours configuration.

    Configuration is stored in ~/.work-hours/config.yml
    """
    pass


@config.command("show")  # type: ignore[misc]
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Show all configuration settings.

    Example:
        work-hours config show
        work-hours config show --json
    """
    config_mgr = _config_manager(ctx)

    if as_json:
        print(json.dumps(config_mgr.to_dict(), indent=2, ensure_ascii=False))
        return

    table = Table(title="Work Hours Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key in config_mgr.get_all_keys():
        value = config_mgr.get(key)
        # Never echo the signing key
        if key == "api.authentication.secret_key" and value:
            value = "********"
        table.add_row(key, str(value))

    console.print(table)
    console.print(f"\nConfig file: {config_mgr.config_path}")


@config.command("get")  # type: ignore[misc]
@click.argument("key")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_get(ctx: click.Context, key: str) -> None:
    """Get a specific configuration value.

    Uses dot notation to access nested values.

    Example:
        work-hours config get export.locale
        work-hours config get general.user_id
    """
    value = _config_manager(ctx).get(key)

    if value is None:
        error_console.print(f"[red]Error:[/red] Configuration key '{key}' not found")
        sys.exit(1)

    if isinstance(value, (dict, list)):
        console.print(json.dumps(value, indent=2, ensure_ascii=False))
    else:
        console.print(str(value))


@config.command("set")  # type: ignore[misc]
@click.argument("key")  # type: ignore[misc]
@click.argument("value")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set a configuration value.

    Values are automatically converted to appropriate types.
    Use 'true'/'false' for booleans, numbers for integers, 'null' to unset.

    Example:
        work-hours config set export.locale he
        work-hours config set api.port 8080
        work-hours config set export.currency_symbol "$"
    """
    config_mgr = _config_manager(ctx)
    converted_value = convert_value(value)

    try:
        config_mgr.set(key, converted_value)
    except ValueError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    console.print(f"[green]✓[/green] Set {key} = {converted_value}")


@config.command("reset")  # type: ignore[misc]
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_reset(ctx: click.Context, yes: bool) -> None:
    """Reset configuration to defaults.

    Example:
        work-hours config reset --yes
    """
    config_mgr = _config_manager(ctx)

    if not yes:
        console.print("[yellow]Warning:[/yellow] This will reset all configuration to defaults.")
        if not click.confirm("Continue?"):
            console.print("Cancelled")
            return

    backup_path = config_mgr.config_path.with_suffix(".yml.backup")
    if config_mgr.config_path.exists():
        shutil.copy(config_mgr.config_path, backup_path)
        console.print(f"Backed up current config to {backup_path}")

    config_mgr.reset()
    console.print("[green]✓[/green] Configuration reset to defaults")
    console.print(f"Config file: {config_mgr.config_path}")


@config.command("validate")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_validate(ctx: click.Context) -> None:
    """Validate configuration file."""
    try:
        _config_manager(ctx).validate()
    except ValueError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    console.print("[green]✓[/green] Configuration is valid")


@config.command("path")  # type: ignore[misc]
@click.pass_context  # type: ignore[misc]
def config_path(ctx: click.Context) -> None:
    """Show path to configuration file."""
    console.print(str(_config_manager(ctx).config_path))
