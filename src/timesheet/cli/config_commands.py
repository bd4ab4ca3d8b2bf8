"""`timesheet config` commands."""

import json
import shutil
from typing import Any

import click  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]

from timesheet.cli.helpers import console, fail, get_config

KEYWORDS = {"true": True, "yes": True, "false": False, "no": False, "null": None}


def convert_value(value: str) -> Any:
    """Turn a command-line string into the YAML value it stands for.

    Example:
        >>> convert_value("true"), convert_value("12"), convert_value("x")
        (True, 12, 'x')
    """
    if value.lower() in KEYWORDS:
        return KEYWORDS[value.lower()]
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            pass
    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


def _display(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    return str(value)


@click.group()
def config() -> None:
    """View and change settings.

    Settings live in ~/.timesheet/config.yml unless --config is given.
    """


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """List every setting."""
    settings = get_config(ctx)

    if as_json:
        click.echo(json.dumps(settings.to_dict(), indent=2, ensure_ascii=False))
        return

    table = Table(title="Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for key in settings.get_all_keys():
        table.add_row(key, _display(settings.get(key)))

    console.print(table)
    console.print(f"\nConfig file: {settings.config_path}")


@config.command("get")
@click.argument("key")
@click.pass_context
def config_get(ctx: click.Context, key: str) -> None:
    """Print one setting, e.g. `timesheet config get categories.Leave`."""
    value = get_config(ctx).get(key)
    if value is None:
        fail(f"Configuration key '{key}' not found")

    if isinstance(value, (dict, list)):
        click.echo(json.dumps(value, indent=2, ensure_ascii=False))
    else:
        click.echo(value)


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Change one setting.

    VALUE may be true/false, null, a number, a JSON list or object, or
    plain text.

    Examples:
      timesheet config set analytics.default_period this-month
      timesheet config set categories.Leave '["Annual Leave", "Sick Leave"]'
    """
    parsed = convert_value(value)
    try:
        get_config(ctx).set(key, parsed)
    except ValueError as e:
        fail(e)
    console.print(f"[green]✓[/green] {key} = {parsed}")


@config.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def config_reset(ctx: click.Context, yes: bool) -> None:
    """Restore the default settings, keeping a copy of the current file."""
    settings = get_config(ctx)

    if not yes and not click.confirm("Reset all settings to their defaults?"):
        console.print("Cancelled")
        return

    if settings.config_path.exists():
        saved_copy = settings.config_path.with_suffix(".yml.backup")
        shutil.copy(settings.config_path, saved_copy)
        console.print(f"Previous settings saved to {saved_copy}")

    settings.reset()
    console.print("[green]✓[/green] Settings reset to defaults")


@config.command("path")
@click.pass_context
def config_path(ctx: click.Context) -> None:
    """Print the location of the settings file."""
    click.echo(str(get_config(ctx).config_path))
