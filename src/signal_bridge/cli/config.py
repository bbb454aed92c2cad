"""CLI: signal-bridge config show|set"""

import json

import click
from pydantic import ValidationError
from rich.console import Console

from signal_bridge.config import BridgeConfig, save_config

console = Console()


def _load_config() -> BridgeConfig:
    from signal_bridge.cli.main import _load_config
    return _load_config()


@click.group()
def config():
    """Configuration commands."""


@config.command("show")
def config_show():
    """Show the effective configuration."""
    cfg = _load_config()
    click.echo(json.dumps(cfg.model_dump(mode="json"), indent=2))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set a config value (e.g. `account +15551234567`)."""
    cfg = _load_config()
    if key not in BridgeConfig.model_fields:
        console.print(f"[red]Unknown key {key!r}. Known: {', '.join(BridgeConfig.model_fields)}[/red]")
        raise SystemExit(1)
    raw = cfg.model_dump(mode="json")
    raw[key] = value.split() if key == "command" else value
    try:
        updated = BridgeConfig.model_validate(raw)
    except ValidationError as e:
        console.print(f"[red]Invalid value for {key}: {e.errors()[0]['msg']}[/red]")
        raise SystemExit(1)
    save_config(updated)
    console.print(f"[green]{key} saved.[/green]")
