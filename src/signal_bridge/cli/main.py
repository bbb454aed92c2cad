"""
signal-bridge CLI — `signal-bridge` command.

Commands:
  signal-bridge config show|set        Inspect or edit ~/.signal-bridge/config.json
  signal-bridge listen                 Print incoming messages as they arrive
  signal-bridge send <to> <message>    One-shot message
  signal-bridge chat <conversation>    Interactive chat
"""

import asyncio
import logging

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
    from rich.table import Table
except ImportError:
    raise SystemExit("CLI requires extras: pip install signal-bridge[cli]")

from signal_bridge.client import SignalBridge
from signal_bridge.config import BridgeConfig, load_config
from signal_bridge.errors import BridgeError, ConfigError
from signal_bridge.models.entry import Entry, EntryKind, Severity

console = Console()


def _load_config() -> BridgeConfig:
    try:
        return load_config()
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


def _get_bridge() -> SignalBridge:
    cfg = _load_config()
    try:
        cfg.daemon_command()
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    return SignalBridge(cfg)


def _run(coro):
    try:
        return asyncio.run(coro)
    except BridgeError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


def _print_entry(bridge: SignalBridge, conversation_id: str, entry: Entry) -> None:
    where = bridge.display_name(conversation_id)
    stamp = entry.timestamp.strftime("%H:%M")
    if entry.kind == EntryKind.SYSTEM:
        style = "red" if entry.severity == Severity.ERROR else "yellow"
        console.print(f"[dim]{stamp}[/dim] [{style}]{where}: {entry.text}[/{style}]")
        return
    style = "green" if entry.kind == EntryKind.INCOMING else "cyan"
    who = entry.sender_name or entry.sender_id or "?"
    prefix = f"[dim]{stamp}[/dim] [bold]{where}[/bold] " if who != where else f"[dim]{stamp}[/dim] "
    console.print(f"{prefix}[{style}]{who}:[/{style}] {entry.text}", highlight=False)
    for item in entry.media:
        console.print(f"    [dim]{item}[/dim]", highlight=False)


def _conversation_table(bridge: SignalBridge) -> Table:
    table = Table(title=f"Conversations ({len(bridge.conversations())} active)")
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Group")
    table.add_column("Typing")
    for cid, name in bridge.conversations():
        table.add_row(
            cid, name,
            "yes" if bridge.directory.is_group(cid) else "",
            "..." if bridge.directory.is_typing(cid) else "",
        )
    return table


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def main(verbose: bool):
    """signal-bridge — chat over signal-cli from the terminal."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


# Register subcommands from separate modules
from signal_bridge.cli.config import config
from signal_bridge.cli.chat import chat_cmd, listen_cmd, send_cmd

main.add_command(config)
main.add_command(listen_cmd)
main.add_command(send_cmd)
main.add_command(chat_cmd)


if __name__ == "__main__":
    main()
