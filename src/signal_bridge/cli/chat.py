"""CLI: signal-bridge listen, send, chat"""

import asyncio
from typing import Optional

import click
from rich.console import Console

from signal_bridge.client import SignalBridge
from signal_bridge.errors import ProcessUnavailableError
from signal_bridge.models.entry import EntryKind
from signal_bridge.transport.process import ConnectionState

console = Console()


def _get_bridge() -> SignalBridge:
    from signal_bridge.cli.main import _get_bridge
    return _get_bridge()


def _run(coro):
    from signal_bridge.cli.main import _run
    return _run(coro)


def _print_entry(bridge, conversation_id, entry) -> None:
    from signal_bridge.cli.main import _print_entry
    _print_entry(bridge, conversation_id, entry)


def _conversation_table(bridge):
    from signal_bridge.cli.main import _conversation_table
    return _conversation_table(bridge)


def _stopped_event(bridge: SignalBridge) -> asyncio.Event:
    stopped = asyncio.Event()

    def on_state(state: ConnectionState) -> None:
        if state != ConnectionState.RUNNING:
            stopped.set()

    bridge.supervisor.add_state_handler(on_state)
    return stopped


@click.command("listen")
def listen_cmd():
    """Print incoming messages until interrupted."""

    async def _listen():
        bridge = _get_bridge()
        bridge.add_entry_handler(lambda cid, entry: _print_entry(bridge, cid, entry))
        stopped = _stopped_event(bridge)
        with console.status("Starting signal-cli..."):
            await bridge.start()
        console.print("[cyan]Listening (Ctrl+C to exit)[/cyan]\n")
        try:
            await stopped.wait()
            console.print(f"[yellow]signal-cli {bridge.state.value}[/yellow]")
        finally:
            await bridge.stop()
            if bridge.conversations():
                console.print(_conversation_table(bridge))

    try:
        _run(_listen())
    except KeyboardInterrupt:
        pass


@click.command("send")
@click.argument("recipient")
@click.argument("message", default="")
@click.option("-g", "--group", is_flag=True, help="RECIPIENT is a group id")
@click.option("-a", "--attach", "attachments", multiple=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--wait", default=10.0, type=float, help="Seconds to wait for the daemon's answer")
def send_cmd(recipient: str, message: str, group: bool, attachments: tuple, wait: float):
    """Send a one-shot message."""
    if not message and not attachments:
        raise click.UsageError("Nothing to send: give a MESSAGE or --attach a file.")

    async def _send() -> bool:
        bridge = _get_bridge()
        errors: list[str] = []
        bridge.add_entry_handler(
            lambda cid, entry: errors.append(entry.text) if entry.kind == EntryKind.SYSTEM else None
        )
        await bridge.start()
        try:
            if group:
                bridge.mark_group(recipient)
            if attachments:
                request_id = bridge.send_attachments(recipient, list(attachments), message)
            else:
                request_id = bridge.send_message(recipient, message)
            loop = asyncio.get_running_loop()
            deadline = loop.time() + wait
            while request_id in bridge.supervisor.correlator and bridge.running and loop.time() < deadline:
                await asyncio.sleep(0.1)
        finally:
            await bridge.stop()
        for text in errors:
            console.print(f"[red]{text}[/red]")
        return not errors

    if not _run(_send()):
        raise SystemExit(1)
    console.print("[green]Sent.[/green]")


@click.command("chat")
@click.argument("conversation_id")
@click.option("-g", "--group", is_flag=True, help="CONVERSATION_ID is a group id")
def chat_cmd(conversation_id: str, group: bool):
    """Interactive chat with one contact or group."""

    async def _chat():
        bridge = _get_bridge()
        if group:
            bridge.mark_group(conversation_id)
        buf = bridge.buffer(conversation_id)
        bridge.add_entry_handler(lambda cid, entry: _print_entry(bridge, cid, entry))
        await bridge.start()
        console.print(f"[cyan]Chatting with {conversation_id}. /who lists conversations, /quit exits.[/cyan]\n")
        loop = asyncio.get_running_loop()
        try:
            while bridge.running:
                line: Optional[str] = await loop.run_in_executor(None, _read_line)
                if line is None or line.strip().lower() in ("/quit", "/exit"):
                    break
                if line.strip().lower() == "/who":
                    console.print(_conversation_table(bridge))
                    continue
                buf.insert(line)
                try:
                    bridge.submit(conversation_id)
                except ProcessUnavailableError as e:
                    console.print(f"[red]{e}[/red]")
                    break
        finally:
            await bridge.stop()

    try:
        _run(_chat())
    except KeyboardInterrupt:
        pass


def _read_line() -> Optional[str]:
    try:
        return input()
    except EOFError:
        return None
