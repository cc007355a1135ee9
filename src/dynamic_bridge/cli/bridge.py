"""CLI: dynamic-bridge config|doctor|listen"""

import asyncio
import json

import click
from rich.console import Console
from rich.table import Table

from dynamic_bridge.config import BridgeConfig, load_config, save_config
from dynamic_bridge.events import SessionEvent

console = Console()


def _get_config():
    from dynamic_bridge.cli.main import _get_config
    return _get_config()


def _run(coro):
    from dynamic_bridge.cli.main import _run
    return _run(coro)


@click.group("config")
def config_cmd():
    """Manage saved bridge settings."""


@config_cmd.command("show")
@click.option("--json-output", "--json", is_flag=True)
def config_show(json_output):
    """Show the effective configuration."""
    config = _get_config()
    data = config.model_dump(mode="json")
    if json_output:
        click.echo(json.dumps(data, indent=2))
        return
    saved = load_config()
    table = Table(title="Bridge configuration")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_column("Source")
    for key, value in data.items():
        table.add_row(key, json.dumps(value), "saved" if key in saved else "default")
    console.print(table)


@config_cmd.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key, value):
    """Save KEY=VALUE (VALUE is read as JSON when it parses)."""
    if key not in BridgeConfig.model_fields:
        console.print(f"[red]Unknown setting: {key}[/red]")
        raise SystemExit(1)
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    cfg = load_config()
    cfg[key] = parsed
    try:
        BridgeConfig.model_validate(cfg)
    except ValueError as e:
        console.print(f"[red]Invalid value for {key}: {e}[/red]")
        raise SystemExit(1)
    save_config(cfg)
    console.print(f"[green]{key} saved.[/green]")


@click.command("doctor")
def doctor_cmd():
    """Check that the configured frontend answers."""
    from dynamic_bridge.transport.http import FrontendProbe

    config = _get_config()
    if config.manifest is not None and not config.manifest.is_valid():
        console.print("[yellow]Manifest is missing environmentId, appOrigin or appName.[/yellow]")

    async def _probe():
        probe = FrontendProbe(attempts=config.max_retry_attempts, retry_delay=config.retry_delay)
        try:
            with console.status(f"Probing {config.start_url}..."):
                return await probe.probe(config.resolved_start_url)
        finally:
            await probe.close()

    result = _run(_probe())
    if result.ok:
        console.print(f"[green]OK[/green] {config.start_url} ({result.status_code}, {result.elapsed_ms:.0f} ms)")
    else:
        console.print(f"[red]FAIL[/red] {config.start_url}: {result.error}")
        raise SystemExit(1)


@click.command("listen")
@click.option("--relay", required=True, help="Socket.IO relay URL.")
@click.option("--token", default=None)
@click.option("--connect", "connect_wallet", is_flag=True, help="Request a wallet connection once ready.")
def listen_cmd(relay, token, connect_wallet):
    """Connect to a panel relay and print routed session events."""
    from dynamic_bridge.errors import BridgeError
    from dynamic_bridge.scheduling import AsyncioScheduler
    from dynamic_bridge.session import SessionController
    from dynamic_bridge.transport.socketio import SocketIORelayTransport

    config = _get_config()

    async def _listen():
        transport = SocketIORelayTransport(
            relay, token=token,
            connect_attempts=config.max_retry_attempts,
            retry_delay=config.retry_delay,
        )
        with console.status(f"Connecting to {relay}..."):
            await transport.connect()
        console.print(f"[green]Connected to {relay}[/green] (Ctrl-C to stop)")

        controller = SessionController(transport, config, AsyncioScheduler(asyncio.get_running_loop()))
        for event in SessionEvent:
            controller.on(event, _printer(event))
        transport.load(config.resolved_start_url)
        if connect_wallet:
            try:
                controller.connect_wallet()
            except BridgeError as e:
                console.print(f"[red]{e}[/red]")
        try:
            while transport.connected:
                await asyncio.sleep(1.0)
        finally:
            controller.close()
            await transport.disconnect()

    try:
        _run(_listen())
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/dim]")
    except BridgeError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)


def _printer(event: SessionEvent):
    def handler(*args):
        style = "red" if event is SessionEvent.ERROR else "cyan"
        detail = " ".join(str(a) for a in args)
        console.print(f"[{style}]{event.value}[/{style}] {detail}")
    return handler
