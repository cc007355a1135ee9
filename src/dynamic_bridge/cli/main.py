"""
Dynamic bridge CLI — `dynamic-bridge` command.

Commands:
  dynamic-bridge build <action>          Print the request JSON for an operation
  dynamic-bridge parse <raw>             Decode a frontend message (URL or JSON)
  dynamic-bridge validate <kind> <value> Run the outbound input checks
  dynamic-bridge deeplink <url>          Inspect an OAuth deep link
  dynamic-bridge config show|set         Manage ~/.dynamic_bridge/config.json
  dynamic-bridge doctor                  Probe the configured start URL
  dynamic-bridge listen --relay URL      Route events from a Socket.IO relay
"""

import asyncio
import logging

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install dynamic-bridge[cli]")

from dynamic_bridge import __version__
from dynamic_bridge.config import BridgeConfig, config_from_file

console = Console()


def _get_config() -> BridgeConfig:
    try:
        return config_from_file()
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise SystemExit(1)


def _run(coro):
    return asyncio.run(coro)


def _setup_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", is_flag=True, help="Log bridge internals to stderr.")
def main(verbose):
    """Dynamic bridge CLI — build, decode and relay wallet bridge messages."""
    _setup_logging(verbose)


# Register subcommands from separate modules
from dynamic_bridge.cli.messages import build_cmd, parse_cmd, validate_cmd, deeplink_cmd
from dynamic_bridge.cli.bridge import config_cmd, doctor_cmd, listen_cmd

main.add_command(build_cmd)
main.add_command(parse_cmd)
main.add_command(validate_cmd)
main.add_command(deeplink_cmd)
main.add_command(config_cmd)
main.add_command(doctor_cmd)
main.add_command(listen_cmd)


if __name__ == "__main__":
    main()
