"""CLI: dynamic-bridge build|parse|validate|deeplink"""

import json

import click
from rich.console import Console
from rich.table import Table

from dynamic_bridge import builder
from dynamic_bridge.deeplink import build_callback_url, classify, is_oauth_callback, parse_url_parameters
from dynamic_bridge.errors import ParseError, describe_error
from dynamic_bridge.models.envelope import UnknownMessage
from dynamic_bridge.parser import parse_message, parse_request
from dynamic_bridge.validation import Validator

console = Console()

BUILD_ACTIONS = [
    "connectWallet", "disconnect", "signMessage", "transaction", "getBalance",
    "getWallets", "getNetworks", "openProfile", "getJwtToken", "switchWallet", "switchNetwork",
]


def _get_config():
    from dynamic_bridge.cli.main import _get_config
    return _get_config()


def _require(value, option):
    if not value:
        raise click.UsageError(f"{option} is required for this action")
    return value


@click.command("build")
@click.argument("action", type=click.Choice(BUILD_ACTIONS))
@click.option("--address", default=None, help="Sender wallet address.")
@click.option("--message", default=None, help="Message to sign.")
@click.option("--to", "to", default=None, help="Transaction recipient.")
@click.option("--value", default=None, help="Transaction amount.")
@click.option("--data", default=None, help="Transaction data.")
@click.option("--chain", default="sui")
@click.option("--network", default="mainnet")
@click.option("--wallet-id", default=None)
@click.option("--chain-id", default=None, help="Network chain id for switchNetwork.")
@click.option("--pretty", is_flag=True)
def build_cmd(action, address, message, to, value, data, chain, network, wallet_id, chain_id, pretty):
    """Print the request JSON for ACTION."""
    if action == "connectWallet":
        payload = builder.build_connect_wallet_request()
    elif action == "disconnect":
        payload = builder.build_disconnect_request()
    elif action == "signMessage":
        payload = builder.build_sign_message_request(_require(address, "--address"), _require(message, "--message"))
    elif action == "transaction":
        payload = builder.build_transaction_request(
            _require(address, "--address"), _require(to, "--to"), _require(value, "--value"),
            chain=chain, network=network, data=data,
        )
    elif action == "getBalance":
        payload = builder.build_get_balance_request()
    elif action == "getWallets":
        payload = builder.build_get_wallets_request()
    elif action == "getNetworks":
        payload = builder.build_get_networks_request()
    elif action == "openProfile":
        payload = builder.build_open_profile_request(_require(address, "--address"))
    elif action == "getJwtToken":
        payload = builder.build_get_jwt_token_request()
    elif action == "switchWallet":
        payload = builder.build_switch_wallet_request(_require(wallet_id, "--wallet-id"))
    else:
        payload = builder.build_switch_network_request(_require(chain_id, "--chain-id"))

    click.echo(json.dumps(json.loads(payload), indent=2) if pretty else payload)


@click.command("parse")
@click.argument("raw")
@click.option("--request", "as_request", is_flag=True, help="Decode a host -> frontend request instead.")
@click.option("--strict", is_flag=True, help="Fail on unknown type/action.")
@click.option("--json-output", "--json", is_flag=True)
def parse_cmd(raw, as_request, strict, json_output):
    """Decode a frontend message given as a bridge URL or bare JSON."""
    try:
        message = parse_request(raw, strict=strict) if as_request else parse_message(raw, strict=strict)
    except ParseError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    wire = message.to_wire()
    if json_output:
        click.echo(json.dumps(wire, indent=2))
        return

    kind = "unknown" if isinstance(message, UnknownMessage) else type(message).__name__
    table = Table(title=f"{message.type}/{message.action} ({kind})")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("requestId", str(wire.get("requestId", "")))
    table.add_row("timestamp", str(wire.get("timestamp", "")))
    data = wire.get("data")
    if isinstance(data, dict):
        for key, value in data.items():
            table.add_row(f"data.{key}", json.dumps(value) if isinstance(value, (dict, list)) else str(value))
            if key == "error" and value:
                table.add_row("", f"[yellow]{describe_error(value)}[/yellow]")
    else:
        table.add_row("data", json.dumps(data))
    console.print(table)


@click.command("validate")
@click.argument("kind", type=click.Choice(["address", "amount", "message", "chain"]))
@click.argument("value")
@click.option("--chain", default=None, help="Chain whose address length applies.")
def validate_cmd(kind, value, chain):
    """Run the outbound input checks on VALUE."""
    validator = Validator.from_config(_get_config())
    if kind == "address":
        reason = validator.address_error(value, chain)
    elif kind == "amount":
        reason = validator.amount_error(value)
    elif kind == "message":
        reason = validator.message_error(value)
    else:
        reason = validator.chain_error(value)

    if reason:
        console.print(f"[red]invalid {kind}: {reason}[/red]")
        raise SystemExit(1)
    console.print(f"[green]valid {kind}[/green]")


@click.command("deeplink")
@click.argument("url")
def deeplink_cmd(url):
    """Show how an OAuth deep link would be handled."""
    config = _get_config()
    if not is_oauth_callback(url, config.deeplink_scheme):
        console.print(f"[yellow]Not an OAuth callback for scheme {config.deeplink_scheme}://[/yellow]")
        raise SystemExit(1)

    params = parse_url_parameters(url)
    table = Table(title="Deep link parameters")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in params.items():
        table.add_row(key, value)
    console.print(table)

    action = classify(params)
    if action == "code":
        console.print(f"Action: load panel at [cyan]{build_callback_url(config, params['code'], params.get('state'))}[/cyan]")
    elif action == "access_token":
        console.print("Action: send oauth_callback/access_token to the frontend")
    elif action == "error":
        console.print(f"Action: send oauth_callback/error ({params.get('error_description') or 'OAuth authentication failed'})")
    else:
        console.print("Action: none (no code, access_token or error parameter)")
