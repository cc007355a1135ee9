"""
Outbound request construction.

Every builder returns the canonical JSON string for one operation. Payloads go
through typed models so that every key is present on the wire, including keys
whose value is null. `create_*` factories return the model itself for callers
that want to inspect or tweak it before serializing.
"""

import json
from typing import Any, Optional, Sequence

from dynamic_bridge.models.auth import (
    AuthRequestData,
    AuthRequestMessage,
    ConnectWalletMessage,
    DisconnectMessage,
    EmptyData,
    GetJwtTokenMessage,
    LogoutData,
    LogoutMessage,
    OpenProfileData,
    OpenProfileMessage,
)
from dynamic_bridge.models.envelope import BaseMessage, SignMessageType, TransactionType, new_request_id
from dynamic_bridge.models.wallet import (
    GetBalanceData,
    GetBalanceMessage,
    GetNetworksMessage,
    GetWalletsMessage,
    SignMessageData,
    SignMessageMessage,
    SwitchNetworkData,
    SwitchNetworkMessage,
    SwitchWalletData,
    SwitchWalletMessage,
    TransactionData,
    TransactionMessage,
)

OAUTH_CALLBACK_TYPE = "oauth_callback"


def serialize(message: BaseMessage) -> str:
    return json.dumps(message.to_wire(), separators=(",", ":"))


# ---------------------------------------------------------------------------
# auth
# ---------------------------------------------------------------------------

def build_connect_wallet_request() -> str:
    return serialize(ConnectWalletMessage(data=EmptyData()))


def build_disconnect_request() -> str:
    return serialize(DisconnectMessage(data=EmptyData()))


def build_open_profile_request(wallet_address: str) -> str:
    return serialize(OpenProfileMessage(data=OpenProfileData(wallet_address=wallet_address)))


def build_get_jwt_token_request() -> str:
    return serialize(GetJwtTokenMessage(data=EmptyData()))


# ---------------------------------------------------------------------------
# wallet
# ---------------------------------------------------------------------------

def build_sign_message_request(wallet_address: str, message: str) -> str:
    return serialize(create_sign_message_request(wallet_address, message))


def build_transaction_request(
    wallet_address: str,
    to: str,
    value: str,
    chain: str = "sui",
    network: str = "mainnet",
    data: Optional[str] = None,
) -> str:
    return serialize(create_transaction_request(wallet_address, to, value, data=data, chain=chain, network=network))


def build_get_balance_request(
    wallet_address: Optional[str] = None,
    chain: Optional[str] = None,
    token_address: Optional[str] = None,
    network: Optional[str] = None,
) -> str:
    """With no arguments the frontend answers for its current wallet (data: null)."""
    if wallet_address is None and chain is None and token_address is None and network is None:
        return serialize(GetBalanceMessage())
    return serialize(create_get_balance_request(wallet_address or "", chain or "", token_address, network or "mainnet"))


def build_get_wallets_request() -> str:
    return serialize(GetWalletsMessage())


def build_get_networks_request() -> str:
    return serialize(GetNetworksMessage())


def build_switch_wallet_request(wallet_id: str) -> str:
    return serialize(SwitchWalletMessage(data=SwitchWalletData(wallet_id=wallet_id)))


def build_switch_network_request(network_chain_id: str) -> str:
    return serialize(SwitchNetworkMessage(data=SwitchNetworkData(network_chain_id=network_chain_id)))


# ---------------------------------------------------------------------------
# factories
# ---------------------------------------------------------------------------

def create_auth_request(game_id: str, required_chains: Sequence[str], session_expiry: int = 3600) -> AuthRequestMessage:
    return AuthRequestMessage(data=AuthRequestData(
        game_id=game_id,
        required_chains=list(required_chains),
        session_expiry=session_expiry,
    ))


def create_logout_message(reason: str = "user_requested") -> LogoutMessage:
    return LogoutMessage(data=LogoutData(reason=reason))


def create_get_balance_request(
    wallet_address: str,
    chain: str,
    token_address: Optional[str] = None,
    network: str = "mainnet",
) -> GetBalanceMessage:
    return GetBalanceMessage(data=GetBalanceData(
        wallet_address=wallet_address,
        chain=chain,
        token_address=token_address,
        network=network,
    ))


def create_sign_message_request(
    wallet_address: str,
    message: str,
    message_type: str = SignMessageType.PERSONAL.value,
) -> SignMessageMessage:
    # The frontend infers the signing scheme itself; message_type is kept for API parity.
    return SignMessageMessage(data=SignMessageData(wallet_address=wallet_address, message=message))


def create_transaction_request(
    wallet_address: str,
    to: str,
    value: str,
    data: Optional[str] = None,
    chain: str = "sui",
    network: str = "mainnet",
    type: str = TransactionType.SEND.value,
) -> TransactionMessage:
    return TransactionMessage(data=TransactionData(
        wallet_address=wallet_address,
        to=to.strip(),
        value=value.strip(),
        data=data or None,
        chain=chain,
        network=network,
        type=type,
    ))


# ---------------------------------------------------------------------------
# OAuth callbacks relayed from deep links
# ---------------------------------------------------------------------------

def build_oauth_token_message(
    access_token: str,
    token_type: Optional[str] = None,
    expires_in: Optional[str] = None,
    state: Optional[str] = None,
) -> str:
    return _dump_plain({
        "type": OAUTH_CALLBACK_TYPE,
        "action": "access_token",
        "requestId": new_request_id(),
        "access_token": access_token,
        "token_type": token_type,
        "expires_in": expires_in,
        "state": state,
    })


def build_oauth_error_message(error: str, error_description: str = "OAuth authentication failed") -> str:
    return _dump_plain({
        "type": OAUTH_CALLBACK_TYPE,
        "action": "error",
        "requestId": new_request_id(),
        "error": error,
        "error_description": error_description,
    })


def _dump_plain(payload: dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"))
