"""
Inbound message decoding.

A raw inbound payload is either a bare JSON object or a URL of the form
`uniwebview://auth?message=<urlencoded-json>`. Decoding reads the envelope
first, then validates the full payload against the one schema registered for
its (type, action) pair.
"""

import json
import logging
from typing import Any, Optional, Union
from urllib.parse import parse_qsl, urlsplit

from pydantic import ValidationError as PydanticValidationError

from dynamic_bridge.errors import InvalidPayloadError, ParseError, UnknownMessageError
from dynamic_bridge.models.auth import (
    AuthFailedMessage,
    AuthRequestMessage,
    AuthSuccessMessage,
    ConnectWalletMessage,
    DisconnectMessage,
    GetJwtTokenMessage,
    HandleAuthenticatedUserMessage,
    JwtTokenResponseMessage,
    LoggedOutMessage,
    LogoutMessage,
    OpenProfileMessage,
)
from dynamic_bridge.models.common import WalletCredential
from dynamic_bridge.models.envelope import AuthAction, BaseMessage, Envelope, MessageType, UnknownMessage, WalletAction
from dynamic_bridge.models.wallet import (
    BalanceResponseMessage,
    GetBalanceMessage,
    GetNetworksMessage,
    GetWalletsMessage,
    NetworksResponseMessage,
    SignMessageMessage,
    SignMessageResponseMessage,
    SwitchNetworkMessage,
    SwitchWalletMessage,
    TransactionMessage,
    TransactionResponseMessage,
    WalletConnectedData,
    WalletConnectedMessage,
    WalletDisconnectedMessage,
    WalletErrorMessage,
    WalletsResponseMessage,
)

logger = logging.getLogger(__name__)

BRIDGE_SCHEME = "uniwebview"
MESSAGE_PARAM = "message"
LEGACY_CONNECTED_PATH = "connected"
LEGACY_WALLET_NAME = "Legacy Wallet"

InboundMessage = Union[
    AuthSuccessMessage,
    AuthFailedMessage,
    LoggedOutMessage,
    HandleAuthenticatedUserMessage,
    JwtTokenResponseMessage,
    BalanceResponseMessage,
    SignMessageResponseMessage,
    TransactionResponseMessage,
    WalletConnectedMessage,
    WalletDisconnectedMessage,
    WalletErrorMessage,
    WalletsResponseMessage,
    NetworksResponseMessage,
    UnknownMessage,
]

# Frontend -> host. switchWallet / switchNetwork acks reuse the balance shape.
INBOUND_SCHEMAS: dict[tuple[str, str], type[BaseMessage]] = {
    (MessageType.AUTH.value, AuthAction.AUTH_SUCCESS.value): AuthSuccessMessage,
    (MessageType.AUTH.value, AuthAction.AUTH_FAILED.value): AuthFailedMessage,
    (MessageType.AUTH.value, AuthAction.LOGGED_OUT.value): LoggedOutMessage,
    (MessageType.AUTH.value, AuthAction.HANDLE_AUTHENTICATED_USER.value): HandleAuthenticatedUserMessage,
    (MessageType.AUTH.value, AuthAction.JWT_TOKEN_RESPONSE.value): JwtTokenResponseMessage,
    (MessageType.WALLET.value, WalletAction.BALANCE_RESPONSE.value): BalanceResponseMessage,
    (MessageType.WALLET.value, WalletAction.SWITCH_WALLET.value): BalanceResponseMessage,
    (MessageType.WALLET.value, WalletAction.SWITCH_NETWORK.value): BalanceResponseMessage,
    (MessageType.WALLET.value, WalletAction.SIGN_MESSAGE_RESPONSE.value): SignMessageResponseMessage,
    (MessageType.WALLET.value, WalletAction.TRANSACTION_RESPONSE.value): TransactionResponseMessage,
    (MessageType.WALLET.value, WalletAction.WALLET_CONNECTED.value): WalletConnectedMessage,
    (MessageType.WALLET.value, WalletAction.WALLET_DISCONNECTED.value): WalletDisconnectedMessage,
    (MessageType.WALLET.value, WalletAction.WALLET_ERROR.value): WalletErrorMessage,
    (MessageType.WALLET.value, WalletAction.WALLETS_RESPONSE.value): WalletsResponseMessage,
    (MessageType.WALLET.value, WalletAction.NETWORKS_RESPONSE.value): NetworksResponseMessage,
}

# Host -> frontend, for mock frontends and tooling.
REQUEST_SCHEMAS: dict[tuple[str, str], type[BaseMessage]] = {
    (MessageType.AUTH.value, AuthAction.CONNECT_WALLET.value): ConnectWalletMessage,
    (MessageType.AUTH.value, AuthAction.DISCONNECT.value): DisconnectMessage,
    (MessageType.AUTH.value, AuthAction.OPEN_PROFILE.value): OpenProfileMessage,
    (MessageType.AUTH.value, AuthAction.GET_JWT_TOKEN.value): GetJwtTokenMessage,
    (MessageType.AUTH.value, AuthAction.AUTH_REQUEST.value): AuthRequestMessage,
    (MessageType.AUTH.value, AuthAction.LOGOUT.value): LogoutMessage,
    (MessageType.WALLET.value, WalletAction.GET_BALANCE.value): GetBalanceMessage,
    (MessageType.WALLET.value, WalletAction.SIGN_MESSAGE.value): SignMessageMessage,
    (MessageType.WALLET.value, WalletAction.TRANSACTION.value): TransactionMessage,
    (MessageType.WALLET.value, WalletAction.GET_WALLETS.value): GetWalletsMessage,
    (MessageType.WALLET.value, WalletAction.GET_NETWORKS.value): GetNetworksMessage,
    (MessageType.WALLET.value, WalletAction.OPEN_PROFILE.value): OpenProfileMessage,
    (MessageType.WALLET.value, WalletAction.SWITCH_WALLET.value): SwitchWalletMessage,
    (MessageType.WALLET.value, WalletAction.SWITCH_NETWORK.value): SwitchNetworkMessage,
}


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------

def _looks_like_url(raw: str) -> bool:
    return "://" in raw.split("{", 1)[0]


def is_bridge_url(url: Optional[str], scheme: str = BRIDGE_SCHEME) -> bool:
    return message_type_from_url(url, scheme) is not None


def message_type_from_url(url: Optional[str], scheme: str = BRIDGE_SCHEME) -> Optional[str]:
    """"auth" or "wallet" for bridge URLs, None otherwise."""
    if not url:
        return None
    for message_type in (MessageType.AUTH.value, MessageType.WALLET.value):
        if url.startswith(f"{scheme}://{message_type}"):
            return message_type
    return None


def _query_params(url: str) -> dict[str, str]:
    return dict(parse_qsl(urlsplit(url).query, keep_blank_values=True))


def extract_message_from_url(url: str) -> str:
    """URL-decoded value of the `message` query parameter."""
    params = _query_params(url)
    if MESSAGE_PARAM not in params:
        raise ParseError(f"Message parameter not found in URL: {url}", raw=url)
    return params[MESSAGE_PARAM]


def parse_legacy_connected(raw: Optional[str]) -> Optional[WalletConnectedMessage]:
    """`scheme://connected?address=..&chain=..` becomes a WalletConnected message."""
    if not raw or not _looks_like_url(raw):
        return None
    parts = urlsplit(raw)
    path = (parts.netloc or parts.path.lstrip("/")).split("/", 1)[0]
    if path.lower() != LEGACY_CONNECTED_PATH:
        return None
    args = dict(parse_qsl(parts.query, keep_blank_values=True))
    return WalletConnectedMessage(data=WalletConnectedData(
        success=True,
        wallet=WalletCredential(
            address=args.get("address", ""),
            chain=args.get("chain", ""),
            wallet_name=LEGACY_WALLET_NAME,
        ),
    ))


# ---------------------------------------------------------------------------
# decoding
# ---------------------------------------------------------------------------

def _decode(raw: Optional[str]) -> tuple[str, dict[str, Any]]:
    if raw is None or not raw.strip():
        raise ParseError("Message is empty", raw=raw)
    text = raw.strip()
    if _looks_like_url(text):
        text = extract_message_from_url(text)
        if not text.strip():
            raise ParseError("Message parameter is empty", raw=raw)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Malformed JSON: {e}", raw=raw) from e
    if not isinstance(payload, dict):
        raise ParseError("Message is not a JSON object", raw=raw)
    return text, payload


def _read_envelope(payload: dict[str, Any], raw: str) -> Envelope:
    try:
        envelope = Envelope.model_validate(payload)
    except PydanticValidationError as e:
        raise ParseError(f"Invalid envelope: {e.errors()[0]['msg']}", raw=raw) from e
    if not envelope.type or not envelope.action:
        raise ParseError("Envelope is missing type or action", raw=raw)
    return envelope


def _parse_with(
    registry: dict[tuple[str, str], type[BaseMessage]],
    raw: Optional[str],
    strict: bool,
) -> BaseMessage:
    text, payload = _decode(raw)
    envelope = _read_envelope(payload, raw or "")
    message_type = envelope.type.lower()  # type: ignore[union-attr]
    schema = registry.get((message_type, envelope.action))  # type: ignore[arg-type]
    if schema is None:
        if strict:
            raise UnknownMessageError(envelope.type, envelope.action, raw=raw)
        return UnknownMessage(
            type=message_type,
            action=envelope.action,
            timestamp=envelope.timestamp,
            request_id=envelope.request_id or "",
            data=payload.get("data"),
            raw=text,
        )
    try:
        message = schema.model_validate(payload)
    except PydanticValidationError as e:
        raise InvalidPayloadError(message_type, envelope.action, e.errors()[0]["msg"], raw=raw) from e  # type: ignore[arg-type]
    # Inbound messages keep the frontend's ids, including an absent one.
    message.request_id = envelope.request_id or ""
    message.type = message_type
    return message


def parse_message(raw: Optional[str], strict: bool = False) -> InboundMessage:
    """Decode one frontend message.

    Raises ParseError for empty, malformed or envelope-less input. Unknown
    (type, action) pairs come back as UnknownMessage, or raise
    UnknownMessageError when `strict` is set.
    """
    return _parse_with(INBOUND_SCHEMAS, raw, strict)  # type: ignore[return-value]


def try_parse_message(raw: Optional[str]) -> Optional[InboundMessage]:
    try:
        return parse_message(raw)
    except ParseError as e:
        logger.error("Failed to parse message: %s | raw=%r", e, raw)
        return None


def parse_request(raw: Optional[str], strict: bool = False) -> BaseMessage:
    """Decode a host -> frontend request."""
    return _parse_with(REQUEST_SCHEMAS, raw, strict)
