"""
Message envelope shared by every auth / wallet message.
"""

import time
import uuid
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    return int(time.time() * 1000)


def new_request_id() -> str:
    return str(uuid.uuid4())


class MessageType(str, Enum):
    AUTH = "auth"
    WALLET = "wallet"


class AuthAction(str, Enum):
    # host -> frontend
    CONNECT_WALLET = "connectWallet"
    DISCONNECT = "disconnect"
    OPEN_PROFILE = "openProfile"
    GET_JWT_TOKEN = "getJwtToken"
    AUTH_REQUEST = "authRequest"
    LOGOUT = "logout"
    # frontend -> host
    AUTH_SUCCESS = "authSuccess"
    AUTH_FAILED = "authFailed"
    LOGGED_OUT = "loggedOut"
    HANDLE_AUTHENTICATED_USER = "handleAuthenticatedUser"
    JWT_TOKEN_RESPONSE = "jwtTokenResponse"


class WalletAction(str, Enum):
    # host -> frontend
    GET_BALANCE = "getBalance"
    SIGN_MESSAGE = "signMessage"
    TRANSACTION = "transaction"
    GET_WALLETS = "getWallets"
    GET_NETWORKS = "getNetworks"
    OPEN_PROFILE = "openProfile"
    # both directions: request, and the frontend's BalanceResponse-shaped ack
    SWITCH_WALLET = "switchWallet"
    SWITCH_NETWORK = "switchNetwork"
    # frontend -> host
    BALANCE_RESPONSE = "balanceResponse"
    SIGN_MESSAGE_RESPONSE = "signMessageResponse"
    TRANSACTION_RESPONSE = "transactionResponse"
    WALLET_CONNECTED = "walletConnected"
    WALLET_DISCONNECTED = "walletDisconnected"
    WALLET_ERROR = "walletError"
    WALLETS_RESPONSE = "walletsResponse"
    NETWORKS_RESPONSE = "networksResponse"


class SignMessageType(str, Enum):
    PERSONAL = "personal"
    TYPED = "typed"
    TEXT = "text"


class TransactionType(str, Enum):
    SEND = "send"
    CONTRACT = "contract"
    APPROVAL = "approval"


class WireModel(BaseModel):
    """Base for all wire payloads: snake_case attributes, camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        use_enum_values=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        # The frontend sends explicit nulls for absent fields; fall back to defaults.
        if isinstance(values, dict):
            return {k: v for k, v in values.items() if v is not None}
        return values

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class Envelope(WireModel):
    """Minimal header read before committing to a concrete schema."""

    type: Optional[str] = None
    action: Optional[str] = None
    timestamp: int = 0
    request_id: Optional[str] = None


class BaseMessage(WireModel):
    type: str
    action: str
    timestamp: int = Field(default_factory=now_ms)
    request_id: str = Field(default_factory=new_request_id)
    data: Optional[Any] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self.type!r}, action={self.action!r}, request_id={self.request_id!r})"


class UnknownMessage(BaseMessage):
    """Well-formed envelope whose (type, action) pair is not in the known set."""

    raw: Optional[str] = Field(default=None, exclude=True)
