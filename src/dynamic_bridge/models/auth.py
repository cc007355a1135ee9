"""
Auth domain messages (type = "auth").
"""

from typing import Optional

from dynamic_bridge.models.common import ErrorInfo, UserInfo, WalletCredential
from dynamic_bridge.models.envelope import AuthAction, BaseMessage, MessageType, WireModel


class AuthMessage(BaseMessage):
    type: str = MessageType.AUTH.value


# ---------------------------------------------------------------------------
# frontend -> host
# ---------------------------------------------------------------------------

class AuthSuccessData(WireModel):
    primary_wallet: Optional[WalletCredential] = None
    user: Optional[UserInfo] = None
    wallets: list[WalletCredential] = []
    auth_method: str = ""
    provider: str = ""
    session_token: str = ""


class AuthSuccessMessage(AuthMessage):
    action: str = AuthAction.AUTH_SUCCESS.value
    data: Optional[AuthSuccessData] = None


class AuthFailedData(ErrorInfo):
    pass


class AuthFailedMessage(AuthMessage):
    action: str = AuthAction.AUTH_FAILED.value
    data: Optional[AuthFailedData] = None


class LoggedOutData(WireModel):
    success: bool = False
    timestamp: int = 0


class LoggedOutMessage(AuthMessage):
    action: str = AuthAction.LOGGED_OUT.value
    data: Optional[LoggedOutData] = None


class HandleAuthenticatedUserData(WireModel):
    user: Optional[UserInfo] = None
    wallets: list[WalletCredential] = []
    session_token: str = ""


class HandleAuthenticatedUserMessage(AuthMessage):
    action: str = AuthAction.HANDLE_AUTHENTICATED_USER.value
    data: Optional[HandleAuthenticatedUserData] = None


class JwtTokenResponseData(WireModel):
    token: str = ""
    user_id: str = ""
    email: str = ""
    timestamp: int = 0


class JwtTokenResponseMessage(AuthMessage):
    action: str = AuthAction.JWT_TOKEN_RESPONSE.value
    data: Optional[JwtTokenResponseData] = None


# ---------------------------------------------------------------------------
# host -> frontend
# ---------------------------------------------------------------------------

class AuthRequestData(WireModel):
    game_id: str = ""
    required_chains: list[str] = []
    session_expiry: int = 3600


class AuthRequestMessage(AuthMessage):
    action: str = AuthAction.AUTH_REQUEST.value
    data: Optional[AuthRequestData] = None


class LogoutData(WireModel):
    reason: str = "user_requested"


class LogoutMessage(AuthMessage):
    action: str = AuthAction.LOGOUT.value
    data: Optional[LogoutData] = None


class OpenProfileData(WireModel):
    wallet_address: str = ""


class OpenProfileMessage(AuthMessage):
    action: str = AuthAction.OPEN_PROFILE.value
    data: Optional[OpenProfileData] = None


class EmptyData(WireModel):
    """Serializes as {} for requests that carry no parameters."""


class ConnectWalletMessage(AuthMessage):
    action: str = AuthAction.CONNECT_WALLET.value
    data: Optional[EmptyData] = None


class DisconnectMessage(AuthMessage):
    action: str = AuthAction.DISCONNECT.value
    data: Optional[EmptyData] = None


class GetJwtTokenMessage(AuthMessage):
    action: str = AuthAction.GET_JWT_TOKEN.value
    data: Optional[EmptyData] = None
