"""
Bridge error types and the wire error codes reported by the wallet frontend.
"""

from typing import Any, Optional


class BridgeError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class ParseError(BridgeError):
    """Inbound payload could not be decoded into a typed message."""

    def __init__(self, message: str, raw: Optional[str] = None, code: str = "parse_error"):
        super().__init__(code, message, {"raw": raw} if raw is not None else None)
        self.raw = raw


class UnknownMessageError(ParseError):
    def __init__(self, message_type: Optional[str], action: Optional[str], raw: Optional[str] = None):
        super().__init__(f"Unknown message: type={message_type!r} action={action!r}", raw, code="unknown_message")
        self.message_type = message_type
        self.action = action


class InvalidPayloadError(ParseError):
    """Known (type, action) whose body does not match its schema."""

    def __init__(self, message_type: str, action: str, reason: str, raw: Optional[str] = None):
        super().__init__(f"Invalid {action} payload: {reason}", raw, code="invalid_payload")
        self.message_type = message_type
        self.action = action


class ValidationError(BridgeError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__("validation_error", message, {"field": field} if field else None)
        self.field = field


class ProtocolError(BridgeError):
    """The frontend answered with success=false or an empty body."""

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(error_code or "protocol_error", message)


class TransportNotReadyError(BridgeError):
    def __init__(self, message: str = "SDK not ready - please try again"):
        super().__init__("transport_not_ready", message)


class SessionError(BridgeError):
    def __init__(self, message: str, code: str = "session_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class ConnectionError(BridgeError):
    def __init__(self, message: str):
        super().__init__("connection_error", message)


class ErrorCodes:
    # auth
    AUTH_USER_REJECTED = "AUTH_USER_REJECTED"
    AUTH_NETWORK_ERROR = "NETWORK_ERROR"
    AUTH_INVALID_EMAIL_DOMAIN = "INVALID_EMAIL_DOMAIN"
    AUTH_SESSION_EXPIRED = "SESSION_EXPIRED"

    # wallet
    WALLET_NOT_CONNECTED = "WALLET_NOT_CONNECTED"
    WALLET_USER_REJECTED = "USER_REJECTED"
    WALLET_INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    WALLET_NETWORK_ERROR = "NETWORK_ERROR"
    WALLET_INVALID_ADDRESS = "INVALID_ADDRESS"
    WALLET_INVALID_CHAIN = "INVALID_CHAIN"
    WALLET_TRANSACTION_FAILED = "TRANSACTION_FAILED"
    WALLET_GAS_BUDGET_ERROR = "GAS_BUDGET_ERROR"
    WALLET_SIGNATURE_FAILED = "SIGNATURE_FAILED"
    WALLET_OBJECT_NOT_FOUND = "OBJECT_NOT_FOUND"
    WALLET_INVALID_TRANSACTION_DATA = "INVALID_TRANSACTION_DATA"


# Reference wording only; hosts are expected to localize.
_ERROR_DESCRIPTIONS: list[tuple[tuple[str, ...], str]] = [
    ((ErrorCodes.AUTH_USER_REJECTED, ErrorCodes.WALLET_USER_REJECTED), "User cancelled the operation"),
    ((ErrorCodes.WALLET_SIGNATURE_FAILED,), "Failed to sign message. Please try again"),
    ((ErrorCodes.WALLET_NOT_CONNECTED,), "Wallet not connected. Please connect your wallet first"),
    ((ErrorCodes.AUTH_NETWORK_ERROR,), "Network connection error. Please check your internet connection"),
    ((ErrorCodes.AUTH_SESSION_EXPIRED,), "Session expired. Please reconnect your wallet"),
    ((ErrorCodes.WALLET_INSUFFICIENT_FUNDS,), "Insufficient funds to complete the operation"),
    ((ErrorCodes.WALLET_INVALID_ADDRESS,), "Invalid wallet address provided"),
    ((ErrorCodes.WALLET_INVALID_CHAIN,), "Invalid blockchain network"),
    ((ErrorCodes.WALLET_TRANSACTION_FAILED,), "Transaction failed. Please try again"),
    ((ErrorCodes.WALLET_GAS_BUDGET_ERROR,), "Gas budget error. Please check gas settings"),
    ((ErrorCodes.WALLET_INVALID_TRANSACTION_DATA,), "Invalid transaction data provided"),
    ((ErrorCodes.WALLET_OBJECT_NOT_FOUND,), "Object not found on chain"),
    ((ErrorCodes.AUTH_INVALID_EMAIL_DOMAIN,), "Email domain is not allowed"),
]


def describe_error(error: Optional[str]) -> str:
    """Map an error string that embeds a wire code to a short description."""
    if not error:
        return "Unknown error occurred"
    for codes, description in _ERROR_DESCRIPTIONS:
        if any(code in error for code in codes):
            return description
    return error
