"""
Convenience checks over parsed messages.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from dynamic_bridge.errors import ProtocolError
from dynamic_bridge.models.envelope import BaseMessage, now_ms
from dynamic_bridge.models.wallet import (
    BalanceResponseMessage,
    SignMessageResponseMessage,
    TransactionResponseMessage,
)

ResponseMessage = Union[BalanceResponseMessage, SignMessageResponseMessage, TransactionResponseMessage]


def is_successful(message: ResponseMessage) -> bool:
    data = message.data if message is not None else None
    if data is None or not data.success or data.error:
        return False
    if isinstance(message, SignMessageResponseMessage):
        return bool(data.signature)
    if isinstance(message, TransactionResponseMessage):
        return bool(data.transaction_hash)
    return True


def ensure_successful(message: ResponseMessage) -> ResponseMessage:
    """Return the message unchanged, or raise ProtocolError describing the failure."""
    if is_successful(message):
        return message
    data = message.data if message is not None else None
    if data is None:
        raise ProtocolError(f"{message.action}: Invalid response")
    raise ProtocolError(data.error or f"{message.action} failed", error_code=getattr(data, "error_code", None))


def balance_as_float(message: BalanceResponseMessage) -> float:
    """Raw balance scaled down by the token's decimals; 0.0 when unavailable."""
    if not is_successful(message) or not message.data.balance:
        return 0.0
    try:
        raw = Decimal(message.data.balance)
    except InvalidOperation:
        return 0.0
    if not raw.is_finite():
        return 0.0
    return float(raw.scaleb(-message.data.decimals))


def is_expired(message: BaseMessage, timeout_seconds: int = 300) -> bool:
    return now_ms() - message.timestamp > timeout_seconds * 1000


def is_valid_envelope(message: BaseMessage) -> bool:
    return bool(message.type) and bool(message.action) and bool(message.request_id) and message.timestamp > 0
