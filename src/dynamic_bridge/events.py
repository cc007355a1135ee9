"""
Event emitter and the host-facing session event names.
"""

import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class SessionEvent(str, Enum):
    CONNECTION_STATUS_CHANGED = "connection_status_changed"
    WALLET_CONNECTED = "wallet_connected"
    USER_AUTHENTICATED = "user_authenticated"
    WALLET_INFO_UPDATED = "wallet_info_updated"
    WALLET_DISCONNECTED = "wallet_disconnected"
    JWT_TOKEN_RECEIVED = "jwt_token_received"
    TRANSACTION_SENT = "transaction_sent"
    MESSAGE_SIGNED = "message_signed"
    BALANCE_UPDATED = "balance_updated"
    WALLET_SWITCHED = "wallet_switched"
    NETWORK_SWITCHED = "network_switched"
    WALLETS_RECEIVED = "wallets_received"
    NETWORKS_RECEIVED = "networks_received"
    AUTH_FAILED = "auth_failed"
    WEBVIEW_READY = "webview_ready"
    WEBVIEW_CLOSED = "webview_closed"
    ERROR = "error"


class DeepLinkEvent(str, Enum):
    DEEP_LINK_RECEIVED = "deep_link_received"
    OAUTH_CALLBACK = "oauth_callback"


class EventEmitter:
    """Named channels of callbacks.

    Handlers run synchronously in registration order. A failing handler is
    logged and does not stop delivery to the others.
    """

    def __init__(self, name: str = "events"):
        self._name = name
        self._handlers: dict[str, list[Callable[..., Any]]] = {}

    def on(self, event: str, handler: Callable[..., Any]) -> Callable[[], None]:
        """Subscribe to an event. Returns a cleanup function."""
        key = _key(event)
        self._handlers.setdefault(key, []).append(handler)

        def remove() -> None:
            try:
                self._handlers.get(key, []).remove(handler)
            except ValueError:
                pass
        return remove

    def once(self, event: str, handler: Callable[..., Any]) -> Callable[[], None]:
        def wrapper(*args: Any) -> None:
            remove()
            handler(*args)
        remove = self.on(event, wrapper)
        return remove

    def has_listeners(self, event: str) -> bool:
        return bool(self._handlers.get(_key(event)))

    def emit(self, event: str, *args: Any) -> int:
        """Deliver to every subscriber; returns how many handlers were called."""
        handlers = list(self._handlers.get(_key(event), []))
        for handler in handlers:
            try:
                handler(*args)
            except Exception:
                logger.exception("%s handler for %r failed", self._name, _key(event))
        return len(handlers)

    def clear(self, event: str = "") -> None:
        if event:
            self._handlers.pop(_key(event), None)
        else:
            self._handlers.clear()


def _key(event: Any) -> str:
    return event.value if isinstance(event, Enum) else str(event)
