"""
Transport adapter contract: the embedded browser panel as seen by the bridge.

Concrete adapters own the panel (show / hide / load / script evaluation) and
report back through three callbacks: raw inbound messages, "frontend ready"
and "panel closed".
"""

import abc
import json
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

AUTH_REQUEST_EVENT = "unityAuthRequest"
WALLET_REQUEST_EVENT = "unityWalletRequest"
FALLBACK_REQUEST_EVENT = "unityRequest"

MessageHandler = Callable[[str], None]
SignalHandler = Callable[[], None]


def dispatch_event_name(json_message: str) -> str:
    """DOM event name the frontend listens on for this request's type."""
    try:
        message_type = json.loads(json_message).get("type")
    except (ValueError, AttributeError):
        return FALLBACK_REQUEST_EVENT
    if not isinstance(message_type, str):
        return FALLBACK_REQUEST_EVENT
    return {
        "auth": AUTH_REQUEST_EVENT,
        "wallet": WALLET_REQUEST_EVENT,
    }.get(message_type.lower(), FALLBACK_REQUEST_EVENT)


def build_dispatch_script(json_message: str) -> str:
    """JavaScript an embedded browser evaluates to deliver a request."""
    event_name = dispatch_event_name(json_message)
    return (
        f"window.dispatchEvent(new CustomEvent('{event_name}', {{\n"
        f"    detail: {json_message}\n"
        f"}}));"
    )


class Transport(abc.ABC):
    """Base class for panel adapters.

    Subclasses implement the panel commands; handler bookkeeping and the
    `_notify_*` helpers are shared. Notifications never raise into the caller.
    """

    def __init__(self) -> None:
        self._message_handlers: list[MessageHandler] = []
        self._ready_handlers: list[SignalHandler] = []
        self._closed_handlers: list[SignalHandler] = []

    # -- commands -----------------------------------------------------------

    @abc.abstractmethod
    def open(self) -> None:
        """Ensure the panel exists and is visible. Idempotent."""

    @abc.abstractmethod
    def load(self, url: str) -> None:
        """Navigate the panel to a URL."""

    @abc.abstractmethod
    def send(self, json_message: str) -> None:
        """Deliver a request string to the frontend."""

    @abc.abstractmethod
    def hide(self) -> None:
        """Hide the panel. Must eventually fire the closed callbacks."""

    def close(self) -> None:
        """Tear the panel down. Handlers are kept; call `clear_handlers()` to drop them."""

    def is_available(self) -> bool:
        return True

    # -- handler registration ---------------------------------------------

    def add_message_handler(self, handler: MessageHandler) -> Callable[[], None]:
        return _register(self._message_handlers, handler)

    def add_ready_handler(self, handler: SignalHandler) -> Callable[[], None]:
        return _register(self._ready_handlers, handler)

    def add_closed_handler(self, handler: SignalHandler) -> Callable[[], None]:
        return _register(self._closed_handlers, handler)

    def clear_handlers(self) -> None:
        self._message_handlers.clear()
        self._ready_handlers.clear()
        self._closed_handlers.clear()

    # -- notifications (called by subclasses) -------------------------------

    def _notify_message(self, raw: str) -> None:
        for handler in list(self._message_handlers):
            _safe_call(handler, raw)

    def _notify_ready(self) -> None:
        for handler in list(self._ready_handlers):
            _safe_call(handler)

    def _notify_closed(self) -> None:
        for handler in list(self._closed_handlers):
            _safe_call(handler)


def _register(handlers: list[Any], handler: Any) -> Callable[[], None]:
    handlers.append(handler)

    def remove() -> None:
        try:
            handlers.remove(handler)
        except ValueError:
            pass
    return remove


def _safe_call(handler: Callable[..., Any], *args: Any) -> None:
    try:
        handler(*args)
    except Exception:
        logger.exception("Transport callback %r failed", handler)
