"""
Routes raw inbound strings to per-domain, per-action subscribers.

received -> (legacy check) -> enveloped -> dispatched -> consumed | dropped

A reply for a known (type, action) whose body fails its schema is still
dropped, but is handed to the `subscribe_invalid()` handlers so the session
can fail the operation waiting on it.

The router never touches session state or the transport; it only calls the
handlers registered with `subscribe()`.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional

from dynamic_bridge.errors import InvalidPayloadError, ParseError
from dynamic_bridge.events import EventEmitter
from dynamic_bridge.models.envelope import BaseMessage, MessageType, UnknownMessage
from dynamic_bridge.parser import parse_legacy_connected, parse_message

logger = logging.getLogger(__name__)

INVALID_PAYLOAD = "invalid_payload"


class RouteState(str, Enum):
    RECEIVED = "received"
    ENVELOPED = "enveloped"
    DISPATCHED = "dispatched"
    CONSUMED = "consumed"
    DROPPED = "dropped"


class MessageRouter:
    def __init__(
        self,
        on_parse_error: Optional[Callable[[str, ParseError], None]] = None,
        log_raw_messages: bool = False,
    ):
        self._channels: dict[str, EventEmitter] = {
            MessageType.AUTH.value: EventEmitter("auth"),
            MessageType.WALLET.value: EventEmitter("wallet"),
        }
        self._invalid = EventEmitter("invalid")
        self._on_parse_error = on_parse_error
        self.log_raw_messages = log_raw_messages

    def subscribe(self, domain: str, action: str, handler: Callable[[Any], None]) -> Callable[[], None]:
        """Register a handler for one (domain, action). Returns a cleanup function."""
        channel = self._channels.get(_value(domain).lower())
        if channel is None:
            raise ValueError(f"Unknown domain: {domain}")
        return channel.on(_value(action), handler)

    def subscribe_invalid(self, handler: Callable[[InvalidPayloadError], None]) -> Callable[[], None]:
        """Register a handler for known replies that failed schema validation."""
        return self._invalid.on(INVALID_PAYLOAD, handler)

    def close(self) -> None:
        for channel in self._channels.values():
            channel.clear()
        self._invalid.clear()

    def handle_raw(self, raw: str) -> RouteState:
        """Entry point for the transport's message callback. Never raises."""
        if self.log_raw_messages:
            logger.debug("Raw message: %s", raw)
        try:
            legacy = parse_legacy_connected(raw)
            if legacy is not None:
                logger.debug("Handling legacy connected message")
                return self.dispatch(legacy)
            message = parse_message(raw)
        except InvalidPayloadError as e:
            logger.error("Invalid %s/%s payload: %s | raw=%r", e.message_type, e.action, e, raw)
            self._report(raw, e)
            self._invalid.emit(INVALID_PAYLOAD, e)
            return RouteState.DROPPED
        except ParseError as e:
            logger.error("Failed to parse message: %s | raw=%r", e, raw)
            self._report(raw, e)
            return RouteState.DROPPED
        except Exception:
            logger.exception("Unexpected error while parsing message: %r", raw)
            return RouteState.DROPPED
        return self.dispatch(message)

    def dispatch(self, message: BaseMessage) -> RouteState:
        """Deliver an already parsed message."""
        if isinstance(message, UnknownMessage):
            logger.warning("Dropping unknown message: type=%s action=%s", message.type, message.action)
            return RouteState.DROPPED
        channel = self._channels.get(message.type.lower())
        if channel is None or not channel.has_listeners(message.action):
            logger.warning("No handler for %s/%s; message dropped", message.type, message.action)
            return RouteState.DROPPED
        logger.debug("Dispatching %s/%s", message.type, message.action)
        channel.emit(message.action, message)
        return RouteState.CONSUMED

    def _report(self, raw: str, error: ParseError) -> None:
        if self._on_parse_error is None:
            return
        try:
            self._on_parse_error(raw, error)
        except Exception:
            logger.exception("on_parse_error hook failed")


def _value(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)
