"""
dynamic-bridge — host-side bridge for the Dynamic wallet web frontend.

Typed auth / wallet messages, a parser and router for frontend replies, and a
session controller that serializes requests to the embedded panel.
"""

from dynamic_bridge.client import DynamicSDK
from dynamic_bridge.config import BridgeConfig, Manifest
from dynamic_bridge.errors import (
    BridgeError,
    ParseError,
    UnknownMessageError,
    InvalidPayloadError,
    ValidationError,
    ProtocolError,
    TransportNotReadyError,
    SessionError,
    ConnectionError,
    ErrorCodes,
    describe_error,
)
from dynamic_bridge.events import SessionEvent, DeepLinkEvent
from dynamic_bridge.models.envelope import MessageType, AuthAction, WalletAction
from dynamic_bridge.models.helpers import is_successful, ensure_successful, balance_as_float
from dynamic_bridge.parser import parse_message, try_parse_message
from dynamic_bridge.router import MessageRouter, RouteState
from dynamic_bridge.scheduling import AsyncioScheduler, VirtualScheduler
from dynamic_bridge.session import SessionController
from dynamic_bridge.transport.base import Transport
from dynamic_bridge.validation import Validator

__version__ = "1.0.0"
__all__ = [
    "DynamicSDK",
    "BridgeConfig",
    "Manifest",
    "BridgeError",
    "ParseError",
    "UnknownMessageError",
    "InvalidPayloadError",
    "ValidationError",
    "ProtocolError",
    "TransportNotReadyError",
    "SessionError",
    "ConnectionError",
    "ErrorCodes",
    "describe_error",
    "SessionEvent",
    "DeepLinkEvent",
    "MessageType",
    "AuthAction",
    "WalletAction",
    "is_successful",
    "ensure_successful",
    "balance_as_float",
    "parse_message",
    "try_parse_message",
    "MessageRouter",
    "RouteState",
    "AsyncioScheduler",
    "VirtualScheduler",
    "SessionController",
    "Transport",
    "Validator",
]
