"""
Deep-link / OAuth callback handling.

Providers redirect back to the host with `dynamicunity://...` URLs. An
authorization `code` is handed to the frontend by reloading the panel with
the code in the query string; an `access_token` or an `error` is delivered as
an `oauth_callback` message.
"""

import logging
from typing import Any, Callable, Optional
from urllib.parse import parse_qsl, parse_qs, urlencode, urlsplit

from dynamic_bridge.builder import build_oauth_error_message, build_oauth_token_message
from dynamic_bridge.config import BridgeConfig
from dynamic_bridge.events import DeepLinkEvent, EventEmitter
from dynamic_bridge.transport.base import Transport

logger = logging.getLogger(__name__)

DEFAULT_OAUTH_ERROR = "OAuth authentication failed"

ACTION_CODE = "code"
ACTION_ACCESS_TOKEN = "access_token"
ACTION_ERROR = "error"


def callback_prefixes(scheme: str) -> list[str]:
    return [
        f"{scheme}://auth/callback",
        f"{scheme}://oauth/callback",
        f"{scheme}://auth",
        f"{scheme}://",
    ]


def is_oauth_callback(url: Optional[str], scheme: str = "dynamicunity") -> bool:
    if not url:
        return False
    return any(url.startswith(prefix) for prefix in callback_prefixes(scheme))


def parse_url_parameters(url: str) -> dict[str, str]:
    """Parameters from the query string, or from the fragment when there is no query."""
    query_start = url.find("?")
    fragment_start = url.find("#")
    if query_start >= 0:
        params = url[query_start + 1:]
        if fragment_start > query_start:
            params = url[query_start + 1:fragment_start]
    elif fragment_start >= 0:
        params = url[fragment_start + 1:]
    else:
        return {}
    return dict(parse_qsl(params, keep_blank_values=True))


def classify(params: dict[str, str]) -> Optional[str]:
    for action in (ACTION_CODE, ACTION_ACCESS_TOKEN, ACTION_ERROR):
        if action in params:
            return action
    return None


def build_callback_url(config: BridgeConfig, code: str, state: Optional[str] = None) -> str:
    """Start URL (without query) carrying the manifest and the OAuth code."""
    query: dict[str, str] = {}
    if config.manifest is not None:
        query["manifest"] = config.manifest.to_json()
    else:
        existing = parse_qs(urlsplit(config.start_url).query).get("manifest")
        if existing and existing[0]:
            query["manifest"] = existing[0]
    query["dynamicOauthCode"] = code
    if state is not None:
        query["dynamicOauthState"] = state
    return f"{config.base_url}?{urlencode(query)}"


class DeepLinkHandler:
    def __init__(self, config: BridgeConfig, transport: Optional[Transport] = None):
        self.config = config
        self.transport = transport
        self.events = EventEmitter("deeplink")

    def on(self, event: DeepLinkEvent, handler: Callable[..., Any]) -> Callable[[], None]:
        return self.events.on(event, handler)

    def handle(self, url: str) -> Optional[str]:
        """Process one incoming deep link. Returns the OAuth action taken, if any."""
        self._debug("Received deep link: %s", url)
        self.events.emit(DeepLinkEvent.DEEP_LINK_RECEIVED, url)
        if not is_oauth_callback(url, self.config.deeplink_scheme):
            self._debug("Not an OAuth callback: %s", url)
            return None

        params = parse_url_parameters(url)
        action = classify(params)
        if action == ACTION_CODE:
            self._handle_code(params[ACTION_CODE], params)
        elif action == ACTION_ACCESS_TOKEN:
            self._handle_access_token(params[ACTION_ACCESS_TOKEN], params)
        elif action == ACTION_ERROR:
            self._handle_error(params[ACTION_ERROR], params)
        self.events.emit(DeepLinkEvent.OAUTH_CALLBACK, url, params)
        return action

    def _handle_code(self, code: str, params: dict[str, str]) -> None:
        if self.transport is None:
            return
        callback_url = build_callback_url(self.config, code, params.get("state"))
        self._debug("Loading OAuth callback in panel: %s", callback_url)
        self.transport.open()
        self.transport.load(callback_url)

    def _handle_access_token(self, token: str, params: dict[str, str]) -> None:
        self._debug("Received access token")
        if self.transport is None:
            return
        self.transport.send(build_oauth_token_message(
            token,
            token_type=params.get("token_type"),
            expires_in=params.get("expires_in"),
            state=params.get("state"),
        ))

    def _handle_error(self, error: str, params: dict[str, str]) -> None:
        description = params.get("error_description") or DEFAULT_OAUTH_ERROR
        logger.error("OAuth error: %s - %s", error, description)
        if self.transport is None:
            return
        self.transport.send(build_oauth_error_message(error, description))

    def _debug(self, msg: str, *args: Any) -> None:
        if self.config.enable_debug_logs:
            logger.debug(msg, *args)
