"""
DynamicSDK: the host-facing facade over the session controller.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from dynamic_bridge.builder import build_disconnect_request
from dynamic_bridge.config import BridgeConfig
from dynamic_bridge.deeplink import DeepLinkHandler
from dynamic_bridge.errors import BridgeError
from dynamic_bridge.events import DeepLinkEvent, EventEmitter, SessionEvent
from dynamic_bridge.models.common import UserInfo, WalletCredential
from dynamic_bridge.scheduling import AsyncioScheduler, Handle, Scheduler
from dynamic_bridge.session import SessionController
from dynamic_bridge.transport.base import Transport
from dynamic_bridge.validation import Validator

logger = logging.getLogger(__name__)

SDK_INITIALIZED = "sdk_initialized"


class DynamicSDK:
    """Explicitly constructed entry point; create one per host application."""

    def __init__(
        self,
        config: Optional[BridgeConfig] = None,
        transport: Optional[Transport] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self._config = config or BridgeConfig()
        self._transport = transport
        self._scheduler: Scheduler = scheduler or AsyncioScheduler()
        self._events = EventEmitter("sdk")
        self._session: Optional[SessionController] = None
        self._deeplinks: Optional[DeepLinkHandler] = None
        self._relay_removers: list[Callable[[], None]] = []
        self._preload_handle: Optional[Handle] = None

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    @property
    def config(self) -> BridgeConfig:
        return self._config

    @property
    def initialized(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> SessionController:
        self._ensure_initialized()
        return self._session  # type: ignore[return-value]

    def initialize(self, transport: Optional[Transport] = None) -> None:
        if self._session is not None:
            logger.debug("SDK already initialized")
            return
        transport = transport or self._transport
        if transport is None:
            raise BridgeError("no_transport", "A transport is required to initialize the SDK")
        self._transport = transport
        self._session = SessionController(
            transport=transport,
            config=self._config,
            scheduler=self._scheduler,
        )
        self._deeplinks = DeepLinkHandler(self._config, transport)
        self._relay_removers = [
            self._session.on(event, self._relay(event)) for event in SessionEvent
        ] + [
            self._deeplinks.on(event, self._relay(event)) for event in DeepLinkEvent
        ]
        self._apply_log_level()
        logger.info("Dynamic bridge initialized (start URL %s)", self._config.start_url)
        self._events.emit(SDK_INITIALIZED)
        if self._config.enable_webview_preload:
            self.preload()

    def _relay(self, event: Any) -> Callable[..., None]:
        def forward(*args: Any) -> None:
            self._events.emit(event, *args)
        return forward

    def on(self, event: Any, handler: Callable[..., Any]) -> Callable[[], None]:
        """Subscribe to a SessionEvent, DeepLinkEvent or "sdk_initialized". Returns a cleanup function."""
        return self._events.on(event, handler)

    async def wait_for(self, event: Any, timeout: float = 30.0) -> Any:
        """Wait for the next emission of `event` and return its payload."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()

        def handler(*args: Any) -> None:
            if future.done():
                return
            if not args:
                future.set_result(None)
            elif len(args) == 1:
                future.set_result(args[0])
            else:
                future.set_result(args)

        remove = self._events.on(event, handler)
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError:
            raise TimeoutError(f"Timed out waiting for {getattr(event, 'value', event)} after {timeout}s")
        finally:
            remove()

    def preload(self) -> None:
        """Load the start URL into the hidden panel after `preload_delay`."""
        self._ensure_initialized()
        if self._preload_handle is not None:
            self._preload_handle.cancel()
        self._preload_handle = self._scheduler.call_later(self._config.preload_delay, self._preload)

    def _preload(self) -> None:
        self._preload_handle = None
        transport = self._transport
        if transport is None or not transport.is_available():
            logger.warning("Skipping preload: transport unavailable")
            return
        logger.debug("Pre-loading panel: %s", self._config.resolved_start_url)
        transport.load(self._config.resolved_start_url)

    def reset(self) -> None:
        """Disconnect, clear local state and close the panel."""
        self._ensure_initialized()
        session = self._session
        was_connected = session.is_connected  # type: ignore[union-attr]
        session.reset()  # type: ignore[union-attr]
        transport = self._transport
        if was_connected and transport is not None and transport.is_available():
            transport.send(build_disconnect_request())
            self._events.emit(SessionEvent.WALLET_DISCONNECTED)
        if transport is not None:
            transport.close()

    def close(self) -> None:
        if self._preload_handle is not None:
            self._preload_handle.cancel()
            self._preload_handle = None
        for remove in self._relay_removers:
            remove()
        self._relay_removers = []
        if self._session is not None:
            self._session.close()
            self._session = None
        self._deeplinks = None

    def update_configuration(self, config: BridgeConfig) -> None:
        self._config = config
        if self._session is not None:
            self._session.config = config
            self._session.validator = Validator.from_config(config)
            self._session.router.log_raw_messages = config.log_raw_messages
        if self._deeplinks is not None:
            self._deeplinks.config = config
        self._apply_log_level()

    def set_debug_logging(self, enabled: bool) -> None:
        self._config.enable_debug_logs = enabled
        self._apply_log_level()

    def _apply_log_level(self) -> None:
        package_logger = logging.getLogger("dynamic_bridge")
        if self._config.enable_debug_logs:
            package_logger.setLevel(logging.DEBUG)
        elif package_logger.level == logging.DEBUG:
            package_logger.setLevel(logging.NOTSET)

    def status(self) -> dict[str, Any]:
        if self._session is None:
            from dynamic_bridge import __version__
            return {
                "initialized": False,
                "isWalletConnected": False,
                "currentWalletAddress": "",
                "sdkVersion": __version__,
                "configUrl": self._config.start_url,
            }
        return self._session.status()

    # ------------------------------------------------------------------
    # state
    # ------------------------------------------------------------------

    @property
    def is_wallet_connected(self) -> bool:
        return self._session is not None and self._session.is_connected

    @property
    def current_wallet_address(self) -> str:
        return self._session.current_wallet_address if self._session else ""

    @property
    def current_user(self) -> Optional[UserInfo]:
        return self._session.current_user if self._session else None

    @property
    def current_wallet_info(self) -> Optional[WalletCredential]:
        return self._session.current_wallet_info if self._session else None

    @property
    def is_webview_ready(self) -> bool:
        return self._session is not None and self._session.is_webview_ready

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    def connect_wallet(self) -> None:
        self.session.connect_wallet()

    def disconnect_wallet(self) -> None:
        self.session.disconnect_wallet()

    def check_connection_status(self) -> bool:
        return self.session.check_connection_status()

    def sign_message(self, message: str) -> None:
        self.session.sign_message(message)

    def send_transaction(self, to: str, value: str, data: str = "", network: str = "mainnet") -> None:
        self.session.send_transaction(to, value, data=data, network=network)

    def get_balance(self) -> None:
        self.session.get_balance()

    def get_wallets(self) -> None:
        self.session.get_wallets()

    def get_networks(self) -> None:
        self.session.get_networks()

    def open_profile(self) -> None:
        self.session.open_profile()

    def get_jwt_token(self) -> None:
        self.session.get_jwt_token()

    def switch_wallet(self, wallet_id: str) -> None:
        self.session.switch_wallet(wallet_id)

    def switch_network(self, network_chain_id: str) -> None:
        self.session.switch_network(network_chain_id)

    def handle_deep_link(self, url: str) -> Optional[str]:
        self._ensure_initialized()
        return self._deeplinks.handle(url)  # type: ignore[union-attr]

    def _ensure_initialized(self) -> None:
        if self._session is None:
            raise BridgeError("not_initialized", "SDK not initialized. Call initialize() first.")
