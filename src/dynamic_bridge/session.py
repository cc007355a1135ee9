"""
Session controller: connection state, the request queue, and the public
wallet operations.

At most one operation is in flight. An operation opens the panel and sends its
request; the queue only advances after the transport reports the panel closed,
either because the user dismissed it or because a terminal response was
handled and the controller hid it. Correlation is by action and ordering, not
by requestId, which is why the queue is strictly one-at-a-time.
"""

import logging
from collections import deque
from typing import Any, Callable, Optional

from dynamic_bridge.builder import (
    build_connect_wallet_request,
    build_disconnect_request,
    build_get_balance_request,
    build_get_jwt_token_request,
    build_get_networks_request,
    build_get_wallets_request,
    build_open_profile_request,
    build_sign_message_request,
    build_switch_network_request,
    build_switch_wallet_request,
    build_transaction_request,
)
from dynamic_bridge.chains import format_address, symbol_for_chain
from dynamic_bridge.config import BridgeConfig
from dynamic_bridge.errors import (
    ErrorCodes,
    InvalidPayloadError,
    SessionError,
    TransportNotReadyError,
    ValidationError,
)
from dynamic_bridge.events import EventEmitter, SessionEvent
from dynamic_bridge.models.auth import (
    AuthFailedMessage,
    AuthSuccessMessage,
    HandleAuthenticatedUserMessage,
    JwtTokenResponseMessage,
    LoggedOutMessage,
)
from dynamic_bridge.models.common import UserInfo, WalletCredential
from dynamic_bridge.models.envelope import AuthAction, MessageType, WalletAction
from dynamic_bridge.models.wallet import (
    BalanceResponseMessage,
    NetworksResponseMessage,
    SignMessageResponseMessage,
    TransactionResponseMessage,
    WalletConnectedMessage,
    WalletDisconnectedMessage,
    WalletErrorMessage,
    WalletsResponseMessage,
)
from dynamic_bridge.router import MessageRouter
from dynamic_bridge.scheduling import AsyncioScheduler, Handle, Scheduler
from dynamic_bridge.transport.base import Transport
from dynamic_bridge.validation import Validator

logger = logging.getLogger(__name__)

DEFAULT_CHAIN = "sui"
NOT_READY_ERROR = "transport not ready"
TIMEOUT_ERROR = "timeout"


class SessionState:
    """In-memory record of the connected wallet and user. Never persisted."""

    def __init__(self) -> None:
        self.wallet_address: str = ""
        self.chain: str = DEFAULT_CHAIN
        self.is_connected = False
        self.user_info: Optional[UserInfo] = None
        self.wallet_info: Optional[WalletCredential] = None
        self.is_webview_ready = False

    def clear_wallet(self) -> None:
        self.wallet_address = ""
        self.chain = DEFAULT_CHAIN
        self.is_connected = False
        self.user_info = None
        self.wallet_info = None

    def __repr__(self) -> str:
        return (
            f"SessionState(wallet_address={format_address(self.wallet_address)!r}, chain={self.chain!r}, "
            f"is_connected={self.is_connected}, is_webview_ready={self.is_webview_ready})"
        )


class Operation:
    """One queued bridge request. `build` runs at send time."""

    __slots__ = ("name", "build", "on_sent")

    def __init__(self, name: str, build: Callable[[], str], on_sent: Optional[Callable[[], None]] = None):
        self.name = name
        self.build = build
        self.on_sent = on_sent

    def __repr__(self) -> str:
        return f"Operation({self.name!r})"


class SessionController:
    def __init__(
        self,
        transport: Optional[Transport] = None,
        config: Optional[BridgeConfig] = None,
        scheduler: Optional[Scheduler] = None,
        validator: Optional[Validator] = None,
        router: Optional[MessageRouter] = None,
    ):
        self.config = config or BridgeConfig()
        self.scheduler: Scheduler = scheduler or AsyncioScheduler()
        self.validator = validator or Validator.from_config(self.config)
        self.router = router or MessageRouter(log_raw_messages=self.config.log_raw_messages)
        self.events = EventEmitter("session")
        self.state = SessionState()

        self._transport: Optional[Transport] = None
        self._transport_removers: list[Callable[[], None]] = []
        self._router_removers: list[Callable[[], None]] = []

        self._queue: deque[Operation] = deque()
        self._processing = False
        self._current: Optional[Operation] = None
        self._advance_handle: Optional[Handle] = None
        self._retry_handle: Optional[Handle] = None
        self._timeout_handle: Optional[Handle] = None

        self._subscribe_router()
        if transport is not None:
            self.attach_transport(transport)

    # ------------------------------------------------------------------
    # wiring
    # ------------------------------------------------------------------

    @property
    def transport(self) -> Optional[Transport]:
        return self._transport

    def attach_transport(self, transport: Transport) -> None:
        self.detach_transport()
        self._transport = transport
        self._transport_removers = [
            transport.add_message_handler(self.router.handle_raw),
            transport.add_ready_handler(self._on_ready),
            transport.add_closed_handler(self._on_closed),
        ]

    def detach_transport(self) -> None:
        for remove in self._transport_removers:
            remove()
        self._transport_removers = []
        self._transport = None
        self.state.is_webview_ready = False

    def on(self, event: SessionEvent, handler: Callable[..., Any]) -> Callable[[], None]:
        return self.events.on(event, handler)

    def handle_message(self, raw: str) -> None:
        """Feed one raw inbound string, as the transport would."""
        self.router.handle_raw(raw)

    def _subscribe_router(self) -> None:
        auth = MessageType.AUTH.value
        wallet = MessageType.WALLET.value
        routes: list[tuple[str, str, Callable[[Any], None]]] = [
            (auth, AuthAction.AUTH_SUCCESS.value, self._handle_auth_success),
            (auth, AuthAction.AUTH_FAILED.value, self._handle_auth_failed),
            (auth, AuthAction.LOGGED_OUT.value, self._handle_logged_out),
            (auth, AuthAction.HANDLE_AUTHENTICATED_USER.value, self._handle_authenticated_user),
            (auth, AuthAction.JWT_TOKEN_RESPONSE.value, self._handle_jwt_token_response),
            (wallet, WalletAction.BALANCE_RESPONSE.value, self._handle_balance_response),
            (wallet, WalletAction.SWITCH_WALLET.value, self._handle_wallet_switched),
            (wallet, WalletAction.SWITCH_NETWORK.value, self._handle_network_switched),
            (wallet, WalletAction.SIGN_MESSAGE_RESPONSE.value, self._handle_sign_message_response),
            (wallet, WalletAction.TRANSACTION_RESPONSE.value, self._handle_transaction_response),
            (wallet, WalletAction.WALLET_CONNECTED.value, self._handle_wallet_connected),
            (wallet, WalletAction.WALLET_DISCONNECTED.value, self._handle_wallet_disconnected),
            (wallet, WalletAction.WALLET_ERROR.value, self._handle_wallet_error),
            (wallet, WalletAction.WALLETS_RESPONSE.value, self._handle_wallets_response),
            (wallet, WalletAction.NETWORKS_RESPONSE.value, self._handle_networks_response),
        ]
        self._router_removers = [self.router.subscribe(d, a, h) for d, a, h in routes]
        self._router_removers.append(self.router.subscribe_invalid(self._handle_invalid_payload))

    # ------------------------------------------------------------------
    # state accessors
    # ------------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        return self.state.is_connected and bool(self.state.wallet_address)

    @property
    def current_wallet_address(self) -> str:
        return self.state.wallet_address

    @property
    def current_chain(self) -> str:
        return self.state.chain

    @property
    def current_user(self) -> Optional[UserInfo]:
        return self.state.user_info

    @property
    def current_wallet_info(self) -> Optional[WalletCredential]:
        return self.state.wallet_info

    @property
    def is_webview_ready(self) -> bool:
        return self.state.is_webview_ready

    @property
    def is_processing(self) -> bool:
        return self._processing

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    def status(self) -> dict[str, Any]:
        from dynamic_bridge import __version__
        return {
            "initialized": self._transport is not None,
            "isWalletConnected": self.is_connected,
            "currentWalletAddress": self.state.wallet_address,
            "currentChain": self.state.chain,
            "isWebviewReady": self.state.is_webview_ready,
            "queueLength": len(self._queue),
            "isProcessing": self._processing,
            "sdkVersion": __version__,
            "configUrl": self.config.start_url,
        }

    def check_connection_status(self) -> bool:
        """Re-emit the current connection state to listeners."""
        if self.is_connected:
            self.events.emit(SessionEvent.WALLET_CONNECTED, self.state.wallet_address)
        else:
            self.events.emit(SessionEvent.WALLET_DISCONNECTED)
        return self.is_connected

    # ------------------------------------------------------------------
    # public operations
    # ------------------------------------------------------------------

    def connect_wallet(self) -> None:
        if self.is_connected:
            raise SessionError("Wallet already connected", code="already_connected")
        self._require_transport()
        self._enqueue(Operation(AuthAction.CONNECT_WALLET.value, build_connect_wallet_request))

    def disconnect_wallet(self) -> None:
        if not self.state.wallet_address:
            raise SessionError("No wallet connected", code="not_connected")
        self._require_transport()
        self._enqueue(Operation(
            AuthAction.DISCONNECT.value,
            build_disconnect_request,
            on_sent=self._disconnect_locally,
        ))

    def sign_message(self, message: str) -> None:
        if not message:
            raise ValidationError("Please enter a message to sign", field="message")
        address = self._require_connected()
        self.validator.require_message(message)
        self._require_transport()
        self._enqueue(Operation(
            WalletAction.SIGN_MESSAGE.value,
            lambda: build_sign_message_request(address, message),
        ))

    def send_transaction(self, to: str, value: str, data: str = "", network: str = "mainnet") -> None:
        if not to or not value:
            raise ValidationError("Invalid transaction parameters")
        address = self._require_connected()
        chain = self.state.chain
        self.validator.require_address(to, chain=chain, field="to")
        self.validator.require_amount(value, field="value")
        self._require_transport()
        self._debug("Send transaction requested: %s to %s on %s", value, to, network)
        self._enqueue(Operation(
            WalletAction.TRANSACTION.value,
            lambda: build_transaction_request(address, to, value, chain=chain, network=network, data=data or None),
        ))

    def get_balance(self) -> None:
        self._require_transport()
        self._enqueue(Operation(WalletAction.GET_BALANCE.value, build_get_balance_request))

    def get_wallets(self) -> None:
        self._require_transport()
        self._enqueue(Operation(WalletAction.GET_WALLETS.value, build_get_wallets_request))

    def get_networks(self) -> None:
        self._require_transport()
        self._enqueue(Operation(WalletAction.GET_NETWORKS.value, build_get_networks_request))

    def switch_wallet(self, wallet_id: str) -> None:
        if not wallet_id:
            raise ValidationError("Wallet id is required", field="wallet_id")
        self._require_transport()
        self._enqueue(Operation(WalletAction.SWITCH_WALLET.value, lambda: build_switch_wallet_request(wallet_id)))

    def switch_network(self, network_chain_id: str) -> None:
        if not network_chain_id:
            raise ValidationError("Network chain id is required", field="network_chain_id")
        self._require_transport()
        self._enqueue(Operation(
            WalletAction.SWITCH_NETWORK.value,
            lambda: build_switch_network_request(network_chain_id),
        ))

    def open_profile(self) -> None:
        address = self._require_connected()
        self._require_transport()
        self._enqueue(Operation(AuthAction.OPEN_PROFILE.value, lambda: build_open_profile_request(address)))

    def get_jwt_token(self) -> None:
        self._require_transport()
        self._enqueue(Operation(AuthAction.GET_JWT_TOKEN.value, build_get_jwt_token_request))

    def _require_connected(self) -> str:
        if not self.state.wallet_address:
            raise SessionError("No wallet connected", code="not_connected")
        return self.state.wallet_address

    def _require_transport(self) -> Transport:
        if self._transport is None or not self._transport.is_available():
            raise TransportNotReadyError()
        return self._transport

    # ------------------------------------------------------------------
    # queue
    # ------------------------------------------------------------------

    def _enqueue(self, operation: Operation) -> None:
        self._queue.append(operation)
        self._debug("Queued %s (queue length %d)", operation.name, len(self._queue))
        self._process_queue()

    def _process_queue(self) -> None:
        if self._processing or not self._queue or self._advance_handle is not None:
            return
        transport = self._transport
        if transport is None or not transport.is_available():
            logger.warning("Transport unavailable; discarding %d queued request(s)", len(self._queue))
            self._queue.clear()
            self._processing = False
            return

        operation = self._queue.popleft()
        self._processing = True
        self._current = operation
        self._debug("Processing %s. Remaining in queue: %d", operation.name, len(self._queue))
        transport.open()
        if self.state.is_webview_ready:
            self._send(operation)
        else:
            self._retry_handle = self.scheduler.call_later(self.config.retry_delay, self._retry_send, operation)

    def _retry_send(self, operation: Operation) -> None:
        self._retry_handle = None
        if operation is not self._current:
            return
        if self._transport is not None and self.state.is_webview_ready:
            self._send(operation)
            return
        logger.warning("Frontend still not ready; giving up on %s", operation.name)
        self._emit_error(NOT_READY_ERROR)
        self._hide()

    def _send(self, operation: Operation) -> None:
        transport = self._transport
        if transport is None:
            return
        try:
            payload = operation.build()
            transport.send(payload)
        except Exception as e:
            logger.exception("Failed to send %s", operation.name)
            self._emit_error(f"Failed to send {operation.name}: {e}")
            self._hide()
            return
        self._debug("Sent %s request: %s", operation.name, payload)
        if self.config.request_timeout:
            self._timeout_handle = self.scheduler.call_later(
                self.config.request_timeout, self._on_timeout, operation,
            )
        if operation.on_sent is not None:
            operation.on_sent()

    def _on_timeout(self, operation: Operation) -> None:
        self._timeout_handle = None
        if operation is not self._current:
            return
        logger.warning("No response to %s within %ss", operation.name, self.config.request_timeout)
        self._emit_error(TIMEOUT_ERROR)
        self._hide()

    def _advance(self) -> None:
        self._advance_handle = None
        self._process_queue()

    def _cancel_pending(self) -> None:
        for name in ("_retry_handle", "_timeout_handle"):
            handle = getattr(self, name)
            if handle is not None:
                handle.cancel()
                setattr(self, name, None)

    # ------------------------------------------------------------------
    # transport callbacks
    # ------------------------------------------------------------------

    def _on_ready(self) -> None:
        self._debug("Frontend ready")
        self.state.is_webview_ready = True
        self.events.emit(SessionEvent.WEBVIEW_READY)

    def _on_closed(self) -> None:
        self._debug("Panel closed - clearing processing flag")
        self._cancel_pending()
        self._current = None
        self._processing = False
        self.events.emit(SessionEvent.WEBVIEW_CLOSED)
        if self._queue and self._advance_handle is None:
            self._advance_handle = self.scheduler.call_later(self.config.queue_advance_delay, self._advance)

    def _hide(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None
        if self._transport is not None:
            self._transport.hide()

    # ------------------------------------------------------------------
    # state updates
    # ------------------------------------------------------------------

    def _set_connected(self, connected: bool) -> None:
        if self.state.is_connected != connected:
            self.state.is_connected = connected
            self.events.emit(SessionEvent.CONNECTION_STATUS_CHANGED, connected)

    def _update_wallet_info(self, wallet: Optional[WalletCredential]) -> None:
        if wallet is None:
            return
        self.state.wallet_address = wallet.address
        if wallet.chain:
            self.state.chain = wallet.chain.lower()
        self.state.wallet_info = wallet
        self._debug("Wallet info - address: %s, chain: %s, balance: %s",
                    format_address(wallet.address), wallet.chain, wallet.balance)
        self.events.emit(SessionEvent.WALLET_INFO_UPDATED, wallet)
        self._set_connected(bool(wallet.address))

    def _clear_wallet_info(self) -> None:
        self.state.clear_wallet()
        self._debug("Wallet info cleared")

    def _disconnect_locally(self) -> None:
        was_connected = self.state.is_connected
        had_wallet = was_connected or bool(self.state.wallet_address)
        self._clear_wallet_info()
        if was_connected:
            self.events.emit(SessionEvent.CONNECTION_STATUS_CHANGED, False)
        # The frontend acks an optimistic disconnect; report it once.
        if had_wallet:
            self.events.emit(SessionEvent.WALLET_DISCONNECTED)

    def _emit_error(self, message: str) -> None:
        self.events.emit(SessionEvent.ERROR, message)

    def _debug(self, msg: str, *args: Any) -> None:
        if self.config.enable_debug_logs:
            logger.debug(msg, *args)

    # ------------------------------------------------------------------
    # auth responses
    # ------------------------------------------------------------------

    def _handle_auth_success(self, message: AuthSuccessMessage) -> None:
        data = message.data
        if data is None:
            logger.error("Auth success message data is null")
            self._emit_error("Authentication failed: Invalid response")
            self._hide()
            return
        self._debug("Auth success - provider: %s", data.provider)
        if data.user is not None:
            self.state.user_info = data.user
            self.events.emit(SessionEvent.USER_AUTHENTICATED, data.user)
        if data.primary_wallet is not None:
            self._update_wallet_info(data.primary_wallet)
            if self.state.wallet_address:
                self.events.emit(SessionEvent.WALLET_CONNECTED, self.state.wallet_address)
        self._hide()

    def _handle_auth_failed(self, message: AuthFailedMessage) -> None:
        data = message.data
        if data is None:
            logger.error("Auth failed message data is null")
            self._emit_error("Authentication failed: Invalid response")
        else:
            logger.error("Auth failed - error: %s, code: %s", data.error, data.error_code)
            self.events.emit(SessionEvent.AUTH_FAILED, data)
            self._emit_error(f"Authentication failed: {data.error}")
        self._hide()

    def _handle_logged_out(self, message: LoggedOutMessage) -> None:
        self._debug("User logged out")
        self._disconnect_locally()
        self._hide()

    def _handle_authenticated_user(self, message: HandleAuthenticatedUserMessage) -> None:
        data = message.data
        if data is None:
            logger.error("Authenticated user message data is null")
            self._emit_error("Authentication failed: Invalid response")
            self._hide()
            return
        if data.user is not None:
            self.state.user_info = data.user
            self.events.emit(SessionEvent.USER_AUTHENTICATED, data.user)
        if data.wallets:
            self._update_wallet_info(data.wallets[0])
            if self.state.wallet_address:
                self.events.emit(SessionEvent.WALLET_CONNECTED, self.state.wallet_address)
        self._hide()

    def _handle_jwt_token_response(self, message: JwtTokenResponseMessage) -> None:
        if message.data is None:
            logger.error("JWT token response message data is null")
            self._emit_error("Failed to get JWT token: Invalid response")
        else:
            self._debug("JWT token received for user %s", message.data.user_id)
            self.events.emit(SessionEvent.JWT_TOKEN_RECEIVED, message)
        self._hide()

    # ------------------------------------------------------------------
    # wallet responses
    # ------------------------------------------------------------------

    def _handle_balance_response(self, message: BalanceResponseMessage) -> None:
        self._handle_balance_like(message, SessionEvent.BALANCE_UPDATED, "Failed to get balance")

    def _handle_wallet_switched(self, message: BalanceResponseMessage) -> None:
        self._handle_balance_like(message, SessionEvent.WALLET_SWITCHED, "Failed to switch wallet", refresh=True)

    def _handle_network_switched(self, message: BalanceResponseMessage) -> None:
        self._handle_balance_like(message, SessionEvent.NETWORK_SWITCHED, "Failed to switch network", refresh=True)

    def _handle_balance_like(
        self,
        message: BalanceResponseMessage,
        event: SessionEvent,
        failure: str,
        refresh: bool = False,
    ) -> None:
        data = message.data
        if data is None:
            logger.error("%s message data is null", message.action)
            self._emit_error(f"{failure}: Invalid response")
            self._hide()
            return

        if not data.success:
            logger.error("%s: %s", failure, data.error)
            self._emit_error(f"{failure}: {data.error}")
            self._hide()
            return

        if data.wallet_address:
            self.state.wallet_address = data.wallet_address
        if data.chain:
            self.state.chain = data.chain.lower()
        normalized = data.model_copy(update={"symbol": symbol_for_chain(data.chain, data.symbol)})
        self._debug("Balance - address: %s, balance: %s %s",
                    format_address(normalized.wallet_address), normalized.balance, normalized.symbol)

        if data.chain:
            wallet = WalletCredential(
                address=normalized.wallet_address,
                chain=normalized.chain,
                network=normalized.network,
                balance=normalized.balance,
                symbol=normalized.symbol,
                decimals=normalized.decimals,
            )
            self.state.wallet_info = wallet
            self.events.emit(SessionEvent.WALLET_INFO_UPDATED, wallet)

        self.events.emit(event, normalized)
        if refresh:
            # Queued behind the current operation; they run once the panel closes.
            self._refresh_after_switch()
        self._hide()

    def _refresh_after_switch(self) -> None:
        self._enqueue(Operation(WalletAction.GET_NETWORKS.value, build_get_networks_request))
        self._enqueue(Operation(WalletAction.GET_BALANCE.value, build_get_balance_request))

    def _handle_sign_message_response(self, message: SignMessageResponseMessage) -> None:
        data = message.data
        if data is None:
            logger.error("Sign message response data is null")
            self._emit_error("Failed to sign message: Invalid response")
        elif data.success:
            self._debug("Message signed")
            self.events.emit(SessionEvent.MESSAGE_SIGNED, data.signature)
        else:
            logger.error("Sign failed: %s", data.error)
            self._emit_error(f"Sign failed: {data.error}")
        self._hide()

    def _handle_transaction_response(self, message: TransactionResponseMessage) -> None:
        data = message.data
        if data is None:
            logger.error("Transaction response data is null")
            self._emit_error("Failed to send transaction: Invalid response")
        elif data.success:
            self._debug("Transaction sent: %s", data.transaction_hash)
            self.events.emit(SessionEvent.TRANSACTION_SENT, data.transaction_hash)
        else:
            logger.error("Transaction failed: %s", data.error)
            self._emit_error(f"Transaction failed: {data.error}")
        self._hide()

    def _handle_wallet_connected(self, message: WalletConnectedMessage) -> None:
        data = message.data
        if data is None:
            logger.error("Wallet connected message data is null")
            self._emit_error("Wallet connection failed: Invalid response")
        elif data.success:
            if data.wallet is not None:
                self._update_wallet_info(data.wallet)
                self.events.emit(SessionEvent.WALLET_CONNECTED, data.wallet.address)
        else:
            self._emit_error("Wallet connection failed")
        self._hide()

    def _handle_wallet_disconnected(self, message: WalletDisconnectedMessage) -> None:
        if message.data is not None:
            self._debug("Wallet disconnected - reason: %s", message.data.reason)
        self._disconnect_locally()
        self._hide()

    def _handle_wallet_error(self, message: WalletErrorMessage) -> None:
        data = message.data
        if data is None:
            logger.error("Wallet error message data is null")
            self._emit_error("Wallet error: Invalid response")
            return
        logger.error("Wallet error: %s (%s)", data.error, data.error_code)
        self._emit_error(f"Wallet error: {data.error}")
        if data.error_code == ErrorCodes.WALLET_NOT_CONNECTED and self.state.wallet_address:
            self._disconnect_locally()

    def _handle_wallets_response(self, message: WalletsResponseMessage) -> None:
        data = message.data
        if data is None:
            logger.error("Wallets response data is null")
            self._emit_error("Failed to get wallets: Invalid response")
        elif data.success:
            self._debug("Received %d wallet(s)", len(data.wallets))
            self.events.emit(SessionEvent.WALLETS_RECEIVED, data)
        else:
            self._emit_error(f"Failed to get wallets: {data.error}")
        self._hide()

    def _handle_networks_response(self, message: NetworksResponseMessage) -> None:
        data = message.data
        if data is None:
            logger.error("Networks response data is null")
            self._emit_error("Failed to get networks: Invalid response")
        elif data.success:
            self._debug("Received %d network(s)", len(data.networks))
            self.events.emit(SessionEvent.NETWORKS_RECEIVED, data)
        else:
            self._emit_error(f"Failed to get networks: {data.error}")
        self._hide()

    def _handle_invalid_payload(self, error: InvalidPayloadError) -> None:
        self._emit_error(f"{error.action}: Invalid response")
        # walletError is unsolicited; nothing is waiting on it.
        if error.action != WalletAction.WALLET_ERROR.value:
            self._hide()

    # ------------------------------------------------------------------
    # teardown
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Drop queued work and local session state; the panel is hidden."""
        self._queue.clear()
        self._cancel_pending()
        if self._advance_handle is not None:
            self._advance_handle.cancel()
            self._advance_handle = None
        was_connected = self.state.is_connected
        self._clear_wallet_info()
        if was_connected:
            self.events.emit(SessionEvent.CONNECTION_STATUS_CHANGED, False)
        if self._processing:
            self._hide()

    def close(self) -> None:
        self._queue.clear()
        self._cancel_pending()
        if self._advance_handle is not None:
            self._advance_handle.cancel()
            self._advance_handle = None
        for remove in self._router_removers:
            remove()
        self._router_removers = []
        transport = self._transport
        self.detach_transport()
        if transport is not None:
            transport.close()
        self._processing = False
        self._current = None
        self.events.clear()
