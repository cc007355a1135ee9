"""
Socket.IO relay transport.

For hosts that drive the web panel through a relay server rather than an
in-process browser view. Commands go out as `panel:*` events and requests are
emitted under their DOM dispatch event name; the relay answers with
`message`, `ready` and `closed`.
"""

import asyncio
import logging
from typing import Any, Optional

import socketio
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from dynamic_bridge.errors import ConnectionError
from dynamic_bridge.transport.base import Transport, build_dispatch_script, dispatch_event_name

logger = logging.getLogger(__name__)

DEFAULT_SOCKETIO_PATH = "/socket.io/"

PANEL_OPEN = "panel:open"
PANEL_LOAD = "panel:load"
PANEL_HIDE = "panel:hide"
PANEL_CLOSE = "panel:close"


class SocketIORelayTransport(Transport):
    def __init__(
        self,
        relay_url: str,
        token: Optional[str] = None,
        socketio_path: str = DEFAULT_SOCKETIO_PATH,
        transports: Optional[list[str]] = None,
        connect_attempts: int = 3,
        retry_delay: float = 1.0,
    ):
        super().__init__()
        self._relay_url = relay_url
        self._token = token
        self._socketio_path = socketio_path
        self._transports = transports or ["websocket"]
        self._connect_attempts = max(connect_attempts, 1)
        self._retry_delay = retry_delay
        self._sio: Optional[socketio.AsyncClient] = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected and self._sio is not None and self._sio.connected

    def is_available(self) -> bool:
        return self.connected

    async def connect(self) -> None:
        """Connect to the relay, retrying up to `connect_attempts` times."""
        if self._sio and self._sio.connected:
            return

        self._sio = socketio.AsyncClient()

        @self._sio.event
        async def connect() -> None:
            self._connected = True

        @self._sio.event
        async def disconnect(_reason: str = "") -> None:
            self._connected = False

        @self._sio.on("message")
        async def on_message(data: Any) -> None:
            raw = data.get("message") if isinstance(data, dict) else data
            if isinstance(raw, str):
                self._notify_message(raw)
            else:
                logger.warning("Ignoring relay message without a string payload: %r", data)

        @self._sio.on("ready")
        async def on_ready(*_args: Any) -> None:
            self._notify_ready()

        @self._sio.on("closed")
        async def on_closed(*_args: Any) -> None:
            self._notify_closed()

        last_error: Optional[Exception] = None
        for attempt in range(1, self._connect_attempts + 1):
            try:
                await self._sio.connect(
                    self._relay_url,
                    auth={"token": self._token} if self._token else None,
                    transports=self._transports,
                    socketio_path=self._socketio_path,
                )
                return
            except SocketIOConnectionError as e:
                last_error = e
                logger.warning("Relay connect attempt %d/%d failed: %s", attempt, self._connect_attempts, e)
                if attempt < self._connect_attempts:
                    await asyncio.sleep(self._retry_delay)
        self._sio = None
        raise ConnectionError(f"Could not connect to relay {self._relay_url}: {last_error}")

    async def disconnect(self) -> None:
        self._connected = False
        if self._sio:
            await self._sio.disconnect()
            self._sio = None

    # -- Transport ----------------------------------------------------------

    def open(self) -> None:
        self._emit(PANEL_OPEN, {})

    def load(self, url: str) -> None:
        self._emit(PANEL_LOAD, {"url": url})

    def send(self, json_message: str) -> None:
        self._emit(dispatch_event_name(json_message), {
            "message": json_message,
            "script": build_dispatch_script(json_message),
        })

    def hide(self) -> None:
        self._emit(PANEL_HIDE, {})

    def close(self) -> None:
        if self.connected:
            self._emit(PANEL_CLOSE, {})

    def _emit(self, event: str, data: dict[str, Any]) -> None:
        """Schedule the async emit on the running loop. Errors are logged."""
        if not self._sio or not self._sio.connected:
            raise ConnectionError("Relay not connected")
        sio = self._sio

        async def _do_emit() -> None:
            try:
                await sio.emit(event, data)
            except Exception as e:
                logger.error("Emit failed for %s: %s", event, e)

        try:
            loop = asyncio.get_running_loop()
            loop.create_task(_do_emit())
        except RuntimeError:
            asyncio.ensure_future(_do_emit())
