"""Shared fixtures: a recording transport and a controller on virtual time."""

import json
from typing import Any, Optional

import pytest

from dynamic_bridge.config import BridgeConfig
from dynamic_bridge.events import SessionEvent
from dynamic_bridge.scheduling import VirtualScheduler
from dynamic_bridge.session import SessionController
from dynamic_bridge.transport.base import Transport

SUI_ADDRESS = "0x" + "ab" * 32
EVM_ADDRESS = "0x" + "12" * 20


class FakeTransport(Transport):
    """Records every command. `hide()` fires the closed callbacks unless auto_close is off."""

    def __init__(self, auto_close: bool = True, available: bool = True):
        super().__init__()
        self.auto_close = auto_close
        self.available = available
        self.calls: list[tuple[str, Any]] = []
        self.sent: list[str] = []
        self.closed = False

    def open(self) -> None:
        self.calls.append(("open", None))

    def load(self, url: str) -> None:
        self.calls.append(("load", url))

    def send(self, json_message: str) -> None:
        self.calls.append(("send", json_message))
        self.sent.append(json_message)

    def hide(self) -> None:
        self.calls.append(("hide", None))
        if self.auto_close:
            self.fire_closed()

    def close(self) -> None:
        self.calls.append(("close", None))
        self.closed = True

    def is_available(self) -> bool:
        return self.available

    # test drivers
    def fire_ready(self) -> None:
        self._notify_ready()

    def fire_closed(self) -> None:
        self._notify_closed()

    def deliver(self, payload: Any) -> None:
        self._notify_message(payload if isinstance(payload, str) else json.dumps(payload))

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    def sent_actions(self) -> list[str]:
        return [json.loads(s)["action"] for s in self.sent]


class EventRecorder:
    def __init__(self, controller_or_sdk: Any):
        self.events: list[tuple[str, tuple[Any, ...]]] = []
        for event in SessionEvent:
            controller_or_sdk.on(event, self._make(event))

    def _make(self, event: SessionEvent):
        def handler(*args: Any) -> None:
            self.events.append((event.value, args))
        return handler

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def payloads(self, event: SessionEvent) -> list[Any]:
        return [args[0] if len(args) == 1 else args for name, args in self.events if name == event.value]

    def last(self, event: SessionEvent) -> Optional[Any]:
        found = self.payloads(event)
        return found[-1] if found else None


def wallet_message(action: str, data: Any, **extra: Any) -> dict[str, Any]:
    return {"type": "wallet", "action": action, "timestamp": 1700000000000, "requestId": "r-1", "data": data, **extra}


def auth_message(action: str, data: Any) -> dict[str, Any]:
    return {"type": "auth", "action": action, "timestamp": 1700000000000, "requestId": "r-1", "data": data}


@pytest.fixture
def config() -> BridgeConfig:
    return BridgeConfig(enable_webview_preload=False)


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def controller(transport, config, scheduler) -> SessionController:
    c = SessionController(transport=transport, config=config, scheduler=scheduler)
    transport.fire_ready()
    return c


@pytest.fixture
def recorder(controller) -> EventRecorder:
    return EventRecorder(controller)


def connect(transport: FakeTransport, address: str = SUI_ADDRESS, chain: str = "sui") -> None:
    transport.deliver(wallet_message("walletConnected", {
        "wallet": {"address": address, "chain": chain, "walletName": "Test"},
        "success": True,
    }))
