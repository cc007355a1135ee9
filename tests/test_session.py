"""Session controller: queue discipline, state transitions and response handling."""

import pytest

from dynamic_bridge.config import BridgeConfig
from dynamic_bridge.errors import SessionError, TransportNotReadyError, ValidationError
from dynamic_bridge.events import SessionEvent
from dynamic_bridge.scheduling import VirtualScheduler
from dynamic_bridge.session import NOT_READY_ERROR, TIMEOUT_ERROR, SessionController

from conftest import (
    EVM_ADDRESS,
    SUI_ADDRESS,
    EventRecorder,
    FakeTransport,
    auth_message,
    connect,
    wallet_message,
)


def balance(**data):
    return wallet_message("balanceResponse", {"success": True, "balance": "1", **data})


def make_controller(transport, **config):
    scheduler = VirtualScheduler()
    controller = SessionController(
        transport=transport,
        config=BridgeConfig(enable_webview_preload=False, **config),
        scheduler=scheduler,
    )
    return controller, scheduler, EventRecorder(controller)


class TestQueue:
    def test_one_operation_in_flight(self, controller, transport, scheduler):
        controller.get_balance()
        controller.get_wallets()
        controller.get_networks()
        assert transport.sent_actions() == ["getBalance"]
        assert controller.is_processing
        assert controller.queue_length == 2

        transport.deliver(balance())
        # panel closed, but the next request waits for the advance delay
        assert transport.sent_actions() == ["getBalance"]
        assert not controller.is_processing
        scheduler.advance(0.5)
        assert transport.sent_actions() == ["getBalance", "getWallets"]

        transport.deliver(wallet_message("walletsResponse", {"success": True, "wallets": []}))
        scheduler.advance(0.5)
        assert transport.sent_actions() == ["getBalance", "getWallets", "getNetworks"]
        assert controller.queue_length == 0

    def test_malformed_known_reply_fails_and_advances(self, controller, transport, scheduler, recorder):
        connect(transport)
        controller.send_transaction("0x" + "cd" * 32, "1")
        controller.get_balance()
        transport.deliver(wallet_message("transactionResponse", {
            "transactionHash": "0xhash", "success": True, "blockNumber": "0x1a",
        }))
        assert recorder.payloads(SessionEvent.ERROR) == ["transactionResponse: Invalid response"]
        assert recorder.payloads(SessionEvent.TRANSACTION_SENT) == []
        assert not controller.is_processing
        scheduler.advance(0.5)
        assert transport.sent_actions() == ["transaction", "getBalance"]
        assert controller.queue_length == 0

    @pytest.mark.parametrize("data", [{"usdValue": "", "success": True}, {"decimals": 1.5, "success": True}])
    def test_malformed_balance_reply_hides(self, controller, transport, recorder, data):
        controller.get_balance()
        transport.deliver(wallet_message("balanceResponse", data))
        assert recorder.payloads(SessionEvent.ERROR) == ["balanceResponse: Invalid response"]
        assert transport.count("hide") == 1

    def test_open_precedes_send(self, controller, transport):
        controller.get_balance()
        assert [name for name, _ in transport.calls] == ["open", "send"]

    def test_duplicate_close_signals_advance_once(self):
        transport = FakeTransport(auto_close=False)
        controller, scheduler, _ = make_controller(transport)
        transport.fire_ready()
        controller.get_balance()
        controller.get_wallets()
        controller.get_networks()

        transport.fire_closed()
        transport.fire_closed()
        scheduler.advance(0.5)
        assert transport.sent_actions() == ["getBalance", "getWallets"]
        assert controller.queue_length == 1

    def test_enqueue_during_pending_advance_waits(self):
        transport = FakeTransport(auto_close=False)
        controller, scheduler, _ = make_controller(transport)
        transport.fire_ready()
        controller.get_balance()
        controller.get_wallets()
        transport.fire_closed()

        controller.get_networks()
        assert transport.sent_actions() == ["getBalance"]
        scheduler.advance(0.5)
        assert transport.sent_actions() == ["getBalance", "getWallets"]

    def test_user_dismissal_advances_queue(self):
        transport = FakeTransport(auto_close=False)
        controller, scheduler, recorder = make_controller(transport)
        transport.fire_ready()
        controller.connect_wallet()
        controller.get_balance()

        transport.fire_closed()
        assert SessionEvent.WEBVIEW_CLOSED.value in recorder.names()
        scheduler.advance(0.5)
        assert transport.sent_actions() == ["connectWallet", "getBalance"]

    def test_late_response_after_close_is_harmless(self, controller, transport, scheduler):
        transport.deliver(balance())
        assert not controller.is_processing
        assert scheduler.pending == 0

    def test_unavailable_transport_discards_queue(self, controller, transport, scheduler, recorder):
        controller.get_balance()
        controller.get_wallets()
        transport.available = False
        transport.deliver(balance())
        scheduler.advance(0.5)
        assert transport.sent_actions() == ["getBalance"]
        assert controller.queue_length == 0
        assert not controller.is_processing

    def test_no_transport_rejects_operations(self, config, scheduler):
        controller = SessionController(config=config, scheduler=scheduler)
        with pytest.raises(TransportNotReadyError):
            controller.get_balance()


class TestReadiness:
    def test_send_deferred_until_retry(self):
        transport = FakeTransport()
        controller, scheduler, recorder = make_controller(transport)
        controller.get_balance()
        assert transport.count("open") == 1
        assert transport.sent == []

        transport.fire_ready()
        assert SessionEvent.WEBVIEW_READY.value in recorder.names()
        scheduler.advance(1.0)
        assert transport.sent_actions() == ["getBalance"]

    def test_not_ready_after_retry_fails_operation(self):
        transport = FakeTransport()
        controller, scheduler, recorder = make_controller(transport)
        controller.get_balance()
        controller.get_wallets()

        scheduler.advance(1.0)
        assert recorder.payloads(SessionEvent.ERROR) == [NOT_READY_ERROR]
        assert transport.count("hide") == 1
        assert transport.sent == []
        assert not controller.is_processing

        # the next operation gets its own attempt
        transport.fire_ready()
        scheduler.advance(0.5)
        assert transport.sent_actions() == ["getWallets"]

    def test_timeout(self):
        transport = FakeTransport()
        controller, scheduler, recorder = make_controller(transport, request_timeout=5.0)
        transport.fire_ready()
        controller.get_balance()
        scheduler.advance(4.9)
        assert recorder.payloads(SessionEvent.ERROR) == []
        scheduler.advance(0.1)
        assert recorder.payloads(SessionEvent.ERROR) == [TIMEOUT_ERROR]
        assert transport.count("hide") == 1

    def test_response_cancels_timeout(self):
        transport = FakeTransport()
        controller, scheduler, recorder = make_controller(transport, request_timeout=5.0)
        transport.fire_ready()
        controller.get_balance()
        transport.deliver(balance())
        scheduler.advance(10)
        assert recorder.payloads(SessionEvent.ERROR) == []


class TestConnection:
    def test_wallet_connected(self, controller, transport, recorder):
        controller.connect_wallet()
        assert transport.sent_actions() == ["connectWallet"]
        connect(transport, address=SUI_ADDRESS, chain="SUI")

        assert controller.is_connected
        assert controller.current_wallet_address == SUI_ADDRESS
        assert controller.current_chain == "sui"
        assert controller.current_wallet_info.wallet_name == "Test"
        assert recorder.payloads(SessionEvent.WALLET_CONNECTED) == [SUI_ADDRESS]
        assert recorder.payloads(SessionEvent.CONNECTION_STATUS_CHANGED) == [True]
        assert len(recorder.payloads(SessionEvent.WALLET_INFO_UPDATED)) == 1
        assert transport.count("hide") == 1
        assert not controller.is_processing

    def test_wallet_connected_failure(self, controller, transport, recorder):
        transport.deliver(wallet_message("walletConnected", {"success": False}))
        assert recorder.payloads(SessionEvent.ERROR) == ["Wallet connection failed"]
        assert not controller.is_connected
        assert transport.count("hide") == 1

    def test_legacy_connected_url(self, controller, transport):
        transport.deliver(f"uniwebview://connected?address={SUI_ADDRESS}&chain=sui")
        assert controller.is_connected
        assert controller.current_wallet_info.wallet_name == "Legacy Wallet"

    def test_already_connected(self, controller, transport):
        connect(transport)
        with pytest.raises(SessionError) as exc:
            controller.connect_wallet()
        assert exc.value.code == "already_connected"

    def test_disconnect_clears_optimistically_after_send(self, controller, transport, recorder):
        connect(transport)
        controller.disconnect_wallet()
        assert transport.sent_actions() == ["disconnect"]
        assert not controller.is_connected
        assert controller.current_wallet_address == ""
        assert controller.current_chain == "sui"
        assert controller.current_wallet_info is None
        assert recorder.payloads(SessionEvent.CONNECTION_STATUS_CHANGED) == [True, False]
        assert SessionEvent.WALLET_DISCONNECTED.value in recorder.names()

    def test_disconnect_ack_does_not_repeat_event(self, controller, transport, recorder):
        connect(transport)
        controller.disconnect_wallet()
        transport.deliver(auth_message("loggedOut", {"success": True}))
        transport.deliver(wallet_message("walletDisconnected", {"reason": "user", "success": True}))
        assert recorder.names().count(SessionEvent.WALLET_DISCONNECTED.value) == 1
        assert recorder.payloads(SessionEvent.CONNECTION_STATUS_CHANGED) == [True, False]

    def test_disconnect_requires_wallet(self, controller):
        with pytest.raises(SessionError) as exc:
            controller.disconnect_wallet()
        assert exc.value.code == "not_connected"

    def test_wallet_disconnected_message(self, controller, transport, recorder):
        connect(transport)
        transport.deliver(wallet_message("walletDisconnected", {"reason": "user", "success": True}))
        assert not controller.is_connected
        assert recorder.payloads(SessionEvent.CONNECTION_STATUS_CHANGED) == [True, False]

    def test_wallet_not_connected_error_clears_session(self, controller, transport, recorder):
        connect(transport)
        hides = transport.count("hide")
        transport.deliver(wallet_message("walletError", {"error": "gone", "errorCode": "WALLET_NOT_CONNECTED"}))
        assert recorder.payloads(SessionEvent.ERROR) == ["Wallet error: gone"]
        assert not controller.is_connected
        assert transport.count("hide") == hides

    def test_wallet_error_without_data(self, controller, transport, recorder):
        connect(transport)
        hides = transport.count("hide")
        transport.deliver(wallet_message("walletError", None))
        assert recorder.payloads(SessionEvent.ERROR) == ["Wallet error: Invalid response"]
        assert controller.is_connected
        assert transport.count("hide") == hides

    def test_malformed_wallet_error_does_not_hide(self, controller, transport, recorder):
        transport.deliver(wallet_message("walletError", {"error": ["x"], "errorCode": "X"}))
        assert recorder.payloads(SessionEvent.ERROR) == ["walletError: Invalid response"]
        assert transport.count("hide") == 0

    def test_other_wallet_error_keeps_session(self, controller, transport, recorder):
        connect(transport)
        transport.deliver(wallet_message("walletError", {"error": "meh", "errorCode": "NETWORK_ERROR"}))
        assert controller.is_connected

    def test_check_connection_status(self, controller, transport, recorder):
        assert controller.check_connection_status() is False
        assert SessionEvent.WALLET_DISCONNECTED.value in recorder.names()
        connect(transport)
        assert controller.check_connection_status() is True
        assert recorder.payloads(SessionEvent.WALLET_CONNECTED) == [SUI_ADDRESS, SUI_ADDRESS]


class TestAuth:
    def test_auth_success(self, controller, transport, recorder):
        transport.deliver(auth_message("authSuccess", {
            "user": {"userId": "u-1", "email": "a@b.c", "isVerified": True},
            "primaryWallet": {"address": SUI_ADDRESS, "chain": "sui"},
            "provider": "email",
        }))
        assert controller.current_user.user_id == "u-1"
        assert controller.is_connected
        assert recorder.payloads(SessionEvent.WALLET_CONNECTED) == [SUI_ADDRESS]
        assert transport.count("hide") == 1

    def test_auth_failed(self, controller, transport, recorder):
        transport.deliver(auth_message("authFailed", {"error": "denied", "errorCode": "AUTH_USER_REJECTED"}))
        assert recorder.last(SessionEvent.AUTH_FAILED).error_code == "AUTH_USER_REJECTED"
        assert recorder.payloads(SessionEvent.ERROR) == ["Authentication failed: denied"]
        assert transport.count("hide") == 1

    def test_authenticated_user_uses_first_wallet(self, controller, transport):
        transport.deliver(auth_message("handleAuthenticatedUser", {
            "user": {"userId": "u-2"},
            "wallets": [{"address": EVM_ADDRESS, "chain": "ethereum"}, {"address": SUI_ADDRESS, "chain": "sui"}],
        }))
        assert controller.current_wallet_address == EVM_ADDRESS
        assert controller.current_chain == "ethereum"

    def test_logged_out(self, controller, transport, recorder):
        connect(transport)
        transport.deliver(auth_message("loggedOut", {"success": True}))
        assert not controller.is_connected
        assert SessionEvent.WALLET_DISCONNECTED.value in recorder.names()

    def test_jwt_token(self, controller, transport, recorder):
        controller.get_jwt_token()
        transport.deliver(auth_message("jwtTokenResponse", {"token": "jwt", "userId": "u-1"}))
        assert recorder.last(SessionEvent.JWT_TOKEN_RECEIVED).data.token == "jwt"


class TestWalletOperations:
    def test_sign_message(self, controller, transport, recorder):
        connect(transport)
        controller.sign_message("hello")
        assert transport.sent_actions() == ["signMessage"]
        transport.deliver(wallet_message("signMessageResponse", {"signature": "0xsig", "success": True}))
        assert recorder.payloads(SessionEvent.MESSAGE_SIGNED) == ["0xsig"]

    def test_sign_failure(self, controller, transport, recorder):
        transport.deliver(wallet_message("signMessageResponse", {"success": False, "error": "USER_REJECTED"}))
        assert recorder.payloads(SessionEvent.ERROR) == ["Sign failed: USER_REJECTED"]

    def test_sign_preconditions(self, controller, transport):
        with pytest.raises(ValidationError):
            controller.sign_message("")
        with pytest.raises(SessionError):
            controller.sign_message("hello")
        assert transport.sent == []

    def test_send_transaction(self, controller, transport, recorder):
        connect(transport)
        controller.send_transaction(SUI_ADDRESS, "1.5")
        assert transport.sent_actions() == ["transaction"]
        transport.deliver(wallet_message("transactionResponse", {"transactionHash": "0xhash", "success": True}))
        assert recorder.payloads(SessionEvent.TRANSACTION_SENT) == ["0xhash"]

    def test_transaction_preconditions(self, controller, transport):
        with pytest.raises(ValidationError):
            controller.send_transaction("", "1")
        with pytest.raises(SessionError):
            controller.send_transaction(SUI_ADDRESS, "1")
        connect(transport)
        with pytest.raises(ValidationError) as exc:
            controller.send_transaction(EVM_ADDRESS, "1")
        assert exc.value.field == "to"
        with pytest.raises(ValidationError) as exc:
            controller.send_transaction(SUI_ADDRESS, "0")
        assert exc.value.field == "value"
        assert transport.sent == []

    def test_evm_session_accepts_evm_recipient(self, controller, transport):
        connect(transport, address=EVM_ADDRESS, chain="ethereum")
        controller.send_transaction(EVM_ADDRESS, "0.1")
        assert transport.sent_actions() == ["transaction"]

    def test_open_profile_requires_wallet(self, controller, transport):
        with pytest.raises(SessionError):
            controller.open_profile()
        connect(transport)
        controller.open_profile()
        assert transport.sent_actions() == ["openProfile"]

    def test_switch_requires_argument(self, controller):
        with pytest.raises(ValidationError):
            controller.switch_wallet("")
        with pytest.raises(ValidationError):
            controller.switch_network("")

    @pytest.mark.parametrize("action", [
        "signMessageResponse", "transactionResponse", "balanceResponse", "walletsResponse", "networksResponse",
    ])
    def test_null_data_is_an_error_and_hides(self, controller, transport, recorder, action):
        transport.deliver(wallet_message(action, None))
        errors = recorder.payloads(SessionEvent.ERROR)
        assert len(errors) == 1
        assert errors[0].endswith("Invalid response")
        assert transport.count("hide") == 1


class TestBalances:
    @pytest.mark.parametrize("chain,symbol,expected", [
        ("ethereum", "XYZ", "ETH"),
        ("SUI", "", "SUI"),
        ("foo", "", "TOKEN"),
        ("foo", "FOO", "FOO"),
    ])
    def test_symbol_remapping(self, controller, transport, recorder, chain, symbol, expected):
        transport.deliver(balance(chain=chain, symbol=symbol, walletAddress=SUI_ADDRESS))
        assert recorder.last(SessionEvent.BALANCE_UPDATED).symbol == expected
        assert controller.current_wallet_info.symbol == expected
        assert controller.current_chain == chain.lower()

    def test_failed_balance(self, controller, transport, recorder):
        transport.deliver(wallet_message("balanceResponse", {"success": False, "error": "rpc down"}))
        assert recorder.payloads(SessionEvent.ERROR) == ["Failed to get balance: rpc down"]
        assert recorder.payloads(SessionEvent.BALANCE_UPDATED) == []

    def test_switch_network_refreshes(self, controller, transport, scheduler, recorder):
        controller.switch_network("137")
        transport.deliver(wallet_message("switchNetwork", {"success": True, "chain": "polygon", "balance": "2"}))
        assert recorder.last(SessionEvent.NETWORK_SWITCHED).symbol == "MATIC"
        assert controller.queue_length == 2

        scheduler.advance(0.5)
        transport.deliver(wallet_message("networksResponse", {"success": True, "networks": []}))
        scheduler.advance(0.5)
        assert transport.sent_actions() == ["switchNetwork", "getNetworks", "getBalance"]
        assert len(recorder.payloads(SessionEvent.NETWORKS_RECEIVED)) == 1

    def test_switch_wallet_failure(self, controller, transport, recorder):
        controller.switch_wallet("w-2")
        transport.deliver(wallet_message("switchWallet", {"success": False, "error": "nope"}))
        assert recorder.payloads(SessionEvent.ERROR) == ["Failed to switch wallet: nope"]
        assert controller.queue_length == 0


class TestLifecycle:
    def test_status(self, controller, transport):
        connect(transport)
        status = controller.status()
        assert status["initialized"] is True
        assert status["isWalletConnected"] is True
        assert status["currentWalletAddress"] == SUI_ADDRESS
        assert status["currentChain"] == "sui"
        assert status["isWebviewReady"] is True
        assert status["queueLength"] == 0
        assert status["sdkVersion"] == "1.0.0"

    def test_reset(self, controller, transport, recorder):
        connect(transport)
        controller.get_balance()
        controller.get_wallets()
        controller.reset()
        assert controller.queue_length == 0
        assert not controller.is_connected
        assert recorder.payloads(SessionEvent.CONNECTION_STATUS_CHANGED) == [True, False]

    def test_close(self, controller, transport, recorder):
        controller.close()
        assert transport.closed
        assert controller.transport is None
        transport.deliver(balance())
        assert recorder.events == []
