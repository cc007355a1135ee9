"""
Wallet domain messages (type = "wallet").
"""

from typing import Optional

from dynamic_bridge.models.common import ErrorInfo, NetworkInfo, WalletCredential
from dynamic_bridge.models.envelope import BaseMessage, MessageType, TransactionType, WalletAction, WireModel


class WalletMessage(BaseMessage):
    type: str = MessageType.WALLET.value


# ---------------------------------------------------------------------------
# host -> frontend
# ---------------------------------------------------------------------------

class GetBalanceData(WireModel):
    wallet_address: str = ""
    chain: str = ""
    token_address: Optional[str] = None
    network: str = "mainnet"


class GetBalanceMessage(WalletMessage):
    action: str = WalletAction.GET_BALANCE.value
    data: Optional[GetBalanceData] = None


class SignMessageData(WireModel):
    wallet_address: str = ""
    message: str = ""


class SignMessageMessage(WalletMessage):
    action: str = WalletAction.SIGN_MESSAGE.value
    data: Optional[SignMessageData] = None


class TransactionData(WireModel):
    wallet_address: str = ""
    to: str = ""
    value: str = ""
    data: Optional[str] = None
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    max_fee_per_gas: Optional[str] = None
    max_priority_fee_per_gas: Optional[str] = None
    chain: str = "sui"
    network: str = "mainnet"
    type: str = TransactionType.SEND.value


class TransactionMessage(WalletMessage):
    action: str = WalletAction.TRANSACTION.value
    data: Optional[TransactionData] = None


class GetWalletsMessage(WalletMessage):
    action: str = WalletAction.GET_WALLETS.value


class GetNetworksMessage(WalletMessage):
    action: str = WalletAction.GET_NETWORKS.value


class SwitchWalletData(WireModel):
    wallet_id: str = ""


class SwitchWalletMessage(WalletMessage):
    action: str = WalletAction.SWITCH_WALLET.value
    data: Optional[SwitchWalletData] = None


class SwitchNetworkData(WireModel):
    network_chain_id: str = ""


class SwitchNetworkMessage(WalletMessage):
    action: str = WalletAction.SWITCH_NETWORK.value
    data: Optional[SwitchNetworkData] = None


# ---------------------------------------------------------------------------
# frontend -> host
# ---------------------------------------------------------------------------

class BalanceResponseData(WireModel):
    wallet_address: str = ""
    chain: str = ""
    network: str = ""
    balance: str = ""
    symbol: str = ""
    decimals: int = 0
    token_address: Optional[str] = None
    usd_value: float = 0.0
    success: bool = False
    error: Optional[str] = None

    def __str__(self) -> str:
        return (
            f"BalanceResponseData(wallet_address={self.wallet_address}, chain={self.chain}, "
            f"balance={self.balance} {self.symbol}, success={self.success}, error={self.error})"
        )


class BalanceResponseMessage(WalletMessage):
    """balanceResponse, and the switchWallet / switchNetwork acks that share its shape."""
    action: str = WalletAction.BALANCE_RESPONSE.value
    data: Optional[BalanceResponseData] = None


class SignMessageResponseData(WireModel):
    wallet_address: str = ""
    signature: str = ""
    message: str = ""
    success: bool = False
    error: Optional[str] = None


class SignMessageResponseMessage(WalletMessage):
    action: str = WalletAction.SIGN_MESSAGE_RESPONSE.value
    data: Optional[SignMessageResponseData] = None


class TransactionResponseData(WireModel):
    wallet_address: str = ""
    transaction_hash: str = ""
    success: bool = False
    error: Optional[str] = None
    gas_used: str = ""
    block_number: int = 0
    confirmations: int = 0


class TransactionResponseMessage(WalletMessage):
    action: str = WalletAction.TRANSACTION_RESPONSE.value
    data: Optional[TransactionResponseData] = None


class WalletConnectedData(WireModel):
    wallet: Optional[WalletCredential] = None
    success: bool = False


class WalletConnectedMessage(WalletMessage):
    action: str = WalletAction.WALLET_CONNECTED.value
    data: Optional[WalletConnectedData] = None


class WalletDisconnectedData(WireModel):
    wallet_address: str = ""
    reason: str = ""
    success: bool = False


class WalletDisconnectedMessage(WalletMessage):
    action: str = WalletAction.WALLET_DISCONNECTED.value
    data: Optional[WalletDisconnectedData] = None


class WalletErrorData(ErrorInfo):
    wallet_address: str = ""
    action: str = ""


class WalletErrorMessage(WalletMessage):
    action: str = WalletAction.WALLET_ERROR.value
    data: Optional[WalletErrorData] = None


class WalletsResponseData(WireModel):
    wallets: list[WalletCredential] = []
    primary_wallet: Optional[WalletCredential] = None
    success: bool = False
    error: Optional[str] = None


class WalletsResponseMessage(WalletMessage):
    action: str = WalletAction.WALLETS_RESPONSE.value
    data: Optional[WalletsResponseData] = None


class NetworksResponseData(WireModel):
    networks: list[NetworkInfo] = []
    success: bool = False
    error: Optional[str] = None


class NetworksResponseMessage(WalletMessage):
    action: str = WalletAction.NETWORKS_RESPONSE.value
    data: Optional[NetworksResponseData] = None
