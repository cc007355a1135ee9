"""
Data types shared across the auth and wallet domains.
"""

from typing import Optional

from dynamic_bridge.models.envelope import WireModel


class UserInfo(WireModel):
    user_id: str = ""
    email: str = ""
    name: str = ""
    avatar: str = ""
    is_verified: bool = False


class WalletCredential(WireModel):
    """One wallet the user controls on one chain / network."""
    address: str = ""
    wallet_name: str = ""
    chain: str = ""
    format: str = ""
    id: str = ""
    network: str = ""
    balance: str = ""
    decimals: int = 0
    symbol: str = ""

    def __str__(self) -> str:
        return (
            f"WalletCredential(address={self.address}, name={self.wallet_name}, chain={self.chain}, "
            f"network={self.network}, balance={self.balance} {self.symbol})"
        )


class ErrorInfo(WireModel):
    error: str = ""
    error_code: str = ""
    reason: Optional[str] = None


class NativeCurrency(WireModel):
    decimals: int = 0
    name: str = ""
    symbol: str = ""
    denom: str = ""
    icon_url: str = ""


class NetworkInfo(WireModel):
    chain_id: str = ""
    cluster: str = ""
    genesis_hash: str = ""
    icon_url: str = ""
    is_testnet: bool = False
    key: str = ""
    name: str = ""
    native_currency: Optional[NativeCurrency] = None
    network_id: str = ""
    vanity_name: str = ""
