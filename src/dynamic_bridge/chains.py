"""
Static chain tables used when presenting balances.
"""

from typing import Optional

FALLBACK_SYMBOL = "TOKEN"

CHAIN_SYMBOLS: dict[str, str] = {
    "sui": "SUI",
    "ethereum": "ETH",
    "eth": "ETH",
    "evm": "ETH",
    "solana": "SOL",
    "sol": "SOL",
    "polygon": "MATIC",
    "matic": "MATIC",
    "binance": "BNB",
    "bsc": "BNB",
    "bnb": "BNB",
    "avalanche": "AVAX",
    "avax": "AVAX",
}

CHAIN_DISPLAY_NAMES: dict[str, str] = {
    "sui": "SUI",
    "ethereum": "Ethereum",
    "eth": "Ethereum",
    "evm": "Ethereum",
    "solana": "Solana",
    "sol": "Solana",
    "polygon": "Polygon",
    "matic": "Polygon",
    "binance": "Binance",
    "bsc": "Binance",
    "bnb": "Binance",
    "avalanche": "Avalanche",
    "avax": "Avalanche",
    "arbitrum": "Arbitrum",
    "optimism": "Optimism",
    "base": "Base",
}


def symbol_for_chain(chain: Optional[str], fallback_symbol: Optional[str] = None) -> str:
    """Native symbol for a known chain, else the inbound symbol, else TOKEN."""
    if chain:
        known = CHAIN_SYMBOLS.get(chain.lower())
        if known:
            return known
    return fallback_symbol or FALLBACK_SYMBOL


def display_name_for_chain(chain: Optional[str]) -> str:
    if not chain:
        return "Unknown"
    return CHAIN_DISPLAY_NAMES.get(chain.lower(), chain[:1].upper() + chain[1:].lower())


def format_address(address: Optional[str]) -> str:
    """0x1234...abcd style shortening for logs and UI."""
    if not address or len(address) <= 10:
        return address or ""
    return f"{address[:6]}...{address[-4:]}"
