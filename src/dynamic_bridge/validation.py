"""
Input validation for outbound operations.

Runs before anything is queued or sent. Every check has a boolean form
(`is_valid_*`) and a raising form (`require_*`) that reports the reason as a
ValidationError.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional, Sequence

from dynamic_bridge.config import DEFAULT_ADDRESS_LENGTH, DEFAULT_ADDRESS_LENGTHS, BridgeConfig
from dynamic_bridge.errors import ValidationError

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


class Validator:
    def __init__(
        self,
        address_lengths: Optional[Mapping[str, int]] = None,
        default_address_length: int = DEFAULT_ADDRESS_LENGTH,
        max_amount: Optional[float] = 100000,
        allowed_chains: Optional[Sequence[str]] = None,
    ):
        lengths = DEFAULT_ADDRESS_LENGTHS if address_lengths is None else address_lengths
        self._address_lengths = {k.lower(): v for k, v in lengths.items()}
        self._default_address_length = default_address_length
        self._max_amount = Decimal(str(max_amount)) if max_amount is not None else None
        self._allowed_chains = {c.lower() for c in allowed_chains} if allowed_chains else None

    @classmethod
    def from_config(cls, config: BridgeConfig) -> "Validator":
        return cls(
            address_lengths=config.address_lengths,
            default_address_length=config.default_address_length,
            max_amount=config.max_amount,
            allowed_chains=config.allowed_chains,
        )

    def address_length(self, chain: Optional[str] = None) -> int:
        if chain:
            return self._address_lengths.get(chain.lower(), self._default_address_length)
        return self._default_address_length

    def address_error(self, address: Optional[str], chain: Optional[str] = None) -> Optional[str]:
        if not address:
            return "Address is required"
        address = address.strip()
        if not address.startswith("0x"):
            return "Address must start with 0x"
        digits = address[2:]
        expected = self.address_length(chain)
        if len(digits) != expected:
            return f"Address must have {expected} hex characters after 0x"
        if not _HEX_RE.match(digits):
            return "Address contains non-hex characters"
        return None

    def amount_error(self, amount: Optional[str]) -> Optional[str]:
        if amount is None or not str(amount).strip():
            return "Amount is required"
        try:
            value = Decimal(str(amount).strip())
        except InvalidOperation:
            return "Amount is not a number"
        if not value.is_finite():
            return "Amount is not a number"
        if value <= 0:
            return "Amount must be greater than zero"
        if self._max_amount is not None and value > self._max_amount:
            return f"Amount exceeds the maximum of {self._max_amount}"
        return None

    def message_error(self, message: Optional[str]) -> Optional[str]:
        if message is None or not message.strip():
            return "Message cannot be empty"
        return None

    def chain_error(self, chain: Optional[str]) -> Optional[str]:
        if chain is None or not chain.strip():
            return "Chain is required"
        if self._allowed_chains is not None and chain.strip().lower() not in self._allowed_chains:
            return f"Unsupported chain: {chain}"
        return None

    def is_valid_address(self, address: Optional[str], chain: Optional[str] = None) -> bool:
        return self.address_error(address, chain) is None

    def is_valid_amount(self, amount: Optional[str]) -> bool:
        return self.amount_error(amount) is None

    def is_valid_message(self, message: Optional[str]) -> bool:
        return self.message_error(message) is None

    def is_valid_chain(self, chain: Optional[str]) -> bool:
        return self.chain_error(chain) is None

    def require_address(self, address: Optional[str], chain: Optional[str] = None, field: str = "address") -> None:
        _raise_if(self.address_error(address, chain), field)

    def require_amount(self, amount: Optional[str], field: str = "value") -> None:
        _raise_if(self.amount_error(amount), field)

    def require_message(self, message: Optional[str], field: str = "message") -> None:
        _raise_if(self.message_error(message), field)

    def require_chain(self, chain: Optional[str], field: str = "chain") -> None:
        _raise_if(self.chain_error(chain), field)


def _raise_if(reason: Optional[str], field: str) -> None:
    if reason is not None:
        raise ValidationError(reason, field=field)


_default = Validator()

is_valid_address = _default.is_valid_address
is_valid_amount = _default.is_valid_amount
is_valid_message = _default.is_valid_message
is_valid_chain = _default.is_valid_chain
