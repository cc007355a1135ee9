"""Validator and address / amount rules."""

import pytest

from dynamic_bridge.config import BridgeConfig
from dynamic_bridge.errors import ValidationError
from dynamic_bridge.validation import Validator, is_valid_address, is_valid_amount, is_valid_chain, is_valid_message

SUI_ADDRESS = "0x" + "ab" * 32
EVM_ADDRESS = "0x" + "12" * 20


class TestAmount:
    @pytest.mark.parametrize("amount", ["1.5", "1", "0.000001", "100000", " 2 "])
    def test_accepts(self, amount):
        assert is_valid_amount(amount)

    @pytest.mark.parametrize("amount", ["-1", "abc", "0", "", "   ", "100000.01", "NaN", "Infinity"])
    def test_rejects(self, amount):
        assert not is_valid_amount(amount)

    def test_max_amount_is_configurable(self):
        assert Validator(max_amount=None).is_valid_amount("5000000")
        assert not Validator(max_amount=10).is_valid_amount("11")


class TestMessage:
    def test_empty_and_whitespace_rejected(self):
        assert not is_valid_message("")
        assert not is_valid_message("   ")
        assert not is_valid_message(None)

    def test_text_accepted(self):
        assert is_valid_message("hello")


class TestAddress:
    def test_default_length_is_64_hex(self):
        assert is_valid_address(SUI_ADDRESS)
        assert not is_valid_address(EVM_ADDRESS)

    def test_per_chain_lengths(self):
        v = Validator()
        assert v.is_valid_address(EVM_ADDRESS, chain="ethereum")
        assert v.is_valid_address(EVM_ADDRESS, chain="EVM")
        assert not v.is_valid_address(SUI_ADDRESS, chain="ethereum")
        assert v.is_valid_address(SUI_ADDRESS, chain="sui")

    @pytest.mark.parametrize("address,reason", [
        ("", "Address is required"),
        ("ab" * 32, "Address must start with 0x"),
        ("0x" + "zz" * 32, "Address contains non-hex characters"),
        ("0x1234", "Address must have 64 hex characters after 0x"),
    ])
    def test_reasons(self, address, reason):
        assert Validator().address_error(address) == reason

    def test_custom_table_from_config(self):
        config = BridgeConfig(address_lengths={"aptos": 62}, default_address_length=40)
        v = Validator.from_config(config)
        assert v.address_length("aptos") == 62
        assert v.address_length("unknown") == 40


class TestChain:
    def test_non_empty_by_default(self):
        assert is_valid_chain("anything")
        assert not is_valid_chain("")

    def test_allow_list(self):
        v = Validator(allowed_chains=["sui", "ethereum"])
        assert v.is_valid_chain("SUI")
        assert not v.is_valid_chain("solana")


def test_require_raises_with_field():
    with pytest.raises(ValidationError) as exc:
        Validator().require_amount("0", field="value")
    assert exc.value.field == "value"
    assert "greater than zero" in str(exc.value)
