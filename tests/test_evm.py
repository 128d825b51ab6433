from decimal import Decimal

import pytest

from walletkit.constants import Coin, Network
from walletkit.exceptions import (
    InvalidAddressError,
    InvalidAmountError,
    InvalidParameterError,
    InvalidPrivateKeyError,
    UnsupportedNetworkError,
)
from walletkit.modules.evm import build_evm_payload, encode_erc20_transfer, sign_evm_transaction


KEY = "0x" + "46" * 32
TO = "0x" + "35" * 20


def sign(**overrides):
    args = dict(
        network=Network.ETH_MAINNET,
        from_private_key=KEY,
        to_address=TO,
        amount=Decimal("1"),
        coin=Coin.ETH,
        nonce=9,
        gas_price=20_000_000_000,
        gas_limit=21_000,
    )
    args.update(overrides)
    return sign_evm_transaction(**args)


def test_eip155_example():
    assert sign() == (
        "0xf86c098504a817c800825208943535353535353535353535353535353535353535880de0b6b3a7640000"
        "8025a028ef61340bd939bc2195fe537567866003e1a15d3c71ff63e1590620aa636276a067cbe9d8997f"
        "761aecb703304b3800ccf555c9f3dc64214b297fb1966a3b6d83"
    )


def test_inputs_are_whitespace_stripped():
    assert sign(from_private_key=f" {KEY} ", to_address=f"{TO[:10]} {TO[10:]}") == sign()


def test_chain_id_changes_signature():
    assert sign(network=Network.ETH_TESTNET) != sign()


def test_encode_erc20_transfer():
    data = encode_erc20_transfer(TO, 1_500_000)
    assert data.hex() == (
        "a9059cbb"
        + "00" * 12 + "35" * 20
        + "%064x" % 1_500_000
    )
    with pytest.raises(InvalidParameterError):
        encode_erc20_transfer(TO, -1)


def test_token_payload_targets_contract():
    payload = build_evm_payload(Coin.USDT, TO, 1_500_000, 1, 10, 60_000, 1)
    assert payload["to"] == "0xdAC17F958D2ee523a2206206994597C13D831ec7"
    assert (payload["nonce"], payload["gasPrice"], payload["gas"], payload["chainId"]) == (1, 10, 60_000, 1)
    assert payload["value"] == 0
    assert payload["data"] == encode_erc20_transfer(TO, 1_500_000)

    native = build_evm_payload(Coin.ETH, TO, 5, 1, 10, 21_000, 3)
    assert native["to"] == "0x" + "35" * 20
    assert native["value"] == 5
    assert native["data"] == b""
    assert native["chainId"] == 3


def test_sign_token_transfer():
    signed = sign(coin=Coin.USDT, amount=Decimal("1.5"), gas_limit=60_000)
    assert signed.startswith("0x")
    assert "dac17f958d2ee523a2206206994597c13d831ec7" in signed
    assert "a9059cbb" + "00" * 12 + "35" * 20 + "%064x" % 1_500_000 in signed


def test_amount_scale():
    # 8-decimal token
    assert sign(coin=Coin.WBTC, amount=Decimal("1.23")).startswith("0x")
    assert sign(coin=Coin.WBTC, amount="1.23000000000").startswith("0x")
    with pytest.raises(InvalidAmountError, match="scale"):
        sign(coin=Coin.WBTC, amount=Decimal("1.234567891"))
    with pytest.raises(InvalidAmountError):
        sign(coin=Coin.USDT, amount=Decimal("0"))


@pytest.mark.parametrize("field,value", [
    ("nonce", -1),
    ("gas_price", 0),
    ("gas_limit", 0),
    ("gas_limit", 21000.5),
])
def test_rejects_invalid_quantities(field, value):
    with pytest.raises(InvalidParameterError):
        sign(**{field: value})


def test_rejects_wrong_network_or_coin():
    with pytest.raises(UnsupportedNetworkError):
        sign(network=Network.BTC_MAINNET)
    with pytest.raises(UnsupportedNetworkError):
        sign(coin=Coin.BTC)


def test_rejects_invalid_key_and_address():
    with pytest.raises(InvalidPrivateKeyError):
        sign(from_private_key="46" * 32)
    with pytest.raises(InvalidPrivateKeyError):
        sign(from_private_key="0x" + "00" * 32)
    with pytest.raises(InvalidAddressError):
        sign(to_address="0x1234")


def test_huge_amounts_are_invalid_not_arithmetic_errors():
    with pytest.raises(InvalidAmountError):
        sign(amount=Decimal("1e70"))
    # Fits the decimal context but not a uint256 word
    with pytest.raises(InvalidAmountError):
        sign(amount=Decimal("2e59"))
