"""EVM transaction engine: native ETH and ERC-20 transfers with EIP-155."""

import logging
from typing import Any, Dict

from eth_account import Account
from eth_utils import to_checksum_address, to_hex

from ..constants import ERC20_TRANSFER_SELECTOR, Coin, CoinType, Network
from ..exceptions import InvalidAmountError, InvalidParameterError, UnsupportedNetworkError
from ..types.common import BaseUnits, HexStr
from ..utils.validation import (
    Amount,
    decode_private_key,
    strip_whitespace,
    to_base_units,
    validate_address,
    validate_evm_amount,
)

__all__ = ["encode_erc20_transfer", "build_evm_payload", "sign_evm_transaction"]

logger = logging.getLogger(__name__)

WORD_SIZE = 32
UINT256_LIMIT = 1 << 256


def encode_erc20_transfer(to_address: str, amount: int) -> bytes:
    """
    ABI-encode ``transfer(address,uint256)``.
    
    Args:
        to_address: ``0x``-prefixed recipient
        amount: Token amount in base units
        
    Returns:
        4-byte selector followed by two 32-byte words
    """
    if amount < 0 or amount >= UINT256_LIMIT:
        raise InvalidParameterError(f"Token amount out of uint256 range: {amount}")
    return (
        ERC20_TRANSFER_SELECTOR
        + bytes.fromhex(to_address[2:]).rjust(WORD_SIZE, b"\x00")
        + amount.to_bytes(WORD_SIZE, "big")
    )


def build_evm_payload(
    coin: Coin,
    to_address: str,
    value: BaseUnits,
    nonce: int,
    gas_price: int,
    gas_limit: int,
    chain_id: int,
) -> Dict[str, Any]:
    """
    Unsigned legacy transaction in the form ``eth_account`` signs.
    
    Token transfers go to the token contract with zero value and the
    ``transfer`` call as data.
    """
    tx = {
        "chainId": chain_id,
        "nonce": nonce,
        "gas": gas_limit,
        "gasPrice": gas_price,
    }
    if coin.is_token:
        tx.update(
            to=to_checksum_address(coin.contract_address),
            value=0,
            data=encode_erc20_transfer(to_address, value),
        )
    else:
        tx.update(to=to_checksum_address(to_address), value=value, data=b"")
    return tx


def _check_quantity(name: str, value: int, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise InvalidParameterError(f"Invalid {name}: {value!r}")


def sign_evm_transaction(
    network: Network,
    from_private_key: str,
    to_address: str,
    amount: Amount,
    coin: Coin,
    nonce: int,
    gas_price: int,
    gas_limit: int,
) -> HexStr:
    """
    Sign a legacy EVM transfer with EIP-155 replay protection.
    
    The amount must be expressible exactly in the coin's scale; unlike
    the UTXO path nothing is truncated.
    
    Args:
        network: ETH mainnet or testnet
        from_private_key: ``0x``-prefixed hex private key
        to_address: ``0x``-prefixed recipient address
        amount: Amount in whole coins
        coin: ETH or an ERC-20 token
        nonce: Sender account nonce
        gas_price: Gas price in wei
        gas_limit: Gas limit
        
    Returns:
        ``0x``-prefixed hex of the signed RLP transaction
        
    Raises:
        UnsupportedNetworkError: If network or coin is not an ETH coin type
        InvalidPrivateKeyError: If the key is invalid
        InvalidAddressError: If the recipient is invalid
        InvalidAmountError: If the amount has excess decimals, is below minimum or overflows uint256
        InvalidParameterError: If nonce, gas price or gas limit are invalid
    """
    if network.coin_type != CoinType.ETH:
        raise UnsupportedNetworkError(f"Unsupported network: {network.value}")
    if coin.coin_type != CoinType.ETH:
        raise UnsupportedNetworkError(f"{coin.code} is not an EVM coin")

    private_key, _ = decode_private_key(network, strip_whitespace(from_private_key))
    to_address = validate_address(network, to_address)
    value = to_base_units(validate_evm_amount(amount, coin), coin)
    if value >= UINT256_LIMIT:
        raise InvalidAmountError(f"Amount {amount} {coin.code} does not fit in uint256")

    _check_quantity("nonce", nonce, 0)
    _check_quantity("gas price", gas_price, 1)
    _check_quantity("gas limit", gas_limit, 1)

    chain_id = network.params.chain_id
    tx = build_evm_payload(coin, to_address, value, nonce, gas_price, gas_limit, chain_id)

    signed = Account.from_key(private_key.secret).sign_transaction(tx)
    logger.debug(f"Signed {coin.code} transfer on chain {chain_id} (nonce {nonce})")
    return HexStr(to_hex(signed.raw_transaction))
