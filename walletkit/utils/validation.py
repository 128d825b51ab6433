"""Validation utilities for walletkit."""

import logging
import re
from decimal import (
    ROUND_DOWN,
    Context,
    Decimal,
    DecimalException,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
)
from typing import Tuple, Union

from ..constants import Coin, CoinType, Network
from ..crypto.hd import deserialize_extended_key
from ..crypto.keys import PrivateKey
from ..exceptions import (
    InvalidAddressError,
    InvalidAmountError,
    InvalidInputError,
    InvalidPrivateKeyError,
    ValidationError,
)
from ..types.common import BaseUnits
from ..types.wallet import TransactionReceiver, UTXOReference
from ..utils.encoding import decode_address

__all__ = [
    "strip_whitespace",
    "is_valid_address",
    "validate_address",
    "is_valid_private_key",
    "decode_private_key",
    "is_valid_extended_public_key",
    "to_decimal",
    "truncate_amount",
    "require_exact_scale",
    "to_base_units",
    "validate_utxo",
    "validate_receiver",
    "validate_evm_amount",
]

logger = logging.getLogger(__name__)

# Regex patterns
HEX_PATTERN = re.compile(r"[0-9a-fA-F]*")
ETH_ADDRESS_LENGTH = 42

# Wide enough for 18-decimal amounts of any realistic size
_DECIMAL_CONTEXT = Context(prec=78, rounding=ROUND_DOWN)
_EXACT_CONTEXT = Context(prec=78, rounding=ROUND_DOWN, traps=[DivisionByZero, Inexact, InvalidOperation, Overflow])

Amount = Union[Decimal, int, str, float]


def strip_whitespace(value: str) -> str:
    """Remove every whitespace character, not only the ends."""
    return "".join(value.split())


def is_valid_address(network: Network, address: str) -> bool:
    """
    Check if address format is valid for the network.
    
    ETH addresses get a syntactic check only (``0x`` + 40 hex chars, any
    case); no EIP-55 checksum is enforced.
    
    Returns:
        True if valid, False otherwise
    """
    if not isinstance(address, str):
        return False

    if network.coin_type == CoinType.ETH:
        return (
            len(address) == ETH_ADDRESS_LENGTH
            and address[:2] == "0x"
            and bool(HEX_PATTERN.fullmatch(address[2:]))
        )

    try:
        decode_address(address, network)
        return True
    except ValidationError as e:
        logger.debug(f"Address rejected for {network.value}: {e}")
        return False


def validate_address(network: Network, address: str) -> str:
    """
    Validate address and return normalized form.
    
    Raises:
        InvalidAddressError: If address is invalid
    """
    address = strip_whitespace(address)
    if not is_valid_address(network, address):
        raise InvalidAddressError(f"Address {address} is invalid for {network.value}.")
    return address


def decode_private_key(network: Network, key: str) -> Tuple[PrivateKey, bool]:
    """
    Decode an encoded private key.
    
    ETH keys are ``0x``-prefixed hex; BTC/LTC keys are WIF.
    
    Returns:
        Tuple of (private_key, is_compressed)
        
    Raises:
        InvalidPrivateKeyError: If the key does not decode for the network
    """
    try:
        if network.coin_type == CoinType.ETH:
            key = key.lower()
            if not key.startswith("0x") or not HEX_PATTERN.fullmatch(key[2:]):
                raise ValidationError("Private key must be 0x-prefixed hex")
            return PrivateKey(bytes.fromhex(key[2:])), True
        return PrivateKey.from_wif(key, network)
    except (ValidationError, ValueError) as e:
        raise InvalidPrivateKeyError(f"Private key is invalid for {network.value}: {e}") from e


def is_valid_private_key(network: Network, key: str) -> bool:
    """Check if private key decodes for the network. Never raises."""
    if not isinstance(key, str):
        return False
    try:
        decode_private_key(network, key)
        return True
    except InvalidPrivateKeyError as e:
        logger.debug(str(e))
        return False


def is_valid_extended_public_key(network: Network, xpub: str) -> bool:
    """True only for an extended key that decodes and holds no private key."""
    if not isinstance(xpub, str):
        return False
    try:
        return deserialize_extended_key(xpub, network).is_public_only
    except ValidationError as e:
        logger.debug(f"Extended key rejected for {network.value}: {e}")
        return False


def to_decimal(amount: Amount) -> Decimal:
    """
    Convert amount to Decimal.
    
    Raises:
        InvalidAmountError: If conversion fails or the value is not finite
    """
    try:
        if isinstance(amount, float):
            amount = str(amount)
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidAmountError(f"Invalid amount: {amount}") from e

    if not value.is_finite():
        raise InvalidAmountError(f"Invalid amount: {amount}")
    return value


def _quantize(amount: Amount, coin: Coin) -> Tuple[Decimal, Decimal]:
    """Normalized amount and its value rounded toward zero to the coin's scale."""
    value = to_decimal(amount)
    try:
        value = value.normalize(_DECIMAL_CONTEXT)
        return value, value.quantize(coin.min_value, rounding=ROUND_DOWN, context=_DECIMAL_CONTEXT)
    except DecimalException as e:
        raise InvalidAmountError(f"Amount {amount} is too large for {coin.code}") from e


def truncate_amount(amount: Amount, coin: Coin) -> Decimal:
    """
    Strip trailing zeros and round toward zero to the coin's scale.
    
    Raises:
        InvalidAmountError: If the amount is not a number or too large to represent
    """
    _, quantized = _quantize(amount, coin)
    return quantized


def require_exact_scale(amount: Amount, coin: Coin) -> Decimal:
    """
    Strip trailing zeros and require the amount to fit the coin's scale.
    
    Raises:
        InvalidAmountError: If the amount has more fractional digits than the coin
    """
    value, quantized = _quantize(amount, coin)
    if quantized != value:
        raise InvalidAmountError(
            f"Invalid amount scale: {amount} has more than {coin.scale} decimals for {coin.code}."
        )
    return quantized


def _require_minimum(amount: Decimal, coin: Coin, label: str) -> None:
    if amount < coin.min_value:
        raise InvalidAmountError(
            f"{label} {amount} is less than min {coin.min_value} {coin.code}."
        )


def to_base_units(amount: Decimal, coin: Coin) -> BaseUnits:
    """
    Exact integer amount in the coin's smallest unit.
    
    Raises:
        InvalidAmountError: If the amount is not a whole number of units
    """
    try:
        units = _EXACT_CONTEXT.divide(to_decimal(amount), coin.min_value)
        integral = units.to_integral_value(context=_DECIMAL_CONTEXT)
    except DecimalException as e:
        raise InvalidAmountError(f"Amount {amount} is too large for {coin.code}") from e
    if units != integral:
        raise InvalidAmountError(f"Amount {amount} is not a whole number of {coin.code} units")
    return BaseUnits(int(units))


def validate_utxo(network: Network, utxo: UTXOReference) -> Tuple[UTXOReference, PrivateKey, bool]:
    """
    Normalize one UTXO reference.
    
    Returns:
        Tuple of (normalized reference, private key, is_compressed)
        
    Raises:
        InvalidInputError: If the hash is empty or the index negative
        InvalidPrivateKeyError: If the key does not decode for the network
    """
    tx_hash = strip_whitespace(utxo.tx_hash)
    if not tx_hash:
        raise InvalidInputError("Invalid UTXO txHash.")
    if utxo.index < 0:
        raise InvalidInputError(f"Invalid UTXO index {utxo.index} for TxId={tx_hash}.")

    try:
        private_key, compressed = decode_private_key(network, strip_whitespace(utxo.private_key))
    except InvalidPrivateKeyError as e:
        raise InvalidPrivateKeyError(
            f"Sender's private key for TxId={tx_hash} Index={utxo.index} is invalid."
        ) from e

    normalized = UTXOReference(tx_hash=tx_hash, index=utxo.index, private_key=utxo.private_key)
    return normalized, private_key, compressed


def validate_receiver(network: Network, coin: Coin, receiver: TransactionReceiver) -> TransactionReceiver:
    """
    Normalize one receiver; the amount is truncated to the coin's scale.
    
    Raises:
        InvalidAddressError: If the address is invalid for the network
        InvalidAmountError: If the truncated amount is below the coin minimum
            or above the network money supply
    """
    address = strip_whitespace(receiver.address)
    if not is_valid_address(network, address):
        raise InvalidAddressError(f"Receiver's address {address} is invalid.")

    amount = truncate_amount(receiver.amount, coin)
    _require_minimum(amount, coin, "Receiver's amount")
    if to_base_units(amount, coin) > network.params.max_money:
        raise InvalidAmountError(f"Receiver's amount {amount} exceeds the {coin.code} money supply.")
    return TransactionReceiver(address=address, amount=amount)


def validate_evm_amount(amount: Amount, coin: Coin) -> Decimal:
    """Exact-scale amount at or above the coin minimum."""
    value = require_exact_scale(amount, coin)
    _require_minimum(value, coin, "Amount")
    return value
