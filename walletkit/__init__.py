"""
walletkit

Multi-chain wallet primitives for BTC, LTC and ETH: BIP39 mnemonics,
BIP32/44 HD derivation, address and key codecs, and offline signing of
UTXO and EVM (ETH, ERC-20) transactions.
"""

from .client import WalletKit
from .constants import AddressType, Coin, CoinType, Network
from .exceptions import (
    WalletError,
    ValidationError,
    InvalidParameterError,
    InvalidInputError,
    InvalidMnemonicError,
    InvalidAddressError,
    InvalidPrivateKeyError,
    InvalidAmountError,
    UnsupportedError,
    UnsupportedAddressTypeError,
    UnsupportedNetworkError,
    TransactionError,
    UnsignableScriptError,
    InsufficientFundsError,
    ProviderError,
    UpstreamResolutionError,
    InternalValidationError,
)
from .providers import LedgerProvider, HTTPProvider, JSONRPCProvider
from .crypto import PrivateKey, PublicKey
from .types import Ok, Err, Result, UTXOReference, TransactionReceiver, RawTransaction

__version__ = "1.0.0"

__all__ = [
    # Main client
    "WalletKit",
    "connect",
    
    # Registry
    "AddressType",
    "Coin",
    "CoinType",
    "Network",
    
    # Providers
    "LedgerProvider",
    "HTTPProvider",
    "JSONRPCProvider",
    
    # Exceptions
    "WalletError",
    "ValidationError",
    "InvalidParameterError",
    "InvalidInputError",
    "InvalidMnemonicError",
    "InvalidAddressError",
    "InvalidPrivateKeyError",
    "InvalidAmountError",
    "UnsupportedError",
    "UnsupportedAddressTypeError",
    "UnsupportedNetworkError",
    "TransactionError",
    "UnsignableScriptError",
    "InsufficientFundsError",
    "ProviderError",
    "UpstreamResolutionError",
    "InternalValidationError",
    
    # Crypto
    "PrivateKey",
    "PublicKey",
    
    # Types
    "Ok",
    "Err",
    "Result",
    "UTXOReference",
    "TransactionReceiver",
    "RawTransaction",
]


def connect(provider: str = "http", **kwargs) -> WalletKit:
    """
    Create a client backed by a ledger provider.
    
    Args:
        provider: Provider type ('http' for Esplora REST, 'jsonrpc' for a node)
        **kwargs: Additional provider arguments
        
    Returns:
        WalletKit client instance
        
    Example:
        >>> kit = walletkit.connect()
        >>> kit = walletkit.connect("jsonrpc", endpoint="https://node.example/{coin}", api_key="...")
    """
    if provider == "http":
        provider_instance = HTTPProvider(**kwargs)
    elif provider == "jsonrpc":
        provider_instance = JSONRPCProvider(**kwargs)
    else:
        raise ValueError(f"Unknown provider type: {provider}")
        
    return WalletKit(provider=provider_instance)
