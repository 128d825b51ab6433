"""Main walletkit client."""

import logging
from typing import Any, Callable, Optional, Sequence, TypeVar

from .constants import AddressType, Coin, Network
from .crypto import bip39
from .exceptions import UpstreamResolutionError, WalletError
from .modules import hd
from .modules.evm import sign_evm_transaction
from .modules.utxo import UTXOModule
from .providers import LedgerProvider
from .types.result import Err, Ok, Result
from .types.wallet import TransactionReceiver, UTXOReference
from .utils.validation import (
    Amount,
    is_valid_address,
    is_valid_private_key,
    strip_whitespace,
)

__all__ = ["WalletKit"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _strip(value: Any) -> Any:
    return strip_whitespace(value) if isinstance(value, str) else value


class WalletKit:
    """
    Entry point for all wallet operations.
    
    Generating and signing methods return ``Ok(value)`` or ``Err(error)``
    instead of raising; ``is_*`` methods return a bool. Only
    :meth:`sign_utxo_transaction` touches the network, through the
    ledger provider given here.
    """
    
    def __init__(self, provider: Optional[LedgerProvider] = None) -> None:
        """
        Initialize walletkit client.
        
        Args:
            provider: Ledger provider for UTXO previous-output lookups
        """
        self._provider = provider
        self._utxo = UTXOModule(provider) if provider is not None else None
        
        logger.info(
            f"Initialized WalletKit with "
            f"{provider.__class__.__name__ if provider else 'no provider'}"
        )
        
    @property
    def provider(self) -> Optional[LedgerProvider]:
        """Get current provider."""
        return self._provider
        
    @staticmethod
    def _capture(operation: str, func: Callable[..., T], *args: Any) -> Result[T]:
        try:
            return Ok(func(*args))
        except WalletError as e:
            logger.debug(f"{operation} failed: {e}")
            return Err(e)
            
    # Mnemonic
    def generate_mnemonic(self, length: int = 12) -> Result[str]:
        """Generate a BIP39 mnemonic of ``length`` words."""
        return self._capture("generate_mnemonic", bip39.generate_mnemonic, length)
        
    def is_mnemonic_valid(self, mnemonic: str) -> bool:
        return bip39.is_mnemonic_valid(mnemonic)
        
    # HD
    def generate_extended_public_key(
        self,
        network: Network,
        address_type: AddressType,
        mnemonic: str,
    ) -> Result[str]:
        """Account external-chain xpub for ``mnemonic``."""
        return self._capture(
            "generate_extended_public_key",
            hd.generate_extended_public_key,
            network,
            address_type,
            mnemonic,
        )
        
    def is_extended_public_key_valid(self, network: Network, xpub: str) -> bool:
        return hd.is_extended_public_key_valid(network, _strip(xpub))
        
    def generate_address(
        self,
        network: Network,
        address_type: AddressType,
        xpub: str,
        index: int,
    ) -> Result[str]:
        """Address at ``index`` under ``xpub``."""
        return self._capture(
            "generate_address",
            hd.generate_address,
            network,
            address_type,
            _strip(xpub),
            index,
        )
        
    def generate_private_key(
        self,
        network: Network,
        address_type: AddressType,
        mnemonic: str,
        index: int,
    ) -> Result[str]:
        """Private key at ``index`` (WIF for BTC/LTC, 0x-hex for ETH)."""
        return self._capture(
            "generate_private_key",
            hd.generate_private_key,
            network,
            address_type,
            mnemonic,
            index,
        )
        
    # Codec checks
    def is_address_valid(self, network: Network, address: str) -> bool:
        return is_valid_address(network, _strip(address))
        
    def is_private_key_valid(self, network: Network, key: str) -> bool:
        return is_valid_private_key(network, _strip(key))
        
    # Transactions
    async def sign_utxo_transaction(
        self,
        coin: Coin,
        network: Network,
        utxos: Sequence[UTXOReference],
        receivers: Sequence[TransactionReceiver],
    ) -> Result[str]:
        """
        Build and sign a BTC/LTC transaction.
        
        Returns:
            ``Ok(hex)`` or ``Err`` carrying the first failure
        """
        if self._utxo is None:
            return Err(UpstreamResolutionError("No ledger provider configured"))
        try:
            return Ok(await self._utxo.sign_transaction(coin, network, utxos, receivers))
        except WalletError as e:
            logger.debug(f"sign_utxo_transaction failed: {e}")
            return Err(e)
            
    def sign_evm_transaction(
        self,
        network: Network,
        from_private_key: str,
        to_address: str,
        amount: Amount,
        coin: Coin,
        nonce: int,
        gas_price: int,
        gas_limit: int,
    ) -> Result[str]:
        """Sign an ETH or ERC-20 transfer; ``Ok`` carries ``0x``-prefixed hex."""
        return self._capture(
            "sign_evm_transaction",
            sign_evm_transaction,
            network,
            from_private_key,
            to_address,
            amount,
            coin,
            nonce,
            gas_price,
            gas_limit,
        )
        
    # Provider management
    async def connect(self) -> None:
        """Connect to provider."""
        if self._provider is not None:
            await self._provider.connect()
            
    async def disconnect(self) -> None:
        """Disconnect from provider."""
        if self._provider is not None:
            await self._provider.disconnect()
            
    async def __aenter__(self) -> "WalletKit":
        """Async context manager entry."""
        await self.connect()
        return self
        
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.disconnect()
        
    def __repr__(self) -> str:
        return f"<WalletKit provider={self._provider!r}>"
