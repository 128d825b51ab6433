"""Base ledger provider interface for walletkit."""

from abc import ABC, abstractmethod
from typing import Optional
import logging

from ..constants import Network

__all__ = ["LedgerProvider"]

logger = logging.getLogger(__name__)


class LedgerProvider(ABC):
    """
    Abstract source of confirmed transactions.
    
    The UTXO engine only needs one thing from a chain: the raw bytes of
    the transaction that created each output being spent.
    """
    
    def __init__(self) -> None:
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        
    @abstractmethod
    async def fetch_transaction(self, network: Network, tx_hash: str) -> Optional[bytes]:
        """
        Fetch a raw transaction by id.
        
        Args:
            network: Network the transaction lives on
            tx_hash: Transaction id (hex)
            
        Returns:
            Raw transaction bytes, or None if the ledger does not know it
            
        Raises:
            ProviderError: If the lookup fails
        """
        raise NotImplementedError
        
    async def connect(self) -> None:
        """Acquire any underlying resources."""
        
    async def disconnect(self) -> None:
        """Release any underlying resources."""
        
    async def __aenter__(self) -> "LedgerProvider":
        """Async context manager entry."""
        await self.connect()
        return self
        
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.disconnect()
        
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
