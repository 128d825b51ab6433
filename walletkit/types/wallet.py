"""Caller-facing value objects for transaction building."""

from dataclasses import dataclass
from decimal import Decimal

__all__ = ["UTXOReference", "TransactionReceiver"]


@dataclass(frozen=True)
class UTXOReference:
    """An unspent output to consume, with the key that unlocks it."""
    tx_hash: str
    index: int
    private_key: str

    def __str__(self) -> str:
        return f"{self.tx_hash}:{self.index}"

    def __repr__(self) -> str:
        return f"UTXOReference(tx_hash={self.tx_hash!r}, index={self.index})"


@dataclass(frozen=True)
class TransactionReceiver:
    """Destination address and the exact decimal amount it receives."""
    address: str
    amount: Decimal
