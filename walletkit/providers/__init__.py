"""Ledger provider implementations for walletkit."""

from ..providers.base import LedgerProvider
from ..providers.http import HTTPProvider, JSONRPCProvider

__all__ = [
    "LedgerProvider",
    "HTTPProvider",
    "JSONRPCProvider",
]
