"""Common type definitions for walletkit."""

from typing import NewType

__all__ = [
    "HexStr",
    "BaseUnits",
    "TxId",
    "Address",
    "PrivateKeyBytes",
    "PublicKeyBytes",
]

# Basic types
HexStr = NewType("HexStr", str)
"""Hexadecimal string representation."""

BaseUnits = NewType("BaseUnits", int)
"""Amount in the chain's smallest integer unit (satoshi, litoshi, wei)."""

# Identifiers
TxId = NewType("TxId", str)
"""Transaction ID (hash), big-endian hex as shown by explorers."""

Address = NewType("Address", str)
"""Chain-specific address string."""

# Crypto types
PrivateKeyBytes = NewType("PrivateKeyBytes", bytes)
"""32-byte private key."""

PublicKeyBytes = NewType("PublicKeyBytes", bytes)
"""33 or 65 byte public key."""
