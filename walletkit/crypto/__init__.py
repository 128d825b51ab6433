"""Cryptographic building blocks for walletkit."""

from ..crypto.keys import PrivateKey, PublicKey
from ..crypto.bip39 import generate_mnemonic, is_mnemonic_valid, mnemonic_to_seed
from ..crypto.hd import (
    DerivationPath,
    HDNode,
    serialize_extended_key,
    deserialize_extended_key,
)
from ..crypto.signature import sign_transaction

__all__ = [
    # Keys
    "PrivateKey",
    "PublicKey",

    # Mnemonic
    "generate_mnemonic",
    "is_mnemonic_valid",
    "mnemonic_to_seed",

    # HD
    "DerivationPath",
    "HDNode",
    "serialize_extended_key",
    "deserialize_extended_key",
    
    # Signatures
    "sign_transaction",
]
