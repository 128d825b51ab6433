"""Signature utilities for walletkit."""

from ..crypto.keys import PrivateKey
from ..exceptions import CryptoError
from ..types.transaction import SigHashType

__all__ = [
    "sign_transaction",
]


def sign_transaction(
    private_key: PrivateKey,
    sighash: bytes,
    sighash_type: int = SigHashType.ALL
) -> bytes:
    """
    Sign transaction sighash.
    
    Args:
        private_key: Private key to sign with
        sighash: Transaction sighash (32 bytes)
        sighash_type: Signature hash type
        
    Returns:
        DER-encoded signature with sighash type appended
        
    Raises:
        CryptoError: If the signature does not verify against the key
    """
    if len(sighash) != 32:
        raise ValueError("Sighash must be 32 bytes")
        
    signature = private_key.sign(sighash)
    if not private_key.public_key().verify(signature, sighash):
        raise CryptoError("Signature failed verification against its own key")
    
    return signature + bytes([sighash_type])
