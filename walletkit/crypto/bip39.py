"""BIP39 mnemonic handling for walletkit."""

import logging
import secrets

from mnemonic import Mnemonic

from ..exceptions import InternalValidationError, InvalidMnemonicError, InvalidParameterError

__all__ = ["generate_mnemonic", "is_mnemonic_valid", "mnemonic_to_seed"]

logger = logging.getLogger(__name__)

MIN_WORDS = 12
MAX_WORDS = 24

_codec = Mnemonic("english")


def _normalize(mnemonic: str) -> str:
    return " ".join(mnemonic.split())


def generate_mnemonic(length: int = 12) -> str:
    """
    Generate BIP39 mnemonic phrase.
    
    Args:
        length: Word count, 12 to 24 and a multiple of 3
        
    Returns:
        Space separated mnemonic phrase
        
    Raises:
        InvalidParameterError: If length is out of range
        InternalValidationError: If the generated phrase fails its self check
    """
    if length < MIN_WORDS or length > MAX_WORDS or length % 3:
        raise InvalidParameterError(
            "Invalid word length: it must be between 12 and 24, and multiple of 3"
        )
        
    # 11 bits per word, one checksum bit per 3 words
    entropy_bits = length * 11 - length // 3
    entropy = secrets.token_bytes(entropy_bits // 8)
    mnemonic = _codec.to_mnemonic(entropy)
    
    if not is_mnemonic_valid(mnemonic):
        raise InternalValidationError("Internal validation (mnemonic) has failed.")
        
    return mnemonic


def is_mnemonic_valid(mnemonic: str) -> bool:
    """Check wordlist membership and checksum. Never raises."""
    try:
        return _codec.check(_normalize(mnemonic))
    except (ValueError, TypeError, LookupError, AttributeError) as e:
        logger.debug(f"Mnemonic rejected: {e}")
        return False


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """
    Convert mnemonic to 64-byte seed using PBKDF2-HMAC-SHA512.
    
    Raises:
        InvalidMnemonicError: If the phrase does not validate
    """
    if not is_mnemonic_valid(mnemonic):
        raise InvalidMnemonicError("Mnemonic is not valid.")
        
    return Mnemonic.to_seed(_normalize(mnemonic), passphrase)
