"""Key management for walletkit."""

from typing import Tuple, Union

from coincurve import PrivateKey as SecpPrivateKey, PublicKey as SecpPublicKey
from eth_utils import to_checksum_address

from ..constants import Network, SECP256K1_N
from ..exceptions import CryptoError, ValidationError
from ..types.common import PrivateKeyBytes, PublicKeyBytes
from ..utils.encoding import (
    hash160,
    keccak256,
    encode_base58_check,
    decode_base58_check,
    encode_address,
    hex_to_bytes,
)

__all__ = ["PrivateKey", "PublicKey"]


def _validate_secret(key: Union[bytes, str]) -> bytes:
    if isinstance(key, str):
        key = hex_to_bytes(key)
        
    if len(key) != 32:
        raise ValidationError(f"Private key must be 32 bytes, got {len(key)}")
        
    key_int = int.from_bytes(key, "big")
    if key_int == 0:
        raise ValidationError("Private key cannot be zero")
    if key_int >= SECP256K1_N:
        raise ValidationError("Private key exceeds curve order")
        
    return key


class PrivateKey:
    """
    secp256k1 private key wrapper.
    
    Handles signing, public key derivation and the WIF / hex export
    formats used by the supported chains.
    """
    
    def __init__(self, key: Union[bytes, str, "PrivateKey"]) -> None:
        """
        Initialize private key.
        
        Args:
            key: Private key as 32 bytes, hex string, or another PrivateKey
            
        Raises:
            ValidationError: If key format is invalid
        """
        if isinstance(key, PrivateKey):
            self._secret = key._secret
            self._key = key._key
            return
            
        self._secret = PrivateKeyBytes(_validate_secret(key))
        self._key = SecpPrivateKey(self._secret)
            
    @classmethod
    def from_wif(cls, wif: str, network: Network) -> Tuple["PrivateKey", bool]:
        """
        Import private key from WIF.
        
        Args:
            wif: Wallet Import Format string
            network: Network whose WIF version byte must match
            
        Returns:
            Tuple of (private_key, is_compressed)
            
        Raises:
            ValidationError: If WIF is invalid for the network
        """
        try:
            data = decode_base58_check(wif)
        except ValidationError as e:
            raise ValidationError(f"Invalid WIF format: {e}") from e
            
        if len(data) not in (33, 34):
            raise ValidationError(f"Invalid WIF length: {len(data)}")
            
        version = data[0]
        if version != network.params.wif_version:
            raise ValidationError(f"WIF version {version:#04x} does not match {network.value}")
            
        key_bytes = data[1:33]
        if len(data) == 33:
            compressed = False
        else:
            compressed = data[33] == 0x01
            if not compressed:
                raise ValidationError(f"Invalid compression flag: {data[33]:#x}")
                
        return cls(key_bytes), compressed
        
    @property
    def secret(self) -> PrivateKeyBytes:
        """Get private key as bytes."""
        return self._secret
        
    def hex(self) -> str:
        """Get private key as hex string."""
        return self._secret.hex()
        
    def wif(self, network: Network, compressed: bool = True) -> str:
        """
        Export private key in Wallet Import Format.
        
        Args:
            network: Target network (selects the version byte)
            compressed: Mark the key as using compressed public keys
            
        Returns:
            WIF encoded private key
        """
        data = bytes([network.params.wif_version]) + self._secret
        if compressed:
            data += b"\x01"
            
        return encode_base58_check(data)
        
    def public_key(self, compressed: bool = True) -> "PublicKey":
        """
        Get corresponding public key.
        
        Args:
            compressed: Return compressed format
            
        Returns:
            PublicKey instance
        """
        serialized = self._key.public_key.format(compressed=compressed)
        return PublicKey(serialized)
        
    def sign(self, message_hash: bytes) -> bytes:
        """
        Sign 32-byte message hash (RFC 6979 nonce, low-S).
        
        Returns:
            DER-encoded signature
            
        Raises:
            CryptoError: If signing fails
        """
        if len(message_hash) != 32:
            raise ValueError("Message hash must be 32 bytes")
            
        try:
            return self._key.sign(message_hash, hasher=None)
        except ValueError as e:
            raise CryptoError(f"Signing failed: {e}") from e
            
    def __eq__(self, other: object) -> bool:
        """Check equality."""
        if not isinstance(other, PrivateKey):
            return False
        return self._secret == other._secret
        
    def __repr__(self) -> str:
        """String representation."""
        # Show first and last 4 chars of hex for security
        hex_str = self.hex()
        masked = f"{hex_str[:4]}...{hex_str[-4:]}"
        return f"PrivateKey({masked})"


class PublicKey:
    """
    secp256k1 public key wrapper.
    
    Handles address generation, verification, and point encodings.
    """
    
    def __init__(self, key: Union[bytes, str, "PublicKey"]) -> None:
        """
        Initialize public key.
        
        Args:
            key: SEC1 encoded point (33 or 65 bytes), hex string, or PublicKey
            
        Raises:
            ValidationError: If key format is invalid
        """
        if isinstance(key, PublicKey):
            self._point = key._point
            self._key = key._key
            return

        if isinstance(key, str):
            key = hex_to_bytes(key)
        if len(key) not in (33, 65):
            raise ValidationError(f"Public key must be 33 or 65 bytes, got {len(key)}")

        try:
            self._key = SecpPublicKey(key)
        except ValueError as e:
            raise ValidationError(f"Invalid public key: {e}") from e
        self._point = PublicKeyBytes(bytes(key))

    @property
    def compressed(self) -> bool:
        return len(self._point) == 33
            
    @property
    def point(self) -> PublicKeyBytes:
        """Get public key in its original encoding."""
        return self._point

    def format(self, compressed: bool = True) -> PublicKeyBytes:
        """Re-encode the point compressed (33 bytes) or uncompressed (65 bytes)."""
        return PublicKeyBytes(self._key.format(compressed=compressed))
        
    def hex(self) -> str:
        """Get public key as hex string."""
        return self.point.hex()
        
    def hash160(self) -> bytes:
        """Get HASH160 of public key."""
        return hash160(self.point)

    def tweak_add(self, tweak: bytes) -> "PublicKey":
        """
        Return ``self + tweak*G`` in compressed form.
        
        Raises:
            CryptoError: If the tweak is out of range or yields infinity
        """
        try:
            return PublicKey(self._key.add(tweak).format(compressed=True))
        except ValueError as e:
            raise CryptoError(f"Public key tweak failed: {e}") from e
        
    def p2pkh_address(self, network: Network) -> str:
        """Get Pay-to-PubKey-Hash address."""
        return encode_address("p2pkh", self.hash160(), network)
        
    def p2wpkh_address(self, network: Network) -> str:
        """
        Get Pay-to-Witness-PubKey-Hash (SegWit) address.
            
        Raises:
            ValidationError: If public key is not compressed
        """
        if not self.compressed:
            raise ValidationError("SegWit requires compressed public keys")
            
        return encode_address("p2wpkh", self.hash160(), network)

    def eth_address(self) -> str:
        """
        Get EIP-55 checksummed account address.
        
        keccak256 of the uncompressed point without its 0x04 prefix,
        last 20 bytes.
        """
        digest = keccak256(self.format(compressed=False)[1:])
        return to_checksum_address("0x" + digest[-20:].hex())
        
    def verify(self, signature: bytes, message_hash: bytes) -> bool:
        """
        Verify signature.
        
        Args:
            signature: DER-encoded signature
            message_hash: 32-byte message hash
            
        Returns:
            True if signature is valid
        """
        if len(message_hash) != 32:
            return False
            
        try:
            return self._key.verify(signature, message_hash, hasher=None)
        except ValueError:
            return False
            
    def __eq__(self, other: object) -> bool:
        """Check equality."""
        if not isinstance(other, PublicKey):
            return False
        return self.point == other.point
        
    def __repr__(self) -> str:
        """String representation."""
        return f"PublicKey({self.hex()})"
