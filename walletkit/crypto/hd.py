"""Hierarchical Deterministic key derivation for walletkit."""

import hmac
import hashlib
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from ..constants import HARDENED_OFFSET, SECP256K1_N, Network
from ..crypto.keys import PrivateKey, PublicKey
from ..exceptions import CryptoError, ValidationError
from ..utils.encoding import encode_base58_check, decode_base58_check, hash160

__all__ = [
    "DerivationPath",
    "HDNode",
    "serialize_extended_key",
    "deserialize_extended_key",
]

EXTENDED_KEY_LENGTH = 78


@dataclass(frozen=True)
class DerivationPath:
    """
    Ordered ``(index, hardened)`` segments below the master node.
    
    Hardened segments are sent on the wire as ``index + 2^31``.
    """
    segments: Tuple[Tuple[int, bool], ...] = ()

    @classmethod
    def master(cls) -> "DerivationPath":
        return cls()

    def extend(self, index: int, hardened: bool = False) -> "DerivationPath":
        """Return a new path with one more segment."""
        if not 0 <= index < HARDENED_OFFSET:
            raise ValidationError(f"Child index out of range: {index}")
        return DerivationPath(self.segments + ((index, hardened),))

    @property
    def indices(self) -> Iterator[int]:
        for index, hardened in self.segments:
            yield index + HARDENED_OFFSET if hardened else index

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        parts = ["m"]
        parts.extend(f"{index}'" if hardened else str(index) for index, hardened in self.segments)
        return "/".join(parts)


class HDNode:
    """HD wallet node (BIP32)."""
    
    def __init__(
        self,
        private_key: Optional[bytes],
        public_key: bytes,
        chain_code: bytes,
        depth: int = 0,
        parent_fingerprint: bytes = b'\x00\x00\x00\x00',
        index: int = 0,
    ):
        self.private_key = private_key
        self.public_key = public_key
        self.chain_code = chain_code
        self.depth = depth
        self.parent_fingerprint = parent_fingerprint
        self.index = index
        
    @classmethod
    def from_seed(cls, seed: bytes) -> "HDNode":
        """Create master node from seed."""
        if len(seed) < 16 or len(seed) > 64:
            raise ValidationError("Seed must be between 16 and 64 bytes")
            
        h = hmac.new(b"Bitcoin seed", seed, hashlib.sha512).digest()
        
        private_key_bytes = h[:32]
        chain_code = h[32:]
        
        key_int = int.from_bytes(private_key_bytes, 'big')
        if key_int == 0 or key_int >= SECP256K1_N:
            raise CryptoError("Invalid master key")
        
        public_key = PrivateKey(private_key_bytes).public_key(compressed=True).point
        
        return cls(
            private_key=private_key_bytes,
            public_key=public_key,
            chain_code=chain_code,
        )

    @property
    def is_public_only(self) -> bool:
        return self.private_key is None

    @property
    def fingerprint(self) -> bytes:
        """First 4 bytes of HASH160 of the public key."""
        return hash160(self.public_key)[:4]
        
    def derive(self, index: int) -> "HDNode":
        """
        Derive child node.
        
        Args:
            index: Wire child number; values >= 2^31 are hardened
            
        Raises:
            CryptoError: On hardened derivation from a public-only node
        """
        if index >= HARDENED_OFFSET:
            if self.private_key is None:
                raise CryptoError("Cannot do hardened derivation without private key")
            data = b'\x00' + self.private_key + index.to_bytes(4, 'big')
        else:
            data = self.public_key + index.to_bytes(4, 'big')
            
        h = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        
        tweak = h[:32]
        child_chain_code = h[32:]
        tweak_int = int.from_bytes(tweak, 'big')

        # BIP32: an invalid child is skipped in favour of the next index
        if tweak_int >= SECP256K1_N:
            return self.derive(index + 1)
        
        if self.private_key is not None:
            parent_key_int = int.from_bytes(self.private_key, 'big')
            child_private_int = (parent_key_int + tweak_int) % SECP256K1_N
            
            if child_private_int == 0:
                return self.derive(index + 1)
                
            child_private_key = child_private_int.to_bytes(32, 'big')
            child_public_key = PrivateKey(child_private_key).public_key(compressed=True).point
        else:
            child_private_key = None
            try:
                child_public_key = PublicKey(self.public_key).tweak_add(tweak).point
            except CryptoError:
                return self.derive(index + 1)
        
        return HDNode(
            private_key=child_private_key,
            public_key=child_public_key,
            chain_code=child_chain_code,
            depth=self.depth + 1,
            parent_fingerprint=self.fingerprint,
            index=index,
        )
        
    def derive_path(self, path: DerivationPath) -> "HDNode":
        """Derive every segment of ``path`` starting from this node."""
        node = self
        for index in path.indices:
            node = node.derive(index)
        return node

    def neuter(self) -> "HDNode":
        """Public-only copy of this node."""
        return HDNode(
            private_key=None,
            public_key=self.public_key,
            chain_code=self.chain_code,
            depth=self.depth,
            parent_fingerprint=self.parent_fingerprint,
            index=self.index,
        )
        
    def get_private_key(self) -> PrivateKey:
        """Get private key object."""
        if self.private_key is None:
            raise CryptoError("This is a public-only node")
        return PrivateKey(self.private_key)

    def get_public_key(self) -> PublicKey:
        return PublicKey(self.public_key)


def serialize_extended_key(node: HDNode, version: int) -> str:
    """
    Serialize node as a Base58Check extended key.
    
    The key payload is ``0x00 || private key`` when ``node`` holds private
    material, the compressed public key otherwise.
    """
    if node.private_key is not None:
        key_data = b'\x00' + node.private_key
    else:
        key_data = node.public_key

    payload = (
        version.to_bytes(4, 'big')
        + bytes([node.depth])
        + node.parent_fingerprint
        + node.index.to_bytes(4, 'big')
        + node.chain_code
        + key_data
    )
    return encode_base58_check(payload)


def deserialize_extended_key(extended_key: str, network: Network) -> HDNode:
    """
    Parse an extended public or private key issued for ``network``.
    
    Raises:
        ValidationError: If the string, its header or its key data is invalid
    """
    payload = decode_base58_check(extended_key)
    if len(payload) != EXTENDED_KEY_LENGTH:
        raise ValidationError(f"Invalid extended key length: {len(payload)}")

    params = network.params
    version = int.from_bytes(payload[0:4], 'big')
    depth = payload[4]
    parent_fingerprint = payload[5:9]
    index = int.from_bytes(payload[9:13], 'big')
    chain_code = payload[13:45]
    key_data = payload[45:78]

    if depth == 0 and (parent_fingerprint != b'\x00' * 4 or index != 0):
        raise ValidationError("Master extended key with non-zero parent data")

    if version in params.private_headers:
        if key_data[0] != 0:
            raise ValidationError("Extended private key must start with 0x00")
        private_key = PrivateKey(key_data[1:])
        public_key = private_key.public_key(compressed=True).point
        return HDNode(private_key.secret, public_key, chain_code, depth, parent_fingerprint, index)

    if version in params.public_headers:
        if key_data[0] not in (0x02, 0x03):
            raise ValidationError("Extended public key must hold a compressed point")
        public_key = PublicKey(key_data).point
        return HDNode(None, public_key, chain_code, depth, parent_fingerprint, index)

    raise ValidationError(f"Unknown extended key version {version:#010x} for {network.value}")
