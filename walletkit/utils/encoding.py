"""Encoding and decoding utilities for walletkit."""

import hashlib
import struct
from typing import Tuple, List, Union

from Crypto.Hash import RIPEMD160, keccak

from ..constants import Network
from ..exceptions import ValidationError

__all__ = [
    "hex_to_bytes",
    "int_to_bytes",
    "encode_varint",
    "decode_varint",
    "sha256",
    "double_sha256",
    "hash160",
    "keccak256",
    "encode_base58",
    "decode_base58",
    "encode_base58_check",
    "decode_base58_check",
    "encode_bech32",
    "decode_bech32",
    "encode_bech32m",
    "decode_bech32m",
    "decode_address",
    "encode_address",
    "address_to_script_pubkey",
    "serialize_script",
]

# Constants
BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
BECH32_CONST = 1
BECH32M_CONST = 0x2BC830A3

OP_0 = 0x00
OP_1 = 0x51
OP_DUP = 0x76
OP_EQUAL = 0x87
OP_EQUALVERIFY = 0x88
OP_HASH160 = 0xA9
OP_CHECKSIG = 0xAC


def hex_to_bytes(hex_str: str) -> bytes:
    """
    Convert hex string to bytes.
    
    Args:
        hex_str: Hex string with or without 0x prefix
        
    Returns:
        Decoded bytes
        
    Raises:
        ValidationError: If hex string is invalid
    """
    try:
        if hex_str[:2].lower() == "0x":
            hex_str = hex_str[2:]
        return bytes.fromhex(hex_str)
    except ValueError as e:
        raise ValidationError(f"Invalid hex string: {hex_str}") from e


def int_to_bytes(
    value: int,
    length: int,
    byteorder: str = "big",
    signed: bool = False
) -> bytes:
    """Convert integer to bytes with specified length."""
    return value.to_bytes(length, byteorder=byteorder, signed=signed)


def encode_varint(n: int) -> bytes:
    """
    Encode integer as Bitcoin variable length integer.
    
    Args:
        n: Integer to encode
        
    Returns:
        Encoded varint bytes
    """
    if n < 0xfd:
        return bytes([n])
    elif n <= 0xffff:
        return b"\xfd" + struct.pack("<H", n)
    elif n <= 0xffffffff:
        return b"\xfe" + struct.pack("<I", n)
    else:
        return b"\xff" + struct.pack("<Q", n)


def decode_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Decode Bitcoin variable length integer.
    
    Args:
        data: Bytes containing varint
        offset: Starting position
        
    Returns:
        Tuple of (value, new_offset)
    """
    if data[offset] < 0xfd:
        return data[offset], offset + 1
    elif data[offset] == 0xfd:
        return struct.unpack_from("<H", data, offset + 1)[0], offset + 3
    elif data[offset] == 0xfe:
        return struct.unpack_from("<I", data, offset + 1)[0], offset + 5
    else:
        return struct.unpack_from("<Q", data, offset + 1)[0], offset + 9


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def double_sha256(data: bytes) -> bytes:
    """Perform double SHA256 hash."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """Perform RIPEMD160(SHA256(data))."""
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()


def keccak256(data: bytes) -> bytes:
    """Keccak-256 as used by Ethereum (not NIST SHA3-256)."""
    return keccak.new(digest_bits=256, data=data).digest()


def encode_base58(data: bytes) -> str:
    """
    Encode bytes as Base58 string.
    
    Args:
        data: Bytes to encode
        
    Returns:
        Base58 encoded string
    """
    n = int.from_bytes(data, "big")
    
    encoded = ""
    while n:
        n, remainder = divmod(n, 58)
        encoded = BASE58_ALPHABET[remainder] + encoded
        
    # Leading zero bytes map to '1'
    for byte in data:
        if byte == 0:
            encoded = "1" + encoded
        else:
            break
            
    return encoded


def decode_base58(string: str) -> bytes:
    """
    Decode Base58 string to bytes.
    
    Raises:
        ValidationError: If string contains invalid characters
    """
    n = 0
    for char in string:
        try:
            n = n * 58 + BASE58_ALPHABET.index(char)
        except ValueError:
            raise ValidationError(f"Invalid Base58 character: {char}")
            
    body = n.to_bytes((n.bit_length() + 7) // 8, "big")
        
    leading_zeros = len(string) - len(string.lstrip("1"))
    return b"\x00" * leading_zeros + body


def encode_base58_check(data: bytes) -> str:
    """Encode bytes as Base58Check (with checksum)."""
    checksum = double_sha256(data)[:4]
    return encode_base58(data + checksum)


def decode_base58_check(string: str) -> bytes:
    """
    Decode Base58Check string.
    
    Args:
        string: Base58Check string
        
    Returns:
        Decoded data (without checksum)
        
    Raises:
        ValidationError: If checksum is invalid
    """
    data = decode_base58(string)
    if len(data) < 4:
        raise ValidationError("Invalid Base58Check string: too short")
        
    payload, checksum = data[:-4], data[-4:]
    expected_checksum = double_sha256(payload)[:4]
    
    if checksum != expected_checksum:
        raise ValidationError("Invalid Base58Check checksum")
        
    return payload


def _bech32_polymod(values: List[int]) -> int:
    """Compute Bech32 checksum polymod."""
    generator = [0x3b6a57b2, 0x26508e6d, 0x1ea119fa, 0x3d4233dd, 0x2a1462b3]
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1ffffff) << 5 ^ value
        for i in range(5):
            chk ^= generator[i] if ((top >> i) & 1) else 0
    return chk


def _bech32_hrp_expand(hrp: str) -> List[int]:
    """Expand human-readable part for Bech32."""
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]


def _convert_bits(data: bytes | List[int], from_bits: int, to_bits: int, pad: bool) -> List[int]:
    """Regroup a bit stream, e.g. 8-bit bytes into 5-bit Bech32 symbols."""
    acc = 0
    bits = 0
    result = []
    max_value = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise ValidationError("Invalid value for bit conversion")
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((acc >> bits) & max_value)
    if pad:
        if bits:
            result.append((acc << (to_bits - bits)) & max_value)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & max_value):
        raise ValidationError("Invalid padding in Bech32 data")
    return result


def _encode_segwit(hrp: str, witver: int, witprog: bytes, const: int) -> str:
    values = [witver] + _convert_bits(witprog, 8, 5, pad=True)
    polymod = _bech32_polymod(_bech32_hrp_expand(hrp) + values + [0] * 6) ^ const
    checksum = [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
    return hrp + "1" + "".join(BECH32_CHARSET[v] for v in values + checksum)


def _decode_segwit(address: str, const: int) -> Tuple[str, int, bytes]:
    if address.lower() != address and address.upper() != address:
        raise ValidationError("Mixed case Bech32 string")
    address = address.lower()
    if len(address) > 90:
        raise ValidationError("Bech32 string too long")

    pos = address.rfind("1")
    if pos < 1 or pos + 7 > len(address):
        raise ValidationError("Invalid Bech32 address: no separator")
        
    hrp = address[:pos]
    values = []
    for char in address[pos + 1:]:
        try:
            values.append(BECH32_CHARSET.index(char))
        except ValueError:
            raise ValidationError(f"Invalid Bech32 character: {char}")
            
    if _bech32_polymod(_bech32_hrp_expand(hrp) + values) != const:
        raise ValidationError("Invalid Bech32 checksum")
        
    data = values[:-6]
    if not data:
        raise ValidationError("Empty Bech32 data")
    witver = data[0]
    witprog = bytes(_convert_bits(data[1:], 5, 8, pad=False))
    return hrp, witver, witprog


def encode_bech32(hrp: str, witver: int, witprog: bytes) -> str:
    """Encode a SegWit v0 address (BIP173)."""
    return _encode_segwit(hrp, witver, witprog, BECH32_CONST)


def decode_bech32(address: str) -> Tuple[str, int, bytes]:
    """
    Decode Bech32 address.
    
    Returns:
        Tuple of (hrp, witness_version, witness_program)
        
    Raises:
        ValidationError: If address is invalid
    """
    return _decode_segwit(address, BECH32_CONST)


def encode_bech32m(hrp: str, witver: int, witprog: bytes) -> str:
    """Encode a SegWit v1+ address (BIP350)."""
    return _encode_segwit(hrp, witver, witprog, BECH32M_CONST)


def decode_bech32m(address: str) -> Tuple[str, int, bytes]:
    """Decode Bech32m address into (hrp, witness_version, witness_program)."""
    return _decode_segwit(address, BECH32M_CONST)


def decode_address(address: str, network: Network) -> Tuple[str, bytes]:
    """
    Decode an address to its type and hash/program.
    
    Args:
        address: Base58Check or Bech32/Bech32m address
        network: Network whose version bytes and HRP must match
        
    Returns:
        Tuple of (address_type, hash_bytes)
        
    Raises:
        ValidationError: If address is invalid
    """
    params = network.params
    expected_hrp = params.bech32_hrp

    if address.lower().startswith(expected_hrp + "1"):
        try:
            try:
                hrp, witver, witprog = decode_bech32(address)
                if witver != 0:
                    raise ValidationError("SegWit v1+ requires Bech32m")
            except ValidationError:
                hrp, witver, witprog = decode_bech32m(address)
                if witver == 0:
                    raise ValidationError("SegWit v0 requires Bech32")
        except ValidationError as e:
            raise ValidationError(f"Invalid Bech32/Bech32m address: {e}") from e

        if hrp != expected_hrp:
            raise ValidationError(f"Wrong network: expected {expected_hrp}, got {hrp}")
        if witver == 0:
            if len(witprog) == 20:
                return "p2wpkh", witprog
            if len(witprog) == 32:
                return "p2wsh", witprog
        elif witver == 1 and len(witprog) == 32:
            return "p2tr", witprog
        raise ValidationError(
            f"Unsupported witness program: version {witver}, {len(witprog)} bytes"
        )

    try:
        decoded = decode_base58_check(address)
    except ValidationError as e:
        raise ValidationError(f"Invalid Base58 address: {e}") from e

    if len(decoded) != 21:
        raise ValidationError(f"Invalid address length: {len(decoded)}")

    version, hash_bytes = decoded[0], decoded[1:]
    if version == params.p2pkh_version:
        return "p2pkh", hash_bytes
    if version == params.p2sh_version:
        return "p2sh", hash_bytes
    raise ValidationError(f"Unknown address version for {network.value}: {version:#04x}")


def encode_address(address_type: str, hash_bytes: bytes, network: Network) -> str:
    """
    Encode hash as an address of the given network.
    
    Args:
        address_type: Type of address (p2pkh, p2sh, p2wpkh, p2wsh, p2tr)
        hash_bytes: Hash or witness program to encode
        network: Target network
        
    Raises:
        ValidationError: If parameters are invalid
    """
    params = network.params
    expected_length = {"p2pkh": 20, "p2sh": 20, "p2wpkh": 20, "p2wsh": 32, "p2tr": 32}
    if address_type not in expected_length:
        raise ValidationError(f"Unknown address type: {address_type}")
    if len(hash_bytes) != expected_length[address_type]:
        raise ValidationError(
            f"{address_type.upper()} requires {expected_length[address_type]}-byte hash"
        )

    if address_type == "p2pkh":
        return encode_base58_check(bytes([params.p2pkh_version]) + hash_bytes)
    if address_type == "p2sh":
        return encode_base58_check(bytes([params.p2sh_version]) + hash_bytes)
    if address_type == "p2tr":
        return encode_bech32m(params.bech32_hrp, 1, hash_bytes)
    return encode_bech32(params.bech32_hrp, 0, hash_bytes)


def address_to_script_pubkey(address: str, network: Network) -> bytes:
    """Build the locking script paying to ``address``."""
    address_type, program = decode_address(address, network)

    if address_type == "p2pkh":
        return serialize_script([OP_DUP, OP_HASH160, program, OP_EQUALVERIFY, OP_CHECKSIG])
    if address_type == "p2sh":
        return serialize_script([OP_HASH160, program, OP_EQUAL])
    if address_type == "p2tr":
        return serialize_script([OP_1, program])
    return serialize_script([OP_0, program])


def serialize_script(script_ops: List[Union[int, bytes]]) -> bytes:
    """
    Serialize script operations to bytes.
    
    Args:
        script_ops: List of opcodes (int) and data (bytes)
        
    Returns:
        Serialized script
    """
    result = bytearray()
    
    for op in script_ops:
        if isinstance(op, int):
            result.append(op)
        elif isinstance(op, bytes):
            if len(op) <= 75:
                result.append(len(op))
            elif len(op) <= 255:
                result.extend([0x4c, len(op)])  # OP_PUSHDATA1
            elif len(op) <= 65535:
                result.append(0x4d)  # OP_PUSHDATA2
                result.extend(struct.pack("<H", len(op)))
            else:
                result.append(0x4e)  # OP_PUSHDATA4
                result.extend(struct.pack("<I", len(op)))
            result.extend(op)
            
    return bytes(result)

