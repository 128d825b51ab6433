import pytest
from walletkit.utils.encoding import (
    hex_to_bytes, encode_varint, decode_varint, hash160, keccak256,
    encode_base58, decode_base58, encode_base58_check, decode_base58_check,
    encode_bech32, decode_bech32, encode_bech32m, decode_bech32m,
    encode_address, decode_address, address_to_script_pubkey,
)
from walletkit.constants import Network
from walletkit.exceptions import ValidationError


def test_hex_to_bytes():
    assert hex_to_bytes("0x0001ff") == b"\x00\x01\xff"
    assert hex_to_bytes("dead") == b"\xde\xad"
    with pytest.raises(ValidationError):
        hex_to_bytes("zzzz")


def test_varint_roundtrip():
    for value in [0, 1, 252, 253, 65535, 65536, 2**32 + 1]:
        encoded = encode_varint(value)
        decoded, offset = decode_varint(encoded)
        assert decoded == value
        assert offset == len(encoded)


def test_base58_leading_zeros():
    payload = b"\x00\x00hello"
    encoded = encode_base58(payload)
    assert encoded.startswith("11")
    assert decode_base58(encoded) == payload


def test_base58check_rejects_bad_checksum():
    payload = b"test payload"
    enc = encode_base58_check(payload)
    assert decode_base58_check(enc) == payload
    tampered = enc[:-1] + ("2" if enc[-1] != "2" else "3")
    with pytest.raises(ValidationError):
        decode_base58_check(tampered)


def test_hashes():
    assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    pub = bytes.fromhex("0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798")
    assert hash160(pub).hex() == "751e76e8199196d454941c45d1b3a323f1433bd6"


def test_bech32_vectors():
    program = bytes.fromhex("751e76e8199196d454941c45d1b3a323f1433bd6")
    assert encode_bech32("bc", 0, program) == "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"
    assert decode_bech32("BC1QW508D6QEJXTDG4Y5R3ZARVARY0C5XW7KV8F3T4") == ("bc", 0, program)

    prog_m = b"\x02" * 32
    addr_m = encode_bech32m("bc", 1, prog_m)
    assert decode_bech32m(addr_m) == ("bc", 1, prog_m)
    # Bech32m checksum does not verify as Bech32
    with pytest.raises(ValidationError):
        decode_bech32(addr_m)


def test_bech32_rejects_mixed_case():
    with pytest.raises(ValidationError):
        decode_bech32("bc1qW508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4")


def test_encode_decode_address():
    hash20 = bytes.fromhex("11" * 20)
    hash32 = bytes.fromhex("22" * 32)

    for kind, payload in [("p2pkh", hash20), ("p2sh", hash20), ("p2wpkh", hash20),
                          ("p2wsh", hash32), ("p2tr", hash32)]:
        address = encode_address(kind, payload, Network.BTC_MAINNET)
        assert decode_address(address, Network.BTC_MAINNET) == (kind, payload)


def test_decode_address_checks_network():
    hash20 = bytes.fromhex("11" * 20)
    btc = encode_address("p2wpkh", hash20, Network.BTC_MAINNET)
    ltc = encode_address("p2wpkh", hash20, Network.LTC_MAINNET)
    assert ltc.startswith("ltc1q")
    with pytest.raises(ValidationError):
        decode_address(btc, Network.LTC_MAINNET)
    with pytest.raises(ValidationError):
        decode_address(encode_address("p2pkh", hash20, Network.BTC_TESTNET), Network.BTC_MAINNET)


def test_segwit_v0_must_use_bech32():
    program = bytes.fromhex("751e76e8199196d454941c45d1b3a323f1433bd6")
    wrong = encode_bech32m("bc", 0, program)
    with pytest.raises(ValidationError):
        decode_address(wrong, Network.BTC_MAINNET)


def test_address_to_script_pubkey():
    script = address_to_script_pubkey("bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4", Network.BTC_MAINNET)
    assert script.hex() == "0014751e76e8199196d454941c45d1b3a323f1433bd6"

    script = address_to_script_pubkey("1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH", Network.BTC_MAINNET)
    assert script.hex() == "76a914751e76e8199196d454941c45d1b3a323f1433bd688ac"

    p2sh = encode_address("p2sh", bytes(20), Network.BTC_MAINNET)
    assert address_to_script_pubkey(p2sh, Network.BTC_MAINNET).hex() == "a914" + "00" * 20 + "87"
