import pytest

from walletkit.crypto.keys import PrivateKey, PublicKey
from walletkit.crypto.signature import sign_transaction
from walletkit.constants import Network
from walletkit.exceptions import ValidationError
from walletkit.utils.encoding import double_sha256


SECRET = "0c28fca386c7a227600b2fe50b7cae11ec86d3bf1fbe471be89827e19d72aa1d"
ONE = (1).to_bytes(32, "big")


def test_private_key_wif_export():
    key = PrivateKey(SECRET)
    assert key.wif(Network.BTC_MAINNET, compressed=False) == "5HueCGU8rMjxEXxiPuD5BDku4MkFqeZyd4dZ1jvhTVqvbTLvyTJ"
    assert key.wif(Network.BTC_MAINNET) == "KwdMAjGmerYanjeui5SHS7JkmpZvVipYvB2LJGU1ZxJwYvP98617"


def test_private_key_wif_roundtrip():
    key = PrivateKey((5).to_bytes(32, "big"))
    wif = key.wif(Network.LTC_TESTNET, compressed=True)
    imported, compressed = PrivateKey.from_wif(wif, Network.LTC_TESTNET)
    assert compressed is True
    assert imported == key


def test_from_wif_rejects_other_network():
    wif = PrivateKey(SECRET).wif(Network.BTC_MAINNET)
    with pytest.raises(ValidationError):
        PrivateKey.from_wif(wif, Network.LTC_MAINNET)


def test_private_key_range():
    with pytest.raises(ValidationError):
        PrivateKey(bytes(32))
    with pytest.raises(ValidationError):
        PrivateKey(b"\xff" * 32)
    with pytest.raises(ValidationError):
        PrivateKey(b"\x01" * 31)


def test_repr_hides_secret():
    assert SECRET not in repr(PrivateKey(SECRET))


def test_public_key_addresses():
    pub = PrivateKey(ONE).public_key()
    assert pub.hex() == "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"
    assert pub.p2pkh_address(Network.BTC_MAINNET) == "1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH"
    assert pub.p2wpkh_address(Network.BTC_MAINNET) == "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"
    assert pub.p2wpkh_address(Network.BTC_TESTNET) == "tb1qw508d6qejxtdg4y5r3zarvary0c5xw7kxpjzsx"

    uncompressed = PrivateKey(ONE).public_key(compressed=False)
    assert not uncompressed.compressed
    assert uncompressed.p2pkh_address(Network.BTC_MAINNET) == "1EHNa6Q4Jz2uvNExL497mE43ikXhwF6kZm"


def test_eth_address():
    pub = PrivateKey(ONE).public_key()
    assert pub.eth_address() == "0x7E5F4552091A69125d5DfCb7b8C2659029395Bdf"
    # Derived from the point, not the encoding
    assert PrivateKey(ONE).public_key(compressed=False).eth_address() == pub.eth_address()


def test_sign_transaction_appends_sighash_byte():
    key = PrivateKey(SECRET)
    digest = double_sha256(b"message")
    signature = sign_transaction(key, digest)
    assert signature[-1] == 0x01
    assert key.public_key().verify(signature[:-1], digest)


def test_public_key_rejects_garbage():
    with pytest.raises(ValidationError):
        PublicKey(b"\x02" + b"\x00" * 10)
