import pytest

from walletkit.constants import AddressType, Network
from walletkit.crypto.hd import DerivationPath, HDNode, deserialize_extended_key, serialize_extended_key
from walletkit.exceptions import (
    CryptoError,
    InvalidMnemonicError,
    InvalidParameterError,
    UnsupportedAddressTypeError,
    ValidationError,
)
from walletkit.modules import hd


ABANDON = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"
SEED = bytes.fromhex("000102030405060708090a0b0c0d0e0f")
XPUB = 0x0488B21E
XPRV = 0x0488ADE4


def test_bip32_master_vector():
    master = HDNode.from_seed(SEED)
    assert serialize_extended_key(master, XPRV) == (
        "xprv9s21ZrQH143K3QTDL4LXw2F7HEK3wJUD2nW2nRk4stbPy6cq3jPPqjiChkVvvNKmPGJxWUtg6LnF5kejMRNNU3TGtRBeJgk33yuGBxrMPHi"
    )
    assert serialize_extended_key(master.neuter(), XPUB) == (
        "xpub661MyMwAqRbcFtXgS5sYJABqqG9YLmC4Q1Rdap9gSE8NqtwybGhePY2gZ29ESFjqJoCu1Rupje8YtGqsefD265TMg7usUDFdp6W1EGMcet8"
    )


def test_bip32_child_vectors():
    path = DerivationPath.master().extend(0, hardened=True)
    child = HDNode.from_seed(SEED).derive_path(path)
    assert str(path) == "m/0'"
    assert serialize_extended_key(child.neuter(), XPUB) == (
        "xpub68Gmy5EdvgibQVfPdqkBBCHxA5htiqg55crXYuXoQRKfDBFA1WEjWgP6LHhwBZeNK1VTsfTFUHCdrfp1bgwQ9xv5ski8PX9rL2dZXvgGDnw"
    )
    # Non-hardened step from the public node matches private derivation
    assert serialize_extended_key(child.neuter().derive(1), XPUB) == (
        "xpub6ASuArnXKPbfEwhqN6e3mwBcDTgzisQN1wXN9BJcM47sSikHjJf3UFHKkNAWbWMiGj7Wf5uMash7SyYq527Hqck2AxYysAA7xmALppuCkwQ"
    )


def test_seed_length_is_checked():
    with pytest.raises(ValidationError):
        HDNode.from_seed(b"\x00" * 8)
    with pytest.raises(ValidationError):
        HDNode.from_seed(b"\x00" * 65)


def test_hardened_derivation_needs_private_key():
    public = HDNode.from_seed(SEED).neuter()
    with pytest.raises(CryptoError):
        public.derive(0x80000000)


def test_extended_key_roundtrip():
    node = HDNode.from_seed(SEED).derive(0x80000000)
    text = serialize_extended_key(node.neuter(), XPUB)
    parsed = deserialize_extended_key(text, Network.BTC_MAINNET)
    assert parsed.is_public_only
    assert parsed.public_key == node.public_key
    assert parsed.chain_code == node.chain_code
    assert parsed.depth == 1
    with pytest.raises(ValidationError):
        deserialize_extended_key(text, Network.BTC_TESTNET)


def test_derivation_path_rejects_out_of_range():
    with pytest.raises(ValidationError):
        DerivationPath.master().extend(2**31)
    with pytest.raises(ValidationError):
        DerivationPath.master().extend(-1)


def test_derive_path():
    assert str(hd.derive_path(AddressType.P2WPKH_NATIVE_SEGWIT, Network.BTC_MAINNET)) == "m/84'/0'/0'/0"
    assert str(hd.derive_path(AddressType.P2PKH_LEGACY, Network.LTC_MAINNET)) == "m/44'/2'/0'/0"
    assert str(hd.derive_path(AddressType.P2PKH_LEGACY, Network.ETH_MAINNET)) == "m/44'/60'/0'/0"
    assert str(hd.derive_path(AddressType.P2TR_TAPROOT, Network.BTC_TESTNET)) == "m/86'/1'/0'/0"
    assert str(hd.derive_path(AddressType.P2PKH_LEGACY, Network.ETH_TESTNET)) == "m/44'/1'/0'/0"
    with pytest.raises(UnsupportedAddressTypeError):
        hd.derive_path(AddressType.P2SH_PAY_TO_SCRIPT_HASH, Network.BTC_MAINNET)


def test_extended_public_key_headers():
    zpub = hd.generate_extended_public_key(Network.BTC_MAINNET, AddressType.P2WPKH_NATIVE_SEGWIT, ABANDON)
    xpub = hd.generate_extended_public_key(Network.BTC_MAINNET, AddressType.P2PKH_LEGACY, ABANDON)
    tpub = hd.generate_extended_public_key(Network.BTC_TESTNET, AddressType.P2PKH_LEGACY, ABANDON)
    vpub = hd.generate_extended_public_key(Network.BTC_TESTNET, AddressType.P2TR_TAPROOT, ABANDON)
    assert zpub.startswith("zpub")
    assert xpub.startswith("xpub")
    assert tpub.startswith("tpub")
    assert vpub.startswith("vpub")
    assert hd.is_extended_public_key_valid(Network.BTC_MAINNET, zpub)
    assert not hd.is_extended_public_key_valid(Network.LTC_TESTNET, zpub)


def test_extended_private_key_is_not_a_valid_xpub():
    xprv = serialize_extended_key(HDNode.from_seed(SEED), XPRV)
    assert not hd.is_extended_public_key_valid(Network.BTC_MAINNET, xprv)
    assert not hd.is_extended_public_key_valid(Network.BTC_MAINNET, "xpub-garbage")
    assert not hd.is_extended_public_key_valid(Network.BTC_MAINNET, None)


def test_generate_extended_public_key_rejects_bad_input():
    with pytest.raises(InvalidMnemonicError):
        hd.generate_extended_public_key(Network.BTC_MAINNET, AddressType.P2PKH_LEGACY, "abandon")
    with pytest.raises(UnsupportedAddressTypeError):
        hd.generate_extended_public_key(Network.BTC_MAINNET, AddressType.P2SH_PAY_TO_SCRIPT_HASH, ABANDON)


def test_bip84_addresses_and_keys():
    zpub = hd.generate_extended_public_key(Network.BTC_MAINNET, AddressType.P2WPKH_NATIVE_SEGWIT, ABANDON)
    first = hd.generate_address(Network.BTC_MAINNET, AddressType.P2WPKH_NATIVE_SEGWIT, zpub, 0)
    second = hd.generate_address(Network.BTC_MAINNET, AddressType.P2WPKH_NATIVE_SEGWIT, zpub, 1)
    assert first == "bc1qcr8te4kr609gcawutmrza0j4xv80jy8z306fyu"
    assert second == "bc1qnjg0jd8228aq7egyzacy8cys3knf9xvrerkf9g"
    wif = hd.generate_private_key(Network.BTC_MAINNET, AddressType.P2WPKH_NATIVE_SEGWIT, ABANDON, 0)
    assert wif == "KyZpNDKnfs94vbrwhJneDi77V6jF64PWPF8x5cdJb8ifgg2DUc9d"


def test_bip44_addresses():
    xpub = hd.generate_extended_public_key(Network.BTC_MAINNET, AddressType.P2PKH_LEGACY, ABANDON)
    assert hd.generate_address(Network.BTC_MAINNET, AddressType.P2PKH_LEGACY, xpub, 0) == (
        "1LqBGSKuX5yYUonjxT5qGfpUsXKYYWeabA"
    )

    eth_xpub = hd.generate_extended_public_key(Network.ETH_MAINNET, AddressType.P2PKH_LEGACY, ABANDON)
    assert hd.generate_address(Network.ETH_MAINNET, AddressType.P2PKH_LEGACY, eth_xpub, 0) == (
        "0x9858EfFD232B4033E47d90003D41EC34EcaEda94"
    )
    assert hd.generate_private_key(Network.ETH_MAINNET, AddressType.P2PKH_LEGACY, ABANDON, 0) == (
        "0x1ab42cc412b618bdea3a599e3c9bae199ebf030895b039e9db1e30dafb12b727"
    )


def test_address_from_xpub_matches_private_derivation():
    from walletkit.crypto.keys import PrivateKey

    for network in (Network.LTC_MAINNET, Network.LTC_TESTNET, Network.BTC_TESTNET):
        for address_type in (AddressType.P2PKH_LEGACY, AddressType.P2WPKH_NATIVE_SEGWIT):
            xpub = hd.generate_extended_public_key(network, address_type, ABANDON)
            for index in (0, 7):
                address = hd.generate_address(network, address_type, xpub, index)
                wif = hd.generate_private_key(network, address_type, ABANDON, index)
                key, compressed = PrivateKey.from_wif(wif, network)
                pub = key.public_key(compressed)
                if address_type == AddressType.P2PKH_LEGACY:
                    assert address == pub.p2pkh_address(network)
                else:
                    assert address == pub.p2wpkh_address(network)


def test_generation_is_deterministic():
    args = (Network.LTC_MAINNET, AddressType.P2WPKH_NATIVE_SEGWIT)
    xpub = hd.generate_extended_public_key(*args, ABANDON)
    assert xpub == hd.generate_extended_public_key(*args, ABANDON)
    assert hd.generate_address(*args, xpub, 3) == hd.generate_address(*args, xpub, 3)
    assert hd.generate_private_key(*args, ABANDON, 3) == hd.generate_private_key(*args, ABANDON, 3)


def test_taproot_renders_as_segwit_v0():
    xpub = hd.generate_extended_public_key(Network.BTC_MAINNET, AddressType.P2TR_TAPROOT, ABANDON)
    address = hd.generate_address(Network.BTC_MAINNET, AddressType.P2TR_TAPROOT, xpub, 0)
    assert address.startswith("bc1q")


def test_generate_address_rejects_bad_input():
    xpub = hd.generate_extended_public_key(Network.BTC_MAINNET, AddressType.P2PKH_LEGACY, ABANDON)
    with pytest.raises(InvalidParameterError):
        hd.generate_address(Network.BTC_MAINNET, AddressType.P2PKH_LEGACY, "not-an-xpub", 0)
    with pytest.raises(InvalidParameterError):
        hd.generate_address(Network.BTC_MAINNET, AddressType.P2PKH_LEGACY, xpub, -1)
    with pytest.raises(InvalidParameterError):
        hd.generate_address(Network.BTC_MAINNET, AddressType.P2PKH_LEGACY, xpub, 2**31)
    with pytest.raises(UnsupportedAddressTypeError):
        hd.generate_address(Network.BTC_MAINNET, AddressType.P2SH_PAY_TO_SCRIPT_HASH, xpub, 0)


def test_eth_rejects_non_legacy_address_types():
    xpub = hd.generate_extended_public_key(Network.ETH_MAINNET, AddressType.P2WPKH_NATIVE_SEGWIT, ABANDON)
    with pytest.raises(UnsupportedAddressTypeError):
        hd.generate_address(Network.ETH_MAINNET, AddressType.P2WPKH_NATIVE_SEGWIT, xpub, 0)
    key = hd.generate_private_key(Network.ETH_MAINNET, AddressType.P2WPKH_NATIVE_SEGWIT, ABANDON, 0)
    assert key.startswith("0x") and len(key) == 66
