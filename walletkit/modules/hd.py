"""HD derivation operations: extended public keys, addresses, private keys."""

import logging

from ..constants import AddressType, HARDENED_OFFSET, Network
from ..crypto.bip39 import is_mnemonic_valid, mnemonic_to_seed
from ..crypto.hd import DerivationPath, HDNode, deserialize_extended_key, serialize_extended_key
from ..exceptions import (
    InternalValidationError,
    InvalidMnemonicError,
    InvalidParameterError,
    UnsupportedAddressTypeError,
)
from ..modules.address import render_address, render_private_key
from ..utils.validation import is_valid_extended_public_key

__all__ = [
    "derive_path",
    "generate_extended_public_key",
    "is_extended_public_key_valid",
    "generate_address",
    "generate_private_key",
]

logger = logging.getLogger(__name__)

ACCOUNT_INDEX = 0
EXTERNAL_CHAIN = 0


def derive_path(address_type: AddressType, network: Network) -> DerivationPath:
    """
    Build ``m/purpose'/coin_type'/account'/change`` (BIP44).
    
    All testnets use coin type ``1'``.
    
    Raises:
        UnsupportedAddressTypeError: If the address type is not HD-derivable
    """
    if not address_type.is_hd_compatible:
        raise UnsupportedAddressTypeError("P2SH does not support HD wallet")

    return (
        DerivationPath.master()
        .extend(address_type.purpose, hardened=True)
        .extend(network.params.bip44_coin_index, hardened=True)
        .extend(ACCOUNT_INDEX, hardened=True)
        .extend(EXTERNAL_CHAIN)
    )


def _account_node(network: Network, address_type: AddressType, mnemonic: str) -> HDNode:
    path = derive_path(address_type, network)
    if not is_mnemonic_valid(mnemonic):
        raise InvalidMnemonicError("Mnemonic is not valid.")

    seed = mnemonic_to_seed(mnemonic)
    logger.debug(f"Deriving {path} for {network.value}")
    return HDNode.from_seed(seed).derive_path(path)


def _check_index(index: int) -> None:
    if not 0 <= index < HARDENED_OFFSET:
        raise InvalidParameterError(
            f"Derivation index must be in [0, {HARDENED_OFFSET}), got {index}"
        )


def generate_extended_public_key(network: Network, address_type: AddressType, mnemonic: str) -> str:
    """
    Derive the external-chain node and serialize it as an extended public key.
    
    Legacy uses the network's P2PKH header (xpub/tpub), segwit and
    taproot the P2WPKH header (zpub/vpub).
    
    Raises:
        InvalidMnemonicError: If the mnemonic does not validate
        UnsupportedAddressTypeError: For P2SH
        InternalValidationError: If the result fails its self check
    """
    node = _account_node(network, address_type, mnemonic)

    params = network.params
    if address_type == AddressType.P2PKH_LEGACY:
        version = params.p2pkh_xpub
    else:
        version = params.p2wpkh_xpub

    xpub = serialize_extended_key(node.neuter(), version)

    if not is_extended_public_key_valid(network, xpub):
        raise InternalValidationError("Internal validation (xPub) has failed.")

    return xpub


def is_extended_public_key_valid(network: Network, xpub: str) -> bool:
    """True if ``xpub`` decodes for the network and is public-only."""
    return is_valid_extended_public_key(network, xpub)


def generate_address(network: Network, address_type: AddressType, xpub: str, index: int) -> str:
    """
    Derive the non-hardened child ``index`` of ``xpub`` and render its address.
    
    Raises:
        InvalidParameterError: If the xpub or index is invalid
        UnsupportedAddressTypeError: For P2SH, or non-legacy types on ETH
    """
    if not is_extended_public_key_valid(network, xpub):
        raise InvalidParameterError("Invalid xpub")
    _check_index(index)

    parent = deserialize_extended_key(xpub, network)
    child = parent.derive(index)
    return render_address(network, address_type, child)


def generate_private_key(network: Network, address_type: AddressType, mnemonic: str, index: int) -> str:
    """
    Derive ``m/purpose'/coin_type'/0'/0/index`` and render its private key.
    
    Raises:
        InvalidMnemonicError: If the mnemonic does not validate
        InvalidParameterError: If the index is out of range
        UnsupportedAddressTypeError: For P2SH
    """
    _check_index(index)
    node = _account_node(network, address_type, mnemonic).derive(index)
    return render_private_key(network, node)
