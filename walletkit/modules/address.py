"""Address and private key rendering for walletkit."""

import logging

from ..constants import AddressType, CoinType, Network
from ..crypto.hd import HDNode
from ..exceptions import UnsupportedAddressTypeError, UnsupportedNetworkError

__all__ = ["render_address", "render_private_key"]

logger = logging.getLogger(__name__)


def render_address(network: Network, address_type: AddressType, node: HDNode) -> str:
    """
    Render the receive address of ``node``.
    
    | coin    | legacy            | segwit / taproot    |
    |---------|-------------------|---------------------|
    | BTC/LTC | Base58Check P2PKH | Bech32 P2WPKH       |
    | ETH     | EIP-55 hex        | unsupported         |
    
    Raises:
        UnsupportedAddressTypeError: For P2SH, or non-legacy types on ETH
        UnsupportedNetworkError: For an unknown coin type
    """
    if not address_type.is_hd_compatible:
        raise UnsupportedAddressTypeError("P2SH does not support HD wallet")

    public_key = node.get_public_key()
    coin_type = network.coin_type

    if coin_type == CoinType.ETH:
        if address_type != AddressType.P2PKH_LEGACY:
            raise UnsupportedAddressTypeError(
                f"{address_type.name} addresses are not applicable to ETH; use P2PKH_LEGACY"
            )
        return public_key.eth_address()

    if coin_type in (CoinType.BTC, CoinType.LTC):
        if address_type == AddressType.P2PKH_LEGACY:
            return public_key.p2pkh_address(network)
        # Taproot is rendered as P2WPKH
        return public_key.p2wpkh_address(network)

    raise UnsupportedNetworkError(f"Unsupported network: {network.value}")


def render_private_key(network: Network, node: HDNode) -> str:
    """
    Render the private key of ``node``.
    
    BTC/LTC keys are compressed WIF with the network's version byte; ETH
    keys are ``0x`` followed by the 32-byte scalar in hex.
    """
    private_key = node.get_private_key()
    coin_type = network.coin_type

    if coin_type in (CoinType.BTC, CoinType.LTC):
        return private_key.wif(network, compressed=True)
    if coin_type == CoinType.ETH:
        return f"0x{private_key.hex()}"

    raise UnsupportedNetworkError(f"Unsupported network: {network.value}")
