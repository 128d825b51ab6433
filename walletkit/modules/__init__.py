"""walletkit operation modules."""

from ..modules.address import render_address, render_private_key
from ..modules.hd import (
    derive_path,
    generate_extended_public_key,
    is_extended_public_key_valid,
    generate_address,
    generate_private_key,
)
from ..modules.utxo import UTXOModule
from ..modules.evm import encode_erc20_transfer, build_evm_payload, sign_evm_transaction

__all__ = [
    # Rendering
    "render_address",
    "render_private_key",
    
    # HD
    "derive_path",
    "generate_extended_public_key",
    "is_extended_public_key_valid",
    "generate_address",
    "generate_private_key",
    
    # Transactions
    "UTXOModule",
    "encode_erc20_transfer",
    "build_evm_payload",
    "sign_evm_transaction",
]
