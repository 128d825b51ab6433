"""Type definitions for walletkit."""

# Common types
from ..types.common import (
    HexStr,
    BaseUnits,
    TxId,
    Address,
    PrivateKeyBytes,
    PublicKeyBytes,
)

# Transaction types
from ..types.transaction import (
    SigHashType,
    ScriptPattern,
    OutPoint,
    TransactionInput,
    TransactionOutput,
    RawTransaction,
)

# Caller-facing value objects
from ..types.wallet import UTXOReference, TransactionReceiver

# Tagged results
from ..types.result import Ok, Err, Result

__all__ = [
    # Common
    "HexStr",
    "BaseUnits",
    "TxId",
    "Address",
    "PrivateKeyBytes",
    "PublicKeyBytes",
    
    # Transaction
    "SigHashType",
    "ScriptPattern",
    "OutPoint",
    "TransactionInput",
    "TransactionOutput",
    "RawTransaction",

    # Wallet
    "UTXOReference",
    "TransactionReceiver",

    # Results
    "Ok",
    "Err",
    "Result",
]
