"""Transaction signing implementation for walletkit."""

import logging
from typing import assert_never

from ..crypto.keys import PrivateKey
from ..crypto.signature import sign_transaction
from ..exceptions import TransactionError, UnsignableScriptError
from ..types.transaction import RawTransaction, ScriptPattern, SigHashType
from ..utils.encoding import (
    OP_CHECKSIG,
    OP_DUP,
    OP_EQUALVERIFY,
    OP_HASH160,
    double_sha256,
    encode_varint,
    int_to_bytes,
    serialize_script,
)

__all__ = [
    "classify_script",
    "p2pkh_script",
    "legacy_sighash",
    "witness_sighash",
    "sign_input",
]

logger = logging.getLogger(__name__)


def classify_script(script: bytes) -> ScriptPattern:
    """Match a locking script against the signable templates."""
    # <33-byte pubkey> OP_CHECKSIG or <65-byte pubkey> OP_CHECKSIG
    if (
        (len(script) == 35 and script[0] == 33 and script[34] == OP_CHECKSIG)
        or (len(script) == 67 and script[0] == 65 and script[66] == OP_CHECKSIG)
    ):
        return ScriptPattern.P2PK

    if (
        len(script) == 25
        and script[:3] == bytes([OP_DUP, OP_HASH160, 20])
        and script[23:] == bytes([OP_EQUALVERIFY, OP_CHECKSIG])
    ):
        return ScriptPattern.P2PKH

    if len(script) == 22 and script[:2] == b"\x00\x14":
        return ScriptPattern.P2WPKH

    return ScriptPattern.UNRECOGNIZED


def p2pkh_script(pubkey_hash: bytes) -> bytes:
    return serialize_script([OP_DUP, OP_HASH160, pubkey_hash, OP_EQUALVERIFY, OP_CHECKSIG])


def legacy_sighash(
    tx: RawTransaction,
    input_index: int,
    script_code: bytes,
    sighash_type: int = SigHashType.ALL,
) -> bytes:
    """
    Original (pre-segwit) signature hash.
    
    Every input script is blanked except the one being signed, which
    carries ``script_code``.
    """
    s = bytearray()
    
    s.extend(int_to_bytes(tx.version, 4, 'little'))
    
    s.extend(encode_varint(len(tx.inputs)))
    for i, inp in enumerate(tx.inputs):
        s.extend(inp.serialize(script_sig=script_code if i == input_index else b""))
    
    s.extend(encode_varint(len(tx.outputs)))
    for out in tx.outputs:
        s.extend(out.serialize())
    
    s.extend(int_to_bytes(tx.locktime, 4, 'little'))
    s.extend(int_to_bytes(sighash_type, 4, 'little'))
    
    return double_sha256(bytes(s))


def witness_sighash(
    tx: RawTransaction,
    input_index: int,
    script_code: bytes,
    value: int,
    sighash_type: int = SigHashType.ALL,
) -> bytes:
    """BIP143 signature hash for version 0 witness programs."""
    hash_prevouts = double_sha256(b"".join(inp.outpoint.bytes for inp in tx.inputs))
    hash_sequence = double_sha256(
        b"".join(int_to_bytes(inp.sequence, 4, 'little') for inp in tx.inputs)
    )
    hash_outputs = double_sha256(b"".join(out.serialize() for out in tx.outputs))

    inp = tx.inputs[input_index]
    s = bytearray()
    s.extend(int_to_bytes(tx.version, 4, 'little'))
    s.extend(hash_prevouts)
    s.extend(hash_sequence)
    s.extend(inp.outpoint.bytes)
    s.extend(encode_varint(len(script_code)))
    s.extend(script_code)
    s.extend(int_to_bytes(value, 8, 'little'))
    s.extend(int_to_bytes(inp.sequence, 4, 'little'))
    s.extend(hash_outputs)
    s.extend(int_to_bytes(tx.locktime, 4, 'little'))
    s.extend(int_to_bytes(sighash_type, 4, 'little'))

    return double_sha256(bytes(s))


def sign_input(
    tx: RawTransaction,
    input_index: int,
    private_key: PrivateKey,
    compressed: bool = True,
) -> None:
    """
    Sign one input in place with SIGHASH_ALL.
    
    The algorithm is chosen from the script of the output being spent.
    
    Raises:
        TransactionError: If the input is not connected to its previous output
        UnsignableScriptError: If that script matches no signable template
    """
    inp = tx.inputs[input_index]
    spent = inp.connected_output
    if spent is None:
        raise TransactionError(f"Input {input_index} is not connected to a previous output")

    pattern = classify_script(spent.script_pubkey)
    logger.debug(f"Signing input {input_index} ({inp.outpoint}) as {pattern.value}")

    match pattern:
        case ScriptPattern.P2PK:
            sighash = legacy_sighash(tx, input_index, spent.script_pubkey)
            signature = sign_transaction(private_key, sighash, SigHashType.ALL)
            inp.script_sig = serialize_script([signature])
            inp.witness = []

        case ScriptPattern.P2PKH:
            public_key = private_key.public_key(compressed=compressed)
            sighash = legacy_sighash(tx, input_index, spent.script_pubkey)
            signature = sign_transaction(private_key, sighash, SigHashType.ALL)
            inp.script_sig = serialize_script([signature, public_key.point])
            inp.witness = []

        case ScriptPattern.P2WPKH:
            if not compressed:
                raise UnsignableScriptError(
                    f"Input {input_index}: P2WPKH requires a compressed private key"
                )
            public_key = private_key.public_key(compressed=True)
            script_code = p2pkh_script(public_key.hash160())
            sighash = witness_sighash(tx, input_index, script_code, spent.value)
            signature = sign_transaction(private_key, sighash, SigHashType.ALL)
            inp.script_sig = b""
            inp.witness = [signature, public_key.point]

        case ScriptPattern.UNRECOGNIZED:
            raise UnsignableScriptError(
                f"Don't know how to sign for this kind of scriptPubKey: "
                f"{spent.script_pubkey.hex()}"
            )

        case _:
            assert_never(pattern)
