"""Transaction-related type definitions for walletkit."""

import struct
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional

from ..constants import DEFAULT_SEQUENCE, TRANSACTION_VERSION
from ..exceptions import SerializationError
from ..types.common import BaseUnits, TxId
from ..utils.encoding import decode_varint, double_sha256, encode_varint, int_to_bytes

__all__ = [
    "SigHashType",
    "ScriptPattern",
    "OutPoint",
    "TransactionInput",
    "TransactionOutput",
    "RawTransaction",
]


class SigHashType(IntEnum):
    """Signature hash types."""
    ALL = 0x01
    ANYONECANPAY = 0x80


class ScriptPattern(str, Enum):
    """Locking-script shapes that decide how an input is signed."""
    P2PK = "p2pk"
    P2PKH = "p2pkh"
    P2WPKH = "p2wpkh"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class OutPoint:
    """Transaction output reference."""
    txid: TxId
    vout: int
    
    @property
    def bytes(self) -> bytes:
        """Get outpoint as bytes (txid + vout)."""
        txid_bytes = bytes.fromhex(self.txid)[::-1]  # Little-endian
        vout_bytes = self.vout.to_bytes(4, "little")
        return txid_bytes + vout_bytes
        
    def __str__(self) -> str:
        """String representation as txid:vout."""
        return f"{self.txid}:{self.vout}"


@dataclass(frozen=True)
class TransactionOutput:
    """Transaction output."""
    value: BaseUnits
    script_pubkey: bytes

    def serialize(self) -> bytes:
        return (
            int_to_bytes(self.value, 8, "little")
            + encode_varint(len(self.script_pubkey))
            + self.script_pubkey
        )


@dataclass
class TransactionInput:
    """
    Transaction input.

    ``connected_output`` is the previous output being spent; its value and
    script are needed to compute signatures but are never serialized.
    """
    outpoint: OutPoint
    script_sig: bytes = b""
    witness: List[bytes] = field(default_factory=list)
    sequence: int = DEFAULT_SEQUENCE
    connected_output: Optional[TransactionOutput] = None

    @property
    def value(self) -> Optional[BaseUnits]:
        """Value of the spent output, when connected."""
        if self.connected_output is None:
            return None
        return self.connected_output.value

    def serialize(self, script_sig: Optional[bytes] = None) -> bytes:
        script = self.script_sig if script_sig is None else script_sig
        return (
            self.outpoint.bytes
            + encode_varint(len(script))
            + script
            + int_to_bytes(self.sequence, 4, "little")
        )

    def serialize_witness(self) -> bytes:
        result = bytearray(encode_varint(len(self.witness)))
        for item in self.witness:
            result.extend(encode_varint(len(item)))
            result.extend(item)
        return bytes(result)


@dataclass
class RawTransaction:
    """Raw transaction for building, signing and wire serialization."""
    
    version: int = TRANSACTION_VERSION
    locktime: int = 0
    inputs: List[TransactionInput] = field(default_factory=list)
    outputs: List[TransactionOutput] = field(default_factory=list)
    
    def add_input(
        self,
        txid: str,
        vout: int,
        connected_output: Optional[TransactionOutput] = None,
        sequence: int = DEFAULT_SEQUENCE,
    ) -> "RawTransaction":
        """Add an unsigned input spending ``txid:vout``."""
        self.inputs.append(
            TransactionInput(
                outpoint=OutPoint(TxId(txid), vout),
                sequence=sequence,
                connected_output=connected_output,
            )
        )
        return self
        
    def add_output(self, value: int, script_pubkey: bytes) -> "RawTransaction":
        """Add output to transaction."""
        self.outputs.append(TransactionOutput(value=BaseUnits(value), script_pubkey=script_pubkey))
        return self

    def get_output(self, index: int) -> Optional[TransactionOutput]:
        """Get output by index."""
        if 0 <= index < len(self.outputs):
            return self.outputs[index]
        return None
        
    @property
    def has_witness(self) -> bool:
        """Check if any input carries witness data."""
        return any(inp.witness for inp in self.inputs)

    @property
    def total_output_value(self) -> BaseUnits:
        return BaseUnits(sum(out.value for out in self.outputs))

    @property
    def txid(self) -> TxId:
        """Transaction ID (hash of the witness-stripped serialization)."""
        return TxId(double_sha256(self.serialize(include_witness=False))[::-1].hex())

    def serialize(self, include_witness: bool = True) -> bytes:
        """
        Serialize to wire format.

        Uses the BIP144 marker/flag layout when witness data is present and
        ``include_witness`` is set, the legacy layout otherwise.
        """
        segwit = include_witness and self.has_witness
        s = bytearray(int_to_bytes(self.version, 4, "little"))
        if segwit:
            s.extend(b"\x00\x01")

        s.extend(encode_varint(len(self.inputs)))
        for inp in self.inputs:
            s.extend(inp.serialize())

        s.extend(encode_varint(len(self.outputs)))
        for out in self.outputs:
            s.extend(out.serialize())

        if segwit:
            for inp in self.inputs:
                s.extend(inp.serialize_witness())

        s.extend(int_to_bytes(self.locktime, 4, "little"))
        return bytes(s)

    def hex(self) -> str:
        return self.serialize().hex()

    @classmethod
    def deserialize(cls, data: bytes) -> "RawTransaction":
        """
        Parse a legacy or segwit serialized transaction.

        Raises:
            SerializationError: If the payload is truncated or malformed
        """
        try:
            return cls._parse(data)
        except (IndexError, struct.error, ValueError) as e:
            raise SerializationError(f"Malformed transaction: {e}") from e

    @classmethod
    def _parse(cls, data: bytes) -> "RawTransaction":
        offset = 0

        def read(n: int) -> bytes:
            nonlocal offset
            if offset + n > len(data):
                raise SerializationError("Malformed transaction: unexpected end of data")
            chunk = data[offset:offset + n]
            offset += n
            return chunk

        def read_varint() -> int:
            nonlocal offset
            value, offset = decode_varint(data, offset)
            return value

        version = struct.unpack("<i", read(4))[0]

        segwit = False
        if data[offset] == 0x00:
            if data[offset + 1] != 0x01:
                raise SerializationError("Malformed transaction: bad segwit flag")
            segwit = True
            offset += 2

        inputs = []
        for _ in range(read_varint()):
            txid = read(32)[::-1].hex()
            vout = struct.unpack("<I", read(4))[0]
            script_sig = read(read_varint())
            sequence = struct.unpack("<I", read(4))[0]
            inputs.append(TransactionInput(
                outpoint=OutPoint(TxId(txid), vout),
                script_sig=script_sig,
                sequence=sequence,
            ))

        outputs = []
        for _ in range(read_varint()):
            value = struct.unpack("<q", read(8))[0]
            script_pubkey = read(read_varint())
            outputs.append(TransactionOutput(value=BaseUnits(value), script_pubkey=script_pubkey))

        if segwit:
            for inp in inputs:
                inp.witness = [read(read_varint()) for _ in range(read_varint())]

        locktime = struct.unpack("<I", read(4))[0]
        if offset != len(data):
            raise SerializationError(
                f"Malformed transaction: {len(data) - offset} trailing bytes"
            )

        return cls(version=version, locktime=locktime, inputs=inputs, outputs=outputs)
