"""UTXO transaction engine for BTC and LTC."""

import asyncio
import logging
from typing import List, Sequence, Set, Tuple

from ..constants import (
    MAX_BLOCK_SIZE,
    MAX_SCRIPT_SIZE,
    Coin,
    CoinType,
    Network,
)
from ..crypto.transaction_signing import sign_input
from ..exceptions import (
    InsufficientFundsError,
    InvalidInputError,
    ProviderError,
    SerializationError,
    TransactionError,
    UnsupportedNetworkError,
    UpstreamResolutionError,
)
from ..providers.base import LedgerProvider
from ..types.common import HexStr
from ..types.transaction import RawTransaction, TransactionOutput
from ..types.wallet import TransactionReceiver, UTXOReference
from ..utils.encoding import address_to_script_pubkey
from ..utils.validation import to_base_units, validate_receiver, validate_utxo

__all__ = ["UTXOModule"]

logger = logging.getLogger(__name__)

_UTXO_COIN_TYPES = (CoinType.BTC, CoinType.LTC)


class UTXOModule:
    """
    Builds and signs BTC/LTC transactions.
    
    Every input's previous output is looked up through the injected
    ledger provider; everything else happens locally.
    """
    
    def __init__(self, provider: LedgerProvider) -> None:
        """
        Initialize UTXO module.
        
        Args:
            provider: Ledger provider used to fetch previous transactions
        """
        self._provider = provider
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        
    async def sign_transaction(
        self,
        coin: Coin,
        network: Network,
        utxos: Sequence[UTXOReference],
        receivers: Sequence[TransactionReceiver],
    ) -> HexStr:
        """
        Sign a transaction spending ``utxos`` to ``receivers``.
        
        No change output is added: whatever the inputs hold beyond the
        receivers' total is left as fee.
        
        Args:
            coin: BTC or LTC, matching the network
            network: Network to sign for
            utxos: Outputs to spend, each with its WIF key
            receivers: Payees; amounts are truncated to the coin's scale
            
        Returns:
            Hex of the signed transaction
            
        Raises:
            UnsupportedNetworkError: If coin and network do not match a UTXO chain
            InvalidInputError: If any UTXO or receiver is invalid
            UpstreamResolutionError: If a previous output cannot be resolved
            UnsignableScriptError: If a previous output's script is not signable
            TransactionError: If the signed transaction fails verification
        """
        if coin.coin_type not in _UTXO_COIN_TYPES:
            raise UnsupportedNetworkError(f"{coin.code} is not a UTXO coin")
        if coin.coin_type != network.coin_type:
            raise UnsupportedNetworkError(
                f"Coin {coin.code} does not match network {network.value}"
            )
        if not utxos:
            raise InvalidInputError("Missing UTXOs.")
        if not receivers:
            raise InvalidInputError("Missing receivers.")

        signers = [validate_utxo(network, utxo) for utxo in utxos]
        payees = [validate_receiver(network, coin, receiver) for receiver in receivers]

        connected = await self._resolve_outputs(network, [ref for ref, _, _ in signers])

        tx = RawTransaction()
        for (ref, _, _), output in zip(signers, connected):
            tx.add_input(ref.tx_hash.lower(), ref.index, connected_output=output)
        for payee in payees:
            tx.add_output(
                to_base_units(payee.amount, coin),
                address_to_script_pubkey(payee.address, network),
            )

        for index, (_, private_key, compressed) in enumerate(signers):
            sign_input(tx, index, private_key, compressed)

        self._verify(tx, network)

        signed = tx.hex()
        self._logger.debug(
            f"Signed {network.value} transaction {tx.txid} "
            f"({len(tx.inputs)} inputs, {len(tx.outputs)} outputs)"
        )
        return HexStr(signed)

    async def _resolve_outputs(
        self, network: Network, refs: Sequence[UTXOReference]
    ) -> List[TransactionOutput]:
        """Look up every spent output concurrently; the first failure cancels the rest."""
        tasks = [asyncio.create_task(self._resolve_output(network, ref)) for ref in refs]
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _resolve_output(self, network: Network, ref: UTXOReference) -> TransactionOutput:
        """Fetch the previous transaction and return the output ``ref`` spends."""
        tx_hash = ref.tx_hash.lower()
        try:
            raw = await self._provider.fetch_transaction(network, tx_hash)
        except ProviderError as e:
            self._logger.error(f"Lookup of {tx_hash} failed: {e}")
            raise UpstreamResolutionError(f"Unable to fetch transaction {tx_hash}: {e}") from e

        if raw is None:
            raise UpstreamResolutionError(f"Transaction {tx_hash} not found")

        try:
            previous = RawTransaction.deserialize(raw)
        except SerializationError as e:
            raise UpstreamResolutionError(f"Malformed transaction {tx_hash}: {e}") from e

        if previous.txid != tx_hash:
            raise UpstreamResolutionError(
                f"Requested transaction {tx_hash} but received {previous.txid}"
            )

        output = previous.get_output(ref.index)
        if output is None:
            raise UpstreamResolutionError(
                f"Output index {ref.index} out of range for TxId={tx_hash} "
                f"({len(previous.outputs)} outputs)"
            )
        return output

    def _verify(self, tx: RawTransaction, network: Network) -> None:
        """Consistency checks on a signed transaction."""
        if not tx.inputs:
            raise TransactionError("Transaction has no inputs")
        if not tx.outputs:
            raise TransactionError("Transaction has no outputs")

        seen: Set[Tuple[str, int]] = set()
        for inp in tx.inputs:
            key = (inp.outpoint.txid, inp.outpoint.vout)
            if key in seen:
                raise TransactionError(f"Duplicate input {inp.outpoint}")
            seen.add(key)
            if len(inp.script_sig) > MAX_SCRIPT_SIZE:
                raise TransactionError(f"scriptSig of {inp.outpoint} exceeds {MAX_SCRIPT_SIZE} bytes")

        max_money = network.params.max_money
        for index, out in enumerate(tx.outputs):
            if not 0 <= out.value <= max_money:
                raise TransactionError(f"Output {index} value {out.value} out of range")
        total_out = tx.total_output_value
        if total_out > max_money:
            raise TransactionError(f"Total output value {total_out} out of range")

        size = len(tx.serialize())
        if size > MAX_BLOCK_SIZE:
            raise TransactionError(f"Transaction size {size} exceeds {MAX_BLOCK_SIZE} bytes")

        total_in = sum(inp.value or 0 for inp in tx.inputs)
        if total_out > total_in:
            raise InsufficientFundsError(required=total_out, available=total_in)
