"""
Open Assets Protocol - Transaction Builder

This module constructs unsigned Open Assets transactions for asset issuance,
asset transfers, bitcoin transfers and swaps. Every colored output carries a
fixed bitcoin value, the marker output records the asset quantity of each
colored output, and bitcoin value and asset quantities are conserved between
inputs and outputs (minus the explicit fees).
"""

import logging
from typing import List, Optional, Sequence, Tuple, Union

from protocol.marker_output import MarkerOutput

from .address import resolve_script
from .exceptions import TransactionBuilderError, DustOutputError
from .models import AssetId, ScriptOrAddress, SpendableOutput, TransferParameters
from .selection import collect_colored_outputs, collect_uncolored_outputs
from .unsigned import TxOut, UnsignedTransaction, build_transaction


AssetTransferSpec = Tuple[AssetId, TransferParameters]


class TransactionBuilder:
    """
    Builds unsigned Open Assets transactions.

    The builder is stateless apart from ``amount``, the value placed in every
    colored output and the minimum value of any uncolored output.
    """

    DEFAULT_AMOUNT = 600

    def __init__(self, amount: int = DEFAULT_AMOUNT):
        """
        Initialize the transaction builder.

        Args:
            amount: Value of colored outputs and dust floor, in satoshis
        """
        if amount <= 0:
            raise ValueError(f"Output amount must be positive: {amount}")

        self._amount = amount
        self.logger = logging.getLogger(__name__)

    @property
    def amount(self) -> int:
        """The minimum allowed output value."""
        return self._amount

    def issue_asset(
        self,
        issue_spec: TransferParameters,
        metadata: Optional[Union[bytes, str]],
        fees: int
    ) -> UnsignedTransaction:
        """
        Create a transaction issuing an asset.

        Args:
            issue_spec: Issuance parameters; ``amount`` is the issued quantity
                and ``to_script`` receives the issued asset
            metadata: Metadata embedded in the marker output
            fees: Fees to include in the transaction

        Returns:
            Unsigned issuance transaction

        Raises:
            InvalidAddressError: If the destination or change address is malformed
            InsufficientFundsError: If the uncolored outputs cannot cover the issuance
        """
        self._validate_fees(fees)
        to_script = self._require_script(issue_spec.to_script, "issuance destination")
        change_script = self._require_script(issue_spec.change_script, "issuance change")

        asset_quantities = issue_spec.split_output_amount
        colored_value = len(asset_quantities) * self._amount

        inputs, total_amount = collect_uncolored_outputs(
            issue_spec.unspent_outputs, colored_value + self._amount + fees)

        outputs = [self._get_colored_output(to_script) for _ in asset_quantities]
        outputs.append(self._get_marker_output(asset_quantities, metadata))
        outputs.append(self._get_uncolored_output(change_script, total_amount - colored_value - fees))

        self.logger.info(
            f"Built issuance of {issue_spec.amount} units in {len(asset_quantities)} outputs "
            f"from {len(inputs)} inputs"
        )
        return build_transaction(inputs, outputs)

    def transfer_asset(
        self,
        asset_id: AssetId,
        asset_transfer_spec: TransferParameters,
        btc_change_script: ScriptOrAddress,
        fees: int
    ) -> UnsignedTransaction:
        """
        Create a transaction sending an asset.

        Args:
            asset_id: ID of the asset being sent
            asset_transfer_spec: Parameters of the asset transfer
            btc_change_script: Destination of any bitcoin change
            fees: Fees to include in the transaction

        Returns:
            Unsigned transfer transaction
        """
        btc_transfer_spec = TransferParameters(
            asset_transfer_spec.unspent_outputs, None, btc_change_script, 0)
        return self.transfer([(asset_id, asset_transfer_spec)], btc_transfer_spec, fees)

    def transfer_assets(
        self,
        transfer_specs: Sequence[AssetTransferSpec],
        btc_change_script: ScriptOrAddress,
        fees: int
    ) -> UnsignedTransaction:
        """
        Create a transaction sending several assets.

        The bitcoin needed for fees is taken from the unspent outputs of the
        first transfer.

        Args:
            transfer_specs: List of (asset ID, transfer parameters) tuples
            btc_change_script: Destination of any bitcoin change
            fees: Fees to include in the transaction

        Returns:
            Unsigned transfer transaction
        """
        if not transfer_specs:
            raise TransactionBuilderError("At least one asset transfer is required")

        btc_transfer_spec = TransferParameters(
            transfer_specs[0][1].unspent_outputs, None, btc_change_script, 0)
        return self.transfer(transfer_specs, btc_transfer_spec, fees)

    def transfer_btc(self, btc_transfer_spec: TransferParameters, fees: int) -> UnsignedTransaction:
        """
        Create a transaction sending bitcoins.

        Args:
            btc_transfer_spec: Parameters of the bitcoin transfer
            fees: Fees to include in the transaction

        Returns:
            Unsigned transaction
        """
        return self.transfer([], btc_transfer_spec, fees)

    def btc_asset_swap(
        self,
        btc_transfer_spec: TransferParameters,
        asset_id: AssetId,
        asset_transfer_spec: TransferParameters,
        fees: int
    ) -> UnsignedTransaction:
        """
        Create a transaction swapping bitcoins for an asset.

        Args:
            btc_transfer_spec: Parameters of the bitcoins being sent
            asset_id: ID of the asset being sent
            asset_transfer_spec: Parameters of the asset being sent
            fees: Fees to include in the transaction

        Returns:
            Unsigned swap transaction
        """
        return self.transfer([(asset_id, asset_transfer_spec)], btc_transfer_spec, fees)

    def asset_asset_swap(
        self,
        asset1_id: AssetId,
        asset1_transfer_spec: TransferParameters,
        asset2_id: AssetId,
        asset2_transfer_spec: TransferParameters,
        fees: int
    ) -> UnsignedTransaction:
        """
        Create a transaction swapping an asset for another asset.

        The owner of the first asset pays the fees and receives bitcoin change.

        Args:
            asset1_id: ID of the first asset
            asset1_transfer_spec: Parameters of the first asset being sent
            asset2_id: ID of the second asset
            asset2_transfer_spec: Parameters of the second asset being sent
            fees: Fees to include in the transaction

        Returns:
            Unsigned swap transaction
        """
        btc_transfer_spec = TransferParameters(
            asset1_transfer_spec.unspent_outputs,
            asset1_transfer_spec.to_script,
            asset1_transfer_spec.change_script,
            0)
        return self.transfer(
            [(asset1_id, asset1_transfer_spec), (asset2_id, asset2_transfer_spec)],
            btc_transfer_spec,
            fees)

    def transfer(
        self,
        asset_transfer_specs: Sequence[AssetTransferSpec],
        btc_transfer_spec: TransferParameters,
        fees: int
    ) -> UnsignedTransaction:
        """
        Create a transaction sending assets and bitcoins.

        Args:
            asset_transfer_specs: List of (asset ID, transfer parameters) tuples
            btc_transfer_spec: Parameters of the bitcoins being transferred
            fees: Fees to include in the transaction

        Returns:
            Unsigned transaction; the marker output comes first whenever the
            transaction has colored outputs

        Raises:
            InvalidAddressError: If any destination address is malformed
            InsufficientAssetQuantityError: If an asset cannot be covered
            InsufficientFundsError: If the bitcoin amount and fees cannot be covered
            DustOutputError: If a requested bitcoin output is below the dust floor
        """
        self._validate_fees(fees)

        # Resolve every destination before selecting anything
        asset_scripts = []
        for _, transfer_spec in asset_transfer_specs:
            asset_scripts.append((
                self._require_script(transfer_spec.to_script, "asset destination"),
                resolve_script(transfer_spec.change_script)
            ))
        btc_change_script = resolve_script(btc_transfer_spec.change_script)
        btc_to_script = None
        if btc_transfer_spec.amount > 0:
            btc_to_script = self._require_script(btc_transfer_spec.to_script, "bitcoin destination")

        inputs: List[SpendableOutput] = []
        outputs: List[TxOut] = []
        asset_quantities: List[int] = []

        for (asset_id, transfer_spec), (to_script, change_script) in zip(asset_transfer_specs, asset_scripts):
            colored_outputs, collected_quantity = collect_colored_outputs(
                self._unselected(transfer_spec.unspent_outputs, inputs), asset_id, transfer_spec.amount)
            inputs.extend(colored_outputs)

            for quantity in transfer_spec.split_output_amount:
                outputs.append(self._get_colored_output(to_script))
                asset_quantities.append(quantity)

            # Send the rest of the asset back to its owner
            if collected_quantity > transfer_spec.amount:
                if change_script is None:
                    raise TransactionBuilderError("Asset change is due but no change script was given")
                outputs.append(self._get_colored_output(change_script))
                asset_quantities.append(collected_quantity - transfer_spec.amount)

        btc_excess = sum(spendable.output.value for spendable in inputs) - sum(tx_out.value for tx_out in outputs)

        if btc_excess < btc_transfer_spec.amount + fees:
            uncolored_outputs, uncolored_amount = collect_uncolored_outputs(
                self._unselected(btc_transfer_spec.unspent_outputs, inputs),
                btc_transfer_spec.amount + fees - btc_excess)
            inputs.extend(uncolored_outputs)
            btc_excess += uncolored_amount

        otsuri = btc_excess - btc_transfer_spec.amount - fees
        if 0 < otsuri < self._amount:
            # Top the change up rather than create a dust output
            uncolored_outputs, uncolored_amount = collect_uncolored_outputs(
                self._unselected(btc_transfer_spec.unspent_outputs, inputs),
                self._amount - otsuri)
            inputs.extend(uncolored_outputs)
            otsuri += uncolored_amount

        if otsuri > 0:
            if btc_change_script is None:
                raise TransactionBuilderError("Bitcoin change is due but no change script was given")
            outputs.append(self._get_uncolored_output(btc_change_script, otsuri))

        if btc_transfer_spec.amount > 0:
            for value in btc_transfer_spec.split_output_amount:
                outputs.append(self._get_uncolored_output(btc_to_script, value))

        if asset_quantities:
            outputs.insert(0, self._get_marker_output(asset_quantities, b''))

        self._check_unique_inputs(inputs)

        self.logger.info(
            f"Built transfer of {len(asset_transfer_specs)} assets with "
            f"{len(inputs)} inputs and {len(outputs)} outputs, change {otsuri}"
        )
        return build_transaction(inputs, outputs)

    @staticmethod
    def _unselected(
        unspent_outputs: Sequence[SpendableOutput],
        selected: Sequence[SpendableOutput]
    ) -> List[SpendableOutput]:
        """Return the candidates whose out point has not been selected yet."""
        taken = {spendable.out_point for spendable in selected}
        return [spendable for spendable in unspent_outputs if spendable.out_point not in taken]

    @staticmethod
    def _check_unique_inputs(inputs: Sequence[SpendableOutput]) -> None:
        seen = set()
        for spendable in inputs:
            if spendable.out_point in seen:
                raise TransactionBuilderError(
                    f"Output {spendable.out_point.txid}:{spendable.out_point.index} selected twice")
            seen.add(spendable.out_point)

    @staticmethod
    def _validate_fees(fees: int) -> None:
        if fees < 0:
            raise TransactionBuilderError(f"Fees cannot be negative: {fees}")

    @staticmethod
    def _require_script(script_or_address: Optional[ScriptOrAddress], role: str) -> bytes:
        script = resolve_script(script_or_address)
        if script is None:
            raise TransactionBuilderError(f"Missing {role} script")
        return script

    def _get_uncolored_output(self, script: bytes, value: int) -> TxOut:
        """
        Create an uncolored output.

        Args:
            script: Output script
            value: Satoshi value of the output

        Returns:
            The uncolored output

        Raises:
            DustOutputError: If the value is below the dust floor
        """
        if value < self._amount:
            raise DustOutputError(value, self._amount)
        return TxOut(value, script)

    def _get_colored_output(self, script: bytes) -> TxOut:
        """Create a colored output holding the fixed amount."""
        return TxOut(self._amount, script)

    def _get_marker_output(
        self,
        asset_quantities: Sequence[int],
        metadata: Optional[Union[bytes, str]]
    ) -> TxOut:
        """
        Create the zero-value marker output.

        Args:
            asset_quantities: Asset quantity of each colored output
            metadata: Metadata carried by the marker

        Returns:
            The marker output
        """
        return TxOut(0, MarkerOutput(list(asset_quantities), metadata).build_script())
