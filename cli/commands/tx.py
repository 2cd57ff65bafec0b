#!/usr/bin/env python3
"""
Transaction Commands for the Open Assets CLI

Commands building unsigned issuance and transfer transactions from a JSON file
of unspent outputs. The result is printed as raw transaction hex and as a
PSBT ready for an external signer.
"""

from typing import Any, Dict, List, Optional

import click

from transaction.builder import TransactionBuilder
from transaction.models import SpendableOutput, TransferParameters
from transaction.unsigned import UnsignedTransaction

from ..context import CLIContext, pass_context, handle_cli_error, load_json_file
from ..models import UnspentOutputSet


def load_unspent_outputs(file_path: str) -> List[SpendableOutput]:
    """
    Load and validate an unspent output file.

    Args:
        file_path: Path to the JSON file

    Returns:
        Spendable outputs in file order

    Raises:
        pydantic.ValidationError: If the file content is malformed
    """
    unspent_set = UnspentOutputSet.model_validate(load_json_file(file_path))
    return unspent_set.to_spendables()


def get_builder(ctx: CLIContext) -> TransactionBuilder:
    return TransactionBuilder(ctx.get_config('builder.dust_amount', TransactionBuilder.DEFAULT_AMOUNT))


def resolve_fees(ctx: CLIContext, fees: Optional[int]) -> int:
    if fees is None:
        return ctx.get_config('builder.default_fees', 10000)
    return fees


def describe_transaction(tx: UnsignedTransaction) -> Dict[str, Any]:
    """Summarize an unsigned transaction for output."""
    return {
        "txid": tx.get_transaction_id(),
        "inputs": len(tx.inputs),
        "outputs": len(tx.outputs),
        "output_values": [tx_out.value for tx_out in tx.outputs],
        "hex": tx.to_hex(),
        "psbt": tx.to_base64(),
    }


utxos_option = click.option('--utxos', '-u', 'utxos_file', required=True,
                            type=click.Path(exists=True, dir_okay=False),
                            help='JSON file of unspent outputs')
fees_option = click.option('--fees', type=click.IntRange(min=0),
                           help='Fees in satoshis (default: builder.default_fees)')
outputs_option = click.option('--outputs', 'output_qty', type=click.IntRange(min=1), default=1,
                              help='Number of destination outputs to split the amount across')


@click.group()
@pass_context
def tx(ctx: CLIContext):
    """
    Transaction building commands.

    Build unsigned Open Assets transactions from unspent outputs.
    """
    ctx.logger.debug("Transaction command group invoked")


@tx.command('issue')
@utxos_option
@click.option('--to', 'to_address', required=True, help='Address receiving the issued asset')
@click.option('--change', 'change_address', required=True, help='Address receiving bitcoin change')
@click.option('--quantity', '-q', required=True, type=click.IntRange(min=0),
              help='Asset quantity to issue')
@click.option('--metadata', '-m', help='Metadata text embedded in the marker')
@outputs_option
@fees_option
@pass_context
@handle_cli_error
def issue(ctx: CLIContext, utxos_file: str, to_address: str, change_address: str,
          quantity: int, metadata: Optional[str], output_qty: int, fees: Optional[int]):
    """
    Build an asset issuance transaction.

    Examples:
        oa tx issue -u utxos.json --to 1A1z... --change 1A1z... -q 1000
    """
    unspent_outputs = load_unspent_outputs(utxos_file)
    ctx.logger.info(f"Loaded {len(unspent_outputs)} unspent outputs from {utxos_file}")

    issue_spec = TransferParameters(unspent_outputs, to_address, change_address, quantity, output_qty)
    transaction = get_builder(ctx).issue_asset(issue_spec, metadata, resolve_fees(ctx, fees))

    ctx.output(describe_transaction(transaction))


@tx.command('transfer')
@utxos_option
@click.option('--asset-id', '-a', required=True, help='ID of the asset to send')
@click.option('--to', 'to_address', required=True, help='Address receiving the asset')
@click.option('--change', 'change_address', required=True, help='Address receiving asset change')
@click.option('--quantity', '-q', required=True, type=click.IntRange(min=0),
              help='Asset quantity to send')
@click.option('--btc-change', 'btc_change_address',
              help='Address receiving bitcoin change (default: --change)')
@outputs_option
@fees_option
@pass_context
@handle_cli_error
def transfer(ctx: CLIContext, utxos_file: str, asset_id: str, to_address: str, change_address: str,
             quantity: int, btc_change_address: Optional[str], output_qty: int, fees: Optional[int]):
    """
    Build an asset transfer transaction.

    Examples:
        oa tx transfer -u utxos.json -a ALn3... --to 1A1z... --change 1A1z... -q 50
    """
    unspent_outputs = load_unspent_outputs(utxos_file)
    ctx.logger.info(f"Loaded {len(unspent_outputs)} unspent outputs from {utxos_file}")

    transfer_spec = TransferParameters(unspent_outputs, to_address, change_address, quantity, output_qty)
    transaction = get_builder(ctx).transfer_asset(
        asset_id, transfer_spec, btc_change_address or change_address, resolve_fees(ctx, fees))

    ctx.output(describe_transaction(transaction))


@tx.command('send-btc')
@utxos_option
@click.option('--to', 'to_address', required=True, help='Address receiving the bitcoins')
@click.option('--change', 'change_address', required=True, help='Address receiving bitcoin change')
@click.option('--amount', required=True, type=click.IntRange(min=1), help='Amount in satoshis')
@outputs_option
@fees_option
@pass_context
@handle_cli_error
def send_btc(ctx: CLIContext, utxos_file: str, to_address: str, change_address: str,
             amount: int, output_qty: int, fees: Optional[int]):
    """
    Build a bitcoin transfer transaction.

    Examples:
        oa tx send-btc -u utxos.json --to 1A1z... --change 1A1z... --amount 50000
    """
    unspent_outputs = load_unspent_outputs(utxos_file)
    ctx.logger.info(f"Loaded {len(unspent_outputs)} unspent outputs from {utxos_file}")

    btc_spec = TransferParameters(unspent_outputs, to_address, change_address, amount, output_qty)
    transaction = get_builder(ctx).transfer_btc(btc_spec, resolve_fees(ctx, fees))

    ctx.output(describe_transaction(transaction))
