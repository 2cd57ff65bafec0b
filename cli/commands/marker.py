#!/usr/bin/env python3
"""
Marker Output Commands for the Open Assets CLI

Commands for encoding, decoding and recognizing Open Assets marker outputs.
"""

from typing import Optional, Tuple

import click

from protocol.marker_output import MarkerOutput

from ..context import CLIContext, pass_context, handle_cli_error


def _parse_hex(value: str, what: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise click.BadParameter(f"{what} must be a hex string: {value}")


def _describe(marker: MarkerOutput) -> dict:
    try:
        metadata_text = marker.metadata.decode('utf-8')
    except UnicodeDecodeError:
        metadata_text = None

    return {
        "asset_quantities": marker.asset_quantities,
        "metadata_hex": marker.metadata.hex(),
        "metadata": metadata_text,
    }


@click.group()
@pass_context
def marker(ctx: CLIContext):
    """
    Marker output commands.

    Encode and decode the OP_RETURN payload that records asset quantities.
    """
    ctx.logger.debug("Marker command group invoked")


@marker.command('encode')
@click.option('--quantity', '-q', 'quantities', type=click.IntRange(min=0), multiple=True,
              help='Asset quantity of the next colored output (repeatable)')
@click.option('--metadata', '-m', help='Metadata text embedded in the marker')
@pass_context
@handle_cli_error
def encode(ctx: CLIContext, quantities: Tuple[int, ...], metadata: Optional[str]):
    """
    Encode an asset quantity list into a marker payload.

    Examples:
        oa marker encode -q 10000 -m u=https://cpr.sm/5YgSU1Pg-q
    """
    marker_output = MarkerOutput(list(quantities), metadata)
    ctx.logger.info(f"Encoding marker with {len(quantities)} asset quantities")

    ctx.output({
        "payload": marker_output.serialize_payload().hex(),
        "script": marker_output.build_script().hex(),
    })


@marker.command('decode')
@click.argument('payload')
@pass_context
@handle_cli_error
def decode(ctx: CLIContext, payload: str):
    """
    Decode a marker payload given as hex.

    Examples:
        oa marker decode 4f41010001904e00
    """
    marker_output = MarkerOutput.deserialize_payload(_parse_hex(payload, "Payload"))
    ctx.output(_describe(marker_output))


@marker.command('parse-script')
@click.argument('script')
@pass_context
@handle_cli_error
def parse_script(ctx: CLIContext, script: str):
    """
    Extract the marker payload from an output script given as hex.

    Exits with status 2 when the script is not a marker output.

    Examples:
        oa marker parse-script 6a084f41010002014400
    """
    payload = MarkerOutput.parse_script(_parse_hex(script, "Script"))
    if payload is None:
        click.echo("No marker output found", err=True)
        click.get_current_context().exit(2)

    result = {"payload": payload.hex()}
    result.update(_describe(MarkerOutput.deserialize_payload(payload)))
    ctx.output(result)
