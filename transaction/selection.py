"""
Open Assets Protocol - Coin Selection

First-fit selection of spendable outputs, in the order supplied by the caller.
Callers that want a particular bias (smallest first, oldest first) sort the
candidates before passing them in.
"""

import logging
from typing import Iterable, List, Tuple

from .models import AssetId, SpendableOutput
from .exceptions import InsufficientFundsError, InsufficientAssetQuantityError


logger = logging.getLogger(__name__)


def collect_uncolored_outputs(
    unspent_outputs: Iterable[SpendableOutput],
    amount: int
) -> Tuple[List[SpendableOutput], int]:
    """
    Collect uncolored outputs until their value covers the amount.

    Args:
        unspent_outputs: Candidate outputs, colored ones are skipped
        amount: Satoshi value to collect

    Returns:
        Tuple of (selected outputs, total value collected)

    Raises:
        InsufficientFundsError: If the candidates are exhausted first
    """
    total_amount = 0
    result = []

    for output in unspent_outputs:
        if total_amount >= amount:
            break
        if not output.output.is_colored:
            result.append(output)
            total_amount += output.output.value

    if total_amount < amount:
        raise InsufficientFundsError(required=amount, available=total_amount)

    logger.debug(f"Collected {len(result)} uncolored outputs worth {total_amount} for {amount}")
    return result, total_amount


def collect_colored_outputs(
    unspent_outputs: Iterable[SpendableOutput],
    asset_id: AssetId,
    asset_quantity: int
) -> Tuple[List[SpendableOutput], int]:
    """
    Collect outputs of an asset until their quantity covers the requested one.

    Args:
        unspent_outputs: Candidate outputs, other assets and uncolored ones are skipped
        asset_id: ID of the asset to collect
        asset_quantity: Asset quantity to collect

    Returns:
        Tuple of (selected outputs, total asset quantity collected)

    Raises:
        InsufficientAssetQuantityError: If the candidates are exhausted first
    """
    total_quantity = 0
    result = []

    for output in unspent_outputs:
        if total_quantity >= asset_quantity:
            break
        if output.output.is_colored and output.output.asset_id == asset_id:
            result.append(output)
            total_quantity += output.output.asset_quantity

    if total_quantity < asset_quantity:
        raise InsufficientAssetQuantityError(asset_id, required=asset_quantity, available=total_quantity)

    logger.debug(f"Collected {len(result)} colored outputs with quantity {total_quantity} for {asset_quantity}")
    return result, total_quantity
