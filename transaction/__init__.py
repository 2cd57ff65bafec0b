"""
Open Assets Protocol - Transaction Construction

This package provides coin selection and the transaction builder used to
issue and transfer Open Assets, producing unsigned transactions ready for an
external signer.
"""

from .builder import TransactionBuilder
from .models import OutPoint, TransactionOutput, SpendableOutput, TransferParameters
from .selection import collect_uncolored_outputs, collect_colored_outputs
from .unsigned import UnsignedTransaction, TxIn, TxOut, build_transaction
from .address import (
    address_to_script,
    address_to_oa_address,
    oa_address_to_address,
    resolve_script,
    validate_address
)
from .exceptions import *

__all__ = [
    'TransactionBuilder',
    'OutPoint',
    'TransactionOutput',
    'SpendableOutput',
    'TransferParameters',
    'collect_uncolored_outputs',
    'collect_colored_outputs',
    'UnsignedTransaction',
    'TxIn',
    'TxOut',
    'build_transaction',
    'address_to_script',
    'address_to_oa_address',
    'oa_address_to_address',
    'resolve_script',
    'validate_address',
    'TransactionBuilderError',
    'InsufficientFundsError',
    'InsufficientAssetQuantityError',
    'DustOutputError',
    'InvalidAddressError'
]

__version__ = '1.0.0'
