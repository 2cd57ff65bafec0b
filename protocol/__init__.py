"""
Open Assets Protocol - Marker Output Codec

This package implements the binary format of the Open Assets marker output:
the LEB128-encoded asset quantity list and metadata carried by an OP_RETURN
output.
"""

from .marker_output import (
    MarkerOutput,
    OPEN_ASSETS_MAGIC,
    OPEN_ASSETS_VERSION,
    OPEN_ASSETS_TAG,
    MAX_ASSET_QUANTITY,
    encode_marker_payload,
    decode_marker_payload,
    build_marker_script,
    parse_marker_script
)
from .utils import encode_leb128, parse_leb128
from .exceptions import ProtocolError, MarkerOutputError

__all__ = [
    'MarkerOutput',
    'OPEN_ASSETS_MAGIC',
    'OPEN_ASSETS_VERSION',
    'OPEN_ASSETS_TAG',
    'MAX_ASSET_QUANTITY',
    'encode_marker_payload',
    'decode_marker_payload',
    'build_marker_script',
    'parse_marker_script',
    'encode_leb128',
    'parse_leb128',
    'ProtocolError',
    'MarkerOutputError'
]

__version__ = '1.0.0'
