"""
Open Assets Protocol - Marker Output Codec

This module encodes and decodes the marker output payload that records the
asset quantity of every colored output of a transaction, and recognizes and
builds the OP_RETURN script carrying that payload.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from .utils import (
    encode_leb128,
    parse_leb128,
    create_op_return_script,
    extract_op_return_data
)
from .exceptions import MarkerOutputError


# Protocol constants
OPEN_ASSETS_MAGIC = b'OA'  # 0x4f41
OPEN_ASSETS_VERSION = b'\x01\x00'  # Version 1
OPEN_ASSETS_TAG = OPEN_ASSETS_MAGIC + OPEN_ASSETS_VERSION
MAX_ASSET_QUANTITY = 2 ** 63 - 1


def _normalize_metadata(metadata: Optional[Union[bytes, str]]) -> bytes:
    if metadata is None:
        return b''
    if isinstance(metadata, str):
        return metadata.encode('utf-8')
    if isinstance(metadata, (bytes, bytearray)):
        return bytes(metadata)
    raise MarkerOutputError(f"Metadata must be bytes or str, not {type(metadata).__name__}")


@dataclass
class MarkerOutput:
    """
    Represents an Open Assets marker output payload.

    The asset quantity list is positional: entry ``i`` applies to the ``i``-th
    output of the transaction, skipping the marker output itself.
    """
    asset_quantities: List[int] = field(default_factory=list)
    metadata: bytes = b''

    def __post_init__(self):
        """Validate payload parameters."""
        self.asset_quantities = list(self.asset_quantities)
        self.metadata = _normalize_metadata(self.metadata)

        for quantity in self.asset_quantities:
            if not isinstance(quantity, int) or isinstance(quantity, bool):
                raise MarkerOutputError(f"Asset quantity must be an integer: {quantity!r}")
            if quantity < 0 or quantity > MAX_ASSET_QUANTITY:
                raise MarkerOutputError(
                    f"Asset quantity out of range: {quantity} (max: {MAX_ASSET_QUANTITY})"
                )

    def serialize_payload(self) -> bytes:
        """
        Serialize the marker output into its payload bytes.

        Returns:
            Tag, quantity count, LEB128 quantities, metadata length and metadata
        """
        data = OPEN_ASSETS_TAG
        data += encode_leb128(len(self.asset_quantities))
        for quantity in self.asset_quantities:
            data += encode_leb128(quantity)
        data += encode_leb128(len(self.metadata))
        data += self.metadata
        return data

    def build_script(self) -> bytes:
        """
        Build the ``OP_RETURN <payload>`` output script for this marker.

        Returns:
            OP_RETURN script bytes
        """
        return create_op_return_script(self.serialize_payload())

    def to_hex(self) -> str:
        """Return the serialized payload as a hex string."""
        return self.serialize_payload().hex()

    @classmethod
    def deserialize_payload(cls, payload: bytes) -> 'MarkerOutput':
        """
        Deserialize a marker output payload.

        Args:
            payload: Raw payload bytes (as returned by ``parse_script``)

        Returns:
            Decoded marker output

        Raises:
            MarkerOutputError: If the payload is not a valid marker
        """
        if not payload.startswith(OPEN_ASSETS_TAG):
            raise MarkerOutputError("Payload does not start with the Open Assets tag")

        offset = len(OPEN_ASSETS_TAG)
        count, offset = parse_leb128(payload, offset)

        asset_quantities = []
        for _ in range(count):
            quantity, offset = parse_leb128(payload, offset)
            if quantity > MAX_ASSET_QUANTITY:
                raise MarkerOutputError(f"Asset quantity exceeds maximum: {quantity}")
            asset_quantities.append(quantity)

        metadata_length, offset = parse_leb128(payload, offset)
        if offset + metadata_length > len(payload):
            raise MarkerOutputError(
                f"Metadata length {metadata_length} exceeds remaining "
                f"{len(payload) - offset} bytes"
            )

        metadata = payload[offset:offset + metadata_length]
        offset += metadata_length

        if offset != len(payload):
            raise MarkerOutputError(f"Unexpected {len(payload) - offset} trailing bytes")

        return cls(asset_quantities, metadata)

    @staticmethod
    def parse_script(output_script: bytes) -> Optional[bytes]:
        """
        Return the marker payload if the script has the marker output shape.

        Args:
            output_script: Output script bytes

        Returns:
            The pushed payload, unmodified, if the script is ``OP_RETURN <push>``
            and the pushed data starts with the Open Assets magic; None otherwise
        """
        data = extract_op_return_data(output_script)
        if data is None or not data.startswith(OPEN_ASSETS_MAGIC):
            return None
        return data

    @classmethod
    def from_script(cls, output_script: bytes) -> Optional['MarkerOutput']:
        """
        Parse and decode a marker output script.

        Args:
            output_script: Output script bytes

        Returns:
            Decoded marker output, or None if the script carries no marker

        Raises:
            MarkerOutputError: If the script carries a malformed marker payload
        """
        payload = cls.parse_script(output_script)
        if payload is None:
            return None
        return cls.deserialize_payload(payload)


# Utility functions
def encode_marker_payload(
    asset_quantities: Sequence[int],
    metadata: Optional[Union[bytes, str]] = None
) -> bytes:
    """
    Encode an asset quantity list and metadata into a marker payload.

    Args:
        asset_quantities: Asset quantity of each output, in output order
        metadata: Optional metadata (str is UTF-8 encoded)

    Returns:
        Marker payload bytes
    """
    return MarkerOutput(list(asset_quantities), metadata).serialize_payload()


def decode_marker_payload(payload: bytes) -> MarkerOutput:
    """
    Decode a marker payload.

    Args:
        payload: Marker payload bytes

    Returns:
        Decoded marker output
    """
    return MarkerOutput.deserialize_payload(payload)


def build_marker_script(
    asset_quantities: Sequence[int],
    metadata: Optional[Union[bytes, str]] = None
) -> bytes:
    """
    Build an ``OP_RETURN`` marker output script.

    Args:
        asset_quantities: Asset quantity of each output, in output order
        metadata: Optional metadata

    Returns:
        OP_RETURN script bytes
    """
    return MarkerOutput(list(asset_quantities), metadata).build_script()


def parse_marker_script(output_script: bytes) -> Optional[bytes]:
    """
    Extract the marker payload from an output script.

    Args:
        output_script: Output script bytes

    Returns:
        Marker payload bytes or None if the script is not a marker output
    """
    return MarkerOutput.parse_script(output_script)
