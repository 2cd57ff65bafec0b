"""
Open Assets Protocol - Address Utilities

This module converts Bitcoin and Open Assets addresses to output scripts.
Open Assets addresses are Base58Check encodings of the Bitcoin address payload
prefixed with the namespace byte 0x13.
"""

import hashlib
from typing import Iterable, Optional

from bitcoinlib.encoding import change_base, EncodingError
from bitcoinlib.keys import deserialize_address, BKeyError

from .exceptions import InvalidAddressError
from .models import ScriptOrAddress


OPEN_ASSETS_NAMESPACE = 0x13
BASE58_ZERO = '1'


def _checksum(payload: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(payload).digest()).digest()[:4]


def base58check_encode(payload: bytes) -> str:
    """
    Encode bytes with a Base58Check checksum.

    Args:
        payload: Version byte(s) and data

    Returns:
        Base58 string
    """
    data = payload + _checksum(payload)
    stripped = data.lstrip(b'\x00')
    leading_zeros = len(data) - len(stripped)
    encoded = change_base(stripped, 256, 58) if stripped else ''
    return BASE58_ZERO * leading_zeros + encoded


def base58check_decode(address: str) -> bytes:
    """
    Decode a Base58Check string and verify its checksum.

    Args:
        address: Base58 string

    Returns:
        Payload without the checksum

    Raises:
        InvalidAddressError: If the string is not valid Base58Check
    """
    if not isinstance(address, str) or not address:
        raise InvalidAddressError(address, "empty or non-string address")

    stripped = address.lstrip(BASE58_ZERO)
    leading_zeros = len(address) - len(stripped)
    try:
        decoded = bytes(change_base(stripped, 58, 256)) if stripped else b''
    except (EncodingError, ValueError) as e:
        raise InvalidAddressError(address, f"invalid base58: {e}")

    data = b'\x00' * leading_zeros + decoded
    if len(data) < 5:
        raise InvalidAddressError(address, "too short")

    payload, checksum = data[:-4], data[-4:]
    if _checksum(payload) != checksum:
        raise InvalidAddressError(address, "checksum mismatch")

    return payload


def is_oa_address(address: str) -> bool:
    """Return True if the string is a well-formed Open Assets address."""
    try:
        payload = base58check_decode(address)
    except InvalidAddressError:
        return False
    return len(payload) > 1 and payload[0] == OPEN_ASSETS_NAMESPACE


def oa_address_to_address(oa_address: str) -> str:
    """
    Convert an Open Assets address to the underlying Bitcoin address.

    Args:
        oa_address: Open Assets address

    Returns:
        Bitcoin address

    Raises:
        InvalidAddressError: If the address is not an Open Assets address
    """
    payload = base58check_decode(oa_address)
    if len(payload) < 2 or payload[0] != OPEN_ASSETS_NAMESPACE:
        raise InvalidAddressError(oa_address, "missing Open Assets namespace")
    return base58check_encode(payload[1:])


def address_to_oa_address(address: str) -> str:
    """
    Convert a Base58 Bitcoin address to an Open Assets address.

    Args:
        address: P2PKH or P2SH Bitcoin address

    Returns:
        Open Assets address

    Raises:
        InvalidAddressError: If the address is not a Base58 Bitcoin address
    """
    payload = base58check_decode(address)
    if payload[0] == OPEN_ASSETS_NAMESPACE:
        raise InvalidAddressError(address, "already an Open Assets address")
    return base58check_encode(bytes([OPEN_ASSETS_NAMESPACE]) + payload)


def create_p2pkh_script(pubkey_hash: bytes) -> bytes:
    """OP_DUP OP_HASH160 <20-byte hash> OP_EQUALVERIFY OP_CHECKSIG"""
    return bytes([0x76, 0xa9, 0x14]) + pubkey_hash + bytes([0x88, 0xac])


def create_p2sh_script(script_hash: bytes) -> bytes:
    """OP_HASH160 <20-byte hash> OP_EQUAL"""
    return bytes([0xa9, 0x14]) + script_hash + bytes([0x87])


def create_witness_script(witness_version: int, program: bytes) -> bytes:
    """OP_n <program>, for P2WPKH, P2WSH and P2TR outputs."""
    version_opcode = 0x00 if witness_version == 0 else 0x50 + witness_version
    return bytes([version_opcode, len(program)]) + program


def address_to_script(address: str) -> bytes:
    """
    Resolve a Bitcoin address to its output script.

    Args:
        address: Base58 or Bech32 Bitcoin address

    Returns:
        Output script bytes

    Raises:
        InvalidAddressError: If the address is malformed or of an unsupported type
    """
    if not isinstance(address, str) or not address:
        raise InvalidAddressError(address, "empty or non-string address")

    try:
        info = deserialize_address(address)
    except (EncodingError, BKeyError, ValueError, TypeError) as e:
        raise InvalidAddressError(address, str(e))

    script_type = info.get('script_type')
    key_hash = info.get('public_key_hash_bytes') or b''

    if script_type == 'p2pkh' and len(key_hash) == 20:
        return create_p2pkh_script(key_hash)
    elif script_type == 'p2sh' and len(key_hash) == 20:
        return create_p2sh_script(key_hash)
    elif script_type == 'p2wpkh' and len(key_hash) == 20:
        return create_witness_script(0, key_hash)
    elif script_type == 'p2wsh' and len(key_hash) == 32:
        return create_witness_script(0, key_hash)
    elif script_type == 'p2tr' and len(key_hash) == 32:
        return create_witness_script(1, key_hash)

    raise InvalidAddressError(address, f"unsupported address type {script_type or 'unknown'}")


def resolve_script(script_or_address: Optional[ScriptOrAddress]) -> Optional[bytes]:
    """
    Resolve a destination to an output script.

    Args:
        script_or_address: Raw script bytes, an Open Assets address or a
            Bitcoin address

    Returns:
        Output script bytes, or None if no destination was given
    """
    if script_or_address is None:
        return None
    if isinstance(script_or_address, (bytes, bytearray)):
        return bytes(script_or_address)
    if is_oa_address(script_or_address):
        return address_to_script(oa_address_to_address(script_or_address))
    return address_to_script(script_or_address)


def validate_address(addresses: Iterable[ScriptOrAddress]) -> None:
    """
    Validate destinations, raising on the first malformed address.

    Args:
        addresses: Addresses (or raw scripts, which are accepted as is)

    Raises:
        InvalidAddressError: If any address is malformed
    """
    for address in addresses:
        resolve_script(address)
