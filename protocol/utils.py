"""
Open Assets Protocol - Encoding Utilities

This module provides the variable-width integer codec and OP_RETURN script
helpers used by the marker output.
"""

import struct
from typing import Optional, Tuple

from .exceptions import MarkerOutputError


OP_RETURN = 0x6a
OP_PUSHDATA1 = 0x4c
OP_PUSHDATA2 = 0x4d
OP_PUSHDATA4 = 0x4e


def encode_leb128(value: int) -> bytes:
    """
    Encode an unsigned integer using LEB128.

    Args:
        value: Non-negative integer to encode

    Returns:
        LEB128-encoded bytes (a single zero byte for 0)

    Raises:
        MarkerOutputError: If value is negative
    """
    if value < 0:
        raise MarkerOutputError(f"Cannot LEB128-encode negative value: {value}")

    if value == 0:
        return b'\x00'

    result = bytearray()
    while value != 0:
        byte = value & 0x7f
        value >>= 7
        if value != 0:
            byte |= 0x80
        result.append(byte)

    return bytes(result)


def parse_leb128(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Parse a LEB128-encoded unsigned integer from bytes.

    Args:
        data: Bytes to parse
        offset: Starting offset in bytes

    Returns:
        Tuple of (value, new_offset)

    Raises:
        MarkerOutputError: If the data ends before the terminating byte
    """
    result = 0
    shift = 0

    while True:
        if offset >= len(data):
            raise MarkerOutputError("Truncated LEB128 integer")

        byte = data[offset]
        offset += 1
        result |= (byte & 0x7f) << shift
        if byte & 0x80 == 0:
            return result, offset
        shift += 7


def encode_pushdata(data: bytes) -> bytes:
    """
    Encode a single data push using the smallest push opcode.

    Args:
        data: Data to push

    Returns:
        Push opcode, length prefix and data
    """
    length = len(data)
    if length <= 75:
        return bytes([length]) + data
    elif length <= 0xff:
        return bytes([OP_PUSHDATA1, length]) + data
    elif length <= 0xffff:
        return bytes([OP_PUSHDATA2]) + struct.pack('<H', length) + data
    else:
        return bytes([OP_PUSHDATA4]) + struct.pack('<I', length) + data


def create_op_return_script(data: bytes) -> bytes:
    """
    Create OP_RETURN script with data.

    Args:
        data: Data to embed in OP_RETURN

    Returns:
        OP_RETURN script
    """
    return bytes([OP_RETURN]) + encode_pushdata(data)


def extract_op_return_data(script: bytes) -> Optional[bytes]:
    """
    Extract data from an ``OP_RETURN <push>`` script.

    Args:
        script: Script bytes

    Returns:
        Pushed data, or None if the script is not exactly one OP_RETURN
        followed by a single complete push
    """
    if len(script) < 2 or script[0] != OP_RETURN:
        return None

    opcode = script[1]
    if 0 < opcode <= 75:
        data_len, start = opcode, 2
    elif opcode == OP_PUSHDATA1 and len(script) >= 3:
        data_len, start = script[2], 3
    elif opcode == OP_PUSHDATA2 and len(script) >= 4:
        data_len, start = struct.unpack('<H', script[2:4])[0], 4
    elif opcode == OP_PUSHDATA4 and len(script) >= 6:
        data_len, start = struct.unpack('<I', script[2:6])[0], 6
    else:
        return None

    # Truncated push or trailing opcodes
    if start + data_len != len(script):
        return None

    return script[start:start + data_len]
