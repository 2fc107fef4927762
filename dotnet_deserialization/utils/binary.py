"""
Binary Encoding Utilities

Common writers for the .NET remoting binary format (MS-NRBF) and the
ObjectStateFormatter envelope. Everything here is write-only; nothing in the
package reads these formats back.
"""

import struct
import io
from typing import BinaryIO, Union

from ..errors import MalformedRecordConstruction


INT32_MIN = -0x80000000
INT32_MAX = 0x7FFFFFFF


def encode_7bit_int(value: int) -> bytes:
    """
    Encode a non-negative integer as a 7-bit variable length integer.

    Matches BinaryWriter.Write7BitEncodedInt byte order: low 7-bit group
    first, high bit set on every byte except the last.

    NOTE: 0 encodes to an empty byte string. Length prefixes must go through
    write_length_prefix() which emits the single 0x00 byte .NET expects.

    Args:
        value: Non-negative integer to encode

    Returns:
        Encoded bytes (empty for 0)
    """
    if value < 0:
        raise MalformedRecordConstruction(f"Cannot 7-bit encode negative value {value}")

    encoded = bytearray()
    while value > 0:
        group = value & 0x7F
        value >>= 7
        if value > 0:
            group |= 0x80
        encoded.append(group)

    return bytes(encoded)


def write_length_prefix(buffer: Union[BinaryIO, io.BytesIO], length: int):
    """
    Write a 7-bit encoded length, always emitting at least one byte.

    Args:
        buffer: Output buffer
        length: Length value to write
    """
    buffer.write(encode_7bit_int(length) or b'\x00')


def write_length_prefixed_string(buffer: Union[BinaryIO, io.BytesIO], value: str):
    """
    Write a LengthPrefixedString (UTF-8 bytes with 7-bit encoded length).

    Args:
        buffer: Output buffer
        value: String to write
    """
    data = value.encode('utf-8')
    write_length_prefix(buffer, len(data))
    buffer.write(data)


def write_int32(buffer: Union[BinaryIO, io.BytesIO], value: int):
    """Write a signed little-endian 32-bit integer."""
    buffer.write(struct.pack('<i', value))


def write_uint8(buffer: Union[BinaryIO, io.BytesIO], value: int):
    """Write a single unsigned byte."""
    buffer.write(struct.pack('<B', value))


def check_int32(name: str, value: int) -> int:
    """
    Validate that a field value fits in a signed 32-bit integer.

    Returns:
        The value unchanged

    Raises:
        MalformedRecordConstruction: If the value is missing or out of range
    """
    if value is None:
        raise MalformedRecordConstruction(f"Missing required field '{name}'")
    if not isinstance(value, int) or isinstance(value, bool):
        raise MalformedRecordConstruction(f"Field '{name}' must be an int, got {type(value).__name__}")
    if not INT32_MIN <= value <= INT32_MAX:
        raise MalformedRecordConstruction(f"Field '{name}' out of int32 range: {value}")
    return value


def check_uint8(name: str, value: int, minimum: int = 0) -> int:
    """Validate that a field value fits in an unsigned byte (minimum..255)."""
    if value is None:
        raise MalformedRecordConstruction(f"Missing required field '{name}'")
    if not isinstance(value, int) or isinstance(value, bool):
        raise MalformedRecordConstruction(f"Field '{name}' must be an int, got {type(value).__name__}")
    if not minimum <= value <= 0xFF:
        raise MalformedRecordConstruction(f"Field '{name}' out of range ({minimum}-255): {value}")
    return value


def check_string(name: str, value: str) -> str:
    """Validate that a required string field is present."""
    if value is None:
        raise MalformedRecordConstruction(f"Missing required field '{name}'")
    if not isinstance(value, str):
        raise MalformedRecordConstruction(f"Field '{name}' must be a str, got {type(value).__name__}")
    return value
