#!/usr/bin/env python3
"""
LosFormatter / ObjectStateFormatter envelope.

Structure (from System.Web/UI/ObjectStateFormatter.cs):
- u8  marker_format   (0xFF)
- u8  marker_version  (1)
- u8  token           (50 = Token_BinarySerialized)
- 7-bit encoded length of the body
- body: a BinaryFormatter stream, verbatim
"""

import io
import struct
from dataclasses import dataclass

from ..constants import OSF_MARKER_FORMAT, OSF_MARKER_VERSION
from ..enums import ObjectStateToken
from ..utils import check_uint8, write_length_prefix, logDebug
from .registry import register_formatter


@dataclass(frozen=True)
class ObjectStateFormatter:
    """Three-byte ObjectStateFormatter header. The token is required."""
    token: int = None
    marker_format: int = OSF_MARKER_FORMAT
    marker_version: int = OSF_MARKER_VERSION

    def __post_init__(self):
        check_uint8('token', self.token)
        check_uint8('marker_format', self.marker_format)
        check_uint8('marker_version', self.marker_version)

    def to_bytes(self) -> bytes:
        return struct.pack('<BBB', self.marker_format, self.marker_version, self.token)


@register_formatter("LosFormatter")
def format_los(serialized: bytes) -> bytes:
    """
    Wrap a serialized stream as a binary-serialized ObjectStateFormatter value.

    Args:
        serialized: BinaryFormatter stream bytes

    Returns:
        Envelope bytes
    """
    buffer = io.BytesIO()
    buffer.write(ObjectStateFormatter(token=ObjectStateToken.BinarySerialized).to_bytes())
    write_length_prefix(buffer, len(serialized))
    buffer.write(serialized)

    logDebug(f"LosFormatter: wrapped {len(serialized)} bytes")
    return buffer.getvalue()
