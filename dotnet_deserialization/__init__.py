"""
.NET Deserialization Payload Generator

Builds MS-NRBF (BinaryFormatter) object graphs for known gadget chains and
wraps them in formatter envelopes:

- utils: 7-bit integers, length-prefixed strings, logging, parent-index trees
- records: the record model and stream assembler
- gadget_chains: registered gadget chain builders
- formatters: registered formatter envelopes
- generator: generate() facade
- config: INI-driven defaults

Usage:
    from dotnet_deserialization import generate, encode_7bit_int

    payload = generate("calc.exe")
    raw = generate("calc.exe", formatter=None)
"""

from .constants import DEFAULT_FORMATTER, DEFAULT_GADGET_CHAIN
from .errors import (
    DotNetDeserializationError,
    UnsupportedGadgetChain,
    UnsupportedFormatter,
    MalformedRecordConstruction,
    MalformedStream,
    AncestorLookupFailure,
)
from .utils import encode_7bit_int, ParentIndex
from .generator import (
    generate,
    generate_gadget_chain,
    generate_formatted,
    build_gadget_chain,
)
from .gadget_chains import available_gadget_chains
from .formatters import available_formatters
from .config import GeneratorConfig, load_generator_config

__all__ = [
    'DEFAULT_FORMATTER',
    'DEFAULT_GADGET_CHAIN',
    # Errors
    'DotNetDeserializationError',
    'UnsupportedGadgetChain',
    'UnsupportedFormatter',
    'MalformedRecordConstruction',
    'MalformedStream',
    'AncestorLookupFailure',
    # Utilities
    'encode_7bit_int',
    'ParentIndex',
    # Generation
    'generate',
    'generate_gadget_chain',
    'generate_formatted',
    'build_gadget_chain',
    'available_gadget_chains',
    'available_formatters',
    # Configuration
    'GeneratorConfig',
    'load_generator_config',
]
