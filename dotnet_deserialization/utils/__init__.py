# Encoding utilities
from .logging import log, logWarning, logError, logDebug, init_logging, close_logging, print_summary, get_counts
from .binary import (
    encode_7bit_int,
    write_length_prefix,
    write_length_prefixed_string,
    write_int32,
    write_uint8,
    check_int32,
    check_uint8,
    check_string,
)
from .tree import ParentIndex
