"""
Formatter envelopes.

A formatter wraps a serialized stream for a hosting component. Formatters
register by selector name on import; unknown selectors raise
UnsupportedFormatter.
"""

from .registry import (
    FORMATTERS,
    register_formatter,
    get_formatter,
    available_formatters,
)

# Formatter modules (imported for registration)
from .los_formatter import ObjectStateFormatter, format_los

__all__ = [
    'FORMATTERS',
    'register_formatter',
    'get_formatter',
    'available_formatters',
    'ObjectStateFormatter',
    'format_los',
]
