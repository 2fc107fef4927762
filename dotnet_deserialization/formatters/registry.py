from typing import Callable, Dict, List

from ..errors import UnsupportedFormatter

Formatter = Callable[[bytes], bytes]

FORMATTERS: Dict[str, Formatter] = {}


def register_formatter(name: str):
    def deco(func: Formatter):
        FORMATTERS[name] = func
        return func
    return deco


def get_formatter(name: str) -> Formatter:
    """Look up a formatter by selector, raising UnsupportedFormatter if absent."""
    try:
        return FORMATTERS[name]
    except (KeyError, TypeError):
        raise UnsupportedFormatter(name) from None


def available_formatters() -> List[str]:
    return sorted(FORMATTERS)
