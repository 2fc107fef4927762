from typing import Callable, Dict, List

from ..errors import UnsupportedGadgetChain
from ..records import SerializedStream

GadgetChainBuilder = Callable[[str], SerializedStream]

GADGET_CHAINS: Dict[str, GadgetChainBuilder] = {}


def register_gadget_chain(name: str):
    def deco(func: GadgetChainBuilder):
        GADGET_CHAINS[name] = func
        return func
    return deco


def get_gadget_chain(name: str) -> GadgetChainBuilder:
    """Look up a builder by selector, raising UnsupportedGadgetChain if absent."""
    try:
        return GADGET_CHAINS[name]
    except (KeyError, TypeError):
        raise UnsupportedGadgetChain(name) from None


def available_gadget_chains() -> List[str]:
    return sorted(GADGET_CHAINS)
