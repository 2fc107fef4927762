"""
Gadget chain builders.

Each chain is a function taking the OS command and returning a
SerializedStream. Chains register themselves by selector name on import:

    @register_gadget_chain("TextFormattingRunProperties")
    def build_text_formatting_run_properties(cmd): ...

Unknown selectors raise UnsupportedGadgetChain.
"""

from .registry import (
    GADGET_CHAINS,
    register_gadget_chain,
    get_gadget_chain,
    available_gadget_chains,
)

# Chain modules (imported for registration)
from .text_formatting_run_properties import (
    build_text_formatting_run_properties,
    build_resource_dictionary,
    escape_xml_text,
    canonicalize_xml,
)

__all__ = [
    'GADGET_CHAINS',
    'register_gadget_chain',
    'get_gadget_chain',
    'available_gadget_chains',
    'build_text_formatting_run_properties',
    'build_resource_dictionary',
    'escape_xml_text',
    'canonicalize_xml',
]
