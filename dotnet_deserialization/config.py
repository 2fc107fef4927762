#!/usr/bin/env python3
"""
Generator Configuration

Parser for generator INI files that pick the default gadget chain and
formatter.

INI Format:
    [generator]
    gadget_chain = TextFormattingRunProperties
    formatter = LosFormatter      ; or "none" for the bare stream
"""

import configparser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .constants import DEFAULT_FORMATTER, DEFAULT_GADGET_CHAIN
from .formatters import get_formatter
from .gadget_chains import get_gadget_chain
from .generator import generate
from .utils import logDebug

CONFIG_SECTION = 'generator'
NO_FORMATTER_VALUES = ('', 'none')


@dataclass(frozen=True)
class GeneratorConfig:
    """Selectors used by generate()"""
    gadget_chain: str = DEFAULT_GADGET_CHAIN
    formatter: Optional[str] = DEFAULT_FORMATTER

    def __post_init__(self):
        """Validate selectors against the registries"""
        get_gadget_chain(self.gadget_chain)
        if self.formatter is not None:
            get_formatter(self.formatter)

    def generate(self, cmd: str) -> bytes:
        return generate(cmd, gadget_chain=self.gadget_chain, formatter=self.formatter)


def load_generator_config(config_path: Union[str, Path]) -> GeneratorConfig:
    """
    Load generator selectors from an INI file.

    Missing keys (or a missing [generator] section) keep the defaults.

    Args:
        config_path: Path to the INI file

    Returns:
        Validated GeneratorConfig

    Raises:
        FileNotFoundError: Config file does not exist
        UnsupportedGadgetChain / UnsupportedFormatter: Unknown selector
    """
    if not Path(config_path).exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    config = configparser.ConfigParser(inline_comment_prefixes=(';', '#'))
    config.read(config_path, encoding='utf-8')

    if not config.has_section(CONFIG_SECTION):
        logDebug(f"No [{CONFIG_SECTION}] section in {config_path}, using defaults")
        return GeneratorConfig()

    section = config[CONFIG_SECTION]
    gadget_chain = section.get('gadget_chain', DEFAULT_GADGET_CHAIN).strip()

    formatter: Optional[str] = section.get('formatter', DEFAULT_FORMATTER).strip()
    if formatter.lower() in NO_FORMATTER_VALUES:
        formatter = None

    logDebug(f"Loaded generator config: gadget_chain={gadget_chain}, formatter={formatter}")
    return GeneratorConfig(gadget_chain=gadget_chain, formatter=formatter)
