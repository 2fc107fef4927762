"""
Error types raised while building serialized payloads.

All errors are deterministic: the same input always fails the same way.
"""


class DotNetDeserializationError(Exception):
    """Base class for every error raised by this package."""


class UnsupportedGadgetChain(DotNetDeserializationError, NotImplementedError):
    """The requested gadget chain selector is not registered."""

    def __init__(self, selector):
        self.selector = selector
        super().__init__(f"The specified gadget chain is not implemented: {selector!r}")


class UnsupportedFormatter(DotNetDeserializationError, NotImplementedError):
    """The requested formatter selector is not registered."""

    def __init__(self, selector):
        self.selector = selector
        super().__init__(f"The specified formatter is not implemented: {selector!r}")


class MalformedRecordConstruction(DotNetDeserializationError, ValueError):
    """A record or field structure was built with missing or inconsistent fields."""


class MalformedStream(DotNetDeserializationError, ValueError):
    """A record sequence cannot be assembled into a stream."""


class AncestorLookupFailure(DotNetDeserializationError, LookupError):
    """A required ancestor search reached a root without a match."""
