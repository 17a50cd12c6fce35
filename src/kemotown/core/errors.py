"""Exception types shared across the addressing and plugin layers."""


class AddressingError(Exception):
    """Base class for failures while resolving activity addressing."""
