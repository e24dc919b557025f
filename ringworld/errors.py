"""Exception types raised by the ring builder."""


class RingWorldError(Exception):
    """Base class for all ring builder errors."""


class InvalidConfiguration(RingWorldError, ValueError):
    """Ring configuration cannot produce a valid ring."""
