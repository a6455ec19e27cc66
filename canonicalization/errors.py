"""
Exceptions raised by the canonicalization passes and drivers.
"""


class CanonicalizationError(ValueError):
    """Base class for failures that abort a canonicalization call."""


class DegenerateGeometryError(CanonicalizationError):
    """A near-zero vector was used as a divisor, or a pass produced non-finite values."""


class MalformedTopologyError(CanonicalizationError):
    """Face indices are out of range, or a face has fewer than three vertices."""
