"""
multiscale Exceptions
=====================
Centralized exception hierarchy for the multiscale package.
"""


class MultiScaleError(Exception):
    """Base class for all multiscale exceptions."""
    pass


class DimensionMismatchError(MultiScaleError, ValueError):
    """Raised when vectors that must be paired case-by-case have different lengths."""
    pass


class DuplicateScaleError(MultiScaleError, KeyError):
    """Raised when a scale code is registered twice and the duplicate policy is ``"error"``."""
    pass


class ConfigurationError(MultiScaleError):
    """Raised when a recognised option carries a value the analysis cannot use."""
    pass


class CalculationError(MultiScaleError):
    """Raised when a numerical calculation receives an input it cannot work with."""
    pass
