from .config import DUPLICATE_POLICIES, MultiScaleConfig
from .exceptions import (
    CalculationError,
    ConfigurationError,
    DimensionMismatchError,
    DuplicateScaleError,
    MultiScaleError,
)

__all__ = [
    "MultiScaleConfig",
    "DUPLICATE_POLICIES",
    "MultiScaleError",
    "DimensionMismatchError",
    "DuplicateScaleError",
    "ConfigurationError",
    "CalculationError",
]
