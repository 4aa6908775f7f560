from .comparators import deep_equal
from .error_handling import ErrorMode

__all__ = [
    "ErrorMode",
    "deep_equal",
]
