from casemap.core.case_insensitive_map import CaseInsensitiveMap
from casemap.core.keys import fold, is_string_like
from casemap.errors import InvalidKeyTypeError, OddArgumentCountError, UnsupportedOperationError
from casemap.logger import set_logging_level
from casemap.utils.error_handling import ErrorMode

__version__ = "0.1.0"

__all__ = [
    "CaseInsensitiveMap",
    "ErrorMode",
    "InvalidKeyTypeError",
    "OddArgumentCountError",
    "UnsupportedOperationError",
    "fold",
    "is_string_like",
    "set_logging_level",
]
