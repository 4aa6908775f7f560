"""Exception classes raised by casemap containers."""


class InvalidKeyTypeError(TypeError):
    """
    Raised when a key that is not string-like is written to a map.

    Reads never raise this: ``get``, ``has``, ``delete`` and equality treat
    such keys as absent.
    """

    def __init__(self, key=None, *args):
        if not args:
            args = (f"Can't convert {type(key).__name__} into str",)
        super().__init__(*args)
        self.key = key


class UnsupportedOperationError(NotImplementedError):
    """Raised by operations kept only for API compatibility."""


class OddArgumentCountError(ValueError):
    """Raised when a flat key/value sequence has an odd number of items."""
