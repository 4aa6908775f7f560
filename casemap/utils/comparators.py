import numpy as np


def deep_equal(a, b) -> bool:
    """
    Recursively check value equality of arbitrarily nested dicts/lists/tuples.

    NumPy arrays are compared element-wise with ``np.array_equal`` so that map
    values holding arrays can take part in equality and value lookups without
    raising ``ValueError`` on ambiguous truth values.
    """
    if a is b:
        return True

    # NumPy array
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return isinstance(a, np.ndarray) and isinstance(b, np.ndarray) and np.array_equal(a, b)

    # Primitive types
    if isinstance(a, (int, float, str, bool)) or a is None:
        return bool(a == b)

    # Dictionary
    if isinstance(a, dict) and isinstance(b, dict):
        if set(a.keys()) != set(b.keys()):
            return False
        return all(deep_equal(a[k], b[k]) for k in a)

    # List or tuple (a list never equals a tuple)
    if (isinstance(a, list) and isinstance(b, list)) or (isinstance(a, tuple) and isinstance(b, tuple)):
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b, strict=True))

    # Fallback
    return bool(a == b)
