import numpy as np
import pytest

from casemap.utils.comparators import deep_equal


@pytest.mark.unit
@pytest.mark.parametrize(
    ("a", "b", "expected"),
    [
        (1, 1, True),
        (1, 2, False),
        ("a", "a", True),
        (None, None, True),
        (None, 0, False),
        ([1, [2, 3]], [1, [2, 3]], True),
        ([1, 2], [1, 2, 3], False),
        ({"a": [1]}, {"a": [1]}, True),
        ({"a": 1}, {"b": 1}, False),
        ((1, 2), (1, 2), True),
        ((1, 2), [1, 2], False),
        ([1, 2], (1, 2), False),
        ({"a": [1, 2]}, {"a": (1, 2)}, False),
        ([(1, 2)], [(1, 2)], True),
    ],
)
def test_deep_equal_builtin_values(a, b, expected):
    assert deep_equal(a, b) is expected


@pytest.mark.unit
def test_deep_equal_arrays():
    assert deep_equal(np.arange(3), np.arange(3))
    assert not deep_equal(np.arange(3), np.arange(4))
    assert not deep_equal(np.arange(3), [0, 1, 2])
    assert deep_equal({"x": np.ones(2)}, {"x": np.ones(2)})
