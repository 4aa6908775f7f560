import pytest

from casemap import CaseInsensitiveMap
from tests.shared.header_data import build_headers


# ==========================================================
# CaseInsensitiveMap fixtures
# ==========================================================
@pytest.fixture(params=["init", "assign", "from_flat", "default_factory", "default"])
def headers(request) -> CaseInsensitiveMap:
    """The same three HTTP headers, built through every construction path."""
    return build_headers(request.param)


@pytest.fixture
def plain_headers() -> CaseInsensitiveMap:
    """HTTP headers without any configured default."""
    return build_headers("init")


@pytest.fixture
def empty_map() -> CaseInsensitiveMap:
    return CaseInsensitiveMap()
