import io

import joblib
import pytest

from casemap import CaseInsensitiveMap
from casemap.core.constants import CASEMAP_HEADER
from tests.shared.header_data import HTTP_HEADERS, missing_key_message


class _SettingsMap(CaseInsensitiveMap):
    serial_kind = "cfg"


# ==========================================================
# State
# ==========================================================
@pytest.mark.unit
def test_state_round_trip_keeps_order_and_default():
    m = CaseInsensitiveMap(HTTP_HEADERS, default="missing")
    state = m.get_state()
    assert state["entries"] == list(HTTP_HEADERS.items())
    assert "lookup" not in state

    restored = CaseInsensitiveMap.from_state(state)
    assert restored == m
    assert list(restored) == list(m)
    assert restored["content-type"] == HTTP_HEADERS["Content-Type"]
    assert restored["Not-Here"] == "missing"


@pytest.mark.unit
def test_state_without_default():
    restored = CaseInsensitiveMap.from_state(CaseInsensitiveMap({"A": 1}).get_state())
    assert not restored.has_default
    assert restored.get("missing") is None


# ==========================================================
# Bytes
# ==========================================================
@pytest.mark.unit
def test_bytes_round_trip():
    m = CaseInsensitiveMap(HTTP_HEADERS, default_factory=missing_key_message)
    restored = CaseInsensitiveMap.from_bytes(m.to_bytes())
    assert isinstance(restored, CaseInsensitiveMap)
    assert restored == HTTP_HEADERS
    assert restored["Not-Here"] == "missing: Not-Here"


@pytest.mark.unit
def test_from_bytes_rejects_foreign_payload():
    buffer = io.BytesIO()
    joblib.dump({"state": {}}, buffer)
    with pytest.raises(ValueError, match="Invalid casemap file"):
        CaseInsensitiveMap.from_bytes(buffer.getvalue())


@pytest.mark.unit
def test_from_bytes_rejects_other_kind():
    blob = CaseInsensitiveMap({"A": 1}).to_bytes()
    with pytest.raises(TypeError, match="_SettingsMap expects kind 'cfg'"):
        _SettingsMap.from_bytes(blob)

    with pytest.raises(TypeError, match="contains kind 'cfg'"):
        CaseInsensitiveMap.from_bytes(_SettingsMap({"A": 1}).to_bytes())


@pytest.mark.unit
def test_from_bytes_rejects_unknown_kind():
    buffer = io.BytesIO()
    joblib.dump({CASEMAP_HEADER: {"kind": "other"}, "state": {}}, buffer)
    with pytest.raises(TypeError, match="contains kind 'other'"):
        CaseInsensitiveMap.from_bytes(buffer.getvalue())


@pytest.mark.unit
def test_subclass_inherits_kind():
    class HeaderMap(CaseInsensitiveMap):
        pass

    restored = HeaderMap.from_bytes(CaseInsensitiveMap({"A": 1}).to_bytes())
    assert isinstance(restored, HeaderMap)
    assert restored == {"a": 1}


# ==========================================================
# Files
# ==========================================================
@pytest.mark.unit
def test_save_and_load(tmp_path):
    m = CaseInsensitiveMap(HTTP_HEADERS)
    path = m.save(tmp_path / "headers")
    assert path.name == "headers.cim.casemap"
    assert path.exists()

    loaded = CaseInsensitiveMap.load(path)
    assert loaded == m
    assert loaded.sorted_items() == m.sorted_items()


@pytest.mark.unit
def test_save_refuses_to_overwrite(tmp_path):
    m = CaseInsensitiveMap({"A": 1})
    path = m.save(tmp_path / "data.cim.casemap")
    with pytest.raises(FileExistsError):
        m.save(path)

    CaseInsensitiveMap({"B": 2}).save(path, overwrite=True)
    assert CaseInsensitiveMap.load(path) == {"b": 2}


@pytest.mark.unit
def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        CaseInsensitiveMap.load(tmp_path / "nope.cim.casemap")


@pytest.mark.unit
def test_save_uses_kind_suffix(tmp_path):
    path = _SettingsMap({"Debug": True}).save(tmp_path / "settings.json")
    assert path.name == "settings.cfg.casemap"
    assert _SettingsMap.load(path) == {"debug": True}
