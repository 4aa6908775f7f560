from __future__ import annotations

import io
import pathlib
from typing import Any, ClassVar

import joblib
from typing_extensions import Self

from casemap.core.constants import (
    CASEMAP_EXTENSION,
    CASEMAP_FILE_VERSION,
    CASEMAP_HEADER,
    CASEMAP_STATE_TARGET,
)


class SerializableMixin:
    """
    State, bytes and file round trips for casemap containers.

    A subclass provides `get_state()` / `set_state()` and names its
    `serial_kind`. The kind is written into every payload header and into
    the file suffix (`<name>.<kind>.casemap`). Loading checks it, so a
    payload is only restored by a class declaring the same kind. Subclasses
    inherit the kind of their parent unless they set their own.

    `set_state()` must work on an instance allocated without `__init__`.
    """

    serial_kind: ClassVar[str]

    @classmethod
    def file_suffix(cls) -> str:
        return f".{cls.serial_kind}{CASEMAP_EXTENSION}"

    # ================================================
    # State
    # ================================================
    def get_state(self) -> dict[str, Any]:
        """Return a pure-Python dict that `set_state()` can rebuild the object from."""
        raise NotImplementedError

    def set_state(self, state: dict[str, Any]) -> None:
        raise NotImplementedError

    @classmethod
    def from_state(cls, state: dict[str, Any]) -> Self:
        obj = cls.__new__(cls)
        obj.set_state(state)
        return obj

    # ================================================
    # Bytes
    # ================================================
    def to_bytes(self) -> bytes:
        """Dump the header and state as one zlib-compressed joblib payload."""
        header = {
            "version": CASEMAP_FILE_VERSION,
            "kind": self.serial_kind,
            CASEMAP_STATE_TARGET: f"{type(self).__module__}.{type(self).__qualname__}",
        }
        buffer = io.BytesIO()
        joblib.dump({CASEMAP_HEADER: header, "state": self.get_state()}, buffer, compress=("zlib", 3))
        return buffer.getvalue()

    @classmethod
    def from_bytes(cls, blob: bytes) -> Self:
        """
        Rebuild an object from the output of `to_bytes()`.

        Raises:
            ValueError: If the payload carries no casemap header.
            TypeError: If the payload was written for a different kind.

        """
        payload = joblib.load(io.BytesIO(blob))
        if not isinstance(payload, dict) or CASEMAP_HEADER not in payload:
            raise ValueError("Invalid casemap file received.")

        kind = payload[CASEMAP_HEADER].get("kind")
        if kind != cls.serial_kind:
            msg = f"File contains kind '{kind}' but {cls.__name__} expects kind '{cls.serial_kind}'."
            raise TypeError(msg)
        return cls.from_state(payload["state"])

    # ================================================
    # Files
    # ================================================
    def save(self, path: str | pathlib.Path, *, overwrite: bool = False) -> pathlib.Path:
        """
        Write `to_bytes()` to `path` and return the path actually written.

        The kind suffix is appended when `path` does not already end with it.
        """
        path = pathlib.Path(path)
        suffix = self.file_suffix()
        if not path.name.endswith(suffix):
            path = path.with_suffix("").with_suffix(suffix)
        if path.exists() and not overwrite:
            msg = f"File already exists: {path}"
            raise FileExistsError(msg)

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_bytes())
        return path

    @classmethod
    def load(cls, path: str | pathlib.Path) -> Self:
        path = pathlib.Path(path)
        if not path.exists():
            msg = f"No such file: {path}"
            raise FileNotFoundError(msg)
        return cls.from_bytes(path.read_bytes())
