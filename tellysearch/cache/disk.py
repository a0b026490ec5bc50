"""Durable, namespaced key to bytes storage for detail records."""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import NamedTuple

from ..common.types import JSONMapping
from ..common.validation import require_positive_number
from ..errors import DiskIOError
from .memory import DEFAULT_TTL_SECONDS, Clock

RECORD_SUFFIX = ".json"
_TEMP_PREFIX = "."
_TEMP_SUFFIX = ".tmp"


@dataclass(frozen=True, slots=True)
class DiskUnavailable:
    """Result of :meth:`DiskTier.open` when the namespace cannot be used."""

    namespace: str
    path: Path
    reason: str


class _Record(NamedTuple):
    key: str
    expires_at: float
    payload: bytes


class DiskTier:
    """Persistent cache storing one JSON record file per key.

    Each record holds the key, its expiry instant and the payload bytes
    (base64 encoded). Records are written to a temporary file in the same
    directory and moved into place with :func:`os.replace`, so a reader
    never observes a partially written record.
    """

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        root: Path,
        namespace: str,
        ttl: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Clock = time.time,
    ) -> None:
        if not namespace or "/" in namespace or namespace in {".", ".."}:
            raise ValueError(f"Invalid disk namespace {namespace!r}")
        self.namespace = namespace
        self.ttl = require_positive_number(ttl, name="ttl")
        self.path = Path(root) / namespace
        self._clock = clock
        self._lock = Lock()
        self.path.mkdir(parents=True, exist_ok=True)

    @classmethod
    def open(
        cls,
        root: Path,
        namespace: str,
        ttl: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Clock = time.time,
    ) -> DiskTier | DiskUnavailable:
        """Create the tier, or describe why the namespace is unusable."""

        path = Path(root) / namespace
        try:
            tier = cls(root, namespace, ttl, clock=clock)
        except OSError as exc:
            cls._logger.warning(
                "Disk cache %s unavailable at %s: %s", namespace, path, exc
            )
            return DiskUnavailable(namespace=namespace, path=path, reason=str(exc))
        if not os.access(tier.path, os.W_OK | os.X_OK):
            reason = "directory is not writable"
            cls._logger.warning(
                "Disk cache %s unavailable at %s: %s", namespace, path, reason
            )
            return DiskUnavailable(namespace=namespace, path=path, reason=reason)
        return tier

    def record_path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.path / f"{digest}{RECORD_SUFFIX}"

    def get(self, key: str) -> bytes | None:
        """Return stored bytes for *key*, or ``None`` on any miss.

        Missing, unreadable, corrupt and expired records are all misses;
        corrupt and expired records are deleted.
        """

        path = self.record_path(key)
        with self._lock:
            record = self._read(path)
            if record is None:
                return None
            if record.key != key:
                self._logger.warning(
                    "Disk record %s holds %r instead of %r; ignoring it.",
                    path,
                    record.key,
                    key,
                )
                return None
            if self._clock() >= record.expires_at:
                self._logger.debug("Expired %s from %s disk tier", key, self.namespace)
                self._discard(path)
                return None
            return record.payload

    def put(self, key: str, data: bytes) -> None:
        """Persist *data* for *key* with a fresh expiry instant.

        Raises:
            DiskIOError: if the record could not be written.
        """

        record = {
            "key": key,
            "expires_at": self._clock() + self.ttl,
            "payload": base64.b64encode(bytes(data)).decode("ascii"),
        }
        encoded = json.dumps(record).encode("utf-8")
        with self._lock:
            self._write_atomic(self.record_path(key), encoded)

    def remove(self, key: str) -> None:
        """Delete the record for *key*; a missing record is not an error."""

        path = self.record_path(key)
        with self._lock:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                raise DiskIOError(
                    f"Failed to remove disk record {path}: {exc}", path=path
                ) from exc

    def keys(self) -> list[str]:
        """Keys of all readable, unexpired records, sorted."""

        now = self._clock()
        found: list[str] = []
        with self._lock:
            for path in self._record_files():
                record = self._read(path)
                if record is not None and now < record.expires_at:
                    found.append(record.key)
        return sorted(found)

    def clear(self) -> int:
        """Delete every record in the namespace and return how many were removed."""

        removed = 0
        with self._lock:
            for path in self._record_files():
                if self._discard(path):
                    removed += 1
            for path in self.path.glob(f"{_TEMP_PREFIX}*{_TEMP_SUFFIX}"):
                self._discard(path)
        return removed

    def purge_expired(self) -> int:
        """Delete expired and unreadable records; return how many were removed."""

        now = self._clock()
        removed = 0
        with self._lock:
            for path in self._record_files():
                try:
                    raw = path.read_bytes()
                except FileNotFoundError:
                    continue
                except OSError as exc:
                    self._logger.warning("Failed to read disk record %s: %s", path, exc)
                    continue
                record = self._parse(raw)
                if record is not None and now < record.expires_at:
                    continue
                if self._discard(path):
                    removed += 1
        if removed:
            self._logger.info(
                "Purged %d stale record(s) from %s disk tier", removed, self.namespace
            )
        return removed

    def _record_files(self) -> list[Path]:
        try:
            return sorted(self.path.glob(f"*{RECORD_SUFFIX}"))
        except OSError as exc:
            self._logger.warning("Failed to list disk cache %s: %s", self.path, exc)
            return []

    def _read(self, path: Path) -> _Record | None:
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            self._logger.warning(
                "Failed to read disk record %s; treating as a miss.", path, exc_info=exc
            )
            return None
        record = self._parse(raw)
        if record is None:
            self._logger.warning("Discarding corrupt disk record %s", path)
            self._discard(path)
        return record

    @staticmethod
    def _parse(raw: bytes) -> _Record | None:
        try:
            loaded = json.loads(raw)
        except (json.JSONDecodeError, UnicodeError):
            return None
        if not isinstance(loaded, dict):
            return None
        data: JSONMapping = loaded
        key = data.get("key")
        expires_at = data.get("expires_at")
        payload = data.get("payload")
        if (
            not isinstance(key, str)
            or isinstance(expires_at, bool)
            or not isinstance(expires_at, (int, float))
            or not isinstance(payload, str)
        ):
            return None
        try:
            decoded = base64.b64decode(payload, validate=True)
        except binascii.Error:
            return None
        return _Record(key=key, expires_at=float(expires_at), payload=decoded)

    def _discard(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            self._logger.warning("Failed to delete disk record %s: %s", path, exc)
            return False
        return True

    def _write_atomic(self, path: Path, data: bytes) -> None:
        temp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "wb",
                dir=self.path,
                prefix=_TEMP_PREFIX,
                suffix=_TEMP_SUFFIX,
                delete=False,
            ) as handle:
                temp_name = handle.name
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_name, path)
            temp_name = None
        except OSError as exc:
            raise DiskIOError(
                f"Failed to write disk record {path}: {exc}", path=path
            ) from exc
        finally:
            if temp_name is not None:
                try:
                    os.remove(temp_name)
                except OSError:
                    self._logger.debug("Could not remove temporary file %s", temp_name)

    def __repr__(self) -> str:
        return f"DiskTier(path={str(self.path)!r}, ttl={self.ttl})"


__all__ = ["DiskTier", "DiskUnavailable"]
