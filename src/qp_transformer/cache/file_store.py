"""File-backed durable cache tier: one JSON record per key."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from qp_transformer.cache.base import DurableStore
from qp_transformer.core.exceptions import CacheError

logger = logging.getLogger(__name__)


class FileCacheStore(DurableStore):
    """Stores each cache record as ``<cache_dir>/<key>.json``.

    The file name is the digest key, never the query text, so any query is
    safe to persist.
    """

    kind = "file"

    def __init__(self, cache_dir: str | Path = "./data/wikidata-cache") -> None:
        self._dir = Path(cache_dir)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.warning("Failed to create cache directory %s", self._dir, exc_info=True)

    @property
    def cache_dir(self) -> Path:
        return self._dir

    def path_for(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def read(self, key: str) -> dict[str, Any] | None:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return self._decode(key, raw)

    def write(self, record: dict[str, Any]) -> None:
        key = record["key"]
        self._dir.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(record, fh, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path_for(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def remove(self, key: str) -> bool:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            return False
        return True

    def purge(self) -> None:
        for path in self._json_files():
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Failed to delete cache file %s", path, exc_info=True)

    def records(self) -> Iterator[tuple[str, dict[str, Any] | None]]:
        for path in self._json_files():
            key = path.stem
            try:
                yield key, self._decode(key, path.read_text(encoding="utf-8"))
            except FileNotFoundError:
                continue
            except (CacheError, OSError):
                yield key, None

    def size_bytes(self) -> int:
        total = 0
        for path in self._json_files():
            try:
                total += path.stat().st_size
            except OSError:
                continue
        return total

    def _json_files(self) -> list[Path]:
        if not self._dir.is_dir():
            return []
        return sorted(self._dir.glob("*.json"))

    @staticmethod
    def _decode(key: str, raw: str) -> dict[str, Any]:
        try:
            record = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheError(key, f"Corrupt cache record {key}: {e}") from e
        if not isinstance(record, dict):
            raise CacheError(key, f"Cache record {key} is not an object")
        return record
