from __future__ import annotations

import asyncio
import json
import logging
from functools import partial
from pathlib import Path
from typing import Any, Protocol

from app.errors import ProfileUnavailable

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    async def get(self, subject: str) -> dict[str, Any] | None: ...

    async def put(self, subject: str, record: dict[str, Any]) -> None: ...


class MemoryProfileStore:
    """Process-local store. Used when no profile file is configured."""

    def __init__(self, records: dict[str, dict[str, Any]] | None = None):
        self._records = dict(records or {})

    async def get(self, subject: str) -> dict[str, Any] | None:
        record = self._records.get(subject)
        return dict(record) if record is not None else None

    async def put(self, subject: str, record: dict[str, Any]) -> None:
        self._records[subject] = dict(record)


class JsonFileProfileStore:
    """Profiles kept in one JSON object keyed by subject id."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._write_lock = asyncio.Lock()

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Cannot read profile store %s: %s", self.path, e)
            raise ProfileUnavailable("Profile store is unreadable") from e
        if not isinstance(data, dict):
            logger.warning("Profile store %s is not a JSON object", self.path)
            raise ProfileUnavailable("Profile store is unreadable")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    async def get(self, subject: str) -> dict[str, Any] | None:
        loop = asyncio.get_running_loop()
        data = await loop.run_in_executor(None, self._read_all)
        record = data.get(subject)
        return record if isinstance(record, dict) else None

    async def put(self, subject: str, record: dict[str, Any]) -> None:
        loop = asyncio.get_running_loop()
        async with self._write_lock:
            data = await loop.run_in_executor(None, self._read_all)
            data[subject] = record
            await loop.run_in_executor(None, partial(self._write_all, data))
        logger.info("Stored profile for subject %s", subject)


def create_profile_store(path: str) -> ProfileStore:
    if path:
        return JsonFileProfileStore(path)
    return MemoryProfileStore()
