"""Flat-file JSON storage: one record per file inside a directory."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Stores JSON records as ``<directory>/<name>.json``.

    All disk access runs in a worker thread so the event loop never blocks.
    The directory is created on first write or explicit ``ensure_dir()``.
    """

    SUFFIX = ".json"

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}{self.SUFFIX}"

    # --- sync helpers (run via asyncio.to_thread) ---

    def _ensure_dir(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def _read(self, name: str) -> Any:
        with self.path_for(name).open(encoding="utf-8") as fh:
            return json.load(fh)

    def _write(self, name: str, data: Any) -> None:
        self._ensure_dir()
        target = self.path_for(name)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, target)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def _list(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            p.stem for p in self.directory.glob(f"*{self.SUFFIX}") if p.is_file()
        )

    # --- async API ---

    async def ensure_dir(self) -> None:
        await asyncio.to_thread(self._ensure_dir)

    async def load(self, name: str) -> Any:
        """Return the decoded record. Raises FileNotFoundError / ValueError."""
        return await asyncio.to_thread(self._read, name)

    async def save(self, name: str, data: Any) -> None:
        """Atomically replace the record (temp file + rename)."""
        await asyncio.to_thread(self._write, name, data)
        logger.debug(f"Saved {self.path_for(name)}")

    async def delete(self, name: str) -> bool:
        """Remove the record. Returns False if it did not exist."""
        path = self.path_for(name)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted {path}")
        return True

    async def list_names(self) -> list[str]:
        """Names of all stored records, sorted."""
        return await asyncio.to_thread(self._list)
