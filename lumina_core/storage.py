"""Persistence utilities for the Lumina finance core services."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)

PROFILE_KEY = "lumina_profile"
TRANSACTIONS_KEY = "lumina_transactions"


class JSONStorage:
    """Key-value storage keeping one JSON document per key, with crash-safe writes."""

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)

    def load(self, key: str) -> Optional[Any]:
        """Return the stored payload for ``key`` or ``None`` when it was never written."""
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted JSON data in {path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

    def save(self, key: str, payload: Any) -> None:
        path = self._path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, ensure_ascii=False)
                handle.flush()
        except OSError as exc:
            raise PersistenceError(f"Unable to write to {temp_path}") from exc
        # Atomic move on POSIX; readers never observe a half-written record.
        temp_path.replace(path)
        logger.debug("Saved record %s", key)

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise PersistenceError(f"Unable to remove {path}") from exc
        logger.debug("Removed record %s", key)

    def exists(self, key: str) -> bool:
        return self._path_for(key).exists()

    def _path_for(self, key: str) -> Path:
        return self._base_path / f"{key}.json"

    @property
    def base_path(self) -> Path:
        return self._base_path
