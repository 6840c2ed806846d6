"""JSON-file persistence for accounts, the active session and saved analyses.

One file per workspace; every read-modify-write happens under the store lock.
"""
from __future__ import annotations
import json
import os
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional
from unbind.utils.logger import logger
from unbind.utils.types import StoredAnalysis

_EMPTY: Dict[str, Any] = {"users": [], "analyses": [], "session": None}


class JsonStore:
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = Lock()

    @classmethod
    def in_workspace(cls, workspace_dir: str, name: str = "unbind_store.json") -> "JsonStore":
        os.makedirs(workspace_dir, exist_ok=True)
        return cls(Path(workspace_dir) / name)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {k: (list(v) if isinstance(v, list) else v) for k, v in _EMPTY.items()}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Store %s is corrupt, starting empty: %s", self.path, e)
            data = {}
        for key, default in _EMPTY.items():
            data.setdefault(key, list(default) if isinstance(default, list) else default)
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)

    # --- users ---
    def get_users(self) -> List[Dict[str, Any]]:
        with self._lock:
            return self._read()["users"]

    def add_user(self, record: Dict[str, Any]) -> None:
        with self._lock:
            data = self._read()
            data["users"].append(record)
            self._write(data)

    # --- session ---
    def get_session(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._read()["session"]

    def set_session(self, user: Optional[Dict[str, Any]]) -> None:
        with self._lock:
            data = self._read()
            data["session"] = user
            self._write(data)

    # --- analyses ---
    def add_analysis(self, analysis: StoredAnalysis) -> None:
        with self._lock:
            data = self._read()
            data["analyses"].append(analysis.to_dict())
            self._write(data)

    def get_analyses(self) -> List[StoredAnalysis]:
        with self._lock:
            records = self._read()["analyses"]
        return [StoredAnalysis.from_dict(r) for r in records]
