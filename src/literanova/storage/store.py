# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
"""
Slot store: seven named slots, each holding one JSON value.

`get` never raises for missing or unparseable data, it hands back the caller's
default object untouched. `put` replaces the whole slot (last write wins).
There is no transaction across slots and no locking: callers own the
read-modify-write sequence on a single logical thread.
"""
from __future__ import annotations

import json, os, lmdb
from pathlib import Path
from typing import Any, Dict, Optional

from .kv import LmdbKV
from ..core.errors import StoreError
from ..utils import config as CFG

# ---------------- Logger ----------------
from ..utils.nova_logging import get_ctx_logger
log = get_ctx_logger("literanova.storage(store)")


class PersistentStore:
    def __init__(self, backend: Optional[str] = None, root: Optional[str] = None) -> None:
        self.backend = str(backend or CFG.KV_BACKEND).lower()
        if self.backend not in ("json", "lmdb", "memory"):
            raise ValueError(f"unknown store backend: {self.backend}")
        if self.backend == "json":
            self.root = Path(root or CFG.STORE_DIR)
        elif self.backend == "lmdb":
            self.root = Path(root or CFG.DB_DIR)
        else:
            self.root = None
        self._kv: Optional[LmdbKV] = LmdbKV(str(self.root)) if self.backend == "lmdb" else None
        self._mem: Dict[str, str] = {}

    @staticmethod
    def _check_slot(slot: str) -> None:
        if slot not in CFG.SLOTS:
            raise KeyError(f"unknown storage slot: {slot}")

    def _slot_path(self, slot: str) -> Path:
        return self.root / f"{slot}.json"

    # ---------- raw backend access ----------
    def _read_raw(self, slot: str) -> Optional[str]:
        if self.backend == "memory":
            return self._mem.get(slot)
        if self.backend == "lmdb":
            val = self._kv.get(slot.encode("utf-8"))
            return val.decode("utf-8") if val is not None else None
        path = self._slot_path(slot)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write_raw(self, slot: str, data: str) -> None:
        if self.backend == "memory":
            self._mem[slot] = data
            return
        if self.backend == "lmdb":
            self._kv.put(slot.encode("utf-8"), data.encode("utf-8"))
            return
        path = self._slot_path(slot)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush(); os.fsync(f.fileno())
        os.replace(tmp, path)

    # ---------- public ----------
    def get(self, slot: str, default: Any = None) -> Any:
        self._check_slot(slot)
        try:
            raw = self._read_raw(slot)
        except (OSError, UnicodeDecodeError, lmdb.Error) as e:
            log.warning("[get] read failed for %s, using default: %s", slot, e)
            return default
        if raw is None:
            return default
        try:
            val = json.loads(raw)
        except ValueError:
            log.warning("[get] slot %s is not valid JSON, using default", slot)
            return default
        return val

    def put(self, slot: str, value: Any) -> None:
        self._check_slot(slot)
        try:
            data = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StoreError("NOT_SERIALIZABLE", f"{slot}: {e}") from e
        self._write_raw(slot, data)
        log.trace("[put] %s <- %d bytes", slot, len(data))

    def clear(self, slot: str) -> None:
        self._check_slot(slot)
        if self.backend == "memory":
            self._mem.pop(slot, None)
        elif self.backend == "lmdb":
            self._kv.delete(slot.encode("utf-8"))
        else:
            path = self._slot_path(slot)
            if path.exists():
                path.unlink()

    def close(self) -> None:
        if self._kv is not None:
            self._kv.close()
