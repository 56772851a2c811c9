# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
from __future__ import annotations

import os, threading, lmdb
from typing import Optional

from ..utils import config as CFG


class LmdbKV:
    """One LMDB environment with a single named sub-database."""

    def __init__(
        self,
        path: str,
        db_name: str = CFG.LMDB_DB_NAME,
        map_size_init: int = CFG.LMDB_MAP_SIZE_INIT,
        map_size_max: int = CFG.LMDB_MAP_SIZE_MAX,
    ) -> None:
        self.path = path
        self.db_name = db_name
        self.map_size_init = int(map_size_init)
        self.map_size_max = int(map_size_max)
        self._env = None
        self._db = None
        self._lock = threading.RLock()

    def _ensure_env(self):
        with self._lock:
            if self._env is None:
                os.makedirs(self.path, exist_ok=True)
                self._env = lmdb.open(self.path, map_size=self.map_size_init, max_dbs=4,
                                      create=True, lock=True, subdir=True)
                self._db = self._env.open_db(self.db_name.encode("utf-8"), create=True)
            return self._env, self._db

    def _grow_env_map(self, min_target: int | None = None) -> int:
        env, _ = self._ensure_env()
        cur = int(env.info().get("map_size", 0) or 0)
        # Double, or at least accommodate min_target, capped by MAX
        new = max(cur * 2, cur + (cur // 2))
        if min_target and min_target > new:
            new = min_target
        if new > self.map_size_max:
            new = self.map_size_max
        if new <= cur:
            return cur
        env.set_mapsize(new)
        return new

    def get(self, key: bytes) -> Optional[bytes]:
        env, db = self._ensure_env()
        with env.begin(db=db, write=False) as txn:
            val = txn.get(key)
        return bytes(val) if val is not None else None

    def put(self, key: bytes, val: bytes) -> None:
        env, db = self._ensure_env()
        try:
            with env.begin(db=db, write=True) as txn:
                txn.put(key, val)
        except lmdb.MapFullError:
            self._grow_env_map(min_target=self.map_size_init + 2 * len(val))
            with env.begin(db=db, write=True) as txn:
                txn.put(key, val)

    def delete(self, key: bytes) -> None:
        env, db = self._ensure_env()
        with env.begin(db=db, write=True) as txn:
            txn.delete(key)

    def close(self) -> None:
        with self._lock:
            if self._env is not None:
                self._env.close()
            self._env = None
            self._db = None
