# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
"""
Typed view over the slot store.

Loading is parse-or-default: if any record in a slot is malformed the whole
slot is treated as absent. Saving always replaces the full collection.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, TypeVar

from .store import PersistentStore
from ..core.models import AddressEntry, BlockedEntry, InboxEntry, Request, Session, Thread
from ..utils import config as CFG

# ---------------- Logger ----------------
from ..utils.nova_logging import get_ctx_logger
log = get_ctx_logger("literanova.storage(repository)")

T = TypeVar("T")


class MessageRepository:
    def __init__(self, store: PersistentStore) -> None:
        self.store = store

    # ---------- generic list slots ----------
    def _load_list(self, slot: str, parse: Callable[[Any], T]) -> List[T]:
        raw = self.store.get(slot, [])
        if not isinstance(raw, list):
            log.warning("[load] %s is not a list, using empty default", slot)
            return []
        try:
            return [parse(item) for item in raw]
        except (ValueError, TypeError) as e:
            log.warning("[load] %s holds a malformed record, using empty default: %s", slot, e)
            return []

    def _save_list(self, slot: str, items: List[Any]) -> None:
        self.store.put(slot, [item.to_dict() for item in items])

    # ---------- threads ----------
    def threads(self) -> Dict[str, Thread]:
        raw = self.store.get(CFG.SLOT_THREADS, {})
        if not isinstance(raw, dict):
            log.warning("[load] threads slot is not a map, using empty default")
            return {}
        out: Dict[str, Thread] = {}
        try:
            for key, item in raw.items():
                th = Thread.from_dict(item)
                if th.thread_id != key:
                    raise ValueError(f"thread key {key} does not match threadId {th.thread_id}")
                out[key] = th
        except (ValueError, TypeError) as e:
            log.warning("[load] threads slot holds a malformed record, using empty default: %s", e)
            return {}
        return out

    def thread(self, thread_id: str) -> Optional[Thread]:
        return self.threads().get(thread_id)

    def save_threads(self, threads: Dict[str, Thread]) -> None:
        self.store.put(CFG.SLOT_THREADS, {k: t.to_dict() for k, t in threads.items()})

    def put_thread(self, thread: Thread) -> None:
        threads = self.threads()
        threads[thread.thread_id] = thread
        self.save_threads(threads)

    # ---------- inbox / requests ----------
    def inbox(self) -> List[InboxEntry]:
        return self._load_list(CFG.SLOT_INBOX, InboxEntry.from_dict)

    def save_inbox(self, entries: List[InboxEntry]) -> None:
        self._save_list(CFG.SLOT_INBOX, entries)

    def requests(self) -> List[Request]:
        return self._load_list(CFG.SLOT_REQUESTS, Request.from_dict)

    def save_requests(self, entries: List[Request]) -> None:
        self._save_list(CFG.SLOT_REQUESTS, entries)

    # ---------- address lists ----------
    def contacts(self) -> List[AddressEntry]:
        return self._load_list(CFG.SLOT_CONTACTS, AddressEntry.from_dict)

    def save_contacts(self, entries: List[AddressEntry]) -> None:
        self._save_list(CFG.SLOT_CONTACTS, entries)

    def favorites(self) -> List[AddressEntry]:
        return self._load_list(CFG.SLOT_FAVORITES, AddressEntry.from_dict)

    def save_favorites(self, entries: List[AddressEntry]) -> None:
        self._save_list(CFG.SLOT_FAVORITES, entries)

    def blocked(self) -> List[BlockedEntry]:
        return self._load_list(CFG.SLOT_BLOCKED, BlockedEntry.from_dict)

    def save_blocked(self, entries: List[BlockedEntry]) -> None:
        self._save_list(CFG.SLOT_BLOCKED, entries)

    # ---------- session ----------
    def session(self) -> Optional[Session]:
        raw = self.store.get(CFG.SLOT_SESSION, None)
        if raw is None:
            return None
        try:
            return Session.from_dict(raw)
        except (ValueError, TypeError) as e:
            log.warning("[load] session record is malformed, treating as absent: %s", e)
            return None

    def save_session(self, session: Session) -> None:
        self.store.put(CFG.SLOT_SESSION, session.to_dict())

    def clear_session(self) -> None:
        self.store.clear(CFG.SLOT_SESSION)
