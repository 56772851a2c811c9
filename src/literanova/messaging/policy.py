# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
"""
Contact / request / block policy.

Accept and block touch several slots one after another with no transaction.
Each step is idempotent, so re-running an interrupted accept or block from
the start converges on the same state:

  accept: add contact (dedup) -> add inbox entry (skip if present) -> drop request
  block:  add to blocklist (dedup) -> drop the sender's requests -> purge the sender's inbox entries

Listings are also filtered against the blocklist at read time, which covers
the window where a block was interrupted or a later write slipped in.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

# ---------------- Local Project ----------------
from ..core.models import AddressEntry, BlockedEntry, InboxEntry, Message, Request
from ..storage.repository import MessageRepository
from ..utils.helpers import Clock, now_ms, uid
from ..wallet.address import canonical_or_none, same_account, short_addr, uniq_by_address

# ---------------- Logger ----------------
from ..utils.nova_logging import get_ctx_logger
log = get_ctx_logger("literanova.messaging(policy)")

TARGET_INBOX = "inbox"
TARGET_REQUEST = "request"
TARGET_SKIPPED = "skipped"


@dataclass(frozen=True)
class RouteDecision:
    target: str
    request: Optional[Request] = None


class AccessPolicy:
    def __init__(self, repo: MessageRepository, clock: Optional[Clock] = None) -> None:
        self.repo = repo
        self.clock: Clock = clock or now_ms

    # ---------- lookups ----------
    def is_contact(self, address: str) -> bool:
        return any(same_account(c.address, address) for c in self.repo.contacts())

    def is_blocked(self, address: str) -> bool:
        return any(same_account(b.address, address) for b in self.repo.blocked())

    def _blocked_set(self) -> set:
        return {b.address.lower() for b in self.repo.blocked()}

    # ---------- routing ----------
    def route(self, message: Message, thread_id: str) -> RouteDecision:
        """First message of a thread: known contact -> Inbox, anyone else -> Request."""
        if self.is_contact(message.sender):
            if self.deliver_inbox(thread_id, message.sender, message.certified):
                return RouteDecision(TARGET_INBOX)
            return RouteDecision(TARGET_SKIPPED)

        req = Request(
            id=uid(),
            thread_id=thread_id,
            sender=message.sender,
            ts=self.clock(),
            certified=message.certified,
        )
        # blocked senders still get their request recorded; listings hide it
        reqs = self.repo.requests()
        reqs.insert(0, req)
        self.repo.save_requests(reqs)
        log.debug("[route] request %s created", req.id, extra={"account": message.sender, "conv": thread_id})
        return RouteDecision(TARGET_REQUEST, req)

    def deliver_inbox(self, thread_id: str, sender: str, certified: bool = False) -> bool:
        if self.is_blocked(sender):
            log.info("[deliver_inbox] sender is blocked, inbox write skipped", extra={"account": sender, "conv": thread_id})
            return False
        inbox = self.repo.inbox()
        inbox.insert(0, InboxEntry(thread_id=thread_id, sender=sender, ts=self.clock(), certified=bool(certified)))
        self.repo.save_inbox(inbox)
        return True

    # ---------- request actions ----------
    def _find_request(self, request_id: str) -> Optional[Request]:
        for r in self.repo.requests():
            if r.id == request_id:
                return r
        return None

    def _label_for(self, address: str) -> str:
        for fav in self.repo.favorites():
            if same_account(fav.address, address) and fav.label:
                return fav.label
        return short_addr(address)

    def accept_request(self, request_id: str, label: Optional[str] = None) -> bool:
        req = self._find_request(request_id)
        if req is None:
            log.debug("[accept_request] %s not found, nothing to do", request_id)
            return False

        self.add_contact(label or self._label_for(req.sender), req.sender)

        inbox = self.repo.inbox()
        if not any(e.thread_id == req.thread_id and same_account(e.sender, req.sender) for e in inbox):
            inbox.insert(0, InboxEntry(thread_id=req.thread_id, sender=req.sender, ts=self.clock(), certified=req.certified))
            self.repo.save_inbox(inbox)

        self.repo.save_requests([r for r in self.repo.requests() if r.id != request_id])
        log.info("[accept_request] %s accepted", request_id, extra={"account": req.sender, "conv": req.thread_id})
        return True

    def block_request(self, request_id: str) -> bool:
        req = self._find_request(request_id)
        if req is None:
            log.debug("[block_request] %s not found, nothing to do", request_id)
            return False

        self.block(req.sender)
        log.info("[block_request] %s blocked", request_id, extra={"account": req.sender, "conv": req.thread_id})
        return True

    def block(self, address: str) -> None:
        blocked = self.repo.blocked()
        if not any(same_account(b.address, address) for b in blocked):
            blocked.append(BlockedEntry(address=address, ts=self.clock()))
            self.repo.save_blocked(blocked)

        reqs = self.repo.requests()
        kept = [r for r in reqs if not same_account(r.sender, address)]
        if len(kept) != len(reqs):
            self.repo.save_requests(kept)

        inbox = self.repo.inbox()
        kept_inbox = [e for e in inbox if not same_account(e.sender, address)]
        if len(kept_inbox) != len(inbox):
            self.repo.save_inbox(kept_inbox)
        log.debug("[block] purged %d request(s), %d inbox entry(ies)",
                  len(reqs) - len(kept), len(inbox) - len(kept_inbox), extra={"account": address})

    # ---------- read-side views ----------
    def visible_inbox(self) -> List[InboxEntry]:
        blocked = self._blocked_set()
        threads = self.repo.threads()
        return [e for e in self.repo.inbox() if e.sender.lower() not in blocked and e.thread_id in threads]

    def visible_requests(self) -> List[Request]:
        blocked = self._blocked_set()
        threads = self.repo.threads()
        return [r for r in self.repo.requests() if r.sender.lower() not in blocked and r.thread_id in threads]

    # ---------- address lists ----------
    def _add_to_list(self, entries: List[AddressEntry], label: str, address: str) -> Optional[List[AddressEntry]]:
        addr = canonical_or_none(address)
        if addr is None:
            raise ValueError(f"not a valid account id: {address!r}")
        if any(same_account(e.address, addr) for e in entries):
            return None
        entries.append(AddressEntry(label=(label or short_addr(addr)), address=addr, ts=self.clock()))
        return uniq_by_address(entries)

    def add_contact(self, label: str, address: str) -> bool:
        updated = self._add_to_list(self.repo.contacts(), label, address)
        if updated is None:
            return False
        self.repo.save_contacts(updated)
        return True

    def add_favorite(self, label: str, address: str) -> bool:
        updated = self._add_to_list(self.repo.favorites(), label, address)
        if updated is None:
            return False
        self.repo.save_favorites(updated)
        return True
