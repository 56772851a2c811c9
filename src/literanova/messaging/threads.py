# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

# ---------------- Local Project ----------------
from .attachments import ingest
from .policy import AccessPolicy
from ..core.errors import AttachmentError, ResolutionError, SendError
from ..core.models import Attachment, Message, Thread
from ..storage.repository import MessageRepository
from ..utils.helpers import Clock, now_ms, uid
from ..wallet.resolver import IdentifierResolver, Resolution

# ---------------- Logger ----------------
from ..utils.nova_logging import get_ctx_logger
log = get_ctx_logger("literanova.messaging(threads)")

MODE_COMPOSE = "compose"
MODE_THREAD = "thread"

STATUS_RESOLVING = "resolving"
STATUS_RESOLVED = "resolved"
STATUS_NOT_FOUND = "not_found"

TARGET_REPLY = "reply"

Dispatch = Callable[[Callable[[], None]], None]


@dataclass
class ComposeTarget:
    raw: str
    generation: int
    status: str = STATUS_RESOLVING
    address: Optional[str] = None
    display_name: Optional[str] = None
    error: Optional[ResolutionError] = None

    @property
    def label(self) -> str:
        return self.display_name or self.address or self.raw


@dataclass(frozen=True)
class SendResult:
    thread_id: str
    message: Message
    target: str


class ThreadEngine:
    def __init__(
        self,
        repo: MessageRepository,
        policy: AccessPolicy,
        resolver: IdentifierResolver,
        clock: Optional[Clock] = None,
    ) -> None:
        self.repo = repo
        self.policy = policy
        self.resolver = resolver
        self.clock: Clock = clock or now_ms

        self.mode = MODE_COMPOSE
        self.compose: Optional[ComposeTarget] = None
        self.active_thread_id: Optional[str] = None
        self.pending_attachment: Optional[Attachment] = None
        self._generation = 0
        self._gen_lock = threading.Lock()

    # ---------- compose target ----------
    def begin_compose(self, raw: str) -> ComposeTarget:
        with self._gen_lock:
            self._generation += 1
            target = ComposeTarget(raw=(raw or "").strip(), generation=self._generation)
            self.compose = target
        self.mode = MODE_COMPOSE
        self.active_thread_id = None
        log.trace("[begin_compose] gen=%d raw=%s", target.generation, target.raw)
        return target

    def apply_resolution(
        self,
        generation: int,
        resolution: Optional[Resolution],
        error: Optional[ResolutionError] = None,
    ) -> bool:
        """Store a finished lookup, unless the user has moved on to another target since."""
        with self._gen_lock:
            target = self.compose
            if target is None or target.generation != generation or self.mode != MODE_COMPOSE:
                log.debug("[apply_resolution] stale result for gen=%d discarded", generation)
                return False
            if resolution is not None:
                target.status = STATUS_RESOLVED
                target.address = resolution.address
                target.display_name = resolution.display_name
                target.error = None
            else:
                target.status = STATUS_NOT_FOUND
                target.address = None
                target.error = error
        return True

    def open_compose(self, raw: str) -> ComposeTarget:
        target = self.begin_compose(raw)
        try:
            res = self.resolver.resolve(target.raw)
        except ResolutionError as e:
            self.apply_resolution(target.generation, None, e)
        else:
            self.apply_resolution(target.generation, res)
        return target

    def open_compose_async(
        self,
        raw: str,
        dispatch: Optional[Dispatch] = None,
        on_done: Optional[Callable[[ComposeTarget, bool], None]] = None,
    ) -> ComposeTarget:
        """
        Resolve on a worker thread. `dispatch` hands the completion back to the
        caller's own loop (defaults to running it on the worker).
        """
        target = self.begin_compose(raw)
        run = dispatch or (lambda fn: fn())

        def _on_resolved(res: Optional[Resolution], err: Optional[ResolutionError]) -> None:
            def _apply() -> None:
                applied = self.apply_resolution(target.generation, res, err)
                if on_done is not None:
                    on_done(target, applied)
            run(_apply)

        self.resolver.resolve_async(target.raw, _on_resolved)
        return target

    def use_resolution(self, raw: str, resolution: Resolution) -> ComposeTarget:
        target = self.begin_compose(raw)
        self.apply_resolution(target.generation, resolution)
        return target

    # ---------- attachments ----------
    def attach(self, fileobj: BinaryIO, filename: Optional[str] = None, mime_type: Optional[str] = None) -> Attachment:
        try:
            att = ingest(fileobj, filename=filename, mime_type=mime_type)
        except AttachmentError:
            self.pending_attachment = None
            raise
        self.pending_attachment = att
        return att

    def clear_attachment(self) -> None:
        self.pending_attachment = None

    # ---------- send ----------
    def _new_message(self, sender: str, to: str, body: str, certified: bool) -> Message:
        return Message(
            id=uid(),
            sender=sender,
            to=to,
            body=body,
            ts=self.clock(),
            certified=bool(certified),
            attachment=self.pending_attachment,
        )

    def send(self, sender: Optional[str], body: str, certified: bool = False) -> Optional[SendResult]:
        text = (body or "").strip()
        if not text:
            return None
        if not sender:
            raise SendError(SendError.NOT_CONNECTED)

        if self.mode == MODE_THREAD and self.active_thread_id:
            result = self._send_reply(sender, text, certified)
        else:
            result = self._send_first(sender, text, certified)
        if result is not None:
            self.pending_attachment = None
        return result

    def _send_first(self, sender: str, body: str, certified: bool) -> SendResult:
        target = self.compose
        if target is None or target.status != STATUS_RESOLVED or not target.address:
            raise SendError(SendError.NO_RECIPIENT, target.raw if target else "")

        thread_id = uid()
        msg = self._new_message(sender, target.address, body, certified)
        thread = Thread(thread_id=thread_id, participants=(sender, target.address), messages=(msg,))
        self.repo.put_thread(thread)

        decision = self.policy.route(msg, thread_id)
        log.info("[send] new thread routed to %s", decision.target, extra={"account": sender, "conv": thread_id})

        # later sends from this view are replies in the same thread
        self.mode = MODE_THREAD
        self.active_thread_id = thread_id
        return SendResult(thread_id=thread_id, message=msg, target=decision.target)

    def _send_reply(self, sender: str, body: str, certified: bool) -> Optional[SendResult]:
        threads = self.repo.threads()
        thread = threads.get(self.active_thread_id)
        if thread is None:
            log.warning("[send] active thread vanished", extra={"conv": self.active_thread_id})
            return None

        other = thread.other_participant(sender)
        msg = self._new_message(sender, other, body, certified)
        threads[thread.thread_id] = thread.with_message(msg)
        self.repo.save_threads(threads)

        # replies skip the contact/request gate
        self.policy.deliver_inbox(thread.thread_id, sender, msg.certified)
        log.info("[send] reply appended", extra={"account": sender, "conv": thread.thread_id})
        return SendResult(thread_id=thread.thread_id, message=msg, target=TARGET_REPLY)

    # ---------- reading ----------
    def open_thread(self, thread_id: str) -> Optional[Thread]:
        inbox = self.repo.inbox()
        kept = [e for e in inbox if e.thread_id != thread_id]
        if len(kept) != len(inbox):
            self.repo.save_inbox(kept)

        self.mode = MODE_THREAD
        self.active_thread_id = thread_id
        self.pending_attachment = None
        thread = self.repo.thread(thread_id)
        if thread is None:
            log.warning("[open_thread] thread not found", extra={"conv": thread_id})
        return thread

    def latest(self, thread_id: str) -> Optional[Message]:
        thread = self.repo.thread(thread_id)
        return thread.latest() if thread else None
