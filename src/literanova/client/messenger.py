# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
"""
User-facing actions of the client.

Every component error is caught here and turned into the status line in
`AppState.status`; nothing below this layer reaches the front end as an
exception.
"""
from __future__ import annotations

from typing import BinaryIO, Callable, List, Optional

# ---------------- Local Project ----------------
from .app_state import AppState
from ..core.errors import AttachmentError, ResolutionError, SendError, SessionError, status_message
from ..core.models import AddressEntry, InboxEntry, Request, Thread
from ..messaging.policy import AccessPolicy, TARGET_REQUEST, TARGET_SKIPPED
from ..messaging.threads import (ComposeTarget, Dispatch, ThreadEngine, SendResult,
                                 STATUS_RESOLVED, STATUS_RESOLVING, TARGET_REPLY)
from ..storage.repository import MessageRepository
from ..utils import config as CFG
from ..utils.helpers import Clock, now_ms
from ..wallet.address import canonical_or_none, is_name, short_addr
from ..wallet.resolver import IdentifierResolver
from ..wallet.session_gate import SessionGate
from ..wallet.signer import Signer

# ---------------- Logger ----------------
from ..utils.nova_logging import get_ctx_logger
log = get_ctx_logger("literanova.client(messenger)")

LOCKED_STATUS = "INBOX LOCKED. SIGN THE UNLOCK MESSAGE FIRST."


class Messenger:
    def __init__(
        self,
        repo: MessageRepository,
        resolver: IdentifierResolver,
        signer: Optional[Signer] = None,
        clock: Optional[Clock] = None,
        state: Optional[AppState] = None,
    ) -> None:
        self.repo = repo
        self.resolver = resolver
        self.signer = signer
        self.clock: Clock = clock or now_ms
        self.state = state or AppState()
        self.policy = AccessPolicy(repo, clock=self.clock)
        self.gate = SessionGate(repo, clock=self.clock)
        self.engine = ThreadEngine(repo, self.policy, resolver, clock=self.clock)
        self._subscribed = False

    # ---------- wallet ----------
    def connect(self) -> Optional[str]:
        if self.signer is None:
            self.state.set_status(status_message(SessionError(SessionError.NO_SIGNER)))
            return None
        try:
            accounts = self.signer.request_accounts()
        except Exception as e:
            log.info("[connect] account request refused: %s", e)
            self.state.set_status("WALLET CONNECTION CANCELLED.")
            return None

        self.state.account = canonical_or_none(accounts[0]) if accounts else None
        if self.state.account is None:
            self.state.set_status("WALLET CONNECTION CANCELLED.")
            return None
        if not self._subscribed:
            self.signer.on_accounts_changed(self._on_accounts_changed)
            self._subscribed = True
        log.info("[connect] wallet connected", extra={"account": self.state.account})
        self.state.set_status("WALLET CONNECTED.\n\nSELECT AN ADDRESS OR OPEN INBOX.")
        return self.state.account

    def _on_accounts_changed(self, accounts: List[str]) -> None:
        self.state.account = canonical_or_none(accounts[0]) if accounts else None
        self.gate.on_accounts_changed(accounts)
        self.state.set_status(f"ACCOUNT: {self.state.account or 'NOT CONNECTED'}")

    # ---------- session ----------
    def unlock(self) -> bool:
        try:
            session = self.gate.issue_session(self.state.account, self.signer)
        except SessionError as e:
            self.state.set_status(status_message(e))
            return False
        self.state.set_status(f"INBOX UNLOCKED FOR {short_addr(session.owner_account).upper()}.")
        return True

    def lock(self) -> None:
        self.gate.lock()
        self.state.set_status("INBOX LOCKED.")

    def is_unlocked(self) -> bool:
        return self.state.account is not None and self.gate.is_unlocked(self.state.account)

    def _require_unlocked(self) -> bool:
        if self.is_unlocked():
            return True
        self.state.set_status(LOCKED_STATUS)
        return False

    # ---------- compose ----------
    def _compose_status(self, target: ComposeTarget) -> str:
        if target.status == STATUS_RESOLVING:
            resolved = "(RESOLVING...)"
        elif target.status == STATUS_RESOLVED:
            resolved = target.address
        else:
            resolved = "(NOT FOUND)"
        return (f"NEW MESSAGE TO: {target.raw.upper()}\n"
                f"RESOLVED: {resolved}\n\n"
                "TYPE YOUR MESSAGE BELOW.")

    def _show_target(self, target: ComposeTarget) -> ComposeTarget:
        self.state.show_add_buttons = target.status == STATUS_RESOLVED
        self.state.set_status(self._compose_status(target))
        return target

    def open_compose(self, raw: str) -> ComposeTarget:
        self.state.show_add_buttons = False
        return self._show_target(self.engine.open_compose(raw))

    def open_compose_async(self, raw: str, dispatch: Optional[Dispatch] = None,
                           on_done: Optional[Callable[[ComposeTarget, bool], None]] = None) -> ComposeTarget:
        self.state.show_add_buttons = False

        def _done(target: ComposeTarget, applied: bool) -> None:
            if applied:
                self._show_target(target)
            if on_done is not None:
                on_done(target, applied)

        target = self.engine.open_compose_async(raw, dispatch=dispatch, on_done=_done)
        if target.status == STATUS_RESOLVING:
            self.state.set_status(self._compose_status(target))
        return target

    def handle_to_go(self, raw: str) -> Optional[ComposeTarget]:
        try:
            res = self.resolver.resolve(raw)
        except ResolutionError as e:
            self.state.set_status(status_message(e))
            self.state.show_add_buttons = False
            return None
        return self._show_target(self.engine.use_resolution(res.display, res))

    def attach(self, fileobj: BinaryIO, filename: Optional[str] = None, mime_type: Optional[str] = None) -> bool:
        try:
            att = self.engine.attach(fileobj, filename=filename, mime_type=mime_type)
        except AttachmentError as e:
            self.state.set_status(status_message(e))
            return False
        self.state.set_status(f"ATTACHED: {att.filename.upper()} ({att.byte_size} BYTES)")
        return True

    def detach(self) -> None:
        self.engine.clear_attachment()
        self.state.set_status("ATTACHMENT REMOVED.")

    def send(self, body: str, certified: bool = False) -> Optional[SendResult]:
        try:
            result = self.engine.send(self.state.account, body, certified=certified)
        except SendError as e:
            self.state.set_status(status_message(e))
            return None
        if result is None:
            return None

        msg = result.message
        if result.target == TARGET_REPLY:
            self.state.set_status(f"TO: {msg.to.upper()}\n\n{msg.body}\n\n[SENT REPLY]")
            return result

        target = self.engine.compose
        ens_line = f"ENS: {target.raw.upper()}\n\n" if target and is_name(target.raw) else "\n"
        tags = {TARGET_REQUEST: "[SENT AS REQUEST]", TARGET_SKIPPED: "[NOT DELIVERED]"}
        tag = tags.get(result.target, "[SENT]")
        self.state.set_status(f"TO: {msg.to.upper()}\n{ens_line}{msg.body}\n\n{tag}")
        return result

    # ---------- inbox / requests ----------
    def inbox(self) -> List[InboxEntry]:
        if not self._require_unlocked():
            return []
        entries = self.policy.visible_inbox()
        if not entries:
            self.state.set_status("NO NEW MESSAGES")
        return entries

    def requests(self) -> List[Request]:
        if not self._require_unlocked():
            return []
        entries = self.policy.visible_requests()
        if not entries:
            self.state.set_status("NO PENDING REQUESTS")
        return entries

    def open_thread(self, thread_id: str) -> Optional[Thread]:
        if not self._require_unlocked():
            return None
        self.state.show_add_buttons = False
        thread = self.engine.open_thread(thread_id)
        if thread is None:
            self.state.set_status("THREAD NOT FOUND.")
            return None
        last = thread.latest()
        if last is None:
            self.state.set_status("THREAD HAS NO MESSAGES.")
            return thread
        lines = [f"FROM: {last.sender.upper()}", f"TO: {last.to.upper()}", ""]
        if last.certified:
            lines.insert(0, "[CERTIFIED]")
        lines.append(last.body)
        if last.attachment:
            lines.append(f"[ATTACHMENT: {last.attachment.filename}]")
        self.state.set_status("\n".join(lines) + "\n")
        return thread

    def accept(self, request_id: str) -> bool:
        if not self._require_unlocked():
            return False
        if not self.policy.accept_request(request_id):
            self.state.set_status("REQUEST NOT FOUND.")
            return False
        self.state.set_status("REQUEST ACCEPTED.")
        return True

    def block(self, request_id: str) -> bool:
        if not self._require_unlocked():
            return False
        if not self.policy.block_request(request_id):
            self.state.set_status("REQUEST NOT FOUND.")
            return False
        self.state.set_status("SENDER BLOCKED.")
        return True

    # ---------- address lists ----------
    def _save_target(self, into: str) -> bool:
        target = self.engine.compose
        if target is None or target.status != STATUS_RESOLVED or not target.address:
            return False
        label = target.raw if is_name(target.raw) else short_addr(target.address)
        if into == "favorites":
            self.policy.add_favorite(label, target.address)
            heading = "ADDED TO FAVORITES"
        else:
            self.policy.add_contact(label, target.address)
            heading = "ADDED TO CONTACTS"
        self.state.set_status(f"{heading}:\n{label.upper()}\n{target.address}")
        return True

    def add_favorite(self) -> bool:
        return self._save_target("favorites")

    def add_contact(self) -> bool:
        return self._save_target("contacts")

    def favorites(self) -> List[AddressEntry]:
        return self.repo.favorites()

    def contacts(self) -> List[AddressEntry]:
        return self.repo.contacts()

    @staticmethod
    def preset_addresses() -> List[str]:
        return list(CFG.PRESET_ADDRESSES)
