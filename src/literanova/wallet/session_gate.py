# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: EIP-191

from __future__ import annotations

from typing import List, Optional

# ---------------- Local Project ----------------
from .address import canonical_or_none, same_account
from .signer import Signer
from ..core.errors import SessionError
from ..core.models import Session
from ..storage.repository import MessageRepository
from ..utils import config as CFG
from ..utils.helpers import Clock, now_ms, random_nonce

# ---------------- Logger ----------------
from ..utils.nova_logging import get_ctx_logger
log = get_ctx_logger("literanova.wallet(session_gate)")

LOCKED = "LOCKED"
UNLOCKED = "UNLOCKED"


class SessionGate:
    """
    Time-limited unlock credential bound to one account.

    The stored Session record is the only state that survives a reload.
    Validity is recomputed from that record on every check: unexpired, and
    owned by the account passed in. Passing no account skips the owner
    check, so callers that need a connected owner test for one first.
    The signature itself is not verified.
    """

    def __init__(self, repo: MessageRepository, clock: Optional[Clock] = None, ttl_ms: int = CFG.SESSION_TTL_MS) -> None:
        self.repo = repo
        self.clock: Clock = clock or now_ms
        self.ttl_ms = int(ttl_ms)

    def build_challenge(self, owner: str) -> str:
        return CFG.SESSION_CHALLENGE.format(
            account=owner,
            nonce=random_nonce(CFG.SESSION_NONCE_BYTES),
            issued=self.clock(),
        )

    def issue_session(self, owner: Optional[str], signer: Optional[Signer]) -> Session:
        if signer is None:
            raise SessionError(SessionError.NO_SIGNER)
        account = canonical_or_none(owner)
        if account is None:
            raise SessionError(SessionError.NOT_CONNECTED)

        challenge = self.build_challenge(account)
        try:
            signature = signer.sign_message(challenge)
        except Exception as e:
            # previous Session stays as it was
            log.info("[issue_session] signature not obtained: %s", e, extra={"account": account})
            raise SessionError(SessionError.SIGNATURE_DECLINED, str(e)) from e
        if not signature:
            raise SessionError(SessionError.SIGNATURE_DECLINED, "empty signature")

        session = Session(
            owner_account=account,
            signature=str(signature),
            signed_message=challenge,
            expiry=self.clock() + self.ttl_ms,
        )
        self.repo.save_session(session)
        log.info("[issue_session] unlocked until %d", session.expiry, extra={"account": account})
        return session

    def is_unlocked(self, current_account: Optional[str] = None) -> bool:
        session = self.repo.session()
        if session is None or not session.is_valid_at(self.clock()):
            return False
        if current_account is None:
            return True
        return same_account(session.owner_account, current_account)

    def state(self, current_account: Optional[str] = None) -> str:
        return UNLOCKED if self.is_unlocked(current_account) else LOCKED

    def on_accounts_changed(self, accounts: List[str]) -> None:
        """Only logs. The stored Session is kept so switching back re-opens the inbox."""
        new = accounts[0] if accounts else None
        session = self.repo.session()
        if session is not None and not same_account(session.owner_account, new):
            log.info("[on_accounts_changed] connected account does not own the session, inbox locked",
                     extra={"account": new or "-"})

    def lock(self) -> None:
        self.repo.clear_session()
        log.info("[lock] session dropped")
