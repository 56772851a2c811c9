# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: EIP-191

import os
import sys

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")
for path in (PROJECT_ROOT, SRC_ROOT):
    if path not in sys.path:
        sys.path.append(path)

from literanova.core.errors import SessionError  # noqa: E402
from literanova.utils import config as CFG  # noqa: E402
from literanova.wallet.session_gate import LOCKED, UNLOCKED, SessionGate  # noqa: E402

from conftest import ALICE, BOB, FakeSigner  # noqa: E402

HOUR_MS = 60 * 60 * 1000


@pytest.fixture
def gate(repo, clock):
    return SessionGate(repo, clock=clock)


def test_locked_without_session(gate):
    assert gate.state() == LOCKED
    assert gate.state(ALICE) == LOCKED


def test_unlock_lasts_twelve_hours(gate, clock):
    session = gate.issue_session(ALICE, FakeSigner(ALICE))
    assert session.expiry == clock.now + 12 * HOUR_MS
    assert gate.state(ALICE) == UNLOCKED

    clock.advance(12 * HOUR_MS)
    assert gate.state(ALICE) == UNLOCKED
    clock.advance(1)
    assert gate.state(ALICE) == LOCKED


def test_session_bound_to_owner(gate):
    gate.issue_session(ALICE, FakeSigner(ALICE))
    assert gate.is_unlocked(ALICE.upper().replace("0X", "0x"))
    assert not gate.is_unlocked(BOB)
    assert gate.is_unlocked(None)


def test_session_survives_reload(repo, clock):
    SessionGate(repo, clock=clock).issue_session(ALICE, FakeSigner(ALICE))
    assert SessionGate(repo, clock=clock).is_unlocked(ALICE)


def test_challenge_names_account_and_is_signed(gate, repo):
    signer = FakeSigner(ALICE)
    gate.issue_session(ALICE, signer)
    text = signer.signed[0]
    assert text.startswith("LiteraNova unlock\n")
    assert "Nonce: " in text
    stored = repo.session()
    assert stored.signed_message == text
    assert stored.signature == "0x" + "ab" * 65


def test_nonce_changes_between_challenges(gate):
    assert gate.build_challenge(ALICE) != gate.build_challenge(ALICE)


def test_declined_signature_keeps_previous_session(gate, repo, clock):
    first = gate.issue_session(ALICE, FakeSigner(ALICE))
    clock.advance(HOUR_MS)
    with pytest.raises(SessionError) as ei:
        gate.issue_session(ALICE, FakeSigner(ALICE, decline=True))
    assert ei.value.reason == SessionError.SIGNATURE_DECLINED
    assert repo.session() == first


def test_declined_signature_with_no_session_stays_locked(gate, repo):
    with pytest.raises(SessionError):
        gate.issue_session(ALICE, FakeSigner(ALICE, decline=True))
    assert repo.session() is None
    assert gate.state(ALICE) == LOCKED


def test_missing_signer_and_account(gate):
    with pytest.raises(SessionError) as ei:
        gate.issue_session(ALICE, None)
    assert ei.value.reason == SessionError.NO_SIGNER
    with pytest.raises(SessionError) as ei:
        gate.issue_session(None, FakeSigner(ALICE))
    assert ei.value.reason == SessionError.NOT_CONNECTED


def test_empty_signature_is_declined(gate):
    class Blank(FakeSigner):
        def sign_message(self, text):
            return ""

    with pytest.raises(SessionError) as ei:
        gate.issue_session(ALICE, Blank(ALICE))
    assert ei.value.reason == SessionError.SIGNATURE_DECLINED


def test_lock_drops_session(gate, repo):
    gate.issue_session(ALICE, FakeSigner(ALICE))
    gate.lock()
    assert repo.session() is None
    assert gate.state(ALICE) == LOCKED


def test_account_switch_locks_without_touching_storage(gate, repo):
    gate.issue_session(ALICE, FakeSigner(ALICE))
    gate.on_accounts_changed([BOB])
    assert not gate.is_unlocked(BOB)
    assert repo.session() is not None
    gate.on_accounts_changed([ALICE])
    assert gate.is_unlocked(ALICE)


def test_custom_ttl(repo, clock):
    gate = SessionGate(repo, clock=clock, ttl_ms=1000)
    gate.issue_session(ALICE, FakeSigner(ALICE))
    clock.advance(1001)
    assert not gate.is_unlocked(ALICE)
    assert CFG.SESSION_TTL_MS == 12 * HOUR_MS
