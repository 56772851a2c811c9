# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md

import io
import os
import sys
import threading

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")
for path in (PROJECT_ROOT, SRC_ROOT):
    if path not in sys.path:
        sys.path.append(path)

from literanova.core.errors import AttachmentError, SendError  # noqa: E402
from literanova.core.models import Message, Thread  # noqa: E402
from literanova.messaging.policy import TARGET_INBOX, TARGET_REQUEST  # noqa: E402
from literanova.messaging.threads import (MODE_COMPOSE, MODE_THREAD, STATUS_NOT_FOUND,  # noqa: E402
                                          STATUS_RESOLVED, STATUS_RESOLVING, TARGET_REPLY, ThreadEngine)
from literanova.wallet.address import canonical  # noqa: E402
from literanova.wallet.resolver import IdentifierResolver, Resolution  # noqa: E402

from conftest import ALICE, BOB, CAROL, T0, FakeEndpoint  # noqa: E402

PDF = b"%PDF-1.4\n%%EOF\n"


@pytest.fixture
def engine(repo, policy, clock):
    resolver = IdentifierResolver([FakeEndpoint("https://rpc.test", BOB)])
    return ThreadEngine(repo, policy, resolver, clock=clock)


def test_open_compose_resolves_target(engine):
    target = engine.open_compose("morpheus.eth")
    assert engine.mode == MODE_COMPOSE
    assert target.status == STATUS_RESOLVED
    assert target.address == canonical(BOB)
    assert target.label == "morpheus.eth"


def test_open_compose_failure_marks_not_found(engine):
    target = engine.open_compose("0x1234")
    assert target.status == STATUS_NOT_FOUND
    assert target.error.reason == "INVALID_ADDRESS"


def test_empty_body_is_a_noop(engine, repo):
    engine.open_compose(BOB)
    assert engine.send(ALICE, "   ") is None
    assert repo.threads() == {}
    assert repo.requests() == []


def test_send_needs_connected_sender(engine):
    engine.open_compose(BOB)
    with pytest.raises(SendError) as ei:
        engine.send(None, "hi")
    assert ei.value.reason == SendError.NOT_CONNECTED


def test_send_needs_resolved_target(engine, repo):
    engine.open_compose("plainword")
    with pytest.raises(SendError) as ei:
        engine.send(ALICE, "hi")
    assert ei.value.reason == SendError.NO_RECIPIENT
    assert repo.threads() == {}

    engine.compose = None
    with pytest.raises(SendError):
        engine.send(ALICE, "hi")


def test_first_send_to_stranger_creates_thread_and_request(engine, repo):
    engine.open_compose(BOB)
    result = engine.send(ALICE, "  hello  ", certified=True)
    assert result.target == TARGET_REQUEST

    thread = repo.thread(result.thread_id)
    assert thread.participants == (ALICE, canonical(BOB))
    assert thread.messages[0].body == "hello"
    assert thread.messages[0].certified is True
    assert [r.thread_id for r in repo.requests()] == [result.thread_id]
    assert engine.mode == MODE_THREAD
    assert engine.active_thread_id == result.thread_id


def test_first_send_from_contact_goes_to_inbox(engine, repo, policy):
    policy.add_contact("alice", ALICE)
    engine.open_compose(BOB)
    result = engine.send(ALICE, "hi")
    assert result.target == TARGET_INBOX
    assert [e.thread_id for e in repo.inbox()] == [result.thread_id]
    assert repo.requests() == []


def test_follow_up_send_is_a_reply(engine, repo):
    engine.open_compose(BOB)
    first = engine.send(ALICE, "one")
    second = engine.send(ALICE, "two")
    assert second.target == TARGET_REPLY
    assert second.thread_id == first.thread_id

    thread = repo.thread(first.thread_id)
    assert [m.body for m in thread.messages] == ["one", "two"]
    assert thread.messages[1].to == canonical(BOB)
    # replies bypass the request gate
    assert len(repo.requests()) == 1
    assert [e.thread_id for e in repo.inbox()] == [first.thread_id]


def test_reply_in_thread_without_counterpart_goes_to_unknown(engine, repo):
    solo = Thread(thread_id="solo", participants=(ALICE,),
                  messages=(Message(id="m1", sender=ALICE, to=ALICE, body="note", ts=T0),))
    repo.put_thread(solo)
    engine.open_thread("solo")
    result = engine.send(ALICE, "again")
    assert result.message.to == "unknown"


def test_reply_to_vanished_thread_is_dropped(engine, repo):
    engine.open_compose(BOB)
    engine.send(ALICE, "one")
    repo.save_threads({})
    assert engine.send(ALICE, "two") is None


def test_open_thread_consumes_inbox_entries(engine, repo, policy):
    policy.add_contact("alice", ALICE)
    engine.open_compose(BOB)
    tid = engine.send(ALICE, "hi").thread_id
    policy.deliver_inbox("other", CAROL)

    thread = engine.open_thread(tid)
    assert thread.latest().body == "hi"
    assert [e.thread_id for e in repo.inbox()] == ["other"]
    assert engine.mode == MODE_THREAD

    assert engine.open_thread("missing") is None


def test_attachment_rides_on_next_message_only(engine, repo):
    engine.open_compose(BOB)
    att = engine.attach(io.BytesIO(PDF), filename="deed.pdf")
    first = engine.send(ALICE, "see attached")
    assert first.message.attachment == att
    assert repo.thread(first.thread_id).messages[0].attachment.filename == "deed.pdf"
    assert engine.pending_attachment is None

    second = engine.send(ALICE, "no file")
    assert second.message.attachment is None


def test_rejected_attachment_clears_pending(engine):
    engine.attach(io.BytesIO(PDF), filename="ok.pdf")
    with pytest.raises(AttachmentError):
        engine.attach(io.BytesIO(b"x"), filename="bad.txt")
    assert engine.pending_attachment is None


def test_stale_resolution_is_discarded(engine):
    old = engine.begin_compose("slow.eth")
    new = engine.begin_compose("fast.eth")
    assert engine.apply_resolution(old.generation, Resolution(canonical(CAROL), "slow.eth")) is False
    assert engine.compose is new
    assert new.status == STATUS_RESOLVING
    assert engine.apply_resolution(new.generation, Resolution(canonical(BOB), "fast.eth"))
    assert engine.compose.address == canonical(BOB)


def test_resolution_after_leaving_compose_is_discarded(engine, repo):
    target = engine.begin_compose("slow.eth")
    engine.open_thread("anything")
    assert engine.apply_resolution(target.generation, Resolution(canonical(CAROL))) is False


def test_async_compose_ignores_late_answer(repo, policy, clock):
    release = threading.Event()

    class SlowEndpoint(FakeEndpoint):
        def resolve(self, name):
            release.wait(5)
            return super().resolve(name)

    engine = ThreadEngine(repo, policy, IdentifierResolver([SlowEndpoint("https://slow.test", CAROL)]), clock=clock)
    done = threading.Event()
    outcome = {}

    def on_done(target, applied):
        outcome["applied"] = applied
        done.set()

    pending = engine.open_compose_async("slow.eth", on_done=on_done)
    assert pending.status == STATUS_RESOLVING
    current = engine.use_resolution(BOB, Resolution(canonical(BOB)))
    release.set()

    assert done.wait(5)
    assert outcome["applied"] is False
    assert engine.compose is current
    assert engine.compose.address == canonical(BOB)


def test_async_compose_uses_dispatch(repo, policy, clock):
    queued = []
    engine = ThreadEngine(repo, policy, IdentifierResolver([FakeEndpoint("https://rpc.test", BOB)]), clock=clock)
    done = threading.Event()
    engine.open_compose_async("neo.eth", dispatch=lambda fn: (queued.append(fn), done.set()))
    assert done.wait(5)

    assert engine.compose.status == STATUS_RESOLVING
    queued[0]()
    assert engine.compose.status == STATUS_RESOLVED


def test_latest_returns_newest_message(engine):
    engine.open_compose(BOB)
    tid = engine.send(ALICE, "one").thread_id
    engine.send(ALICE, "two")
    assert engine.latest(tid).body == "two"
    assert engine.latest("missing") is None
