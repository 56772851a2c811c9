# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md

import logging
import os
import sys

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")
for path in (PROJECT_ROOT, SRC_ROOT):
    if path not in sys.path:
        sys.path.append(path)

from literanova.messaging.policy import AccessPolicy  # noqa: E402
from literanova.storage.repository import MessageRepository  # noqa: E402
from literanova.storage.store import PersistentStore  # noqa: E402
from literanova.wallet.resolver import IdentifierResolver  # noqa: E402
from literanova.wallet.signer import SigningDeclined  # noqa: E402

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
CAROL = "0x" + "c3" * 20
T0 = 1_700_000_000_000


class FakeClock:
    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeEndpoint:
    """`answer` is returned as-is, or raised when it is an exception."""

    def __init__(self, url, answer=None):
        self.url = url
        self.answer = answer
        self.calls = []

    def resolve(self, name):
        self.calls.append(name)
        if isinstance(self.answer, BaseException):
            raise self.answer
        return self.answer


class FakeSigner:
    def __init__(self, account=ALICE, decline=False):
        self.account = account
        self.decline = decline
        self.signed = []
        self.listeners = []

    def request_accounts(self):
        return [self.account] if self.account else []

    def sign_message(self, text):
        if self.decline:
            raise SigningDeclined("user rejected the signature request")
        self.signed.append(text)
        return "0x" + "ab" * 65

    def on_accounts_changed(self, callback):
        self.listeners.append(callback)

    def switch(self, account):
        self.account = account
        for cb in self.listeners:
            cb(self.request_accounts())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    s = PersistentStore(backend="memory")
    yield s
    s.close()


@pytest.fixture
def repo(store):
    return MessageRepository(store)


@pytest.fixture
def policy(repo, clock):
    return AccessPolicy(repo, clock=clock)


@pytest.fixture
def resolver_for():
    def _make(*answers):
        endpoints = [FakeEndpoint(f"https://rpc{i}.test", a) for i, a in enumerate(answers, 1)]
        return IdentifierResolver(endpoints), endpoints
    return _make


@pytest.fixture
def verbose_logs():
    """Enable every literanova record the way a dev-mode CLI run does."""
    logger = logging.getLogger("literanova")
    old = logger.level
    logger.setLevel(logging.DEBUG)
    yield logger
    logger.setLevel(old)
