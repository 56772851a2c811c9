# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: EIP-137-ENS; EIP-55

import os
import sys
import threading

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")
for path in (PROJECT_ROOT, SRC_ROOT):
    if path not in sys.path:
        sys.path.append(path)

from eth_utils import to_checksum_address  # noqa: E402

from literanova.core.errors import ResolutionError, status_message  # noqa: E402
from literanova.wallet.address import is_valid_account, short_addr, uniq_by_address  # noqa: E402
from literanova.wallet.resolver import IdentifierResolver  # noqa: E402

from conftest import ALICE, BOB  # noqa: E402


def _reason(resolver, raw):
    with pytest.raises(ResolutionError) as ei:
        resolver.resolve(raw)
    return ei.value.reason


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_empty_input(resolver_for, raw):
    resolver, eps = resolver_for(ALICE)
    assert _reason(resolver, raw) == ResolutionError.EMPTY
    assert eps[0].calls == []


@pytest.mark.parametrize("raw", ["0x123", "0x" + "g" * 40, "0X" + "a1" * 19])
def test_bad_literal_is_invalid_address(resolver_for, raw):
    resolver, eps = resolver_for(ALICE)
    assert _reason(resolver, raw) == ResolutionError.INVALID_ADDRESS
    assert eps[0].calls == []


def test_valid_literal_resolves_locally(resolver_for):
    resolver, eps = resolver_for(BOB)
    res = resolver.resolve("  " + ALICE.upper().replace("0X", "0x") + " ")
    assert res.address == to_checksum_address(ALICE)
    assert res.display_name is None
    assert eps[0].calls == []


def test_bare_word_is_unknown_format(resolver_for):
    resolver, _ = resolver_for(ALICE)
    assert _reason(resolver, "vitalik") == ResolutionError.UNKNOWN_FORMAT


def test_first_positive_answer_wins_in_order(resolver_for):
    resolver, eps = resolver_for(RuntimeError("boom"), None, ALICE, BOB)
    res = resolver.resolve("Oracle.ETH")
    assert res.address == to_checksum_address(ALICE)
    assert res.display_name == "oracle.eth"
    assert [len(e.calls) for e in eps] == [1, 1, 1, 0]
    assert eps[0].calls == ["oracle.eth"]


def test_every_endpoint_failing_is_resolution_error(resolver_for):
    resolver, _ = resolver_for(RuntimeError("down"), TimeoutError("slow"))
    assert _reason(resolver, "neo.eth") == ResolutionError.RESOLUTION_ERROR


def test_all_answers_empty_is_not_found(resolver_for):
    resolver, _ = resolver_for(None, "")
    assert _reason(resolver, "ghost.eth") == ResolutionError.NOT_FOUND


def test_failing_endpoint_falls_through_with_logging_enabled(resolver_for, verbose_logs):
    resolver, eps = resolver_for(RuntimeError("down"), BOB)
    assert resolver.resolve("neo.eth").address == to_checksum_address(BOB)
    assert [len(e.calls) for e in eps] == [1, 1]

    resolver, _ = resolver_for(RuntimeError("down"))
    assert _reason(resolver, "neo.eth") == ResolutionError.RESOLUTION_ERROR


def test_one_empty_answer_among_failures_is_not_found(resolver_for):
    resolver, _ = resolver_for(RuntimeError("down"), None, OSError("reset"))
    assert _reason(resolver, "ghost.eth") == ResolutionError.NOT_FOUND


def test_malformed_answer_counts_as_failure(resolver_for):
    resolver, eps = resolver_for("0xnot-an-address", BOB)
    assert resolver.resolve("smith.eth").address == to_checksum_address(BOB)

    resolver, _ = resolver_for("0xnot-an-address")
    assert _reason(resolver, "smith.eth") == ResolutionError.RESOLUTION_ERROR


def test_no_endpoints_is_resolution_error():
    assert _reason(IdentifierResolver([]), "neo.eth") == ResolutionError.RESOLUTION_ERROR


def test_status_lines_for_each_reason(resolver_for):
    resolver, _ = resolver_for(None)
    expected = {
        "": "TYPE AN ADDRESS OR ENS NAME.",
        "0x12": "INVALID 0x ADDRESS.",
        "nobody.eth": "ENS NAME NOT FOUND.",
        "plainword": "ENTER 0x... OR name.eth",
    }
    for raw, text in expected.items():
        with pytest.raises(ResolutionError) as ei:
            resolver.resolve(raw)
        assert status_message(ei.value) == text
    with pytest.raises(ResolutionError) as ei:
        IdentifierResolver([]).resolve("neo.eth")
    assert status_message(ei.value) == "ENS RESOLUTION ERROR."


def test_resolve_async_reports_through_callback(resolver_for):
    resolver, _ = resolver_for(ALICE)
    got = {}
    done = threading.Event()

    def cb(res, err):
        got["res"], got["err"] = res, err
        done.set()

    resolver.resolve_async("trinity.eth", cb)
    assert done.wait(5)
    assert got["err"] is None
    assert got["res"].display == "trinity.eth"

    done.clear()
    resolver.resolve_async("nope", cb)
    assert done.wait(5)
    assert got["res"] is None
    assert got["err"].reason == ResolutionError.UNKNOWN_FORMAT


# ---------- account helpers ----------

def test_short_addr_keeps_head_and_tail():
    addr = to_checksum_address(ALICE)
    assert short_addr(addr) == addr[:6] + "..." + addr[-4:]
    assert short_addr("") == ""


def test_mixed_case_needs_valid_checksum():
    good = to_checksum_address(BOB)
    assert is_valid_account(good)
    bad = good[:2] + good[2:].swapcase()
    if bad != good and bad.lower() != bad and bad.upper()[2:] != bad[2:]:
        assert not is_valid_account(bad)


def test_single_flipped_letter_breaks_checksum():
    good = to_checksum_address(BOB)
    i = next(i for i, ch in enumerate(good[2:], 2) if ch.isalpha())
    bad = good[:i] + good[i].swapcase() + good[i + 1:]
    assert not is_valid_account(bad)
    assert not is_valid_account("0xB2B2B2B2B2b2B2b2b2B2B2b2b2B2b2b2B2B2B2B2")
    assert is_valid_account(good.lower())
    assert is_valid_account("0x" + good[2:].upper())


def test_uniq_by_address_keeps_first_case_insensitively():
    class E:
        def __init__(self, label, address):
            self.label, self.address = label, address

    items = [E("a", ALICE), E("b", ALICE.upper().replace("0X", "0x")), E("c", ""), E("d", BOB)]
    assert [e.label for e in uniq_by_address(items)] == ["a", "d"]
