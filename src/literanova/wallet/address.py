# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: EIP-55
from __future__ import annotations

from typing import Iterable, List, Optional, TypeVar

from eth_utils import is_checksum_address, is_checksum_formatted_address, is_hex_address, to_checksum_address

from ..utils import config as CFG

T = TypeVar("T")


def is_literal(raw: str) -> bool:
    """True when the text claims to be an account id (prefix only, no validation)."""
    return (raw or "").strip()[:len(CFG.ADDRESS_PREFIX)].lower() == CFG.ADDRESS_PREFIX


def is_name(raw: str) -> bool:
    return CFG.NAME_SEPARATOR in (raw or "")


def is_valid_account(raw: str) -> bool:
    # all-lower and all-upper hex pass; mixed case must carry a valid EIP-55 checksum
    a = (raw or "").strip()
    if not a.startswith(CFG.ADDRESS_PREFIX) or len(a) != len(CFG.ADDRESS_PREFIX) + CFG.ADDRESS_HEX_LEN:
        return False
    try:
        if not is_hex_address(a):
            return False
        return not is_checksum_formatted_address(a) or is_checksum_address(a)
    except (TypeError, ValueError):
        return False


def canonical(raw: str) -> str:
    a = (raw or "").strip()
    if not is_valid_account(a):
        raise ValueError(f"not a valid account id: {raw!r}")
    return to_checksum_address(a)


def canonical_or_none(raw: Optional[str]) -> Optional[str]:
    try:
        return canonical(raw or "")
    except ValueError:
        return None


def same_account(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return a.strip().lower() == b.strip().lower()


def short_addr(a: Optional[str]) -> str:
    if not a or not isinstance(a, str):
        return ""
    if not a.startswith(CFG.ADDRESS_PREFIX):
        return a
    return a[:CFG.SHORT_ADDR_HEAD] + "..." + a[-CFG.SHORT_ADDR_TAIL:]


def uniq_by_address(items: Iterable[T]) -> List[T]:
    """Keep the first entry per account, drop entries without an address."""
    seen = set()
    out: List[T] = []
    for item in items:
        addr = (getattr(item, "address", "") or "").lower()
        if not addr or addr in seen:
            continue
        seen.add(addr)
        out.append(item)
    return out
