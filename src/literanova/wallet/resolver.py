# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: EIP-137-ENS; EIP-55

from __future__ import annotations

import threading, secrets
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence

from web3 import Web3

# ---------------- Local Project ----------------
from .address import canonical, canonical_or_none, is_literal, is_name, is_valid_account
from ..core.errors import ResolutionError
from ..utils import config as CFG

# ---------------- Logger ----------------
from ..utils.nova_logging import get_ctx_logger
log = get_ctx_logger("literanova.wallet(resolver)")


class NameEndpoint(Protocol):
    url: str

    def resolve(self, name: str) -> Optional[str]:
        ...


class Web3NameEndpoint:
    """One JSON-RPC node able to answer ENS lookups."""

    def __init__(self, url: str, timeout: float = CFG.ENS_RPC_TIMEOUT) -> None:
        self.url = url
        self.timeout = float(timeout)
        self._w3: Optional[Web3] = None

    def _web3(self) -> Web3:
        if self._w3 is None:
            provider = Web3.HTTPProvider(self.url, request_kwargs={"timeout": self.timeout})
            self._w3 = Web3(provider)
        return self._w3

    def resolve(self, name: str) -> Optional[str]:
        addr = self._web3().ens.address(name)
        return str(addr) if addr else None

    def __repr__(self) -> str:
        return f"<Web3NameEndpoint {self.url}>"


def default_endpoints(urls: Optional[Sequence[str]] = None) -> list[Web3NameEndpoint]:
    return [Web3NameEndpoint(u) for u in (urls or CFG.ENS_RPC_URLS)]


@dataclass(frozen=True)
class Resolution:
    address: str
    display_name: Optional[str] = None

    @property
    def display(self) -> str:
        return self.display_name or self.address


class IdentifierResolver:
    def __init__(self, endpoints: Optional[Sequence[NameEndpoint]] = None) -> None:
        self.endpoints = list(endpoints) if endpoints is not None else default_endpoints()

    def resolve(self, raw: str) -> Resolution:
        text = (raw or "").strip()
        if not text:
            raise ResolutionError(ResolutionError.EMPTY)

        if is_literal(text):
            if not is_valid_account(text):
                raise ResolutionError(ResolutionError.INVALID_ADDRESS, text)
            return Resolution(address=canonical(text))

        if is_name(text):
            name = text.lower()
            return Resolution(address=self.resolve_name(name), display_name=name)

        raise ResolutionError(ResolutionError.UNKNOWN_FORMAT, text)

    def resolve_name(self, name: str) -> str:
        req = secrets.token_hex(4)
        answered = 0
        for ep in self.endpoints:
            url = getattr(ep, "url", repr(ep))
            try:
                found = ep.resolve(name)
            except Exception as e:
                log.warning("[resolve_name] endpoint %s failed for %s: %s", url, name, e, extra={"req": req})
                continue
            if found is None or found == "":
                answered += 1
                log.trace("[resolve_name] %s has no record for %s", url, name, extra={"req": req})
                continue
            addr = canonical_or_none(found)
            if addr is None:
                log.warning("[resolve_name] endpoint %s returned a malformed address for %s", url, name, extra={"req": req})
                continue
            log.debug("[resolve_name] %s -> %s via %s", name, addr, url, extra={"req": req})
            return addr

        if answered:
            log.info("[resolve_name] %s not found (%d endpoint(s) answered)", name, answered, extra={"req": req})
            raise ResolutionError(ResolutionError.NOT_FOUND, name)
        log.error("[resolve_name] no endpoint answered for %s (%d tried)", name, len(self.endpoints), extra={"req": req})
        raise ResolutionError(ResolutionError.RESOLUTION_ERROR, name)

    def resolve_async(
        self,
        raw: str,
        callback: Callable[[Optional[Resolution], Optional[ResolutionError]], None],
    ) -> threading.Thread:
        def _safe_callback(res: Optional[Resolution], err: Optional[ResolutionError]) -> None:
            try:
                callback(res, err)
            except Exception:
                log.exception("[resolve_async] callback error")

        def worker():
            try:
                res = self.resolve(raw)
            except ResolutionError as e:
                _safe_callback(None, e)
                return
            _safe_callback(res, None)

        t = threading.Thread(target=worker, daemon=True)
        t.start()
        return t
