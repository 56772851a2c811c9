# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: EIP-191; EIP-55; libsecp256k1; LowS-Policy

from __future__ import annotations

import hashlib, secrets
from typing import Callable, List, Optional, Protocol

from ecdsa import SECP256k1, SigningKey, VerifyingKey
from ecdsa.util import sigencode_string_canonize, sigdecode_string
from eth_utils import keccak, to_checksum_address

# ---------------- Logger ----------------
from ..utils.nova_logging import get_ctx_logger
log = get_ctx_logger("literanova.wallet(signer)")

AccountsListener = Callable[[List[str]], None]


class SigningDeclined(Exception):
    """The holder of the key refused to sign."""


class Signer(Protocol):
    def request_accounts(self) -> List[str]:
        ...

    def sign_message(self, text: str) -> str:
        ...

    def on_accounts_changed(self, callback: AccountsListener) -> None:
        ...


def personal_message_digest(text: str) -> bytes:
    data = text.encode("utf-8")
    prefix = b"\x19Ethereum Signed Message:\n" + str(len(data)).encode("ascii")
    return keccak(prefix + data)


def address_from_verifying_key(vk: VerifyingKey) -> str:
    # raw x||y, 64 bytes
    return to_checksum_address(keccak(vk.to_string())[-20:])


def address_from_privhex(priv_hex: str) -> str:
    sk = SigningKey.from_string(bytes.fromhex(priv_hex), curve=SECP256k1)
    return address_from_verifying_key(sk.get_verifying_key())


def new_privhex() -> str:
    return secrets.token_bytes(32).hex()


class LocalSigner:
    """secp256k1 key held in memory, signing like a browser wallet's personal_sign."""

    def __init__(self, priv_hex: Optional[str] = None, approve: Optional[Callable[[str], bool]] = None) -> None:
        self._sk = SigningKey.from_string(bytes.fromhex(priv_hex or new_privhex()), curve=SECP256k1)
        self.approve = approve
        self._listeners: List[AccountsListener] = []

    @property
    def address(self) -> str:
        return address_from_verifying_key(self._sk.get_verifying_key())

    def request_accounts(self) -> List[str]:
        return [self.address]

    def sign_message(self, text: str) -> str:
        if self.approve is not None and not self.approve(text):
            log.info("[sign_message] user declined to sign", extra={"account": self.address})
            raise SigningDeclined("user rejected the signature request")
        digest = personal_message_digest(text)
        rs = self._sk.sign_digest_deterministic(digest, hashfunc=hashlib.sha256, sigencode=sigencode_string_canonize)
        v = self._recovery_id(rs, digest)
        return "0x" + rs.hex() + format(27 + v, "02x")

    def _recovery_id(self, rs: bytes, digest: bytes) -> int:
        mine = self._sk.get_verifying_key().to_string()
        candidates = VerifyingKey.from_public_key_recovery_with_digest(
            rs, digest, SECP256k1, sigdecode=sigdecode_string)
        for idx, vk in enumerate(candidates):
            if vk.to_string() == mine:
                return idx
        raise ValueError("could not derive recovery id")

    def on_accounts_changed(self, callback: AccountsListener) -> None:
        self._listeners.append(callback)

    def switch_key(self, priv_hex: Optional[str] = None) -> str:
        self._sk = SigningKey.from_string(bytes.fromhex(priv_hex or new_privhex()), curve=SECP256k1)
        accounts = self.request_accounts()
        log.info("[switch_key] active account changed", extra={"account": accounts[0]})
        for cb in list(self._listeners):
            try:
                cb(accounts)
            except Exception:
                log.exception("[switch_key] accounts listener error")
        return accounts[0]
