# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: NIST-800-38D-AES-GCM; RFC7914-scrypt

import os, json, time
from typing import Dict, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

# ---------------- Local Project ----------------
from .signer import address_from_privhex, new_privhex
from ..utils import config as CFG

# ---------------- Logger ----------------
from ..utils.nova_logging import get_ctx_logger
log = get_ctx_logger("literanova.wallet(keystore)")

KEYFILE_VERSION = 1


def _derive_key(password: str, salt: bytes, n=CFG.SIGNER_KDF_N, r=CFG.SIGNER_KDF_R, p=CFG.SIGNER_KDF_P) -> bytes:
    """Scrypt KDF"""
    kdf = Scrypt(salt=salt, length=32, n=n, r=r, p=p)
    return kdf.derive(password.encode())


def encrypt_privkey(hex_priv: str, password: str, n: int = CFG.SIGNER_KDF_N) -> Dict:
    salt = os.urandom(16)
    key = _derive_key(password, salt, n=n)
    aes = AESGCM(key)
    nonce = os.urandom(12)
    ct = aes.encrypt(nonce, bytes.fromhex(hex_priv), None)
    return {
        "kdf": "scrypt",
        "kdf_salt": salt.hex(),
        "kdf_n": n,
        "kdf_r": CFG.SIGNER_KDF_R,
        "kdf_p": CFG.SIGNER_KDF_P,
        "cipher": "AESGCM",
        "nonce": nonce.hex(),
        "ct": ct.hex()
    }


def decrypt_privkey(enc_blob: Dict, password: str) -> str:
    if str(enc_blob.get("cipher", "")).upper() != "AESGCM":
        raise ValueError("Unsupported cipher")
    if str(enc_blob.get("kdf", "")).lower() != "scrypt":
        raise ValueError("Unsupported kdf")
    salt = bytes.fromhex(enc_blob["kdf_salt"])
    key = _derive_key(password, salt,
                      n=int(enc_blob.get("kdf_n", CFG.SIGNER_KDF_N)),
                      r=int(enc_blob.get("kdf_r", CFG.SIGNER_KDF_R)),
                      p=int(enc_blob.get("kdf_p", CFG.SIGNER_KDF_P)))
    aes = AESGCM(key)
    try:
        plain = aes.decrypt(bytes.fromhex(enc_blob["nonce"]), bytes.fromhex(enc_blob["ct"]), None)
    except InvalidTag:
        raise ValueError("Invalid password or corrupted key file")
    return plain.hex()


def _write_atomic(path: str, data: bytes) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    tmp = path + ".tmp"
    with open(tmp, "wb") as f:
        f.write(data)
        f.flush(); os.fsync(f.fileno())
    os.replace(tmp, path)
    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


def load_or_create_signer_key(password: str, path: Optional[str] = None, kdf_n: int = CFG.SIGNER_KDF_N) -> str:
    """Return the signer's private key hex, creating and encrypting a new one on first use."""
    if not password:
        raise ValueError("password required")
    path = path or CFG.SIGNER_KEY_PATH
    if os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            record = json.load(f)
        if not isinstance(record, dict) or "payload" not in record:
            raise ValueError("Unsupported key file format")
        priv_hex = decrypt_privkey(record["payload"], password)
        log.debug("[load_or_create_signer_key] loaded key file", extra={"account": record.get("address", "-")})
        return priv_hex

    priv_hex = new_privhex()
    address = address_from_privhex(priv_hex)
    record = {
        "version": KEYFILE_VERSION,
        "address": address,
        "created": int(time.time()),
        "payload": encrypt_privkey(priv_hex, password, n=kdf_n),
    }
    _write_atomic(path, json.dumps(record, indent=2).encode("utf-8"))
    log.info("[load_or_create_signer_key] created new signer key", extra={"account": address})
    return priv_hex
