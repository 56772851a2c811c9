# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
"""Error taxonomy and the status lines shown for each reason."""
from __future__ import annotations


class LiteraNovaError(Exception):
    REASONS: tuple[str, ...] = ()

    def __init__(self, reason: str, detail: str = ""):
        if self.REASONS and reason not in self.REASONS:
            raise ValueError(f"unknown {type(self).__name__} reason: {reason}")
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class ResolutionError(LiteraNovaError):
    EMPTY = "EMPTY"
    INVALID_ADDRESS = "INVALID_ADDRESS"
    NOT_FOUND = "NOT_FOUND"
    RESOLUTION_ERROR = "RESOLUTION_ERROR"
    UNKNOWN_FORMAT = "UNKNOWN_FORMAT"
    REASONS = (EMPTY, INVALID_ADDRESS, NOT_FOUND, RESOLUTION_ERROR, UNKNOWN_FORMAT)


class SessionError(LiteraNovaError):
    NO_SIGNER = "NO_SIGNER"
    NOT_CONNECTED = "NOT_CONNECTED"
    SIGNATURE_DECLINED = "SIGNATURE_DECLINED"
    REASONS = (NO_SIGNER, NOT_CONNECTED, SIGNATURE_DECLINED)


class AttachmentError(LiteraNovaError):
    WRONG_TYPE = "WRONG_TYPE"
    TOO_LARGE = "TOO_LARGE"
    REASONS = (WRONG_TYPE, TOO_LARGE)


class SendError(LiteraNovaError):
    NO_RECIPIENT = "NO_RECIPIENT"
    NOT_CONNECTED = "NOT_CONNECTED"
    REASONS = (NO_RECIPIENT, NOT_CONNECTED)


class StoreError(LiteraNovaError):
    """Backend fault. The typed store turns these into defaults."""


_STATUS = {
    (ResolutionError, ResolutionError.EMPTY): "TYPE AN ADDRESS OR ENS NAME.",
    (ResolutionError, ResolutionError.INVALID_ADDRESS): "INVALID 0x ADDRESS.",
    (ResolutionError, ResolutionError.NOT_FOUND): "ENS NAME NOT FOUND.",
    (ResolutionError, ResolutionError.RESOLUTION_ERROR): "ENS RESOLUTION ERROR.",
    (ResolutionError, ResolutionError.UNKNOWN_FORMAT): "ENTER 0x... OR name.eth",
    (SessionError, SessionError.NO_SIGNER): "NO SIGNER AVAILABLE. CONNECT A WALLET.",
    (SessionError, SessionError.NOT_CONNECTED): "CONNECT WALLET FIRST.",
    (SessionError, SessionError.SIGNATURE_DECLINED): "UNLOCK CANCELLED. SIGNATURE DECLINED.",
    (AttachmentError, AttachmentError.WRONG_TYPE): "ONLY PDF ATTACHMENTS ARE ALLOWED.",
    (AttachmentError, AttachmentError.TOO_LARGE): "ATTACHMENT TOO LARGE (MAX 5 MB).",
    (SendError, SendError.NO_RECIPIENT): "NO RESOLVED RECIPIENT.",
    (SendError, SendError.NOT_CONNECTED): "CONNECT WALLET FIRST.",
}


def status_message(exc: BaseException) -> str:
    if isinstance(exc, LiteraNovaError):
        for (cls, reason), text in _STATUS.items():
            if isinstance(exc, cls) and exc.reason == reason:
                return text
    if isinstance(exc, ResolutionError):
        return "INVALID RECIPIENT."
    return "UNEXPECTED ERROR."
