# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
"""
Stored records. Each record round-trips through `to_dict` / `from_dict` using
the camelCase wire names of the stored JSON. `from_dict` raises ValueError on
anything malformed so the storage layer can fall back to a default instead of
trusting half a record.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from ..utils import config as CFG


def _req_str(data: Dict[str, Any], key: str) -> str:
    val = data.get(key)
    if not isinstance(val, str) or not val:
        raise ValueError(f"missing or invalid '{key}'")
    return val


def _req_int(data: Dict[str, Any], key: str) -> int:
    val = data.get(key)
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ValueError(f"missing or invalid '{key}'")
    return int(val)


def _as_dict(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what}.from_dict expects dict")
    return data


@dataclass(frozen=True)
class Attachment:
    filename: str
    byte_size: int
    mime_type: str
    data_uri: str

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "byteSize": self.byte_size,
            "mimeType": self.mime_type,
            "dataUri": self.data_uri,}

    @classmethod
    def from_dict(cls, data: Any) -> "Attachment":
        data = _as_dict(data, "Attachment")
        return cls(
            filename=_req_str(data, "filename"),
            byte_size=_req_int(data, "byteSize"),
            mime_type=_req_str(data, "mimeType"),
            data_uri=_req_str(data, "dataUri"),)


@dataclass(frozen=True)
class Message:
    id: str
    sender: str
    to: str
    body: str
    ts: int
    certified: bool = False
    attachment: Optional[Attachment] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "from": self.sender,
            "to": self.to,
            "body": self.body,
            "ts": self.ts,
            "certified": self.certified,
            "attachment": self.attachment.to_dict() if self.attachment else None,}

    @classmethod
    def from_dict(cls, data: Any) -> "Message":
        data = _as_dict(data, "Message")
        body = data.get("body")
        if not isinstance(body, str):
            raise ValueError("missing or invalid 'body'")
        att = data.get("attachment")
        return cls(
            id=_req_str(data, "id"),
            sender=_req_str(data, "from"),
            to=_req_str(data, "to"),
            body=body,
            ts=_req_int(data, "ts"),
            certified=bool(data.get("certified", False)),
            attachment=Attachment.from_dict(att) if att is not None else None,)


@dataclass(frozen=True)
class Thread:
    thread_id: str
    participants: Tuple[str, ...]
    messages: Tuple[Message, ...] = field(default_factory=tuple)

    def with_message(self, message: Message) -> "Thread":
        return replace(self, messages=self.messages + (message,))

    def latest(self) -> Optional[Message]:
        return self.messages[-1] if self.messages else None

    def other_participant(self, me: str) -> str:
        mine = (me or "").lower()
        for p in self.participants:
            if p and p.lower() != mine:
                return p
        return CFG.UNKNOWN_PARTY

    def to_dict(self) -> dict:
        return {
            "threadId": self.thread_id,
            "participants": list(self.participants),
            "messages": [m.to_dict() for m in self.messages],}

    @classmethod
    def from_dict(cls, data: Any) -> "Thread":
        data = _as_dict(data, "Thread")
        parts = data.get("participants")
        msgs = data.get("messages")
        if not isinstance(parts, list) or not all(isinstance(p, str) for p in parts):
            raise ValueError("missing or invalid 'participants'")
        if not isinstance(msgs, list):
            raise ValueError("missing or invalid 'messages'")
        return cls(
            thread_id=_req_str(data, "threadId"),
            participants=tuple(parts),
            messages=tuple(Message.from_dict(m) for m in msgs),)


@dataclass(frozen=True)
class InboxEntry:
    thread_id: str
    sender: str
    ts: int
    certified: bool = False

    def to_dict(self) -> dict:
        return {"threadId": self.thread_id, "from": self.sender, "ts": self.ts, "certified": self.certified}

    @classmethod
    def from_dict(cls, data: Any) -> "InboxEntry":
        data = _as_dict(data, "InboxEntry")
        return cls(
            thread_id=_req_str(data, "threadId"),
            sender=_req_str(data, "from"),
            ts=_req_int(data, "ts"),
            certified=bool(data.get("certified", False)),)


@dataclass(frozen=True)
class Request:
    id: str
    thread_id: str
    sender: str
    ts: int
    certified: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "threadId": self.thread_id, "from": self.sender,
                "ts": self.ts, "certified": self.certified}

    @classmethod
    def from_dict(cls, data: Any) -> "Request":
        data = _as_dict(data, "Request")
        return cls(
            id=_req_str(data, "id"),
            thread_id=_req_str(data, "threadId"),
            sender=_req_str(data, "from"),
            ts=_req_int(data, "ts"),
            certified=bool(data.get("certified", False)),)


@dataclass(frozen=True)
class AddressEntry:
    """A Contacts or Favorites row."""
    label: str
    address: str
    ts: int

    def to_dict(self) -> dict:
        return {"label": self.label, "address": self.address, "ts": self.ts}

    @classmethod
    def from_dict(cls, data: Any) -> "AddressEntry":
        data = _as_dict(data, "AddressEntry")
        label = data.get("label")
        if not isinstance(label, str):
            raise ValueError("missing or invalid 'label'")
        return cls(label=label, address=_req_str(data, "address"), ts=_req_int(data, "ts"))


@dataclass(frozen=True)
class BlockedEntry:
    address: str
    ts: int

    def to_dict(self) -> dict:
        return {"address": self.address, "ts": self.ts}

    @classmethod
    def from_dict(cls, data: Any) -> "BlockedEntry":
        data = _as_dict(data, "BlockedEntry")
        return cls(address=_req_str(data, "address"), ts=_req_int(data, "ts"))


@dataclass(frozen=True)
class Session:
    owner_account: str
    signature: str
    signed_message: str
    expiry: int

    def is_valid_at(self, now: int) -> bool:
        return now <= self.expiry

    def to_dict(self) -> dict:
        return {
            "ownerAccount": self.owner_account,
            "signature": self.signature,
            "signedMessage": self.signed_message,
            "expiry": self.expiry,}

    @classmethod
    def from_dict(cls, data: Any) -> "Session":
        data = _as_dict(data, "Session")
        return cls(
            owner_account=_req_str(data, "ownerAccount"),
            signature=_req_str(data, "signature"),
            signed_message=_req_str(data, "signedMessage"),
            expiry=_req_int(data, "expiry"),)
