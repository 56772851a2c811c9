# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: RFC2397-data-URI
from __future__ import annotations

import base64, mimetypes, os
from typing import BinaryIO, Optional

from ..core.errors import AttachmentError
from ..core.models import Attachment
from ..utils import config as CFG

# ---------------- Logger ----------------
from ..utils.nova_logging import get_ctx_logger
log = get_ctx_logger("literanova.messaging(attachments)")


def _guess_mime(filename: str) -> str:
    mime, _ = mimetypes.guess_type(filename)
    return mime or "application/octet-stream"


def ingest(fileobj: BinaryIO, filename: Optional[str] = None, mime_type: Optional[str] = None) -> Attachment:
    name = os.path.basename(filename or getattr(fileobj, "name", "") or "attachment")
    mime = (mime_type or _guess_mime(name)).lower()
    if mime != CFG.ATTACH_ALLOWED_MIME:
        raise AttachmentError(AttachmentError.WRONG_TYPE, mime)

    # read one byte past the ceiling so oversize input is caught without loading it all
    data = fileobj.read(CFG.ATTACH_MAX_BYTES + 1)
    if len(data) > CFG.ATTACH_MAX_BYTES:
        raise AttachmentError(AttachmentError.TOO_LARGE, f"{name} exceeds {CFG.ATTACH_MAX_BYTES} bytes")

    uri = f"data:{mime};base64," + base64.b64encode(data).decode("ascii")
    log.debug("[ingest] %s accepted (%d bytes)", name, len(data))
    return Attachment(filename=name, byte_size=len(data), mime_type=mime, data_uri=uri)


def decode_data_uri(uri: str) -> bytes:
    head, sep, payload = (uri or "").partition(",")
    if not sep or not head.startswith("data:") or not head.endswith(";base64"):
        raise ValueError("not a base64 data URI")
    return base64.b64decode(payload, validate=True)
