# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: RFC2397-data-URI

import io
import os
import sys

import pytest

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")
for path in (PROJECT_ROOT, SRC_ROOT):
    if path not in sys.path:
        sys.path.append(path)

from literanova.core.errors import AttachmentError, status_message  # noqa: E402
from literanova.messaging.attachments import decode_data_uri, ingest  # noqa: E402
from literanova.utils import config as CFG  # noqa: E402

PDF = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj<<>>endobj\n%%EOF\n"


def test_pdf_becomes_data_uri():
    att = ingest(io.BytesIO(PDF), filename="/tmp/docs/contract.pdf")
    assert att.filename == "contract.pdf"
    assert att.mime_type == "application/pdf"
    assert att.byte_size == len(PDF)
    assert att.data_uri.startswith("data:application/pdf;base64,")
    assert decode_data_uri(att.data_uri) == PDF


def test_non_pdf_rejected():
    with pytest.raises(AttachmentError) as ei:
        ingest(io.BytesIO(b"hello"), filename="notes.txt")
    assert ei.value.reason == AttachmentError.WRONG_TYPE
    assert status_message(ei.value) == "ONLY PDF ATTACHMENTS ARE ALLOWED."


def test_declared_type_wins_over_extension():
    with pytest.raises(AttachmentError):
        ingest(io.BytesIO(PDF), filename="contract.pdf", mime_type="image/png")
    att = ingest(io.BytesIO(PDF), filename="scan", mime_type="Application/PDF")
    assert att.mime_type == "application/pdf"


def test_size_limit_is_inclusive():
    exact = ingest(io.BytesIO(b"\0" * CFG.ATTACH_MAX_BYTES), filename="big.pdf")
    assert exact.byte_size == CFG.ATTACH_MAX_BYTES

    with pytest.raises(AttachmentError) as ei:
        ingest(io.BytesIO(b"\0" * (CFG.ATTACH_MAX_BYTES + 1)), filename="huge.pdf")
    assert ei.value.reason == AttachmentError.TOO_LARGE
    assert status_message(ei.value) == "ATTACHMENT TOO LARGE (MAX 5 MB)."


def test_decode_rejects_non_data_uri():
    with pytest.raises(ValueError):
        decode_data_uri("https://example.com/file.pdf")
