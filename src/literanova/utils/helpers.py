# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
from __future__ import annotations
import secrets, time
from typing import Callable

Clock = Callable[[], int]


def print_banner():
    banner = r"""
  _     _ _                 _   _
 | |   (_) |_ ___ _ __ __ _| \ | | _____   ____ _
 | |   | | __/ _ \ '__/ _` |  \| |/ _ \ \ / / _` |
 | |___| | ||  __/ | | (_| | |\  | (_) \ V / (_| |
 |_____|_|\__\___|_|  \__,_|_| \_|\___/ \_/ \__,_|

                  LiteraNova CLI
        Address-based local-first messaging
    """
    print(banner)


def now_ms() -> int:
    return int(time.time() * 1000)


def uid() -> str:
    """Random hex plus the millisecond clock, unique enough for local ids."""
    return secrets.token_hex(6) + format(now_ms(), "x")


def random_nonce(n_bytes: int = 16) -> str:
    return secrets.token_hex(max(1, int(n_bytes)))
