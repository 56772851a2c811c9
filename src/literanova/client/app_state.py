# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Tsar Studio
# Part of LiteraNova — see LICENSE and TRADEMARKS.md
# Refs: see REFERENCES.md
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class AppState:
    """Everything the front end needs to redraw, passed around explicitly."""
    account: Optional[str] = None
    status: str = ""
    show_add_buttons: bool = False

    def set_status(self, text: str) -> str:
        self.status = text
        return text
