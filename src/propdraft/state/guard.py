# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Callable

from .store import PropertyStore

LEAVE_PROMPT = "You have unsaved changes. Leave without saving?"
SWITCH_VERSION_PROMPT = "You have unsaved changes. Switch version anyway?"


class PendingChangesGuard:
    """
    Navigation guard that asks before discarding unsaved edits.

    ``confirm`` receives the prompt text and returns True to proceed; it is
    only called when the store reports unsaved changes.
    """

    def __init__(self, store: PropertyStore, confirm: Callable[[str], bool]):
        self.store = store
        self.confirm = confirm

    def can_deactivate(self) -> bool:
        if not self.store.has_unsaved_changes():
            return True
        return bool(self.confirm(LEAVE_PROMPT))

    def can_switch_version(self) -> bool:
        if not self.store.has_unsaved_changes():
            return True
        return bool(self.confirm(SWITCH_VERSION_PROMPT))
