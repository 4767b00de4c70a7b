# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio

from propdraft.state import PendingChangesGuard
from propdraft.state.guard import LEAVE_PROMPT, SWITCH_VERSION_PROMPT


class RecordingConfirm:
    def __init__(self, answer: bool):
        self.answer = answer
        self.prompts = []

    def __call__(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.answer


def test_clean_store_never_prompts(store):
    asyncio.run(store.load_version())
    confirm = RecordingConfirm(False)
    guard = PendingChangesGuard(store, confirm)

    assert guard.can_deactivate()
    assert guard.can_switch_version()
    assert confirm.prompts == []


def test_dirty_store_asks_before_leaving(store):
    asyncio.run(store.load_version())
    store.update_property_details_field("market", "Raleigh")
    confirm = RecordingConfirm(False)
    guard = PendingChangesGuard(store, confirm)

    assert not guard.can_deactivate()
    assert not guard.can_switch_version()
    assert confirm.prompts == [LEAVE_PROMPT, SWITCH_VERSION_PROMPT]


def test_confirmed_prompt_allows_navigation(store):
    asyncio.run(store.load_version())
    store.add_broker_draft()
    guard = PendingChangesGuard(store, RecordingConfirm(True))

    assert guard.can_deactivate()
    assert guard.can_switch_version()
