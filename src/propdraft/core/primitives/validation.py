# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Reusable validation utilities shared by draft validation and the store's
per-entity save checks.

This module provides:
- Lenient calendar date parsing for ISO date strings
- Blank text detection
- Phone and email format checks
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from dateutil.parser import isoparse

# Digits, plus, dash, parentheses and whitespace
PHONE_PATTERN = re.compile(r"[0-9+\-()\s]+")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def parse_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an ISO 8601 date or datetime string to a calendar date.

    Returns:
        The date, or None if the value is empty or not a real calendar date
        (``2025-02-30`` is rejected).
    """
    if not value or not isinstance(value, str):
        return None
    try:
        return isoparse(value.strip()).date()
    except (ValueError, OverflowError):
        return None


def is_valid_date(value: Optional[str]) -> bool:
    return parse_date(value) is not None


def is_blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_PATTERN.fullmatch(value))


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.fullmatch(value))
