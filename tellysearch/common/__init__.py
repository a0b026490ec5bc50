"""Shared records, keys and validation helpers."""

from __future__ import annotations

from .keys import DetailKey, DetailKind, parse_key
from .validation import require_positive

__all__ = ["DetailKey", "DetailKind", "parse_key", "require_positive"]
