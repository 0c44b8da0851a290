# skyanki/sync.py
"""Incremental watermark over harvested words.

Timestamps are compared as strings. That only orders correctly while every
``createdAt`` shares one fixed-width, zero-padded, fixed-offset ISO-8601 form,
which is what the words API returns and what already sits in the
``execution`` table.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from .schema import WordOfSet


def created_after(items: Iterable[WordOfSet], watermark: Optional[str]) -> List[WordOfSet]:
    if not watermark:
        return list(items)
    return [it for it in items if it.word.created_at > watermark]


def last_created(items: Iterable[WordOfSet]) -> Optional[str]:
    return max((it.word.created_at for it in items), default=None)
