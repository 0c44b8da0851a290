"""Tests for the created-after watermark."""

from __future__ import annotations

import pytest

from skyanki.schema import WordOfSet, WordRecord, WordSetDescriptor
from skyanki.sync import created_after, last_created

SET = WordSetDescriptor(id=7, title="Travel", subtitle="Airport")


def _word(meaning_id: int, created_at: str) -> WordOfSet:
    return WordOfSet(word_set=SET, word=WordRecord(meaning_id=meaning_id, created_at=created_at))


ITEMS = [
    _word(1, "2021-03-01T10:00:00+00:00"),
    _word(2, "2021-03-05T08:30:00+00:00"),
    _word(3, "2021-02-28T23:59:59+00:00"),
    _word(4, "2021-03-05T08:30:01+00:00"),
]


class TestCreatedAfter:
    @pytest.mark.parametrize("watermark", [None, ""])
    def test_no_watermark_keeps_everything(self, watermark):
        assert created_after(ITEMS, watermark) == ITEMS

    def test_strictly_greater(self):
        out = created_after(ITEMS, "2021-03-05T08:30:00+00:00")
        assert [it.word.meaning_id for it in out] == [4]

    def test_keeps_input_order(self):
        out = created_after(ITEMS, "2021-03-01T00:00:00+00:00")
        assert [it.word.meaning_id for it in out] == [1, 2, 4]

    def test_nothing_newer(self):
        assert created_after(ITEMS, "2022-01-01T00:00:00+00:00") == []

    @pytest.mark.parametrize("watermark", [None, "2021-03-01T10:00:00+00:00", "2030"])
    def test_idempotent(self, watermark):
        once = created_after(ITEMS, watermark)
        assert created_after(once, watermark) == once

    def test_string_comparison_not_dates(self):
        # different offsets are not normalised
        items = [_word(1, "2021-03-01T12:00:00+03:00")]
        assert created_after(items, "2021-03-01T10:00:00+00:00") == items


class TestLastCreated:
    def test_max_string(self):
        assert last_created(ITEMS) == "2021-03-05T08:30:01+00:00"

    def test_empty(self):
        assert last_created([]) is None

    def test_single(self):
        assert last_created(ITEMS[:1]) == "2021-03-01T10:00:00+00:00"
