"""Tests for the bounded remote classification cache."""

import pytest

from quillstack.classification.cache import ClassificationCache
from quillstack.models import ClassificationResult, NoteType


def _llm(note_type: NoteType) -> ClassificationResult:
    return ClassificationResult.llm(note_type, 0.85, "test", "v3")


class TestClassificationCache:
    def test_get_missing(self):
        assert ClassificationCache().get("anything") is None

    def test_put_and_get_by_trimmed_text(self):
        cache = ClassificationCache()
        cache.put("  buy milk and eggs  ", _llm(NoteType.SHOPPING))
        assert cache.get("buy milk and eggs").type == NoteType.SHOPPING
        assert "buy milk and eggs\n" in cache

    def test_101st_insert_evicts_first(self):
        cache = ClassificationCache(capacity=100)
        for i in range(101):
            cache.put(f"note {i}", _llm(NoteType.TODO))
        assert len(cache) == 100
        assert cache.get("note 0") is None
        assert cache.get("note 1") is not None
        assert cache.get("note 100") is not None

    def test_reads_do_not_refresh_position(self):
        cache = ClassificationCache(capacity=2)
        cache.put("a", _llm(NoteType.TODO))
        cache.put("b", _llm(NoteType.TODO))
        cache.get("a")
        cache.put("c", _llm(NoteType.TODO))
        assert "a" not in cache
        assert "b" in cache

    def test_reinsert_updates_in_place(self):
        cache = ClassificationCache(capacity=2)
        cache.put("a", _llm(NoteType.TODO))
        cache.put("b", _llm(NoteType.TODO))
        cache.put("a", _llm(NoteType.IDEA))
        assert cache.get("a").type == NoteType.IDEA
        cache.put("c", _llm(NoteType.TODO))
        assert "a" not in cache
        assert len(cache) == 2

    def test_clear(self):
        cache = ClassificationCache()
        cache.put("a", _llm(NoteType.TODO))
        cache.clear()
        assert len(cache) == 0

    def test_non_string_membership(self):
        assert 42 not in ClassificationCache()

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            ClassificationCache(capacity=0)
