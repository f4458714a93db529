from __future__ import annotations

import pytest

from survey_insights.stage2_analyst.batchers import chunk_rows, get_batch_stats


def test_chunk_rows_last_batch_shorter():
    batches = chunk_rows(list(range(25)), batch_size=10)
    assert [len(b) for b in batches] == [10, 10, 5]


def test_chunk_rows_is_lossless_and_ordered():
    rows = [{"key": i} for i in range(7)]
    batches = chunk_rows(rows, batch_size=3)
    assert [r for batch in batches for r in batch] == rows


def test_chunk_rows_exact_multiple():
    assert [len(b) for b in chunk_rows(list(range(600)))] == [300, 300]


def test_chunk_rows_empty():
    assert chunk_rows([]) == []


@pytest.mark.parametrize("size", [0, -1])
def test_chunk_rows_rejects_bad_batch_size(size):
    with pytest.raises(ValueError):
        chunk_rows([1, 2, 3], batch_size=size)


def test_get_batch_stats():
    stats = get_batch_stats(chunk_rows(list(range(25)), batch_size=10))
    assert stats == {"total_batches": 3, "total_rows": 25, "batch_sizes": [10, 10, 5]}
