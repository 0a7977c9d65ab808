"""Unit tests for batch encoding and decoding helpers."""

import pytest

import gpt2tok as g2t
from gpt2tok.errors import StrategyError
from gpt2tok.parallel import ParallelMode


TEXTS = ["hello world", "hello", "world hello", "", "café"] * 20


@pytest.mark.parametrize("mode", ["auto", "batch", "off"])
def test_encode_batch_matches_serial(tokenizer, mode):
    """Every mode returns the same results in input order."""
    expected = [tokenizer.encode(text) for text in TEXTS]
    results = g2t.encode_batch(tokenizer, TEXTS, num_workers=4, parallel_mode=mode)
    assert results == expected


def test_encode_batch_truncates(tokenizer):
    """Batch encoding forwards max_len and the truncation strategy."""
    results = g2t.encode_batch(
        tokenizer, ["hello world"] * 3, max_len=2, truncation_strategy="only-first"
    )
    assert all(len(r.token_ids) == 2 for r in results)
    assert all(r.num_truncated_tokens == 2 for r in results)


def test_decode_batch_roundtrip(tokenizer):
    """Batch decoding restores every text."""
    ids = [tokenizer.encode(text).token_ids for text in TEXTS]
    assert g2t.decode_batch(tokenizer, ids, parallel_mode="batch") == TEXTS


def test_zero_workers_runs_serially(tokenizer):
    """Zero workers is treated as one."""
    results = g2t.encode_batch(tokenizer, TEXTS[:3], num_workers=0)
    assert [r.token_ids for r in results] == [
        tokenizer.encode(text).token_ids for text in TEXTS[:3]
    ]


def test_parallel_mode_lookup():
    """Modes resolve case-insensitively; unknown names raise StrategyError."""
    assert ParallelMode.get("BATCH") is ParallelMode.BATCH
    assert g2t.list_parallel_modes() == ["auto", "batch", "off"]
    with pytest.raises(StrategyError):
        ParallelMode.get("chunk")
