"""Unit tests for truncation strategies, stride windows and strategy lookup."""

import pytest

import gpt2tok as g2t
from gpt2tok.errors import StrategyError, TruncationError
from gpt2tok.outputs import TokenIdsWithOffsets
from gpt2tok.strategy import truncate_sequences
from gpt2tok.tokens import Mask, Offset


def _seq(*ids):
    return TokenIdsWithOffsets(
        ids=list(ids),
        offsets=[Offset(i, i + 1) for i in ids],
        reference_offsets=[[i] for i in ids],
        masks=[Mask.NONE] * len(ids),
    )


# Single sequence
# ---------------------------------------------------------------------------


def test_only_first_with_stride():
    """Overflow holds the removed tail preceded by stride tokens of context."""
    seq = _seq(1, 2, 3, 4, 5)
    seq_1, seq_2, overflow, overflow_offsets = truncate_sequences(
        seq, None, 2, g2t.OnlyFirstStrategy(), stride=1
    )
    assert seq_1.ids == [1, 2, 3]
    assert seq_2 is None
    assert overflow == [3, 4, 5]
    assert overflow_offsets == [Offset(3, 4), Offset(4, 5), Offset(5, 6)]
    # per-token lists stay aligned
    assert len(seq_1.offsets) == len(seq_1.reference_offsets) == len(seq_1.masks) == 3


def test_stride_capped_by_remaining_length():
    """The stride window never exceeds what is left."""
    _, _, overflow, _ = truncate_sequences(
        _seq(1, 2, 3), None, 2, g2t.OnlyFirstStrategy(), stride=10
    )
    assert overflow == [1, 2, 3]


def test_longest_first_single_sequence_behaves_like_only_first():
    """With no second sequence longest-first trims the first."""
    seq_1, _, overflow, _ = truncate_sequences(
        _seq(1, 2, 3, 4), None, 1, g2t.LongestFirstStrategy()
    )
    assert seq_1.ids == [1, 2, 3]
    assert overflow == [4]


def test_zero_removal_is_noop_even_for_do_not_truncate():
    """Nothing to remove means no strategy is consulted."""
    seq_1, _, overflow, offsets = truncate_sequences(
        _seq(1, 2), None, 0, g2t.DoNotTruncateStrategy()
    )
    assert seq_1.ids == [1, 2]
    assert overflow == [] and offsets == []


def test_only_first_too_short_raises():
    """Removing more tokens than available fails."""
    with pytest.raises(TruncationError):
        truncate_sequences(_seq(1), None, 2, g2t.OnlyFirstStrategy())


# Sequence pairs
# ---------------------------------------------------------------------------


def test_longest_first_pair_tie_pops_second():
    """The longer sequence loses tokens; on a tie the second one does."""
    seq_1, seq_2, overflow, _ = truncate_sequences(
        _seq(1, 2, 3, 4), _seq(5, 6), 3, g2t.LongestFirstStrategy()
    )
    assert seq_1.ids == [1, 2]
    assert seq_2.ids == [5]
    assert sorted(overflow) == [3, 4, 6]


def test_longest_first_pair_stride_from_first_sequence():
    """The stride window comes from the end of the first sequence."""
    seq_1, _, overflow, _ = truncate_sequences(
        _seq(1, 2, 3), _seq(4, 5, 6), 2, g2t.LongestFirstStrategy(), stride=1
    )
    assert seq_1.ids == [1, 2]
    assert overflow[0] == 2
    assert len(overflow) == 3


def test_longest_first_combined_too_short_raises():
    """Both sequences together must hold enough tokens."""
    with pytest.raises(TruncationError):
        truncate_sequences(_seq(1), _seq(2), 3, g2t.LongestFirstStrategy())


def test_only_second_truncates_second():
    """only-second leaves the first sequence intact."""
    seq_1, seq_2, overflow, _ = truncate_sequences(
        _seq(1, 2, 3), _seq(4, 5, 6), 2, g2t.OnlySecondStrategy()
    )
    assert seq_1.ids == [1, 2, 3]
    assert seq_2.ids == [4]
    assert overflow == [5, 6]


def test_only_second_without_pair_raises():
    """only-second cannot handle a single sequence."""
    with pytest.raises(TruncationError):
        truncate_sequences(_seq(1, 2), None, 1, g2t.OnlySecondStrategy())


def test_do_not_truncate_raises_value_error():
    """Truncation errors are ValueErrors."""
    with pytest.raises(ValueError):
        truncate_sequences(_seq(1, 2), None, 1, g2t.DoNotTruncateStrategy())


# Strategy lookup
# ---------------------------------------------------------------------------


def test_get_strategy_by_name_and_mode():
    """Strategies resolve from names and TruncationMode members."""
    assert isinstance(g2t.get_strategy("only-first"), g2t.OnlyFirstStrategy)
    assert isinstance(
        g2t.get_strategy(g2t.TruncationMode.LONGEST_FIRST), g2t.LongestFirstStrategy
    )
    assert g2t.list_strategies() == [
        "longest-first",
        "only-first",
        "only-second",
        "do-not-truncate",
    ]


def test_get_strategy_unknown_raises():
    """Unknown names raise StrategyError listing what is available."""
    with pytest.raises(StrategyError) as exc_info:
        g2t.get_strategy("shortest-first")
    assert exc_info.value.invalid_name == "shortest-first"
