"""Truncation strategies for sequences and sequence pairs."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Final, Literal, override
import logging

from .errors import StrategyError, TruncationError
from .outputs import TokenIdsWithOffsets
from .tokens import Offset
from .types import TokenId

log = logging.getLogger(__name__)

type TruncationResult = tuple[
    TokenIdsWithOffsets,
    TokenIdsWithOffsets | None,
    list[TokenId],
    list[Offset | None],
]

# =========================================================================================

# helpers shared by the strategies


def _truncate_with_overflow(
    sequence: TokenIdsWithOffsets, num_tokens_to_remove: int, stride: int
) -> tuple[list[TokenId], list[Offset | None]]:
    """Cut ``num_tokens_to_remove`` tokens off the tail, prefixing up to ``stride`` kept tokens."""
    cutoff = len(sequence.ids) - num_tokens_to_remove
    overflow_tokens = sequence.ids[cutoff:]
    overflow_offsets = sequence.offsets[cutoff:]
    del sequence.ids[cutoff:]
    del sequence.offsets[cutoff:]
    del sequence.reference_offsets[cutoff:]
    del sequence.masks[cutoff:]

    window_len = min(len(sequence.ids), stride)
    if window_len > 0:
        overflow_tokens = sequence.ids[-window_len:] + overflow_tokens
        overflow_offsets = sequence.offsets[-window_len:] + overflow_offsets
    return overflow_tokens, overflow_offsets


def _pop_token(sequence: TokenIdsWithOffsets) -> tuple[TokenId, Offset | None]:
    """Remove the last token of ``sequence`` and return its id and offset."""
    token_id = sequence.ids.pop()
    offset = sequence.offsets.pop() if sequence.offsets else None
    if sequence.reference_offsets:
        sequence.reference_offsets.pop()
    if sequence.masks:
        sequence.masks.pop()
    return token_id, offset


# =========================================================================================

# truncation strategies


class TruncationStrategy(ABC):
    """Base strategy deciding which sequence loses tokens when input is too long."""

    name: str = "base"

    @abstractmethod
    def truncate(
        self,
        sequence_1: TokenIdsWithOffsets,
        sequence_2: TokenIdsWithOffsets | None,
        num_tokens_to_remove: int,
        stride: int,
    ) -> TruncationResult:
        """
        Remove ``num_tokens_to_remove`` (> 0) tokens, mutating the sequences.

        :return: Both sequences, the overflowing ids and their offsets.
        :raises TruncationError: If the strategy cannot remove that many tokens.
        """


class LongestFirstStrategy(TruncationStrategy):
    """Iteratively drop a token from whichever sequence is currently longer."""

    name = "longest-first"

    @override
    def truncate(
        self,
        sequence_1: TokenIdsWithOffsets,
        sequence_2: TokenIdsWithOffsets | None,
        num_tokens_to_remove: int,
        stride: int,
    ) -> TruncationResult:
        if sequence_2 is None:
            return OnlyFirstStrategy().truncate(
                sequence_1, None, num_tokens_to_remove, stride
            )

        available = len(sequence_1) + len(sequence_2)
        if available < num_tokens_to_remove:
            raise TruncationError(
                "combined sequence length too short for requested truncation amount",
                num_tokens_to_remove=num_tokens_to_remove,
                available=available,
            )

        overflow_tokens: list[TokenId] = []
        overflow_offsets: list[Offset | None] = []
        for _ in range(num_tokens_to_remove):
            # equal lengths: the second sequence loses the token
            longer = sequence_1 if len(sequence_1) > len(sequence_2) else sequence_2
            token_id, offset = _pop_token(longer)
            overflow_tokens.insert(0, token_id)
            overflow_offsets.insert(0, offset)

        window_len = min(len(sequence_1), stride)
        if window_len > 0:
            overflow_tokens = sequence_1.ids[-window_len:] + overflow_tokens
            overflow_offsets = sequence_1.offsets[-window_len:] + overflow_offsets
        return sequence_1, sequence_2, overflow_tokens, overflow_offsets


class OnlyFirstStrategy(TruncationStrategy):
    """Only truncate the first sequence."""

    name = "only-first"

    @override
    def truncate(
        self,
        sequence_1: TokenIdsWithOffsets,
        sequence_2: TokenIdsWithOffsets | None,
        num_tokens_to_remove: int,
        stride: int,
    ) -> TruncationResult:
        if len(sequence_1) < num_tokens_to_remove:
            raise TruncationError(
                "first sequence too short for first only truncation",
                num_tokens_to_remove=num_tokens_to_remove,
                available=len(sequence_1),
            )
        overflow_tokens, overflow_offsets = _truncate_with_overflow(
            sequence_1, num_tokens_to_remove, stride
        )
        return sequence_1, sequence_2, overflow_tokens, overflow_offsets


class OnlySecondStrategy(TruncationStrategy):
    """Only truncate the second sequence; invalid for single sequences."""

    name = "only-second"

    @override
    def truncate(
        self,
        sequence_1: TokenIdsWithOffsets,
        sequence_2: TokenIdsWithOffsets | None,
        num_tokens_to_remove: int,
        stride: int,
    ) -> TruncationResult:
        if sequence_2 is None:
            raise TruncationError(
                "invalid truncation strategy for single sentence truncation",
                num_tokens_to_remove=num_tokens_to_remove,
            )
        if len(sequence_2) < num_tokens_to_remove:
            raise TruncationError(
                "second sequence too short for second only truncation",
                num_tokens_to_remove=num_tokens_to_remove,
                available=len(sequence_2),
            )
        overflow_tokens, overflow_offsets = _truncate_with_overflow(
            sequence_2, num_tokens_to_remove, stride
        )
        return sequence_1, sequence_2, overflow_tokens, overflow_offsets


class DoNotTruncateStrategy(TruncationStrategy):
    """Refuse to truncate; any required removal is an error."""

    name = "do-not-truncate"

    @override
    def truncate(
        self,
        sequence_1: TokenIdsWithOffsets,
        sequence_2: TokenIdsWithOffsets | None,
        num_tokens_to_remove: int,
        stride: int,
    ) -> TruncationResult:
        raise TruncationError(
            "truncation needed but no truncation requested",
            num_tokens_to_remove=num_tokens_to_remove,
        )


class TruncationMode(str, Enum):
    """Named truncation strategies."""

    LONGEST_FIRST = "longest-first"
    ONLY_FIRST = "only-first"
    ONLY_SECOND = "only-second"
    DO_NOT_TRUNCATE = "do-not-truncate"


StrategyName = Literal["longest-first", "only-first", "only-second", "do-not-truncate"]

_TRUNCATION_STRATEGIES: Final[dict[str, type[TruncationStrategy]]] = {
    TruncationMode.LONGEST_FIRST.value: LongestFirstStrategy,
    TruncationMode.ONLY_FIRST.value: OnlyFirstStrategy,
    TruncationMode.ONLY_SECOND.value: OnlySecondStrategy,
    TruncationMode.DO_NOT_TRUNCATE.value: DoNotTruncateStrategy,
}


def list_strategies() -> list[str]:
    """Return available truncation strategy names."""
    return list(_TRUNCATION_STRATEGIES.keys())


def get_strategy(
    name: "StrategyName | TruncationMode" = "longest-first",
) -> TruncationStrategy:
    """
    Create a truncation strategy by name.

    :param name: Strategy identifier, e.g. "longest-first" or "only-second".
    :raises StrategyError: If name is unknown.
    """
    key = name.value if isinstance(name, TruncationMode) else name
    if key not in _TRUNCATION_STRATEGIES:
        raise StrategyError(
            "unknown strategy name",
            invalid_name=key,
            available_strats=list_strategies(),
        )
    return _TRUNCATION_STRATEGIES[key]()


def truncate_sequences(
    sequence_1: TokenIdsWithOffsets,
    sequence_2: TokenIdsWithOffsets | None,
    num_tokens_to_remove: int,
    truncation_strategy: TruncationStrategy,
    stride: int = 0,
) -> TruncationResult:
    """
    Truncate a sequence (pair) in place to shed ``num_tokens_to_remove`` tokens.

    Overflowing tokens are returned in original order, preceded by up to
    ``stride`` tokens of retained context.

    :raises TruncationError: If the strategy cannot satisfy the removal.
    """
    if num_tokens_to_remove == 0:
        return sequence_1, sequence_2, [], []

    log.debug(
        f"truncating {num_tokens_to_remove} tokens with {truncation_strategy.name} "
        f"(stride {stride})"
    )
    return truncation_strategy.truncate(
        sequence_1, sequence_2, num_tokens_to_remove, stride
    )


__all__ = [
    "StrategyName",
    "TruncationMode",
    "TruncationStrategy",
    "LongestFirstStrategy",
    "OnlyFirstStrategy",
    "OnlySecondStrategy",
    "DoNotTruncateStrategy",
    "get_strategy",
    "list_strategies",
    "truncate_sequences",
]
