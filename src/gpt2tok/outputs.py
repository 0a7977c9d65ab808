"""Intermediate and final records produced by the encoding pipeline."""

from dataclasses import dataclass, field

from .tokens import Mask, Offset
from .types import OffsetSize, TokenId


@dataclass
class TokensWithOffsets:
    """Tokenized sequence before conversion to ids."""

    tokens: list[str] = field(default_factory=list)
    # None where a token cannot be related to the original text
    offsets: list[Offset | None] = field(default_factory=list)
    reference_offsets: list[list[OffsetSize]] = field(default_factory=list)
    masks: list[Mask] = field(default_factory=list)


@dataclass
class TokenIdsWithOffsets:
    """Encoded sequence before truncation and joining."""

    ids: list[TokenId] = field(default_factory=list)
    offsets: list[Offset | None] = field(default_factory=list)
    reference_offsets: list[list[OffsetSize]] = field(default_factory=list)
    masks: list[Mask] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ids)


@dataclass
class TokenIdsWithSpecialTokens:
    """Joined sequence pair with segment ids and special-token flags."""

    token_ids: list[TokenId] = field(default_factory=list)
    segment_ids: list[int] = field(default_factory=list)
    special_tokens_mask: list[int] = field(default_factory=list)
    token_offsets: list[Offset | None] = field(default_factory=list)
    reference_offsets: list[list[OffsetSize]] = field(default_factory=list)
    mask: list[Mask] = field(default_factory=list)


@dataclass
class TokenizedInput:
    """
    Final output of the encoding process, ready for a language model.

    Every per-token list has the same length as ``token_ids``;
    ``overflowing_tokens`` holds the ids removed by truncation plus any
    stride overlap.
    """

    token_ids: list[TokenId] = field(default_factory=list)
    segment_ids: list[int] = field(default_factory=list)
    special_tokens_mask: list[int] = field(default_factory=list)
    overflowing_tokens: list[TokenId] = field(default_factory=list)
    num_truncated_tokens: int = 0
    token_offsets: list[Offset | None] = field(default_factory=list)
    reference_offsets: list[list[OffsetSize]] = field(default_factory=list)
    mask: list[Mask] = field(default_factory=list)


__all__ = [
    "TokensWithOffsets",
    "TokenIdsWithOffsets",
    "TokenIdsWithSpecialTokens",
    "TokenizedInput",
]
