"""
Base tokenizer interface: tokenization, encoding with truncation and decoding.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Final

from ..outputs import (
    TokenIdsWithOffsets,
    TokenIdsWithSpecialTokens,
    TokenizedInput,
    TokensWithOffsets,
)
from ..strategy import (
    StrategyName,
    TruncationMode,
    TruncationStrategy,
    get_strategy,
    truncate_sequences,
)
from ..tokens import Offset, Token, TokenRef
from ..types import TokenId
from ..vocab import Vocab

log = logging.getLogger(__name__)

# applied in order by ``clean_up_tokenization``
CLEANUP_SUBSTITUTIONS: Final[tuple[tuple[str, str], ...]] = (
    (" .", "."),
    (" !", "!"),
    (" ?", "?"),
    (" ,", ","),
    (" ' ", "'"),
    (" n't", "n't"),
    (" 'm", "'m"),
    (" do not", " don't"),
    (" 's", "'s"),
    (" 've", "'ve"),
    (" 're", "'re"),
)


def _resolve_strategy(
    strategy: "TruncationStrategy | TruncationMode | StrategyName",
) -> TruncationStrategy:
    if isinstance(strategy, TruncationStrategy):
        return strategy
    return get_strategy(strategy)


class Tokenizer[V: Vocab](ABC):
    """
    Abstract base class for tokenizers.

    Subclasses provide ``tokenize_to_tokens``; everything from offsets
    bookkeeping to truncation and decoding is shared.
    """

    TOKENIZER_TYPE: str = "base"

    def __init__(self, vocab: V) -> None:
        super().__init__()
        self._vocab = vocab

    @property
    def vocab(self) -> V:
        return self._vocab

    @abstractmethod
    def tokenize_to_tokens(self, text: TokenRef) -> list[Token]:
        """Tokenize a ``TokenRef`` spanning the input into owned tokens."""
        ...

    def tokenize(self, text: str) -> list[str]:
        """Tokenize a string into token strings."""
        return self.tokenize_with_offsets(text).tokens

    def tokenize_with_offsets(self, text: str) -> TokensWithOffsets:
        """
        Tokenize a string, keeping offsets, reference offsets and masks.

        Empty or whitespace-only input yields an empty result.
        """
        if not text.strip():
            return TokensWithOffsets()

        initial_offsets = list(range(len(text)))
        tokens = self.tokenize_to_tokens(TokenRef.new(text, initial_offsets))

        output = TokensWithOffsets()
        for token in tokens:
            output.tokens.append(token.text)
            if token.reference_offsets:
                output.offsets.append(
                    Offset(token.reference_offsets[0], token.reference_offsets[-1] + 1)
                )
            else:
                output.offsets.append(None)
            output.reference_offsets.append(token.reference_offsets)
            output.masks.append(token.mask)
        return output

    def tokenize_list(self, text_list: Sequence[str]) -> list[list[str]]:
        return [self.tokenize(text) for text in text_list]

    def tokenize_list_with_offsets(
        self, text_list: Sequence[str]
    ) -> list[TokensWithOffsets]:
        return [self.tokenize_with_offsets(text) for text in text_list]

    def convert_tokens_to_ids(self, tokens: Sequence[str]) -> list[TokenId]:
        return self._vocab.convert_tokens_to_ids(tokens)

    def _tokenize_to_ids(self, text: str) -> TokenIdsWithOffsets:
        tokens = self.tokenize_with_offsets(text)
        return TokenIdsWithOffsets(
            ids=self.convert_tokens_to_ids(tokens.tokens),
            offsets=tokens.offsets,
            reference_offsets=tokens.reference_offsets,
            masks=tokens.masks,
        )

    def build_input_with_special_tokens(
        self,
        tokens_1: TokenIdsWithOffsets,
        tokens_2: TokenIdsWithOffsets | None = None,
    ) -> TokenIdsWithSpecialTokens:
        """
        Join a sequence pair into model input.

        Segment ids are 0 for the first sequence and 1 for the second; this
        tokenizer adds no special tokens, so the special-tokens mask is all 0.
        """
        output = TokenIdsWithSpecialTokens(
            token_ids=list(tokens_1.ids),
            segment_ids=[0] * len(tokens_1.ids),
            special_tokens_mask=[0] * len(tokens_1.ids),
            token_offsets=list(tokens_1.offsets),
            reference_offsets=list(tokens_1.reference_offsets),
            mask=list(tokens_1.masks),
        )
        if tokens_2 is not None:
            output.token_ids.extend(tokens_2.ids)
            output.segment_ids.extend([1] * len(tokens_2.ids))
            output.special_tokens_mask.extend([0] * len(tokens_2.ids))
            output.token_offsets.extend(tokens_2.offsets)
            output.reference_offsets.extend(tokens_2.reference_offsets)
            output.mask.extend(tokens_2.masks)
        return output

    def encode(
        self,
        text_1: str,
        text_2: str | None = None,
        max_len: int = 128,
        truncation_strategy: "TruncationStrategy | TruncationMode | StrategyName" = (
            "longest-first"
        ),
        stride: int = 0,
    ) -> TokenizedInput:
        """
        Encode a text (or text pair) into model-ready ids.

        Each side is tokenized independently, then truncated so the joined
        length is at most ``max_len``.

        :param text_1: First text.
        :param text_2: Optional second text (segment id 1).
        :param max_len: Maximum length of the joined sequence.
        :param truncation_strategy: Strategy instance or name.
        :param stride: Number of retained tokens repeated at the front of the overflow.
        :raises TruncationError: If the strategy cannot shed the excess tokens.
        """
        strategy = _resolve_strategy(truncation_strategy)

        tokens_1 = self._tokenize_to_ids(text_1)
        tokens_2 = self._tokenize_to_ids(text_2) if text_2 is not None else None

        additional = self.build_input_with_special_tokens(
            TokenIdsWithOffsets(),
            TokenIdsWithOffsets() if tokens_2 is not None else None,
        )
        total_len = (
            len(tokens_1)
            + (len(tokens_2) if tokens_2 is not None else 0)
            + len(additional.token_ids)
        )
        num_truncated_tokens = max(0, total_len - max_len)

        tokens_1, tokens_2, overflowing_tokens, _ = truncate_sequences(
            tokens_1, tokens_2, num_truncated_tokens, strategy, stride
        )
        merged = self.build_input_with_special_tokens(tokens_1, tokens_2)

        return TokenizedInput(
            token_ids=merged.token_ids,
            segment_ids=merged.segment_ids,
            special_tokens_mask=merged.special_tokens_mask,
            overflowing_tokens=overflowing_tokens,
            num_truncated_tokens=num_truncated_tokens,
            token_offsets=merged.token_offsets,
            reference_offsets=merged.reference_offsets,
            mask=merged.mask,
        )

    def encode_list(
        self,
        text_list: Sequence[str],
        max_len: int = 128,
        truncation_strategy: "TruncationStrategy | TruncationMode | StrategyName" = (
            "longest-first"
        ),
        stride: int = 0,
    ) -> list[TokenizedInput]:
        return [
            self.encode(text, None, max_len, truncation_strategy, stride)
            for text in text_list
        ]

    def encode_pair_list(
        self,
        text_list: Sequence[tuple[str, str]],
        max_len: int = 128,
        truncation_strategy: "TruncationStrategy | TruncationMode | StrategyName" = (
            "longest-first"
        ),
        stride: int = 0,
    ) -> list[TokenizedInput]:
        return [
            self.encode(text_1, text_2, max_len, truncation_strategy, stride)
            for text_1, text_2 in text_list
        ]

    def decode_to_vec(
        self, token_ids: Sequence[TokenId], skip_special_tokens: bool = False
    ) -> list[str]:
        """Map ids to token strings, optionally dropping special token ids."""
        special_indices = self._vocab.special_indices
        return [
            self._vocab.id_to_token(token_id)
            for token_id in token_ids
            if not (skip_special_tokens and token_id in special_indices)
        ]

    def decode(
        self,
        token_ids: Sequence[TokenId],
        skip_special_tokens: bool = False,
        clean_up_tokenization_spaces: bool = False,
    ) -> str:
        """
        Decode ids back into text. Never fails.

        :param skip_special_tokens: Drop ids registered as special tokens.
        :param clean_up_tokenization_spaces: Apply ``CLEANUP_SUBSTITUTIONS``.
        """
        tokens = self.decode_to_vec(token_ids, skip_special_tokens)
        decoded = self.convert_tokens_to_string(tokens)
        if clean_up_tokenization_spaces:
            return self.clean_up_tokenization(decoded)
        return decoded

    def decode_list(
        self,
        token_ids_list: Sequence[Sequence[TokenId]],
        skip_special_tokens: bool = False,
        clean_up_tokenization_spaces: bool = False,
    ) -> list[str]:
        return [
            self.decode(token_ids, skip_special_tokens, clean_up_tokenization_spaces)
            for token_ids in token_ids_list
        ]

    def convert_tokens_to_string(self, tokens: list[str]) -> str:
        return " ".join(tokens)

    @staticmethod
    def clean_up_tokenization(text: str) -> str:
        """Approximate natural spacing around punctuation and contractions."""
        for old, new in CLEANUP_SUBSTITUTIONS:
            text = text.replace(old, new)
        return text

    def add_tokens(self, tokens: Sequence[str]) -> None:
        self._vocab.add_tokens(tokens)

    def add_extra_ids(self, num_extra_ids: int) -> None:
        self._vocab.add_extra_ids(num_extra_ids)

    def vocab_size(self) -> int:
        """Return the number of tokens in the vocabulary."""
        return len(self._vocab)
