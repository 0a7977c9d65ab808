"""GPT2 byte-level BPE tokenizer implementation."""

import logging
from typing import override

import regex as re

from .._bpe import UNICODE_TO_BYTES, BpeCache, bpe, split_on_bpe_pairs
from .._pretokenize import (
    fix_mask,
    lowercase,
    split_on_regex_with_lookahead,
    split_on_special_tokens,
)
from ..merges import MergeTable
from ..pattern import TokenPattern, compile_pattern
from ..tokens import Mask, Token, TokenRef
from ..vocab import Gpt2Vocab
from .base import Tokenizer

log = logging.getLogger(__name__)


class Gpt2Tokenizer(Tokenizer[Gpt2Vocab]):
    """
    GPT2 tokenizer performing:

    - splitting on special tokens
    - (optional) lower casing
    - whitespace-aware regex splitting
    - byte-level BPE merging
    """

    TOKENIZER_TYPE = "gpt2"

    def __init__(
        self, vocab: Gpt2Vocab, merges: MergeTable, lower_case: bool = False
    ) -> None:
        """
        Create a tokenizer from an existing vocabulary and merge table.

        :param vocab: GPT-like vocabulary.
        :param merges: BPE merge table.
        :param lower_case: Lowercase non-special text before splitting.
        """
        super().__init__(vocab)
        self.bpe_ranks = merges
        self.lower_case = lower_case
        # shared across threads, see BpeCache
        self.cache = BpeCache()
        self.pattern_lookahead: re.Pattern[str] = compile_pattern(
            TokenPattern.LOOKAHEAD.value
        )
        self.pattern_tokenization: re.Pattern[str] = compile_pattern(
            TokenPattern.GPT2.value
        )
        log.debug(
            f"{self.__class__.__name__} ready: {len(vocab)} tokens, "
            f"{len(merges)} merges, lower_case={lower_case}"
        )

    @override
    def tokenize_to_tokens(self, initial_token: TokenRef) -> list[Token]:
        tokens = [
            token.to_owned()
            for token in split_on_special_tokens(initial_token, self._vocab)
        ]

        sub_tokens: list[Token] = []
        for token in tokens:
            if token.mask in (Mask.SPECIAL, Mask.UNKNOWN):
                sub_tokens.append(token)
                continue
            if self.lower_case:
                lowercase(token)
            for piece in split_on_regex_with_lookahead(
                token.as_ref(), self.pattern_lookahead, self.pattern_tokenization
            ):
                sub_tokens.extend(
                    split_on_bpe_pairs(piece, bpe, self.bpe_ranks, self.cache, True)
                )

        fix_mask(sub_tokens)
        return sub_tokens

    @override
    def convert_tokens_to_string(self, tokens: list[str]) -> str:
        """Join byte-level tokens and map them back to raw UTF-8 bytes."""
        raw = bytearray()
        for character in "".join(tokens):
            byte = UNICODE_TO_BYTES.get(character)
            if byte is None:
                # outside the byte-level alphabet, e.g. added tokens
                raw.extend(character.encode("utf-8"))
            else:
                raw.append(byte)
        return raw.decode("utf-8", errors="replace")
