"""
Token vocabularies with a special-token overlay.

A vocabulary keeps a bijective ``values`` (token -> id) / ``indices``
(id -> token) pair plus ``special_values`` / ``special_indices``, which are
consulted first in both directions.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Self, override

from ._decorators import measure_time
from .errors import ModelLoadError, TokenNotFoundError, VocabularyParsingError
from .types import TokenId

log = logging.getLogger(__name__)

EXTRA_ID_TEMPLATE: Final[str] = "<extra_id_{}>"


def swap_key_values[K, V](mapping: dict[K, V]) -> dict[V, K]:
    """Invert a mapping."""
    return {value: key for key, value in mapping.items()}


def read_flat_string(text: str) -> dict[str, TokenId]:
    """Parse a flat vocabulary: one token per line, id = line number."""
    return {line.strip(): index for index, line in enumerate(text.splitlines())}


def read_json_string(text: str) -> dict[str, TokenId]:
    """
    Parse a JSON vocabulary mapping token strings to non-negative integer ids.

    :raises VocabularyParsingError: If the text is not a JSON object of
        string keys to non-negative integers.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise VocabularyParsingError(
            "malformed json vocabulary", line=e.lineno, reason=e.msg
        ) from e

    if not isinstance(data, dict):
        raise VocabularyParsingError(
            "json vocabulary must be an object", reason=type(data).__name__
        )

    values: dict[str, TokenId] = {}
    for token, index in data.items():
        # bool is an int subclass but never a valid id
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise VocabularyParsingError(
                f"invalid id for token {token!r}", reason=repr(index)
            )
        values[token] = index
    return values


@dataclass
class SpecialTokenMap:
    """Special tokens configured for a vocabulary; ``unk_token`` is mandatory."""

    unk_token: str
    pad_token: str | None = None
    bos_token: str | None = None
    sep_token: str | None = None
    cls_token: str | None = None
    eos_token: str | None = None
    mask_token: str | None = None
    additional_special_tokens: set[str] = field(default_factory=set)

    def configured(self) -> list[str]:
        """Return every configured special token string, unknown token first."""
        tokens = [self.unk_token]
        for token in (
            self.pad_token,
            self.bos_token,
            self.sep_token,
            self.cls_token,
            self.eos_token,
            self.mask_token,
        ):
            if token is not None:
                tokens.append(token)
        tokens.extend(sorted(self.additional_special_tokens))
        return tokens

    def register_special_values(
        self, values: dict[str, TokenId]
    ) -> dict[str, TokenId]:
        """
        Look up the id of every configured special token in ``values``.

        :raises TokenNotFoundError: If a configured token is missing.
        """
        special_values: dict[str, TokenId] = {}
        for token in self.configured():
            if token not in values:
                raise TokenNotFoundError(
                    "special value could not be found in the vocabulary", token=token
                )
            special_values[token] = values[token]
        return special_values


class Vocab(ABC):
    """Common interface of vocabularies used by the tokenizers."""

    def __init__(
        self, values: dict[str, TokenId], special_token_map: SpecialTokenMap
    ) -> None:
        self.values = values
        self.indices: dict[TokenId, str] = swap_key_values(values)
        self.special_token_map = special_token_map
        self.special_values = special_token_map.register_special_values(values)
        self.special_indices: dict[TokenId, str] = swap_key_values(
            self.special_values
        )
        log.debug(
            f"built {self.__class__.__name__} with {len(self.values)} tokens, "
            f"{len(self.special_values)} special"
        )

    @classmethod
    @abstractmethod
    def from_text(cls, text: str) -> Self:
        """Build the vocabulary from its source text."""
        ...

    @classmethod
    def from_file(cls, path: str | Path) -> Self:
        """Read a vocabulary file from disk and parse it with ``from_text``."""
        path = Path(path)
        if not path.exists():
            raise ModelLoadError("vocab filepath does not exist", model_path=str(path))
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise VocabularyParsingError(
                "vocab file is not valid utf-8", reason=str(e)
            ) from e
        return cls.from_text(text)

    @classmethod
    def from_values_and_special_token_map(
        cls, values: dict[str, TokenId], special_token_map: SpecialTokenMap
    ) -> Self:
        return cls(values, special_token_map)

    @property
    def unknown_value(self) -> str:
        return self.special_token_map.unk_token

    def token_to_id(self, token: str) -> TokenId:
        """Convert a token to its id, falling back to the unknown token id."""
        if token in self.special_values:
            return self.special_values[token]
        if token in self.values:
            return self.values[token]
        return self.values[self.unknown_value]

    def id_to_token(self, index: TokenId) -> str:
        """Convert an id to its token, falling back to the unknown token string."""
        if index in self.special_indices:
            return self.special_indices[index]
        return self.indices.get(index, self.unknown_value)

    def convert_tokens_to_ids(self, tokens: Iterable[str]) -> list[TokenId]:
        return [self.token_to_id(token) for token in tokens]

    def add_tokens(self, tokens: Iterable[str]) -> None:
        """
        Append tokens at the next sequential ids.

        Added tokens are registered as special values so the tokenization
        algorithm treats them as atomic. Tokens already present are skipped.
        """
        current_index = len(self.values)
        for token in tokens:
            if token in self.values:
                continue
            self.values[token] = current_index
            self.indices[current_index] = token
            self.special_values[token] = current_index
            self.special_indices[current_index] = token
            current_index += 1

    def add_extra_ids(self, num_extra_ids: int) -> None:
        """Append ``<extra_id_{i}>`` tokens for ``i`` in ``range(num_extra_ids)``."""
        self.add_tokens(EXTRA_ID_TEMPLATE.format(i) for i in range(num_extra_ids))

    def __len__(self) -> int:
        return len(self.values)


class BaseVocab(Vocab):
    """Flat vocabulary (one token per line) with ``[UNK]`` as unknown token."""

    DEFAULT_UNK_TOKEN: Final[str] = "[UNK]"

    @override
    @classmethod
    @measure_time
    def from_text(cls, text: str) -> Self:
        values = read_flat_string(text)
        return cls(values, SpecialTokenMap(unk_token=cls.DEFAULT_UNK_TOKEN))


class Gpt2Vocab(Vocab):
    """
    Vocabulary for the GPT2 tokenizer, read from a JSON object.

    ``<|endoftext|>`` serves as unknown, BOS and EOS token.
    """

    DEFAULT_UNK_TOKEN: Final[str] = "<|endoftext|>"
    DEFAULT_BOS_TOKEN: Final[str] = DEFAULT_UNK_TOKEN
    DEFAULT_EOS_TOKEN: Final[str] = DEFAULT_UNK_TOKEN

    @override
    @classmethod
    @measure_time
    def from_text(cls, text: str) -> Self:
        values = read_json_string(text)
        special_token_map = SpecialTokenMap(
            unk_token=cls.DEFAULT_UNK_TOKEN,
            bos_token=cls.DEFAULT_BOS_TOKEN,
            eos_token=cls.DEFAULT_EOS_TOKEN,
        )
        return cls(values, special_token_map)

    @property
    def bos_value(self) -> str:
        return self.special_token_map.bos_token or self.DEFAULT_BOS_TOKEN

    @property
    def eos_value(self) -> str:
        return self.special_token_map.eos_token or self.DEFAULT_EOS_TOKEN


__all__ = [
    "SpecialTokenMap",
    "Vocab",
    "BaseVocab",
    "Gpt2Vocab",
    "read_flat_string",
    "read_json_string",
]
