"""Factory functions for creating tokenizers."""

from pathlib import Path
from typing import Final, Literal

from ._models.base import Tokenizer
from ._models.gpt2 import Gpt2Tokenizer
from .errors import ModelLoadError
from .merges import MergeTable
from .vocab import Gpt2Vocab

# Tokenizer factory
# ===================================================================================

TokenizerType = Literal["gpt2"]

_TOKENIZER_REGISTRY: Final[dict[str, type[Gpt2Tokenizer]]] = {
    Gpt2Tokenizer.TOKENIZER_TYPE: Gpt2Tokenizer,
}


def list_tokenizers() -> list[str]:
    """Return names of all available tokenizer types."""
    return list(_TOKENIZER_REGISTRY.keys())


def get_tokenizer(
    vocab: Gpt2Vocab,
    merges: MergeTable,
    tokenizer_type: TokenizerType = "gpt2",
    *,
    lower_case: bool = False,
) -> Tokenizer:
    """
    Create a tokenizer from an in-memory vocabulary and merge table.

    :param vocab: Vocabulary to map tokens to ids.
    :param merges: Ranked BPE merges.
    :param tokenizer_type: Registered tokenizer type.
    :param lower_case: Lowercase non-special text before splitting.
    :raises ModelLoadError: If tokenizer_type is unknown.

    .. code-block:: python

        vocab = Gpt2Vocab.from_text('{"a": 0, "b": 1, "ab": 2, "<|endoftext|>": 3}')
        merges = MergeTable.from_text("#version: 0.2\\na b")
        tokenizer = get_tokenizer(vocab, merges)
    """
    if tokenizer_type not in _TOKENIZER_REGISTRY:
        raise ModelLoadError(f"unknown tokenizer type {tokenizer_type!r}")
    return _TOKENIZER_REGISTRY[tokenizer_type](vocab, merges, lower_case=lower_case)


def from_pretrained(
    vocab_path: str | Path,
    merges_path: str | Path,
    *,
    lower_case: bool = False,
) -> Tokenizer:
    """
    Load a pre-trained GPT2 tokenizer from ``vocab.json`` and ``merges.txt``.

    :param vocab_path: Path to the JSON vocabulary.
    :param merges_path: Path to the merges file.
    :param lower_case: Lowercase non-special text before splitting.
    :return: Ready to use tokenizer.
    :raises ModelLoadError: If either file does not exist.
    :raises VocabularyParsingError: If either file cannot be parsed.

    .. code-block:: python

        tokenizer = from_pretrained("gpt2/vocab.json", "gpt2/merges.txt")
        encoded = tokenizer.encode("Hello world")
    """
    vocab = Gpt2Vocab.from_file(vocab_path)
    merges = MergeTable.from_file(merges_path)
    return get_tokenizer(vocab, merges, lower_case=lower_case)


# ===================================================================================
