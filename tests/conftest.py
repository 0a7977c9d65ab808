"""Shared fixtures: a toy vocabulary and a small byte-level GPT2 model."""

import json

import pytest

import gpt2tok as g2t
from gpt2tok._bpe import BYTES_TO_UNICODE

ENDOFTEXT = "<|endoftext|>"

# ranks follow line order, the first line is a header
BYTE_LEVEL_MERGES = "\n".join(
    [
        "#version: 0.2",
        "h e",
        "l l",
        "Ġ w",
        "o r",
        "Ġw or",
        "he ll",
        "hell o",
    ]
)

TOY_VOCAB = {"a": 0, "b": 1, "ab": 2, ENDOFTEXT: 3}
TOY_MERGES = "#version\na b"


def _byte_level_vocab() -> dict[str, int]:
    values = {BYTES_TO_UNICODE[b]: b for b in range(256)}
    for token in ["he", "ll", "Ġw", "or", "Ġwor", "hell", "hello", ENDOFTEXT]:
        values[token] = len(values)
    return values


@pytest.fixture
def byte_vocab_json():
    """Return the byte-level vocabulary as JSON text."""
    return json.dumps(_byte_level_vocab())


@pytest.fixture
def tokenizer(byte_vocab_json):
    """Return a GPT2 tokenizer covering every byte plus a few merges."""
    vocab = g2t.Gpt2Vocab.from_text(byte_vocab_json)
    merges = g2t.MergeTable.from_text(BYTE_LEVEL_MERGES)
    return g2t.get_tokenizer(vocab, merges)


@pytest.fixture
def toy_tokenizer():
    """Return a GPT2 tokenizer over the four-entry toy vocabulary."""
    vocab = g2t.Gpt2Vocab.from_text(json.dumps(TOY_VOCAB))
    merges = g2t.MergeTable.from_text(TOY_MERGES)
    return g2t.Gpt2Tokenizer(vocab, merges)


@pytest.fixture
def model_files(tmp_path, byte_vocab_json):
    """Write ``vocab.json`` and ``merges.txt`` to disk and return their paths."""
    vocab_path = tmp_path / "vocab.json"
    merges_path = tmp_path / "merges.txt"
    vocab_path.write_text(byte_vocab_json, encoding="utf-8")
    merges_path.write_text(BYTE_LEVEL_MERGES, encoding="utf-8")
    return vocab_path, merges_path
