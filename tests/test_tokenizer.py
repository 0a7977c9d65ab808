"""Unit tests for GPT2 tokenization, encoding with truncation and decoding."""

import pytest

import gpt2tok as g2t
from gpt2tok.errors import ModelLoadError, TruncationError
from gpt2tok.tokens import Mask, Offset


# Toy vocabulary
# ---------------------------------------------------------------------------


def test_toy_merge_produces_single_token(toy_tokenizer):
    """'ab' merges into one token with id 2."""
    assert toy_tokenizer.tokenize("ab") == ["ab"]
    assert toy_tokenizer.encode("ab").token_ids == [2]


def test_toy_special_token_is_atomic(toy_tokenizer):
    """<|endoftext|> is one masked token with id 3."""
    output = toy_tokenizer.tokenize_with_offsets("<|endoftext|>")
    assert output.tokens == ["<|endoftext|>"]
    assert output.masks[0] in (Mask.SPECIAL, Mask.UNKNOWN)
    assert output.offsets == [Offset(0, 13)]
    assert toy_tokenizer.encode("<|endoftext|>").token_ids == [3]


def test_toy_decode_to_vec_skips_special(toy_tokenizer):
    """Special ids are dropped when asked to."""
    assert toy_tokenizer.decode_to_vec([3], skip_special_tokens=True) == []
    assert toy_tokenizer.decode_to_vec([2, 3]) == ["ab", "<|endoftext|>"]


def test_toy_unknown_characters_map_to_unk(toy_tokenizer):
    """Byte symbols missing from the vocabulary encode as the unknown id."""
    assert toy_tokenizer.encode("abc").token_ids == [2, 3]


# Tokenization and offsets
# ---------------------------------------------------------------------------


def test_tokenize_words(tokenizer):
    """Words merge by rank and keep their leading space marker."""
    output = tokenizer.tokenize_with_offsets("hello world")
    assert output.tokens == ["hello", "Ġwor", "l", "d"]
    assert output.offsets == [Offset(0, 5), Offset(5, 9), Offset(9, 10), Offset(10, 11)]
    assert output.masks == [Mask.NONE, Mask.BEGIN, Mask.CONTINUATION, Mask.CONTINUATION]


def test_empty_and_whitespace_only_inputs(tokenizer):
    """Blank input produces nothing."""
    assert tokenizer.tokenize("") == []
    assert tokenizer.tokenize("  \n\t ") == []
    assert tokenizer.encode("").token_ids == []


def test_offsets_cover_every_character_once(tokenizer):
    """Token spans tile the input without gaps or overlaps."""
    text = "Hello, world!  How are you?\nFine; thanks 123."
    output = tokenizer.tokenize_with_offsets(text)
    covered = []
    for offset in output.offsets:
        covered.extend(range(offset.begin, offset.end))
    assert covered == list(range(len(text)))


def test_reference_offsets_match_token_length(tokenizer):
    """Each token carries one reference offset per symbol."""
    output = tokenizer.tokenize_with_offsets("naïve café ☕")
    for token, refs in zip(output.tokens, output.reference_offsets):
        assert len(refs) == len(token)


def test_lower_case_option(byte_vocab_json):
    """Lowercasing happens before merging; offsets still point at the input."""
    vocab = g2t.Gpt2Vocab.from_text(byte_vocab_json)
    merges = g2t.MergeTable.from_text("#version: 0.2\nh e\nl l\nhe ll\nhell o")
    tokenizer = g2t.get_tokenizer(vocab, merges, lower_case=True)
    output = tokenizer.tokenize_with_offsets("HELLO")
    assert output.tokens == ["hello"]
    assert output.offsets == [Offset(0, 5)]


def test_consolidated_words(tokenizer):
    """Consolidation groups the pieces of ' world'."""
    tokens = tokenizer.tokenize_to_tokens(
        g2t.TokenRef.new("hello world", list(range(11)))
    )
    groups = [[t.text for t in group] for group in g2t.iter_consolidate_tokens(tokens)]
    assert groups == [["hello"], ["Ġwor", "l", "d"]]


# Encode-decode round-trip
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text",
    [
        "hello world",
        "Hello, world!  Spaces   and\ttabs\n",
        "café naïve 日本語 🎉",
        "don't won't I'll",
    ],
)
def test_encode_decode_roundtrip(tokenizer, text):
    """Decoding encoded ids reconstructs the input exactly."""
    encoded = tokenizer.encode(text, max_len=1024)
    assert tokenizer.decode(encoded.token_ids) == text


def test_decode_invalid_bytes_is_lossy(tokenizer):
    """Half of a multi-byte character decodes to the replacement character."""
    ids = tokenizer.convert_tokens_to_ids(["Ã"])
    assert tokenizer.decode(ids) == "�"


def test_decode_skip_special_and_cleanup(tokenizer):
    """Special ids are skipped and tokenization spaces can be cleaned up."""
    ids = tokenizer.encode("hello .").token_ids
    eot = tokenizer.vocab.token_to_id("<|endoftext|>")
    assert tokenizer.decode(ids + [eot], skip_special_tokens=True) == "hello ."
    assert tokenizer.decode(ids, clean_up_tokenization_spaces=True) == "hello."


def test_clean_up_tokenization():
    """Substitutions are applied in order."""
    text = "I do not know , he said . you 're sure ?"
    assert (
        g2t.Tokenizer.clean_up_tokenization(text)
        == "I don't know, he said. you're sure?"
    )


# Encoding with truncation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("max_len", [1, 3, 5, 128])
def test_encode_respects_max_len(tokenizer, max_len):
    """The output never exceeds max_len and truncation is fully accounted for."""
    text = "hello world hello world hello"
    pre_len = len(tokenizer.tokenize(text))
    encoded = tokenizer.encode(text, None, max_len, "longest-first", 0)
    assert len(encoded.token_ids) <= max_len
    assert encoded.num_truncated_tokens + len(encoded.token_ids) == pre_len
    assert len(encoded.overflowing_tokens) == encoded.num_truncated_tokens
    assert (
        len(encoded.segment_ids)
        == len(encoded.special_tokens_mask)
        == len(encoded.token_offsets)
        == len(encoded.mask)
        == len(encoded.token_ids)
    )


def test_encode_pair_segments(tokenizer):
    """The second sequence gets segment id 1."""
    encoded = tokenizer.encode("hello", "hello world")
    assert encoded.segment_ids == [0, 1, 1, 1, 1]
    assert encoded.special_tokens_mask == [0] * 5


def test_encode_pair_truncation_strategies(tokenizer):
    """Pair truncation honours the chosen strategy."""
    encoded = tokenizer.encode("hello world", "hello", 3, "only-first")
    assert encoded.segment_ids == [0, 0, 1]
    assert encoded.num_truncated_tokens == 2

    encoded = tokenizer.encode("hello", "hello world", 2, g2t.TruncationMode.ONLY_SECOND)
    assert encoded.token_ids == tokenizer.convert_tokens_to_ids(["hello", "Ġwor"])
    assert encoded.overflowing_tokens == tokenizer.convert_tokens_to_ids(["l", "d"])


def test_encode_stride_overflow(tokenizer):
    """Stride prefixes the overflow with retained context."""
    encoded = tokenizer.encode("hello world", None, 2, "only-first", stride=1)
    ids = tokenizer.convert_tokens_to_ids(["hello", "Ġwor", "l", "d"])
    assert encoded.token_ids == ids[:2]
    assert encoded.overflowing_tokens == ids[1:]


def test_encode_do_not_truncate_raises(tokenizer):
    """Refusing truncation on long input is an error."""
    with pytest.raises(TruncationError):
        tokenizer.encode("hello world", None, 1, "do-not-truncate")


def test_encode_and_decode_lists(tokenizer):
    """List helpers map element-wise."""
    encoded = tokenizer.encode_list(["hello", "hello world"])
    assert [len(e.token_ids) for e in encoded] == [1, 4]
    pairs = tokenizer.encode_pair_list([("hello", "world")])
    assert pairs[0].segment_ids[0] == 0 and pairs[0].segment_ids[-1] == 1
    assert tokenizer.decode_list([e.token_ids for e in encoded]) == [
        "hello",
        "hello world",
    ]


# Added tokens
# ---------------------------------------------------------------------------


def test_added_tokens_are_atomic(tokenizer):
    """Added tokens are never split and decode back verbatim."""
    tokenizer.add_tokens(["<|user|>"])
    output = tokenizer.tokenize_with_offsets("<|user|>hello")
    assert output.tokens == ["<|user|>", "hello"]
    assert output.masks[0] is Mask.SPECIAL
    ids = tokenizer.encode("<|user|>hello").token_ids
    assert tokenizer.decode(ids) == "<|user|>hello"
    assert tokenizer.decode(ids, skip_special_tokens=True) == "hello"


def test_vocab_size_grows_with_extra_ids(tokenizer):
    """Extra ids extend the vocabulary."""
    before = tokenizer.vocab_size()
    tokenizer.add_extra_ids(3)
    assert tokenizer.vocab_size() == before + 3


# Loading from disk
# ---------------------------------------------------------------------------


def test_from_pretrained(model_files):
    """Tokenizers load from vocab.json and merges.txt."""
    vocab_path, merges_path = model_files
    tokenizer = g2t.from_pretrained(vocab_path, merges_path)
    assert isinstance(tokenizer, g2t.Gpt2Tokenizer)
    assert tokenizer.tokenize("hello") == ["hello"]


def test_from_pretrained_missing_file_raises(model_files, tmp_path):
    """Missing files raise ModelLoadError."""
    vocab_path, _ = model_files
    with pytest.raises(ModelLoadError):
        g2t.from_pretrained(vocab_path, tmp_path / "missing.txt")


def test_get_tokenizer_unknown_type_raises(tokenizer):
    """Only registered tokenizer types can be created."""
    with pytest.raises(ModelLoadError):
        g2t.get_tokenizer(tokenizer.vocab, tokenizer.bpe_ranks, "wordpiece")
    assert g2t.list_tokenizers() == ["gpt2"]
