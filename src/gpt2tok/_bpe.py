"""
Core Byte Pair Encoding (BPE) operations.

Pre-tokens are projected to a printable byte-level alphabet, merged by rank
and mapped back onto the original character offsets.
"""

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Final

from ._settings import _is_cache_enabled
from .merges import MergeTable
from .tokens import Mask, Offset, Token, TokenRef
from .types import BpeOutput, BytePair, OffsetSize

log = logging.getLogger(__name__)

type BpeFunction = Callable[[str, MergeTable], BpeOutput]


def bytes_to_unicode() -> dict[int, str]:
    """
    Map every byte to a printable unicode character.

    Bytes that render fine keep their own code point; the remaining 68 are
    shifted to ``256 + n`` so that, for example, the space byte becomes ``Ġ``.
    """
    bs = (
        list(range(ord("!"), ord("~") + 1))
        + list(range(ord("¡"), ord("¬") + 1))
        + list(range(ord("®"), ord("ÿ") + 1))
    )
    cs = bs[:]
    n = 0
    for b in range(256):
        if b not in bs:
            bs.append(b)
            cs.append(256 + n)
            n += 1
    return dict(zip(bs, (chr(c) for c in cs)))


BYTES_TO_UNICODE: Final[dict[int, str]] = bytes_to_unicode()
UNICODE_TO_BYTES: Final[dict[str, int]] = {v: k for k, v in BYTES_TO_UNICODE.items()}


def bytes_offsets(text: str) -> list[int]:
    """Return, for every UTF-8 byte of ``text``, the index of its character."""
    offsets: list[int] = []
    for char_idx, character in enumerate(text):
        offsets.extend([char_idx] * len(character.encode("utf-8")))
    return offsets


def get_pairs(symbols: list[str]) -> set[BytePair] | None:
    """Return all adjacent symbol pairs, or ``None`` for fewer than two symbols."""
    if len(symbols) < 2:
        return None
    return set(zip(symbols, symbols[1:]))


def group_common_pairs(
    symbols: list[str], bpe_ranks: MergeTable
) -> tuple[list[str], bool]:
    """
    Run one merge round.

    Finds the adjacent pair with the lowest rank and replaces every
    non-overlapping occurrence, scanning left to right.

    :return: The new symbol list and whether merging is finished.
    """
    pairs = get_pairs(symbols)
    if pairs is None:
        return symbols, True

    bigram = min(pairs, key=lambda pair: _rank_or_inf(bpe_ranks, pair))
    if bigram not in bpe_ranks:
        return symbols, True

    first, second = bigram
    merged: list[str] = []
    i = 0
    while i < len(symbols):
        if i < len(symbols) - 1 and symbols[i] == first and symbols[i + 1] == second:
            merged.append(first + second)
            i += 2
        else:
            merged.append(symbols[i])
            i += 1

    return merged, len(merged) == 1


def _rank_or_inf(bpe_ranks: MergeTable, pair: BytePair) -> float:
    rank = bpe_ranks.rank(*pair)
    return float("inf") if rank is None else rank


def bpe(token: str, bpe_ranks: MergeTable) -> BpeOutput:
    """
    Default BPE function, as used by GPT2.

    Starts from one symbol per character and merges until no eligible pair
    remains or a single symbol is left.

    :return: Merged pieces and the character count of each piece.
    """
    symbols = list(token)
    done = False
    while not done:
        symbols, done = group_common_pairs(symbols, bpe_ranks)
    return symbols, [len(symbol) for symbol in symbols]


class TryRWLock:
    """
    Reader/writer lock that only supports non-blocking acquisition.

    Any number of readers may hold the lock at once; a writer needs exclusive
    access. Failing to acquire returns ``False`` immediately.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._readers = 0
        self._writer = False

    def try_acquire_read(self) -> bool:
        if not self._guard.acquire(blocking=False):
            return False
        try:
            if self._writer:
                return False
            self._readers += 1
            return True
        finally:
            self._guard.release()

    def release_read(self) -> None:
        with self._guard:
            self._readers -= 1

    def try_acquire_write(self) -> bool:
        if not self._guard.acquire(blocking=False):
            return False
        try:
            if self._writer or self._readers:
                return False
            self._writer = True
            return True
        finally:
            self._guard.release()

    def release_write(self) -> None:
        with self._guard:
            self._writer = False

    @contextmanager
    def try_read(self) -> Iterator[bool]:
        """Yield whether the read lock was taken; release it on exit if so."""
        acquired = self.try_acquire_read()
        try:
            yield acquired
        finally:
            if acquired:
                self.release_read()

    @contextmanager
    def try_write(self) -> Iterator[bool]:
        """Yield whether the write lock was taken; release it on exit if so."""
        acquired = self.try_acquire_write()
        try:
            yield acquired
        finally:
            if acquired:
                self.release_write()


class BpeCache:
    """
    Memoized BPE results keyed by the byte-level projected string.

    Entries are never evicted. Contention is treated as a miss and the caller
    recomputes, so lookups and inserts never wait on another thread.
    """

    def __init__(self) -> None:
        self._entries: dict[str, BpeOutput] = {}
        self._lock = TryRWLock()

    def get(self, key: str) -> BpeOutput | None:
        with self._lock.try_read() as acquired:
            if not acquired:
                log.debug("bpe cache read contended, recomputing")
                return None
            return self._entries.get(key)

    def put(self, key: str, value: BpeOutput) -> bool:
        """Store ``value``; return ``False`` when the write lock was contended."""
        with self._lock.try_write() as acquired:
            if not acquired:
                log.debug("bpe cache write contended, skipping insert")
                return False
            self._entries[key] = value
            return True

    def __len__(self) -> int:
        return len(self._entries)


def split_on_bpe_pairs(
    token: TokenRef,
    bpe_function: BpeFunction,
    bpe_ranks: MergeTable,
    cache: BpeCache,
    as_bytes: bool = True,
) -> list[Token]:
    """
    Merge a pre-token and map the pieces back onto original offsets.

    With ``as_bytes`` every UTF-8 byte is projected through
    ``BYTES_TO_UNICODE`` and offsets are expanded so each projected symbol
    still points to its originating character.

    The first piece of a multi-piece result is masked ``BEGIN``, later ones
    ``CONTINUATION``; a single piece keeps ``NONE``.
    """
    if as_bytes:
        reference_offsets: list[OffsetSize] = [
            token.reference_offsets[pos] for pos in bytes_offsets(token.text)
        ]
        text = "".join(BYTES_TO_UNICODE[b] for b in token.text.encode("utf-8"))
    else:
        reference_offsets = list(token.reference_offsets)
        text = token.text

    use_cache = _is_cache_enabled()
    output = cache.get(text) if use_cache else None
    if output is None:
        output = bpe_function(text, bpe_ranks)
        if use_cache:
            cache.put(text, output)

    pieces, char_counts = output
    tokens: list[Token] = []
    start = 0
    for idx, (piece, char_count) in enumerate(zip(pieces, char_counts)):
        if len(pieces) > 1:
            mask = Mask.BEGIN if idx == 0 else Mask.CONTINUATION
        else:
            mask = Mask.NONE
        piece_offsets = reference_offsets[start : start + char_count]
        tokens.append(
            Token(
                text=piece,
                offset=Offset(piece_offsets[0], piece_offsets[-1] + 1),
                reference_offsets=piece_offsets,
                mask=mask,
            )
        )
        start += char_count
    return tokens


__all__ = [
    "BYTES_TO_UNICODE",
    "UNICODE_TO_BYTES",
    "BpeCache",
    "TryRWLock",
    "bpe",
    "bytes_offsets",
    "get_pairs",
    "group_common_pairs",
    "split_on_bpe_pairs",
]
