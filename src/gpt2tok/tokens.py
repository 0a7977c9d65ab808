"""
Token primitives: offsets, masks, owned and borrowed tokens.

Offsets are expressed in unicode code points of the original input text.
Every token carries one reference offset per character of its ``text`` so
that offsets survive lowercasing and byte-level projection.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Self

from .types import OffsetSize


@dataclass(frozen=True, slots=True)
class Offset:
    """Half-open span ``[begin, end)`` of code points in the original text."""

    begin: OffsetSize
    end: OffsetSize

    def into_option(self) -> "Offset | None":
        """Return the offset when it spans at least one character, else ``None``."""
        if self.end > self.begin:
            return self
        return None


class Mask(str, Enum):
    """Type indication for tokens (special token, continuation, unknown...)."""

    # default, further processing may apply
    NONE = "none"
    WHITESPACE = "whitespace"
    PUNCTUATION = "punctuation"
    CJK = "cjk"
    # atomic marker such as bos/eos/pad
    SPECIAL = "special"
    # first sub-token of a run, followed by CONTINUATION tokens
    BEGIN = "begin"
    CONTINUATION = "continuation"
    # all but the last sub-token of a run (reverse of CONTINUATION)
    UNFINISHED = "unfinished"
    UNKNOWN = "unknown"


class TokenLike(Protocol):
    """Accessors shared by owned and borrowed tokens."""

    offset: Offset
    mask: Mask

    def as_str(self) -> str: ...


def _offset_from(reference_offsets: Sequence[OffsetSize]) -> Offset:
    if not reference_offsets:
        return Offset(0, 0)
    return Offset(reference_offsets[0], reference_offsets[-1] + 1)


@dataclass(frozen=True, slots=True)
class TokenRef:
    """
    Borrowed token: an immutable view over text and offsets owned elsewhere.

    ``reference_offsets`` is stored as given and never mutated through the
    reference; ``to_owned`` makes the copy.
    """

    text: str
    offset: Offset
    reference_offsets: Sequence[OffsetSize]
    mask: Mask = Mask.NONE

    @classmethod
    def new(cls, text: str, offsets: Sequence[OffsetSize]) -> Self:
        """Create a reference spanning ``offsets`` with a zero-based offset."""
        return cls(text, Offset(0, len(offsets)), offsets, Mask.NONE)

    def as_str(self) -> str:
        return self.text

    def valid_offset(self) -> Offset | None:
        return self.offset.into_option()

    def to_owned(self) -> "Token":
        """Copy into an owned, mutable ``Token``."""
        return Token(
            text=self.text,
            offset=self.offset,
            reference_offsets=list(self.reference_offsets),
            mask=self.mask,
        )


@dataclass(slots=True)
class Token:
    """Owned token that stores its own text and reference offsets."""

    text: str
    offset: Offset
    reference_offsets: list[OffsetSize] = field(default_factory=list)
    mask: Mask = Mask.NONE

    @classmethod
    def new(cls, text: str) -> Self:
        """Create a token whose offsets are ``0..len(text)``."""
        size = len(text)
        return cls(text, Offset(0, size), list(range(size)), Mask.NONE)

    @classmethod
    def from_offsets(
        cls, text: str, reference_offsets: list[OffsetSize], mask: Mask = Mask.NONE
    ) -> Self:
        """Create a token whose span is derived from ``reference_offsets``."""
        return cls(text, _offset_from(reference_offsets), reference_offsets, mask)

    def as_str(self) -> str:
        return self.text

    def valid_offset(self) -> Offset | None:
        return self.offset.into_option()

    def as_ref(self) -> TokenRef:
        """Borrow this token without copying its offsets."""
        return TokenRef(self.text, self.offset, self.reference_offsets, self.mask)


class ConsolidatedTokenIterator[T: TokenLike]:
    """
    Group sub-tokens that belong together (forming a word or similar).

    Yields maximal runs where every token after the first carries
    ``Mask.CONTINUATION``. Runs are slices of the backing sequence; the
    iterator is single pass and can be restarted by wrapping the sequence again.
    """

    def __init__(self, tokens: Sequence[T]) -> None:
        self.tokens = tokens
        self.begin = 0
        self.cursor = 0

    def __iter__(self) -> Self:
        return self

    def __next__(self) -> Sequence[T]:
        while True:
            if self.cursor < len(self.tokens):
                sub_token = self.tokens[self.cursor]
                if sub_token.mask != Mask.CONTINUATION and self.cursor > self.begin:
                    sub_tokens = self.tokens[self.begin : self.cursor]
                    self.begin = self.cursor
                    self.cursor += 1
                    return sub_tokens
                self.cursor += 1
            else:
                # past the last item, flush what is buffered
                if self.begin < self.cursor:
                    sub_tokens = self.tokens[self.begin : self.cursor]
                    self.begin = self.cursor
                    return sub_tokens
                raise StopIteration


def iter_consolidate_tokens[T: TokenLike](
    tokens: Sequence[T],
) -> Iterator[Sequence[T]]:
    """Iterate over ``tokens`` in consolidated (word-level) form."""
    return ConsolidatedTokenIterator(tokens)


__all__ = [
    "Offset",
    "Mask",
    "TokenLike",
    "TokenRef",
    "Token",
    "ConsolidatedTokenIterator",
    "iter_consolidate_tokens",
]
