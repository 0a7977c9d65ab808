"""
Pre-tokenization: special-token splitting, lowercasing and regex segmentation.

All helpers keep ``reference_offsets`` aligned with the characters they emit.
"""

from collections.abc import Callable

import regex as re

from .tokens import Mask, Offset, Token, TokenRef
from .types import OffsetSize
from .vocab import Vocab

# (text, position) -> (matched length in chars, mask to set); zero length means no match
type SubstrTest = Callable[[str, int], tuple[int, Mask]]


def split_on_substr(
    token: TokenRef, test_substr: SubstrTest, add_separators: bool = True
) -> list[TokenRef]:
    """
    Split a token on substrings recognised by ``test_substr``.

    Text preceding a match is emitted with trailing whitespace trimmed, and
    dropped entirely when nothing remains. Matches are emitted as singleton
    tokens carrying the mask returned by ``test_substr`` when
    ``add_separators`` is set. Tokens that already carry a mask are returned
    as they are.
    """
    if token.mask != Mask.NONE:
        return [token]

    text = token.text
    base = token.offset.begin
    tokens: list[TokenRef] = []
    begin = 0
    i = 0
    while i < len(text):
        matched, set_mask = test_substr(text, i)
        if matched == 0:
            i += 1
            continue

        if begin < i:
            trimmed = text[begin:i].rstrip()
            if trimmed:
                end = begin + len(trimmed)
                tokens.append(
                    TokenRef(
                        text=trimmed,
                        offset=Offset(base + begin, base + end),
                        reference_offsets=token.reference_offsets[begin:end],
                        mask=Mask.NONE,
                    )
                )
        if add_separators:
            tokens.append(
                TokenRef(
                    text=text[i : i + matched],
                    offset=Offset(base + i, base + i + matched),
                    reference_offsets=token.reference_offsets[i : i + matched],
                    mask=set_mask,
                )
            )
        begin = i + matched
        i = begin

    # add last buffered token if there is anything left
    if begin < len(text):
        tokens.append(
            TokenRef(
                text=text[begin:],
                offset=Offset(base + begin, base + len(text)),
                reference_offsets=token.reference_offsets[begin:],
                mask=Mask.NONE,
            )
        )
    return tokens


def split_on_special_tokens(token: TokenRef, vocab: Vocab) -> list[TokenRef]:
    """
    Split a text on the special values of ``vocab`` (BOS/EOS/UNK markers...).

    Matches become atomic tokens masked ``SPECIAL``, or ``UNKNOWN`` for the
    vocabulary's unknown token. When several special values match at one
    position the longest wins.
    """
    specials = sorted(vocab.special_values, key=len, reverse=True)
    unknown = vocab.unknown_value

    def test_substr(text: str, position: int) -> tuple[int, Mask]:
        for special_value in specials:
            if special_value and text.startswith(special_value, position):
                mask = Mask.UNKNOWN if special_value == unknown else Mask.SPECIAL
                return len(special_value), mask
        return 0, Mask.NONE

    return split_on_substr(token, test_substr, add_separators=True)


def lowercase(token: Token) -> None:
    """Lowercase ``token`` in place, keeping one reference offset per output character."""
    lowered: list[str] = []
    mapping: list[OffsetSize] = []
    for character, position in zip(token.text, token.reference_offsets):
        # case mapping may expand a character, e.g. "İ" -> "i̇"
        for c in character.lower():
            lowered.append(c)
            mapping.append(position)
    token.text = "".join(lowered)
    token.reference_offsets = mapping
    token.offset = Offset(mapping[0] if mapping else 0, mapping[-1] + 1 if mapping else 0)


def split_on_regex_with_lookahead(
    token: TokenRef, pattern_lookahead: re.Pattern, pattern_tokenization: re.Pattern
) -> list[TokenRef]:
    """
    Segment a token with a lookahead pattern, then a tokenization pattern.

    The lookahead pattern (``\\s+\\S``) places a boundary right before the
    last whitespace character preceding a non-space character, so the space
    stays attached to the following word. The tokenization pattern then
    extracts pieces within each segment.
    """
    if token.mask != Mask.NONE:
        return [token]

    text = token.text
    segments: list[tuple[int, str]] = []
    i = 0
    for hit in pattern_lookahead.finditer(text):
        # step back over the non-space char and the whitespace before it
        end = hit.end() - 2
        segments.append((i, text[i:end]))
        i = end
    segments.append((i, text[i:]))

    base = token.offset.begin
    output: list[TokenRef] = []
    for segment_start, segment in segments:
        for hit in pattern_tokenization.finditer(segment):
            begin = segment_start + hit.start()
            end = segment_start + hit.end()
            output.append(
                TokenRef(
                    text=hit.group(0),
                    offset=Offset(base + begin, base + end),
                    reference_offsets=token.reference_offsets[begin:end],
                    mask=Mask.NONE,
                )
            )
    return output


def fix_mask(tokens: list[Token]) -> None:
    """Turn a ``NONE`` token followed by a ``CONTINUATION`` token into ``BEGIN``."""
    for i in range(1, len(tokens)):
        if tokens[i].mask == Mask.CONTINUATION and tokens[i - 1].mask == Mask.NONE:
            tokens[i - 1].mask = Mask.BEGIN


__all__ = [
    "split_on_substr",
    "split_on_special_tokens",
    "lowercase",
    "split_on_regex_with_lookahead",
    "fix_mask",
]
