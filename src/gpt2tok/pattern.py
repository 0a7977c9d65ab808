from enum import Enum

import regex as re

from .errors import PatternError


class TokenPattern(str, Enum):
    """
    Regex patterns used to segment text before BPE.

    Sources:
    - GPT2: https://github.com/openai/gpt-2/blob/master/src/encoder.py

    The tokenization pattern drops GPT2's ``\\s+(?!\\S)`` alternative: the
    lookahead pattern first cuts segments right before the last whitespace
    preceding a word, which keeps that space attached to the following word.
    """

    GPT2 = (
        r"'s|'t|'re|'ve|'m|'ll|'d|"
        r" ?\p{L}+|"
        r" ?\p{N}+|"
        r" ?[^\s\p{L}\p{N}]+|"
        r"\s+"
    )

    LOOKAHEAD = r"\s+\S"

    @classmethod
    def get(cls, name: str) -> str:
        """Get patterns by name (case-insensitive)."""
        try:
            return cls[name.upper().replace("-", "_")].value
        except KeyError:
            raise PatternError(
                f"Unknown pattern: {name!r}. "
                f"Valid patterns: {', '.join(pat.name for pat in cls)}"
            )


def compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile and validate a regex pattern.

    :param pattern: Regex pattern string to compile.
    :return: Compiled regex pattern.
    :raises PatternError: If pattern is invalid.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError("invalid regex pattern", pattern=pattern, regex_err=e)


def list_patterns() -> list[str]:
    """Return names of all available built-in patterns."""
    return [pat.name for pat in TokenPattern]


__all__ = ["TokenPattern", "compile_pattern", "list_patterns"]
