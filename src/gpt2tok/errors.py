"""Custom exception hierarchy for gpt2tok tokenization errors."""

import regex as re


class Gpt2TokError(Exception):
    """Base exception for all gpt2tok errors."""


class VocabularyParsingError(Gpt2TokError):
    """Raised when a vocabulary or merges source cannot be parsed."""

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        reason: str | None = None,
    ) -> None:
        """Initialize with optional line number and reason that get appended to the message."""
        extra = " "
        if line is not None:
            extra += f"(line: {line}) "
        if reason:
            extra += f"(reason: {reason}) "
        super().__init__(message + extra)
        self.line = line
        self.reason = reason


class TokenNotFoundError(Gpt2TokError):
    """Raised when a configured special token is missing from the vocabulary."""

    def __init__(self, message: str, *, token: str | None = None) -> None:
        if token is not None:
            message = f"{message} (token: {token!r})"
        super().__init__(message)
        self.token = token


class TruncationError(Gpt2TokError, ValueError):
    """Raised when a truncation strategy cannot satisfy the requested removal."""

    def __init__(
        self,
        message: str,
        *,
        num_tokens_to_remove: int | None = None,
        available: int | None = None,
    ) -> None:
        """
        Initialize TruncationError with removal details.

        :param message: Error message.
        :param num_tokens_to_remove: Number of tokens the strategy was asked to drop.
        :param available: Number of tokens the strategy could drop from.
        """
        extra = " "
        if num_tokens_to_remove is not None:
            extra += f"(to remove: {num_tokens_to_remove}) "
        if available is not None:
            extra += f"(available: {available}) "
        super().__init__(message + extra)
        self.num_tokens_to_remove = num_tokens_to_remove
        self.available = available


class ModelLoadError(Gpt2TokError):
    """Raised when loading vocabulary or merges files fails."""

    def __init__(self, message: str, *, model_path: str | None = None) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        super().__init__(message + extra)
        self.model_path = model_path


class PatternError(Gpt2TokError):
    """Raised when compiling and/or validating regex patterns."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        regex_err: re.error | None = None,
    ) -> None:
        """
        Initialize PatternError with pattern details.

        :param message: Error message.
        :param pattern: The regex pattern that failed.
        :param regex_err: The underlying regex error from the regex library.
        """
        extra = " "
        if pattern:
            extra += f"(pattern: {pattern!r}) "
        if regex_err:
            extra += f"(reason: {regex_err}) "
        super().__init__(message + extra)
        self.pattern = pattern
        self.regex_err = regex_err


class StrategyError(Gpt2TokError):
    """Raised when strategy or mode lookups fail."""

    def __init__(
        self,
        message: str,
        *,
        invalid_name: str | None = None,
        available_strats: list[str] | None = None,
    ) -> None:
        extra = " "
        if invalid_name:
            extra += f"(available: {available_strats}) (got {invalid_name}) "
        super().__init__(message + extra)
        self.invalid_name = invalid_name
        self.available_strats = available_strats
