import os
from typing import Final

DEFAULT_MAX_LEN: Final[int] = 128

_cache_enabled: bool = True


def enable_cache() -> None:
    """Enable the BPE merge cache for all gpt2tok tokenizers."""
    global _cache_enabled
    _cache_enabled = True


def disable_cache() -> None:
    """Disable the BPE merge cache for all gpt2tok tokenizers."""
    global _cache_enabled
    _cache_enabled = False


def _is_cache_enabled() -> bool:
    """Check if caching is enabled (respects env var override)."""
    if os.environ.get("GPT2TOK_DISABLE_CACHE", "").strip() == "1":
        return False
    return _cache_enabled


def _default_max_len() -> int:
    """Return the service max length, honouring ``GPT2TOK_MAX_LEN`` when it is a positive int."""
    raw = os.environ.get("GPT2TOK_MAX_LEN", "").strip()
    if raw.isdigit() and int(raw) > 0:
        return int(raw)
    return DEFAULT_MAX_LEN
