"""Tokenizer implementations."""

from .base import Tokenizer
from .gpt2 import Gpt2Tokenizer


__all__ = ["Tokenizer", "Gpt2Tokenizer"]
