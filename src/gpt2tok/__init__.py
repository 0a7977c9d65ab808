"""gpt2tok: GPT2 byte-level BPE tokenization with offsets and truncation."""

from ._models.base import Tokenizer
from ._models.gpt2 import Gpt2Tokenizer
from ._settings import DEFAULT_MAX_LEN, disable_cache, enable_cache
from .factory import (
    from_pretrained,
    get_tokenizer,
    list_tokenizers,
)
from .merges import MergeTable
from .outputs import (
    TokenIdsWithOffsets,
    TokenIdsWithSpecialTokens,
    TokenizedInput,
    TokensWithOffsets,
)
from .parallel import decode_batch, encode_batch, list_parallel_modes
from .pattern import TokenPattern, list_patterns
from .service import StagingBuffer, TokenizerService
from .strategy import (
    DoNotTruncateStrategy,
    LongestFirstStrategy,
    OnlyFirstStrategy,
    OnlySecondStrategy,
    TruncationMode,
    TruncationStrategy,
    get_strategy,
    list_strategies,
)
from .tokens import Mask, Offset, Token, TokenRef, iter_consolidate_tokens
from .vocab import BaseVocab, Gpt2Vocab, SpecialTokenMap, Vocab

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gpt2tok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "Gpt2Tokenizer",
    "Vocab",
    "BaseVocab",
    "Gpt2Vocab",
    "SpecialTokenMap",
    "MergeTable",
    "TokenPattern",
    "Mask",
    "Offset",
    "Token",
    "TokenRef",
    "TokensWithOffsets",
    "TokenIdsWithOffsets",
    "TokenIdsWithSpecialTokens",
    "TokenizedInput",
    "TruncationStrategy",
    "TruncationMode",
    "LongestFirstStrategy",
    "OnlyFirstStrategy",
    "OnlySecondStrategy",
    "DoNotTruncateStrategy",
    "StagingBuffer",
    "TokenizerService",
    "DEFAULT_MAX_LEN",
    "enable_cache",
    "disable_cache",
    "get_tokenizer",
    "get_strategy",
    "from_pretrained",
    "encode_batch",
    "decode_batch",
    "iter_consolidate_tokens",
    "list_tokenizers",
    "list_patterns",
    "list_parallel_modes",
    "list_strategies",
]
