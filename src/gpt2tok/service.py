"""
Upload-and-initialize lifecycle around a single GPT2 tokenizer.

Vocabulary and merges arrive as byte chunks through one shared staging
buffer. Each file is staged in turn, then ``initialize`` builds the
tokenizer that ``tokenize_text`` serves.
"""

import logging
import threading
from enum import Enum

from ._decorators import measure_time
from ._models.gpt2 import Gpt2Tokenizer
from ._sanitise import render_tokens
from ._settings import _default_max_len
from .errors import Gpt2TokError
from .merges import MergeTable
from .strategy import TruncationMode
from .types import TokenId
from .vocab import Gpt2Vocab

log = logging.getLogger(__name__)


class StagingBuffer:
    """Growable byte buffer accumulating uploaded chunks."""

    def __init__(self) -> None:
        self._data = bytearray()

    def append(self, chunk: bytes) -> None:
        self._data.extend(chunk)

    def clear(self) -> None:
        self._data.clear()

    def take(self) -> bytes:
        """Return the buffered bytes and leave the buffer empty."""
        data = bytes(self._data)
        self._data.clear()
        return data

    def __len__(self) -> int:
        return len(self._data)


class ServiceState(str, Enum):
    UNINITIALIZED = "uninitialized"
    STAGED = "staged"
    READY = "ready"


class TokenizerService:
    """
    Owns the upload buffer, the staged sources and the committed tokenizer.

    Failures while staging or initializing are reported as status strings
    rather than raised. A failed ``initialize`` keeps any previously
    committed tokenizer.
    """

    def __init__(self, max_len: int | None = None) -> None:
        """
        :param max_len: Maximum encoded length for ``tokenize_text``; defaults
                        to ``GPT2TOK_MAX_LEN`` or 128.
        """
        self.max_len = max_len if max_len is not None else _default_max_len()
        self.upload = StagingBuffer()
        self._vocab_text: str | None = None
        self._merges_text: str | None = None
        self._tokenizer: Gpt2Tokenizer | None = None
        self._lock = threading.Lock()

    @property
    def state(self) -> ServiceState:
        if self._tokenizer is not None:
            return ServiceState.READY
        if self._vocab_text is not None or self._merges_text is not None:
            return ServiceState.STAGED
        return ServiceState.UNINITIALIZED

    @property
    def tokenizer(self) -> Gpt2Tokenizer | None:
        return self._tokenizer

    def upload_chunk(self, chunk: bytes) -> None:
        with self._lock:
            self.upload.append(chunk)

    def clear_upload(self) -> None:
        with self._lock:
            self.upload.clear()

    def upload_length(self) -> int:
        return len(self.upload)

    def _take_upload_text(self) -> str:
        with self._lock:
            return self.upload.take().decode("utf-8")

    def bytes_to_vocab(self) -> str:
        """Stage the uploaded bytes as vocabulary text."""
        try:
            self._vocab_text = self._take_upload_text()
        except UnicodeDecodeError as e:
            log.warning(f"staged vocab is not valid utf-8: {e}")
            return f"Failed to load vocab.json: {e}"
        return "vocab.json loaded successfully."

    def bytes_to_merges(self) -> str:
        """Stage the uploaded bytes as merges text."""
        try:
            self._merges_text = self._take_upload_text()
        except UnicodeDecodeError as e:
            log.warning(f"staged merges are not valid utf-8: {e}")
            return f"Failed to load merges.txt: {e}"
        return "merges.txt loaded successfully."

    @measure_time
    def initialize(self) -> str:
        """Consume the staged sources and commit a new tokenizer."""
        vocab_text, self._vocab_text = self._vocab_text, None
        if vocab_text is None:
            return "Vocab string not found."
        merges_text, self._merges_text = self._merges_text, None
        if merges_text is None:
            return "Merges string not found."

        try:
            vocab = Gpt2Vocab.from_text(vocab_text)
        except Gpt2TokError as e:
            log.warning(f"vocab parsing failed: {e}")
            return "Failed to load vocab from cache."
        try:
            merges = MergeTable.from_text(merges_text)
        except Gpt2TokError as e:
            log.warning(f"merges parsing failed: {e}")
            return "Failed to load merges from cache."

        self._tokenizer = Gpt2Tokenizer(vocab, merges, lower_case=False)
        log.info(f"tokenizer initialized with {len(vocab)} tokens")
        return "Tokenizer initialized successfully."

    def tokenize_text(self, text: str) -> tuple[list[TokenId], list[str]]:
        """
        Encode ``text`` and return its ids with display strings.

        Returns two empty lists until a tokenizer is committed.
        """
        tokenizer = self._tokenizer
        if tokenizer is None:
            return [], []
        encoded = tokenizer.encode(
            text, None, self.max_len, TruncationMode.LONGEST_FIRST, 0
        )
        tokens = tokenizer.decode_to_vec(encoded.token_ids, skip_special_tokens=True)
        return encoded.token_ids, render_tokens(tokens)


__all__ = ["StagingBuffer", "ServiceState", "TokenizerService"]
