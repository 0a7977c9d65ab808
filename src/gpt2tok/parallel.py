"""Parallel processing mode helpers for batch encoding and decoding."""

import logging
import os
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from math import ceil
from typing import TYPE_CHECKING, Literal

from .errors import StrategyError
from .outputs import TokenizedInput
from .types import TokenId

if TYPE_CHECKING:
    from ._models.base import Tokenizer
    from .strategy import StrategyName, TruncationMode, TruncationStrategy

log = logging.getLogger(__name__)

ParallelStrategy = Literal["auto", "batch", "off"]

# below this many texts threading overhead dominates
_MIN_PARALLEL_TEXTS = 64


class ParallelMode(str, Enum):
    """Named parallelization modes for batch encoding."""

    AUTO = "auto"
    BATCH = "batch"
    OFF = "off"

    @classmethod
    def get(cls, name: str) -> "ParallelMode":
        """Get parallel mode by name (case-insensitive)."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise StrategyError(
                "unknown mode",
                invalid_name=name,
                available_strats=[mode.value for mode in cls],
            )


def list_parallel_modes() -> list[str]:
    """Return available parallel mode names."""
    return [mode.value for mode in ParallelMode]


def _run_batched[T, R](
    func: Callable[[T], R],
    items: Sequence[T],
    num_workers: int | None,
    parallel_mode: ParallelMode,
) -> list[R]:
    """Apply ``func`` to every item, grouping items across a thread pool when worthwhile."""
    if num_workers is None:
        workers = os.cpu_count() or 1
    else:
        workers = max(1, num_workers)  # "0" interpreted as 1 worker

    serial = (
        parallel_mode is ParallelMode.OFF
        or workers == 1
        or len(items) <= 1
        or (parallel_mode is ParallelMode.AUTO and len(items) < _MIN_PARALLEL_TEXTS)
    )
    if serial:
        return [func(item) for item in items]

    # group items to reduce task-scheduling overhead
    target_tasks = min(len(items), workers * 2)
    group_size = max(1, ceil(len(items) / target_tasks))
    groups = [items[idx : idx + group_size] for idx in range(0, len(items), group_size)]
    log.debug(f"running {len(items)} items in {len(groups)} groups on {workers} workers")

    def run_group(group: Sequence[T]) -> list[R]:
        return [func(item) for item in group]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(run_group, groups))
    return [result for group in results for result in group]


def encode_batch(
    tokenizer: "Tokenizer",
    texts: Sequence[str],
    max_len: int = 128,
    truncation_strategy: "TruncationStrategy | TruncationMode | StrategyName" = (
        "longest-first"
    ),
    stride: int = 0,
    num_workers: int | None = None,
    parallel_mode: ParallelStrategy = "auto",
) -> list[TokenizedInput]:
    """Encode many texts, in input order, with optional thread parallelism."""
    return _run_batched(
        lambda text: tokenizer.encode(text, None, max_len, truncation_strategy, stride),
        texts,
        num_workers,
        ParallelMode.get(parallel_mode),
    )


def decode_batch(
    tokenizer: "Tokenizer",
    token_batch: Sequence[Sequence[TokenId]],
    skip_special_tokens: bool = False,
    clean_up_tokenization_spaces: bool = False,
    num_workers: int | None = None,
    parallel_mode: ParallelStrategy = "auto",
) -> list[str]:
    """Decode many id sequences, in input order, with optional thread parallelism."""
    return _run_batched(
        lambda ids: tokenizer.decode(
            ids, skip_special_tokens, clean_up_tokenization_spaces
        ),
        token_batch,
        num_workers,
        ParallelMode.get(parallel_mode),
    )


__all__ = [
    "ParallelStrategy",
    "ParallelMode",
    "list_parallel_modes",
    "encode_batch",
    "decode_batch",
]
