"""Ranked byte-pair merge table used by the BPE merge engine."""

import logging
from pathlib import Path
from typing import Self

from ._decorators import measure_time
from .errors import ModelLoadError, VocabularyParsingError
from .types import BytePair, MergeRanks

log = logging.getLogger(__name__)


class MergeTable:
    """
    BPE merge priorities: an ordered pair of symbols mapped to its rank.

    Lower ranks merge first. Ranks follow the line order of the source file,
    whose first line is a header and is skipped.
    """

    def __init__(self, values: MergeRanks) -> None:
        self.values = values

    @classmethod
    @measure_time
    def from_text(cls, text: str) -> Self:
        """
        Parse merges from ``merges.txt`` content.

        Each line after the header holds ``"pieceA pieceB"``. Lines that do
        not split into at least two parts are ignored and do not consume a rank.

        :param text: Merge table source text.
        :return: Parsed merge table.
        """
        values: MergeRanks = {}
        rank = 0
        for line in text.splitlines()[1:]:
            parts = line.strip().split(" ")
            if len(parts) > 1:
                values[(parts[0], parts[1])] = rank
                rank += 1

        log.debug(f"loaded {len(values)} merge rules")
        return cls(values)

    @classmethod
    def from_file(cls, path: str | Path) -> Self:
        """Read a merges file from disk and parse it with ``from_text``."""
        path = Path(path)
        if not path.exists():
            raise ModelLoadError("merges filepath does not exist", model_path=str(path))
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise VocabularyParsingError(
                "merges file is not valid utf-8", reason=str(e)
            ) from e
        return cls.from_text(text)

    def rank(self, byte_1: str, byte_2: str) -> int | None:
        """Return the rank of the pair, or ``None`` if it may not be merged."""
        return self.values.get((byte_1, byte_2))

    def __contains__(self, pair: BytePair) -> bool:
        return pair in self.values

    def __len__(self) -> int:
        return len(self.values)


__all__ = ["MergeTable"]
