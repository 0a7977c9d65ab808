"""
Core types for tokenization.
"""

type TokenId = int
type OffsetSize = int
type BytePair = tuple[str, str]
type MergeRanks = dict[BytePair, int]
type BpeOutput = tuple[list[str], list[int]]
