"""Column-block grid over a reference matrix."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from sigsearch.utils.errors import ConfigurationError


@dataclass(frozen=True)
class ColumnBlock:
    index: int
    start: int
    stop: int

    @property
    def width(self) -> int:
        return self.stop - self.start


def validate_chunk_size(chunk_size: int) -> int:
    if not isinstance(chunk_size, int) or isinstance(chunk_size, bool) or chunk_size <= 0:
        raise ConfigurationError(f"chunk_size must be a positive integer, got {chunk_size!r}")
    return chunk_size


def column_blocks(n_columns: int, chunk_size: int) -> List[ColumnBlock]:
    """Split ``n_columns`` into contiguous blocks of width ``min(chunk_size, n_columns)``.

    Blocks cover every column exactly once; only the last one may be narrower.
    """
    validate_chunk_size(chunk_size)
    if n_columns <= 0:
        return []
    width = min(chunk_size, n_columns)
    return [
        ColumnBlock(index=i, start=start, stop=min(start + width, n_columns))
        for i, start in enumerate(range(0, n_columns, width))
    ]


__all__ = ["ColumnBlock", "column_blocks", "validate_chunk_size"]
