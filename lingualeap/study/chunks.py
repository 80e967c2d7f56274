from __future__ import annotations

import math
from typing import List, Sequence

from lingualeap.contracts import Sentence

MIN_CHUNK_SIZE = 1
MAX_CHUNK_SIZE = 100
DEFAULT_CHUNK_SIZE = 10


def clamp_chunk_size(size: int) -> int:
    return max(MIN_CHUNK_SIZE, min(MAX_CHUNK_SIZE, int(size)))


class ChunkManager:
    """Pages the full sentence list into chunks of chunk_size."""

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._sentences: Sequence[Sentence] = ()
        self.chunk_size = clamp_chunk_size(chunk_size)
        self.selected = 0
        self.num_chunks = 0

    @property
    def total(self) -> int:
        return len(self._sentences)

    def set_sentences(self, sentences: Sequence[Sentence]) -> None:
        self._sentences = sentences
        self._recompute()

    def set_chunk_size(self, size: int) -> None:
        self.chunk_size = clamp_chunk_size(size)
        self._recompute()

    def select(self, chunk_num: int) -> int:
        upper = self.num_chunks - 1 if self.num_chunks > 0 else 0
        self.selected = max(0, min(upper, int(chunk_num)))
        return self.selected

    def current_chunk(self) -> List[Sentence]:
        start = self.selected * self.chunk_size
        end = min(start + self.chunk_size, self.total)
        return list(self._sentences[start:end])

    def _recompute(self) -> None:
        self.num_chunks = math.ceil(self.total / self.chunk_size) if self.total else 0
        if self.num_chunks == 0:
            self.selected = 0
        elif self.selected >= self.num_chunks:
            self.selected = self.num_chunks - 1
