from __future__ import annotations

from lingualeap.contracts import Sentence
from lingualeap.study.chunks import MAX_CHUNK_SIZE, ChunkManager, clamp_chunk_size


def _sentences(n: int) -> list[Sentence]:
    return [Sentence(i, f"s{i}", f"t{i}") for i in range(n)]


def test_pages_25_sentences_into_3_chunks() -> None:
    mgr = ChunkManager(10)
    mgr.set_sentences(_sentences(25))
    assert mgr.num_chunks == 3
    mgr.select(2)
    chunk = mgr.current_chunk()
    assert len(chunk) == 5
    assert [s.id for s in chunk] == [20, 21, 22, 23, 24]


def test_shrinking_sentence_list_clamps_selection_to_first_chunk() -> None:
    mgr = ChunkManager(10)
    mgr.set_sentences(_sentences(25))
    mgr.select(2)
    mgr.set_sentences(_sentences(5))
    assert mgr.num_chunks == 1
    assert mgr.selected == 0
    assert len(mgr.current_chunk()) == 5


def test_shrinking_chunk_count_clamps_selection() -> None:
    mgr = ChunkManager(5)
    mgr.set_sentences(_sentences(25))
    mgr.select(4)
    assert mgr.selected == 4
    mgr.set_chunk_size(10)
    assert mgr.num_chunks == 3
    assert mgr.selected == 2


def test_select_is_clamped_to_range() -> None:
    mgr = ChunkManager(10)
    mgr.set_sentences(_sentences(12))
    assert mgr.select(99) == 1
    assert mgr.select(-3) == 0


def test_chunk_size_is_clamped() -> None:
    assert clamp_chunk_size(0) == 1
    assert clamp_chunk_size(500) == MAX_CHUNK_SIZE
    mgr = ChunkManager(0)
    assert mgr.chunk_size == 1


def test_no_sentences_yields_no_chunks() -> None:
    mgr = ChunkManager(10)
    mgr.set_sentences([])
    assert mgr.num_chunks == 0
    assert mgr.select(3) == 0
    assert mgr.current_chunk() == []


def test_exact_multiple_has_no_trailing_empty_chunk() -> None:
    mgr = ChunkManager(10)
    mgr.set_sentences(_sentences(20))
    assert mgr.num_chunks == 2
    mgr.select(1)
    assert len(mgr.current_chunk()) == 10
