"""Tests for the all-pairs similarity computation."""

import pytest

from services.chunk_graph.SimilarityCalculator import SimilarityCalculator
from shared.errors import DimensionMismatchError
from shared.models.chunk import TextChunk


def _chunk(chunk_id: int, embedding: list[float]) -> TextChunk:
    return TextChunk(id=chunk_id, text=f"text {chunk_id}", chunk_index=chunk_id - 1, embedding=embedding)


@pytest.fixture
def calculator(helper_config):
    return SimilarityCalculator(helper_config)


class TestCalculateAllSimilarities:
    @pytest.mark.parametrize("count", [0, 1, 2, 3, 10])
    def test_pair_count(self, calculator, count):
        chunks = [_chunk(i + 1, [float(i), 1.0]) for i in range(count)]

        similarities = calculator.calculate_all_similarities(chunks)

        assert len(similarities) == count * (count - 1) // 2

    def test_pairs_in_generation_order(self, calculator):
        chunks = [_chunk(10, [1.0, 0.0]), _chunk(20, [0.0, 1.0]), _chunk(30, [1.0, 1.0])]

        similarities = calculator.calculate_all_similarities(chunks)

        assert [(s.chunk_id_1, s.chunk_id_2) for s in similarities] == [(10, 20), (10, 30), (20, 30)]

    def test_each_unordered_pair_once(self, calculator):
        chunks = [_chunk(i + 1, [float(i), 2.0, -1.0]) for i in range(6)]

        similarities = calculator.calculate_all_similarities(chunks)
        pairs = {frozenset((s.chunk_id_1, s.chunk_id_2)) for s in similarities}

        assert len(pairs) == len(similarities)
        assert all(s.chunk_id_1 != s.chunk_id_2 for s in similarities)

    def test_metrics(self, calculator):
        chunks = [_chunk(1, [0.0, 3.0]), _chunk(2, [4.0, 0.0]), _chunk(3, [0.0, 6.0])]

        first, second, third = calculator.calculate_all_similarities(chunks)

        assert first.distance == pytest.approx(5.0)
        assert first.similarity == pytest.approx(0.0)
        assert second.distance == pytest.approx(3.0)
        assert second.similarity == pytest.approx(1.0)
        assert third.similarity == pytest.approx(0.0)

    def test_zero_vector(self, calculator):
        chunks = [_chunk(1, [0.0, 0.0]), _chunk(2, [1.0, 1.0])]

        (similarity,) = calculator.calculate_all_similarities(chunks)

        assert similarity.similarity == 0.0

    def test_dimension_mismatch_fails_without_result(self, calculator):
        chunks = [_chunk(1, [1.0, 0.0]), _chunk(2, [1.0, 0.0]), _chunk(3, [1.0, 0.0, 0.0])]

        with pytest.raises(DimensionMismatchError) as exc_info:
            calculator.calculate_all_similarities(chunks)

        message = str(exc_info.value)
        assert "pair (0, 2)" in message
        assert "chunk ids (1, 3)" in message
        assert "2 vs 3" in message

    def test_requires_persisted_chunks(self, calculator):
        chunks = [TextChunk(text="a", chunk_index=0, embedding=[1.0]), TextChunk(text="b", chunk_index=1, embedding=[1.0])]

        with pytest.raises(ValueError, match="no id"):
            calculator.calculate_all_similarities(chunks)
