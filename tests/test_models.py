"""Tests for the chunk and similarity models."""

import pytest
from pydantic import ValidationError

from shared.models.chunk import ChunkSimilarity, TextChunk


class TestTextChunk:
    def test_defaults(self):
        chunk = TextChunk(text="paragraph", chunk_index=0)

        assert chunk.id is None
        assert chunk.embedding == []
        assert chunk.summary == ""

    def test_empty_text_rejected(self):
        with pytest.raises(ValidationError):
            TextChunk(text="", chunk_index=0)


class TestChunkSimilarity:
    def test_valid_record(self):
        similarity = ChunkSimilarity(chunk_id_1=1, chunk_id_2=2, distance=0.0, similarity=-0.5)

        assert similarity.distance == 0.0
        assert similarity.similarity == -0.5

    def test_same_chunk_rejected(self):
        with pytest.raises(ValidationError, match="distinct chunks"):
            ChunkSimilarity(chunk_id_1=3, chunk_id_2=3, distance=0.0, similarity=1.0)

    def test_negative_distance_rejected(self):
        with pytest.raises(ValidationError):
            ChunkSimilarity(chunk_id_1=1, chunk_id_2=2, distance=-0.1, similarity=0.5)
