"""Pydantic models for text chunks and their pairwise similarities."""

from pydantic import BaseModel, Field, model_validator


class TextChunk(BaseModel):
    """One paragraph-sized unit of source text.

    Attributes:
        id:          Assigned by the store on insertion; None before persistence.
        text:        Non-empty paragraph content.
        chunk_index: Zero-based position in the source document. Used for
                     ordering and for result-slot addressing in batch runs.
        embedding:   Dense vector, empty until the model client fills it.
        summary:     Short (1-10 word) topic, empty until the model client fills it.
    """

    id: int | None = None
    text: str = Field(min_length=1)
    chunk_index: int
    embedding: list[float] = []
    summary: str = ""


class ChunkSimilarity(BaseModel):
    """Distance and cosine similarity between two persisted chunks.

    chunk_id_1 always refers to the chunk that came first in the compared
    sequence, so each unordered pair is represented once.
    """

    id: int | None = None
    chunk_id_1: int
    chunk_id_2: int
    distance: float = Field(ge=0)
    similarity: float

    @model_validator(mode="after")
    def _check_distinct_chunks(self) -> "ChunkSimilarity":
        if self.chunk_id_1 == self.chunk_id_2:
            raise ValueError(f"similarity must reference two distinct chunks, got {self.chunk_id_1} twice")
        return self
