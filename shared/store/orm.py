"""
SQLAlchemy tables of the chunk store.

text_chunks holds one row per paragraph with its JSON encoded embedding,
chunk_similarities one row per unordered chunk pair.
"""

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class TextChunkRecord(Base):
    __tablename__ = "text_chunks"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    embedding: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.current_timestamp())


class ChunkSimilarityRecord(Base):
    __tablename__ = "chunk_similarities"
    __table_args__ = (
        UniqueConstraint("chunk_id_1", "chunk_id_2"),
        Index("idx_similarities_chunk1", "chunk_id_1"),
        Index("idx_similarities_chunk2", "chunk_id_2"),
        Index("idx_similarities_distance", "distance"),
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    chunk_id_1: Mapped[int] = mapped_column(Integer, ForeignKey("text_chunks.id"), nullable=False)
    chunk_id_2: Mapped[int] = mapped_column(Integer, ForeignKey("text_chunks.id"), nullable=False)
    distance: Mapped[float] = mapped_column(Float, nullable=False)
    similarity: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.current_timestamp())
