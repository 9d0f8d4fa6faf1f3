"""SQLite backed store for chunks and their pairwise similarities."""

import json
import os
from pathlib import Path

from sqlalchemy import event, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from shared.errors import StoreError
from shared.helper.HelperConfig import HelperConfig
from shared.models.chunk import ChunkSimilarity, TextChunk
from shared.store.orm import Base, ChunkSimilarityRecord, TextChunkRecord


def build_store_path(input_file: str | Path, output_dir: str | Path) -> Path:
    """Return "<output_dir>/<input basename>_embeddings.db", creating output_dir if needed.

    Raises:
        StoreError: If the output directory cannot be created.
    """
    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as exc:
        raise StoreError(f"failed to create output directory {output_dir}: {exc}") from exc
    return Path(output_dir) / f"{Path(input_file).stem}_embeddings.db"


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class ChunkStore:
    """Async access to one SQLite store file.

    Writes are only issued from a single task at a time; the pipeline calls
    the store after each concurrent stage has finished.
    """

    def __init__(self, helper_config: HelperConfig, path: str | Path, create_tables: bool = True) -> None:
        self.logging = helper_config.get_logger()
        self._path = Path(path)
        self._create_tables = create_tables
        self._engine: AsyncEngine | None = None
        self._sessions: async_sessionmaker[AsyncSession] | None = None

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        """Open the database and, for a new store, create the tables and indexes.

        Raises:
            StoreError: If an existing store is required but missing, or setup fails.
        """
        if not self._create_tables and not self._path.is_file():
            raise StoreError(f"store file does not exist: {self._path}")

        self._engine = create_async_engine(f"sqlite+aiosqlite:///{self._path.resolve()}")
        event.listen(self._engine.sync_engine, "connect", _enable_foreign_keys)
        self._sessions = async_sessionmaker(self._engine, expire_on_commit=False)

        if self._create_tables:
            try:
                async with self._engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            except SQLAlchemyError as exc:
                raise StoreError(f"failed to set up database tables in {self._path}: {exc}") from exc
        self.logging.debug("Opened chunk store %s", self._path)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessions = None

    def get_path(self) -> Path:
        return self._path

    def _session(self) -> AsyncSession:
        if self._sessions is None:
            raise RuntimeError("Chunk store not initialised. Call boot() before using it.")
        return self._sessions()

    ##########################################
    ################ CHUNKS ##################
    ##########################################

    async def do_insert_chunk(self, chunk: TextChunk) -> TextChunk:
        """Persist one chunk.

        Returns:
            TextChunk: A copy of the chunk carrying the assigned id.
        """
        stored = await self.do_insert_chunks([chunk])
        return stored[0]

    async def do_insert_chunks(self, chunks: list[TextChunk]) -> list[TextChunk]:
        """Persist chunks in chunk_index order inside one transaction.

        Ids are therefore assigned in chunk_index order.

        Returns:
            list[TextChunk]: Copies of the chunks carrying their ids, in chunk_index order.

        Raises:
            StoreError: If the insert fails. Nothing is persisted in that case.
        """
        ordered = sorted(chunks, key=lambda c: c.chunk_index)
        stored: list[TextChunk] = []
        try:
            async with self._session() as session, session.begin():
                for chunk in ordered:
                    record = TextChunkRecord(
                        text=chunk.text,
                        chunk_index=chunk.chunk_index,
                        embedding=json.dumps(chunk.embedding),
                        summary=chunk.summary,
                    )
                    session.add(record)
                    await session.flush()
                    stored.append(chunk.model_copy(update={"id": record.id}))
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to insert chunks: {exc}") from exc
        return stored

    async def do_fetch_chunks(self) -> list[TextChunk]:
        """Return all chunks ordered by chunk_index, embeddings decoded.

        Raises:
            StoreError: If the query fails or an embedding cannot be decoded.
        """
        try:
            async with self._session() as session:
                rows = (await session.scalars(select(TextChunkRecord).order_by(TextChunkRecord.chunk_index))).all()
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to query chunks: {exc}") from exc

        chunks: list[TextChunk] = []
        for row in rows:
            try:
                embedding = json.loads(row.embedding)
            except ValueError as exc:
                raise StoreError(f"failed to decode embedding for chunk {row.id}: {exc}") from exc
            chunks.append(
                TextChunk(
                    id=row.id,
                    text=row.text,
                    chunk_index=row.chunk_index,
                    embedding=embedding,
                    summary=row.summary or "",
                )
            )
        return chunks

    ##########################################
    ############## SIMILARITIES ##############
    ##########################################

    async def do_insert_similarity(self, similarity: ChunkSimilarity) -> None:
        await self.do_insert_similarities([similarity])

    async def do_insert_similarities(self, similarities: list[ChunkSimilarity]) -> None:
        """Persist a batch of similarity records atomically (all or nothing).

        Raises:
            StoreError: If any row violates a constraint or the commit fails.
                The whole batch is rolled back.
        """
        if not similarities:
            return
        rows = [
            {
                "chunk_id_1": s.chunk_id_1,
                "chunk_id_2": s.chunk_id_2,
                "distance": s.distance,
                "similarity": s.similarity,
            }
            for s in similarities
        ]
        try:
            async with self._session() as session, session.begin():
                await session.execute(insert(ChunkSimilarityRecord), rows)
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to insert {len(rows)} similarities, batch rolled back: {exc}") from exc

    async def do_fetch_similarities(self, min_similarity: float | None = None) -> list[ChunkSimilarity]:
        """Return similarity records ordered by similarity descending.

        Args:
            min_similarity (float | None): Only return records with
                similarity >= min_similarity. None returns every record.

        Raises:
            StoreError: If the query fails.
        """
        stmt = select(ChunkSimilarityRecord).order_by(ChunkSimilarityRecord.similarity.desc())
        if min_similarity is not None:
            stmt = stmt.where(ChunkSimilarityRecord.similarity >= min_similarity)
        try:
            async with self._session() as session:
                rows = (await session.scalars(stmt)).all()
        except SQLAlchemyError as exc:
            raise StoreError(f"failed to query similarities: {exc}") from exc
        return [
            ChunkSimilarity(
                id=row.id,
                chunk_id_1=row.chunk_id_1,
                chunk_id_2=row.chunk_id_2,
                distance=row.distance,
                similarity=row.similarity,
            )
            for row in rows
        ]
