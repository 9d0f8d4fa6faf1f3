"""End-to-end tests for the chunk graph pipeline over the fake model service."""

import logging
from unittest.mock import AsyncMock

import httpx
import pytest

from services.chunk_graph.ChunkGraphService import ChunkGraphService
from shared.errors import (
    BatchProcessingError,
    DimensionMismatchError,
    InputDocumentError,
    MissingModelsError,
    ModelServiceUnavailableError,
)

THREE_PARAGRAPHS = "The old man fished alone.\n\nThe sea was calm that day.\n\nA marlin took the bait.\n"


@pytest.fixture
def service(helper_config, booted_llm_client, store):
    return ChunkGraphService(helper_config=helper_config, llm_client=booted_llm_client, store=store)


class TestProcessText:
    async def test_three_paragraphs(self, service, store):
        result = await service.do_process_text(THREE_PARAGRAPHS, max_workers=2)

        assert result.chunk_count == 3
        assert result.similarity_count == 3
        assert result.store_path == str(store.get_path())

        chunks = await store.do_fetch_chunks()
        assert [c.text for c in chunks] == [
            "The old man fished alone.",
            "The sea was calm that day.",
            "A marlin took the bait.",
        ]
        assert all(c.summary == "a short topic" for c in chunks)
        assert all(len(c.embedding) == 8 for c in chunks)

        ids = [c.id for c in chunks]
        pairs = {(s.chunk_id_1, s.chunk_id_2) for s in await store.do_fetch_similarities()}
        assert pairs == {(ids[0], ids[1]), (ids[0], ids[2]), (ids[1], ids[2])}

    async def test_progress_per_stage(self, service):
        progress: list[tuple[str, int, int]] = []

        await service.do_process_text(THREE_PARAGRAPHS, on_progress=lambda *args: progress.append(args))

        assert [p for p in progress if p[0] == "embedding"] == [("embedding", i, 3) for i in (1, 2, 3)]
        assert [p for p in progress if p[0] == "summary"] == [("summary", i, 3) for i in (1, 2, 3)]
        assert progress[-1] == ("similarity", 3, 3)

    async def test_single_paragraph_has_no_similarities(self, service, store):
        result = await service.do_process_text("Only one paragraph here.")

        assert result.chunk_count == 1
        assert result.similarity_count == 0
        assert await store.do_fetch_similarities() == []

    async def test_process_file(self, service, tmp_path):
        path = tmp_path / "story.txt"
        path.write_text(THREE_PARAGRAPHS, encoding="utf-8")

        result = await service.do_process_file(path)

        assert result.chunk_count == 3


class TestFailures:
    async def test_unreachable_service_stops_before_chunk_work(self, helper_config, llm_client, store):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        await llm_client.boot(transport=httpx.MockTransport(refuse))
        try:
            service = ChunkGraphService(helper_config=helper_config, llm_client=llm_client, store=store)
            with pytest.raises(ModelServiceUnavailableError):
                await service.do_process_text(THREE_PARAGRAPHS)
        finally:
            await llm_client.close()

        assert await store.do_fetch_chunks() == []

    async def test_missing_models(self, service, booted_llm_client, store):
        booted_llm_client.do_fetch_models = AsyncMock(return_value=["llama3:latest"])

        with pytest.raises(MissingModelsError):
            await service.do_process_text(THREE_PARAGRAPHS)

        assert await store.do_fetch_chunks() == []

    async def test_batch_failure_persists_nothing(self, service, booted_llm_client, store):
        booted_llm_client.do_embed_text = AsyncMock(side_effect=RuntimeError("embedding backend down"))

        with pytest.raises(BatchProcessingError) as exc_info:
            await service.do_process_text(THREE_PARAGRAPHS)

        assert exc_info.value.failed_indices == [0, 1, 2]
        assert await store.do_fetch_chunks() == []

    async def test_dimension_mismatch_keeps_stored_chunks(self, service, booted_llm_client, store):
        """Chunks written before the similarity step stay in the store."""
        booted_llm_client.do_embed_text = AsyncMock(side_effect=[[1.0, 0.0], [0.0, 1.0], [1.0, 1.0, 1.0]])

        with pytest.raises(DimensionMismatchError):
            await service.do_process_text(THREE_PARAGRAPHS, max_workers=1)

        assert len(await store.do_fetch_chunks()) == 3
        assert await store.do_fetch_similarities() == []


class TestProgressLogging:
    async def test_one_info_line_per_chunk_and_stage(self, service, caplog):
        caplog.set_level(logging.INFO)

        await service.do_process_text(THREE_PARAGRAPHS, max_workers=2)

        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
        assert [m for m in messages if m.startswith("Generating embeddings:")] == [f"Generating embeddings: {i}/3" for i in (1, 2, 3)]
        assert [m for m in messages if m.startswith("Generating summaries:")] == [f"Generating summaries: {i}/3" for i in (1, 2, 3)]
        assert [m for m in messages if m.startswith("Calculating similarities:")] == ["Calculating similarities: 3/3"]

    async def test_undecodable_file(self, service, store, tmp_path):
        path = tmp_path / "binary.txt"
        path.write_bytes(b"\xff\xfe broken")

        with pytest.raises(InputDocumentError):
            await service.do_process_file(path)

        assert await store.do_fetch_chunks() == []
