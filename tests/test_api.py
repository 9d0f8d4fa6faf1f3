"""Tests for the query API."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from server.api_server import create_app
from server.routers.GraphRouter import _parse_min_similarity
from services.chunk_graph.SimilarityCalculator import SimilarityCalculator
from shared.errors import StoreError
from shared.models.chunk import TextChunk
from shared.store.ChunkStore import ChunkStore


@pytest.fixture
def populated_store_path(helper_config, tmp_path):
    """Store with three chunks and their three similarity records."""
    path = tmp_path / "graph_embeddings.db"
    chunks = [
        TextChunk(text="alpha", chunk_index=0, embedding=[1.0, 0.0], summary="first"),
        TextChunk(text="beta", chunk_index=1, embedding=[0.0, 1.0], summary="second"),
        TextChunk(text="gamma", chunk_index=2, embedding=[1.0, 1.0], summary="third"),
    ]

    async def populate() -> None:
        store = ChunkStore(helper_config=helper_config, path=path)
        await store.boot()
        try:
            stored = await store.do_insert_chunks(chunks)
            similarities = SimilarityCalculator(helper_config).calculate_all_similarities(stored)
            await store.do_insert_similarities(similarities)
        finally:
            await store.close()

    asyncio.run(populate())
    return path


@pytest.fixture
def client(populated_store_path):
    with TestClient(create_app(str(populated_store_path))) as test_client:
        yield test_client


class TestChunksEndpoint:
    def test_returns_chunks_in_order(self, client):
        response = client.get("/api/chunks")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert "error" not in body
        assert [c["text"] for c in body["data"]] == ["alpha", "beta", "gamma"]
        assert [c["chunk_index"] for c in body["data"]] == [0, 1, 2]
        assert body["data"][2]["embedding"] == [1.0, 1.0]
        assert body["data"][0]["summary"] == "first"


class TestSimilaritiesEndpoint:
    def test_sorted_by_similarity_desc(self, client):
        response = client.get("/api/similarities")

        body = response.json()
        assert body["success"] is True
        values = [s["similarity"] for s in body["data"]]
        assert len(values) == 3
        assert values == sorted(values, reverse=True)
        assert values[-1] == pytest.approx(0.0)


class TestGraphEndpoint:
    def test_threshold_zero_includes_all_links(self, client):
        response = client.get("/api/graph", params={"min_similarity": "0"})

        data = response.json()["data"]
        assert len(data["nodes"]) == 3
        assert len(data["links"]) == 3
        assert {node["index"] for node in data["nodes"]} == {0, 1, 2}
        assert set(data["links"][0]) == {"source", "target", "distance", "similarity"}

    def test_threshold_above_one_has_no_links(self, client):
        response = client.get("/api/graph", params={"min_similarity": "1.01"})

        data = response.json()["data"]
        assert len(data["nodes"]) == 3
        assert data["links"] == []

    def test_threshold_filters_links(self, client):
        response = client.get("/api/graph", params={"min_similarity": "0.5"})

        links = response.json()["data"]["links"]
        assert len(links) == 2
        assert all(link["similarity"] >= 0.5 for link in links)

    def test_default_and_unparsable_threshold(self, client):
        default = client.get("/api/graph").json()["data"]
        garbage = client.get("/api/graph", params={"min_similarity": "abc"}).json()["data"]

        assert len(default["links"]) == 3
        assert garbage == default

    def test_store_error_returns_envelope(self, client):
        failing = MagicMock()
        failing.do_build_graph = AsyncMock(side_effect=StoreError("database is locked"))
        client.app.state.graph_query_service = failing

        response = client.get("/api/graph")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert "database is locked" in body["error"]
        assert "data" not in body

    def test_cors_headers(self, client):
        response = client.get("/api/chunks", headers={"Origin": "http://localhost:3000"})

        assert "access-control-allow-origin" in response.headers


@pytest.mark.parametrize(
    "raw, expected",
    [(None, 0.0), ("", 0.0), ("0.75", 0.75), ("-1", -1.0), ("abc", 0.0), ("nan", 0.0), ("inf", 0.0)],
)
def test_parse_min_similarity(raw, expected):
    assert _parse_min_similarity(raw) == expected
