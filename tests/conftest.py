"""Shared fixtures: helper config, model client over a fake Ollama, temporary stores."""

import logging

import httpx
import pytest

from shared.clients.llm.ollama.LLMClientOllama import LLMClientOllama
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger
from shared.models.config import ModelServiceConfig
from shared.store.ChunkStore import ChunkStore
from tests.fakes import fake_ollama_handler


@pytest.fixture
def helper_config():
    """HelperConfig over a plain test logger."""
    return HelperConfig(logger=ColorLogger(logging.getLogger("tests")))


@pytest.fixture
def model_config():
    return ModelServiceConfig(base_url="http://ollama.test", embed_workers=4, summary_workers=4)


@pytest.fixture
def llm_client(helper_config, model_config):
    """Ollama client that is constructed but not booted."""
    return LLMClientOllama(helper_config=helper_config, model_config=model_config)


@pytest.fixture
async def booted_llm_client(llm_client):
    """Ollama client booted against the fake Ollama transport."""
    await llm_client.boot(transport=httpx.MockTransport(fake_ollama_handler))
    yield llm_client
    await llm_client.close()


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "doc_embeddings.db"


@pytest.fixture
async def store(helper_config, store_path):
    """Freshly created store in a temporary directory."""
    chunk_store = ChunkStore(helper_config=helper_config, path=store_path)
    await chunk_store.boot()
    yield chunk_store
    await chunk_store.close()
