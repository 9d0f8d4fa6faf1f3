import asyncio
import os
from abc import abstractmethod
from typing import Awaitable, Callable, NamedTuple

import httpx

from shared.clients.ClientInterface import ClientInterface
from shared.errors import (
    BatchProcessingError,
    MissingModelsError,
    ModelServiceConnectionError,
    ModelServiceResponseError,
    ModelServiceStatusError,
    ModelServiceUnavailableError,
)
from shared.helper.HelperConfig import HelperConfig
from shared.helper.summary_cleaner import clean_summary
from shared.models.chunk import TextChunk
from shared.models.config import ModelServiceConfig

ProgressCallback = Callable[[int, int], None]

SUMMARY_PROMPT = (
    "Please provide only a 1-5 word summary of this text. Do not include any reasoning, "
    "explanations, or thinking process. Limit your response to a maximum of 5 words. "
    "Just respond with the key topic:\n\n{text} \n\n /no_think"
)


class BatchJobResult(NamedTuple):
    """Outcome of one job in a concurrent batch, addressed by the chunk's input position."""

    index: int
    chunk: TextChunk | None = None
    error: Exception | None = None


class LLMClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig, model_config: ModelServiceConfig | None = None):
        super().__init__(helper_config=helper_config)
        self.model_config = model_config if model_config is not None else self._read_model_config()
        self.timeout = self.model_config.timeout

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    ################ CONFIG ##################
    def _read_model_config(self) -> ModelServiceConfig:
        """Build the model service config from environment variables.

        Engine specific keys (base url, api key) are read with the
        LLM_<ENGINE>_ prefix, model names and worker counts with LLM_.

        Returns:
            ModelServiceConfig: The resolved configuration, using the documented
                defaults for every unset variable.
        """
        defaults = ModelServiceConfig()
        prefix = self.get_client_type().upper()
        return ModelServiceConfig(
            base_url=self.get_config_val("BASE_URL", default=defaults.base_url),
            api_key=self.get_config_val("API_KEY", default=defaults.api_key),
            embed_model=self._helper_config.get_string_val(f"{prefix}_EMBED_MODEL", default=defaults.embed_model),
            summary_model=self._helper_config.get_string_val(f"{prefix}_SUMMARY_MODEL", default=defaults.summary_model),
            timeout=self._helper_config.get_number_val(f"{prefix}_TIMEOUT", default=defaults.timeout),
            embed_workers=int(self._helper_config.get_number_val(f"{prefix}_EMBED_WORKERS", default=defaults.embed_workers)),
            summary_workers=int(self._helper_config.get_number_val(f"{prefix}_SUMMARY_WORKERS", default=defaults.summary_workers)),
        )

    def _get_base_url(self) -> str:
        return self.model_config.base_url

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_models(self) -> str:
        """Returns the endpoint path for model listing requests (e.g. "/api/tags")."""
        pass

    @abstractmethod
    def _get_endpoint_embedding(self) -> str:
        """Returns the endpoint path for single-text embedding requests (e.g. "/api/embeddings")."""
        pass

    @abstractmethod
    def _get_endpoint_generate(self) -> str:
        """Returns the endpoint path for non-streaming generation requests (e.g. "/api/generate")."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, text: str) -> dict:
        """Build the backend-specific request body for embedding one text.

        Args:
            text (str): The text to embed.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    @abstractmethod
    def get_generate_payload(self, prompt: str) -> dict:
        """Build the backend-specific request body for a non-streaming generation.

        Args:
            prompt (str): The full prompt.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    def get_summary_prompt(self, text: str) -> str:
        return SUMMARY_PROMPT.format(text=text)

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_embedding_from_response(self, response_data: dict) -> list[float]:
        """Extract the embedding vector from a raw embedding response.

        Raises:
            ModelServiceResponseError: If the response does not contain a valid vector.
        """
        pass

    @abstractmethod
    def extract_generate_response(self, response_data: dict) -> str:
        """Extract the generated text from a raw generation response.

        Raises:
            ModelServiceResponseError: If the response does not contain generated text.
        """
        pass

    @abstractmethod
    def extract_model_names(self, response_data: dict) -> list[str]:
        """Extract the installed model names from a raw model listing response.

        Raises:
            ModelServiceResponseError: If the response does not contain a model list.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_check_connection(self) -> None:
        """Verify the model service is reachable.

        Raises:
            ModelServiceUnavailableError: If the service cannot be reached or
                answers with a non-success status. The message carries
                remediation steps.
        """
        try:
            response = await self.do_healthcheck()
        except httpx.TransportError as exc:
            raise ModelServiceUnavailableError(self.model_config.base_url, str(exc) or exc.__class__.__name__) from exc
        if not response.is_success:
            raise ModelServiceUnavailableError(
                self.model_config.base_url, f"server responded with status {response.status_code}"
            )
        self.logging.debug("Model service at %s is reachable.", self.model_config.base_url)

    async def do_fetch_models(self) -> list[str]:
        """Fetch the names of all models installed on the service.

        Raises:
            ModelServiceUnavailableError: If the listing request fails.
            ModelServiceResponseError: If the listing cannot be parsed.
        """
        try:
            response = await self.do_request(method="GET", endpoint=self._get_endpoint_models())
        except httpx.TransportError as exc:
            raise ModelServiceUnavailableError(self.model_config.base_url, str(exc) or exc.__class__.__name__) from exc
        if not response.is_success:
            raise ModelServiceUnavailableError(
                self.model_config.base_url, f"model listing responded with status {response.status_code}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise ModelServiceResponseError(f"failed to parse models list: {exc}") from exc
        return self.extract_model_names(data)

    async def do_check_models_available(self) -> None:
        """Verify that the embedding and summary models are installed.

        A model installed as "<name>:latest" also satisfies "<name>".

        Raises:
            MissingModelsError: Listing every missing model with its install command.
        """
        installed: set[str] = set()
        for name in await self.do_fetch_models():
            installed.add(name)
            if name.endswith(":latest"):
                installed.add(name[: -len(":latest")])

        missing = [model for model in self.model_config.get_required_models() if model not in installed]
        if missing:
            raise MissingModelsError(missing)
        self.logging.debug("Required models available: %s", ", ".join(self.model_config.get_required_models()))

    async def _do_model_request(self, endpoint: str, body: dict) -> dict:
        """POST a JSON body to the model service and decode the JSON answer.

        Raises:
            ModelServiceConnectionError: On transport failure or timeout.
            ModelServiceStatusError: On a non-success HTTP status.
            ModelServiceResponseError: If the body is not valid JSON.
        """
        url = self.get_url(endpoint)
        try:
            response = await self.do_request(method="POST", endpoint=endpoint, json=body)
        except httpx.TransportError as exc:
            raise ModelServiceConnectionError(f"failed to call model service at {url}: {exc!r}") from exc
        if not response.is_success:
            raise ModelServiceStatusError(url, response.status_code, response.text[:200])
        try:
            return response.json()
        except ValueError as exc:
            raise ModelServiceResponseError(f"failed to decode response from {url}: {exc}") from exc

    async def do_embed_text(self, text: str) -> list[float]:
        """Embed a single text. No retry.

        Args:
            text (str): The text to embed.

        Returns:
            list[float]: The embedding vector.
        """
        data = await self._do_model_request(self._get_endpoint_embedding(), self.get_embed_payload(text))
        return self.extract_embedding_from_response(data)

    async def do_summarize_text(self, text: str) -> str:
        """Generate a cleaned 1-10 word summary for a single text. No retry.

        Args:
            text (str): The text to summarise.

        Returns:
            str: The cleaned summary (see clean_summary).
        """
        prompt = self.get_summary_prompt(text)
        data = await self._do_model_request(self._get_endpoint_generate(), self.get_generate_payload(prompt))
        return clean_summary(self.extract_generate_response(data))

    ##########################################
    ############ BATCH REQUESTS ##############
    ##########################################

    async def do_embed_chunks_concurrent(
        self,
        chunks: list[TextChunk],
        max_workers: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[TextChunk]:
        """Embed every chunk with a bounded pool of concurrent workers.

        Args:
            chunks (list[TextChunk]): Chunks to embed, in order.
            max_workers (int | None): Pool size. None uses the configured
                embed_workers; <= 0 uses one worker per CPU.
            on_progress (ProgressCallback | None): Called as (completed, total)
                once per finished chunk, successful or not.

        Returns:
            list[TextChunk]: Copies of the input chunks with embeddings set;
                position i holds the chunk from input position i.

        Raises:
            BatchProcessingError: If any chunk failed. No result is returned.
        """
        if max_workers is None:
            max_workers = self.model_config.embed_workers
        return await self._run_batch("embedding", chunks, max_workers, self._embed_chunk, on_progress)

    async def do_summarize_chunks_concurrent(
        self,
        chunks: list[TextChunk],
        max_workers: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[TextChunk]:
        """Summarise every chunk with a bounded pool of concurrent workers.

        Same contract as do_embed_chunks_concurrent, operating on the summary
        field and defaulting to the configured summary_workers.
        """
        if max_workers is None:
            max_workers = self.model_config.summary_workers
        return await self._run_batch("summarization", chunks, max_workers, self._summarize_chunk, on_progress)

    async def _embed_chunk(self, chunk: TextChunk) -> TextChunk:
        embedding = await self.do_embed_text(chunk.text)
        return chunk.model_copy(update={"embedding": embedding})

    async def _summarize_chunk(self, chunk: TextChunk) -> TextChunk:
        summary = await self.do_summarize_text(chunk.text)
        return chunk.model_copy(update={"summary": summary})

    async def _run_batch(
        self,
        operation: str,
        chunks: list[TextChunk],
        max_workers: int,
        process_chunk: Callable[[TextChunk], Awaitable[TextChunk]],
        on_progress: ProgressCallback | None,
    ) -> list[TextChunk]:
        """Fan chunks out to a fixed worker pool and collect the results by index.

        The job queue is filled once and drained by the workers. Results go
        through a second queue; a supervisor task posts a None sentinel after
        every worker has finished, which ends the collecting loop. Only the
        collecting loop touches the progress counter and the result slots.
        """
        total = len(chunks)
        if total == 0:
            return []
        if max_workers <= 0:
            max_workers = os.cpu_count() or 1
        worker_count = min(max_workers, total)
        self.logging.info(
            "Starting %s batch: %d chunks, %d workers.", operation, total, worker_count, color="cyan"
        )

        jobs: asyncio.Queue[tuple[int, TextChunk]] = asyncio.Queue(maxsize=total)
        for index, chunk in enumerate(chunks):
            jobs.put_nowait((index, chunk))
        results: asyncio.Queue[BatchJobResult | None] = asyncio.Queue(maxsize=total)

        workers = [
            asyncio.create_task(self._batch_worker(operation, jobs, results, process_chunk))
            for _ in range(worker_count)
        ]

        async def close_results_when_done() -> None:
            await asyncio.gather(*workers)
            await results.put(None)

        supervisor = asyncio.create_task(close_results_when_done())

        processed: list[TextChunk | None] = [None] * total
        failures: dict[int, Exception] = {}
        completed = 0
        try:
            while True:
                result = await results.get()
                if result is None:
                    break
                completed += 1
                if on_progress is not None:
                    on_progress(completed, total)
                if result.error is not None:
                    failures[result.index] = result.error
                else:
                    processed[result.index] = result.chunk
            await supervisor
        finally:
            pending = [task for task in (*workers, supervisor) if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if failures:
            self.logging.error("%s batch failed for %d of %d chunks.", operation.capitalize(), len(failures), total)
            raise BatchProcessingError(operation, failures)

        self.logging.info("Finished %s batch: %d chunks.", operation, total, color="green")
        return processed

    async def _batch_worker(
        self,
        operation: str,
        jobs: asyncio.Queue,
        results: asyncio.Queue,
        process_chunk: Callable[[TextChunk], Awaitable[TextChunk]],
    ) -> None:
        while True:
            try:
                index, chunk = jobs.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                processed = await process_chunk(chunk)
            except Exception as exc:
                self.logging.warning("%s failed for chunk %d: %s", operation.capitalize(), index, exc)
                await results.put(BatchJobResult(index=index, error=exc))
            else:
                await results.put(BatchJobResult(index=index, chunk=processed))
