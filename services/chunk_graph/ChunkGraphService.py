"""Chunk graph pipeline.

Splits a document into paragraph chunks, embeds and summarises them through
the model client, stores the chunks and stores the similarity of every
chunk pair.
"""

from pathlib import Path
from typing import Callable

from pydantic import BaseModel

from services.chunk_graph.SimilarityCalculator import SimilarityCalculator
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.helper.text_chunker import chunk_text_by_paragraphs, read_text_file
from shared.store.ChunkStore import ChunkStore

StageProgressCallback = Callable[[str, int, int], None]

STAGE_EMBEDDING = "embedding"
STAGE_SUMMARY = "summary"
STAGE_SIMILARITY = "similarity"

STAGE_MESSAGES = {
    STAGE_EMBEDDING: "Generating embeddings: %d/%d",
    STAGE_SUMMARY: "Generating summaries: %d/%d",
    STAGE_SIMILARITY: "Calculating similarities: %d/%d",
}


class ProcessingResult(BaseModel):
    store_path: str
    chunk_count: int
    similarity_count: int


class ChunkGraphService:
    """Runs the pipeline for one document against one store.

    Steps that already wrote to the store are not rolled back when a later
    step fails; the store then holds the chunks without their similarities.
    """

    def __init__(
        self,
        helper_config: HelperConfig,
        llm_client: LLMClientInterface,
        store: ChunkStore,
        similarity_calculator: SimilarityCalculator | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._llm_client = llm_client
        self._store = store
        self._similarity_calculator = similarity_calculator or SimilarityCalculator(helper_config)

    ##########################################
    ################ PIPELINE ################
    ##########################################

    async def do_process_file(
        self,
        path: str | Path,
        max_workers: int | None = None,
        on_progress: StageProgressCallback | None = None,
    ) -> ProcessingResult:
        """Read a UTF-8 text file and run the pipeline over its content.

        Raises:
            InputDocumentError: If the file cannot be read or decoded.
        """
        self.logging.info("Reading %s", path)
        text = read_text_file(path)
        return await self.do_process_text(text, max_workers=max_workers, on_progress=on_progress)

    async def do_process_text(
        self,
        text: str,
        max_workers: int | None = None,
        on_progress: StageProgressCallback | None = None,
    ) -> ProcessingResult:
        """Run the full pipeline over a text.

        Args:
            text (str): The document content.
            max_workers (int | None): Pool size for both model batches. None
                uses the client's configured worker counts.
            on_progress (StageProgressCallback | None): Called as
                (stage, completed, total) for the embedding, summary and
                similarity stages.

        Returns:
            ProcessingResult: Store path and the number of stored chunks and similarities.

        Raises:
            ModelServiceUnavailableError: The model service is not reachable.
            MissingModelsError: A required model is not installed.
            BatchProcessingError: Embedding or summarisation failed for any chunk.
            DimensionMismatchError: Two embeddings have different lengths.
            StoreError: Persisting chunks or similarities failed.
        """
        chunks = chunk_text_by_paragraphs(text)
        self.logging.info("Split text into %d chunks.", len(chunks), color="blue")

        await self._llm_client.do_check_connection()
        await self._llm_client.do_check_models_available()

        embedded = await self._llm_client.do_embed_chunks_concurrent(
            chunks, max_workers=max_workers, on_progress=self._stage_reporter(STAGE_EMBEDDING, on_progress)
        )
        summarised = await self._llm_client.do_summarize_chunks_concurrent(
            embedded, max_workers=max_workers, on_progress=self._stage_reporter(STAGE_SUMMARY, on_progress)
        )

        stored = await self._store.do_insert_chunks(summarised)
        self.logging.info("Stored %d chunks in %s.", len(stored), self._store.get_path())

        similarities = self._similarity_calculator.calculate_all_similarities(stored)
        await self._store.do_insert_similarities(similarities)
        self._stage_reporter(STAGE_SIMILARITY, on_progress)(len(similarities), len(similarities))
        self.logging.info("Stored %d similarities.", len(similarities))

        self.logging.info("Processing complete. Database saved to: %s", self._store.get_path(), color="green")
        return ProcessingResult(
            store_path=str(self._store.get_path()),
            chunk_count=len(stored),
            similarity_count=len(similarities),
        )

    def _stage_reporter(self, stage: str, on_progress: StageProgressCallback | None) -> Callable[[int, int], None]:
        def report(completed: int, total: int) -> None:
            self.logging.info(STAGE_MESSAGES[stage], completed, total, color="cyan")
            if on_progress is not None:
                on_progress(stage, completed, total)

        return report
