"""Chunk graph runner entry point.

Turns one text document into a chunk graph store: paragraph chunks with
embeddings and summaries plus the similarity of every chunk pair.

Usage:
    python -m services.chunk_graph.chunk_graph_runner <input_file> [output_dir]
"""

import asyncio
import sys
from pathlib import Path

from services.chunk_graph.ChunkGraphService import ChunkGraphService
from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.errors import BluffyError
from shared.helper.HelperConfig import HelperConfig
from shared.helper.text_chunker import read_text_file
from shared.logging.logging_setup import setup_logging
from shared.store.ChunkStore import ChunkStore, build_store_path


async def main(
    input_file: str,
    output_dir: str = ".",
    workers: int | None = None,
    host: str | None = None,
) -> int:
    """Run the pipeline for one document.

    Args:
        input_file (str): Text or markdown file to process.
        output_dir (str): Directory receiving "<basename>_embeddings.db".
        workers (int | None): Pool size for both model batches. None uses
            LLM_EMBED_WORKERS / LLM_SUMMARY_WORKERS.
        host (str | None): Model service address overriding the env config.

    Returns:
        int: Process exit code, 0 on success.
    """
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    if not Path(input_file).is_file():
        logger.error("Input file not found: %s", input_file)
        return 1

    llm_client: LLMClientInterface | None = None
    store: ChunkStore | None = None
    try:
        # decode the input before anything is created on disk
        text = read_text_file(input_file)

        llm_client = LLMClientManager(helper_config=config).get_client()
        if host:
            llm_client.model_config = llm_client.model_config.model_copy(update={"base_url": host})

        store = ChunkStore(helper_config=config, path=build_store_path(input_file, output_dir))
        await store.boot()
        await llm_client.boot()

        service = ChunkGraphService(helper_config=config, llm_client=llm_client, store=store)
        result = await service.do_process_text(text, max_workers=workers)
    except (BluffyError, OSError, ValueError) as e:
        logger.error("Error processing file %s: %s", input_file, e)
        return 1
    finally:
        if llm_client is not None:
            await llm_client.close()
        if store is not None:
            await store.close()

    logger.info(
        "Processed %d chunks and %d similarities into %s",
        result.chunk_count,
        result.similarity_count,
        result.store_path,
        color="green",
    )
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1], *sys.argv[2:3])))
