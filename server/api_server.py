"""FastAPI application serving a chunk graph store to the visualizer."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from server.core.GraphQueryService import GraphQueryService
from server.routers.GraphRouter import router as graph_router
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.store.ChunkStore import ChunkStore

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")
DEFAULT_PORT = 8080


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    store_path = app.state.store_path or app.state.helper_config.get_string_val("STORE_PATH")
    store = ChunkStore(helper_config=app.state.helper_config, path=store_path, create_tables=False)
    await store.boot()
    logging.info("Serving chunk graph store %s", store.get_path())

    app.state.store = store
    app.state.graph_query_service = GraphQueryService(helper_config=app.state.helper_config, store=store)

    # while the app is running...
    yield

    # when the app shuts down, close the store
    await store.close()
    logging.info("Chunk graph store closed.")


def create_app(store_path: str | None = None) -> FastAPI:
    """Build the API app.

    Args:
        store_path (str | None): Store file to serve. None falls back to the
            STORE_PATH environment variable at startup.
    """
    app = FastAPI(
        title="bluffy",
        description=(
            "Read-only access to a chunk graph store: paragraph chunks with summaries "
            "and the pairwise similarity of their embeddings. "
            "GET /api/graph?min_similarity=<float> returns the graph projection."
        ),
        version=app_version,
        lifespan=lifespan,
    )
    app.state.store_path = store_path

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(graph_router)
    return app


app = create_app()


def main(store_path: str | None = None, port: int = DEFAULT_PORT) -> None:
    import uvicorn

    logging.info("Starting bluffy API Server v%s on port %d...", app_version, port)
    logging.info("Endpoints:")
    logging.info("  GET /api/chunks - all text chunks")
    logging.info("  GET /api/similarities - all similarities")
    logging.info("  GET /api/graph?min_similarity=<float> - graph data for visualization")
    uvicorn.run(create_app(store_path), host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
