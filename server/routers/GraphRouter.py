import math

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from server.core.GraphQueryService import GraphQueryService
from server.models.responses import APIResponse
from shared.errors import BluffyError

router = APIRouter(prefix="/api", tags=["graph"])


def _parse_min_similarity(raw: str | None) -> float:
    """Parse the min_similarity query value; missing or unparsable values mean 0."""
    if raw is None or not raw.strip():
        return 0.0
    try:
        value = float(raw)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def _success(data) -> JSONResponse:
    return JSONResponse(status_code=200, content=APIResponse(success=True, data=data).to_content())


def _failure(request: Request, message: str, error: Exception) -> JSONResponse:
    request.app.state.logging.error("%s: %s", message, error)
    return JSONResponse(status_code=500, content=APIResponse(success=False, error=f"{message}: {error}").to_content())


@router.get("/chunks")
async def get_chunks(request: Request) -> JSONResponse:
    """Return all chunks ordered by chunk_index."""
    service: GraphQueryService = request.app.state.graph_query_service
    try:
        chunks = await service.do_fetch_chunks()
    except BluffyError as e:
        return _failure(request, "Failed to get chunks", e)
    return _success([chunk.model_dump() for chunk in chunks])


@router.get("/similarities")
async def get_similarities(request: Request) -> JSONResponse:
    """Return all similarity records ordered by similarity descending."""
    service: GraphQueryService = request.app.state.graph_query_service
    try:
        similarities = await service.do_fetch_similarities()
    except BluffyError as e:
        return _failure(request, "Failed to get similarities", e)
    return _success([similarity.model_dump() for similarity in similarities])


@router.get("/graph")
async def get_graph(request: Request, min_similarity: str | None = None) -> JSONResponse:
    """Return the graph projection.

    Args:
        request (Request): FastAPI request (provides app.state.graph_query_service).
        min_similarity (str | None): Inclusive link threshold; missing or
            unparsable values fall back to 0.

    Returns:
        JSONResponse: Envelope with {"nodes": [...], "links": [...]} as data.
    """
    service: GraphQueryService = request.app.state.graph_query_service
    try:
        graph = await service.do_build_graph(min_similarity=_parse_min_similarity(min_similarity))
    except BluffyError as e:
        return _failure(request, "Failed to build graph", e)
    return _success(graph.model_dump())
