from shared.helper.HelperConfig import HelperConfig
from shared.models.chunk import ChunkSimilarity, TextChunk
from shared.models.graph import GraphData, GraphLink, GraphNode
from shared.store.ChunkStore import ChunkStore


class GraphQueryService:
    """Read-only queries over a chunk graph store."""

    def __init__(self, helper_config: HelperConfig, store: ChunkStore) -> None:
        self.logging = helper_config.get_logger()
        self._store = store

    ##########################################
    ############### CORE #####################
    ##########################################

    async def do_fetch_chunks(self) -> list[TextChunk]:
        return await self._store.do_fetch_chunks()

    async def do_fetch_similarities(self) -> list[ChunkSimilarity]:
        return await self._store.do_fetch_similarities()

    async def do_build_graph(self, min_similarity: float = 0.0) -> GraphData:
        """Project the store into graph form.

        Every chunk becomes a node. Only similarity records with
        similarity >= min_similarity become links, ordered by similarity
        descending.

        Args:
            min_similarity (float): Inclusive link threshold.

        Returns:
            GraphData: Nodes and links; links is empty, never None, when nothing qualifies.
        """
        chunks = await self._store.do_fetch_chunks()
        similarities = await self._store.do_fetch_similarities(min_similarity=min_similarity)

        nodes = [
            GraphNode(id=chunk.id, text=chunk.text, index=chunk.chunk_index, summary=chunk.summary)
            for chunk in chunks
        ]
        links = [
            GraphLink(
                source=sim.chunk_id_1,
                target=sim.chunk_id_2,
                distance=sim.distance,
                similarity=sim.similarity,
            )
            for sim in similarities
        ]
        self.logging.debug(
            "Built graph with %d nodes and %d links (min_similarity=%s).", len(nodes), len(links), min_similarity
        )
        return GraphData(nodes=nodes, links=links)
