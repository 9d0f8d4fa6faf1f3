"""All-pairs similarity between persisted chunks."""

from shared.errors import DimensionMismatchError
from shared.helper.HelperConfig import HelperConfig
from shared.helper.vector_math import cosine_similarity, euclidean_distance
from shared.models.chunk import ChunkSimilarity, TextChunk


class SimilarityCalculator:
    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()

    def calculate_all_similarities(self, chunks: list[TextChunk]) -> list[ChunkSimilarity]:
        """Compare every unordered pair of chunks exactly once.

        Pairs are generated by position (i < j), so chunk_id_1 always belongs
        to the earlier chunk and the output is ordered (0,1), (0,2), ..., (1,2), ...

        Args:
            chunks (list[TextChunk]): Persisted chunks (ids set) with embeddings.

        Returns:
            list[ChunkSimilarity]: N*(N-1)/2 records, none for N <= 1.

        Raises:
            ValueError: If a chunk has no id.
            DimensionMismatchError: If two embeddings differ in length. No
                partial result is returned.
        """
        for position, chunk in enumerate(chunks):
            if chunk.id is None:
                raise ValueError(f"chunk at position {position} has no id; persist chunks before comparing them")

        similarities: list[ChunkSimilarity] = []
        for i, first in enumerate(chunks):
            for j in range(i + 1, len(chunks)):
                second = chunks[j]
                if len(first.embedding) != len(second.embedding):
                    raise DimensionMismatchError(
                        len(first.embedding),
                        len(second.embedding),
                        context=f"pair ({i}, {j}) chunk ids ({first.id}, {second.id})",
                    )
                similarities.append(
                    ChunkSimilarity(
                        chunk_id_1=first.id,
                        chunk_id_2=second.id,
                        distance=euclidean_distance(first.embedding, second.embedding),
                        similarity=cosine_similarity(first.embedding, second.embedding),
                    )
                )

        self.logging.debug("Calculated %d similarities for %d chunks.", len(similarities), len(chunks))
        return similarities
