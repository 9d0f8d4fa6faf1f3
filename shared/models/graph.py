"""Graph projection served to the visualizer."""

from pydantic import BaseModel


class GraphNode(BaseModel):
    id: int
    text: str
    index: int
    summary: str


class GraphLink(BaseModel):
    source: int
    target: int
    distance: float
    similarity: float


class GraphData(BaseModel):
    """Nodes are all chunks; links are the similarity records above the requested threshold."""

    nodes: list[GraphNode]
    links: list[GraphLink]
