"""
Pydantic models for the graph projection.

Nodes mirror users without their friend lists; edges carry one entry
per friendship.
"""

from typing import List

from pydantic import BaseModel, Field


class GraphNode(BaseModel):
    id: str
    username: str
    age: int
    hobbies: List[str]
    popularity_score: float = Field(0.0, alias="popularityScore")

    model_config = {
        "populate_by_name": True,
    }


class GraphEdge(BaseModel):
    id: str
    source: str
    target: str


class GraphData(BaseModel):
    """Schema returned by ``GET /graph``."""

    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
