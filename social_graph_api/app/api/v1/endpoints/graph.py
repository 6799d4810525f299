"""
Graph endpoint for API v1.

Returns the node/edge projection the browser UI renders.
"""

from fastapi import APIRouter, Depends

from social_graph_api.app.api.deps import get_graph_service
from social_graph_api.app.schemas.graph import GraphData
from social_graph_api.app.services.graph_service import GraphService

router = APIRouter()


@router.get("", response_model=GraphData)
def get_graph(service: GraphService = Depends(get_graph_service)) -> GraphData:
    """Return every user as a node and every friendship as one edge."""
    return service.build_graph()
