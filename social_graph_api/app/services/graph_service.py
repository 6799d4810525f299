"""
Graph projection of users and friendships.

Turns the stored users into visualisation nodes and their friendships
into edges.  Each friendship appears in the friend lists of both
users, so edges are deduplicated on the same canonical pair key the
``friendships`` table uses.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import List, Set, Tuple

from social_graph_api.app.schemas.graph import GraphData, GraphEdge, GraphNode
from social_graph_api.app.services.user_service import UserService, canonical_pair

logger = logging.getLogger(__name__)


class GraphService:
    """Read-only projection used by ``GET /graph``."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.users = UserService(conn)

    def build_graph(self) -> GraphData:
        users = self.users.list_users()
        nodes: List[GraphNode] = []
        edges: List[GraphEdge] = []
        seen: Set[Tuple[str, str]] = set()

        for user in users:
            nodes.append(
                GraphNode(
                    id=user.id,
                    username=user.username,
                    age=user.age,
                    hobbies=user.hobbies,
                    popularity_score=user.popularity_score,
                )
            )
            for friend_id in user.friends:
                pair = canonical_pair(user.id, friend_id)
                if pair in seen:
                    continue
                seen.add(pair)
                source, target = pair
                edges.append(GraphEdge(id=f"{source}-{target}", source=source, target=target))

        logger.debug("Built graph with %d nodes and %d edges", len(nodes), len(edges))
        return GraphData(nodes=nodes, edges=edges)
