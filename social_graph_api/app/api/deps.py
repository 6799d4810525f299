"""
FastAPI dependencies wiring services to the per-request connection.

Tests replace ``get_db`` through ``app.dependency_overrides`` to run
the API against an in-memory database.
"""

import sqlite3

from fastapi import Depends

from social_graph_api.app.core.db import get_db
from social_graph_api.app.services.graph_service import GraphService
from social_graph_api.app.services.user_service import UserService


def get_user_service(conn: sqlite3.Connection = Depends(get_db)) -> UserService:
    return UserService(conn)


def get_graph_service(conn: sqlite3.Connection = Depends(get_db)) -> GraphService:
    return GraphService(conn)
