import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from social_graph_api.app.core.db import get_connection, get_db, init_db
from social_graph_api.app.main import app
from social_graph_api.app.services.graph_service import GraphService
from social_graph_api.app.services.user_service import UserService


@pytest.fixture
def conn():
    connection = get_connection(":memory:")
    init_db(connection)
    try:
        yield connection
    finally:
        connection.close()


@pytest.fixture
def user_service(conn):
    return UserService(conn)


@pytest.fixture
def graph_service(conn):
    return GraphService(conn)


@pytest_asyncio.fixture
async def api_client(conn):
    def _shared_db():
        yield conn

    app.dependency_overrides[get_db] = _shared_db
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        app.dependency_overrides.pop(get_db, None)
