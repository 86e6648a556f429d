import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from kzstats.api.app import create_app
from kzstats.config import Config
from kzstats.database.database import Database
from kzstats.utils.exceptions import StoreError


def test_sqlite_urls_get_the_async_driver():
    assert Config.get_async_database_url("sqlite:///stats.db") == "sqlite+aiosqlite:///stats.db"
    assert Config.get_async_database_url("sqlite+aiosqlite:///stats.db") == "sqlite+aiosqlite:///stats.db"
    assert Config.get_async_database_url("postgresql+asyncpg://kz@db/kz") == "postgresql+asyncpg://kz@db/kz"


def test_store_failures_become_store_errors(run):
    async def scenario(services):
        async with services.records.get_session("broken listing") as session:
            await session.execute(text("SELECT id FROM no_such_table"))

    with pytest.raises(StoreError) as excinfo:
        run(scenario)

    assert isinstance(excinfo.value.__cause__, SQLAlchemyError)
    assert "broken listing" in str(excinfo.value)
    assert "no_such_table" not in excinfo.value.user_message


def test_store_failures_reach_clients_as_generic_errors(database_url):
    app = create_app(Database(database_url))

    @app.get("/api/broken")
    async def broken():
        async with app.state.services.records.get_session("broken listing") as session:
            await session.execute(text("SELECT id FROM no_such_table"))

    with TestClient(app) as client:
        response = client.get("/api/broken")

    assert response.status_code == 500
    assert "no_such_table" not in response.json()["result"]
