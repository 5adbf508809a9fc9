"""Pytest configuration and shared fixtures for mariadb-helper tests"""

import os
from typing import Generator, Optional

import pandas as pd
import pytest
from dotenv import load_dotenv
from sqlalchemy import Engine, create_engine

from mariadb_helper import ConnectionConfig, MariaDBHelper
from mariadb_helper.core import DatabaseConnection, QueryExecutor

# Load environment variables
load_dotenv()


# ==================== Configuration Fixtures ====================


@pytest.fixture
def config() -> ConnectionConfig:
    """Complete configuration with an in-memory password"""
    return ConnectionConfig(
        username="analyst",
        host="db.example.com",
        dbname="analytics",
        password="secret",
    )


@pytest.fixture
def config_without_password() -> ConnectionConfig:
    """Configuration as read from a file: no password"""
    return ConnectionConfig(username="analyst", host="db.example.com", dbname="analytics")


@pytest.fixture
def no_password_sources(monkeypatch):
    """Make sure neither the environment nor a .env file supplies a password"""
    monkeypatch.delenv("DB_PASSWORD", raising=False)
    monkeypatch.setattr("mariadb_helper.core.credentials.load_dotenv", lambda: False)


# ==================== SQLite Fixtures ====================


@pytest.fixture
def sqlite_engine(tmp_path) -> Generator[Engine, None, None]:
    """File-backed SQLite engine standing in for the server"""
    engine = create_engine(f"sqlite:///{tmp_path / 'helper.db'}")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_connection(
    config: ConnectionConfig, sqlite_engine: Engine
) -> DatabaseConnection:
    """Connection manager bound to the SQLite engine"""
    return DatabaseConnection(config, engine=sqlite_engine)


@pytest.fixture
def executor(sqlite_connection: DatabaseConnection) -> QueryExecutor:
    """Query executor bound to the SQLite engine"""
    return QueryExecutor(sqlite_connection)


@pytest.fixture
def sqlite_helper(
    config: ConnectionConfig, sqlite_engine: Engine
) -> Generator[MariaDBHelper, None, None]:
    """Helper session bound to the SQLite engine"""
    helper = MariaDBHelper(config, engine=sqlite_engine, interactive=False)
    try:
        yield helper
    finally:
        helper.close()


@pytest.fixture
def sample_frame() -> pd.DataFrame:
    """50 rows, 5 columns of mixed types"""
    return pd.DataFrame(
        {
            "sepal_length": [4.0 + (i % 40) / 10 for i in range(50)],
            "sepal_width": [2.0 + (i % 25) / 10 for i in range(50)],
            "petal_length": [1.0 + (i % 60) / 10 for i in range(50)],
            "petal_width": [0.1 * (1 + i % 24) for i in range(50)],
            "species": ["setosa", "versicolor"] * 25,
        }
    )


# ==================== MariaDB Fixtures ====================


@pytest.fixture(scope="session")
def mariadb_config_path() -> Optional[str]:
    """Configuration file of a disposable MariaDB test database"""
    return os.getenv("MARIADB_TEST_CONFIG")


@pytest.fixture
def mariadb_helper(
    mariadb_config_path: Optional[str],
) -> Generator[MariaDBHelper, None, None]:
    """Helper session against a real MariaDB server"""
    if not mariadb_config_path:
        pytest.skip("MARIADB_TEST_CONFIG not set in environment")
    if not os.getenv("DB_PASSWORD"):
        pytest.skip("DB_PASSWORD not set in environment")

    helper = MariaDBHelper.from_config_file(mariadb_config_path, interactive=False)
    try:
        yield helper
    finally:
        helper.close()


# ==================== Pytest Configuration ====================


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Tests that need no database server")
    config.addinivalue_line("markers", "mariadb: MariaDB-specific tests")
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring database"
    )
