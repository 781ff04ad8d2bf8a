"""Pytest configuration and shared fixtures for statement core tests"""

from typing import Iterator

import pytest

from db_statement.core.connection import DatabaseConnection
from db_statement.models.config import DatabaseConfig
from db_statement.utils.normalization import ValueNormalizer
from tests.fakes import RecordingConnection

# ==================== Unit Fixtures ====================


@pytest.fixture
def connection() -> RecordingConnection:
    """Statement facility that records prepared statements"""
    return RecordingConnection()


@pytest.fixture
def normalizer() -> ValueNormalizer:
    """Value normalizer with default rules"""
    return ValueNormalizer()


# ==================== SQLite Fixtures ====================


@pytest.fixture
def sqlite_config() -> DatabaseConfig:
    """In-memory SQLite configuration"""
    return DatabaseConfig(url="sqlite://")


@pytest.fixture
def sqlite_connection(sqlite_config: DatabaseConfig) -> Iterator[DatabaseConnection]:
    """Initialized SQLite connection with proper cleanup"""
    connection = DatabaseConnection(sqlite_config)
    connection.initialize()
    try:
        yield connection
    finally:
        connection.dispose()


# ==================== Pytest Configuration ====================


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring database"
    )
