"""
Common test fixtures and utilities for testing the Neo4j knowledge graph memory.
"""

import pytest
from unittest.mock import MagicMock

from neo4j_memory.graph_memory.base_manager import BaseManager
from neo4j_memory.models.graph_models import Entity, Relation
from neo4j_memory.models.settings import Neo4jSettings


def _result(rows=None):
    """Create a mock query result whose data() returns the given rows."""
    result = MagicMock()
    result.data.return_value = list(rows or [])
    return result


@pytest.fixture
def make_result():
    """Factory for mock query results."""
    return _result


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    return MagicMock()


@pytest.fixture
def neo4j_settings():
    """Connection settings that never touch the environment defaults."""
    return Neo4jSettings(
        uri="bolt://test-host:7687",
        user="neo4j",
        password="test-password",
        database="memory",
    )


@pytest.fixture
def mock_tx():
    """An open explicit transaction whose queries return no rows."""
    tx = MagicMock()
    tx.closed.return_value = False
    tx.run.return_value = _result()
    return tx


@pytest.fixture
def mock_read_tx():
    """The managed transaction handed to read functions."""
    tx = MagicMock()
    tx.run.return_value = _result()
    return tx


@pytest.fixture
def mock_session(mock_tx, mock_read_tx):
    """A session usable both directly and as a context manager."""
    session = MagicMock()
    session.__enter__.return_value = session
    session.begin_transaction.return_value = mock_tx
    session.execute_read.side_effect = lambda fn, *args: fn(mock_read_tx, *args)
    return session


@pytest.fixture
def mock_neo4j_driver(mock_session):
    """Create a mock Neo4j driver."""
    driver = MagicMock()
    driver.session.return_value = mock_session
    return driver


@pytest.fixture
def base_manager(mock_logger, neo4j_settings, mock_neo4j_driver):
    """A BaseManager that is already connected to the mock driver."""
    manager = BaseManager(neo4j_settings, mock_logger)
    manager.neo4j_driver = mock_neo4j_driver
    manager.initialized = True
    return manager


@pytest.fixture
def sample_entities():
    return [
        Entity(name="John", entityType="Person", observations=["likes coding"]),
        Entity(name="Acme", entityType="Company", observations=["builds rockets"]),
    ]


@pytest.fixture
def sample_relation():
    return Relation(from_entity="John", to="Acme", relationType="WORKS_FOR")
