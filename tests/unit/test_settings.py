"""
Unit tests for the environment-driven settings.
"""

import pytest
from unittest.mock import patch
from pydantic import ValidationError

from neo4j_memory.logger import LogLevel
from neo4j_memory.models.settings import DEFAULT_MAX_CONNECTION_LIFETIME, Neo4jSettings, ServerSettings


def test_neo4j_defaults():
    with patch.dict('os.environ', {}, clear=True):
        settings = Neo4jSettings()

    assert settings.uri == "bolt://localhost:7687"
    assert settings.user == "neo4j"
    assert settings.password == "password"
    assert settings.database == "neo4j"
    assert settings.max_connection_lifetime == DEFAULT_MAX_CONNECTION_LIFETIME == 10800


def test_neo4j_from_environment():
    with patch.dict('os.environ', {
        'NEO4J_URI': 'neo4j+s://cloud:7687',
        'NEO4J_DATABASE': 'memory',
        'NEO4J_MAX_CONNECTION_LIFETIME': '600',
    }, clear=True):
        settings = Neo4jSettings()

    assert settings.uri == "neo4j+s://cloud:7687"
    assert settings.database == "memory"
    assert settings.max_connection_lifetime == 600


def test_neo4j_rejects_non_positive_lifetime():
    with pytest.raises(ValidationError):
        Neo4jSettings(max_connection_lifetime=0)


def test_server_defaults():
    with patch.dict('os.environ', {}, clear=True):
        settings = ServerSettings()

    assert settings.log_level == LogLevel.ERROR
    assert settings.transport == "stdio"


@pytest.mark.parametrize("raw, expected", [
    ("DEBUG", LogLevel.DEBUG),
    ("info", LogLevel.INFO),
    ("warn", LogLevel.WARN),
    ("Warning", LogLevel.WARN),
])
def test_server_log_level_names(raw, expected):
    with patch.dict('os.environ', {'LOG_LEVEL': raw}, clear=True):
        assert ServerSettings().log_level == expected


def test_server_transport_from_environment():
    with patch.dict('os.environ', {'MCP_TRANSPORT': 'sse'}, clear=True):
        assert ServerSettings().transport == "sse"


def test_server_rejects_unknown_transport():
    with patch.dict('os.environ', {'MCP_TRANSPORT': 'carrier-pigeon'}, clear=True):
        with pytest.raises(ValidationError):
            ServerSettings()
