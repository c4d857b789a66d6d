import pytest
from unittest.mock import patch, MagicMock

from neo4j_memory.graph_memory import GraphMemoryManager, ManagerState
from neo4j_memory.models.graph_models import (
    Entity, KnowledgeGraph, ObservationAddition, ObservationDeletion, Relation
)


@pytest.fixture
def mock_graph_database(mock_neo4j_driver):
    with patch('neo4j_memory.graph_memory.base_manager.GraphDatabase') as graph_database:
        graph_database.driver.return_value = mock_neo4j_driver
        yield graph_database


@pytest.fixture
def graph_manager(mock_logger, neo4j_settings, mock_graph_database):
    """A GraphMemoryManager wired to the mock driver."""
    return GraphMemoryManager(mock_logger, neo4j_settings)


def test_initialization(graph_manager, mock_logger):
    """Test that the manager wires its sub-managers to one base manager."""
    assert graph_manager.logger == mock_logger
    assert graph_manager.state is ManagerState.UNINITIALIZED
    assert graph_manager.entity_manager.base_manager is graph_manager.base_manager
    assert graph_manager.relation_manager.base_manager is graph_manager.base_manager
    assert graph_manager.observation_manager.base_manager is graph_manager.base_manager
    assert graph_manager.search_manager.search_mirror is graph_manager.search_mirror


def test_initialize_loads_mirror(graph_manager, mock_read_tx, make_result, mock_graph_database):
    """Test that initialization connects and loads every entity into the mirror."""
    mock_read_tx.run.return_value = make_result([
        {"name": "John", "entityType": "Person", "observations": ["likes coding"]},
    ])

    graph_manager.initialize()

    assert graph_manager.state is ManagerState.READY
    assert [e.name for e in graph_manager.search_mirror.entities] == ["John"]
    mock_graph_database.driver.assert_called_once()

    # Initializing again is a no-op
    graph_manager.initialize()
    mock_graph_database.driver.assert_called_once()


def test_initialize_failure(graph_manager, mock_neo4j_driver, mock_logger):
    """Test that a failed initialization leaves the manager uninitialized and re-raises."""
    mock_neo4j_driver.verify_connectivity.side_effect = Exception("Connection refused")

    with pytest.raises(Exception, match="Connection refused"):
        graph_manager.initialize()

    assert graph_manager.state is ManagerState.UNINITIALIZED
    mock_logger.error.assert_called()


def test_operations_initialize_lazily(graph_manager, mock_graph_database):
    """Test that the first operation connects on its own."""
    graph_manager.open_nodes(["John"])

    assert graph_manager.state is ManagerState.READY
    mock_graph_database.driver.assert_called_once()


def test_lazy_initialization_failure_propagates(graph_manager, mock_neo4j_driver):
    """Test that connectivity failures are not degraded to empty results."""
    mock_neo4j_driver.verify_connectivity.side_effect = Exception("Connection refused")

    with pytest.raises(Exception, match="Connection refused"):
        graph_manager.search_nodes("john")


def test_empty_inputs_do_not_connect(graph_manager, mock_graph_database):
    """Test that empty requests return immediately."""
    assert graph_manager.create_entities([]) == []
    assert graph_manager.create_relations([]) == []
    assert graph_manager.add_observations([]) == []
    graph_manager.delete_entities([])
    graph_manager.delete_observations([])
    graph_manager.delete_relations([])
    assert graph_manager.search_nodes("") == KnowledgeGraph.empty()
    assert graph_manager.open_nodes([]) == KnowledgeGraph.empty()

    mock_graph_database.driver.assert_not_called()
    assert graph_manager.state is ManagerState.UNINITIALIZED


def test_mutations_refresh_mirror(graph_manager):
    """Test that every entity or observation mutation rebuilds the mirror afterwards."""
    graph_manager.initialize()
    graph_manager.entity_manager = MagicMock()
    graph_manager.entity_manager.create_entities.return_value = []
    graph_manager.entity_manager.get_all_entities.return_value = [
        Entity(name="John", entityType="Person", observations=[])
    ]
    graph_manager.observation_manager = MagicMock()
    graph_manager.observation_manager.add_observations.return_value = []

    graph_manager.create_entities([Entity(name="John", entityType="Person")])
    graph_manager.add_observations([ObservationAddition(entityName="John", contents=["x"])])
    graph_manager.delete_observations([ObservationDeletion(entityName="John", contents=["x"])])
    graph_manager.delete_entities(["John"])

    assert graph_manager.entity_manager.get_all_entities.call_count == 4
    assert [e.name for e in graph_manager.search_mirror.entities] == ["John"]


def test_relation_mutations_do_not_refresh_mirror(graph_manager):
    """Test that relation changes leave the entity mirror alone."""
    graph_manager.initialize()
    graph_manager.entity_manager = MagicMock()
    graph_manager.relation_manager = MagicMock()
    relation = Relation(from_entity="John", to="Acme", relationType="WORKS_FOR")
    graph_manager.relation_manager.create_relations.return_value = [relation]

    assert graph_manager.create_relations([relation]) == [relation]
    graph_manager.delete_relations([relation])

    graph_manager.entity_manager.get_all_entities.assert_not_called()


def test_mirror_rebuild_failure_propagates(graph_manager, mock_logger):
    """Test that a failed re-read after a committed write is reported."""
    graph_manager.initialize()
    graph_manager.entity_manager = MagicMock()
    graph_manager.entity_manager.get_all_entities.side_effect = Exception("read timeout")

    with pytest.raises(Exception, match="read timeout"):
        graph_manager.delete_entities(["John"])

    graph_manager.entity_manager.delete_entities.assert_called_once_with(["John"])
    assert "Error rebuilding search mirror" in mock_logger.error.call_args.args[0]


def test_create_entities_end_to_end(graph_manager, mock_tx, mock_read_tx, make_result):
    """Test that created entities become searchable through the mirror."""
    graph_manager.initialize()
    mock_read_tx.run.return_value = make_result([
        {"name": "John", "entityType": "Person", "observations": ["likes coding"]},
    ])

    created = graph_manager.create_entities([
        Entity(name="John", entityType="Person", observations=["likes coding"])
    ])

    assert [e.name for e in created] == ["John"]
    mock_tx.commit.assert_called_once()
    assert [m.entity.name for m in graph_manager.search_mirror.search("john")] == ["John"]


def test_close_and_reinitialize(graph_manager, mock_neo4j_driver, mock_graph_database):
    """Test that close releases the driver and the next operation reconnects."""
    graph_manager.initialize()

    graph_manager.close()

    assert graph_manager.state is ManagerState.CLOSED
    assert len(graph_manager.search_mirror) == 0
    mock_neo4j_driver.close.assert_called_once()

    graph_manager.open_nodes(["John"])

    assert graph_manager.state is ManagerState.READY
    assert mock_graph_database.driver.call_count == 2
