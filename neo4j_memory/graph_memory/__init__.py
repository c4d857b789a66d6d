"""
Graph Memory Module

This module provides the knowledge graph manager. It exposes one manager per
concern (entities, relations, observations, search) over a shared store
access layer, and a facade class, GraphMemoryManager, that owns the
connection, the fuzzy search mirror and the manager lifecycle.
"""

import threading
from enum import Enum
from typing import List, Optional

from neo4j_memory.graph_memory.base_manager import BaseManager
from neo4j_memory.graph_memory.entity_manager import EntityManager
from neo4j_memory.graph_memory.observation_manager import ObservationManager
from neo4j_memory.graph_memory.relation_manager import RelationManager
from neo4j_memory.graph_memory.search_manager import SearchManager
from neo4j_memory.graph_memory.search_mirror import SearchMirror
from neo4j_memory.logger import Logger, get_logger
from neo4j_memory.models.graph_models import (
    Entity, KnowledgeGraph, ObservationAddition, ObservationDeletion, Relation
)
from neo4j_memory.models.settings import Neo4jSettings
from neo4j_memory.utils import extract_error

__all__ = [
    'BaseManager',
    'EntityManager',
    'RelationManager',
    'ObservationManager',
    'SearchManager',
    'SearchMirror',
    'ManagerState',
    'GraphMemoryManager'
]


class ManagerState(str, Enum):
    """Lifecycle states of the GraphMemoryManager."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    CLOSED = "closed"


class GraphMemoryManager:
    """
    Knowledge graph manager.

    Every public operation other than initialize/close initializes the
    manager on first use, including after close. Mutations run in a single
    transaction each and refresh the search mirror before returning; reads
    never touch the mirror's contents.
    """

    def __init__(
        self,
        logger: Optional[Logger] = None,
        settings: Optional[Neo4jSettings] = None,
        search_mirror: Optional[SearchMirror] = None,
    ):
        """
        Initialize the graph memory manager.

        Args:
            logger: Optional logger instance
            settings: Optional connection settings, read from the environment otherwise
            search_mirror: Optional fuzzy index, mainly to tune its threshold
        """
        self.logger = logger or get_logger()
        self.base_manager = BaseManager(settings, self.logger)
        self.search_mirror = search_mirror or SearchMirror()

        self.entity_manager = EntityManager(self.base_manager)
        self.relation_manager = RelationManager(self.base_manager)
        self.observation_manager = ObservationManager(self.base_manager)
        self.search_manager = SearchManager(
            self.base_manager, self.entity_manager, self.relation_manager, self.search_mirror
        )

        self._state = ManagerState.UNINITIALIZED
        self._lock = threading.Lock()

    @property
    def state(self) -> ManagerState:
        return self._state

    def initialize(self) -> None:
        """Connect, ensure the schema and load the search mirror. A no-op once ready."""
        if self._state is ManagerState.READY:
            return

        with self._lock:
            if self._state is ManagerState.READY:
                return

            self._state = ManagerState.INITIALIZING
            try:
                self.base_manager.initialize()
                self.search_mirror.rebuild(self.entity_manager.get_all_entities())
                self._state = ManagerState.READY
                self.logger.info(
                    "Knowledge graph manager ready",
                    context={"entities": len(self.search_mirror)}
                )
            except Exception as e:
                self._state = ManagerState.UNINITIALIZED
                self.logger.error(f"Failed to initialize knowledge graph manager: {extract_error(e)}")
                raise

    def ensure_initialized(self) -> None:
        """Ensure the manager is initialized."""
        if self._state is not ManagerState.READY:
            self.initialize()

    def refresh_search_mirror(self) -> None:
        """Re-read every entity from the store and swap it into the search mirror."""
        try:
            entities = self.entity_manager.get_all_entities()
        except Exception as e:
            self.logger.error(f"Error rebuilding search mirror: {extract_error(e)}")
            raise
        self.search_mirror.rebuild(entities)
        self.logger.info("Search mirror rebuilt", context={"entities": len(entities)})

    def create_entities(self, entities: List[Entity]) -> List[Entity]:
        """Create the entities whose names are new and return them."""
        if not entities:
            return []
        self.ensure_initialized()
        created = self.entity_manager.create_entities(entities)
        self.refresh_search_mirror()
        return created

    def create_relations(self, relations: List[Relation]) -> List[Relation]:
        """Create the relations with existing endpoints and new triples and return them."""
        if not relations:
            return []
        self.ensure_initialized()
        # The mirror only indexes entities
        return self.relation_manager.create_relations(relations)

    def add_observations(self, observations: List[ObservationAddition]) -> List[ObservationAddition]:
        """Add new observation contents to existing entities and return what was added."""
        if not observations:
            return []
        self.ensure_initialized()
        added = self.observation_manager.add_observations(observations)
        self.refresh_search_mirror()
        return added

    def delete_entities(self, entity_names: List[str]) -> None:
        """Delete entities with their observations and incident relations."""
        if not entity_names:
            return
        self.ensure_initialized()
        self.entity_manager.delete_entities(entity_names)
        self.refresh_search_mirror()

    def delete_observations(self, deletions: List[ObservationDeletion]) -> None:
        """Delete matching observation contents from entities."""
        if not deletions:
            return
        self.ensure_initialized()
        self.observation_manager.delete_observations(deletions)
        self.refresh_search_mirror()

    def delete_relations(self, relations: List[Relation]) -> None:
        """Delete the relations matching the given triples."""
        if not relations:
            return
        self.ensure_initialized()
        self.relation_manager.delete_relations(relations)

    def search_nodes(self, query: str) -> KnowledgeGraph:
        """Search entities by full-text index and fuzzy match, with their relations."""
        if not query or not query.strip():
            return KnowledgeGraph.empty()
        self.ensure_initialized()
        return self.search_manager.search_nodes(query)

    def open_nodes(self, names: List[str]) -> KnowledgeGraph:
        """Fetch the named entities and the relations touching them."""
        if not names:
            return KnowledgeGraph.empty()
        self.ensure_initialized()
        return self.search_manager.open_nodes(names)

    def close(self) -> None:
        """Release the connection; the next operation initializes again."""
        with self._lock:
            self.base_manager.close()
            self.search_mirror.clear()
            self._state = ManagerState.CLOSED
            self.logger.info("Knowledge graph manager closed")
