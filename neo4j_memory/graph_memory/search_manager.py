from typing import Dict, List

from neo4j_memory.graph_memory.base_manager import BaseManager, ENTITY_FULLTEXT_INDEX
from neo4j_memory.graph_memory.entity_manager import EntityManager, entity_from_row
from neo4j_memory.graph_memory.relation_manager import RelationManager
from neo4j_memory.graph_memory.search_mirror import SearchMirror
from neo4j_memory.models.graph_models import Entity, KnowledgeGraph
from neo4j_memory.utils import escape_fulltext_query, extract_error

FULLTEXT_SEARCH_QUERY = f"""
CALL db.index.fulltext.queryNodes("{ENTITY_FULLTEXT_INDEX}", $query)
YIELD node, score
OPTIONAL MATCH (node)-[:HAS_OBSERVATION]->(o:Observation)
WITH node, score, collect(o.content) AS observations
RETURN node.name AS name, node.entityType AS entityType, observations, score
ORDER BY score DESC
"""


def merge_entities(primary: List[Entity], secondary: List[Entity]) -> List[Entity]:
    """
    Merge two ranked entity lists by name.

    Entities from the primary list come first and win on a name clash;
    secondary entities not already present follow. Each list keeps its own
    order.
    """
    merged: Dict[str, Entity] = {}
    for entity in primary:
        merged.setdefault(entity.name, entity)
    for entity in secondary:
        merged.setdefault(entity.name, entity)
    return list(merged.values())


class SearchManager:
    """Manager for search operations in the knowledge graph."""

    def __init__(
        self,
        base_manager: BaseManager,
        entity_manager: EntityManager,
        relation_manager: RelationManager,
        search_mirror: SearchMirror,
    ):
        """
        Initialize the search manager.

        Args:
            base_manager: The base manager instance for database operations
            entity_manager: Used to read entities by name
            relation_manager: Used to read the relations around a result set
            search_mirror: The in-memory fuzzy index
        """
        self.base_manager = base_manager
        self.entity_manager = entity_manager
        self.relation_manager = relation_manager
        self.search_mirror = search_mirror
        self.logger = base_manager.logger

    def fulltext_search(self, query: str) -> List[Entity]:
        """
        Entities whose name or type token-matches the query in the full-text index.

        A failing index query is logged and yields no hits, so the fuzzy
        results of the same search are still returned.
        """
        try:
            rows = self.base_manager.read(FULLTEXT_SEARCH_QUERY, {"query": escape_fulltext_query(query)})
        except Exception as e:
            self.logger.error(f"Error in full-text search: {extract_error(e)}", context={"query": query})
            return []
        return [entity_from_row(row) for row in rows]

    def fuzzy_search(self, query: str) -> List[Entity]:
        """Entities approximately matching the query in name, type or observations."""
        return [match.entity for match in self.search_mirror.search(query)]

    def search_nodes(self, query: str) -> KnowledgeGraph:
        """
        Search for entities by full-text index and fuzzy matching.

        Read failures are logged and reported as an empty graph.

        Args:
            query: The search query

        Returns:
            The matching entities plus every relation touching any of them
        """
        if not query or not query.strip():
            return KnowledgeGraph.empty()

        try:
            entities = merge_entities(self.fulltext_search(query), self.fuzzy_search(query))
            if not entities:
                return KnowledgeGraph.empty()

            relations = self.relation_manager.get_incident_relations([entity.name for entity in entities])
            self.logger.debug(
                f"Search matched {len(entities)} entities",
                context={"query": query, "relations": len(relations)}
            )
            return KnowledgeGraph(entities=entities, relations=relations)
        except Exception as e:
            self.logger.error(f"Error searching nodes: {extract_error(e)}", context={"query": query})
            return KnowledgeGraph.empty()

    def open_nodes(self, names: List[str]) -> KnowledgeGraph:
        """
        Fetch exactly the named entities and the relations touching them.

        Read failures are logged and reported as an empty graph.

        Args:
            names: Entity names to retrieve

        Returns:
            The entities found plus every relation with an endpoint among the requested names
        """
        if not names:
            return KnowledgeGraph.empty()

        try:
            entities = self.entity_manager.get_entities(names)
            if not entities:
                return KnowledgeGraph(entities=entities, relations=[])

            relations = self.relation_manager.get_incident_relations(names)
            return KnowledgeGraph(entities=entities, relations=relations)
        except Exception as e:
            self.logger.error(f"Error opening nodes: {extract_error(e)}", context={"names": len(names)})
            return KnowledgeGraph.empty()
