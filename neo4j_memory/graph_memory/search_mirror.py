"""
In-memory fuzzy index over the entity set.

The mirror is rebuilt wholesale from the graph store after every mutation.
A rebuild prepares a new immutable snapshot and then replaces the old one
with a single assignment, so a concurrent search sees either the old or the
new entity set, never a mix.
"""

from typing import List, NamedTuple, Optional, Sequence, Tuple

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

from neo4j_memory.models.graph_models import Entity

# Distance on a 0-1 scale, 0 being an exact match
DEFAULT_THRESHOLD = 0.4


class _IndexedEntity(NamedTuple):
    entity: Entity
    fields: Tuple[str, ...]


class SearchMatch(NamedTuple):
    entity: Entity
    score: float


def field_distance(query: str, text: str) -> float:
    """
    Distance between a normalised query and a normalised field value.

    Fields at least as long as the query are scored on their best matching
    substring; shorter fields are compared as a whole so that a short value
    does not match every long query containing it.
    """
    if not query or not text:
        return 1.0
    if len(text) >= len(query):
        similarity = fuzz.partial_ratio(query, text)
    else:
        similarity = fuzz.ratio(query, text)
    return 1.0 - similarity / 100.0


class SearchMirror:
    """Fuzzy-searchable snapshot of entity names, types and observations."""

    def __init__(self, threshold: float = DEFAULT_THRESHOLD):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("threshold must be between 0 and 1")
        self.threshold = threshold
        self._snapshot: Tuple[_IndexedEntity, ...] = ()

    def __len__(self) -> int:
        return len(self._snapshot)

    @property
    def entities(self) -> List[Entity]:
        return [item.entity for item in self._snapshot]

    def rebuild(self, entities: Sequence[Entity]) -> None:
        """Replace the indexed entity set."""
        snapshot = tuple(
            _IndexedEntity(
                entity=entity,
                fields=tuple(
                    default_process(text)
                    for text in (entity.name, entity.entityType, *entity.observations)
                    if text
                ),
            )
            for entity in entities
        )
        self._snapshot = snapshot

    def clear(self) -> None:
        self._snapshot = ()

    def search(self, query: str, threshold: Optional[float] = None) -> List[SearchMatch]:
        """
        Find entities whose name, type or any observation approximately matches.

        Args:
            query: Free-text query
            threshold: Maximum accepted distance, defaults to the mirror's threshold

        Returns:
            Matches ordered by distance, ties kept in index order
        """
        limit = self.threshold if threshold is None else threshold
        normalized = default_process(query or "")
        if not normalized:
            return []

        snapshot = self._snapshot
        matches = []
        for position, item in enumerate(snapshot):
            score = min((field_distance(normalized, text) for text in item.fields), default=1.0)
            if score <= limit:
                matches.append((score, position, item.entity))

        matches.sort(key=lambda match: (match[0], match[1]))
        return [SearchMatch(entity=entity, score=score) for score, _, entity in matches]
