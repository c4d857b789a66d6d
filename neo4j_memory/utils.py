import json
import re
from typing import Any, Dict, Hashable, Iterable, List, TypeVar

T = TypeVar("T", bound=Hashable)

# Characters with meaning in the Lucene query syntax used by Neo4j full-text indexes
LUCENE_SPECIAL_CHARACTERS = set('+-&|!(){}[]^"~*?:\\/')
LUCENE_OPERATOR_WORDS = re.compile(r"\b(?:AND|OR|NOT)\b")


def extract_error(error: BaseException) -> str:
    """
    Extract the error message from an exception.

    Args:
        error: The exception to extract information from

    Returns:
        A string containing the error message
    """
    return f"{type(error).__name__}: {str(error)}"


def dict_to_json(data: Any, indent: int = 2) -> str:
    """
    Convert a dictionary (or list of dictionaries) to a JSON string.

    Args:
        data: The data to convert
        indent: Indentation for pretty printing

    Returns:
        A JSON string representation of the data
    """
    return json.dumps(data, default=str, ensure_ascii=False, indent=indent)


def unique_preserving_order(items: Iterable[T]) -> List[T]:
    """Drop repeated items, keeping the first occurrence of each."""
    seen = set()
    unique = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        unique.append(item)
    return unique


def escape_fulltext_query(query: str) -> str:
    """
    Escape Lucene syntax so the query is matched as plain tokens.

    Operator characters are backslash-escaped and the operator words
    AND, OR and NOT are lowercased; the index analyzer lowercases tokens
    anyway, so matching is unchanged.

    Args:
        query: Raw user query

    Returns:
        The query with no Lucene operators left in it
    """
    escaped = "".join(f"\\{char}" if char in LUCENE_SPECIAL_CHARACTERS else char for char in query)
    return LUCENE_OPERATOR_WORDS.sub(lambda match: match.group(0).lower(), escaped)


def record_value(record: Dict[str, Any], key: str, default: Any = None) -> Any:
    """Read a key from a result row, treating a missing key or null as the default."""
    value = record.get(key)
    return default if value is None else value
