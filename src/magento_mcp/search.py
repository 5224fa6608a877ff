"""Structural search over the REST schema document.

Two query forms are supported:

- keywords: ``"customer order"`` matches any string containing *any* of the
  words, case-insensitively
- regex literals: ``"/customers?/i"`` in the JavaScript-style ``/pattern/flags``
  form, flags drawn from ``gimyus`` (``i`` when none are given)

The tree filter keeps every string leaf that matches and, when an object key
itself matches, the whole value under that key. Everything else is pruned,
so matches come back with their ancestors intact.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .exceptions import InvalidSearchPattern

logger = logging.getLogger("magento-mcp.search")

Predicate = Callable[[str], bool]

_REGEX_LITERAL = re.compile(r"^/(.+)/([gimyus]*)$", re.DOTALL)

# g and u have no Python counterpart worth honouring for a boolean test
_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "g": 0,
    "u": 0,
    "y": 0,
}


@dataclass(frozen=True)
class KeywordQuery:
    words: tuple[str, ...]


@dataclass(frozen=True)
class RegexQuery:
    pattern: str
    flags: str = "i"


SearchQuery = KeywordQuery | RegexQuery


def parse_query(raw_query: str) -> SearchQuery:
    """Classify a raw query string as a regex literal or keywords."""
    query = raw_query.strip()

    match = _REGEX_LITERAL.match(query)
    if match:
        pattern, flags = match.groups()
        return RegexQuery(pattern=pattern, flags=flags or "i")

    words = dict.fromkeys(word for word in query.lower().split() if word)
    return KeywordQuery(words=tuple(words))


def compile_query(query: SearchQuery) -> Predicate:
    """Build the string predicate for a parsed query.

    Raises:
        InvalidSearchPattern: If a regex query does not compile.
    """
    if isinstance(query, KeywordQuery):
        words = query.words

        def keyword_predicate(value: str) -> bool:
            lowered = value.lower()
            return any(word in lowered for word in words)

        return keyword_predicate

    if len(set(query.flags)) != len(query.flags):
        raise InvalidSearchPattern(
            f"Invalid search pattern: /{query.pattern}/{query.flags}",
            errors=[f"Repeated flag in '{query.flags}'"],
            suggestions=["Give each regex flag at most once"],
            context={"pattern": query.pattern, "flags": query.flags},
        )

    re_flags = 0
    for flag in query.flags:
        re_flags |= _FLAG_MAP[flag]

    try:
        compiled = re.compile(query.pattern, re_flags)
    except re.error as e:
        raise InvalidSearchPattern(
            f"Invalid search pattern: /{query.pattern}/{query.flags}",
            errors=[str(e)],
            suggestions=["Fix the regular expression or search with keywords"],
            context={"pattern": query.pattern, "flags": query.flags},
        ) from e

    # Sticky: the match must begin at the start of the string
    if "y" in query.flags:
        return lambda value: compiled.match(value) is not None
    return lambda value: compiled.search(value) is not None


def filter_tree(node: Any, predicate: Predicate) -> Any:
    """Depth-first structural filter.

    Args:
        node: Any JSON value.
        predicate: Match test applied to string leaves and object keys.

    Returns:
        The filtered node, or None when nothing beneath it matched.
    """
    if isinstance(node, dict):
        result = {}
        for key, value in node.items():
            if predicate(key):
                result[key] = value
                continue
            filtered = filter_tree(value, predicate)
            if filtered is not None:
                result[key] = filtered
        return result or None

    if isinstance(node, list):
        result = [
            filtered
            for filtered in (filter_tree(item, predicate) for item in node)
            if filtered is not None
        ]
        return result or None

    if isinstance(node, str) and predicate(node):
        return node

    return None


def search_schema(document: Any, raw_query: str) -> dict[str, Any]:
    """Filter a schema document down to what matches a query.

    Pure function; never raises for bad input.

    Args:
        document: Schema document, expected to carry a top-level ``paths`` object.
        raw_query: Keywords or a ``/pattern/flags`` literal.

    Returns:
        The filtered document, or an empty dict when nothing matched, the
        pattern is invalid, or the document has no ``paths``.
    """
    if not isinstance(document, dict) or not isinstance(document.get("paths"), dict):
        logger.debug("Document has no paths object, nothing to search")
        return {}

    query = parse_query(raw_query)
    try:
        predicate = compile_query(query)
    except InvalidSearchPattern as e:
        logger.warning(f"{e.message}: {e.errors}")
        return {}

    result = filter_tree(document, predicate)
    if not result:
        return {}
    # Keep the paths object so the result is itself a searchable document
    result.setdefault("paths", {})
    return result
