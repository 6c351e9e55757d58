"""
Identifier resolution.

Turns freeform strings (DOIs, doi.org links, Semantic Scholar URLs or
bare Semantic Scholar ids) into typed PaperIdentifier values.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from .models import PaperIdentifier

logger = logging.getLogger("citation-graph")

# from https://www.crossref.org/blog/dois-and-matching-regular-expressions/
DOI_PATTERN = re.compile(r"(?P<id>10\.\d{4,9}/[-._;()/:A-Z0-9]+)$", re.IGNORECASE)
SEMANTIC_SCHOLAR_URL_PATTERN = re.compile(
    r"^(https?://)?(www\.)?semanticscholar\.org/paper/([^/]+/)?(?P<id>[0-9a-f]+)/?$",
    re.IGNORECASE,
)
NATIVE_ID_PATTERN = re.compile(r"^(?P<id>[0-9a-f]{40})$", re.IGNORECASE)


def resolve_identifier(raw: str) -> Optional[PaperIdentifier]:
    """
    Resolve one raw identifier string.

    Args:
        raw: A DOI (optionally prefixed or as a doi.org URL), a Semantic
             Scholar paper URL, or a 40-character Semantic Scholar id.

    Returns:
        The typed identifier, or None if the string is not recognized.
    """
    raw = raw.strip()
    if not raw:
        return None

    match = DOI_PATTERN.search(raw)
    if match:
        return PaperIdentifier.doi(match.group("id"))

    match = SEMANTIC_SCHOLAR_URL_PATTERN.match(raw)
    if match:
        return PaperIdentifier.native(match.group("id").lower())

    match = NATIVE_ID_PATTERN.match(raw)
    if match:
        return PaperIdentifier.native(match.group("id").lower())

    return None


def resolve_identifiers(raws: Iterable[str]) -> list[PaperIdentifier]:
    """Resolve many identifiers, dropping the ones that are not recognized."""
    resolved = []
    for raw in raws:
        identifier = resolve_identifier(raw)
        if identifier is None:
            logger.warning(f"Unrecognized paper identifier, skipping: {raw!r}")
            continue
        resolved.append(identifier)
    return resolved
