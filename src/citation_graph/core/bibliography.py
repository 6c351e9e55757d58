"""
Seed identifiers from a BibTeX/BibLaTeX bibliography.

Each entry contributes its DOI, or its URL when it has no DOI. Entries
with neither are reported but do not stop the import.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import bibtexparser
from bibtexparser.bparser import BibTexParser

logger = logging.getLogger("citation-graph")


@dataclass
class BibliographyImport:
    """
    Result of reading a bibliography.

    Attributes:
        ids: Raw DOI or URL strings, in bibliography order
        missing_keys: Citation keys of entries with neither DOI nor URL
    """

    ids: list[str] = field(default_factory=list)
    missing_keys: list[str] = field(default_factory=list)


def identifiers_from_bibtex(bibtex_src: str) -> BibliographyImport:
    """Collect a DOI or URL from every entry in a BibTeX source string."""
    # BibLaTeX types such as @online are not in the BibTeX standard set
    parser = BibTexParser(common_strings=True, ignore_nonstandard_types=False)
    database = bibtexparser.loads(bibtex_src, parser=parser)
    result = BibliographyImport()

    for entry in database.entries:
        doi = (entry.get("doi") or "").strip()
        url = (entry.get("url") or "").strip()
        if doi:
            result.ids.append(doi)
        elif url:
            result.ids.append(url)
        else:
            result.missing_keys.append(entry.get("ID", "<no key>"))

    if result.missing_keys:
        logger.warning(
            f"These keys didn't have a DOI or URL: {', '.join(result.missing_keys)}; "
            "continuing anyway"
        )
    logger.info(f"Read {len(result.ids)} identifiers from bibliography")
    return result


def load_bibliography(path: Union[str, Path]) -> BibliographyImport:
    """Read a bibliography file and collect its identifiers."""
    text = Path(path).read_text(encoding="utf-8")
    return identifiers_from_bibtex(text)
