"""
Controlled-vocabulary source for the autocomplete index.

Loading never raises: a missing or unreadable vocabulary yields an empty
term list plus an error report, and the index built from it is simply empty.
"""

import logging
from pathlib import Path

from pydantic import BaseModel

from new_papers.constants import BUNDLED_VOCABULARY
from new_papers.services.term_index import TermIndex

logger = logging.getLogger(__name__)


class VocabularyLoadResult(BaseModel):
    """
    Terms read from a vocabulary source, with any load failure.

    Callers check `is_complete` and `errors` to tell an empty vocabulary
    from a failed load.
    """

    source: str
    terms: list[str] = []
    is_complete: bool = True
    errors: list[str] = []


def load_vocabulary(path: Path | None = None) -> VocabularyLoadResult:
    """Read one term per line; blank lines and ``#`` comments are skipped."""
    path = path or BUNDLED_VOCABULARY
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not load vocabulary from %s: %s", path, e)
        return VocabularyLoadResult(
            source=str(path),
            is_complete=False,
            errors=[f"Failed to load vocabulary from {path}: {e}"],
        )

    terms = []
    for line in raw.splitlines():
        term = line.strip()
        if term and not term.startswith("#"):
            terms.append(term)

    logger.debug("Loaded %d vocabulary terms from %s", len(terms), path)
    return VocabularyLoadResult(source=str(path), terms=terms)


def build_term_index(path: Path | None = None) -> tuple[TermIndex, VocabularyLoadResult]:
    """Load a vocabulary and build its index; the index is empty on failure."""
    result = load_vocabulary(path)
    return TermIndex.build(result.terms), result
