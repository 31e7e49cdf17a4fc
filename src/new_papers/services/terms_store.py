"""
File-backed storage for the user's MeSH terms of interest.

Terms are kept as a JSON list. A missing file means "never configured" and
yields the default terms; an unreadable file is logged and replaced by the
defaults on the next save.
"""

import json
import logging
from pathlib import Path

from new_papers.constants import DEFAULT_MESH_TERMS

logger = logging.getLogger(__name__)


class TermsStore:
    """Load and persist the ordered list of terms of interest."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> list[str]:
        if not self.path.exists():
            return list(DEFAULT_MESH_TERMS)
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable terms file %s: %s", self.path, e)
            return list(DEFAULT_MESH_TERMS)
        if not isinstance(data, list) or not all(isinstance(t, str) for t in data):
            logger.warning("Ignoring malformed terms file %s", self.path)
            return list(DEFAULT_MESH_TERMS)
        return data

    def save(self, terms: list[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(terms, indent=2), encoding="utf-8")

    def add(self, term: str) -> list[str]:
        """Append ``term`` unless it is blank or already stored."""
        terms = self.load()
        term = term.strip()
        if term and term not in terms:
            terms.append(term)
            self.save(terms)
        return terms

    def remove(self, term: str) -> list[str]:
        terms = self.load()
        if term not in terms:
            raise KeyError(term)
        terms.remove(term)
        self.save(terms)
        return terms

    def reset(self) -> list[str]:
        terms = list(DEFAULT_MESH_TERMS)
        self.save(terms)
        return terms
