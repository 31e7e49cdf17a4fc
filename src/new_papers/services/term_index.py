"""
Prefix-search index over a controlled vocabulary (MeSH autocomplete).

The index is a character trie keyed on the lower-cased term. Every node
keeps the sorted, de-duplicated original-case terms that share the node's
prefix, so ``search`` is a walk of ``len(prefix)`` steps followed by a copy
of the node's term list.
"""

from __future__ import annotations

import logging
from bisect import bisect_left
from collections.abc import Iterable

logger = logging.getLogger(__name__)


class _TrieNode:
    __slots__ = ("children", "terms")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        self.terms: list[str] = []  # kept sorted

    def add_term(self, term: str) -> bool:
        """Insert ``term`` into the sorted list; False if already present."""
        pos = bisect_left(self.terms, term)
        if pos < len(self.terms) and self.terms[pos] == term:
            return False
        self.terms.insert(pos, term)
        return True


class TermIndex:
    """Autocomplete index mapping every prefix of every term to its terms.

    Build it once with :meth:`build` and share the instance; it is never
    mutated after construction, so concurrent ``search`` calls need no
    locking. Reloading a vocabulary means building a new instance.
    """

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._terms: set[str] = set()

    @classmethod
    def build(cls, vocabulary: Iterable[str]) -> TermIndex:
        index = cls()
        for term in vocabulary:
            index.insert(term)
        logger.debug("Built term index with %d terms", len(index))
        return index

    def insert(self, term: str) -> None:
        """Associate each prefix of ``term.lower()`` with ``term``.

        Inserting a term that is already indexed is a no-op.
        """
        if not term or term in self._terms:
            return
        self._terms.add(term)
        node = self._root
        for char in term.lower():
            node = node.children.setdefault(char, _TrieNode())
            node.add_term(term)

    def search(self, prefix: str) -> list[str]:
        """Return the terms whose lower-cased form starts with ``prefix``.

        Results are sorted ascending and contain no duplicates. An empty
        prefix, or one no term starts with, returns an empty list.
        """
        if not prefix:
            return []
        node = self._root
        for char in prefix.lower():
            node = node.children.get(char)
            if node is None:
                return []
        return list(node.terms)

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, term: object) -> bool:
        return term in self._terms

    def __repr__(self) -> str:
        return f"TermIndex(terms={len(self)})"
