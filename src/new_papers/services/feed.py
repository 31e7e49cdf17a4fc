"""
Publication feed: the state behind the publication list.

Owns one refresh cycle (read terms, fetch, classify the outcome) and the
single expanded abstract. Network I/O stays in PubMedClient.
"""

import logging
from enum import Enum

from pydantic import BaseModel

from new_papers.constants import DEFAULT_LOOKBACK_DAYS, DEFAULT_MAX_RESULTS
from new_papers.data_sources.base_client import DataSourceError
from new_papers.data_sources.pubmed import PubMedClient
from new_papers.models.model_pubmed import Publication
from new_papers.services.term_index import TermIndex
from new_papers.services.terms_store import TermsStore

logger = logging.getLogger(__name__)


class FeedStatus(str, Enum):
    NO_TERMS = "no_terms"
    LOADED = "loaded"
    EMPTY = "empty"
    ERROR = "error"


class FeedState(BaseModel):
    """What the list view renders after a refresh."""

    status: FeedStatus
    terms: list[str] = []
    publications: list[Publication] = []
    error_message: str | None = None
    expanded_id: str | None = None


class PublicationFeed:
    """Refreshes the publication list for the stored terms of interest."""

    def __init__(
        self,
        client: PubMedClient,
        store: TermsStore,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> None:
        self.client = client
        self.store = store
        self.lookback_days = lookback_days
        self.max_results = max_results
        self.state = FeedState(status=FeedStatus.EMPTY)

    async def refresh(self) -> FeedState:
        terms = self.store.load()
        if not terms:
            self.state = FeedState(status=FeedStatus.NO_TERMS)
            return self.state

        try:
            publications = await self.client.fetch_recent_publications(
                terms,
                lookback_days=self.lookback_days,
                max_results=self.max_results,
            )
        except DataSourceError as e:
            logger.error("Feed refresh failed: %s", e)
            self.state = FeedState(
                status=FeedStatus.ERROR, terms=terms, error_message=str(e)
            )
            return self.state

        status = FeedStatus.LOADED if publications else FeedStatus.EMPTY
        self.state = FeedState(status=status, terms=terms, publications=publications)
        return self.state

    def toggle(self, publication_id: str) -> str | None:
        """Expand ``publication_id``'s abstract, or collapse it if expanded."""
        if self.state.expanded_id == publication_id:
            self.state.expanded_id = None
        else:
            self.state.expanded_id = publication_id
        return self.state.expanded_id


def suggest(index: TermIndex, prefix: str, limit: int | None = None) -> list[str]:
    """Autocomplete suggestions; a blank prefix never reaches the index."""
    if not prefix.strip():
        return []
    matches = index.search(prefix)
    return matches if limit is None else matches[:limit]
