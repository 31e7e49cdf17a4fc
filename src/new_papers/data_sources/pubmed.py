"""
PubMed API client.

Three methods:
  1. search                     — Find PMIDs indexed under MeSH terms in a date window
  2. fetch_publications         — Fetch and extract publications for given PMIDs
  3. fetch_recent_publications  — search + fetch_publications in one call
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, timedelta
from typing import Any

from new_papers.constants import (
    DEFAULT_LOOKBACK_DAYS,
    DEFAULT_MAX_RESULTS,
    PUBMED_DATE_FORMAT,
    PUBMED_FETCH_URL,
    PUBMED_SEARCH_URL,
)
from new_papers.data_sources.base_client import (
    BaseClient,
    ClientConfig,
    DataSourceError,
    RequestContext,
)
from new_papers.data_sources.pubmed_xml import extract_async
from new_papers.models.model_pubmed import Publication

logger = logging.getLogger(__name__)


def build_mesh_query(mesh_terms: Sequence[str], start: date, end: date) -> str:
    """Build an esearch term: any of the MeSH terms, published in [start, end]."""
    mesh_query = " OR ".join(f'"{term}"[Mesh]' for term in mesh_terms)
    return (
        f"({mesh_query}) AND "
        f"({start.strftime(PUBMED_DATE_FORMAT)}[PDAT] : "
        f"{end.strftime(PUBMED_DATE_FORMAT)}[PDAT])"
    )


class PubMedClient(BaseClient):
    """Client for querying PubMed/NCBI E-utilities."""

    SEARCH_URL = PUBMED_SEARCH_URL
    FETCH_URL = PUBMED_FETCH_URL

    def __init__(self, config: ClientConfig | None = None, api_key: str = "") -> None:
        super().__init__(config)
        self.api_key = api_key

    @property
    def _source_name(self) -> str:
        return "pubmed"

    def _with_api_key(self, params: dict[str, Any]) -> dict[str, Any]:
        if self.api_key:
            return {**params, "api_key": self.api_key}
        return params

    async def search(
        self,
        mesh_terms: Sequence[str],
        *,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        today: date | None = None,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> list[str]:
        """Return PMIDs of articles under any of ``mesh_terms``, newest first."""
        if not mesh_terms:
            return []

        end = today or date.today()
        start = end - timedelta(days=lookback_days)
        params = self._with_api_key(
            {
                "db": "pubmed",
                "retmode": "json",
                "sort": "pubdate",
                "retmax": max_results,
                "term": build_mesh_query(mesh_terms, start, end),
            }
        )

        data = await self._rest_get(
            self.SEARCH_URL,
            params,
            context=RequestContext(source=self._source_name, method="search"),
        )
        try:
            pmids: list[str] = data["esearchresult"]["idlist"]
        except (KeyError, TypeError) as e:
            raise DataSourceError(
                self._source_name, f"Unexpected esearch response: missing {e}"
            ) from e

        logger.info("PubMed search matched %d PMIDs", len(pmids))
        return pmids

    async def fetch_publications(
        self, pmids: Sequence[str], mesh_terms: Sequence[str] = ()
    ) -> list[Publication]:
        """Fetch records for ``pmids`` and annotate them with matched terms."""
        if not pmids:
            return []

        params = self._with_api_key(
            {
                "db": "pubmed",
                "retmode": "xml",
                "rettype": "abstract",
                "id": ",".join(pmids),
            }
        )
        payload = await self._rest_get_xml(
            self.FETCH_URL,
            params,
            context=RequestContext(source=self._source_name, method="fetch"),
        )
        return await extract_async(payload, mesh_terms)

    async def fetch_recent_publications(
        self,
        mesh_terms: Sequence[str],
        *,
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
        today: date | None = None,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> list[Publication]:
        """Publications indexed under ``mesh_terms`` in the last ``lookback_days``."""
        pmids = await self.search(
            mesh_terms,
            lookback_days=lookback_days,
            today=today,
            max_results=max_results,
        )
        return await self.fetch_publications(pmids, mesh_terms)
