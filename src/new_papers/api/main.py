"""FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request

from new_papers import __version__
from new_papers.config import get_settings
from new_papers.constants import DEFAULT_SUGGESTION_LIMIT
from new_papers.data_sources.base_client import ClientConfig, DataSourceError
from new_papers.data_sources.pubmed import PubMedClient
from new_papers.data_sources.vocabulary import build_term_index
from new_papers.models.model_pubmed import Publication
from new_papers.services.feed import suggest
from new_papers.services.term_index import TermIndex

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    index, result = build_term_index(get_settings().vocabulary_file)
    if not result.is_complete:
        logger.warning("Serving with an empty term index: %s", result.errors)
    app.state.term_index = index
    app.state.vocabulary_complete = result.is_complete
    app.state.vocabulary_errors = result.errors
    yield


app = FastAPI(
    title="New Papers API",
    description="Recent PubMed publications for MeSH terms of interest",
    version=__version__,
    lifespan=lifespan,
)


def _term_index(request: Request) -> TermIndex:
    return request.app.state.term_index


@app.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Health check endpoint.

    The service stays up when the vocabulary fails to load, but suggestions
    are empty; ``vocabulary_complete`` and ``vocabulary_errors`` report it.
    """
    state = request.app.state
    return {
        "status": "healthy",
        "version": __version__,
        "vocabulary_terms": len(_term_index(request)),
        "vocabulary_complete": state.vocabulary_complete,
        "vocabulary_errors": state.vocabulary_errors,
    }


@app.get("/terms/suggest")
async def suggest_terms(
    request: Request,
    prefix: str = "",
    limit: int = Query(DEFAULT_SUGGESTION_LIMIT, ge=1, le=500),
) -> list[str]:
    """MeSH terms starting with ``prefix``."""
    return suggest(_term_index(request), prefix, limit)


@app.get("/publications")
async def recent_publications(
    term: list[str] = Query(...),
    days: int = Query(1, ge=1, le=365),
) -> list[Publication]:
    """Publications indexed under any ``term`` in the last ``days`` days."""
    settings = get_settings()
    config = ClientConfig(timeout_seconds=settings.request_timeout)
    async with PubMedClient(config, api_key=settings.ncbi_api_key) as client:
        try:
            return await client.fetch_recent_publications(
                term, lookback_days=days, max_results=settings.max_results
            )
        except DataSourceError as e:
            raise HTTPException(status_code=502, detail=str(e))
