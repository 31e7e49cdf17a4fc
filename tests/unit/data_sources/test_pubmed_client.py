"""Unit tests for PubMedClient."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from new_papers.data_sources.base_client import DataSourceError, MarkupError
from new_papers.data_sources.pubmed import PubMedClient, build_mesh_query


def test_build_mesh_query():
    query = build_mesh_query(
        ["Inflammation", "Hematopoiesis"], date(2024, 12, 31), date(2025, 1, 1)
    )

    assert query == (
        '("Inflammation"[Mesh] OR "Hematopoiesis"[Mesh]) AND '
        "(2024/12/31[PDAT] : 2025/01/01[PDAT])"
    )


@pytest.mark.asyncio
class TestSearch:
    """Tests for PubMedClient.search."""

    async def test_search_params_and_idlist(self):
        client = PubMedClient()
        client._rest_get = AsyncMock(
            return_value={"esearchresult": {"count": "2", "idlist": ["2", "1"]}}
        )

        result = await client.search(
            ["Proteostasis"], lookback_days=1, today=date(2025, 3, 2), max_results=50
        )

        assert result == ["2", "1"]
        url, params = client._rest_get.call_args.args
        assert url == client.SEARCH_URL
        assert params == {
            "db": "pubmed",
            "retmode": "json",
            "sort": "pubdate",
            "retmax": 50,
            "term": '("Proteostasis"[Mesh]) AND (2025/03/01[PDAT] : 2025/03/02[PDAT])',
        }

    async def test_api_key_is_sent_when_configured(self):
        client = PubMedClient(api_key="secret")
        client._rest_get = AsyncMock(return_value={"esearchresult": {"idlist": []}})

        await client.search(["Aging"], today=date(2025, 1, 2))

        _, params = client._rest_get.call_args.args
        assert params["api_key"] == "secret"

    async def test_empty_terms_skip_request(self):
        client = PubMedClient()
        client._rest_get = AsyncMock()

        assert await client.search([]) == []
        client._rest_get.assert_not_called()

    async def test_unexpected_response_raises(self):
        client = PubMedClient()
        client._rest_get = AsyncMock(return_value={"error": "bad query"})

        with pytest.raises(DataSourceError) as exc_info:
            await client.search(["Aging"])

        assert exc_info.value.source == "pubmed"
        assert "esearchresult" in str(exc_info.value)


@pytest.mark.asyncio
class TestFetchPublications:
    """Tests for PubMedClient.fetch_publications."""

    async def test_fetch_publications(self, two_records_xml):
        client = PubMedClient()
        client._rest_get_xml = AsyncMock(return_value=two_records_xml)

        result = await client.fetch_publications(
            ["39012345", "39054321"], ["Inflammation"]
        )

        url, params = client._rest_get_xml.call_args.args
        assert url == client.FETCH_URL
        assert params == {
            "db": "pubmed",
            "retmode": "xml",
            "rettype": "abstract",
            "id": "39012345,39054321",
        }
        assert [p.id for p in result] == ["39012345"]
        assert result[0].matched_terms == ["Inflammation"]

    async def test_empty_pmids_skip_request(self):
        client = PubMedClient()
        client._rest_get_xml = AsyncMock()

        assert await client.fetch_publications([]) == []
        client._rest_get_xml.assert_not_called()

    async def test_malformed_payload_raises_markup_error(self):
        client = PubMedClient()
        client._rest_get_xml = AsyncMock(return_value=b"<PubmedArticleSet><Pubmed")

        with pytest.raises(MarkupError):
            await client.fetch_publications(["1"])

    async def test_fetch_recent_publications_chains_search_and_fetch(
        self, two_records_xml
    ):
        client = PubMedClient()
        client._rest_get = AsyncMock(
            return_value={"esearchresult": {"idlist": ["39012345", "39054321"]}}
        )
        client._rest_get_xml = AsyncMock(return_value=two_records_xml)

        result = await client.fetch_recent_publications(
            ["Inflammation"], today=date(2025, 1, 2)
        )

        assert len(result) == 1
        assert result[0].first_author.display_name == "Avagyan S"
        assert result[0].last_author.display_name == "Zon LI"

    async def test_no_search_hits_skip_fetch(self):
        client = PubMedClient()
        client._rest_get = AsyncMock(return_value={"esearchresult": {"idlist": []}})
        client._rest_get_xml = AsyncMock()

        assert await client.fetch_recent_publications(["Aging"]) == []
        client._rest_get_xml.assert_not_called()
