"""Pytest configuration and fixtures."""

import pytest

from new_papers.config import get_settings


# Two records: the first with two authors and a matching MeSH heading, the
# second with no authors at all.
TWO_RECORDS_XML = """\
<?xml version="1.0" ?>
<!DOCTYPE PubmedArticleSet PUBLIC "-//NLM//DTD PubMedArticle, 1st January 2025//EN" "https://dtd.nlm.nih.gov/ncbi/pubmed/out/pubmed_250101.dtd">
<PubmedArticleSet>
  <PubmedArticle>
    <MedlineCitation Status="MEDLINE" Owner="NLM">
      <PMID Version="1">39012345</PMID>
      <Article PubModel="Print-Electronic">
        <Journal>
          <ISSN IssnType="Electronic">1528-0020</ISSN>
          <Title>
            Blood
          </Title>
          <ISOAbbreviation>Blood</ISOAbbreviation>
        </Journal>
        <ArticleTitle>Inflammatory signaling drives <i>TET2</i>-mutant clonal hematopoiesis.</ArticleTitle>
        <Abstract>
          <AbstractText>Chronic inflammation selects for mutant clones.</AbstractText>
        </Abstract>
        <AuthorList CompleteYN="Y">
          <Author ValidYN="Y">
            <LastName>Avagyan</LastName>
            <ForeName>Serine</ForeName>
            <Initials>S</Initials>
          </Author>
          <Author ValidYN="Y">
            <LastName>Zon</LastName>
            <ForeName>Leonard I</ForeName>
            <Initials>LI</Initials>
          </Author>
        </AuthorList>
      </Article>
      <MeshHeadingList>
        <MeshHeading>
          <DescriptorName UI="D007249" MajorTopicYN="N">Chronic Inflammation</DescriptorName>
        </MeshHeading>
        <MeshHeading>
          <DescriptorName UI="D005355" MajorTopicYN="N">Fibrosis</DescriptorName>
        </MeshHeading>
      </MeshHeadingList>
    </MedlineCitation>
  </PubmedArticle>
  <PubmedArticle>
    <MedlineCitation Status="PubMed-not-MEDLINE" Owner="NLM">
      <PMID Version="1">39054321</PMID>
      <Article PubModel="Electronic">
        <Journal>
          <Title>Haematologica</Title>
        </Journal>
        <ArticleTitle>Erratum: an article without authors.</ArticleTitle>
        <Abstract>
          <AbstractText>This record has an abstract but no author list.</AbstractText>
        </Abstract>
      </Article>
      <MeshHeadingList>
        <MeshHeading>
          <DescriptorName UI="D007249">Inflammation</DescriptorName>
        </MeshHeading>
      </MeshHeadingList>
    </MedlineCitation>
  </PubmedArticle>
</PubmedArticleSet>
"""


@pytest.fixture
def two_records_xml() -> bytes:
    """efetch payload with one publishable and one author-less record."""
    return TWO_RECORDS_XML.encode("utf-8")


@pytest.fixture
def sample_vocabulary() -> list[str]:
    """Small MeSH vocabulary for autocomplete tests."""
    return [
        "Hematopoiesis",
        "Hematopoietic Stem Cells",
        "Inflammation",
        "Inflammasomes",
        "Proteostasis",
        "Clonal Evolution",
    ]


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """Point settings at a temporary terms file and clear the settings cache."""
    monkeypatch.setenv("NEW_PAPERS_TERMS_FILE", str(tmp_path / "terms.json"))
    monkeypatch.setenv("NEW_PAPERS_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
