"""
Pydantic models for PubMed publications.

These are the data contracts between the record extractor and the
presentation layers (CLI, API). Callers receive these models - they never
see raw PubMed XML.
"""

from pydantic import BaseModel, Field

from new_papers.constants import PUBMED_ARTICLE_URL
from new_papers.helpers.markup import html_to_markdown


class Author(BaseModel):
    """One entry of an article's author list."""

    last_name: str = ""
    fore_name: str = ""
    initials: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.last_name} {self.initials}"

    @property
    def is_empty(self) -> bool:
        return not (self.last_name or self.fore_name or self.initials)


class Publication(BaseModel):
    """A single PubMed article as shown in the publication list."""

    id: str = ""  # PMID (e.g. "38472913")
    title: str = ""  # may contain inline markup (<i>, <sup>, ...)
    abstract: str = ""  # may contain inline markup; empty if missing
    journal: str = ""
    first_author: Author = Field(default_factory=Author)
    last_author: Author = Field(default_factory=Author)
    matched_terms: list[str] = []  # caller's terms found in the MeSH headings

    @property
    def url(self) -> str | None:
        if not self.id:
            return None
        return f"{PUBMED_ARTICLE_URL}/{self.id}"

    @property
    def has_abstract(self) -> bool:
        return bool(self.abstract.strip())

    @property
    def cleaned_journal(self) -> str:
        return self.journal.strip()

    @property
    def has_multiple_authors(self) -> bool:
        """True when the byline should read "First ... Last"."""
        last = self.last_author.display_name
        return bool(last.strip()) and last != self.first_author.display_name

    @property
    def byline(self) -> str:
        if self.has_multiple_authors:
            return (
                f"{self.first_author.display_name} ... "
                f"{self.last_author.display_name}"
            )
        return self.first_author.display_name

    @property
    def markdown_title(self) -> str:
        return html_to_markdown(self.title)

    @property
    def markdown_abstract(self) -> str:
        return html_to_markdown(self.abstract)
