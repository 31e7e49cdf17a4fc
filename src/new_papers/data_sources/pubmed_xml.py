"""
Streaming extraction of publications from PubMed efetch XML.

Two layers:

  1. iter_events      — lazily turn an XML byte payload into open / text /
                        close events, fed chunk by chunk to an incremental
                        SAX parser.
  2. RecordExtractor  — a single-pass state machine over those events that
                        assembles Publication records and annotates each one
                        with the caller's terms of interest found among its
                        MeSH headings.
"""

from __future__ import annotations

import asyncio
import logging
import xml.sax
import xml.sax.handler
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import IO, Union
from xml.sax.saxutils import quoteattr

from new_papers.constants import XML_CHUNK_SIZE
from new_papers.data_sources.base_client import MarkupError
from new_papers.models.model_pubmed import Author, Publication

logger = logging.getLogger(__name__)

MarkupSource = Union[bytes, bytearray, str, IO[bytes], Iterable[bytes]]

# PubMed DTD element names
RECORD = "PubmedArticle"
PMID = "PMID"
AUTHOR = "Author"
LAST_NAME = "LastName"
FORE_NAME = "ForeName"
INITIALS = "Initials"
COLLECTIVE_NAME = "CollectiveName"
DESCRIPTOR_NAME = "DescriptorName"
MESH_HEADING_LIST = "MeshHeadingList"
ARTICLE_TITLE = "ArticleTitle"
ABSTRACT = "Abstract"  # not <OtherAbstract> (translations, plain-language summaries)
ABSTRACT_TEXT = "AbstractText"
JOURNAL = "Journal"
JOURNAL_TITLE = "Title"  # only when nested directly inside <Journal>


# ---------------------------------------------------------------------------
# Markup events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ElementOpen:
    name: str
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Text:
    content: str


@dataclass(frozen=True, slots=True)
class ElementClose:
    name: str


MarkupEvent = Union[ElementOpen, Text, ElementClose]


class _EventCollector(xml.sax.handler.ContentHandler):
    """SAX handler that buffers events until the generator drains them."""

    def __init__(self) -> None:
        super().__init__()
        self.events: list[MarkupEvent] = []

    def startElement(self, name, attrs):
        self.events.append(ElementOpen(name, dict(attrs.items())))

    def characters(self, content):
        self.events.append(Text(content))

    def endElement(self, name):
        self.events.append(ElementClose(name))

    def drain(self) -> list[MarkupEvent]:
        events, self.events = self.events, []
        return events


def _chunks(source: MarkupSource, chunk_size: int) -> Iterator[bytes]:
    if isinstance(source, str):
        source = source.encode("utf-8")
    if isinstance(source, (bytes, bytearray)):
        for start in range(0, len(source), chunk_size):
            yield bytes(source[start : start + chunk_size])
    elif hasattr(source, "read"):
        while chunk := source.read(chunk_size):
            yield chunk
    else:
        yield from source


def iter_events(
    source: MarkupSource, chunk_size: int = XML_CHUNK_SIZE
) -> Iterator[MarkupEvent]:
    """Yield markup events from ``source`` in document order.

    ``source`` may be bytes, a str, a binary file object or any iterable of
    byte chunks. Text content can be split across several ``Text`` events.

    Raises
    ------
    MarkupError
        When the payload is malformed or ends before the root element closes.
    """
    collector = _EventCollector()
    parser = xml.sax.make_parser()
    parser.setFeature(xml.sax.handler.feature_namespaces, False)
    parser.setFeature(xml.sax.handler.feature_external_ges, False)
    parser.setContentHandler(collector)

    error: MarkupError | None = None
    fed = False
    try:
        for chunk in _chunks(source, chunk_size):
            fed = True
            parser.feed(chunk)
            yield from collector.drain()
        if not fed:
            raise MarkupError("Failed to parse XML: no element found", line=1, column=0)
        parser.close()
    except xml.sax.SAXParseException as e:
        error = MarkupError(
            f"Failed to parse XML: {e.getMessage()}",
            line=e.getLineNumber(),
            column=e.getColumnNumber(),
        )
        error.__cause__ = e

    # events decoded before the failure are still delivered
    yield from collector.drain()
    if error is not None:
        raise error


# ---------------------------------------------------------------------------
# Extractor state machine
# ---------------------------------------------------------------------------


@dataclass
class ExtractorState:
    """Working state of one extraction pass."""

    terms_of_interest: list[str]
    element_stack: list[str] = field(default_factory=list)
    current_record: Publication | None = None
    record_id_complete: bool = False
    current_author_list: list[Author] = field(default_factory=list)
    current_author: Author | None = None
    current_subject_headings: list[str] = field(default_factory=list)
    current_heading: str = ""

    # long-form fields: flag + raw accumulator
    in_title: bool = False
    title_raw: str = ""
    in_abstract: bool = False
    abstract_raw: str = ""
    abstract_label: str = ""
    in_journal_title: bool = False
    journal_title_raw: str = ""

    publications: list[Publication] = field(default_factory=list)

    @property
    def current_element_name(self) -> str:
        return self.element_stack[-1] if self.element_stack else ""

    @property
    def in_long_form(self) -> bool:
        return self.in_abstract or self.in_title or self.in_journal_title

    def append_long_form(self, text: str) -> None:
        if self.in_abstract:
            self.abstract_raw += text
        elif self.in_title:
            self.title_raw += text
        elif self.in_journal_title:
            self.journal_title_raw += text


def match_terms(terms_of_interest: Iterable[str], headings: Iterable[str]) -> list[str]:
    """Return the terms contained (case-insensitively) in any heading.

    Matching is substring containment of the term inside the heading, never
    the reverse. Output keeps the order of ``terms_of_interest`` and drops
    duplicates and blank terms.
    """
    folded = [heading.casefold() for heading in headings]
    matched: list[str] = []
    for term in terms_of_interest:
        needle = term.casefold()
        if not needle or term in matched:
            continue
        if any(needle in heading for heading in folded):
            matched.append(term)
    return matched


class RecordExtractor:
    """Assemble Publication records from a stream of markup events.

    The extractor is a pure transition function over ``ExtractorState``;
    it keeps no state between ``extract`` calls and can be reused.
    """

    def __init__(self, terms_of_interest: Iterable[str] = ()) -> None:
        self.terms_of_interest = list(terms_of_interest)

    def extract(self, source: MarkupSource) -> list[Publication]:
        """Parse ``source`` and return its publications in document order.

        Records without any author are dropped. A MarkupError from the
        decoder propagates and any unclosed record is discarded.
        """
        state = ExtractorState(terms_of_interest=self.terms_of_interest)
        for event in iter_events(source):
            self.step(state, event)
        logger.debug("Extracted %d publications", len(state.publications))
        return state.publications

    def step(self, state: ExtractorState, event: MarkupEvent) -> None:
        if isinstance(event, ElementOpen):
            self._on_open(state, event)
        elif isinstance(event, Text):
            self._on_text(state, event.content)
        elif isinstance(event, ElementClose):
            self._on_close(state, event.name)
        else:
            raise TypeError(f"Unknown markup event: {event!r}")

    # -- element-open --------------------------------------------------------

    def _on_open(self, state: ExtractorState, event: ElementOpen) -> None:
        name = event.name
        parent = state.current_element_name
        state.element_stack.append(name)

        if state.in_long_form:
            # Inline markup (<i>, <sup>, ...) inside a title or abstract
            attrs = "".join(
                f" {key}={quoteattr(value)}" for key, value in event.attributes.items()
            )
            state.append_long_form(f"<{name}{attrs}>")
            return

        if name == RECORD:
            state.current_record = Publication()
            state.record_id_complete = False
            state.current_subject_headings = []
            state.current_author_list = []
            state.current_author = None
        elif name == AUTHOR:
            state.current_author = Author()
        elif name == DESCRIPTOR_NAME:
            state.current_heading = ""
        elif name == ARTICLE_TITLE:
            state.in_title = True
            state.title_raw = ""
        elif name == ABSTRACT_TEXT and parent == ABSTRACT:
            state.in_abstract = True
            state.abstract_raw = ""
            state.abstract_label = event.attributes.get("Label", "")
        elif name == JOURNAL_TITLE and parent == JOURNAL:
            state.in_journal_title = True
            state.journal_title_raw = ""

    # -- text ----------------------------------------------------------------

    def _on_text(self, state: ExtractorState, content: str) -> None:
        if state.in_long_form:
            state.append_long_form(content)
            return

        text = content.strip()
        if not text:
            return

        element = state.current_element_name
        record = state.current_record
        author = state.current_author

        if element == PMID:
            if record is not None and not state.record_id_complete:
                record.id += text
        elif element == LAST_NAME or element == COLLECTIVE_NAME:
            if author is not None:
                author.last_name += text
        elif element == FORE_NAME:
            if author is not None:
                author.fore_name += text
        elif element == INITIALS:
            if author is not None:
                author.initials += text
        elif element == DESCRIPTOR_NAME:
            state.current_heading += text

    # -- element-close -------------------------------------------------------

    def _on_close(self, state: ExtractorState, name: str) -> None:
        if state.element_stack:
            state.element_stack.pop()
        record = state.current_record

        if state.in_abstract and name == ABSTRACT_TEXT:
            state.in_abstract = False
            if record is not None:
                self._add_abstract_section(record, state.abstract_raw, state.abstract_label)
            return
        if state.in_title and name == ARTICLE_TITLE:
            state.in_title = False
            if record is not None:
                record.title = state.title_raw
            return
        if state.in_journal_title and name == JOURNAL_TITLE:
            state.in_journal_title = False
            if record is not None:
                record.journal = state.journal_title_raw.strip()
            return
        if state.in_long_form:
            state.append_long_form(f"</{name}>")
            return

        if name == RECORD:
            if record is not None and state.current_author_list:
                authors = state.current_author_list
                record.first_author = authors[0]
                record.last_author = authors[0] if len(authors) == 1 else authors[-1]
                state.publications.append(record)
            elif record is not None:
                logger.debug("Dropping record %r: no authors", record.id)
            state.current_record = None
            state.current_author_list = []
            state.current_author = None
        elif name == AUTHOR:
            if state.current_author is not None:
                state.current_author_list.append(state.current_author)
            state.current_author = None
        elif name == PMID:
            if record is not None and record.id:
                state.record_id_complete = True
        elif name == DESCRIPTOR_NAME:
            state.current_subject_headings.append(state.current_heading)
            state.current_heading = ""
        elif name == MESH_HEADING_LIST:
            if record is not None:
                record.matched_terms = match_terms(
                    state.terms_of_interest, state.current_subject_headings
                )

    @staticmethod
    def _add_abstract_section(record: Publication, raw: str, label: str) -> None:
        section = f"{label}: {raw}" if label else raw
        if not section:
            return
        record.abstract = f"{record.abstract} {section}" if record.abstract else section


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def extract(source: MarkupSource, terms_of_interest: Iterable[str] = ()) -> list[Publication]:
    """Extract publications from a PubMed XML payload in one pass."""
    return RecordExtractor(terms_of_interest).extract(source)


async def extract_async(
    source: MarkupSource, terms_of_interest: Iterable[str] = ()
) -> list[Publication]:
    """Run :func:`extract` in a worker thread and await the batch."""
    return await asyncio.to_thread(extract, source, list(terms_of_interest))
