"""Command-line interface for New Papers."""

import asyncio
import json
import logging
from pathlib import Path

import click

from new_papers.config import get_settings
from new_papers.constants import DEFAULT_SUGGESTION_LIMIT
from new_papers.data_sources.base_client import ClientConfig, DataSourceError
from new_papers.data_sources.pubmed import PubMedClient
from new_papers.data_sources.pubmed_xml import extract
from new_papers.data_sources.vocabulary import build_term_index
from new_papers.models.model_pubmed import Publication
from new_papers.services.feed import FeedStatus, PublicationFeed, suggest
from new_papers.services.terms_store import TermsStore


def _store() -> TermsStore:
    return TermsStore(get_settings().terms_file)


def _echo_publication(pub: Publication, show_abstract: bool) -> None:
    click.secho(pub.markdown_title or "(untitled)", bold=True)
    click.echo(f"  {pub.byline}")
    if pub.cleaned_journal:
        click.echo(f"  {pub.cleaned_journal}")
    if pub.matched_terms:
        click.echo(f"  Terms: {', '.join(pub.matched_terms)}")
    else:
        click.echo("  Related content (hierarchical match)")
    if pub.url:
        click.echo(f"  {pub.url}")
    if show_abstract and pub.has_abstract:
        click.echo(
            click.wrap_text(
                pub.markdown_abstract, initial_indent="    ", subsequent_indent="    "
            )
        )
    click.echo()


@click.group()
@click.version_option(package_name="new-papers")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """New Papers: fresh PubMed publications for your MeSH terms."""
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


@main.command()
@click.option("-d", "--days", type=click.IntRange(min=1), help="Look back this many days")
@click.option(
    "-n", "--max-results", type=click.IntRange(min=1), help="Maximum number of articles"
)
@click.option("-a", "--abstracts", is_flag=True, help="Show abstracts")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of text")
def fetch(days: int | None, max_results: int | None, abstracts: bool, as_json: bool):
    """Fetch recent publications for the configured terms."""
    settings = get_settings()
    if days is None:
        days = settings.lookback_days
    if max_results is None:
        max_results = settings.max_results

    async def _run():
        config = ClientConfig(timeout_seconds=settings.request_timeout)
        async with PubMedClient(config, api_key=settings.ncbi_api_key) as client:
            feed = PublicationFeed(
                client,
                _store(),
                lookback_days=days,
                max_results=max_results,
            )
            return await feed.refresh()

    state = asyncio.run(_run())

    if state.status == FeedStatus.NO_TERMS:
        click.echo("No MeSH terms selected")
        click.echo("Add terms with `new-papers terms add TERM` to see publications")
        return
    if state.status == FeedStatus.ERROR:
        raise click.ClickException(state.error_message or "fetch failed")

    if as_json:
        click.echo(
            json.dumps([p.model_dump() for p in state.publications], indent=2)
        )
        return
    if state.status == FeedStatus.EMPTY:
        click.echo(
            "No publications found for the selected MeSH terms in the last "
            f"{days} day(s)."
        )
        return
    for pub in state.publications:
        _echo_publication(pub, abstracts)


@main.group()
def terms():
    """Manage the MeSH terms of interest."""
    pass


@terms.command("list")
def terms_list():
    """Show the current terms."""
    for term in _store().load():
        click.echo(term)


@terms.command("add")
@click.argument("term")
def terms_add(term: str):
    """Add a term."""
    if not term.strip():
        raise click.BadParameter("term must not be blank")
    _store().add(term)
    click.echo(f"Added: {term.strip()}")


@terms.command("remove")
@click.argument("term")
def terms_remove(term: str):
    """Remove a term."""
    try:
        _store().remove(term)
    except KeyError:
        raise click.ClickException(f"Not a configured term: {term}")
    click.echo(f"Removed: {term}")


@terms.command("reset")
def terms_reset():
    """Restore the default terms."""
    for term in _store().reset():
        click.echo(term)


@main.command("suggest")
@click.argument("prefix")
@click.option(
    "-l",
    "--limit",
    default=DEFAULT_SUGGESTION_LIMIT,
    show_default=True,
    help="Maximum number of suggestions",
)
@click.option(
    "--vocabulary",
    type=click.Path(path_type=Path),
    help="Vocabulary file, one term per line (default: bundled MeSH list)",
)
def suggest_cmd(prefix: str, limit: int, vocabulary: Path | None):
    """Suggest MeSH terms starting with PREFIX."""
    index, result = build_term_index(vocabulary or get_settings().vocabulary_file)
    for error in result.errors:
        click.secho(f"Warning: {error}", fg="yellow", err=True)
    for term in suggest(index, prefix, limit):
        click.echo(term)


@main.command()
@click.argument("xml_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-t", "--term", "terms_", multiple=True, help="Term of interest (repeatable)")
def parse(xml_file: Path, terms_: tuple[str, ...]):
    """Extract publications from a saved efetch XML file."""
    with xml_file.open("rb") as fh:
        try:
            publications = extract(fh, terms_ or _store().load())
        except DataSourceError as e:
            raise click.ClickException(str(e))
    click.echo(json.dumps([p.model_dump() for p in publications], indent=2))


if __name__ == "__main__":
    main()
