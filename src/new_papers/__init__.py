"""New Papers: recent PubMed publications for your MeSH terms."""

__version__ = "0.1.0"
