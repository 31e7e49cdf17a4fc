"""Project-wide constants."""

from pathlib import Path

# -- Client defaults --------------------------------------------------------
DEFAULT_TIMEOUT: float = 30.0
DEFAULT_LOOKBACK_DAYS: int = 1
DEFAULT_MAX_RESULTS: int = 200

# -- Paths ------------------------------------------------------------------
_PACKAGE_DIR: Path = Path(__file__).parent
BUNDLED_VOCABULARY: Path = _PACKAGE_DIR / "data" / "mesh_vocabulary.txt"
DEFAULT_TERMS_FILE: Path = Path.home() / ".new_papers" / "terms.json"

# -- PubMed / NCBI ----------------------------------------------------------
NCBI_BASE_URL: str = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
PUBMED_SEARCH_URL: str = f"{NCBI_BASE_URL}/esearch.fcgi"
PUBMED_FETCH_URL: str = f"{NCBI_BASE_URL}/efetch.fcgi"
PUBMED_ARTICLE_URL: str = "https://pubmed.ncbi.nlm.nih.gov"
PUBMED_DATE_FORMAT: str = "%Y/%m/%d"

# -- Record extraction ------------------------------------------------------
XML_CHUNK_SIZE: int = 64 * 1024

# -- Terms of interest ------------------------------------------------------
DEFAULT_MESH_TERMS: tuple[str, ...] = (
    "Hematopoietic Stem Cells",
    "Inflammation",
    "Proteostasis",
    "Hematopoiesis",
    "Clonal Evolution",
)

# -- Autocomplete -----------------------------------------------------------
DEFAULT_SUGGESTION_LIMIT: int = 20
