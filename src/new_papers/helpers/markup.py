"""Inline markup to Markdown conversion for titles and abstracts."""

import re

# Extracted text is already entity-decoded, so only PubMed's own inline tags
# are rewritten; anything else that looks like a tag ("<LLOQ") is text.
_REPLACEMENTS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"</?(?:i|em)>", re.IGNORECASE), "*"),
    (re.compile(r"</?(?:b|strong)>", re.IGNORECASE), "**"),
    (re.compile(r"</?sup>", re.IGNORECASE), "^"),
    (re.compile(r"</?sub>", re.IGNORECASE), "~"),
    (re.compile(r"</?u>", re.IGNORECASE), ""),
    (re.compile(r"</?(?:math|mml:\w+)(?:\s[^<>]*)?/?>"), ""),
]


def html_to_markdown(text: str) -> str:
    """Convert PubMed inline markup into Markdown.

    Emphasis, bold, superscript and subscript are mapped to their Markdown
    markers; underline and MathML tags are dropped and their content kept.
    """
    for pattern, marker in _REPLACEMENTS:
        text = pattern.sub(marker, text)
    return text
