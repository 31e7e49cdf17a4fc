"""Unit tests for inline markup conversion."""

import pytest

from new_papers.helpers.markup import html_to_markdown


@pytest.mark.parametrize(
    "text, expected",
    [
        ("<i>in vivo</i>", "*in vivo*"),
        ("<em>in vitro</em>", "*in vitro*"),
        ("<b>bold</b>", "**bold**"),
        ("Ca<sup>2+</sup>", "Ca^2+^"),
        ("CO<sub>2</sub>", "CO~2~"),
        ("<I>upper</I>", "*upper*"),
        ("<u>underlined</u>", "underlined"),
        ('<mml:math><mml:mi>x</mml:mi></mml:math>', "x"),
        ('<span class="x">kept</span>', '<span class="x">kept</span>'),
        ("x &amp; y", "x &amp; y"),
        ("Samples <LLOQ were excluded (n > 5)", "Samples <LLOQ were excluded (n > 5)"),
        ("<ins>ertion", "<ins>ertion"),
        ("a < b and c > d", "a < b and c > d"),
        ("", ""),
    ],
)
def test_html_to_markdown(text, expected):
    assert html_to_markdown(text) == expected
