"""
Reduce raw page HTML to a compact form for the code-generation prompt.

Scripts, styles, meta/link tags and inline data URIs are stripped with
regular expressions and whitespace is collapsed. After parsing, any of those
elements the regexes missed are removed from the tree, which then keeps only
the attributes that are useful for building selectors.

Example:
    >>> sanitize_markup('<div data-secret="x" class="y"> <b>Hi</b> </div>')
    '<div class="y"><b>Hi</b></div>'
"""
from __future__ import annotations

import re
from typing import FrozenSet, Pattern

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

SCRIPT_BLOCK_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script\s*>", re.IGNORECASE)
STYLE_BLOCK_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style\s*>", re.IGNORECASE)
META_LINK_RE = re.compile(r"<(meta|link)\s+[^>]*?/?>\s*(?:</\1>)?", re.IGNORECASE)
# Only a string that is a data URI from start to end is removed
DATA_URI_RE = re.compile(r"\Adata:((?:\w+/(?:(?!;).)+)?)((?:;[\w\W]*?[^;])*),(.+)\Z", re.IGNORECASE)
WHITESPACE_RE = re.compile(r"\s+")
INTER_TAG_WHITESPACE_RE = re.compile(r">\s+<")

ALLOWED_ATTRIBUTES: FrozenSet[str] = frozenset({
    "class",
    "id",
    "data-testid",
    "name",
    "rel",
    "type",
    "value",
    "title",
    "href",
    "alt",
})
ALLOWED_ATTRIBUTE_PATTERN: Pattern[str] = re.compile(r"^aria-", re.IGNORECASE)

PARSER = "html.parser"
DROPPED_TAGS = ["script", "style", "meta", "link"]


def strip_markup(html: str) -> str:
    """Apply the regex passes (steps before parsing) to raw HTML."""
    stripped = SCRIPT_BLOCK_RE.sub("", html or "")
    stripped = STYLE_BLOCK_RE.sub("", stripped)
    stripped = META_LINK_RE.sub("", stripped)
    stripped = DATA_URI_RE.sub("", stripped)
    stripped = WHITESPACE_RE.sub(" ", stripped)
    stripped = INTER_TAG_WHITESPACE_RE.sub("><", stripped)
    return stripped.strip()


def is_allowed_attribute(name: str) -> bool:
    """Check one attribute name against the whole allow-list and the aria-* pattern."""
    lowered = name.lower()
    return lowered in ALLOWED_ATTRIBUTES or bool(ALLOWED_ATTRIBUTE_PATTERN.match(lowered))


def drop_elements(soup: BeautifulSoup) -> None:
    """Remove script/style/meta/link elements the regex passes could not match."""
    for tag in soup.find_all(DROPPED_TAGS):
        if not tag.decomposed:
            tag.decompose()


def filter_attributes(soup: BeautifulSoup) -> None:
    """Drop disallowed attributes from every element, in document order."""
    for element in soup.find_all(True):
        if not element.attrs:
            continue
        for name in [attr for attr in element.attrs if not is_allowed_attribute(attr)]:
            del element[name]


def sanitize_markup(html: str) -> str:
    """
    Convert raw page markup into the reduced form sent to the model.

    Malformed markup never raises: the parser's best-effort tree is used,
    and if the parser rejects the document outright the regex-stripped
    text is returned as is.

    Args:
        html: Raw page HTML

    Returns:
        str: Sanitized markup
    """
    stripped = strip_markup(html)
    if not stripped:
        return ""

    try:
        soup = BeautifulSoup(stripped, PARSER)
    except ParserRejectedMarkup:
        return stripped

    drop_elements(soup)
    filter_attributes(soup)
    return str(soup)
