"""
Text helpers for tool output: Productboard descriptions arrive as HTML.
"""
import re
from typing import Optional

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")


def strip_html(html: Optional[str]) -> str:
    """Plain text from an HTML fragment, whitespace collapsed, entities decoded."""
    if not html:
        return ""
    if "<" not in html and "&" not in html:
        return _WHITESPACE.sub(" ", html).strip()
    text = BeautifulSoup(html, "html.parser").get_text(" ")
    return _WHITESPACE.sub(" ", text.replace("\xa0", " ")).strip()


def truncate(text: Optional[str], limit: int = 100) -> str:
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
