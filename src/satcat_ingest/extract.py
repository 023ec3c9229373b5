from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from .urls import category_id_from_href, is_description_host, trailing_digits

CATEGORY_LINK_SELECTOR = ".arrow a"
DESCRIPTION_LINK_SELECTOR = "tbody a"
PARAGRAPH_SELECTOR = ".urone p"
GALLERY_IMAGE_SELECTOR = ".urtwo img"

_LEADING_WHITESPACE = re.compile(r"\s*")


@dataclass(frozen=True)
class CategoryRef:
    url: str
    raw_id_text: str
    category_id: int


@dataclass(frozen=True)
class MainPage:
    category_refs: list[CategoryRef] = field(default_factory=list)
    description_page_url: str | None = None


@dataclass(frozen=True)
class DescriptionPage:
    paragraphs: list[str] = field(default_factory=list)
    image_urls: list[str] = field(default_factory=list)

    @property
    def description(self) -> str:
        return "\n".join(self.paragraphs)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _attr_text(val: object) -> str:
    if isinstance(val, list):
        if not val:
            return ""
        return str(val[0])
    return str(val or "")


def extract_main(html: str, *, page_url: str = "") -> MainPage:
    """Pull category links and the NSSDC description link from a detail page."""

    soup = _soup(html)

    refs: list[CategoryRef] = []
    for a in soup.select(CATEGORY_LINK_SELECTOR):
        href = _attr_text(a.get("href")).strip()
        refs.append(
            CategoryRef(
                url=href,
                raw_id_text=trailing_digits(href),
                category_id=category_id_from_href(href),
            )
        )

    description_url = None
    for a in soup.select(DESCRIPTION_LINK_SELECTOR):
        href = _attr_text(a.get("href")).strip()
        if not href:
            continue
        abs_url = urljoin(page_url, href) if page_url else href
        if is_description_host(abs_url):
            description_url = abs_url
            break

    return MainPage(category_refs=refs, description_page_url=description_url)


def _occurrences(text: str, needle: str):
    pos = text.find(needle)
    while pos >= 0:
        yield pos
        pos = text.find(needle, pos + 1)


def extract_category_page(html: str) -> str:
    """Return the description line that follows the page heading.

    The ``<h1>`` text is looked up verbatim in the rendered table text. Only
    occurrences followed by a line terminator somewhere after them count; of
    those, the last one that starts a line wins, else the first one anywhere.
    The description is the first line after the heading and any whitespace,
    line terminator included. When no occurrence qualifies, the table text is
    returned unchanged.
    """

    soup = _soup(html)
    table_text = "".join(t.get_text() for t in soup.select("table"))
    heading = "".join(h.get_text() for h in soup.select("h1"))
    if not heading:
        return table_text

    candidates = [
        p
        for p in _occurrences(table_text, heading)
        if table_text.find("\n", p + len(heading)) >= 0
    ]
    if not candidates:
        return table_text
    line_starts = [p for p in candidates if p == 0 or table_text[p - 1] == "\n"]
    start = line_starts[-1] if line_starts else candidates[0]

    pos = _LEADING_WHITESPACE.match(table_text, start + len(heading)).end()
    end = table_text.find("\n", pos)
    if end >= 0:
        return table_text[pos : end + 1]
    # Only whitespace lines remain; the last newline of the run is the line.
    return "\n"


def extract_description_page(html: str, *, page_url: str = "") -> DescriptionPage:
    soup = _soup(html)

    paragraphs: list[str] = []
    for p in soup.select(PARAGRAPH_SELECTOR):
        text = p.get_text().strip()
        if text:
            paragraphs.append(text)

    image_urls: list[str] = []
    for img in soup.select(GALLERY_IMAGE_SELECTOR):
        src = _attr_text(img.get("src")).strip()
        if not src:
            continue
        image_urls.append(urljoin(page_url, src) if page_url else src)

    return DescriptionPage(paragraphs=paragraphs, image_urls=image_urls)
