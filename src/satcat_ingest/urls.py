from __future__ import annotations

import re
from urllib.parse import ParseResult, urljoin, urlparse, urlunparse

CATALOG_BASE_URL = "https://www.n2yo.com"
DESCRIPTION_HOST = "nssdc.gsfc.nasa.gov"

DEFAULT_THUMBNAIL_URL_TEMPLATE = (
    "https://db-satnogs.freetls.fastly.net/media/satellites/{norad_id}.png"
)

_TRAILING_DIGITS = re.compile(r"[0-9]*$")


def normalize_url(raw_url: str) -> str:
    """Normalize a URL before fetching.

    - Lowercases scheme + hostname.
    - Strips fragments.
    """

    parsed: ParseResult = urlparse(raw_url)
    parsed = parsed._replace(
        scheme=(parsed.scheme or "").lower(),
        netloc=(parsed.netloc or "").lower(),
        fragment="",
    )
    return urlunparse(parsed)


def detail_page_url(norad_id: int) -> str:
    return f"{CATALOG_BASE_URL}/satellite/?s={norad_id}#results"


def category_page_url(href: str) -> str:
    return urljoin(CATALOG_BASE_URL + "/", href)


def thumbnail_url(
    norad_id: int, template: str = DEFAULT_THUMBNAIL_URL_TEMPLATE
) -> str:
    return template.format(norad_id=norad_id)


def trailing_digits(href: str) -> str:
    match = _TRAILING_DIGITS.search(href or "")
    return match.group(0) if match else ""


def category_id_from_href(href: str) -> int:
    """Parse the category id from the trailing digit run of ``href``.

    A link without trailing digits maps to category 0 rather than being
    rejected.
    """

    try:
        return int(trailing_digits(href))
    except ValueError:
        return 0


def is_description_host(url: str) -> bool:
    return DESCRIPTION_HOST in (urlparse(url).netloc or "").lower()


def safe_filename_piece(text: str, *, max_len: int = 120) -> str:
    text = text.strip()
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"[^A-Za-z0-9._-]+", "-", text)
    text = re.sub(r"-+", "-", text).strip("-.")
    if not text:
        return "image"
    return text[:max_len]


def image_basename(url: str) -> str:
    path = (urlparse(url).path or "").rstrip("/")
    last = path.split("/")[-1] if path else ""
    return safe_filename_piece(last)
