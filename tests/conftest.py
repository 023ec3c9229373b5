from __future__ import annotations

import threading
from dataclasses import dataclass, field

import pytest
import requests

from satcat_ingest.http_client import HttpClient


@dataclass
class FakeResponse:
    url: str
    status_code: int = 200
    content: bytes = b""
    headers: dict = field(default_factory=dict)


class FakeSession:
    """Stands in for ``requests.Session``; routes are keyed by exact URL.

    A route value is ``(status, body)`` or an exception instance to raise.
    Unknown URLs answer 404.
    """

    def __init__(self, routes: dict | None = None) -> None:
        self.routes = dict(routes or {})
        self.headers: dict[str, str] = {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def get(self, url, timeout=None, headers=None):
        with self._lock:
            self.calls.append(url)
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return FakeResponse(url=url, status_code=404, content=b"not found")
        status, body = route
        if isinstance(body, str):
            body = body.encode("utf-8")
        return FakeResponse(
            url=url, status_code=status, content=body, headers={"Content-Type": "text/html"}
        )


DETAIL_25544 = "https://www.n2yo.com/satellite/?s=25544"
CATEGORY_4 = "https://www.n2yo.com/satellites/?c=4"
CATEGORY_11 = "https://www.n2yo.com/satellites/?c=11"
NSSDC_25544 = "https://nssdc.gsfc.nasa.gov/nmc/spacecraft/display.action?id=1998-067A"
GALLERY_IMG = "https://nssdc.gsfc.nasa.gov/planetary/image/iss.jpg"
THUMB_25544 = "https://db-satnogs.freetls.fastly.net/media/satellites/25544.png"

DETAIL_HTML = """
<html><body>
<table><tbody>
  <tr><td>NORAD ID</td><td>25544</td></tr>
  <tr><td>Source</td><td><a href="https://en.wikipedia.org/wiki/ISS">wiki</a></td></tr>
  <tr><td>NSSDC</td><td><a href="https://nssdc.gsfc.nasa.gov/nmc/spacecraft/display.action?id=1998-067A">1998-067A</a></td></tr>
</tbody></table>
<div class="arrow"><a href="/satellites/?c=4">Brightest 4</a></div>
<div class="arrow"><a href="/satellites/?c=11">Amateur radio 11</a></div>
</body></html>
"""


def category_html(title: str, description: str) -> str:
    return (
        "<html><body>"
        f"<h1>{title}</h1>"
        "<table><tr><td>\n"
        f"{title}\n  \n"
        f"{description}\n"
        "Satellites in this category\n"
        "</td></tr></table>"
        "</body></html>"
    )


DESCRIPTION_HTML = """
<html><body>
<div class="urone">
  <p>The International Space Station is a habitable satellite.</p>
  <p>   </p>
  <p>It was launched in 1998.</p>
</div>
<div class="urtwo"><img src="/planetary/image/iss.jpg"></div>
</body></html>
"""


def iss_routes() -> dict:
    return {
        DETAIL_25544: (200, DETAIL_HTML),
        CATEGORY_4: (200, category_html("Brightest", "The brightest objects.")),
        CATEGORY_11: (200, category_html("Amateur radio", "Ham radio satellites.")),
        NSSDC_25544: (200, DESCRIPTION_HTML),
        GALLERY_IMG: (200, b"\xff\xd8jpeg-bytes"),
        THUMB_25544: (200, b"\x89PNGthumb"),
    }


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession(iss_routes())


@pytest.fixture
def http(fake_session: FakeSession) -> HttpClient:
    return HttpClient(fake_session, timeout_s=5)  # type: ignore[arg-type]


@pytest.fixture
def transport_error() -> Exception:
    return requests.ConnectionError("connection refused")
