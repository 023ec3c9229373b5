from __future__ import annotations

import time
from dataclasses import dataclass

import requests
from requests import exceptions as req_exc

from .urls import normalize_url

DEFAULT_USER_AGENT = "satcat-ingest/0.1 (+https://www.n2yo.com catalog mirror)"

NOT_FOUND_STATUSES = {404, 410}


class FetchError(RuntimeError):
    """The fetch could not complete (transport failure or error status)."""

    def __init__(self, url: str, message: str, *, status_code: int | None = None):
        super().__init__(f"Failed to fetch {url}: {message}")
        self.url = url
        self.status_code = status_code


class NotFoundError(FetchError):
    """The server answered with an explicit not-found status."""


@dataclass(frozen=True)
class FetchResult:
    url: str
    final_url: str
    status_code: int
    headers: dict[str, str]
    fetched_at: float
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class HttpClient:
    """Single-attempt GET over a shared ``requests.Session``.

    Sessions are shared between worker threads; each ``get`` is one request
    with no retry.
    """

    def __init__(
        self,
        session: requests.Session,
        *,
        timeout_s: float = 45,
        user_agent: str | None = DEFAULT_USER_AGENT,
    ) -> None:
        self._session = session
        self._timeout_s = timeout_s
        if user_agent:
            self._session.headers["User-Agent"] = user_agent

    def get(self, url: str) -> FetchResult:
        normalized = normalize_url(url)
        try:
            resp = self._session.get(normalized, timeout=self._timeout_s)
        except req_exc.RequestException as e:
            raise FetchError(normalized, str(e)) from e

        return FetchResult(
            url=normalized,
            final_url=str(resp.url),
            status_code=int(resp.status_code),
            headers={k: str(v) for k, v in resp.headers.items()},
            fetched_at=time.time(),
            body=resp.content,
        )

    def get_ok(self, url: str) -> FetchResult:
        res = self.get(url)
        if res.status_code in NOT_FOUND_STATUSES:
            raise NotFoundError(
                res.url, f"HTTP {res.status_code}", status_code=res.status_code
            )
        if res.status_code >= 400:
            raise FetchError(
                res.url, f"HTTP {res.status_code}", status_code=res.status_code
            )
        return res
