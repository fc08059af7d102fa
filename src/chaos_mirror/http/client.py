from __future__ import annotations

from typing import Protocol

import requests

from chaos_mirror.http.response import HttpResponse
from chaos_mirror.utils.logging import get_logger

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; ChaosMirror/1.0)"


class HttpClient(Protocol):
    """Protocol for HTTP clients."""

    def get(self, url: str) -> HttpResponse: ...


class RequestsHttpClient:
    """HTTP client using the requests library. Each request is attempted once."""

    def __init__(self, timeout_s: int = 60, user_agent: str = DEFAULT_USER_AGENT):
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self.timeout_s = timeout_s
        self.log = get_logger("chaos_mirror.http")

    def get(self, url: str) -> HttpResponse:
        """Send a GET request; transport errors propagate as requests exceptions."""
        r = self.session.get(url, timeout=self.timeout_s)
        self.log.debug("GET %s -> %s (%d bytes)", url, r.status_code, len(r.content))
        return HttpResponse(url=url, status_code=r.status_code, headers=dict(r.headers), content=r.content)

    def close(self) -> None:
        self.session.close()
