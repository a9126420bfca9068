"""Default HTTP transport: a requests session behind the fetch_text capability.

Anything callable as ``fetch_text(url, headers) -> (status_code, body)`` can
stand in for it (tests pass plain functions). Network failures surface as
``requests.RequestException``.
"""
from typing import Callable, Dict, Optional, Tuple

import requests

FetchText = Callable[[str, Dict[str, str]], Tuple[int, str]]

PAGE_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
}
STYLESHEET_HEADERS = {
    'Accept': 'text/css,*/*;q=0.1',
}


class RequestsTransport:
    """fetch_text implementation backed by requests.Session."""

    def __init__(self, timeout: int = 10, user_agent: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers.update({'User-Agent': user_agent})

    def __call__(self, url: str, headers: Optional[Dict[str, str]] = None) -> Tuple[int, str]:
        response = self.session.get(url, headers=headers or {}, timeout=self.timeout)
        return response.status_code, response.text

    def close(self):
        self.session.close()
