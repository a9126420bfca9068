"""In-memory stand-ins for the fetch_text capability."""
import threading

import requests


class FakeTransport:
    """fetch_text that serves canned responses.

    ``pages`` maps URL -> body (status 200), (status, body), or an exception
    instance to raise.
    """

    def __init__(self, pages):
        self.pages = dict(pages)
        self.requests = []
        self._lock = threading.Lock()

    def __call__(self, url, headers):
        with self._lock:
            self.requests.append((url, dict(headers)))
        if url not in self.pages:
            raise requests.ConnectionError(f"no route to {url}")
        response = self.pages[url]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, tuple):
            return response
        return 200, response

    def requested_urls(self):
        return [url for url, _ in self.requests]
