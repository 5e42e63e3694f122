"""
league_site/channels/google_http.py
Runs Google API client requests on a private httplib2 connection.

httplib2.Http is not thread-safe, and each request executes in a worker
thread, so every call gets its own Http which is closed when the call ends.
"""
from __future__ import annotations

from typing import Any, Callable

import httplib2
from google_auth_httplib2 import AuthorizedHttp

HttpFactory = Callable[[], httplib2.Http]


def timed_http_factory(timeout: float) -> HttpFactory:
    """Fresh Http per call; the socket timeout bounds the worker thread."""
    def factory() -> httplib2.Http:
        return httplib2.Http(timeout=timeout)
    return factory


def execute_isolated(request: Any, credentials: Any, http_factory: HttpFactory) -> Any:
    http = http_factory()
    try:
        return request.execute(http=AuthorizedHttp(credentials, http=http))
    finally:
        http.close()
