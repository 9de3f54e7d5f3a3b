"""
Remote page fetching through CORS-capable proxies.

Each attempt is an independent GET through the next proxy in the list;
the first 2xx response wins. Exhausting every attempt raises a single
``NetworkExtractionError`` and never returns partial content.
"""

import threading
from typing import Optional, Sequence
from urllib.parse import quote, urlparse

import requests
from loguru import logger

from prizm.config import config

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

_session_lock = threading.Lock()
_session: Optional[requests.Session] = None


class NetworkExtractionError(RuntimeError):
    """All proxy attempts failed for one extraction call."""

    def __init__(self, url: str, attempts: int, message: Optional[str] = None):
        self.url = url
        self.attempts = attempts
        super().__init__(message or f"Unable to fetch {url} after {attempts} attempts")


class ExtractionCancelled(NetworkExtractionError):
    """The caller cancelled the fetch before it succeeded."""

    def __init__(self, url: str, attempts: int):
        super().__init__(url, attempts, f"Fetching {url} was cancelled after {attempts} attempts")


def _get_session() -> requests.Session:
    """Return a shared requests session configured with default headers."""
    global _session
    if _session is None:
        with _session_lock:
            if _session is None:
                session = requests.Session()
                session.headers.update(
                    {
                        "User-Agent": USER_AGENT,
                        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                        "Accept-Language": "en-US,en;q=0.5",
                    }
                )
                _session = session
    return _session


def ensure_http_scheme(url: str) -> str:
    """Ensure ``url`` is qualified with an HTTP scheme, defaulting to https."""
    cleaned = url.strip()
    if not cleaned:
        return cleaned
    if cleaned.lower().startswith(("http://", "https://")):
        return cleaned
    if cleaned.startswith("//"):
        return f"https:{cleaned}"
    return f"https://{cleaned}"


def is_fetchable_url(url: str) -> bool:
    """Return True when ``url`` looks like an http(s) URL with a host."""
    parsed = urlparse(ensure_http_scheme(url))
    return parsed.scheme in ("http", "https") and bool(parsed.netloc) and "." in parsed.netloc


def build_proxy_url(proxy: str, url: str) -> str:
    return f"{proxy}{quote(url, safe='')}"


def fetch_html(
    url: str,
    proxies: Optional[Sequence[str]] = None,
    max_attempts: Optional[int] = None,
    timeout: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
    session: Optional[requests.Session] = None,
) -> str:
    """
    Fetch the HTML of ``url`` through the proxy list.

    Args:
        url: Page URL; "https://" is assumed when no scheme is given
        proxies: Proxy prefixes tried in rotation, defaults to config
        max_attempts: Total attempts across all proxies, defaults to config
        timeout: Per-attempt timeout in seconds, defaults to config
        cancel_event: Checked before every attempt; when set the fetch stops
        session: Optional requests session (tests inject a mock)

    Returns:
        Response body of the first successful attempt

    Raises:
        ExtractionCancelled: If ``cancel_event`` was set
        NetworkExtractionError: If every attempt failed
    """
    target = ensure_http_scheme(url)
    proxies = list(proxies) if proxies else config.proxy_list()
    max_attempts = max_attempts if max_attempts is not None else config.FETCH_MAX_ATTEMPTS
    timeout = timeout if timeout is not None else config.FETCH_TIMEOUT
    session = session or _get_session()

    if not proxies:
        raise NetworkExtractionError(target, 0, "No CORS proxies configured")

    for attempt in range(max_attempts):
        if cancel_event is not None and cancel_event.is_set():
            raise ExtractionCancelled(target, attempt)

        proxy = proxies[attempt % len(proxies)]
        proxy_url = build_proxy_url(proxy, target)
        log = logger.bind(url=target, attempt=attempt + 1, proxy=proxy)

        try:
            response = session.get(proxy_url, timeout=timeout, allow_redirects=True)
        except requests.RequestException as exc:
            log.warning(f"Proxy attempt failed: {exc}")
            continue

        # response.ok also accepts 3xx
        if not 200 <= response.status_code < 300:
            log.warning(f"Proxy returned status {response.status_code}")
            continue

        if not response.encoding:
            response.encoding = response.apparent_encoding or "utf-8"
        log.info(f"Fetched {len(response.text)} chars")
        return response.text

    raise NetworkExtractionError(target, max_attempts)
