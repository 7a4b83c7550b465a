"""HTTP transport and download helpers for applecast.

The pipeline talks to the network only through a :class:`Transport`. The
default :class:`HttpTransport` wraps a ``requests.Session`` configured with
the user agent and redirect limit; tests substitute a fake transport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import cast, List, Optional, Protocol

import requests
from requests.utils import requote_uri

from .config_constants import DEFAULT_MAX_REDIRECTS, DEFAULT_USER_AGENT
from .exceptions import FetchError, HTTPStatusError
from .utils import filesystem
from .utils.progress import progress_context

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 1024 * 256
FALLBACK_ENCODING = "utf-8"

# Track if we've suppressed urllib3 logs (lazy initialization)
_urllib3_logs_suppressed = False


def _suppress_urllib3_debug_logs() -> None:
    """Keep urllib3 connection chatter out of DEBUG output.

    Called lazily on first transport use, once the root logger is configured.
    """
    global _urllib3_logs_suppressed
    if _urllib3_logs_suppressed:
        return

    root_level = logging.getLogger().level or logging.INFO
    if root_level <= logging.DEBUG:
        for logger_name in ("urllib3", "urllib3.connectionpool", "urllib3.connection"):
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    _urllib3_logs_suppressed = True


@dataclass(frozen=True)
class HttpResponse:
    """Status and body of a completed HTTP GET.

    Attributes:
        url: Final URL after redirects.
        status_code: HTTP status code.
        content: Raw response body.
        encoding: Charset declared by the server, if any.
    """

    url: str
    status_code: int
    content: bytes
    encoding: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        """Body decoded with the declared charset, falling back to UTF-8."""
        encoding = self.encoding or FALLBACK_ENCODING
        try:
            return self.content.decode(encoding, errors="replace")
        except LookupError:
            logger.debug("Unknown charset %r, decoding as %s", encoding, FALLBACK_ENCODING)
            return self.content.decode(FALLBACK_ENCODING, errors="replace")


class Transport(Protocol):
    """Capability to fetch a URL; implementations raise FetchError on failure."""

    def fetch(self, url: str, *, description: str = "Downloading") -> HttpResponse: ...

    def close(self) -> None: ...


def normalize_url(url: str) -> str:
    """Normalize URLs while preserving already-encoded segments."""
    normalized = requote_uri(url)
    if normalized != url:
        logger.debug("Normalized URL %s -> %s", url, normalized)
    return cast(str, normalized)


def _declared_charset(resp: requests.Response) -> Optional[str]:
    # requests assumes ISO-8859-1 for text/* without a charset; only trust an explicit one
    content_type = resp.headers.get("Content-Type", "")
    if "charset" not in content_type.lower():
        return None
    return resp.encoding


class HttpTransport:
    """``requests``-based transport with a custom user agent and redirect limit.

    No retries are attempted. Exceeding ``max_redirects`` surfaces as a
    :class:`FetchError`. The transport owns its session; use it as a context
    manager or call :meth:`close`.
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: Optional[int] = None,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        session: Optional[requests.Session] = None,
    ) -> None:
        _suppress_urllib3_debug_logs()
        self.user_agent = user_agent
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.max_redirects = max_redirects
        self._session.headers["User-Agent"] = user_agent
        logger.debug(
            "Configured HTTP session %s (max_redirects=%s, timeout=%s)",
            hex(id(self._session)),
            max_redirects,
            timeout,
        )

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def fetch(self, url: str, *, description: str = "Downloading") -> HttpResponse:
        """GET ``url`` following redirects and return the full response body.

        Non-2xx responses are returned, not raised; see :func:`fetch_ok`.

        Raises:
            FetchError: On connection, DNS, timeout, redirect-limit or body read failures.
        """
        normalized_url = normalize_url(url)
        logger.debug("Opening HTTP connection to %s (timeout=%s)", normalized_url, self.timeout)
        try:
            resp = self._session.get(normalized_url, timeout=self.timeout, stream=True)
        except requests.TooManyRedirects as exc:
            raise FetchError(
                f"Failed to fetch URL: too many redirects (limit {self._session.max_redirects})",
                url=url,
            ) from exc
        except requests.RequestException as exc:
            raise FetchError(f"Failed to fetch URL: {exc}", url=url) from exc

        try:
            content_length = resp.headers.get("Content-Length")
            try:
                total_size = int(content_length) if content_length else None
            except (TypeError, ValueError):
                total_size = None

            body_parts: List[bytes] = []
            with progress_context(total_size, description) as reporter:
                for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if not chunk:
                        continue
                    body_parts.append(chunk)
                    reporter.update(len(chunk))
        except requests.RequestException as exc:
            raise FetchError(f"Failed to read response body: {exc}", url=url) from exc
        finally:
            resp.close()

        content = b"".join(body_parts)
        logger.debug(
            "HTTP request to %s finished with status %s (%d bytes)",
            normalized_url,
            resp.status_code,
            len(content),
        )
        return HttpResponse(
            url=resp.url or normalized_url,
            status_code=resp.status_code,
            content=content,
            encoding=_declared_charset(resp),
        )


def fetch_ok(transport: Transport, url: str, *, description: str = "Downloading") -> HttpResponse:
    """Fetch ``url`` and require a 2xx status.

    Raises:
        FetchError: If the request itself fails.
        HTTPStatusError: If the response status is not 2xx.
    """
    response = transport.fetch(url, description=description)
    if not response.ok:
        raise HTTPStatusError(url, response.status_code)
    return response


def download_to_file(transport: Transport, url: str, out_path: str | Path) -> int:
    """Download ``url`` and write the raw body to ``out_path``.

    Returns:
        Number of bytes written.

    Raises:
        FetchError: If the request fails or returns a non-2xx status.
        StorageError: If the file cannot be written.
    """
    filename = Path(out_path).name
    response = fetch_ok(transport, url, description=f"Downloading {filename}")
    written = filesystem.write_file(out_path, response.content)
    logger.debug("Finished downloading %s (%s bytes written)", url, written)
    return written
