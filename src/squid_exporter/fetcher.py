"""HTTP fetcher for the Squid cache manager report.

One GET per scrape, no retries.  Any response that carries a body counts
as a report, including 4xx/5xx; only transport failures are errors.
"""

from __future__ import annotations

import http.client
import logging
import urllib.error
import urllib.request
from typing import TYPE_CHECKING

from squid_exporter.base import ScrapeFailedError

if TYPE_CHECKING:
    from squid_exporter.config import SquidConfig

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_S = 10.0
_DEFAULT_MAX_RESPONSE_BYTES = 1024 * 1024  # 1MB


class ReportFetcher:
    """Fetch the raw ``info`` report from a Squid cache manager URL."""

    def __init__(
        self,
        url: str,
        timeout_s: float = _DEFAULT_TIMEOUT_S,
        max_response_bytes: int = _DEFAULT_MAX_RESPONSE_BYTES,
    ) -> None:
        self.url = url
        self._timeout_s = timeout_s
        self._max_response_bytes = max_response_bytes

    @classmethod
    def from_config(cls, config: SquidConfig) -> ReportFetcher:
        return cls(
            config.url,
            timeout_s=config.timeout_seconds,
            max_response_bytes=config.max_response_bytes,
        )

    def fetch(self) -> str:
        """GET the report and return its body as text.

        Raises :class:`ScrapeFailedError` when Squid cannot be reached.
        """
        raw = self._http_get(self.url)
        logger.debug("Fetched %d bytes from %s", len(raw), self.url)
        return raw.decode("utf-8", errors="replace")

    def _http_get(self, url: str) -> bytes:
        """HTTP GET with timeout and size limit."""
        try:
            req = urllib.request.Request(url, method="GET")
            resp = urllib.request.urlopen(req, timeout=self._timeout_s)  # nosec B310
        except urllib.error.HTTPError as exc:
            # Squid answered; keep its body like any other report.
            logger.warning("Squid returned HTTP %d for %s", exc.code, url)
            resp = exc
        except urllib.error.URLError as exc:
            raise ScrapeFailedError(
                f"Connection failed to {url}: {exc.reason}"
            ) from exc
        except TimeoutError as exc:
            raise ScrapeFailedError(
                f"Timeout connecting to {url}"
            ) from exc
        except OSError as exc:
            raise ScrapeFailedError(
                f"Connection failed to {url}: {exc}"
            ) from exc
        except http.client.HTTPException as exc:
            raise ScrapeFailedError(
                f"Invalid HTTP response from {url}: {exc!r}"
            ) from exc

        try:
            data = resp.read(self._max_response_bytes + 1)
            remaining = getattr(resp, "length", None)
        except (TimeoutError, OSError, http.client.HTTPException) as exc:
            raise ScrapeFailedError(
                f"Failed reading response from {url}: {exc}"
            ) from exc
        finally:
            resp.close()

        if len(data) > self._max_response_bytes:
            raise ScrapeFailedError(
                f"Response exceeds {self._max_response_bytes} byte limit"
            )

        # Content-Length still unread: the peer closed mid-body.
        if isinstance(remaining, int) and remaining > 0:
            raise ScrapeFailedError(
                f"Truncated response from {url}: {remaining} bytes missing"
            )

        return bytes(data)
