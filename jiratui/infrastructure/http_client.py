"""
HTTP transport for the Jira REST API.
Uses httpx (async) with a hard per-request deadline and no retries.
"""

import asyncio
import base64
import time
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from jiratui.config.settings import settings
from jiratui.core.errors import JiraApiError, JiraTimeoutError
from jiratui.models.config import JiraConfig


class JiraTransport:
    """
    Executes single authenticated requests against one Jira instance.

    Features:
    - Basic auth header rebuilt from the config on every call
    - Total deadline per request (default 10s), reported as JiraTimeoutError
    - Non-2xx responses raised as JiraApiError with the raw body text
    - Exactly one network attempt per request
    """

    def __init__(
        self,
        config: JiraConfig,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize transport.

        Args:
            config: Connection settings (base URL and credentials)
            timeout: Request deadline in seconds (defaults to settings)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.config = config
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

    @property
    def auth_header(self) -> str:
        credentials = f"{self.config.username}:{self.config.password}".encode("utf-8")
        return f"Basic {base64.b64encode(credentials).decode('ascii')}"

    def build_url(self, endpoint: str) -> str:
        return f"{self.config.base_url}{endpoint}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": self.auth_header,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]],
        json: Optional[Any],
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.request(
                method, url, params=params, json=json, headers=self._headers()
            )

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """
        Perform one request and decode the JSON response.

        Args:
            endpoint: Path relative to the base URL (e.g. /rest/api/3/myself)
            method: HTTP method
            params: Query parameters
            json: JSON body

        Returns:
            Decoded JSON, or None when the response has no body

        Raises:
            JiraApiError: On non-2xx responses
            JiraTimeoutError: When the deadline expires
            httpx.TransportError: On network errors
        """
        url = self.build_url(endpoint)
        start = time.monotonic()
        logger.debug(f"HTTP request {method} {url}")

        try:
            response = await asyncio.wait_for(
                self._send(method, url, params, json), timeout=self.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            duration_ms = int((time.monotonic() - start) * 1000)
            logger.error(f"HTTP request aborted/timeout {method} {url} after {duration_ms}ms")
            raise JiraTimeoutError(self.timeout) from None
        except httpx.TransportError as e:
            duration_ms = int((time.monotonic() - start) * 1000)
            logger.error(f"HTTP request failed {method} {url} after {duration_ms}ms: {e}")
            raise

        duration_ms = int((time.monotonic() - start) * 1000)
        if not response.is_success:
            logger.warning(
                f"HTTP non-OK response {method} {url}: {response.status_code} ({duration_ms}ms)"
            )
            raise JiraApiError(
                f"JIRA API Error: {response.status_code} {response.reason_phrase}",
                response.status_code,
                response.text,
            )

        logger.debug(f"HTTP response {method} {url}: {response.status_code} ({duration_ms}ms)")
        if not response.content:
            return None
        return response.json()
