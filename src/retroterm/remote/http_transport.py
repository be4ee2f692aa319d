"""HTTP command transport.

Sends commands to the capability endpoint supplied by the host and
returns the parsed JSON response.
"""

from __future__ import annotations

import logging
from typing import Any, Literal
from urllib.parse import urlparse

import httpx

from retroterm.remote.base import (
    CommandTransport,
    ConfigurationMissing,
    ProtocolFailure,
    TransportFailure,
)

logger = logging.getLogger(__name__)

DEFAULT_RECIPIENT_HEADER = "X-Recipient-Id"


def recipient_id(endpoint_url: str) -> str:
    """Return the final path segment of the capability endpoint."""
    path = urlparse(endpoint_url).path.rstrip("/")
    return path.rsplit("/", 1)[-1]


class HttpCommandTransport(CommandTransport):
    """Sends commands to the capability endpoint over HTTP.

    In ``get`` mode the command and its arguments travel as query
    parameters. In ``post`` mode the command is a query parameter and
    the arguments are sent as a raw text body.
    """

    def __init__(
        self,
        endpoint_url: str | None,
        method: Literal["get", "post"] = "get",
        timeout: float | None = None,
        recipient_header: str = DEFAULT_RECIPIENT_HEADER,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint_url = endpoint_url or ""
        self._method = method
        self._timeout = timeout
        self._recipient_header = recipient_header
        self._client = client
        self._owns_client = client is None

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    async def connect(self) -> None:
        """Validate the endpoint and create the HTTP client."""
        if not self._endpoint_url:
            raise ConfigurationMissing("Command endpoint URL not configured")
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        logger.info("Using command endpoint %s", self._endpoint_url)

    async def disconnect(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            logger.info("Disconnected from command endpoint")

    async def request(self, command: str, args: str | None = None) -> Any:
        if self._client is None:
            raise TransportFailure("Transport is not connected")

        params = {"command": command}
        try:
            headers = {}
            recipient = recipient_id(self._endpoint_url)
            if recipient:
                headers[self._recipient_header] = recipient

            if self._method == "post":
                headers["Content-Type"] = "text/plain; charset=utf-8"
                resp = await self._client.post(
                    self._endpoint_url,
                    params=params,
                    content=(args or "").encode("utf-8"),
                    headers=headers,
                )
            else:
                if args is not None:
                    params["args"] = args
                resp = await self._client.get(
                    self._endpoint_url, params=params, headers=headers
                )
        except httpx.HTTPError as e:
            raise TransportFailure(f"Request '{command}' failed: {e}") from e
        except (httpx.InvalidURL, ValueError) as e:
            # Raised while building the request from a malformed endpoint URL
            raise TransportFailure(f"Invalid command endpoint '{self._endpoint_url}': {e}") from e

        if resp.is_error:
            raise ProtocolFailure(
                f"status {resp.status_code}, body '{resp.text.strip()}'",
                status_code=resp.status_code,
            )
        try:
            payload = resp.json()
        except ValueError as e:
            raise ProtocolFailure(
                f"Malformed response to '{command}': {e}",
                status_code=resp.status_code,
            ) from e
        logger.debug("Command %s -> %s", command, payload)
        return payload
