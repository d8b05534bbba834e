"""HTTP client service for talking to the room server."""
from typing import Any, Dict, Optional

import httpx

from ..config import settings
from ..exceptions import UnexpectedResponseError
from ..utils.logger import logger


class HTTPClient:
    """Async HTTP client for room pages, redirects and message posts."""

    def __init__(
        self,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the HTTP client.

        Args:
            timeout: Request timeout in seconds. Defaults to settings.request_timeout
            transport: Optional transport override (e.g. httpx.MockTransport)
        """
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=False,
            headers={"User-Agent": settings.user_agent},
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("HTTPClient must be used as an async context manager")
        return self._client

    async def get(
        self, url: str, headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """Issue a GET without following redirects.

        Args:
            url: URL to fetch
            headers: Extra request headers

        Returns:
            The raw response
        """
        logger.debug(f"GET {url}")
        return await self.client.get(url, headers=headers)

    async def get_text(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        follow_redirects: bool = True,
    ) -> str:
        """Fetch a URL and return its body as text.

        Args:
            url: URL to fetch
            headers: Extra request headers
            follow_redirects: Whether to follow redirects on the way

        Returns:
            Response body

        Raises:
            UnexpectedResponseError: On a 4xx/5xx response
        """
        logger.debug(f"GET {url}")
        response = await self.client.get(
            url, headers=headers, follow_redirects=follow_redirects
        )
        self._raise_for_status(response)
        return response.text

    async def get_json(
        self, url: str, headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """Fetch a URL and decode its body as JSON.

        Args:
            url: URL to fetch
            headers: Extra request headers

        Returns:
            Decoded JSON document

        Raises:
            UnexpectedResponseError: On a 4xx/5xx response
            ValueError: If the body is not JSON
        """
        logger.debug(f"GET {url}")
        response = await self.client.get(url, headers=headers, follow_redirects=True)
        self._raise_for_status(response)
        return response.json()

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UnexpectedResponseError(
                f"Unexpected response: {response.status_code} for {response.request.url}",
                status_code=response.status_code,
                url=str(response.request.url),
                body=response.text,
            ) from e

    async def post_text(self, url: str, body: str) -> httpx.Response:
        """POST a UTF-8 encoded text body.

        Args:
            url: URL to post to
            body: Message body

        Returns:
            The raw response, status is left for the caller to judge
        """
        logger.debug(f"POST {url} ({len(body)} chars)")
        return await self.client.post(
            url,
            content=body.encode("utf-8"),
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )
