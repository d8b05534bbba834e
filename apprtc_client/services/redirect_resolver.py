"""Resolves a bare room-server URL into a room URL by following redirects."""
from typing import Optional
from urllib.parse import urljoin

from ..config import settings
from ..exceptions import TooManyRedirectsError, UnexpectedResponseError
from ..utils.logger import logger
from .http_client import HTTPClient


class RedirectResolver:
    """Follows 302 redirects until the URL names a room."""

    def __init__(self, http: HTTPClient, max_redirects: Optional[int] = None):
        """Initialize the resolver.

        Args:
            http: Open HTTP client
            max_redirects: Hop limit. Defaults to settings.max_redirects
        """
        self.http = http
        self.max_redirects = (
            max_redirects if max_redirects is not None else settings.max_redirects
        )

    async def follow_redirect(self, url: str) -> str:
        """Load the URL and return the Location of the resulting 302.

        Args:
            url: URL to load

        Returns:
            Absolute redirect target

        Raises:
            UnexpectedResponseError: If the response is not a 302 with a Location
        """
        response = await self.http.get(url)

        if response.status_code != 302:
            raise UnexpectedResponseError(
                f"Unexpected response: {response.status_code} for {url}, "
                f"with contents: {response.text}",
                status_code=response.status_code,
                url=url,
                body=response.text,
            )

        location = response.headers.get("Location")
        if not location:
            raise UnexpectedResponseError(
                f"Didn't find Location header in 302 for {url}",
                status_code=response.status_code,
                url=url,
            )

        return urljoin(url, location)

    async def resolve(self, url: str) -> str:
        """Keep redirecting until we get a room URL (one with a query string).

        Args:
            url: Room server or room URL

        Returns:
            Room URL
        """
        hops = 0
        while "?" not in url:
            if hops >= self.max_redirects:
                raise TooManyRedirectsError(
                    f"Gave up after {hops} redirects without reaching a room: {url}"
                )
            next_url = await self.follow_redirect(url)
            logger.info(f"Redirected {url} -> {next_url}")
            url = next_url
            hops += 1
        return url
