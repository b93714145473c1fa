"""HTTP utilities."""

import logging

from httpx import AsyncBaseTransport, AsyncClient, HTTPError, InvalidURL

LOGGER = logging.getLogger(__name__)


class FetchError(Exception):
    """Error raised when an HTTP fetch fails."""


async def fetch(
    url: str,
    *,
    request_timeout: float = 10.0,
    transport: AsyncBaseTransport | None = None,
) -> bytes:
    """Fetch raw bytes from an HTTP server.

    Args:
        url: the address to fetch
        request_timeout: the HTTP request timeout, in seconds
        transport: an optional transport replacing the network one

    Raises:
        FetchError: the address is malformed, unreachable or answered with an
            error status

    """
    async with AsyncClient(timeout=request_timeout, transport=transport) as session:
        try:
            response = await session.get(url)
            response.raise_for_status()
        except (HTTPError, InvalidURL) as err:
            LOGGER.debug("Fetch of %s failed: %s", url, err)
            raise FetchError(f"Unable to fetch {url}") from err
    return response.content
