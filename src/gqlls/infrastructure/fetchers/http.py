"""HTTP introspection fetcher."""

import logging
from typing import Any

import httpx
from graphql import get_introspection_query

from gqlls.core.errors import SchemaFetchError

logger = logging.getLogger(__name__)


class HttpSchemaFetcher:
    """Introspects a GraphQL endpoint over HTTP using httpx.

    A new client is opened per fetch: remote schemas are fetched once per
    process unless a refresh is forced, so there is nothing to pool.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``).
        """
        self._timeout = timeout
        self._transport = transport

    async def fetch(
        self,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Run the introspection query against ``url``.

        Args:
            url: The GraphQL endpoint.
            headers: Extra HTTP headers.

        Returns:
            The ``data`` member of the introspection response.

        Raises:
            SchemaFetchError: If the request fails or returns errors.
        """
        payload = {
            "query": get_introspection_query(descriptions=True),
            "operationName": "IntrospectionQuery",
        }
        logger.debug("Introspecting schema from %s", url)

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Accept": "application/json", **(headers or {})},
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            raise SchemaFetchError(url, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise SchemaFetchError(url, f"invalid JSON response: {e}") from e

        if not isinstance(body, dict):
            raise SchemaFetchError(url, "response is not a JSON object")

        errors = body.get("errors")
        if errors:
            messages = "; ".join(
                str(error.get("message", error)) if isinstance(error, dict) else str(error)
                for error in errors
            )
            raise SchemaFetchError(url, messages)

        data = body.get("data")
        if not isinstance(data, dict) or "__schema" not in data:
            raise SchemaFetchError(url, "response has no introspection data")

        return data
