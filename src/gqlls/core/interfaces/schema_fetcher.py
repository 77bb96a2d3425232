"""Schema fetcher interface."""

from typing import Any, Protocol


class ISchemaFetcher(Protocol):
    """Contract for introspecting a remote GraphQL endpoint."""

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
        ...
