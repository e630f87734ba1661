"""
Search service client for IndexDrift.

Fetches and writes index definitions over the search service REST API.
A missing index (HTTP 404) is reported as None rather than an error, so
callers can tell "not created yet" apart from a failed request.
"""
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from core.file_parser import DefinitionError

logger = logging.getLogger(__name__)

# Bookkeeping properties the service adds to every response
_SERVICE_KEY_PREFIX = "@odata."


class RemoteServiceError(RuntimeError):
    """Raised when the search service cannot be reached or rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def strip_service_metadata(document: Any) -> Any:
    """Remove service bookkeeping keys (e.g. @odata.etag) from the top-level object."""
    if not isinstance(document, dict):
        return document
    return {k: v for k, v in document.items() if not k.startswith(_SERVICE_KEY_PREFIX)}


class SearchServiceClient:
    """
    Reads and writes index definitions on a remote search service.

    Usage:
        with SearchServiceClient(endpoint, api_key) as client:
            remote = client.fetch("hotels")
    """

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        api_version: str = "2023-11-01",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            endpoint: Service URL, e.g. https://my-service.search.windows.net
            api_key: Admin key sent in the api-key header
            api_version: REST API version query parameter
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not endpoint:
            raise ValueError("Search service endpoint must not be empty")

        headers = {"Accept": "application/json"}
        if api_key:
            headers["api-key"] = api_key

        self.endpoint = endpoint.rstrip("/")
        self.api_version = api_version
        self._client = httpx.Client(
            base_url=self.endpoint,
            headers=headers,
            timeout=timeout,
            transport=transport
        )

    def _index_url(self, name: str) -> str:
        return f"/indexes('{quote(name, safe='')}')"

    def fetch(self, name: str) -> Optional[dict]:
        """
        Get the current definition of an index.

        Returns:
            The definition without service metadata, or None if the index does not exist
        """
        try:
            response = self._client.get(self._index_url(name), params={"api-version": self.api_version})
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch index '{name}' from {self.endpoint}: {e}")
            raise RemoteServiceError(f"Could not reach search service: {e}") from e

        if response.status_code == 404:
            logger.info(f"Index '{name}' not found on {self.endpoint}")
            return None

        if not response.is_success:
            raise RemoteServiceError(
                f"Search service returned {response.status_code} for index '{name}': {response.text[:200]}",
                status_code=response.status_code
            )

        try:
            document = response.json()
        except ValueError as e:
            raise RemoteServiceError(f"Search service returned invalid JSON for index '{name}'") from e

        return strip_service_metadata(document)

    def upsert(self, document: dict):
        """Create the index or replace its definition."""
        name = document.get("name")
        if not name:
            raise DefinitionError("Index name is required in the JSON definition")

        try:
            response = self._client.put(
                self._index_url(name),
                params={"api-version": self.api_version},
                json=document,
                headers={"Prefer": "return=representation"}
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to update index '{name}' on {self.endpoint}: {e}")
            raise RemoteServiceError(f"Could not reach search service: {e}") from e

        if not response.is_success:
            raise RemoteServiceError(
                f"Search service rejected index '{name}' with {response.status_code}: {response.text[:200]}",
                status_code=response.status_code
            )

        logger.info(f"Index '{name}' created or updated on {self.endpoint}")

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
