"""
Cloudflare Workers KV store

Uses the Cloudflare KV REST API so a Python host can share session state
with a Worker that uses the native KV binding.
"""

import os
from typing import Optional
from urllib.parse import quote

import httpx

from .base import KeyValueStore, StorageError, StorageAuthenticationError


class CloudflareKVStore(KeyValueStore):
    """
    Cloudflare Workers KV store.

    Uses REST API. Requires:
    1. CLOUDFLARE_API_TOKEN - API token with Workers KV edit permissions
    2. CLOUDFLARE_ACCOUNT_ID - Your Cloudflare account ID
    3. CLOUDFLARE_KV_NAMESPACE_ID - The KV namespace holding quiz state
    """

    BASE_URL = "https://api.cloudflare.com/client/v4/accounts"

    def __init__(
        self,
        api_token: Optional[str] = None,
        account_id: Optional[str] = None,
        namespace_id: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize Cloudflare KV store.

        Args:
            api_token: Cloudflare API token (falls back to env var)
            account_id: Cloudflare account ID (falls back to env var)
            namespace_id: KV namespace ID (falls back to env var)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (for testing)
        """
        self._api_token = api_token or os.getenv("CLOUDFLARE_API_TOKEN")
        self._account_id = account_id or os.getenv("CLOUDFLARE_ACCOUNT_ID")
        self._namespace_id = namespace_id or os.getenv("CLOUDFLARE_KV_NAMESPACE_ID")
        self._timeout = timeout
        self._transport = transport
        self._client = None

    def _get_client(self) -> httpx.Client:
        """Lazy initialization of HTTP client."""
        if self._client is None:
            if not self._api_token:
                raise StorageAuthenticationError(
                    "No Cloudflare API token provided. Set CLOUDFLARE_API_TOKEN or pass api_token to constructor."
                )
            if not self._account_id:
                raise StorageAuthenticationError(
                    "No Cloudflare account ID provided. Set CLOUDFLARE_ACCOUNT_ID or pass account_id to constructor."
                )
            if not self._namespace_id:
                raise StorageError(
                    "No KV namespace provided. Set CLOUDFLARE_KV_NAMESPACE_ID or pass namespace_id to constructor."
                )
            self._client = httpx.Client(
                headers={"Authorization": f"Bearer {self._api_token}"},
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    def _get_url(self, key: str) -> str:
        """Get the API URL for a key. The key is percent-encoded as one path segment."""
        return (
            f"{self.BASE_URL}/{self._account_id}/storage/kv/namespaces/"
            f"{self._namespace_id}/values/{quote(key, safe='')}"
        )

    @property
    def name(self) -> str:
        return "cloudflare"

    def _raise_for_status(self, response: httpx.Response) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (401, 403):
                raise StorageAuthenticationError(f"Cloudflare KV auth failed: {e}") from e
            raise StorageError(f"Cloudflare KV error: {e}") from e

    def get(self, key: str) -> Optional[str]:
        client = self._get_client()
        try:
            response = client.get(self._get_url(key))
        except httpx.HTTPError as e:
            raise StorageError(f"Cloudflare KV request failed: {e}") from e
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return response.text

    def set(self, key: str, value: str) -> None:
        client = self._get_client()
        try:
            response = client.put(
                self._get_url(key),
                content=value.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
            )
        except httpx.HTTPError as e:
            raise StorageError(f"Cloudflare KV request failed: {e}") from e
        self._raise_for_status(response)

    def remove(self, key: str) -> None:
        client = self._get_client()
        try:
            response = client.delete(self._get_url(key))
        except httpx.HTTPError as e:
            raise StorageError(f"Cloudflare KV request failed: {e}") from e
        if response.status_code == 404:
            return
        self._raise_for_status(response)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(namespace={self._namespace_id!r})"
