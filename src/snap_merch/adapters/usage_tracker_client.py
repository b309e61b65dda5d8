"""HTTP client for the model usage tracker."""

from dataclasses import dataclass

import httpx

from snap_merch.services.usage import UsageTrackerClient


@dataclass
class HttpxUsageTrackerClient(UsageTrackerClient):
    """HTTPX-backed usage tracker client."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str) -> "HttpxUsageTrackerClient":
        """Create a tracker client with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def post_usage(self, payload: dict[str, object]) -> None:
        """Send one usage record."""
        response = await self.http_client.post(self.url, json=payload, timeout=5)
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
