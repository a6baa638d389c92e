"""CalorieNinjas (API Ninjas) nutrition client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class CalorieNinjasClient(Protocol):
    """Interface for CalorieNinjas natural-language nutrition queries."""

    async def get_nutrition(self, query: str) -> dict[str, object]:
        """Return raw nutrition items for a free-text query."""


@dataclass
class HttpxCalorieNinjasClient(CalorieNinjasClient):
    """HTTPX-backed CalorieNinjas client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout_seconds: float = 10.0
    ) -> "HttpxCalorieNinjasClient":
        """Create a client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def get_nutrition(self, query: str) -> dict[str, object]:
        """Query nutrition for free text."""
        response = await self.http_client.get(
            f"{self.base_url}/nutrition",
            params={"query": query},
            headers={"X-Api-Key": self.api_key},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
