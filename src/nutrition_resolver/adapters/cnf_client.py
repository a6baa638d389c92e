"""Canadian Nutrient File API client.

The food list is published in English and French; both share ``food_code``.
"""

from dataclasses import dataclass
from typing import Protocol

import httpx


class CnfClient(Protocol):
    """Interface for Canadian Nutrient File interactions."""

    async def list_foods(self, lang: str) -> list[dict[str, object]]:
        """Return every food description in the given language."""

    async def get_nutrient_amounts(self, food_code: int) -> list[dict[str, object]]:
        """Return nutrient amounts per 100 g for a food code."""


@dataclass
class HttpxCnfClient(CnfClient):
    """HTTPX-backed Canadian Nutrient File client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0

    @classmethod
    def create(cls, base_url: str, timeout_seconds: float = 10.0) -> "HttpxCnfClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def list_foods(self, lang: str) -> list[dict[str, object]]:
        """Fetch the full food list for a language."""
        response = await self.http_client.get(
            f"{self.base_url}/food/",
            params={"lang": lang, "type": "json"},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def get_nutrient_amounts(self, food_code: int) -> list[dict[str, object]]:
        """Fetch nutrient amounts for a food code."""
        response = await self.http_client.get(
            f"{self.base_url}/nutrientamount/",
            params={"id": food_code, "lang": "en", "type": "json"},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
