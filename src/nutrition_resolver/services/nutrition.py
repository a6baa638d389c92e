"""Free-text nutrition lookups with caching and bounded batch fan-out."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace

from nutrition_resolver.domain.nutrition import NutritionData, Provenance
from nutrition_resolver.domain.results import Hit, ProviderOutcome, TransportError
from nutrition_resolver.services.cache import NutritionCache, normalize_query
from nutrition_resolver.services.limiter import ConcurrencyLimiter
from nutrition_resolver.services.providers import (
    CalorieNinjasProvider,
    ReferenceIndexProvider,
    UsdaProvider,
)

_logger = logging.getLogger(__name__)

TextSearch = Callable[[str], Awaitable[ProviderOutcome[NutritionData]]]


@dataclass
class NutritionService:
    """Resolves free text against the reference index, CalorieNinjas and USDA."""

    reference_provider: ReferenceIndexProvider
    calorieninjas_provider: CalorieNinjasProvider
    usda_provider: UsdaProvider
    cache: NutritionCache
    limiter: ConcurrencyLimiter
    debug: bool = False

    async def lookup_by_text(self, query: str) -> NutritionData | None:
        """Return nutrition for a query; cache hits are tagged ``cache``."""
        if not normalize_query(query):
            return None
        cached = self.cache.get(query)
        if cached is not None:
            return replace(cached, source=Provenance.CACHE)

        data = await self.limiter.run(lambda: self._lookup_uncached(query))
        if data is not None:
            self.cache.put(query, data)
        return data

    async def resolve_for_validation(
        self, term: str, exclude: Provenance | None = None
    ) -> NutritionData | None:
        """Look up a second opinion, keeping the source that produced it.

        ``exclude`` skips the provider that produced the primary result so
        the two sides stay independent.
        """
        if not normalize_query(term):
            return None
        cached = self.cache.get(term)
        if cached is not None and cached.source is not exclude:
            return cached

        data = await self.limiter.run(
            lambda: self._lookup_uncached(term, exclude=exclude)
        )
        if data is not None and cached is None:
            self.cache.put(term, data)
        return data

    async def batch_lookup_by_text(
        self, queries: list[str]
    ) -> dict[str, NutritionData | None]:
        """Resolve many queries: one cache pass, then bounded concurrent lookups."""
        results: dict[str, NutritionData | None] = {}
        originals = list(dict.fromkeys(queries))
        if not originals:
            return results

        for query in originals:
            if not normalize_query(query):
                results[query] = None
        pending = [query for query in originals if query not in results]

        for query, data in self.cache.get_many(pending).items():
            results[query] = replace(data, source=Provenance.CACHE)

        by_key: dict[str, list[str]] = {}
        for query in pending:
            if query not in results:
                by_key.setdefault(normalize_query(query), []).append(query)

        async def resolve(group: list[str]) -> tuple[list[str], NutritionData | None]:
            query = group[0]
            data = await self.limiter.run(lambda: self._lookup_uncached(query))
            if data is not None:
                self.cache.put(query, data)
            return group, data

        fresh = await asyncio.gather(*(resolve(group) for group in by_key.values()))
        for group, data in fresh:
            for query in group:
                results[query] = data
        if self.debug:
            _logger.info(
                "Batch lookup: queries=%s cached=%s fetched=%s",
                len(originals),
                len(pending) - sum(len(group) for group in by_key.values()),
                len(by_key),
            )
        return {query: results[query] for query in originals}

    async def _lookup_uncached(
        self, query: str, exclude: Provenance | None = None
    ) -> NutritionData | None:
        """Try providers in priority order and return the first hit."""
        providers: list[tuple[Provenance, TextSearch]] = [
            (Provenance.CNF, self.reference_provider.search),
            (Provenance.API_NINJAS, self.calorieninjas_provider.search),
            (Provenance.USDA, self.usda_provider.search),
        ]
        for source, search in providers:
            if source is exclude:
                continue
            outcome = await search(query)
            if isinstance(outcome, Hit) and outcome.value.facts.has_any_value:
                return outcome.value
            if self.debug and not isinstance(outcome, TransportError):
                _logger.info(
                    "Text lookup %s miss for %r: %s", source.value, query, outcome
                )
        _logger.info("No nutrition data found for %r", query)
        return None
