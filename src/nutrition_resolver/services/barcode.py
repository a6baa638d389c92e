"""Barcode lookups with cross-validation and serving-size correction."""

import logging
from dataclasses import dataclass

from nutrition_resolver.domain.nutrition import BarcodeLookupResult
from nutrition_resolver.domain.results import unwrap
from nutrition_resolver.services.barcodes import barcode_variants
from nutrition_resolver.services.limiter import ConcurrencyLimiter
from nutrition_resolver.services.nutrition import NutritionService
from nutrition_resolver.services.providers import (
    OpenFoodFactsProvider,
    ProductRecord,
    UsdaProvider,
)
from nutrition_resolver.services.reconcile import SourcedFacts, reconcile
from nutrition_resolver.services.serving import correct_serving

_logger = logging.getLogger(__name__)


@dataclass
class BarcodeLookupService:
    """Resolves a scanned barcode to validated per-100 g and per-serving values.

    Open Food Facts is the primary source, USDA branded foods the fallback when
    it has no product. The product's best English name is then looked up as
    free text (through the shared cache) to cross-check the calories.
    """

    off_provider: OpenFoodFactsProvider
    usda_provider: UsdaProvider
    nutrition_service: NutritionService
    limiter: ConcurrencyLimiter
    debug: bool = False

    async def lookup_by_barcode(self, code: str) -> BarcodeLookupResult | None:
        """Return the resolved product, or ``None`` when no source knows it."""
        if not barcode_variants(code):
            return None

        record = await self._find_product(code)
        if record is None:
            _logger.info("No product found for barcode %s", code)
            return None

        secondary: SourcedFacts | None = None
        if record.search_term:
            data = await self.nutrition_service.resolve_for_validation(
                record.search_term, exclude=record.source
            )
            if data is not None:
                secondary = SourcedFacts(facts=data.facts, source=data.source)

        reconciled = reconcile(
            SourcedFacts(facts=record.facts, source=record.source), secondary
        )
        serving_info, per_serving = correct_serving(
            record.declared_serving, reconciled.facts, record.identity.name
        )
        if self.debug:
            _logger.info(
                "Barcode %s resolved: provenance=%s serving=%s corrected=%s",
                code,
                reconciled.provenance.value,
                serving_info.grams,
                serving_info.was_corrected,
            )
        return BarcodeLookupResult(
            identity=record.identity,
            per_100g=reconciled.facts,
            per_serving=per_serving,
            serving_info=serving_info,
            provenance=reconciled.provenance,
        )

    async def _find_product(self, code: str) -> ProductRecord | None:
        record = unwrap(await self.limiter.run(lambda: self.off_provider.lookup(code)))
        if record is not None:
            return record
        return unwrap(
            await self.limiter.run(lambda: self.usda_provider.lookup_upc(code))
        )
