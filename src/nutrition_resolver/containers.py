"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from supabase import create_client

from nutrition_resolver.adapters.calorieninjas_client import HttpxCalorieNinjasClient
from nutrition_resolver.adapters.cnf_client import HttpxCnfClient
from nutrition_resolver.adapters.fdc_client import HttpxFdcClient
from nutrition_resolver.adapters.off_client import HttpxOpenFoodFactsClient
from nutrition_resolver.adapters.supabase_cache_repository import SupabaseCacheStore
from nutrition_resolver.config import USDA_DEMO_KEY, Settings
from nutrition_resolver.services.barcode import BarcodeLookupService
from nutrition_resolver.services.cache import (
    CacheStore,
    InMemoryCacheStore,
    NutritionCache,
)
from nutrition_resolver.services.limiter import ConcurrencyLimiter
from nutrition_resolver.services.nutrition import NutritionService
from nutrition_resolver.services.providers import (
    CalorieNinjasProvider,
    OpenFoodFactsProvider,
    ReferenceIndexProvider,
    UsdaProvider,
)
from nutrition_resolver.services.reference_index import ReferenceIndex

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    reference_index: ReferenceIndex
    nutrition_service: NutritionService
    barcode_service: BarcodeLookupService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    timeout = resolved_settings.http_timeout_seconds
    debug = resolved_settings.debug

    if resolved_settings.fdc_api_key == USDA_DEMO_KEY:
        _logger.warning(
            "FDC_API_KEY not set; using DEMO_KEY with a 40 requests/hour limit"
        )
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
        timeout_seconds=timeout,
    )
    off_client = HttpxOpenFoodFactsClient.create(
        resolved_settings.off_base_url, timeout_seconds=timeout
    )
    cnf_client = HttpxCnfClient.create(
        resolved_settings.cnf_base_url, timeout_seconds=timeout
    )
    calorieninjas_client: HttpxCalorieNinjasClient | None = None
    if resolved_settings.calorieninjas_api_key:
        calorieninjas_client = HttpxCalorieNinjasClient.create(
            api_key=resolved_settings.calorieninjas_api_key,
            base_url=resolved_settings.calorieninjas_base_url,
            timeout_seconds=timeout,
        )
    else:
        _logger.warning("CALORIENINJAS_API_KEY not set; CalorieNinjas is disabled")

    store: CacheStore
    if resolved_settings.uses_supabase_cache:
        store = SupabaseCacheStore(
            create_client(
                resolved_settings.supabase_url, resolved_settings.supabase_service_key
            )
        )
    else:
        _logger.warning("Supabase not configured; using an in-memory nutrition cache")
        store = InMemoryCacheStore()

    reference_index = ReferenceIndex(
        client=cnf_client,
        retry_after_seconds=resolved_settings.reference_index_retry_seconds,
    )
    limiter = ConcurrencyLimiter(resolved_settings.max_concurrent_lookups)
    usda_provider = UsdaProvider(fdc_client, debug=debug)
    nutrition_service = NutritionService(
        reference_provider=ReferenceIndexProvider(
            index=reference_index, client=cnf_client, debug=debug
        ),
        calorieninjas_provider=CalorieNinjasProvider(calorieninjas_client, debug=debug),
        usda_provider=usda_provider,
        cache=NutritionCache(
            store, ttl=timedelta(days=resolved_settings.cache_ttl_days)
        ),
        limiter=limiter,
        debug=debug,
    )
    barcode_service = BarcodeLookupService(
        off_provider=OpenFoodFactsProvider(off_client, debug=debug),
        usda_provider=usda_provider,
        nutrition_service=nutrition_service,
        limiter=limiter,
        debug=debug,
    )

    async def close_resources() -> None:
        await fdc_client.close()
        await off_client.close()
        await cnf_client.close()
        if calorieninjas_client is not None:
            await calorieninjas_client.close()

    return AppContainer(
        settings=resolved_settings,
        reference_index=reference_index,
        nutrition_service=nutrition_service,
        barcode_service=barcode_service,
        close_resources=close_resources,
    )
