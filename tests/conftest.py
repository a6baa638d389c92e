"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import httpx
import pytest

from nutrition_resolver.adapters.calorieninjas_client import CalorieNinjasClient
from nutrition_resolver.adapters.cnf_client import CnfClient
from nutrition_resolver.adapters.fdc_client import FdcClient
from nutrition_resolver.adapters.off_client import OpenFoodFactsClient
from nutrition_resolver.config import Settings
from nutrition_resolver.containers import AppContainer
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

SUGAR_FOODS_EN = [
    {"food_code": 4318, "food_description": "Sweets, sugars, granulated"},
    {"food_code": 4317, "food_description": "Sweets, sugar, brown"},
]
SUGAR_FOODS_FR = [
    {"food_code": 4318, "food_description": "Confiseries, sucre, granulé"},
    {"food_code": 4317, "food_description": "Confiseries, sucre, brun"},
]
SUGAR_NUTRIENTS = [
    {
        "food_code": 4318,
        "nutrient_value": 387,
        "nutrient_name_id": 208,
        "nutrient_web_name": "Energy (kcal)",
    },
    {
        "food_code": 4318,
        "nutrient_value": 0,
        "nutrient_name_id": 203,
        "nutrient_web_name": "Protein",
    },
    {
        "food_code": 4318,
        "nutrient_value": 99.98,
        "nutrient_name_id": 205,
        "nutrient_web_name": "Carbohydrate",
    },
    {
        "food_code": 4318,
        "nutrient_value": 0,
        "nutrient_name_id": 204,
        "nutrient_web_name": "Total Fat",
    },
]


def off_product(**product: object) -> dict[str, object]:
    """Wrap product fields in an Open Food Facts "found" response."""
    return {"status": 1, "product": product}


@dataclass
class FakeCnfClient(CnfClient):
    """Fake Canadian Nutrient File client with in-memory lists."""

    english: list[dict[str, object]] = field(default_factory=list)
    french: list[dict[str, object]] = field(default_factory=list)
    nutrients: list[dict[str, object]] = field(default_factory=list)
    fail_lists: bool = False
    nutrient_error: Exception | None = None
    list_calls: list[str] = field(default_factory=list)
    nutrient_calls: list[int] = field(default_factory=list)

    async def list_foods(self, lang: str) -> list[dict[str, object]]:
        self.list_calls.append(lang)
        await asyncio.sleep(0)
        if self.fail_lists:
            raise httpx.ConnectError("reference service unavailable")
        return self.english if lang == "en" else self.french

    async def get_nutrient_amounts(self, food_code: int) -> list[dict[str, object]]:
        self.nutrient_calls.append(food_code)
        if self.nutrient_error is not None:
            raise self.nutrient_error
        return self.nutrients


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Fake Open Food Facts client keyed by exact barcode string."""

    products: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def get_product(self, code: str) -> dict[str, object]:
        self.calls.append(code)
        return self.products.get(code, {"status": 0})


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client that tracks calls and in-flight requests."""

    search_payload: dict[str, object] = field(default_factory=lambda: {"foods": []})
    branded_payload: dict[str, object] = field(default_factory=lambda: {"foods": []})
    delay: float = 0.0
    calls: list[tuple[str, list[str] | None]] = field(default_factory=list)
    in_flight: int = 0
    peak_in_flight: int = 0

    async def search_foods(
        self,
        query: str,
        page_size: int = 10,
        data_types: list[str] | None = None,
    ) -> dict[str, object]:
        self.calls.append((query, data_types))
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        return self.branded_payload if data_types else self.search_payload


@dataclass
class FakeCalorieNinjasClient(CalorieNinjasClient):
    """Fake CalorieNinjas client returning a fixed payload."""

    payload: dict[str, object] = field(default_factory=lambda: {"items": []})
    calls: list[str] = field(default_factory=list)

    async def get_nutrition(self, query: str) -> dict[str, object]:
        self.calls.append(query)
        return self.payload


@dataclass
class Services:
    """Services wired against fake clients."""

    nutrition: NutritionService
    barcode: BarcodeLookupService
    reference_index: ReferenceIndex
    cache: NutritionCache


def build_services(  # noqa: PLR0913
    cnf: FakeCnfClient | None = None,
    off: FakeOpenFoodFactsClient | None = None,
    fdc: FakeFdcClient | None = None,
    calorieninjas: CalorieNinjasClient | None = None,
    store: CacheStore | None = None,
    max_concurrency: int = 5,
) -> Services:
    """Wire the lookup services the way the container does, with fakes."""
    cnf_client = cnf or FakeCnfClient()
    reference_index = ReferenceIndex(client=cnf_client)
    cache = NutritionCache(store or InMemoryCacheStore())
    limiter = ConcurrencyLimiter(max_concurrency)
    usda_provider = UsdaProvider(fdc or FakeFdcClient())
    nutrition = NutritionService(
        reference_provider=ReferenceIndexProvider(
            index=reference_index, client=cnf_client
        ),
        calorieninjas_provider=CalorieNinjasProvider(calorieninjas),
        usda_provider=usda_provider,
        cache=cache,
        limiter=limiter,
    )
    barcode = BarcodeLookupService(
        off_provider=OpenFoodFactsProvider(off or FakeOpenFoodFactsClient()),
        usda_provider=usda_provider,
        nutrition_service=nutrition,
        limiter=limiter,
    )
    return Services(
        nutrition=nutrition,
        barcode=barcode,
        reference_index=reference_index,
        cache=cache,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        fdc_api_key="fdc-key",
        calorieninjas_api_key="ninjas-key",
        batch_max_queries=3,
    )


@pytest.fixture
def cnf_client() -> FakeCnfClient:
    return FakeCnfClient(
        english=SUGAR_FOODS_EN, french=SUGAR_FOODS_FR, nutrients=SUGAR_NUTRIENTS
    )


@pytest.fixture
def off_client() -> FakeOpenFoodFactsClient:
    return FakeOpenFoodFactsClient()


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def services(
    cnf_client: FakeCnfClient,
    off_client: FakeOpenFoodFactsClient,
    fdc_client: FakeFdcClient,
) -> Services:
    return build_services(cnf=cnf_client, off=off_client, fdc=fdc_client)


@pytest.fixture
def container(settings: Settings, services: Services) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        reference_index=services.reference_index,
        nutrition_service=services.nutrition,
        barcode_service=services.barcode,
        close_resources=close_resources,
    )
