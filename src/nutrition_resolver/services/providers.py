"""Soft-failing nutrition providers.

Each provider wraps a raw HTTP client, validates the payload and reports a
``Hit``, a ``Miss`` (not found or malformed) or a ``TransportError``. Nothing
here raises for provider problems.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from nutrition_resolver.adapters.calorieninjas_client import CalorieNinjasClient
from nutrition_resolver.adapters.cnf_client import CnfClient
from nutrition_resolver.adapters.fdc_client import FdcClient
from nutrition_resolver.adapters.off_client import OpenFoodFactsClient
from nutrition_resolver.adapters.provider_models import (
    CalorieNinjasResponse,
    CnfNutrientAmountRow,
    FdcSearchFood,
    FdcSearchResponse,
    OffProduct,
    OffProductResponse,
)
from nutrition_resolver.domain.nutrition import (
    NutritionData,
    NutritionFacts,
    ProductIdentity,
    Provenance,
    round_half_up,
)
from nutrition_resolver.domain.results import Hit, Miss, ProviderOutcome, TransportError
from nutrition_resolver.services.barcodes import barcode_variants
from nutrition_resolver.services.reference_index import ReferenceIndex

_logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

KJ_PER_KCAL = 4.184

_CNF_NUTRIENT_IDS = {
    208: "calories",
    203: "protein",
    205: "carbs",
    204: "fat",
    291: "fiber",
    269: "sugar",
    307: "sodium",
}

_FDC_NUTRIENT_IDS = {
    1008: "calories",
    1003: "protein",
    1005: "carbs",
    1004: "fat",
    1079: "fiber",
    2000: "sugar",
    1093: "sodium",
}

# Fallback when a search result omits nutrient ids; first matching prefix wins.
_FDC_NUTRIENT_NAMES = (
    ("energy", "calories"),
    ("protein", "protein"),
    ("carbohydrate", "carbs"),
    ("total lipid", "fat"),
    ("fiber", "fiber"),
    ("sugars", "sugar"),
    ("sodium", "sodium"),
)

_FDC_UNITS = {"g": "g", "grm": "g", "ml": "ml", "mlt": "ml"}


@dataclass(frozen=True)
class ProductRecord:
    """A barcode-keyed product with its per-100 g facts."""

    identity: ProductIdentity
    facts: NutritionFacts
    source: Provenance
    declared_serving: str | None = None
    search_term: str | None = None


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


async def _call(
    provider: str, action: str, func: Callable[[], Awaitable[T]]
) -> T | Miss | TransportError:
    """Await a client call, converting failures into outcome variants."""
    try:
        return await func()
    except (httpx.HTTPError, asyncio.TimeoutError) as exc:
        status_code = _status_code_from_exception(exc)
        message = str(exc) or type(exc).__name__
        _logger.warning(
            "%s %s failed (status=%s): %s", provider, action, status_code, message
        )
        return TransportError(error=message, status_code=status_code)
    except ValueError as exc:
        _logger.warning("%s %s returned invalid JSON: %s", provider, action, exc)
        return Miss(reason="invalid json")


def _validate(provider: str, model: type[M], payload: object) -> M | Miss:
    """Validate a payload against ``model``; mismatches become a miss."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        _logger.warning(
            "%s payload failed validation (%s errors)", provider, exc.error_count()
        )
        return Miss(reason="schema mismatch")


def _kcal(value: float | None) -> int | None:
    if value is None:
        return None
    return int(round_half_up(value, 0))


def _first_text(*candidates: str | None) -> str | None:
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return None


def english_search_terms(product: OffProduct) -> list[str]:
    """Candidate English search terms, best first."""
    category_terms = [
        tag.removeprefix("en:").replace("-", " ")
        for tag in reversed(product.categories_tags)
        if tag.startswith("en:")
    ]
    candidates = [
        product.product_name_en,
        product.generic_name_en,
        *category_terms,
        product.generic_name,
        product.product_name,
    ]
    return [c.strip() for c in candidates if c and c.strip()]


def best_search_term(product: OffProduct) -> str | None:
    """First non-empty English search term for a product."""
    terms = english_search_terms(product)
    return terms[0] if terms else None


def _off_facts(product: OffProduct) -> NutritionFacts:
    nutriments = product.nutriments
    calories = nutriments.energy_kcal_100g
    if calories is None and nutriments.energy_100g is not None:
        calories = nutriments.energy_100g / KJ_PER_KCAL
    return NutritionFacts(
        calories=_kcal(calories),
        protein=nutriments.proteins_100g,
        carbs=nutriments.carbohydrates_100g,
        fat=nutriments.fat_100g,
        fiber=nutriments.fiber_100g,
        sugar=nutriments.sugars_100g,
        sodium=(
            round_half_up(nutriments.sodium_100g * 1000, 1)
            if nutriments.sodium_100g is not None
            else None
        ),
    )


def _off_declared_serving(product: OffProduct) -> str | None:
    if product.serving_size and product.serving_size.strip():
        return product.serving_size.strip()
    quantity = product.serving_quantity
    if isinstance(quantity, str):
        quantity = quantity.strip() or None
    if quantity is None:
        return None
    if isinstance(quantity, float):
        return f"{quantity:g}g"
    return f"{quantity}g"


@dataclass
class OpenFoodFactsProvider:
    """Barcode-keyed provider backed by Open Food Facts."""

    client: OpenFoodFactsClient
    debug: bool = False

    async def lookup(self, code: str) -> ProviderOutcome[ProductRecord]:
        """Try each barcode variant in turn and stop at the first product."""
        last_error: TransportError | None = None
        for variant in barcode_variants(code):
            result = await _call(
                "OpenFoodFacts",
                f"product:{variant}",
                lambda variant=variant: self.client.get_product(variant),
            )
            if isinstance(result, TransportError):
                last_error = result
                continue
            if isinstance(result, Miss):
                continue
            response = _validate("OpenFoodFacts", OffProductResponse, result)
            if isinstance(response, Miss):
                continue
            if response.status != 1 or response.product is None:
                continue

            product = response.product
            identity = ProductIdentity(
                name=_first_text(
                    product.product_name,
                    product.product_name_en,
                    product.generic_name,
                )
                or "Unknown product",
                brand=_first_text(product.brands),
                image_url=_first_text(product.image_url, product.image_front_url),
                barcode=variant,
            )
            if self.debug:
                _logger.info("OpenFoodFacts hit: code=%s variant=%s", code, variant)
            return Hit(
                ProductRecord(
                    identity=identity,
                    facts=_off_facts(product),
                    source=Provenance.OPENFOODFACTS,
                    declared_serving=_off_declared_serving(product),
                    search_term=best_search_term(product),
                )
            )
        return last_error or Miss(reason="product not found")


def _fdc_facts(food: FdcSearchFood) -> NutritionFacts:
    values: dict[str, float] = {}
    for nutrient in food.food_nutrients:
        if nutrient.value is None:
            continue
        if (nutrient.unit_name or "").lower() == "kj":
            continue
        field_name = _FDC_NUTRIENT_IDS.get(nutrient.nutrient_id or -1)
        if field_name is None:
            lowered = nutrient.nutrient_name.lower()
            field_name = next(
                (
                    name
                    for prefix, name in _FDC_NUTRIENT_NAMES
                    if lowered.startswith(prefix)
                ),
                None,
            )
        if field_name is not None and field_name not in values:
            values[field_name] = nutrient.value
    calories = values.pop("calories", None)
    return NutritionFacts(calories=_kcal(calories), **values)


def _fdc_declared_serving(food: FdcSearchFood) -> str | None:
    if food.serving_size is None or food.serving_size <= 0:
        return None
    unit = _FDC_UNITS.get((food.serving_size_unit or "g").lower(), "g")
    amount = f"{food.serving_size:g}{unit}"
    if food.household_serving:
        return f"{food.household_serving} ({amount})"
    return amount


def _digits(value: str | None) -> str:
    return "".join(ch for ch in value or "" if ch.isdigit())


@dataclass
class UsdaProvider:
    """USDA FoodData Central text search and branded UPC lookup."""

    client: FdcClient
    debug: bool = False

    async def search(self, term: str) -> ProviderOutcome[NutritionData]:
        """Return the first search result for a free-text term."""
        result = await _call(
            "USDA", "search", lambda: self.client.search_foods(term, page_size=1)
        )
        if isinstance(result, Miss | TransportError):
            return result
        response = _validate("USDA", FdcSearchResponse, result)
        if isinstance(response, Miss):
            return response
        if not response.foods:
            return Miss(reason="no foods")
        food = response.foods[0]
        if self.debug:
            _logger.info("USDA search hit: term=%s fdc_id=%s", term, food.fdc_id)
        return Hit(
            NutritionData(
                name=food.description,
                facts=_fdc_facts(food),
                source=Provenance.USDA,
            )
        )

    async def lookup_upc(self, code: str) -> ProviderOutcome[ProductRecord]:
        """Find a branded food whose GTIN/UPC matches one of the code's variants."""
        variants = barcode_variants(code)
        if not variants:
            return Miss(reason="empty code")
        result = await _call(
            "USDA",
            f"upc:{variants[0]}",
            lambda: self.client.search_foods(
                variants[0], page_size=5, data_types=["Branded"]
            ),
        )
        if isinstance(result, Miss | TransportError):
            return result
        response = _validate("USDA", FdcSearchResponse, result)
        if isinstance(response, Miss):
            return response

        wanted = {variant.lstrip("0") for variant in variants}
        for food in response.foods:
            gtin = _digits(food.gtin_upc)
            if not gtin or gtin.lstrip("0") not in wanted:
                continue
            if self.debug:
                _logger.info("USDA UPC hit: code=%s gtin=%s", code, gtin)
            return Hit(
                ProductRecord(
                    identity=ProductIdentity(
                        name=food.description,
                        brand=_first_text(food.brand_owner, food.brand_name),
                        barcode=gtin,
                    ),
                    facts=_fdc_facts(food),
                    source=Provenance.USDA,
                    declared_serving=_fdc_declared_serving(food),
                    search_term=food.description,
                )
            )
        return Miss(reason="no branded food with matching upc")


@dataclass
class CalorieNinjasProvider:
    """Natural-language text provider; disabled when no API key is configured."""

    client: CalorieNinjasClient | None
    debug: bool = False

    async def search(self, term: str) -> ProviderOutcome[NutritionData]:
        """Return the first item for a free-text term, normalized to 100 g."""
        if self.client is None:
            return Miss(reason="no api key configured")
        result = await _call(
            "CalorieNinjas", "nutrition", lambda: self.client.get_nutrition(term)
        )
        if isinstance(result, Miss | TransportError):
            return result
        response = _validate("CalorieNinjas", CalorieNinjasResponse, result)
        if isinstance(response, Miss):
            return response
        if not response.items:
            return Miss(reason="no items")

        item = response.items[0]
        # Items are reported for the parsed serving, not per 100 g.
        factor = 100 / item.serving_size_g if item.serving_size_g > 0 else 1.0

        def per_100g(value: float | None) -> float | None:
            return None if value is None else round_half_up(value * factor, 1)

        facts = NutritionFacts(
            calories=_kcal(item.calories * factor),
            protein=per_100g(item.protein_g),
            carbs=per_100g(item.carbohydrates_total_g),
            fat=per_100g(item.fat_total_g),
            fiber=per_100g(item.fiber_g),
            sugar=per_100g(item.sugar_g),
            sodium=per_100g(item.sodium_mg),
        )
        if self.debug:
            _logger.info("CalorieNinjas hit: term=%s name=%s", term, item.name)
        return Hit(
            NutritionData(
                name=item.name,
                facts=facts,
                source=Provenance.API_NINJAS,
            )
        )


@dataclass
class ReferenceIndexProvider:
    """Generic reference values from the bilingual Canadian Nutrient File index."""

    index: ReferenceIndex
    client: CnfClient
    debug: bool = False

    async def search(self, term: str) -> ProviderOutcome[NutritionData]:
        """Fuzzy-match the term and fetch nutrient amounts for the match."""
        match = await self.index.match(term)
        if match is None:
            return Miss(reason="no reference match")

        result = await _call(
            "CNF",
            f"nutrientamount:{match.code}",
            lambda: self.client.get_nutrient_amounts(match.code),
        )
        if isinstance(result, Miss | TransportError):
            return result
        if not isinstance(result, list):
            _logger.warning("CNF nutrient payload is not a list")
            return Miss(reason="schema mismatch")

        values: dict[str, float] = {}
        for row in result:
            parsed = _validate("CNF", CnfNutrientAmountRow, row)
            if isinstance(parsed, Miss) or parsed.nutrient_value is None:
                continue
            field_name = _CNF_NUTRIENT_IDS.get(parsed.nutrient_name_id)
            if field_name is not None:
                values[field_name] = parsed.nutrient_value
        if not values:
            return Miss(reason="no nutrient amounts")

        calories = values.pop("calories", None)
        if self.debug:
            _logger.info(
                "CNF hit: term=%s code=%s score=%.2f lang=%s",
                term,
                match.code,
                match.score,
                match.language.value,
            )
        return Hit(
            NutritionData(
                name=match.display_name,
                facts=NutritionFacts(calories=_kcal(calories), **values),
                source=Provenance.CNF,
            )
        )
