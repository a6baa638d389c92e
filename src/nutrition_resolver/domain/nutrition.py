"""Nutrition domain models."""

from dataclasses import dataclass, fields, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum


class Provenance(str, Enum):
    """Data source(s) that produced a nutrition result."""

    OPENFOODFACTS = "openfoodfacts"
    USDA = "usda"
    CNF = "cnf"
    API_NINJAS = "api-ninjas"
    OPENFOODFACTS_VERIFIED = "openfoodfacts+verified"
    USDA_VERIFIED = "usda+verified"
    CACHE = "cache"

    def verified(self) -> "Provenance":
        """Return the cross-validated form of a primary source."""
        if self in {Provenance.OPENFOODFACTS, Provenance.OPENFOODFACTS_VERIFIED}:
            return Provenance.OPENFOODFACTS_VERIFIED
        if self in {Provenance.USDA, Provenance.USDA_VERIFIED}:
            return Provenance.USDA_VERIFIED
        return self


@dataclass(frozen=True)
class NutritionFacts:
    """Macros per 100 g. ``None`` means the source did not report the value."""

    calories: int | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None

    @property
    def has_calories(self) -> bool:
        return self.calories is not None and self.calories > 0

    @property
    def has_any_value(self) -> bool:
        return any(getattr(self, f.name) is not None for f in fields(self))

    def merged_with(self, other: "NutritionFacts") -> "NutritionFacts":
        """Fill fields left unset here from ``other``."""
        updates = {
            f.name: getattr(other, f.name)
            for f in fields(self)
            if getattr(self, f.name) is None and getattr(other, f.name) is not None
        }
        return replace(self, **updates) if updates else self

    def scaled(self, factor: float) -> "NutritionFacts":
        """Scale every value, rounding calories to units and the rest to 0.1."""
        values: dict[str, float | int | None] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                values[f.name] = None
            elif f.name == "calories":
                values[f.name] = int(round_half_up(value * factor, 0))
            else:
                values[f.name] = round_half_up(value * factor, 1)
        return NutritionFacts(**values)

    def to_dict(self) -> dict[str, float | int | None]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, raw: dict[str, object]) -> "NutritionFacts":
        calories = raw.get("calories")
        return cls(
            calories=int(round_half_up(float(calories), 0))
            if isinstance(calories, int | float)
            else None,
            protein=_optional_float(raw.get("protein")),
            carbs=_optional_float(raw.get("carbs")),
            fat=_optional_float(raw.get("fat")),
            fiber=_optional_float(raw.get("fiber")),
            sugar=_optional_float(raw.get("sugar")),
            sodium=_optional_float(raw.get("sodium")),
        )


@dataclass(frozen=True)
class ProductIdentity:
    """Who the product is; the primary source's identity always wins."""

    name: str
    brand: str | None = None
    image_url: str | None = None
    barcode: str | None = None


@dataclass(frozen=True)
class ServingInfo:
    """Serving size shown to the user."""

    display_label: str
    grams: float
    was_corrected: bool = False
    correction_reason: str | None = None


@dataclass(frozen=True)
class NutritionData:
    """Per-100 g facts with the metadata of the lookup that produced them."""

    name: str
    facts: NutritionFacts
    source: Provenance
    serving_size: str = "100g"

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "facts": self.facts.to_dict(),
            "source": self.source.value,
            "serving_size": self.serving_size,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, object]) -> "NutritionData":
        facts_raw = raw.get("facts")
        return cls(
            name=str(raw.get("name", "")),
            facts=NutritionFacts.from_dict(
                facts_raw if isinstance(facts_raw, dict) else {}
            ),
            source=Provenance(str(raw.get("source", Provenance.CACHE.value))),
            serving_size=str(raw.get("serving_size") or "100g"),
        )


@dataclass(frozen=True)
class BarcodeLookupResult:
    """Resolved barcode product with reconciled and per-serving values."""

    identity: ProductIdentity
    per_100g: NutritionFacts
    per_serving: NutritionFacts
    serving_info: ServingInfo
    provenance: Provenance


def round_half_up(value: float, places: int) -> float:
    """Round like a nutrition label does (0.5 always rounds up)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _optional_float(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return float(value)
