"""Pydantic models for nutrition API payloads."""

from pydantic import BaseModel, Field

from nutrition_resolver.domain.nutrition import (
    BarcodeLookupResult,
    NutritionData,
    NutritionFacts,
)


class FactsPayload(BaseModel):
    """Macro values; ``null`` when the source did not report one."""

    calories: int | None = None
    protein: float | None = None
    carbs: float | None = None
    fat: float | None = None
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None

    @classmethod
    def from_facts(cls, facts: NutritionFacts) -> "FactsPayload":
        return cls(**facts.to_dict())


class NutritionPayload(BaseModel):
    """Free-text lookup result."""

    name: str
    source: str
    serving_size: str
    per_100g: FactsPayload

    @classmethod
    def from_data(cls, data: NutritionData) -> "NutritionPayload":
        return cls(
            name=data.name,
            source=data.source.value,
            serving_size=data.serving_size,
            per_100g=FactsPayload.from_facts(data.facts),
        )


class ServingPayload(BaseModel):
    """Serving size shown next to per-serving values."""

    display_label: str
    grams: float
    was_corrected: bool
    correction_reason: str | None = None


class BarcodePayload(BaseModel):
    """Barcode lookup result."""

    name: str
    brand: str | None = None
    image_url: str | None = None
    barcode: str | None = None
    provenance: str
    per_100g: FactsPayload
    per_serving: FactsPayload
    serving: ServingPayload

    @classmethod
    def from_result(cls, result: BarcodeLookupResult) -> "BarcodePayload":
        info = result.serving_info
        return cls(
            name=result.identity.name,
            brand=result.identity.brand,
            image_url=result.identity.image_url,
            barcode=result.identity.barcode,
            provenance=result.provenance.value,
            per_100g=FactsPayload.from_facts(result.per_100g),
            per_serving=FactsPayload.from_facts(result.per_serving),
            serving=ServingPayload(
                display_label=info.display_label,
                grams=info.grams,
                was_corrected=info.was_corrected,
                correction_reason=info.correction_reason,
            ),
        )


class BatchLookupRequest(BaseModel):
    """Batch free-text lookup request."""

    queries: list[str] = Field(default_factory=list)


class BatchLookupResponse(BaseModel):
    """Batch results keyed by the original query strings."""

    results: dict[str, NutritionPayload | None]
