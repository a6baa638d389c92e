"""Pydantic models for external nutrition provider payloads."""

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class OffNutriments(_Payload):
    """Open Food Facts nutriments (per-100 g fields only)."""

    energy_kcal_100g: float | None = Field(default=None, alias="energy-kcal_100g")
    energy_100g: float | None = None
    proteins_100g: float | None = None
    carbohydrates_100g: float | None = None
    fat_100g: float | None = None
    fiber_100g: float | None = None
    sugars_100g: float | None = None
    sodium_100g: float | None = None


class OffProduct(_Payload):
    """Open Food Facts product."""

    product_name: str | None = None
    product_name_en: str | None = None
    generic_name: str | None = None
    generic_name_en: str | None = None
    categories_tags: list[str] = Field(default_factory=list)
    brands: str | None = None
    serving_size: str | None = None
    serving_quantity: float | str | None = None
    image_url: str | None = None
    image_front_url: str | None = None
    nutriments: OffNutriments = Field(default_factory=OffNutriments)


class OffProductResponse(_Payload):
    """Open Food Facts product lookup response."""

    status: int = 0
    product: OffProduct | None = None


class CnfFoodRow(_Payload):
    """Canadian Nutrient File food list row."""

    food_code: int
    food_description: str


class CnfNutrientAmountRow(_Payload):
    """Canadian Nutrient File nutrient amount row."""

    food_code: int | None = None
    nutrient_value: float | None = None
    nutrient_name_id: int
    nutrient_web_name: str | None = None


class FdcFoodNutrient(_Payload):
    """USDA search result nutrient."""

    nutrient_name: str = Field(alias="nutrientName")
    nutrient_id: int | None = Field(default=None, alias="nutrientId")
    value: float | None = None
    unit_name: str | None = Field(default=None, alias="unitName")


class FdcSearchFood(_Payload):
    """USDA search result food."""

    fdc_id: int | None = Field(default=None, alias="fdcId")
    description: str
    brand_owner: str | None = Field(default=None, alias="brandOwner")
    brand_name: str | None = Field(default=None, alias="brandName")
    gtin_upc: str | None = Field(default=None, alias="gtinUpc")
    serving_size: float | None = Field(default=None, alias="servingSize")
    serving_size_unit: str | None = Field(default=None, alias="servingSizeUnit")
    household_serving: str | None = Field(
        default=None, alias="householdServingFullText"
    )
    food_nutrients: list[FdcFoodNutrient] = Field(
        default_factory=list, alias="foodNutrients"
    )


class FdcSearchResponse(_Payload):
    """USDA foods search response."""

    foods: list[FdcSearchFood]


class CalorieNinjasItem(_Payload):
    """CalorieNinjas nutrition item."""

    name: str
    calories: float
    protein_g: float
    carbohydrates_total_g: float
    fat_total_g: float
    fiber_g: float | None = None
    sugar_g: float | None = None
    sodium_mg: float | None = None
    serving_size_g: float = 100


class CalorieNinjasResponse(_Payload):
    """CalorieNinjas nutrition response."""

    items: list[CalorieNinjasItem]
