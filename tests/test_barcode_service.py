"""Tests for barcode lookups with cross-validation."""

import asyncio

from nutrition_resolver.domain.nutrition import Provenance
from tests.conftest import (
    FakeCnfClient,
    FakeFdcClient,
    FakeOpenFoodFactsClient,
    Services,
    build_services,
    off_product,
)

HOT_CHOCOLATE_FOODS_EN = [
    {"food_code": 2869, "food_description": "Hot chocolate, mix, powder"}
]
HOT_CHOCOLATE_FOODS_FR = [
    {"food_code": 2869, "food_description": "Chocolat chaud, mélange sec"}
]

COFFEE_WHITENER = {
    "foods": [
        {
            "description": "COFFEE WHITENER",
            "brandOwner": "Nestle",
            "gtinUpc": "006073114236",
            "foodNutrients": [
                {"nutrientName": "Energy", "nutrientId": 1008, "value": 500},
                {"nutrientName": "Protein", "nutrientId": 1003, "value": 1},
                {
                    "nutrientName": "Carbohydrate, by difference",
                    "nutrientId": 1005,
                    "value": 60,
                },
                {"nutrientName": "Total lipid (fat)", "nutrientId": 1004, "value": 30},
                {
                    "nutrientName": "Fiber, total dietary",
                    "nutrientId": 1079,
                    "value": 0,
                },
                {
                    "nutrientName": "Sugars, total including NLEA",
                    "nutrientId": 2000,
                    "value": 40,
                },
                {"nutrientName": "Sodium, Na", "nutrientId": 1093, "value": 50},
            ],
        }
    ]
}


def test_agreeing_sources_keep_product_values(
    services: Services, off_client: FakeOpenFoodFactsClient
) -> None:
    off_client.products["1234567890"] = off_product(
        product_name="Granulated Sugar",
        serving_size="4g",
        nutriments={
            "energy-kcal_100g": 400,
            "proteins_100g": 0,
            "carbohydrates_100g": 100,
            "fat_100g": 0,
        },
    )

    result = asyncio.run(services.barcode.lookup_by_barcode("1234567890"))

    assert result is not None
    assert result.identity.name == "Granulated Sugar"
    assert result.per_100g.calories == 400
    assert result.provenance is Provenance.OPENFOODFACTS_VERIFIED
    assert result.serving_info.grams == 4.0
    assert result.per_serving.calories == 16


def test_wrong_product_values_are_replaced_by_reference(
    services: Services, off_client: FakeOpenFoodFactsClient
) -> None:
    off_client.products["9999999999"] = off_product(
        product_name="Sugar",
        serving_size="4g",
        nutriments={"energy-kcal_100g": 50, "carbohydrates_100g": 12},
    )

    result = asyncio.run(services.barcode.lookup_by_barcode("9999999999"))

    assert result is not None
    assert result.identity.name == "Sugar"
    assert result.per_100g.calories == 387
    assert result.provenance is Provenance.CNF
    assert result.serving_info.grams == 4.0
    assert result.per_serving.calories == 15


def test_zero_calorie_product_is_not_replaced_by_reference(
    services: Services, off_client: FakeOpenFoodFactsClient
) -> None:
    off_client.products["7777777777"] = off_product(
        product_name="Sugar",
        serving_size="4g",
        nutriments={"energy-kcal_100g": 0, "carbohydrates_100g": 0},
    )

    result = asyncio.run(services.barcode.lookup_by_barcode("7777777777"))

    assert result is not None
    assert result.per_100g.calories == 0
    assert result.per_100g.carbs == 0.0
    assert result.per_100g.fat == 0.0
    assert result.provenance is Provenance.OPENFOODFACTS
    assert result.per_serving.calories == 0


def test_french_product_name_matches_reference(
    services: Services, off_client: FakeOpenFoodFactsClient
) -> None:
    off_client.products["8888888888"] = off_product(
        product_name="Sucre",
        serving_size="4g",
        nutriments={"energy-kcal_100g": 50, "carbohydrates_100g": 12},
    )

    result = asyncio.run(services.barcode.lookup_by_barcode("8888888888"))

    assert result is not None
    assert result.per_100g.calories == 387
    assert result.provenance is Provenance.CNF


def test_package_sized_serving_is_corrected() -> None:
    off = FakeOpenFoodFactsClient(
        products={
            "0663447217174": off_product(
                product_name="Hot Chocolate K-Cup Pods",
                serving_size="236g",
                nutriments={
                    "energy-kcal_100g": 400,
                    "proteins_100g": 5,
                    "carbohydrates_100g": 80,
                    "fat_100g": 5,
                },
            )
        }
    )
    cnf = FakeCnfClient(english=HOT_CHOCOLATE_FOODS_EN, french=HOT_CHOCOLATE_FOODS_FR)
    services = build_services(cnf=cnf, off=off)

    result = asyncio.run(services.barcode.lookup_by_barcode("0663447217174"))

    assert result is not None
    assert result.serving_info.was_corrected
    assert result.serving_info.grams == 15.0
    assert result.per_serving.calories == 60
    assert result.per_100g.calories == 400


def test_padded_variant_is_found() -> None:
    off = FakeOpenFoodFactsClient(
        products={
            "0036000291452": off_product(
                product_name="Tissue", nutriments={"energy-kcal_100g": 1}
            )
        }
    )
    services = build_services(off=off)

    result = asyncio.run(services.barcode.lookup_by_barcode("036000291452"))

    assert result is not None
    assert result.identity.barcode == "0036000291452"
    assert off.calls[:2] == ["036000291452", "0036000291452"]


def test_falls_back_to_usda_branded_upc() -> None:
    fdc = FakeFdcClient(branded_payload=COFFEE_WHITENER)
    services = build_services(fdc=fdc)

    result = asyncio.run(services.barcode.lookup_by_barcode("6073114236"))

    assert result is not None
    assert result.identity.name == "COFFEE WHITENER"
    assert result.identity.brand == "Nestle"
    assert result.per_100g.calories == 500
    assert result.per_100g.sodium == 50
    assert result.provenance is Provenance.USDA
    assert result.serving_info.display_label == "100g"
    assert fdc.calls == [("6073114236", ["Branded"])]


def test_unknown_barcode_returns_none(
    services: Services, off_client: FakeOpenFoodFactsClient
) -> None:
    result = asyncio.run(services.barcode.lookup_by_barcode("5000000000000"))

    assert result is None
    assert off_client.calls == ["5000000000000"]


def test_empty_barcode_returns_none(services: Services) -> None:
    assert asyncio.run(services.barcode.lookup_by_barcode("  ")) is None
