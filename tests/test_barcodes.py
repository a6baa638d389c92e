"""Tests for barcode variant generation."""

import pytest

from nutrition_resolver.services.barcodes import (
    barcode_variants,
    ean13_check_digit,
    upc_a_check_digit,
)


def test_upc_a_check_digit_known_code() -> None:
    assert upc_a_check_digit("03600029145") == 2


def test_ean13_check_digit_known_code() -> None:
    assert ean13_check_digit("400638133393") == 1


@pytest.mark.parametrize("body", ["123", "0360002914a", "036000291452"])
def test_upc_a_check_digit_rejects_bad_bodies(body: str) -> None:
    with pytest.raises(ValueError):
        upc_a_check_digit(body)


def test_ean13_check_digit_rejects_bad_bodies() -> None:
    with pytest.raises(ValueError):
        ean13_check_digit("12345")


def test_variants_for_short_code_include_padding_and_check_digits() -> None:
    variants = barcode_variants("6073114236")

    assert variants[0] == "6073114236"
    assert "006073114236" in variants
    assert "0006073114236" in variants
    assert f"06073114236{upc_a_check_digit('06073114236')}" in variants
    assert f"006073114236{ean13_check_digit('006073114236')}" in variants
    assert len(variants) == len(set(variants))


def test_variants_for_upc_a_code() -> None:
    variants = barcode_variants("036000291452")

    assert variants == [
        "036000291452",
        "0036000291452",
        f"036000291452{ean13_check_digit('036000291452')}",
    ]


def test_variants_for_ean13_code_are_unpadded() -> None:
    assert barcode_variants("4006381333931") == ["4006381333931"]


def test_variants_strip_whitespace_and_hyphens() -> None:
    assert barcode_variants(" 4006381-333931 ")[0] == "4006381333931"


def test_variants_for_empty_code() -> None:
    assert barcode_variants("") == []
    assert barcode_variants("  - ") == []


def test_variants_for_non_numeric_or_long_code_return_raw_only() -> None:
    assert barcode_variants("ABC123") == ["ABC123"]
    assert barcode_variants("12345678901234") == ["12345678901234"]


@pytest.mark.parametrize("code", ["03600029145", "07300000000", "99999999999"])
def test_upc_a_variant_of_eleven_digit_code_has_valid_check_digit(code: str) -> None:
    upc_a = [variant for variant in barcode_variants(code) if len(variant) == 12]

    assert f"{code}{upc_a_check_digit(code)}" in upc_a


@pytest.mark.parametrize("code", ["400638133393", "000000000000"])
def test_ean13_variant_of_twelve_digit_code_has_valid_check_digit(code: str) -> None:
    assert f"{code}{ean13_check_digit(code)}" in barcode_variants(code)
