"""Serving-size plausibility checks for barcode products.

Product databases sometimes record the whole package as the serving size,
e.g. a box of pods declared as "236g". Per-100 g values are the source of
truth; a declared serving that implies more than 800 kcal or weighs more
than 500 g is replaced by an estimate.
"""

import re

from nutrition_resolver.domain.nutrition import NutritionFacts, ServingInfo

MAX_PLAUSIBLE_SERVING_CALORIES = 800
MAX_PLAUSIBLE_SERVING_GRAMS = 500
DEFAULT_SERVING_GRAMS = 100.0

_POD_GRAMS = 15
_BAR_GRAMS = 40
_PACKET_GRAMS = 28
_UNKNOWN_DENSITY_GRAMS = 30
_TARGET_SERVING_CALORIES = 150
_MIN_ESTIMATE_GRAMS = 10
_MAX_ESTIMATE_GRAMS = 200

_PAREN_AMOUNT = re.compile(r"\((\d+(?:\.\d+)?)\s*(?:g|ml)\)")
_BARE_AMOUNT = re.compile(r"(\d+(?:\.\d+)?)\s*(?:g|ml)(?:\s|$)")
_NUMBER_ONLY = re.compile(r"^(\d+(?:\.\d+)?)$")

_POD_PATTERN = re.compile(r"pod|k-?\s?cup|capsule|single[\s-]serve")
_PACKET_PATTERN = re.compile(r"packet|sachet|pouch")


def parse_serving_grams(serving: str | None) -> float | None:
    """Extract grams from a serving string such as ``"1 pod (14g)"``."""
    if not serving:
        return None
    text = serving.lower().strip()
    for pattern in (_PAREN_AMOUNT, _BARE_AMOUNT, _NUMBER_ONLY):
        match = pattern.search(text)
        if match:
            return float(match.group(1))
    return None


def estimate_serving_grams(product_name: str, calories_per_100g: float | None) -> int:
    """Estimate one serving from the product name, else from calorie density."""
    name = (product_name or "").lower()
    if _POD_PATTERN.search(name):
        return _POD_GRAMS
    if "bar" in name:
        return _BAR_GRAMS
    if _PACKET_PATTERN.search(name):
        return _PACKET_GRAMS
    if calories_per_100g and calories_per_100g > 0:
        estimated = round(_TARGET_SERVING_CALORIES / calories_per_100g * 100)
        return max(_MIN_ESTIMATE_GRAMS, min(_MAX_ESTIMATE_GRAMS, estimated))
    return _UNKNOWN_DENSITY_GRAMS


def _implausibility_reason(grams: float, calories_per_100g: int | None) -> str | None:
    if calories_per_100g is not None:
        implied = calories_per_100g * grams / 100
        if implied > MAX_PLAUSIBLE_SERVING_CALORIES:
            return (
                f"{round(implied)} cal per serving seems too high; "
                "this may be the total for the entire package."
            )
    if grams > MAX_PLAUSIBLE_SERVING_GRAMS:
        return (
            f"Serving size of {_format_grams(grams)}g is unusually large; "
            "this may be the full package weight."
        )
    return None


def correct_serving(
    declared: str | None, per_100g: NutritionFacts, product_name: str
) -> tuple[ServingInfo, NutritionFacts]:
    """Validate the declared serving and scale per-100 g values to it."""
    grams = parse_serving_grams(declared)
    if grams is None or grams <= 0:
        info = ServingInfo(display_label="100g", grams=DEFAULT_SERVING_GRAMS)
        return info, per_100g.scaled(1.0)

    reason = _implausibility_reason(grams, per_100g.calories)
    if reason is None:
        label = declared.strip()
        if _NUMBER_ONLY.match(label):
            label = f"{_format_grams(grams)}g"
        info = ServingInfo(display_label=label, grams=grams)
    else:
        estimated = estimate_serving_grams(product_name, per_100g.calories)
        info = ServingInfo(
            display_label=f"~{estimated}g (estimated serving)",
            grams=float(estimated),
            was_corrected=True,
            correction_reason=reason,
        )
    return info, per_100g.scaled(info.grams / 100)


def _format_grams(grams: float) -> str:
    return str(int(grams)) if grams == int(grams) else str(grams)
