"""Cross-validation of two independently sourced per-100 g results."""

import logging
from dataclasses import dataclass

from nutrition_resolver.domain.nutrition import NutritionFacts, Provenance

_logger = logging.getLogger(__name__)

# More than a 2x disagreement means the primary is not trusted.
MIN_RATIO = 0.5
MAX_RATIO = 2.0


@dataclass(frozen=True)
class SourcedFacts:
    """Per-100 g facts tagged with the provider that produced them."""

    facts: NutritionFacts
    source: Provenance


@dataclass(frozen=True)
class Reconciliation:
    """Trusted per-100 g values and which side they came from."""

    facts: NutritionFacts
    provenance: Provenance
    used_secondary: bool = False


def reconcile(
    primary: SourcedFacts | None, secondary: SourcedFacts | None
) -> Reconciliation | None:
    """Pick trusted values, favouring the primary whenever it is plausible."""
    if primary is None and secondary is None:
        return None
    if secondary is None:
        return Reconciliation(facts=primary.facts, provenance=primary.source)
    if primary is None:
        return Reconciliation(
            facts=secondary.facts, provenance=secondary.source, used_secondary=True
        )

    if primary.facts.has_calories and secondary.facts.has_calories:
        ratio = primary.facts.calories / secondary.facts.calories
        if ratio < MIN_RATIO or ratio > MAX_RATIO:
            _logger.info(
                "Distrusting %s (%s kcal) against %s (%s kcal), ratio=%.2f",
                primary.source.value,
                primary.facts.calories,
                secondary.source.value,
                secondary.facts.calories,
                ratio,
            )
            return Reconciliation(
                facts=secondary.facts,
                provenance=secondary.source,
                used_secondary=True,
            )
        return Reconciliation(
            facts=primary.facts.merged_with(secondary.facts),
            provenance=primary.source.verified(),
        )

    if primary.facts.calories is None and secondary.facts.has_calories:
        return Reconciliation(
            facts=secondary.facts, provenance=secondary.source, used_secondary=True
        )
    if primary.facts.calories == 0:
        # A labelled 0 kcal is a value, not a gap.
        return Reconciliation(
            facts=primary.facts.merged_with(secondary.facts),
            provenance=primary.source,
        )

    return Reconciliation(facts=primary.facts, provenance=primary.source)
