"""
Routine assembler.

Turns the ranked candidate list into one cleanser, one moisturizer, one
protector and a tier-capped set of treatments:

  bucket -> backfill empty essentials -> pick essentials
         -> resolve exfoliant conflicts -> cap treatments -> dedup
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from skinroutine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from skinroutine.engine.budget import treatment_cap
from skinroutine.engine.ingredients import is_exfoliating
from skinroutine.engine.scoring import ScoredCandidate
from skinroutine.engine.steps import infer_steps, serves
from skinroutine.engine.strength import within_step_bounds
from skinroutine.schemas import ESSENTIAL_STEPS, BudgetTier, Product, RoutineStep, SkinType
from skinroutine.vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)


@dataclass
class RoutineBuckets:
    cleansers: list[Product] = field(default_factory=list)
    moisturizers: list[Product] = field(default_factory=list)
    protectors: list[Product] = field(default_factory=list)
    treatments: list[Product] = field(default_factory=list)

    def for_step(self, step: RoutineStep) -> list[Product]:
        return {
            RoutineStep.CLEANSE: self.cleansers,
            RoutineStep.MOISTURIZE: self.moisturizers,
            RoutineStep.PROTECT: self.protectors,
            RoutineStep.TREAT: self.treatments,
        }[step]

    def missing_essentials(self) -> list[RoutineStep]:
        return [step for step in ESSENTIAL_STEPS if not self.for_step(step)]


def bucket_candidates(
    ranked: list[ScoredCandidate],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> RoutineBuckets:
    """Partition in score order; a product may land in several buckets."""
    buckets = RoutineBuckets()
    for candidate in ranked:
        for step in infer_steps(candidate.product, vocabulary):
            buckets.for_step(step).append(candidate.product)
    return buckets


def _loose_pattern(step: RoutineStep, vocabulary: Vocabulary) -> str:
    kw = vocabulary.step_keywords
    return {
        RoutineStep.CLEANSE: kw.loose_cleanser,
        RoutineStep.MOISTURIZE: kw.loose_moisturizer,
        RoutineStep.PROTECT: kw.loose_protector,
    }[step]


def loosely_serves(product: Product, step: RoutineStep, vocabulary: Vocabulary) -> bool:
    text = f"{product.name} {product.summary}".lower()
    return re.search(_loose_pattern(step, vocabulary), text) is not None


def backfill_essentials(
    buckets: RoutineBuckets,
    eligible: list[Product],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    skin_type: SkinType = SkinType.NORMAL,
) -> RoutineBuckets:
    """Fill empty essential buckets from the unscored eligible catalog.

    `eligible` has already been through every hard filter; only the role
    test is relaxed here. A product already holding another essential role
    is never reused, and its strength must fit the role it is backfilled into.
    """
    for step in buckets.missing_essentials():
        taken = {
            p.id for other in ESSENTIAL_STEPS if other != step for p in buckets.for_step(other)
        }
        for product in eligible:
            if product.id in taken:
                continue
            if not (serves(product, step, vocabulary) or loosely_serves(product, step, vocabulary)):
                continue
            if within_step_bounds(product, step, skin_type, vocabulary):
                buckets.for_step(step).append(product)
                logger.info(f"Backfilled {step.value} with {product.id} ({product.name})")
                break
        else:
            logger.warning(f"No safety-eligible product can fill the {step.value} role")
    return buckets


def _pick_essentials(
    buckets: RoutineBuckets,
    vocabulary: Vocabulary,
) -> tuple[Optional[Product], Optional[Product], Optional[Product]]:
    cleanser = buckets.cleansers[0] if buckets.cleansers else None
    moisturizer = buckets.moisturizers[0] if buckets.moisturizers else None

    if moisturizer is not None and serves(moisturizer, RoutineStep.PROTECT, vocabulary):
        return cleanser, moisturizer, moisturizer

    # Prefer a standalone SPF next to a plain moisturizer
    standalone = [
        p for p in buckets.protectors if not serves(p, RoutineStep.MOISTURIZE, vocabulary)
    ]
    if standalone:
        protector = standalone[0]
    elif buckets.protectors:
        protector = buckets.protectors[0]
    else:
        protector = None

    if moisturizer is None and protector is not None and serves(
        protector, RoutineStep.MOISTURIZE, vocabulary
    ):
        moisturizer = protector
    return cleanser, moisturizer, protector


def resolve_exfoliant_conflicts(
    cleanser: Optional[Product],
    treatments: list[Product],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> list[Product]:
    """At most one strong exfoliant per routine, and none beside an exfoliating cleanser."""
    if cleanser is not None and is_exfoliating(cleanser, vocabulary):
        kept = [t for t in treatments if not is_exfoliating(t, vocabulary)]
    else:
        kept = []
        seen_exfoliant = False
        for treatment in treatments:
            if is_exfoliating(treatment, vocabulary):
                if seen_exfoliant:
                    continue
                seen_exfoliant = True
            kept.append(treatment)

    dropped = len(treatments) - len(kept)
    if dropped:
        logger.info(f"Dropped {dropped} exfoliating treatment(s) to keep one strong active")
    return kept


def assemble_routine(
    ranked: list[ScoredCandidate],
    eligible: list[Product],
    tier: BudgetTier,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    skin_type: SkinType = SkinType.NORMAL,
) -> RoutineBuckets:
    """Final buckets: each essential holds at most one product (the same
    product may sit in both moisturizer and protector), treatments capped."""
    buckets = bucket_candidates(ranked, vocabulary)
    buckets = backfill_essentials(buckets, eligible, vocabulary, skin_type)

    cleanser, moisturizer, protector = _pick_essentials(buckets, vocabulary)
    seen = {p.id for p in (cleanser, moisturizer, protector) if p is not None}

    treatments: list[Product] = []
    for treatment in buckets.treatments:
        if treatment.id in seen:
            continue
        seen.add(treatment.id)
        treatments.append(treatment)
    treatments = resolve_exfoliant_conflicts(cleanser, treatments, vocabulary)
    treatments = treatments[:treatment_cap(tier, config)]

    return RoutineBuckets(
        cleansers=[cleanser] if cleanser is not None else [],
        moisturizers=[moisturizer] if moisturizer is not None else [],
        protectors=[protector] if protector is not None else [],
        treatments=treatments,
    )


def ordered_selection(buckets: RoutineBuckets) -> list[tuple[RoutineStep, Product]]:
    """Cleanser, moisturizer, protector, treatments; first occurrence of an id wins."""
    seen: set[str] = set()
    selection: list[tuple[RoutineStep, Product]] = []
    for step in (*ESSENTIAL_STEPS, RoutineStep.TREAT):
        for product in buckets.for_step(step):
            if product.id in seen:
                continue
            seen.add(product.id)
            selection.append((step, product))
    return selection


def missing_roles(
    selection: list[tuple[RoutineStep, Product]],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> list[RoutineStep]:
    """Essential roles the final selection leaves unfilled.

    A combo product selected for one essential role also covers any other
    essential role it strictly serves.
    """
    covered = {role for role, _ in selection}
    for role, product in selection:
        if role in ESSENTIAL_STEPS:
            covered.update(step for step in ESSENTIAL_STEPS if serves(product, step, vocabulary))
    return [step for step in ESSENTIAL_STEPS if step not in covered]
