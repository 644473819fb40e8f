"""
Recommendation engine entry point.

  safety -> type/sensitivity -> strength -> price (low tier) -> score
         -> assemble -> RecommendationResult

Pure and synchronous: no I/O, no caches, no shared state. An empty catalog
yields an empty routine, never an exception.
"""

import logging
from typing import Sequence

from skinroutine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from skinroutine.engine.assembler import assemble_routine, missing_roles, ordered_selection
from skinroutine.engine.budget import budget_tier, total_cost, within_price_ceiling
from skinroutine.engine.ingredients import ingredient_text, match_count, primary_active_text
from skinroutine.engine.matching import matches_profile
from skinroutine.engine.safety import is_unsafe
from skinroutine.engine.scoring import rank_candidates
from skinroutine.engine.strength import passes_strength
from skinroutine.schemas import (
    BudgetTier,
    PatientProfile,
    Product,
    RecommendationResult,
    RecommendedProduct,
)
from skinroutine.vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)


def eligible_products(
    catalog: Sequence[Product],
    profile: PatientProfile,
    tier: BudgetTier,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> list[Product]:
    """Every hard filter, in catalog order."""
    safe = [p for p in catalog if not is_unsafe(p, profile, vocabulary)]
    matched = [p for p in safe if matches_profile(p, profile)]
    within_strength = [p for p in matched if passes_strength(p, profile.skin_type, vocabulary)]
    affordable = [p for p in within_strength if within_price_ceiling(p, profile.budget, tier)]

    logger.info(
        f"Filtered catalog | Total: {len(catalog)} | Safe: {len(safe)} | "
        f"Type match: {len(matched)} | Strength: {len(within_strength)} | "
        f"Price ({tier.value}): {len(affordable)}"
    )
    return affordable


def _target_concern(product: Product, profile: PatientProfile, vocabulary: Vocabulary) -> tuple[str, str]:
    text = f"{primary_active_text(product)} {ingredient_text(product)}"
    for concern in profile.all_concerns:
        if match_count(text, vocabulary.concern_actives.get(concern, [])):
            priority = "primary" if concern in profile.primary_concerns else "secondary"
            return concern, priority
    if profile.all_concerns:
        return profile.all_concerns[0], "primary"
    return "general", "primary"


def _treatment_approach(profile: PatientProfile) -> str:
    count = len(profile.all_concerns)
    if count <= 1:
        return "single"
    if count == 2:
        return "dual"
    return "complex"


def recommend(
    profile: PatientProfile,
    catalog: Sequence[Product],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> RecommendationResult:
    tier = budget_tier(profile.budget, config)
    eligible = eligible_products(catalog, profile, tier, vocabulary)
    ranked = rank_candidates(eligible, profile, vocabulary, config)
    buckets = assemble_routine(ranked, eligible, tier, vocabulary, config, profile.skin_type)
    selection = ordered_selection(buckets)

    products = []
    for role, product in selection:
        concern, priority = _target_concern(product, profile, vocabulary)
        products.append(RecommendedProduct(
            product_id=product.id,
            product_name=product.name or "Unknown Product",
            role=role,
            price=product.cost,
            target_concern=concern,
            priority=priority,
            cannot_mix_with=list(product.cannot_mix_with),
        ))

    cost = total_cost([product for _, product in selection])
    missing = missing_roles(selection, vocabulary)
    if missing:
        logger.warning(f"Degraded routine, missing roles: {[m.value for m in missing]}")

    logger.info(
        f"Routine assembled | Products: {len(products)} | Cost: ${cost} | "
        f"Budget: ${profile.budget} ({tier.value})"
    )
    return RecommendationResult(
        products=products,
        total_cost=cost,
        budget=profile.budget,
        budget_tier=tier,
        budget_utilization=f"${cost}/${profile.budget}",
        treatment_approach=_treatment_approach(profile),
        missing_roles=missing,
    )
