"""Concern scorer: ranks candidates by ingredient-to-concern effectiveness."""

from dataclasses import dataclass

from skinroutine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from skinroutine.engine.ingredients import ingredient_text, match_count, primary_active_text
from skinroutine.schemas import PatientProfile, Product
from skinroutine.vocabulary import DEFAULT_VOCABULARY, Vocabulary


@dataclass(frozen=True)
class ScoredCandidate:
    product: Product
    score: float


def score_product(
    product: Product,
    profile: PatientProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    actives = primary_active_text(product)
    full = ingredient_text(product)

    score = 0.0
    for concern in profile.all_concerns:
        ideal = vocabulary.concern_actives.get(concern, [])
        score += config.active_weight * match_count(actives, ideal)
        score += config.ingredient_weight * match_count(full, ideal)
        if concern in profile.primary_concerns:
            score += config.primary_concern_boost

    if profile.is_sensitive and product.sensitive_safe:
        score += config.sensitive_bonus
    return score


def rank_candidates(
    products: list[Product],
    profile: PatientProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[ScoredCandidate]:
    """Score descending; equal scores keep catalog order (sorted is stable)."""
    scored = [
        ScoredCandidate(product=p, score=score_product(p, profile, vocabulary, config))
        for p in products
    ]
    return sorted(scored, key=lambda c: c.score, reverse=True)
