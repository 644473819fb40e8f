"""
Safety filter — hard exclusion of products that are unsafe for a patient.

Runs before any ranking. A product that trips one rule is gone no matter
how well it would have scored.
"""

import logging
from typing import Callable, Optional

from skinroutine.engine.ingredients import extract_actives, has_any
from skinroutine.schemas import PatientProfile, Product
from skinroutine.vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

# (profile, product, detected actives, vocabulary) -> reason or None
SafetyRule = Callable[[PatientProfile, Product, set[str], Vocabulary], Optional[str]]


def _youngest_retinoid(profile, product, actives, vocab):
    if profile.age_bracket.is_youngest and has_any(actives, vocab, "retinoid"):
        return "retinoid for youngest age bracket"
    return None


def _pregnancy(profile, product, actives, vocab):
    if profile.has_condition("pregnant") and has_any(actives, vocab, "retinoid", "bha"):
        return "retinoid or BHA during pregnancy"
    return None


def _rosacea_eczema(profile, product, actives, vocab):
    if not (profile.has_condition("rosacea") or profile.has_condition("eczema")):
        return None
    if has_any(actives, vocab, "alcohol", "fragrance", "retinoid", "aha", "bha", "benzoyl_peroxide"):
        return "irritant with rosacea/eczema"
    return None


def _retinoid_prescription(profile, product, actives, vocab):
    if profile.takes(*vocab.retinoid_prescriptions) and has_any(
        actives, vocab, "retinoid", "exfoliating_acid"
    ):
        return "retinoid or exfoliating acid on top of a prescription retinoid"
    return None


def _benzoyl_peroxide_medication(profile, product, actives, vocab):
    if profile.takes("benzoyl peroxide") and has_any(actives, vocab, "benzoyl_peroxide"):
        return "duplicate benzoyl peroxide"
    return None


def _antibiotic_sulfur(profile, product, actives, vocab):
    if profile.takes(*vocab.antibiotic_medications) and has_any(actives, vocab, "sulfur"):
        return "sulfur with topical antibiotic"
    return None


def _allergens(profile, product, actives, vocab):
    primary = product.primary_actives.lower()
    full = product.ingredients.lower()
    for allergen in profile.safety.allergies:
        needle = allergen.lower()
        if needle in primary or needle in full:
            return f"allergen '{allergen}'"
    return None


SAFETY_RULES: list[SafetyRule] = [
    _youngest_retinoid,
    _pregnancy,
    _rosacea_eczema,
    _retinoid_prescription,
    _benzoyl_peroxide_medication,
    _antibiotic_sulfur,
    _allergens,
]


def unsafe_reason(
    product: Product,
    profile: PatientProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> Optional[str]:
    actives = extract_actives(product, vocabulary)
    for rule in SAFETY_RULES:
        reason = rule(profile, product, actives, vocabulary)
        if reason:
            return reason
    return None


def is_unsafe(
    product: Product,
    profile: PatientProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> bool:
    reason = unsafe_reason(product, profile, vocabulary)
    if reason:
        logger.debug(f"Excluded {product.id} ({product.name}): {reason}")
    return reason is not None
