"""
Keyword and lookup tables behind every substring rule in the engine.

The defaults below are the built-in tables. A deployment can replace any of
them from a JSON file (see Settings.vocabulary_path) without touching the
filter, scoring or assembly code.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class StepKeywords(BaseModel):
    """Regex fragments used to infer a product's routine role."""

    # Strength-rating labels ("Cleanse 2/4", "Treat: 3/4")
    label_cleanse: str = r"\bcleanse\b"
    label_moisturize: str = r"\bmoistur"
    label_treat: str = r"\btreat\b|\bserum\b|\bactive\b"
    label_protect: str = r"\bprotect\b|\bspf\b"

    # Name / format / function / summary / ingredient text
    cleanser: str = r"cleanser|face\s*wash|cleansing|wash|foam(ing)?\s*cleanser|gel\s*cleanser"
    moisturizer: str = r"moisturi[sz]e|moisturi[sz]er|lotion|cream|hydrating|hydrate\b"
    spf: str = r"\bspf\b|sunscreen|sun\s*screen|broad\s*spectrum|pa\+"

    # Looser name/summary heuristics used only for essential backfill
    loose_cleanser: str = r"clean|wash|foam|micellar|soap"
    loose_moisturizer: str = r"moistur|cream|lotion|hydrat|balm|emulsion"
    loose_protector: str = r"spf|sunscreen|sun\s*screen|sunblock|\buv|broad\s*spectrum|pa\+"


def _strength_defaults() -> dict[str, dict[str, tuple[int, int]]]:
    return {
        "cleanse": {"oily": (2, 4), "combination": (2, 4), "dry": (1, 2), "normal": (1, 4)},
        "treat": {"oily": (2, 4), "combination": (2, 4), "dry": (1, 4), "normal": (1, 4)},
        "moisturize": {"oily": (1, 2), "combination": (2, 4), "dry": (2, 4), "normal": (1, 4)},
        "protect": {"oily": (1, 2), "combination": (2, 4), "dry": (2, 4), "normal": (1, 4)},
    }


class Vocabulary(BaseModel):
    active_terms: list[str] = Field(default_factory=lambda: [
        "retinol", "retinal", "retinoid",
        "benzoyl peroxide", "salicylic", "bha", "glycolic", "aha", "lactic", "pha",
        "azelaic", "sulfur", "vitamin c", "ascorbic",
        "niacinamide", "hyaluronic", "ceramide", "ceramides", "peptide", "zinc oxide",
        "fragrance", "alcohol",
    ])

    active_groups: dict[str, list[str]] = Field(default_factory=lambda: {
        "retinoid": ["retinol", "retinal", "retinoid"],
        "bha": ["salicylic", "bha"],
        "aha": ["glycolic", "aha"],
        "exfoliating_acid": ["glycolic", "aha", "salicylic", "bha"],
        "benzoyl_peroxide": ["benzoyl peroxide"],
        "sulfur": ["sulfur"],
        "alcohol": ["alcohol"],
        "fragrance": ["fragrance"],
    })

    exfoliant_terms: list[str] = Field(default_factory=lambda: [
        "aha", "bha", "glycolic", "salicylic", "lactic", "pha",
        "azelaic", "retinol", "retinal", "vitamin c", "ascorbic", "sulfur",
    ])
    exfoliation_pattern: str = r"exfoliat|peel|resurface|retino(i|l)|azelaic|vitamin\s*c|ascorbic|sulfur"

    concern_aliases: dict[str, str] = Field(default_factory=lambda: {
        "acne": "acne",
        "texture": "texture",
        "pores": "pores",
        "hyperpigmentation": "hyperpigmentation",
        "dark spots": "hyperpigmentation",
        "dark spot": "hyperpigmentation",
        "pigmentation": "hyperpigmentation",
        "melasma": "hyperpigmentation",
        "dark patches": "hyperpigmentation",
        "uneven skin tone": "hyperpigmentation",
        "wrinkles": "wrinkles",
        "fine lines": "fine lines",
        "wrinkles/fine lines": "wrinkles",
        "anti-aging": "wrinkles",
        "aging": "wrinkles",
        "age spots": "wrinkles",
        "redness": "redness",
        "dark circles": "dark circles",
        "under eye circles": "dark circles",
        "eye bags": "dark circles",
        "shaving bumps": "shaving bumps",
        "razor bumps": "shaving bumps",
        "ingrown hairs": "shaving bumps",
        "dullness": "dullness",
        "dull skin": "dullness",
        "lifeless skin": "dullness",
        "dryness": "dryness",
        "dry skin": "dryness",
        "dehydrated": "dryness",
        "flaky skin": "dryness",
    })
    primary_concerns: list[str] = Field(default_factory=lambda: [
        "acne", "texture", "pores", "hyperpigmentation",
    ])

    concern_actives: dict[str, list[str]] = Field(default_factory=lambda: {
        "acne": ["salicylic", "bha", "benzoyl peroxide", "retinal", "azelaic"],
        "texture": ["glycolic", "aha", "salicylic", "bha", "retinal"],
        "hyperpigmentation": ["vitamin c", "ascorbic", "kojic", "azelaic", "niacinamide"],
        "pores": ["niacinamide", "retinal"],
        "wrinkles": ["retinal", "retinol", "glycolic", "niacinamide"],
        "fine lines": ["retinal", "retinol", "peptide", "niacinamide"],
        "redness": ["niacinamide", "zinc oxide", "azelaic", "centella"],
        "dark circles": ["retinal", "retinol", "vitamin c", "niacinamide", "caffeine"],
        "shaving bumps": ["salicylic", "bha", "glycolic"],
        "dullness": ["vitamin c", "niacinamide"],
        "dryness": ["ceramide", "ceramides", "hyaluronic", "glycerin", "squalane", "urea"],
    })

    acne_keywords: list[str] = Field(default_factory=lambda: [
        "acne", "pimples", "breakouts", "zits", "spots", "blemishes",
    ])

    condition_keywords: dict[str, list[str]] = Field(default_factory=lambda: {
        "rosacea": ["rosacea", "rosacea-prone", "rosacea prone"],
        "eczema": ["eczema", "atopic dermatitis", "dermatitis", "atopic"],
        "pregnant": ["pregnant", "pregnancy", "expecting", "breastfeeding", "nursing"],
    })
    medication_keywords: dict[str, list[str]] = Field(default_factory=lambda: {
        "tretinoin": ["tretinoin", "retin-a", "retin a"],
        "benzoyl peroxide": ["benzoyl peroxide", "bp", "benzac", "benzoyl"],
        "accutane": ["accutane", "isotretinoin", "roaccutane"],
        "adapalene": ["adapalene", "differin"],
        "clindamycin": ["clindamycin", "clinda"],
    })
    allergen_keywords: dict[str, list[str]] = Field(default_factory=lambda: {
        "fragrance": ["fragrance", "perfume", "scented"],
        "niacinamide": ["niacinamide", "vitamin b3", "b3"],
        "salicylic acid": ["salicylic acid", "bha", "beta hydroxy acid", "salicylic"],
        "retinol": ["retinol", "retinoid"],
        "vitamin c": ["vitamin c", "ascorbic acid", "vit c"],
        "hyaluronic acid": ["hyaluronic acid", "hyaluronic"],
    })

    retinoid_prescriptions: list[str] = Field(default_factory=lambda: [
        "tretinoin", "adapalene", "accutane",
    ])
    antibiotic_medications: list[str] = Field(default_factory=lambda: ["clindamycin"])

    strength_bounds: dict[str, dict[str, tuple[int, int]]] = Field(
        default_factory=_strength_defaults
    )
    step_keywords: StepKeywords = Field(default_factory=StepKeywords)

    def group(self, name: str) -> list[str]:
        return self.active_groups.get(name, [])


DEFAULT_VOCABULARY = Vocabulary()


def load_vocabulary(path: Optional[str | Path]) -> Vocabulary:
    """Read a vocabulary override file; tables it omits keep their defaults."""
    if not path:
        return DEFAULT_VOCABULARY
    vocabulary = Vocabulary.model_validate_json(Path(path).read_text(encoding="utf-8"))
    logger.info(f"Loaded vocabulary override from {path}")
    return vocabulary


@lru_cache
def get_vocabulary(path: Optional[str] = None) -> Vocabulary:
    return load_vocabulary(path)
