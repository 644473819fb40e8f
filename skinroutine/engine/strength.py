"""Strength validator. Bounds active strength per routine step and skin type."""

import logging
import re
from typing import Optional

from skinroutine.engine.steps import infer_steps
from skinroutine.schemas import Product, RoutineStep, SkinType
from skinroutine.vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

_RATING = re.compile(r"(\d)\s*/\s*4")


def parse_strength(product: Product) -> Optional[int]:
    """First "n/4" rating found on the product's strength labels."""
    for label in product.strength_ratings:
        match = _RATING.search(label)
        if match:
            return int(match.group(1))
    return None


def within_step_bounds(
    product: Product,
    step: RoutineStep,
    skin_type: SkinType,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> bool:
    """True when the product's rating, if any, fits the step's range for this skin type."""
    strength = parse_strength(product)
    if strength is None:
        return True
    bounds = vocabulary.strength_bounds.get(step.value, {}).get(skin_type.value)
    if bounds is None:
        return True
    low, high = bounds
    if not low <= strength <= high:
        logger.debug(
            f"Excluded {product.id}: strength {strength} outside {low}-{high} "
            f"for {step.value} on {skin_type.value} skin"
        )
        return False
    return True


def passes_strength(
    product: Product,
    skin_type: SkinType,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> bool:
    return all(
        within_step_bounds(product, step, skin_type, vocabulary)
        for step in infer_steps(product, vocabulary)
    )
