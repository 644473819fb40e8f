"""
Routine-role inference.

Each classifier is a pure function (product, vocabulary) -> roles. They are
tried in order and the first one that yields any role wins:

  1. explicit step tags
  2. strength-rating label keywords
  3. name / format / function / summary / ingredient keywords
  4. any recognised active or concern/function tag -> treat
"""

import re
from typing import Callable

from skinroutine.engine.ingredients import extract_actives
from skinroutine.schemas import Product, RoutineStep
from skinroutine.vocabulary import DEFAULT_VOCABULARY, Vocabulary

StepClassifier = Callable[[Product, Vocabulary], list[RoutineStep]]


def _dedup(steps: list[RoutineStep]) -> list[RoutineStep]:
    return list(dict.fromkeys(steps))


def from_explicit_tags(product: Product, vocabulary: Vocabulary) -> list[RoutineStep]:
    steps: list[RoutineStep] = []
    for tag in product.steps:
        tag = tag.lower()
        if "cleanse" in tag:
            steps.append(RoutineStep.CLEANSE)
        if "moistur" in tag:
            steps.append(RoutineStep.MOISTURIZE)
        if "protect" in tag or "spf" in tag:
            steps.append(RoutineStep.PROTECT)
        if "treat" in tag or "serum" in tag or "active" in tag:
            steps.append(RoutineStep.TREAT)
    return _dedup(steps)


def from_strength_labels(product: Product, vocabulary: Vocabulary) -> list[RoutineStep]:
    text = " ".join(product.strength_ratings).lower()
    if not text:
        return []
    kw = vocabulary.step_keywords
    steps: list[RoutineStep] = []
    if re.search(kw.label_cleanse, text):
        steps.append(RoutineStep.CLEANSE)
    if re.search(kw.label_moisturize, text):
        steps.append(RoutineStep.MOISTURIZE)
    if re.search(kw.label_treat, text):
        steps.append(RoutineStep.TREAT)
    if re.search(kw.label_protect, text):
        steps.append(RoutineStep.PROTECT)
    return steps


def from_product_text(product: Product, vocabulary: Vocabulary) -> list[RoutineStep]:
    # requires_spf is a usage warning, not evidence of SPF content
    text = " ".join([
        product.name,
        product.format,
        product.summary,
        " ".join(product.functions),
        product.ingredients,
    ]).lower()
    kw = vocabulary.step_keywords
    is_cleanser = re.search(kw.cleanser, text) is not None
    is_moisturizer = re.search(kw.moisturizer, text) is not None
    has_spf = re.search(kw.spf, text) is not None

    if is_moisturizer and has_spf:
        return [RoutineStep.MOISTURIZE, RoutineStep.PROTECT]
    if has_spf:
        return [RoutineStep.PROTECT]
    if is_cleanser:
        return [RoutineStep.CLEANSE]
    if is_moisturizer:
        return [RoutineStep.MOISTURIZE]
    return []


def from_actives_or_tags(product: Product, vocabulary: Vocabulary) -> list[RoutineStep]:
    if extract_actives(product, vocabulary) or product.concerns or product.functions:
        return [RoutineStep.TREAT]
    return []


STEP_CLASSIFIERS: list[StepClassifier] = [
    from_explicit_tags,
    from_strength_labels,
    from_product_text,
    from_actives_or_tags,
]


def infer_steps(product: Product, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> list[RoutineStep]:
    """Roles this product can fill; empty means it is never bucketed."""
    for classifier in STEP_CLASSIFIERS:
        steps = classifier(product, vocabulary)
        if steps:
            return steps
    return []


def serves(product: Product, step: RoutineStep, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    return step in infer_steps(product, vocabulary)
