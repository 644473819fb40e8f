"""Substring-based active-ingredient detection over product text."""

import re

from skinroutine.schemas import Product
from skinroutine.vocabulary import Vocabulary


def primary_active_text(product: Product) -> str:
    return product.primary_actives.lower()


def ingredient_text(product: Product) -> str:
    return product.ingredients.lower()


def extract_actives(product: Product, vocabulary: Vocabulary) -> set[str]:
    """Vocabulary terms found in primary-active text + full ingredient text."""
    corpus = f"{primary_active_text(product)}\n{ingredient_text(product)}"
    return {term for term in vocabulary.active_terms if term in corpus}


def has_any(actives: set[str], vocabulary: Vocabulary, *groups: str) -> bool:
    return any(term in actives for group in groups for term in vocabulary.group(group))


def match_count(text: str, terms: list[str]) -> int:
    """Number of distinct terms present in text; potency is not weighed."""
    return sum(1 for term in set(terms) if term in text)


def is_exfoliating(product: Product, vocabulary: Vocabulary) -> bool:
    if extract_actives(product, vocabulary) & set(vocabulary.exfoliant_terms):
        return True
    text = " ".join([
        product.name,
        product.summary,
        product.primary_actives,
        product.format,
    ]).lower()
    return re.search(vocabulary.exfoliation_pattern, text) is not None
