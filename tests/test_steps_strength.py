"""
Unit tests for routine-role inference, strength bounds and skin-type matching.
"""

from skinroutine.engine.matching import has_skin_type, matches_profile
from skinroutine.engine.steps import (
    from_actives_or_tags,
    from_explicit_tags,
    from_product_text,
    from_strength_labels,
    infer_steps,
    serves,
)
from skinroutine.engine.strength import parse_strength, passes_strength, within_step_bounds
from skinroutine.schemas import PatientProfile, Product, RoutineStep, Sensitivity, SkinType
from skinroutine.vocabulary import DEFAULT_VOCABULARY


def _product(**overrides) -> Product:
    defaults = dict(id="p1", name="Product", skin_types=["oily"], price=10)
    defaults.update(overrides)
    return Product(**defaults)


# ── Step inference cascade ──────────────────────────────────────────────────


class TestStepClassifiers:
    def test_explicit_tags(self):
        product = _product(steps=["Cleanse"], name="Daily Moisturizer SPF 30")
        assert from_explicit_tags(product, DEFAULT_VOCABULARY) == [RoutineStep.CLEANSE]
        assert infer_steps(product) == [RoutineStep.CLEANSE]

    def test_strength_labels(self):
        product = _product(strength_ratings=["Treat: 3/4"])
        assert from_strength_labels(product, DEFAULT_VOCABULARY) == [RoutineStep.TREAT]
        assert from_strength_labels(_product(), DEFAULT_VOCABULARY) == []

    def test_text_keywords(self):
        assert from_product_text(_product(name="Foaming Face Wash"), DEFAULT_VOCABULARY) == [
            RoutineStep.CLEANSE
        ]
        assert from_product_text(_product(name="Barrier Cream"), DEFAULT_VOCABULARY) == [
            RoutineStep.MOISTURIZE
        ]
        assert from_product_text(_product(name="Daily SPF 50 Fluid"), DEFAULT_VOCABULARY) == [
            RoutineStep.PROTECT
        ]

    def test_moisturizer_with_spf_serves_both(self):
        combo = _product(name="Daily Moisturizer SPF 30")
        assert infer_steps(combo) == [RoutineStep.MOISTURIZE, RoutineStep.PROTECT]
        assert serves(combo, RoutineStep.MOISTURIZE)
        assert serves(combo, RoutineStep.PROTECT)

    def test_requires_spf_flag_is_not_spf_content(self):
        product = _product(name="Night Peel", primary_actives="Glycolic acid", requires_spf=True)
        assert RoutineStep.PROTECT not in infer_steps(product)

    def test_actives_or_tags_fall_back_to_treat(self):
        by_active = _product(name="Night Drops", primary_actives="Niacinamide 10%")
        by_tag = _product(name="Night Drops", concerns=["Redness"])
        assert from_actives_or_tags(by_active, DEFAULT_VOCABULARY) == [RoutineStep.TREAT]
        assert infer_steps(by_tag) == [RoutineStep.TREAT]

    def test_nothing_recognised_serves_no_role(self):
        assert infer_steps(_product(name="Jade Roller")) == []


# ── Strength validator ──────────────────────────────────────────────────────


class TestStrength:
    def test_parse_strength(self):
        assert parse_strength(_product(strength_ratings=["Moisturize 3 / 4"])) == 3
        assert parse_strength(_product()) is None

    def test_missing_rating_always_passes(self):
        assert passes_strength(_product(name="Barrier Cream"), SkinType.OILY)

    def test_oily_skin_rejects_heavy_moisturizer(self):
        heavy = _product(strength_ratings=["Moisturize 3/4"])
        assert not passes_strength(heavy, SkinType.OILY)
        assert passes_strength(heavy, SkinType.DRY)

    def test_dry_skin_rejects_strong_cleanser(self):
        strong = _product(strength_ratings=["Cleanse 3/4"])
        assert not passes_strength(strong, SkinType.DRY)
        assert passes_strength(strong, SkinType.OILY)

    def test_combination_mirrors_dry_for_protect_and_oily_for_treat(self):
        protect = _product(strength_ratings=["Protect 3/4"])
        treat = _product(strength_ratings=["Treat 4/4"])
        assert passes_strength(protect, SkinType.COMBINATION) == passes_strength(protect, SkinType.DRY)
        assert passes_strength(treat, SkinType.COMBINATION) == passes_strength(treat, SkinType.OILY)

    def test_bounds_checked_for_a_named_step(self):
        balm = _product(name="Intense Repair Balm", strength_ratings=["Treat 4/4"])
        assert passes_strength(balm, SkinType.OILY)
        assert within_step_bounds(balm, RoutineStep.TREAT, SkinType.OILY)
        assert not within_step_bounds(balm, RoutineStep.MOISTURIZE, SkinType.OILY)
        assert within_step_bounds(_product(), RoutineStep.MOISTURIZE, SkinType.OILY)


# ── Type/sensitivity matcher ────────────────────────────────────────────────


class TestMatching:
    def test_skin_type_tag_substring_case_insensitive(self):
        product = _product(skin_types=["Oily/Acne-prone", "Combination"])
        assert has_skin_type(product, SkinType.OILY)
        assert has_skin_type(product, SkinType.COMBINATION)
        assert not has_skin_type(product, SkinType.DRY)

    def test_sensitive_patient_requires_safe_flag(self):
        sensitive = PatientProfile(skin_type=SkinType.OILY, sensitivity=Sensitivity.SENSITIVE)
        assert not matches_profile(_product(sensitive_safe=False), sensitive)
        assert matches_profile(_product(sensitive_safe="Yes"), sensitive)

    def test_not_sensitive_patient_ignores_flag(self):
        profile = PatientProfile(skin_type=SkinType.OILY)
        assert matches_profile(_product(sensitive_safe=False), profile)
