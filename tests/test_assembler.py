"""
Unit tests for concern scoring, budget tiering and routine assembly.
"""

import pytest

from skinroutine.config import EngineConfig
from skinroutine.engine.assembler import (
    assemble_routine,
    backfill_essentials,
    bucket_candidates,
    missing_roles,
    ordered_selection,
    resolve_exfoliant_conflicts,
)
from skinroutine.engine.budget import budget_tier, total_cost, treatment_cap, within_price_ceiling
from skinroutine.engine.scoring import rank_candidates, score_product
from skinroutine.schemas import (
    BudgetTier,
    PatientProfile,
    Product,
    RoutineStep,
    Sensitivity,
    SkinType,
)
from skinroutine.vocabulary import DEFAULT_VOCABULARY


# ── Fixtures ────────────────────────────────────────────────────────────────


def _product(id: str, name: str, **overrides) -> Product:
    defaults = dict(id=id, name=name, skin_types=["oily"], price=10)
    defaults.update(overrides)
    return Product(**defaults)


def _profile(**overrides) -> PatientProfile:
    defaults = dict(skin_type=SkinType.OILY, primary_concerns=["acne"], budget=110.0)
    defaults.update(overrides)
    return PatientProfile(**defaults)


GENTLE_CLEANSER = _product("c-gentle", "Gentle Foaming Cleanser", ingredients="water, glycerin")
BHA_CLEANSER = _product("c-bha", "Clarifying Gel Cleanser", primary_actives="Salicylic acid 2%")
MOISTURIZER = _product("m1", "Oil-Free Gel Moisturizer", ingredients="water, glycerin")
SPF = _product("s1", "Daily SPF 30 Gel", ingredients="zinc oxide, water")
BHA_LIQUID = _product("t-bha", "Pore Liquid", primary_actives="Salicylic acid 2%")
GLYCOLIC_TONER = _product("t-aha", "Glow Toner", primary_actives="Glycolic acid 7%")
BP_TREATMENT = _product("t-bp", "Blemish Spot Treatment", primary_actives="Benzoyl peroxide 2.5%")


def _serums(count: int) -> list[Product]:
    return [
        _product(f"serum-{i}", f"Niacinamide Drops {i}", primary_actives="Niacinamide 10%")
        for i in range(count)
    ]


def _assemble(products, profile=None, tier=BudgetTier.MID):
    profile = profile or _profile()
    ranked = rank_candidates(products, profile)
    return assemble_routine(ranked, products, tier, DEFAULT_VOCABULARY, skin_type=profile.skin_type)


# ── Scoring ─────────────────────────────────────────────────────────────────


class TestScoring:
    def test_weights_active_and_full_ingredient_hits(self):
        product = _product(
            "x", "Spot Gel",
            primary_actives="Salicylic acid, benzoyl peroxide",
            ingredients="water, salicylic acid",
        )
        # 0.8 * 2 + 0.2 * 1 + 1.0 primary boost
        assert score_product(product, _profile()) == pytest.approx(2.8)

    def test_sensitive_bonus_added_once(self):
        profile = _profile(
            sensitivity=Sensitivity.SENSITIVE,
            primary_concerns=["acne", "pores"],
            secondary_concerns=["redness"],
        )
        safe = _product("safe", "Plain Cream", sensitive_safe=True)
        unsafe = _product("unsafe", "Plain Cream")
        assert score_product(safe, profile) - score_product(unsafe, profile) == pytest.approx(0.5)

    def test_secondary_concern_gets_no_boost(self):
        profile = _profile(primary_concerns=[], secondary_concerns=["redness"])
        assert score_product(_product("x", "Plain"), profile) == 0.0

    def test_ties_keep_catalog_order(self):
        products = [_product(f"p{i}", "Plain Cream") for i in range(5)]
        ranked = rank_candidates(products, _profile())
        assert [c.product.id for c in ranked] == ["p0", "p1", "p2", "p3", "p4"]

    def test_descending_score(self):
        ranked = rank_candidates([MOISTURIZER, BP_TREATMENT], _profile())
        assert [c.product.id for c in ranked] == ["t-bp", "m1"]

    def test_weights_come_from_config(self):
        config = EngineConfig(primary_concern_boost=0.0, ingredient_weight=0.0)
        assert score_product(BP_TREATMENT, _profile(), DEFAULT_VOCABULARY, config) == pytest.approx(0.8)


# ── Budget tiering ──────────────────────────────────────────────────────────


class TestBudgetTier:
    def test_boundaries(self):
        assert budget_tier(40) == BudgetTier.LOW
        assert budget_tier(70) == BudgetTier.LOW
        assert budget_tier(70.01) == BudgetTier.MID
        assert budget_tier(150) == BudgetTier.MID
        assert budget_tier(151) == BudgetTier.HIGH

    def test_caps(self):
        assert treatment_cap(BudgetTier.LOW) == 3
        assert treatment_cap(BudgetTier.MID) == 5
        assert treatment_cap(BudgetTier.HIGH) == 6

    def test_price_ceiling_only_for_low_tier(self):
        pricey = _product("x", "Luxury Cream", price=90)
        assert not within_price_ceiling(pricey, 60, BudgetTier.LOW)
        # Mid and high tiers never filter by price at the candidate stage
        assert within_price_ceiling(pricey, 80, BudgetTier.MID)
        assert within_price_ceiling(pricey, 80, BudgetTier.HIGH)

    def test_absent_price_counts_as_zero(self):
        assert total_cost([_product("a", "A", price=None), _product("b", "B", price=12.5)]) == 12.5


# ── Assembly ────────────────────────────────────────────────────────────────


class TestBucketing:
    def test_combo_lands_in_two_buckets(self):
        combo = _product("combo", "Daily Moisturizer SPF 30")
        buckets = bucket_candidates(rank_candidates([combo], _profile()))
        assert buckets.moisturizers == [combo]
        assert buckets.protectors == [combo]

    def test_backfill_uses_loose_heuristics(self):
        micellar = _product("mw", "Micellar Water")
        buckets = bucket_candidates(rank_candidates([micellar, MOISTURIZER, SPF], _profile()))
        assert buckets.cleansers == []

        buckets = backfill_essentials(buckets, [micellar, MOISTURIZER, SPF])
        assert buckets.cleansers == [micellar]
        assert buckets.missing_essentials() == []

    def test_backfill_leaves_gap_when_nothing_qualifies(self):
        buckets = backfill_essentials(bucket_candidates([]), [BP_TREATMENT])
        assert buckets.missing_essentials() == [
            RoutineStep.CLEANSE, RoutineStep.MOISTURIZE, RoutineStep.PROTECT
        ]

    def test_backfill_skips_product_holding_another_role(self):
        hydrating_cleanser = _product("c-hydra", "Hydrating Facial Cleanser")
        buckets = bucket_candidates(rank_candidates([hydrating_cleanser, SPF], _profile()))
        assert buckets.cleansers == [hydrating_cleanser]

        buckets = backfill_essentials(buckets, [hydrating_cleanser, SPF], skin_type=SkinType.OILY)
        assert buckets.moisturizers == []
        assert buckets.missing_essentials() == [RoutineStep.MOISTURIZE]

    def test_backfill_checks_strength_for_the_filled_role(self):
        balm = _product("b", "Intense Repair Balm", strength_ratings=["Treat 4/4"])
        buckets = bucket_candidates(rank_candidates([GENTLE_CLEANSER, balm, SPF], _profile()))
        assert buckets.treatments == [balm]

        oily = backfill_essentials(buckets, [GENTLE_CLEANSER, balm, SPF], skin_type=SkinType.OILY)
        assert oily.moisturizers == []

        buckets = bucket_candidates(rank_candidates([GENTLE_CLEANSER, balm, SPF], _profile()))
        dry = backfill_essentials(buckets, [GENTLE_CLEANSER, balm, SPF], skin_type=SkinType.DRY)
        assert dry.moisturizers == [balm]


class TestExfoliantConflicts:
    def test_exfoliating_cleanser_removes_all_exfoliating_treatments(self):
        kept = resolve_exfoliant_conflicts(BHA_CLEANSER, [BHA_LIQUID, BP_TREATMENT, GLYCOLIC_TONER])
        assert kept == [BP_TREATMENT]

    def test_gentle_cleanser_keeps_highest_ranked_exfoliant(self):
        kept = resolve_exfoliant_conflicts(
            GENTLE_CLEANSER, [BHA_LIQUID, BP_TREATMENT, GLYCOLIC_TONER]
        )
        assert kept == [BHA_LIQUID, BP_TREATMENT]

    def test_no_cleanser_behaves_like_gentle(self):
        assert resolve_exfoliant_conflicts(None, [GLYCOLIC_TONER, BHA_LIQUID]) == [GLYCOLIC_TONER]


class TestAssembleRoutine:
    def test_one_of_each_essential(self):
        buckets = _assemble([GENTLE_CLEANSER, BHA_CLEANSER, MOISTURIZER, SPF, BP_TREATMENT])
        assert len(buckets.cleansers) == 1
        assert len(buckets.moisturizers) == 1
        assert len(buckets.protectors) == 1

    def test_top_scored_cleanser_wins(self):
        buckets = _assemble([GENTLE_CLEANSER, BHA_CLEANSER, MOISTURIZER, SPF])
        assert buckets.cleansers == [BHA_CLEANSER]

    def test_combo_fills_moisturizer_and_protector(self):
        combo = _product("combo", "Daily Moisturizer SPF 30")
        buckets = _assemble([GENTLE_CLEANSER, combo])
        assert buckets.moisturizers == [combo]
        assert buckets.protectors == [combo]

        selection = ordered_selection(buckets)
        assert [(role, p.id) for role, p in selection] == [
            (RoutineStep.CLEANSE, "c-gentle"),
            (RoutineStep.MOISTURIZE, "combo"),
        ]

    def test_standalone_spf_preferred_next_to_plain_moisturizer(self):
        combo = _product("combo", "Tinted Cream SPF 30")
        buckets = _assemble([GENTLE_CLEANSER, MOISTURIZER, combo, SPF])
        assert buckets.moisturizers == [MOISTURIZER]
        assert buckets.protectors == [SPF]

    def test_treatment_cap_applied_after_conflict_resolution(self):
        exfoliants = [
            _product(f"aha-{i}", f"Glow Toner {i}", primary_actives="Glycolic acid 7%")
            for i in range(4)
        ]
        buckets = _assemble(
            [GENTLE_CLEANSER, MOISTURIZER, SPF] + exfoliants + _serums(3),
            tier=BudgetTier.LOW,
        )
        ids = [p.id for p in buckets.treatments]
        assert len(ids) == 3
        assert ids[0] == "aha-0"
        assert sum(1 for i in ids if i.startswith("aha-")) == 1

    def test_treatment_caps_by_tier(self):
        catalog = [GENTLE_CLEANSER, MOISTURIZER, SPF] + _serums(8)
        for tier, cap in ((BudgetTier.LOW, 3), (BudgetTier.MID, 5), (BudgetTier.HIGH, 6)):
            assert len(_assemble(catalog, tier=tier).treatments) == cap

    def test_essential_not_repeated_as_treatment(self):
        tagged = _product("dual", "Clarifying Cleanser", steps=["Cleanse", "Treat"],
                          primary_actives="Salicylic acid 2%")
        buckets = _assemble([tagged, MOISTURIZER, SPF])
        assert buckets.cleansers == [tagged]
        assert buckets.treatments == []

    def test_ordered_selection_fixed_role_order(self):
        buckets = _assemble([BP_TREATMENT, SPF, MOISTURIZER, GENTLE_CLEANSER])
        roles = [role for role, _ in ordered_selection(buckets)]
        assert roles == [
            RoutineStep.CLEANSE, RoutineStep.MOISTURIZE, RoutineStep.PROTECT, RoutineStep.TREAT
        ]

    def test_missing_roles_read_from_final_selection(self):
        combo = _product("combo", "Daily Moisturizer SPF 30")
        assert missing_roles(ordered_selection(_assemble([GENTLE_CLEANSER, combo]))) == []

        selection = ordered_selection(_assemble([GENTLE_CLEANSER, SPF, BP_TREATMENT]))
        assert missing_roles(selection) == [RoutineStep.MOISTURIZE]
