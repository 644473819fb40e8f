"""Deterministic tip selection for a finished routine."""

from typing import Optional, Sequence

from pydantic import BaseModel, Field

from skinroutine.schemas import AcneStatus, PatientProfile, Product


class SkincareTip(BaseModel):
    tip: str
    skin_types: list[str]
    category: str
    related_ingredients: list[str] = Field(default_factory=list)
    conflicts_with: Optional[str] = None


_WASH_ONCE = "Wash face in the evening 1x times a day"
_WASH_TWICE = "Wash face in the morning and evening 2x times a day"

SKINCARE_TIPS: list[SkincareTip] = [
    SkincareTip(
        tip=_WASH_ONCE,
        skin_types=["dry"],
        category="cleansing",
        related_ingredients=["cleanser", "face wash", "gel cleanser", "cream cleanser"],
        conflicts_with=_WASH_TWICE,
    ),
    SkincareTip(
        tip=_WASH_TWICE,
        skin_types=["oily", "combination", "normal"],
        category="cleansing",
        related_ingredients=["cleanser", "face wash", "gel cleanser", "foaming cleanser"],
        conflicts_with=_WASH_ONCE,
    ),
    SkincareTip(
        tip="Massage in cleanser for 60 seconds (super important) to give it time to clear "
            "pores and remove sunscreen",
        skin_types=["all"],
        category="cleansing",
        related_ingredients=["cleanser", "face wash", "gel cleanser", "foam cleanser", "oil cleanser"],
    ),
    SkincareTip(
        tip="As a rule of thumb, apply products from thinnest to thickest consistency "
            "(after cleansing)",
        skin_types=["all"],
        category="general",
    ),
    SkincareTip(
        tip="Wait 30 seconds to 1 minute between applying different products to allow for "
            "proper absorption",
        skin_types=["all"],
        category="actives",
        related_ingredients=[
            "retinol", "retinal", "retinoid", "adapalene", "tretinoin", "aha", "bha",
            "glycolic", "salicylic", "lactic", "vitamin c", "ascorbic",
        ],
    ),
    SkincareTip(
        tip="For sensitive skin, introduce new products slowly (wait 3-4 weeks between new "
            "routine additions)",
        skin_types=["sensitive"],
        category="general",
    ),
    SkincareTip(
        tip="For sensitive skin, always patch test new products on the neck or wrist first",
        skin_types=["sensitive"],
        category="general",
    ),
    SkincareTip(
        tip="For exfoliating products, apply 1-2x a week and scale up to 2-3x a week as needed. "
            "Over-exfoliating can damage your skin barrier!",
        skin_types=["all"],
        category="exfoliants",
        related_ingredients=[
            "aha", "bha", "glycolic", "salicylic", "lactic", "mandelic", "exfoliant", "exfoliating",
        ],
    ),
    SkincareTip(
        tip="For exfoliating actives, purging (new breakouts) can occur as impurities rise to "
            "the surface of the skin. Give it over 2-4 weeks for most exfoliants and 4-6 weeks "
            "for retinoids before deciding if the product works for you",
        skin_types=["all"],
        category="exfoliants",
        related_ingredients=["aha", "bha", "glycolic", "salicylic", "lactic", "retinol", "retinal", "retinoid"],
    ),
    SkincareTip(
        tip="When starting retinoids, start with 1-2x a week and scale up to every night as "
            "needed. If irritation or dryness occurs, try buffering with moisturizer (apply "
            "the retinoid over the moisturizer layer to slow absorption). Usually a pea-sized "
            "amount covers the entire face",
        skin_types=["all"],
        category="retinoids",
        related_ingredients=["retinol", "retinal", "retinoid", "adapalene", "tretinoin"],
    ),
    SkincareTip(
        tip="Always apply sunscreen (SPF 30+) as the last step of your morning routine, even on "
            "cloudy days. Use the two-finger rule to estimate how much to apply. Ideally, "
            "re-apply every 2+ hours when exposed to direct sun",
        skin_types=["all"],
        category="sun protection",
        related_ingredients=["spf", "sunscreen", "sun protection", "uv protection"],
    ),
    SkincareTip(
        tip="Change pillowcases at least weekly and avoid touching your face to prevent "
            "bacteria buildup that can contribute to breakouts",
        skin_types=["acne-prone", "active acne"],
        category="general",
    ),
]


def _skin_match(tip: SkincareTip, profile: PatientProfile) -> bool:
    for skin_type in tip.skin_types:
        st = skin_type.lower()
        if st == "all":
            return True
        if st == "sensitive" and profile.is_sensitive:
            return True
        if st in ("acne-prone", "active acne") and profile.acne_status == AcneStatus.ACTIVE:
            return True
        if st == profile.skin_type.value:
            return True
    return False


def select_tips(
    profile: PatientProfile,
    products: Sequence[Product],
    limit: int = 6,
    tips: Sequence[SkincareTip] = SKINCARE_TIPS,
) -> list[str]:
    """Tips for this skin, relevant to what was chosen, mutually exclusive pairs
    resolved in table order."""
    search_text = " ".join(
        f"{p.ingredients} {p.name} {p.summary} {p.format}" for p in products
    ).lower()

    selected: list[str] = []
    excluded: set[str] = set()
    for tip in tips:
        if tip.tip in excluded or not _skin_match(tip, profile):
            continue
        if tip.related_ingredients and not any(
            ingredient.lower() in search_text for ingredient in tip.related_ingredients
        ):
            continue
        selected.append(tip.tip)
        if tip.conflicts_with:
            excluded.add(tip.conflicts_with)
    return selected[:limit]
