"""
Budget tiering policy.

Only the low tier enforces a per-product price ceiling at the candidate
stage. Mid and high tiers are shaped solely through the treatment cap.
"""

from skinroutine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from skinroutine.schemas import BudgetTier, Product


def budget_tier(budget: float, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> BudgetTier:
    if budget <= config.low_tier_max:
        return BudgetTier.LOW
    if budget <= config.mid_tier_max:
        return BudgetTier.MID
    return BudgetTier.HIGH


def treatment_cap(tier: BudgetTier, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> int:
    return {
        BudgetTier.LOW: config.low_tier_treatments,
        BudgetTier.MID: config.mid_tier_treatments,
        BudgetTier.HIGH: config.high_tier_treatments,
    }[tier]


def within_price_ceiling(product: Product, budget: float, tier: BudgetTier) -> bool:
    if tier != BudgetTier.LOW:
        return True
    return product.cost <= budget


def total_cost(products: list[Product]) -> float:
    return round(sum(p.cost for p in products), 2)
