from dataclasses import dataclass, fields
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""
    # API Keys
    claude_api_key: str | None = None

    # Phrasing agent
    writer_model: str = "anthropic:claude-sonnet-4-5-20250929"
    use_ai_phrasing: bool = False

    # Catalog / vocabulary sources
    catalog_path: str | None = None
    catalog_ttl_seconds: int = 30 * 60
    vocabulary_path: str | None = None

    # Budget normalisation and tiers
    budget_floor: float = 40.0
    budget_ceiling: float = 200.0
    low_tier_max: float = 70.0
    mid_tier_max: float = 150.0

    # Concern scoring
    active_weight: float = 0.8
    ingredient_weight: float = 0.2
    primary_concern_boost: float = 1.0
    sensitive_bonus: float = 0.5

    # Treatment caps per budget tier
    low_tier_treatments: int = 3
    mid_tier_treatments: int = 5
    high_tier_treatments: int = 6

    max_tips: int = 6

    class Config:
        env_file = '.env'


@lru_cache
def get_settings() -> Settings:
    return Settings()


@dataclass(frozen=True)
class EngineConfig:
    """The numeric policy the recommendation engine runs under.

    Built from Settings once per request so the engine never touches the
    environment.
    """

    budget_floor: float = 40.0
    budget_ceiling: float = 200.0
    low_tier_max: float = 70.0
    mid_tier_max: float = 150.0
    active_weight: float = 0.8
    ingredient_weight: float = 0.2
    primary_concern_boost: float = 1.0
    sensitive_bonus: float = 0.5
    low_tier_treatments: int = 3
    mid_tier_treatments: int = 5
    high_tier_treatments: int = 6

    @classmethod
    def from_settings(cls, settings: Settings) -> "EngineConfig":
        return cls(**{f.name: getattr(settings, f.name) for f in fields(cls)})


DEFAULT_ENGINE_CONFIG = EngineConfig()
