"""
Pydantic schemas for everything that crosses a module boundary.

QuestionnaireSubmission is what the caller sends, PatientProfile is what the
normalizer hands to the engine, RecommendationResult is what comes back.
Product is the read-only catalog record; nothing in the engine mutates it.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


# ── Enums ────────────────────────────────────────────────────────────────────


class SkinType(str, enum.Enum):
    DRY = "dry"
    OILY = "oily"
    COMBINATION = "combination"
    NORMAL = "normal"


class Sensitivity(str, enum.Enum):
    SENSITIVE = "sensitive"
    NOT_SENSITIVE = "not sensitive"


class AcneStatus(str, enum.Enum):
    ACTIVE = "active"
    NOT_ACTIVE = "not active"


class AgeBracket(str, enum.Enum):
    AGE_18_25 = "18-25"
    AGE_25_35 = "25-35"
    AGE_35_45 = "35-45"
    AGE_45_PLUS = "45+"

    @property
    def rank(self) -> int:
        return list(AgeBracket).index(self)

    @property
    def is_youngest(self) -> bool:
        return self.rank == 0


class TimeCommitment(str, enum.Enum):
    FIVE_MINUTES = "5min"
    TEN_MINUTES = "10min"
    FIFTEEN_PLUS = "15min+"


class BudgetTier(str, enum.Enum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"


class RoutineStep(str, enum.Enum):
    CLEANSE = "cleanse"
    MOISTURIZE = "moisturize"
    PROTECT = "protect"
    TREAT = "treat"


ESSENTIAL_STEPS = (RoutineStep.CLEANSE, RoutineStep.MOISTURIZE, RoutineStep.PROTECT)

_AFFIRMATIVE = {"yes", "true", "y", "safe", "1"}


# ── Catalog ──────────────────────────────────────────────────────────────────


class Product(BaseModel):
    """A catalog record as supplied by the catalog provider."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "productId"))
    name: str = Field(default="", validation_alias=AliasChoices("name", "productName"))
    brand: str = ""
    price: Optional[float] = None
    skin_types: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("skin_types", "skinType")
    )
    sensitive_safe: bool = Field(
        default=False,
        validation_alias=AliasChoices("sensitive_safe", "sensitiveSkinFriendly"),
    )
    steps: list[str] = Field(default_factory=list, validation_alias=AliasChoices("steps", "step"))
    functions: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("functions", "function")
    )
    concerns: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("concerns", "skinConcern")
    )
    format: str = ""
    summary: str = ""
    primary_actives: str = Field(
        default="",
        validation_alias=AliasChoices("primary_actives", "primaryActiveIngredients"),
    )
    ingredients: str = Field(
        default="", validation_alias=AliasChoices("ingredients", "ingredientList")
    )
    cannot_mix_with: list[str] = Field(
        default_factory=list, validation_alias=AliasChoices("cannot_mix_with", "cannotMixWith")
    )
    strength_ratings: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("strength_ratings", "strengthRatingOfActives"),
    )
    requires_spf: bool = Field(
        default=False, validation_alias=AliasChoices("requires_spf", "requiresSPF")
    )
    link: str = ""

    @field_validator("sensitive_safe", "requires_spf", mode="before")
    @classmethod
    def _affirmative_flag(cls, value):
        """Catalog flags arrive as select labels ("Yes", "No") as often as booleans."""
        if isinstance(value, bool) or value is None:
            return bool(value)
        if isinstance(value, dict):
            value = value.get("name", "")
        return str(value).strip().lower() in _AFFIRMATIVE

    @field_validator(
        "skin_types", "steps", "functions", "concerns", "cannot_mix_with", "strength_ratings",
        mode="before",
    )
    @classmethod
    def _tag_names(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [item.get("name", "") if isinstance(item, dict) else item for item in value]

    @field_validator("primary_actives", "ingredients", "summary", "format", "brand", mode="before")
    @classmethod
    def _plain_text(cls, value):
        if value is None:
            return ""
        if isinstance(value, dict):
            return value.get("plain_text") or value.get("name") or ""
        if isinstance(value, list):
            return " ".join(
                item.get("name", "") if isinstance(item, dict) else str(item) for item in value
            )
        return value

    @property
    def cost(self) -> float:
        return self.price or 0.0


# ── Questionnaire ────────────────────────────────────────────────────────────


class QuestionnaireSubmission(BaseModel):
    """Raw questionnaire answers, exactly as the patient typed them."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, validation_alias=AliasChoices("name", "Name"))
    email: Optional[str] = Field(default=None, validation_alias=AliasChoices("email", "Email"))
    age: Optional[str] = Field(default=None, validation_alias=AliasChoices("age", "Age"))
    gender: Optional[str] = Field(default=None, validation_alias=AliasChoices("gender", "Gender"))
    country: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("country", "Country")
    )
    skin_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("skin_type", "wakeUpSkinType")
    )
    sensitivity: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("sensitivity", "skinSensitivity")
    )
    concerns: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("concerns", "work_on")
    )
    budget: Optional[str] = Field(default=None, validation_alias=AliasChoices("budget", "Budget"))
    time_commitment: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("time_commitment", "routine_time")
    )
    additional_info: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("additional_info", "safety_notes")
    )

    @field_validator("age", "budget", mode="before")
    @classmethod
    def _numbers_as_text(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


# ── Patient profile ─────────────────────────────────────────────────────


class SafetyInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    conditions: list[str] = Field(default_factory=list)
    medications: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    additional_info: str = ""


class PatientProfile(BaseModel):
    """Structured, immutable view of one questionnaire submission."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    age_bracket: AgeBracket = AgeBracket.AGE_25_35
    skin_type: SkinType = SkinType.NORMAL
    sensitivity: Sensitivity = Sensitivity.NOT_SENSITIVE
    acne_status: AcneStatus = AcneStatus.NOT_ACTIVE
    primary_concerns: list[str] = Field(default_factory=list)
    secondary_concerns: list[str] = Field(default_factory=list)
    budget: float = 100.0
    time_commitment: TimeCommitment = TimeCommitment.TEN_MINUTES
    safety: SafetyInfo = Field(default_factory=SafetyInfo)

    @property
    def is_sensitive(self) -> bool:
        return self.sensitivity == Sensitivity.SENSITIVE

    @property
    def all_concerns(self) -> list[str]:
        """Primary then secondary, deduplicated, order preserved."""
        return list(dict.fromkeys(self.primary_concerns + self.secondary_concerns))

    def has_condition(self, condition: str) -> bool:
        return condition in self.safety.conditions

    def takes(self, *medications: str) -> bool:
        return any(m in self.safety.medications for m in medications)


# ── Recommendation result ────────────────────────────────────────────────────


class RecommendedProduct(BaseModel):
    """One line of the routine, structured for the formatting layer."""

    product_id: str
    product_name: str
    role: RoutineStep
    price: float
    target_concern: str = "general"
    priority: str = Field(default="primary", description="'primary' or 'secondary'")
    usage_instructions: str = "Use as directed"
    cannot_mix_with: list[str] = Field(
        default_factory=list, description="Catalog layering warnings, passed to the usage phrasing"
    )


class RecommendationResult(BaseModel):
    """Full routine returned by the engine, optionally phrased afterwards."""

    products: list[RecommendedProduct] = Field(default_factory=list)
    total_cost: float = 0.0
    budget: float = 0.0
    budget_tier: BudgetTier = BudgetTier.MID
    budget_utilization: str = ""
    treatment_approach: str = Field(default="single", description="single | dual | complex")
    missing_roles: list[RoutineStep] = Field(
        default_factory=list,
        description="Essential roles no safety-eligible product could fill",
    )
    tips: list[str] = Field(default_factory=list)
    clinical_reasoning: str = "Routine optimized locally per safety/type/strength/budget"

    @property
    def product_ids(self) -> list[str]:
        return [p.product_id for p in self.products]

    @property
    def is_complete(self) -> bool:
        return not self.missing_roles
