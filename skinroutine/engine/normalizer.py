"""
Profile normalizer — raw questionnaire answers in, PatientProfile out.

Every field fails open to a documented default instead of raising; the only
hard stop is validate_submission, which the service layer calls first.
"""

import logging
import re
from typing import Optional

from skinroutine.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from skinroutine.errors import ProfileValidationError
from skinroutine.schemas import (
    AcneStatus,
    AgeBracket,
    PatientProfile,
    QuestionnaireSubmission,
    SafetyInfo,
    Sensitivity,
    SkinType,
    TimeCommitment,
)
from skinroutine.vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

DEFAULT_AGE_BRACKET = AgeBracket.AGE_25_35

SENSITIVE_KEYWORDS = ["sensitive", "reactive"]
NOT_SENSITIVE_KEYWORDS = ["not sensitive", "resistant", "tough", "normal"]


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def validate_submission(submission: QuestionnaireSubmission) -> None:
    """Raise ProfileValidationError listing every missing required field."""
    required = {
        "name": submission.name,
        "skin_type": submission.skin_type,
        "concerns": submission.concerns,
        "budget": submission.budget,
    }
    missing = [field for field, value in required.items() if _blank(value)]
    if missing:
        raise ProfileValidationError(missing)


def parse_age_bracket(raw: Optional[str]) -> AgeBracket:
    """Map "30-35" or "27" to a bracket; ranges use their midpoint."""
    text = raw or ""
    range_match = re.search(r"(\d+)\s*-\s*(\d+)", text)
    if range_match:
        age = (int(range_match.group(1)) + int(range_match.group(2))) / 2
    else:
        single = re.search(r"\d+", text)
        if not single:
            return DEFAULT_AGE_BRACKET
        age = int(single.group())

    if age <= 25:
        return AgeBracket.AGE_18_25
    if age <= 35:
        return AgeBracket.AGE_25_35
    if age <= 45:
        return AgeBracket.AGE_35_45
    return AgeBracket.AGE_45_PLUS


def parse_skin_type(raw: Optional[str]) -> SkinType:
    normalized = (raw or "").lower().strip()
    if "dry" in normalized:
        return SkinType.DRY
    if "oily" in normalized:
        return SkinType.OILY
    if "combination" in normalized:
        return SkinType.COMBINATION
    # "sensitive" is captured by the sensitivity question, not as a type
    return SkinType.NORMAL


def parse_sensitivity(raw: Optional[str]) -> Sensitivity:
    normalized = (raw or "").lower().strip()
    # Negatives first: "not sensitive" contains "sensitive"
    if normalized in ("no", "n") or any(k in normalized for k in NOT_SENSITIVE_KEYWORDS):
        return Sensitivity.NOT_SENSITIVE
    if normalized in ("yes", "y") or any(k in normalized for k in SENSITIVE_KEYWORDS):
        return Sensitivity.SENSITIVE
    return Sensitivity.NOT_SENSITIVE


def parse_concerns(raw: Optional[str], vocabulary: Vocabulary) -> tuple[list[str], list[str]]:
    """Split on commas/pipes and map each token to a canonical concern.

    Unrecognised tokens are dropped. The two lists are disjoint and free of
    duplicates.
    """
    primary: list[str] = []
    secondary: list[str] = []
    for token in re.split(r"[,|]", raw or ""):
        token = token.strip().lower()
        concern = vocabulary.concern_aliases.get(token)
        if concern is None or concern in primary or concern in secondary:
            continue
        if concern in vocabulary.primary_concerns:
            primary.append(concern)
        else:
            secondary.append(concern)
    return primary, secondary


def parse_acne_status(raw: Optional[str], vocabulary: Vocabulary) -> AcneStatus:
    normalized = (raw or "").lower()
    if any(k in normalized for k in vocabulary.acne_keywords):
        return AcneStatus.ACTIVE
    return AcneStatus.NOT_ACTIVE


def parse_budget(raw: Optional[str], config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> float:
    """Every digit in the text read as one number, clamped to the configured floor/ceiling.

    "$100-$150" reads as 100150 and lands on the ceiling. No digits at all means the floor.
    """
    digits = re.sub(r"\D", "", raw or "")
    if not digits:
        return config.budget_floor
    value = float(digits)
    return min(max(value, config.budget_floor), config.budget_ceiling)


def parse_time_commitment(raw: Optional[str]) -> TimeCommitment:
    normalized = (raw or "").lower().strip()
    if "15" in normalized or "fifteen" in normalized or "20" in normalized \
            or "twenty" in normalized or "30" in normalized or "thirty" in normalized:
        return TimeCommitment.FIFTEEN_PLUS
    if "10" in normalized or "ten" in normalized:
        return TimeCommitment.TEN_MINUTES
    if "5" in normalized or "five" in normalized:
        return TimeCommitment.FIVE_MINUTES
    return TimeCommitment.TEN_MINUTES


def _scan(text: str, groups: dict[str, list[str]]) -> list[str]:
    return [name for name, keywords in groups.items() if any(k in text for k in keywords)]


def parse_safety_info(raw: Optional[str], vocabulary: Vocabulary) -> SafetyInfo:
    """Keyword scan of free-text notes; any keyword variant counts as present."""
    normalized = (raw or "").lower()
    return SafetyInfo(
        conditions=_scan(normalized, vocabulary.condition_keywords),
        medications=_scan(normalized, vocabulary.medication_keywords),
        allergies=_scan(normalized, vocabulary.allergen_keywords),
        additional_info=raw or "",
    )


def normalize_profile(
    submission: QuestionnaireSubmission,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> PatientProfile:
    primary, secondary = parse_concerns(submission.concerns, vocabulary)
    profile = PatientProfile(
        name=(submission.name or "").strip(),
        age_bracket=parse_age_bracket(submission.age),
        skin_type=parse_skin_type(submission.skin_type),
        sensitivity=parse_sensitivity(submission.sensitivity),
        acne_status=parse_acne_status(submission.concerns, vocabulary),
        primary_concerns=primary,
        secondary_concerns=secondary,
        budget=parse_budget(submission.budget, config),
        time_commitment=parse_time_commitment(submission.time_commitment),
        safety=parse_safety_info(submission.additional_info, vocabulary),
    )
    logger.debug(
        f"Normalized profile | Type: {profile.skin_type.value} | "
        f"Concerns: {profile.all_concerns} | Budget: {profile.budget}"
    )
    return profile
