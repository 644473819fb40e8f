"""
Recommendation service — one questionnaire submission in, one routine out.

Validation, normalization and product selection are always local. The
phrasing agent, when enabled, only rewrites the prose around the selection.
"""

import logging
from typing import Optional

from skinroutine.agents.routine_writer import write_routine
from skinroutine.config import EngineConfig, Settings, get_settings
from skinroutine.engine.normalizer import normalize_profile, validate_submission
from skinroutine.engine.pipeline import recommend
from skinroutine.schemas import PatientProfile, QuestionnaireSubmission, RecommendationResult
from skinroutine.services.catalog import (
    CatalogProvider,
    JsonFileCatalogProvider,
    StaticCatalogProvider,
)
from skinroutine.services.tips import select_tips
from skinroutine.vocabulary import Vocabulary, get_vocabulary

logger = logging.getLogger(__name__)


def catalog_provider_from_settings(settings: Settings) -> CatalogProvider:
    if settings.catalog_path:
        return JsonFileCatalogProvider(settings.catalog_path, settings.catalog_ttl_seconds)
    logger.warning("No catalog_path configured, serving an empty catalog")
    return StaticCatalogProvider()


class RecommendationService:
    def __init__(
        self,
        catalog_provider: CatalogProvider,
        settings: Optional[Settings] = None,
        vocabulary: Optional[Vocabulary] = None,
    ):
        self.settings = settings or get_settings()
        self.catalog_provider = catalog_provider
        self.vocabulary = vocabulary or get_vocabulary(self.settings.vocabulary_path)
        self.engine_config = EngineConfig.from_settings(self.settings)

    def _select(self, submission: QuestionnaireSubmission) -> tuple[PatientProfile, RecommendationResult]:
        validate_submission(submission)
        profile = normalize_profile(submission, self.vocabulary, self.engine_config)
        catalog = self.catalog_provider.get_current_catalog()

        result = recommend(profile, catalog, self.vocabulary, self.engine_config)

        by_id = {p.id: p for p in catalog}
        chosen = [by_id[pid] for pid in result.product_ids if pid in by_id]
        result.tips = select_tips(profile, chosen, self.settings.max_tips)
        return profile, result

    def build_routine(self, submission: QuestionnaireSubmission) -> RecommendationResult:
        """Deterministic routine with tips. Raises ProfileValidationError."""
        _, result = self._select(submission)
        return result

    async def get_recommendation(self, submission: QuestionnaireSubmission) -> RecommendationResult:
        """build_routine, then optional phrasing. A phrasing failure falls back
        to the unphrased routine; validation errors still propagate."""
        profile, result = self._select(submission)
        if not self.settings.use_ai_phrasing or not result.products:
            return result

        try:
            return await write_routine(profile, result, self.settings)
        except Exception as e:
            logger.error(f"Phrasing failed, returning unphrased routine: {e}", exc_info=True)
            return result
