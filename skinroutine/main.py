from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from skinroutine.config import get_settings
from skinroutine.errors import ProfileValidationError
from skinroutine.schemas import QuestionnaireSubmission, RecommendationResult
from skinroutine.services.recommendation import RecommendationService, catalog_provider_from_settings
import logging

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="skinroutine")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services
settings = get_settings()
recommendation_service = RecommendationService(catalog_provider_from_settings(settings), settings)


@app.get("/")
async def health_check():
    return {"status": "healthy", "service": "skinroutine"}


@app.post("/recommendations", response_model=RecommendationResult)
async def create_recommendation(submission: QuestionnaireSubmission):
    try:
        return await recommendation_service.get_recommendation(submission)
    except ProfileValidationError as e:
        logger.info(f"Rejected submission: {e}")
        return JSONResponse(
            status_code=422,
            content={"detail": str(e), "missing_fields": e.missing_fields},
        )
    except Exception as e:
        logger.error(f"Error building recommendation: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
