from fastapi import APIRouter, HTTPException, Depends
from typing import List, Optional
import logging

from src.schemas.assessment import AssessmentRequest, ComparisonRequest, QuestionOut
from src.dependencies import get_analytics_sink, get_maturity_engine
from services.maturity_engine.engine import MaturityEngine
from services.maturity_engine.models import ResultComparison, ScoringResult
from config.kafka import EVENT_ASSESSMENT_COMPLETED

router = APIRouter()
logger = logging.getLogger(__name__)


def _emit_assessment_completed(sink, result: ScoringResult) -> None:
    """Publishes a summary of the result; failures are logged and never reach the caller."""
    if sink is None:
        logger.debug("No analytics sink configured. Assessment event not emitted.")
        return
    payload = {
        "session_id": result.session_id,
        "level": result.level,
        "score": result.score,
        "confidence_score": result.confidence_score,
        "completion_rate": result.completion_rate,
        "timestamp": result.completed_at.isoformat(),
    }
    try:
        sink.track_custom_event(EVENT_ASSESSMENT_COMPLETED, payload)
        logger.info(f"Assessment event emitted for session {result.session_id}, level {result.level}")
    except Exception as e:
        logger.error(f"Assessment event emission failed for session {result.session_id}: {e}")


@router.get("/assessment/questions", response_model=List[QuestionOut])
async def list_questions(engine: MaturityEngine = Depends(get_maturity_engine)):
    return engine.get_questions()


@router.post("/assessment/score", response_model=ScoringResult)
async def score_assessment(
    request: AssessmentRequest,
    engine: MaturityEngine = Depends(get_maturity_engine),
    sink=Depends(get_analytics_sink),
):
    """
    Scores a (possibly partial) answer set and returns the full result.
    Emits an `assessment_completed` analytics event when a sink is configured.
    """
    try:
        result = engine.compute_result(
            request.answers,
            {"session_id": request.session_id, "time_spent": request.time_spent},
        )
    except Exception as e:
        logger.exception(f"Unexpected error during maturity scoring: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")

    _emit_assessment_completed(sink, result)
    return result


@router.post("/assessment/compare", response_model=Optional[ResultComparison])
async def compare_assessments(
    request: ComparisonRequest,
    engine: MaturityEngine = Depends(get_maturity_engine),
):
    try:
        return engine.compare_results(request.current, request.previous)
    except Exception as e:
        logger.exception(f"Unexpected error comparing results: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")
