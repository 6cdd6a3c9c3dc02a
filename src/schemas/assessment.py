from typing import Dict, Optional
from pydantic import BaseModel, Field

from services.maturity_engine.models import ScoringResult

class AssessmentRequest(BaseModel):
    answers: Dict[str, int]  # question_id → score on the 1-5 scale
    session_id: Optional[str] = None
    time_spent: float = Field(0, ge=0)  # seconds spent on the quiz

class ComparisonRequest(BaseModel):
    current: ScoringResult
    previous: Optional[ScoringResult] = None

class QuestionOut(BaseModel):
    id: str
    dimension: str
    text: str = ""
