from datetime import datetime
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

Tier = Literal["low", "medium", "high"]


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    dimension: str
    text: str = ""


class LevelDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str
    name: str
    score_range: Tuple[float, float] # inclusive on both ends
    color: str = ""
    description: str = ""
    characteristics: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    next_steps: List[str] = Field(default_factory=list)

    def contains(self, score: float) -> bool:
        low, high = self.score_range
        return low <= score <= high


class IndustryBenchmark(BaseModel):
    percentile: int
    description: str


class MaturityModelConfig(BaseModel):
    """Everything the engine needs to score an assessment."""
    version: str = "1.0.0"
    questions: List[Question]
    weights: Dict[str, float] = Field(default_factory=dict)
    levels: List[LevelDefinition]
    weakness_recommendations: Dict[str, List[str]] = Field(default_factory=dict)
    opportunity_recommendations: Dict[str, List[str]] = Field(default_factory=dict)
    benchmarks: Dict[str, IndustryBenchmark] = Field(default_factory=dict)


class DimensionScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int
    sub_level: str
    weight: float
    question_id: str


class StrengthAnalysis(BaseModel):
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)


class ImprovementPotential(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_score: int
    max_score: int = 5
    potential: float
    impact: Tier
    priority: Tier


class ScoringResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Basic result info
    level: str
    level_name: str
    score: float # rounded to one decimal for display
    raw_score: float
    description: str = ""
    color: str = ""

    # Dimensional analysis
    dimensional_scores: Dict[str, DimensionScore] = Field(default_factory=dict)
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)

    # Recommendations
    recommendations: List[str] = Field(default_factory=list)
    next_steps: List[str] = Field(default_factory=list)
    characteristics: List[str] = Field(default_factory=list)

    # Metrics
    completion_rate: float = 0.0 # percent
    confidence_score: int = 0
    answered_questions: int = 0
    total_questions: int = 0

    # Session data
    answers: Dict[str, int] = Field(default_factory=dict)
    completed_at: datetime
    session_id: Optional[str] = None
    time_spent: float = 0

    industry_benchmark: IndustryBenchmark
    improvement_potential: Dict[str, ImprovementPotential] = Field(default_factory=dict)


class DimensionChange(BaseModel):
    change: int
    improved: bool
    declined: bool


class ResultComparison(BaseModel):
    score_difference: float
    improved: bool
    level_changed: bool
    level_upgraded: bool
    dimensional_changes: Dict[str, DimensionChange] = Field(default_factory=dict)
    time_span_ms: int = 0
