import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from .loader import load_default_maturity_spec, load_maturity_spec_from_file
from .models import (
    IndustryBenchmark,
    LevelDefinition,
    MaturityModelConfig,
    ResultComparison,
    ScoringResult,
)
from . import scorer

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MaturityEngine:
    """
    Scores AI maturity assessments against a maturity model.

    The engine holds no per-visitor state: every call to `compute_result` is
    independent, so one instance can serve any number of sessions.
    """
    def __init__(
        self,
        config: Optional[MaturityModelConfig] = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        """
        Args:
            config: Validated maturity model. Defaults to the built-in model.
            now: Clock used to stamp `completed_at`.
        """
        self.config = config or load_default_maturity_spec()
        self._now = now
        self._build_lookup_maps()

    @classmethod
    def from_file(cls, config_path: str) -> "MaturityEngine":
        return cls(load_maturity_spec_from_file(config_path))

    def _build_lookup_maps(self):
        self.questions = list(self.config.questions)
        self.question_ids = [q.id for q in self.questions]
        self.weights = dict(self.config.weights)
        self.levels: List[LevelDefinition] = list(self.config.levels)
        self.levels_by_id = {level.level: level for level in self.levels}

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    def get_questions(self) -> List[Dict[str, Any]]:
        return [q.model_dump() for q in self.questions]

    def get_level_definition(self, level: str) -> LevelDefinition:
        """Definition for `level`, falling back to the first declared level."""
        return self.levels_by_id.get(level, self.levels[0])

    def get_industry_benchmark(self, level: str) -> IndustryBenchmark:
        return scorer.get_industry_benchmark(level, self.config.benchmarks or None)

    def classify_level(self, score: float) -> str:
        return scorer.classify_level(score, self.levels)

    def compute_weighted_score(self, answers: Mapping[str, int]) -> float:
        return scorer.compute_weighted_score(
            scorer.sanitize_answers(answers, self.question_ids), self.weights
        )

    def compute_result(
        self,
        answers: Optional[Mapping[str, int]],
        session_meta: Optional[Mapping[str, Any]] = None,
    ) -> ScoringResult:
        """
        Turns a (possibly partial) answer set into a full scoring result.

        Never raises on bad input: unknown questions and out-of-range scores are
        dropped, and an empty answer set yields score 0 at the first level.
        """
        session_meta = session_meta or {}
        clean_answers = scorer.sanitize_answers(answers, self.question_ids)

        weighted_score = scorer.compute_weighted_score(clean_answers, self.weights)
        level = scorer.classify_level(weighted_score, self.levels)
        level_def = self.get_level_definition(level)

        dimensional_scores = scorer.compute_dimensional_scores(
            clean_answers, self.questions, self.weights, self.levels
        )
        analysis = scorer.analyze_strengths_weaknesses(dimensional_scores)
        recommendations = scorer.generate_recommendations(
            level_def,
            analysis.weaknesses,
            analysis.opportunities,
            weakness_table=self.config.weakness_recommendations,
            opportunity_table=self.config.opportunity_recommendations,
        )

        answered = len(clean_answers)
        total = self.total_questions
        completion_rate = (answered / total) * 100 if total else 0.0
        confidence = scorer.compute_confidence_score(clean_answers, dimensional_scores, total)

        logger.debug(f"Computed weighted score {weighted_score:.3f} -> {level} ({answered}/{total} answered)")

        return ScoringResult(
            level=level,
            level_name=level_def.name,
            score=round(weighted_score, 1),
            raw_score=weighted_score,
            description=level_def.description,
            color=level_def.color,
            dimensional_scores=dimensional_scores,
            strengths=analysis.strengths,
            weaknesses=analysis.weaknesses,
            opportunities=analysis.opportunities,
            recommendations=recommendations,
            next_steps=list(level_def.next_steps),
            characteristics=list(level_def.characteristics),
            completion_rate=completion_rate,
            confidence_score=confidence,
            answered_questions=answered,
            total_questions=total,
            answers=clean_answers,
            completed_at=self._now(),
            session_id=session_meta.get("session_id"),
            time_spent=session_meta.get("time_spent") or 0,
            industry_benchmark=self.get_industry_benchmark(level),
            improvement_potential=scorer.compute_improvement_potential(dimensional_scores),
        )

    def compare_results(
        self,
        current: ScoringResult,
        previous: Optional[ScoringResult],
    ) -> Optional[ResultComparison]:
        return scorer.compare_results(current, previous, self.levels)
