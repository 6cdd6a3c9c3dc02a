# services/maturity_engine/scorer.py
# Scoring and evaluation functions for the AI maturity assessment.

import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .definitions import (
    DEFAULT_WEIGHT,
    INDUSTRY_BENCHMARKS,
    MAX_ANSWER_SCORE,
    MAX_RECOMMENDATIONS,
    MIN_ANSWER_SCORE,
    OPPORTUNITY_RECOMMENDATIONS,
    WEAKNESS_RECOMMENDATIONS,
)
from .models import (
    DimensionChange,
    DimensionScore,
    ImprovementPotential,
    IndustryBenchmark,
    LevelDefinition,
    Question,
    ResultComparison,
    ScoringResult,
    StrengthAnalysis,
)

logger = logging.getLogger(__name__)

STRENGTH_MIN_SCORE = 3
WEAKNESS_MAX_SCORE = 2
OPPORTUNITY_SCORE_RANGE = (2, 3)
OPPORTUNITY_MIN_WEIGHT = 1.1
TOP_N = 3

# Confidence blend
COMPLETION_WEIGHT = 0.7
CONSISTENCY_WEIGHT = 0.3
VARIANCE_NORMALIZER = 4.0


def is_valid_answer_score(score) -> bool:
    """True for plain integers within the answer scale (bools are rejected)."""
    if isinstance(score, bool) or not isinstance(score, int):
        return False
    return MIN_ANSWER_SCORE <= score <= MAX_ANSWER_SCORE


def sanitize_answers(answers: Optional[Mapping[str, int]], known_question_ids: Iterable[str]) -> Dict[str, int]:
    """Drops answers for unknown questions and values off the 1-5 scale."""
    if not answers:
        return {}
    if not isinstance(answers, Mapping):
        logger.warning(f"Ignoring answers of type {type(answers).__name__}, expected a mapping")
        return {}
    known = set(known_question_ids)
    clean: Dict[str, int] = {}
    for question_id, score in answers.items():
        if question_id not in known:
            logger.warning(f"Ignoring answer for unknown question id: {question_id}")
            continue
        if not is_valid_answer_score(score):
            logger.warning(f"Ignoring out-of-range score {score!r} for question {question_id}")
            continue
        clean[question_id] = score
    return clean


def compute_weighted_score(answers: Mapping[str, int], weights: Mapping[str, float]) -> float:
    """
    Weighted mean of the answered questions.

    Only answered questions contribute to the denominator, so partial completion
    does not drag the score down. Returns 0.0 when nothing usable was answered.
    """
    total_weighted_score = 0.0
    total_weight = 0.0
    for question_id, score in answers.items():
        weight = weights.get(question_id, DEFAULT_WEIGHT)
        total_weighted_score += score * weight
        total_weight += weight

    if total_weight <= 0 or not math.isfinite(total_weight):
        return 0.0

    weighted = total_weighted_score / total_weight
    # Keep float noise from pushing the mean outside the answered range
    scores = list(answers.values())
    return max(min(scores), min(max(scores), weighted))


def classify_level(score: float, levels: Sequence[LevelDefinition]) -> str:
    """Returns the first level, in declaration order, whose range holds the score."""
    for definition in levels:
        if definition.contains(score):
            return definition.level
    if levels:
        return levels[0].level
    return "L1"


def compute_dimensional_scores(
    answers: Mapping[str, int],
    questions: Sequence[Question],
    weights: Mapping[str, float],
    levels: Sequence[LevelDefinition],
) -> Dict[str, DimensionScore]:
    """
    One entry per answered question, keyed by the question's dimension.

    Questions sharing a dimension overwrite each other: the last one in question
    order wins. Scores are not merged.
    """
    dimensional_scores: Dict[str, DimensionScore] = {}
    for question in questions:
        score = answers.get(question.id)
        if score is None:
            continue
        dimensional_scores[question.dimension] = DimensionScore(
            score=score,
            sub_level=classify_level(score, levels),
            weight=weights.get(question.id, DEFAULT_WEIGHT),
            question_id=question.id,
        )
    return dimensional_scores


def analyze_strengths_weaknesses(dimensional_scores: Mapping[str, DimensionScore]) -> StrengthAnalysis:
    """Ranks dimensions by weighted score and picks strengths, weaknesses and opportunities."""
    ranked = sorted(
        dimensional_scores.items(),
        key=lambda item: item[1].score * item[1].weight,
        reverse=True,
    )

    strengths = [dim for dim, data in ranked[:TOP_N] if data.score >= STRENGTH_MIN_SCORE]
    weaknesses = [dim for dim, data in ranked[-TOP_N:] if data.score <= WEAKNESS_MAX_SCORE]

    low, high = OPPORTUNITY_SCORE_RANGE
    opportunities = [
        dim for dim, data in ranked
        if low <= data.score <= high and data.weight >= OPPORTUNITY_MIN_WEIGHT
    ]

    return StrengthAnalysis(strengths=strengths, weaknesses=weaknesses, opportunities=opportunities)


def generate_recommendations(
    level_definition: LevelDefinition,
    weaknesses: Sequence[str],
    opportunities: Sequence[str],
    weakness_table: Optional[Mapping[str, List[str]]] = None,
    opportunity_table: Optional[Mapping[str, List[str]]] = None,
    limit: int = MAX_RECOMMENDATIONS,
) -> List[str]:
    """Base level recommendations first, then weakness and opportunity ones; deduplicated and capped."""
    weakness_table = WEAKNESS_RECOMMENDATIONS if weakness_table is None else weakness_table
    opportunity_table = OPPORTUNITY_RECOMMENDATIONS if opportunity_table is None else opportunity_table

    candidates = list(level_definition.recommendations)
    for weakness in weaknesses:
        candidates.extend(weakness_table.get(weakness, []))
    for opportunity in opportunities:
        candidates.extend(opportunity_table.get(opportunity, []))

    # dict keeps first-seen order
    unique = list(dict.fromkeys(candidates))
    return unique[:limit]


def compute_confidence_score(
    answers: Mapping[str, int],
    dimensional_scores: Mapping[str, DimensionScore],
    total_questions: int,
) -> int:
    """Blend of completion rate and answer consistency, as an integer percentage."""
    completion_rate = min(1.0, len(answers) / total_questions) if total_questions > 0 else 0.0

    scores = [data.score for data in dimensional_scores.values()]
    if scores:
        mean = sum(scores) / len(scores)
        variance = sum((s - mean) ** 2 for s in scores) / len(scores)
        consistency = max(0.0, 1 - variance / VARIANCE_NORMALIZER)
    else:
        consistency = 0.0

    confidence = round((completion_rate * COMPLETION_WEIGHT + consistency * CONSISTENCY_WEIGHT) * 100)
    return max(0, min(100, int(confidence)))


def _impact_for(potential: float) -> str:
    if potential > 2:
        return "high"
    if potential > 1:
        return "medium"
    return "low"


def _priority_for(weight: float) -> str:
    if weight >= 1.1:
        return "high"
    if weight >= 1.0:
        return "medium"
    return "low"


def compute_improvement_potential(
    dimensional_scores: Mapping[str, DimensionScore],
) -> Dict[str, ImprovementPotential]:
    """Headroom per dimension; priority follows the weight, independently of impact."""
    improvements: Dict[str, ImprovementPotential] = {}
    for dimension, data in dimensional_scores.items():
        potential = (MAX_ANSWER_SCORE - data.score) * data.weight
        improvements[dimension] = ImprovementPotential(
            current_score=data.score,
            max_score=MAX_ANSWER_SCORE,
            potential=round(potential, 1),
            impact=_impact_for(potential),
            priority=_priority_for(data.weight),
        )
    return improvements


def get_industry_benchmark(
    level: str,
    benchmarks: Optional[Mapping[str, IndustryBenchmark]] = None,
) -> IndustryBenchmark:
    if benchmarks is None:
        benchmarks = {k: IndustryBenchmark(**v) for k, v in INDUSTRY_BENCHMARKS.items()}
    if level in benchmarks:
        return benchmarks[level]
    if "L1" in benchmarks:
        return benchmarks["L1"]
    return IndustryBenchmark(percentile=0, description="")


def level_ranks(levels: Sequence[LevelDefinition]) -> Dict[str, int]:
    """Ordinal rank per level id, following declaration order."""
    return {definition.level: rank for rank, definition in enumerate(levels)}


def compare_results(
    current: ScoringResult,
    previous: Optional[ScoringResult],
    levels: Sequence[LevelDefinition],
) -> Optional[ResultComparison]:
    """Compares two results of the same visitor. Returns None without a previous result."""
    if previous is None:
        return None

    ranks = level_ranks(levels)
    score_diff = current.raw_score - previous.raw_score
    level_changed = current.level != previous.level
    level_upgraded = level_changed and ranks.get(current.level, -1) > ranks.get(previous.level, -1)

    dimensional_changes: Dict[str, DimensionChange] = {}
    for dimension, current_dim in current.dimensional_scores.items():
        previous_dim = previous.dimensional_scores.get(dimension)
        if previous_dim is None:
            continue
        dimensional_changes[dimension] = DimensionChange(
            change=current_dim.score - previous_dim.score,
            improved=current_dim.score > previous_dim.score,
            declined=current_dim.score < previous_dim.score,
        )

    try:
        time_span_ms = int((current.completed_at - previous.completed_at).total_seconds() * 1000)
    except TypeError:
        # naive vs aware timestamps
        logger.warning("Cannot compare completion times of results with mixed timezone info")
        time_span_ms = 0

    return ResultComparison(
        score_difference=round(score_diff, 1),
        improved=score_diff > 0,
        level_changed=level_changed,
        level_upgraded=level_upgraded,
        dimensional_changes=dimensional_changes,
        time_span_ms=time_span_ms,
    )
