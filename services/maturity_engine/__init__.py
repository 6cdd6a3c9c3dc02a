# AI maturity scoring: weights, levels and personalised recommendations.

from .engine import MaturityEngine
from .loader import SpecValidationError, load_maturity_spec_data, load_maturity_spec_from_file
from .models import LevelDefinition, MaturityModelConfig, Question, ResultComparison, ScoringResult

__all__ = [
    "MaturityEngine",
    "SpecValidationError",
    "load_maturity_spec_data",
    "load_maturity_spec_from_file",
    "LevelDefinition",
    "MaturityModelConfig",
    "Question",
    "ResultComparison",
    "ScoringResult",
]
