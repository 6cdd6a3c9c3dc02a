import yaml
from pydantic import ValidationError
from typing import Dict, Any

from services.maturity_engine.definitions import (
    DIMENSION_WEIGHTS,
    INDUSTRY_BENCHMARKS,
    LEVEL_DEFINITIONS,
    MATURITY_QUESTIONS,
    OPPORTUNITY_RECOMMENDATIONS,
    WEAKNESS_RECOMMENDATIONS,
)
from services.maturity_engine.models import MaturityModelConfig

class SpecValidationError(ValueError):
    """Custom exception for maturity model validation errors not covered by Pydantic."""
    pass

def default_maturity_spec_data() -> Dict[str, Any]:
    """Raw dictionary form of the built-in maturity model."""
    return {
        "version": "1.0.0",
        "questions": MATURITY_QUESTIONS,
        "weights": DIMENSION_WEIGHTS,
        "levels": LEVEL_DEFINITIONS,
        "weakness_recommendations": WEAKNESS_RECOMMENDATIONS,
        "opportunity_recommendations": OPPORTUNITY_RECOMMENDATIONS,
        "benchmarks": INDUSTRY_BENCHMARKS,
    }

def load_maturity_spec_data(data: Dict[str, Any]) -> MaturityModelConfig:
    """
    Validates the raw dictionary data against the MaturityModelConfig model
    and performs additional custom validations.
    """
    try:
        config = MaturityModelConfig.model_validate(data)
    except ValidationError as e:
        # Re-raise Pydantic's validation error for schema issues
        raise e

    question_ids = set()
    for question in config.questions:
        if question.id in question_ids:
            raise SpecValidationError(f"Duplicate question ID found: {question.id}")
        question_ids.add(question.id)

    for question_id, weight in config.weights.items():
        if weight <= 0:
            raise SpecValidationError(f"Weight for question '{question_id}' must be positive, got {weight}")

    if not config.levels:
        raise SpecValidationError("At least one maturity level must be defined")

    level_ids = set()
    for level in config.levels:
        if level.level in level_ids:
            raise SpecValidationError(f"Duplicate level ID found: {level.level}")
        level_ids.add(level.level)

        low, high = level.score_range
        if low > high:
            raise SpecValidationError(f"Level '{level.level}' has an inverted score range: [{low}, {high}]")

    # Benchmarks for undeclared levels would never be reachable
    unknown_benchmarks = set(config.benchmarks) - level_ids
    if unknown_benchmarks:
        raise SpecValidationError(f"Benchmarks reference undefined levels: {sorted(unknown_benchmarks)}")

    return config

def load_default_maturity_spec() -> MaturityModelConfig:
    return load_maturity_spec_data(default_maturity_spec_data())

def load_maturity_spec_from_file(file_path: str) -> MaturityModelConfig:
    """
    Loads a maturity model from a YAML file, validates it,
    and returns a MaturityModelConfig object.
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise SpecValidationError(f"File not found: {file_path}")
    except yaml.YAMLError as e:
        raise SpecValidationError(f"Error parsing YAML file {file_path}: {e}")

    if data is None:
        raise SpecValidationError(f"YAML file is empty or invalid: {file_path}")

    return load_maturity_spec_data(data)
