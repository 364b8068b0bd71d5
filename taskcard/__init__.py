"""Task card classification and preparation."""

from .classifier import TaskClassifier, classify_task, get_classifier
from .config import ConfigError, GeneratorConfig, load_config
from .models import (
    Classification,
    ClassificationAnalysis,
    LevelProfile,
    TaskCard,
    TaskCardError,
    TaskCardValidationError,
    TaskLevel,
    ValidationResult,
)
from .workflow import TaskCardWorkflow

__all__ = [
    "TaskClassifier",
    "classify_task",
    "get_classifier",
    "ConfigError",
    "GeneratorConfig",
    "load_config",
    "Classification",
    "ClassificationAnalysis",
    "LevelProfile",
    "TaskCard",
    "TaskCardError",
    "TaskCardValidationError",
    "TaskLevel",
    "ValidationResult",
    "TaskCardWorkflow",
]
