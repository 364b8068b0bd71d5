"""Data models for task classification and task cards.

This module contains the core data structures used throughout the task card
tools: the task level enumeration, classification results, the task card
record handed to document generation, and validation results.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Mapping, Optional, Tuple

PRIORITIES = ("P0", "P1", "P2", "P3")
FILE_ACTIONS = ("view", "modify", "create")
RISK_LEVELS = ("high", "medium", "low")


class TaskLevel(IntEnum):
    """Ownership level of a task, from AI-led to human-led."""

    STANDARDIZED = 1
    INTEGRATION = 2
    ARCHITECTURE = 3
    INNOVATION = 4

    @classmethod
    def coerce(cls, value: Any) -> "TaskLevel":
        """Accept ``2``, ``"2"``, ``"L2"`` or ``"level2"`` and return the level."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid task level: {value!r}")
        if isinstance(value, str):
            text = value.strip().lower()
            for prefix in ("level", "l"):
                if text.startswith(prefix):
                    text = text[len(prefix):].strip()
                    break
            try:
                value = int(text)
            except ValueError:
                raise ValueError(f"Invalid task level: {value!r}") from None
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Task level must be 1-4, got: {value!r}") from None


class TaskCardError(ValueError):
    """Base error for task card preparation."""


class TaskCardValidationError(TaskCardError):
    """Raised when a task record fails input validation."""

    def __init__(self, result: "ValidationResult"):
        self.result = result
        super().__init__(f"Task card validation failed: {', '.join(result.errors)}")


@dataclass(slots=True, frozen=True)
class Classification:
    """Suggested level for a task description."""

    level: TaskLevel
    confidence: float
    reasoning: Tuple[str, ...]

    @property
    def confidence_percent(self) -> int:
        """Confidence as a whole percentage, the way it is shown to users."""
        return int(round(self.confidence * 100))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "level": int(self.level),
            "confidence": self.confidence,
            "reasoning": list(self.reasoning),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Classification":
        """Create from dictionary representation."""
        return cls(
            level=TaskLevel.coerce(data["level"]),
            confidence=float(data["confidence"]),
            reasoning=tuple(data.get("reasoning", [])),
        )


@dataclass(slots=True, frozen=True)
class ClassificationAnalysis:
    """Intermediate values of one classification call."""

    raw_scores: Dict[int, int]
    scores: Dict[int, float]
    matched_keywords: Dict[int, List[str]]
    tone: str
    tone_counts: Dict[str, int]
    base_level: TaskLevel
    classification: Classification

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raw_scores": {f"level{k}": v for k, v in self.raw_scores.items()},
            "scores": {f"level{k}": v for k, v in self.scores.items()},
            "matched_keywords": {f"level{k}": list(v) for k, v in self.matched_keywords.items()},
            "tone": self.tone,
            "tone_counts": dict(self.tone_counts),
            "base_level": int(self.base_level),
            "classification": self.classification.to_dict(),
        }


@dataclass(slots=True, frozen=True)
class LevelProfile:
    """Level guide entry describing who owns which part of the work."""

    level: TaskLevel
    name: str
    description: str
    examples: str
    workflow: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": int(self.level),
            "name": self.name,
            "description": self.description,
            "examples": self.examples,
            "workflow": self.workflow,
        }


@dataclass(slots=True)
class ValidationResult:
    """Outcome of validating a task record."""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "suggestions": list(self.suggestions),
        }


def _require_mapping(data: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise TypeError(f"{kind} entries must be objects, got {type(data).__name__}")
    return data


@dataclass(slots=True)
class TechnicalRequirement:
    category: str
    description: str
    required: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "description": self.description, "required": self.required}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TechnicalRequirement":
        data = _require_mapping(data, "Technical requirement")
        return cls(
            category=data.get("category", ""),
            description=data.get("description", ""),
            required=bool(data.get("required", True)),
        )


@dataclass(slots=True)
class RelatedFile:
    path: str
    description: str = ""
    action: str = "modify"

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "description": self.description, "action": self.action}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RelatedFile":
        data = _require_mapping(data, "Related file")
        return cls(
            path=data.get("path", ""),
            description=data.get("description", ""),
            action=data.get("action") or "modify",
        )

    @classmethod
    def parse(cls, line: str) -> "RelatedFile":
        """Parse ``path:description:action`` shorthand."""
        parts = [part.strip() for part in line.split(":")]
        return cls(
            path=parts[0] if parts else "",
            description=parts[1] if len(parts) > 1 else "",
            action=parts[2] if len(parts) > 2 and parts[2] else "modify",
        )


@dataclass(slots=True)
class RiskItem:
    description: str
    impact: str = "medium"
    probability: str = "medium"
    mitigation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "impact": self.impact,
            "probability": self.probability,
            "mitigation": self.mitigation,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RiskItem":
        data = _require_mapping(data, "Risk")
        return cls(
            description=data.get("description", ""),
            impact=data.get("impact") or "medium",
            probability=data.get("probability") or "medium",
            mitigation=data.get("mitigation", ""),
        )

    @classmethod
    def parse(cls, line: str) -> "RiskItem":
        """Parse ``description:impact:probability:mitigation`` shorthand."""
        parts = [part.strip() for part in line.split(":")]
        return cls(
            description=parts[0] if parts else "",
            impact=parts[1] if len(parts) > 1 and parts[1] else "medium",
            probability=parts[2] if len(parts) > 2 and parts[2] else "medium",
            mitigation=parts[3] if len(parts) > 3 else "",
        )


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


@dataclass(slots=True)
class TaskCard:
    """Structured task record passed on to document generation.

    A record may be partial while it is being collected; fields that get a
    level-specific default stay ``None`` until the card is completed.
    """

    # identification
    task_title: str = ""
    task_id: Optional[str] = None
    task_type: Optional[TaskLevel] = None
    priority: Optional[str] = None
    estimation: Optional[float] = None
    assignee: str = ""
    created_date: Optional[str] = None
    due_date: Optional[str] = None

    # business context
    business_goal: str = ""
    user_value: str = ""
    business_rules: List[str] = field(default_factory=list)
    acceptance_criteria: List[str] = field(default_factory=list)

    # technical specification
    functional_description: str = ""
    technical_requirements: List[TechnicalRequirement] = field(default_factory=list)
    interface_definition: Optional[str] = None
    data_model: Optional[str] = None
    constraints: List[str] = field(default_factory=list)

    # implementation guidance
    implementation_approach: Optional[str] = None
    code_examples: List[str] = field(default_factory=list)
    best_practices: Optional[List[str]] = None
    considerations: List[str] = field(default_factory=list)

    related_files: List[RelatedFile] = field(default_factory=list)

    # quality assurance
    test_strategy: Optional[str] = None
    validation_checklist: Optional[List[str]] = None
    risk_assessment: Optional[List[RiskItem]] = None
    rollback_plan: Optional[str] = None

    custom_fields: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "task_id": self.task_id,
            "task_title": self.task_title,
            "task_type": int(self.task_type) if self.task_type is not None else None,
            "priority": self.priority,
            "estimation": self.estimation,
            "assignee": self.assignee,
            "created_date": self.created_date,
            "due_date": self.due_date,
            "business_goal": self.business_goal,
            "user_value": self.user_value,
            "business_rules": list(self.business_rules),
            "acceptance_criteria": list(self.acceptance_criteria),
            "functional_description": self.functional_description,
            "technical_requirements": [req.to_dict() for req in self.technical_requirements],
            "interface_definition": self.interface_definition,
            "data_model": self.data_model,
            "constraints": list(self.constraints),
            "implementation_approach": self.implementation_approach,
            "code_examples": list(self.code_examples),
            "best_practices": list(self.best_practices) if self.best_practices is not None else None,
            "considerations": list(self.considerations),
            "related_files": [item.to_dict() for item in self.related_files],
            "test_strategy": self.test_strategy,
            "validation_checklist": list(self.validation_checklist) if self.validation_checklist is not None else None,
            "risk_assessment": [risk.to_dict() for risk in self.risk_assessment] if self.risk_assessment is not None else None,
            "rollback_plan": self.rollback_plan,
            "custom_fields": dict(self.custom_fields) if self.custom_fields is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskCard":
        """Create from a snake_case or camelCase dictionary.

        Unknown keys are ignored.
        """
        values = {_snake_case(key): value for key, value in data.items()}
        task_type = values.get("task_type")
        estimation = values.get("estimation")
        risks = values.get("risk_assessment")
        return cls(
            task_title=values.get("task_title") or "",
            task_id=values.get("task_id") or None,
            task_type=TaskLevel.coerce(task_type) if task_type not in (None, "") else None,
            priority=values.get("priority") or None,
            estimation=float(estimation) if estimation not in (None, "") else None,
            assignee=values.get("assignee") or "",
            created_date=values.get("created_date"),
            due_date=values.get("due_date"),
            business_goal=values.get("business_goal") or "",
            user_value=values.get("user_value") or "",
            business_rules=list(values.get("business_rules") or []),
            acceptance_criteria=list(values.get("acceptance_criteria") or []),
            functional_description=values.get("functional_description") or "",
            technical_requirements=[
                TechnicalRequirement.from_dict(item) for item in values.get("technical_requirements") or []
            ],
            interface_definition=values.get("interface_definition"),
            data_model=values.get("data_model"),
            constraints=list(values.get("constraints") or []),
            implementation_approach=values.get("implementation_approach"),
            code_examples=list(values.get("code_examples") or []),
            best_practices=list(values["best_practices"]) if values.get("best_practices") is not None else None,
            considerations=list(values.get("considerations") or []),
            related_files=[
                RelatedFile.parse(item) if isinstance(item, str) else RelatedFile.from_dict(item)
                for item in values.get("related_files") or []
            ],
            test_strategy=values.get("test_strategy"),
            validation_checklist=(
                list(values["validation_checklist"]) if values.get("validation_checklist") is not None else None
            ),
            risk_assessment=[
                RiskItem.parse(item) if isinstance(item, str) else RiskItem.from_dict(item)
                for item in risks
            ] if risks is not None else None,
            rollback_plan=values.get("rollback_plan"),
            custom_fields=values.get("custom_fields"),
        )

    def validate(self) -> List[str]:
        """Check enumerated fields and return any issues."""
        issues = []

        if self.priority is not None and self.priority not in PRIORITIES:
            issues.append(f"Invalid priority: {self.priority}")
        if self.estimation is not None and self.estimation <= 0:
            issues.append("Estimation must be positive")
        for item in self.related_files:
            if item.action not in FILE_ACTIONS:
                issues.append(f"Invalid related file action: {item.action}")
        for risk in self.risk_assessment or []:
            if risk.impact not in RISK_LEVELS:
                issues.append(f"Invalid risk impact: {risk.impact}")
            if risk.probability not in RISK_LEVELS:
                issues.append(f"Invalid risk probability: {risk.probability}")

        return issues
