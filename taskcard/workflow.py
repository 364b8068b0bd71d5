"""Task card workflow.

This module orchestrates the steps around the classifier: suggest a level
for a description, let the user confirm or override it, validate the task
record and complete it with level-specific defaults so that it is ready for
document generation.
"""

from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from .classifier import TaskClassifier, get_classifier
from .config import GeneratorConfig
from .models import (
    Classification,
    TaskCard,
    TaskCardValidationError,
    TaskLevel,
    ValidationResult,
)
from .taskcard_logging import (
    log_batch_preparation,
    log_classification_event,
    log_error_with_context,
    log_level_confirmation,
    log_operation,
    log_performance,
    log_task_card_event,
)
from .vocabulary import (
    DEFAULT_BEST_PRACTICES,
    DEFAULT_TEST_STRATEGIES,
    DEFAULT_VALIDATION_CHECKLISTS,
    LEVEL_NAMES,
    LEVEL_PROFILES,
    keyword_table,
    level_profile,
)

logger = logging.getLogger("taskcard.workflow")

TASK_ID_PATTERN = re.compile(r"^[A-Z]+-L[1-4]-[A-Z0-9]+-\d+$")
TASK_ID_FORMAT_HINT = "PREFIX-L<level>-MODULE-NUMBER (e.g. PROJ-L2-AUTH-001)"

DEFAULT_ESTIMATION = 8
SPLIT_INPUT_THRESHOLD = 40
SPLIT_OUTPUT_THRESHOLD = 32
MIN_ACCEPTANCE_CRITERIA = 3

TaskRecord = Union[TaskCard, Dict[str, Any]]


def module_from_task_id(task_id: str) -> str:
    """Module segment of ``PREFIX-L2-AUTH-001`` (``auth``), or ``general``."""
    parts = task_id.split("-")
    return parts[2].lower() if len(parts) >= 3 else "general"


class TaskCardWorkflow:
    """Run classification and task card preparation for one project."""

    def __init__(self, config: Optional[GeneratorConfig] = None, classifier: Optional[TaskClassifier] = None):
        self.config = config or GeneratorConfig()
        self.classifier = classifier or get_classifier()

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    @log_performance("classify_task")
    def classify(self, description: Optional[str]) -> Dict[str, Any]:
        """Suggest a level for ``description``."""
        if not description or not description.strip():
            return {
                "error": "Description cannot be empty",
                "suggestion": "Describe the functionality and requirements of the task",
                "next_suggested_step": "classify_task",
            }

        analysis = self.classifier.analyze(description)
        classification = analysis.classification

        log_classification_event(
            int(classification.level),
            classification.confidence,
            analysis.tone,
            base_level=int(analysis.base_level),
        )

        return {
            "classification": classification.to_dict(),
            "level": int(classification.level),
            "level_name": LEVEL_NAMES[classification.level],
            "confidence_percent": classification.confidence_percent,
            "reasoning": list(classification.reasoning),
            "tone": analysis.tone,
            "matched_keywords": {
                f"level{level}": keywords for level, keywords in analysis.matched_keywords.items()
            },
            "next_suggested_step": "confirm_level",
            "workflow_tip": "Confirm the suggested level or override it with confirm_level",
            "message": (
                f"Suggested Level {int(classification.level)} "
                f"(confidence: {classification.confidence_percent}%)"
            ),
        }

    def confirm_level(self, suggested_level: Any, chosen_level: Any = None) -> Dict[str, Any]:
        """Settle on a level, letting the user override the suggestion."""
        suggested = TaskLevel.coerce(suggested_level)
        confirmed = TaskLevel.coerce(chosen_level) if chosen_level is not None else suggested
        overridden = confirmed != suggested

        log_level_confirmation(int(suggested), int(confirmed))
        if overridden:
            logger.info(f"Level {int(suggested)} overridden by user with Level {int(confirmed)}")

        return {
            "suggested_level": int(suggested),
            "confirmed_level": int(confirmed),
            "level_name": LEVEL_NAMES[confirmed],
            "profile": level_profile(confirmed).to_dict(),
            "overridden": overridden,
            "next_suggested_step": "prepare_task_card",
            "workflow_tip": f"Next: collect the Level {int(confirmed)} details and call prepare_task_card",
            "message": (
                f"Level {int(confirmed)} confirmed (overriding suggested Level {int(suggested)})"
                if overridden
                else f"Level {int(confirmed)} confirmed"
            ),
        }

    def level_guide(self) -> Dict[str, Any]:
        """Describe the four levels and who leads each."""
        return {
            "levels": [profile.to_dict() for profile in LEVEL_PROFILES],
            "keywords": keyword_table(),
            "tips": [
                "Level 1 and 2 tasks suit AI-led or collaborative implementation",
                "Level 3 and 4 tasks need a human to own the decisions",
                "Override the suggested level whenever the description undersells the work",
            ],
        }

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_input(self, record: TaskRecord) -> ValidationResult:
        """Check a task record before it is completed."""
        card = self._as_card(record)
        result = ValidationResult()

        if not card.task_title:
            result.errors.append("Task title is required")
        if not card.business_goal:
            result.errors.append("Business goal is required")
        if not card.functional_description:
            result.errors.append("Functional description is required")
        result.errors.extend(card.validate())

        if not card.assignee:
            result.warnings.append("Consider naming an assignee")
        if card.task_id and not TASK_ID_PATTERN.match(card.task_id):
            result.warnings.append(f"Task ID should follow the format {TASK_ID_FORMAT_HINT}")

        if card.estimation and card.estimation > SPLIT_INPUT_THRESHOLD:
            result.suggestions.append(
                f"Estimated effort is large (>{SPLIT_INPUT_THRESHOLD} hours); consider splitting into smaller tasks"
            )
        if card.acceptance_criteria and len(card.acceptance_criteria) < MIN_ACCEPTANCE_CRITERIA:
            result.suggestions.append(
                f"Add more specific acceptance criteria (at least {MIN_ACCEPTANCE_CRITERIA})"
            )
        if card.assignee and self.config.team_members and card.assignee not in self.config.team_members:
            result.suggestions.append(f"Assignee '{card.assignee}' is not one of the project team members")

        return result

    def validate_output(self, card: TaskCard) -> ValidationResult:
        """Check a completed task card for gaps worth flagging."""
        result = ValidationResult()

        if not card.user_value:
            result.warnings.append("User value is missing")
        if not card.acceptance_criteria:
            result.warnings.append("Acceptance criteria are missing")
        if not card.related_files:
            result.suggestions.append("Consider listing related files")
        if card.estimation and card.estimation > SPLIT_OUTPUT_THRESHOLD:
            result.suggestions.append("Estimated effort is large; consider splitting the task")

        return result

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------

    @log_performance("prepare_task_card")
    def prepare_task_card(
        self,
        record: TaskRecord,
        *,
        auto_classify: bool = False,
        validate_output: bool = True,
    ) -> Dict[str, Any]:
        """Validate, classify if needed and complete a task record.

        Raises ``TaskCardValidationError`` when required fields are missing.
        """
        card = self._as_card(record)
        title = card.task_title

        try:
            with log_operation("prepare_task_card", task_title=title, auto_classify=auto_classify):
                input_result = self.validate_input(card)
                if not input_result.is_valid:
                    raise TaskCardValidationError(input_result)
                for warning in input_result.warnings:
                    logger.warning(f"Task card '{title}': {warning}")

                classification: Optional[Classification] = None
                level = card.task_type
                if (auto_classify or level is None) and card.functional_description:
                    classification = self.classifier.classify(card.functional_description)
                    level = classification.level
                    logger.info(
                        f"Auto-classified '{title}': Level {int(level)} "
                        f"(confidence: {classification.confidence_percent}%)"
                    )

                completed = self._complete_task_card(card, level)

                output_result = ValidationResult()
                if validate_output:
                    output_result = self.validate_output(completed)
                    if output_result.warnings:
                        logger.warning(
                            f"Task card '{completed.task_id}' warnings: {', '.join(output_result.warnings)}"
                        )

                log_task_card_event(
                    "prepared",
                    completed.task_id,
                    level=int(level),
                    auto_classified=classification is not None,
                )

                return {
                    "task_card": completed.to_dict(),
                    "module": module_from_task_id(completed.task_id),
                    "level_name": LEVEL_NAMES[level],
                    "classification": classification.to_dict() if classification else None,
                    "validation": input_result.to_dict(),
                    "output_validation": output_result.to_dict(),
                    "workflow_tip": "Pass the task card to the Level template of your document generator",
                    "message": f"Task card {completed.task_id} prepared as Level {int(level)}",
                }

        except Exception as e:
            log_error_with_context(e, {
                "operation": "prepare_task_card",
                "task_title": title,
                "auto_classify": auto_classify,
            })
            raise

    @log_performance("prepare_batch")
    def prepare_batch(self, records: Iterable[Any], *, auto_classify: bool = True) -> Dict[str, Any]:
        """Prepare many records; a failing record does not stop the batch."""
        prepared: List[Dict[str, Any]] = []
        failed: List[Dict[str, Any]] = []

        for index, record in enumerate(records):
            try:
                if not isinstance(record, (dict, TaskCard)):
                    raise TypeError(f"Task record must be an object, got {type(record).__name__}")
                result = self.prepare_task_card(record, auto_classify=auto_classify)
                prepared.append(result)
                logger.info(f"Prepared: {result['task_card']['task_id']}")
            except (ValueError, TypeError) as e:
                logger.error(f"Preparation failed for record {index}: {e}")
                failed.append({"index": index, "error": str(e)})

        total = len(prepared) + len(failed)
        log_batch_preparation(total, len(prepared), len(failed), auto_classify=auto_classify)

        return {
            "prepared": prepared,
            "failed": failed,
            "total_count": total,
            "prepared_count": len(prepared),
            "failed_count": len(failed),
            "message": f"Prepared {len(prepared)} of {total} task cards",
        }

    def generate_task_id(self, level: TaskLevel) -> str:
        """Build ``PREFIX-L<level>-TASK-<last 6 digits of the epoch ms>``."""
        timestamp = str(int(time.time() * 1000))[-6:]
        return f"{self.config.project_prefix}-L{int(level)}-TASK-{timestamp}"

    def _complete_task_card(self, card: TaskCard, level: TaskLevel) -> TaskCard:
        today = datetime.now(timezone.utc).date().isoformat()

        return TaskCard(
            task_id=card.task_id or self.generate_task_id(level),
            task_title=card.task_title,
            task_type=level,
            priority=card.priority or self.config.default_priority,
            estimation=card.estimation or DEFAULT_ESTIMATION,
            assignee=card.assignee,
            created_date=card.created_date or today,
            due_date=card.due_date,
            business_goal=card.business_goal,
            user_value=card.user_value,
            business_rules=list(card.business_rules),
            acceptance_criteria=list(card.acceptance_criteria),
            functional_description=card.functional_description,
            technical_requirements=list(card.technical_requirements),
            interface_definition=card.interface_definition,
            data_model=card.data_model,
            constraints=list(card.constraints),
            implementation_approach=card.implementation_approach,
            code_examples=list(card.code_examples),
            best_practices=(
                list(card.best_practices) if card.best_practices is not None
                else list(DEFAULT_BEST_PRACTICES[level])
            ),
            considerations=list(card.considerations),
            related_files=list(card.related_files),
            test_strategy=card.test_strategy or DEFAULT_TEST_STRATEGIES[level],
            validation_checklist=(
                list(card.validation_checklist) if card.validation_checklist is not None
                else list(DEFAULT_VALIDATION_CHECKLISTS[level])
            ),
            risk_assessment=card.risk_assessment,
            rollback_plan=card.rollback_plan,
            custom_fields=card.custom_fields,
        )

    @staticmethod
    def _as_card(record: TaskRecord) -> TaskCard:
        if isinstance(record, TaskCard):
            return record
        return TaskCard.from_dict(record)
