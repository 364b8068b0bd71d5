"""MCP server exposing task classification and task card preparation tools."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from taskcard import (
    ConfigError,
    GeneratorConfig,
    TaskCardValidationError,
    TaskCardWorkflow,
    load_config,
)
from taskcard.taskcard_logging import log_error_with_context, setup_logging

mcp = FastMCP("taskcard")


def _config(config_path: Optional[str] = None) -> GeneratorConfig:
    return load_config(config_path)


def _workflow(config_path: Optional[str] = None) -> TaskCardWorkflow:
    return TaskCardWorkflow(_config(config_path))


def _config_error(error: ConfigError, operation: str) -> Dict[str, Any]:
    log_error_with_context(error, {"operation": operation})
    return {
        "error": str(error),
        "suggestion": "Point config_path or TASKCARD_CONFIG at a valid pace.config.json",
        "next_suggested_step": "get_config",
    }


def _record_error(error: Exception, operation: str) -> Dict[str, Any]:
    log_error_with_context(error, {"operation": operation})
    return {
        "error": str(error),
        "suggestion": (
            "Check task_type (1-4), a numeric estimation, and that technical requirements, "
            "related files and risks are objects or 'a:b:c' strings"
        ),
        "next_suggested_step": "validate_task_card",
    }


@mcp.tool()
def classify_task(description: str) -> Dict[str, Any]:
    """STEP 1: Suggest a task level (1-4) for a free-text task description.
    Returns the level, a confidence score and the reasoning behind it.
    Show the suggestion to the user before confirming it with confirm_level."""

    # Classification does not depend on project settings
    return TaskCardWorkflow().classify(description)


@mcp.tool()
def confirm_level(suggested_level: int, chosen_level: Optional[int] = None) -> Dict[str, Any]:
    """STEP 2: Confirm the suggested level, or override it with the user's choice.
    Prerequisites: a suggestion from classify_task."""

    try:
        return TaskCardWorkflow().confirm_level(suggested_level, chosen_level)
    except ValueError as e:
        return {
            "error": str(e),
            "suggestion": "Levels run from 1 (standardized implementation) to 4 (innovation and exploration)",
            "next_suggested_step": "get_level_guide",
        }


@mcp.tool()
def validate_task_card(task: Dict[str, Any], config_path: Optional[str] = None) -> Dict[str, Any]:
    """Check a task record for missing required fields and format problems without preparing it."""

    try:
        workflow = _workflow(config_path)
    except ConfigError as e:
        return _config_error(e, "validate_task_card")

    try:
        result = workflow.validate_input(task)
    except (ValueError, TypeError) as e:
        return _record_error(e, "validate_task_card")

    return {
        "validation": result.to_dict(),
        "next_suggested_step": "prepare_task_card" if result.is_valid else "validate_task_card",
        "workflow_tip": (
            "Record is ready for prepare_task_card"
            if result.is_valid
            else "Fill in the missing fields before preparing the task card"
        ),
    }


@mcp.tool()
def prepare_task_card(
    task: Dict[str, Any],
    auto_classify: bool = False,
    config_path: Optional[str] = None,
) -> Dict[str, Any]:
    """STEP 3: Validate a task record and complete it with level-specific defaults.
    The record's task_type is used as the level; it is classified from the
    functional description when missing or when auto_classify is set.
    Prerequisites: a confirmed level via confirm_level, or auto_classify=True."""

    try:
        workflow = _workflow(config_path)
    except ConfigError as e:
        return _config_error(e, "prepare_task_card")

    try:
        return workflow.prepare_task_card(task, auto_classify=auto_classify)
    except TaskCardValidationError as e:
        return {
            "error": str(e),
            "validation": e.result.to_dict(),
            "suggestion": "Provide task_title, business_goal and functional_description",
            "next_suggested_step": "validate_task_card",
        }
    except (ValueError, TypeError) as e:
        return _record_error(e, "prepare_task_card")


@mcp.tool()
def prepare_task_cards(
    tasks: List[Dict[str, Any]],
    auto_classify: bool = True,
    config_path: Optional[str] = None,
) -> Dict[str, Any]:
    """Prepare a batch of task records; records without a level are classified automatically.
    Failed records are reported individually and do not stop the batch."""

    try:
        workflow = _workflow(config_path)
    except ConfigError as e:
        return _config_error(e, "prepare_task_cards")

    return workflow.prepare_batch(tasks, auto_classify=auto_classify)


@mcp.tool()
def get_level_guide() -> Dict[str, Any]:
    """Describe the four task levels and how work is split between humans and AI."""

    return TaskCardWorkflow().level_guide()


@mcp.tool()
def get_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Return the active project configuration."""

    try:
        config = _config(config_path)
    except ConfigError as e:
        return _config_error(e, "get_config")
    return {"config": config.to_dict()}


@mcp.resource("taskcard://levels")
def resource_levels() -> str:
    """Resource view of the level guide."""

    guide = TaskCardWorkflow().level_guide()
    lines = ["Task Levels"]
    for level in guide["levels"]:
        lines.append("")
        lines.append(f"- Level {level['level']}: {level['name']}")
        lines.append(f"  {level['description']}")
        lines.append(f"  Examples: {level['examples']}")
        lines.append(f"  Collaboration: {level['workflow']}")
    return "\n".join(lines)


def run() -> None:
    """Configure logging and serve the tools over stdio."""
    startup_config = _config()
    setup_logging(
        startup_config.log_level,
        Path(startup_config.log_file) if startup_config.log_file else None,
    )
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run()
