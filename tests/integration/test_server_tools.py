"""
Integration tests for the MCP server tools:
a description goes through classify_task, confirm_level and
prepare_task_card exactly as an MCP client would drive them.
"""

import asyncio
import json

import pytest

import main


@pytest.fixture(autouse=True)
def project_dir(tmp_path, monkeypatch):
    """Run every test from an empty project directory."""
    monkeypatch.chdir(tmp_path)
    for name in ("TASKCARD_CONFIG", "TASKCARD_PROJECT_PREFIX", "TASKCARD_LOG_LEVEL", "TASKCARD_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def login_task():
    return {
        "taskTitle": "User login",
        "businessGoal": "Let registered users sign in",
        "userValue": "Users reach their account securely",
        "functionalDescription": "Connect the login form to the authentication service API",
        "acceptanceCriteria": [
            "Valid credentials sign the user in",
            "Invalid credentials show an error",
            "Five failed attempts lock the account",
        ],
        "assignee": "开发者B",
    }


class TestServerRegistration:
    """The server exposes every tool and the level resource."""

    def test_tools_are_registered(self):
        tools = asyncio.run(main.mcp.list_tools())

        assert {tool.name for tool in tools} == {
            "classify_task",
            "confirm_level",
            "validate_task_card",
            "prepare_task_card",
            "prepare_task_cards",
            "get_level_guide",
            "get_config",
        }

    def test_levels_resource(self):
        text = main.resource_levels()

        assert text.startswith("Task Levels")
        for level in range(1, 5):
            assert f"- Level {level}:" in text


class TestClassificationFlow:
    """End-to-end flow from description to prepared task card."""

    def test_full_flow(self, login_task):
        suggestion = main.classify_task(login_task["functionalDescription"])
        assert suggestion["level"] == 2
        assert suggestion["next_suggested_step"] == "confirm_level"

        confirmed = main.confirm_level(suggestion["level"], 3)
        assert confirmed["overridden"] is True
        assert confirmed["next_suggested_step"] == "prepare_task_card"

        login_task["taskType"] = confirmed["confirmed_level"]
        validation = main.validate_task_card(login_task)
        assert validation["validation"]["is_valid"] is True
        assert validation["next_suggested_step"] == "prepare_task_card"

        prepared = main.prepare_task_card(login_task)
        card = prepared["task_card"]
        assert card["task_type"] == 3
        assert card["task_id"].startswith("PACE-L3-TASK-")
        assert card["user_value"] == login_task["userValue"]
        assert prepared["classification"] is None
        assert "prepared as Level 3" in prepared["message"]

    def test_classify_empty_description(self):
        result = main.classify_task("  ")

        assert result["error"] == "Description cannot be empty"

    def test_confirm_invalid_level(self):
        result = main.confirm_level(2, 7)

        assert "error" in result
        assert result["next_suggested_step"] == "get_level_guide"

    def test_prepare_with_auto_classify(self, login_task):
        login_task["taskType"] = 4

        result = main.prepare_task_card(login_task, auto_classify=True)

        assert result["task_card"]["task_type"] == 2
        assert result["classification"]["level"] == 2

    def test_prepare_invalid_task(self):
        result = main.prepare_task_card({"taskTitle": "Only a title"})

        assert result["error"].startswith("Task card validation failed")
        assert "Business goal is required" in result["validation"]["errors"]
        assert result["next_suggested_step"] == "validate_task_card"

    def test_validate_incomplete_task(self):
        result = main.validate_task_card({"taskTitle": "Only a title"})

        assert result["validation"]["is_valid"] is False
        assert result["next_suggested_step"] == "validate_task_card"

    def test_validate_unreadable_task(self):
        result = main.validate_task_card({"taskType": "L9"})

        assert "error" in result

    def test_batch_preparation(self, login_task):
        result = main.prepare_task_cards([login_task, {"taskTitle": "broken"}])

        assert result["prepared_count"] == 1
        assert result["failed"][0]["index"] == 1


class TestConfiguration:
    """Tools honour the project configuration."""

    def test_default_config(self):
        result = main.get_config()

        assert result["config"]["project_prefix"] == "PACE"

    def test_project_config_file(self, project_dir, login_task):
        (project_dir / "pace.config.json").write_text(
            json.dumps({"projectName": "Shop", "projectPrefix": "SHOP", "defaultSettings": {"priority": "P2"}}),
            encoding="utf-8",
        )

        prepared = main.prepare_task_card(login_task)

        assert prepared["task_card"]["task_id"].startswith("SHOP-L")
        assert prepared["task_card"]["priority"] == "P2"
        assert main.get_config()["config"]["project_name"] == "Shop"

    def test_explicit_config_path(self, project_dir, login_task):
        path = project_dir / "team.json"
        path.write_text(json.dumps({"projectPrefix": "TEAM"}), encoding="utf-8")

        result = main.prepare_task_cards([login_task], config_path=str(path))

        assert result["prepared"][0]["task_card"]["task_id"].startswith("TEAM-L")

    def test_missing_config_file(self, project_dir):
        result = main.get_config(str(project_dir / "missing.json"))

        assert "does not exist" in result["error"]

    def test_level_guide(self):
        guide = main.get_level_guide()

        assert len(guide["levels"]) == 4


class TestToolErrors:
    """Bad input and bad config come back as error payloads."""

    @pytest.mark.parametrize("overrides", [
        {"taskType": 7},
        {"estimation": "about a week"},
        {"technicalRequirements": ["Use TypeScript"]},
    ])
    def test_prepare_unreadable_task(self, login_task, overrides):
        result = main.prepare_task_card(dict(login_task, **overrides))

        assert "error" in result
        assert result["suggestion"]
        assert result["next_suggested_step"] == "validate_task_card"

    def test_validate_malformed_nested_entries(self, login_task):
        result = main.validate_task_card(dict(login_task, relatedFiles=[42]))

        assert "Related file entries must be objects" in result["error"]

    def test_batch_reports_malformed_entries(self, login_task):
        result = main.prepare_task_cards([dict(login_task, technicalRequirements=["Use TypeScript"]), login_task])

        assert result["failed_count"] == 1
        assert result["prepared_count"] == 1

    def test_invalid_project_config(self, project_dir, login_task):
        (project_dir / "pace.config.json").write_text("{not json", encoding="utf-8")

        for result in (
            main.validate_task_card(login_task),
            main.prepare_task_card(login_task),
            main.prepare_task_cards([login_task]),
            main.get_config(),
        ):
            assert "not valid JSON" in result["error"]
            assert result["next_suggested_step"] == "get_config"

    def test_settings_free_tools_ignore_broken_config(self, project_dir):
        (project_dir / "pace.config.json").write_text("[]", encoding="utf-8")

        assert main.classify_task("add a form")["level"] == 1
        assert main.confirm_level(1)["confirmed_level"] == 1
        assert len(main.get_level_guide()["levels"]) == 4
        assert main.resource_levels().startswith("Task Levels")
