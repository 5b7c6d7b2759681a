"""Tests for service layer structured logging.

These tests verify that mutations emit structured log entries with the
operation, outcome and entity ids.
"""

import logging

from recipe_planner.services.logging_utils import get_service_logger, log_operation


class TestLoggingUtilities:
    """Tests for logging utility functions."""

    def test_get_service_logger_extracts_module_name(self):
        logger = get_service_logger("recipe_planner.services.recipe_service")
        assert logger.name == "recipe_planner.services.recipe_service"

    def test_get_service_logger_plain_name(self):
        assert get_service_logger("reports").name == "recipe_planner.services.reports"

    def test_log_operation_includes_extra_context(self, caplog):
        logger = get_service_logger("test")

        with caplog.at_level(logging.INFO):
            log_operation(logger, operation="context_test", outcome="success", recipe_id=42)

        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.getMessage() == "context_test: success"
        assert record.operation == "context_test"
        assert record.outcome == "success"
        assert record.recipe_id == 42

    def test_log_operation_respects_level(self, caplog):
        logger = get_service_logger("test")

        with caplog.at_level(logging.INFO):
            log_operation(logger, operation="quiet", outcome="done", level=logging.DEBUG)

        assert caplog.records == []


class TestServiceLogging:
    """Mutations log their outcome with entity ids."""

    def test_create_recipe_logged(self, recipes, alice, caplog):
        with caplog.at_level(logging.INFO, logger="recipe_planner.services"):
            recipe_id = recipes.create(alice.id, {"title": "Soup"}, None, [{"name": "Leek"}])

        records = {r.operation: r for r in caplog.records if hasattr(r, "operation")}
        assert records["create_recipe"].recipe_id == recipe_id
        assert records["create_recipe"].user_id == alice.id
        assert records["resolve_ingredient"].outcome == "created"
        assert records["resolve_ingredient"].ingredient_name == "Leek"

    def test_delete_recipe_logs_counts(self, recipes, steps, alice, caplog):
        recipe_id = recipes.create(alice.id, {"title": "Soup"}, None, [{"name": "Leek"}])
        steps.add_step(recipe_id, alice.id, "Simmer")

        with caplog.at_level(logging.INFO, logger="recipe_planner.services"):
            recipes.delete(recipe_id, alice.id)

        record = next(r for r in caplog.records if getattr(r, "operation", None) == "delete_recipe")
        assert record.links_deleted == 1
        assert record.steps_deleted == 1
