"""Tests for recipe steps."""

import pytest

from recipe_planner.models import Step
from recipe_planner.services.exceptions import NotFound, PermissionDenied, ValidationError


@pytest.fixture
def recipe_id(recipes, alice):
    return recipes.create(alice.id, {"title": "Bread"})


def _instructions(steps, recipe_id):
    return [(s.position, s.instruction) for s in steps.list_steps(recipe_id)]


class TestAddStep:
    def test_steps_are_numbered_in_order(self, steps, recipe_id, alice):
        steps.add_step(recipe_id, alice.id, "Mix")
        steps.add_step(recipe_id, alice.id, " Knead ")
        steps.add_step(recipe_id, alice.id, "Bake")

        assert _instructions(steps, recipe_id) == [(1, "Mix"), (2, "Knead"), (3, "Bake")]

    def test_empty_instruction_raises(self, steps, recipe_id, alice, count_rows):
        with pytest.raises(ValidationError):
            steps.add_step(recipe_id, alice.id, "   ")
        assert count_rows(Step) == 0

    def test_non_owner_is_denied(self, steps, recipe_id, bob, count_rows):
        with pytest.raises(PermissionDenied):
            steps.add_step(recipe_id, bob.id, "Mix")
        assert count_rows(Step) == 0


class TestRemoveStep:
    def test_remove_closes_gap(self, steps, recipe_id, alice):
        steps.add_step(recipe_id, alice.id, "Mix")
        middle = steps.add_step(recipe_id, alice.id, "Knead")
        steps.add_step(recipe_id, alice.id, "Proof")
        steps.add_step(recipe_id, alice.id, "Bake")

        steps.remove_step(recipe_id, alice.id, middle.id)

        assert _instructions(steps, recipe_id) == [(1, "Mix"), (2, "Proof"), (3, "Bake")]

    def test_step_of_other_recipe_is_not_found(self, steps, recipes, recipe_id, alice):
        other_id = recipes.create(alice.id, {"title": "Cake"})
        other_step = steps.add_step(other_id, alice.id, "Whisk")

        with pytest.raises(NotFound):
            steps.remove_step(recipe_id, alice.id, other_step.id)

    def test_non_owner_is_denied(self, steps, recipe_id, alice, bob):
        step = steps.add_step(recipe_id, alice.id, "Mix")

        with pytest.raises(PermissionDenied):
            steps.remove_step(recipe_id, bob.id, step.id)

        assert _instructions(steps, recipe_id) == [(1, "Mix")]

    def test_remove_all(self, steps, recipe_id, alice, count_rows):
        steps.add_step(recipe_id, alice.id, "Mix")
        steps.add_step(recipe_id, alice.id, "Bake")

        assert steps.remove_all(recipe_id) == 2
        assert count_rows(Step) == 0
