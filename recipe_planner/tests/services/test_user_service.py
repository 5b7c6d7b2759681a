"""Tests for recipe owner accounts."""

import pytest

from recipe_planner.models import Ingredient, Recipe, RecipeIngredient, Step, User
from recipe_planner.services.exceptions import (
    ConflictError,
    UserNotFound,
    UsernameTaken,
    ValidationError,
)


class TestCreateUser:
    def test_create_trims_username(self, users):
        user = users.create_user("  carol ", "hash")

        assert user.id is not None
        assert user.username == "carol"
        assert users.get_by_username("carol").id == user.id

    def test_duplicate_username_is_taken(self, users, alice):
        with pytest.raises(UsernameTaken) as exc_info:
            users.create_user(" alice", "other-hash")

        assert isinstance(exc_info.value, ConflictError)
        assert exc_info.value.http_status_code == 409

    def test_empty_username_raises(self, users):
        with pytest.raises(ValidationError):
            users.create_user("  ", "hash")

    def test_missing_hash_raises(self, users, count_rows):
        with pytest.raises(ValidationError):
            users.create_user("carol", "")
        assert count_rows(User) == 0

    def test_to_dict_omits_hash(self, alice):
        data = alice.to_dict()
        assert data["username"] == "alice"
        assert "password_hash" not in data


class TestLookupAndRename:
    def test_get_unknown_user(self, users):
        with pytest.raises(UserNotFound):
            users.get_user(999)

    def test_get_by_unknown_username(self, users):
        assert users.get_by_username("nobody") is None

    def test_rename(self, users, alice):
        users.rename_user(alice.id, "alicia")

        assert users.get_user(alice.id).username == "alicia"
        assert users.get_by_username("alice") is None

    def test_rename_to_taken_name(self, users, alice, bob):
        with pytest.raises(UsernameTaken):
            users.rename_user(alice.id, "bob")

        assert users.get_user(alice.id).username == "alice"


class TestDeleteUser:
    def test_delete_cascades_to_owned_recipes(self, users, recipes, steps, alice, bob, count_rows):
        """Deleting a user removes their recipes, links and steps but not shared ingredients."""
        soup_id = recipes.create(alice.id, {"title": "Soup"}, None, [{"name": "Leek"}])
        steps.add_step(soup_id, alice.id, "Simmer")
        bread_id = recipes.create(bob.id, {"title": "Bread"}, None, [{"name": "Flour"}])

        users.delete_user(alice.id)

        assert count_rows(User, id=alice.id) == 0
        assert count_rows(Recipe, user_id=alice.id) == 0
        assert count_rows(RecipeIngredient, recipe_id=soup_id) == 0
        assert count_rows(Step, recipe_id=soup_id) == 0
        assert count_rows(Ingredient) == 2
        assert count_rows(Recipe, id=bread_id) == 1

    def test_delete_unknown_user(self, users):
        with pytest.raises(UserNotFound):
            users.delete_user(999)
