"""Tests for model constraints and helpers."""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from recipe_planner.models import Ingredient, Recipe, RecipeIngredient, Step, User


@pytest.fixture
def session(test_db):
    session = test_db()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def owner(session):
    user = User(username="owner", password_hash="x")
    session.add(user)
    session.flush()
    return user


class TestIngredientModel:
    def test_untrimmed_name_violates_constraint(self, session):
        session.add(Ingredient(name=" Tomato"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_duplicate_name_violates_constraint(self, session):
        session.add(Ingredient(name="Tomato"))
        session.flush()
        session.add(Ingredient(name="Tomato"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_repr(self):
        assert repr(Ingredient(id=3, name="Salt")) == "Ingredient(id=3, name='Salt')"


class TestRecipeModel:
    def test_defaults(self, session, owner):
        recipe = Recipe(user_id=owner.id, title="Soup")
        session.add(recipe)
        session.flush()

        assert recipe.prep_minutes == 0
        assert recipe.cook_minutes == 0
        assert recipe.created_at is not None

    def test_negative_minutes_violate_constraint(self, session, owner):
        session.add(Recipe(user_id=owner.id, title="Soup", prep_minutes=-1))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_foreign_keys_are_enforced(self, session):
        session.add(Recipe(user_id=999, title="Orphan"))
        with pytest.raises(IntegrityError):
            session.flush()

    def test_duplicate_link_violates_primary_key(self, session, owner):
        recipe = Recipe(user_id=owner.id, title="Soup")
        leek = Ingredient(name="Leek")
        session.add_all([recipe, leek])
        session.flush()

        session.add(RecipeIngredient(recipe_id=recipe.id, ingredient_id=leek.id))
        session.flush()
        session.expunge_all()
        session.add(RecipeIngredient(recipe_id=recipe.id, ingredient_id=leek.id))
        with pytest.raises(IntegrityError):
            session.flush()


class TestStepModel:
    def test_position_unique_within_recipe(self, session, owner):
        recipe = Recipe(user_id=owner.id, title="Soup")
        session.add(recipe)
        session.flush()

        session.add(Step(recipe_id=recipe.id, position=1, instruction="Chop"))
        session.flush()
        session.add(Step(recipe_id=recipe.id, position=1, instruction="Boil"))
        with pytest.raises(IntegrityError):
            session.flush()


class TestToDict:
    def test_decimal_and_datetime_are_strings(self, session, owner):
        recipe = Recipe(user_id=owner.id, title="Soup")
        leek = Ingredient(name="Leek")
        session.add_all([recipe, leek])
        session.flush()
        link = RecipeIngredient(recipe_id=recipe.id, ingredient_id=leek.id, price=Decimal("1.25"))
        session.add(link)
        session.flush()

        assert link.to_dict()["price"] == "1.25"
        assert isinstance(recipe.to_dict()["created_at"], str)
