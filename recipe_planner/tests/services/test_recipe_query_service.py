"""Tests for composable recipe filters.

Tests cover:
- RecipeFilter.from_params() parsing and validation
- One predicate per present filter, combined conjunctively
- Date range bounds, free text, cuisine, ingredient and owner filters
- Result ordering and distinct cuisines
"""

from datetime import date, datetime

import pytest

from recipe_planner.services.exceptions import ValidationError
from recipe_planner.services.recipe_query_service import QueryFilterEngine, RecipeFilter


class TestRecipeFilterFromParams:
    """Tests for building filters from request parameters."""

    def test_empty_params_mean_no_filter(self):
        recipe_filter = RecipeFilter.from_params({})

        assert recipe_filter == RecipeFilter()
        assert recipe_filter.is_empty

    def test_blank_values_are_absent(self):
        recipe_filter = RecipeFilter.from_params(
            {"from": "", "to": " ", "cuisine": "", "q": "  ", "ingredient_id": ""}
        )
        assert recipe_filter.is_empty

    def test_parses_all_fields(self):
        recipe_filter = RecipeFilter.from_params(
            {
                "from": "2024-01-01",
                "to": "2024-01-31",
                "cuisine": " Thai ",
                "q": " soup ",
                "ingredient_id": "5",
                "user_id": 2,
            }
        )

        assert recipe_filter == RecipeFilter(
            date_from=date(2024, 1, 1),
            date_to=date(2024, 1, 31),
            cuisine="Thai",
            free_text="soup",
            ingredient_id=5,
            user_id=2,
        )

    def test_long_names_take_precedence_over_aliases(self):
        recipe_filter = RecipeFilter.from_params({"date_from": "2024-02-01", "from": "2024-01-01"})
        assert recipe_filter.date_from == date(2024, 2, 1)

    def test_malformed_values_raise(self):
        with pytest.raises(ValidationError) as exc_info:
            RecipeFilter.from_params({"from": "01/02/2024", "ingredient_id": "abc"})

        assert len(exc_info.value.errors) == 2

    def test_reversed_date_range_raises(self):
        with pytest.raises(ValidationError):
            RecipeFilter.from_params({"from": "2024-02-01", "to": "2024-01-01"})


class TestPredicates:
    """Tests for predicate composition."""

    def test_no_filter_no_predicates(self):
        assert QueryFilterEngine.predicates(None) == []
        assert QueryFilterEngine.predicates(RecipeFilter()) == []

    def test_one_predicate_per_present_field(self):
        recipe_filter = RecipeFilter(
            date_from=date(2024, 1, 1),
            date_to=date(2024, 1, 31),
            cuisine="Thai",
            free_text="soup",
            ingredient_id=3,
        )
        assert len(QueryFilterEngine.predicates(recipe_filter)) == 5

    def test_values_are_bound_parameters(self):
        """User text never appears in the SQL string itself."""
        recipe_filter = RecipeFilter(cuisine="x' OR '1'='1", free_text="'; DROP TABLE recipes; --")

        for predicate in QueryFilterEngine.predicates(recipe_filter):
            compiled = predicate.compile()
            assert "DROP TABLE" not in str(compiled)
            assert "OR '1'='1" not in str(compiled)
            assert compiled.params


@pytest.fixture
def catalog(recipes, dictionary, set_created_at, alice, bob):
    """Four recipes with known cuisines, ingredients and creation dates."""
    thai_soup = recipes.create(
        alice.id,
        {"title": "Thai Soup", "cuisine": "Thai", "description": "Coconut broth"},
        None,
        [{"name": "Lemongrass"}, {"name": "Tomato"}],
    )
    tomato_soup = recipes.create(
        alice.id,
        {"title": "Tomato Soup", "cuisine": "Italian"},
        None,
        [{"name": "Tomato"}],
    )
    lasagna = recipes.create(
        bob.id,
        {"title": "Lasagna", "cuisine": "Italian", "description": "Layered pasta, not a SOUP"},
        None,
        [{"name": "Tomato"}, {"name": "Basil"}],
    )
    curry = recipes.create(bob.id, {"title": "Green Curry", "cuisine": "Thai"})

    set_created_at(thai_soup, datetime(2024, 1, 10, 8, 0))
    set_created_at(tomato_soup, datetime(2024, 1, 31, 23, 59, 59))
    set_created_at(lasagna, datetime(2024, 2, 1, 0, 0))
    set_created_at(curry, datetime(2024, 3, 15, 12, 0))

    return {
        "thai_soup": thai_soup,
        "tomato_soup": tomato_soup,
        "lasagna": lasagna,
        "curry": curry,
        "tomato_id": dictionary.find_id("Tomato"),
        "basil_id": dictionary.find_id("Basil"),
    }


def _ids(query_engine, **filters):
    return [recipe.id for recipe in query_engine.filter(RecipeFilter(**filters))]


class TestFilter:
    """Tests for QueryFilterEngine.filter()."""

    def test_no_filter_returns_all_newest_first(self, query_engine, catalog):
        assert _ids(query_engine) == [
            catalog["curry"],
            catalog["lasagna"],
            catalog["tomato_soup"],
            catalog["thai_soup"],
        ]

    def test_free_text_and_cuisine_are_conjunctive(self, query_engine, catalog):
        """"soup" + "Thai" returns only "Thai Soup", not "Tomato Soup"."""
        assert _ids(query_engine, free_text="soup", cuisine="Thai") == [catalog["thai_soup"]]

    def test_free_text_is_case_insensitive_over_title_and_description(self, query_engine, catalog):
        assert _ids(query_engine, free_text="SOUP") == [
            catalog["lasagna"],
            catalog["tomato_soup"],
            catalog["thai_soup"],
        ]

    def test_free_text_matches_description_only(self, query_engine, catalog):
        assert _ids(query_engine, free_text="coconut") == [catalog["thai_soup"]]

    def test_free_text_wildcards_are_literal(self, query_engine, catalog):
        assert _ids(query_engine, free_text="%") == []
        assert _ids(query_engine, free_text="_") == []

    def test_cuisine_is_exact(self, query_engine, catalog):
        assert _ids(query_engine, cuisine="Ital") == []
        assert _ids(query_engine, cuisine="Italian") == [catalog["lasagna"], catalog["tomato_soup"]]

    def test_ingredient_containment(self, query_engine, catalog):
        assert _ids(query_engine, ingredient_id=catalog["basil_id"]) == [catalog["lasagna"]]

    def test_cuisine_and_ingredient_intersect(self, query_engine, catalog):
        """Italian + Tomato excludes the Thai recipe that also uses tomato."""
        assert _ids(query_engine, cuisine="Italian", ingredient_id=catalog["tomato_id"]) == [
            catalog["lasagna"],
            catalog["tomato_soup"],
        ]

    def test_date_range_is_inclusive_of_whole_days(self, query_engine, catalog):
        assert _ids(query_engine, date_from=date(2024, 1, 10), date_to=date(2024, 1, 31)) == [
            catalog["tomato_soup"],
            catalog["thai_soup"],
        ]

    def test_open_ended_date_bounds(self, query_engine, catalog):
        assert _ids(query_engine, date_from=date(2024, 2, 1)) == [catalog["curry"], catalog["lasagna"]]
        assert _ids(query_engine, date_to=date(2024, 1, 9)) == []

    def test_user_filter(self, query_engine, catalog, bob):
        assert _ids(query_engine, user_id=bob.id) == [catalog["curry"], catalog["lasagna"]]

    def test_joins_caller_session(self, query_engine, catalog, session_factory):
        session = session_factory()
        try:
            found = query_engine.filter(RecipeFilter(cuisine="Thai"), session=session)
            assert all(recipe in session for recipe in found)
        finally:
            session.close()


class TestDistinctCuisines:
    def test_sorted_without_none(self, query_engine, recipes, catalog, alice):
        recipes.create(alice.id, {"title": "Toast"})

        assert query_engine.distinct_cuisines() == ["Italian", "Thai"]
