"""
Command line entry point for the Recipe Planner data layer.

No UI - wires configuration, logging and the database together and runs
the read-only search and report flows, printing JSON.

Usage Examples:
    # Create the database and tables
    recipe-planner init-db

    # Search recipes by text, cuisine and ingredient
    recipe-planner search --q soup --cuisine Thai

    # Report over a date range
    recipe-planner report --from 2024-01-01 --to 2024-03-31

    # List cuisines in use
    recipe-planner cuisines
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from recipe_planner.services.database import initialize_app_database
from recipe_planner.services.exceptions import ServiceError, ValidationError
from recipe_planner.services.recipe_query_service import QueryFilterEngine, RecipeFilter
from recipe_planner.services.report_service import AggregationEngine
from recipe_planner.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _filter_from_args(args: argparse.Namespace) -> RecipeFilter:
    return RecipeFilter.from_params(
        {
            "date_from": getattr(args, "date_from", None),
            "date_to": getattr(args, "date_to", None),
            "cuisine": args.cuisine,
            "free_text": getattr(args, "free_text", None),
            "ingredient_id": args.ingredient_id,
            "user_id": args.user_id,
        }
    )


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


def search_cmd(session_factory, args: argparse.Namespace) -> int:
    """Print matching recipes with ingredient counts and costs."""
    rows = AggregationEngine(session_factory).search(_filter_from_args(args))
    _print_json([vars(row) for row in rows])
    return 0


def report_cmd(session_factory, args: argparse.Namespace) -> int:
    """Print report rows and averages."""
    report = AggregationEngine(session_factory).report(_filter_from_args(args))
    _print_json(report.to_dict())
    return 0


def cuisines_cmd(session_factory, args: argparse.Namespace) -> int:
    """Print the cuisines in use."""
    _print_json(QueryFilterEngine(session_factory).distinct_cuisines())
    return 0


def _add_common_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--cuisine", help="Exact cuisine")
    parser.add_argument("--ingredient-id", dest="ingredient_id", help="Ingredient the recipe must use")
    parser.add_argument("--user-id", dest="user_id", help="Restrict to one owner")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recipe-planner",
        description="Recipe Planner database utility",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--database-url", dest="database_url", help="Override the configured database URL")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (default from config)")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init-db", help="Create the database and tables")

    search_parser = subparsers.add_parser("search", help="Search recipes")
    search_parser.add_argument("--q", dest="free_text", help="Text in title or description")
    _add_common_filters(search_parser)

    report_parser = subparsers.add_parser("report", help="Recipe report with averages")
    report_parser.add_argument("--from", dest="date_from", help="First creation date (YYYY-MM-DD)")
    report_parser.add_argument("--to", dest="date_to", help="Last creation date (YYYY-MM-DD)")
    _add_common_filters(report_parser)

    subparsers.add_parser("cuisines", help="List cuisines in use")

    return parser


COMMANDS = {
    "search": search_cmd,
    "report": report_cmd,
    "cuisines": cuisines_cmd,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    configure_logging(args.log_level)

    try:
        session_factory = initialize_app_database(args.database_url)
        if args.command == "init-db":
            print("Database initialized.")
            return 0
        return COMMANDS[args.command](session_factory, args)
    except ValidationError as e:
        for error in e.errors:
            print(f"ERROR: {error}")
        return 1
    except ServiceError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
