"""Utilities package for the recipe planner."""
