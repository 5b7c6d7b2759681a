"""Recipe Planner - transactional recipe and ingredient catalog."""

__version__ = "0.1.0"
