"""Content-addressed file tagging engine."""

__version__ = "0.1.0"
