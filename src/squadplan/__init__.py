"""Squad availability planning: aggregate who is free and pick the best session."""

__version__ = "0.1.0"
