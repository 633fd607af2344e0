"""Generate best-practice skill documents from workspace analysis."""

__version__ = "0.1.0"
