"""Wildlife rescue intake triage routing."""

__version__ = "0.1.0"
