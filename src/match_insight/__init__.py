"""Match Insight: aggregate fixture data, request a structured prediction, persist it."""

__version__ = "0.1.0"
