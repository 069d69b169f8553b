"""Profile enrichment engine: multi-source public profile aggregation."""

__version__ = "1.0.0"
