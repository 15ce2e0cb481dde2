from __future__ import annotations


class ScoringConfigError(ValueError):
    """Challenge configuration is missing or invalid (e.g. unset scoring weights)."""
