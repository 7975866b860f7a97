"""
Health Scoring Exceptions
Custom exceptions for health scoring configuration and lookups.
"""

from typing import Optional


class ScoringConfigError(ValueError):
    """Exception for an invalid category/metric weighting configuration."""

    def __init__(self, message: str, category: Optional[str] = None):
        self.message = message
        self.category = category
        super().__init__(self.message)


class HealthScoreNotFoundError(LookupError):
    """Exception for an entity with no persisted health score."""

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        self.message = f"No health score found for entity {entity_id}"
        super().__init__(self.message)
