"""
Models Package
SQLAlchemy ORM models for the application.
"""

from bizhealth.models.health_score_record import HealthScoreRecord

__all__ = [
    "HealthScoreRecord",
]
