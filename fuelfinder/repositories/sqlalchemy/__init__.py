"""SQLAlchemy implementations of repository interfaces."""

from .distance import SqlAlchemyDistanceRepository, translate_store_errors

__all__ = [
    "SqlAlchemyDistanceRepository",
    "translate_store_errors",
]
