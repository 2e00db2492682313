# Import every model so Alembic and create_all see the full metadata
# fuelfinder/models/__init__.py
from .api_usage import ApiUsage
from .base import Base
from .distance import DistanceRecord

__all__ = [
    "Base",
    "ApiUsage",
    "DistanceRecord",
]
