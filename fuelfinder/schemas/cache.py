from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CleanupResponse(BaseModel):
    deleted_count: int = Field(description="Rows removed because expires_at had passed")
    timestamp: datetime


class CacheStatisticsResponse(BaseModel):
    total_entries: int
    expired_entries: int = Field(description="Expired rows still present (not deleted)")
    oldest_entry: datetime | None = None
    newest_entry: datetime | None = None
    last_updated: datetime | None = None
    timestamp: datetime
