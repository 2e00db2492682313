# fuelfinder/schemas/common.py
from datetime import datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    detail: str = Field(description="Error message")

    model_config = {"json_schema_extra": {"examples": [{"detail": "Not Found"}]}}


class OkResponse(BaseModel):
    ok: bool = Field(description="Always true")

    model_config = {"json_schema_extra": {"examples": [{"ok": True}]}}


class VersionResponse(BaseModel):
    version: str
    python_version: str
    uptime_seconds: int = Field(description="Whole seconds since the app was created")
    environment: str
    timestamp: datetime = Field(description="Naive UTC")
