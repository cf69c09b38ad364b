from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class EnhanceRequest(BaseModel):
    """Body of POST /api/enhance.

    prompt is typed loosely so that a missing or non-string prompt reaches
    the validation layer and gets its message, not a framework 422.
    """
    model_config = ConfigDict(extra="ignore")

    prompt: Optional[Any] = Field(None, description="Raw prompt text to enhance")


class EnhanceResponse(BaseModel):
    success: bool = True
    enhanced_prompt: str
    original_prompt: str
    timestamp: str = Field(..., description="ISO 8601 UTC time the enhancement completed")


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: str
