"""Pydantic request body models."""
from typing import Optional

from pydantic import BaseModel, Field


class AnalyzePayload(BaseModel):
	"""Request body for POST /analyze. One captured image or video of a single subject."""

	url: str = Field(..., min_length=1, description="Local path, file:// or http(s) URL of the media")
	mime: Optional[str] = Field(None, description="Declared MIME type, e.g. image/jpeg or video/webm")
	movement: str = Field("", description="Movement name, e.g. 'Plank hold', 'Squat', 'Side bend'")
