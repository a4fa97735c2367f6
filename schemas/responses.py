"""Pydantic response models for API docs."""
from typing import Dict, List

from pydantic import BaseModel, Field


class AnalysisDetail(BaseModel):
	frames: int = Field(..., description="Frames requested (24 for recorded video, 1 for images and live streams)")
	coverage: float = Field(..., ge=0.0, le=1.0, description="Fraction of requested frames that were usable")
	movement: str
	metrics: Dict[str, float] = Field(default_factory=dict)
	notes: List[str] = Field(default_factory=list)


class AnalyzeResponse(BaseModel):
	"""Response from POST /analyze."""

	score: int = Field(..., ge=1, le=10)
	feedback: str
	analysis: AnalysisDetail


class WarmupResponse(BaseModel):
	"""Response from POST /pose/warmup."""

	detail: str
	backend: str


class HealthResponse(BaseModel):
	ok: bool
	version: str
	detector_ready: bool
