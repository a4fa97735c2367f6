"""Pydantic request/response models for API validation and docs."""
from schemas.requests import AnalyzePayload
from schemas.responses import AnalysisDetail, AnalyzeResponse, HealthResponse, WarmupResponse

__all__ = [
	"AnalyzePayload",
	"AnalyzeResponse",
	"AnalysisDetail",
	"HealthResponse",
	"WarmupResponse",
]
