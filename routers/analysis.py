"""Movement analysis routes. Routes: /analyze, /pose/warmup, /health."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from app_state import AppState
from deps import get_state
from modules import __version__
from modules.analysis import analyze_media
from modules.errors import DetectorUnavailableError, MediaLoadError
from modules.media import MediaDescriptor
from schemas.requests import AnalyzePayload
from schemas.responses import AnalyzeResponse, HealthResponse, WarmupResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(payload: AnalyzePayload, state: AppState = Depends(get_state)):
	"""Score one image or video of the given movement."""
	media = MediaDescriptor(url=payload.url, declared_type=payload.mime)
	try:
		result = await analyze_media(media, payload.movement, state.detector, state.cfg)
	except MediaLoadError as e:
		raise HTTPException(status_code=422, detail=f"Media could not be loaded: {e}") from e
	except DetectorUnavailableError as e:
		logger.warning("[Pose] analysis unavailable: %s", e)
		raise HTTPException(status_code=503, detail=f"Pose detector unavailable: {e}") from e
	except Exception as e:
		logger.exception("[Analysis] unexpected failure for %s", payload.url)
		raise HTTPException(status_code=500, detail=f"Analysis failed: {e!r}") from e
	return result.to_payload()


@router.post("/pose/warmup", response_model=WarmupResponse)
async def pose_warmup(state: AppState = Depends(get_state)):
	"""Load the pose model now so the first analysis does not pay for it."""
	try:
		provider = await state.detector.get()
	except DetectorUnavailableError as e:
		raise HTTPException(status_code=503, detail=f"Pose detector unavailable: {e}") from e
	return {"detail": "Pose detector ready.", "backend": provider.name()}


@router.get("/health", response_model=HealthResponse)
async def health(state: AppState = Depends(get_state)):
	return {"ok": True, "version": __version__, "detector_ready": state.detector.ready}
