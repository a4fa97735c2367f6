from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from modules.config import AppConfig, get_config
from modules.errors import MediaLoadError
from modules.frame_sampler import sample_video
from modules.media import MEDIA_IMAGE, MediaDescriptor, classify_media, load_image_rgb
from modules.pose.detector import SharedPoseDetector
from modules.pose.pose_metrics import extract_features, has_required_keypoints
from modules.scoring import ScoreResult, score_from_metrics
from modules.video_backend import VideoMedia, open_video_media

logger = logging.getLogger(__name__)

ImageLoader = Callable[[str, float], np.ndarray]
VideoOpener = Callable[[str, AppConfig], Awaitable[VideoMedia]]

# Fixed results for single images where detection quality is too poor to score.
NO_POSE_SCORE = 4
NO_POSE_FEEDBACK = "Pose not detected"
LOW_CONFIDENCE_SCORE = 4
LOW_CONFIDENCE_FEEDBACK = "Keypoints low-confidence"


@dataclass(frozen=True)
class AnalysisResult:
	score: int
	feedback: str
	frames: int
	coverage: float
	movement: str
	metrics: Mapping[str, float] = field(default_factory=dict)
	notes: Tuple[str, ...] = ()

	def __post_init__(self) -> None:
		# Frozen all the way down: callers get a read-only view of the metrics.
		object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))
		object.__setattr__(self, "notes", tuple(self.notes))

	def to_payload(self) -> Dict[str, Any]:
		return {
			"score": int(self.score),
			"feedback": self.feedback,
			"analysis": {
				"frames": int(self.frames),
				"coverage": float(self.coverage),
				"movement": self.movement,
				"metrics": dict(self.metrics),
				"notes": list(self.notes),
			},
		}


def _result(r: ScoreResult, *, frames: int, coverage: float, movement: str) -> AnalysisResult:
	return AnalysisResult(
		score=r.score,
		feedback=r.feedback,
		frames=frames,
		coverage=round(coverage, 2),
		movement=movement,
		metrics=r.metrics,
		notes=r.notes,
	)


def score_series(
	movement: str,
	hip: Sequence[float],
	knee_left: Sequence[float],
	knee_right: Sequence[float],
	spine: Sequence[float],
	coverage: float,
	*,
	frames: int,
) -> AnalysisResult:
	"""Score feature arrays directly. The reported coverage is rounded; the scored one is not."""
	r = score_from_metrics(movement, hip, knee_left, knee_right, spine, coverage)
	return _result(r, frames=frames, coverage=coverage, movement=movement)


async def analyze_image(
	url: str,
	movement: str,
	detector: SharedPoseDetector,
	cfg: Optional[AppConfig] = None,
	*,
	image_loader: Optional[ImageLoader] = None,
) -> AnalysisResult:
	"""
	Single-frame analysis. MediaLoadError propagates; detection problems come
	back as fixed low-score results instead of errors.
	"""
	cfg = cfg or get_config()
	loader = image_loader or load_image_rgb
	rgb = await asyncio.to_thread(loader, url, cfg.media.fetch_timeout_seconds)
	poses = await detector.detect(rgb, max_subjects=1)
	if not poses:
		logger.info("[Analysis] no subject in image %s", url)
		return AnalysisResult(
			score=NO_POSE_SCORE,
			feedback=NO_POSE_FEEDBACK,
			frames=1,
			coverage=0.0,
			movement=movement,
			notes=("no pose",),
		)
	if not has_required_keypoints(poses[0]):
		logger.info("[Analysis] incomplete keypoints in image %s", url)
		return AnalysisResult(
			score=LOW_CONFIDENCE_SCORE,
			feedback=LOW_CONFIDENCE_FEEDBACK,
			frames=1,
			coverage=0.5,
			movement=movement,
			notes=("low confidence",),
		)
	s = extract_features(poses[0])
	return score_series(
		movement,
		[s.hip_angle],
		[s.knee_angle_left],
		[s.knee_angle_right],
		[s.spine_tilt],
		1.0,
		frames=1,
	)


async def analyze_video(
	url: str,
	movement: str,
	detector: SharedPoseDetector,
	cfg: Optional[AppConfig] = None,
	*,
	video_opener: Optional[VideoOpener] = None,
) -> AnalysisResult:
	"""
	Multi-frame analysis over evenly spaced seeks (or one snapshot for live streams).
	The media handle is owned by this call for its whole duration and closed at the end.
	"""
	cfg = cfg or get_config()
	opener = video_opener or open_video_media
	media = await opener(url, cfg)
	try:
		run = await sample_video(
			media,
			detector,
			frame_count=cfg.sampling.frame_count,
			end_margin=cfg.sampling.end_margin_seconds,
		)
	finally:
		await asyncio.to_thread(media.close)

	hip, knee_l, knee_r, spine = run.series()
	return score_series(movement, hip, knee_l, knee_r, spine, run.coverage, frames=run.requested)


async def analyze_media(
	media: MediaDescriptor,
	movement: str,
	detector: SharedPoseDetector,
	cfg: Optional[AppConfig] = None,
	*,
	image_loader: Optional[ImageLoader] = None,
	video_opener: Optional[VideoOpener] = None,
) -> AnalysisResult:
	"""
	Entry point: classify the media and run the image or video pipeline.
	Unknown types go to the video pipeline.
	"""
	cfg = cfg or get_config()
	movement = movement or ""
	kind = classify_media(media, cfg.media.image_extensions)
	logger.debug("[Analysis] %s -> %s pipeline (movement=%r)", media.url, kind, movement)
	try:
		if kind == MEDIA_IMAGE:
			result = await analyze_image(media.url, movement, detector, cfg, image_loader=image_loader)
		else:
			result = await analyze_video(media.url, movement, detector, cfg, video_opener=video_opener)
	except MediaLoadError as e:
		logger.warning("[Analysis] media load failed: %s", e)
		raise
	logger.info(
		"[Analysis] %s movement=%r score=%d coverage=%.2f frames=%d",
		kind,
		movement,
		result.score,
		result.coverage,
		result.frames,
	)
	return result
