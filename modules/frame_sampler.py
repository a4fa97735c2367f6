from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List

from modules.errors import FrameSeekError
from modules.pose.detector import SharedPoseDetector
from modules.pose.pose_metrics import FeatureSample, extract_features
from modules.video_backend import VideoMedia

logger = logging.getLogger(__name__)

DEFAULT_FRAME_COUNT = 24
DEFAULT_END_MARGIN_S = 0.05


@dataclass
class SamplingRun:
	"""
	Outcome of sampling one video. `samples` stay in ascending timestamp order.
	"""

	requested: int
	live: bool = False
	timestamps: List[float] = field(default_factory=list)
	samples: List[FeatureSample] = field(default_factory=list)
	seek_failures: int = 0
	unusable_frames: int = 0

	@property
	def coverage(self) -> float:
		if not self.samples or self.requested <= 0:
			return 0.0
		return min(1.0, len(self.samples) / float(self.requested))

	def series(self) -> tuple[list[float], list[float], list[float], list[float]]:
		"""Parallel (hip, knee_left, knee_right, spine) arrays."""
		return (
			[s.hip_angle for s in self.samples],
			[s.knee_angle_left for s in self.samples],
			[s.knee_angle_right for s in self.samples],
			[s.spine_tilt for s in self.samples],
		)


def sample_timestamps(duration: float, n: int = DEFAULT_FRAME_COUNT, end_margin: float = DEFAULT_END_MARGIN_S) -> List[float]:
	"""
	n evenly spaced seek targets spanning [0, duration].

	t_i = duration * i / (n - 1), clamped into [0, max(0, duration - end_margin)]
	so the last seek stays short of end-of-stream. Non-finite values become 0.
	"""
	denom = max(1, int(n) - 1)
	hi = max(0.0, float(duration) - float(end_margin))
	out: List[float] = []
	for i in range(int(n)):
		t = float(duration) * i / denom
		t = min(max(0.0, t), hi)
		if not math.isfinite(t):
			t = 0.0
		out.append(t)
	return out


async def _sample_live(media: VideoMedia, detector: SharedPoseDetector) -> SamplingRun:
	run = SamplingRun(requested=1, live=True)
	try:
		rgb = await media.snapshot()
	except FrameSeekError as e:
		# Same policy as a failed seek: no sample, coverage drops to 0.
		logger.warning("[Sampler] live snapshot failed: %s", e)
		run.seek_failures += 1
		return run
	poses = await detector.detect(rgb, max_subjects=1)
	sample = extract_features(poses[0] if poses else None)
	if sample is None:
		run.unusable_frames += 1
	else:
		run.samples.append(sample)
	return run


async def sample_video(
	media: VideoMedia,
	detector: SharedPoseDetector,
	*,
	frame_count: int = DEFAULT_FRAME_COUNT,
	end_margin: float = DEFAULT_END_MARGIN_S,
) -> SamplingRun:
	"""
	Seek through the video and collect one FeatureSample per usable frame.

	Seeks are strictly sequential: each one completes (or fails) before the
	detection for that instant, and before the next seek is issued. Skip policy:
	a failed seek, a frame with no subject or a subject missing any required
	joint contributes nothing and sampling moves on to the next timestamp.
	Zero-length or unbounded media (live streams) get one snapshot instead.
	"""
	duration = media.duration
	if not math.isfinite(duration) or duration <= 0.0:
		return await _sample_live(media, detector)

	run = SamplingRun(requested=int(frame_count), timestamps=sample_timestamps(duration, frame_count, end_margin))
	for i, t in enumerate(run.timestamps):
		try:
			rgb = await media.seek(t)
		except FrameSeekError as e:
			logger.warning("[Sampler] frame %d/%d skipped: %s", i + 1, run.requested, e)
			run.seek_failures += 1
			continue
		poses = await detector.detect(rgb, max_subjects=1, t_video=t)
		sample = extract_features(poses[0] if poses else None)
		if sample is None:
			logger.debug("[Sampler] frame %d at %.3fs has no usable subject", i + 1, t)
			run.unusable_frames += 1
			continue
		run.samples.append(sample)

	logger.debug(
		"[Sampler] %d/%d usable frames (%d seek failures) over %.2fs",
		len(run.samples),
		run.requested,
		run.seek_failures,
		duration,
	)
	return run
