"""Fakes for the pose provider and video media used across the test suite."""
from __future__ import annotations

import asyncio
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np

from modules.errors import FrameSeekError
from modules.pose.base import PoseProvider
from modules.pose.detector import SharedPoseDetector
from modules.pose.skeleton import Joint
from modules.pose.types import Keypoint, PoseFrame
from modules.video_backend import VideoMedia

# Upright figure: shoulders above hips above knees above ankles, 20px apart left/right.
STANDING: Dict[Joint, Tuple[float, float]] = {
	Joint.LEFT_SHOULDER: (90.0, 100.0),
	Joint.RIGHT_SHOULDER: (110.0, 100.0),
	Joint.LEFT_HIP: (90.0, 200.0),
	Joint.RIGHT_HIP: (110.0, 200.0),
	Joint.LEFT_KNEE: (90.0, 300.0),
	Joint.RIGHT_KNEE: (110.0, 300.0),
	Joint.LEFT_ANKLE: (90.0, 400.0),
	Joint.RIGHT_ANKLE: (110.0, 400.0),
}


def make_frame(
	points: Dict[Joint, Tuple[float, float]],
	*,
	named: bool = True,
	drop: Iterable[Joint] = (),
	t_video: Optional[float] = None,
) -> PoseFrame:
	dropped = set(drop)
	kps: List[Optional[Keypoint]] = [None] * len(Joint)
	for joint, (x, y) in points.items():
		if joint in dropped:
			continue
		kps[joint.value] = Keypoint(x_px=x, y_px=y, score=0.9, name=joint.key if named else None)
	return PoseFrame(backend="fake", width=640, height=480, t_video=t_video, keypoints=kps)


class FakeProvider(PoseProvider):
	"""Returns `respond(rgb, t_video)` for every call and records what it saw."""

	def __init__(self, respond: Optional[Callable[[object, Optional[float]], List[PoseFrame]]] = None) -> None:
		self._respond = respond or (lambda _rgb, _t: [make_frame(STANDING)])
		self.calls: List[Optional[float]] = []
		self.closed = False

	def name(self) -> str:
		return "fake"

	def detect_rgb(self, rgb, max_subjects: int = 1, t_video: Optional[float] = None) -> List[PoseFrame]:
		self.calls.append(t_video)
		return list(self._respond(rgb, t_video))[:max_subjects]

	def close(self) -> None:
		self.closed = True


def fake_detector(provider: Optional[FakeProvider] = None) -> SharedPoseDetector:
	p = provider or FakeProvider()
	return SharedPoseDetector(lambda: p)


class FakeVideo(VideoMedia):
	"""
	In-memory video. The "frame" handed to the detector is the seek target itself,
	so a FakeProvider can decide per timestamp what it detects.
	"""

	def __init__(self, duration: float, fail_seeks: Iterable[int] = (), snapshot_ok: bool = True) -> None:
		self._duration = duration
		self._fail = set(fail_seeks)
		self._snapshot_ok = snapshot_ok
		self.seeks: List[float] = []
		self.in_flight = 0
		self.max_in_flight = 0
		self.closed = False

	@property
	def duration(self) -> float:
		return self._duration

	async def seek(self, t_sec: float):
		self.in_flight += 1
		self.max_in_flight = max(self.max_in_flight, self.in_flight)
		try:
			idx = len(self.seeks)
			self.seeks.append(t_sec)
			await asyncio.sleep(0)
			if idx in self._fail:
				raise FrameSeekError(f"seek {idx} failed")
			return np.full((2, 2, 3), idx, dtype=np.uint8)
		finally:
			self.in_flight -= 1

	async def snapshot(self):
		if not self._snapshot_ok:
			raise FrameSeekError("no live frame")
		return np.zeros((2, 2, 3), dtype=np.uint8)

	def close(self) -> None:
		self.closed = True
