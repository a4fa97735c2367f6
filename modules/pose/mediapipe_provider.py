from __future__ import annotations

import logging
from typing import List, Optional

from modules.pose.base import PoseProvider
from modules.pose.skeleton import Joint
from modules.pose.types import Keypoint, PoseFrame

logger = logging.getLogger(__name__)


class MediaPipePoseProvider(PoseProvider):
	"""
	MediaPipe Pose provider that outputs the canonical COCO-17 keypoint set.

	Notes:
	- MediaPipe uses normalized coordinates; we convert to pixel space.
	- `visibility` is used as score (best-effort).
	- MediaPipe Pose tracks a single person, so max_subjects > 1 still yields at most one frame.
	- Sampled video frames are not consecutive, so the model runs in static-image mode.
	"""

	def __init__(
		self,
		model_complexity: int = 1,
		min_detection_confidence: float = 0.5,
	) -> None:
		try:
			import mediapipe as mp  # type: ignore
		except ImportError as e:
			raise RuntimeError(
				"MediaPipe is not installed. Install pose deps with: pip install -e .[pose]"
			) from e

		self._mp = mp
		self._pose = mp.solutions.pose.Pose(
			static_image_mode=True,
			model_complexity=int(model_complexity),
			enable_segmentation=False,
			smooth_landmarks=False,
			min_detection_confidence=float(min_detection_confidence),
		)
		logger.info("[Pose] MediaPipe Pose ready (complexity=%s)", model_complexity)

	def name(self) -> str:
		return "mediapipe_pose"

	def detect_rgb(self, rgb, max_subjects: int = 1, t_video: Optional[float] = None) -> List[PoseFrame]:
		# rgb: HxWx3
		h, w = int(rgb.shape[0]), int(rgb.shape[1])
		if max_subjects < 1 or not h or not w:
			return []
		res = self._pose.process(rgb)
		if not res or not getattr(res, "pose_landmarks", None):
			return []

		lm = res.pose_landmarks.landmark
		# Map COCO names using MediaPipe PoseLandmark indices
		PL = self._mp.solutions.pose.PoseLandmark
		mapping = {
			Joint.NOSE: PL.NOSE,
			Joint.LEFT_EYE: PL.LEFT_EYE,
			Joint.RIGHT_EYE: PL.RIGHT_EYE,
			Joint.LEFT_EAR: PL.LEFT_EAR,
			Joint.RIGHT_EAR: PL.RIGHT_EAR,
			Joint.LEFT_SHOULDER: PL.LEFT_SHOULDER,
			Joint.RIGHT_SHOULDER: PL.RIGHT_SHOULDER,
			Joint.LEFT_ELBOW: PL.LEFT_ELBOW,
			Joint.RIGHT_ELBOW: PL.RIGHT_ELBOW,
			Joint.LEFT_WRIST: PL.LEFT_WRIST,
			Joint.RIGHT_WRIST: PL.RIGHT_WRIST,
			Joint.LEFT_HIP: PL.LEFT_HIP,
			Joint.RIGHT_HIP: PL.RIGHT_HIP,
			Joint.LEFT_KNEE: PL.LEFT_KNEE,
			Joint.RIGHT_KNEE: PL.RIGHT_KNEE,
			Joint.LEFT_ANKLE: PL.LEFT_ANKLE,
			Joint.RIGHT_ANKLE: PL.RIGHT_ANKLE,
		}
		keypoints: List[Optional[Keypoint]] = [None] * len(Joint)
		for joint, idx in mapping.items():
			if int(idx) >= len(lm):
				continue
			p = lm[int(idx)]
			keypoints[joint.value] = Keypoint(
				name=joint.key,
				x_px=float(p.x) * float(w),
				y_px=float(p.y) * float(h),
				score=float(getattr(p, "visibility", 0.0) or 0.0),
			)
		return [PoseFrame(backend=self.name(), width=w, height=h, t_video=t_video, keypoints=keypoints)]

	def close(self) -> None:
		if self._pose:
			self._pose.close()
			self._pose = None


def build_pose_provider(backend: str = "mediapipe", **kwargs) -> PoseProvider:
	backend = (backend or "mediapipe").strip().lower()
	if backend in ("mediapipe", "mediapipe_pose", "mp"):
		return MediaPipePoseProvider(**kwargs)
	raise RuntimeError(f"Unknown pose backend: {backend!r}")
