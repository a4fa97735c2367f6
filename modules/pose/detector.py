from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, List, Optional

from modules.config import PoseConfig
from modules.errors import DetectorUnavailableError
from modules.pose.base import PoseProvider
from modules.pose.types import PoseFrame

logger = logging.getLogger(__name__)


class SharedPoseDetector:
	"""
	Lazily-built pose provider shared by every analysis in the process.

	The first get() starts construction in a worker thread and stores the task;
	every other caller, concurrent or later, awaits that same task, so the model
	is loaded at most once. A failed build is reported as DetectorUnavailableError
	to everyone who awaited it and then forgotten, so the next get() starts a fresh attempt.

	Providers are not assumed to be thread-safe: inference calls are serialized.
	"""

	def __init__(self, factory: Callable[[], PoseProvider]) -> None:
		self._factory = factory
		self._provider: Optional[PoseProvider] = None
		self._task: Optional[asyncio.Task] = None
		self._infer_lock = threading.Lock()
		self.builds = 0

	@classmethod
	def from_config(cls, cfg: PoseConfig) -> "SharedPoseDetector":
		from modules.pose.mediapipe_provider import build_pose_provider

		return cls(
			lambda: build_pose_provider(
				cfg.backend,
				model_complexity=cfg.model_complexity,
				min_detection_confidence=cfg.min_detection_confidence,
			)
		)

	@property
	def ready(self) -> bool:
		return self._provider is not None

	async def _build(self) -> PoseProvider:
		self.builds += 1
		try:
			provider = await asyncio.to_thread(self._factory)
		except Exception as e:
			logger.warning("[Pose] detector initialization failed", exc_info=True)
			self._task = None
			raise DetectorUnavailableError(str(e) or type(e).__name__) from e
		self._provider = provider
		logger.info("[Pose] detector ready: %s", provider.name())
		return provider

	async def get(self) -> PoseProvider:
		if self._provider is not None:
			return self._provider
		if self._task is None:
			self._task = asyncio.ensure_future(self._build())
		# shield: a cancelled caller must not cancel the build other callers share.
		return await asyncio.shield(self._task)

	async def warm_up(self) -> None:
		await self.get()

	def _detect_blocking(self, provider: PoseProvider, rgb, max_subjects: int, t_video: Optional[float]) -> List[PoseFrame]:
		with self._infer_lock:
			return provider.detect_rgb(rgb, max_subjects=max_subjects, t_video=t_video)

	async def detect(self, rgb, max_subjects: int = 1, t_video: Optional[float] = None) -> List[PoseFrame]:
		provider = await self.get()
		return await asyncio.to_thread(self._detect_blocking, provider, rgb, max_subjects, t_video)

	def close(self) -> None:
		provider, self._provider = self._provider, None
		self._task = None
		if provider is not None:
			provider.close()
