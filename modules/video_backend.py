from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from modules.config import AppConfig, get_config


class VideoMedia(ABC):
	"""
	One opened video with a single playback position.

	The position is shared state: callers must finish one seek() before issuing
	the next and must not use the same handle from two analyses at once.
	"""

	@property
	@abstractmethod
	def duration(self) -> float:
		"""Total length in seconds. Non-finite or <= 0 for live streams."""
		...

	@abstractmethod
	async def seek(self, t_sec: float) -> np.ndarray:
		"""
		Move to t_sec and return the RGB frame shown there once the position has updated.
		Raises FrameSeekError if the seek does not complete.
		"""
		...

	@abstractmethod
	async def snapshot(self) -> np.ndarray:
		"""Play forward and return the next available RGB frame. Raises FrameSeekError if none."""
		...

	@abstractmethod
	def close(self) -> None: ...


async def open_video_media(url: str, cfg: Optional[AppConfig] = None) -> VideoMedia:
	"""
	Open a video for sampling. Raises MediaLoadError when it cannot be opened.
	"""
	cfg = cfg or get_config()
	backend = (cfg.media.video_backend or "opencv").strip().lower()
	if backend in ("opencv", "cv2"):
		from modules.video_backends.opencv_backend import OpenCvVideoMedia

		return await OpenCvVideoMedia.open(url, seek_timeout_s=cfg.sampling.seek_timeout_seconds)
	raise ValueError(f"Unknown video backend: {backend!r}")
