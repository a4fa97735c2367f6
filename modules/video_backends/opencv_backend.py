from __future__ import annotations

import asyncio
import logging
import math
import threading
from typing import Optional

import cv2
import numpy as np

from modules.errors import FrameSeekError, MediaLoadError
from modules.media import is_remote, local_path
from modules.video_backend import VideoMedia

logger = logging.getLogger(__name__)


def _capture_source(url: str) -> str:
	# VideoCapture understands http(s)/rtsp itself; file:// needs to become a path.
	if is_remote(url) or ("://" in url and not url.lower().startswith("file://")):
		return url
	return str(local_path(url))


class OpenCvVideoMedia(VideoMedia):
	"""
	VideoCapture-backed media handle.

	All capture calls run in a worker thread behind one lock. A seek that times out
	keeps its thread until VideoCapture returns, so the lock is what stops the next
	seek from racing it on the same capture.
	"""

	def __init__(self, cap: "cv2.VideoCapture", source: str, seek_timeout_s: float = 5.0) -> None:
		self._cap: Optional[cv2.VideoCapture] = cap
		self._source = source
		self._seek_timeout_s = float(seek_timeout_s)
		self._io_lock = threading.Lock()
		fps = float(cap.get(cv2.CAP_PROP_FPS) or 0.0)
		frames = float(cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0.0)
		# Live streams report no frame count (0 or negative); treat as zero duration.
		self._duration = frames / fps if fps > 0.0 and math.isfinite(fps) else 0.0
		self.fps = fps
		self.width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
		self.height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)

	@classmethod
	async def open(cls, url: str, seek_timeout_s: float = 5.0) -> "OpenCvVideoMedia":
		source = _capture_source(url)

		def _open() -> cv2.VideoCapture:
			cap = cv2.VideoCapture(source)
			if not cap.isOpened():
				cap.release()
				raise MediaLoadError(f"video load error: {url}")
			return cap

		cap = await asyncio.to_thread(_open)
		media = cls(cap, source, seek_timeout_s=seek_timeout_s)
		logger.debug(
			"[Media] opened %s (%.2fs, %.2f fps, %dx%d)",
			url,
			media.duration,
			media.fps,
			media.width,
			media.height,
		)
		return media

	@property
	def duration(self) -> float:
		return self._duration

	def _read_blocking(self, t_sec: Optional[float]) -> np.ndarray:
		with self._io_lock:
			if self._cap is None:
				raise FrameSeekError("video is closed")
			if t_sec is not None and not self._cap.set(cv2.CAP_PROP_POS_MSEC, float(t_sec) * 1000.0):
				raise FrameSeekError(f"seek to {t_sec:.3f}s rejected")
			ok, frame = self._cap.read()
			if not ok or frame is None:
				where = f"{t_sec:.3f}s" if t_sec is not None else "current position"
				raise FrameSeekError(f"no frame at {where}")
			return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

	async def seek(self, t_sec: float) -> np.ndarray:
		try:
			return await asyncio.wait_for(asyncio.to_thread(self._read_blocking, t_sec), timeout=self._seek_timeout_s)
		except asyncio.TimeoutError as e:
			raise FrameSeekError(f"seek to {t_sec:.3f}s timed out") from e

	async def snapshot(self) -> np.ndarray:
		try:
			return await asyncio.wait_for(asyncio.to_thread(self._read_blocking, None), timeout=self._seek_timeout_s)
		except asyncio.TimeoutError as e:
			raise FrameSeekError("live frame read timed out") from e

	def close(self) -> None:
		with self._io_lock:
			if self._cap is not None:
				self._cap.release()
				self._cap = None
