from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from modules.pose.types import PoseFrame


class PoseProvider(ABC):
	"""
	Model adapter interface.

	Implementations take an RGB image (H,W,3 uint8) and return one PoseFrame per
	detected subject, at most `max_subjects`. An empty list means nobody was found.
	Calls are blocking; the shared detector runs them in a worker thread.
	"""

	@abstractmethod
	def name(self) -> str: ...

	@abstractmethod
	def detect_rgb(self, rgb, max_subjects: int = 1, t_video: Optional[float] = None) -> List[PoseFrame]: ...

	@abstractmethod
	def close(self) -> None: ...
