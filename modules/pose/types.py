from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Union

if TYPE_CHECKING:
	from modules.pose.skeleton import Joint


@dataclass(frozen=True)
class Keypoint:
	"""
	A single 2D keypoint in pixel coordinates.
	"""

	x_px: float
	y_px: float
	score: Optional[float] = None  # confidence/visibility [0..1] when the model reports one
	name: Optional[str] = None


@dataclass(frozen=True)
class PoseFrame:
	"""
	Model-agnostic pose output for one detected subject in a single frame.

	- Coordinates are in pixel space to keep downstream logic consistent.
	- `keypoints` is ordered; entries may be None where the model reported nothing.
	- t_video is the clip-relative time (seconds) of the sampled frame, if known.
	"""

	backend: str
	width: int
	height: int
	t_video: Optional[float] = None
	keypoints: List[Optional[Keypoint]] = field(default_factory=list)

	def get(self, joint: Union["Joint", str, int]) -> Optional[Keypoint]:
		from modules.pose.skeleton import lookup_keypoint

		if not self.keypoints:
			return None
		return lookup_keypoint(self.keypoints, joint)
