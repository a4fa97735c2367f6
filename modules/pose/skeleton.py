from __future__ import annotations

from enum import IntEnum
from typing import Optional, Sequence, Tuple, Union

from modules.pose.types import Keypoint


class Joint(IntEnum):
	"""COCO-17 landmark identities; the value is the canonical positional index."""

	NOSE = 0
	LEFT_EYE = 1
	RIGHT_EYE = 2
	LEFT_EAR = 3
	RIGHT_EAR = 4
	LEFT_SHOULDER = 5
	RIGHT_SHOULDER = 6
	LEFT_ELBOW = 7
	RIGHT_ELBOW = 8
	LEFT_WRIST = 9
	RIGHT_WRIST = 10
	LEFT_HIP = 11
	RIGHT_HIP = 12
	LEFT_KNEE = 13
	RIGHT_KNEE = 14
	LEFT_ANKLE = 15
	RIGHT_ANKLE = 16

	@property
	def key(self) -> str:
		return self.name.lower()


# Joints the feature extractor needs. A frame missing any of them is unusable.
REQUIRED_JOINTS: Tuple[Joint, ...] = (
	Joint.LEFT_SHOULDER,
	Joint.RIGHT_SHOULDER,
	Joint.LEFT_HIP,
	Joint.RIGHT_HIP,
	Joint.LEFT_KNEE,
	Joint.RIGHT_KNEE,
	Joint.LEFT_ANKLE,
	Joint.RIGHT_ANKLE,
)


def as_joint(joint: Union[Joint, str, int]) -> Joint:
	if isinstance(joint, Joint):
		return joint
	if isinstance(joint, int):
		return Joint(joint)
	return Joint[str(joint).strip().upper()]


def lookup_keypoint(keypoints: Sequence[Optional[Keypoint]], joint: Union[Joint, str, int]) -> Optional[Keypoint]:
	"""
	Resolve a joint by name first, then by its canonical index.

	Providers that label their keypoints are matched by name regardless of order;
	unlabelled ordered outputs fall back to the COCO-17 position.
	"""
	j = as_joint(joint)
	for kp in keypoints:
		if kp is not None and kp.name == j.key:
			return kp
	if j.value < len(keypoints):
		return keypoints[j.value]
	return None
