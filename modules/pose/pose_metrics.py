from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from modules.pose.skeleton import REQUIRED_JOINTS, Joint
from modules.pose.types import Keypoint, PoseFrame

Point = Tuple[float, float]


@dataclass(frozen=True)
class FeatureSample:
	"""
	Geometric measurements derived from one usable frame. All values in degrees.
	"""

	hip_angle: float
	knee_angle_left: float
	knee_angle_right: float
	spine_tilt: float  # 0 = hip->shoulder midline perfectly vertical


def _xy(p: Keypoint | Point) -> Point:
	if isinstance(p, Keypoint):
		return float(p.x_px), float(p.y_px)
	return float(p[0]), float(p[1])


def midpoint(a: Keypoint | Point, b: Keypoint | Point) -> Point:
	ax, ay = _xy(a)
	bx, by = _xy(b)
	return (ax + bx) / 2.0, (ay + by) / 2.0


def angle(a: Keypoint | Point, b: Keypoint | Point, c: Keypoint | Point) -> float:
	"""
	Interior angle at vertex b between rays b->a and b->c, in degrees [0, 180].

	A zero-length ray leaves the dot product at 0 with denominator 1, i.e. 90 degrees.
	"""
	ax, ay = _xy(a)
	bx, by = _xy(b)
	cx, cy = _xy(c)
	abx, aby = ax - bx, ay - by
	cbx, cby = cx - bx, cy - by
	dot = abx * cbx + aby * cby
	denom = math.hypot(abx, aby) * math.hypot(cbx, cby)
	cos = dot / (denom or 1.0)
	cos = min(1.0, max(-1.0, cos))
	return math.degrees(math.acos(cos))


def line_angle(p1: Keypoint | Point, p2: Keypoint | Point) -> float:
	"""Direction of the line p1->p2 in image coordinates, degrees in (-180, 180]."""
	x1, y1 = _xy(p1)
	x2, y2 = _xy(p2)
	return math.degrees(math.atan2(y2 - y1, x2 - x1))


def has_required_keypoints(frame: Optional[PoseFrame]) -> bool:
	if frame is None:
		return False
	return all(frame.get(j) is not None for j in REQUIRED_JOINTS)


def extract_features(frame: Optional[PoseFrame]) -> Optional[FeatureSample]:
	"""
	Turn one subject's keypoints into a FeatureSample.

	Returns None when any of the eight required joints is missing; partial frames
	are dropped whole, never filled in. Keypoint confidence is not consulted.
	"""
	if not has_required_keypoints(frame):
		return None
	ls = frame.get(Joint.LEFT_SHOULDER)
	rs = frame.get(Joint.RIGHT_SHOULDER)
	lh = frame.get(Joint.LEFT_HIP)
	rh = frame.get(Joint.RIGHT_HIP)
	lk = frame.get(Joint.LEFT_KNEE)
	rk = frame.get(Joint.RIGHT_KNEE)
	la = frame.get(Joint.LEFT_ANKLE)
	ra = frame.get(Joint.RIGHT_ANKLE)

	mid_s = midpoint(ls, rs)
	mid_h = midpoint(lh, rh)
	mid_a = midpoint(la, ra)

	return FeatureSample(
		hip_angle=angle(mid_s, mid_h, mid_a),
		knee_angle_left=angle(lh, lk, la),
		knee_angle_right=angle(rh, rk, ra),
		spine_tilt=abs(90.0 - abs(line_angle(mid_h, mid_s))),
	)
