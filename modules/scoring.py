from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

MOVEMENT_PLANK = "plank"
MOVEMENT_SQUAT = "squat"
MOVEMENT_SIDE_BEND = "side_bend"
MOVEMENT_GENERIC = "generic"

_MOVEMENT_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
	(MOVEMENT_PLANK, re.compile(r"plank", re.IGNORECASE)),
	(MOVEMENT_SQUAT, re.compile(r"squat", re.IGNORECASE)),
	(MOVEMENT_SIDE_BEND, re.compile(r"side\s*bend", re.IGNORECASE)),
)

SCORE_MIN = 1
SCORE_MAX = 10


@dataclass(frozen=True)
class ScoreResult:
	score: int
	feedback: str
	metrics: Dict[str, float] = field(default_factory=dict)
	notes: Tuple[str, ...] = ()


def mean(values: Sequence[float]) -> float:
	return sum(values) / len(values) if values else 0.0


def pstdev(values: Sequence[float]) -> float:
	"""Population standard deviation; 0 for empty input."""
	if not values:
		return 0.0
	m = mean(values)
	return math.sqrt(mean([(v - m) ** 2 for v in values]))


def _round_half_up(x: float) -> int:
	# round() is banker's rounding; scores round .5 upwards.
	return int(math.floor(x + 0.5))


def resolve_movement(movement: str) -> str:
	"""Map a free-text movement name onto a scoring branch (first match wins)."""
	for key, pattern in _MOVEMENT_PATTERNS:
		if pattern.search(movement or ""):
			return key
	return MOVEMENT_GENERIC


def feedback_for(score: int, notes: Sequence[str]) -> str:
	if notes:
		return "; ".join(notes)
	if score >= 8:
		return "Good form"
	if score >= 5:
		return "Needs improvement"
	return "Retake suggested"


def _score_plank(hip, spine, coverage, metrics, notes) -> float:
	hip_mean = mean(hip)
	hip_std = pstdev(hip)
	tilt = mean(spine)
	metrics["hip_mean"] = round(hip_mean, 1)
	metrics["hip_std"] = round(hip_std, 2)
	metrics["spine_tilt"] = round(tilt, 1)
	s1 = max(0.0, 10.0 - abs(180.0 - hip_mean) / 4.0)  # straight line shoulder-hip-ankle
	s2 = max(0.0, 10.0 - hip_std * 10.0)  # steadiness
	s3 = coverage * 10.0
	if hip_mean < 170.0:
		notes.append("Hips low")
	if hip_mean > 190.0:
		notes.append("Hips high")
	if hip_std > 1.5:
		notes.append("Hold steady")
	return s1 * 0.5 + s2 * 0.3 + s3 * 0.2


def _score_squat(knee_l, knee_r, spine, coverage, metrics, notes) -> float:
	min_knee = ((min(knee_l) if knee_l else 180.0) + (min(knee_r) if knee_r else 180.0)) / 2.0
	torso = mean(spine)
	metrics["min_knee"] = round(min_knee, 1)
	metrics["torso_tilt"] = round(torso, 1)
	depth = max(0.0, 10.0 - abs(95.0 - min_knee) / 3.0)
	# Both sides pooled into one spread; mixes left/right asymmetry with wobble over time.
	control = max(0.0, 10.0 - pstdev(list(knee_l) + list(knee_r)))
	s3 = max(0.0, 10.0 - torso / 2.0)
	s4 = coverage * 10.0
	if min_knee > 130.0:
		notes.append("Go deeper")
	if torso > 20.0:
		notes.append("Keep chest up")
	return depth * 0.5 + control * 0.2 + s3 * 0.1 + s4 * 0.2


def _score_side_bend(spine, coverage, metrics) -> float:
	spine_std = pstdev(spine)
	metrics["spine_tilt"] = round(mean(spine), 1)
	metrics["spine_std"] = round(spine_std, 2)
	stability = max(0.0, 10.0 - spine_std)
	return stability * 0.6 + coverage * 10.0 * 0.4


def _score_generic(hip, coverage, metrics) -> float:
	hip_std = pstdev(hip)
	metrics["hip_std"] = round(hip_std, 2)
	stability = max(0.0, 10.0 - hip_std)
	return stability * 0.6 + coverage * 10.0 * 0.4


def score_from_metrics(
	movement: str,
	hip_angles: Sequence[float],
	knee_left: Sequence[float],
	knee_right: Sequence[float],
	spine_tilts: Sequence[float],
	coverage: float,
) -> ScoreResult:
	"""
	Reduce per-frame features to a 1..10 score, feedback text and display metrics.

	Pure: the result depends only on the arguments. Metrics are rounded for
	display after the score has been computed from the unrounded values.
	"""
	metrics: Dict[str, float] = {}
	notes: List[str] = []
	kind = resolve_movement(movement)
	if kind == MOVEMENT_PLANK:
		raw = _score_plank(hip_angles, spine_tilts, coverage, metrics, notes)
	elif kind == MOVEMENT_SQUAT:
		raw = _score_squat(knee_left, knee_right, spine_tilts, coverage, metrics, notes)
	elif kind == MOVEMENT_SIDE_BEND:
		raw = _score_side_bend(spine_tilts, coverage, metrics)
	else:
		raw = _score_generic(hip_angles, coverage, metrics)

	score = min(SCORE_MAX, max(SCORE_MIN, _round_half_up(raw)))
	return ScoreResult(score=score, feedback=feedback_for(score, notes), metrics=metrics, notes=tuple(notes))
