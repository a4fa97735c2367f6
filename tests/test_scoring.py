"""Tests for the movement scorer: boundaries, notes, feedback tiers and purity."""
import random

import pytest

from modules.scoring import (
	MOVEMENT_GENERIC,
	MOVEMENT_PLANK,
	MOVEMENT_SIDE_BEND,
	MOVEMENT_SQUAT,
	feedback_for,
	mean,
	pstdev,
	resolve_movement,
	score_from_metrics,
)

MOVEMENTS = ["Plank", "front plank hold", "Squat", "goblet squat", "Side bend", "sidebend", "jumping jacks", ""]


def test_mean_and_pstdev_of_empty_are_zero():
	assert mean([]) == 0.0
	assert pstdev([]) == 0.0


def test_pstdev_is_population_std():
	assert pstdev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)


@pytest.mark.parametrize(
	"name,expected",
	[
		("PLANK", MOVEMENT_PLANK),
		("Forearm plank", MOVEMENT_PLANK),
		("air squat", MOVEMENT_SQUAT),
		("Side Bend", MOVEMENT_SIDE_BEND),
		("side  bend left", MOVEMENT_SIDE_BEND),
		("sidebend", MOVEMENT_SIDE_BEND),
		("lunge", MOVEMENT_GENERIC),
		("", MOVEMENT_GENERIC),
	],
)
def test_resolve_movement(name, expected):
	assert resolve_movement(name) == expected


@pytest.mark.parametrize("movement", MOVEMENTS)
def test_empty_input_scores_one(movement):
	r = score_from_metrics(movement, [], [], [], [], 0.0)
	assert r.score == 1


def test_plank_perfect():
	r = score_from_metrics("plank", [180.0], [], [], [0.0], 1.0)
	assert r.score == 10
	assert r.notes == ()
	assert r.feedback == "Good form"
	assert r.metrics == {"hip_mean": 180.0, "hip_std": 0.0, "spine_tilt": 0.0}


def test_plank_notes():
	low = score_from_metrics("plank", [160.0, 160.0], [], [], [5.0], 1.0)
	assert "Hips low" in low.notes
	high = score_from_metrics("plank", [195.0], [], [], [5.0], 1.0)
	assert high.notes == ("Hips high",)
	shaky = score_from_metrics("plank", [176.0, 180.0, 184.0], [], [], [0.0], 1.0)
	assert shaky.notes == ("Hold steady",)
	assert shaky.feedback == "Hold steady"


def test_plank_notes_joined_in_order():
	r = score_from_metrics("plank", [150.0, 160.0], [], [], [0.0], 1.0)
	assert r.notes == ("Hips low", "Hold steady")
	assert r.feedback == "Hips low; Hold steady"


def test_squat_perfect():
	r = score_from_metrics("squat", [], [95.0], [95.0], [0.0], 1.0)
	assert r.score == 10
	assert r.metrics == {"min_knee": 95.0, "torso_tilt": 0.0}


def test_squat_too_shallow_and_leaning():
	r = score_from_metrics("squat", [], [150.0, 170.0], [150.0, 170.0], [30.0], 1.0)
	assert r.notes == ("Go deeper", "Keep chest up")


def test_squat_missing_side_uses_180():
	r = score_from_metrics("squat", [], [90.0], [], [0.0], 1.0)
	assert r.metrics["min_knee"] == 135.0


def test_squat_control_pools_both_sides():
	# Each side is constant over time, but the sides differ: pooled std is 10.
	r = score_from_metrics("squat", [], [85.0, 85.0], [105.0, 105.0], [0.0], 1.0)
	# min_knee = 95 -> depth 10; control = 0; s3 = 10; s4 = 10 -> 5 + 0 + 1 + 2 = 8
	assert r.score == 8


def test_side_bend_uses_spine_spread():
	steady = score_from_metrics("side bend", [], [], [], [20.0, 20.0], 1.0)
	assert steady.score == 10
	assert steady.metrics["spine_tilt"] == 20.0
	wobbly = score_from_metrics("side bend", [], [], [], [0.0, 20.0], 1.0)
	# std 10 -> stability 0 -> 0.4 * 10
	assert wobbly.score == 4
	assert wobbly.feedback == "Retake suggested"


def test_generic_uses_hip_spread():
	r = score_from_metrics("burpee", [170.0, 170.0], [], [], [], 0.5)
	# 6 + 2
	assert r.score == 8
	assert r.notes == ()


def test_half_scores_round_up():
	# 10 * 0.6 + 0.125 * 10 * 0.4 = 6.5
	r = score_from_metrics("burpee", [170.0], [], [], [], 0.125)
	assert r.score == 7


def test_metrics_rounding_does_not_feed_score():
	r = score_from_metrics("plank", [179.96, 180.04], [], [], [0.123], 1.0)
	assert r.metrics["hip_mean"] == 180.0
	assert r.metrics["hip_std"] == 0.04
	assert r.metrics["spine_tilt"] == 0.1


@pytest.mark.parametrize(
	"score,expected",
	[(10, "Good form"), (8, "Good form"), (7, "Needs improvement"), (5, "Needs improvement"), (4, "Retake suggested"), (1, "Retake suggested")],
)
def test_feedback_tiers(score, expected):
	assert feedback_for(score, []) == expected


def test_score_is_always_in_range():
	rng = random.Random(1234)
	for _ in range(300):
		n = rng.randint(0, 30)
		hip = [rng.uniform(0.0, 360.0) for _ in range(n)]
		kl = [rng.uniform(0.0, 180.0) for _ in range(n)]
		kr = [rng.uniform(0.0, 180.0) for _ in range(n)]
		spine = [rng.uniform(0.0, 90.0) for _ in range(n)]
		cov = rng.uniform(0.0, 1.0)
		for movement in MOVEMENTS:
			r = score_from_metrics(movement, hip, kl, kr, spine, cov)
			assert isinstance(r.score, int)
			assert 1 <= r.score <= 10


def test_scoring_is_pure():
	args = ("squat", [170.0, 172.0], [100.0, 120.0], [101.0, 119.0], [12.0, 14.0], 0.75)
	a = score_from_metrics(*args)
	b = score_from_metrics(*args)
	assert a == b
