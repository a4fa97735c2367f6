"""Tests for the HTTP routes using FastAPI's TestClient."""
from fastapi.testclient import TestClient
from PIL import Image

from modules.config import AppConfig
from modules.pose.detector import SharedPoseDetector
from server import create_app
from tests.helpers import FakeProvider, fake_detector


def _client(detector):
	return TestClient(create_app(AppConfig(), detector=detector))


def test_analyze_image(tmp_path):
	p = tmp_path / "plank.png"
	Image.new("RGB", (32, 32)).save(p)
	with _client(fake_detector()) as client:
		resp = client.post("/analyze", json={"url": str(p), "movement": "Plank"})
	assert resp.status_code == 200
	body = resp.json()
	assert body["score"] == 10
	assert body["feedback"] == "Good form"
	assert body["analysis"]["frames"] == 1
	assert body["analysis"]["coverage"] == 1.0
	assert body["analysis"]["movement"] == "Plank"
	assert body["analysis"]["metrics"]["hip_mean"] == 180.0


def test_analyze_image_no_pose(tmp_path):
	p = tmp_path / "empty"
	Image.new("RGB", (32, 32)).save(p, format="PNG")
	with _client(fake_detector(FakeProvider(lambda _r, _t: []))) as client:
		resp = client.post("/analyze", json={"url": str(p), "mime": "image/png", "movement": "squat"})
	assert resp.status_code == 200
	assert resp.json()["feedback"] == "Pose not detected"
	assert resp.json()["analysis"]["notes"] == ["no pose"]


def test_unreadable_media_is_422(tmp_path):
	with _client(fake_detector()) as client:
		resp = client.post("/analyze", json={"url": str(tmp_path / "missing.jpg"), "movement": "plank"})
	assert resp.status_code == 422


def test_detector_unavailable_is_503(tmp_path):
	def factory():
		raise RuntimeError("MediaPipe is not installed")

	p = tmp_path / "a.png"
	Image.new("RGB", (8, 8)).save(p)
	with _client(SharedPoseDetector(factory)) as client:
		resp = client.post("/analyze", json={"url": str(p), "movement": "plank"})
		warm = client.post("/pose/warmup")
	assert resp.status_code == 503
	assert warm.status_code == 503


def test_warmup_and_health():
	with _client(fake_detector()) as client:
		assert client.get("/health").json()["detector_ready"] is False
		resp = client.post("/pose/warmup")
		assert resp.status_code == 200
		assert resp.json()["backend"] == "fake"
		assert client.get("/health").json()["detector_ready"] is True


def test_missing_url_is_rejected():
	with _client(fake_detector()) as client:
		resp = client.post("/analyze", json={"movement": "plank"})
	assert resp.status_code == 422


def test_inference_failure_is_500_not_503(tmp_path):
	def crash(_rgb, _t):
		raise RuntimeError("inference crashed")

	p = tmp_path / "a.png"
	Image.new("RGB", (8, 8)).save(p)
	with _client(fake_detector(FakeProvider(crash))) as client:
		resp = client.post("/analyze", json={"url": str(p), "movement": "plank"})
	assert resp.status_code == 500
