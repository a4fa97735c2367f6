from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class PoseConfig:
	# Pose backend used by the shared detector. Only "mediapipe" ships today.
	backend: str = "mediapipe"
	model_complexity: int = 1
	min_detection_confidence: float = 0.5


@dataclass(frozen=True)
class SamplingConfig:
	# Evenly spaced frames requested across a video's duration.
	frame_count: int = 24
	# Last seek target is kept this far before end-of-stream.
	end_margin_seconds: float = 0.05
	# A seek that does not complete within this window skips its frame.
	seek_timeout_seconds: float = 5.0


@dataclass(frozen=True)
class MediaConfig:
	fetch_timeout_seconds: float = 10.0
	# Decoder used for video input. Only "opencv" ships today.
	video_backend: str = "opencv"
	# Used only when the caller gives no MIME type.
	image_extensions: Tuple[str, ...] = ("png", "jpg", "jpeg", "webp")


@dataclass(frozen=True)
class ServerConfig:
	cors_origins: Tuple[str, ...] = ("*",)


@dataclass(frozen=True)
class AppConfig:
	pose: PoseConfig = field(default_factory=PoseConfig)
	sampling: SamplingConfig = field(default_factory=SamplingConfig)
	media: MediaConfig = field(default_factory=MediaConfig)
	server: ServerConfig = field(default_factory=ServerConfig)


_CONFIG_PATH: Optional[Path] = None
_CONFIG_CACHE: Optional[AppConfig] = None


def _repo_root() -> Path:
	# modules/config.py -> repo root is one level up.
	return Path(__file__).resolve().parents[1]


def get_default_config_path() -> Path:
	return _repo_root() / "config.json"


def set_config_path(path: str | Path) -> None:
	"""
	Override the config path (must be called before first get_config()).
	Intended for the CLI; the server normally uses the default path.
	"""
	global _CONFIG_PATH
	global _CONFIG_CACHE
	_CONFIG_PATH = Path(path).expanduser().resolve()
	_CONFIG_CACHE = None


def _deep_get(d: Dict[str, Any], keys: list[str], default: Any = None) -> Any:
	cur: Any = d
	for k in keys:
		if not isinstance(cur, dict):
			return default
		cur = cur.get(k)
	return cur if cur is not None else default


def _as_int(v: Any, default: int) -> int:
	try:
		return int(v)
	except (TypeError, ValueError):
		return int(default)


def _as_str(v: Any, default: str = "") -> str:
	return str(v) if v is not None else str(default)


def _as_float(v: Any, default: float) -> float:
	try:
		return float(v)
	except (TypeError, ValueError):
		return float(default)


def _as_str_tuple(v: Any, default: Tuple[str, ...]) -> Tuple[str, ...]:
	if isinstance(v, str):
		v = v.split(",")
	if not isinstance(v, (list, tuple)):
		return tuple(default)
	out = tuple(str(s).strip() for s in v if str(s).strip())
	return out or tuple(default)


def load_config(path: Optional[str | Path] = None) -> AppConfig:
	p = Path(path).expanduser().resolve() if path else (_CONFIG_PATH or get_default_config_path())
	if not p.exists():
		# Defaults-only config; app can still run.
		return AppConfig()
	try:
		raw = json.loads(p.read_text(encoding="utf-8"))
	except (OSError, ValueError):
		# If config is malformed, fail safe to defaults (but keep app running).
		return AppConfig()

	if not isinstance(raw, dict):
		return AppConfig()

	pose_backend = _as_str(_deep_get(raw, ["pose", "backend"], "mediapipe"), "mediapipe").strip().lower()
	pose_complexity = _as_int(_deep_get(raw, ["pose", "model_complexity"], 1), 1)
	pose_min_conf = _as_float(_deep_get(raw, ["pose", "min_detection_confidence"], 0.5), 0.5)

	frame_count = _as_int(_deep_get(raw, ["sampling", "frame_count"], 24), 24)
	end_margin = _as_float(_deep_get(raw, ["sampling", "end_margin_seconds"], 0.05), 0.05)
	seek_timeout = _as_float(_deep_get(raw, ["sampling", "seek_timeout_seconds"], 5.0), 5.0)

	fetch_timeout = _as_float(_deep_get(raw, ["media", "fetch_timeout_seconds"], 10.0), 10.0)
	video_backend = _as_str(_deep_get(raw, ["media", "video_backend"], "opencv"), "opencv").strip().lower()
	image_exts = _as_str_tuple(_deep_get(raw, ["media", "image_extensions"], None), MediaConfig.image_extensions)

	cors_origins = _as_str_tuple(_deep_get(raw, ["server", "cors_origins"], None), ServerConfig.cors_origins)

	return AppConfig(
		pose=PoseConfig(
			backend=pose_backend or "mediapipe",
			model_complexity=min(2, max(0, pose_complexity)),
			min_detection_confidence=min(1.0, max(0.0, pose_min_conf)),
		),
		sampling=SamplingConfig(
			# Even spacing needs at least the first and last instant.
			frame_count=max(2, frame_count),
			end_margin_seconds=end_margin if end_margin >= 0.0 else 0.05,
			seek_timeout_seconds=seek_timeout if seek_timeout > 0.0 else 5.0,
		),
		media=MediaConfig(
			fetch_timeout_seconds=fetch_timeout if fetch_timeout > 0.0 else 10.0,
			video_backend=video_backend or "opencv",
			image_extensions=tuple(e.lower().lstrip(".") for e in image_exts),
		),
		server=ServerConfig(cors_origins=cors_origins),
	)


def get_config() -> AppConfig:
	global _CONFIG_CACHE
	if _CONFIG_CACHE is None:
		_CONFIG_CACHE = load_config()
	return _CONFIG_CACHE
