"""
Explicit app state: single source of truth for runtime lifecycle.
Created in lifespan, attached to app.state.state; injected into routes via Depends(get_state).
"""
from typing import Optional

from modules.config import AppConfig
from modules.pose.detector import SharedPoseDetector


class AppState:
	"""
	Holds the runtime resources shared by all requests.
	The pose detector is built lazily on first use and reused for the process lifetime.
	"""

	cfg: AppConfig
	detector: SharedPoseDetector

	def __init__(self, cfg: AppConfig, detector: Optional[SharedPoseDetector] = None) -> None:
		self.cfg = cfg
		self.detector = detector or SharedPoseDetector.from_config(cfg.pose)
