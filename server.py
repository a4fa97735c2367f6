import argparse
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app_state import AppState
from modules import __version__
from modules.config import AppConfig, get_config, set_config_path
from modules.pose.detector import SharedPoseDetector
from routers import analysis

logger = logging.getLogger(__name__)


def create_app(cfg: Optional[AppConfig] = None, detector: Optional[SharedPoseDetector] = None) -> FastAPI:
	"""
	Build the API app. Tests pass their own config and detector; the server
	uses config.json and a lazily-loaded MediaPipe detector.
	"""

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		app_cfg = cfg or get_config()
		state = AppState(app_cfg, detector=detector)
		app.state.state = state
		logger.info("[Server] movement analysis API %s starting (pose backend=%s)", __version__, app_cfg.pose.backend)
		try:
			yield
		finally:
			# Model teardown can block; keep it off the loop.
			await asyncio.to_thread(state.detector.close)
			app.state.state = None

	app = FastAPI(title="Movement quality analysis", version=__version__, lifespan=lifespan)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=list((cfg or get_config()).server.cors_origins),
		allow_credentials=True,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.include_router(analysis.router)
	return app


app = create_app()


def main() -> None:
	import uvicorn

	parser = argparse.ArgumentParser(description="Movement quality analysis API server.")
	parser.add_argument("--host", default="127.0.0.1")
	parser.add_argument("--port", type=int, default=8000)
	parser.add_argument("--config", default=None, help="Path to config.json (default: repo root).")
	parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
	args = parser.parse_args()

	logging.basicConfig(
		level=logging.DEBUG if args.debug else logging.INFO,
		format="%(levelname)s:%(name)s:%(message)s",
	)
	if args.config:
		set_config_path(args.config)
	uvicorn.run(create_app(), host=args.host, port=int(args.port))


if __name__ == "__main__":
	main()
