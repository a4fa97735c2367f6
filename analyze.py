"""
Score one image or video from the command line.

Example:
	python analyze.py clips/squat.mp4 --movement squat
	python analyze.py https://example.com/plank.jpg --movement "plank hold" --mime image/jpeg
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from modules.analysis import analyze_media
from modules.config import get_config, set_config_path
from modules.errors import DetectorUnavailableError, MediaLoadError
from modules.media import MediaDescriptor
from modules.pose.detector import SharedPoseDetector


async def _run(url: str, movement: str, mime: Optional[str]) -> dict:
	cfg = get_config()
	detector = SharedPoseDetector.from_config(cfg.pose)
	try:
		result = await analyze_media(MediaDescriptor(url=url, declared_type=mime), movement, detector, cfg)
	finally:
		await asyncio.to_thread(detector.close)
	return result.to_payload()


def main(argv: Optional[list[str]] = None) -> int:
	parser = argparse.ArgumentParser(description="Score the quality of an exercise movement from an image or video.")
	parser.add_argument("media", help="Path or URL of the image/video.")
	parser.add_argument("--movement", default="", help="Movement name, e.g. plank, squat, side bend.")
	parser.add_argument("--mime", default=None, help="Declared MIME type (otherwise guessed from the extension).")
	parser.add_argument("--config", default=None, help="Path to config.json (default: repo root).")
	parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
	args = parser.parse_args(argv)

	logging.basicConfig(
		level=logging.DEBUG if args.debug else logging.INFO,
		format="%(levelname)s:%(name)s:%(message)s",
	)
	if args.config:
		set_config_path(args.config)

	try:
		payload = asyncio.run(_run(args.media, args.movement, args.mime))
	except MediaLoadError as e:
		logging.error("Media could not be loaded: %s", e)
		return 2
	except DetectorUnavailableError as e:
		logging.error("Pose detector unavailable: %s", e)
		return 3
	print(json.dumps(payload, indent=2))
	return 0


if __name__ == "__main__":
	sys.exit(main())
