from __future__ import annotations

import http.client
import io
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from modules.errors import MediaLoadError

logger = logging.getLogger(__name__)

MEDIA_IMAGE = "image"
MEDIA_VIDEO = "video"

DEFAULT_IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "webp")


@dataclass(frozen=True)
class MediaDescriptor:
	url: str
	declared_type: Optional[str] = None


def url_extension(url: str) -> str:
	"""Lower-case file extension of a URL or path, ignoring query string and fragment."""
	base = (url or "").split("?", 1)[0].split("#", 1)[0]
	last = base.rsplit("/", 1)[-1]
	if "." not in last:
		return ""
	return last.rsplit(".", 1)[-1].lower()


def classify_media(media: MediaDescriptor, image_extensions: Iterable[str] = DEFAULT_IMAGE_EXTENSIONS) -> str:
	"""
	Route a descriptor to the image or video pipeline.

	A declared image/* type wins; any other declared type is video. Without a
	declared type the URL extension decides, and anything unrecognised is video.
	"""
	declared = (media.declared_type or "").strip().lower()
	if declared:
		return MEDIA_IMAGE if declared.startswith("image/") else MEDIA_VIDEO
	if url_extension(media.url) in set(image_extensions):
		return MEDIA_IMAGE
	return MEDIA_VIDEO


def is_remote(url: str) -> bool:
	return urllib.parse.urlsplit(url or "").scheme.lower() in ("http", "https")


def local_path(url: str) -> Path:
	"""Filesystem path for a plain path or file:// URL."""
	parts = urllib.parse.urlsplit(url)
	if parts.scheme.lower() == "file":
		return Path(urllib.request.url2pathname(parts.path))
	return Path(url).expanduser()


def _read_bytes(url: str, timeout_s: float) -> bytes:
	if is_remote(url):
		try:
			with urllib.request.urlopen(url, timeout=float(timeout_s)) as resp:
				return resp.read()
		except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
			raise MediaLoadError(f"image fetch failed: {url}: {e}") from e
	p = local_path(url)
	try:
		return p.read_bytes()
	except OSError as e:
		raise MediaLoadError(f"image not readable: {p}: {e}") from e


def load_image_rgb(url: str, timeout_s: float = 10.0) -> np.ndarray:
	"""
	Fetch and decode an image into an RGB (H,W,3 uint8) array.
	Blocking; callers on the event loop should run it in a worker thread.
	"""
	data = _read_bytes(url, timeout_s)
	try:
		with Image.open(io.BytesIO(data)) as im:
			rgb = np.asarray(im.convert("RGB"))
	except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
		logger.warning("[Media] image decode failed for %s: %s", url, e)
		raise MediaLoadError(f"image decode failed: {url}") from e
	if rgb.ndim != 3 or not rgb.shape[0] or not rgb.shape[1]:
		raise MediaLoadError(f"image has no pixels: {url}")
	return rgb
