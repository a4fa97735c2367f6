"""
Failure taxonomy for the analysis engine.

Only media I/O failures are exceptions that reach the caller. Detection-quality
problems (no subject, incomplete keypoints) are encoded as degraded results.
"""


class MediaLoadError(Exception):
	"""The image or video could not be fetched or decoded. Fatal to one analysis call."""


class FrameSeekError(Exception):
	"""A single seek did not complete. The sampler skips the frame and continues."""


class DetectorUnavailableError(RuntimeError):
	"""The pose model could not be built (backend missing or failed to load)."""
