"""
Pose estimation utilities.

This package defines a model-agnostic PoseFrame interface, the fixed 17-point
skeleton topology, provider adapters (e.g., MediaPipe Pose) and the geometric
features the scorer consumes, so the pose stack can be swapped without
rewriting the engine.
"""
