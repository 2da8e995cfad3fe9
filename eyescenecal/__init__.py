"""Eye-camera to scene-camera calibration for head-mounted gaze trackers."""

__version__ = "0.1.0"