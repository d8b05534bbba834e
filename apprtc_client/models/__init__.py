"""Data models for the application."""
from .constraints import KeyValuePair, MediaConstraints
from .signaling import SignalingParameters

__all__ = [
    "KeyValuePair",
    "MediaConstraints",
    "SignalingParameters",
]
