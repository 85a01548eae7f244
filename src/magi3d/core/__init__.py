"""Configuration primitives."""

from .config import HunyuanSettings, PollSettings, TripoSettings

__all__ = ["HunyuanSettings", "PollSettings", "TripoSettings"]
