"""Core components for the Tonal Tuner application."""

# Import configuration for easier access
from .config import TunerConfig, ConfigManager

__all__ = ["TunerConfig", "ConfigManager"]
