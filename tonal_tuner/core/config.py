"""Configuration management for Tonal Tuner components."""

from dataclasses import asdict, dataclass, fields, replace
from typing import Dict, Any, Optional
import json
import os
from pathlib import Path

from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TunerConfig:
    """Tunable constants of the pitch pipeline and its audio framing."""

    # Pitch estimator
    min_freq: float = 82.0  # Hz, E2
    max_freq: float = 1000.0  # Hz, B5
    correlation_threshold: float = 0.5
    peak_tolerance: float = 0.01  # Near-ties resolve to the shortest period
    rms_threshold: float = 0.01  # On a [-1, 1] sample scale

    # Temporal smoother
    smoothing_factor: float = 0.7  # Weight kept from the last frequency
    history_capacity: int = 5
    octave_weight: float = 0.9  # Weight kept when an octave error is suspected
    octave_down_band: float = 0.1  # Tolerance around a ratio of 0.5
    octave_up_band: float = 0.2  # Tolerance around a ratio of 2.0
    variation_band: float = 0.5  # Tolerance around a ratio of 1.0
    median_min_history: int = 3

    # Display
    in_tune_cents: int = 5

    # Audio framing
    sample_rate: int = 44100
    window_size: int = 8192
    hop_size: int = 1024

    def validate(self) -> "TunerConfig":
        """Check the values are consistent with each other.

        Returns:
            self, so construction and validation can be chained

        Raises:
            ValueError: If any value is out of range
        """
        if self.min_freq <= 0 or self.max_freq <= 0:
            raise ValueError(
                f"Frequency bounds must be positive: {self.min_freq}, {self.max_freq}"
            )
        if self.min_freq >= self.max_freq:
            raise ValueError(
                f"min_freq ({self.min_freq}) must be below max_freq ({self.max_freq})"
            )
        if not 0 <= self.correlation_threshold < 1:
            raise ValueError(
                f"correlation_threshold must be in [0, 1), got {self.correlation_threshold}"
            )
        if self.peak_tolerance < 0:
            raise ValueError(f"peak_tolerance must be >= 0, got {self.peak_tolerance}")
        if self.rms_threshold < 0:
            raise ValueError(f"rms_threshold must be >= 0, got {self.rms_threshold}")
        for name in ("smoothing_factor", "octave_weight"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if self.history_capacity < 1:
            raise ValueError(
                f"history_capacity must be >= 1, got {self.history_capacity}"
            )
        if self.median_min_history < 1:
            raise ValueError(
                f"median_min_history must be >= 1, got {self.median_min_history}"
            )
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if self.hop_size < 1 or self.hop_size > self.window_size:
            raise ValueError(
                f"hop_size ({self.hop_size}) must be in [1, window_size ({self.window_size})]"
            )
        return self

    def with_updates(self, **updates: Any) -> "TunerConfig":
        """Return a validated copy with the given fields replaced, None values ignored."""
        changes = {k: v for k, v in updates.items() if v is not None}
        return replace(self, **changes).validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TunerConfig":
        """Build a config from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known}).validate()


class ConfigManager:
    """Configuration manager for Tonal Tuner components."""

    DEFAULT_NAME = "tuner"

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory to store configuration files, or None to use default
        """
        if config_dir is None:
            # Use ~/.config/tonal_tuner by default
            home = os.path.expanduser("~")
            config_dir = os.path.join(home, ".config", "tonal_tuner")

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # Default configurations
        self.default_configs: Dict[str, TunerConfig] = {
            self.DEFAULT_NAME: TunerConfig(),
        }

        # Load existing configurations or create default ones
        self.configs: Dict[str, TunerConfig] = {}
        for config_name, default_config in self.default_configs.items():
            self.configs[config_name] = self.load_config(config_name, default_config)

    def load_config(self, name: str, default_config: TunerConfig) -> TunerConfig:
        """Load configuration from file or create default.

        Args:
            name: Configuration name
            default_config: Default configuration to use if file doesn't exist

        Returns:
            The loaded configuration
        """
        config_file = self.config_dir / f"{name}.json"

        if not config_file.exists():
            self.save_config(name, default_config)
            return default_config

        try:
            with open(config_file, "r") as f:
                data = json.load(f)
            # Ensure all default keys are present
            merged = {**default_config.to_dict(), **data}
            config = TunerConfig.from_dict(merged)
            logger.info(f"Loaded configuration from {config_file}")
            return config
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading configuration from {config_file}: {e}")
            return default_config

    def save_config(self, name: str, config: TunerConfig) -> bool:
        """Save configuration to file.

        Args:
            name: Configuration name
            config: Configuration to save

        Returns:
            True if saved successfully, False otherwise
        """
        config_file = self.config_dir / f"{name}.json"

        try:
            with open(config_file, "w") as f:
                json.dump(config.to_dict(), f, indent=2)
            logger.info(f"Saved configuration to {config_file}")
            return True
        except OSError as e:
            logger.error(f"Error saving configuration to {config_file}: {e}")
            return False

    def get_config(self, name: str = DEFAULT_NAME) -> TunerConfig:
        """Get configuration by name, falling back to defaults."""
        return self.configs.get(name, TunerConfig())

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Update configuration and save to file.

        Args:
            name: Configuration name
            updates: Dictionary of updates to apply

        Returns:
            True if updated and saved successfully, False otherwise

        Raises:
            ValueError: If the updated configuration is invalid
        """
        if name not in self.configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name] = self.configs[name].with_updates(**updates)
        return self.save_config(name, self.configs[name])

    def reset_config(self, name: str) -> bool:
        """Reset configuration to default.

        Args:
            name: Configuration name

        Returns:
            True if reset successfully, False otherwise
        """
        if name not in self.default_configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name] = self.default_configs[name]
        return self.save_config(name, self.configs[name])
