"""
Configuration for the frame recognition engine.

Settings are read from YAML:

    recognition:
      height: 1920
      width: 1080
      recognition_count: 20
      score_threshold: 0.25
      check_count: 50          # cache window, milliseconds
      tracking_threshold: 0.03 # per-coordinate, normalized units
    logging:
      level: INFO
      file: logs/frame_recognition.log
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Dict, Any, Union
import yaml
from loguru import logger

from frame_recognition.core.contracts import ConfigurationError


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.yaml"


@dataclass(frozen=True)
class RecognitionConfig:
    """Engine configuration. Immutable once constructed."""
    # Device / frame size, only used for aspect-ratio correction
    height: float
    width: float

    # Minimum recognitions before a track may be reported as confident
    recognition_count: int = 20

    # Detections below this raw score are dropped before matching
    score_threshold: float = 0.25

    # Confident-object cache window in milliseconds
    check_count: float = 50

    # Max per-coordinate delta for a detection to match a track
    tracking_threshold: float = 0.03

    def __post_init__(self):
        if self.height <= 0 or self.width <= 0:
            raise ConfigurationError(
                f"height and width must be positive, got height={self.height}, width={self.width}"
            )
        if self.recognition_count < 1:
            raise ConfigurationError(f"recognition_count must be >= 1, got {self.recognition_count}")
        if not 0.0 <= self.score_threshold <= 1.0:
            raise ConfigurationError(f"score_threshold must be in [0, 1], got {self.score_threshold}")
        if self.check_count < 0:
            raise ConfigurationError(f"check_count must be >= 0, got {self.check_count}")
        if self.tracking_threshold <= 0:
            raise ConfigurationError(f"tracking_threshold must be positive, got {self.tracking_threshold}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RecognitionConfig:
        """Build from a ``recognition:`` mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown recognition settings: {', '.join(sorted(unknown))}")
        missing = {"height", "width"} - set(data)
        if missing:
            raise ConfigurationError(f"Missing recognition settings: {', '.join(sorted(missing))}")
        return cls(**data)


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load raw settings from a YAML file.

    Falls back to config/settings.yaml, then to an empty mapping.

    Raises:
        ConfigurationError: If the file is not valid YAML or not a mapping
    """
    candidates = []
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        candidates.append(path)
    candidates.append(DEFAULT_CONFIG_PATH)

    for path in candidates:
        if not path.exists():
            continue
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config root must be a mapping: {path}")
        logger.debug(f"Loaded config from {path}")
        return data

    return {}


def recognition_config_from_file(
    config_path: Optional[Union[str, Path]] = None,
    **overrides: Any,
) -> RecognitionConfig:
    """Load the ``recognition:`` section and apply keyword overrides."""
    settings = load_config(config_path)
    section = settings.get("recognition") or {}
    if not isinstance(section, dict):
        raise ConfigurationError("'recognition' section must be a mapping")
    section = {**section, **{k: v for k, v in overrides.items() if v is not None}}
    return RecognitionConfig.from_dict(section)
