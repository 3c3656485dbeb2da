"""
Configuration management for ClickPredictor
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, Union
from dataclasses import dataclass, field
from dotenv import load_dotenv

from ..services.click_prediction.constants import (
    DEFAULT_MATCH_TOLERANCE,
    FEATURE_WEIGHTS,
    MAX_ELEMENTS,
)

# Load environment variables
load_dotenv()


class Config:
    """Application configuration"""

    # Logging
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    # Prediction config file (YAML)
    CLICKPREDICTOR_CONFIG: str = os.getenv('CLICKPREDICTOR_CONFIG', '')

    # Prediction defaults
    DEFAULT_TOTAL_IMPRESSIONS: int = int(os.getenv('DEFAULT_TOTAL_IMPRESSIONS', '1000'))
    MATCHER_TOLERANCE: float = float(os.getenv('MATCHER_TOLERANCE', str(DEFAULT_MATCH_TOLERANCE)))

    # Logfire
    LOGFIRE_TOKEN: str = os.getenv('LOGFIRE_TOKEN', '')
    LOGFIRE_PROJECT_NAME: str = os.getenv('LOGFIRE_PROJECT_NAME', 'clickpredictor')
    LOGFIRE_ENVIRONMENT: str = os.getenv('LOGFIRE_ENVIRONMENT', 'development')

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration values"""
        errors = []

        if cls.LOG_LEVEL.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append(f"LOG_LEVEL must be a logging level name, got '{cls.LOG_LEVEL}'")
        if cls.DEFAULT_TOTAL_IMPRESSIONS < 0:
            errors.append(f"DEFAULT_TOTAL_IMPRESSIONS must be >= 0, got {cls.DEFAULT_TOTAL_IMPRESSIONS}")
        if cls.MATCHER_TOLERANCE <= 0:
            errors.append(f"MATCHER_TOLERANCE must be > 0, got {cls.MATCHER_TOLERANCE}")

        if errors:
            raise ValueError(f"Invalid configuration: {'; '.join(errors)}")

        return True

    @classmethod
    def get(cls, key: str, default: Optional[Any] = None) -> Optional[Any]:
        """Get configuration value"""
        return getattr(cls, key, default)


# Prediction Configuration


@dataclass
class PredictionConfig:
    """Tunable settings for the click prediction engine"""
    feature_weights: Dict[str, float] = field(default_factory=dict)
    max_elements: int = MAX_ELEMENTS
    matcher_tolerance: float = field(default_factory=lambda: Config.MATCHER_TOLERANCE)
    context_defaults: Dict[str, Any] = field(default_factory=dict)

    def weights(self) -> Dict[str, float]:
        """Default feature weights with overrides applied"""
        merged = dict(FEATURE_WEIGHTS)
        merged.update(self.feature_weights)
        return merged


def load_prediction_config(path: Optional[Union[str, Path]] = None) -> PredictionConfig:
    """
    Load prediction configuration from YAML.

    Falls back to CLICKPREDICTOR_CONFIG when no path is given, and to
    defaults when neither is set.

    Args:
        path: Path to the YAML file

    Returns:
        PredictionConfig instance

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If configuration is invalid
    """
    path = path or Config.CLICKPREDICTOR_CONFIG
    if not path:
        return PredictionConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Prediction configuration not found at {config_path}\n"
            f"Create the file or unset CLICKPREDICTOR_CONFIG."
        )

    with open(config_path, 'r') as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ValueError(f"{config_path} must contain a mapping, got {type(raw_config).__name__}")

    # Parse feature weights (overrides only)
    weights = raw_config.get('feature_weights') or {}
    unknown = sorted(set(weights) - set(FEATURE_WEIGHTS))
    if unknown:
        raise ValueError(f"Unknown feature weights in {config_path}: {', '.join(unknown)}")
    try:
        weights = {name: float(value) for name, value in weights.items()}
    except (TypeError, ValueError) as e:
        raise ValueError(f"Feature weights must be numbers: {e}") from e

    max_elements = int(raw_config.get('max_elements', MAX_ELEMENTS))
    if max_elements <= 0:
        raise ValueError(f"max_elements must be > 0, got {max_elements}")

    tolerance = float(raw_config.get('matcher_tolerance', Config.MATCHER_TOLERANCE))
    if tolerance <= 0:
        raise ValueError(f"matcher_tolerance must be > 0, got {tolerance}")

    context_defaults = raw_config.get('context_defaults') or {}
    if not isinstance(context_defaults, dict):
        raise ValueError("context_defaults must be a mapping of PageContext fields")

    return PredictionConfig(
        feature_weights=weights,
        max_elements=max_elements,
        matcher_tolerance=tolerance,
        context_defaults=context_defaults,
    )
