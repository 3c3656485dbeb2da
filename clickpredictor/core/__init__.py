"""
Core module - Configuration and observability
"""

from .config import Config, PredictionConfig, load_prediction_config
from .observability import get_logfire, setup_logfire

__all__ = ['Config', 'PredictionConfig', 'load_prediction_config', 'get_logfire', 'setup_logfire']
