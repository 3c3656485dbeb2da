"""
Click Prediction Service

Predicts how paid-traffic clicks distribute across the interactive elements
of a landing page and attributes the share that is wasted on non-converting
elements.
"""

from clickpredictor.services.click_prediction.models import (
    ClickPredictionResult,
    Coordinates,
    DOMElement,
    PageContext,
    PredictionReport,
    WastedClickAnalysis,
)
from clickpredictor.services.click_prediction.features import FeatureExtractor
from clickpredictor.services.click_prediction.scoring import ElementScorer
from clickpredictor.services.click_prediction.traffic import TrafficAnalyzer
from clickpredictor.services.click_prediction.cpc_estimator import CPCEstimator
from clickpredictor.services.click_prediction.distribution import ClickDistributor
from clickpredictor.services.click_prediction.waste import WasteAttributor
from clickpredictor.services.click_prediction.forms import FormAnalyzer
from clickpredictor.services.click_prediction.wasted_click_model import (
    PrimaryCTARequiredError,
    WastedClickModel,
)
from clickpredictor.services.click_prediction.element_matcher import (
    ElementMatchHelper,
    EnhancedElementMatcher,
)
from clickpredictor.services.click_prediction.engine import ClickPredictionEngine

__all__ = [
    "ClickPredictionEngine",
    "FeatureExtractor",
    "ElementScorer",
    "TrafficAnalyzer",
    "CPCEstimator",
    "ClickDistributor",
    "WasteAttributor",
    "FormAnalyzer",
    "WastedClickModel",
    "PrimaryCTARequiredError",
    "EnhancedElementMatcher",
    "ElementMatchHelper",
    "ClickPredictionResult",
    "Coordinates",
    "DOMElement",
    "PageContext",
    "PredictionReport",
    "WastedClickAnalysis",
]
