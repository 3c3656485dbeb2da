"""
Risk assessment for click predictions.

Pure functions producing human-readable risk factors, a per-element
confidence tier, batch-level reliability diagnostics and batch warnings.
"""

import logging
from typing import List, Sequence, Tuple

import numpy as np

from .constants import (
    CONVERSION_KEYWORDS,
    DEFAULT_LOAD_TIME,
    HIGH_CONFIDENCE_THRESHOLD,
    MAX_RISK_FACTORS,
    MAX_WARNINGS,
    MEDIUM_CONFIDENCE_THRESHOLD,
    MIN_TOUCH_TARGET,
    TRAFFIC_SOURCE_RELIABILITY,
)
from .models import ConfidenceLevel, DOMElement, PageContext, ReliabilityAssessment
from .utils import contains_any, is_form_field, lower_text

logger = logging.getLogger(__name__)

SLOW_LOAD_TIME = 5.0
FAST_LOAD_TIME = 3.0
LONG_SCROLL_DISTANCE = 2000
DEAD_HREFS = ("#", "javascript:void(0)", "javascript:;")


def _level(score: float) -> ConfidenceLevel:
    if score >= HIGH_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.HIGH
    if score >= MEDIUM_CONFIDENCE_THRESHOLD:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def _load_time(context: PageContext) -> float:
    return context.load_time if context.load_time is not None else DEFAULT_LOAD_TIME


def _is_complex_field(element: DOMElement) -> bool:
    return (
        (element.type or "").lower() in ("password", "email")
        or element.required
        or bool(element.pattern or element.min_length or element.max_length)
    )


# ============================================================================
# Element risk factors
# ============================================================================

def generate_risk_factors(element: DOMElement, context: PageContext) -> List[str]:
    """Risk factors for one element, at most five."""
    risks: List[str] = []
    text = element.text or ""

    if not element.is_visible:
        risks.append("Element is not visible")
    if not element.is_above_fold:
        risks.append("Element is below the fold")
    if not element.is_interactive:
        risks.append("Element is not interactive")
    if element.is_interactive and not element.has_button_styling:
        risks.append("Poor visual affordance")

    if len(text.strip()) < 3:
        risks.append("Insufficient text content")
    elif len(text) > 50:
        risks.append("Text content may be too long")

    if is_form_field(element):
        if element.required and not element.label:
            risks.append("Required field without clear label")
        if (element.type or "").lower() == "password" and not context.has_ssl:
            risks.append("Password field without SSL")
        if _is_complex_field(element):
            risks.append("Complex field may cause abandonment")

    if _load_time(context) > SLOW_LOAD_TIME:
        risks.append("Slow page load time may affect engagement")
    if context.traffic_source == "social":
        risks.append("Social traffic typically has lower engagement")
    if (
        context.traffic_source == "paid"
        and context.ad_message_match is not None
        and context.ad_message_match < 0.5
    ):
        risks.append("Poor ad-to-page message match")

    box = element.box
    if context.device_type == "mobile" and (box.width < MIN_TOUCH_TARGET or box.height < MIN_TOUCH_TARGET):
        risks.append("Touch target too small for mobile")
    if element.top_offset > LONG_SCROLL_DISTANCE:
        risks.append("Element requires significant scrolling")
    if (element.href or "").strip().lower() in DEAD_HREFS:
        risks.append("Non-functional link")
    if not context.has_ssl:
        risks.append("Page lacks SSL security")
    if contains_any(lower_text(element), CONVERSION_KEYWORDS) and not context.has_trust_badges:
        risks.append("Lack of trust signals for conversion element")

    return risks[:MAX_RISK_FACTORS]


# ============================================================================
# Element confidence
# ============================================================================

def calculate_confidence_level(element: DOMElement, score: float, context: PageContext) -> ConfidenceLevel:
    """
    Confidence tier for one element's prediction.

    Additive evidence from the score tier, element quality and context data,
    minus 0.05 per risk factor, thresholded at 0.7 / 0.4.
    """
    confidence = 0.0

    if score > 0.7:
        confidence += 0.4
    elif score > 0.4:
        confidence += 0.2

    if element.is_interactive:
        confidence += 0.3
    if element.has_button_styling:
        confidence += 0.2
    if element.is_visible and element.is_above_fold:
        confidence += 0.3

    if context.total_impressions > 1000:
        confidence += 0.1
    if context.traffic_source != "unknown":
        confidence += 0.1

    text_length = len(element.text or "")
    if 5 < text_length < 30:
        confidence += 0.1

    if context.has_ssl:
        confidence += 0.05
    if _load_time(context) < FAST_LOAD_TIME:
        confidence += 0.05
    if context.industry:
        confidence += 0.1

    confidence -= len(generate_risk_factors(element, context)) * 0.05
    return _level(confidence)


# ============================================================================
# Batch reliability
# ============================================================================

def assess_prediction_reliability(
    scored: Sequence[Tuple[DOMElement, float]],
    context: PageContext,
) -> ReliabilityAssessment:
    """
    Batch-level reliability of a prediction.

    Args:
        scored: (element, score) pairs of the scored batch
        context: Enriched page context
    """
    reliability = 0.5
    factors: List[str] = []

    if context.total_impressions > 10000:
        reliability += 0.2
        factors.append("High impression volume")
    elif context.total_impressions < 100:
        reliability -= 0.2
        factors.append("Very low impression volume")

    if scored:
        interactive_ratio = sum(1 for element, _ in scored if element.is_interactive) / len(scored)
        if interactive_ratio > 0.7:
            reliability += 0.15
            factors.append("Good interactive element ratio")
        elif interactive_ratio < 0.3:
            reliability -= 0.15
            factors.append("Low interactive element ratio")

        variance = float(np.var([score for _, score in scored])) if len(scored) > 1 else 0.0
        if variance > 0.1:
            reliability += 0.1
            factors.append("Good score differentiation")
        else:
            reliability -= 0.1
            factors.append("Poor score differentiation")

    source_adjustment = TRAFFIC_SOURCE_RELIABILITY.get(context.traffic_source, 0.0)
    reliability += source_adjustment
    if source_adjustment > 0:
        factors.append(f"Reliable traffic source ({context.traffic_source})")
    elif source_adjustment < 0:
        factors.append(f"Less predictable traffic source ({context.traffic_source})")

    load_time = _load_time(context)
    if load_time < FAST_LOAD_TIME:
        reliability += 0.05
        factors.append("Fast page load")
    elif load_time > SLOW_LOAD_TIME:
        reliability -= 0.1
        factors.append("Slow page load")

    if context.has_ssl:
        reliability += 0.05

    reliability = min(max(reliability, 0.0), 1.0)
    return ReliabilityAssessment(score=reliability, level=_level(reliability), factors=factors)


def generate_prediction_warnings(elements: Sequence[DOMElement], context: PageContext) -> List[str]:
    """Batch warnings, at most three."""
    warnings: List[str] = []

    if context.total_impressions < 1000:
        warnings.append("Low impression volume may affect prediction accuracy")
    if context.traffic_source in ("social", "paid"):
        warnings.append("Traffic source typically has higher bounce rates")
    if _load_time(context) > SLOW_LOAD_TIME:
        warnings.append("Slow page load may significantly impact actual performance")

    if context.device_type == "mobile":
        small = sum(
            1 for el in elements
            if el.box.width < MIN_TOUCH_TARGET or el.box.height < MIN_TOUCH_TARGET
        )
        if small:
            warnings.append(f"{small} elements may be too small for mobile interaction")

    if elements:
        short_text = sum(1 for el in elements if len((el.text or "").strip()) < 3)
        if short_text / len(elements) > 0.3:
            warnings.append("Many elements lack sufficient text content")
        non_interactive = sum(1 for el in elements if not el.is_interactive)
        if non_interactive / len(elements) > 0.5:
            warnings.append("High proportion of non-interactive elements detected")

    return warnings[:MAX_WARNINGS]
