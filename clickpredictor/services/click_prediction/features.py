"""
Feature extraction for click prediction.

Turns one DOMElement plus its PageContext into a fixed set of named scalar
features. Every feature is an independent formula; nothing here raises and
missing optional inputs fall back to neutral values.
"""

import re
from dataclasses import asdict, dataclass
from typing import Dict

from .constants import (
    CTA_PATTERNS,
    DEFAULT_LOAD_TIME,
    DEFAULT_PAGE_COMPLEXITY,
    HIGH_INTENT_KEYWORDS,
    MIN_TOUCH_TARGET,
    URGENCY_KEYWORDS,
)
from .models import DOMElement, PageContext
from .utils import contains_any, field_type_complexity, is_form_field, lower_class, lower_text


_USER_COUNT_RE = re.compile(r"\d+.*users?", re.IGNORECASE)
_COUNTDOWN_RE = re.compile(r"\d+:\d+")
_BROKEN_HREFS = ("#", "javascript:void(0)")

BRAND_RECOGNITION_LEVELS = {"high": 1.0, "medium": 0.5, "low": 0.2}


@dataclass
class ElementFeatures:
    """Named feature vector for one element."""
    visibility_score: float
    information_scent: float
    friction_score: float
    interactivity_score: float
    heatmap_attention: float
    credibility_score: float
    content_depth_score: float
    intent_score: float
    visual_affordance_score: float
    scroll_depth_score: float
    performance_score: float
    trust_boost: float
    segment_modifier: float
    social_proof_boost: float
    progress_indication: float
    dynamic_content_boost: float
    urgency_boost: float
    auto_completion: float
    field_grouping: float
    emotional_color_boost: float
    cross_device_priming: float
    dead_click_risk: float
    cognitive_load_penalty: float
    field_complexity: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def brand_recognition_value(context: PageContext) -> float:
    """Brand recognition as a 0-1 number; labels map to fixed levels."""
    value = context.brand_recognition
    if value is None:
        return 0.0
    if isinstance(value, str):
        return BRAND_RECOGNITION_LEVELS.get(value, 0.0)
    return max(0.0, min(float(value), 1.0))


class FeatureExtractor:
    """
    Computes the feature vector used by the element scorer.

    Usage:
        extractor = FeatureExtractor()
        features = extractor.extract_features(element, context)
    """

    def extract_features(self, element: DOMElement, context: PageContext) -> ElementFeatures:
        return ElementFeatures(
            visibility_score=self.visibility_score(element),
            information_scent=self.information_scent(element),
            friction_score=self.friction_score(element),
            interactivity_score=self.interactivity_score(element),
            heatmap_attention=self.heatmap_attention(element),
            credibility_score=self.credibility_score(context),
            content_depth_score=self.content_depth_score(element),
            intent_score=self.intent_score(element),
            visual_affordance_score=self.visual_affordance_score(element),
            scroll_depth_score=self.scroll_depth_score(element),
            performance_score=self.performance_score(context),
            trust_boost=self.trust_boost(element),
            segment_modifier=self.segment_modifier(),
            social_proof_boost=self.social_proof_boost(element),
            progress_indication=self.progress_indication(element),
            dynamic_content_boost=self.dynamic_content_boost(element),
            urgency_boost=self.urgency_boost(element),
            auto_completion=0.8 if element.has_autocomplete else 0.2,
            field_grouping=self.field_grouping(element),
            emotional_color_boost=self.emotional_color_boost(element),
            cross_device_priming=self.cross_device_priming(element, context),
            dead_click_risk=self.dead_click_risk(element),
            cognitive_load_penalty=self.cognitive_load_penalty(context),
            field_complexity=self.field_complexity(element),
        )

    # ========================================================================
    # Core interaction features
    # ========================================================================

    def visibility_score(self, element: DOMElement) -> float:
        if not element.is_visible:
            return 0.0
        return 0.8 if element.is_above_fold else 0.4

    def information_scent(self, element: DOMElement) -> float:
        text = element.text or ""
        action_bonus = 0.3 if contains_any(text.lower(), HIGH_INTENT_KEYWORDS) else 0.0
        return min(len(text) / 50 * 0.7 + action_bonus, 1.0)

    def friction_score(self, element: DOMElement) -> float:
        score = 0.8
        if is_form_field(element):
            score -= 0.2
        if element.required:
            score -= 0.15
        if element.form_action is not None or (element.type or "").lower() == "submit":
            score -= 0.1
        return max(score, 0.0)

    def interactivity_score(self, element: DOMElement) -> float:
        if not element.is_interactive:
            return 0.2
        return 0.8 if element.has_button_styling else 0.6

    def heatmap_attention(self, element: DOMElement) -> float:
        distance = element.top_offset
        if element.is_above_fold:
            return max(0.3, 1.0 - distance / 1000)
        return max(0.1, 0.5 - distance / 2000)

    # ========================================================================
    # Content and credibility features
    # ========================================================================

    def credibility_score(self, context: PageContext) -> float:
        score = 0.0
        if context.has_ssl:
            score += 0.2
        if context.has_trust_badges:
            score += 0.3
        if context.has_testimonials:
            score += 0.2
        score += brand_recognition_value(context) * 0.3
        return min(score, 1.0)

    def content_depth_score(self, element: DOMElement) -> float:
        return min(len(element.text or "") / 100, 1.0)

    def intent_score(self, element: DOMElement) -> float:
        text = lower_text(element)
        if not text:
            return 0.0
        score = 0.0
        if contains_any(text, HIGH_INTENT_KEYWORDS):
            score += 0.4
        if contains_any(text, CTA_PATTERNS):
            score += 0.6
        return min(score, 1.0)

    def visual_affordance_score(self, element: DOMElement) -> float:
        class_name = lower_class(element)
        score = 0.0
        if element.has_button_styling:
            score += 0.4
        if "hover" in class_name or element.has_button_styling:
            score += 0.2
        if element.is_interactive:
            score += 0.2
        if element.has_button_styling or "cta" in class_name:
            score += 0.2
        return min(score, 1.0)

    def scroll_depth_score(self, element: DOMElement) -> float:
        if element.is_above_fold:
            return 1.0
        return max(0.2, 1.0 - element.top_offset / 3000)

    # ========================================================================
    # Performance and boost features
    # ========================================================================

    def performance_score(self, context: PageContext) -> float:
        load_time = context.load_time if context.load_time is not None else DEFAULT_LOAD_TIME
        return max(0.0, min(1.0 - (load_time - 2.0) / 10.0, 1.0))

    def trust_boost(self, element: DOMElement) -> float:
        text = lower_text(element)
        boost = 1.0
        if "secure" in text:
            boost *= 1.2
        if "guarantee" in text:
            boost *= 1.15
        if "contact" in text:
            boost *= 1.1
        return boost

    def segment_modifier(self) -> float:
        # Audience and persona matching are not modelled; both count as matched
        return 1.2 * 1.1

    def social_proof_boost(self, element: DOMElement) -> float:
        text = element.text or ""
        class_name = lower_class(element)
        boost = 1.0
        if "review" in text.lower():
            boost *= 1.2
        if _USER_COUNT_RE.search(text):
            boost *= 1.1
        if "share" in class_name or "social" in class_name:
            boost *= 1.05
        return boost

    def progress_indication(self, element: DOMElement) -> float:
        class_name = lower_class(element)
        score = 0.0
        if "progress" in class_name:
            score += 0.5
        if "step" in class_name:
            score += 0.5
        return min(score, 1.0)

    def dynamic_content_boost(self, element: DOMElement) -> float:
        text = lower_text(element)
        boost = 1.0
        if "your" in text or "you" in text:
            boost *= 1.3
        if contains_any(text, URGENCY_KEYWORDS):
            boost *= 1.2
        return boost

    def urgency_boost(self, element: DOMElement) -> float:
        text = lower_text(element)
        boost = 1.0
        if contains_any(text, URGENCY_KEYWORDS):
            boost *= 1.3
        if "countdown" in lower_class(element) or _COUNTDOWN_RE.search(text):
            boost *= 1.4
        if "limited" in text:
            boost *= 1.2
        return boost

    def field_grouping(self, element: DOMElement) -> float:
        class_name = lower_class(element)
        return 0.7 if "group" in class_name or "fieldset" in class_name else 0.3

    def emotional_color_boost(self, element: DOMElement) -> float:
        class_name = lower_class(element)
        boost = 1.0
        if "red" in class_name or "danger" in class_name:
            boost *= 1.1
        if "orange" in class_name or "warning" in class_name:
            boost *= 1.05
        if "green" in class_name or "success" in class_name:
            boost *= 1.03
        return boost

    def cross_device_priming(self, element: DOMElement, context: PageContext) -> float:
        class_name = lower_class(element)
        boost = 1.0
        if context.device_type == "mobile" and element.box.width >= MIN_TOUCH_TARGET:
            boost *= 1.1
        if "responsive" in class_name or "mobile" in class_name:
            boost *= 1.05
        return boost

    # ========================================================================
    # Penalty features
    # ========================================================================

    def dead_click_risk(self, element: DOMElement) -> float:
        risk = 0.0
        if not element.is_interactive:
            risk += 0.7
        if (element.href or "").strip().lower() in _BROKEN_HREFS:
            risk += 0.3
        return risk

    def cognitive_load_penalty(self, context: PageContext) -> float:
        complexity = context.page_complexity if context.page_complexity is not None else DEFAULT_PAGE_COMPLEXITY
        return max(0.5, 1.0 - complexity / 100)

    def field_complexity(self, element: DOMElement) -> float:
        """Type-based complexity of a form field, 0 for non-fields."""
        if not is_form_field(element):
            return 0.0
        complexity = 0.2 + field_type_complexity(element)
        if element.required:
            complexity += 0.2
        if element.pattern or element.min_length or element.max_length:
            complexity += 0.1
        return min(complexity, 1.0)
