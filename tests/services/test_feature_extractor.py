"""
Tests for FeatureExtractor — per-element feature formulas.

Each feature is checked against hand-computed values for representative
elements; missing optional inputs must fall back to neutral values.
"""

import pytest

from clickpredictor.services.click_prediction.features import (
    FeatureExtractor,
    brand_recognition_value,
)
from clickpredictor.services.click_prediction.models import DOMElement, PageContext
from clickpredictor.services.click_prediction.constants import FEATURE_WEIGHTS
from clickpredictor.services.click_prediction.utils import field_type_of


def _element(**overrides):
    """Create an above-fold 'Buy Now' button with defaults."""
    defaults = {
        "id": "buy-now",
        "tag_name": "button",
        "text": "Buy Now",
        "class_name": "btn btn-primary",
        "is_visible": True,
        "is_interactive": True,
        "is_above_fold": True,
        "has_button_styling": True,
        "distance_from_top": 200,
    }
    defaults.update(overrides)
    return DOMElement(**defaults)


def _context(**overrides):
    defaults = {"total_impressions": 1000}
    defaults.update(overrides)
    return PageContext(**defaults)


# ============================================================================
# Feature vector
# ============================================================================

class TestExtractFeatures:
    """extract_features returns every weighted feature."""

    def setup_method(self):
        self.extractor = FeatureExtractor()

    def test_feature_names_match_weights(self):
        features = self.extractor.extract_features(_element(), _context())
        assert set(features.as_dict()) == set(FEATURE_WEIGHTS)

    def test_bare_element_does_not_raise(self):
        features = self.extractor.extract_features(DOMElement(), PageContext())
        assert features.information_scent == 0.0
        assert features.intent_score == 0.0
        assert features.field_complexity == 0.0


# ============================================================================
# Core interaction features
# ============================================================================

class TestInteractionFeatures:

    def setup_method(self):
        self.extractor = FeatureExtractor()

    def test_visibility_invisible(self):
        assert self.extractor.visibility_score(_element(is_visible=False)) == 0.0

    def test_visibility_above_fold(self):
        assert self.extractor.visibility_score(_element()) == 0.8

    def test_visibility_below_fold(self):
        assert self.extractor.visibility_score(_element(is_above_fold=False)) == 0.4

    def test_information_scent_with_action_keyword(self):
        # 7 chars / 50 * 0.7 + 0.3 action bonus
        assert self.extractor.information_scent(_element()) == pytest.approx(0.398)

    def test_information_scent_without_keyword(self):
        assert self.extractor.information_scent(_element(text="About our team")) == pytest.approx(0.196)

    def test_information_scent_capped(self):
        assert self.extractor.information_scent(_element(text="x" * 200)) == 1.0

    def test_friction_required_form_field(self):
        field = _element(tag_name="input", type="email", required=True)
        assert self.extractor.friction_score(field) == pytest.approx(0.45)

    def test_friction_submit_button(self):
        assert self.extractor.friction_score(_element(type="submit")) == pytest.approx(0.7)

    def test_interactivity_tiers(self):
        assert self.extractor.interactivity_score(_element()) == 0.8
        assert self.extractor.interactivity_score(_element(has_button_styling=False)) == 0.6
        assert self.extractor.interactivity_score(_element(is_interactive=False)) == 0.2

    def test_heatmap_above_fold(self):
        assert self.extractor.heatmap_attention(_element()) == pytest.approx(0.8)

    def test_heatmap_below_fold_floor(self):
        element = _element(is_above_fold=False, distance_from_top=1500)
        assert self.extractor.heatmap_attention(element) == pytest.approx(0.1)

    def test_heatmap_uses_coordinates_when_distance_missing(self):
        element = _element(distance_from_top=None, coordinates={"x": 0, "y": 500, "width": 100, "height": 40})
        assert self.extractor.heatmap_attention(element) == pytest.approx(0.5)


# ============================================================================
# Content and credibility features
# ============================================================================

class TestContentFeatures:

    def setup_method(self):
        self.extractor = FeatureExtractor()

    def test_credibility_full(self):
        context = _context(has_ssl=True, has_trust_badges=True, has_testimonials=True, brand_recognition="high")
        assert self.extractor.credibility_score(context) == pytest.approx(1.0)

    def test_credibility_ssl_only(self):
        assert self.extractor.credibility_score(_context(has_ssl=True)) == pytest.approx(0.2)

    def test_brand_recognition_labels(self):
        assert brand_recognition_value(_context(brand_recognition="medium")) == 0.5
        assert brand_recognition_value(_context(brand_recognition=1.5)) == 1.0
        assert brand_recognition_value(_context()) == 0.0

    def test_intent_cta_text(self):
        assert self.extractor.intent_score(_element(text="Get started")) == 1.0

    def test_intent_plain_text(self):
        assert self.extractor.intent_score(_element(text="About our team")) == 0.0

    def test_visual_affordance_styled_button(self):
        assert self.extractor.visual_affordance_score(_element()) == pytest.approx(1.0)

    def test_visual_affordance_plain_link(self):
        element = _element(tag_name="a", has_button_styling=False, class_name="")
        assert self.extractor.visual_affordance_score(element) == pytest.approx(0.2)

    def test_scroll_depth_below_fold(self):
        element = _element(is_above_fold=False, distance_from_top=1500)
        assert self.extractor.scroll_depth_score(element) == pytest.approx(0.5)


# ============================================================================
# Performance, boosts and penalties
# ============================================================================

class TestBoostsAndPenalties:

    def setup_method(self):
        self.extractor = FeatureExtractor()

    def test_performance_default_load_time(self):
        assert self.extractor.performance_score(_context()) == pytest.approx(0.9)

    def test_performance_slow_page(self):
        assert self.extractor.performance_score(_context(load_time=12)) == 0.0

    def test_urgency_stacks(self):
        # "limited" and "today" are urgency words, "limited" adds its own boost
        element = _element(text="Limited offer today")
        assert self.extractor.urgency_boost(element) == pytest.approx(1.3 * 1.2)

    def test_urgency_countdown(self):
        element = _element(text="Ends in 10:00")
        assert self.extractor.urgency_boost(element) == pytest.approx(1.4)

    def test_segment_modifier(self):
        assert self.extractor.segment_modifier() == pytest.approx(1.32)

    def test_trust_boost(self):
        assert self.extractor.trust_boost(_element(text="Secure checkout")) == pytest.approx(1.2)

    def test_cross_device_priming_mobile_touch_target(self):
        element = _element(coordinates={"x": 0, "y": 0, "width": 120, "height": 48})
        context = _context(device_type="mobile")
        assert self.extractor.cross_device_priming(element, context) == pytest.approx(1.1)

    def test_dead_click_risk(self):
        element = _element(tag_name="a", is_interactive=False, href="#")
        assert self.extractor.dead_click_risk(element) == pytest.approx(1.0)

    def test_cognitive_load_defaults_to_midpoint(self):
        assert self.extractor.cognitive_load_penalty(_context()) == pytest.approx(0.5)
        assert self.extractor.cognitive_load_penalty(_context(page_complexity=20)) == pytest.approx(0.8)

    def test_field_complexity_non_field(self):
        assert self.extractor.field_complexity(_element()) == 0.0

    def test_field_complexity_required_email(self):
        field = _element(tag_name="input", type="email", required=True)
        assert self.extractor.field_complexity(field) == pytest.approx(0.7)

    def test_field_complexity_with_validation(self):
        field = _element(tag_name="input", type="email", required=True, pattern=".+@.+")
        assert self.extractor.field_complexity(field) == pytest.approx(0.8)

    def test_field_complexity_untyped_input_is_text(self):
        field = _element(tag_name="input", type=None)
        assert self.extractor.field_complexity(field) == pytest.approx(0.3)
        assert field_type_of(field) == "text"

    def test_field_complexity_untyped_select(self):
        field = _element(tag_name="select", type=None)
        assert self.extractor.field_complexity(field) == pytest.approx(0.4)
        assert field_type_of(field) == "select"

    def test_auto_completion(self):
        features = self.extractor.extract_features(_element(has_autocomplete=True), _context())
        assert features.auto_completion == 0.8
