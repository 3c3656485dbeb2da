"""
Tests for risk assessment — risk factors, confidence tiers, batch reliability
and warnings.
"""

import pytest

from clickpredictor.services.click_prediction.risk import (
    assess_prediction_reliability,
    calculate_confidence_level,
    generate_prediction_warnings,
    generate_risk_factors,
)
from clickpredictor.services.click_prediction.models import DOMElement, PageContext


def _element(**overrides):
    defaults = {
        "id": "buy-now",
        "tag_name": "button",
        "text": "Buy Now",
        "is_visible": True,
        "is_interactive": True,
        "is_above_fold": True,
        "has_button_styling": True,
        "distance_from_top": 200,
        "coordinates": {"x": 100, "y": 200, "width": 160, "height": 48},
    }
    defaults.update(overrides)
    return DOMElement(**defaults)


def _context(**overrides):
    defaults = {"total_impressions": 1000, "traffic_source": "organic", "has_ssl": True}
    defaults.update(overrides)
    return PageContext(**defaults)


# ============================================================================
# Risk factors
# ============================================================================

class TestGenerateRiskFactors:

    def test_clean_cta_only_flags_trust(self):
        risks = generate_risk_factors(_element(), _context())
        assert risks == ["Lack of trust signals for conversion element"]

    def test_capped_at_five(self):
        element = DOMElement(tag_name="div", text="", is_visible=False, is_interactive=False, href="#")
        risks = generate_risk_factors(element, _context(has_ssl=False, traffic_source="social", load_time=8))
        assert len(risks) == 5
        assert risks[0] == "Element is not visible"

    def test_password_without_ssl(self):
        field = DOMElement(tag_name="input", type="password", required=True, is_interactive=True, is_above_fold=True)
        risks = generate_risk_factors(field, _context(has_ssl=False))
        assert "Required field without clear label" in risks
        assert "Password field without SSL" in risks

    def test_poor_ad_match_on_paid(self):
        risks = generate_risk_factors(
            _element(text="Read the guide"),
            _context(traffic_source="paid", ad_message_match=0.3),
        )
        assert "Poor ad-to-page message match" in risks

    def test_small_mobile_target(self):
        element = _element(coordinates={"x": 0, "y": 0, "width": 30, "height": 30})
        risks = generate_risk_factors(element, _context(device_type="mobile"))
        assert "Touch target too small for mobile" in risks


# ============================================================================
# Confidence
# ============================================================================

class TestConfidenceLevel:

    def test_strong_cta_high(self):
        context = _context(total_impressions=5000, traffic_source="paid", load_time=2.0, industry="saas")
        assert calculate_confidence_level(_element(), 0.8, context) == "high"

    def test_weak_element_low(self):
        element = DOMElement(tag_name="div", text="", is_visible=False, is_interactive=False)
        assert calculate_confidence_level(element, 0.01, _context(traffic_source="unknown")) == "low"


# ============================================================================
# Reliability
# ============================================================================

class TestPredictionReliability:

    def test_high_reliability_clamped(self):
        scored = [(_element(), 0.9), (_element(id="b"), 0.1)]
        result = assess_prediction_reliability(scored, _context(total_impressions=20000))
        assert result.score == 1.0
        assert result.level == "high"
        assert "High impression volume" in result.factors
        assert "Good score differentiation" in result.factors

    def test_low_reliability_clamped(self):
        element = DOMElement(tag_name="div", is_interactive=False)
        context = _context(total_impressions=50, traffic_source="unknown", load_time=8, has_ssl=False)
        result = assess_prediction_reliability([(element, 0.2)], context)
        assert result.score == 0.0
        assert result.level == "low"
        assert "Very low impression volume" in result.factors

    def test_empty_batch(self):
        result = assess_prediction_reliability([], _context(has_ssl=False))
        assert result.score == pytest.approx(0.6)
        assert result.level == "medium"


# ============================================================================
# Warnings
# ============================================================================

class TestPredictionWarnings:

    def test_capped_at_three(self):
        elements = [DOMElement(tag_name="div", text="", coordinates={"width": 10, "height": 10})]
        context = _context(total_impressions=10, traffic_source="paid", load_time=9, device_type="mobile")
        warnings = generate_prediction_warnings(elements, context)
        assert len(warnings) == 3
        assert warnings[0] == "Low impression volume may affect prediction accuracy"

    def test_mobile_small_elements(self):
        elements = [_element(coordinates={"width": 20, "height": 20}), _element()]
        warnings = generate_prediction_warnings(elements, _context(device_type="mobile"))
        assert "1 elements may be too small for mobile interaction" in warnings

    def test_no_warnings(self):
        assert generate_prediction_warnings([_element()], _context()) == []
