"""
Tests for TrafficAnalyzer — bounce rate, total clicks and traffic adjustments.
"""

import pytest

from clickpredictor.services.click_prediction.traffic import TrafficAnalyzer
from clickpredictor.services.click_prediction.models import PageContext


def _context(**overrides):
    defaults = {"total_impressions": 1000, "traffic_source": "paid", "device_type": "desktop"}
    defaults.update(overrides)
    return PageContext(**defaults)


class TestBounceRate:
    """Base rate by source, scaled by device, load time and ad match, clamped."""

    def setup_method(self):
        self.analyzer = TrafficAnalyzer()

    def test_paid_desktop_baseline(self):
        assert self.analyzer.calculate_bounce_rate("paid", "desktop") == pytest.approx(0.65)

    def test_mobile_modifier(self):
        assert self.analyzer.calculate_bounce_rate("paid", "mobile") == pytest.approx(0.65 * 0.85)

    def test_slow_page_increases_bounce(self):
        assert self.analyzer.calculate_bounce_rate("paid", "desktop", load_time=5.0) == pytest.approx(0.78)

    def test_ad_match_reduces_bounce(self):
        rate = self.analyzer.calculate_bounce_rate("paid", "desktop", ad_message_match=0.5)
        assert rate == pytest.approx(0.585)

    def test_unknown_source_default(self):
        assert self.analyzer.calculate_bounce_rate("unknown", "desktop") == pytest.approx(0.6)

    def test_clamped_high(self):
        assert self.analyzer.calculate_bounce_rate("social", "mobile", load_time=10.0) == pytest.approx(0.9)


class TestTrafficModifiers:

    def setup_method(self):
        self.analyzer = TrafficAnalyzer()

    def test_total_clicks(self):
        modifiers = self.analyzer.calculate_traffic_modifiers(_context())
        assert modifiers.bounce_rate == pytest.approx(0.65)
        assert modifiers.engagement_rate == pytest.approx(0.35)
        assert modifiers.total_clicks == pytest.approx(1000 * 0.35 * 2.3)

    def test_source_and_device_modifiers(self):
        modifiers = self.analyzer.calculate_traffic_modifiers(_context(traffic_source="email", device_type="tablet"))
        assert modifiers.traffic_source_modifier == pytest.approx(1.1)
        assert modifiers.device_modifier == pytest.approx(0.95)

    def test_zero_impressions(self):
        modifiers = self.analyzer.calculate_traffic_modifiers(_context(total_impressions=0))
        assert modifiers.total_clicks == 0.0


class TestTrafficAdjustments:

    def setup_method(self):
        self.analyzer = TrafficAnalyzer()

    def test_paid_saas(self):
        adjusted = self.analyzer.apply_traffic_adjustments(1.0, _context(industry="saas"))
        assert adjusted == pytest.approx(1.2 * 1.0 * 1.2)

    def test_unknown_industry_unchanged(self):
        assert self.analyzer.apply_industry_modifiers(0.5, None, "cta_click_rate") == 0.5

    def test_unknown_modifier_type(self):
        with pytest.raises(ValueError, match="Unknown industry modifier"):
            self.analyzer.apply_industry_modifiers(0.5, "saas", "bogus_rate")
