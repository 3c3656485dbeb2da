"""
Tests for ClickPredictionEngine — the end-to-end prediction pipeline.
"""

import pytest
from pydantic import ValidationError

from clickpredictor.core.config import Config, PredictionConfig
from clickpredictor.services.click_prediction import engine as engine_module
from clickpredictor.services.click_prediction.engine import (
    BATCH_FAILURE_WARNING,
    ClickPredictionEngine,
)
from clickpredictor.services.click_prediction.models import (
    DOMElement,
    PageContext,
    PredictionReport,
    ReliabilityAssessment,
)


def _element(**overrides):
    defaults = {
        "tag_name": "a",
        "is_visible": True,
        "is_interactive": True,
        "is_above_fold": True,
    }
    defaults.update(overrides)
    return DOMElement(**defaults)


def _page():
    return [
        _element(
            id="cta",
            tag_name="button",
            text="Buy Now",
            href="/checkout",
            has_button_styling=True,
            coordinates={"x": 400, "y": 300, "width": 180, "height": 48},
        ),
        _element(
            id="home",
            text="Home",
            href="/",
            class_name="nav",
            coordinates={"x": 40, "y": 20, "width": 60, "height": 20},
        ),
        _element(
            id="pricing",
            text="Pricing",
            href="/pricing",
            coordinates={"x": 120, "y": 20, "width": 70, "height": 20},
        ),
        _element(
            id="tracking-pixel",
            tag_name="img",
            is_visible=False,
            is_interactive=False,
            coordinates={"x": 0, "y": 0, "width": 0, "height": 0},
        ),
    ]


def _context(**overrides):
    defaults = {
        "totalImpressions": 1000,
        "trafficSource": "organic",
        "deviceType": "desktop",
        "url": "https://acme.com/shop/product",
    }
    defaults.update(overrides)
    return defaults


# ============================================================================
# predict_clicks
# ============================================================================

class TestPredictClicks:

    def setup_method(self):
        self.engine = ClickPredictionEngine(config=PredictionConfig())

    @pytest.mark.asyncio
    async def test_purchase_page(self):
        report = await self.engine.predict_clicks(_page(), _context())

        clicks = [p.predicted_clicks for p in report.predictions]
        assert clicks == sorted(clicks, reverse=True)
        assert len(report.predictions) == 3
        assert sum(p.click_share for p in report.predictions) == pytest.approx(100.0)

        assert report.metadata.primary_cta_id == "cta"
        assert report.predictions[0].element_id == "cta"
        assert report.predictions[0].text == "Buy Now"
        assert report.metadata.total_elements == 3
        assert report.metadata.cta_agreement is None

    @pytest.mark.asyncio
    async def test_wasted_click_analysis_excludes_primary(self):
        report = await self.engine.predict_clicks(_page(), _context())

        analysis = report.wasted_click_analysis
        assert analysis is not None
        assert analysis.form_context.cta_type == "non-form-cta"
        assert "cta" not in {w.element.id for w in analysis.high_risk_elements}
        assert any(p.wasted_click_score is not None for p in report.predictions)

        cta = next(p for p in report.predictions if p.element_id == "cta")
        assert cta.wasted_clicks == 0.0

    @pytest.mark.asyncio
    async def test_accepts_capture_dicts(self):
        elements = [el.model_dump(by_alias=True) for el in _page()]
        elements.append({"coordinates": "nonsense"})
        report = await self.engine.predict_clicks(elements, _context())
        assert len(report.predictions) == 3

    @pytest.mark.asyncio
    async def test_invalid_context_raises(self):
        with pytest.raises(ValidationError):
            await self.engine.predict_clicks(_page(), _context(trafficSource="carrier-pigeon"))

    @pytest.mark.asyncio
    async def test_page_context_instance(self):
        context = PageContext(total_impressions=500, traffic_source="paid", url="https://acme.com/")
        report = await self.engine.predict_clicks(_page(), context)
        assert report.predictions

    @pytest.mark.asyncio
    async def test_matcher_tolerance_setting_reaches_matcher(self, monkeypatch):
        tolerances = []

        class RecordingMatcher(engine_module.EnhancedElementMatcher):
            def __init__(self, tolerance):
                tolerances.append(tolerance)
                super().__init__(tolerance=tolerance)

        monkeypatch.setattr(Config, "MATCHER_TOLERANCE", 35.0)
        monkeypatch.setattr(engine_module, "EnhancedElementMatcher", RecordingMatcher)

        await ClickPredictionEngine(config=PredictionConfig()).predict_clicks(_page(), _context())
        assert tolerances == [35.0]

    @pytest.mark.asyncio
    async def test_empty_page(self):
        report = await self.engine.predict_clicks([], _context())
        assert report.predictions == []
        assert report.wasted_click_analysis is None
        assert report.metadata.primary_cta_id is None

    @pytest.mark.asyncio
    async def test_form_page(self):
        elements = _page() + [
            _element(
                id="email",
                tag_name="input",
                type="email",
                label="Work email",
                required=True,
                coordinates={"x": 400, "y": 200, "width": 300, "height": 40},
            ),
            _element(
                id="password",
                tag_name="input",
                type="password",
                required=True,
                coordinates={"x": 400, "y": 250, "width": 300, "height": 40},
            ),
        ]
        report = await self.engine.predict_clicks(elements, _context())

        assert report.form_analysis is not None
        assert report.metadata.form_fields == 2
        email = next(p for p in report.predictions if p.element_id == "email")
        assert email.form_completion_rate == pytest.approx(report.form_analysis.bottleneck_ctr)
        assert email.bottleneck_field == report.form_analysis.bottleneck_field


# ============================================================================
# Detected CTA reconciliation
# ============================================================================

class TestDetectedCTA:

    def setup_method(self):
        self.engine = ClickPredictionEngine(config=PredictionConfig())

    @pytest.mark.asyncio
    async def test_agreement(self):
        report = await self.engine.predict_clicks(_page(), _context(), detected_cta_id="cta")
        assert report.metadata.cta_agreement is True
        assert report.metadata.detected_cta_id == "cta"
        assert report.metadata.primary_cta_id == "cta"

    @pytest.mark.asyncio
    async def test_mismatch_adds_warning(self):
        report = await self.engine.predict_clicks(_page(), _context(), detected_cta_id="home")
        assert report.metadata.cta_agreement is False
        # both identities are reported, neither replaces the other
        assert report.metadata.primary_cta_id == "cta"
        assert report.metadata.detected_cta_id == "home"
        assert "Detected CTA 'home' differs from predicted primary CTA 'cta'" in report.warnings


# ============================================================================
# Batch and single element
# ============================================================================

class TestBatchAndSingle:

    def setup_method(self):
        self.engine = ClickPredictionEngine(config=PredictionConfig())

    @pytest.mark.asyncio
    async def test_batch_isolates_failures(self):
        reports = await self.engine.predict_batch([
            {"elements": _page(), "context": _context()},
            {"elements": _page(), "context": _context(trafficSource="carrier-pigeon")},
            {"elements": _page(), "context": _context(), "detected_cta_id": "cta"},
        ])

        assert len(reports) == 3
        assert reports[0].predictions
        assert reports[1].predictions == []
        assert reports[1].warnings == [BATCH_FAILURE_WARNING]
        assert reports[1].reliability.level == "low"
        assert reports[2].metadata.cta_agreement is True

    def test_single_element(self):
        cta = _page()[0]
        prediction = self.engine.predict_single_element(cta, _context())
        assert prediction.element_id == "cta"
        assert prediction.click_share == pytest.approx(100.0)
        assert prediction.text == "Buy Now"
        assert prediction.tag_name == "button"

    def test_single_element_from_dict(self):
        prediction = self.engine.predict_single_element(
            {"id": "x", "tagName": "a", "text": "Docs", "isInteractive": True, "isVisible": True},
            _context(),
        )
        assert prediction.element_id == "x"
        assert prediction.predicted_clicks > 0


# ============================================================================
# Analytics report
# ============================================================================

class TestAnalyticsReport:

    def setup_method(self):
        self.engine = ClickPredictionEngine(config=PredictionConfig())

    @pytest.mark.asyncio
    async def test_summary(self):
        elements = _page()
        report = await self.engine.predict_clicks(elements, _context())
        analytics = self.engine.generate_analytics_report(report, elements)

        total = sum(p.predicted_clicks for p in report.predictions)
        assert analytics.summary.element_count == 3
        assert analytics.summary.top_element_id == "cta"
        assert analytics.summary.total_predicted_clicks == pytest.approx(total)
        assert analytics.click_distribution.above_fold == pytest.approx(total)
        assert analytics.click_distribution.below_fold == 0.0
        assert analytics.click_distribution.forms == 0.0

    def test_empty_report(self):
        report = PredictionReport(reliability=ReliabilityAssessment(score=0.0, level="low"))
        analytics = self.engine.generate_analytics_report(report)
        assert analytics.summary.element_count == 0
        assert analytics.summary.top_element_id is None
        assert analytics.recommendations == []


# ============================================================================
# Elements without ids
# ============================================================================

class TestIdlessElements:

    def setup_method(self):
        self.engine = ClickPredictionEngine(config=PredictionConfig())

    @pytest.mark.asyncio
    async def test_primary_resolved_exactly_with_fractional_coordinates(self):
        elements = [
            _element(
                text="Buy now",
                href="/checkout",
                has_button_styling=True,
                coordinates={"x": 100.5, "y": 100, "width": 160, "height": 48},
            ),
            _element(
                text="About us",
                href="/about",
                coordinates={"x": 90, "y": 95, "width": 80, "height": 20},
            ),
        ]
        report = await self.engine.predict_clicks(elements, _context())

        assert report.predictions[0].text == "Buy now"
        assert report.metadata.primary_cta_id == "a-100-100"
        wasted_texts = [w.element.text for w in report.wasted_click_analysis.high_risk_elements]
        assert "Buy now" not in wasted_texts
        assert "About us" in wasted_texts

    @pytest.mark.asyncio
    async def test_colliding_positions_get_distinct_ids(self):
        elements = [
            _element(text="Docs", href="/docs", coordinates={"x": 10.2, "y": 20, "width": 40, "height": 16}),
            _element(text="Blog", href="/blog", coordinates={"x": 10.7, "y": 20.4, "width": 40, "height": 16}),
        ]
        report = await self.engine.predict_clicks(elements, _context())

        ids = {p.element_id for p in report.predictions}
        assert ids == {"a-10-20", "a-10-20-2"}
        assert {p.text for p in report.predictions} == {"Docs", "Blog"}
