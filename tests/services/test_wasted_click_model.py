"""
Tests for WastedClickModel — form context detection, primary CTA exclusion,
the 14-term scoring breakdown and the analysis summary.
"""

import pytest

from clickpredictor.services.click_prediction.cpc_estimator import CPCEstimator
from clickpredictor.services.click_prediction.wasted_click_model import (
    PrimaryCTARequiredError,
    WastedClickModel,
)
from clickpredictor.services.click_prediction.models import (
    ClickPredictionResult,
    DOMElement,
    PageContext,
)


def _element(**overrides):
    defaults = {
        "tag_name": "a",
        "is_visible": True,
        "is_interactive": True,
        "is_above_fold": True,
        "coordinates": {"x": 40, "y": 20, "width": 60, "height": 20},
    }
    defaults.update(overrides)
    return DOMElement(**defaults)


def _buy_now(**overrides):
    defaults = {
        "id": "cta",
        "tag_name": "button",
        "text": "Buy Now",
        "href": "/checkout",
        "has_button_styling": True,
        "coordinates": {"x": 400, "y": 300, "width": 180, "height": 48},
    }
    defaults.update(overrides)
    return _element(**defaults)


def _home(**overrides):
    defaults = {"id": "home", "text": "Home", "href": "/", "class_name": "nav"}
    defaults.update(overrides)
    return _element(**defaults)


def _context(**overrides):
    defaults = {"total_impressions": 1000, "url": "https://acme.com/shop/product"}
    defaults.update(overrides)
    return PageContext(**defaults)


def _prediction(element_id, clicks):
    return ClickPredictionResult(
        element_id=element_id,
        predicted_clicks=clicks,
        estimated_clicks=round(clicks),
        ctr=clicks / 10,
        click_share=clicks,
        raw_score=0.5,
        click_probability=clicks / 100,
        confidence="medium",
    )


# ============================================================================
# Construction and invariants
# ============================================================================

class TestWastedClickModelInvariants:

    def test_requires_primary_cta(self):
        model = WastedClickModel(_context(), estimated_cpc=4.0)
        with pytest.raises(PrimaryCTARequiredError):
            model.analyze_wasted_clicks([_home()], None)

    def test_error_is_value_error(self):
        model = WastedClickModel(_context(), estimated_cpc=4.0)
        with pytest.raises(ValueError, match="Primary CTA must be identified"):
            model.analyze_wasted_clicks([], None)

    def test_unknown_archetype(self):
        with pytest.raises(ValueError, match="Unknown user archetype"):
            WastedClickModel(_context(), user_archetype="wanderer")

    def test_primary_and_duplicates_excluded(self):
        primary = _buy_now()
        duplicate = _buy_now(id="cta-footer", coordinates={"x": 400, "y": 2400, "width": 180, "height": 48})
        same_destination = _element(id="cta-alt", text="Checkout now", href="/checkout")
        elements = [primary, duplicate, same_destination, _home()]

        analysis = WastedClickModel(_context(), estimated_cpc=4.0).analyze_wasted_clicks(elements, primary)

        analysed_ids = {w.element.id for w in analysis.high_risk_elements}
        assert "cta" not in analysed_ids
        assert "cta-footer" not in analysed_ids
        assert analysis.total_wasted_elements == 2

    def test_non_clickable_skipped(self):
        paragraph = DOMElement(id="copy", tag_name="p", text="Long copy", is_interactive=False)
        analysis = WastedClickModel(_context(), estimated_cpc=4.0).analyze_wasted_clicks(
            [_buy_now(), paragraph], _buy_now()
        )
        assert analysis.total_wasted_elements == 0
        assert analysis.average_wasted_score == 0.0


# ============================================================================
# Form context
# ============================================================================

class TestFormContext:

    def setup_method(self):
        self.model = WastedClickModel(_context(), estimated_cpc=4.0)

    def test_purchase_cta(self):
        context = self.model.detect_form_context(_buy_now(), [_buy_now()])
        assert context.cta_type == "non-form-cta"
        assert context.is_form_related is False
        assert context.primary_form_action == "/checkout"

    def test_signup_cta(self):
        cta = _buy_now(text="Sign up free", href="/start")
        assert self.model.detect_form_context(cta, [cta]).cta_type == "form-cta"

    def test_many_fields_force_form_cta(self):
        cta = _buy_now()
        fields = [_element(tag_name="input", id=f"f{i}") for i in range(3)]
        context = self.model.detect_form_context(cta, [cta] + fields)
        assert context.cta_type == "form-cta"
        assert context.form_field_count == 3

    def test_ambiguous_cta_with_field(self):
        cta = _buy_now(text="Continue", href=None)
        field = _element(tag_name="input", id="email")
        assert self.model.detect_form_context(cta, [cta, field]).cta_type == "form-cta"

    def test_ambiguous_cta_without_fields(self):
        cta = _buy_now(text="Continue", href=None)
        assert self.model.detect_form_context(cta, [cta]).cta_type == "non-form-cta"


# ============================================================================
# Scoring
# ============================================================================

class TestScoring:

    def test_home_link_on_purchase_page(self):
        primary = _buy_now()
        analysis = WastedClickModel(_context(), estimated_cpc=4.0).analyze_wasted_clicks(
            [primary, _home()], primary
        )

        home = analysis.high_risk_elements[0]
        breakdown = home.scoring_breakdown
        assert breakdown.distraction_score == pytest.approx(0.3)
        assert breakdown.visibility_weight == 1.0
        assert breakdown.loopback_penalty == pytest.approx(1.2)
        # top-nav +0.4, then internal navigation on a purchase page x0.8
        assert breakdown.direct_response_penalty == pytest.approx(1.4 * 0.8)
        assert breakdown.click_distraction_index == 0.5

        assert home.wasted_click_score == pytest.approx(0.28 * 1.12)
        assert home.type == "navigation"
        assert home.classification == "wasted-click"
        assert home.recommendation == (
            "CRITICAL (NON-FORM-CTA): Streamline navigation to support purchase decision"
        )

        assert analysis.aggregate_wasted_clicks == 31
        assert analysis.aggregate_wasted_spend == pytest.approx(124.0)

    def test_click_distraction_from_predictions(self):
        model = WastedClickModel(_context(), estimated_cpc=4.0)
        model.primary_cta = _buy_now()
        predictions = [_prediction("cta", 60), _prediction("home", 40)]
        assert model.calculate_click_distraction_index(_home(), predictions) == pytest.approx(0.4)
        assert model.calculate_click_distraction_index(_home(id="nav-x"), predictions) == 0.3

    def test_same_destination_is_supportive(self):
        primary = _buy_now()
        model = WastedClickModel(_context(), estimated_cpc=4.0)
        model.primary_cta = primary
        form_context = model.detect_form_context(primary, [primary])

        alt = _element(id="cta-alt", text="Checkout now", href="/checkout")
        assert model.classify_element(alt, form_context) == "supportive-click"
        breakdown = model.calculate_scoring_breakdown(alt, form_context)
        assert breakdown.cta_duplication_boost == 0.85

    def test_privacy_link_is_neutral(self):
        primary = _buy_now()
        model = WastedClickModel(_context(), estimated_cpc=4.0)
        model.primary_cta = primary
        form_context = model.detect_form_context(primary, [primary])
        privacy = _element(id="privacy", text="Privacy policy", href="/privacy")
        assert model.classify_element(privacy, form_context) == "neutral-click"

    def test_form_field_on_purchase_page(self):
        primary = _buy_now()
        field = _element(id="newsletter", tag_name="input", type="email", text="Email")
        model = WastedClickModel(_context(), estimated_cpc=4.0)
        model.primary_cta = primary
        form_context = model.detect_form_context(primary, [primary, field])

        assert form_context.cta_type == "non-form-cta"
        assert model.classify_element(field, form_context) == "wasted-click"
        breakdown = model.calculate_scoring_breakdown(field, form_context)
        assert breakdown.distraction_score == pytest.approx(0.3 * 1.8)
        assert breakdown.direct_response_penalty == pytest.approx(2.0)

    def test_form_field_on_signup_page(self):
        primary = _buy_now(text="Sign up", href="/signup")
        field = _element(id="email", tag_name="input", type="email", text="Email")
        model = WastedClickModel(_context(), estimated_cpc=4.0)
        model.primary_cta = primary
        form_context = model.detect_form_context(primary, [primary, field])

        assert model.classify_element(field, form_context) == "supportive-click"
        breakdown = model.calculate_scoring_breakdown(field, form_context)
        assert breakdown.distraction_score == pytest.approx(0.3 * 0.2)

    def test_external_links_need_page_host(self):
        link = _element(id="partner", text="Partner", href="https://partner.io")
        with_host = WastedClickModel(_context(), estimated_cpc=4.0)
        without_host = WastedClickModel(_context(url=None), estimated_cpc=4.0)
        assert with_host.calculate_path_loop_penalty(link) == pytest.approx(1.2)
        assert without_host.calculate_path_loop_penalty(link) == 1.0

    def test_scores_sorted_and_bounded(self):
        primary = _buy_now()
        elements = [
            primary,
            _home(),
            _element(id="blog", text="Read our blog", href="/blog", coordinates={"x": 0, "y": 1800, "width": 80, "height": 20}),
            _element(id="fb", text="Facebook", href="https://facebook.com/acme", class_name="social popup"),
            _element(id="terms", text="Terms", href="/terms", coordinates={"x": 0, "y": 2400, "width": 40, "height": 20}),
        ]
        analysis = WastedClickModel(_context(), estimated_cpc=4.0).analyze_wasted_clicks(elements, primary)
        scores = [w.wasted_click_score for w in analysis.high_risk_elements]
        assert scores == sorted(scores, reverse=True)
        assert all(0.0 <= score <= 1.0 for score in scores)


# ============================================================================
# Summary
# ============================================================================

class TestAnalysisSummary:

    def test_improvements_capped(self):
        primary = _buy_now(text="Sign up", href="/signup")
        elements = [primary] + [
            _element(
                id=f"cta-{i}",
                text="Get started today",
                href=f"https://partner{i}.io",
                class_name="nav popup",
                has_button_styling=True,
            )
            for i in range(30)
        ]
        analysis = WastedClickModel(_context(), estimated_cpc=4.0).analyze_wasted_clicks(elements, primary)
        assert analysis.projected_improvements.ctr_improvement <= 0.8
        assert analysis.projected_improvements.fcr_improvement <= 0.7
        assert analysis.projected_improvements.implementation_difficulty == "hard"

    def test_purchase_page_with_form_recommendation(self):
        primary = _buy_now()
        field = _element(id="newsletter", tag_name="input", type="email", text="Email")
        analysis = WastedClickModel(_context(), estimated_cpc=4.0).analyze_wasted_clicks([primary, field], primary)
        assert (
            "PURCHASE OPTIMIZATION: Move secondary forms (newsletter, contact) to post-purchase flow"
            in analysis.recommendations
        )

    def test_cpc_estimated_when_missing(self):
        primary = _buy_now()
        context = _context()
        cpc = CPCEstimator().calculate_estimated_cpc(context).estimated_cpc
        analysis = WastedClickModel(context).analyze_wasted_clicks([primary, _home()], primary)
        assert analysis.aggregate_wasted_spend == pytest.approx(round(analysis.aggregate_wasted_clicks * cpc, 2))
