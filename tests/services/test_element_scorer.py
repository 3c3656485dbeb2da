"""
Tests for ElementScorer — linear scoring, modifiers, form-aware scoring.
"""

import pytest

from clickpredictor.services.click_prediction.scoring import ElementScorer
from clickpredictor.services.click_prediction.models import DOMElement, PageContext
from clickpredictor.services.click_prediction.constants import MIN_SCORE


def _element(**overrides):
    defaults = {
        "id": "buy-now",
        "tag_name": "button",
        "text": "Buy Now",
        "href": "/checkout",
        "is_visible": True,
        "is_interactive": True,
        "is_above_fold": True,
        "has_button_styling": True,
        "distance_from_top": 200,
    }
    defaults.update(overrides)
    return DOMElement(**defaults)


def _field(**overrides):
    defaults = {
        "id": "field-email",
        "tag_name": "input",
        "type": "text",
        "is_visible": True,
        "is_interactive": True,
        "is_above_fold": True,
        "distance_from_top": 400,
    }
    defaults.update(overrides)
    return DOMElement(**defaults)


def _context(**overrides):
    defaults = {"total_impressions": 1000, "traffic_source": "organic", "device_type": "desktop"}
    defaults.update(overrides)
    return PageContext(**defaults)


# ============================================================================
# Construction
# ============================================================================

class TestElementScorerInit:

    def test_unknown_weight_rejected(self):
        with pytest.raises(ValueError, match="Unknown feature weights"):
            ElementScorer(weights={"made_up_feature": 0.5})

    def test_weight_override_applied(self):
        scorer = ElementScorer(weights={"visibility_score": 0.5})
        assert scorer.weights["visibility_score"] == 0.5
        assert scorer.weights["information_scent"] == 0.12


# ============================================================================
# Single element scoring
# ============================================================================

class TestScoreElement:

    def setup_method(self):
        self.scorer = ElementScorer()
        self.context = _context()

    def test_cta_outscores_nav_link(self):
        button = self.scorer.score_element(_element(), self.context)
        nav = self.scorer.score_element(
            _element(id="home", tag_name="a", text="Home", href="/", has_button_styling=False),
            self.context,
        )
        assert button.score > nav.score

    def test_invisible_element_penalised(self):
        visible = self.scorer.score_element(_element(), self.context)
        hidden = self.scorer.score_element(_element(is_visible=False), self.context)
        assert hidden.score < visible.score

    def test_below_fold_penalised(self):
        above = self.scorer.score_element(_element(), self.context)
        below = self.scorer.score_element(_element(is_above_fold=False, distance_from_top=1800), self.context)
        assert below.score < above.score

    def test_score_never_below_floor(self):
        element = DOMElement(tag_name="div", is_visible=False, is_interactive=False, href="#")
        scored = self.scorer.score_element(element, _context(page_complexity=100, load_time=20))
        assert scored.score >= MIN_SCORE


# ============================================================================
# Batch scoring
# ============================================================================

class TestScoreElements:

    def test_caps_batch_size(self):
        scorer = ElementScorer(max_elements=2)
        elements = [_element(id=f"cta-{i}") for i in range(3)]
        scored = scorer.score_elements(elements, _context())
        assert len(scored) == 2
        assert [s.element.id for s in scored] == ["cta-0", "cta-1"]

    def test_form_aware_routes_fields(self):
        scorer = ElementScorer()
        context = _context()
        plain = scorer.score_elements([_field()], context)[0]
        form_aware = scorer.score_elements([_field()], context, form_aware=True)[0]

        # complexity 0.3, above fold 0.8, no label 0.0, no validation 0.3, no autocomplete 0.2
        expected = 0.92 * 1.12 * 0.8 * 0.92 * 0.88
        assert form_aware.score == pytest.approx(plain.score * expected)


# ============================================================================
# Form helpers
# ============================================================================

class TestFormHelpers:

    def test_label_clarity_full(self):
        field = _field(label="Email address", placeholder="you@example.com")
        assert ElementScorer.label_clarity(field) == pytest.approx(1.0)

    def test_label_clarity_placeholder_only(self):
        assert ElementScorer.label_clarity(_field(placeholder="Email")) == pytest.approx(0.3)

    def test_has_validation(self):
        assert ElementScorer.has_validation(_field(required=True))
        assert ElementScorer.has_validation(_field(min_length=0))
        assert not ElementScorer.has_validation(_field())
