"""Unit tests for the capture payload adapter (prepare_elements, prepare_page_context).

Payloads mirror what the page capture tool emits: float coordinates, blank
button text, duplicated form fields and zero-size hidden inputs.
"""

import pytest

from clickpredictor.services.click_prediction.constants import CAPTURE_FOLD_LINE
from clickpredictor.scoring.data_adapter import (
    deduplicate_form_fields,
    infer_field_label,
    prepare_elements,
    prepare_page_context,
)


@pytest.fixture
def capture():
    return {
        "url": "https://acme.com/pricing",
        "title": "Pricing - Acme",
        "foldLine": {"position": 700},
        "buttons": [
            {
                "text": "Start free trial",
                "isVisible": True,
                "isAboveFold": True,
                "className": "btn btn-primary",
                "coordinates": {"x": 100.0, "y": 200.0, "width": 160, "height": 48},
            },
            {"text": "   ", "isVisible": True, "coordinates": {"x": 5, "y": 5, "width": 10, "height": 10}},
            {"text": "Hidden", "isVisible": False, "coordinates": {"x": 5, "y": 5, "width": 10, "height": 10}},
        ],
        "links": [
            {
                "text": "Docs",
                "href": "/docs",
                "isVisible": True,
                "isAboveFold": True,
                "coordinates": {"x": 10, "y": 20, "width": 40, "height": 16},
            },
        ],
        "forms": [
            {"hasSubmitButton": True, "isAboveFold": True, "coordinates": {"x": 50, "y": 600, "width": 400, "height": 300}},
        ],
        "formFields": [
            {
                "name": "email",
                "type": "email",
                "required": True,
                "coordinates": {"x": 60, "y": 650, "width": 300, "height": 40},
                "attributes": {"placeholder": "you@company.com", "autocomplete": "email", "minlength": "5", "maxlength": "abc"},
            },
            {"name": "email", "type": "email", "coordinates": {"x": 60, "y": 900, "width": 300, "height": 40}},
            {"name": "company", "type": "text", "coordinates": {"x": 60, "y": 720, "width": 300, "height": 40}},
            {"name": "token", "type": "hidden", "coordinates": {"x": 0, "y": 0, "width": 0, "height": 0}},
        ],
    }


# ---------------------------------------------------------------------------
# prepare_elements
# ---------------------------------------------------------------------------

class TestPrepareElements:
    def test_ids_and_order(self, capture):
        elements = prepare_elements(capture)
        assert [e.id for e in elements] == [
            "button-100-200",
            "link-10-20",
            "form-50-600",
            "field-60-650-email",
            "field-60-720-text",
        ]

    def test_button(self, capture):
        button = prepare_elements(capture)[0]
        assert button.tag_name == "button"
        assert button.text == "Start free trial"
        assert button.has_button_styling is True
        assert button.is_interactive is True
        assert button.is_above_fold is True
        assert button.coordinates.width == 160

    def test_link(self, capture):
        link = prepare_elements(capture)[1]
        assert link.tag_name == "a"
        assert link.href == "/docs"
        assert link.has_button_styling is False

    def test_form_defaults(self, capture):
        form = prepare_elements(capture)[2]
        assert form.tag_name == "form"
        assert form.text == "Submit"
        assert form.has_button_styling is True

    def test_field_attributes(self, capture):
        email = prepare_elements(capture)[3]
        assert email.tag_name == "input"
        assert email.label == "Email Field"
        assert email.required is True
        assert email.has_autocomplete is True
        assert email.min_length == 5
        assert email.max_length is None
        assert email.placeholder == "you@company.com"

    def test_field_fold_uses_capture_fold_line(self, capture):
        elements = prepare_elements(capture)
        assert elements[3].is_above_fold is True   # y=650 < 700
        assert elements[4].is_above_fold is False  # y=720

    def test_default_fold_line(self, capture):
        del capture["foldLine"]
        company = prepare_elements(capture)[4]
        assert company.is_above_fold is True  # y=720 < 800

    def test_textarea_tag(self):
        payload = {"formFields": [{"name": "message", "type": "textarea", "coordinates": {"x": 0, "y": 10, "width": 200, "height": 80}}]}
        field = prepare_elements(payload)[0]
        assert field.tag_name == "textarea"
        assert field.label == "Message Field"

    def test_empty_payload(self):
        assert prepare_elements({}) == []

    def test_not_a_mapping(self):
        with pytest.raises(ValueError, match="must be a mapping"):
            prepare_elements(["buttons"])


# ---------------------------------------------------------------------------
# prepare_page_context
# ---------------------------------------------------------------------------

class TestPreparePageContext:
    def test_defaults(self, capture):
        context = prepare_page_context(capture)
        assert context.url == "https://acme.com/pricing"
        assert context.title == "Pricing - Acme"
        assert context.load_time == 3.0
        assert context.ad_message_match == 0.7
        assert context.has_ssl is True
        assert context.page_complexity == 50
        assert context.fold_line == 700
        assert context.dom_content == capture

    def test_overrides(self, capture):
        context = prepare_page_context(capture, industry="saas", traffic_source="paid", url=None)
        assert context.industry == "saas"
        assert context.traffic_source == "paid"
        # None overrides are ignored
        assert context.url == "https://acme.com/pricing"

    def test_numeric_fold_line(self):
        assert prepare_page_context({"foldLine": 650}).fold_line == 650
        assert prepare_page_context({}).fold_line == CAPTURE_FOLD_LINE == 800


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

class TestDeduplicateFormFields:
    def test_same_name_and_type(self):
        fields = [
            {"name": "email", "type": "email", "coordinates": {"x": 0, "y": 0}},
            {"name": "email", "type": "email", "coordinates": {"x": 0, "y": 500}},
        ]
        assert len(deduplicate_form_fields(fields)) == 1

    def test_different_types_kept(self):
        fields = [
            {"name": "contact", "type": "email", "coordinates": {"x": 0, "y": 0}},
            {"name": "contact", "type": "tel", "coordinates": {"x": 0, "y": 0}},
        ]
        assert len(deduplicate_form_fields(fields)) == 2

    def test_name_from_attributes(self):
        fields = [
            {"type": "text", "attributes": {"id": "fname"}, "coordinates": {"x": 0, "y": 0}},
            {"type": "text", "attributes": {"id": "fname"}, "coordinates": {"x": 20, "y": 10}},
        ]
        assert len(deduplicate_form_fields(fields)) == 1


class TestInferFieldLabel:
    def test_from_name(self):
        assert infer_field_label({"name": "fname"}) == "First Name Field"
        assert infer_field_label({"name": "work_phone"}) == "Phone Field"

    def test_from_placeholder(self):
        assert infer_field_label({"attributes": {"placeholder": "Your phone number"}}) == "Phone Field"

    def test_placeholder_when_name_unknown(self):
        field = {"name": "zip", "attributes": {"placeholder": "Enter email"}}
        assert infer_field_label(field) == "Email Field"

    def test_raw_placeholder_kept(self):
        assert infer_field_label({"attributes": {"placeholder": "Coupon code"}}) == "Coupon code"

    def test_type_fallback(self):
        assert infer_field_label({"type": "url"}) == "url field"
        assert infer_field_label({}) == "text field"
