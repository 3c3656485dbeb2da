"""
Data Adapter for the Click Prediction Engine

Converts a raw page capture payload (buttons, links, forms, formFields) into
DOMElement records and a PageContext.
"""

import logging
from typing import Dict, List, Optional, Any, Set

from ..services.click_prediction.constants import CAPTURE_FOLD_LINE
from ..services.click_prediction.models import DOMElement, PageContext


logger = logging.getLogger(__name__)

DEDUP_GRID_PX = 50

# (name fragments, label) checked in order against the field name
NAME_LABELS = [
    (("first", "fname"), "First Name Field"),
    (("last", "lname"), "Last Name Field"),
    (("email",), "Email Field"),
    (("phone", "tel"), "Phone Field"),
    (("company", "organization"), "Company Field"),
    (("country",), "Country Field"),
    (("message", "description"), "Message Field"),
    (("job", "title"), "Job Title Field"),
    (("privacy", "optin"), "Privacy Consent"),
]

PLACEHOLDER_LABELS = [
    ("first name", "First Name Field"),
    ("last name", "Last Name Field"),
    ("email", "Email Field"),
    ("phone", "Phone Field"),
    ("company", "Company Field"),
]


def prepare_elements(dom_data: Dict[str, Any]) -> List[DOMElement]:
    """
    Convert a capture payload into DOMElement records.

    Buttons and links without visible text are skipped, form fields are
    deduplicated and fields with no rendered size are dropped.

    Args:
        dom_data: Capture payload with buttons, links, forms and formFields lists

    Returns:
        List of DOMElement in capture order (buttons, links, forms, fields)

    Raises:
        ValueError: If dom_data is not a mapping
    """
    if not isinstance(dom_data, dict):
        raise ValueError(f"Capture payload must be a mapping, got {type(dom_data).__name__}")

    fold_line = _fold_line(dom_data)
    elements: List[DOMElement] = []

    for button in dom_data.get('buttons') or []:
        if not button.get('isVisible') or not (button.get('text') or '').strip():
            continue
        elements.append(_build_button(button))

    for link in dom_data.get('links') or []:
        if not link.get('isVisible') or not (link.get('text') or '').strip():
            continue
        elements.append(_build_link(link))

    for form in dom_data.get('forms') or []:
        elements.append(_build_form(form))

    raw_fields = dom_data.get('formFields') or []
    fields = deduplicate_form_fields(raw_fields)
    for field in fields:
        coords = field.get('coordinates') or {}
        if (coords.get('width') or 0) <= 0 or (coords.get('height') or 0) <= 0:
            continue
        elements.append(_build_field(field, fold_line))

    logger.debug(
        f"Converted capture: {len(elements)} elements "
        f"({len(raw_fields)} form fields, {len(fields)} after dedup)"
    )
    return elements


def prepare_page_context(dom_data: Dict[str, Any], **overrides: Any) -> PageContext:
    """
    Build a PageContext for a capture payload.

    Capture payloads carry no analytics, so load time, ad match, brand
    recognition and complexity get neutral defaults. Overrides use the
    PageContext field names (snake_case or camelCase).

    Args:
        dom_data: Capture payload
        **overrides: PageContext fields to set explicitly

    Returns:
        PageContext with dom_content set to the payload
    """
    values: Dict[str, Any] = {
        "url": dom_data.get('url'),
        "title": dom_data.get('title'),
        "load_time": 3.0,
        "ad_message_match": 0.7,
        "has_ssl": True,
        "brand_recognition": 0.5,
        "page_complexity": 50,
        "viewport_width": 1920,
        "viewport_height": 1080,
        "fold_line": _fold_line(dom_data),
        "dom_content": dom_data,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return PageContext.model_validate(values)


def deduplicate_form_fields(fields: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Drop repeated form fields.

    A field is a duplicate when another field with the same name and type was
    already seen, or one sits on the same 50px grid cell.
    """
    unique: List[Dict[str, Any]] = []
    seen: Set[str] = set()

    for field in fields:
        attributes = field.get('attributes') or {}
        name = field.get('name') or attributes.get('name') or attributes.get('id') or ""
        field_type = field.get('type') or "text"
        coords = field.get('coordinates') or {}
        x = _round_to_grid(coords.get('x') or 0)
        y = _round_to_grid(coords.get('y') or 0)

        position_key = f"{name}-{field_type}-{x}-{y}"
        name_key = f"{name}-{field_type}"
        if position_key in seen or name_key in seen:
            continue

        unique.append(field)
        seen.add(position_key)
        seen.add(name_key)

    if len(unique) < len(fields):
        logger.debug(f"Form field deduplication: {len(fields)} -> {len(unique)}")
    return unique


def infer_field_label(field: Dict[str, Any]) -> str:
    """Human-readable label for a captured form field."""
    attributes = field.get('attributes') or {}
    placeholder = attributes.get('placeholder')
    name = field.get('name')

    label = placeholder or name or attributes.get('id') or f"{field.get('type') or 'text'} field"

    if name:
        lowered = name.lower()
        for fragments, candidate in NAME_LABELS:
            if any(fragment in lowered for fragment in fragments):
                label = candidate
                break

    if placeholder and "Field" not in label:
        lowered = placeholder.lower()
        for fragment, candidate in PLACEHOLDER_LABELS:
            if fragment in lowered:
                label = candidate
                break

    return label


def _build_button(button: Dict[str, Any]) -> DOMElement:
    coords = button.get('coordinates') or {}
    return DOMElement(
        id=f"button-{_id_part(coords.get('x'))}-{_id_part(coords.get('y'))}",
        tag_name="button",
        text=button.get('text'),
        class_name=button.get('className') or "",
        coordinates=coords or None,
        is_visible=True,
        is_above_fold=bool(button.get('isAboveFold')),
        is_interactive=True,
        has_button_styling=True,
        type=button.get('type'),
        distance_from_top=button.get('distanceFromTop'),
        form_action=button.get('formAction'),
    )


def _build_link(link: Dict[str, Any]) -> DOMElement:
    coords = link.get('coordinates') or {}
    return DOMElement(
        id=f"link-{_id_part(coords.get('x'))}-{_id_part(coords.get('y'))}",
        tag_name="a",
        text=link.get('text'),
        class_name=link.get('className') or "",
        coordinates=coords or None,
        is_visible=True,
        is_above_fold=bool(link.get('isAboveFold')),
        is_interactive=True,
        has_button_styling=bool(link.get('hasButtonStyling')),
        distance_from_top=link.get('distanceFromTop'),
        href=link.get('href'),
    )


def _build_form(form: Dict[str, Any]) -> DOMElement:
    coords = form.get('coordinates') or {}
    return DOMElement(
        id=f"form-{_id_part(coords.get('x'))}-{_id_part(coords.get('y'))}",
        tag_name="form",
        text=form.get('submitButtonText') or "Submit",
        class_name="",
        coordinates=coords or None,
        is_visible=True,
        is_above_fold=bool(form.get('isAboveFold')),
        is_interactive=True,
        has_button_styling=bool(form.get('hasSubmitButton')),
        distance_from_top=form.get('distanceFromTop'),
    )


def _build_field(field: Dict[str, Any], fold_line: float) -> DOMElement:
    coords = field.get('coordinates') or {}
    attributes = field.get('attributes') or {}
    field_type = field.get('type')
    label = infer_field_label(field)

    if field_type in ("textarea", "select"):
        tag_name = field_type
    else:
        tag_name = "input"

    y = coords.get('y') or 0
    return DOMElement(
        id=f"field-{_id_part(coords.get('x'))}-{_id_part(y)}-{field_type}",
        tag_name=tag_name,
        text=label,
        class_name=attributes.get('className') or "",
        coordinates=coords,
        is_visible=True,
        is_above_fold=y < fold_line,
        is_interactive=True,
        has_button_styling=False,
        type=field_type,
        name=field.get('name'),
        required=bool(field.get('required')),
        label=label,
        placeholder=attributes.get('placeholder'),
        has_autocomplete=bool(attributes.get('autocomplete')),
        pattern=attributes.get('pattern'),
        min_length=_parse_int(attributes.get('minlength')),
        max_length=_parse_int(attributes.get('maxlength')),
        distance_from_top=y,
    )


def _fold_line(dom_data: Dict[str, Any]) -> float:
    fold = dom_data.get('foldLine')
    if isinstance(fold, dict):
        fold = fold.get('position')
    return fold or CAPTURE_FOLD_LINE


def _round_to_grid(value: float) -> int:
    return int(round(value / DEDUP_GRID_PX)) * DEDUP_GRID_PX


def _id_part(value: Optional[float]) -> str:
    """Coordinate as it appears in generated ids (integral floats without '.0')."""
    if value is None:
        return "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _parse_int(value: Any) -> Optional[int]:
    """Parse integer attributes like minlength, ignoring garbage"""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring non-integer attribute value: {value!r}")
        return None
