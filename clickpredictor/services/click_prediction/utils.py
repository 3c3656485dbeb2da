"""
Element helpers shared across the click prediction pipeline.
"""

from typing import Iterable, List, Optional
from urllib.parse import urlparse

from .constants import (
    DEFAULT_FIELD_COMPLEXITY,
    DEFAULT_FOLD_LINE,
    FIELD_TYPE_COMPLEXITY,
    FORM_FIELD_TAGS,
    MOBILE_FOLD_LINE,
)
from .models import DOMElement, PageContext


def lower_text(element: DOMElement) -> str:
    return (element.text or "").lower()


def lower_class(element: DOMElement) -> str:
    return (element.class_name or "").lower()


def lower_href(element: DOMElement) -> str:
    return (element.href or "").lower()


def contains_any(haystack: str, needles: Iterable[str]) -> bool:
    """Case-sensitive substring test; callers lower-case the haystack."""
    return any(needle in haystack for needle in needles)


def is_form_field(element: DOMElement) -> bool:
    return element.tag in FORM_FIELD_TAGS


def field_type_of(field: DOMElement) -> str:
    """Input type; untyped select and textarea fall back to their tag, anything else to text."""
    if field.type:
        return field.type.lower()
    if field.tag in ("select", "textarea"):
        return field.tag
    return "text"


def field_type_complexity(field: DOMElement) -> float:
    return FIELD_TYPE_COMPLEXITY.get(field_type_of(field), DEFAULT_FIELD_COMPLEXITY)


def element_key(element: DOMElement) -> str:
    """Identifier used in predictions when the element carries no id."""
    if element.id:
        return element.id
    box = element.box
    return f"{element.tag or 'element'}-{int(box.x)}-{int(box.y)}"


def assign_element_keys(elements: List[DOMElement]) -> List[DOMElement]:
    """
    Give every id-less element a page-unique id.

    Elements sharing a tag and truncated position get a -2, -3, ... suffix in
    page order. Elements that already carry an id are returned unchanged.
    """
    taken = {element.id for element in elements if element.id}
    keyed = []
    for element in elements:
        if element.id:
            keyed.append(element)
            continue
        base = key = element_key(element)
        suffix = 1
        while key in taken:
            suffix += 1
            key = f"{base}-{suffix}"
        taken.add(key)
        keyed.append(element.model_copy(update={"id": key}))
    return keyed


def hostname_of(url: Optional[str]) -> str:
    if not url:
        return ""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def path_of(url: Optional[str]) -> str:
    if not url:
        return ""
    try:
        return urlparse(url).path or ""
    except ValueError:
        return ""


def fold_line_for(context: PageContext) -> float:
    """Capture-supplied fold line, else the device default."""
    if context.fold_line:
        return context.fold_line
    return MOBILE_FOLD_LINE if context.device_type == "mobile" else DEFAULT_FOLD_LINE


def z_index_of(element: DOMElement) -> float:
    """Numeric z-index from the attribute or style map, 0 when absent or 'auto'."""
    raw = element.z_index
    if raw is None:
        raw = element.style.get("zIndex", element.style.get("z-index"))
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0.0


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(max(value, low), high)
