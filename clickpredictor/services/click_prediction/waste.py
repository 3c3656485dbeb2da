"""
4-phase waste attribution.

Assigns every element a wasted-click rate built from four independent phases
plus a legacy quality layer, capped at MAX_WASTE_RATE:

    Phase 1  element classification (first matching category wins)
    Phase 2  page attention ratio (interactive elements per primary CTA)
    Phase 3  visual emphasis (contrast, rotation, overlays, stickiness)
    Phase 4  content clutter (long copy, decorative images, animation)
    Legacy   interactivity, styling, fold and text-length penalties
"""

from typing import List, Optional, Tuple

from .constants import (
    ATTENTION_RATIO_PENALTIES,
    CONTENT_CLUTTER_PENALTIES,
    ELEMENT_CATEGORY_LABELS,
    ELEMENT_WASTE_RATES,
    HIGH_Z_INDEX,
    LEGACY_QUALITY_PENALTIES,
    LONG_TEXT_LENGTH,
    MAX_WASTE_RATE,
    VISUAL_EMPHASIS_PENALTIES,
)
from .models import DOMElement, PageContext, WasteBreakdown
from .utils import contains_any, hostname_of, lower_class, lower_href, lower_text, z_index_of


PRIMARY_CTA_TEXT = ["buy", "purchase", "order", "subscribe", "sign up", "get started", "download", "try free"]
PRIMARY_CTA_CLASSES = ["primary", "cta", "btn-primary"]
NAVIGATION_CLASSES = ["nav", "menu", "header", "breadcrumb"]
NAVIGATION_TEXT = {"home", "menu"}
SOCIAL_HREFS = ["facebook", "twitter", "instagram", "linkedin", "youtube", "tiktok"]
SOCIAL_TEXT = ["follow", "share"]
INTERRUPTIVE_CLASSES = ["modal", "popup", "overlay", "notification", "alert", "banner", "toast"]
AUTOPLAY_CLASSES = ["autoplay", "auto-play"]
COMPETING_CTA_TEXT = ["learn more", "read more", "explore", "discover", "see more"]
COMPETING_CTA_CLASSES = ["secondary", "btn-secondary"]
TRUST_TEXT = ["testimonial", "review", "guarantee", "secure", "certified", "verified"]
TRUST_CLASSES = ["trust", "badge", "seal"]
SUPPORTING_TEXT = ["help", "support", "faq", "contact", "about", "terms", "privacy"]
CAROUSEL_CLASSES = ["carousel", "slider"]
STICKY_CLASSES = ["sticky", "fixed"]
NOISE_CLASSES = ["animation", "blink", "flash"]
DECORATIVE_ALT = ["decoration", "decorative", "banner", "background"]
LOCAL_HOSTS = ("localhost", "127.0.0.1")


# ============================================================================
# Phase 1 predicates
# ============================================================================

def is_primary_cta(element: DOMElement) -> bool:
    return contains_any(lower_text(element), PRIMARY_CTA_TEXT) or contains_any(
        lower_class(element), PRIMARY_CTA_CLASSES
    )


def is_navigation(element: DOMElement) -> bool:
    if element.tag == "nav" or contains_any(lower_class(element), NAVIGATION_CLASSES):
        return True
    # Site-root and "Home" links are top-level navigation
    return (element.href or "").strip() == "/" or lower_text(element).strip() in NAVIGATION_TEXT


def is_social_media(element: DOMElement) -> bool:
    return (
        contains_any(lower_href(element), SOCIAL_HREFS)
        or "social" in lower_class(element)
        or contains_any(lower_text(element), SOCIAL_TEXT)
    )


def is_external_link(element: DOMElement, context: PageContext) -> bool:
    href = lower_href(element)
    if not href.startswith("http"):
        return False
    link_host = hostname_of(href)
    page_host = hostname_of(context.url)
    if page_host:
        return bool(link_host) and link_host != page_host
    return link_host not in LOCAL_HOSTS


def is_interruptive(element: DOMElement) -> bool:
    return contains_any(lower_class(element), INTERRUPTIVE_CLASSES)


def is_auto_playing_media(element: DOMElement) -> bool:
    if element.tag in ("video", "audio") and element.autoplay:
        return True
    return contains_any(lower_class(element), AUTOPLAY_CLASSES)


def is_competing_cta(element: DOMElement) -> bool:
    if is_primary_cta(element):
        return False
    return contains_any(lower_text(element), COMPETING_CTA_TEXT) or contains_any(
        lower_class(element), COMPETING_CTA_CLASSES
    )


def is_internal_navigation(element: DOMElement, context: PageContext) -> bool:
    href = lower_href(element)
    if not href:
        return False
    if href.startswith("/") or href.startswith("#"):
        return True
    link_host = hostname_of(href)
    page_host = hostname_of(context.url)
    if page_host and link_host == page_host:
        return True
    return link_host in LOCAL_HOSTS


def is_trust_indicator(element: DOMElement) -> bool:
    return contains_any(lower_text(element), TRUST_TEXT) or contains_any(lower_class(element), TRUST_CLASSES)


def is_supporting_content(element: DOMElement) -> bool:
    return contains_any(lower_text(element), SUPPORTING_TEXT)


def classify_element(element: DOMElement, context: PageContext) -> str:
    """Phase 1 category key; the first matching rule wins."""
    if is_primary_cta(element):
        return "primary_cta"
    if is_navigation(element):
        return "navigation"
    if is_social_media(element):
        return "social_media"
    if is_external_link(element, context):
        return "external_link"
    if is_interruptive(element):
        return "interruptive"
    if is_auto_playing_media(element):
        return "auto_playing_media"
    if is_competing_cta(element):
        return "competing_cta"
    if is_internal_navigation(element, context):
        return "internal_navigation"
    if is_trust_indicator(element):
        return "trust_indicator"
    if is_supporting_content(element):
        return "supporting_content"
    return "unknown"


# ============================================================================
# Attribution
# ============================================================================

class WasteAttributor:
    """Computes the per-element WasteBreakdown and wasted clicks."""

    def calculate_wasted_clicks_with_breakdown(
        self,
        element: DOMElement,
        predicted_clicks: float,
        context: PageContext,
    ) -> Tuple[float, WasteBreakdown]:
        """
        Returns:
            (wasted_clicks, breakdown) where wasted_clicks equals
            predicted_clicks * breakdown.capped_waste_rate
        """
        category = classify_element(element, context)
        phase1 = ELEMENT_WASTE_RATES[category]
        phase2, attention_ratio = self.attention_ratio_penalty(context)
        phase3, visual_factors = self.visual_emphasis_penalty(element, category)
        phase4, clutter_factors = self.content_clutter_penalty(element)
        legacy, legacy_factors = self.legacy_quality_penalty(element)

        # Phase 3 can be negative (sticky primary CTA), the total cannot
        total_rate = max(phase1 + phase2 + phase3 + phase4 + legacy, 0.0)
        capped_rate = min(total_rate, MAX_WASTE_RATE)
        wasted_clicks = max(predicted_clicks, 0.0) * capped_rate

        breakdown = WasteBreakdown(
            base_waste_rate=phase1,
            phase1_element_classification=phase1,
            phase2_attention_ratio=phase2,
            phase3_visual_emphasis=phase3,
            phase4_content_clutter=phase4,
            legacy_quality_factors=legacy,
            total_waste_rate=total_rate,
            capped_waste_rate=capped_rate,
            element_category=ELEMENT_CATEGORY_LABELS[category],
            attention_ratio=attention_ratio,
            visual_factors=visual_factors,
            clutter_factors=clutter_factors,
            legacy_factors=legacy_factors,
        )
        return wasted_clicks, breakdown

    def attention_ratio_penalty(self, context: PageContext) -> Tuple[float, Optional[float]]:
        """Phase 2: interactive elements per primary CTA across the page."""
        elements = context.all_elements
        if not elements:
            return 0.0, None

        interactive_count = sum(1 for el in elements if el.is_interactive)
        primary_count = sum(1 for el in elements if is_primary_cta(el))
        ratio = interactive_count / max(primary_count, 1)

        for threshold, penalty in ATTENTION_RATIO_PENALTIES:
            if ratio > threshold:
                return penalty, ratio
        return 0.0, ratio

    def visual_emphasis_penalty(self, element: DOMElement, category: str) -> Tuple[float, List[str]]:
        """Phase 3: visual emphasis flags; a sticky primary CTA earns a bonus."""
        class_name = lower_class(element)
        is_primary = category == "primary_cta"
        penalty = 0.0
        factors: List[str] = []

        if element.has_high_contrast and not is_primary:
            penalty += VISUAL_EMPHASIS_PENALTIES["high_contrast"]
            factors.append("High contrast distraction")

        if element.is_auto_rotating or contains_any(class_name, CAROUSEL_CLASSES):
            penalty += VISUAL_EMPHASIS_PENALTIES["auto_rotating"]
            factors.append("Auto-rotating component")

        if z_index_of(element) > HIGH_Z_INDEX:
            penalty += VISUAL_EMPHASIS_PENALTIES["high_z_index"]
            factors.append("High z-index overlay")

        if element.is_sticky or contains_any(class_name, STICKY_CLASSES):
            if is_primary:
                penalty += VISUAL_EMPHASIS_PENALTIES["sticky_cta"]
                factors.append("Sticky CTA (beneficial)")
            else:
                penalty += VISUAL_EMPHASIS_PENALTIES["sticky_navigation"]
                factors.append("Sticky navigation")

        return penalty, factors

    def content_clutter_penalty(self, element: DOMElement) -> Tuple[float, List[str]]:
        """Phase 4: content clutter."""
        penalty = 0.0
        factors: List[str] = []

        if len(element.text or "") > LONG_TEXT_LENGTH and not element.has_nearby_cta:
            penalty += CONTENT_CLUTTER_PENALTIES["long_text"]
            factors.append("Long text without nearby CTA")

        if self.is_decorative_image(element):
            penalty += CONTENT_CLUTTER_PENALTIES["decorative_images"]
            factors.append("Decorative image")

        if element.has_visual_noise or contains_any(lower_class(element), NOISE_CLASSES):
            penalty += CONTENT_CLUTTER_PENALTIES["visual_noise"]
            factors.append("Visual noise/animation")

        if element.has_multiple_competing_elements:
            penalty += CONTENT_CLUTTER_PENALTIES["competing_elements"]
            factors.append("Multiple competing elements")

        return penalty, factors

    @staticmethod
    def is_decorative_image(element: DOMElement) -> bool:
        if element.is_decorative:
            return True
        if element.tag != "img":
            return False
        alt = (element.alt or "").strip().lower()
        return not alt or contains_any(alt, DECORATIVE_ALT)

    def legacy_quality_penalty(self, element: DOMElement) -> Tuple[float, List[str]]:
        penalty = 0.0
        factors: List[str] = []

        if not element.is_interactive:
            penalty += LEGACY_QUALITY_PENALTIES["non_interactive"]
            factors.append("Non-interactive element")
        elif not element.has_button_styling:
            penalty += LEGACY_QUALITY_PENALTIES["missing_button_styling"]
            factors.append("Missing button styling")

        if not element.is_above_fold:
            penalty += LEGACY_QUALITY_PENALTIES["below_fold"]
            factors.append("Below the fold")

        text = element.text or ""
        if text and len(text.strip()) < 3:
            penalty += LEGACY_QUALITY_PENALTIES["minimal_text"]
            factors.append("Minimal text content")

        return penalty, factors
