"""
Wasted-Click Model v5.3.

Scores every clickable element other than the primary CTA for how much it
distracts from the primary conversion. Fourteen sub-scores are combined by a
fixed weighted formula, re-weighted by whether the primary CTA is a form
submission ("form-cta") or a direct action ("non-form-cta").

Usage:
    model = WastedClickModel(context, estimated_cpc=4.1)
    analysis = model.analyze_wasted_clicks(elements, primary_cta, predictions)
"""

import logging
import re
from typing import Dict, List, Optional

from .constants import (
    ADDITIONAL_CTA_TERMS,
    DEFAULT_CLICK_BUDGET,
    FORM_CTA_HREF_HINTS,
    FORM_CTA_KEYWORDS,
    FORM_CTA_RECOMMENDATIONS,
    GENERAL_RECOMMENDATIONS,
    GENERIC_TERMS,
    HIGH_RISK_THRESHOLD,
    INDUSTRY_CLICK_BUDGETS,
    NEUTRAL_TERMS,
    NON_FORM_CTA_HREF_HINTS,
    NON_FORM_CTA_KEYWORDS,
    NON_FORM_CTA_RECOMMENDATIONS,
    SOCIAL_DOMAINS,
    TRUST_BADGE_KEYWORDS,
    USER_BEHAVIOR_MULTIPLIERS,
    VAGUE_TERMS,
    WASTED_CLICK_WEIGHTS,
)
from .cpc_estimator import CPCEstimator
from .models import (
    ClickPredictionResult,
    DOMElement,
    FormContext,
    PageContext,
    ProjectedImprovements,
    ScoringBreakdown,
    WastedClickAnalysis,
    WastedClickElement,
)
from .utils import (
    clamp,
    contains_any,
    element_key,
    fold_line_for,
    hostname_of,
    is_form_field,
    lower_class,
    lower_href,
    lower_text,
    path_of,
)
from .waste import is_external_link

logger = logging.getLogger(__name__)

CLICKABLE_TAGS = ("a", "button", "input")
DEFAULT_CLICK_DISTRACTION = 0.5
UNMATCHED_CLICK_DISTRACTION = 0.3
BASELINE_CTR = 0.031
AVG_ORDER_VALUE = 100
ASSUMED_CONVERSION_RATE = 0.1


class PrimaryCTARequiredError(ValueError):
    """Raised when wasted-click analysis is requested without a primary CTA."""

    def __init__(self, message: str = "Primary CTA must be identified before analyzing wasted clicks"):
        super().__init__(message)


def _style(element: DOMElement, camel: str, kebab: str):
    return element.style.get(camel, element.style.get(kebab))


def _font_size(element: DOMElement) -> float:
    match = re.match(r"\s*(\d+)", str(_style(element, "fontSize", "font-size") or ""))
    return float(match.group(1)) if match else 0.0


class WastedClickModel:
    """
    Form-context-aware distraction scoring relative to a primary CTA.

    One instance analyzes one page; the primary CTA is fixed per call to
    analyze_wasted_clicks.
    """

    def __init__(
        self,
        context: PageContext,
        estimated_cpc: Optional[float] = None,
        user_archetype: str = "focused",
    ):
        if user_archetype not in USER_BEHAVIOR_MULTIPLIERS:
            raise ValueError(
                f"Unknown user archetype '{user_archetype}', "
                f"expected one of {sorted(USER_BEHAVIOR_MULTIPLIERS)}"
            )
        self.context = context
        self.fold_line = fold_line_for(context)
        self.estimated_cpc = estimated_cpc
        self.user_archetype = user_archetype
        self.primary_cta: Optional[DOMElement] = None
        self.page_host = hostname_of(context.url)
        self.page_path = path_of(context.url)

    def analyze_wasted_clicks(
        self,
        elements: List[DOMElement],
        primary_cta: Optional[DOMElement],
        predictions: Optional[List[ClickPredictionResult]] = None,
    ) -> WastedClickAnalysis:
        """
        Score every clickable non-primary element for wasted-click potential.

        Args:
            elements: All page elements
            primary_cta: The resolved primary CTA
            predictions: Click predictions, used for the click distraction index

        Returns:
            WastedClickAnalysis with elements sorted by descending score

        Raises:
            PrimaryCTARequiredError: If primary_cta is None
        """
        if primary_cta is None:
            raise PrimaryCTARequiredError()
        self.primary_cta = primary_cta

        form_context = self.detect_form_context(primary_cta, elements)
        logger.debug(
            f"Form context: {form_context.cta_type} "
            f"({form_context.form_field_count} fields)"
        )

        wasted = [
            self.analyze_element(element, form_context, predictions)
            for element in elements
            if not self.is_excluded(element) and self.is_clickable(element)
        ]
        wasted.sort(key=lambda w: w.wasted_click_score, reverse=True)

        return self.generate_analysis_summary(wasted, form_context)

    # ========================================================================
    # Form context and classification
    # ========================================================================

    def detect_form_context(self, primary_cta: DOMElement, elements: List[DOMElement]) -> FormContext:
        cta_text = lower_text(primary_cta)
        cta_href = lower_href(primary_cta)
        field_count = sum(1 for el in elements if is_form_field(el))

        is_form_cta = contains_any(cta_text, FORM_CTA_KEYWORDS) or contains_any(cta_href, FORM_CTA_HREF_HINTS)
        is_non_form_cta = contains_any(cta_text, NON_FORM_CTA_KEYWORDS) or contains_any(
            cta_href, NON_FORM_CTA_HREF_HINTS
        )

        if is_form_cta or field_count > 2:
            cta_type = "form-cta"
        elif is_non_form_cta:
            cta_type = "non-form-cta"
        elif field_count > 0:
            cta_type = "form-cta"
        else:
            cta_type = "non-form-cta"

        return FormContext(
            cta_type=cta_type,
            is_form_related=cta_type == "form-cta",
            form_field_count=field_count,
            primary_form_action=primary_cta.form_action or primary_cta.href or None,
        )

    def is_excluded(self, element: DOMElement) -> bool:
        """The primary CTA and its true duplicates (same href and text)."""
        primary = self.primary_cta
        if element is primary:
            return True
        if primary.id and element.id == primary.id:
            return True
        return bool(primary.href) and element.href == primary.href and element.text == primary.text

    def shares_destination(self, element: DOMElement) -> bool:
        return bool(self.primary_cta.href) and element.href == self.primary_cta.href

    def is_clickable(self, element: DOMElement) -> bool:
        return (
            element.tag in CLICKABLE_TAGS
            or element.is_interactive
            or _style(element, "cursor", "cursor") == "pointer"
        )

    def classify_element(self, element: DOMElement, form_context: FormContext) -> str:
        if self.shares_destination(element):
            return "supportive-click"

        if form_context.cta_type == "form-cta":
            if is_form_field(element) or self.is_trust_indicator(element):
                return "supportive-click"
        elif form_context.cta_type == "non-form-cta" and is_form_field(element):
            return "wasted-click"

        if contains_any(lower_text(element), NEUTRAL_TERMS):
            return "neutral-click"
        return "wasted-click"

    # ========================================================================
    # Scoring
    # ========================================================================

    def analyze_element(
        self,
        element: DOMElement,
        form_context: FormContext,
        predictions: Optional[List[ClickPredictionResult]],
    ) -> WastedClickElement:
        breakdown = self.calculate_scoring_breakdown(element, form_context, predictions)
        score = self.calculate_wasted_click_score(breakdown, form_context)
        element_type = self.determine_element_type(element)

        return WastedClickElement(
            element=element,
            wasted_click_score=score,
            type=element_type,
            distraction_factors=self.identify_distraction_factors(element, breakdown, form_context),
            recommendation=self.generate_recommendation(element_type, score, form_context),
            classification=self.classify_element(element, form_context),
            scoring_breakdown=breakdown,
        )

    def calculate_scoring_breakdown(
        self,
        element: DOMElement,
        form_context: FormContext,
        predictions: Optional[List[ClickPredictionResult]] = None,
    ) -> ScoringBreakdown:
        """The 14 sub-scores, with form-context modifiers applied."""
        values: Dict[str, float] = {
            "distraction_score": self.calculate_distraction_score(element),
            "visibility_weight": self.calculate_visibility_weight(element),
            "interaction_attractiveness": self.calculate_interaction_attractiveness(element),
            "intent_mismatch_penalty": self.calculate_intent_mismatch_penalty(element),
            "path_loop_penalty": self.calculate_path_loop_penalty(element),
            "clarity_penalty": self.calculate_clarity_penalty(element),
            "timing_penalty": self.calculate_timing_penalty(element),
            "fold_weight": 0.7 if element.box.y >= self.fold_line else 1.0,
            "cta_duplication_boost": 0.85 if self.shares_destination(element) else 1.0,
            "direct_response_penalty": self.calculate_direct_response_penalty(element),
            "click_distraction_index": self.calculate_click_distraction_index(element, predictions),
            "click_budget_risk": self.calculate_click_budget_risk(),
            "loopback_penalty": self.calculate_loopback_penalty(element),
            "user_behavior_multiplier": USER_BEHAVIOR_MULTIPLIERS[self.user_archetype],
        }

        if form_context.cta_type == "form-cta":
            if is_form_field(element):
                values["distraction_score"] *= 0.2
                values["direct_response_penalty"] *= 0.3
                values["intent_mismatch_penalty"] *= 0.1
            else:
                values["distraction_score"] *= 1.3
                values["direct_response_penalty"] *= 1.4
                if self.is_social_link(element):
                    values["direct_response_penalty"] *= 1.6
            if self.is_trust_indicator(element):
                values["distraction_score"] *= 0.1
                values["direct_response_penalty"] *= 0.2
        elif form_context.cta_type == "non-form-cta":
            if is_form_field(element):
                values["distraction_score"] *= 1.8
                values["direct_response_penalty"] *= 2.0
                values["intent_mismatch_penalty"] *= 1.5
            if self.is_internal_navigation(element):
                values["direct_response_penalty"] *= 0.8

        return ScoringBreakdown(**values)

    def calculate_wasted_click_score(self, breakdown: ScoringBreakdown, form_context: FormContext) -> float:
        """Weighted combination of the breakdown, scaled by form context, in [0, 1]."""
        w = WASTED_CLICK_WEIGHTS
        raw = (
            breakdown.distraction_score * w["distraction"] * breakdown.visibility_weight
            + breakdown.interaction_attractiveness * w["attractiveness"]
            + (breakdown.intent_mismatch_penalty - 1) * w["intent_mismatch"]
            + (breakdown.path_loop_penalty - 1) * w["path_loop"]
            + (breakdown.clarity_penalty - 1) * w["clarity"]
            + (breakdown.timing_penalty - 1) * w["timing"]
            + breakdown.click_distraction_index * w["click_distraction"]
            + (breakdown.click_budget_risk - 1) * w["budget_risk"]
            + (breakdown.loopback_penalty - 1) * w["loopback"]
            + (breakdown.user_behavior_multiplier - 1) * w["behavior"]
        )
        base = clamp(
            raw
            * breakdown.fold_weight
            * breakdown.cta_duplication_boost
            * breakdown.direct_response_penalty
        )

        multiplier = 1.0
        if form_context.cta_type == "form-cta":
            multiplier = 0.75
            if form_context.form_field_count > 3:
                multiplier *= 0.85
        elif form_context.cta_type == "non-form-cta" and form_context.form_field_count > 0:
            multiplier = 1.1

        return clamp(base * multiplier)

    def calculate_distraction_score(self, element: DOMElement) -> float:
        box = element.box
        score = 0.1
        if element.has_high_contrast:
            score += 0.2
        if box.width > 200 or box.height > 50:
            score += 0.15
        if element.has_button_styling:
            score += 0.1
        if _style(element, "fontWeight", "font-weight") == "bold":
            score += 0.1
        if _font_size(element) > 16:
            score += 0.1
        if box.y < 500:
            score += 0.2
        if element.is_sticky:
            score += 0.15
        return min(score, 1.0)

    def calculate_visibility_weight(self, element: DOMElement) -> float:
        weight = 1.0 if element.box.y < self.fold_line else 0.7
        if element.is_sticky:
            weight = min(weight * 1.2, 1.0)
        return weight

    def calculate_interaction_attractiveness(self, element: DOMElement) -> float:
        score = 0.3
        if element.has_button_styling:
            score += 0.3
        if _style(element, "cursor", "cursor") == "pointer":
            score += 0.2
        if element.is_auto_rotating:
            score += 0.2
        return min(score, 1.0)

    def calculate_intent_mismatch_penalty(self, element: DOMElement) -> float:
        text = lower_text(element)
        href = lower_href(element)
        penalty = 1.0
        if "pricing" in text and ("blog" in href or "about" in href):
            penalty += 0.5
        if "demo" in text and "contact" in href:
            penalty += 0.4
        if "buy" in text and "checkout" not in href and "purchase" not in href:
            penalty += 0.3
        return min(penalty, 1.5)

    def calculate_path_loop_penalty(self, element: DOMElement) -> float:
        href = element.href or ""
        penalty = 1.0
        if any(segment in href for segment in ("/about", "/contact", "/blog")):
            penalty += 0.1
        if self.page_host and is_external_link(element, self.context):
            penalty += 0.2
        return penalty

    def calculate_clarity_penalty(self, element: DOMElement) -> float:
        text = element.text or ""
        penalty = 1.0
        if len(text) < 2:
            penalty += 0.3
        if contains_any(text.lower(), VAGUE_TERMS):
            penalty += 0.2
        return min(penalty, 1.3)

    def calculate_timing_penalty(self, element: DOMElement) -> float:
        class_name = lower_class(element)
        penalty = 1.0
        if "modal" in class_name or "popup" in class_name:
            penalty += 0.2
        if element.is_sticky and element.box.y > self.fold_line:
            penalty += 0.15
        return min(penalty, 1.25)

    def calculate_direct_response_penalty(self, element: DOMElement) -> float:
        penalty = 1.0
        if self.is_additional_cta(element):
            penalty += 0.35
        if self.is_social_link(element):
            penalty += 0.4
        if element.box.y < 100 and self.is_navigation_element(element):
            penalty += 0.4
        if contains_any(lower_text(element), GENERIC_TERMS):
            penalty += 0.3
        if self.causes_ux_friction(element):
            penalty += 0.4
        return min(penalty, 1.75)

    def calculate_click_distraction_index(
        self,
        element: DOMElement,
        predictions: Optional[List[ClickPredictionResult]],
    ) -> float:
        """The element's share of all predicted clicks."""
        if predictions is None:
            return DEFAULT_CLICK_DISTRACTION

        key = element_key(element)
        match = next((p for p in predictions if p.element_id == key), None)
        if match is None:
            return UNMATCHED_CLICK_DISTRACTION

        total = sum(p.predicted_clicks for p in predictions)
        if total <= 0:
            return 0.0
        return match.predicted_clicks / total

    def calculate_click_budget_risk(self) -> float:
        budget = INDUSTRY_CLICK_BUDGETS.get(self.context.industry or "saas", DEFAULT_CLICK_BUDGET)
        return 1.3 if budget < 2.0 else 1.0

    def calculate_loopback_penalty(self, element: DOMElement) -> float:
        """Links pointing up the current URL path lead back through the funnel."""
        href = element.href or ""
        if href and len(href) < len(self.page_path) and self.page_path.startswith(href):
            return 1.2
        return 1.0

    # ========================================================================
    # Element predicates
    # ========================================================================

    def is_social_link(self, element: DOMElement) -> bool:
        return contains_any(lower_href(element), SOCIAL_DOMAINS)

    def is_additional_cta(self, element: DOMElement) -> bool:
        if self.primary_cta is not None and self.primary_cta.id and element.id == self.primary_cta.id:
            return False
        return contains_any(lower_text(element), ADDITIONAL_CTA_TERMS)

    def is_navigation_element(self, element: DOMElement) -> bool:
        return "nav" in lower_class(element) or element.tag == "nav"

    def is_trust_indicator(self, element: DOMElement) -> bool:
        class_name = lower_class(element)
        return (
            contains_any(lower_text(element), TRUST_BADGE_KEYWORDS)
            or "trust-badge" in class_name
            or "security-seal" in class_name
        )

    def is_internal_navigation(self, element: DOMElement) -> bool:
        href = lower_href(element)
        if href.startswith("/"):
            return True
        return bool(self.page_host) and self.page_host in href and not href.startswith("#")

    def causes_ux_friction(self, element: DOMElement) -> bool:
        class_name = lower_class(element)
        return (
            "popup" in class_name
            or "modal" in class_name
            or element.is_auto_rotating
            or lower_href(element).startswith("mailto:")
        )

    def determine_element_type(self, element: DOMElement) -> str:
        href = lower_href(element)
        text = lower_text(element)
        class_name = lower_class(element)

        if "blog" in href or "article" in href:
            return "blog-link"
        if self.is_social_link(element):
            return "social-link"
        if self.is_navigation_element(element):
            return "navigation"
        if self.is_additional_cta(element):
            return "additional-cta"
        if self.page_host and is_external_link(element, self.context):
            return "external-link"
        if "download" in href or "download" in text:
            return "download-link"
        if "modal" in class_name or "popup" in class_name:
            return "modal-trigger"
        if "chat" in class_name or "chat" in text:
            return "chat-widget"
        if "footer" in class_name:
            return "footer-link"
        if "sidebar" in class_name:
            return "sidebar-link"
        return "resource-link"

    # ========================================================================
    # Factors and recommendations
    # ========================================================================

    def identify_distraction_factors(
        self,
        element: DOMElement,
        breakdown: ScoringBreakdown,
        form_context: FormContext,
    ) -> List[str]:
        factors = []
        if breakdown.distraction_score > 0.5:
            factors.append("high visual prominence")
        if breakdown.intent_mismatch_penalty > 1.2:
            factors.append("intent mismatch")
        if breakdown.path_loop_penalty > 1.1:
            factors.append("off-path click")
        if breakdown.direct_response_penalty > 1.3:
            factors.append("direct response violation")
        if breakdown.click_distraction_index > 0.3:
            factors.append("high click attraction")
        if element.is_sticky:
            factors.append("sticky positioning")
        if element.box.y < self.fold_line:
            factors.append("above fold competition")

        if form_context.cta_type == "form-cta":
            if is_form_field(element):
                factors.append("form field supports conversion")
            elif self.is_social_link(element):
                factors.append("social link disrupts form completion")
            elif self.is_navigation_element(element):
                factors.append("navigation competes with form focus")
        elif form_context.cta_type == "non-form-cta" and is_form_field(element):
            factors.append("form field competes with purchase intent")

        return factors

    def generate_recommendation(self, element_type: str, score: float, form_context: FormContext) -> str:
        if score < HIGH_RISK_THRESHOLD:
            return "Low priority - monitor for changes"

        cta_type = form_context.cta_type
        if cta_type == "form-cta":
            recommendation = FORM_CTA_RECOMMENDATIONS.get(
                element_type, "Review element necessity for form completion flow"
            )
        elif cta_type == "non-form-cta":
            recommendation = NON_FORM_CTA_RECOMMENDATIONS.get(
                element_type, "Review element impact on purchase intent"
            )
        else:
            recommendation = GENERAL_RECOMMENDATIONS.get(element_type, "Review element necessity and placement")
            if score > 0.2:
                return f"HIGH PRIORITY: {recommendation}"
            if score > 0.1:
                return f"MEDIUM PRIORITY: {recommendation}"
            return recommendation

        label = cta_type.upper()
        if score > 0.3:
            return f"CRITICAL ({label}): {recommendation}"
        if score > 0.15:
            return f"HIGH PRIORITY ({label}): {recommendation}"
        if score > 0.08:
            return f"MEDIUM PRIORITY ({label}): {recommendation}"
        return recommendation

    # ========================================================================
    # Summary
    # ========================================================================

    def generate_analysis_summary(
        self,
        wasted: List[WastedClickElement],
        form_context: FormContext,
    ) -> WastedClickAnalysis:
        total_score = sum(w.wasted_click_score for w in wasted)
        high_risk = [w for w in wasted if w.wasted_click_score > HIGH_RISK_THRESHOLD]

        recommendations = self.generate_global_recommendations(wasted)
        recommendations.extend(self.generate_form_context_recommendations(wasted, form_context))

        improvements = self.adjust_improvements_for_form_context(
            self.calculate_projected_improvements(wasted), form_context, wasted
        )

        aggregate_clicks = float(sum(round(w.wasted_click_score * 100) for w in high_risk))
        cpc = self.estimated_cpc
        if cpc is None:
            cpc = CPCEstimator().calculate_estimated_cpc(self.context).estimated_cpc

        return WastedClickAnalysis(
            total_wasted_elements=len(wasted),
            average_wasted_score=total_score / len(wasted) if wasted else 0.0,
            high_risk_elements=high_risk,
            recommendations=recommendations,
            projected_improvements=improvements,
            form_context=form_context,
            aggregate_wasted_clicks=aggregate_clicks,
            aggregate_wasted_spend=round(aggregate_clicks * cpc, 2),
        )

    def generate_global_recommendations(self, wasted: List[WastedClickElement]) -> List[str]:
        recommendations = []
        if sum(1 for w in wasted if w.wasted_click_score > 0.3) > 5:
            recommendations.append("High interactive element density detected - consider simplifying page layout")
        if sum(1 for w in wasted if w.type == "social-link") > 2:
            recommendations.append("Multiple social links competing for attention - consolidate or relocate")
        if sum(1 for w in wasted if w.type == "additional-cta") > 1:
            recommendations.append("Multiple CTAs creating decision paralysis - focus on single primary action")
        if any("above fold competition" in w.distraction_factors for w in wasted):
            recommendations.append("Above-fold elements competing with primary CTA - prioritize conversion elements")
        return recommendations

    def generate_form_context_recommendations(
        self,
        wasted: List[WastedClickElement],
        form_context: FormContext,
    ) -> List[str]:
        recommendations = []
        if form_context.cta_type == "form-cta":
            if any(w.type == "social-link" for w in wasted):
                recommendations.append(
                    "FORM OPTIMIZATION: Remove social media links from form pages to reduce abandonment"
                )
            if sum(1 for w in wasted if w.type == "navigation") > 2:
                recommendations.append(
                    "FORM OPTIMIZATION: Simplify navigation during form completion - use progress indicators instead"
                )
            if form_context.form_field_count > 5:
                recommendations.append("FORM OPTIMIZATION: Consider multi-step form to reduce cognitive load")
        elif form_context.cta_type == "non-form-cta":
            if any(w.type == "additional-cta" and is_form_field(w.element) for w in wasted):
                recommendations.append(
                    "PURCHASE OPTIMIZATION: Remove competing newsletter/contact forms from purchase pages"
                )
            if form_context.form_field_count > 0:
                recommendations.append(
                    "PURCHASE OPTIMIZATION: Move secondary forms (newsletter, contact) to post-purchase flow"
                )
        return recommendations

    def calculate_projected_improvements(self, wasted: List[WastedClickElement]) -> ProjectedImprovements:
        high_risk_count = sum(1 for w in wasted if w.wasted_click_score > HIGH_RISK_THRESHOLD)
        total_score = sum(w.wasted_click_score for w in wasted)

        ctr_improvement = min(total_score * 0.15, 0.5)
        fcr_improvement = min(total_score * 0.12, 0.4)

        impressions = self.context.total_impressions
        current_ctr = BASELINE_CTR if impressions > 0 else 0.02
        additional_clicks = current_ctr * ctr_improvement * impressions
        revenue_impact = additional_clicks * AVG_ORDER_VALUE * ASSUMED_CONVERSION_RATE

        if high_risk_count > 10:
            difficulty = "hard"
        elif high_risk_count > 5:
            difficulty = "moderate"
        else:
            difficulty = "easy"

        return ProjectedImprovements(
            ctr_improvement=ctr_improvement,
            fcr_improvement=fcr_improvement,
            revenue_impact=revenue_impact,
            implementation_difficulty=difficulty,
            priority_score=min(round(total_score * 100), 100),
        )

    def adjust_improvements_for_form_context(
        self,
        improvements: ProjectedImprovements,
        form_context: FormContext,
        wasted: List[WastedClickElement],
    ) -> ProjectedImprovements:
        ctr_multiplier = fcr_multiplier = revenue_multiplier = 1.0

        if form_context.cta_type == "form-cta":
            ctr_multiplier, fcr_multiplier, revenue_multiplier = 1.4, 1.6, 1.3
            heavy = sum(1 for w in wasted if not is_form_field(w.element) and w.wasted_click_score > 0.2)
            if heavy > 3:
                ctr_multiplier *= 1.2
                fcr_multiplier *= 1.3
        elif form_context.cta_type == "non-form-cta":
            ctr_multiplier, fcr_multiplier, revenue_multiplier = 1.1, 1.2, 1.15
            if form_context.form_field_count > 0 and any(
                is_form_field(w.element) and w.wasted_click_score > 0.15 for w in wasted
            ):
                ctr_multiplier *= 1.25
                revenue_multiplier *= 1.2

        return ProjectedImprovements(
            ctr_improvement=min(improvements.ctr_improvement * ctr_multiplier, 0.8),
            fcr_improvement=min(improvements.fcr_improvement * fcr_multiplier, 0.7),
            revenue_impact=improvements.revenue_impact * revenue_multiplier,
            implementation_difficulty=improvements.implementation_difficulty,
            priority_score=min(round(improvements.priority_score * (ctr_multiplier + fcr_multiplier) / 2), 100),
        )
