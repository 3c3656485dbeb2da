"""
CPC Estimator

Fills in unknown industry / business type / network / competition / quality /
geo fields of a PageContext from raw signals (URL and page text), and
estimates cost-per-click through a chain of multiplicative modifiers.

The $2.93 floor on the final CPC is business policy and is applied last.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Union

from .constants import (
    B2B_INDUSTRIES,
    B2B_KEYWORDS,
    B2B_URL_HINTS,
    B2C_INDUSTRIES,
    B2C_KEYWORDS,
    B2C_URL_HINTS,
    BASE_CPC,
    BUSINESS_TYPE_CPC,
    COMPETITION_CPC,
    DEVICE_CPC,
    GEO_TIER_CPC,
    HIGH_COMPETITION_INDUSTRIES,
    INDUSTRY_KEYWORDS,
    INDUSTRY_MODIFIERS,
    INDUSTRY_URL_HINTS,
    LOW_COMPETITION_INDUSTRIES,
    MEDIUM_COMPETITION_INDUSTRIES,
    MIN_BUSINESS_KEYWORD_HITS,
    MIN_CPC,
    MIN_INDUSTRY_KEYWORD_HITS,
    QUALITY_SCORE_CPC,
    SEASONALITY_CPC,
    TIME_OF_DAY_CPC,
    TRAFFIC_SOURCE_CPC,
    WEEKDAY_CPC,
)
from .models import CPCBreakdown, CPCEstimate, PageContext

logger = logging.getLogger(__name__)

PHRASE_MATCH_BONUS = 0.5
DEFAULT_TRAFFIC_SOURCE_CPC = 0.3


def calculate_keyword_density(text: str, keywords: List[str]) -> float:
    """
    Count whole-word keyword hits in text.

    Multi-word phrases earn a 50% bonus per hit.
    """
    matches = 0.0
    for keyword in keywords:
        pattern = r"\b" + r"\s+".join(re.escape(part) for part in keyword.split()) + r"\b"
        hits = len(re.findall(pattern, text, re.IGNORECASE))
        matches += hits
        if " " in keyword and hits:
            matches += hits * PHRASE_MATCH_BONUS
    return matches


def extract_page_text(context: PageContext) -> str:
    """
    Collect visible copy for keyword scans.

    Reads the raw capture payload when present, otherwise the element list.
    """
    parts: List[str] = []
    dom = context.dom_content
    if dom:
        for key in ("buttons", "links", "headings", "textBlocks"):
            parts.extend(item.get("text") for item in dom.get(key) or [] if isinstance(item, dict))
        for field in dom.get("formFields") or []:
            if not isinstance(field, dict):
                continue
            attributes = field.get("attributes") or {}
            parts.append(attributes.get("placeholder"))
            parts.append(field.get("label"))
        parts.append(dom.get("title"))
        parts.append(dom.get("description"))
        parts.extend(image.get("alt") for image in dom.get("images") or [] if isinstance(image, dict))
    elif context.all_elements:
        for element in context.all_elements:
            parts.extend([element.text, element.label, element.placeholder, element.alt])
        parts.append(context.title)

    return " ".join(part for part in parts if isinstance(part, str) and part).lower()


class CPCEstimator:
    """Context enrichment and CPC estimation."""

    # ========================================================================
    # Context enrichment
    # ========================================================================

    def estimate_context(self, partial: Union[PageContext, Dict[str, Any]]) -> PageContext:
        """
        Return a copy of the context with unknown fields inferred.

        The input is never modified.
        """
        context = partial if isinstance(partial, PageContext) else PageContext.model_validate(partial)
        updates: Dict[str, Any] = {}

        industry = context.industry
        if not industry and context.url:
            industry = self.detect_industry_from_url(context.url)
        if not industry:
            industry = self.detect_industry_from_text(extract_page_text(context))
        if industry and industry != context.industry:
            updates["industry"] = industry

        enriched = context.model_copy(update=updates)

        if not enriched.business_type:
            updates["business_type"] = self.detect_business_type(enriched)
        if not enriched.network_type:
            updates["network_type"] = self.detect_network_type(enriched.traffic_source)
        if not enriched.competition_level:
            updates["competition_level"] = self.estimate_competition_level(enriched)
        if not enriched.quality_score:
            updates["quality_score"] = self.estimate_quality_score(enriched)
        if not enriched.geo_tier:
            updates["geo_tier"] = "tier1"

        enriched = context.model_copy(update=updates)
        logger.debug(
            f"Context estimated: industry={enriched.industry} business={enriched.business_type} "
            f"competition={enriched.competition_level} quality={enriched.quality_score}"
        )
        return enriched

    def detect_industry_from_url(self, url: str) -> Optional[str]:
        url_lower = url.lower()
        for industry, hints in INDUSTRY_URL_HINTS:
            if any(hint in url_lower for hint in hints):
                return industry
        return None

    def detect_industry_from_text(self, text: str) -> Optional[str]:
        """Keyword-density industry detection; needs at least 3 hits to commit."""
        if not text:
            return None

        best_industry, best_score = None, 0.0
        for industry, keywords in INDUSTRY_KEYWORDS.items():
            score = calculate_keyword_density(text, keywords)
            if best_industry is None or score >= best_score:
                best_industry, best_score = industry, score

        if best_score >= MIN_INDUSTRY_KEYWORD_HITS:
            return best_industry
        return None

    def detect_business_type(self, context: PageContext) -> str:
        if context.industry in B2B_INDUSTRIES:
            return "b2b"
        if context.industry in B2C_INDUSTRIES:
            return "b2c"

        if context.traffic_source == "linkedin":
            return "b2b"
        if context.traffic_source == "social":
            return "b2c"

        if context.url:
            url_lower = context.url.lower()
            if any(hint in url_lower for hint in B2B_URL_HINTS):
                return "b2b"
            if any(hint in url_lower for hint in B2C_URL_HINTS):
                return "b2c"

        text = extract_page_text(context)
        if text:
            b2b_score = calculate_keyword_density(text, B2B_KEYWORDS)
            b2c_score = calculate_keyword_density(text, B2C_KEYWORDS)
            if b2b_score > b2c_score and b2b_score >= MIN_BUSINESS_KEYWORD_HITS:
                return "b2b"
            if b2c_score > b2b_score and b2c_score >= MIN_BUSINESS_KEYWORD_HITS:
                return "b2c"

        return "unknown"

    def detect_network_type(self, traffic_source: str) -> str:
        if traffic_source == "paid":
            return "search"
        if traffic_source in ("social", "linkedin"):
            return "social"
        if traffic_source == "referral":
            return "display"
        return "unknown"

    def estimate_competition_level(self, context: PageContext) -> str:
        if context.industry in HIGH_COMPETITION_INDUSTRIES:
            return "high"
        if context.industry in MEDIUM_COMPETITION_INDUSTRIES:
            return "medium"
        if context.industry in LOW_COMPETITION_INDUSTRIES:
            return "low"
        if context.competitor_presence:
            return "high"
        return "medium"

    def estimate_quality_score(self, context: PageContext) -> str:
        """Landing-page quality rating from speed, trust and brand signals."""
        score = 0.0

        if context.load_time:
            if context.load_time <= 2:
                score += 2
            elif context.load_time <= 3:
                score += 1
            elif context.load_time >= 5:
                score -= 1

        if context.has_ssl:
            score += 1
        if context.has_trust_badges:
            score += 1
        if context.has_testimonials:
            score += 1

        if isinstance(context.brand_recognition, str):
            score += {"high": 2, "medium": 1}.get(context.brand_recognition, 0)
        elif context.brand_recognition is not None:
            score += context.brand_recognition * 2

        if context.ad_message_match is not None:
            if context.ad_message_match > 0.8:
                score += 2
            elif context.ad_message_match > 0.6:
                score += 1

        if score >= 6:
            return "excellent"
        if score >= 4:
            return "good"
        if score >= 2:
            return "average"
        if score >= 0:
            return "poor"
        return "unknown"

    # ========================================================================
    # CPC
    # ========================================================================

    def calculate_estimated_cpc(self, context: PageContext) -> CPCEstimate:
        """
        Estimate cost-per-click for a context.

        Returns:
            CPCEstimate with the floored CPC and every multiplier applied
        """
        industry_cpc = BASE_CPC
        if context.industry in INDUSTRY_MODIFIERS:
            industry_cpc = max(INDUSTRY_MODIFIERS[context.industry]["avg_cpc"], BASE_CPC)

        business_multiplier = BUSINESS_TYPE_CPC["b2b"] if context.business_type == "b2b" else BUSINESS_TYPE_CPC["b2c"]
        traffic_multiplier = TRAFFIC_SOURCE_CPC.get(context.traffic_source, DEFAULT_TRAFFIC_SOURCE_CPC)
        device_multiplier = DEVICE_CPC.get(context.device_type, 1.0)
        competition_multiplier = COMPETITION_CPC.get(context.competition_level or "medium", 1.0)
        quality_multiplier = QUALITY_SCORE_CPC.get(context.quality_score or "unknown", 1.0)
        geo_multiplier = GEO_TIER_CPC.get(context.geo_tier or "tier1", 1.0)
        time_multiplier = self.calculate_time_multiplier(context)

        raw_cpc = (
            industry_cpc
            * business_multiplier
            * traffic_multiplier
            * device_multiplier
            * competition_multiplier
            * quality_multiplier
            * geo_multiplier
            * time_multiplier
        )
        estimated_cpc = max(raw_cpc, MIN_CPC)

        return CPCEstimate(
            estimated_cpc=estimated_cpc,
            breakdown=CPCBreakdown(
                base_cpc=BASE_CPC,
                industry_multiplier=industry_cpc / BASE_CPC,
                business_type_multiplier=business_multiplier,
                traffic_source_multiplier=traffic_multiplier,
                device_multiplier=device_multiplier,
                competition_multiplier=competition_multiplier,
                quality_multiplier=quality_multiplier,
                geo_multiplier=geo_multiplier,
                time_multiplier=time_multiplier,
            ),
        )

    def calculate_time_multiplier(self, context: PageContext) -> float:
        multiplier = 1.0
        if context.time_of_day:
            multiplier *= TIME_OF_DAY_CPC.get(context.time_of_day, 1.0)
        if context.day_of_week == "weekday":
            multiplier *= WEEKDAY_CPC
        if context.seasonality:
            multiplier *= SEASONALITY_CPC.get(context.seasonality, 1.0)
        return multiplier
