"""
Traffic analysis.

Derives page-wide modifiers (bounce rate, total clicks, source and device
multipliers) from the traffic profile. This is the only place the page-wide
click volume is established; element predictions are shares of it.
"""

import logging
from typing import Optional

from .constants import (
    AVG_CLICKS_PER_ENGAGED_USER,
    BASE_BOUNCE_RATES,
    DEFAULT_BOUNCE_RATE,
    DEFAULT_DEVICE_MODIFIER,
    DEFAULT_LOAD_TIME,
    DEFAULT_TRAFFIC_MODIFIER,
    DEVICE_MODIFIERS,
    INDUSTRY_MODIFIERS,
    MAX_BOUNCE_RATE,
    MIN_BOUNCE_RATE,
    TRAFFIC_SOURCE_MODIFIERS,
)
from .models import PageContext, TrafficModifiers

logger = logging.getLogger(__name__)

SLOW_LOAD_THRESHOLD = 3.0


class TrafficAnalyzer:
    """Page-level traffic modifiers."""

    def calculate_traffic_modifiers(self, context: PageContext) -> TrafficModifiers:
        traffic_modifier = TRAFFIC_SOURCE_MODIFIERS.get(context.traffic_source, DEFAULT_TRAFFIC_MODIFIER)
        device_modifier = DEVICE_MODIFIERS.get(context.device_type, DEFAULT_DEVICE_MODIFIER)

        bounce_rate = self.calculate_bounce_rate(
            context.traffic_source,
            context.device_type,
            context.load_time,
            context.ad_message_match,
        )
        engagement_rate = 1 - bounce_rate
        total_clicks = context.total_impressions * engagement_rate * AVG_CLICKS_PER_ENGAGED_USER

        logger.debug(
            f"Traffic: source={context.traffic_source} bounce={bounce_rate:.3f} "
            f"total_clicks={total_clicks:.1f}"
        )
        return TrafficModifiers(
            traffic_source_modifier=traffic_modifier,
            device_modifier=device_modifier,
            bounce_rate=bounce_rate,
            total_clicks=total_clicks,
            engagement_rate=engagement_rate,
        )

    def calculate_bounce_rate(
        self,
        traffic_source: str,
        device_type: str,
        load_time: Optional[float] = None,
        ad_message_match: Optional[float] = None,
    ) -> float:
        """
        Bounce rate for a traffic profile.

        Starts at the per-source base rate, scales by device, grows 10% per
        second of load time above 3s, shrinks with ad-message match, and is
        clamped to [0.1, 0.9].
        """
        bounce_rate = BASE_BOUNCE_RATES.get(traffic_source, DEFAULT_BOUNCE_RATE)
        bounce_rate *= DEVICE_MODIFIERS.get(device_type, DEFAULT_DEVICE_MODIFIER)

        load_time = load_time if load_time is not None else DEFAULT_LOAD_TIME
        if load_time > SLOW_LOAD_THRESHOLD:
            bounce_rate *= 1 + (load_time - SLOW_LOAD_THRESHOLD) * 0.1

        if ad_message_match:
            bounce_rate *= 1 - ad_message_match * 0.2

        return min(max(bounce_rate, MIN_BOUNCE_RATE), MAX_BOUNCE_RATE)

    def apply_traffic_adjustments(self, score: float, context: PageContext) -> float:
        """Scale an element score by source, device and industry CTA rate."""
        adjusted = score
        adjusted *= TRAFFIC_SOURCE_MODIFIERS.get(context.traffic_source, DEFAULT_TRAFFIC_MODIFIER)
        adjusted *= DEVICE_MODIFIERS.get(context.device_type, DEFAULT_DEVICE_MODIFIER)
        return self.apply_industry_modifiers(adjusted, context.industry, "cta_click_rate")

    def apply_industry_modifiers(self, value: float, industry: Optional[str], modifier_type: str) -> float:
        """
        Multiply value by an industry modifier.

        Args:
            value: Value to scale
            industry: Industry key, or None to leave the value unchanged
            modifier_type: 'form_completion_rate' or 'cta_click_rate'
        """
        if not industry or industry not in INDUSTRY_MODIFIERS:
            return value
        modifiers = INDUSTRY_MODIFIERS[industry]
        if modifier_type not in modifiers:
            raise ValueError(f"Unknown industry modifier: {modifier_type}")
        return value * modifiers[modifier_type]
