"""
Click distribution.

Normalizes element scores into click-share probabilities, converts them into
absolute predicted clicks from the page-wide click volume, and attaches the
4-phase waste attribution and wasted spend to each element.
"""

import logging
import math
from typing import List, Optional

import numpy as np

from .constants import (
    ADVANCED_POOL_SHARE,
    ADVANCED_TOP_SHARE,
    MIN_CLICKS,
    MIN_CLICKS_PER_ELEMENT,
    MIN_CTR,
    MIN_SCORE,
)
from .cpc_estimator import CPCEstimator
from .models import ClickPredictionResult, ConfidenceLevel, PageContext
from .risk import calculate_confidence_level, generate_risk_factors
from .scoring import ScoredElement
from .traffic import TrafficAnalyzer
from .utils import element_key
from .waste import WasteAttributor

logger = logging.getLogger(__name__)


class ClickDistributor:
    """
    Turns scored elements into ClickPredictionResults.

    Usage:
        distributor = ClickDistributor()
        results = distributor.distribute_clicks(scored, context)
        results = distributor.apply_advanced_distribution(results, context)
    """

    def __init__(
        self,
        traffic_analyzer: Optional[TrafficAnalyzer] = None,
        cpc_estimator: Optional[CPCEstimator] = None,
        waste_attributor: Optional[WasteAttributor] = None,
    ):
        self.traffic_analyzer = traffic_analyzer or TrafficAnalyzer()
        self.cpc_estimator = cpc_estimator or CPCEstimator()
        self.waste_attributor = waste_attributor or WasteAttributor()

    def distribute_clicks(
        self,
        scored_elements: List[ScoredElement],
        context: PageContext,
        estimated_cpc: Optional[float] = None,
    ) -> List[ClickPredictionResult]:
        """
        Distribute the page's total clicks across scored elements.

        Args:
            scored_elements: Output of ElementScorer.score_elements
            context: Enriched page context
            estimated_cpc: CPC to price wasted clicks; estimated from context if None

        Returns:
            One result per element; click_share sums to 100
        """
        if not scored_elements:
            return []

        if all(scored.score <= MIN_SCORE for scored in scored_elements):
            logger.warning(f"All {len(scored_elements)} elements at the score floor, returning empty results")
            return self.create_empty_results(scored_elements)

        modifiers = self.traffic_analyzer.calculate_traffic_modifiers(context)
        if estimated_cpc is None:
            estimated_cpc = self.cpc_estimator.calculate_estimated_cpc(context).estimated_cpc

        adjusted = np.array(
            [self.traffic_analyzer.apply_traffic_adjustments(s.score, context) for s in scored_elements],
            dtype=float,
        )
        total_score = float(adjusted.sum())
        if total_score <= 0 or not math.isfinite(total_score):
            logger.warning("Adjusted scores sum to zero, returning empty results")
            return self.create_empty_results(scored_elements)

        probabilities = adjusted / total_score
        probabilities = probabilities * (modifiers.traffic_source_modifier * modifiers.device_modifier)
        total_probability = float(probabilities.sum())
        probabilities = probabilities / total_probability if total_probability > 0 else probabilities

        results = []
        for scored, adjusted_score, probability in zip(scored_elements, adjusted, probabilities):
            scored.adjusted_score = float(adjusted_score)
            scored.probability = float(probability)
            results.append(
                self.create_prediction_result(scored, modifiers.total_clicks, context, estimated_cpc)
            )

        logger.debug(f"Distributed {modifiers.total_clicks:.1f} clicks across {len(results)} elements")
        return results

    def create_prediction_result(
        self,
        scored: ScoredElement,
        total_clicks: float,
        context: PageContext,
        avg_cpc: float,
    ) -> ClickPredictionResult:
        element = scored.element
        avg_cpc = round(avg_cpc, 2)
        predicted_clicks = max(scored.probability * total_clicks, MIN_CLICKS)
        ctr = predicted_clicks / context.total_impressions * 100 if context.total_impressions else 0.0

        wasted_clicks, breakdown = self.waste_attributor.calculate_wasted_clicks_with_breakdown(
            element, predicted_clicks, context
        )

        return ClickPredictionResult(
            element_id=element_key(element),
            predicted_clicks=predicted_clicks,
            estimated_clicks=round(predicted_clicks),
            ctr=max(ctr, MIN_CTR),
            click_share=scored.probability * 100,
            raw_score=scored.score,
            click_probability=scored.probability,
            confidence=calculate_confidence_level(element, scored.score, context),
            risk_factors=generate_risk_factors(element, context),
            wasted_clicks=wasted_clicks,
            wasted_spend=round(wasted_clicks * avg_cpc, 2),
            avg_cpc=avg_cpc,
            waste_breakdown=breakdown,
        )

    def create_empty_results(self, scored_elements: List[ScoredElement]) -> List[ClickPredictionResult]:
        """Uniform minimal results for a batch with no usable scores."""
        return [
            ClickPredictionResult(
                element_id=element_key(scored.element),
                predicted_clicks=MIN_CLICKS,
                estimated_clicks=0,
                ctr=MIN_CTR,
                click_share=MIN_CLICKS,
                raw_score=0.0,
                click_probability=0.0,
                confidence=ConfidenceLevel.LOW,
                risk_factors=["No valid scoring data"],
            )
            for scored in scored_elements
        ]

    # ========================================================================
    # 80/20 redistribution
    # ========================================================================

    def apply_advanced_distribution(
        self,
        results: List[ClickPredictionResult],
        context: PageContext,
    ) -> List[ClickPredictionResult]:
        """
        Winner-take-more redistribution.

        The top 20% of elements by predicted clicks share a pool of 10% of
        total clicks taken evenly from the rest (floored at 0.1 clicks).
        Shares, probabilities, CTR and wasted clicks are recomputed from the
        new click counts so click_share still sums to 100.
        """
        count = len(results)
        top_count = math.ceil(count * ADVANCED_TOP_SHARE)
        if count == 0 or top_count >= count:
            return list(results)

        ranked = sorted(results, key=lambda r: r.predicted_clicks, reverse=True)
        total_clicks = sum(r.predicted_clicks for r in ranked)
        pool = total_clicks * ADVANCED_POOL_SHARE
        boost = pool / top_count
        reduction = pool / (count - top_count)

        new_clicks = {}
        for rank, result in enumerate(ranked):
            if rank < top_count:
                new_clicks[id(result)] = result.predicted_clicks + boost
            else:
                new_clicks[id(result)] = max(result.predicted_clicks - reduction, MIN_CLICKS_PER_ELEMENT)

        new_total = sum(new_clicks.values())
        redistributed = []
        for result in results:
            clicks = new_clicks[id(result)]
            share = clicks / new_total if new_total > 0 else 0.0
            capped_rate = result.waste_breakdown.capped_waste_rate if result.waste_breakdown else 0.0
            wasted_clicks = clicks * capped_rate
            ctr = clicks / context.total_impressions * 100 if context.total_impressions else 0.0
            redistributed.append(
                result.model_copy(
                    update={
                        "predicted_clicks": clicks,
                        "estimated_clicks": round(clicks),
                        "ctr": max(ctr, MIN_CTR),
                        "click_share": share * 100,
                        "click_probability": share,
                        "wasted_clicks": wasted_clicks,
                        "wasted_spend": round(wasted_clicks * result.avg_cpc, 2),
                    }
                )
            )
        return redistributed
