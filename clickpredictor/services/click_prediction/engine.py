"""
Click Prediction Engine

Orchestrates the prediction pipeline for one page:

    estimate context -> filter -> classify -> score -> distribute (+80/20)
    -> form analysis -> wasted-click analysis v5.3 -> reliability/warnings
    -> display enrichment -> sort

The pipeline is deterministic and fail-fast: any stage raising aborts the
call. predict_batch isolates failures per page instead.

Usage:
    engine = ClickPredictionEngine()
    report = await engine.predict_clicks(elements, context)
    print(report.predictions[0].element_id, report.predictions[0].predicted_clicks)
"""

import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from ...core.observability import get_logfire
from .constants import MAX_FORM_FIELDS
from .cpc_estimator import CPCEstimator
from .distribution import ClickDistributor
from .element_matcher import EnhancedElementMatcher
from .forms import FormAnalyzer
from .models import (
    AnalyticsReport,
    AnalyticsSummary,
    ClickDistributionSummary,
    ClickPredictionResult,
    ConfidenceLevel,
    DOMElement,
    FormBottleneckAnalysis,
    PageContext,
    PredictionMetadata,
    PredictionReport,
    ReliabilityAssessment,
    WastedClickAnalysis,
)
from .risk import assess_prediction_reliability, generate_prediction_warnings
from .scoring import ElementScorer
from .utils import assign_element_keys, element_key, is_form_field
from .wasted_click_model import WastedClickModel

logger = logging.getLogger(__name__)

ElementInput = Union[DOMElement, Mapping[str, Any]]
ContextInput = Union[PageContext, Mapping[str, Any]]

BATCH_FAILURE_WARNING = "Prediction failed due to processing error"


class ClickPredictionEngine:
    """
    Click prediction orchestrator.

    Holds stateless collaborators only; every predict_clicks call creates its
    own element matcher, so one engine can serve concurrent callers.
    """

    def __init__(self, config=None):
        """
        Args:
            config: PredictionConfig; loaded from CLICKPREDICTOR_CONFIG
                (or defaults) when None
        """
        from ...core.config import load_prediction_config

        self.config = config or load_prediction_config()
        self.scorer = ElementScorer(
            weights=self.config.feature_weights,
            max_elements=self.config.max_elements,
        )
        self.cpc_estimator = CPCEstimator()
        self.distributor = ClickDistributor(cpc_estimator=self.cpc_estimator)
        self.form_analyzer = FormAnalyzer()

    async def predict_clicks(
        self,
        elements: Sequence[ElementInput],
        context: ContextInput,
        detected_cta_id: Optional[str] = None,
    ) -> PredictionReport:
        """
        Predict clicks for every element on a page.

        Args:
            elements: DOMElements or capture dicts
            context: PageContext or dict
            detected_cta_id: The CTA an external identifier chose for display;
                compared against the engine's own primary CTA

        Returns:
            PredictionReport with predictions sorted by predicted clicks

        Raises:
            pydantic.ValidationError: If the context is invalid
        """
        lf = get_logfire()
        start = time.perf_counter()
        page_elements = self.coerce_elements(elements)
        page_context = self.prepare_context(context, page_elements)

        with lf.span("click_prediction.predict", elements=len(page_elements), url=page_context.url):
            enhanced = self.cpc_estimator.estimate_context(page_context)
            cpc = self.cpc_estimator.calculate_estimated_cpc(enhanced)
            logger.debug(
                f"Context: industry={enhanced.industry} business={enhanced.business_type} "
                f"CPC=${cpc.estimated_cpc:.2f}"
            )

            valid = assign_element_keys(self.filter_valid_elements(page_elements))
            by_key = self.index_by_key(valid)
            interactive, form_fields = self.classify_elements(valid)
            logger.debug(
                f"{len(valid)} valid elements: {len(interactive)} interactive, {len(form_fields)} form fields"
            )

            with lf.span("click_prediction.score", elements=len(interactive)):
                scored = self.scorer.score_elements(interactive, enhanced, form_aware=True)

            with lf.span("click_prediction.distribute", elements=len(scored)):
                predictions = self.distributor.distribute_clicks(scored, enhanced, cpc.estimated_cpc)
                predictions = self.distributor.apply_advanced_distribution(predictions, enhanced)

            form_analysis = None
            if form_fields:
                with lf.span("click_prediction.forms", fields=len(form_fields)):
                    total_clicks = sum(p.predicted_clicks for p in predictions)
                    form_analysis = self.form_analyzer.calculate_form_bottleneck_ctr(
                        form_fields, enhanced, total_clicks
                    )
                    predictions = self.update_form_predictions(predictions, form_analysis, form_fields)

            matcher = EnhancedElementMatcher(tolerance=self.config.matcher_tolerance)
            matcher.start_batch(valid)

            primary = max(predictions, key=lambda p: p.predicted_clicks) if predictions else None
            primary_element = self.resolve_primary(primary.element_id, by_key, matcher) if primary else None

            wasted_analysis = None
            if primary_element is not None:
                with lf.span("click_prediction.wasted_clicks", primary_cta=primary.element_id):
                    model = WastedClickModel(enhanced, estimated_cpc=cpc.estimated_cpc)
                    wasted_analysis = model.analyze_wasted_clicks(valid, primary_element, predictions)
                    predictions = self.attach_wasted_click_scores(predictions, wasted_analysis)
            elif predictions:
                logger.warning(f"Primary CTA {primary.element_id} not found, skipping wasted-click analysis")

            with lf.span("click_prediction.risk"):
                reliability = assess_prediction_reliability([(s.element, s.score) for s in scored], enhanced)
                warnings = generate_prediction_warnings([s.element for s in scored], enhanced)

            primary_id = primary.element_id if primary else None
            agreement = self.reconcile_primary_cta(primary_element, detected_cta_id, matcher, warnings)
            matcher_stats = matcher.get_performance_stats()
            matcher.end_batch()

            predictions = [self.enrich_prediction(p, by_key.get(p.element_id)) for p in predictions]
            predictions.sort(key=lambda p: p.predicted_clicks, reverse=True)

            processing_time = (time.perf_counter() - start) * 1000
            logger.info(
                f"Predicted {len(predictions)} elements in {processing_time:.1f}ms "
                f"(primary={primary_id}, reliability={reliability.level})"
            )

            return PredictionReport(
                predictions=predictions,
                form_analysis=form_analysis,
                wasted_click_analysis=wasted_analysis,
                reliability=reliability,
                warnings=warnings,
                metadata=PredictionMetadata(
                    total_elements=len(valid),
                    interactive_elements=len(interactive),
                    form_fields=len(form_fields),
                    processing_time=processing_time,
                    estimated_cpc=cpc.estimated_cpc,
                    cpc_breakdown=cpc.breakdown,
                    detected_industry=enhanced.industry,
                    detected_business_type=enhanced.business_type,
                    primary_cta_id=primary_id,
                    detected_cta_id=detected_cta_id,
                    cta_agreement=agreement,
                    matcher_stats=matcher_stats,
                ),
            )

    def predict_single_element(self, element: ElementInput, context: ContextInput) -> ClickPredictionResult:
        """Quick prediction for one element scored on its own."""
        if not isinstance(element, DOMElement):
            element = DOMElement.model_validate(element)
        enhanced = self.cpc_estimator.estimate_context(self.prepare_context(context, [element]))

        scored = self.scorer.score_element(element, enhanced)
        prediction = self.distributor.distribute_clicks([scored], enhanced)[0]
        return self.enrich_prediction(prediction, element)

    async def predict_batch(self, requests: Sequence[Mapping[str, Any]]) -> List[PredictionReport]:
        """
        Predict several pages sequentially.

        Each request is a mapping with "elements", "context" and optionally
        "detected_cta_id". A failing page yields a degraded report instead of
        failing the batch.
        """
        lf = get_logfire()
        reports = []

        with lf.span("click_prediction.batch", pages=len(requests)):
            for position, request in enumerate(requests):
                try:
                    report = await self.predict_clicks(
                        request["elements"],
                        request["context"],
                        detected_cta_id=request.get("detected_cta_id"),
                    )
                except Exception as e:
                    logger.warning(f"Batch prediction failed for page {position}: {e}")
                    report = PredictionReport(
                        reliability=ReliabilityAssessment(score=0.0, level=ConfidenceLevel.LOW),
                        warnings=[BATCH_FAILURE_WARNING],
                    )
                reports.append(report)

        return reports

    # ========================================================================
    # Input preparation
    # ========================================================================

    def coerce_elements(self, elements: Sequence[ElementInput]) -> List[DOMElement]:
        """Validate capture dicts into DOMElements, dropping invalid records."""
        coerced = []
        for raw in elements:
            if isinstance(raw, DOMElement):
                coerced.append(raw)
                continue
            try:
                coerced.append(DOMElement.model_validate(raw))
            except ValidationError as e:
                logger.debug(f"Dropping invalid element record: {e.error_count()} validation errors")
        return coerced

    def prepare_context(self, context: ContextInput, elements: List[DOMElement]) -> PageContext:
        """Apply configured defaults to unset context fields and attach the element list."""
        from ...core.config import Config

        defaults: Dict[str, Any] = {"total_impressions": Config.DEFAULT_TOTAL_IMPRESSIONS}
        defaults.update(self.config.context_defaults)

        if isinstance(context, PageContext):
            provided = context.model_dump(exclude_unset=True)
        else:
            provided = PageContext.model_validate(context).model_dump(exclude_unset=True)

        prepared = PageContext.model_validate({**defaults, **provided})
        if prepared.all_elements is None:
            prepared = prepared.model_copy(update={"all_elements": elements})
        return prepared

    def filter_valid_elements(self, elements: List[DOMElement]) -> List[DOMElement]:
        """Keep elements with a positive-area box; hidden non-interactive ones are dropped."""
        valid = []
        for element in elements:
            if element.coordinates is None or not element.coordinates.has_area:
                continue
            if is_form_field(element) and element.is_visible:
                valid.append(element)
            elif element.is_visible or element.is_interactive:
                valid.append(element)
        dropped = len(elements) - len(valid)
        if dropped:
            logger.debug(f"Filtered out {dropped} elements without a visible box")
        return valid[: self.config.max_elements]

    @staticmethod
    def classify_elements(elements: List[DOMElement]):
        """Split into (interactive, form_fields); form fields count as interactive."""
        interactive, form_fields = [], []
        for element in elements:
            if is_form_field(element):
                form_fields.append(element)
                interactive.append(element)
            elif element.is_interactive:
                interactive.append(element)
        return interactive, form_fields[:MAX_FORM_FIELDS]

    @staticmethod
    def index_by_key(elements: List[DOMElement]) -> Dict[str, DOMElement]:
        """Map prediction keys to elements; the first element wins a repeated explicit id."""
        by_key: Dict[str, DOMElement] = {}
        for element in elements:
            by_key.setdefault(element_key(element), element)
        return by_key

    @staticmethod
    def resolve_primary(
        element_id: str,
        by_key: Dict[str, DOMElement],
        matcher: EnhancedElementMatcher,
    ) -> Optional[DOMElement]:
        """The element behind the top prediction; the fuzzy matcher is only consulted on a key miss."""
        element = by_key.get(element_id)
        if element is not None:
            return element
        return matcher.find_element(element_id).element

    # ========================================================================
    # Post-processing
    # ========================================================================

    @staticmethod
    def update_form_predictions(
        predictions: List[ClickPredictionResult],
        form_analysis: Optional[FormBottleneckAnalysis],
        form_fields: List[DOMElement],
    ) -> List[ClickPredictionResult]:
        if form_analysis is None:
            return predictions

        field_keys = {element_key(field) for field in form_fields}
        updated = []
        for prediction in predictions:
            if prediction.element_id in field_keys or "form" in prediction.element_id:
                prediction = prediction.model_copy(
                    update={
                        "form_completion_rate": form_analysis.bottleneck_ctr,
                        "lead_count": round(prediction.predicted_clicks * form_analysis.bottleneck_ctr),
                        "bottleneck_field": form_analysis.bottleneck_field,
                    }
                )
            updated.append(prediction)
        return updated

    @staticmethod
    def attach_wasted_click_scores(
        predictions: List[ClickPredictionResult],
        analysis: WastedClickAnalysis,
    ) -> List[ClickPredictionResult]:
        """Attach each analyzed element's v5.3 score; 4-phase waste values stay untouched."""
        scores = {}
        for wasted in analysis.high_risk_elements:
            scores[element_key(wasted.element)] = wasted
        updated = []
        for prediction in predictions:
            wasted = scores.get(prediction.element_id)
            if wasted is not None:
                prediction = prediction.model_copy(
                    update={
                        "wasted_click_score": wasted.wasted_click_score,
                        "waste_classification": wasted.classification,
                    }
                )
            updated.append(prediction)
        return updated

    @staticmethod
    def reconcile_primary_cta(
        primary_element: Optional[DOMElement],
        detected_cta_id: Optional[str],
        matcher: EnhancedElementMatcher,
        warnings: List[str],
    ) -> Optional[bool]:
        """
        Compare the engine's primary CTA with an externally detected one.

        The two come from different heuristics and are reported side by side;
        a disagreement adds a warning but changes nothing else.

        Returns:
            None when no CTA was detected externally, else whether both agree
        """
        if detected_cta_id is None:
            return None

        detected = matcher.find_element(detected_cta_id).element
        agreement = detected is not None and detected is primary_element
        if not agreement:
            predicted = element_key(primary_element) if primary_element is not None else "none"
            warnings.append(
                f"Detected CTA '{detected_cta_id}' differs from predicted primary CTA '{predicted}'"
            )
        return agreement

    @staticmethod
    def enrich_prediction(
        prediction: ClickPredictionResult,
        element: Optional[DOMElement],
    ) -> ClickPredictionResult:
        if element is None:
            return prediction.model_copy(update={"text": prediction.element_id, "element_type": "unknown"})
        return prediction.model_copy(
            update={
                "text": element.text or prediction.element_id,
                "element_type": element.tag_name or "unknown",
                "tag_name": element.tag_name,
                "coordinates": element.coordinates,
            }
        )

    # ========================================================================
    # Reporting
    # ========================================================================

    def generate_analytics_report(
        self,
        report: PredictionReport,
        elements: Optional[Sequence[ElementInput]] = None,
    ) -> AnalyticsReport:
        """
        Summarize a report for dashboards.

        Args:
            report: Output of predict_clicks
            elements: The page elements, for the fold/interactive/form split
        """
        predictions = report.predictions
        count = len(predictions)
        total_clicks = sum(p.predicted_clicks for p in predictions)
        total_wasted_clicks = sum(p.wasted_clicks for p in predictions)
        total_wasted_spend = sum(p.wasted_spend for p in predictions)
        average_ctr = sum(p.ctr for p in predictions) / count if count else 0.0
        top = max(predictions, key=lambda p: p.predicted_clicks) if predictions else None

        distribution = ClickDistributionSummary()
        if elements is not None:
            page_elements = self.filter_valid_elements(self.coerce_elements(elements))
            by_key = self.index_by_key(assign_element_keys(page_elements))
            above = below = interactive = forms = 0.0
            for prediction in predictions:
                element = by_key.get(prediction.element_id)
                if element is None:
                    continue
                if element.is_above_fold:
                    above += prediction.predicted_clicks
                else:
                    below += prediction.predicted_clicks
                if is_form_field(element):
                    forms += prediction.predicted_clicks
                elif element.is_interactive:
                    interactive += prediction.predicted_clicks
            distribution = ClickDistributionSummary(
                above_fold=above, below_fold=below, interactive=interactive, forms=forms
            )

        recommendations = []
        if count and average_ctr < 1.0:
            recommendations.append("Overall CTR is low - consider improving element visibility and messaging")
        if total_wasted_clicks > total_clicks * 0.5:
            recommendations.append("High wasted spend detected - optimize non-performing elements")
        low_confidence = sum(1 for p in predictions if p.confidence == "low")
        if low_confidence > count * 0.3:
            recommendations.append("Many predictions have low confidence - consider gathering more data")

        return AnalyticsReport(
            summary=AnalyticsSummary(
                total_predicted_clicks=total_clicks,
                total_wasted_clicks=total_wasted_clicks,
                total_wasted_spend=total_wasted_spend,
                average_ctr=average_ctr,
                top_element_id=top.element_id if top else None,
                element_count=count,
            ),
            click_distribution=distribution,
            recommendations=recommendations,
        )
