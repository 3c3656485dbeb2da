"""
Form analysis.

Per-field completion rates, the bottleneck field, and the compounding
overall conversion of a form. A multi-field form converts at the product of
its field completion rates, so its conversion can never exceed its weakest
field.
"""

import logging
from typing import List, Optional

from .constants import (
    DEFAULT_FIELD_COMPLETION_SECONDS,
    FIELD_COMPLETION_SECONDS,
    FORM_CLICK_ALLOCATION,
    INDUSTRY_MODIFIERS,
)
from .models import (
    AbandonmentPoint,
    ConversionFunnel,
    DOMElement,
    FieldCompletion,
    FoldSeparation,
    FormBottleneckAnalysis,
    FormOptimization,
    FunnelStep,
    PageContext,
)
from .utils import field_type_complexity, field_type_of

logger = logging.getLogger(__name__)

MIN_COMPLETION_RATE = 0.1
ABOVE_FOLD_POSITION = 0.9
BELOW_FOLD_POSITION = 0.6
REQUIRED_FIELD_SECONDS = 1.5


def field_id_of(field: DOMElement) -> str:
    return field.id or f"field-{field.tag or 'input'}-{field.type or 'text'}"


class FormAnalyzer:
    """Form completion and bottleneck analysis."""

    def calculate_form_bottleneck_ctr(
        self,
        fields: List[DOMElement],
        context: PageContext,
        total_clicks: float,
    ) -> Optional[FormBottleneckAnalysis]:
        """
        Analyze a form's fields.

        Args:
            fields: Form field elements, in page order
            context: Page context (industry scales the overall rate)
            total_clicks: Total predicted clicks on the page

        Returns:
            FormBottleneckAnalysis, or None when there are no fields
        """
        if not fields:
            return None

        breakdown = [self.analyze_field(field) for field in fields]
        bottleneck = min(breakdown, key=lambda f: f.completion_rate)

        cumulative = 1.0
        for field in breakdown:
            cumulative *= field.completion_rate

        overall = cumulative
        if context.industry in INDUSTRY_MODIFIERS:
            overall *= INDUSTRY_MODIFIERS[context.industry]["form_completion_rate"]

        recommended = []
        for optimization in self.generate_form_optimizations(fields):
            if optimization.priority == "high":
                recommended.extend(s for s in optimization.suggestions if s not in recommended)

        logger.debug(
            f"Form analysis: {len(fields)} fields, bottleneck={bottleneck.field_id} "
            f"({bottleneck.completion_rate:.2f}), overall={overall:.3f}"
        )
        return FormBottleneckAnalysis(
            bottleneck_field=bottleneck.field_id,
            bottleneck_ctr=overall,
            bottleneck_completion_rate=bottleneck.completion_rate,
            cumulative_completion_rate=cumulative,
            total_clicks=max(total_clicks, 0.0) * FORM_CLICK_ALLOCATION,
            field_breakdown=breakdown,
            fold_separation=self.calculate_fold_separation(fields),
            recommended_optimizations=recommended,
        )

    def analyze_field(self, field: DOMElement) -> FieldCompletion:
        complexity = self.calculate_field_complexity(field)
        clarity = self.calculate_label_clarity(field)
        position = ABOVE_FOLD_POSITION if field.is_above_fold else BELOW_FOLD_POSITION
        completion = self.calculate_completion_rate(complexity, position, clarity)

        return FieldCompletion(
            field_id=field_id_of(field),
            completion_rate=completion,
            dropoff_rate=1 - completion,
            complexity=complexity,
            clarity=clarity,
            position_score=position,
            avg_time_to_complete=self.estimate_time_to_complete(field),
            is_above_fold=field.is_above_fold,
        )

    @staticmethod
    def calculate_completion_rate(complexity: float, position: float, clarity: float) -> float:
        rate = 0.9 - complexity * 0.3 - (1 - position) * 0.2 - (1 - clarity) * 0.1
        return max(MIN_COMPLETION_RATE, rate)

    def calculate_field_complexity(self, field: DOMElement) -> float:
        complexity = 0.2 + field_type_complexity(field)
        if field.required:
            complexity += 0.2
        if field.pattern or field.min_length or field.max_length:
            complexity += 0.1
        return min(complexity, 1.0)

    def calculate_label_clarity(self, field: DOMElement) -> float:
        clarity = 0.0
        if field.label:
            clarity += 0.5
        if field.placeholder:
            clarity += 0.3
        if 5 < len(field.label or "") < 20:
            clarity += 0.2
        return min(clarity, 1.0)

    def calculate_fold_separation(self, fields: List[DOMElement]) -> FoldSeparation:
        above = sum(1 for field in fields if field.is_above_fold)
        return FoldSeparation(above_fold=above, below_fold=len(fields) - above)

    def estimate_time_to_complete(self, field: DOMElement) -> float:
        seconds = FIELD_COMPLETION_SECONDS.get(field_type_of(field), DEFAULT_FIELD_COMPLETION_SECONDS)
        if field.required:
            seconds += REQUIRED_FIELD_SECONDS
        if not field.label and not field.placeholder:
            seconds *= 1.5
        return seconds

    # ========================================================================
    # Abandonment, funnel and optimizations
    # ========================================================================

    def predict_abandonment_points(self, fields: List[DOMElement]) -> List[AbandonmentPoint]:
        points = []
        for field in fields:
            complexity = self.calculate_field_complexity(field)
            clarity = self.calculate_label_clarity(field)
            position = 0.1 if field.is_above_fold else 0.3

            reasons = []
            if complexity > 0.6:
                reasons.append("High field complexity")
            if clarity < 0.4:
                reasons.append("Poor label clarity")
            if not field.is_above_fold:
                reasons.append("Below fold position")
            if field.required and not field.label:
                reasons.append("Required field without label")

            points.append(
                AbandonmentPoint(
                    field_id=field_id_of(field),
                    abandonment_risk=complexity * 0.4 + (1 - clarity) * 0.3 + position * 0.3,
                    reasons=reasons,
                )
            )
        return points

    def calculate_conversion_funnel(self, fields: List[DOMElement]) -> ConversionFunnel:
        """Step-by-step funnel; steps dropping more than 30% are dropoff points."""
        steps = []
        dropoff_points = []
        cumulative = 1.0

        for field in fields:
            step_rate = max(MIN_COMPLETION_RATE, 1.0 - self.calculate_field_complexity(field) * 0.5)
            cumulative *= step_rate
            steps.append(
                FunnelStep(
                    field_id=field_id_of(field),
                    step_completion_rate=step_rate,
                    cumulative_rate=cumulative,
                )
            )
            if 1 - step_rate > 0.3:
                dropoff_points.append(field_id_of(field))

        return ConversionFunnel(
            steps=steps,
            overall_conversion_rate=cumulative if fields else 0.0,
            dropoff_points=dropoff_points,
        )

    def generate_form_optimizations(self, fields: List[DOMElement]) -> List[FormOptimization]:
        optimizations = []
        for field in fields:
            complexity = self.calculate_field_complexity(field)
            clarity = self.calculate_label_clarity(field)
            suggestions = []
            priority = "low"

            if complexity > 0.6:
                suggestions.append("Simplify field requirements")
                priority = "high"
            if clarity < 0.4:
                suggestions.append("Add clear field labels")
                if priority != "high":
                    priority = "medium"
            if not field.is_above_fold:
                suggestions.append("Move field above the fold")
                if priority == "low":
                    priority = "medium"
            if field.required and not field.label:
                suggestions.append("Add label to required field")
                priority = "high"
            if not field.has_autocomplete and field_type_of(field) in ("email", "tel"):
                suggestions.append("Enable autocomplete for better UX")
                if priority == "low":
                    priority = "medium"

            optimizations.append(
                FormOptimization(field_id=field_id_of(field), suggestions=suggestions, priority=priority)
            )
        return optimizations
