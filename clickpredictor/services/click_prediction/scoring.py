"""
Element scoring.

Converts a feature vector into a single attractiveness score using a fixed
linear weighting, then applies visibility, fold and element-type modifiers.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .constants import (
    ABOVE_FOLD_MULTIPLIER,
    BELOW_FOLD_MULTIPLIER,
    FEATURE_WEIGHTS,
    INVISIBLE_MULTIPLIER,
    MAX_ELEMENTS,
    MIN_SCORE,
)
from .features import ElementFeatures, FeatureExtractor
from .models import DOMElement, PageContext
from .utils import is_form_field

logger = logging.getLogger(__name__)

FORM_FIELD_MULTIPLIER = 0.8
BUTTON_STYLING_MULTIPLIER = 1.2
INTERACTIVE_MULTIPLIER = 1.1
FORM_MODIFIER_SPREAD = 0.4


@dataclass
class ScoredElement:
    """Element with its features and score; lives for one prediction call."""
    element: DOMElement
    features: ElementFeatures
    score: float
    adjusted_score: float = 0.0
    probability: float = 0.0


class ElementScorer:
    """
    Linear feature scorer.

    Args:
        weights: Optional per-feature weight overrides merged over FEATURE_WEIGHTS
        max_elements: Batch cap for score_elements
    """

    def __init__(
        self,
        weights: Optional[Dict[str, float]] = None,
        max_elements: int = MAX_ELEMENTS,
        extractor: Optional[FeatureExtractor] = None,
    ):
        self.weights = dict(FEATURE_WEIGHTS)
        if weights:
            unknown = set(weights) - set(FEATURE_WEIGHTS)
            if unknown:
                raise ValueError(f"Unknown feature weights: {sorted(unknown)}")
            self.weights.update(weights)
        self.max_elements = max_elements
        self.extractor = extractor or FeatureExtractor()

    def weighted_sum(self, features: ElementFeatures) -> float:
        values = features.as_dict()
        return sum(values[name] * weight for name, weight in self.weights.items())

    def score_element(self, element: DOMElement, context: PageContext) -> ScoredElement:
        """
        Score one element.

        Returns:
            ScoredElement whose score is never below MIN_SCORE
        """
        features = self.extractor.extract_features(element, context)
        score = self.weighted_sum(features)

        score *= 1.0 if element.is_visible else INVISIBLE_MULTIPLIER
        score *= ABOVE_FOLD_MULTIPLIER if element.is_above_fold else BELOW_FOLD_MULTIPLIER

        if is_form_field(element):
            score *= FORM_FIELD_MULTIPLIER
        if element.has_button_styling:
            score *= BUTTON_STYLING_MULTIPLIER
        if element.is_interactive:
            score *= INTERACTIVE_MULTIPLIER

        return ScoredElement(element=element, features=features, score=max(score, MIN_SCORE))

    def score_elements(
        self,
        elements: List[DOMElement],
        context: PageContext,
        form_aware: bool = False,
    ) -> List[ScoredElement]:
        """
        Score up to max_elements elements, dropping any at the score floor.

        Args:
            elements: Elements to score (extra elements beyond the cap are ignored)
            context: Page context
            form_aware: Route form fields through score_form_element
        """
        if len(elements) > self.max_elements:
            logger.debug(f"Scoring first {self.max_elements} of {len(elements)} elements")

        scored = []
        for element in elements[: self.max_elements]:
            if form_aware and is_form_field(element):
                result = self.score_form_element(element, context)
            else:
                result = self.score_element(element, context)
            if result.score > MIN_SCORE:
                scored.append(result)
        return scored

    # ========================================================================
    # Form fields
    # ========================================================================

    def score_form_element(self, element: DOMElement, context: PageContext) -> ScoredElement:
        """Score a form field with five extra +/-20% modifiers around 0.5."""
        scored = self.score_element(element, context)

        modifiers = [
            scored.features.field_complexity if is_form_field(element) else 0.5,
            0.8 if element.is_above_fold else 0.4,
            self.label_clarity(element),
            0.6 if self.has_validation(element) else 0.3,
            0.8 if element.has_autocomplete else 0.2,
        ]
        score = scored.score
        for value in modifiers:
            score *= 1 + (value - 0.5) * FORM_MODIFIER_SPREAD

        scored.score = max(score, MIN_SCORE)
        return scored

    @staticmethod
    def label_clarity(element: DOMElement) -> float:
        clarity = 0.0
        if element.label:
            clarity += 0.5
        if element.placeholder:
            clarity += 0.3
        if element.label and 5 < len(element.label) < 20:
            clarity += 0.2
        return min(clarity, 1.0)

    @staticmethod
    def has_validation(element: DOMElement) -> bool:
        return bool(
            element.pattern
            or element.min_length is not None
            or element.max_length is not None
            or element.required
        )
