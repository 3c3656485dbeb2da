"""
Enhanced Element Matcher

Resolves a target element id to an element in a batch, tolerating the id
drift between capture tools. Strategies run in order and the first hit wins:

    exact-id          element.id == target                       (1.0)
    ox-id             alternate capture id                       (0.95)
    coordinate        "<type>-<x>-<y>" ids, exact position       (0.9)
    smart-coordinate  nearby position with a matching tag        (0.85)
    text-similarity   sole element of the type, or closest one   (0.8)
    fallback          nearest interactive element                (0.6)

The index is built once per batch and reused for every lookup.
"""

import logging
import math
import re
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .constants import DEFAULT_MATCH_TOLERANCE, MATCH_CONFIDENCE, SPATIAL_GRID_SIZE
from .models import ClickPredictionResult, DOMElement

logger = logging.getLogger(__name__)

ID_COORDINATE_PATTERNS = [
    re.compile(r"^(?:button|link|field|form)-(\d+)-(\d+)"),
    re.compile(r"(\d+)-(\d+)$"),
]
ID_TYPE_PATTERN = re.compile(r"^(button|link|field|form)")


@dataclass
class ElementIndex:
    """Lookup tables over one batch of elements."""
    by_id: Dict[str, DOMElement] = field(default_factory=dict)
    by_ox_id: Dict[str, DOMElement] = field(default_factory=dict)
    by_coordinates: Dict[str, List[DOMElement]] = field(default_factory=lambda: defaultdict(list))
    by_text: Dict[str, List[DOMElement]] = field(default_factory=lambda: defaultdict(list))
    by_grid: Dict[Tuple[int, int], List[DOMElement]] = field(default_factory=lambda: defaultdict(list))


@dataclass
class MatchResult:
    element: Optional[DOMElement]
    strategy: str
    confidence: float
    execution_time: float = 0.0  # ms


@dataclass
class StrategyStats:
    uses: int = 0
    time: float = 0.0
    success: int = 0


@dataclass
class MatcherStats:
    total_matches: int = 0
    total_time: float = 0.0
    strategies: Dict[str, StrategyStats] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        average = self.total_time / self.total_matches if self.total_matches else 0.0
        return {
            "totalMatches": self.total_matches,
            "averageTime": round(average, 3),
            "strategyBreakdown": {
                name: {"uses": s.uses, "time": s.time, "success": s.success}
                for name, s in self.strategies.items()
            },
        }


def extract_coordinates_from_id(target_id: str) -> Optional[Tuple[int, int]]:
    """(x, y) embedded in ids like "button-120-340" or "...-120-340"."""
    for pattern in ID_COORDINATE_PATTERNS:
        match = pattern.search(target_id)
        if match:
            return int(match.group(1)), int(match.group(2))
    return None


def extract_element_type_from_id(target_id: str) -> Optional[str]:
    match = ID_TYPE_PATTERN.match(target_id)
    return match.group(1) if match else None


def normalize_text(text: str) -> str:
    return " ".join(text.lower().split())


class EnhancedElementMatcher:
    """
    Multi-strategy element matcher with a per-batch index.

    Usage:
        matcher = EnhancedElementMatcher()
        matcher.start_batch(elements)
        result = matcher.find_element("button-120-340")
        matcher.end_batch()
    """

    def __init__(self, tolerance: float = DEFAULT_MATCH_TOLERANCE):
        if tolerance <= 0:
            raise ValueError(f"Match tolerance must be positive, got {tolerance}")
        self.tolerance = tolerance
        self.index: Optional[ElementIndex] = None
        self.elements: Optional[List[DOMElement]] = None
        self.stats = MatcherStats()

    # ========================================================================
    # Batch lifecycle
    # ========================================================================

    def build_index(self, elements: List[DOMElement]) -> ElementIndex:
        start = time.perf_counter()
        index = ElementIndex()

        for element in elements:
            if element.id:
                index.by_id.setdefault(element.id, element)
            if element.ox_id:
                index.by_ox_id.setdefault(element.ox_id, element)
            if element.coordinates is not None:
                x, y = element.coordinates.x, element.coordinates.y
                index.by_coordinates[self.coordinate_key(x, y)].append(element)
                if x >= 0 and y >= 0:
                    index.by_grid[(int(x // SPATIAL_GRID_SIZE), int(y // SPATIAL_GRID_SIZE))].append(element)
            if element.text and element.text.strip():
                index.by_text[normalize_text(element.text)].append(element)

        logger.debug(
            f"Element index built in {(time.perf_counter() - start) * 1000:.2f}ms "
            f"for {len(elements)} elements"
        )
        return index

    def start_batch(self, elements: List[DOMElement]) -> None:
        self.elements = elements
        self.index = self.build_index(elements)

    def end_batch(self) -> None:
        if self.stats.total_matches:
            summary = self.stats.to_dict()
            logger.debug(
                f"Matching batch complete: {summary['totalMatches']} matches, "
                f"avg {summary['averageTime']}ms, strategies={list(summary['strategyBreakdown'])}"
            )
        self.elements = None
        self.index = None

    def clear_cache(self) -> None:
        self.index = None

    def get_performance_stats(self) -> Dict[str, Any]:
        return self.stats.to_dict()

    # ========================================================================
    # Matching
    # ========================================================================

    def find_element(self, target_id: str, elements: Optional[List[DOMElement]] = None) -> MatchResult:
        """
        Resolve target_id against the batch.

        Args:
            target_id: Id to resolve
            elements: Element list; a list other than the current batch
                starts a new batch

        Raises:
            ValueError: If no batch was started and no elements were given
        """
        if elements is not None and elements is not self.elements:
            self.start_batch(elements)
        elif self.index is None:
            if self.elements is None:
                raise ValueError("No elements to match against; call start_batch() first")
            self.index = self.build_index(self.elements)

        start = time.perf_counter()
        coords = extract_coordinates_from_id(target_id)

        strategies = [
            ("exact-id", lambda: self.index.by_id.get(target_id)),
            ("ox-id", lambda: self.try_ox_id_match(target_id, coords)),
            ("coordinate", lambda: self.try_coordinate_match(coords)),
            ("smart-coordinate", lambda: self.try_smart_coordinate_match(target_id, coords)),
            ("text-similarity", lambda: self.try_text_similarity_match(target_id, coords)),
        ]
        for name, strategy in strategies:
            element = strategy()
            if element is not None:
                return self.record_match(element, name, start)

        return self.record_match(self.try_fallback_match(target_id, coords), "fallback", start)

    def try_ox_id_match(self, target_id: str, coords: Optional[Tuple[int, int]]) -> Optional[DOMElement]:
        if extract_element_type_from_id(target_id) in ("button", "link", "field") and len(target_id.split("-")) >= 4:
            for ox_id, element in self.index.by_ox_id.items():
                if ox_id in target_id or (coords and self.within_tolerance(coords, element)):
                    return element
        return self.index.by_ox_id.get(target_id)

    def try_coordinate_match(self, coords: Optional[Tuple[int, int]]) -> Optional[DOMElement]:
        if coords is None:
            return None
        for candidate in self.index.by_coordinates.get(self.coordinate_key(*coords), []):
            if candidate.box.x == coords[0] and candidate.box.y == coords[1]:
                return candidate
        return None

    def try_smart_coordinate_match(
        self, target_id: str, coords: Optional[Tuple[int, int]]
    ) -> Optional[DOMElement]:
        if coords is None:
            return None
        grid_x, grid_y = coords[0] // SPATIAL_GRID_SIZE, coords[1] // SPATIAL_GRID_SIZE
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for candidate in self.index.by_grid.get((grid_x + dx, grid_y + dy), []):
                    if self.within_tolerance(coords, candidate) and self.element_type_matches(target_id, candidate):
                        return candidate
        return None

    def try_text_similarity_match(
        self, target_id: str, coords: Optional[Tuple[int, int]]
    ) -> Optional[DOMElement]:
        element_type = extract_element_type_from_id(target_id)
        if element_type is None:
            return None

        same_type = [el for el in self.elements if self.element_type_matches(target_id, el)]
        if len(same_type) == 1:
            return same_type[0]

        if element_type in ("button", "link") and coords is not None:
            return self.closest(coords, same_type, self.tolerance * 2)
        return None

    def try_fallback_match(self, target_id: str, coords: Optional[Tuple[int, int]]) -> Optional[DOMElement]:
        if coords is None or extract_element_type_from_id(target_id) is None:
            return None
        interactive = [el for el in self.elements if el.is_interactive and el.coordinates is not None]
        return self.closest(coords, interactive, self.tolerance * 3)

    # ========================================================================
    # Helpers
    # ========================================================================

    def record_match(self, element: Optional[DOMElement], strategy: str, start: float) -> MatchResult:
        elapsed = (time.perf_counter() - start) * 1000
        self.stats.total_matches += 1
        self.stats.total_time += elapsed

        stats = self.stats.strategies.setdefault(strategy, StrategyStats())
        stats.uses += 1
        stats.time += elapsed
        if element is not None:
            stats.success += 1

        confidence = MATCH_CONFIDENCE[strategy] if element is not None else 0.0
        return MatchResult(element=element, strategy=strategy, confidence=confidence, execution_time=elapsed)

    def coordinate_key(self, x: float, y: float) -> str:
        rounded_x = round(x / self.tolerance) * self.tolerance
        rounded_y = round(y / self.tolerance) * self.tolerance
        return f"{rounded_x},{rounded_y}"

    def within_tolerance(self, coords: Tuple[int, int], element: DOMElement) -> bool:
        if element.coordinates is None:
            return False
        return (
            abs(coords[0] - element.coordinates.x) <= self.tolerance
            and abs(coords[1] - element.coordinates.y) <= self.tolerance
        )

    def closest(
        self, coords: Tuple[int, int], candidates: List[DOMElement], max_distance: float
    ) -> Optional[DOMElement]:
        best, best_distance = None, math.inf
        for candidate in candidates:
            distance = math.hypot(coords[0] - candidate.box.x, coords[1] - candidate.box.y)
            if distance < best_distance and distance < max_distance:
                best, best_distance = candidate, distance
        return best

    @staticmethod
    def element_type_matches(target_id: str, element: DOMElement) -> bool:
        expected = extract_element_type_from_id(target_id)
        if expected is None:
            return True
        if expected == "button":
            return element.tag == "button" or (element.type or "").lower() == "button"
        if expected == "link":
            return element.tag == "a"
        if expected == "field":
            return element.tag in ("input", "textarea", "select")
        return element.tag == expected


class ElementMatchHelper:
    """
    Convenience lookups over an EnhancedElementMatcher.

    Usage:
        helper = ElementMatchHelper()
        helper.start_batch(elements)
        cta = helper.find_primary_cta_element(top_prediction)
        helper.end_batch()
    """

    def __init__(self, matcher: Optional[EnhancedElementMatcher] = None):
        self.matcher = matcher or EnhancedElementMatcher()
        self.elements: Optional[List[DOMElement]] = None

    def start_batch(self, elements: List[DOMElement]) -> None:
        self.elements = elements
        self.matcher.start_batch(elements)

    def end_batch(self) -> None:
        self.elements = None
        self.matcher.end_batch()

    def find_element_by_id(
        self, target_id: str, fallback_elements: Optional[List[DOMElement]] = None
    ) -> Optional[DOMElement]:
        elements = self.elements if self.elements is not None else fallback_elements
        if elements is None:
            logger.warning("No elements available for matching")
            return None

        result = self.matcher.find_element(target_id, elements)
        if result.element is not None:
            logger.debug(
                f"Matched {target_id} via {result.strategy} ({result.confidence}) "
                f"in {result.execution_time:.2f}ms"
            )
        return result.element

    def find_multiple_elements(self, target_ids: List[str]) -> Dict[str, Optional[DOMElement]]:
        if self.elements is None:
            return {target_id: None for target_id in target_ids}
        return {target_id: self.find_element_by_id(target_id) for target_id in target_ids}

    def find_primary_cta_element(
        self,
        primary: ClickPredictionResult,
        fallback_elements: Optional[List[DOMElement]] = None,
    ) -> Optional[DOMElement]:
        """
        Resolve the element behind a primary CTA prediction.

        Tries the matcher, then a unique interactive element with the same
        text, then the first interactive above-fold element.
        """
        elements = self.elements if self.elements is not None else fallback_elements
        if not elements:
            return None

        element = self.find_element_by_id(primary.element_id, elements)
        if element is not None:
            return element

        if primary.text:
            wanted = primary.text.strip().lower()
            text_matches = [
                el for el in elements
                if el.is_interactive and el.text and el.text.strip().lower() == wanted
            ]
            if len(text_matches) == 1:
                return text_matches[0]

        for el in elements:
            if el.is_interactive and el.is_above_fold:
                logger.debug(f"Using fallback primary CTA: {el.text or el.id}")
                return el
        return None

    def get_performance_summary(self) -> Dict[str, Any]:
        summary = self.matcher.get_performance_stats()
        summary["currentBatchSize"] = len(self.elements) if self.elements is not None else 0
        return summary
