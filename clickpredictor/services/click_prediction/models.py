"""
Pydantic models for click prediction.

These models provide validated data structures for:
- Page input (DOMElement, Coordinates, PageContext)
- Per-element output (ClickPredictionResult, WasteBreakdown)
- Side-channel reports (FormBottleneckAnalysis, WastedClickAnalysis,
  ReliabilityAssessment, PredictionMetadata)
- The complete engine output (PredictionReport)

Attributes are snake_case in Python and camelCase on the wire, so capture
payloads validate as-is and model_dump(by_alias=True) reproduces the
external JSON contract.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases and plain-string enum values."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "use_enum_values": True,
        "validate_default": True,
        "extra": "ignore",
    }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible camelCase dict."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


# ============================================================================
# Enums
# ============================================================================

class TrafficSource(str, Enum):
    """Where the page traffic comes from."""
    ORGANIC = "organic"
    PAID = "paid"
    SOCIAL = "social"
    EMAIL = "email"
    DIRECT = "direct"
    REFERRAL = "referral"
    LINKEDIN = "linkedin"
    UNKNOWN = "unknown"


class DeviceType(str, Enum):
    DESKTOP = "desktop"
    MOBILE = "mobile"
    TABLET = "tablet"


class Industry(str, Enum):
    """Industry verticals with known CPC and behaviour modifiers."""
    SAAS = "saas"
    ECOMMERCE = "ecommerce"
    LEADGEN = "leadgen"
    CONTENT = "content"
    LEGAL = "legal"
    FINANCE = "finance"
    TECHNOLOGY = "technology"
    AUTOMOTIVE = "automotive"
    REALESTATE = "realestate"
    TRAVEL = "travel"
    CONSUMERSERVICES = "consumerservices"
    EDUCATION = "education"
    HEALTHCARE = "healthcare"


class BusinessType(str, Enum):
    B2B = "b2b"
    B2C = "b2c"
    UNKNOWN = "unknown"


class NetworkType(str, Enum):
    SEARCH = "search"
    DISPLAY = "display"
    SOCIAL = "social"
    UNKNOWN = "unknown"


class CompetitionLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"


class QualityScore(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"
    UNKNOWN = "unknown"


class GeoTier(str, Enum):
    TIER1 = "tier1"
    TIER2 = "tier2"
    TIER3 = "tier3"
    UNKNOWN = "unknown"


class ConfidenceLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CTAType(str, Enum):
    """Whether the primary CTA submits a form or triggers a direct action."""
    FORM_CTA = "form-cta"
    NON_FORM_CTA = "non-form-cta"
    UNKNOWN = "unknown"


class WastedClickType(str, Enum):
    BLOG_LINK = "blog-link"
    SOCIAL_LINK = "social-link"
    NAVIGATION = "navigation"
    ADDITIONAL_CTA = "additional-cta"
    EXTERNAL_LINK = "external-link"
    RESOURCE_LINK = "resource-link"
    MODAL_TRIGGER = "modal-trigger"
    CHAT_WIDGET = "chat-widget"
    DOWNLOAD_LINK = "download-link"
    FOOTER_LINK = "footer-link"
    SIDEBAR_LINK = "sidebar-link"


class ElementClassification(str, Enum):
    SUPPORTIVE = "supportive-click"
    NEUTRAL = "neutral-click"
    WASTED = "wasted-click"


# ============================================================================
# Input Models
# ============================================================================

class Coordinates(CamelModel):
    """Element bounding box in page pixels."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def has_area(self) -> bool:
        return self.width > 0 and self.height > 0


class DOMElement(CamelModel):
    """
    One scraped page element.

    Produced once per capture and treated as immutable by every component.
    """
    id: Optional[str] = Field(default=None, description="Stable element id")
    ox_id: Optional[str] = Field(default=None, description="Alternate id assigned by the capture tool")
    tag_name: str = Field(default="", description="HTML tag name")
    class_name: Optional[str] = None
    text: Optional[str] = None
    href: Optional[str] = None
    alt: Optional[str] = None

    is_visible: bool = True
    is_interactive: bool = False
    is_above_fold: bool = False
    has_button_styling: bool = False
    coordinates: Optional[Coordinates] = None
    distance_from_top: Optional[float] = Field(
        default=None,
        description="Pixels from page top; falls back to coordinates.y"
    )

    # Styling / behaviour
    has_high_contrast: bool = False
    is_auto_rotating: bool = False
    is_sticky: bool = False
    z_index: Optional[Union[int, float, str]] = None
    style: Dict[str, Any] = Field(default_factory=dict)
    autoplay: bool = False
    is_decorative: bool = False
    has_nearby_cta: bool = False
    has_visual_noise: bool = False
    has_multiple_competing_elements: bool = False

    # Form-specific
    type: Optional[str] = None
    name: Optional[str] = None
    required: bool = False
    label: Optional[str] = None
    placeholder: Optional[str] = None
    has_autocomplete: bool = False
    pattern: Optional[str] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    form_action: Optional[str] = None

    @field_validator("required", "is_visible", "is_interactive", "is_above_fold", "has_button_styling", mode="before")
    @classmethod
    def none_as_default(cls, v, info):
        if v is None:
            return info.field_name == "is_visible"
        return v

    @property
    def tag(self) -> str:
        """Lower-cased tag name."""
        return (self.tag_name or "").lower()

    @property
    def box(self) -> Coordinates:
        """Coordinates, or an empty box when the capture had none."""
        return self.coordinates or Coordinates()

    @property
    def top_offset(self) -> float:
        if self.distance_from_top is not None:
            return self.distance_from_top
        return self.box.y


class PageContext(CamelModel):
    """
    Page-level and traffic-level profile.

    Only the CPC estimator fills in unknown fields, and it returns a copy.
    """
    url: Optional[str] = None
    title: Optional[str] = None
    total_impressions: int = Field(default=1000, ge=0)
    traffic_source: TrafficSource = TrafficSource.UNKNOWN
    device_type: DeviceType = DeviceType.DESKTOP
    industry: Optional[Industry] = None

    business_type: Optional[BusinessType] = None
    network_type: Optional[NetworkType] = None
    competition_level: Optional[CompetitionLevel] = None
    quality_score: Optional[QualityScore] = None
    geo_tier: Optional[GeoTier] = None
    time_of_day: Optional[Literal["morning", "afternoon", "evening", "night"]] = None
    day_of_week: Optional[Literal["weekday", "weekend"]] = None
    seasonality: Optional[Literal["high", "normal", "low"]] = None
    competitor_presence: bool = False

    load_time: Optional[float] = Field(default=None, ge=0, description="Page load time in seconds")
    has_ssl: bool = Field(default=False, alias="hasSSL")
    has_trust_badges: bool = False
    has_testimonials: bool = False
    ad_message_match: Optional[float] = Field(default=None, ge=0, le=1)
    brand_recognition: Optional[Union[float, Literal["high", "medium", "low"]]] = None
    page_complexity: Optional[float] = Field(default=None, ge=0)

    fold_line: Optional[float] = None
    viewport_width: Optional[float] = None
    viewport_height: Optional[float] = None
    dom_content: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Raw capture payload (buttons, links, headings, ...) used for keyword scans"
    )
    all_elements: Optional[List[DOMElement]] = None


# ============================================================================
# Intermediate Models
# ============================================================================

class TrafficModifiers(CamelModel):
    traffic_source_modifier: float
    device_modifier: float
    bounce_rate: float
    total_clicks: float
    engagement_rate: float


class CPCBreakdown(CamelModel):
    base_cpc: float = Field(alias="baseCPC")
    industry_multiplier: float = 1.0
    business_type_multiplier: float = 1.0
    traffic_source_multiplier: float = 1.0
    device_multiplier: float = 1.0
    competition_multiplier: float = 1.0
    quality_multiplier: float = 1.0
    geo_multiplier: float = 1.0
    time_multiplier: float = 1.0


class CPCEstimate(CamelModel):
    estimated_cpc: float = Field(alias="estimatedCPC")
    breakdown: CPCBreakdown


# ============================================================================
# Per-element Output
# ============================================================================

class WasteBreakdown(CamelModel):
    """Per-element decomposition of the 4-phase waste rate."""
    base_waste_rate: float
    phase1_element_classification: float
    phase2_attention_ratio: float
    phase3_visual_emphasis: float
    phase4_content_clutter: float
    legacy_quality_factors: float
    total_waste_rate: float
    capped_waste_rate: float
    element_category: str
    attention_ratio: Optional[float] = None
    visual_factors: List[str] = Field(default_factory=list)
    clutter_factors: List[str] = Field(default_factory=list)
    legacy_factors: List[str] = Field(default_factory=list)


class ClickPredictionResult(CamelModel):
    """Final click prediction for one element."""
    element_id: str
    predicted_clicks: float
    estimated_clicks: int
    ctr: float
    click_share: float
    raw_score: float
    click_probability: float
    confidence: ConfidenceLevel
    risk_factors: List[str] = Field(default_factory=list)
    wasted_clicks: float = 0.0
    wasted_spend: float = 0.0
    avg_cpc: float = Field(default=0.0, alias="avgCPC")
    waste_breakdown: Optional[WasteBreakdown] = None

    # Display enrichment
    text: Optional[str] = None
    element_type: Optional[str] = None
    tag_name: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    # Form enrichment
    form_completion_rate: Optional[float] = None
    lead_count: Optional[int] = None
    bottleneck_field: Optional[str] = None

    # Wasted-click model v5.3 attachment
    wasted_click_score: Optional[float] = None
    waste_classification: Optional[ElementClassification] = None


# ============================================================================
# Form Analysis
# ============================================================================

class FieldCompletion(CamelModel):
    field_id: str
    completion_rate: float
    dropoff_rate: float
    complexity: float
    clarity: float
    position_score: float
    avg_time_to_complete: float = Field(description="Estimated seconds to fill the field")
    is_above_fold: bool


class FoldSeparation(CamelModel):
    above_fold: int = 0
    below_fold: int = 0


class FormBottleneckAnalysis(CamelModel):
    """
    Form conversion analysis.

    bottleneck_ctr is the overall form conversion: the product of every
    field's completion rate, scaled by the industry completion modifier.
    """
    bottleneck_field: str
    bottleneck_ctr: float = Field(alias="bottleneckCTR")
    bottleneck_completion_rate: float
    cumulative_completion_rate: float
    total_clicks: float
    field_breakdown: List[FieldCompletion] = Field(default_factory=list)
    fold_separation: FoldSeparation = Field(default_factory=FoldSeparation)
    recommended_optimizations: List[str] = Field(default_factory=list)


class AbandonmentPoint(CamelModel):
    field_id: str
    abandonment_risk: float
    reasons: List[str] = Field(default_factory=list)


class FunnelStep(CamelModel):
    field_id: str
    step_completion_rate: float
    cumulative_rate: float


class ConversionFunnel(CamelModel):
    steps: List[FunnelStep] = Field(default_factory=list)
    overall_conversion_rate: float
    dropoff_points: List[str] = Field(default_factory=list)


class FormOptimization(CamelModel):
    field_id: str
    suggestions: List[str]
    priority: Literal["high", "medium", "low"]


# ============================================================================
# Wasted-Click Model v5.3
# ============================================================================

class FormContext(CamelModel):
    cta_type: CTAType
    is_form_related: bool
    form_field_count: int
    primary_form_action: Optional[str] = None


class ScoringBreakdown(CamelModel):
    """The 14 sub-scores combined into a wasted click score."""
    distraction_score: float
    visibility_weight: float
    interaction_attractiveness: float
    intent_mismatch_penalty: float
    path_loop_penalty: float
    clarity_penalty: float
    timing_penalty: float
    fold_weight: float
    cta_duplication_boost: float
    direct_response_penalty: float
    click_distraction_index: float
    click_budget_risk: float
    loopback_penalty: float
    user_behavior_multiplier: float


class WastedClickElement(CamelModel):
    element: DOMElement
    wasted_click_score: float = Field(ge=0, le=1)
    type: WastedClickType
    distraction_factors: List[str] = Field(default_factory=list)
    recommendation: str
    classification: ElementClassification
    scoring_breakdown: ScoringBreakdown


class ProjectedImprovements(CamelModel):
    ctr_improvement: float
    fcr_improvement: float
    revenue_impact: float
    implementation_difficulty: Literal["easy", "moderate", "hard"]
    priority_score: int


class WastedClickAnalysis(CamelModel):
    total_wasted_elements: int
    average_wasted_score: float
    high_risk_elements: List[WastedClickElement] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    projected_improvements: ProjectedImprovements
    form_context: FormContext
    aggregate_wasted_clicks: float = Field(
        default=0.0,
        description="Sum of round(score * 100) over high-risk elements"
    )
    aggregate_wasted_spend: float = 0.0


# ============================================================================
# Engine Output
# ============================================================================

class ReliabilityAssessment(CamelModel):
    score: float = Field(ge=0, le=1)
    level: ConfidenceLevel
    factors: List[str] = Field(default_factory=list)


class PredictionMetadata(CamelModel):
    total_elements: int = 0
    interactive_elements: int = 0
    form_fields: int = 0
    processing_time: float = Field(default=0.0, description="Milliseconds")
    estimated_cpc: float = Field(default=0.0, alias="estimatedCPC")
    cpc_breakdown: Optional[CPCBreakdown] = None
    detected_industry: Optional[str] = None
    detected_business_type: Optional[str] = None
    primary_cta_id: Optional[str] = None
    detected_cta_id: Optional[str] = None
    cta_agreement: Optional[bool] = None
    matcher_stats: Dict[str, Any] = Field(default_factory=dict)


class PredictionReport(CamelModel):
    """Complete output of one prediction call."""
    predictions: List[ClickPredictionResult] = Field(default_factory=list)
    form_analysis: Optional[FormBottleneckAnalysis] = None
    wasted_click_analysis: Optional[WastedClickAnalysis] = None
    reliability: ReliabilityAssessment
    warnings: List[str] = Field(default_factory=list)
    metadata: PredictionMetadata = Field(default_factory=PredictionMetadata)


class AnalyticsSummary(CamelModel):
    total_predicted_clicks: float
    total_wasted_clicks: float
    total_wasted_spend: float
    average_ctr: float
    top_element_id: Optional[str] = None
    element_count: int


class ClickDistributionSummary(CamelModel):
    above_fold: float = 0.0
    below_fold: float = 0.0
    interactive: float = 0.0
    forms: float = 0.0


class AnalyticsReport(CamelModel):
    summary: AnalyticsSummary
    click_distribution: ClickDistributionSummary
    recommendations: List[str] = Field(default_factory=list)
