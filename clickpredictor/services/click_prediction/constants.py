"""
Click Prediction Constants

Single source of truth for every weight, rate and lookup table used by the
click prediction pipeline (features, scoring, traffic, CPC, waste, forms).
"""

from typing import Dict, List


# ============================================================================
# Feature weights (linear scoring model)
# ============================================================================

FEATURE_WEIGHTS: Dict[str, float] = {
    "visibility_score": 0.15,
    "information_scent": 0.12,
    "friction_score": 0.10,
    "interactivity_score": 0.08,
    "heatmap_attention": 0.09,
    "credibility_score": 0.08,
    "content_depth_score": 0.07,
    "intent_score": 0.06,
    "visual_affordance_score": 0.06,
    "scroll_depth_score": 0.05,
    "performance_score": 0.05,
    "trust_boost": 0.04,
    "segment_modifier": 0.03,
    "social_proof_boost": 0.03,
    "progress_indication": 0.03,
    "dynamic_content_boost": 0.02,
    "urgency_boost": 0.02,
    "auto_completion": 0.02,
    "field_grouping": 0.02,
    "emotional_color_boost": 0.01,
    "cross_device_priming": 0.01,
    # Penalties
    "dead_click_risk": -0.04,
    "cognitive_load_penalty": -0.02,
    "field_complexity": -0.08,
}


# ============================================================================
# Pipeline limits and behavioural constants
# ============================================================================

MAX_ELEMENTS = 100
MAX_FORM_FIELDS = 20
MIN_SCORE = 0.001
MIN_CLICKS = 0.1
MIN_CLICKS_PER_ELEMENT = 0.1
MIN_CTR = 0.01
MAX_WASTE_RATE = 0.8

DEFAULT_FOLD_LINE = 1000
MOBILE_FOLD_LINE = 650
# Fold assumed for raw page captures that carry no foldLine
CAPTURE_FOLD_LINE = 800

AVG_CLICKS_PER_ENGAGED_USER = 2.3
FORM_CLICK_ALLOCATION = 0.3
ABOVE_FOLD_MULTIPLIER = 1.0
BELOW_FOLD_MULTIPLIER = 0.6
INVISIBLE_MULTIPLIER = 0.1

DEFAULT_BOUNCE_RATE = 0.6
DEFAULT_TRAFFIC_MODIFIER = 0.85
DEFAULT_DEVICE_MODIFIER = 1.0
MIN_BOUNCE_RATE = 0.1
MAX_BOUNCE_RATE = 0.9

# Neutral values for optional context signals
DEFAULT_TOTAL_IMPRESSIONS = 1000
DEFAULT_LOAD_TIME = 3.0
DEFAULT_PAGE_COMPLEXITY = 50.0

HIGH_CONFIDENCE_THRESHOLD = 0.7
MEDIUM_CONFIDENCE_THRESHOLD = 0.4

MIN_TOUCH_TARGET = 44
ADVANCED_TOP_SHARE = 0.2
ADVANCED_POOL_SHARE = 0.1


# ============================================================================
# 4-phase waste attribution
# ============================================================================

ELEMENT_WASTE_RATES: Dict[str, float] = {
    "primary_cta": 0.0,
    "navigation": 0.40,
    "social_media": 0.35,
    "external_link": 0.30,
    "interruptive": 0.30,
    "auto_playing_media": 0.25,
    "competing_cta": 0.20,
    "internal_navigation": 0.10,
    "trust_indicator": 0.05,
    "supporting_content": 0.05,
    "unknown": 0.15,
}

ELEMENT_CATEGORY_LABELS: Dict[str, str] = {
    "primary_cta": "Primary CTA",
    "navigation": "Navigation",
    "social_media": "Social Media",
    "external_link": "External Link",
    "interruptive": "Interruptive",
    "auto_playing_media": "Auto-playing Media",
    "competing_cta": "Competing CTA",
    "internal_navigation": "Internal Navigation",
    "trust_indicator": "Trust Indicator",
    "supporting_content": "Supporting Content",
    "unknown": "Unknown",
}

# Attention ratio thresholds, highest first: (ratio above, added waste)
ATTENTION_RATIO_PENALTIES = [
    (20, 0.25),
    (10, 0.15),
]

VISUAL_EMPHASIS_PENALTIES: Dict[str, float] = {
    "high_contrast": 0.10,
    "sticky_navigation": 0.20,
    "sticky_cta": -0.05,
    "auto_rotating": 0.15,
    "high_z_index": 0.10,
}
HIGH_Z_INDEX = 1000

CONTENT_CLUTTER_PENALTIES: Dict[str, float] = {
    "long_text": 0.10,
    "decorative_images": 0.05,
    "visual_noise": 0.08,
    "competing_elements": 0.12,
}
LONG_TEXT_LENGTH = 500

LEGACY_QUALITY_PENALTIES: Dict[str, float] = {
    "non_interactive": 0.30,
    "missing_button_styling": 0.10,
    "below_fold": 0.10,
    "minimal_text": 0.15,
}


# ============================================================================
# Traffic tables
# ============================================================================

TRAFFIC_SOURCE_MODIFIERS: Dict[str, float] = {
    "organic": 0.85,
    "paid": 1.2,
    "social": 0.7,
    "email": 1.1,
    "direct": 0.9,
    "referral": 0.8,
    "unknown": 0.75,
}

DEVICE_MODIFIERS: Dict[str, float] = {
    "desktop": 1.0,
    "mobile": 0.85,
    "tablet": 0.95,
}

BASE_BOUNCE_RATES: Dict[str, float] = {
    "organic": 0.45,
    "paid": 0.65,
    "social": 0.7,
    "email": 0.35,
    "direct": 0.4,
    "referral": 0.55,
}

# Per-industry behaviour and 2025 average search CPC
INDUSTRY_MODIFIERS: Dict[str, Dict[str, float]] = {
    "saas": {"form_completion_rate": 0.85, "cta_click_rate": 1.2, "bounce_rate_adjustment": -0.05, "avg_cpc": 8.5},
    "ecommerce": {"form_completion_rate": 0.75, "cta_click_rate": 1.4, "bounce_rate_adjustment": 0.1, "avg_cpc": 1.16},
    "leadgen": {"form_completion_rate": 0.65, "cta_click_rate": 1.1, "bounce_rate_adjustment": 0.05, "avg_cpc": 4.2},
    "content": {"form_completion_rate": 0.7, "cta_click_rate": 0.9, "bounce_rate_adjustment": -0.1, "avg_cpc": 2.4},
    "legal": {"form_completion_rate": 0.8, "cta_click_rate": 1.3, "bounce_rate_adjustment": 0.0, "avg_cpc": 6.75},
    "finance": {"form_completion_rate": 0.75, "cta_click_rate": 1.1, "bounce_rate_adjustment": 0.05, "avg_cpc": 3.44},
    "technology": {"form_completion_rate": 0.8, "cta_click_rate": 1.2, "bounce_rate_adjustment": -0.05, "avg_cpc": 3.8},
    "automotive": {"form_completion_rate": 0.7, "cta_click_rate": 1.0, "bounce_rate_adjustment": 0.0, "avg_cpc": 2.46},
    "realestate": {"form_completion_rate": 0.75, "cta_click_rate": 1.1, "bounce_rate_adjustment": 0.0, "avg_cpc": 2.37},
    "travel": {"form_completion_rate": 0.65, "cta_click_rate": 0.9, "bounce_rate_adjustment": 0.1, "avg_cpc": 1.53},
    "consumerservices": {"form_completion_rate": 0.7, "cta_click_rate": 1.0, "bounce_rate_adjustment": 0.0, "avg_cpc": 6.4},
    "education": {"form_completion_rate": 0.75, "cta_click_rate": 0.95, "bounce_rate_adjustment": -0.05, "avg_cpc": 2.4},
    "healthcare": {"form_completion_rate": 0.78, "cta_click_rate": 1.15, "bounce_rate_adjustment": 0.02, "avg_cpc": 4.8},
}


# ============================================================================
# CPC estimation
# ============================================================================

BASE_CPC = 2.93
MIN_CPC = 2.93

BUSINESS_TYPE_CPC: Dict[str, float] = {
    "b2b": 1.24,
    "b2c": 0.98,
}

TRAFFIC_SOURCE_CPC: Dict[str, float] = {
    "organic": 0.0,
    "paid": 1.0,
    "social": 0.4,
    "email": 0.05,
    "direct": 0.0,
    "referral": 0.15,
    "unknown": 0.3,
    "linkedin": 2.0,
}

DEVICE_CPC: Dict[str, float] = {
    "desktop": 1.0,
    "mobile": 0.85,
    "tablet": 0.92,
}

GEO_TIER_CPC: Dict[str, float] = {
    "tier1": 1.0,
    "tier2": 0.7,
    "tier3": 0.4,
    "unknown": 0.8,
}

COMPETITION_CPC: Dict[str, float] = {
    "high": 1.4,
    "medium": 1.0,
    "low": 0.7,
    "unknown": 1.0,
}

QUALITY_SCORE_CPC: Dict[str, float] = {
    "excellent": 0.7,
    "good": 0.85,
    "average": 1.0,
    "poor": 1.3,
    "unknown": 1.0,
}

TIME_OF_DAY_CPC: Dict[str, float] = {
    "morning": 1.1,
    "afternoon": 1.1,
    "evening": 0.95,
    "night": 0.8,
}
WEEKDAY_CPC = 1.05
SEASONALITY_CPC: Dict[str, float] = {
    "high": 1.2,
    "low": 0.85,
}

B2B_INDUSTRIES = ["saas", "technology", "legal", "finance", "leadgen", "healthcare"]
B2C_INDUSTRIES = ["ecommerce", "travel", "consumerservices"]

HIGH_COMPETITION_INDUSTRIES = ["legal", "finance", "consumerservices", "saas", "healthcare"]
MEDIUM_COMPETITION_INDUSTRIES = ["technology", "automotive", "realestate"]
LOW_COMPETITION_INDUSTRIES = ["content", "travel"]

# URL substring hints, checked in order
INDUSTRY_URL_HINTS = [
    ("saas", ["saas", "software", "app", "platform"]),
    ("ecommerce", ["shop", "store", "buy", "cart"]),
    ("legal", ["law", "legal", "attorney", "lawyer"]),
    ("finance", ["bank", "finance", "insurance", "loan"]),
    ("technology", ["tech", "ai", "cloud", "api"]),
    ("realestate", ["real", "property", "homes", "realty"]),
    ("travel", ["travel", "hotel", "flight", "booking"]),
    ("automotive", ["auto", "car", "vehicle", "dealer"]),
]

INDUSTRY_KEYWORDS: Dict[str, List[str]] = {
    "legal": [
        "attorney", "lawyer", "legal", "law firm", "litigation", "lawsuit", "court",
        "legal advice", "legal services", "paralegal", "solicitor", "barrister",
        "personal injury", "criminal defense", "divorce", "custody", "estate planning",
        "contract law", "corporate law", "immigration law", "bankruptcy", "dui",
        "workers compensation", "medical malpractice", "wrongful death",
    ],
    "finance": [
        "bank", "banking", "loan", "mortgage", "insurance", "financial", "investment",
        "credit", "finance", "wealth management", "financial advisor", "retirement",
        "portfolio", "stocks", "bonds", "mutual funds", "ira", "401k", "annuity",
        "life insurance", "auto insurance", "home insurance", "health insurance",
        "business insurance", "liability insurance", "refinance", "equity",
    ],
    "technology": [
        "software", "technology", "tech", "ai", "artificial intelligence",
        "machine learning", "cloud", "api", "development", "programming", "coding",
        "app", "mobile app", "web development", "cybersecurity", "data", "analytics",
        "blockchain", "cryptocurrency", "digital transformation", "automation", "iot",
        "saas",
    ],
    "saas": [
        "saas", "software as a service", "platform", "dashboard", "subscription",
        "cloud-based", "enterprise software", "business software", "crm", "erp",
        "project management", "collaboration", "productivity", "workflow",
        "integration", "scalable", "multi-tenant", "b2b software",
    ],
    "ecommerce": [
        "shop", "store", "buy", "purchase", "cart", "checkout", "product", "sale",
        "discount", "free shipping", "return policy", "customer reviews", "wishlist",
        "inventory", "catalog", "marketplace", "retail", "online store", "e-commerce",
        "payment", "secure checkout", "add to cart", "buy now",
    ],
    "realestate": [
        "real estate", "property", "homes", "house", "apartment", "condo", "rental",
        "buy home", "sell home", "mortgage", "realtor", "agent", "listing", "mls",
        "property management", "commercial real estate", "residential",
        "investment property", "home value", "market analysis", "closing",
    ],
    "healthcare": [
        "doctor", "medical", "health", "healthcare", "clinic", "hospital", "physician",
        "dentist", "dental", "surgery", "treatment", "patient", "appointment",
        "medical practice", "specialist", "therapy", "diagnosis", "prescription",
        "insurance accepted", "telehealth", "urgent care",
    ],
    "education": [
        "education", "school", "university", "college", "course", "training", "learn",
        "student", "degree", "certification", "online learning", "e-learning",
        "tutorial", "class", "instructor", "curriculum", "academic", "scholarship",
        "enrollment", "tuition", "campus",
    ],
    "travel": [
        "travel", "hotel", "flight", "booking", "vacation", "trip", "resort", "airline",
        "cruise", "tour", "destination", "accommodation", "reservation", "hospitality",
        "restaurant", "dining", "tourism", "adventure", "package deal",
    ],
    "automotive": [
        "auto", "car", "vehicle", "automotive", "dealership", "used cars", "new cars",
        "truck", "suv", "motorcycle", "parts", "service", "repair", "maintenance",
        "financing", "lease", "trade-in", "warranty", "insurance", "registration",
    ],
    "consumerservices": [
        "service", "repair", "maintenance", "cleaning", "landscaping", "plumbing",
        "electrical", "hvac", "roofing", "painting", "construction", "renovation",
        "home improvement", "contractor", "handyman", "installation",
        "emergency service", "local service", "professional service", "licensed",
        "insured",
    ],
}
MIN_INDUSTRY_KEYWORD_HITS = 3

B2B_URL_HINTS = ["enterprise", "business", "b2b", "corporate"]
B2C_URL_HINTS = ["consumer", "personal", "individual"]

B2B_KEYWORDS = [
    "enterprise", "business", "corporate", "b2b", "professional", "organization",
    "company", "team", "workflow", "productivity", "collaboration", "integration",
    "scalable", "roi", "efficiency", "automation", "dashboard", "analytics",
]
B2C_KEYWORDS = [
    "personal", "individual", "family", "home", "consumer", "lifestyle", "everyday",
    "simple", "easy", "convenient", "affordable", "budget", "save money", "deal",
    "discount", "free trial", "no commitment",
]
MIN_BUSINESS_KEYWORD_HITS = 2


# ============================================================================
# Forms
# ============================================================================

FIELD_TYPE_COMPLEXITY: Dict[str, float] = {
    "text": 0.1,
    "email": 0.3,
    "password": 0.5,
    "tel": 0.4,
    "number": 0.2,
    "date": 0.3,
    "select": 0.2,
    "textarea": 0.4,
    "checkbox": 0.1,
    "radio": 0.1,
}
DEFAULT_FIELD_COMPLEXITY = 0.3

FORM_FIELD_TAGS = ("input", "textarea", "select")

# Seconds a typical visitor spends per field type
FIELD_COMPLETION_SECONDS: Dict[str, float] = {
    "text": 4.0,
    "email": 5.0,
    "password": 8.0,
    "tel": 6.0,
    "number": 3.0,
    "date": 6.0,
    "select": 3.0,
    "textarea": 20.0,
    "checkbox": 1.0,
    "radio": 2.0,
}
DEFAULT_FIELD_COMPLETION_SECONDS = 5.0


# ============================================================================
# Keyword lists
# ============================================================================

HIGH_INTENT_KEYWORDS = [
    "buy", "purchase", "order", "get", "start", "begin", "try", "download",
    "sign up", "signup", "register", "join", "subscribe", "book", "schedule",
    "request", "claim", "unlock", "access", "upgrade", "activate",
]

CTA_PATTERNS = ["get", "start", "try", "buy", "sign up", "download", "learn more"]

URGENCY_KEYWORDS = [
    "now", "today", "limited", "hurry", "fast", "quick", "instant", "immediate",
    "deadline", "expires", "ending", "last chance", "final", "urgent",
]

TRUST_INDICATORS = [
    "guarantee", "secure", "safe", "protected", "verified", "certified", "trusted",
    "ssl", "encrypted", "privacy", "refund", "money back",
]

CONVERSION_KEYWORDS = ["buy", "purchase", "sign up", "subscribe", "download", "get started"]


# ============================================================================
# Risk assessment
# ============================================================================

TRAFFIC_SOURCE_RELIABILITY: Dict[str, float] = {
    "organic": 0.1,
    "paid": 0.15,
    "email": 0.1,
    "direct": 0.05,
    "social": -0.05,
    "referral": 0.0,
    "unknown": -0.1,
}

MAX_RISK_FACTORS = 5
MAX_WARNINGS = 3


# ============================================================================
# Wasted-click model v5.3
# ============================================================================

FORM_CTA_KEYWORDS = [
    "sign up", "register", "subscribe", "join", "create account", "get started",
    "submit", "send", "contact us", "request", "apply", "book", "schedule", "reserve",
]
FORM_CTA_HREF_HINTS = ["signup", "register", "contact", "subscribe"]

NON_FORM_CTA_KEYWORDS = [
    "buy", "purchase", "add to cart", "checkout", "order", "download", "install",
    "watch", "play", "read more", "learn more", "view", "browse", "explore",
]
NON_FORM_CTA_HREF_HINTS = ["buy", "purchase", "cart", "checkout"]

NEUTRAL_TERMS = ["privacy", "terms", "legal", "disclaimer", "cookie"]
VAGUE_TERMS = ["click here", "learn more", "read more", "continue"]
GENERIC_TERMS = ["click here", "learn more", "read more", "continue", "next"]
ADDITIONAL_CTA_TERMS = ["sign up", "get started", "try now", "buy now", "subscribe", "register"]
SOCIAL_DOMAINS = ["facebook.com", "twitter.com", "linkedin.com", "instagram.com", "youtube.com"]
TRUST_BADGE_KEYWORDS = ["secure", "guaranteed", "certified", "verified", "trusted"]

HIGH_RISK_THRESHOLD = 0.05

INDUSTRY_CLICK_BUDGETS: Dict[str, float] = {
    "saas": 2.5,
    "ecommerce": 3.0,
    "leadgen": 2.0,
    "content": 4.0,
}
DEFAULT_CLICK_BUDGET = 2.5

USER_BEHAVIOR_MULTIPLIERS: Dict[str, float] = {
    "explorer": 1.15,
    "skimmer": 1.1,
    "focused": 1.0,
}

WASTED_CLICK_WEIGHTS: Dict[str, float] = {
    "distraction": 0.25,
    "attractiveness": 0.15,
    "intent_mismatch": 0.2,
    "path_loop": 0.1,
    "clarity": 0.1,
    "timing": 0.05,
    "click_distraction": 0.3,
    "budget_risk": 0.1,
    "loopback": 0.05,
    "behavior": 0.1,
}

FORM_CTA_RECOMMENDATIONS: Dict[str, str] = {
    "blog-link": "Remove blog links from form pages - major distraction from completion",
    "social-link": "Hide social links during form completion - save for thank you page",
    "navigation": "Minimize navigation on form pages - use breadcrumbs instead",
    "additional-cta": "Remove competing CTAs from form pages - focus on single conversion",
    "external-link": "Remove all external links from form pages",
    "resource-link": "Move resources to post-form completion",
    "modal-trigger": "Avoid modals during form completion",
    "chat-widget": "Make chat less prominent during form completion",
    "download-link": "Offer downloads after form completion",
    "footer-link": "Minimize footer links on form pages",
    "sidebar-link": "Remove sidebar distractions from form pages",
}

NON_FORM_CTA_RECOMMENDATIONS: Dict[str, str] = {
    "blog-link": "Move blog links to post-purchase or separate section",
    "social-link": "Relocate social links to footer - don't compete with purchase",
    "navigation": "Streamline navigation to support purchase decision",
    "additional-cta": "Remove competing CTAs that don't support purchase intent",
    "external-link": "Remove external links that take users away from purchase",
    "resource-link": "Provide resources that support purchase decision only",
    "modal-trigger": "Use modals for purchase support, not distractions",
    "chat-widget": "Position chat to support purchase questions",
    "download-link": "Offer downloads that support purchase decision",
    "footer-link": "Keep essential links only in footer",
    "sidebar-link": "Use sidebar for purchase-supporting content only",
}

GENERAL_RECOMMENDATIONS: Dict[str, str] = {
    "blog-link": "Move blog links to footer or remove from primary flow",
    "social-link": "Relocate social links to footer or sidebar",
    "navigation": "Simplify navigation or make less prominent",
    "additional-cta": "Remove competing CTAs or merge with primary CTA",
    "external-link": "Remove external links or open in new tab with warning",
    "resource-link": "Move resources to dedicated section",
    "modal-trigger": "Replace modal with inline content",
    "chat-widget": "Make chat widget less intrusive",
    "download-link": "Move downloads to post-conversion flow",
    "footer-link": "Acceptable in footer, consider removing if above fold",
    "sidebar-link": "Reduce sidebar prominence or remove",
}


# ============================================================================
# Element matcher
# ============================================================================

DEFAULT_MATCH_TOLERANCE = 20
SPATIAL_GRID_SIZE = 50

MATCH_CONFIDENCE: Dict[str, float] = {
    "exact-id": 1.0,
    "ox-id": 0.95,
    "coordinate": 0.9,
    "smart-coordinate": 0.85,
    "text-similarity": 0.8,
    "fallback": 0.6,
}
