"""
Schema of the AI business report.

The model is asked to answer with exactly this shape; anything that does not
validate is rejected rather than passed through to API consumers.
"""

from typing import Annotated, List, Literal

from pydantic import Field

from shopinsight.models.base import CamelModel

Score = Annotated[int, Field(ge=0, le=100)]
Level = Literal["low", "medium", "high"]


class KeyMetric(CamelModel):
    label: str
    value: str
    trend: Literal["up", "down", "neutral"]


class ExecutiveSummary(CamelModel):
    headline: str
    key_metrics: List[KeyMetric]
    verdict: str
    confidence_score: Score


class MarketPosition(CamelModel):
    niche: str
    positioning: Literal["budget", "mid-range", "premium", "luxury"]
    target_market_size: str
    competitive_advantages: List[str]
    market_trends: List[str]


class Demographics(CamelModel):
    age_range: str
    gender: str
    income: str
    education: str
    occupation: str
    location: str
    family_status: str


class Lifestyle(CamelModel):
    daily_routine: str
    hobbies: List[str]
    social_activities: List[str]
    media_consumption: List[str]
    technology_usage: str


class ConsumptionProfile(CamelModel):
    spending_power: str
    prices_sensitivity: str
    brand_loyalty: str
    purchase_frequency: str
    average_order_value: str
    preferred_payment_methods: List[str]


class Psychographics(CamelModel):
    core_values: List[str]
    personality: List[str]
    aspirations: List[str]
    fears: List[str]


class PainPoint(CamelModel):
    point: str
    intensity: str


class PainPointsAndNeeds(CamelModel):
    primary_pain_points: List[PainPoint]
    unmet_needs: List[str]
    desired_outcomes: List[str]


class PurchaseJourney(CamelModel):
    awareness_channels: List[str]
    research_behavior: str
    evaluation_criteria: List[str]
    purchase_triggers: List[str]
    post_purchase_behavior: str


class SocialMediaUsage(CamelModel):
    platform: str
    frequency: str
    purpose: str


class DigitalBehavior(CamelModel):
    preferred_platforms: List[str]
    content_preferences: List[str]
    influencer_types: List[str]
    online_shopping_habits: str
    social_media_usage: List[SocialMediaUsage]


class PersonaMarketing(CamelModel):
    best_channels: List[str]
    messaging_tone: str
    content_types: List[str]
    promotion_types: List[str]
    best_time_to_reach: str


class PersonaProfile(CamelModel):
    name: str
    avatar: str
    tagline: str
    demographics: Demographics
    lifestyle: Lifestyle
    consumption_profile: ConsumptionProfile
    psychographics: Psychographics
    pain_points_and_needs: PainPointsAndNeeds
    purchase_journey: PurchaseJourney
    digital_behavior: DigitalBehavior
    marketing_recommendations: PersonaMarketing


class PersonaOverview(CamelModel):
    total_segments: int
    primary_segment_share: str
    segmentation_basis: str
    confidence_level: Score


class SegmentComparison(CamelModel):
    dimension: str
    primary_value: str
    secondary_value: str


class MarketSizing(CamelModel):
    estimated_tam: str = Field(alias="estimatedTAM")
    estimated_sam: str = Field(alias="estimatedSAM")
    estimated_som: str = Field(alias="estimatedSOM")
    growth_potential: str


class RecommendedChannel(CamelModel):
    channel: str
    priority: str
    reason: str


class AcquisitionStrategy(CamelModel):
    recommended_channels: List[RecommendedChannel]
    estimated_cac: str = Field(alias="estimatedCAC")
    retention_strategies: List[str]
    ltv_optimization: List[str]


class UserPersona(CamelModel):
    overview: PersonaOverview
    primary_persona: PersonaProfile
    secondary_persona: PersonaProfile
    segment_comparison: List[SegmentComparison]
    market_sizing: MarketSizing
    acquisition_strategy: AcquisitionStrategy


class PricingStrategy(CamelModel):
    type: str
    analysis: str
    recommendations: List[str]


class ProductStrategy(CamelModel):
    overall_score: Score
    sku_depth_rating: Score
    pricing_strategy: PricingStrategy
    product_mix_insights: List[str]
    gap_analysis: List[str]


class OperationsAssessment(CamelModel):
    overall_score: Score
    ux_score: Score
    trust_score: Score
    conversion_score: Score
    strengths: List[str]
    weaknesses: List[str]
    quick_wins: List[str]


class MarketingChannel(CamelModel):
    name: str
    status: Literal["active", "inactive", "potential"]
    score: Score


class MarketingAnalysis(CamelModel):
    overall_score: Score
    channels: List[MarketingChannel]
    content_strategy: str
    brand_strength: Score
    recommendations: List[str]


class SWOTAnalysis(CamelModel):
    strengths: List[str]
    weaknesses: List[str]
    opportunities: List[str]
    threats: List[str]


class StrategicRecommendation(CamelModel):
    title: str
    description: str
    impact: Level
    effort: Level
    priority: int
    category: str


class CompetitorOverview(CamelModel):
    total_competitors_analyzed: int
    market_concentration: str
    competitive_intensity: str
    analysis_confidence: Score
    data_source_summary: str


class MarketLandscape(CamelModel):
    leader_brands: List[str]
    emerging_brands: List[str]
    niche_players_count: int
    market_trend: str


class MapPosition(CamelModel):
    x: str
    y: str


class PositioningMap(CamelModel):
    x_axis: str
    y_axis: str
    current_position: MapPosition
    recommended_position: MapPosition
    positioning_gap: str


class CompetitiveAdvantage(CamelModel):
    current_advantages: List[str]
    sustainable_advantages: List[str]
    vulnerabilities: List[str]
    recommended_focus: List[str]


class CompetitorPositioning(CamelModel):
    target_market: str
    price_position: str
    brand_position: str


class CompetitorMetrics(CamelModel):
    estimated_product_count: str
    estimated_price_range: str
    estimated_market_share: str
    strength_score: Score


class CompetitorComparison(CamelModel):
    advantages: List[str]
    disadvantages: List[str]
    differentiators: List[str]


class CompetitorInsights(CamelModel):
    what_to_learn: List[str]
    what_to_avoid: List[str]
    opportunities: List[str]


class CompetitorBenchmark(CamelModel):
    name: str
    category: str
    description: str
    confidence_level: Score
    data_source: str
    positioning: CompetitorPositioning
    metrics: CompetitorMetrics
    comparison: CompetitorComparison
    strategic_insights: CompetitorInsights


class CompetitorAnalysis(CamelModel):
    overview: CompetitorOverview
    market_landscape: MarketLandscape
    positioning_map: PositioningMap
    competitive_advantage: CompetitiveAdvantage
    competitors: List[CompetitorBenchmark]


class AIReport(CamelModel):
    executive_summary: ExecutiveSummary
    market_position: MarketPosition
    user_persona: UserPersona
    product_strategy: ProductStrategy
    operations_assessment: OperationsAssessment
    marketing_analysis: MarketingAnalysis
    swot_analysis: SWOTAnalysis
    strategic_recommendations: List[StrategicRecommendation]
    competitor_analysis: CompetitorAnalysis
    generated_at: str
