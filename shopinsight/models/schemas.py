from pydantic import BaseModel, Field, field_validator
from typing import List, Optional, Union
from datetime import datetime
from enum import Enum

from shopinsight.models.base import CamelModel
from shopinsight.models.report import AIReport
from shopinsight.utils.helpers import to_float
from shopinsight.utils.parsing import html_to_markdown, split_tags


class StorePlatform(str, Enum):
    SHOPIFY = "shopify"
    WOOCOMMERCE = "woocommerce"
    MAGENTO = "magento"
    BIGCOMMERCE = "bigcommerce"
    SQUARESPACE = "squarespace"
    WIX = "wix"
    PRESTASHOP = "prestashop"
    OPENCART = "opencart"
    UNKNOWN = "unknown"


# Raw products.json feed

class ShopifyImage(BaseModel):
    id: Optional[int] = None
    product_id: Optional[int] = None
    position: Optional[int] = None
    src: str = ""
    width: Optional[int] = None
    height: Optional[int] = None
    alt: Optional[str] = None

    @field_validator("src", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or ""


class ShopifyVariant(BaseModel):
    id: Optional[int] = None
    product_id: Optional[int] = None
    title: str = ""
    price: float = 0.0
    compare_at_price: Optional[float] = None
    sku: Optional[str] = ""
    position: Optional[int] = None
    option1: Optional[str] = None
    option2: Optional[str] = None
    option3: Optional[str] = None
    available: bool = False

    @field_validator("title", "sku", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or ""

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v):
        return to_float(v, 0.0)

    @field_validator("compare_at_price", mode="before")
    @classmethod
    def parse_compare_at_price(cls, v):
        return to_float(v, None)

    @field_validator("available", mode="before")
    @classmethod
    def parse_available(cls, v):
        return bool(v)


class ShopifyOption(BaseModel):
    name: str = ""
    values: List[str] = []

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v):
        return v or ""

    @field_validator("values", mode="before")
    @classmethod
    def stringify_values(cls, v):
        return [str(value) for value in (v or [])]


class ShopifyProduct(BaseModel):
    id: Optional[int] = None
    title: str = ""
    handle: str = ""
    body_html: str = ""
    published_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    vendor: str = ""
    product_type: str = ""
    tags: List[str] = []
    variants: List[ShopifyVariant] = []
    images: List[ShopifyImage] = []
    options: List[ShopifyOption] = []

    @field_validator("variants", "images", "options", mode="before")
    @classmethod
    def default_lists(cls, v):
        return v or []

    @field_validator("body_html", mode="before")
    @classmethod
    def body_to_markdown(cls, v):
        return html_to_markdown(v or "")

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v):
        return split_tags(v)

    @field_validator("title", "handle", "vendor", "product_type", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or ""

    @property
    def price(self) -> float:
        """Current price, taken from the first variant"""
        return self.variants[0].price if self.variants else 0.0

    @property
    def compare_at_price(self) -> Optional[float]:
        return self.variants[0].compare_at_price if self.variants else None

    @property
    def release_date(self) -> Optional[str]:
        return self.published_at or self.created_at


# Storefront facts scraped from the homepage

class StoreMeta(CamelModel):
    title: str = ""
    description: str = ""
    domain: str = ""
    favicon: Optional[str] = None
    logo: Optional[str] = None
    og_image: Optional[str] = None
    keywords: List[str] = []


class SocialLinks(BaseModel):
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    twitter: Optional[str] = None
    youtube: Optional[str] = None
    tiktok: Optional[str] = None
    pinterest: Optional[str] = None
    linkedin: Optional[str] = None

    def active_platforms(self) -> List[str]:
        return [platform for platform, url in self.model_dump().items() if url]


class TechAnalysis(CamelModel):
    shopify_theme: Optional[str] = None
    currency: str = "USD"
    language: str = "en"
    has_reviews: bool = False
    has_wishlist: bool = False
    has_search: bool = False
    has_cart: bool = False
    has_newsletter: bool = False
    has_chat_widget: bool = False
    payment_methods: List[str] = []
    third_party_apps: List[str] = []


class NavigationItem(BaseModel):
    title: str
    url: str


class SiteStructure(CamelModel):
    main_navigation: List[NavigationItem] = []
    footer_links: List[str] = []
    collections_count: int = 0
    has_about_page: bool = False
    has_contact_page: bool = False
    has_faq_page: bool = Field(False, alias="hasFAQPage")
    has_blog_section: bool = False
    has_return_policy: bool = False
    has_shipping_policy: bool = False


class SEOAnalysis(CamelModel):
    has_meta_description: bool = False
    meta_description_length: int = 0
    has_title_tag: bool = False
    title_length: int = 0
    has_og_tags: bool = Field(False, alias="hasOGTags")
    has_twitter_cards: bool = False
    has_structured_data: bool = False
    canonical_url: Optional[str] = None
    robots_txt: bool = False
    sitemap: bool = False


class Collection(CamelModel):
    title: str = ""
    handle: str = ""
    products_count: int = 0


class HomepageAnalysis(BaseModel):
    meta: StoreMeta
    social_links: SocialLinks
    tech_analysis: TechAnalysis
    site_structure: SiteStructure
    seo_analysis: SEOAnalysis
    raw_html: str = ""


class ScraperResult(BaseModel):
    meta: StoreMeta
    products: List[ShopifyProduct] = []
    social_links: SocialLinks = Field(default_factory=SocialLinks)
    tech_analysis: TechAnalysis = Field(default_factory=TechAnalysis)
    site_structure: SiteStructure = Field(default_factory=SiteStructure)
    seo_analysis: SEOAnalysis = Field(default_factory=SEOAnalysis)
    collections: List[Collection] = []
    raw_html: str = ""


class StoreDetectionResult(CamelModel):
    platform: StorePlatform = StorePlatform.UNKNOWN
    platform_name: str = "Unknown platform"
    confidence: str = "low"
    indicators: List[str] = []
    is_shopify: bool = False
    shopify_api_available: bool = False
    error_message: Optional[str] = None


# Aggregated catalog statistics

class PriceStats(BaseModel):
    total_products: int = 0
    average_price: float = 0.0
    median_price: float = 0.0
    min_price: float = 0.0
    max_price: float = 0.0
    price_currency: str = "USD"
    price_std_deviation: float = 0.0


class TagCount(BaseModel):
    tag: str
    count: int
    percentage: float


class PriceDistributionBucket(BaseModel):
    range: str
    min: float
    max: float
    count: int
    percentage: float


class PriceRange(BaseModel):
    min: float = 0.0
    max: float = 0.0


class VendorAnalysis(CamelModel):
    vendor: str
    product_count: int
    percentage: float
    avg_price: float
    price_range: PriceRange


class ProductTypeAnalysis(CamelModel):
    type: str
    count: int
    percentage: float
    avg_price: float


class DiscountBucket(BaseModel):
    range: str
    count: int


class DiscountAnalysis(CamelModel):
    total_products_with_discount: int = 0
    discount_percentage: float = 0.0
    average_discount_percent: float = 0.0
    max_discount_percent: int = 0
    discount_distribution: List[DiscountBucket] = []


class OptionType(CamelModel):
    name: str
    unique_values: int
    top_values: List[str]


class VariantAnalysis(CamelModel):
    total_variants: int = 0
    avg_variants_per_product: float = 0.0
    products_with_multiple_variants: int = 0
    option_types: List[OptionType] = []


class ImageAnalysis(CamelModel):
    total_images: int = 0
    avg_images_per_product: float = 0.0
    products_without_images: int = 0
    products_with_alt_text: int = 0
    alt_text_percentage: float = 0.0


class MonthCount(BaseModel):
    month: str
    count: int


class TimelineAnalysis(CamelModel):
    oldest_product: Optional[str] = None
    newest_product: Optional[str] = None
    publishing_frequency: List[MonthCount] = []
    avg_products_per_month: float = 0.0


class InventoryAnalysis(CamelModel):
    in_stock_products: int = 0
    out_of_stock_products: int = 0
    in_stock_percentage: float = 0.0


# Per-product enriched view

class ProductVariantDetail(CamelModel):
    id: Optional[int] = None
    title: str = ""
    price: float = 0.0
    compare_at_price: Optional[float] = None
    sku: str = ""
    available: bool = False
    option1: Optional[str] = None
    option2: Optional[str] = None
    option3: Optional[str] = None


class ProductImage(BaseModel):
    src: str
    alt: Optional[str] = None


class ProductInsights(BaseModel):
    price_tier: str
    target_audience: List[str] = []
    product_category: str = ""
    seasonality: Optional[str] = None
    key_features: List[str] = []
    competitive_position: str = ""


class ProductDetail(BaseModel):
    id: Optional[int] = None
    title: str
    handle: str
    url: str

    price: float
    compare_at_price: Optional[float] = None
    discount_percent: Optional[int] = None
    price_range: PriceRange

    primary_image: Optional[str] = None
    images: List[ProductImage] = []
    image_count: int = 0

    vendor: str = ""
    product_type: str = ""
    tags: List[str] = []

    variants: List[ProductVariantDetail] = []
    variant_count: int = 0
    options: List[ShopifyOption] = []
    has_multiple_variants: bool = False

    description: str = ""
    description_length: int = 0

    published_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    days_since_published: Optional[int] = None

    available: bool = False
    total_inventory: Optional[int] = None

    insights: ProductInsights


# Scoring

class HealthCheck(BaseModel):
    category: str
    item: str
    passed: bool
    weight: int


class WebsiteHealthScore(BaseModel):
    overall: int = 0
    seo: int = 0
    ux: int = 0
    trust: int = 0
    marketing: int = 0
    details: List[HealthCheck] = []


class ScoreItem(BaseModel):
    key: str
    label: str
    category: str = ""
    passed: bool
    weight: int
    actual: Union[bool, int, float, str, None] = None
    threshold: str
    reason: str


class ScoreRubric(BaseModel):
    name: str
    overall: int
    earned: int
    total: int
    benchmark: int
    items: List[ScoreItem]


class StoreScores(BaseModel):
    product: ScoreRubric
    operations: ScoreRubric
    marketing: ScoreRubric


class AIContext(BaseModel):
    store_meta: StoreMeta
    stats: PriceStats
    top_tags: List[TagCount]
    vendor_analysis: List[VendorAnalysis]
    product_type_analysis: List[ProductTypeAnalysis]
    discount_analysis: DiscountAnalysis
    variant_analysis: VariantAnalysis
    image_analysis: ImageAnalysis
    timeline_analysis: TimelineAnalysis
    inventory_analysis: InventoryAnalysis
    social_links: SocialLinks
    tech_analysis: TechAnalysis
    site_structure: SiteStructure
    seo_analysis: SEOAnalysis
    website_health: WebsiteHealthScore
    store_scores: StoreScores
    sample_products: List[ProductDetail]


class AggregatedData(BaseModel):
    stats: PriceStats
    tag_cloud: List[TagCount]
    price_distribution: List[PriceDistributionBucket]
    vendor_analysis: List[VendorAnalysis]
    product_type_analysis: List[ProductTypeAnalysis]
    discount_analysis: DiscountAnalysis
    variant_analysis: VariantAnalysis
    image_analysis: ImageAnalysis
    timeline_analysis: TimelineAnalysis
    inventory_analysis: InventoryAnalysis
    website_health: WebsiteHealthScore
    store_scores: StoreScores
    all_products: List[ProductDetail]
    ai_context: AIContext


# API request / response bodies

class AnalyzeRequest(CamelModel):
    url: str = Field(..., min_length=1)
    force_refresh: bool = False

    @field_validator("url")
    @classmethod
    def strip_url(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Please provide a store URL")
        return v


class CacheInfo(CamelModel):
    cached: bool = False
    cached_at: Optional[datetime] = None
    age_seconds: float = 0.0
    age_label: Optional[str] = None


class TranslateRequest(BaseModel):
    text: str = Field(..., min_length=1)

    @field_validator("text")
    @classmethod
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError("Please provide text to translate")
        return v


class TranslateResponse(BaseModel):
    translated: str


class PlatformInfo(CamelModel):
    platform: str
    platform_name: str
    confidence: str
    indicators: List[str] = []


class ErrorResponse(CamelModel):
    error: str
    error_type: Optional[str] = None
    retryable: Optional[bool] = None
    platform_info: Optional[PlatformInfo] = None
    timestamp: datetime = Field(default_factory=datetime.now)


class AnalyzeResponse(CamelModel):
    data: AggregatedData
    report: AIReport
    meta: StoreMeta
    social_links: SocialLinks
    tech_analysis: TechAnalysis
    cache: CacheInfo = Field(default_factory=CacheInfo)
