"""
Checklist scoring: the website health score and the three StoreScores rubrics.

Each rubric is an ordered list of weighted checks. A check reports the value
it measured, the threshold it was held to and a short reason, so a score can
always be traced back to the facts that produced it.
"""

import logging
from typing import Callable, Dict, List, NamedTuple, Union

from shopinsight.models.schemas import (
    HealthCheck, WebsiteHealthScore, ScoreItem, ScoreRubric, StoreScores,
    SEOAnalysis, TechAnalysis, SiteStructure, SocialLinks, ImageAnalysis,
    PriceStats, ProductTypeAnalysis, VariantAnalysis, InventoryAnalysis,
    PriceDistributionBucket, DiscountAnalysis
)
from shopinsight.utils.helpers import round_half_up

logger = logging.getLogger(__name__)

PRODUCT_BENCHMARK = 70
OPERATIONS_BENCHMARK = 75
MARKETING_BENCHMARK = 65

Actual = Union[bool, int, float, str, None]


class StoreFacts(NamedTuple):
    """Everything the checklists look at, gathered in one place"""
    seo: SEOAnalysis
    tech: TechAnalysis
    structure: SiteStructure
    social: SocialLinks
    stats: PriceStats
    product_types: List[ProductTypeAnalysis]
    variants: VariantAnalysis
    images: ImageAnalysis
    inventory: InventoryAnalysis
    price_distribution: List[PriceDistributionBucket]
    discounts: DiscountAnalysis
    avg_description_length: float


class Check(NamedTuple):
    key: str
    label: str
    category: str
    weight: int
    threshold: str
    measure: Callable[[StoreFacts], Actual]
    test: Callable[[Actual], bool]
    passed_reason: str
    failed_reason: str


def _present(value: Actual) -> bool:
    return bool(value)


def _at_least(minimum: float) -> Callable[[Actual], bool]:
    return lambda value: value is not None and value >= minimum


def _above(minimum: float) -> Callable[[Actual], bool]:
    return lambda value: value is not None and value > minimum


# Website health: 20 checks in four categories
HEALTH_CHECKS: List[Check] = [
    Check("meta_description", "Meta Description", "SEO", 5, "present",
          lambda f: f.seo.has_meta_description, _present, "", ""),
    Check("title_tag", "Title Tag", "SEO", 5, "present",
          lambda f: f.seo.has_title_tag, _present, "", ""),
    Check("og_tags", "Open Graph Tags", "SEO", 5, "present",
          lambda f: f.seo.has_og_tags, _present, "", ""),
    Check("structured_data", "Structured Data", "SEO", 5, "present",
          lambda f: f.seo.has_structured_data, _present, "", ""),
    Check("sitemap", "Sitemap", "SEO", 5, "present",
          lambda f: f.seo.sitemap, _present, "", ""),
    Check("robots_txt", "Robots.txt", "SEO", 5, "present",
          lambda f: f.seo.robots_txt, _present, "", ""),
    Check("search", "Search Function", "UX", 5, "present",
          lambda f: f.tech.has_search, _present, "", ""),
    Check("cart", "Shopping Cart", "UX", 5, "present",
          lambda f: f.tech.has_cart, _present, "", ""),
    Check("about_page", "About Page", "UX", 5, "present",
          lambda f: f.structure.has_about_page, _present, "", ""),
    Check("contact_page", "Contact Page", "UX", 5, "present",
          lambda f: f.structure.has_contact_page, _present, "", ""),
    Check("faq", "FAQ Section", "UX", 5, "present",
          lambda f: f.structure.has_faq_page, _present, "", ""),
    Check("reviews", "Customer Reviews", "Trust", 8, "present",
          lambda f: f.tech.has_reviews, _present, "", ""),
    Check("return_policy", "Return Policy", "Trust", 6, "present",
          lambda f: f.structure.has_return_policy, _present, "", ""),
    Check("shipping_policy", "Shipping Policy", "Trust", 6, "present",
          lambda f: f.structure.has_shipping_policy, _present, "", ""),
    Check("alt_text", "Image Alt Text", "Trust", 5, "> 50%",
          lambda f: f.images.alt_text_percentage, _above(50), "", ""),
    Check("newsletter", "Newsletter Signup", "Marketing", 5, "present",
          lambda f: f.tech.has_newsletter, _present, "", ""),
    Check("social", "Social Media Presence", "Marketing", 5, ">= 2 platforms",
          lambda f: len(f.social.active_platforms()), _at_least(2), "", ""),
    Check("blog", "Blog Section", "Marketing", 5, "present",
          lambda f: f.structure.has_blog_section, _present, "", ""),
    Check("chat", "Chat Support", "Marketing", 5, "present",
          lambda f: f.tech.has_chat_widget, _present, "", ""),
    Check("payments", "Multiple Payment Options", "Marketing", 5, ">= 3 methods",
          lambda f: len(f.tech.payment_methods), _at_least(3), "", ""),
]

PRODUCT_CHECKS: List[Check] = [
    Check("catalog_size", "Catalog size", "Assortment", 15, ">= 50 products",
          lambda f: f.stats.total_products, _at_least(50),
          "Catalog is deep enough to support browsing and cross-selling",
          "Small catalog limits basket size and search visibility"),
    Check("product_types", "Product type breadth", "Assortment", 10, ">= 3 types",
          lambda f: len(f.product_types), _at_least(3),
          "Several product types spread demand risk",
          "Few product types make the store dependent on one category"),
    Check("variant_depth", "Variants per product", "Assortment", 10, ">= 2.0",
          lambda f: f.variants.avg_variants_per_product, _at_least(2),
          "Products offer real choice of size, color or style",
          "Most products come in a single option"),
    Check("image_coverage", "Products with images", "Media", 15, ">= 95%",
          lambda f: _image_coverage(f), _at_least(95),
          "Nearly every product has at least one image",
          "Products without images convert poorly"),
    Check("images_per_product", "Images per product", "Media", 10, ">= 3.0",
          lambda f: f.images.avg_images_per_product, _at_least(3),
          "Products are shown from several angles",
          "Too few images per product to judge quality"),
    Check("alt_text", "Image alt text coverage", "Media", 10, ">= 50%",
          lambda f: f.images.alt_text_percentage, _at_least(50),
          "Most products carry descriptive alt text",
          "Missing alt text hurts accessibility and image search"),
    Check("in_stock", "In-stock rate", "Availability", 15, ">= 80%",
          lambda f: f.inventory.in_stock_percentage, _at_least(80),
          "Most of the catalog can be bought today",
          "A large share of the catalog is sold out"),
    Check("price_spread", "Price bands covered", "Pricing", 10, ">= 3 bands",
          lambda f: sum(1 for bucket in f.price_distribution if bucket.count > 0), _at_least(3),
          "Prices span several bands and reach different budgets",
          "Prices cluster in few bands"),
    Check("description_length", "Description length", "Content", 5, ">= 200 chars",
          lambda f: f.avg_description_length, _at_least(200),
          "Descriptions are detailed",
          "Descriptions are thin"),
]

OPERATIONS_CHECKS: List[Check] = [
    Check("search", "Site search", "Navigation", 10, "present",
          lambda f: f.tech.has_search, _present,
          "Shoppers can search the catalog", "No search box found"),
    Check("cart", "Cart", "Checkout", 10, "present",
          lambda f: f.tech.has_cart, _present,
          "Cart is reachable from the homepage", "No cart link found on the homepage"),
    Check("about_page", "About page", "Trust", 10, "present",
          lambda f: f.structure.has_about_page, _present,
          "Brand story is published", "No about page linked"),
    Check("contact_page", "Contact page", "Support", 15, "present",
          lambda f: f.structure.has_contact_page, _present,
          "Customers can reach the store", "No contact page linked"),
    Check("faq", "FAQ / help center", "Support", 10, "present",
          lambda f: f.structure.has_faq_page, _present,
          "Common questions are answered up front", "No FAQ or help page linked"),
    Check("return_policy", "Return policy", "Policies", 15, "present",
          lambda f: f.structure.has_return_policy, _present,
          "Return terms are visible", "No return or refund policy linked"),
    Check("shipping_policy", "Shipping policy", "Policies", 15, "present",
          lambda f: f.structure.has_shipping_policy, _present,
          "Shipping terms are visible", "No shipping policy linked"),
    Check("reviews", "Customer reviews", "Trust", 15, "present",
          lambda f: f.tech.has_reviews, _present,
          "Social proof is shown on the storefront", "No review widget detected"),
]

MARKETING_CHECKS: List[Check] = [
    Check("social", "Social media presence", "Channels", 20, ">= 2 platforms",
          lambda f: len(f.social.active_platforms()), _at_least(2),
          "Store is linked to several social channels", "Few or no social channels linked"),
    Check("newsletter", "Newsletter capture", "Retention", 15, "present",
          lambda f: f.tech.has_newsletter, _present,
          "Visitors can subscribe for updates", "No email signup found"),
    Check("blog", "Blog / content", "Content", 10, "present",
          lambda f: f.structure.has_blog_section, _present,
          "Store publishes content", "No blog section linked"),
    Check("chat", "Live chat", "Conversion", 10, "present",
          lambda f: f.tech.has_chat_widget, _present,
          "Shoppers can chat with the store", "No chat widget detected"),
    Check("payments", "Payment options", "Conversion", 15, ">= 3 methods",
          lambda f: len(f.tech.payment_methods), _at_least(3),
          "Several payment methods are advertised", "Few payment methods advertised"),
    Check("promotions", "Products on promotion", "Promotion", 10, ">= 5%",
          lambda f: f.discounts.discount_percentage, _at_least(5),
          "Discounts are used to drive traffic", "Almost no products are discounted"),
    Check("meta_description", "Meta description", "Search", 10, "present",
          lambda f: f.seo.has_meta_description, _present,
          "Homepage has a search snippet", "Homepage has no meta description"),
    Check("structured_data", "Structured data", "Search", 10, "present",
          lambda f: f.seo.has_structured_data, _present,
          "Rich results are possible", "No JSON-LD structured data found"),
]


def _image_coverage(facts: StoreFacts) -> float:
    total = facts.stats.total_products
    if not total:
        return 0.0
    return round_half_up((total - facts.images.products_without_images) / total * 100, 1)


def _score(earned: int, total: int) -> int:
    if not total:
        return 0
    return int(round_half_up(earned / total * 100))


def _run_checks(checks: List[Check], facts: StoreFacts) -> List[ScoreItem]:
    items = []
    for check in checks:
        actual = check.measure(facts)
        passed = bool(check.test(actual))
        items.append(ScoreItem(
            key=check.key,
            label=check.label,
            category=check.category,
            passed=passed,
            weight=check.weight,
            actual=actual,
            threshold=check.threshold,
            reason=check.passed_reason if passed else check.failed_reason
        ))
    return items


def build_rubric(name: str, checks: List[Check], facts: StoreFacts, benchmark: int) -> ScoreRubric:
    items = _run_checks(checks, facts)
    earned = sum(item.weight for item in items if item.passed)
    total = sum(item.weight for item in items)
    return ScoreRubric(
        name=name,
        overall=_score(earned, total),
        earned=earned,
        total=total,
        benchmark=benchmark,
        items=items
    )


def calculate_store_scores(facts: StoreFacts) -> StoreScores:
    """
    Score the store on product, operations and marketing

    Args:
        facts: Site facts and catalog statistics

    Returns:
        StoreScores: Three rubrics, each with an overall score in [0, 100]
    """
    return StoreScores(
        product=build_rubric("product", PRODUCT_CHECKS, facts, PRODUCT_BENCHMARK),
        operations=build_rubric("operations", OPERATIONS_CHECKS, facts, OPERATIONS_BENCHMARK),
        marketing=build_rubric("marketing", MARKETING_CHECKS, facts, MARKETING_BENCHMARK)
    )


def calculate_website_health(facts: StoreFacts) -> WebsiteHealthScore:
    """
    Evaluate the storefront against the website health checklist

    Args:
        facts: Site facts and catalog statistics

    Returns:
        WebsiteHealthScore: Overall and per-category percentages plus every check
    """
    details = [
        HealthCheck(category=item.category, item=item.label, passed=item.passed, weight=item.weight)
        for item in _run_checks(HEALTH_CHECKS, facts)
    ]

    totals: Dict[str, List[int]] = {}
    for check in details:
        earned_total = totals.setdefault(check.category, [0, 0])
        earned_total[1] += check.weight
        if check.passed:
            earned_total[0] += check.weight

    def category_score(category: str) -> int:
        earned, total = totals.get(category, [0, 0])
        return _score(earned, total)

    earned = sum(check.weight for check in details if check.passed)
    total = sum(check.weight for check in details)

    return WebsiteHealthScore(
        overall=_score(earned, total),
        seo=category_score("SEO"),
        ux=category_score("UX"),
        trust=category_score("Trust"),
        marketing=category_score("Marketing"),
        details=details
    )
