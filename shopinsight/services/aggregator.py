"""
Catalog aggregation.

`aggregate()` turns a ScraperResult into every statistic the API returns and
the condensed context handed to the report generator. It performs no I/O and,
for a fixed `now`, always produces the same output for the same input.
"""

import logging
import math
import statistics
from collections import Counter, OrderedDict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from shopinsight.models.schemas import (
    ScraperResult, ShopifyProduct, AggregatedData, AIContext, PriceStats, TagCount,
    PriceDistributionBucket, PriceRange, VendorAnalysis, ProductTypeAnalysis,
    DiscountBucket, DiscountAnalysis, OptionType, VariantAnalysis, ImageAnalysis,
    MonthCount, TimelineAnalysis, InventoryAnalysis, ProductDetail, ProductImage,
    ProductVariantDetail
)
from shopinsight.services.insights import build_product_insights
from shopinsight.services.scoring import StoreFacts, calculate_store_scores, calculate_website_health
from shopinsight.utils.helpers import round_half_up, percentage, parse_datetime

logger = logging.getLogger(__name__)

TOP_TAGS = 25
TOP_GROUPS = 15
AI_TOP_TAGS = 15
AI_TOP_GROUPS = 10
AI_SAMPLE_SIZE = 12
TIMELINE_MONTHS = 12
TOP_OPTION_VALUES = 10

# (max price of the catalog, [(bucket min, bucket max, label)]); the last bucket is open
PRICE_BUCKET_SCHEMES = [
    (50, [(0, 10, "$0-10"), (10, 20, "$10-20"), (20, 30, "$20-30"), (30, 40, "$30-40"),
          (40, math.inf, "$40+")]),
    (200, [(0, 25, "$0-25"), (25, 50, "$25-50"), (50, 100, "$50-100"), (100, 150, "$100-150"),
           (150, math.inf, "$150+")]),
    (500, [(0, 50, "$0-50"), (50, 100, "$50-100"), (100, 200, "$100-200"), (200, 350, "$200-350"),
           (350, math.inf, "$350+")]),
    (math.inf, [(0, 100, "$0-100"), (100, 250, "$100-250"), (250, 500, "$250-500"),
                (500, 1000, "$500-1K"), (1000, math.inf, "$1K+")]),
]

# inclusive ranges of whole discount percentages
DISCOUNT_BUCKETS = [
    ("1-10%", 1, 10),
    ("11-20%", 11, 20),
    ("21-30%", 21, 30),
    ("31-50%", 31, 50),
    ("50%+", 51, 100),
]


def product_price(product: ShopifyProduct) -> float:
    return product.price


def variant_prices(product: ShopifyProduct) -> List[float]:
    return [variant.price for variant in product.variants if variant.price > 0]


def discount_percent(product: ShopifyProduct) -> Optional[int]:
    """
    Discount of the first variant against its compare-at price

    Args:
        product: Product from the feed

    Returns:
        int: Whole percentage, or None when the product is not discounted
    """
    price = product.price
    compare_at = product.compare_at_price
    if compare_at and compare_at > price > 0:
        return int(round_half_up((compare_at - price) / compare_at * 100))
    return None


def is_in_stock(product: ShopifyProduct) -> bool:
    return any(variant.available for variant in product.variants)


def days_since(value: Optional[str], now: datetime) -> Optional[int]:
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return math.ceil(abs((now - parsed).total_seconds()) / 86400)


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def calculate_price_stats(products: List[ShopifyProduct]) -> PriceStats:
    prices = [p for p in map(product_price, products) if p > 0]
    if not prices:
        return PriceStats(total_products=len(products))

    average = _mean(prices)
    return PriceStats(
        total_products=len(products),
        average_price=round_half_up(average, 2),
        median_price=round_half_up(statistics.median(prices), 2),
        min_price=round_half_up(min(prices), 2),
        max_price=round_half_up(max(prices), 2),
        price_std_deviation=round_half_up(statistics.pstdev(prices), 2)
    )


def calculate_tag_cloud(products: List[ShopifyProduct], top_n: int = TOP_TAGS) -> List[TagCount]:
    counts = Counter()
    for product in products:
        for tag in product.tags:
            normalized = tag.lower().strip()
            if normalized:
                counts[normalized] += 1

    total = len(products)
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [
        TagCount(tag=tag, count=count, percentage=percentage(count, total))
        for tag, count in ranked[:top_n]
    ]


def calculate_price_distribution(products: List[ShopifyProduct]) -> List[PriceDistributionBucket]:
    prices = [p for p in map(product_price, products) if p > 0]
    if not prices:
        return []

    max_price = max(prices)
    buckets = next(scheme for ceiling, scheme in PRICE_BUCKET_SCHEMES if max_price <= ceiling)

    distribution = []
    for low, high, label in buckets:
        count = sum(1 for p in prices if low <= p < high)
        distribution.append(PriceDistributionBucket(
            range=label,
            min=low,
            max=max_price + 1 if high == math.inf else high,
            count=count,
            percentage=percentage(count, len(prices))
        ))
    return distribution


def _group_prices(products: List[ShopifyProduct], key) -> "OrderedDict[str, List]":
    groups: "OrderedDict[str, List]" = OrderedDict()
    for product in products:
        entry = groups.setdefault(key(product), [0, []])
        entry[0] += 1
        price = product_price(product)
        if price > 0:
            entry[1].append(price)
    return groups


def analyze_vendors(products: List[ShopifyProduct]) -> List[VendorAnalysis]:
    groups = _group_prices(products, lambda p: p.vendor or "Unknown")
    total = len(products)

    vendors = [
        VendorAnalysis(
            vendor=vendor,
            product_count=count,
            percentage=percentage(count, total),
            avg_price=round_half_up(_mean(prices), 2),
            price_range=PriceRange(min=min(prices), max=max(prices)) if prices else PriceRange()
        )
        for vendor, (count, prices) in groups.items()
    ]
    vendors.sort(key=lambda v: v.product_count, reverse=True)
    return vendors[:TOP_GROUPS]


def analyze_product_types(products: List[ShopifyProduct]) -> List[ProductTypeAnalysis]:
    groups = _group_prices(products, lambda p: p.product_type or "Uncategorized")
    total = len(products)

    types = [
        ProductTypeAnalysis(
            type=product_type,
            count=count,
            percentage=percentage(count, total),
            avg_price=round_half_up(_mean(prices), 2)
        )
        for product_type, (count, prices) in groups.items()
    ]
    types.sort(key=lambda t: t.count, reverse=True)
    return types[:TOP_GROUPS]


def analyze_discounts(products: List[ShopifyProduct]) -> DiscountAnalysis:
    discounts = [d for d in map(discount_percent, products) if d]

    distribution = [
        DiscountBucket(range=label, count=sum(1 for d in discounts if low <= d <= high))
        for label, low, high in DISCOUNT_BUCKETS
    ]

    return DiscountAnalysis(
        total_products_with_discount=len(discounts),
        discount_percentage=percentage(len(discounts), len(products)),
        average_discount_percent=round_half_up(_mean(discounts), 1),
        max_discount_percent=max(discounts) if discounts else 0,
        discount_distribution=distribution
    )


def analyze_variants(products: List[ShopifyProduct]) -> VariantAnalysis:
    total_variants = 0
    multi_variant = 0
    option_values: Dict[str, Dict[str, None]] = {}

    for product in products:
        count = len(product.variants)
        total_variants += count
        if count > 1:
            multi_variant += 1
        for option in product.options:
            values = option_values.setdefault(option.name, {})
            for value in option.values:
                values.setdefault(value, None)

    option_types = [
        OptionType(name=name, unique_values=len(values), top_values=list(values)[:TOP_OPTION_VALUES])
        for name, values in option_values.items()
    ]
    option_types.sort(key=lambda o: o.unique_values, reverse=True)

    return VariantAnalysis(
        total_variants=total_variants,
        avg_variants_per_product=round_half_up(total_variants / len(products), 1) if products else 0.0,
        products_with_multiple_variants=multi_variant,
        option_types=option_types
    )


def analyze_images(products: List[ShopifyProduct]) -> ImageAnalysis:
    total_images = sum(len(p.images) for p in products)
    without_images = sum(1 for p in products if not p.images)
    with_alt = sum(1 for p in products if any(img.alt and img.alt.strip() for img in p.images))

    return ImageAnalysis(
        total_images=total_images,
        avg_images_per_product=round_half_up(total_images / len(products), 1) if products else 0.0,
        products_without_images=without_images,
        products_with_alt_text=with_alt,
        alt_text_percentage=percentage(with_alt, len(products))
    )


def analyze_timeline(products: List[ShopifyProduct]) -> TimelineAnalysis:
    dates = sorted(d for d in (parse_datetime(p.release_date) for p in products) if d is not None)
    if not dates:
        return TimelineAnalysis()

    month_counts = Counter(d.strftime("%Y-%m") for d in dates)
    frequency = [MonthCount(month=month, count=count) for month, count in sorted(month_counts.items())]

    return TimelineAnalysis(
        oldest_product=dates[0].date().isoformat(),
        newest_product=dates[-1].date().isoformat(),
        publishing_frequency=frequency[-TIMELINE_MONTHS:],
        avg_products_per_month=round_half_up(len(products) / len(month_counts), 1)
    )


def analyze_inventory(products: List[ShopifyProduct]) -> InventoryAnalysis:
    in_stock = sum(1 for p in products if is_in_stock(p))
    return InventoryAnalysis(
        in_stock_products=in_stock,
        out_of_stock_products=len(products) - in_stock,
        in_stock_percentage=percentage(in_stock, len(products))
    )


def to_product_detail(product: ShopifyProduct, domain: str, avg_price: float,
                      now: datetime) -> ProductDetail:
    """
    Build the enriched per-product view

    Args:
        product: Product from the feed
        domain: Store hostname, used for the product URL
        avg_price: Catalog average price, used by the insight rules
        now: Reference time for days_since_published

    Returns:
        ProductDetail: Product with pricing, media and inferred insights
    """
    price = product.price
    prices = variant_prices(product)
    discount = discount_percent(product)

    return ProductDetail(
        id=product.id,
        title=product.title,
        handle=product.handle,
        url=f"https://{domain}/products/{product.handle}",
        price=price,
        compare_at_price=product.compare_at_price,
        discount_percent=discount,
        price_range=PriceRange(min=min(prices), max=max(prices)) if prices else PriceRange(min=price, max=price),
        primary_image=product.images[0].src if product.images else None,
        images=[ProductImage(src=img.src, alt=img.alt) for img in product.images],
        image_count=len(product.images),
        vendor=product.vendor,
        product_type=product.product_type,
        tags=product.tags,
        variants=[
            ProductVariantDetail(
                id=v.id, title=v.title, price=v.price, compare_at_price=v.compare_at_price,
                sku=v.sku or "", available=v.available,
                option1=v.option1, option2=v.option2, option3=v.option3
            )
            for v in product.variants
        ],
        variant_count=len(product.variants),
        options=product.options,
        has_multiple_variants=len(product.variants) > 1,
        description=product.body_html,
        description_length=len(product.body_html),
        published_at=product.release_date,
        created_at=product.created_at,
        updated_at=product.updated_at,
        days_since_published=days_since(product.release_date, now),
        available=is_in_stock(product),
        total_inventory=None,
        insights=build_product_insights(
            title=product.title,
            tags=product.tags,
            description=product.body_html,
            product_type=product.product_type,
            price=price,
            avg_price=avg_price,
            discount=discount,
            variant_count=len(product.variants)
        )
    )


def _newest_first(details: List[ProductDetail]) -> List[ProductDetail]:
    oldest = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(details, key=lambda d: parse_datetime(d.published_at) or oldest, reverse=True)


def sample_products(details: List[ProductDetail], size: int = AI_SAMPLE_SIZE) -> List[ProductDetail]:
    """Evenly spaced sample of the listing"""
    step = len(details) // size
    return [d for i, d in enumerate(details) if step == 0 or i % step == 0][:size]


def aggregate(scraper_result: ScraperResult, now: Optional[datetime] = None) -> AggregatedData:
    """
    Compute every catalog statistic and the report context

    Args:
        scraper_result: Products and site facts from the scraper
        now: Reference time for relative dates; defaults to the current UTC time

    Returns:
        AggregatedData: Statistics, scores, product listing and AI context
    """
    now = now or datetime.now(timezone.utc)
    products = scraper_result.products
    meta = scraper_result.meta

    stats = calculate_price_stats(products)
    tag_cloud = calculate_tag_cloud(products)
    price_distribution = calculate_price_distribution(products)
    vendor_analysis = analyze_vendors(products)
    product_type_analysis = analyze_product_types(products)
    discount_analysis = analyze_discounts(products)
    variant_analysis = analyze_variants(products)
    image_analysis = analyze_images(products)
    timeline_analysis = analyze_timeline(products)
    inventory_analysis = analyze_inventory(products)

    facts = StoreFacts(
        seo=scraper_result.seo_analysis,
        tech=scraper_result.tech_analysis,
        structure=scraper_result.site_structure,
        social=scraper_result.social_links,
        stats=stats,
        product_types=product_type_analysis,
        variants=variant_analysis,
        images=image_analysis,
        inventory=inventory_analysis,
        price_distribution=price_distribution,
        discounts=discount_analysis,
        avg_description_length=_mean([len(p.body_html) for p in products])
    )
    website_health = calculate_website_health(facts)
    store_scores = calculate_store_scores(facts)

    all_products = _newest_first([
        to_product_detail(p, meta.domain, stats.average_price, now) for p in products
    ])

    ai_context = AIContext(
        store_meta=meta,
        stats=stats,
        top_tags=tag_cloud[:AI_TOP_TAGS],
        vendor_analysis=vendor_analysis[:AI_TOP_GROUPS],
        product_type_analysis=product_type_analysis[:AI_TOP_GROUPS],
        discount_analysis=discount_analysis,
        variant_analysis=variant_analysis,
        image_analysis=image_analysis,
        timeline_analysis=timeline_analysis,
        inventory_analysis=inventory_analysis,
        social_links=scraper_result.social_links,
        tech_analysis=scraper_result.tech_analysis,
        site_structure=scraper_result.site_structure,
        seo_analysis=scraper_result.seo_analysis,
        website_health=website_health,
        store_scores=store_scores,
        sample_products=sample_products(all_products)
    )

    logger.info(f"Aggregated {len(products)} products for {meta.domain}: "
                f"health {website_health.overall}, product score {store_scores.product.overall}")

    return AggregatedData(
        stats=stats,
        tag_cloud=tag_cloud,
        price_distribution=price_distribution,
        vendor_analysis=vendor_analysis,
        product_type_analysis=product_type_analysis,
        discount_analysis=discount_analysis,
        variant_analysis=variant_analysis,
        image_analysis=image_analysis,
        timeline_analysis=timeline_analysis,
        inventory_analysis=inventory_analysis,
        website_health=website_health,
        store_scores=store_scores,
        all_products=all_products,
        ai_context=ai_context
    )
