"""
Heuristic per-product insights.

Every classifier is driven by a rule table so the keyword lists can be read
and extended without touching the control flow. Keywords include Chinese
synonyms because many storefronts tag products in both languages.
"""

from typing import List, Optional, Tuple

from shopinsight.models.schemas import ProductInsights

# (keywords, label), matched against lowercased tags
AUDIENCE_TAG_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("women", "女"), "Female shoppers"),
    (("men", "男"), "Male shoppers"),
    (("kid", "child", "儿童"), "Parents and kids"),
    (("gift", "礼"), "Gift buyers"),
    (("sport", "fitness", "运动"), "Sports enthusiasts"),
    (("eco", "sustainable", "环保"), "Eco-conscious shoppers"),
    (("premium", "luxury"), "Luxury lovers"),
    (("office", "work", "办公"), "Working professionals"),
]

# (keywords, label), matched against the lowercased product type
AUDIENCE_TYPE_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("shirt", "dress"), "Fashion followers"),
    (("accessory", "accessories"), "Accessory lovers"),
]

MATERIAL_KEYWORDS = ["cotton", "棉", "silk", "丝", "leather", "皮", "wool", "羊毛", "organic", "有机"]

FEATURE_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("premium", "高品质"), "Premium quality"),
    (("handmade", "手工"), "Handmade"),
    (("durable", "耐用"), "Durable"),
    (("waterproof", "防水"), "Waterproof"),
    (("lightweight", "轻便"), "Lightweight"),
    (("breathable", "透气"), "Breathable"),
]

# first match wins
SEASONALITY_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("summer", "夏"), "Summer bestseller"),
    (("winter", "冬"), "Winter bestseller"),
    (("spring", "春"), "Spring arrival"),
    (("fall", "autumn", "秋"), "Fall arrival"),
    (("christmas", "holiday", "圣诞"), "Holiday special"),
    (("valentine", "情人节"), "Valentine's Day"),
]

# (upper bound as a multiple of the average price, tier)
PRICE_TIERS = [
    (0.5, "budget"),
    (1.2, "mid-range"),
    (2.5, "premium"),
]

MAX_AUDIENCES = 4
MAX_FEATURES = 5


def _matches(text: str, keywords) -> bool:
    return any(keyword in text for keyword in keywords)


def infer_price_tier(price: float, avg_price: float) -> str:
    for multiple, tier in PRICE_TIERS:
        if price < avg_price * multiple:
            return tier
    return "luxury"


def infer_target_audience(tags: List[str], price: float, avg_price: float,
                          product_type: str) -> List[str]:
    """
    Guess who a product is for from its price band, tags and type

    Args:
        tags: Product tags
        price: Current price
        avg_price: Catalog average price
        product_type: Shopify product type

    Returns:
        list: Up to four distinct audience labels, price band first
    """
    if price < avg_price * 0.6:
        audiences = ["Price-sensitive shoppers", "Students"]
    elif price > avg_price * 2:
        audiences = ["High-income shoppers", "Quality seekers"]
    else:
        audiences = ["Middle-class shoppers"]

    lower_tags = [tag.lower() for tag in tags]
    for keywords, label in AUDIENCE_TAG_RULES:
        if any(_matches(tag, keywords) for tag in lower_tags):
            audiences.append(label)

    if product_type:
        lower_type = product_type.lower()
        for keywords, label in AUDIENCE_TYPE_RULES:
            if _matches(lower_type, keywords):
                audiences.append(label)

    return list(dict.fromkeys(audiences))[:MAX_AUDIENCES]


def infer_key_features(description: str, tags: List[str]) -> List[str]:
    """Material, quality and function keywords found in the description"""
    if not description:
        return tags[:3]

    lower_desc = description.lower()
    features = [f"Material: {material}" for material in MATERIAL_KEYWORDS if material in lower_desc]
    features.extend(label for keywords, label in FEATURE_RULES if _matches(lower_desc, keywords))

    if not features:
        return tags[:3]

    return list(dict.fromkeys(features))[:MAX_FEATURES]


def infer_seasonality(tags: List[str], title: str) -> Optional[str]:
    text = (" ".join(tags) + " " + (title or "")).lower()
    for keywords, label in SEASONALITY_RULES:
        if _matches(text, keywords):
            return label
    return None


def infer_competitive_position(price: float, avg_price: float,
                               discount: Optional[int], variant_count: int) -> str:
    if discount and discount > 30:
        return "Promotional traffic driver"
    if price > avg_price * 2 and variant_count > 3:
        return "Flagship product"
    if price < avg_price * 0.6:
        return "Entry-level product"
    if variant_count > 5:
        return "Multi-option core product"
    return "Regular line product"


def build_product_insights(title: str, tags: List[str], description: str, product_type: str,
                           price: float, avg_price: float, discount: Optional[int],
                           variant_count: int) -> ProductInsights:
    return ProductInsights(
        price_tier=infer_price_tier(price, avg_price),
        target_audience=infer_target_audience(tags, price, avg_price, product_type),
        product_category=product_type or "Uncategorized",
        seasonality=infer_seasonality(tags, title),
        key_features=infer_key_features(description, tags),
        competitive_position=infer_competitive_position(price, avg_price, discount, variant_count)
    )
