"""
Shared factories for raw Shopify payloads, storefront HTML and AI reports.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from shopinsight.models.report import AIReport
from shopinsight.models.schemas import (
    ScraperResult, ShopifyProduct, StoreMeta, SocialLinks, TechAnalysis,
    SiteStructure, SEOAnalysis
)

FROZEN_NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_variant(price: str = "10.00", compare_at_price: Optional[str] = None,
                 available: bool = True, **overrides) -> Dict[str, Any]:
    variant = {
        "id": overrides.pop("id", 1),
        "product_id": 1,
        "title": "Default Title",
        "price": price,
        "compare_at_price": compare_at_price,
        "sku": "SKU-1",
        "position": 1,
        "option1": "Default Title",
        "option2": None,
        "option3": None,
        "available": available,
    }
    variant.update(overrides)
    return variant


def make_raw_product(product_id: int = 1, title: str = "Linen Shirt", price: str = "10.00",
                     compare_at_price: Optional[str] = None, available: bool = True,
                     tags: Any = None, vendor: str = "Acme", product_type: str = "Shirts",
                     published_at: Optional[str] = "2024-05-01T10:00:00-04:00",
                     body_html: str = "<p>Soft cotton shirt</p>",
                     variants: Optional[List[Dict[str, Any]]] = None,
                     images: Optional[List[Dict[str, Any]]] = None,
                     options: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {
        "id": product_id,
        "title": title,
        "handle": f"product-{product_id}",
        "body_html": body_html,
        "published_at": published_at,
        "created_at": "2024-04-01T10:00:00Z",
        "updated_at": "2024-05-02T10:00:00Z",
        "vendor": vendor,
        "product_type": product_type,
        "tags": tags if tags is not None else ["summer", "women"],
        "variants": variants if variants is not None else [
            make_variant(price=price, compare_at_price=compare_at_price, available=available)
        ],
        "images": images if images is not None else [
            {"id": product_id, "src": f"https://cdn.shopify.com/p{product_id}.jpg", "alt": "Front view"}
        ],
        "options": options if options is not None else [{"name": "Size", "values": ["S", "M"]}],
    }


def make_product(**kwargs) -> ShopifyProduct:
    return ShopifyProduct.model_validate(make_raw_product(**kwargs))


def make_scraper_result(products: List[ShopifyProduct], **overrides) -> ScraperResult:
    fields = {
        "meta": StoreMeta(title="Acme Store", description="Quality basics", domain="acme.com"),
        "products": products,
        "social_links": SocialLinks(),
        "tech_analysis": TechAnalysis(),
        "site_structure": SiteStructure(),
        "seo_analysis": SEOAnalysis(),
    }
    fields.update(overrides)
    return ScraperResult(**fields)


def full_featured_facts() -> Dict[str, Any]:
    """Site facts for a store that passes every storefront check"""
    return {
        "social_links": SocialLinks(facebook="https://facebook.com/acme", instagram="https://instagram.com/acme"),
        "tech_analysis": TechAnalysis(
            has_reviews=True, has_search=True, has_cart=True, has_newsletter=True,
            has_chat_widget=True, payment_methods=["Visa", "Mastercard", "PayPal"]
        ),
        "site_structure": SiteStructure(
            has_about_page=True, has_contact_page=True, has_faq_page=True, has_blog_section=True,
            has_return_policy=True, has_shipping_policy=True
        ),
        "seo_analysis": SEOAnalysis(
            has_meta_description=True, has_title_tag=True, has_og_tags=True,
            has_structured_data=True, robots_txt=True, sitemap=True
        ),
    }


SHOPIFY_HOMEPAGE = """<!DOCTYPE html>
<html lang="en-US">
<head>
  <title>Acme Store</title>
  <meta name="description" content="Quality basics for everyday life">
  <meta name="keywords" content="basics, cotton , shirts">
  <meta property="og:title" content="Acme Store">
  <meta property="og:image" content="https://cdn.shopify.com/og.jpg">
  <meta property="og:price:currency" content="EUR">
  <meta name="twitter:card" content="summary">
  <link rel="icon" href="/favicon.png">
  <link rel="canonical" href="https://acme.com/">
  <link rel="stylesheet" href="https://cdn.shopify.com/theme.css">
  <script src="https://cdn.shopify.com/s/theme.js"></script>
  <script>Shopify.theme = {"name":"Dawn","id":1};</script>
  <script type="application/ld+json">{"@type": "Organization"}</script>
  <script src="https://static.klaviyo.com/onsite.js"></script>
</head>
<body>
  <header class="header">
    <div class="header__logo"><img src="/logo.png" alt="Acme"></div>
    <nav>
      <a href="/collections/all">Shop</a>
      <a href="/pages/about-us">About</a>
      <a href="/pages/contact">Contact</a>
      <a href="#main">Skip</a>
      <a href="/collections/all">Shop again</a>
    </nav>
    <form class="search-form"><input type="search" name="q"></form>
    <a class="cart-icon" href="/cart">Cart</a>
  </header>
  <div id="shopify-section-hero" class="shopify-section">Hero</div>
  <div class="newsletter">Subscribe to our newsletter</div>
  <footer>
    <a href="/policies/refund-policy">Refund policy</a>
    <a href="/policies/shipping-policy">Shipping</a>
    <a href="/pages/faq">FAQ</a>
    <a href="/blogs/news">Blog</a>
    <a href="https://www.instagram.com/acme">Instagram</a>
    <a href="https://facebook.com/acme">Facebook</a>
    <a href="/policies/refund-policy">Refund policy</a>
  </footer>
  <div class="payment-icons">visa mastercard paypal shop-pay</div>
</body>
</html>
"""


class FakeResponse:
    """Minimal stand-in for requests.Response"""

    def __init__(self, status_code: int = 200, json_data: Any = None, text: str = ""):
        self.status_code = status_code
        self._json = json_data
        self.text = text if text else (json.dumps(json_data) if json_data is not None else "")

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self):
        import requests

        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)


def make_report_payload() -> Dict[str, Any]:
    """A model answer that satisfies the AIReport schema (without generatedAt)"""
    persona = {
        "name": "Urban Professional",
        "avatar": "briefcase",
        "tagline": "Buys quality basics for work",
        "demographics": {
            "ageRange": "25-34", "gender": "Female", "income": "Upper middle",
            "education": "Bachelor", "occupation": "Office worker", "location": "Cities",
            "familyStatus": "Single",
        },
        "lifestyle": {
            "dailyRoutine": "Commutes to work", "hobbies": ["Yoga"], "socialActivities": ["Brunch"],
            "mediaConsumption": ["Instagram"], "technologyUsage": "Mobile first",
        },
        "consumptionProfile": {
            "spendingPower": "Medium-high", "pricesSensitivity": "Medium", "brandLoyalty": "High",
            "purchaseFrequency": "Monthly", "averageOrderValue": "$60",
            "preferredPaymentMethods": ["Visa"],
        },
        "psychographics": {
            "coreValues": ["Quality"], "personality": ["Practical"],
            "aspirations": ["Effortless style"], "fears": ["Wasting money"],
        },
        "painPointsAndNeeds": {
            "primaryPainPoints": [{"point": "Poor fit", "intensity": "High"}],
            "unmetNeeds": ["Size guidance"], "desiredOutcomes": ["Reliable basics"],
        },
        "purchaseJourney": {
            "awarenessChannels": ["Instagram"], "researchBehavior": "Reads reviews",
            "evaluationCriteria": ["Fabric"], "purchaseTriggers": ["Discounts"],
            "postPurchaseBehavior": "Leaves reviews",
        },
        "digitalBehavior": {
            "preferredPlatforms": ["Instagram"], "contentPreferences": ["Lookbooks"],
            "influencerTypes": ["Micro"], "onlineShoppingHabits": "Evening browsing",
            "socialMediaUsage": [{"platform": "Instagram", "frequency": "Daily", "purpose": "Inspiration"}],
        },
        "marketingRecommendations": {
            "bestChannels": ["Instagram"], "messagingTone": "Warm", "contentTypes": ["Reels"],
            "promotionTypes": ["Bundles"], "bestTimeToReach": "Evenings",
        },
    }
    return {
        "executiveSummary": {
            "headline": "Focused basics brand",
            "keyMetrics": [{"label": "Products", "value": "3", "trend": "neutral"}],
            "verdict": "Solid foundation",
            "confidenceScore": 80,
        },
        "marketPosition": {
            "niche": "Everyday apparel", "positioning": "mid-range", "targetMarketSize": "Large",
            "competitiveAdvantages": ["Quality"], "marketTrends": ["Sustainability"],
        },
        "userPersona": {
            "overview": {
                "totalSegments": 2, "primarySegmentShare": "60%",
                "segmentationBasis": "Price and tags", "confidenceLevel": 75,
            },
            "primaryPersona": persona,
            "secondaryPersona": persona,
            "segmentComparison": [{"dimension": "Age", "primaryValue": "25-34", "secondaryValue": "35-44"}],
            "marketSizing": {
                "estimatedTAM": "$1B", "estimatedSAM": "$100M", "estimatedSOM": "$5M",
                "growthPotential": "Moderate",
            },
            "acquisitionStrategy": {
                "recommendedChannels": [{"channel": "Instagram", "priority": "High", "reason": "Audience fit"}],
                "estimatedCAC": "$20", "retentionStrategies": ["Loyalty"], "ltvOptimization": ["Bundles"],
            },
        },
        "productStrategy": {
            "overallScore": 70, "skuDepthRating": 60,
            "pricingStrategy": {"type": "Value", "analysis": "Fair prices", "recommendations": ["Bundle"]},
            "productMixInsights": ["Narrow range"], "gapAnalysis": ["No accessories"],
        },
        "operationsAssessment": {
            "overallScore": 65, "uxScore": 70, "trustScore": 60, "conversionScore": 55,
            "strengths": ["Fast site"], "weaknesses": ["No reviews"], "quickWins": ["Add FAQ"],
        },
        "marketingAnalysis": {
            "overallScore": 50,
            "channels": [{"name": "Instagram", "status": "active", "score": 60}],
            "contentStrategy": "Lifestyle imagery", "brandStrength": 55, "recommendations": ["Start a blog"],
        },
        "swotAnalysis": {
            "strengths": ["Quality"], "weaknesses": ["Small catalog"],
            "opportunities": ["Gifting"], "threats": ["Fast fashion"],
        },
        "strategicRecommendations": [
            {"title": "Add reviews", "description": "Install a review app", "impact": "high",
             "effort": "low", "priority": 1, "category": "Trust"},
        ],
        "competitorAnalysis": {
            "overview": {
                "totalCompetitorsAnalyzed": 1, "marketConcentration": "Fragmented",
                "competitiveIntensity": "High", "analysisConfidence": 70,
                "dataSourceSummary": "Inferred from categories",
            },
            "marketLandscape": {
                "leaderBrands": ["DTC basics brands"], "emergingBrands": ["Niche labels"],
                "nichePlayersCount": 10, "marketTrend": "Growing",
            },
            "positioningMap": {
                "xAxis": "Price", "yAxis": "Quality",
                "currentPosition": {"x": "Mid", "y": "High"},
                "recommendedPosition": {"x": "Mid", "y": "Very high"},
                "positioningGap": "Premium signals",
            },
            "competitiveAdvantage": {
                "currentAdvantages": ["Fabric"], "sustainableAdvantages": ["Community"],
                "vulnerabilities": ["Scale"], "recommendedFocus": ["Retention"],
            },
            "competitors": [{
                "name": "DTC basics brand", "category": "Direct", "description": "Online basics",
                "confidenceLevel": 70, "dataSource": "Category inference",
                "positioning": {"targetMarket": "Millennials", "pricePosition": "Mid", "brandPosition": "Minimal"},
                "metrics": {
                    "estimatedProductCount": "100-500", "estimatedPriceRange": "$20-80",
                    "estimatedMarketShare": "1-3%", "strengthScore": 70,
                },
                "comparison": {"advantages": ["Price"], "disadvantages": ["Range"], "differentiators": ["Story"]},
                "strategicInsights": {"whatToLearn": ["Email"], "whatToAvoid": ["Discount addiction"],
                                      "opportunities": ["Gifting"]},
            }],
        },
    }


def make_report() -> AIReport:
    payload = make_report_payload()
    payload["generatedAt"] = "2024-06-15T12:00:00+00:00"
    return AIReport.model_validate(payload)


@pytest.fixture()
def report_payload() -> Dict[str, Any]:
    return make_report_payload()


@pytest.fixture()
def sample_products() -> List[ShopifyProduct]:
    return [
        make_product(product_id=1, price="10.00", tags=["Summer", "women"]),
        make_product(product_id=2, price="20.00", compare_at_price="25.00", tags=["summer "],
                     published_at="2024-03-10T08:00:00Z"),
        make_product(product_id=3, price="30.00", available=False, tags=["winter"], vendor="",
                     product_type="", published_at=None),
    ]
