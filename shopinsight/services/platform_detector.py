"""
Commerce platform detection.

Each platform is described by a rule: a list of named checks run against the
homepage, the number of hits needed to claim the platform and the number
needed for high confidence. Shopify is checked first; the remaining platforms
are only considered while the platform is still unknown, first match wins.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import requests
from bs4 import BeautifulSoup

from shopinsight.config import settings
from shopinsight.models.schemas import StoreDetectionResult, StorePlatform

logger = logging.getLogger(__name__)

Predicate = Callable[[str, BeautifulSoup], bool]


def _contains(*needles: str) -> Predicate:
    return lambda html, soup: any(needle in html for needle in needles)


def _selects(selector: str) -> Predicate:
    return lambda html, soup: soup.select_one(selector) is not None


@dataclass
class PlatformRule:
    platform: StorePlatform
    checks: List[Tuple[str, Predicate]]
    threshold: int
    high_threshold: Optional[int] = None

    def score(self, html: str, soup: BeautifulSoup) -> List[str]:
        """Descriptions of the checks that matched"""
        return [description for description, check in self.checks if check(html, soup)]

    def confidence(self, hits: int) -> str:
        if self.high_threshold is not None and hits >= self.high_threshold:
            return "high"
        return "medium"


PLATFORM_NAMES = {
    StorePlatform.SHOPIFY: "Shopify",
    StorePlatform.WOOCOMMERCE: "WooCommerce (WordPress)",
    StorePlatform.MAGENTO: "Magento",
    StorePlatform.BIGCOMMERCE: "BigCommerce",
    StorePlatform.SQUARESPACE: "Squarespace",
    StorePlatform.WIX: "Wix",
    StorePlatform.PRESTASHOP: "PrestaShop",
    StorePlatform.OPENCART: "OpenCart",
    StorePlatform.UNKNOWN: "Unknown platform",
}

SHOPIFY_RULE = PlatformRule(
    platform=StorePlatform.SHOPIFY,
    checks=[
        ("Shopify.theme object", _contains("Shopify.theme")),
        ("Shopify CDN", _contains("cdn.shopify.com")),
        ("Shopify section markup", _contains("shopify-section")),
        ("Shopify cart.js", _contains("/cart.js")),
        ("Shopify CDN stylesheet", _selects('link[href*="cdn.shopify.com"]')),
        ("Shopify script", _selects('script[src*="cdn.shopify.com"]')),
        ("myshopify.com reference", _contains("myshopify.com")),
        ("Shopify checkout token", _selects('meta[name="shopify-checkout-api-token"]')),
    ],
    threshold=3,
    high_threshold=5,
)

OTHER_PLATFORM_RULES = [
    PlatformRule(
        platform=StorePlatform.WOOCOMMERCE,
        checks=[
            ("woocommerce", _contains("woocommerce")),
            ("wc- classes", _contains("wc-")),
            ("wp-content", _contains("/wp-content/")),
            ("wp-includes", _contains("/wp-includes/")),
            ("woocommerce body class", _selects("body.woocommerce")),
            ("add_to_cart", _contains("add_to_cart")),
        ],
        threshold=3,
        high_threshold=4,
    ),
    PlatformRule(
        platform=StorePlatform.MAGENTO,
        checks=[
            ("Magento", _contains("Magento")),
            ("mage/ scripts", _contains("mage/")),
            ("static version path", _contains("/static/version")),
            ("Magento_ modules", _contains("Magento_")),
            ("requirejs with mage",
             lambda html, soup: soup.select_one('script[src*="requirejs"]') is not None and "mage" in html),
        ],
        threshold=2,
        high_threshold=3,
    ),
    PlatformRule(
        platform=StorePlatform.BIGCOMMERCE,
        checks=[
            ("bigcommerce", _contains("bigcommerce")),
            ("BigCommerce", _contains("BigCommerce")),
            ("stencil theme", _contains("/stencil/")),
            ("BigCommerce script", _selects('script[src*="bigcommerce.com"]')),
        ],
        threshold=2,
        high_threshold=3,
    ),
    PlatformRule(
        platform=StorePlatform.SQUARESPACE,
        checks=[
            ("squarespace", _contains("squarespace")),
            ("Squarespace static assets", _contains("static.squarespace.com")),
            ("Squarespace script", _selects('script[src*="squarespace"]')),
        ],
        threshold=2,
    ),
    PlatformRule(
        platform=StorePlatform.WIX,
        checks=[
            ("wix.com", _contains("wix.com")),
            ("Wix static assets", _contains("static.wixstatic.com")),
            ("wix-code", _contains("wix-code")),
        ],
        threshold=2,
    ),
    PlatformRule(
        platform=StorePlatform.PRESTASHOP,
        checks=[("PrestaShop", _contains("prestashop", "PrestaShop"))],
        threshold=1,
    ),
    PlatformRule(
        platform=StorePlatform.OPENCART,
        checks=[("OpenCart", _contains("opencart", "route=common/home"))],
        threshold=1,
    ),
]


class PlatformDetector:
    """Classifies the commerce platform behind a domain"""

    def __init__(self, scraper):
        self.scraper = scraper

    def _probe_products_api(self, domain: str, indicators: List[str]) -> bool:
        url = f"https://{domain}/products.json?limit=1"
        try:
            response = self.scraper.get(url, timeout=settings.DETECTION_TIMEOUT, accept="application/json")
        except requests.exceptions.RequestException as e:
            logger.warning(f"products.json probe failed for {domain}: {e}")
            return False

        if response.status_code == 200:
            try:
                payload = response.json()
            except ValueError:
                logger.warning(f"products.json on {domain} did not return JSON")
                return False
            if isinstance(payload, dict) and payload.get("products") is not None:
                indicators.append("Shopify products.json API is reachable")
                return True
            logger.warning(f"products.json on {domain} did not return a product list")
        elif response.status_code in (401, 403):
            indicators.append(
                f"Shopify API returned {response.status_code} (possibly Shopify with the API disabled)"
            )
        elif response.status_code == 404:
            indicators.append("products.json endpoint does not exist")

        return False

    def detect_store_type(self, domain: str) -> StoreDetectionResult:
        """
        Detect which commerce platform a store runs on

        Args:
            domain: Store hostname

        Returns:
            StoreDetectionResult: Platform, confidence, matched indicators and,
            when the store cannot be analyzed, a user-facing error message
        """
        indicators: List[str] = []
        platform = StorePlatform.UNKNOWN
        confidence = "low"

        api_available = self._probe_products_api(domain, indicators)
        if api_available:
            platform = StorePlatform.SHOPIFY
            confidence = "high"

        try:
            response = self.scraper.get(f"https://{domain}", timeout=settings.HOMEPAGE_TIMEOUT)
            response.raise_for_status()
            html = response.text
        except requests.exceptions.RequestException as e:
            logger.warning(f"Homepage fetch failed during detection for {domain}: {e}")
            indicators.append(f"Website access error: {e}")
            html = None

        if html is not None:
            soup = BeautifulSoup(html, "lxml")

            shopify_hits = SHOPIFY_RULE.score(html, soup)
            indicators.extend(f"Detected {hit}" for hit in shopify_hits)
            if len(shopify_hits) >= SHOPIFY_RULE.threshold:
                platform = StorePlatform.SHOPIFY
                confidence = SHOPIFY_RULE.confidence(len(shopify_hits))
                if not api_available:
                    indicators.append("Confirmed Shopify store, but the products.json API is disabled")

            for rule in OTHER_PLATFORM_RULES:
                if platform != StorePlatform.UNKNOWN:
                    break
                hits = rule.score(html, soup)
                if len(hits) >= rule.threshold:
                    platform = rule.platform
                    confidence = rule.confidence(len(hits))
                    indicators.append(
                        f"Detected {PLATFORM_NAMES[rule.platform]} markers ({len(hits)} indicators)"
                    )

        platform_name = PLATFORM_NAMES[platform]
        error_message = None
        if platform != StorePlatform.SHOPIFY:
            error_message = (
                f"This site runs on {platform_name}, not Shopify. "
                f"Only Shopify stores can be analyzed at the moment."
            )
        elif not api_available:
            error_message = (
                "This is a Shopify store, but its public products.json API is disabled, "
                "so product data cannot be fetched. The store settings or a third-party app "
                "may be restricting access."
            )

        logger.info(f"Detection for {domain}: {platform.value} ({confidence}), {len(indicators)} indicators")

        return StoreDetectionResult(
            platform=platform,
            platform_name=platform_name,
            confidence=confidence,
            indicators=indicators,
            is_shopify=platform == StorePlatform.SHOPIFY,
            shopify_api_available=api_available,
            error_message=error_message
        )
