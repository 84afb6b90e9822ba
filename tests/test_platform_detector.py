"""
Tests for commerce platform detection.
"""

import pytest
import requests
from bs4 import BeautifulSoup

from shopinsight.models.schemas import StorePlatform
from shopinsight.services.platform_detector import PlatformDetector, SHOPIFY_RULE
from tests.conftest import SHOPIFY_HOMEPAGE, FakeResponse

PROBE_URL = "https://acme.com/products.json?limit=1"
HOME_URL = "https://acme.com"

WOOCOMMERCE_HOMEPAGE = """<html><head>
<link rel="stylesheet" href="/wp-content/themes/storefront/style.css">
<script src="/wp-includes/js/jquery/jquery.js"></script>
</head><body class="home woocommerce"><div class="wc-block-grid">Products</div></body></html>"""

WIX_HOMEPAGE = """<html><head><script src="https://static.wixstatic.com/app.js"></script></head>
<body><a href="https://www.wix.com">Made with Wix</a></body></html>"""


class FakeScraper:
    """Answers GET requests from a URL -> response (or exception) table"""

    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, timeout, accept=None):
        self.calls.append((url, timeout, accept))
        result = self.responses[url]
        if isinstance(result, Exception):
            raise result
        return result


def detect(probe, homepage):
    scraper = FakeScraper({PROBE_URL: probe, HOME_URL: homepage})
    return PlatformDetector(scraper).detect_store_type("acme.com")


def shopify_api():
    return FakeResponse(200, {"products": [{"id": 1}]})


class TestShopify:

    def test_open_shopify_store(self):
        result = detect(shopify_api(), FakeResponse(200, text=SHOPIFY_HOMEPAGE))

        assert result.platform == StorePlatform.SHOPIFY
        assert result.is_shopify is True
        assert result.shopify_api_available is True
        assert result.confidence == "high"
        assert result.error_message is None
        assert "Shopify products.json API is reachable" in result.indicators
        assert "Detected Shopify CDN" in result.indicators

    def test_api_alone_is_enough(self):
        result = detect(shopify_api(), FakeResponse(200, text="<html><body>Plain</body></html>"))

        assert result.platform == StorePlatform.SHOPIFY
        assert result.confidence == "high"
        assert result.error_message is None

    def test_shopify_with_disabled_api(self):
        result = detect(FakeResponse(404, text="Not Found"), FakeResponse(200, text=SHOPIFY_HOMEPAGE))

        assert result.is_shopify is True
        assert result.shopify_api_available is False
        assert "products.json endpoint does not exist" in result.indicators
        assert "Confirmed Shopify store, but the products.json API is disabled" in result.indicators
        assert "products.json API is disabled" in result.error_message

    def test_forbidden_api_is_noted(self):
        result = detect(FakeResponse(403, text="Forbidden"), FakeResponse(200, text=SHOPIFY_HOMEPAGE))

        assert any("returned 403" in indicator for indicator in result.indicators)
        assert result.shopify_api_available is False

    def test_non_json_api_answer(self):
        result = detect(FakeResponse(200, text="<html>login</html>"), FakeResponse(200, text=SHOPIFY_HOMEPAGE))

        assert result.shopify_api_available is False

    @pytest.mark.parametrize("payload", [[], [{"id": 1}], {"items": []}])
    def test_api_answer_without_products_object(self, payload):
        result = detect(FakeResponse(200, payload), FakeResponse(200, text=SHOPIFY_HOMEPAGE))

        assert result.shopify_api_available is False
        assert "Shopify products.json API is reachable" not in result.indicators
        assert result.is_shopify is True

    def test_medium_confidence_from_markup(self):
        html = ('<html><head><script src="https://cdn.shopify.com/s/a.js"></script></head>'
                '<body><div class="shopify-section"></div></body></html>')

        hits = SHOPIFY_RULE.score(html, BeautifulSoup(html, "lxml"))
        result = detect(FakeResponse(404), FakeResponse(200, text=html))

        assert len(hits) == 3
        assert result.platform == StorePlatform.SHOPIFY
        assert result.confidence == "medium"

    def test_probe_uses_json_and_detection_timeout(self):
        scraper = FakeScraper({PROBE_URL: shopify_api(), HOME_URL: FakeResponse(200, text=SHOPIFY_HOMEPAGE)})

        PlatformDetector(scraper).detect_store_type("acme.com")

        url, timeout, accept = scraper.calls[0]
        assert url == PROBE_URL
        assert timeout == 10
        assert accept == "application/json"


class TestOtherPlatforms:

    def test_woocommerce(self):
        result = detect(FakeResponse(404), FakeResponse(200, text=WOOCOMMERCE_HOMEPAGE))

        assert result.platform == StorePlatform.WOOCOMMERCE
        assert result.platform_name == "WooCommerce (WordPress)"
        assert result.confidence == "high"
        assert result.is_shopify is False
        assert result.error_message.startswith("This site runs on WooCommerce (WordPress), not Shopify.")

    def test_wix_has_no_high_confidence(self):
        result = detect(FakeResponse(404), FakeResponse(200, text=WIX_HOMEPAGE))

        assert result.platform == StorePlatform.WIX
        assert result.confidence == "medium"
        assert "Detected Wix markers (2 indicators)" in result.indicators

    def test_unknown_platform(self):
        result = detect(FakeResponse(404), FakeResponse(200, text="<html><body>Hello</body></html>"))

        assert result.platform == StorePlatform.UNKNOWN
        assert result.platform_name == "Unknown platform"
        assert result.confidence == "low"
        assert "Unknown platform, not Shopify" in result.error_message


class TestNetworkFailures:

    def test_unreachable_site(self):
        error = requests.exceptions.ConnectionError("connection refused")
        result = detect(error, error)

        assert result.platform == StorePlatform.UNKNOWN
        assert result.shopify_api_available is False
        assert any(i.startswith("Website access error:") for i in result.indicators)

    def test_homepage_error_status(self):
        result = detect(shopify_api(), FakeResponse(500, text="oops"))

        assert result.platform == StorePlatform.SHOPIFY
        assert any(i.startswith("Website access error:") for i in result.indicators)

    @pytest.mark.parametrize("status", [401, 403])
    def test_probe_statuses_never_raise(self, status):
        result = detect(FakeResponse(status), FakeResponse(200, text="<html></html>"))

        assert result.platform == StorePlatform.UNKNOWN
