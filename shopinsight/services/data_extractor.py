from typing import List, Dict, Any, Optional
from bs4 import BeautifulSoup
import logging

from pydantic import ValidationError

from shopinsight.config import settings
from shopinsight.models.schemas import (
    ShopifyProduct, Collection, StoreMeta, SocialLinks, TechAnalysis,
    NavigationItem, SiteStructure, SEOAnalysis, HomepageAnalysis
)
from shopinsight.utils.helpers import contains_any
from shopinsight.utils.parsing import (
    SOCIAL_PATTERNS, THEME_NAME_RE, THEME_ID_RE, CURRENCY_RE, find_social_link
)

logger = logging.getLogger(__name__)

REVIEW_KEYWORDS = ["review", "rating", "star", "judge.me", "loox", "stamped", "yotpo"]
WISHLIST_KEYWORDS = ["wishlist", "favorite", "save-for-later"]
NEWSLETTER_KEYWORDS = ["newsletter", "subscribe", "mailchimp", "klaviyo"]
CHAT_KEYWORDS = ["intercom", "zendesk", "tidio", "crisp", "drift", "livechat", "gorgias"]

SEARCH_SELECTOR = 'input[type="search"], .search-form, [class*="search"]'
CART_SELECTOR = '[class*="cart"], .cart-icon, #cart'
LOGO_SELECTOR = ".header__logo img, .site-header__logo img, [class*='logo'] img"
NAVIGATION_SELECTOR = "nav a, .header a, .main-nav a, .site-nav a, [class*='navigation'] a"

PAYMENT_METHODS = [
    ("Visa", ["visa"]),
    ("Mastercard", ["mastercard", "master-card"]),
    ("American Express", ["amex", "american-express"]),
    ("PayPal", ["paypal"]),
    ("Apple Pay", ["apple-pay", "applepay"]),
    ("Google Pay", ["google-pay", "googlepay"]),
    ("Shop Pay", ["shop-pay", "shoppay"]),
    ("Klarna", ["klarna"]),
    ("Afterpay", ["afterpay"]),
    ("Affirm", ["affirm"]),
]

THIRD_PARTY_APPS = [
    ("Klaviyo", "klaviyo"),
    ("Judge.me", "judge.me"),
    ("Loox", "loox"),
    ("Yotpo", "yotpo"),
    ("Stamped.io", "stamped"),
    ("Privy", "privy"),
    ("Omnisend", "omnisend"),
    ("Smile.io", "smile.io"),
    ("Bold", "bold-"),
    ("ReCharge", "recharge"),
    ("Gorgias", "gorgias"),
    ("Zendesk", "zendesk"),
    ("Intercom", "intercom"),
    ("Hotjar", "hotjar"),
    ("Lucky Orange", "luckyorange"),
    ("Google Analytics", "google-analytics"),
    ("Facebook Pixel", "fbevents"),
    ("TikTok Pixel", "tiktok"),
    ("Pinterest Tag", "pintrk"),
    ("Shopify Analytics", "shopify-analytics"),
]

# keywords looked for in link hrefs
PAGE_KEYWORDS = {
    'about': ["about", "about-us", "our-story"],
    'contact': ["contact", "contact-us"],
    'faq': ["faq", "faqs", "help", "support"],
    'blog': ["blog", "blogs", "news", "articles"],
    'returns': ["return", "refund", "exchange"],
    'shipping': ["shipping", "delivery"],
}

CURRENCY_SYMBOLS = [("$", "USD"), ("€", "EUR"), ("£", "GBP"), ("¥", "CNY")]

MAX_NAVIGATION_ITEMS = 20
MAX_FOOTER_LINKS = 30
MAX_LINK_TEXT = 50


class DataExtractor:
    """Turns raw storefront responses into typed site facts and products"""

    def extract_products(self, products_data: List[Dict[Any, Any]]) -> List[ShopifyProduct]:
        """Extract products from Shopify products.json data"""
        products = []

        for product_data in products_data:
            try:
                products.append(ShopifyProduct.model_validate(product_data))
            except ValidationError as e:
                logger.error(f"Error processing product {product_data.get('id', 'unknown')}: {e}")
                continue

        return products

    def extract_collections(self, collections_data: List[Dict[Any, Any]]) -> List[Collection]:
        return [
            Collection(
                title=c.get('title') or '',
                handle=c.get('handle') or '',
                products_count=c.get('products_count') or 0
            )
            for c in collections_data
        ]

    def analyze_homepage(self, html: str, domain: str) -> HomepageAnalysis:
        """
        Extract every site fact the homepage exposes

        Args:
            html: Homepage HTML
            domain: Store hostname

        Returns:
            HomepageAnalysis: Meta, social links, tech, structure and SEO facts
        """
        soup = BeautifulSoup(html, 'lxml')

        return HomepageAnalysis(
            meta=self.extract_meta(soup, domain),
            social_links=self.extract_social_links(soup, html),
            tech_analysis=self.extract_tech_analysis(soup, html),
            site_structure=self.extract_site_structure(soup),
            seo_analysis=self.extract_seo_analysis(soup),
            raw_html=html[:settings.MAX_RAW_HTML_LENGTH]
        )

    def _meta_content(self, soup: BeautifulSoup, **attrs) -> Optional[str]:
        tag = soup.find('meta', attrs=attrs)
        if tag and tag.get('content'):
            return tag['content'].strip() or None
        return None

    def _title(self, soup: BeautifulSoup) -> str:
        return soup.title.get_text().strip() if soup.title else ""

    def extract_meta(self, soup: BeautifulSoup, domain: str) -> StoreMeta:
        icon = soup.select_one('link[rel="icon"]') or soup.select_one('link[rel="shortcut icon"]')
        logo = soup.select_one(LOGO_SELECTOR)
        keywords = self._meta_content(soup, name='keywords') or ""

        return StoreMeta(
            title=self._title(soup) or domain,
            description=(self._meta_content(soup, name='description')
                         or self._meta_content(soup, property='og:description') or ""),
            domain=domain,
            favicon=icon.get('href') if icon else None,
            logo=logo.get('src') if logo else None,
            og_image=self._meta_content(soup, property='og:image'),
            keywords=[k.strip() for k in keywords.split(',') if k.strip()]
        )

    def extract_social_links(self, soup: BeautifulSoup, html: str) -> SocialLinks:
        return SocialLinks(**{
            platform: find_social_link(soup, html, platform) for platform in SOCIAL_PATTERNS
        })

    def extract_shopify_theme(self, html: str) -> Optional[str]:
        match = THEME_NAME_RE.search(html)
        if match:
            return match.group(1)

        match = THEME_ID_RE.search(html)
        if match:
            return f"Theme ID: {match.group(1)}"

        return None

    def extract_currency(self, soup: BeautifulSoup, html: str) -> str:
        currency = self._meta_content(soup, property='og:price:currency')
        if currency:
            return currency

        match = CURRENCY_RE.search(html)
        if match:
            return match.group(1)

        for symbol, code in CURRENCY_SYMBOLS:
            if symbol in html:
                return code

        return "USD"

    def detect_feature(self, soup: BeautifulSoup, html: str, keywords: List[str]) -> bool:
        """True when any keyword appears in the HTML or in a class / id attribute"""
        lower_html = html.lower()
        for keyword in keywords:
            if keyword.lower() in lower_html:
                return True
            if soup.select_one(f'[class*="{keyword}"], [id*="{keyword}"]'):
                return True
        return False

    def extract_payment_methods(self, html: str) -> List[str]:
        return [name for name, keywords in PAYMENT_METHODS if contains_any(html, keywords)]

    def extract_third_party_apps(self, html: str) -> List[str]:
        lower_html = html.lower()
        return [name for name, pattern in THIRD_PARTY_APPS if pattern in lower_html]

    def extract_tech_analysis(self, soup: BeautifulSoup, html: str) -> TechAnalysis:
        html_tag = soup.find('html')

        return TechAnalysis(
            shopify_theme=self.extract_shopify_theme(html),
            currency=self.extract_currency(soup, html),
            language=(html_tag.get('lang') if html_tag else None) or "en",
            has_reviews=self.detect_feature(soup, html, REVIEW_KEYWORDS),
            has_wishlist=self.detect_feature(soup, html, WISHLIST_KEYWORDS),
            has_search=soup.select_one(SEARCH_SELECTOR) is not None,
            has_cart=soup.select_one(CART_SELECTOR) is not None,
            has_newsletter=self.detect_feature(soup, html, NEWSLETTER_KEYWORDS),
            has_chat_widget=self.detect_feature(soup, html, CHAT_KEYWORDS),
            payment_methods=self.extract_payment_methods(html),
            third_party_apps=self.extract_third_party_apps(html)
        )

    def extract_navigation(self, soup: BeautifulSoup) -> List[NavigationItem]:
        items: List[NavigationItem] = []
        seen_urls = set()

        for link in soup.select(NAVIGATION_SELECTOR):
            title = link.get_text().strip()
            url = link.get('href') or ""

            if not title or not url or url.startswith('#') or 'javascript:' in url:
                continue
            if len(title) >= MAX_LINK_TEXT or url in seen_urls:
                continue

            seen_urls.add(url)
            items.append(NavigationItem(title=title, url=url))

        return items[:MAX_NAVIGATION_ITEMS]

    def extract_footer_links(self, soup: BeautifulSoup) -> List[str]:
        texts = [link.get_text().strip() for link in soup.select('footer a')]
        unique = list(dict.fromkeys(t for t in texts if t and len(t) < MAX_LINK_TEXT))
        return unique[:MAX_FOOTER_LINKS]

    def has_page(self, soup: BeautifulSoup, keywords: List[str]) -> bool:
        return any(soup.select_one(f'a[href*="{keyword}"]') for keyword in keywords)

    def extract_site_structure(self, soup: BeautifulSoup) -> SiteStructure:
        return SiteStructure(
            main_navigation=self.extract_navigation(soup),
            footer_links=self.extract_footer_links(soup),
            collections_count=len(soup.select('a[href*="/collections/"]')),
            has_about_page=self.has_page(soup, PAGE_KEYWORDS['about']),
            has_contact_page=self.has_page(soup, PAGE_KEYWORDS['contact']),
            has_faq_page=self.has_page(soup, PAGE_KEYWORDS['faq']),
            has_blog_section=self.has_page(soup, PAGE_KEYWORDS['blog']),
            has_return_policy=self.has_page(soup, PAGE_KEYWORDS['returns']),
            has_shipping_policy=self.has_page(soup, PAGE_KEYWORDS['shipping'])
        )

    def extract_seo_analysis(self, soup: BeautifulSoup) -> SEOAnalysis:
        """SEO facts visible in the markup; robots.txt and sitemap are probed by the scraper"""
        description = self._meta_content(soup, name='description') or ""
        title = self._title(soup)
        canonical = soup.select_one('link[rel="canonical"]')

        return SEOAnalysis(
            has_meta_description=bool(description),
            meta_description_length=len(description),
            has_title_tag=bool(title),
            title_length=len(title),
            has_og_tags=soup.select_one('meta[property^="og:"]') is not None,
            has_twitter_cards=soup.select_one('meta[name^="twitter:"]') is not None,
            has_structured_data=soup.select_one('script[type="application/ld+json"]') is not None,
            canonical_url=canonical.get('href') if canonical else None
        )
