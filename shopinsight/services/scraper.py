import asyncio
import logging
from typing import Optional, Dict, Any, List

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from shopinsight.config import settings
from shopinsight.exceptions import (
    NotShopifyStoreError, StoreAccessForbiddenError, EmptyCatalogError,
    UpstreamFetchError, UpstreamTimeoutError, PlatformNotSupportedError,
    ShopifyApiDisabledError
)
from shopinsight.models.schemas import (
    ScraperResult, ShopifyProduct, Collection, HomepageAnalysis, StoreDetectionResult
)
from shopinsight.services.data_extractor import DataExtractor
from shopinsight.services.platform_detector import PlatformDetector
from shopinsight.utils.helpers import extract_domain

logger = logging.getLogger(__name__)

HTML_ACCEPT = 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8'
JSON_ACCEPT = 'application/json'


class WebScraper:
    """HTTP access to a Shopify storefront's public endpoints"""

    def __init__(self, session: Optional[requests.Session] = None,
                 extractor: Optional[DataExtractor] = None):
        self.session = session or self._create_session()
        self.extractor = extractor or DataExtractor()
        self.detector = PlatformDetector(self)
        self.headers = {
            'User-Agent': settings.USER_AGENT,
            'Accept-Language': 'en-US,en;q=0.5',
            'Accept-Encoding': 'gzip, deflate',
            'Connection': 'keep-alive'
        }

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        retry_strategy = Retry(
            total=settings.MAX_RETRIES,
            backoff_factor=settings.RETRY_BACKOFF,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def get(self, url: str, timeout: float, accept: str = HTML_ACCEPT) -> requests.Response:
        """GET with the scraper's headers; HTTP error statuses are returned, not raised"""
        headers = dict(self.headers, Accept=accept)
        return self.session.get(url, headers=headers, timeout=timeout)

    def url_exists(self, url: str) -> bool:
        """HEAD probe used for robots.txt and sitemap.xml; any failure means absent"""
        try:
            response = self.session.head(url, headers=self.headers, timeout=settings.PROBE_TIMEOUT,
                                         allow_redirects=True)
            return response.ok
        except requests.exceptions.RequestException as e:
            logger.debug(f"Probe failed for {url}: {e}")
            return False

    def fetch_homepage(self, domain: str) -> str:
        """
        Fetch the storefront homepage

        Args:
            domain: Store hostname

        Returns:
            str: Homepage HTML

        Raises:
            UpstreamTimeoutError: If the store did not answer in time
            UpstreamFetchError: If the homepage could not be fetched
        """
        url = f"https://{domain}"
        try:
            response = self.get(url, timeout=settings.REQUEST_TIMEOUT)
            response.raise_for_status()
            return response.text
        except requests.exceptions.Timeout as e:
            raise UpstreamTimeoutError(f"Timed out fetching {url}") from e
        except requests.exceptions.RequestException as e:
            raise UpstreamFetchError(f"Could not fetch {url}: {e}") from e

    def analyze_homepage(self, domain: str) -> HomepageAnalysis:
        """Fetch the homepage, extract its site facts and probe robots.txt / sitemap.xml"""
        html = self.fetch_homepage(domain)
        analysis = self.extractor.analyze_homepage(html, domain)
        analysis.seo_analysis.robots_txt = self.url_exists(f"https://{domain}/robots.txt")
        analysis.seo_analysis.sitemap = self.url_exists(f"https://{domain}/sitemap.xml")
        return analysis

    def _fetch_products_page(self, domain: str, page: int) -> List[Dict[str, Any]]:
        url = f"https://{domain}/products.json?limit={settings.PAGE_SIZE}&page={page}"
        logger.info(f"Fetching: {url}")

        response = self.get(url, timeout=settings.REQUEST_TIMEOUT, accept=JSON_ACCEPT)
        if response.status_code == 404:
            raise NotShopifyStoreError(
                "This site is not a Shopify store, or its products.json endpoint is not public"
            )
        if response.status_code in (401, 403):
            raise StoreAccessForbiddenError("This store does not allow access to its product data")
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"products.json returned {type(payload).__name__}, expected an object")
        return payload.get('products') or []

    def fetch_products(self, domain: str) -> List[ShopifyProduct]:
        """
        Page through products.json

        Args:
            domain: Store hostname

        Returns:
            list: Parsed products, at most MAX_PRODUCTS

        Raises:
            NotShopifyStoreError: If products.json does not exist
            StoreAccessForbiddenError: If the store refuses access
            EmptyCatalogError: If no product could be fetched
            UpstreamTimeoutError: If the first page timed out
            UpstreamFetchError: If the first page could not be fetched
        """
        raw_products: List[Dict[str, Any]] = []
        page = 1

        while page <= settings.MAX_PAGES and len(raw_products) < settings.MAX_PRODUCTS:
            try:
                products = self._fetch_products_page(domain, page)
            except (requests.exceptions.RequestException, ValueError) as e:
                if not raw_products:
                    if isinstance(e, requests.exceptions.Timeout):
                        raise UpstreamTimeoutError(f"Timed out fetching products from {domain}") from e
                    raise UpstreamFetchError(f"Could not fetch products from {domain}: {e}") from e
                logger.error(f"Error fetching page {page} of {domain}, keeping {len(raw_products)} products: {e}")
                break

            if not products:
                logger.info(f"No more products found at page {page}")
                break

            raw_products.extend(products)
            logger.info(f"Page {page}: got {len(products)} products, total {len(raw_products)}")

            if len(products) < settings.PAGE_SIZE:
                break

            page += 1

        if not raw_products:
            raise EmptyCatalogError("No products were found. Please check that this is a valid Shopify store")

        return self.extractor.extract_products(raw_products[:settings.MAX_PRODUCTS])

    def fetch_collections(self, domain: str) -> List[Collection]:
        """Best-effort read of collections.json"""
        url = f"https://{domain}/collections.json"
        try:
            response = self.get(url, timeout=settings.DETECTION_TIMEOUT, accept=JSON_ACCEPT)
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError(f"collections.json returned {type(payload).__name__}, expected an object")
            return self.extractor.extract_collections(payload.get('collections') or [])
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"Could not fetch collections for {domain}: {e}")
            return []

    def detect_store_type(self, domain: str) -> StoreDetectionResult:
        return self.detector.detect_store_type(domain)

    async def scrape_store(self, url: str) -> ScraperResult:
        """
        Scrape a storefront end to end

        Args:
            url: Store URL as entered by the user

        Returns:
            ScraperResult: Products and site facts

        Raises:
            PlatformNotSupportedError: If the site is not a Shopify store
            ShopifyApiDisabledError: If the store hides products.json
        """
        domain = extract_domain(url)
        logger.info(f"Starting scrape for domain: {domain}")

        detection = await asyncio.to_thread(self.detect_store_type, domain)
        logger.info(f"Platform detected: {detection.platform.value} (confidence: {detection.confidence})")

        if not detection.is_shopify:
            raise PlatformNotSupportedError(
                detection.error_message or f"This site runs on {detection.platform_name}, not Shopify",
                platform=detection.platform.value,
                platform_name=detection.platform_name,
                confidence=detection.confidence,
                indicators=detection.indicators
            )

        if not detection.shopify_api_available:
            raise ShopifyApiDisabledError(
                detection.error_message or "This Shopify store has disabled its products.json API",
                platform=detection.platform.value,
                platform_name=detection.platform_name,
                confidence=detection.confidence,
                indicators=detection.indicators
            )

        homepage, products, collections = await asyncio.gather(
            asyncio.to_thread(self.analyze_homepage, domain),
            asyncio.to_thread(self.fetch_products, domain),
            asyncio.to_thread(self.fetch_collections, domain),
        )

        logger.info(f"Scraping complete for {domain}: {len(products)} products, {len(collections)} collections")

        return ScraperResult(
            meta=homepage.meta,
            products=products,
            social_links=homepage.social_links,
            tech_analysis=homepage.tech_analysis,
            site_structure=homepage.site_structure,
            seo_analysis=homepage.seo_analysis,
            collections=collections,
            raw_html=homepage.raw_html
        )

    def close(self):
        """Close the session"""
        if self.session:
            self.session.close()
