"""
Error taxonomy for store analysis.

Every error carries an ``error_type`` code and the HTTP status the API layer
responds with, so routes never need to inspect message text.
"""

from typing import Any, Dict, List, Optional


class ShopInsightError(Exception):
    """Base class for all expected analysis failures"""

    error_type = "ANALYSIS_FAILED"
    status_code = 500
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "errorType": self.error_type, "retryable": self.retryable}


class InvalidStoreUrlError(ShopInsightError):
    error_type = "INVALID_URL"
    status_code = 400


class PlatformDetectionError(ShopInsightError):
    """Raised when the storefront cannot be analyzed as a Shopify store"""

    status_code = 400

    def __init__(self, message: str, platform: str, platform_name: str,
                 confidence: str, indicators: Optional[List[str]] = None):
        super().__init__(message)
        self.platform = platform
        self.platform_name = platform_name
        self.confidence = confidence
        self.indicators = list(indicators or [])

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["platformInfo"] = {
            "platform": self.platform,
            "platformName": self.platform_name,
            "confidence": self.confidence,
            "indicators": self.indicators,
        }
        return payload


class PlatformNotSupportedError(PlatformDetectionError):
    error_type = "PLATFORM_NOT_SUPPORTED"


class ShopifyApiDisabledError(PlatformDetectionError):
    error_type = "SHOPIFY_API_DISABLED"


class NotShopifyStoreError(ShopInsightError):
    error_type = "NOT_SHOPIFY_STORE"
    status_code = 400


class StoreAccessForbiddenError(ShopInsightError):
    error_type = "STORE_FORBIDDEN"
    status_code = 403


class EmptyCatalogError(ShopInsightError):
    error_type = "NO_PRODUCTS"
    status_code = 400


class UpstreamFetchError(ShopInsightError):
    error_type = "UPSTREAM_FETCH_FAILED"
    status_code = 500


class UpstreamTimeoutError(UpstreamFetchError):
    error_type = "UPSTREAM_TIMEOUT"
    status_code = 504
    retryable = True


# Report generation failures

class ReportGenerationError(ShopInsightError):
    error_type = "REPORT_FAILED"
    status_code = 502


class ReportConfigurationError(ReportGenerationError):
    error_type = "MISSING_API_KEY"


class InvalidApiKeyError(ReportGenerationError):
    error_type = "INVALID_API_KEY"


class QuotaExceededError(ReportGenerationError):
    error_type = "QUOTA_EXCEEDED"
    retryable = True


class ContentBlockedError(ReportGenerationError):
    error_type = "CONTENT_BLOCKED"


class InvalidReportError(ReportGenerationError):
    """The model answered, but not with a JSON document matching the report schema"""

    error_type = "INVALID_REPORT_FORMAT"
    retryable = True
