"""
Data models and schemas for the Shopify insight application
"""

from .base import CamelModel
from .report import AIReport
from .schemas import (
    ShopifyProduct,
    ScraperResult,
    StoreDetectionResult,
    AggregatedData,
    AIContext,
    ProductDetail,
    StoreScores,
    WebsiteHealthScore,
    AnalyzeRequest,
    AnalyzeResponse,
    CacheInfo,
    TranslateRequest,
    TranslateResponse,
    ErrorResponse
)

__all__ = [
    "CamelModel",
    "AIReport",
    "ShopifyProduct",
    "ScraperResult",
    "StoreDetectionResult",
    "AggregatedData",
    "AIContext",
    "ProductDetail",
    "StoreScores",
    "WebsiteHealthScore",
    "AnalyzeRequest",
    "AnalyzeResponse",
    "CacheInfo",
    "TranslateRequest",
    "TranslateResponse",
    "ErrorResponse"
]
