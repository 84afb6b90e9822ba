"""
Business logic services: scraping, aggregation, scoring and report generation
"""

from .scraper import WebScraper
from .data_extractor import DataExtractor
from .platform_detector import PlatformDetector
from .aggregator import aggregate
from .cache import AnalysisCache
from .report_generator import ReportGenerator
from .analysis_service import AnalysisService

__all__ = [
    "WebScraper",
    "DataExtractor",
    "PlatformDetector",
    "aggregate",
    "AnalysisCache",
    "ReportGenerator",
    "AnalysisService"
]
