import asyncio
import logging
from typing import Optional

from shopinsight.models.schemas import AnalyzeResponse, CacheInfo
from shopinsight.services.aggregator import aggregate
from shopinsight.services.cache import AnalysisCache
from shopinsight.services.database_service import DatabaseService
from shopinsight.services.report_generator import ReportGenerator
from shopinsight.services.scraper import WebScraper
from shopinsight.utils.helpers import extract_domain

logger = logging.getLogger(__name__)


class AnalysisService:
    """Runs one store analysis: cache lookup, scrape, aggregate, report, cache write, history"""

    def __init__(self, scraper: WebScraper, generator: ReportGenerator, cache: AnalysisCache,
                 db_service: Optional[DatabaseService] = None):
        self.scraper = scraper
        self.generator = generator
        self.cache = cache
        self.db_service = db_service

    async def analyze(self, url: str, force_refresh: bool = False) -> AnalyzeResponse:
        """
        Analyze a store, serving a cached result when one is fresh

        Args:
            url: Store URL as entered by the user
            force_refresh: Drop any cached result before analyzing

        Returns:
            AnalyzeResponse: Aggregated data, AI report and cache metadata
        """
        extract_domain(url)

        if force_refresh:
            self.cache.delete(url)
            logger.info(f"Force refresh requested for {url}")
        else:
            hit = self.cache.get(url)
            if hit is not None:
                response = hit.data.model_copy(update={
                    "cache": CacheInfo(
                        cached=True,
                        cached_at=hit.created_at,
                        age_seconds=round(hit.age_seconds, 1),
                        age_label=self.cache.format_age(hit.age_seconds)
                    )
                })
                await self._record_history(url, response)
                return response

        scraper_result = await self.scraper.scrape_store(url)
        data = aggregate(scraper_result)
        report = await asyncio.to_thread(self.generator.generate_report, data.ai_context)

        response = AnalyzeResponse(
            data=data,
            report=report,
            meta=scraper_result.meta,
            social_links=scraper_result.social_links,
            tech_analysis=scraper_result.tech_analysis,
            cache=CacheInfo(cached=False)
        )
        self.cache.set(url, response)
        logger.info(f"Analysis complete for {url}, cached {len(self.cache)} entries")

        await self._record_history(url, response)
        return response

    async def translate(self, text: str) -> str:
        return await asyncio.to_thread(self.generator.translate, text)

    def invalidate(self, url: str) -> bool:
        extract_domain(url)
        return self.cache.delete(url)

    async def _record_history(self, url: str, response: AnalyzeResponse) -> None:
        if self.db_service is None:
            return
        try:
            await asyncio.to_thread(
                self.db_service.save_analysis, self.cache.normalize_url(url), url, response
            )
        except Exception as e:
            logger.error(f"Could not record analysis history for {url}: {e}")
