import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, status, Depends, Query, Request

from shopinsight.config import settings
from shopinsight.exceptions import ShopInsightError
from shopinsight.models.schemas import (
    AnalyzeRequest, AnalyzeResponse, TranslateRequest, TranslateResponse
)
from shopinsight.services.analysis_service import AnalysisService
from shopinsight.services.database_service import DatabaseService

logger = logging.getLogger(__name__)
router = APIRouter()


# Dependency injection for services built in the application lifespan
def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


def get_database_service(request: Request) -> DatabaseService:
    db_service = getattr(request.app.state, "db_service", None)
    if db_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analysis history is disabled"
        )
    return db_service


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_store(
        request: AnalyzeRequest,
        service: AnalysisService = Depends(get_analysis_service)
):
    """
    Analyze a Shopify store and generate an AI business report

    **Parameters:**
    - url: Store URL, with or without scheme
    - forceRefresh: Ignore any cached result (default: false)

    **Returns:**
    - data: Catalog statistics, website health and store scores
    - report: AI business report
    - meta, socialLinks, techAnalysis: Storefront facts
    - cache: Whether the result came from the cache and how old it is

    **Error Codes:**
    - 400: Invalid URL, not a Shopify store, products API disabled or empty catalog
    - 403: Store forbids access to its product data
    - 502: AI report could not be generated
    - 504: Store did not respond in time
    - 500: Internal server error
    """
    try:
        logger.info(f"Starting analysis for store: {request.url}")
        response = await service.analyze(request.url, force_refresh=request.force_refresh)
        logger.info(f"Finished analysis for {request.url} (cached: {response.cache.cached})")
        return response

    except (HTTPException, ShopInsightError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error analyzing store {request.url}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred during store analysis"
        )


@router.post("/translate", response_model=TranslateResponse)
async def translate_text(
        request: TranslateRequest,
        service: AnalysisService = Depends(get_analysis_service)
):
    """Translate a product description, keeping its formatting"""
    try:
        translated = await service.translate(request.text)
        return TranslateResponse(translated=translated)

    except (HTTPException, ShopInsightError):
        raise
    except Exception as e:
        logger.error(f"Unexpected error translating text: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="The translation request could not be processed"
        )


@router.delete("/cache")
async def invalidate_cache(
        url: str = Query(..., min_length=1, description="Store URL whose cached analysis should be dropped"),
        service: AnalysisService = Depends(get_analysis_service)
):
    """Drop the cached analysis of one store"""
    removed = service.invalidate(url)
    return {
        "url": url,
        "key": service.cache.normalize_url(url),
        "removed": removed,
        "entries": len(service.cache)
    }


@router.get("/recent-analyses")
async def get_recent_analyses(
        limit: int = Query(10, ge=1, le=100),
        db_service: DatabaseService = Depends(get_database_service)
):
    """Most recent analyses, newest first"""
    analyses = db_service.get_recent_analyses(limit)
    return {
        "success": True,
        "data": analyses,
        "count": len(analyses)
    }


@router.get("/statistics")
async def get_statistics(db_service: DatabaseService = Depends(get_database_service)):
    """Aggregate statistics over the analysis history"""
    stats = db_service.get_analysis_statistics()
    if not stats:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Statistics are not available"
        )
    return {
        "success": True,
        "data": stats
    }


@router.get("/health")
async def health_check(request: Request):
    """Service health and configuration summary"""
    service = getattr(request.app.state, "analysis_service", None)
    return {
        "status": "healthy",
        "timestamp": datetime.now(),
        "version": settings.API_VERSION,
        "cache_entries": len(service.cache) if service else 0,
        "report_generation": "configured" if settings.GEMINI_API_KEY else "missing GEMINI_API_KEY",
        "history": "enabled" if getattr(request.app.state, "db_service", None) else "disabled"
    }
