from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from contextlib import asynccontextmanager

from shopinsight.config import settings
from shopinsight.exceptions import ShopInsightError
from shopinsight.models.schemas import ErrorResponse
from shopinsight.api.routes import router
from shopinsight.services.analysis_service import AnalysisService
from shopinsight.services.cache import AnalysisCache
from shopinsight.services.database_service import DatabaseService
from shopinsight.services.report_generator import ReportGenerator
from shopinsight.services.scraper import WebScraper

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")

    db_service = None
    if settings.SAVE_HISTORY:
        try:
            db_service = DatabaseService()
            logger.info("Database tables initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database, history disabled: {e}")

    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set; report generation will fail")

    scraper = WebScraper()
    cache = AnalysisCache(
        ttl_seconds=settings.CACHE_TTL_SECONDS,
        max_entries=settings.CACHE_MAX_ENTRIES
    )
    app.state.db_service = db_service
    app.state.analysis_service = AnalysisService(
        scraper=scraper,
        generator=ReportGenerator(),
        cache=cache,
        db_service=db_service
    )

    yield

    scraper.close()
    logger.info("Application shutting down...")


# Create FastAPI app with explicit docs configuration
app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes with prefix
app.include_router(router, prefix="/api/v1", tags=["Store Analysis"])


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": settings.API_TITLE,
        "version": settings.API_VERSION,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "endpoints": {
            "analyze": "/api/v1/analyze",
            "translate": "/api/v1/translate",
            "invalidate_cache": "/api/v1/cache?url=",
            "recent_analyses": "/api/v1/recent-analyses",
            "statistics": "/api/v1/statistics",
            "health": "/api/v1/health"
        },
        "status": "active"
    }


def error_response(status_code: int, error: ErrorResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(mode="json", by_alias=True, exclude_none=True)
    )


# Global exception handlers
@app.exception_handler(ShopInsightError)
async def shopinsight_error_handler(request, exc: ShopInsightError):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{exc.error_type} for {request.url.path}: {exc.message}")
    return error_response(exc.status_code, ErrorResponse.model_validate(exc.to_payload()))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return error_response(400, ErrorResponse(error=message, error_type="INVALID_REQUEST"))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    return error_response(exc.status_code, ErrorResponse(error=str(exc.detail), error_type="HTTP_ERROR"))


@app.exception_handler(Exception)
async def internal_server_error_handler(request, exc: Exception):
    logger.error(f"Internal server error: {exc}")
    return error_response(500, ErrorResponse(
        error="An internal server error occurred",
        error_type="INTERNAL_ERROR"
    ))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("shopinsight.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
