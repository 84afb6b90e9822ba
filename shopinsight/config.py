import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _split_list(value: str) -> list:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    # API Configuration
    API_TITLE = "Shopify Insight API"
    API_VERSION = "1.0.0"
    API_DESCRIPTION = "Scrape a Shopify storefront, aggregate its catalog and generate an AI business report"

    # Server Configuration
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 8000))
    DEBUG = os.getenv("DEBUG", "false").lower() == "true"

    # Request Configuration
    REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", 20))
    DETECTION_TIMEOUT = int(os.getenv("DETECTION_TIMEOUT", 10))
    HOMEPAGE_TIMEOUT = int(os.getenv("HOMEPAGE_TIMEOUT", 15))
    PROBE_TIMEOUT = int(os.getenv("PROBE_TIMEOUT", 5))
    MAX_RETRIES = int(os.getenv("MAX_RETRIES", 3))
    RETRY_BACKOFF = float(os.getenv("RETRY_BACKOFF", 1.0))

    # Catalog Limits
    PAGE_SIZE = int(os.getenv("PAGE_SIZE", 250))
    MAX_PAGES = int(os.getenv("MAX_PAGES", 3))
    MAX_PRODUCTS = int(os.getenv("MAX_PRODUCTS", 750))
    MAX_RAW_HTML_LENGTH = int(os.getenv("MAX_RAW_HTML_LENGTH", 50000))

    # Result Cache
    CACHE_TTL_SECONDS = int(os.getenv("CACHE_TTL_SECONDS", 24 * 60 * 60))
    CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", 50))

    # Database Configuration (analysis history)
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./shopinsight.db")
    SAVE_HISTORY = os.getenv("SAVE_HISTORY", "true").lower() == "true"

    # LLM Configuration
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODELS = _split_list(os.getenv(
        "GEMINI_MODELS",
        "gemini-2.0-flash,gemini-1.5-flash-latest,gemini-1.5-flash-001,gemini-pro"
    ))
    GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", 0.3))
    GEMINI_MAX_OUTPUT_TOKENS = int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", 8192))
    REPORT_PARSE_RETRIES = int(os.getenv("REPORT_PARSE_RETRIES", 1))
    REPORT_LANGUAGE = os.getenv("REPORT_LANGUAGE", "English")
    TRANSLATION_TARGET_LANGUAGE = os.getenv("TRANSLATION_TARGET_LANGUAGE", "Chinese")

    # Logging Configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Security Configuration
    ALLOWED_ORIGINS = _split_list(os.getenv("ALLOWED_ORIGINS", "*"))

    # User Agent String
    USER_AGENT = os.getenv(
        "USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )


# Create settings instance
settings = Settings()

