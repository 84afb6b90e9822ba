import logging
import math
import re
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, List, Optional
from urllib.parse import urlparse

from shopinsight.exceptions import InvalidStoreUrlError

logger = logging.getLogger(__name__)


def ensure_scheme(url: str) -> str:
    """
    Prefix a bare host with https:// so it can be parsed

    Args:
        url: Raw URL as typed by a user

    Returns:
        str: URL with an explicit scheme
    """
    url = url.strip()
    if not url.lower().startswith(('http://', 'https://')):
        url = 'https://' + url
    return url


def extract_domain(url: str) -> str:
    """
    Extract the hostname of a store URL

    Args:
        url: Store URL, with or without scheme

    Returns:
        str: Hostname (lowercase)

    Raises:
        InvalidStoreUrlError: If the URL is empty or has no usable hostname
    """
    if not url or not url.strip():
        raise InvalidStoreUrlError("Please provide a valid store URL")

    try:
        parsed = urlparse(ensure_scheme(url))
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidStoreUrlError(f"Invalid URL format: {url}") from e

    if not hostname or '.' not in hostname or ' ' in hostname:
        raise InvalidStoreUrlError(f"Invalid URL format: {url}")

    return hostname


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round like a spreadsheet does (0.5 always goes up)

    Python's round() uses banker's rounding, which would turn 62.5 into 62.

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        float: Rounded value
    """
    if value is None or (isinstance(value, float) and (math.isnan(value) or math.isinf(value))):
        return 0.0
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: float, whole: float, digits: int = 1) -> float:
    """Percentage of part over whole, zero when whole is empty"""
    if not whole:
        return 0.0
    return round_half_up(part / whole * 100, digits)


def to_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Parse a Shopify money string ("19.99") into a float

    Args:
        value: Raw value from the JSON feed
        default: Returned when the value is missing or not numeric

    Returns:
        float: Parsed value or default
    """
    if value is None or value == '':
        return default
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(parsed) or math.isinf(parsed):
        return default
    return parsed


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp from the product feed into an aware UTC datetime

    Args:
        value: Timestamp string such as "2024-03-01T10:00:00-05:00"

    Returns:
        datetime: UTC datetime, or None when the value is missing or malformed
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def contains_any(text: str, keywords: List[str]) -> bool:
    """Case-insensitive substring test against a keyword list"""
    lowered = (text or "").lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence from model output"""
    stripped = (text or "").strip()
    stripped = re.sub(r'^```(?:json|JSON)?\s*', '', stripped)
    stripped = re.sub(r'\s*```$', '', stripped)
    return stripped.strip()
