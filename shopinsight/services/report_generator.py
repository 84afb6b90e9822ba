"""
AI business report generation with Google Gemini.

Models are tried in order. A model that does not exist (HTTP 404 / NOT_FOUND)
is skipped; any other failure stops the loop and is reported with a specific
error type. Answers must be JSON documents matching ``AIReport``.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, TypeVar

from google import genai
from google.genai import errors, types
from pydantic import ValidationError

from shopinsight.config import settings
from shopinsight.exceptions import (
    ShopInsightError, ReportGenerationError, ReportConfigurationError, InvalidApiKeyError,
    QuotaExceededError, ContentBlockedError, InvalidReportError
)
from shopinsight.models.report import AIReport
from shopinsight.models.schemas import AIContext
from shopinsight.utils.helpers import strip_code_fences

logger = logging.getLogger(__name__)

T = TypeVar("T")

SAMPLE_PRODUCTS_IN_PROMPT = 8
GROUPS_IN_PROMPT = 5


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def build_prompt(context: AIContext, language: str = "English") -> str:
    """
    Condense the aggregated store data into a single report prompt

    Args:
        context: AI context produced by the aggregator
        language: Language the narrative fields should be written in

    Returns:
        str: Prompt text including the JSON schema of the expected answer
    """
    meta = context.store_meta
    stats = context.stats
    tech = context.tech_analysis
    structure = context.site_structure
    health = context.website_health
    scores = context.store_scores

    samples = "\n".join(
        f"- {p.title} | ${p.price}"
        + (f" (was ${p.compare_at_price})" if p.compare_at_price else "")
        + f" | {p.vendor} | {p.product_type}"
        for p in context.sample_products[:SAMPLE_PRODUCTS_IN_PROMPT]
    )
    vendors = "; ".join(
        f"{v.vendor}: {v.product_count} products, avg ${v.avg_price}"
        for v in context.vendor_analysis[:GROUPS_IN_PROMPT]
    )
    types_text = "; ".join(f"{t.type}: {t.count}" for t in context.product_type_analysis[:GROUPS_IN_PROMPT])
    tags = ", ".join(t.tag for t in context.top_tags)
    social = ", ".join(context.social_links.active_platforms()) or "none"
    schema = json.dumps(AIReport.model_json_schema(by_alias=True), ensure_ascii=False)

    return f"""You are a senior e-commerce strategy consultant. Using the store data below, write a structured business analysis report.

# Store data

Basics:
- Name: {meta.title}
- Domain: {meta.domain}
- Description: {meta.description or "none"}
- Language: {tech.language}, currency: {tech.currency}

Catalog:
- Products: {stats.total_products}, SKUs: {context.variant_analysis.total_variants}
- Average price: ${stats.average_price}, median: ${stats.median_price}
- Price range: ${stats.min_price} - ${stats.max_price}
- Discounted: {context.discount_analysis.total_products_with_discount} products ({context.discount_analysis.discount_percentage}%), average discount {context.discount_analysis.average_discount_percent}%
- In stock: {context.inventory_analysis.in_stock_products} products ({context.inventory_analysis.in_stock_percentage}%)

Vendors: {vendors or "none"}
Product types: {types_text or "none"}
Top tags: {tags or "none"}

Storefront features:
- Theme: {tech.shopify_theme or "unknown"}
- Reviews: {_yes_no(tech.has_reviews)}
- Newsletter: {_yes_no(tech.has_newsletter)}
- Live chat: {_yes_no(tech.has_chat_widget)}
- Payment methods: {", ".join(tech.payment_methods) or "unknown"}
- Social media: {social}

Site structure:
- About page: {_yes_no(structure.has_about_page)}
- Blog: {_yes_no(structure.has_blog_section)}
- FAQ: {_yes_no(structure.has_faq_page)}
- Return policy: {_yes_no(structure.has_return_policy)}

Health scores:
- Overall: {health.overall}/100
- SEO: {health.seo}/100
- UX: {health.ux}/100
- Trust: {health.trust}/100
- Marketing: {health.marketing}/100

Store scores (benchmark in brackets):
- Product: {scores.product.overall}/100 [{scores.product.benchmark}]
- Operations: {scores.operations.overall}/100 [{scores.operations.benchmark}]
- Marketing: {scores.marketing.overall}/100 [{scores.marketing.benchmark}]

Sample products:
{samples or "none"}

---

Answer with a single JSON object that validates against this JSON Schema:
{schema}

Rules:
1. Every conclusion must follow from the data above.
2. Scores range from 0 to 100 and must be objective.
3. Recommendations must be specific and actionable; give at least 5 strategicRecommendations ordered by priority.
4. Output JSON only, with no other text. Do not include generatedAt.
5. Write all narrative text in {language}; keep JSON keys and enum values exactly as specified.
6. Competitor analysis must be inferred from product categories, price positioning, audience and tags. Describe competitors by category (for example "DTC brands in the same category") instead of inventing brand names.
7. Label every competitor metric as an estimate, and state the basis in dataSource.
8. confidenceLevel must be honest: 85-100 inferred directly from data, 70-84 reasonable industry inference, 60-69 uncertain; omit anything below 60.
9. Include at least 3 competitors, ordered by relevance."""


def build_translation_prompt(text: str, target_language: str) -> str:
    return f"""You are a professional e-commerce product translator. Translate the product description below into {target_language}.

Requirements:
1. Keep the original formatting (headings, lists, bold text, links) unchanged.
2. The translation must read naturally for online shoppers.
3. Keep technical terms accurate.
4. Output only the translation, with no explanation or prefix.

Original:
{text}"""


def parse_report(text: str) -> AIReport:
    """
    Parse and validate a model answer

    Args:
        text: Raw model output, optionally wrapped in a ```json fence

    Returns:
        AIReport: Validated report stamped with generatedAt

    Raises:
        InvalidReportError: If the answer is not JSON or does not match the schema
    """
    try:
        payload = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI response as JSON: {e}; raw response: {text[:500]}")
        raise InvalidReportError("The AI returned data in an invalid format, please try again") from e

    if not isinstance(payload, dict):
        raise InvalidReportError("The AI returned data in an invalid format, please try again")

    payload["generatedAt"] = datetime.now(timezone.utc).isoformat()
    try:
        return AIReport.model_validate(payload)
    except ValidationError as e:
        logger.error(f"AI response does not match the report schema: {e.error_count()} errors")
        raise InvalidReportError("The AI report is missing required sections, please try again") from e


def is_model_not_found(error: errors.APIError) -> bool:
    return error.code == 404 or error.status == "NOT_FOUND"


def classify_api_error(error: errors.APIError) -> ReportGenerationError:
    """Map a Gemini API error onto the report error taxonomy"""
    message = str(error.message or error)
    status = error.status or ""

    if error.code in (401, 403) or status in ("UNAUTHENTICATED", "PERMISSION_DENIED") \
            or (status == "INVALID_ARGUMENT" and "api key" in message.lower()):
        return InvalidApiKeyError("The Gemini API key is invalid or has expired")
    if error.code == 429 or status == "RESOURCE_EXHAUSTED":
        return QuotaExceededError("The Gemini API quota is exhausted, please try again later")
    return ReportGenerationError(f"AI analysis failed: {message}")


class ReportGenerator:
    """Requests reports and translations from Gemini with model fallback"""

    def __init__(self, api_key: Optional[str] = None, models: Optional[List[str]] = None,
                 client: Optional[genai.Client] = None, temperature: Optional[float] = None,
                 max_output_tokens: Optional[int] = None, parse_retries: Optional[int] = None,
                 language: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.models = list(models or settings.GEMINI_MODELS)
        self.temperature = temperature if temperature is not None else settings.GEMINI_TEMPERATURE
        self.max_output_tokens = max_output_tokens or settings.GEMINI_MAX_OUTPUT_TOKENS
        self.parse_retries = parse_retries if parse_retries is not None else settings.REPORT_PARSE_RETRIES
        self.language = language or settings.REPORT_LANGUAGE
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise ReportConfigurationError("GEMINI_API_KEY is not configured")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.temperature,
            top_p=0.8,
            top_k=40,
            max_output_tokens=self.max_output_tokens,
        )

    def _generate_text(self, model: str, prompt: str) -> str:
        response = self.client.models.generate_content(
            model=model,
            contents=prompt,
            config=self._generation_config(),
        )

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and feedback.block_reason:
            raise ContentBlockedError("The request was blocked by the safety policy, please try another store")

        candidates = response.candidates or []
        if candidates and candidates[0].finish_reason == types.FinishReason.SAFETY:
            raise ContentBlockedError("The response was blocked by the safety policy, please try another store")

        text = response.text
        if not text:
            raise InvalidReportError("The AI returned an empty response")
        return text

    def _with_model_fallback(self, operation: Callable[[str], T]) -> T:
        last_error: Optional[Exception] = None

        for model in self.models:
            try:
                logger.info(f"Trying Gemini model: {model}")
                result = operation(model)
                logger.info(f"Got response from model: {model}")
                return result
            except errors.APIError as e:
                if is_model_not_found(e):
                    logger.warning(f"Model {model} is not available, trying the next one")
                    last_error = e
                    continue
                logger.error(f"Model {model} failed: {e}")
                raise classify_api_error(e) from e
            except ShopInsightError:
                raise
            except Exception as e:
                logger.error(f"Model {model} failed: {e}")
                raise ReportGenerationError("AI analysis failed, please try again later") from e

        raise ReportGenerationError("No configured Gemini model is available") from last_error

    def generate_report(self, context: AIContext) -> AIReport:
        """
        Generate the business report for an aggregated store

        Args:
            context: AI context from the aggregator

        Returns:
            AIReport: Validated report

        Raises:
            ReportGenerationError: Or one of its subclasses on any failure
        """
        prompt = build_prompt(context, self.language)

        def attempt(model: str) -> AIReport:
            for retry in range(self.parse_retries + 1):
                try:
                    return parse_report(self._generate_text(model, prompt))
                except InvalidReportError:
                    if retry >= self.parse_retries:
                        raise
                    logger.warning(f"Invalid report from {model}, retrying ({retry + 1}/{self.parse_retries})")
            raise InvalidReportError("The AI returned data in an invalid format, please try again")

        return self._with_model_fallback(attempt)

    def translate(self, text: str, target_language: Optional[str] = None) -> str:
        """Translate a product description, keeping its formatting"""
        prompt = build_translation_prompt(text, target_language or settings.TRANSLATION_TARGET_LANGUAGE)

        def attempt(model: str) -> str:
            translated = self._generate_text(model, prompt).strip()
            if not translated:
                raise ReportGenerationError("Translation returned an empty result")
            return translated

        return self._with_model_fallback(attempt)
