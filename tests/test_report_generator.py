"""
Tests for Gemini report generation, with the SDK client replaced by a fake.
"""

import json
from types import SimpleNamespace

import pytest
from google.genai import errors, types

from shopinsight.exceptions import (
    ReportGenerationError, ReportConfigurationError, InvalidApiKeyError, QuotaExceededError,
    ContentBlockedError, InvalidReportError
)
from shopinsight.services.aggregator import aggregate
from shopinsight.services.report_generator import (
    ReportGenerator, build_prompt, build_translation_prompt, parse_report, classify_api_error
)
from tests.conftest import FROZEN_NOW, make_product, make_scraper_result


def api_error(code: int, status: str, message: str = "error") -> errors.APIError:
    return errors.ClientError(code, {"error": {"code": code, "status": status, "message": message}})


def text_response(text: str, finish_reason=None, block_reason=None):
    return SimpleNamespace(
        text=text,
        candidates=[SimpleNamespace(finish_reason=finish_reason or types.FinishReason.STOP)],
        prompt_feedback=SimpleNamespace(block_reason=block_reason) if block_reason else None
    )


class FakeModels:
    """Returns (or raises) the scripted result for each call, in order"""

    def __init__(self, results):
        self.results = list(results)
        self.calls = []

    def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def make_generator(results, models=("model-a", "model-b"), parse_retries=1):
    fake = FakeModels(results)
    generator = ReportGenerator(
        api_key="test-key",
        models=list(models),
        client=SimpleNamespace(models=fake),
        parse_retries=parse_retries
    )
    return generator, fake


@pytest.fixture()
def context():
    products = [make_product(product_id=i, price=str(10 + i)) for i in range(3)]
    return aggregate(make_scraper_result(products), now=FROZEN_NOW).ai_context


class TestPrompts:

    def test_report_prompt_contains_store_data_and_schema(self, context):
        prompt = build_prompt(context, "English")

        assert "Name: Acme Store" in prompt
        assert "Domain: acme.com" in prompt
        assert "Products: 3" in prompt
        assert '"executiveSummary"' in prompt
        assert "Write all narrative text in English" in prompt

    def test_translation_prompt(self):
        prompt = build_translation_prompt("**Soft** cotton", "Chinese")

        assert "into Chinese" in prompt
        assert prompt.endswith("**Soft** cotton")


class TestParseReport:

    def test_fenced_json(self, report_payload):
        report = parse_report("```json\n" + json.dumps(report_payload) + "\n```")

        assert report.executive_summary.headline == "Focused basics brand"
        assert report.generated_at

    def test_invalid_json(self):
        with pytest.raises(InvalidReportError):
            parse_report("Here is your report: {")

    def test_non_object_json(self):
        with pytest.raises(InvalidReportError):
            parse_report("[1, 2, 3]")

    def test_missing_sections(self, report_payload):
        del report_payload["swotAnalysis"]

        with pytest.raises(InvalidReportError):
            parse_report(json.dumps(report_payload))

    def test_scores_out_of_range(self, report_payload):
        report_payload["productStrategy"]["overallScore"] = 140

        with pytest.raises(InvalidReportError):
            parse_report(json.dumps(report_payload))


class TestErrorClassification:

    @pytest.mark.parametrize("code,status,message,expected", [
        (401, "UNAUTHENTICATED", "bad key", InvalidApiKeyError),
        (403, "PERMISSION_DENIED", "denied", InvalidApiKeyError),
        (400, "INVALID_ARGUMENT", "API key not valid. Please pass a valid API key.", InvalidApiKeyError),
        (429, "RESOURCE_EXHAUSTED", "quota", QuotaExceededError),
        (400, "INVALID_ARGUMENT", "bad request", ReportGenerationError),
    ])
    def test_classify(self, code, status, message, expected):
        error = classify_api_error(api_error(code, status, message))

        assert type(error) is expected


class TestGenerateReport:

    def test_first_model_succeeds(self, context, report_payload):
        generator, fake = make_generator([text_response(json.dumps(report_payload))])

        report = generator.generate_report(context)

        assert report.swot_analysis.strengths == ["Quality"]
        assert [c["model"] for c in fake.calls] == ["model-a"]
        assert fake.calls[0]["config"].top_k == 40

    def test_missing_model_falls_back(self, context, report_payload):
        generator, fake = make_generator([
            api_error(404, "NOT_FOUND", "models/model-a is not found"),
            text_response(json.dumps(report_payload)),
        ])

        generator.generate_report(context)

        assert [c["model"] for c in fake.calls] == ["model-a", "model-b"]

    def test_all_models_missing(self, context):
        generator, _ = make_generator([
            api_error(404, "NOT_FOUND"),
            api_error(404, "NOT_FOUND"),
        ])

        with pytest.raises(ReportGenerationError, match="No configured Gemini model is available"):
            generator.generate_report(context)

    @pytest.mark.parametrize("code,status,expected", [
        (401, "UNAUTHENTICATED", InvalidApiKeyError),
        (429, "RESOURCE_EXHAUSTED", QuotaExceededError),
    ])
    def test_other_api_errors_stop_the_fallback(self, context, code, status, expected):
        generator, fake = make_generator([api_error(code, status)])

        with pytest.raises(expected):
            generator.generate_report(context)

        assert len(fake.calls) == 1

    def test_invalid_answer_is_retried(self, context, report_payload):
        generator, fake = make_generator([
            text_response("not json"),
            text_response(json.dumps(report_payload)),
        ])

        generator.generate_report(context)

        assert [c["model"] for c in fake.calls] == ["model-a", "model-a"]

    def test_invalid_answer_after_retries(self, context):
        generator, fake = make_generator([text_response("nope"), text_response("still nope")])

        with pytest.raises(InvalidReportError):
            generator.generate_report(context)

        assert len(fake.calls) == 2

    def test_blocked_prompt(self, context):
        generator, _ = make_generator([text_response("", block_reason="SAFETY")])

        with pytest.raises(ContentBlockedError):
            generator.generate_report(context)

    def test_blocked_answer(self, context):
        generator, _ = make_generator([text_response("{}", finish_reason=types.FinishReason.SAFETY)])

        with pytest.raises(ContentBlockedError):
            generator.generate_report(context)

    def test_unexpected_failure(self, context):
        generator, fake = make_generator([RuntimeError("socket closed")])

        with pytest.raises(ReportGenerationError):
            generator.generate_report(context)

        assert len(fake.calls) == 1

    def test_missing_api_key(self, context):
        generator = ReportGenerator(api_key="", models=["model-a"])

        with pytest.raises(ReportConfigurationError) as exc_info:
            generator.generate_report(context)

        assert exc_info.value.status_code == 502
        assert exc_info.value.error_type == "MISSING_API_KEY"


class TestTranslate:

    def test_translate(self):
        generator, fake = make_generator([text_response("  柔软的棉  ")])

        assert generator.translate("Soft cotton") == "柔软的棉"
        assert "into Chinese" in fake.calls[0]["contents"]

    def test_translate_target_language(self):
        generator, fake = make_generator([text_response("Coton doux")])

        generator.translate("Soft cotton", target_language="French")

        assert "into French" in fake.calls[0]["contents"]

    def test_empty_translation(self):
        generator, _ = make_generator([text_response("")])

        with pytest.raises(InvalidReportError):
            generator.translate("Soft cotton")
