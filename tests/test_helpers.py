"""
Tests for URL, number and text helpers.
"""

from datetime import timezone

import pytest

from shopinsight.exceptions import InvalidStoreUrlError
from shopinsight.utils.helpers import (
    ensure_scheme, extract_domain, round_half_up, percentage, to_float, parse_datetime,
    contains_any, strip_code_fences
)
from shopinsight.utils.parsing import html_to_markdown, split_tags


class TestUrls:

    def test_ensure_scheme(self):
        assert ensure_scheme("shop.com") == "https://shop.com"
        assert ensure_scheme("HTTP://shop.com") == "HTTP://shop.com"

    @pytest.mark.parametrize("url,domain", [
        ("shop.com", "shop.com"),
        ("https://Shop.COM/products/x", "shop.com"),
        ("www.shop.com:8443", "www.shop.com"),
    ])
    def test_extract_domain(self, url, domain):
        assert extract_domain(url) == domain

    @pytest.mark.parametrize("url", ["", "   ", "localhost", "https://", "not a url"])
    def test_invalid_urls(self, url):
        with pytest.raises(InvalidStoreUrlError):
            extract_domain(url)


class TestNumbers:

    @pytest.mark.parametrize("value,digits,expected", [
        (62.5, 0, 63.0),
        (2.5, 0, 3.0),
        (0.125, 2, 0.13),
        (66.66666, 1, 66.7),
        (float("nan"), 1, 0.0),
    ])
    def test_round_half_up(self, value, digits, expected):
        assert round_half_up(value, digits) == expected

    def test_percentage(self):
        assert percentage(1, 3) == 33.3
        assert percentage(1, 0) == 0.0

    @pytest.mark.parametrize("raw,expected", [("19.99", 19.99), (5, 5.0), ("", 0.0), (None, 0.0), ("abc", 0.0)])
    def test_to_float(self, raw, expected):
        assert to_float(raw) == expected

    def test_to_float_default(self):
        assert to_float(None, None) is None


class TestDates:

    def test_offset_is_converted_to_utc(self):
        parsed = parse_datetime("2024-03-01T22:30:00-05:00")

        assert parsed.tzinfo == timezone.utc
        assert (parsed.day, parsed.hour) == (2, 3)

    def test_naive_timestamps_are_utc(self):
        assert parse_datetime("2024-03-01T10:00:00").tzinfo == timezone.utc

    @pytest.mark.parametrize("raw", [None, "", "yesterday"])
    def test_unparseable(self, raw):
        assert parse_datetime(raw) is None


class TestText:

    def test_contains_any_ignores_case(self):
        assert contains_any("Pay with VISA", ["visa"])
        assert not contains_any(None, ["visa"])

    @pytest.mark.parametrize("raw", [
        '```json\n{"a": 1}\n```',
        '```\n{"a": 1}```',
        '  {"a": 1}  ',
    ])
    def test_strip_code_fences(self, raw):
        assert strip_code_fences(raw) == '{"a": 1}'

    def test_html_to_markdown_drops_scripts(self):
        html = "<p>Soft   cotton</p><script>track()</script><style>p {}</style>"

        assert html_to_markdown(html) == "Soft cotton"
        assert html_to_markdown("") == ""

    def test_html_to_markdown_keeps_formatting(self):
        html = (
            "<h2>Details</h2><p><strong>Soft</strong> cotton</p>"
            "<ul><li>Machine wash</li><li>Tumble dry</li></ul>"
            '<p>See the <a href="https://acme.com/care">care guide</a></p>'
        )

        markdown = html_to_markdown(html)

        assert "## Details" in markdown
        assert "**Soft** cotton" in markdown
        assert "- Machine wash\n- Tumble dry" in markdown
        assert "[care guide](https://acme.com/care)" in markdown
        assert "\n\n\n" not in markdown

    def test_split_tags(self):
        assert split_tags(["a", " b ", ""]) == ["a", "b"]
        assert split_tags("a, b,,c") == ["a", "b", "c"]
        assert split_tags(None) == []
