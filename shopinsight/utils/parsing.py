from __future__ import annotations
import re
from bs4 import BeautifulSoup
from markdownify import ATX, MarkdownConverter

SOCIAL_PATTERNS = {
    "facebook": re.compile(r"https?://(www\.)?facebook\.com/[^\s\"'<>]+", re.I),
    "instagram": re.compile(r"https?://(www\.)?instagram\.com/[^\s\"'<>]+", re.I),
    "twitter": re.compile(r"https?://(www\.)?(twitter|x)\.com/[^\s\"'<>]+", re.I),
    "youtube": re.compile(r"https?://(www\.)?youtube\.com/[^\s\"'<>]+", re.I),
    "tiktok": re.compile(r"https?://(www\.)?tiktok\.com/@[^\s\"'<>]+", re.I),
    "pinterest": re.compile(r"https?://(www\.)?pinterest\.com/[^\s\"'<>]+", re.I),
    "linkedin": re.compile(r"https?://(www\.)?linkedin\.com/[^\s\"'<>]+", re.I),
}

THEME_NAME_RE = re.compile(r'Shopify\.theme\s*=\s*{[^}]*"name"\s*:\s*"([^"]+)"')
THEME_ID_RE = re.compile(r"theme_store_id['\"]\s*:\s*(\d+)")
CURRENCY_RE = re.compile(r"currency['\"]\s*:\s*['\"]([A-Z]{3})['\"]", re.I)
BLANK_LINES_RE = re.compile(r"\n{3,}")


def html_to_markdown(html: str) -> str:
    """Convert product body_html to Markdown, keeping headings, lists, emphasis and links"""
    if not html:
        return ""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    markdown = MarkdownConverter(heading_style=ATX, bullets="-").convert_soup(soup)
    lines = [line.rstrip() for line in markdown.splitlines()]
    return BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()


def split_tags(tags) -> list[str]:
    """Shopify returns tags either as a list or as one comma-separated string"""
    if isinstance(tags, list):
        return [str(t).strip() for t in tags if str(t).strip()]
    if isinstance(tags, str):
        return [t.strip() for t in tags.split(",") if t.strip()]
    return []


def find_social_link(soup: BeautifulSoup, html: str, platform: str) -> str | None:
    # anchors first, then anything URL-shaped in scripts or JSON blobs
    anchor = soup.select_one(f'a[href*="{platform}"]')
    if anchor and anchor.get("href"):
        return anchor["href"]
    match = SOCIAL_PATTERNS[platform].search(html)
    return match.group(0) if match else None
