"""
Shopify Insight

Scrapes a Shopify storefront's public catalog and homepage, aggregates:
- Price, tag, vendor, discount, variant, image and inventory statistics
- Website health checklist and store scores
- Per-product heuristic insights

and asks Gemini for a structured business report.
"""

__version__ = "1.0.0"
