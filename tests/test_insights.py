"""
Tests for the per-product insight heuristics.
"""

import pytest

from shopinsight.services.insights import (
    infer_price_tier, infer_target_audience, infer_key_features, infer_seasonality,
    infer_competitive_position, build_product_insights
)


class TestPriceTier:

    @pytest.mark.parametrize("price,tier", [
        (40, "budget"),
        (50, "mid-range"),
        (119, "mid-range"),
        (200, "premium"),
        (250, "luxury"),
    ])
    def test_tiers_relative_to_average(self, price, tier):
        assert infer_price_tier(price, 100) == tier


class TestTargetAudience:

    def test_cheap_products_target_price_sensitive_shoppers(self):
        audiences = infer_target_audience([], price=20, avg_price=100, product_type="")

        assert audiences == ["Price-sensitive shoppers", "Students"]

    def test_expensive_products_target_high_income_shoppers(self):
        audiences = infer_target_audience([], price=250, avg_price=100, product_type="")

        assert audiences == ["High-income shoppers", "Quality seekers"]

    def test_tags_and_type_add_audiences_up_to_four(self):
        audiences = infer_target_audience(
            ["Gift", "sport", "eco-friendly"], price=100, avg_price=100, product_type="Summer Dress"
        )

        assert audiences == [
            "Middle-class shoppers", "Gift buyers", "Sports enthusiasts", "Eco-conscious shoppers"
        ]

    def test_audiences_are_unique(self):
        audiences = infer_target_audience(["gift", "gifts", "礼物"], price=100, avg_price=100, product_type="")

        assert audiences == ["Middle-class shoppers", "Gift buyers"]

    def test_chinese_tags(self):
        audiences = infer_target_audience(["女装"], price=100, avg_price=100, product_type="")

        assert "Female shoppers" in audiences


class TestKeyFeatures:

    def test_materials_then_qualities(self):
        features = infer_key_features("Made of organic cotton. Breathable and durable.", ["tag"])

        assert features == ["Material: cotton", "Material: organic", "Durable", "Breathable"]

    def test_features_are_capped(self):
        description = "cotton silk leather wool organic premium handmade"

        assert len(infer_key_features(description, [])) == 5

    def test_falls_back_to_tags(self):
        assert infer_key_features("", ["a", "b", "c", "d"]) == ["a", "b", "c"]
        assert infer_key_features("Nothing notable here", ["x"]) == ["x"]


class TestSeasonality:

    def test_rule_order_wins(self):
        assert infer_seasonality(["winter", "summer"], "") == "Summer bestseller"

    def test_title_is_searched(self):
        assert infer_seasonality([], "Christmas Jumper") == "Holiday special"

    def test_no_season(self):
        assert infer_seasonality(["basics"], "Plain Tee") is None


class TestCompetitivePosition:

    @pytest.mark.parametrize("price,discount,variants,position", [
        (100, 40, 1, "Promotional traffic driver"),
        (250, None, 4, "Flagship product"),
        (50, None, 1, "Entry-level product"),
        (100, None, 6, "Multi-option core product"),
        (100, 10, 2, "Regular line product"),
    ])
    def test_positions(self, price, discount, variants, position):
        assert infer_competitive_position(price, 100, discount, variants) == position


def test_build_product_insights():
    insights = build_product_insights(
        title="Linen Summer Shirt",
        tags=["women"],
        description="Lightweight linen",
        product_type="",
        price=30,
        avg_price=100,
        discount=None,
        variant_count=1
    )

    assert insights.price_tier == "budget"
    assert insights.product_category == "Uncategorized"
    assert insights.seasonality == "Summer bestseller"
    assert insights.key_features == ["Lightweight"]
    assert insights.competitive_position == "Entry-level product"
    assert len(insights.target_audience) <= 4
