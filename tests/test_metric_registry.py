"""Tests for the metric catalog."""

import pytest

from multisites.core.metric_registry import (
    build_catalog,
    ecommerce_metrics,
    goal_record_name,
    record_name_rewrites,
    record_names,
    total_metadata_name,
)


class TestBuildCatalog:
    def test_base_metrics_only_without_goals(self):
        catalog = build_catalog(enhanced=True, goals_enabled=False)
        assert list(catalog) == ["nb_visits", "nb_actions", "nb_pageviews"]

    def test_goal_revenue_added_when_goals_enabled(self):
        catalog = build_catalog(enhanced=False, goals_enabled=True)
        assert list(catalog) == ["nb_visits", "nb_actions", "nb_pageviews", "revenue"]
        assert catalog["revenue"].record_name == "Goal_revenue"

    def test_enhanced_adds_conversions_and_ecommerce(self):
        catalog = build_catalog(enhanced=True, goals_enabled=True)
        assert list(catalog) == [
            "nb_visits",
            "nb_actions",
            "nb_pageviews",
            "revenue",
            "nb_conversions",
            "orders",
            "ecommerce_revenue",
        ]
        assert catalog["orders"].record_name == "Goal_0_nb_conversions"
        assert catalog["ecommerce_revenue"].record_name == "Goal_0_revenue"

    def test_pageviews_read_from_actions_record(self):
        metric = build_catalog(False, False)["nb_pageviews"]
        assert metric.record_name == "Actions_nb_pageviews"
        assert metric.evolution_column_name == "pageviews_evolution"
        assert metric.translation_key == "General_ColumnPageviews"

    def test_catalog_is_read_only(self):
        catalog = build_catalog(False, False)
        with pytest.raises(TypeError):
            catalog["bounce_rate"] = catalog["nb_visits"]

    def test_definitions_are_immutable(self):
        metric = build_catalog(False, False)["nb_visits"]
        with pytest.raises(AttributeError):
            metric.record_name = "other"

    def test_fresh_catalog_per_call(self):
        assert build_catalog(True, True) is not build_catalog(True, True)
        assert "orders" not in build_catalog(False, True)

    def test_record_and_evolution_names_are_unique(self):
        catalog = build_catalog(True, True)
        records = [m.record_name for m in catalog.values()]
        evolutions = [m.evolution_column_name for m in catalog.values()]
        assert len(set(records)) == len(records)
        assert len(set(evolutions)) == len(evolutions)


class TestHelpers:
    def test_goal_record_name(self):
        assert goal_record_name("revenue") == "Goal_revenue"
        assert goal_record_name("revenue", 0) == "Goal_0_revenue"

    def test_record_names_follow_catalog_order(self):
        assert record_names(build_catalog(False, True)) == [
            "nb_visits",
            "nb_actions",
            "Actions_nb_pageviews",
            "Goal_revenue",
        ]

    def test_rewrites_map_records_to_metric_names(self):
        rewrites = record_name_rewrites(build_catalog(True, True))
        assert rewrites["Actions_nb_pageviews"] == "nb_pageviews"
        assert rewrites["Goal_0_revenue"] == "ecommerce_revenue"

    def test_ecommerce_metrics(self):
        names = [m.name for m in ecommerce_metrics(build_catalog(True, True))]
        assert names == ["orders", "ecommerce_revenue"]
        assert ecommerce_metrics(build_catalog(False, True)) == []

    def test_total_metadata_name(self):
        assert total_metadata_name("nb_visits") == "total_nb_visits"
