"""
Tests for the DealPipeline Department Resolver.

Tests cover:
- Baseline and unconditional departments
- Trigger-tag matching per department
- Malformed and unknown line items
- Injected configuration tables
"""
import logging
from dataclasses import replace

import pytest

from dealpipeline.engine import (
    DepartmentResolver,
    resolve_departments,
    sorted_departments,
)
from dealpipeline.models import ApprovalDepartment, DepartmentDefinition

from tests.conftest import make_line_item


FINANCE = ApprovalDepartment.FINANCE
TRADING = ApprovalDepartment.TRADING
PRODUCT = ApprovalDepartment.PRODUCT
CREATIVE = ApprovalDepartment.CREATIVE
ANALYTICS = ApprovalDepartment.ANALYTICS


# =============================================================================
# Baseline Tests
# =============================================================================

class TestBaselineDepartments:
    """Finance and trading are always present."""

    def test_empty_items(self):
        assert resolve_departments([]) == {FINANCE, TRADING}

    def test_none_items(self):
        assert resolve_departments(None) == {FINANCE, TRADING}

    def test_financial_incentive_adds_nothing_new(self):
        result = resolve_departments([{"type": "payment_terms"}])
        assert result == {FINANCE, TRADING}


# =============================================================================
# Trigger Matching Tests
# =============================================================================

class TestTriggerMatching:
    """Each incentive type pulls in its department."""

    def test_scenario_a_financial_and_product(self):
        """Finance is baseline, product matches, trading is unconditional."""
        items = [{"type": "financial_incentive"}, {"type": "product_incentive"}]
        assert resolve_departments(items) == {FINANCE, PRODUCT, TRADING}

    @pytest.mark.parametrize("incentive_type,department", [
        ("product_incentive", PRODUCT),
        ("feature_access", PRODUCT),
        ("product_discount", PRODUCT),
        ("creative_incentive", CREATIVE),
        ("marketing_support", CREATIVE),
        ("brand_exposure", CREATIVE),
        ("analytics_incentive", ANALYTICS),
        ("data_access", ANALYTICS),
        ("reporting_tools", ANALYTICS),
    ])
    def test_trigger_tag(self, incentive_type, department):
        assert resolve_departments([{"type": incentive_type}]) == {FINANCE, TRADING, department}

    def test_all_departments(self):
        items = [
            make_line_item("feature_access"),
            make_line_item("brand_exposure", value=5000),
            make_line_item("data_access"),
        ]
        assert resolve_departments(items) == set(ApprovalDepartment)

    def test_duplicates_collapse(self):
        items = [{"type": "product_incentive"}, {"type": "product_discount"}]
        assert resolve_departments(items) == {FINANCE, PRODUCT, TRADING}

    def test_dataclass_and_mapping_items_mix(self):
        items = [make_line_item("creative_incentive"), {"type": "reporting_tools"}]
        assert resolve_departments(items) == {FINANCE, TRADING, CREATIVE, ANALYTICS}


# =============================================================================
# Malformed Input Tests
# =============================================================================

class TestMalformedItems:
    """Malformed and unknown items neither add nor remove departments."""

    @pytest.mark.parametrize("item", [
        {},
        {"type": None},
        {"type": ""},
        {"type": 7},
        {"kind": "product_incentive"},
        None,
        object(),
    ])
    def test_malformed_item_ignored(self, item):
        assert resolve_departments([item, {"type": "data_access"}]) == {FINANCE, TRADING, ANALYTICS}

    def test_unknown_type_ignored(self):
        assert resolve_departments([{"type": "free_lunch"}]) == {FINANCE, TRADING}

    def test_unknown_type_logged_at_debug(self, debug_logs):
        resolve_departments([{"type": "free_lunch"}])
        assert any(
            r.levelno == logging.DEBUG and "free_lunch" in r.getMessage()
            for r in debug_logs.records
        )

    def test_trigger_tags_are_case_sensitive(self):
        assert resolve_departments([{"type": "Product_Incentive"}]) == {FINANCE, TRADING}


# =============================================================================
# Configuration Injection Tests
# =============================================================================

class TestInjectedConfig:
    """Alternate trigger tables can be supplied without touching defaults."""

    def test_custom_trigger_table(self, default_config):
        departments = dict(default_config.departments)
        departments[PRODUCT] = DepartmentDefinition(
            department=PRODUCT,
            display_name="Product Team",
            incentive_types=frozenset({"beta_program"}),
        )
        config = replace(default_config, departments=departments)

        resolver = DepartmentResolver(config=config)
        assert resolver.resolve([{"type": "beta_program"}]) == {FINANCE, TRADING, PRODUCT}
        assert resolver.resolve([{"type": "product_incentive"}]) == {FINANCE, TRADING}

        # Shared default is untouched
        assert resolve_departments([{"type": "product_incentive"}]) == {FINANCE, TRADING, PRODUCT}

    def test_tag_shared_by_two_departments(self, default_config):
        departments = dict(default_config.departments)
        departments[CREATIVE] = replace(
            departments[CREATIVE],
            incentive_types=departments[CREATIVE].incentive_types | {"data_access"},
        )
        config = replace(default_config, departments=departments)

        result = resolve_departments([{"type": "data_access"}], config=config)
        assert result == {FINANCE, TRADING, CREATIVE, ANALYTICS}

    def test_departments_for(self):
        resolver = DepartmentResolver()
        assert resolver.departments_for("credit_terms") == {FINANCE}
        assert resolver.departments_for("nothing") == frozenset()


class TestSortedDepartments:
    """Serialization order is stable."""

    def test_sorted_by_tag(self):
        result = sorted_departments({TRADING, PRODUCT, FINANCE, ANALYTICS})
        assert result == [ANALYTICS, FINANCE, PRODUCT, TRADING]
