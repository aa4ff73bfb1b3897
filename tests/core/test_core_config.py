"""
FOS Core Config — Test Suite
==============================
Tests for: PricingRules, DiscountTier, DeliveryFeeTable, BranchProfile,
InMemoryConfigStore.
"""

import pytest


class TestPricingRules:
    def test_defaults(self):
        from core.config.rules import PricingRules

        rules = PricingRules()
        assert rules.earn_rate_percent == 2
        assert rules.max_custom_discount_rate == 50
        assert rules.allow_point_accumulation is True
        assert rules.earn_on_simplified_entry is False

    def test_rate_out_of_range_rejected(self):
        from core.config.rules import PricingRules

        with pytest.raises(ValueError, match="earn_rate_percent"):
            PricingRules(earn_rate_percent=101)
        with pytest.raises(ValueError, match="max_custom_discount_rate"):
            PricingRules(max_custom_discount_rate=-1)

    def test_from_settings_reads_document_keys(self):
        from core.config.rules import PricingRules

        rules = PricingRules.from_settings({
            "pointEarnRate": 3,
            "maxDiscountRate": 30,
            "allowPointAccumulation": False,
            "earnPointsOnSimplifiedEntry": True,
        })
        assert rules.earn_rate_percent == 3
        assert rules.max_custom_discount_rate == 30
        assert rules.allow_point_accumulation is False
        assert rules.earn_on_simplified_entry is True

    def test_from_settings_missing_keys_use_defaults(self):
        from core.config.rules import PricingRules

        assert PricingRules.from_settings({}) == PricingRules()

    def test_stored_max_discount_rate_replaces_default_cap(self):
        from core.config.rules import PricingRules

        assert PricingRules.from_settings({"maxDiscountRate": 10}).max_custom_discount_rate == 10
        assert PricingRules.from_settings({"maxDiscountRate": 70}).max_custom_discount_rate == 70
        assert PricingRules.from_settings({}).max_custom_discount_rate == 50

    def test_stored_cap_clamps_custom_rate_in_summary(self):
        from core.config.rules import DiscountTier, PricingRules
        from engines.orders.commands import DiscountInputs, OrderItem
        from engines.orders.services import compute_summary

        tier = DiscountTier("10%", 10, "b1")
        inputs = DiscountInputs(branch_id="b1", tiers=(tier,), custom_rate=30)
        items = [OrderItem("i1", "꽃다발", 10000)]

        capped = compute_summary(items, inputs, rules=PricingRules.from_settings({"maxDiscountRate": 10}))
        assert (capped.discount_rate, capped.discount_amount) == (10, 1000)
        default = compute_summary(items, inputs, rules=PricingRules.from_settings({}))
        assert (default.discount_rate, default.discount_amount) == (30, 3000)

    def test_frozen(self):
        from core.config.rules import PricingRules

        rules = PricingRules()
        with pytest.raises(AttributeError):
            rules.earn_rate_percent = 5


class TestDiscountTier:
    def test_rate_bounds(self):
        from core.config.rules import DiscountTier

        DiscountTier(label="VIP", rate=100, branch_id="b1")
        with pytest.raises(ValueError, match="between 0 and 100"):
            DiscountTier(label="Bad", rate=101, branch_id="b1")

    def test_label_required(self):
        from core.config.rules import DiscountTier

        with pytest.raises(ValueError, match="label"):
            DiscountTier(label="", rate=10, branch_id="b1")

    def test_min_subtotal_must_be_money(self):
        from core.config.rules import DiscountTier
        from core.errors import ValidationError

        with pytest.raises(ValidationError, match="min_subtotal"):
            DiscountTier(label="VIP", rate=10, branch_id="b1", min_subtotal=-1)


class TestDeliveryFeeTable:
    def test_from_mapping_preserves_order(self):
        from core.config.rules import DeliveryFeeTable

        table = DeliveryFeeTable.from_mapping({"강남구": 5000, "서초구": 6000, "기타": 8000})
        assert table.districts == ("강남구", "서초구", "기타")

    def test_fee_for_exact_match_only(self):
        from core.config.rules import DeliveryFeeTable

        table = DeliveryFeeTable.from_mapping({"강남구": 5000})
        assert table.fee_for("강남구") == 5000
        assert table.fee_for("송파구") is None
        assert table.fee_for(None) is None
        assert table.fee_for("") is None

    def test_empty_table(self):
        from core.config.rules import DeliveryFeeTable

        assert DeliveryFeeTable().is_empty is True
        assert DeliveryFeeTable.from_mapping({"기타": 0}).is_empty is False

    def test_negative_fee_rejected(self):
        from core.config.rules import DeliveryFeeTable
        from core.errors import ValidationError

        with pytest.raises(ValidationError, match="fee"):
            DeliveryFeeTable.from_mapping({"강남구": -1})

    def test_float_fee_rejected(self):
        from core.config.rules import DeliveryFeeTable
        from core.errors import ValidationError

        with pytest.raises(ValidationError, match="int"):
            DeliveryFeeTable.from_mapping({"강남구": 5000.5})

    def test_surcharges_default_zero(self):
        from core.config.rules import DeliveryFeeTable

        table = DeliveryFeeTable()
        assert table.surcharges.medium_item == 0
        assert table.surcharges.large_item == 0
        assert table.surcharges.express == 0


class TestBranchProfile:
    def test_headquarters_detection(self):
        from core.config.rules import BranchProfile

        assert BranchProfile("hq", "본사", branch_type="본사").is_headquarters
        assert BranchProfile("all", "전체").is_headquarters
        assert not BranchProfile("b1", "강남점").is_headquarters


class TestInMemoryConfigStore:
    def test_tiers_scoped_by_branch(self):
        from core.config.rules import DiscountTier, InMemoryConfigStore

        store = InMemoryConfigStore()
        store.add_discount_tier(DiscountTier("VIP", 10, "b1"))
        store.add_discount_tier(DiscountTier("VIP", 15, "b2"))
        assert [t.rate for t in store.get_discount_tiers("b1")] == [10]
        assert store.get_discount_tiers("b3") == []

    def test_branch_lookup(self):
        from core.config.rules import BranchProfile, InMemoryConfigStore

        store = InMemoryConfigStore()
        store.add_branch(BranchProfile("b1", "강남점"))
        assert store.get_branch("b1").name == "강남점"
        assert store.get_branch("missing") is None

    def test_rules_replaceable(self):
        from core.config.rules import InMemoryConfigStore, PricingRules

        store = InMemoryConfigStore()
        store.set_pricing_rules(PricingRules(earn_rate_percent=5))
        assert store.get_pricing_rules().earn_rate_percent == 5
