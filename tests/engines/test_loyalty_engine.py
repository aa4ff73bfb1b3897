"""FOS Loyalty Engine tests."""

from datetime import datetime, timezone

import pytest

NOW = datetime(2025, 5, 8, 12, 0, 0, tzinfo=timezone.utc)


class Recorder:
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)


class TestLoyaltyAccount:
    def test_negative_balance_rejected(self):
        from core.errors import ValidationError
        from engines.loyalty.commands import LoyaltyAccount

        with pytest.raises(ValidationError, match="balance"):
            LoyaltyAccount("c1", -1)

    def test_point_inputs_without_account(self):
        from engines.loyalty.commands import PointInputs

        inputs = PointInputs(requested=1000)
        assert inputs.customer_selected is False
        assert inputs.balance == 0


class TestRedemption:
    def test_below_threshold_forces_zero(self):
        from engines.loyalty.services import redeem_points

        for requested in (0, 1, 3000, 10 ** 6):
            assert redeem_points(3000, 4999, requested) == 0

    def test_threshold_is_inclusive(self):
        from engines.loyalty.services import can_redeem, redeem_points

        assert can_redeem(5000)
        assert redeem_points(3000, 5000, 3000) == 3000

    def test_request_above_balance_clamped(self):
        from engines.loyalty.services import redeem_points

        assert redeem_points(3000, 50000, 10000) == 3000

    def test_request_above_subtotal_clamped(self):
        from engines.loyalty.services import redeem_points

        assert redeem_points(100000, 6000, 10000) == 6000

    def test_negative_request_clamped_to_zero(self):
        from engines.loyalty.services import redeem_points

        assert redeem_points(3000, 50000, -100) == 0

    def test_no_customer_no_redemption(self):
        from engines.loyalty.services import max_usable_points, redeem_points

        assert max_usable_points(3000, 50000, customer_selected=False) == 0
        assert redeem_points(3000, 50000, 1000, customer_selected=False) == 0

    @pytest.mark.parametrize("balance", [0, 1, 4999, 5000, 20000])
    @pytest.mark.parametrize("subtotal", [0, 4999, 5000, 7000, 100000])
    @pytest.mark.parametrize("requested", [-1, 0, 500, 6000, 50000])
    def test_points_used_bounds(self, balance, subtotal, requested):
        from engines.loyalty.services import redeem_points

        used = redeem_points(balance, subtotal, requested)
        assert 0 <= used <= min(balance, subtotal)
        if subtotal < 5000:
            assert used == 0

    def test_quote(self):
        from engines.loyalty.services import quote_redemption

        quote = quote_redemption(3000, 10000, 5000)
        assert quote.can_redeem is True
        assert quote.max_usable == 3000
        assert quote.points_used == 3000

    def test_strict_redeem_raises_instead_of_clamping(self):
        from core.errors import IneligibleRedemptionError
        from engines.loyalty.services import strict_redeem

        assert strict_redeem(3000, 10000, 2000) == 2000
        with pytest.raises(IneligibleRedemptionError) as exc:
            strict_redeem(3000, 4999, 1000)
        assert exc.value.allowed == 0
        with pytest.raises(IneligibleRedemptionError):
            strict_redeem(3000, 10000, 3001)

    def test_strict_redeem_zero_below_threshold_is_fine(self):
        from engines.loyalty.services import strict_redeem

        assert strict_redeem(3000, 100, 0) == 0


class TestEarning:
    def test_two_percent_floored(self):
        from engines.loyalty.services import earn_points

        assert earn_points(90000) == 1800
        assert earn_points(12345) == 246

    def test_accumulation_disabled(self):
        from engines.loyalty.services import earn_points

        assert earn_points(90000, accumulation_enabled=False) == 0

    def test_threshold_gate_when_subtotal_given(self):
        from engines.loyalty.services import can_earn, earn_points

        assert not can_earn(4999) and can_earn(5000)
        assert earn_points(4999, discounted_subtotal=4999) == 0
        assert earn_points(3000, discounted_subtotal=5000) == 60

    def test_negative_base_earns_nothing(self):
        from engines.loyalty.services import earn_points

        assert earn_points(-100) == 0

    def test_custom_rate(self):
        from engines.loyalty.services import earn_points

        assert earn_points(10000, earn_rate_percent=5) == 500


class TestSettlement:
    def test_settle_balance(self):
        from engines.loyalty.commands import LoyaltyAccount
        from engines.loyalty.services import settle_balance

        assert settle_balance(LoyaltyAccount("c1", 3000), 2000, 140) == 1140

    def test_settle_more_than_balance_raises(self):
        from core.errors import IneligibleRedemptionError
        from engines.loyalty.commands import LoyaltyAccount
        from engines.loyalty.services import settle_balance

        with pytest.raises(IneligibleRedemptionError, match="needs 3001"):
            settle_balance(LoyaltyAccount("c1", 3000), 3001, 0)


class TestLoyaltyService:
    def _svc(self, rules=None):
        from core.config.rules import PricingRules
        from core.events import SubscriberRegistry
        from core.time.clock import FixedClock
        from engines.loyalty.services import LoyaltyService

        reg = SubscriberRegistry()
        redeemed, earned = Recorder(), Recorder()
        reg.register_subscriber("loyalty.points.redeemed.v1", redeemed, "test")
        reg.register_subscriber("loyalty.points.earned.v1", earned, "test")
        svc = LoyaltyService(rules=rules or PricingRules(), clock=FixedClock(NOW), subscribers=reg)
        return svc, redeemed, earned

    def test_commit_announces_both_movements(self):
        from engines.loyalty.commands import LoyaltyAccount

        svc, redeemed, earned = self._svc()
        balance = svc.commit(LoyaltyAccount("c1", 3000), "o1", 2000, 160, 8000)

        assert balance == 1160
        assert redeemed.events[0].payload["balance_after"] == 1000
        assert earned.events[0].payload["points"] == 160
        assert earned.events[0].occurred_at == NOW

    def test_commit_without_movement_is_silent(self):
        from engines.loyalty.commands import LoyaltyAccount

        svc, redeemed, earned = self._svc()
        assert svc.commit(LoyaltyAccount("c1", 3000), "o1", 0, 0, 0) == 3000
        assert redeemed.events == [] and earned.events == []

    def test_earn_uses_rules(self):
        from core.config.rules import PricingRules

        svc, _, _ = self._svc(PricingRules(earn_rate_percent=3, allow_point_accumulation=True))
        assert svc.earn(10000, discounted_subtotal=10000) == 300
        svc_off, _, _ = self._svc(PricingRules(allow_point_accumulation=False))
        assert svc_off.earn(10000) == 0
