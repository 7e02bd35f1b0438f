"""Tests for bondex/core/escrow.py: interest accrual and withdrawal kernel."""

import pytest

from bondex.core.escrow import (
    RATE_SCALE,
    TokenExchangeInfo,
    accrue,
    interest_payable,
    pending_interest,
    record_deposit,
    record_redemption,
    shares_for_value,
    shares_value,
    withdraw,
)

RATE_110 = 11 * RATE_SCALE // 10


# ---------------------------------------------------------------------------
# record validation
# ---------------------------------------------------------------------------

class TestTokenExchangeInfo:
    def test_default_is_zero(self):
        info = TokenExchangeInfo()
        assert (info.dai_in_token, info.interest_shares, info.generated_interest, info.withdrawn_interest) == (0, 0, 0, 0)

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            TokenExchangeInfo(dai_in_token=-1)

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            TokenExchangeInfo(interest_shares=True)

    def test_withdrawn_above_generated_rejected(self):
        with pytest.raises(ValueError):
            TokenExchangeInfo(generated_interest=1, withdrawn_interest=2)


# ---------------------------------------------------------------------------
# share conversions
# ---------------------------------------------------------------------------

class TestShareConversions:
    def test_value_rounds_down(self):
        assert shares_value(3, RATE_SCALE // 2) == 1

    def test_shares_round_up(self):
        assert shares_for_value(10, RATE_110) == 10
        assert shares_for_value(11, RATE_110) == 10
        assert shares_for_value(12, RATE_110) == 11


# ---------------------------------------------------------------------------
# accrual
# ---------------------------------------------------------------------------

class TestAccrual:
    def test_pending_from_rate_growth(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=100)
        assert pending_interest(info, RATE_110) == 10

    def test_pending_clamped_at_zero(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=99)
        assert pending_interest(info, RATE_SCALE) == 0

    def test_accrue_folds_pending(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=100)
        assert accrue(info, RATE_110).generated_interest == 10

    def test_accrue_without_pending_returns_same_record(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=100)
        assert accrue(info, RATE_SCALE) is info

    def test_payable_includes_unwithdrawn(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=110, generated_interest=5)
        assert interest_payable(info, RATE_SCALE) == 10

    def test_payable_respects_limit(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=110)
        assert interest_payable(info, RATE_SCALE, limit=4) == 4


# ---------------------------------------------------------------------------
# withdrawal
# ---------------------------------------------------------------------------

class TestWithdraw:
    def test_pays_pending_and_releases_shares(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=120)
        w = withdraw(info, RATE_SCALE)
        assert w.payable == 20
        assert w.shares_released == 20
        assert w.info == TokenExchangeInfo(
            dai_in_token=100, interest_shares=100, generated_interest=20, withdrawn_interest=20
        )

    def test_payout_keeps_principal_redeemable(self):
        # 100 shares at 1.1 are worth 110, but 91 of them are needed to redeem
        # the principal of 100, so only 9 shares (worth 9) can go.
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=100)
        w = withdraw(info, RATE_110)
        assert w.payable == 9
        assert w.shares_released == 9
        assert w.info == TokenExchangeInfo(
            dai_in_token=100, interest_shares=91, generated_interest=10, withdrawn_interest=9
        )
        assert shares_value(w.info.interest_shares, RATE_110) >= w.info.dai_in_token

    def test_principal_redeemable_at_non_integral_rate(self):
        rate = 1_014_000_000_000_000_000
        principal = 500 * 10**18
        info = TokenExchangeInfo(dai_in_token=principal, interest_shares=principal)
        w = withdraw(info, rate)
        assert w.payable == 7 * 10**18 - 1
        assert shares_for_value(principal, rate) <= w.info.interest_shares
        assert shares_value(w.info.interest_shares, rate) >= principal

    def test_previously_generated_is_paid(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=100, generated_interest=5)
        w = withdraw(info, 105 * RATE_SCALE // 100)
        assert w.payable == 4
        assert w.info == TokenExchangeInfo(
            dai_in_token=100, interest_shares=96, generated_interest=5, withdrawn_interest=4
        )

    def test_no_double_payment(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=100)
        first = withdraw(info, RATE_110)
        second = withdraw(first.info, RATE_110)
        assert second.payable == 0
        assert second.info is first.info

    def test_zero_payable_is_noop(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=100, generated_interest=3, withdrawn_interest=3)
        w = withdraw(info, RATE_SCALE)
        assert w.payable == 0
        assert w.shares_released == 0
        assert w.info is info

    def test_held_back_interest_stays_claimable(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=120)
        first = withdraw(info, RATE_SCALE, limit=5)
        assert first.payable == 5
        assert first.info.generated_interest - first.info.withdrawn_interest == 15
        second = withdraw(first.info, RATE_SCALE)
        assert second.payable == 15
        assert second.info.withdrawn_interest == second.info.generated_interest == 20
        assert second.info.interest_shares == 100

    def test_limit_zero_is_noop(self):
        info = TokenExchangeInfo(dai_in_token=100, interest_shares=120)
        assert withdraw(info, RATE_SCALE, limit=0).info is info

    def test_payout_capped_by_share_value(self):
        info = TokenExchangeInfo(dai_in_token=0, interest_shares=1, generated_interest=10)
        w = withdraw(info, RATE_SCALE)
        assert w.payable == 1
        assert w.shares_released == 1
        assert w.info.interest_shares == 0
        assert w.info.withdrawn_interest == 1


# ---------------------------------------------------------------------------
# trade attribution
# ---------------------------------------------------------------------------

class TestTradeAttribution:
    def test_deposit_adds_principal_and_shares(self):
        info = record_deposit(TokenExchangeInfo(dai_in_token=5, interest_shares=4), 10, 9)
        assert (info.dai_in_token, info.interest_shares) == (15, 13)

    def test_redemption_at_par(self):
        info = TokenExchangeInfo(dai_in_token=1000, interest_shares=1000)
        out = record_redemption(info, 100, RATE_SCALE)
        assert (out.dai_in_token, out.interest_shares) == (900, 900)

    def test_redemption_capped(self):
        info = TokenExchangeInfo(dai_in_token=1000, interest_shares=1000)
        out = record_redemption(info, 2000, RATE_SCALE)
        assert (out.dai_in_token, out.interest_shares) == (0, 0)

    def test_redemption_preserves_pending_interest(self):
        rate = 125 * RATE_SCALE // 100
        info = TokenExchangeInfo(dai_in_token=1000, interest_shares=1000)
        assert pending_interest(info, rate) == 250
        out = record_redemption(info, 500, rate)
        assert out.interest_shares == 600
        assert pending_interest(out, rate) == 250
