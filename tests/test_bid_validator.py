"""
Unit tests for micropurchase.bid_validator.

Tests cover:
  • Rule order (first failing rule wins)
  • Availability for future / closed auctions
  • SAM.gov eligibility
  • Range: garbage, empty, negative, zero, above the start price
  • Whole-dollar rule, including floats that land on a dollar
  • Descending-price ordering against the current minimum
"""

from decimal import Decimal

import pytest

from micropurchase.bid_validator import BidValidator, current_minimum
from micropurchase.domain.enums import AuctionStatus, RejectionReason
from micropurchase.domain.models import AuctionState, CandidateBid, ExistingBid, Identity


BIDDER = Identity(internal_id=7, external_id="86790")
RUNNING = AuctionState(status=AuctionStatus.RUNNING, max_amount=3500)


def _bids(*amounts):
    return [ExistingBid(amount=a, bidder_id=100 + i) for i, a in enumerate(amounts)]


def _validate(raw, auction=RUNNING, bids=None, eligible=True, validator=None):
    validator = validator or BidValidator()
    return validator.validate(
        auction=auction,
        existing_bids=_bids(100, 120) if bids is None else bids,
        candidate=CandidateBid(raw_amount=raw, bidder=BIDDER),
        eligible=eligible,
    )


# ---------------------------------------------------------------------------
# Worked scenario
# ---------------------------------------------------------------------------

class TestScenario:
    def test_undercutting_bid_is_accepted(self):
        decision = _validate("90")
        assert decision.accepted is True
        assert decision.amount == 90
        assert decision.bidder_id == BIDDER.internal_id
        assert decision.reason is None

    def test_bid_above_current_minimum_is_not_lowest(self):
        decision = _validate("130")
        assert decision.accepted is False
        assert decision.reason == RejectionReason.BID_NOT_LOWEST
        assert decision.amount is None

    def test_letters_are_out_of_range(self):
        assert _validate("abc").reason == RejectionReason.BID_OUT_OF_RANGE

    def test_cents_are_not_integral(self):
        assert _validate("89.50").reason == RejectionReason.BID_NOT_INTEGRAL


# ---------------------------------------------------------------------------
# Rule order
# ---------------------------------------------------------------------------

class TestRuleOrder:
    def test_declared_order(self):
        assert BidValidator.RULES == ("availability", "eligibility", "range", "whole_dollar", "lowest")

    @pytest.mark.parametrize("status", [AuctionStatus.FUTURE, AuctionStatus.CLOSED])
    def test_unavailable_auction_beats_everything(self, status):
        auction = AuctionState(status=status, max_amount=3500)
        for raw in ("90", "abc", "-5", "1.99", "500"):
            decision = _validate(raw, auction=auction, eligible=False)
            assert decision.reason == RejectionReason.AUCTION_NOT_AVAILABLE

    def test_ineligible_bidder_beats_amount_rules(self):
        for raw in ("90", "abc", "1.99", "500"):
            assert _validate(raw, eligible=False).reason == RejectionReason.BIDDER_INELIGIBLE

    def test_range_checked_before_cents(self):
        assert _validate("-1.50").reason == RejectionReason.BID_OUT_OF_RANGE

    def test_cents_checked_before_ordering(self):
        # 130.5 is above the current minimum too, but cents are reported first.
        assert _validate("130.5").reason == RejectionReason.BID_NOT_INTEGRAL


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------

class TestEligibility:
    def test_non_true_flag_is_ineligible(self):
        assert _validate("90", eligible=None).reason == RejectionReason.BIDDER_INELIGIBLE

    def test_message(self):
        decision = _validate("90", eligible=False)
        assert decision.message == "You must have a valid SAM.gov account to place a bid"


# ---------------------------------------------------------------------------
# Range
# ---------------------------------------------------------------------------

class TestRange:
    @pytest.mark.parametrize("raw", [
        "clearly not a valid bid", "", "   ", None, True, False,
        "NaN", "inf", "-Infinity", float("nan"), float("inf"),
        [90], {"amount": 90}, "9" * 100,
    ])
    def test_non_numeric_is_out_of_range(self, raw):
        assert _validate(raw).reason == RejectionReason.BID_OUT_OF_RANGE

    @pytest.mark.parametrize("raw", [0, "0", -1, -1000, "-1000", 0.0, "-0.5"])
    def test_zero_and_negative_are_out_of_range(self, raw):
        assert _validate(raw).reason == RejectionReason.BID_OUT_OF_RANGE

    def test_above_start_price_is_out_of_range(self):
        auction = AuctionState(status=AuctionStatus.RUNNING, max_amount=50)
        assert _validate("60", auction=auction, bids=[]).reason == RejectionReason.BID_OUT_OF_RANGE

    def test_start_price_itself_is_in_range(self):
        auction = AuctionState(status=AuctionStatus.RUNNING, max_amount=50)
        assert _validate("50", auction=auction, bids=[]).accepted is True

    def test_default_bound_applies_without_start_price(self):
        auction = AuctionState(status=AuctionStatus.RUNNING)
        validator = BidValidator(default_max_amount=200)
        assert _validate(201, auction=auction, bids=[], validator=validator).reason == RejectionReason.BID_OUT_OF_RANGE
        assert _validate(200, auction=auction, bids=[], validator=validator).accepted is True

    def test_message(self):
        assert _validate("abc").message == "Bid amount out of range"


# ---------------------------------------------------------------------------
# Whole dollars
# ---------------------------------------------------------------------------

class TestWholeDollar:
    @pytest.mark.parametrize("raw", [1.99, "1.99", "89.50", 39.999999, "39.999999", Decimal("10.01")])
    def test_cents_are_rejected(self, raw):
        assert _validate(raw).reason == RejectionReason.BID_NOT_INTEGRAL

    @pytest.mark.parametrize("raw", [40.0, "40.0", "40.00", Decimal("40.000"), " 40 ", 40])
    def test_float_on_a_dollar_is_treated_as_integer(self, raw):
        decision = _validate(raw)
        assert decision.accepted is True
        assert decision.amount == 40
        assert isinstance(decision.amount, int)

    def test_float_on_a_dollar_still_hits_ordering(self):
        assert _validate(130.0).reason == RejectionReason.BID_NOT_LOWEST

    def test_message(self):
        assert _validate(1.99).message == "Bids must be in increments of one dollar"


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

class TestOrdering:
    def test_equal_to_current_minimum_is_not_lowest(self):
        assert _validate(100).reason == RejectionReason.BID_NOT_LOWEST

    def test_one_below_current_minimum_is_accepted(self):
        assert _validate(99).amount == 99

    def test_minimum_is_order_independent(self):
        assert _validate(110, bids=_bids(120, 100, 300)).reason == RejectionReason.BID_NOT_LOWEST

    def test_no_existing_bids_accepts_any_valid_amount(self):
        for raw in (1, "3500", 2000.0):
            assert _validate(raw, bids=[]).accepted is True

    def test_message(self):
        assert _validate(500).message == "Bids cannot be greater than the current max bid"

    def test_current_minimum(self):
        assert current_minimum([]) is None
        assert current_minimum(_bids(120, 100)) == 100
