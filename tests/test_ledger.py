"""
Wellness Token Test Suite

Coverage:
  - Balance and supply views
  - mint / transfer validation order and error codes
  - Transfer events and fixture helpers
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from wellness_dao.exceptions import LedgerError, WellnessDAOException
from wellness_dao.ledger import (
    InsufficientBalanceError,
    Ledger,
    LedgerErrorCode,
    TransferEvent,
    WellnessToken,
    checked_mint,
    checked_transfer,
)


ALICE = "ST1ALICE"
BOB = "ST2BOB"


def make_token(balances=None) -> WellnessToken:
    token = WellnessToken()
    for who, amount in (balances or {}).items():
        token.mint(amount, who)
    return token


class TestTokenBasics:
    """Construction and views."""

    def test_defaults(self):
        token = WellnessToken()
        assert token.name == "Wellness Token"
        assert token.symbol == "WELL"
        assert token.get_total_supply() == 0
        assert token.get_balance(ALICE) == 0

    def test_empty_name_or_symbol(self):
        with pytest.raises(ValueError):
            WellnessToken(name="")
        with pytest.raises(ValueError):
            WellnessToken(symbol="")

    def test_satisfies_ledger_capability(self):
        assert isinstance(WellnessToken(), Ledger)

    def test_to_dict(self):
        token = make_token({ALICE: 100})
        assert token.to_dict() == {
            "name": "Wellness Token",
            "symbol": "WELL",
            "totalSupply": 100,
            "holders": 1,
        }
        assert "WELL" in repr(token)


class TestMint:
    """mint()."""

    def test_mint_increases_supply(self):
        token = WellnessToken()
        assert token.mint(250, ALICE) is True
        assert token.get_balance(ALICE) == 250
        assert token.get_total_supply() == 250

    @pytest.mark.parametrize("amount", [0, -1])
    def test_non_positive(self, amount):
        token = WellnessToken()
        with pytest.raises(LedgerError) as exc_info:
            token.mint(amount, ALICE)
        assert exc_info.value.code == LedgerErrorCode.NON_POSITIVE_AMOUNT
        assert token.get_total_supply() == 0


class TestTransfer:
    """transfer()."""

    def test_transfer(self):
        token = make_token({ALICE: 100})
        assert token.transfer(40, ALICE, BOB) is True
        assert token.get_balance(ALICE) == 60
        assert token.get_balance(BOB) == 40
        assert token.get_total_supply() == 100

    def test_insufficient_balance(self):
        token = make_token({ALICE: 100})
        with pytest.raises(InsufficientBalanceError) as exc_info:
            token.transfer(101, ALICE, BOB)
        assert exc_info.value.code == LedgerErrorCode.INSUFFICIENT_BALANCE
        assert isinstance(exc_info.value, WellnessDAOException)
        assert token.get_balance(ALICE) == 100
        assert token.get_balance(BOB) == 0

    def test_self_transfer(self):
        token = make_token({ALICE: 100})
        with pytest.raises(LedgerError) as exc_info:
            token.transfer(10, ALICE, ALICE)
        assert exc_info.value.code == LedgerErrorCode.SENDER_IS_RECIPIENT

    def test_amount_checked_first(self):
        token = WellnessToken()
        with pytest.raises(LedgerError) as exc_info:
            token.transfer(0, ALICE, ALICE)
        assert exc_info.value.code == LedgerErrorCode.NON_POSITIVE_AMOUNT

    def test_events(self):
        token = make_token({ALICE: 100})
        token.transfer(30, ALICE, BOB)
        events = token.events
        assert len(events) == 2
        assert isinstance(events[1], TransferEvent)
        assert events[0].to_dict()["event"] == "Mint"
        d = events[1].to_dict()
        assert (d["event"], d["from"], d["to"], d["amount"]) == ("Transfer", ALICE, BOB, 30)


class TestFixtureHelpers:
    """set_balance / set_total_supply."""

    def test_set_balance_keeps_supply(self):
        token = WellnessToken()
        token.set_balance(ALICE, 1000)
        assert token.get_balance(ALICE) == 1000
        assert token.get_total_supply() == 0
        token.set_total_supply(5000)
        assert token.get_total_supply() == 5000

    def test_negative_values_rejected(self):
        token = WellnessToken()
        with pytest.raises(ValueError):
            token.set_balance(ALICE, -1)
        with pytest.raises(ValueError):
            token.set_total_supply(-1)


class QuietToken(WellnessToken):
    """Reports every failure with a False return."""

    def mint(self, amount, recipient):
        return False

    def transfer(self, amount, sender, recipient):
        if self.get_balance(sender) < amount:
            return False
        return super().transfer(amount, sender, recipient)


class TestCheckedCalls:
    """checked_transfer / checked_mint."""

    def test_false_transfer_raises(self):
        token = QuietToken()
        with pytest.raises(InsufficientBalanceError):
            checked_transfer(token, 10, ALICE, BOB)

    def test_false_mint_raises(self):
        with pytest.raises(LedgerError) as exc_info:
            checked_mint(QuietToken(), 10, ALICE)
        assert exc_info.value.code == LedgerErrorCode.MINT_REJECTED

    def test_successful_calls_pass_through(self):
        token = make_token({ALICE: 100})
        checked_transfer(token, 40, ALICE, BOB)
        checked_mint(token, 5, BOB)
        assert token.get_balance(BOB) == 45

    def test_raised_errors_propagate(self):
        token = make_token({ALICE: 100})
        with pytest.raises(LedgerError) as exc_info:
            checked_transfer(token, 10, ALICE, ALICE)
        assert exc_info.value.code == LedgerErrorCode.SENDER_IS_RECIPIENT
