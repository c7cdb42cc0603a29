"""
Treasury Test Suite

Coverage:
  - Time-locked contributions and withdrawals
  - Disbursement of executed budget proposals, exactly once
  - Pause controls and contract pointers owned by the Governance owner
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from wellness_dao.config import DAOConfig
from wellness_dao.constants import (
    DEFAULT_DAO_OWNER,
    DEFAULT_TREASURY_CONTRACT,
    NULL_PRINCIPAL,
)
from wellness_dao.deployment import deploy_dao
from wellness_dao.governance import VotingController
from wellness_dao.ledger import LedgerErrorCode, WellnessToken
from wellness_dao.treasury import Contribution, Treasury, TreasuryErrorCode


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

OWNER = DEFAULT_DAO_OWNER
ALICE = "ST1ALICE"
BOB = "ST2BOB"
CAROL = "ST3CAROL"
TREASURY = DEFAULT_TREASURY_CONTRACT

E = TreasuryErrorCode


def make_dao(balances=None, supply=None, ledger=None):
    dao = deploy_dao(DAOConfig(), ledger=ledger)
    for who, amount in (balances or {}).items():
        dao.ledger.set_balance(who, amount)
    if supply is not None:
        dao.ledger.set_total_supply(supply)
    return dao


def budget_proposal(dao, budget=500, execute=True):
    """Open a budget proposal backed by ALICE, optionally executing it."""
    pid = dao.voting.create_proposal(ALICE, "Nutrition workshop", budget, 30).value
    dao.voting.vote(ALICE, pid, True)
    dao.clock.advance_to(dao.voting.get_proposal(pid).end_block)
    if execute:
        assert dao.voting.execute_proposal(OWNER, pid).ok
    return pid


class RefusingToken(WellnessToken):
    """Token that reports a short balance by returning False instead of raising."""

    def transfer(self, amount, sender, recipient):
        if self.get_balance(sender) < amount:
            return False
        return super().transfer(amount, sender, recipient)


def funded_dao(funds=2000, ledger=None):
    """Stack where BOB has contributed ``funds`` to the treasury."""
    dao = make_dao(balances={ALICE: 1000, BOB: funds}, supply=5000, ledger=ledger)
    assert dao.treasury.contribute(BOB, funds).ok
    return dao


# ══════════════════════════════════════════════════════════════════════
#  CONTRIBUTIONS
# ══════════════════════════════════════════════════════════════════════


class TestContribute:
    """contribute()."""

    def test_contribute(self):
        dao = make_dao(balances={ALICE: 1000})
        assert dao.treasury.contribute(ALICE, 500).ok
        assert dao.ledger.get_balance(ALICE) == 500
        assert dao.ledger.get_balance(TREASURY) == 500
        assert dao.treasury.get_balance() == 500
        assert dao.treasury.get_total_funds() == 500
        assert dao.treasury.get_contribution(ALICE) == Contribution(500, 1440)

    def test_new_contribution_relocks_everything(self):
        dao = make_dao(balances={ALICE: 1000})
        dao.treasury.contribute(ALICE, 500)
        dao.clock.advance_to(1500)
        dao.treasury.contribute(ALICE, 100)
        assert dao.treasury.get_contribution(ALICE) == Contribution(600, 2940)
        assert dao.treasury.withdraw_contribution(ALICE, 100).error == E.CONTRIBUTION_LOCKED

    @pytest.mark.parametrize("amount", [0, -5])
    def test_invalid_amount(self, amount):
        dao = make_dao(balances={ALICE: 1000})
        assert dao.treasury.contribute(ALICE, amount).error == E.INVALID_AMOUNT
        assert dao.treasury.get_contribution(ALICE) is None

    def test_ledger_failure_leaves_no_record(self):
        dao = make_dao(balances={ALICE: 100})
        result = dao.treasury.contribute(ALICE, 500)
        assert result.error == LedgerErrorCode.INSUFFICIENT_BALANCE
        assert dao.treasury.get_contribution(ALICE) is None
        assert dao.treasury.get_total_funds() == 0
        assert dao.ledger.get_balance(ALICE) == 100

    def test_paused(self):
        dao = make_dao(balances={ALICE: 1000})
        dao.treasury.pause_treasury(OWNER)
        assert dao.treasury.contribute(ALICE, 10).error == E.ALREADY_PAUSED

    def test_get_contribution_returns_copy(self):
        dao = make_dao(balances={ALICE: 1000})
        dao.treasury.contribute(ALICE, 500)
        dao.treasury.get_contribution(ALICE).amount = 0
        assert dao.treasury.get_contribution(ALICE).amount == 500


class TestWithdrawContribution:
    """withdraw_contribution()."""

    def test_locked_then_unlocked(self):
        dao = make_dao(balances={ALICE: 1000})
        dao.treasury.contribute(ALICE, 500)

        dao.clock.advance_to(1000)
        assert dao.treasury.withdraw_contribution(ALICE, 300).error == E.CONTRIBUTION_LOCKED
        assert dao.ledger.get_balance(ALICE) == 500

        dao.clock.advance_to(1500)
        assert dao.treasury.withdraw_contribution(ALICE, 300).ok
        assert dao.ledger.get_balance(ALICE) == 800
        assert dao.treasury.get_total_funds() == 200
        assert dao.treasury.get_contribution(ALICE) == Contribution(200, 1440)

    def test_unlocks_exactly_at_locked_until(self):
        dao = make_dao(balances={ALICE: 1000})
        dao.treasury.contribute(ALICE, 500)
        dao.clock.advance_to(1439)
        assert dao.treasury.withdraw_contribution(ALICE, 1).error == E.CONTRIBUTION_LOCKED
        dao.clock.advance_to(1440)
        assert dao.treasury.withdraw_contribution(ALICE, 1).ok

    def test_no_contribution(self):
        dao = make_dao()
        assert dao.treasury.withdraw_contribution(ALICE, 1).error == E.INVALID_CONTRIBUTION

    def test_more_than_contributed(self):
        dao = make_dao(balances={ALICE: 1000, BOB: 1000})
        dao.treasury.contribute(ALICE, 500)
        dao.treasury.contribute(BOB, 500)
        dao.clock.advance_to(2000)
        assert dao.treasury.withdraw_contribution(ALICE, 501).error == E.INSUFFICIENT_FUNDS
        assert dao.treasury.get_total_funds() == 1000

    def test_invalid_amount_before_record_lookup(self):
        dao = make_dao()
        assert dao.treasury.withdraw_contribution(ALICE, 0).error == E.INVALID_AMOUNT

    def test_paused(self):
        dao = make_dao(balances={ALICE: 1000})
        dao.treasury.contribute(ALICE, 500)
        dao.clock.advance_to(2000)
        dao.treasury.pause_treasury(OWNER)
        assert dao.treasury.withdraw_contribution(ALICE, 100).error == E.ALREADY_PAUSED


# ══════════════════════════════════════════════════════════════════════
#  DISBURSEMENT
# ══════════════════════════════════════════════════════════════════════


class TestDisburse:
    """disburse_proposal_funds()."""

    def test_disburse_budget(self):
        dao = funded_dao()
        pid = budget_proposal(dao, budget=500)
        assert dao.treasury.disburse_proposal_funds(OWNER, pid, CAROL).ok
        assert dao.ledger.get_balance(CAROL) == 500
        assert dao.ledger.get_balance(TREASURY) == 1500
        assert dao.treasury.get_total_funds() == 1500
        assert dao.treasury.is_disbursed(pid)

    def test_disburse_once(self):
        dao = funded_dao()
        pid = budget_proposal(dao, budget=500)
        dao.treasury.disburse_proposal_funds(OWNER, pid, CAROL)
        assert dao.treasury.disburse_proposal_funds(OWNER, pid, BOB).error == E.ALREADY_DISBURSED
        assert dao.treasury.get_total_funds() == 1500
        assert dao.ledger.get_balance(BOB) == 0

    def test_not_found(self):
        dao = funded_dao()
        assert dao.treasury.disburse_proposal_funds(OWNER, 9, CAROL).error == E.PROPOSAL_NOT_FOUND

    def test_unexecuted_always_reported_as_not_executed(self):
        dao = make_dao(balances={ALICE: 1000}, supply=5000)
        pid = budget_proposal(dao, budget=500, execute=False)
        for caller in (OWNER, ALICE, BOB):
            for recipient in (CAROL, NULL_PRINCIPAL):
                result = dao.treasury.disburse_proposal_funds(caller, pid, recipient)
                assert result.error == E.PROPOSAL_NOT_EXECUTED
        assert not dao.treasury.is_disbursed(pid)

    def test_requires_owner(self):
        dao = funded_dao()
        pid = budget_proposal(dao)
        assert dao.treasury.disburse_proposal_funds(ALICE, pid, ALICE).error == E.NOT_AUTHORIZED

    def test_null_recipient(self):
        dao = funded_dao()
        pid = budget_proposal(dao)
        assert dao.treasury.disburse_proposal_funds(OWNER, pid, NULL_PRINCIPAL).error == E.INVALID_RECIPIENT

    def test_insufficient_funds(self):
        dao = funded_dao(funds=300)
        pid = budget_proposal(dao, budget=500)
        assert dao.treasury.disburse_proposal_funds(OWNER, pid, CAROL).error == E.INSUFFICIENT_FUNDS
        assert not dao.treasury.is_disbursed(pid)
        assert dao.treasury.get_total_funds() == 300

    def test_paused(self):
        dao = funded_dao()
        pid = budget_proposal(dao)
        dao.treasury.pause_treasury(OWNER)
        assert dao.treasury.disburse_proposal_funds(OWNER, pid, CAROL).error == E.ALREADY_PAUSED
        dao.treasury.unpause_treasury(OWNER)
        assert dao.treasury.disburse_proposal_funds(OWNER, pid, CAROL).ok


# ══════════════════════════════════════════════════════════════════════
#  LEDGER REFUSAL & FUND ACCOUNTING
# ══════════════════════════════════════════════════════════════════════


class TestRefusedTransfers:
    """A ledger that returns False moves nothing and changes no record."""

    def test_contribute(self):
        dao = make_dao(ledger=RefusingToken())
        result = dao.treasury.contribute(ALICE, 500)
        assert result.error == LedgerErrorCode.INSUFFICIENT_BALANCE
        assert dao.treasury.get_contribution(ALICE) is None
        assert dao.treasury.get_total_funds() == 0
        assert dao.treasury.get_balance() == 0

    def test_withdraw(self):
        dao = make_dao(balances={ALICE: 1000}, ledger=RefusingToken())
        assert dao.treasury.contribute(ALICE, 500).ok
        dao.ledger.set_balance(TREASURY, 0)
        dao.clock.advance_to(1440)
        result = dao.treasury.withdraw_contribution(ALICE, 300)
        assert result.error == LedgerErrorCode.INSUFFICIENT_BALANCE
        assert dao.treasury.get_contribution(ALICE).amount == 500
        assert dao.treasury.get_total_funds() == 500
        assert dao.ledger.get_balance(ALICE) == 500

    def test_disburse(self):
        dao = funded_dao(ledger=RefusingToken())
        pid = budget_proposal(dao, budget=500)
        dao.ledger.set_balance(TREASURY, 0)
        result = dao.treasury.disburse_proposal_funds(OWNER, pid, CAROL)
        assert result.error == LedgerErrorCode.INSUFFICIENT_BALANCE
        assert not dao.treasury.is_disbursed(pid)
        assert dao.treasury.get_total_funds() == 2000
        assert dao.ledger.get_balance(CAROL) == 0


class TestTotalFunds:
    """total_funds tracks live contributions minus disbursed budgets."""

    def _assert_accounted(self, dao):
        contributed = sum(
            c.amount
            for c in (dao.treasury.get_contribution(who) for who in (ALICE, BOB, CAROL))
            if c is not None
        )
        disbursed = sum(d["amount"] for d in dao.treasury.to_dict()["disbursements"].values())
        assert dao.treasury.get_total_funds() == contributed - disbursed
        assert dao.treasury.get_balance() == dao.treasury.get_total_funds()

    def test_mixed_sequence(self):
        dao = make_dao(balances={ALICE: 1000, BOB: 2000, CAROL: 600}, supply=5000)
        assert dao.treasury.contribute(ALICE, 300).ok
        assert dao.treasury.contribute(BOB, 1500).ok
        assert dao.treasury.contribute(CAROL, 200).ok
        self._assert_accounted(dao)
        assert dao.treasury.get_total_funds() == 2000

        dao.clock.advance_to(1440)
        assert dao.treasury.withdraw_contribution(BOB, 500).ok
        self._assert_accounted(dao)

        pid = dao.voting.create_proposal(ALICE, "Yoga in the park", 700, 30).value
        assert dao.voting.vote(ALICE, pid, True).ok
        assert dao.voting.vote(BOB, pid, True).ok
        dao.clock.advance_to(dao.voting.get_proposal(pid).end_block)
        assert dao.voting.execute_proposal(OWNER, pid).ok
        assert dao.treasury.disburse_proposal_funds(OWNER, pid, CAROL).ok
        self._assert_accounted(dao)

        assert dao.treasury.withdraw_contribution(CAROL, 100).ok
        self._assert_accounted(dao)
        assert dao.treasury.get_total_funds() == 700


# ══════════════════════════════════════════════════════════════════════
#  ADMINISTRATION
# ══════════════════════════════════════════════════════════════════════


class TestTreasuryAdmin:
    """Pause controls and contract pointers."""

    def test_pause_cycle(self):
        treasury = make_dao().treasury
        assert treasury.pause_treasury(OWNER).ok
        assert treasury.is_paused()
        assert treasury.pause_treasury(OWNER).error == E.ALREADY_PAUSED
        assert treasury.unpause_treasury(OWNER).ok
        assert treasury.unpause_treasury(OWNER).error == E.NOT_PAUSED

    def test_pause_requires_owner(self):
        treasury = make_dao().treasury
        assert treasury.pause_treasury(ALICE).error == E.NOT_AUTHORIZED
        assert not treasury.is_paused()

    def test_owner_follows_governance(self):
        dao = make_dao()
        dao.governance.set_dao_owner(OWNER, ALICE)
        assert dao.treasury.pause_treasury(OWNER).error == E.NOT_AUTHORIZED
        assert dao.treasury.pause_treasury(ALICE).ok

    def test_set_voting_contract(self):
        dao = make_dao()
        replacement = dao.directory.deploy(
            "ST1OWNER.voting-v2",
            VotingController(
                "ST1OWNER.voting-v2", dao.clock, dao.directory,
                governance_contract=dao.governance.principal,
                token_contract=dao.governance.get_token_contract(),
            ),
        )
        assert dao.treasury.set_voting_contract(ALICE, replacement.principal).error == E.NOT_AUTHORIZED
        assert dao.treasury.set_voting_contract(OWNER, NULL_PRINCIPAL).error == E.INVALID_RECIPIENT
        assert dao.treasury.set_voting_contract(OWNER, "ST1OWNER.ghost").error == E.INVALID_RECIPIENT
        assert dao.treasury.set_voting_contract(OWNER, replacement.principal).ok
        assert dao.treasury.get_voting_contract() == "ST1OWNER.voting-v2"
        # proposals are now looked up in the replacement
        assert dao.treasury.disburse_proposal_funds(OWNER, 0, CAROL).error == E.PROPOSAL_NOT_FOUND

    def test_set_governance_contract(self):
        dao = make_dao()
        assert dao.treasury.set_governance_contract(OWNER, NULL_PRINCIPAL).error == E.INVALID_RECIPIENT
        assert dao.treasury.set_governance_contract(OWNER, dao.governance.principal).ok
        assert dao.treasury.get_governance_contract() == dao.governance.principal

    def test_negative_lock_period_rejected(self):
        dao = make_dao()
        with pytest.raises(ValueError):
            Treasury("ST9.treasury", dao.clock, dao.directory, lock_period=-1)

    def test_state_reload(self):
        dao = funded_dao()
        pid = budget_proposal(dao)
        dao.treasury.disburse_proposal_funds(OWNER, pid, CAROL)
        state = dao.treasury.to_dict()
        assert state["totalFunds"] == 1500
        assert state["contributions"][BOB] == {"amount": 2000, "lockedUntil": 1440}

        dao.treasury.load_state(state)
        assert dao.treasury.is_disbursed(pid)
        assert dao.treasury.get_contribution(BOB) == Contribution(2000, 1440)
        assert dao.treasury.disburse_proposal_funds(OWNER, pid, CAROL).error == E.ALREADY_DISBURSED
