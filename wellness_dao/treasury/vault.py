"""
Treasury — pooled-fund custody and budget disbursement.

Implements:
  - Time-locked contributions: every new contribution re-locks the
    contributor's whole balance until ``height + lock_period``
  - Withdrawal of unlocked contributions
  - Disbursement of exactly the budget of an executed Voting proposal,
    at most once per proposal

Owner checks are delegated to the Governance contract; executed budgets are
read from the Voting contract. Both are resolved by principal on every call.
"""

import copy
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Optional

from ..chain import BlockClock, ContractDirectory
from ..constants import (
    DEFAULT_GOVERNANCE_CONTRACT,
    DEFAULT_TOKEN_CONTRACT,
    DEFAULT_VOTING_CONTRACT,
    NULL_PRINCIPAL,
    TREASURY_LOCK_PERIOD,
)
from ..exceptions import WellnessDAOException
from ..ledger import Ledger, checked_transfer
from ..logger import get_logger
from ..result import transaction
from ..validation import is_positive_int

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  ERRORS
# ══════════════════════════════════════════════════════════════════════

class TreasuryErrorCode(IntEnum):
    NOT_AUTHORIZED = 300
    INSUFFICIENT_FUNDS = 301
    INVALID_AMOUNT = 302
    PROPOSAL_NOT_FOUND = 303
    PROPOSAL_NOT_EXECUTED = 304
    ALREADY_PAUSED = 305
    NOT_PAUSED = 306
    INVALID_RECIPIENT = 307
    ALREADY_DISBURSED = 308
    CONTRIBUTION_LOCKED = 311
    INVALID_CONTRIBUTION = 312


class TreasuryError(WellnessDAOException):
    """Failure raised by the Treasury (3xx)."""


# ══════════════════════════════════════════════════════════════════════
#  STATE
# ══════════════════════════════════════════════════════════════════════

@dataclass
class Contribution:
    """Recorded contribution of one principal."""
    amount: int = 0
    locked_until: int = 0

    def is_locked_at(self, block_height: int) -> bool:
        return block_height < self.locked_until

    def to_dict(self) -> Dict[str, int]:
        return {"amount": self.amount, "lockedUntil": self.locked_until}


@dataclass
class TreasuryState:
    governance_contract: str = DEFAULT_GOVERNANCE_CONTRACT
    voting_contract: str = DEFAULT_VOTING_CONTRACT
    token_contract: str = DEFAULT_TOKEN_CONTRACT
    lock_period: int = TREASURY_LOCK_PERIOD
    paused: bool = False
    total_funds: int = 0
    contributions: Dict[str, Contribution] = field(default_factory=dict)
    # proposal id → {"recipient", "amount", "block"}
    disbursements: Dict[int, Dict[str, Any]] = field(default_factory=dict)


# ══════════════════════════════════════════════════════════════════════
#  TREASURY
# ══════════════════════════════════════════════════════════════════════

class Treasury:
    """
    Custodial wrapper around the ledger account at ``principal``.

    ``total_funds`` tracks contributions minus withdrawals and
    disbursements; it is the figure disbursements are checked against.
    """

    def __init__(
        self,
        principal: str,
        clock: BlockClock,
        directory: ContractDirectory,
        *,
        governance_contract: str = DEFAULT_GOVERNANCE_CONTRACT,
        voting_contract: str = DEFAULT_VOTING_CONTRACT,
        token_contract: str = DEFAULT_TOKEN_CONTRACT,
        lock_period: int = TREASURY_LOCK_PERIOD,
    ):
        if lock_period < 0:
            raise ValueError("lock_period cannot be negative")
        self.principal = principal
        self._clock = clock
        self._directory = directory
        self._state = TreasuryState(
            governance_contract=governance_contract,
            voting_contract=voting_contract,
            token_contract=token_contract,
            lock_period=lock_period,
        )
        logger.info(f"Treasury deployed at {principal}: lock period {lock_period} blocks")

    # ── Transactions ──────────────────────────────────────────────────

    def take_snapshot(self) -> TreasuryState:
        return copy.deepcopy(self._state)

    def restore_snapshot(self, snapshot: TreasuryState):
        self._state = snapshot

    @property
    def block_height(self) -> int:
        return self._clock.height

    # ── Collaborators ─────────────────────────────────────────────────

    def _governance(self):
        return self._directory.resolve(self._state.governance_contract)

    def _voting(self):
        return self._directory.resolve(self._state.voting_contract)

    def _ledger(self) -> Ledger:
        return self._directory.resolve(self._state.token_contract)

    def _require_owner(self, caller: str):
        if caller != self._governance().get_dao_owner():
            raise TreasuryError(TreasuryErrorCode.NOT_AUTHORIZED, f"{caller} is not the DAO owner")

    def _require_not_paused(self):
        if self._state.paused:
            raise TreasuryError(TreasuryErrorCode.ALREADY_PAUSED, "Treasury is paused")

    def _require_contract(self, principal: str):
        if not principal or principal == NULL_PRINCIPAL or not self._directory.is_deployed(principal):
            raise TreasuryError(
                TreasuryErrorCode.INVALID_RECIPIENT, f"Invalid contract principal {principal!r}"
            )

    # ── Queries ───────────────────────────────────────────────────────

    def get_total_funds(self) -> int:
        return self._state.total_funds

    def get_contribution(self, contributor: str) -> Optional[Contribution]:
        contribution = self._state.contributions.get(contributor)
        if contribution is None:
            return None
        return Contribution(contribution.amount, contribution.locked_until)

    def get_governance_contract(self) -> str:
        return self._state.governance_contract

    def get_voting_contract(self) -> str:
        return self._state.voting_contract

    def get_lock_period(self) -> int:
        return self._state.lock_period

    def is_paused(self) -> bool:
        return self._state.paused

    def is_disbursed(self, proposal_id: int) -> bool:
        return proposal_id in self._state.disbursements

    def get_balance(self) -> int:
        """Ledger balance of the treasury account."""
        return self._ledger().get_balance(self.principal)

    # ── Owner configuration ───────────────────────────────────────────

    @transaction
    def set_governance_contract(self, caller: str, new_governance: str) -> bool:
        self._require_owner(caller)
        self._require_contract(new_governance)
        self._state.governance_contract = new_governance
        logger.info(f"Treasury governance set to {new_governance}")
        return True

    @transaction
    def set_voting_contract(self, caller: str, new_voting: str) -> bool:
        self._require_owner(caller)
        self._require_contract(new_voting)
        self._state.voting_contract = new_voting
        logger.info(f"Treasury voting set to {new_voting}")
        return True

    @transaction
    def pause_treasury(self, caller: str) -> bool:
        self._require_owner(caller)
        if self._state.paused:
            raise TreasuryError(TreasuryErrorCode.ALREADY_PAUSED, "Treasury already paused")
        self._state.paused = True
        logger.warning(f"Treasury PAUSED by {caller} at block {self.block_height}")
        return True

    @transaction
    def unpause_treasury(self, caller: str) -> bool:
        self._require_owner(caller)
        if not self._state.paused:
            raise TreasuryError(TreasuryErrorCode.NOT_PAUSED, "Treasury is not paused")
        self._state.paused = False
        logger.info(f"Treasury unpaused by {caller} at block {self.block_height}")
        return True

    # ── Contributions ─────────────────────────────────────────────────

    @transaction
    def contribute(self, caller: str, amount: int) -> bool:
        self._require_not_paused()
        if not is_positive_int(amount):
            raise TreasuryError(TreasuryErrorCode.INVALID_AMOUNT, f"Invalid amount {amount!r}")

        checked_transfer(self._ledger(), amount, caller, self.principal)

        current = self._state.contributions.get(caller) or Contribution()
        locked_until = self.block_height + self._state.lock_period
        self._state.contributions[caller] = Contribution(
            amount=current.amount + amount,
            locked_until=locked_until,
        )
        self._state.total_funds += amount
        logger.info(
            f"Contribution: {caller} → {amount} (total {current.amount + amount}, "
            f"locked until block {locked_until})"
        )
        return True

    @transaction
    def withdraw_contribution(self, caller: str, amount: int) -> bool:
        self._require_not_paused()
        if not is_positive_int(amount):
            raise TreasuryError(TreasuryErrorCode.INVALID_AMOUNT, f"Invalid amount {amount!r}")
        contribution = self._state.contributions.get(caller)
        if contribution is None:
            raise TreasuryError(
                TreasuryErrorCode.INVALID_CONTRIBUTION, f"{caller} has no contribution"
            )
        if contribution.is_locked_at(self.block_height):
            raise TreasuryError(
                TreasuryErrorCode.CONTRIBUTION_LOCKED,
                f"Contribution of {caller} locked until block {contribution.locked_until}",
            )
        if contribution.amount < amount:
            raise TreasuryError(
                TreasuryErrorCode.INSUFFICIENT_FUNDS,
                f"{caller} contributed {contribution.amount} < requested {amount}",
            )

        checked_transfer(self._ledger(), amount, self.principal, caller)

        contribution.amount -= amount
        self._state.total_funds -= amount
        logger.info(f"Withdrawal: {amount} → {caller} (remaining {contribution.amount})")
        return True

    # ── Disbursement ──────────────────────────────────────────────────

    @transaction
    def disburse_proposal_funds(self, caller: str, proposal_id: int, recipient: str) -> bool:
        """
        Pay out the budget of an executed Voting proposal.

        An unexecuted proposal is always reported as PROPOSAL_NOT_EXECUTED,
        whoever the caller and whatever the recipient or balance.
        """
        self._require_not_paused()
        proposal = self._voting().get_proposal(proposal_id)
        if proposal is None:
            raise TreasuryError(
                TreasuryErrorCode.PROPOSAL_NOT_FOUND, f"Voting proposal #{proposal_id} not found"
            )
        if not proposal.executed:
            raise TreasuryError(
                TreasuryErrorCode.PROPOSAL_NOT_EXECUTED,
                f"Voting proposal #{proposal_id} has not been executed",
            )
        self._require_owner(caller)
        if not recipient or recipient == NULL_PRINCIPAL:
            raise TreasuryError(TreasuryErrorCode.INVALID_RECIPIENT, f"Invalid recipient {recipient!r}")
        if proposal_id in self._state.disbursements:
            raise TreasuryError(
                TreasuryErrorCode.ALREADY_DISBURSED, f"Proposal #{proposal_id} already disbursed"
            )
        budget = proposal.budget
        if not is_positive_int(budget):
            raise TreasuryError(
                TreasuryErrorCode.INVALID_AMOUNT, f"Proposal #{proposal_id} carries no budget"
            )
        if self._state.total_funds < budget:
            raise TreasuryError(
                TreasuryErrorCode.INSUFFICIENT_FUNDS,
                f"Treasury holds {self._state.total_funds} < budget {budget}",
            )

        checked_transfer(self._ledger(), budget, self.principal, recipient)

        self._state.total_funds -= budget
        self._state.disbursements[proposal_id] = {
            "recipient": recipient,
            "amount": budget,
            "block": self.block_height,
        }
        logger.info(
            f"Disbursed proposal #{proposal_id}: {budget} → {recipient} at block {self.block_height}"
        )
        return True

    # ── Persistence ───────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        s = self._state
        return {
            "principal": self.principal,
            "governanceContract": s.governance_contract,
            "votingContract": s.voting_contract,
            "tokenContract": s.token_contract,
            "lockPeriod": s.lock_period,
            "paused": s.paused,
            "totalFunds": s.total_funds,
            "contributions": {who: c.to_dict() for who, c in s.contributions.items()},
            "disbursements": {str(pid): dict(d) for pid, d in s.disbursements.items()},
        }

    def load_state(self, data: Dict[str, Any]):
        self._state = TreasuryState(
            governance_contract=data["governanceContract"],
            voting_contract=data["votingContract"],
            token_contract=data["tokenContract"],
            lock_period=int(data.get("lockPeriod", TREASURY_LOCK_PERIOD)),
            paused=bool(data.get("paused", False)),
            total_funds=int(data.get("totalFunds", 0)),
            contributions={
                who: Contribution(int(c["amount"]), int(c["lockedUntil"]))
                for who, c in data.get("contributions", {}).items()
            },
            disbursements={
                int(pid): dict(d) for pid, d in data.get("disbursements", {}).items()
            },
        )

    def __repr__(self) -> str:
        return (
            f"<Treasury {self.principal} funds={self._state.total_funds} "
            f"contributors={len(self._state.contributions)} paused={self._state.paused}>"
        )
