"""
Voting Controller — budget proposals.

Runs the same proposal lifecycle as Governance, restricted to budget
requests. The voting window, quorum and owner come from the Governance
contract the controller points at, read live on every call, so a quorum
change made after creation still decides the outcome. Execution only marks
the proposal executed; the Treasury moves the funds.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ..chain import BlockClock, ContractDirectory
from ..constants import (
    DEFAULT_GOVERNANCE_CONTRACT,
    DEFAULT_TOKEN_CONTRACT,
    NULL_PRINCIPAL,
    VOTING_MAX_PROPOSALS,
)
from ..ledger import Ledger
from ..logger import get_logger
from ..result import transaction
from ..validation import is_positive_int
from .base import ProposalBookState, ProposalController
from .errors import VotingError, VotingErrorCode
from .proposals import BudgetPayload

logger = get_logger(__name__)


@dataclass
class VotingState(ProposalBookState):
    governance_contract: str = DEFAULT_GOVERNANCE_CONTRACT
    token_contract: str = DEFAULT_TOKEN_CONTRACT


class VotingController(ProposalController):
    """Budget proposal store driven by Governance's voting parameters."""

    codes = VotingErrorCode
    error_cls = VotingError

    def __init__(
        self,
        principal: str,
        clock: BlockClock,
        directory: ContractDirectory,
        *,
        governance_contract: str = DEFAULT_GOVERNANCE_CONTRACT,
        token_contract: str = DEFAULT_TOKEN_CONTRACT,
        max_proposals: int = VOTING_MAX_PROPOSALS,
    ):
        if max_proposals <= 0:
            raise ValueError("max_proposals must be positive")
        state = VotingState(
            max_proposals=max_proposals,
            governance_contract=governance_contract,
            token_contract=token_contract,
        )
        super().__init__(principal, clock, directory, state)
        logger.info(f"Voting deployed at {principal}: governance={governance_contract}")

    # ── Collaborators ─────────────────────────────────────────────────

    def _governance(self):
        return self._directory.resolve(self._state.governance_contract)

    def _ledger(self) -> Ledger:
        return self._directory.resolve(self._state.token_contract)

    def _require_owner(self, caller: str):
        if caller != self._governance().get_dao_owner():
            raise VotingError(VotingErrorCode.NOT_AUTHORIZED, f"{caller} is not the DAO owner")

    # ── Queries ───────────────────────────────────────────────────────

    def get_governance_contract(self) -> str:
        return self._state.governance_contract

    def get_token_contract(self) -> str:
        return self._state.token_contract

    # ── Configuration ─────────────────────────────────────────────────

    @transaction
    def set_governance_contract(self, caller: str, new_governance: str) -> bool:
        self._require_owner(caller)
        if (
            not new_governance
            or new_governance == NULL_PRINCIPAL
            or not self._directory.is_deployed(new_governance)
        ):
            raise VotingError(
                VotingErrorCode.INVALID_PRINCIPAL, f"Invalid governance contract {new_governance!r}"
            )
        self._state.governance_contract = new_governance
        logger.info(f"Voting now follows governance {new_governance}")
        return True

    # ── Proposals ─────────────────────────────────────────────────────

    @transaction
    def create_proposal(self, caller: str, description: str, budget: int, duration: int) -> int:
        governance = self._governance()
        # A paused DAO is reported as an authorization failure here.
        if governance.is_paused():
            raise VotingError(VotingErrorCode.NOT_AUTHORIZED, "DAO is paused")
        self._check_capacity()
        self._check_proposer(caller, self._ledger())
        self._check_description(description)
        if not is_positive_int(budget):
            raise VotingError(VotingErrorCode.INVALID_BUDGET, f"Invalid budget {budget!r}")
        if not is_positive_int(duration):
            raise VotingError(VotingErrorCode.INVALID_DURATION, f"Invalid duration {duration!r}")

        params = governance.get_voting_params()
        return self._open_proposal(
            caller,
            description,
            BudgetPayload(budget, duration),
            params.proposal_duration,
        )

    @transaction
    def vote(self, caller: str, proposal_id: int, choice: bool) -> bool:
        proposal = self._require_proposal(proposal_id)
        self._cast_vote(caller, proposal, choice, self._ledger())
        return True

    @transaction
    def execute_proposal(self, caller: str, proposal_id: int) -> bool:
        proposal = self._require_proposal(proposal_id)
        self._require_owner(caller)
        self._check_executable(proposal)

        params = self._governance().get_voting_params()
        result = self._require_passed(proposal, self._ledger(), params.quorum_percentage)

        proposal.executed = True
        logger.info(
            f"Budget proposal #{proposal.id} EXECUTED at block {self.block_height}: "
            f"budget={proposal.budget} yes={result.yes_votes} no={result.no_votes}"
        )
        return True

    # ── Persistence ───────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        data = self._book_to_dict()
        data.update({
            "principal": self.principal,
            "governanceContract": self._state.governance_contract,
            "tokenContract": self._state.token_contract,
        })
        return data

    def load_state(self, data: Dict[str, Any]):
        self._state = VotingState(
            **self._book_from_dict(data),
            governance_contract=data["governanceContract"],
            token_contract=data["tokenContract"],
        )

    def __repr__(self) -> str:
        return f"<VotingController {self.principal} proposals={self._state.next_proposal_id}>"
