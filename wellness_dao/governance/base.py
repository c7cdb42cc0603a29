"""
Proposal lifecycle shared by the Governance and Voting controllers.

A ProposalController owns a dense proposal table and a vote book, and
implements the steps both controllers run identically: id allocation,
proposer and description checks, the voting window, write-once votes, the
pre-execution checks and the quorum / majority tally. Failures are raised
with the concrete controller's error codes.
"""

import copy
import dataclasses
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Optional, Type

from ..chain import BlockClock, ContractDirectory
from ..constants import (
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_LENGTH,
    MIN_PROPOSAL_BALANCE,
)
from ..exceptions import WellnessDAOException
from ..ledger import Ledger
from ..logger import get_logger
from .proposals import Payload, Proposal, ProposalStatus
from .tally import TallyResult, VoteBook, tally

logger = get_logger(__name__)


@dataclass
class ProposalBookState:
    """Proposal table, vote table and id counter of one controller."""
    max_proposals: int = 0
    next_proposal_id: int = 0
    proposals: Dict[int, Proposal] = field(default_factory=dict)
    votes: VoteBook = field(default_factory=VoteBook)


class ProposalController:
    """
    Base class for controllers that run the proposal lifecycle.

    Subclasses set ``codes`` (an IntEnum with the shared member names) and
    ``error_cls``, and keep their state in a ``ProposalBookState`` subclass.
    """

    codes: Type[IntEnum]
    error_cls: Type[WellnessDAOException]

    def __init__(
        self,
        principal: str,
        clock: BlockClock,
        directory: ContractDirectory,
        state: ProposalBookState,
    ):
        self.principal = principal
        self._clock = clock
        self._directory = directory
        self._state = state

    # ── Transactions ──────────────────────────────────────────────────

    def take_snapshot(self) -> ProposalBookState:
        return copy.deepcopy(self._state)

    def restore_snapshot(self, snapshot: ProposalBookState):
        self._state = snapshot

    def _fail(self, code_name: str, message: str):
        raise self.error_cls(self.codes[code_name], message)

    @property
    def block_height(self) -> int:
        return self._clock.height

    # ── Queries ───────────────────────────────────────────────────────

    def get_proposal(self, proposal_id: int) -> Optional[Proposal]:
        """Return a copy of the proposal, or None."""
        proposal = self._state.proposals.get(proposal_id)
        if proposal is None:
            return None
        return dataclasses.replace(proposal)

    def get_vote(self, proposal_id: int, voter: str) -> Optional[bool]:
        return self._state.votes.get(proposal_id, voter)

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return self._state.votes.has_voted(proposal_id, voter)

    def get_proposal_count(self) -> int:
        return self._state.next_proposal_id

    def get_max_proposals(self) -> int:
        return self._state.max_proposals

    def get_proposal_status(self, proposal_id: int) -> Optional[ProposalStatus]:
        proposal = self._state.proposals.get(proposal_id)
        if proposal is None:
            return None
        return proposal.status_at(self.block_height)

    # ── Lifecycle steps ───────────────────────────────────────────────

    def _require_proposal(self, proposal_id: int) -> Proposal:
        proposal = self._state.proposals.get(proposal_id)
        if proposal is None:
            self._fail("PROPOSAL_NOT_FOUND", f"Proposal #{proposal_id} not found")
        return proposal

    def _check_capacity(self):
        if self._state.next_proposal_id >= self._state.max_proposals:
            self._fail(
                "MAX_PROPOSALS_EXCEEDED",
                f"Proposal limit {self._state.max_proposals} reached",
            )

    def _check_proposer(self, caller: str, ledger: Ledger):
        balance = ledger.get_balance(caller)
        if balance < MIN_PROPOSAL_BALANCE:
            self._fail(
                "INSUFFICIENT_BALANCE",
                f"{caller} balance {balance} < required {MIN_PROPOSAL_BALANCE}",
            )

    def _check_description(self, description: Any):
        if not isinstance(description, str) or not (
            DESCRIPTION_MIN_LENGTH <= len(description) <= DESCRIPTION_MAX_LENGTH
        ):
            self._fail(
                "INVALID_DESCRIPTION",
                f"Description must be {DESCRIPTION_MIN_LENGTH}-{DESCRIPTION_MAX_LENGTH} characters",
            )

    def _open_proposal(
        self,
        caller: str,
        description: str,
        payload: Payload,
        duration: int,
    ) -> int:
        """Store a new proposal whose window starts at the current block."""
        proposal_id = self._state.next_proposal_id
        start = self.block_height
        self._state.proposals[proposal_id] = Proposal(
            id=proposal_id,
            proposer=caller,
            description=description,
            payload=payload,
            start_block=start,
            end_block=start + duration,
        )
        self._state.next_proposal_id = proposal_id + 1
        logger.info(
            f"Proposal #{proposal_id} ({payload.kind}) created by {caller}: "
            f"voting block {start} → block {start + duration}"
        )
        return proposal_id

    def _cast_vote(self, caller: str, proposal: Proposal, choice: bool, ledger: Ledger) -> int:
        """Check the window and uniqueness, then add the caller's balance."""
        height = self.block_height
        if not proposal.is_votable_at(height):
            if height < proposal.start_block:
                self._fail(
                    "VOTING_NOT_STARTED",
                    f"Voting on #{proposal.id} starts at block {proposal.start_block}",
                )
            self._fail(
                "VOTING_ENDED",
                f"Voting on #{proposal.id} ended at block {proposal.end_block}",
            )
        if self._state.votes.has_voted(proposal.id, caller):
            self._fail("ALREADY_VOTED", f"{caller} already voted on #{proposal.id}")

        weight = ledger.get_balance(caller)
        if choice:
            proposal.yes_votes += weight
        else:
            proposal.no_votes += weight
        self._state.votes.record(proposal.id, caller, choice)

        logger.info(
            f"Vote: {caller} → {'YES' if choice else 'NO'} on #{proposal.id} (weight={weight})"
        )
        return weight

    def _check_executable(self, proposal: Proposal):
        if self.block_height < proposal.end_block:
            self._fail(
                "PROPOSAL_ACTIVE",
                f"Proposal #{proposal.id} is open until block {proposal.end_block}",
            )
        if proposal.executed:
            self._fail("ALREADY_EXECUTED", f"Proposal #{proposal.id} already executed")

    def _require_passed(self, proposal: Proposal, ledger: Ledger, quorum_percentage: int) -> TallyResult:
        result = tally(
            proposal.yes_votes,
            proposal.no_votes,
            ledger.get_total_supply(),
            quorum_percentage,
        )
        if not result.quorum_met:
            self._fail(
                "QUORUM_NOT_MET",
                f"Proposal #{proposal.id}: {result.total_votes} votes < quorum {result.quorum}",
            )
        if not result.majority:
            self._fail(
                "THRESHOLD_NOT_MET",
                f"Proposal #{proposal.id}: yes {result.yes_votes} <= no {result.no_votes}",
            )
        return result

    # ── Serialization ─────────────────────────────────────────────────

    def _book_to_dict(self) -> Dict[str, Any]:
        return {
            "maxProposals": self._state.max_proposals,
            "nextProposalId": self._state.next_proposal_id,
            "proposals": [p.to_dict() for p in self._state.proposals.values()],
            "votes": self._state.votes.to_list(),
        }

    @staticmethod
    def _book_from_dict(data: Dict[str, Any]) -> Dict[str, Any]:
        proposals = {}
        for row in data.get("proposals", []):
            p = Proposal.from_dict(row)
            proposals[p.id] = p
        return {
            "max_proposals": int(data["maxProposals"]),
            "next_proposal_id": int(data.get("nextProposalId", len(proposals))),
            "proposals": proposals,
            "votes": VoteBook.from_list(data.get("votes", [])),
        }
