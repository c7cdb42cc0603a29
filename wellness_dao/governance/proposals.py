"""
Proposals — shared by the Governance and Voting controllers.

Defines the proposal payload variants, the clock-derived lifecycle stage and
the Proposal dataclass that tracks one proposal from creation to execution.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Union


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class ParamKey(str, Enum):
    """Governance parameter a ParamChange proposal may rewrite."""
    VOTING_THRESHOLD = "voting-threshold"
    QUORUM_PERCENTAGE = "quorum-percentage"
    PROPOSAL_DURATION = "proposal-duration"
    REWARD_RATE = "reward-rate"

    @classmethod
    def parse(cls, value: Union[str, "ParamKey"]) -> Optional["ParamKey"]:
        """Return the matching key, or None for an unknown one."""
        try:
            return cls(value)
        except ValueError:
            return None


class ProposalStatus(IntEnum):
    """Lifecycle stage, derived from the block height."""
    PENDING = 0     # Before start_block
    OPEN = 1        # Voting window [start_block, end_block)
    CLOSED = 2      # Window over, awaiting execution
    EXECUTED = 3    # Effect applied; terminal


# ══════════════════════════════════════════════════════════════════════
#  PAYLOADS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class UpgradePayload:
    """Rewire ``target_contract`` in the contract-address registry."""
    target_contract: str
    new_address: str

    kind = "upgrade"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "targetContract": self.target_contract,
            "newAddress": self.new_address,
        }


@dataclass(frozen=True)
class ParamChangePayload:
    """Set one governance parameter."""
    param_key: ParamKey
    param_value: int

    kind = "param"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "paramKey": self.param_key.value,
            "paramValue": self.param_value,
        }


@dataclass(frozen=True)
class BudgetPayload:
    """Budget request; ``duration`` is informational, not the voting window."""
    budget: int
    duration: int

    kind = "budget"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "budget": self.budget,
            "duration": self.duration,
        }


Payload = Union[UpgradePayload, ParamChangePayload, BudgetPayload]


def payload_from_dict(data: Dict[str, Any]) -> Payload:
    kind = data.get("kind")
    if kind == UpgradePayload.kind:
        return UpgradePayload(data["targetContract"], data["newAddress"])
    if kind == ParamChangePayload.kind:
        return ParamChangePayload(ParamKey(data["paramKey"]), int(data["paramValue"]))
    if kind == BudgetPayload.kind:
        return BudgetPayload(int(data["budget"]), int(data["duration"]))
    raise ValueError(f"Unknown proposal payload kind: {kind!r}")


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL
# ══════════════════════════════════════════════════════════════════════

@dataclass
class Proposal:
    """
    Votable request to change configuration, rewire a contract or spend funds.

    Fields:
        id:           Dense per-controller identifier, starting at 0
        proposer:     Principal that opened the proposal
        description:  1–256 characters
        payload:      UpgradePayload, ParamChangePayload or BudgetPayload
        start_block:  First block at which votes are accepted
        end_block:    First block at which votes are refused
        yes_votes:    Balance-weighted yes tally
        no_votes:     Balance-weighted no tally
        executed:     Set once, never reset
    """
    id: int
    proposer: str
    description: str
    payload: Payload
    start_block: int
    end_block: int
    yes_votes: int = 0
    no_votes: int = 0
    executed: bool = False

    # ── Properties ────────────────────────────────────────────────────

    @property
    def total_votes(self) -> int:
        return self.yes_votes + self.no_votes

    @property
    def budget(self) -> Optional[int]:
        if isinstance(self.payload, BudgetPayload):
            return self.payload.budget
        return None

    def status_at(self, block_height: int) -> ProposalStatus:
        if self.executed:
            return ProposalStatus.EXECUTED
        if block_height < self.start_block:
            return ProposalStatus.PENDING
        if block_height < self.end_block:
            return ProposalStatus.OPEN
        return ProposalStatus.CLOSED

    def is_votable_at(self, block_height: int) -> bool:
        return self.start_block <= block_height < self.end_block

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "proposer": self.proposer,
            "description": self.description,
            "payload": self.payload.to_dict(),
            "startBlock": self.start_block,
            "endBlock": self.end_block,
            "yesVotes": self.yes_votes,
            "noVotes": self.no_votes,
            "executed": self.executed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Proposal":
        return cls(
            id=int(data["id"]),
            proposer=data["proposer"],
            description=data["description"],
            payload=payload_from_dict(data["payload"]),
            start_block=int(data["startBlock"]),
            end_block=int(data["endBlock"]),
            yes_votes=int(data.get("yesVotes", 0)),
            no_votes=int(data.get("noVotes", 0)),
            executed=bool(data.get("executed", False)),
        )

    def __repr__(self) -> str:
        return (
            f"<Proposal #{self.id} {self.payload.kind} "
            f"[{self.start_block},{self.end_block}) "
            f"yes={self.yes_votes} no={self.no_votes} executed={self.executed}>"
        )
