"""
Balance-Weighted Tally

Implements:
  - VoteBook: one immutable vote record per (proposal_id, voter)
  - tally(): quorum and strict-majority check shared by both controllers

Quorum is ``total_supply * quorum_percentage // 100`` (truncating). A
proposal passes when ``yes + no >= quorum`` and ``yes > no``; the stored
voting threshold is not applied here.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

VoteKey = Tuple[int, str]


# ══════════════════════════════════════════════════════════════════════
#  VOTE BOOK
# ══════════════════════════════════════════════════════════════════════

class VoteBook:
    """Write-once vote records keyed by (proposal_id, voter)."""

    def __init__(self, records: Optional[Dict[VoteKey, bool]] = None):
        self._records: Dict[VoteKey, bool] = dict(records or {})

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return (proposal_id, voter) in self._records

    def get(self, proposal_id: int, voter: str) -> Optional[bool]:
        return self._records.get((proposal_id, voter))

    def record(self, proposal_id: int, voter: str, choice: bool):
        key = (proposal_id, voter)
        if key in self._records:
            raise KeyError(f"{voter} already voted on proposal #{proposal_id}")
        self._records[key] = bool(choice)

    def to_list(self):
        return [
            {"proposalId": pid, "voter": voter, "vote": choice}
            for (pid, voter), choice in self._records.items()
        ]

    @classmethod
    def from_list(cls, rows) -> "VoteBook":
        return cls({(int(r["proposalId"]), r["voter"]): bool(r["vote"]) for r in rows})


# ══════════════════════════════════════════════════════════════════════
#  TALLY
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TallyResult:
    """Outcome of counting one proposal against the current supply."""
    yes_votes: int
    no_votes: int
    total_supply: int
    quorum_percentage: int

    @property
    def total_votes(self) -> int:
        return self.yes_votes + self.no_votes

    @property
    def quorum(self) -> int:
        return self.total_supply * self.quorum_percentage // 100

    @property
    def quorum_met(self) -> bool:
        return self.total_votes >= self.quorum

    @property
    def majority(self) -> bool:
        return self.yes_votes > self.no_votes

    @property
    def passed(self) -> bool:
        return self.quorum_met and self.majority

    def to_dict(self) -> Dict[str, Any]:
        return {
            "yesVotes": self.yes_votes,
            "noVotes": self.no_votes,
            "totalVotes": self.total_votes,
            "totalSupply": self.total_supply,
            "quorumPercentage": self.quorum_percentage,
            "quorum": self.quorum,
            "quorumMet": self.quorum_met,
            "majority": self.majority,
            "passed": self.passed,
        }


def tally(yes_votes: int, no_votes: int, total_supply: int, quorum_percentage: int) -> TallyResult:
    return TallyResult(
        yes_votes=yes_votes,
        no_votes=no_votes,
        total_supply=total_supply,
        quorum_percentage=quorum_percentage,
    )
