"""
Wellness DAO Governance

Provides:
  - ParamKey / ProposalStatus / Proposal and payloads  (proposals.py)
  - VoteBook / TallyResult / tally                     (tally.py)
  - ProposalController                                 (base.py)
  - GovernanceController / VotingParams                (controller.py)
  - VotingController                                   (voting.py)
"""

from .errors import (
    GovernanceError,
    GovernanceErrorCode,
    VotingError,
    VotingErrorCode,
)
from .proposals import (
    BudgetPayload,
    ParamChangePayload,
    ParamKey,
    Proposal,
    ProposalStatus,
    UpgradePayload,
)
from .tally import (
    TallyResult,
    VoteBook,
    tally,
)
from .base import ProposalController
from .controller import (
    GovernanceController,
    GovernanceState,
    VotingParams,
)
from .voting import (
    VotingController,
    VotingState,
)

__all__ = [
    # Errors
    "GovernanceError",
    "GovernanceErrorCode",
    "VotingError",
    "VotingErrorCode",
    # Proposals
    "BudgetPayload",
    "ParamChangePayload",
    "ParamKey",
    "Proposal",
    "ProposalStatus",
    "UpgradePayload",
    # Tally
    "TallyResult",
    "VoteBook",
    "tally",
    # Controllers
    "ProposalController",
    "GovernanceController",
    "GovernanceState",
    "VotingParams",
    "VotingController",
    "VotingState",
]
