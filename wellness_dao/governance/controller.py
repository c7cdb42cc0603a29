"""
Governance Controller

Owns the DAO-wide configuration (owner, voting parameters, reward rate,
pause flag, token pointer, contract-address registry) and runs "upgrade" and
"parameter-change" proposals against it.

Execution is owner-only, happens once the voting window has closed, and
applies the proposal's effect exactly once before minting the proposer's
reward of ``yes_votes * reward_rate // 100``.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..chain import BlockClock, ContractDirectory
from ..constants import (
    DEFAULT_DAO_OWNER,
    DEFAULT_PROPOSAL_DURATION,
    DEFAULT_QUORUM_PERCENTAGE,
    DEFAULT_REWARD_RATE,
    DEFAULT_TOKEN_CONTRACT,
    DEFAULT_VOTING_THRESHOLD,
    GOVERNANCE_MAX_PROPOSALS,
    NULL_PRINCIPAL,
    QUORUM_PERCENTAGE_MAX,
    QUORUM_PERCENTAGE_MIN,
    REWARD_RATE_MAX,
    REWARD_RATE_MIN,
    VOTING_THRESHOLD_MAX,
    VOTING_THRESHOLD_MIN,
)
from ..ledger import Ledger, checked_mint, checked_transfer
from ..logger import get_logger
from ..result import transaction
from ..validation import is_int
from .base import ProposalBookState, ProposalController
from .errors import GovernanceError, GovernanceErrorCode
from .proposals import ParamChangePayload, ParamKey, UpgradePayload

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  PARAMETER RULES
# ══════════════════════════════════════════════════════════════════════

# ParamKey → (state attribute, error code, validity check)
_PARAM_RULES: Dict[ParamKey, Tuple[str, GovernanceErrorCode, Callable[[int], bool]]] = {
    ParamKey.VOTING_THRESHOLD: (
        "voting_threshold",
        GovernanceErrorCode.INVALID_VOTING_THRESHOLD,
        lambda v: VOTING_THRESHOLD_MIN <= v <= VOTING_THRESHOLD_MAX,
    ),
    ParamKey.QUORUM_PERCENTAGE: (
        "quorum_percentage",
        GovernanceErrorCode.INVALID_QUORUM,
        lambda v: QUORUM_PERCENTAGE_MIN <= v <= QUORUM_PERCENTAGE_MAX,
    ),
    ParamKey.PROPOSAL_DURATION: (
        "proposal_duration",
        GovernanceErrorCode.INVALID_PROPOSAL_DURATION,
        lambda v: v > 0,
    ),
    ParamKey.REWARD_RATE: (
        "reward_rate",
        GovernanceErrorCode.INVALID_REWARD_RATE,
        lambda v: REWARD_RATE_MIN <= v <= REWARD_RATE_MAX,
    ),
}


# ══════════════════════════════════════════════════════════════════════
#  STATE
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class VotingParams:
    """Read-only view of the shared voting parameters."""
    voting_threshold: int
    quorum_percentage: int
    proposal_duration: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "votingThreshold": self.voting_threshold,
            "quorumPercentage": self.quorum_percentage,
            "proposalDuration": self.proposal_duration,
        }


@dataclass
class GovernanceState(ProposalBookState):
    """DAO configuration record plus the governance proposal book."""
    dao_owner: str = DEFAULT_DAO_OWNER
    voting_threshold: int = DEFAULT_VOTING_THRESHOLD
    quorum_percentage: int = DEFAULT_QUORUM_PERCENTAGE
    proposal_duration: int = DEFAULT_PROPOSAL_DURATION
    reward_rate: int = DEFAULT_REWARD_RATE
    paused: bool = False
    token_contract: str = DEFAULT_TOKEN_CONTRACT
    contract_addresses: Dict[str, str] = field(default_factory=dict)
    execution_log: List[Dict[str, Any]] = field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════
#  CONTROLLER
# ══════════════════════════════════════════════════════════════════════

class GovernanceController(ProposalController):
    """
    DAO configuration owner and upgrade / parameter proposal store.

    Every mutating method takes the calling principal first and returns an
    ExecResult; read-only queries return plain values.
    """

    codes = GovernanceErrorCode
    error_cls = GovernanceError

    def __init__(
        self,
        principal: str,
        clock: BlockClock,
        directory: ContractDirectory,
        *,
        dao_owner: str = DEFAULT_DAO_OWNER,
        token_contract: str = DEFAULT_TOKEN_CONTRACT,
        voting_threshold: int = DEFAULT_VOTING_THRESHOLD,
        quorum_percentage: int = DEFAULT_QUORUM_PERCENTAGE,
        proposal_duration: int = DEFAULT_PROPOSAL_DURATION,
        reward_rate: int = DEFAULT_REWARD_RATE,
        max_proposals: int = GOVERNANCE_MAX_PROPOSALS,
    ):
        if not dao_owner or dao_owner == NULL_PRINCIPAL:
            raise ValueError("A valid DAO owner is required")
        for key, value in (
            (ParamKey.VOTING_THRESHOLD, voting_threshold),
            (ParamKey.QUORUM_PERCENTAGE, quorum_percentage),
            (ParamKey.PROPOSAL_DURATION, proposal_duration),
            (ParamKey.REWARD_RATE, reward_rate),
        ):
            _, _, is_valid = _PARAM_RULES[key]
            if not is_int(value) or not is_valid(value):
                raise ValueError(f"Invalid initial {key.value}: {value!r}")
        if max_proposals <= 0:
            raise ValueError("max_proposals must be positive")

        state = GovernanceState(
            max_proposals=max_proposals,
            dao_owner=dao_owner,
            voting_threshold=voting_threshold,
            quorum_percentage=quorum_percentage,
            proposal_duration=proposal_duration,
            reward_rate=reward_rate,
            token_contract=token_contract,
        )
        super().__init__(principal, clock, directory, state)
        logger.info(
            f"Governance deployed at {principal}: owner={dao_owner} "
            f"quorum={quorum_percentage}% duration={proposal_duration}"
        )

    # ── Collaborators ─────────────────────────────────────────────────

    def _ledger(self) -> Ledger:
        return self._directory.resolve(self._state.token_contract)

    def _require_owner(self, caller: str):
        if caller != self._state.dao_owner:
            raise GovernanceError(
                GovernanceErrorCode.NOT_AUTHORIZED, f"{caller} is not the DAO owner"
            )

    def _require_not_paused(self):
        if self._state.paused:
            raise GovernanceError(GovernanceErrorCode.ALREADY_PAUSED, "DAO is paused")

    def _require_valid_principal(self, principal: str, deployed: bool = False):
        if not principal or principal == NULL_PRINCIPAL:
            raise GovernanceError(
                GovernanceErrorCode.INVALID_PRINCIPAL, f"Invalid principal {principal!r}"
            )
        if deployed and not self._directory.is_deployed(principal):
            raise GovernanceError(
                GovernanceErrorCode.INVALID_PRINCIPAL, f"No contract deployed at {principal}"
            )

    @staticmethod
    def _validate_param(key: ParamKey, value: Any):
        _, code, is_valid = _PARAM_RULES[key]
        if not is_int(value) or not is_valid(value):
            raise GovernanceError(code, f"Invalid {key.value}: {value!r}")

    # ── Queries ───────────────────────────────────────────────────────

    def get_dao_owner(self) -> str:
        return self._state.dao_owner

    def is_paused(self) -> bool:
        return self._state.paused

    def get_voting_threshold(self) -> int:
        return self._state.voting_threshold

    def get_quorum_percentage(self) -> int:
        return self._state.quorum_percentage

    def get_proposal_duration(self) -> int:
        return self._state.proposal_duration

    def get_reward_rate(self) -> int:
        return self._state.reward_rate

    def get_token_contract(self) -> str:
        return self._state.token_contract

    def get_voting_params(self) -> VotingParams:
        return VotingParams(
            voting_threshold=self._state.voting_threshold,
            quorum_percentage=self._state.quorum_percentage,
            proposal_duration=self._state.proposal_duration,
        )

    def get_contract_address(self, name: str) -> Optional[str]:
        return self._state.contract_addresses.get(name)

    @property
    def execution_log(self) -> List[Dict[str, Any]]:
        return list(self._state.execution_log)

    # ── Owner configuration ───────────────────────────────────────────

    @transaction
    def set_dao_owner(self, caller: str, new_owner: str) -> bool:
        self._require_owner(caller)
        self._require_valid_principal(new_owner)
        old = self._state.dao_owner
        self._state.dao_owner = new_owner
        logger.warning(f"DAO owner changed: {old} → {new_owner}")
        return True

    def _set_param(self, caller: str, key: ParamKey, value: int) -> bool:
        self._require_owner(caller)
        self._validate_param(key, value)
        attr = _PARAM_RULES[key][0]
        old = getattr(self._state, attr)
        setattr(self._state, attr, value)
        logger.info(f"Parameter '{key.value}' changed: {old} → {value}")
        return True

    @transaction
    def set_voting_threshold(self, caller: str, new_threshold: int) -> bool:
        return self._set_param(caller, ParamKey.VOTING_THRESHOLD, new_threshold)

    @transaction
    def set_quorum_percentage(self, caller: str, new_quorum: int) -> bool:
        return self._set_param(caller, ParamKey.QUORUM_PERCENTAGE, new_quorum)

    @transaction
    def set_proposal_duration(self, caller: str, new_duration: int) -> bool:
        return self._set_param(caller, ParamKey.PROPOSAL_DURATION, new_duration)

    @transaction
    def set_reward_rate(self, caller: str, new_rate: int) -> bool:
        return self._set_param(caller, ParamKey.REWARD_RATE, new_rate)

    @transaction
    def set_token_contract(self, caller: str, new_contract: str) -> bool:
        self._require_owner(caller)
        self._require_valid_principal(new_contract, deployed=True)
        self._state.token_contract = new_contract
        logger.info(f"Token contract set to {new_contract}")
        return True

    @transaction
    def pause_dao(self, caller: str) -> bool:
        self._require_owner(caller)
        if self._state.paused:
            raise GovernanceError(GovernanceErrorCode.ALREADY_PAUSED, "DAO already paused")
        self._state.paused = True
        logger.warning(f"DAO PAUSED by {caller} at block {self.block_height}")
        return True

    @transaction
    def unpause_dao(self, caller: str) -> bool:
        self._require_owner(caller)
        if not self._state.paused:
            raise GovernanceError(GovernanceErrorCode.NOT_PAUSED, "DAO is not paused")
        self._state.paused = False
        logger.info(f"DAO unpaused by {caller} at block {self.block_height}")
        return True

    @transaction
    def emergency_withdraw(self, caller: str, amount: int, recipient: str) -> bool:
        """Move DAO-held funds while paused; ledger failures pass through."""
        self._require_owner(caller)
        if not self._state.paused:
            raise GovernanceError(
                GovernanceErrorCode.NOT_PAUSED, "Emergency withdraw requires a paused DAO"
            )
        checked_transfer(self._ledger(), amount, self.principal, recipient)
        logger.warning(f"EMERGENCY WITHDRAW: {amount} from {self.principal} → {recipient}")
        return True

    # ── Proposals ─────────────────────────────────────────────────────

    def _precheck_create(self, caller: str, description: str):
        self._require_not_paused()
        self._check_capacity()
        self._check_proposer(caller, self._ledger())
        self._check_description(description)

    @transaction
    def create_upgrade_proposal(
        self,
        caller: str,
        description: str,
        target_contract: str,
        new_address: str,
    ) -> int:
        """Open a proposal that rewires ``target_contract`` to ``new_address``."""
        self._precheck_create(caller, description)
        if not target_contract:
            raise GovernanceError(
                GovernanceErrorCode.INVALID_UPGRADE_PROPOSAL, "Target contract name is required"
            )
        self._require_valid_principal(new_address)
        return self._open_proposal(
            caller,
            description,
            UpgradePayload(target_contract, new_address),
            self._state.proposal_duration,
        )

    @transaction
    def create_param_proposal(
        self,
        caller: str,
        description: str,
        param_key,
        param_value: int,
    ) -> int:
        """
        Open a proposal that sets one governance parameter.

        The value is range-checked now with the same rule as the owner setter,
        so an executed proposal always leaves a valid configuration.
        """
        self._precheck_create(caller, description)
        key = ParamKey.parse(param_key)
        if key is None:
            raise GovernanceError(
                GovernanceErrorCode.INVALID_PARAM, f"Unknown parameter {param_key!r}"
            )
        self._validate_param(key, param_value)
        return self._open_proposal(
            caller,
            description,
            ParamChangePayload(key, param_value),
            self._state.proposal_duration,
        )

    @transaction
    def vote(self, caller: str, proposal_id: int, choice: bool) -> bool:
        proposal = self._require_proposal(proposal_id)
        self._require_not_paused()
        self._cast_vote(caller, proposal, choice, self._ledger())
        return True

    @transaction
    def execute_proposal(self, caller: str, proposal_id: int) -> bool:
        proposal = self._require_proposal(proposal_id)
        self._require_owner(caller)
        self._check_executable(proposal)

        ledger = self._ledger()
        result = self._require_passed(proposal, ledger, self._state.quorum_percentage)

        changes = self._apply_payload(proposal)
        proposal.executed = True

        reward = proposal.yes_votes * self._state.reward_rate // 100
        if reward > 0:
            checked_mint(ledger, reward, proposal.proposer)

        self._state.execution_log.append({
            "proposalId": proposal.id,
            "kind": proposal.payload.kind,
            "changes": changes,
            "tally": result.to_dict(),
            "reward": reward,
            "executedAtBlock": self.block_height,
        })
        logger.info(
            f"Proposal #{proposal.id} EXECUTED at block {self.block_height}: "
            f"{changes} (reward {reward} → {proposal.proposer})"
        )
        return True

    def _apply_payload(self, proposal) -> Dict[str, Any]:
        payload = proposal.payload
        if isinstance(payload, UpgradePayload):
            old = self._state.contract_addresses.get(payload.target_contract)
            self._state.contract_addresses[payload.target_contract] = payload.new_address
            return {payload.target_contract: {"old": old, "new": payload.new_address}}

        if isinstance(payload, ParamChangePayload):
            rule = _PARAM_RULES.get(payload.param_key)
            if rule is None:
                raise GovernanceError(
                    GovernanceErrorCode.INVALID_PARAM, f"Unknown parameter {payload.param_key!r}"
                )
            attr = rule[0]
            old = getattr(self._state, attr)
            setattr(self._state, attr, payload.param_value)
            return {payload.param_key.value: {"old": old, "new": payload.param_value}}

        raise GovernanceError(
            GovernanceErrorCode.INVALID_UPGRADE_PROPOSAL,
            f"Proposal #{proposal.id} carries neither an upgrade nor a parameter change",
        )

    # ── Persistence ───────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        s = self._state
        data = self._book_to_dict()
        data.update({
            "principal": self.principal,
            "daoOwner": s.dao_owner,
            "votingThreshold": s.voting_threshold,
            "quorumPercentage": s.quorum_percentage,
            "proposalDuration": s.proposal_duration,
            "rewardRate": s.reward_rate,
            "paused": s.paused,
            "tokenContract": s.token_contract,
            "contractAddresses": dict(s.contract_addresses),
            "executionLog": list(s.execution_log),
        })
        return data

    def load_state(self, data: Dict[str, Any]):
        """Replace the whole state with a record produced by ``to_dict``."""
        self._state = GovernanceState(
            **self._book_from_dict(data),
            dao_owner=data["daoOwner"],
            voting_threshold=int(data["votingThreshold"]),
            quorum_percentage=int(data["quorumPercentage"]),
            proposal_duration=int(data["proposalDuration"]),
            reward_rate=int(data["rewardRate"]),
            paused=bool(data.get("paused", False)),
            token_contract=data["tokenContract"],
            contract_addresses=dict(data.get("contractAddresses", {})),
            execution_log=list(data.get("executionLog", [])),
        )

    def __repr__(self) -> str:
        return (
            f"<GovernanceController {self.principal} owner={self._state.dao_owner} "
            f"proposals={self._state.next_proposal_id} paused={self._state.paused}>"
        )
