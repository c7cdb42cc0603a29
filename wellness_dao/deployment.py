"""
Deployment of the full governance stack.

Builds the clock, the contract directory, the ledger and the three
controllers from a DAOConfig and deploys them at their principals, pointing
each component at the others.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .chain import BlockClock, ContractDirectory
from .config import DAOConfig
from .governance import GovernanceController, VotingController
from .ledger import Ledger, WellnessToken, checked_mint
from .logger import get_logger
from .treasury import Treasury

logger = get_logger(__name__)


@dataclass
class DAODeployment:
    """Handles to every deployed component."""
    clock: BlockClock
    directory: ContractDirectory
    ledger: Ledger
    governance: GovernanceController
    voting: VotingController
    treasury: Treasury

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blockHeight": self.clock.height,
            "contracts": self.directory.principals(),
            "governance": self.governance.to_dict(),
            "voting": self.voting.to_dict(),
            "treasury": self.treasury.to_dict(),
        }


def deploy_dao(
    config: Optional[DAOConfig] = None,
    clock: Optional[BlockClock] = None,
    ledger: Optional[Ledger] = None,
) -> DAODeployment:
    """
    Deploy ledger, Governance, Voting and Treasury.

    Args:
        config: deployment parameters (defaults when omitted); validated first
        clock: shared block clock (a new one at height 0 when omitted)
        ledger: existing ledger to deploy at the token principal; a fresh
            WellnessToken is created when omitted

    Returns:
        DAODeployment bundle

    Raises:
        ConfigurationError: on invalid config
    """
    config = config or DAOConfig()
    config.validate()
    clock = clock or BlockClock()
    directory = ContractDirectory()

    if ledger is None:
        ledger = WellnessToken(config.ledger.name, config.ledger.symbol)
    for principal, amount in config.ledger.initial_balances.items():
        if amount > 0:
            checked_mint(ledger, amount, principal)
    directory.deploy(config.ledger.principal, ledger)

    g = config.governance
    governance = directory.deploy(
        g.principal,
        GovernanceController(
            g.principal,
            clock,
            directory,
            dao_owner=g.dao_owner,
            token_contract=config.ledger.principal,
            voting_threshold=g.voting_threshold,
            quorum_percentage=g.quorum_percentage,
            proposal_duration=g.proposal_duration,
            reward_rate=g.reward_rate,
            max_proposals=g.max_proposals,
        ),
    )
    voting = directory.deploy(
        config.voting.principal,
        VotingController(
            config.voting.principal,
            clock,
            directory,
            governance_contract=g.principal,
            token_contract=config.ledger.principal,
            max_proposals=config.voting.max_proposals,
        ),
    )
    treasury = directory.deploy(
        config.treasury.principal,
        Treasury(
            config.treasury.principal,
            clock,
            directory,
            governance_contract=g.principal,
            voting_contract=config.voting.principal,
            token_contract=config.ledger.principal,
            lock_period=config.treasury.lock_period,
        ),
    )

    logger.info(
        f"Wellness DAO deployed at block {clock.height}: "
        f"{len(directory.principals())} contracts, owner {g.dao_owner}"
    )
    return DAODeployment(
        clock=clock,
        directory=directory,
        ledger=ledger,
        governance=governance,
        voting=voting,
        treasury=treasury,
    )
