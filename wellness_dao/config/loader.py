"""
Wellness DAO TOML Configuration Loader

Loads the deployment parameters of the governance stack from a TOML file with
environment variable overrides. Each [section] maps onto a dataclass with
``from_dict`` and ``apply_env``.

Environment variable mapping:
    [governance] dao_owner         → WELLNESS_DAO_OWNER
    [governance] voting_threshold  → WELLNESS_DAO_VOTING_THRESHOLD
    [treasury] lock_period         → WELLNESS_DAO_LOCK_PERIOD
    ...
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import (
    DEFAULT_DAO_OWNER,
    DEFAULT_GOVERNANCE_CONTRACT,
    DEFAULT_PROPOSAL_DURATION,
    DEFAULT_QUORUM_PERCENTAGE,
    DEFAULT_REWARD_RATE,
    DEFAULT_TOKEN_CONTRACT,
    DEFAULT_TREASURY_CONTRACT,
    DEFAULT_VOTING_CONTRACT,
    DEFAULT_VOTING_THRESHOLD,
    GOVERNANCE_MAX_PROPOSALS,
    NULL_PRINCIPAL,
    QUORUM_PERCENTAGE_MAX,
    QUORUM_PERCENTAGE_MIN,
    REWARD_RATE_MAX,
    REWARD_RATE_MIN,
    TREASURY_LOCK_PERIOD,
    VOTING_MAX_PROPOSALS,
    VOTING_THRESHOLD_MAX,
    VOTING_THRESHOLD_MIN,
)
from ..exceptions import ConfigurationError
from ..logger import get_logger
from ..validation import is_int

logger = get_logger(__name__)


def _env_int(name: str) -> Optional[int]:
    """Integer value of env var *name*, or None when unset."""
    v = os.environ.get(name)
    if not v:
        return None
    try:
        return int(v)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {v!r}") from e


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------


@dataclass
class GovernanceSectionConfig:
    """[governance] section."""
    principal: str = DEFAULT_GOVERNANCE_CONTRACT
    dao_owner: str = DEFAULT_DAO_OWNER
    voting_threshold: int = DEFAULT_VOTING_THRESHOLD
    quorum_percentage: int = DEFAULT_QUORUM_PERCENTAGE
    proposal_duration: int = DEFAULT_PROPOSAL_DURATION
    reward_rate: int = DEFAULT_REWARD_RATE
    max_proposals: int = GOVERNANCE_MAX_PROPOSALS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceSectionConfig":
        return cls(
            principal=data.get("principal", DEFAULT_GOVERNANCE_CONTRACT),
            dao_owner=data.get("dao_owner", DEFAULT_DAO_OWNER),
            voting_threshold=data.get("voting_threshold", DEFAULT_VOTING_THRESHOLD),
            quorum_percentage=data.get("quorum_percentage", DEFAULT_QUORUM_PERCENTAGE),
            proposal_duration=data.get("proposal_duration", DEFAULT_PROPOSAL_DURATION),
            reward_rate=data.get("reward_rate", DEFAULT_REWARD_RATE),
            max_proposals=data.get("max_proposals", GOVERNANCE_MAX_PROPOSALS),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("WELLNESS_DAO_OWNER"):
            self.dao_owner = v
        if (v := _env_int("WELLNESS_DAO_VOTING_THRESHOLD")) is not None:
            self.voting_threshold = v
        if (v := _env_int("WELLNESS_DAO_QUORUM_PERCENTAGE")) is not None:
            self.quorum_percentage = v
        if (v := _env_int("WELLNESS_DAO_PROPOSAL_DURATION")) is not None:
            self.proposal_duration = v
        if (v := _env_int("WELLNESS_DAO_REWARD_RATE")) is not None:
            self.reward_rate = v


@dataclass
class VotingSectionConfig:
    """[voting] section."""
    principal: str = DEFAULT_VOTING_CONTRACT
    max_proposals: int = VOTING_MAX_PROPOSALS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VotingSectionConfig":
        return cls(
            principal=data.get("principal", DEFAULT_VOTING_CONTRACT),
            max_proposals=data.get("max_proposals", VOTING_MAX_PROPOSALS),
        )

    def apply_env(self) -> None:
        if (v := _env_int("WELLNESS_DAO_VOTING_MAX_PROPOSALS")) is not None:
            self.max_proposals = v


@dataclass
class TreasurySectionConfig:
    """[treasury] section."""
    principal: str = DEFAULT_TREASURY_CONTRACT
    lock_period: int = TREASURY_LOCK_PERIOD

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TreasurySectionConfig":
        return cls(
            principal=data.get("principal", DEFAULT_TREASURY_CONTRACT),
            lock_period=data.get("lock_period", TREASURY_LOCK_PERIOD),
        )

    def apply_env(self) -> None:
        if (v := _env_int("WELLNESS_DAO_LOCK_PERIOD")) is not None:
            self.lock_period = v


@dataclass
class LedgerSectionConfig:
    """[ledger] section."""
    principal: str = DEFAULT_TOKEN_CONTRACT
    name: str = "Wellness Token"
    symbol: str = "WELL"
    # principal → initial balance
    initial_balances: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LedgerSectionConfig":
        return cls(
            principal=data.get("principal", DEFAULT_TOKEN_CONTRACT),
            name=data.get("name", "Wellness Token"),
            symbol=data.get("symbol", "WELL"),
            initial_balances=dict(data.get("initial_balances", {})),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("WELLNESS_DAO_TOKEN_CONTRACT"):
            self.principal = v


# -----------------------------------------------------------------------
# Top-level config
# -----------------------------------------------------------------------

@dataclass
class DAOConfig:
    """
    Deployment configuration of the whole governance stack.

    Holds one section per component; ``deploy_dao`` reads nothing else.
    """
    governance: GovernanceSectionConfig = field(default_factory=GovernanceSectionConfig)
    voting: VotingSectionConfig = field(default_factory=VotingSectionConfig)
    treasury: TreasurySectionConfig = field(default_factory=TreasurySectionConfig)
    ledger: LedgerSectionConfig = field(default_factory=LedgerSectionConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DAOConfig":
        """Create DAOConfig from a parsed TOML dict."""
        return cls(
            governance=GovernanceSectionConfig.from_dict(data.get("governance", {})),
            voting=VotingSectionConfig.from_dict(data.get("voting", {})),
            treasury=TreasurySectionConfig.from_dict(data.get("treasury", {})),
            ledger=LedgerSectionConfig.from_dict(data.get("ledger", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "DAOConfig":
        """
        Load configuration from a TOML file.

        A missing file yields the defaults (with env overrides applied).
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Config file not found: {config_path} — using defaults")
            cfg = cls()
            cfg.apply_env()
            return cfg

        with open(path, "rb") as f:
            try:
                raw = tomli.load(f)
            except tomli.TOMLDecodeError as e:
                raise ConfigurationError(f"Malformed config file {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.governance.apply_env()
        self.voting.apply_env()
        self.treasury.apply_env()
        self.ledger.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        g = self.governance
        for name, value in (
            ("governance.voting_threshold", g.voting_threshold),
            ("governance.quorum_percentage", g.quorum_percentage),
            ("governance.proposal_duration", g.proposal_duration),
            ("governance.reward_rate", g.reward_rate),
            ("governance.max_proposals", g.max_proposals),
            ("voting.max_proposals", self.voting.max_proposals),
            ("treasury.lock_period", self.treasury.lock_period),
        ):
            if not is_int(value):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if not isinstance(g.dao_owner, str) or not g.dao_owner or g.dao_owner == NULL_PRINCIPAL:
            raise ConfigurationError(f"Invalid dao_owner: {g.dao_owner!r}")
        if not VOTING_THRESHOLD_MIN <= g.voting_threshold <= VOTING_THRESHOLD_MAX:
            raise ConfigurationError(
                f"voting_threshold must be in [{VOTING_THRESHOLD_MIN}, {VOTING_THRESHOLD_MAX}]"
            )
        if not QUORUM_PERCENTAGE_MIN <= g.quorum_percentage <= QUORUM_PERCENTAGE_MAX:
            raise ConfigurationError(
                f"quorum_percentage must be in [{QUORUM_PERCENTAGE_MIN}, {QUORUM_PERCENTAGE_MAX}]"
            )
        if g.proposal_duration <= 0:
            raise ConfigurationError("proposal_duration must be > 0")
        if not REWARD_RATE_MIN <= g.reward_rate <= REWARD_RATE_MAX:
            raise ConfigurationError(
                f"reward_rate must be in [{REWARD_RATE_MIN}, {REWARD_RATE_MAX}]"
            )
        if g.max_proposals < 1 or self.voting.max_proposals < 1:
            raise ConfigurationError("max_proposals must be >= 1")
        if self.treasury.lock_period < 0:
            raise ConfigurationError("lock_period cannot be negative")
        for who, amount in self.ledger.initial_balances.items():
            if not is_int(amount) or amount < 0:
                raise ConfigurationError(f"Invalid initial balance for {who}: {amount!r}")

        principals = [
            g.principal,
            self.voting.principal,
            self.treasury.principal,
            self.ledger.principal,
        ]
        if len(set(principals)) != len(principals):
            raise ConfigurationError("Component principals must be distinct")
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        g = self.governance
        return {
            "governance": {
                "principal": g.principal,
                "dao_owner": g.dao_owner,
                "voting_threshold": g.voting_threshold,
                "quorum_percentage": g.quorum_percentage,
                "proposal_duration": g.proposal_duration,
                "reward_rate": g.reward_rate,
                "max_proposals": g.max_proposals,
            },
            "voting": {
                "principal": self.voting.principal,
                "max_proposals": self.voting.max_proposals,
            },
            "treasury": {
                "principal": self.treasury.principal,
                "lock_period": self.treasury.lock_period,
            },
            "ledger": {
                "principal": self.ledger.principal,
                "name": self.ledger.name,
                "symbol": self.ledger.symbol,
                "initial_balances": dict(self.ledger.initial_balances),
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> DAOConfig:
    """
    Load and validate the DAO configuration.

    Resolution order:
        1. Explicit *path* argument
        2. WELLNESS_DAO_CONFIG env var
        3. ./dao.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("WELLNESS_DAO_CONFIG", "dao.toml")

    cfg = DAOConfig.from_file(path)
    cfg.validate()
    return cfg
