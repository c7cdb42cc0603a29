"""
Wellness DAO Configuration

Loads dao.toml at deployment time.
Environment variables override TOML values.
"""

from .loader import (
    DAOConfig,
    GovernanceSectionConfig,
    LedgerSectionConfig,
    TreasurySectionConfig,
    VotingSectionConfig,
    load_config,
)

__all__ = [
    "DAOConfig",
    "GovernanceSectionConfig",
    "LedgerSectionConfig",
    "TreasurySectionConfig",
    "VotingSectionConfig",
    "load_config",
]
