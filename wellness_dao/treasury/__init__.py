"""
Wellness DAO Treasury

Provides:
  - Treasury            : time-locked contributions and budget disbursement
  - Contribution        : per-principal contribution record
  - TreasuryError / TreasuryErrorCode (3xx)
"""

from .vault import (
    Contribution,
    Treasury,
    TreasuryError,
    TreasuryErrorCode,
    TreasuryState,
)

__all__ = [
    "Contribution",
    "Treasury",
    "TreasuryError",
    "TreasuryErrorCode",
    "TreasuryState",
]
