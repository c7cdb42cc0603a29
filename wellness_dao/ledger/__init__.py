"""
Token ledger capability consumed by the DAO.

Provides:
  - Ledger          : the four-call capability (balance, supply, mint, transfer)
  - WellnessToken   : in-memory fungible implementation
  - checked_mint / checked_transfer : fail on a False return as well as a raise
"""

from .token import (
    InsufficientBalanceError,
    Ledger,
    LedgerErrorCode,
    TransferEvent,
    WellnessToken,
    checked_mint,
    checked_transfer,
)

__all__ = [
    "InsufficientBalanceError",
    "Ledger",
    "LedgerErrorCode",
    "TransferEvent",
    "WellnessToken",
    "checked_mint",
    "checked_transfer",
]
