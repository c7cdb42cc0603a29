"""
Token ledger capability.

The DAO consumes a fungible ledger through four calls (balance lookup,
total-supply lookup, mint and transfer). ``Ledger`` is that capability;
``WellnessToken`` is an in-memory implementation used by deployments and
tests. Failures use the SIP-010 transfer error numbering.
"""

import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Protocol, runtime_checkable

from ..exceptions import LedgerError
from ..logger import get_logger

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  ERRORS
# ══════════════════════════════════════════════════════════════════════

class LedgerErrorCode(IntEnum):
    INSUFFICIENT_BALANCE = 1
    SENDER_IS_RECIPIENT = 2
    NON_POSITIVE_AMOUNT = 3
    MINT_REJECTED = 4


class InsufficientBalanceError(LedgerError):
    """Raised when the sender balance is too low."""

    def __init__(self, message: str = ""):
        super().__init__(LedgerErrorCode.INSUFFICIENT_BALANCE, message)


# ══════════════════════════════════════════════════════════════════════
#  CAPABILITY
# ══════════════════════════════════════════════════════════════════════

@runtime_checkable
class Ledger(Protocol):
    """
    Balance-weighted ledger consumed by the controllers.

    ``mint`` and ``transfer`` either raise ``LedgerError`` or return a success
    flag. Callers go through ``checked_mint`` / ``checked_transfer`` so a
    ``False`` return fails the surrounding transaction like a raise does.
    """

    def get_balance(self, principal: str) -> int: ...

    def get_total_supply(self) -> int: ...

    def mint(self, amount: int, recipient: str) -> bool: ...

    def transfer(self, amount: int, sender: str, recipient: str) -> bool: ...


def checked_transfer(ledger: Ledger, amount: int, sender: str, recipient: str):
    """Transfer through *ledger*; a refused transfer is an insufficient balance."""
    if not ledger.transfer(amount, sender, recipient):
        raise InsufficientBalanceError(
            f"Ledger refused transfer of {amount} from {sender} to {recipient}"
        )


def checked_mint(ledger: Ledger, amount: int, recipient: str):
    if not ledger.mint(amount, recipient):
        raise LedgerError(
            LedgerErrorCode.MINT_REJECTED, f"Ledger refused mint of {amount} to {recipient}"
        )


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransferEvent:
    """Emitted on every successful transfer or mint (sender is None for mints)."""
    token_symbol: str
    sender: Any
    recipient: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Mint" if self.sender is None else "Transfer",
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "amount": self.amount,
            "timestamp": self.timestamp,
        }


# ══════════════════════════════════════════════════════════════════════
#  IN-MEMORY TOKEN
# ══════════════════════════════════════════════════════════════════════

class WellnessToken:
    """
    Fungible wellness token.

    Integer balances, an unbounded supply and no allowances: only what the
    governance stack needs. Each call validates fully before mutating, so a
    failed call leaves balances untouched.
    """

    def __init__(self, name: str = "Wellness Token", symbol: str = "WELL"):
        if not name:
            raise ValueError("Token name cannot be empty")
        if not symbol:
            raise ValueError("Token symbol cannot be empty")
        self.name = name
        self.symbol = symbol
        self._balances: Dict[str, int] = {}
        self._total_supply = 0
        self._events: List[TransferEvent] = []

    # ── Read-only views ───────────────────────────────────────────────

    def get_balance(self, principal: str) -> int:
        return self._balances.get(principal, 0)

    def get_total_supply(self) -> int:
        return self._total_supply

    @property
    def events(self) -> List[TransferEvent]:
        return list(self._events)

    # ── Mutations ─────────────────────────────────────────────────────

    def mint(self, amount: int, recipient: str) -> bool:
        if amount <= 0:
            raise LedgerError(
                LedgerErrorCode.NON_POSITIVE_AMOUNT, "Mint amount must be positive"
            )
        self._balances[recipient] = self.get_balance(recipient) + amount
        self._total_supply += amount
        self._events.append(TransferEvent(self.symbol, None, recipient, amount))
        logger.debug(f"Mint: {amount} {self.symbol} → {recipient}")
        return True

    def transfer(self, amount: int, sender: str, recipient: str) -> bool:
        if amount <= 0:
            raise LedgerError(
                LedgerErrorCode.NON_POSITIVE_AMOUNT, "Transfer amount must be positive"
            )
        if sender == recipient:
            raise LedgerError(
                LedgerErrorCode.SENDER_IS_RECIPIENT, "Cannot transfer to self"
            )
        bal = self.get_balance(sender)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {bal} < transfer amount {amount}"
            )
        self._balances[sender] = bal - amount
        self._balances[recipient] = self.get_balance(recipient) + amount
        self._events.append(TransferEvent(self.symbol, sender, recipient, amount))
        logger.debug(f"Transfer: {sender} → {recipient} {amount} {self.symbol}")
        return True

    # ── Host helpers ──────────────────────────────────────────────────

    def set_balance(self, principal: str, amount: int):
        """
        Overwrite a balance without touching the supply.

        Only for seeding fixtures; mirrors setting a mock balance directly.
        """
        if amount < 0:
            raise ValueError("Balance cannot be negative")
        self._balances[principal] = amount

    def set_total_supply(self, amount: int):
        if amount < 0:
            raise ValueError("Total supply cannot be negative")
        self._total_supply = amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "totalSupply": self._total_supply,
            "holders": len([b for b in self._balances.values() if b > 0]),
        }

    def __repr__(self) -> str:
        return f"<WellnessToken {self.symbol} supply={self._total_supply}>"
