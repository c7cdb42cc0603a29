"""
Chain environment shared by the controllers.

  - BlockClock        : the external, monotonically non-decreasing block height
  - ContractDirectory : principal → deployed component lookup
"""

from typing import Any, Dict, List

from .logger import get_logger

logger = get_logger(__name__)


class BlockClock:
    """
    Block-height clock.

    Controllers only read ``height``; the host sequencing calls into the
    DAO is the one that advances it.
    """

    def __init__(self, height: int = 0):
        if height < 0:
            raise ValueError(f"Block height cannot be negative, got {height}")
        self._height = height

    @property
    def height(self) -> int:
        return self._height

    def advance_to(self, height: int) -> int:
        """Move the clock to *height*. Moving backwards raises ValueError."""
        if height < self._height:
            raise ValueError(
                f"Block height is monotonic: {height} < current {self._height}"
            )
        self._height = height
        return self._height

    def mine(self, blocks: int = 1) -> int:
        if blocks < 0:
            raise ValueError("Cannot mine a negative number of blocks")
        return self.advance_to(self._height + blocks)

    def __repr__(self) -> str:
        return f"<BlockClock height={self._height}>"


class ContractDirectory:
    """
    Registry of deployed components keyed by contract principal.

    Controllers store references to each other as principals and resolve them
    here on every call, so an owner can rewire a pointer without any component
    holding a mutable handle to another one. Entries are never removed.
    """

    def __init__(self):
        self._contracts: Dict[str, Any] = {}

    def deploy(self, principal: str, component: Any) -> Any:
        if not principal:
            raise ValueError("Contract principal is required")
        if principal in self._contracts:
            raise ValueError(f"Contract {principal} already deployed")
        self._contracts[principal] = component
        logger.info(f"Contract deployed: {principal} ({type(component).__name__})")
        return component

    def is_deployed(self, principal: str) -> bool:
        return principal in self._contracts

    def resolve(self, principal: str) -> Any:
        component = self._contracts.get(principal)
        if component is None:
            raise LookupError(f"No contract deployed at {principal}")
        return component

    def principals(self) -> List[str]:
        return list(self._contracts.keys())

    def __repr__(self) -> str:
        return f"<ContractDirectory contracts={len(self._contracts)}>"
