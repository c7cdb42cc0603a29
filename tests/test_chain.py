"""
Chain Environment Test Suite

Coverage:
  - BlockClock monotonicity
  - ContractDirectory deployment and resolution
  - ExecResult and the transaction wrapper
"""

import os
import sys

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from wellness_dao.chain import BlockClock, ContractDirectory
from wellness_dao.exceptions import WellnessDAOException
from wellness_dao.result import ExecResult, transaction


class Counter:
    """Minimal transactional component."""

    def __init__(self):
        self.value = 0

    def take_snapshot(self):
        return self.value

    def restore_snapshot(self, snapshot):
        self.value = snapshot

    @transaction
    def add(self, amount):
        self.value += amount
        if self.value > 10:
            raise WellnessDAOException(42, "too large")
        return self.value

    @transaction
    def explode(self):
        self.value = 99
        raise RuntimeError("boom")


class TestBlockClock:
    """BlockClock."""

    def test_advance_and_mine(self):
        clock = BlockClock()
        assert clock.height == 0
        assert clock.advance_to(10) == 10
        assert clock.advance_to(10) == 10
        assert clock.mine() == 11
        assert clock.mine(5) == 16

    def test_never_moves_backwards(self):
        clock = BlockClock(100)
        with pytest.raises(ValueError, match="monotonic"):
            clock.advance_to(99)
        with pytest.raises(ValueError):
            clock.mine(-1)
        assert clock.height == 100

    def test_negative_start(self):
        with pytest.raises(ValueError):
            BlockClock(-1)


class TestContractDirectory:
    """ContractDirectory."""

    def test_deploy_and_resolve(self):
        directory = ContractDirectory()
        component = object()
        assert directory.deploy("ST1.a", component) is component
        assert directory.is_deployed("ST1.a")
        assert directory.resolve("ST1.a") is component
        assert not directory.is_deployed("ST1.b")
        assert directory.principals() == ["ST1.a"]

    def test_duplicate_and_empty_principals(self):
        directory = ContractDirectory()
        directory.deploy("ST1.a", object())
        with pytest.raises(ValueError):
            directory.deploy("ST1.a", object())
        with pytest.raises(ValueError):
            directory.deploy("", object())

    def test_resolve_unknown(self):
        with pytest.raises(LookupError):
            ContractDirectory().resolve("ST1.ghost")


class TestTransaction:
    """transaction / ExecResult."""

    def test_success(self):
        counter = Counter()
        result = counter.add(4)
        assert isinstance(result, ExecResult)
        assert result.ok and result.value == 4
        assert result.unwrap() == 4
        assert bool(result)

    def test_domain_failure_restores(self):
        counter = Counter()
        counter.add(8)
        result = counter.add(5)
        assert not result
        assert result.error == 42
        assert result.message == "too large"
        assert counter.value == 8
        assert result.to_dict() == {"ok": False, "value": None, "error": 42, "message": "too large"}
        assert "42" in repr(result)

    def test_unexpected_failure_restores_and_raises(self):
        counter = Counter()
        counter.add(3)
        with pytest.raises(RuntimeError):
            counter.explode()
        assert counter.value == 3

    def test_unwrap_reraises_failure(self):
        counter = Counter()
        result = counter.add(50)
        with pytest.raises(WellnessDAOException) as exc_info:
            result.unwrap()
        assert exc_info.value is result.exception
