"""Tests for the in-memory ledger, the local oracle and the event emitter."""

import pytest

from core.cards import U64_MAX
from core.errors import ArithmeticOverflow, InsufficientFunds
from core.game import EventType, GameEvent
from core.game.events import EventEmitter
from core.ports import InMemoryLedger, LocalRandomnessOracle


class TestInMemoryLedger:
    """Tests for InMemoryLedger."""

    def test_unknown_identity_has_zero(self):
        assert InMemoryLedger().balance("nobody") == 0

    def test_credit_and_debit(self, ledger):
        ledger.credit("alice", 50)
        ledger.debit("alice", 120)
        assert ledger.balance("alice") == 30

    def test_debit_more_than_balance(self, ledger):
        with pytest.raises(InsufficientFunds):
            ledger.debit("dave", 6)
        assert ledger.balance("dave") == 5

    def test_credit_overflow(self):
        ledger = InMemoryLedger({"alice": U64_MAX})
        with pytest.raises(ArithmeticOverflow):
            ledger.credit("alice", 1)
        assert ledger.balance("alice") == U64_MAX

    def test_negative_amounts_rejected(self, ledger):
        with pytest.raises(ValueError):
            ledger.credit("alice", -1)
        with pytest.raises(ValueError):
            ledger.debit("alice", -1)

    def test_snapshot_is_copy(self, ledger):
        snapshot = ledger.snapshot()
        snapshot["alice"] = 0
        assert ledger.balance("alice") == 100


class TestLocalRandomnessOracle:
    """Tests for LocalRandomnessOracle."""

    def test_derive_is_deterministic(self):
        oracle = LocalRandomnessOracle("secret")
        assert oracle.derive(1, "nonce") == oracle.derive(1, "nonce")

    def test_derive_depends_on_inputs(self):
        oracle = LocalRandomnessOracle("secret")
        other = LocalRandomnessOracle("other-secret")
        value = oracle.derive(1, "nonce")
        assert oracle.derive(2, "nonce") != value
        assert oracle.derive(1, "other") != value
        assert other.derive(1, "nonce") != value

    def test_derive_is_u64(self):
        value = LocalRandomnessOracle("secret").derive(U64_MAX, "nonce")
        assert 0 <= value <= U64_MAX

    def test_long_secret(self):
        oracle = LocalRandomnessOracle("x" * 500)
        assert 0 <= oracle.derive(0, "nonce") <= U64_MAX

    def test_seed_bounds(self):
        with pytest.raises(ValueError):
            LocalRandomnessOracle("secret").derive(-1, "nonce")

    def test_request_fulfills(self):
        delivered = []
        oracle = LocalRandomnessOracle("secret", on_fulfill=lambda p, v: delivered.append((p, v)))

        request_id = oracle.request("alice", 9)

        assert delivered == [("alice", oracle.derive(9, request_id))]

    def test_requests_get_unique_ids(self):
        oracle = LocalRandomnessOracle("secret")
        assert oracle.request("alice", 9) != oracle.request("alice", 9)


class TestEventEmitter:
    """Tests for EventEmitter."""

    def test_typed_and_catch_all_handlers(self):
        emitter = EventEmitter()
        typed, everything = [], []
        emitter.subscribe(typed.append, EventType.BET_PLACED)
        emitter.subscribe(everything.append)

        emitter.emit_new(EventType.ROUND_STARTED, round_id=1)
        emitter.emit_new(EventType.BET_PLACED, round_id=1)

        assert [e.event_type for e in typed] == [EventType.BET_PLACED]
        assert len(everything) == 2

    def test_unsubscribe(self):
        emitter = EventEmitter()
        received = []
        emitter.subscribe(received.append)
        emitter.unsubscribe(received.append)
        emitter.emit_new(EventType.GAME_OVER)
        assert received == []

    def test_history(self):
        emitter = EventEmitter()
        emitter.emit_new(EventType.POOL_FUNDED, amount=5)
        assert len(emitter.history) == 1
        emitter.clear_history()
        assert emitter.history == []

    def test_to_dict(self):
        event = GameEvent(EventType.PRIZE_CLAIMED, {"prize": 50})
        data = event.to_dict()
        assert data["type"] == "PRIZE_CLAIMED"
        assert data["data"] == {"prize": 50}
        assert "timestamp" in data
