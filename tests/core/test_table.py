"""Tests for the league table."""

import pytest

from conftest import WINDOW_END, WINDOW_START, stacked_deck
from core.errors import (
    ArithmeticOverflow,
    GameOver,
    InsufficientFunds,
    InvalidEntryFee,
    InvalidStartTime,
    LeaderboardFinalized,
    NotOnLeaderboard,
    OutsideGameWindow,
    PrizeAlreadyClaimed,
    PrizeWindowExpired,
    RoundNotFinished,
    Unauthorized,
)
from core.game import EventType, GameTable, PlayerSession, RandomnessSlot
from core.payouts import Direction
from core.ports import InMemoryLedger
from core.prizes import CLAIM_WINDOW

DURING = WINDOW_START + 3600
FINALIZED_AT = WINDOW_END + 60


def play_and_submit(table, player, multiplier, now=DURING):
    """Submit a round that timed out at the given multiplier."""
    session = PlayerSession(player)
    session.start_round(round_id=1, now=now - 100)
    session.multiplier = multiplier
    return table.submit_session(session, now)


class FailingLedger(InMemoryLedger):
    """Ledger whose credits always fail."""

    def credit(self, identity, amount):
        raise ArithmeticOverflow(identity=identity)


class TestInitialize:
    """Tests for creating a league."""

    def test_initialize(self, table):
        assert table.admin == "admin"
        assert table.entry_fee == 10
        assert table.window_start == WINDOW_START
        assert table.window_end == WINDOW_END
        assert table.pool == 0
        assert table.leaderboard_capacity == 3
        assert not table.finalized
        assert table.finalized_at is None

    def test_emits_event(self, table):
        event = table.events.history[0]
        assert event.event_type == EventType.GAME_INITIALIZED
        assert event.data["entry_fee"] == 10

    def test_start_must_precede_end(self):
        with pytest.raises(InvalidStartTime):
            GameTable.initialize("admin", WINDOW_END, WINDOW_START, entry_fee=10)
        with pytest.raises(InvalidStartTime):
            GameTable.initialize("admin", WINDOW_START, WINDOW_START, entry_fee=10)

    def test_entry_fee_must_be_positive(self):
        with pytest.raises(InvalidEntryFee):
            GameTable.initialize("admin", WINDOW_START, WINDOW_END, entry_fee=0)

    def test_start_time_checked_first(self):
        with pytest.raises(InvalidStartTime):
            GameTable.initialize("admin", WINDOW_END, WINDOW_START, entry_fee=0)


class TestPool:
    """Tests for funding and entry fees."""

    def test_fund_pool(self, table):
        assert table.fund_pool(500) == 500
        assert table.fund_pool(25) == 525

    def test_fund_pool_rejects_non_positive(self, table):
        with pytest.raises(ValueError):
            table.fund_pool(0)

    def test_entry_fee_moves_funds(self, table, ledger):
        pool = table.pay_entry_fee("alice", ledger, now=DURING)
        assert pool == 10
        assert ledger.balance("alice") == 90

    def test_insufficient_funds_leaves_pool(self, table, ledger):
        """Test a failed debit changes nothing."""
        table.fund_pool(100)
        with pytest.raises(InsufficientFunds):
            table.pay_entry_fee("dave", ledger, now=DURING)
        assert table.pool == 100
        assert ledger.balance("dave") == 5

    def test_entry_outside_window(self, table, ledger):
        with pytest.raises(OutsideGameWindow):
            table.pay_entry_fee("alice", ledger, now=WINDOW_START - 1)
        with pytest.raises(OutsideGameWindow):
            table.pay_entry_fee("alice", ledger, now=WINDOW_END + 1)
        assert ledger.balance("alice") == 100

    def test_entry_after_finalize(self, table, ledger):
        """Test fees are refused once the prize pool is frozen."""
        table.finalize_leaderboard("admin", now=WINDOW_START + 10)
        with pytest.raises(LeaderboardFinalized):
            table.pay_entry_fee("alice", ledger, now=WINDOW_START + 20)
        assert table.pool == 0
        assert ledger.balance("alice") == 100

    def test_window_bounds_inclusive(self, table):
        assert table.is_window_open(WINDOW_START)
        assert table.is_window_open(WINDOW_END)
        assert not table.is_window_open(WINDOW_END + 1)


class TestAdmin:
    def test_require_admin(self, table):
        table.require_admin("admin")
        with pytest.raises(Unauthorized):
            table.require_admin("alice")

    def test_only_admin_finalizes(self, table):
        with pytest.raises(Unauthorized):
            table.finalize_leaderboard("alice", now=FINALIZED_AT)
        assert not table.finalized


class TestSubmission:
    """Tests for score submission."""

    def test_submit_finished_session(self, table):
        session = PlayerSession(
            "alice",
            deck=stacked_deck("5H", "9S", "2D"),
            randomness=RandomnessSlot(7),
        )
        session.start_round(round_id=1, now=DURING)
        session.place_bet(Direction.HIGH, None, now=DURING + 1)
        with pytest.raises(GameOver):
            session.place_bet(Direction.HIGH, None, now=DURING + 2)

        entry = table.submit_session(session, now=DURING + 3)

        assert entry.player == "alice"
        assert entry.score == 135

    def test_submit_timed_out_session(self, table):
        entry = play_and_submit(table, "alice", multiplier=2.0)
        assert entry.score == 200

    def test_submit_round_in_play(self, table, session):
        session.started_at = DURING
        with pytest.raises(RoundNotFinished):
            table.submit_session(session, now=DURING + 10)

    def test_submit_outside_window(self, table):
        with pytest.raises(OutsideGameWindow):
            table.submit_score("alice", 100, now=WINDOW_END + 1)

    def test_submit_after_finalize(self, table):
        table.finalize_leaderboard("admin", now=FINALIZED_AT)
        with pytest.raises(LeaderboardFinalized):
            table.submit_score("alice", 100, now=DURING)

    def test_lower_score_not_recorded(self, table):
        table.submit_score("alice", 200, now=DURING)
        assert table.submit_score("alice", 100, now=DURING) is None
        assert table.leaderboard.entries[0].score == 200


class TestFinalize:
    def test_finalize_ranks_and_truncates(self, table):
        for player, score in [("a", 100), ("b", 400), ("c", 300), ("d", 200)]:
            table.submit_score(player, score, now=DURING)

        entries = table.finalize_leaderboard("admin", now=FINALIZED_AT)

        assert [e.player for e in entries] == ["b", "c", "d"]
        assert table.finalized
        assert table.finalized_at == FINALIZED_AT
        assert table.events.history[-1].event_type == EventType.LEADERBOARD_FINALIZED

    def test_finalize_twice(self, table):
        table.finalize_leaderboard("admin", now=FINALIZED_AT)
        with pytest.raises(LeaderboardFinalized):
            table.finalize_leaderboard("admin", now=FINALIZED_AT + 1)
        assert table.finalized_at == FINALIZED_AT


class TestClaimPrize:
    """Tests for prize claims."""

    @pytest.fixture
    def finalized_table(self, table):
        table.fund_pool(100)
        table.submit_score("alice", 300, now=DURING)
        table.submit_score("bob", 200, now=DURING)
        table.submit_score("carol", 100, now=DURING)
        table.finalize_leaderboard("admin", now=FINALIZED_AT)
        return table

    def test_first_place(self, finalized_table, ledger):
        amount = finalized_table.claim_prize(0, "alice", ledger, now=FINALIZED_AT + 1)
        assert amount == 50
        assert finalized_table.pool == 50
        assert ledger.balance("alice") == 150
        assert finalized_table.claimed == {0}

    @pytest.mark.parametrize("order", [(0, 1, 2), (2, 1, 0), (1, 2, 0)])
    def test_payouts_independent_of_claim_order(self, finalized_table, ledger, order):
        """Test every position is paid its share of the pool at finalization."""
        owners = {0: "alice", 1: "bob", 2: "carol"}
        paid = {}
        for step, position in enumerate(order):
            paid[position] = finalized_table.claim_prize(
                position, owners[position], ledger, now=FINALIZED_AT + step
            )

        assert paid == {0: 50, 1: 30, 2: 20}
        assert finalized_table.pool == 0
        assert finalized_table.prize_pool == 100

    def test_funding_after_finalize_not_shared(self, finalized_table, ledger):
        finalized_table.fund_pool(900)
        assert finalized_table.claim_prize(0, "alice", ledger, now=FINALIZED_AT + 1) == 50
        assert finalized_table.pool == 950

    def test_double_claim(self, finalized_table, ledger):
        finalized_table.claim_prize(0, "alice", ledger, now=FINALIZED_AT + 1)
        with pytest.raises(PrizeAlreadyClaimed):
            finalized_table.claim_prize(0, "alice", ledger, now=FINALIZED_AT + 2)
        assert ledger.balance("alice") == 150

    def test_claim_someone_elses_position(self, finalized_table, ledger):
        with pytest.raises(NotOnLeaderboard):
            finalized_table.claim_prize(0, "bob", ledger, now=FINALIZED_AT + 1)
        assert finalized_table.pool == 100

    def test_claim_before_finalize(self, table, ledger):
        table.submit_score("alice", 300, now=DURING)
        with pytest.raises(PrizeWindowExpired):
            table.claim_prize(0, "alice", ledger, now=DURING + 1)

    def test_claim_window(self, finalized_table, ledger):
        finalized_table.claim_prize(0, "alice", ledger, now=FINALIZED_AT + CLAIM_WINDOW)
        with pytest.raises(PrizeWindowExpired):
            finalized_table.claim_prize(1, "bob", ledger, now=FINALIZED_AT + CLAIM_WINDOW + 1)

    def test_failed_credit_leaves_pool(self, finalized_table):
        """Test the pool is only debited once the credit succeeds."""
        with pytest.raises(ArithmeticOverflow):
            finalized_table.claim_prize(0, "alice", FailingLedger(), now=FINALIZED_AT + 1)
        assert finalized_table.pool == 100
        assert finalized_table.claimed == set()

    def test_emits_event(self, finalized_table, ledger):
        finalized_table.claim_prize(0, "alice", ledger, now=FINALIZED_AT + 1)
        event = finalized_table.events.history[-1]
        assert event.event_type == EventType.PRIZE_CLAIMED
        assert event.data == {"player": "alice", "position": 0, "prize": 50}
