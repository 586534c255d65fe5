"""Pytest fixtures for High/Low league tests."""

import pytest
from hypothesis import strategies as st

from core.cards import U64_MAX, Card, Deck, Rank, Suit, shuffle_deck
from core.game import GameTable, PlayerSession, RandomnessSlot
from core.ports import InMemoryLedger

WINDOW_START = 1_700_000_000
WINDOW_END = WINDOW_START + 7 * 24 * 3600


def stacked_deck(*cards: str) -> Deck:
    """A deck with a known order, e.g. stacked_deck("5H", "9S", "9C")."""
    return Deck(Card.from_string(c) for c in cards)


@pytest.fixture
def seeded_deck():
    """A deck shuffled from a fixed seed."""
    return shuffle_deck(42)


@pytest.fixture
def fresh_session():
    """A session with no randomness and no round."""
    return PlayerSession("alice")


@pytest.fixture
def session():
    """A session with a stacked deck and an active round started at t=1000."""
    s = PlayerSession(
        "alice",
        deck=stacked_deck("5H", "9S", "2D", "KH", "3C", "3S"),
        randomness=RandomnessSlot(7),
    )
    s.start_round(round_id=1, now=1000)
    return s


@pytest.fixture
def table():
    """A league table administered by 'admin' with an entry fee of 10."""
    return GameTable.initialize("admin", WINDOW_START, WINDOW_END, entry_fee=10)


@pytest.fixture
def ledger():
    """A ledger with funded players."""
    return InMemoryLedger({"alice": 100, "bob": 100, "carol": 100, "dave": 5})


# Hypothesis strategies for property-based testing
seeds = st.integers(min_value=0, max_value=U64_MAX)


@st.composite
def card_strategy(draw):
    """Generate a random card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)
