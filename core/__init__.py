"""Core High/Low engine - storage and transport agnostic."""

from core.cards import Card, Deck, Rank, Suit, shuffle_deck
from core.payouts import Direction, multiplier_gain
from core.resolution import BetOutcome, ColorBet, ParityBet, resolve_bet
from core.leaderboard import Leaderboard, LeaderboardEntry

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "shuffle_deck",
    "Direction",
    "multiplier_gain",
    "BetOutcome",
    "ColorBet",
    "ParityBet",
    "resolve_bet",
    "Leaderboard",
    "LeaderboardEntry",
]
