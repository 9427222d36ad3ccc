"""
Monopoly Deal Rules Engine

A turn-based implementation of the Monopoly Deal card game rules:
deck, property ledger, turn flow, pending actions and win detection.
"""

from .config import GameConfig
from .exceptions import LookupFailure, MonopolyDealError, RuleViolation, SequencingError
from .game import GameState, MatchPhase, TurnPhase, create_game
from .player import PlayerState, PropertySet

__all__ = [
    "GameConfig",
    "GameState",
    "MatchPhase",
    "TurnPhase",
    "create_game",
    "PlayerState",
    "PropertySet",
    "MonopolyDealError",
    "SequencingError",
    "RuleViolation",
    "LookupFailure",
]
