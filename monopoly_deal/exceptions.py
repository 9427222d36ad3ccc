"""
Exception hierarchy for the Monopoly Deal rules engine.

Every failure raised by the engine is synchronous and leaves the game
state untouched, so callers can report the message to the originating
player and carry on.
"""


class MonopolyDealError(Exception):
    """Base exception for all game-related errors."""


class SequencingError(MonopolyDealError):
    """Operation attempted out of turn, in the wrong phase, or out of order."""


class RuleViolation(MonopolyDealError):
    """Operation is well-sequenced but breaks a card or payment rule."""


class LookupFailure(MonopolyDealError):
    """Unknown participant, or card id not found where it was expected."""
