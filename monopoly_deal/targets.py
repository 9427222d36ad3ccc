"""
Play targets and action responses.

Each card effect takes its own target record, so a steal can't arrive
without a victim and a house can't arrive with one.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from monopoly_deal.cards import PropertyColor


@dataclass(frozen=True)
class AsBank:
    """Put the card in the bank as money."""


@dataclass(frozen=True)
class ChooseColor:
    """Property placement, house or hotel."""

    color: PropertyColor


@dataclass(frozen=True)
class ChoosePlayer:
    """Debt collector."""

    player_id: str


@dataclass(frozen=True)
class ChargeRent:
    """
    Rent card.

    `player_id` is required for wild rent and ignored otherwise.
    """

    color: PropertyColor
    player_id: Optional[str] = None
    double_rent_card_id: Optional[str] = None


@dataclass(frozen=True)
class StealOne:
    """Sly deal: one property from the opponent's `color` set."""

    player_id: str
    color: PropertyColor


@dataclass(frozen=True)
class Swap:
    """Forced deal: take from `color`, give `give_card_id` from own `give_color`."""

    player_id: str
    color: PropertyColor
    give_color: PropertyColor
    give_card_id: str


@dataclass(frozen=True)
class StealSet:
    """Deal breaker."""

    player_id: str
    color: PropertyColor


PlayTarget = Union[AsBank, ChooseColor, ChoosePlayer, ChargeRent, StealOne, Swap, StealSet]


@dataclass
class ActionResponse:
    """A participant's answer to the pending action."""

    accept: bool = True
    use_refusal: bool = False
    payment_card_ids: List[str] = field(default_factory=list)
    # Sly/forced deal: the property the responder gives up.
    surrender_card_ids: List[str] = field(default_factory=list)
