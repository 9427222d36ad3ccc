"""
Player state and property sets.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, List, Optional

from monopoly_deal.cards import SET_REQUIREMENTS, ActionCard, Card, PropertyCard, PropertyColor


@dataclass
class PropertySet:
    """A player's properties of one colour, plus any house/hotel on them."""

    color: PropertyColor
    cards: List[PropertyCard] = field(default_factory=list)
    house: Optional[ActionCard] = None
    hotel: Optional[ActionCard] = None

    @property
    def has_house(self) -> bool:
        return self.house is not None

    @property
    def has_hotel(self) -> bool:
        return self.hotel is not None

    @property
    def property_count(self) -> int:
        return len(self.cards)

    @property
    def is_complete(self) -> bool:
        """Check if the set holds enough properties for its colour."""
        return self.property_count >= SET_REQUIREMENTS[self.color]

    def modifiers(self) -> List[ActionCard]:
        """House and hotel cards attached to this set."""
        return [card for card in (self.house, self.hotel) if card is not None]

    def all_cards(self) -> List[Card]:
        return [*self.cards, *self.modifiers()]

    def find(self, card_id: str) -> Optional[PropertyCard]:
        for card in self.cards:
            if card.card_id == card_id:
                return card
        return None


class PlayerState:
    """Represents the complete state of a participant in the game."""

    def __init__(self, name: str, connection: Any = None, player_id: Optional[str] = None):
        self.player_id = player_id or uuid.uuid4().hex
        self.name = name
        self.connection = connection
        self.is_connected = True
        self.hand: List[Card] = []
        self.bank: List[Card] = []
        self.properties: List[PropertySet] = []

    def get_set(self, color: PropertyColor) -> Optional[PropertySet]:
        """Get this player's set of the given colour, if any."""
        for prop_set in self.properties:
            if prop_set.color == color:
                return prop_set
        return None

    def find_in_hand(self, card_id: str) -> Optional[Card]:
        for card in self.hand:
            if card.card_id == card_id:
                return card
        return None

    def find_in_bank(self, card_id: str) -> Optional[Card]:
        for card in self.bank:
            if card.card_id == card_id:
                return card
        return None

    def complete_sets(self) -> List[PropertySet]:
        return [s for s in self.properties if s.is_complete]

    def all_cards(self) -> List[Card]:
        """Every card this player holds, in hand, bank or on the table."""
        cards: List[Card] = [*self.hand, *self.bank]
        for prop_set in self.properties:
            cards.extend(prop_set.all_cards())
        return cards

    def __repr__(self) -> str:
        return (
            f"PlayerState(id={self.player_id}, name='{self.name}', "
            f"hand={len(self.hand)}, bank={len(self.bank)}, sets={len(self.properties)})"
        )
