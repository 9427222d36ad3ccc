"""
Card definitions and the fixed Monopoly Deal catalog.
"""

import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class PropertyColor(str, Enum):
    """Property colour groups."""

    BROWN = "brown"
    LIGHT_BLUE = "light_blue"
    PINK = "pink"
    ORANGE = "orange"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    DARK_BLUE = "dark_blue"
    RAILROAD = "railroad"
    UTILITY = "utility"


class CardType(str, Enum):
    """The four card variants."""

    PROPERTY = "property"
    MONEY = "money"
    ACTION = "action"
    RENT = "rent"


class ActionKind(str, Enum):
    """Effects printed on action cards."""

    PASS_GO = "pass_go"  # draw two
    BIRTHDAY = "birthday"  # collect from all
    DEBT_COLLECTOR = "debt_collector"  # collect from one
    SLY_DEAL = "sly_deal"  # steal one property
    FORCED_DEAL = "forced_deal"  # swap properties
    DEAL_BREAKER = "deal_breaker"  # steal a complete set
    HOUSE = "house"
    HOTEL = "hotel"
    DOUBLE_RENT = "double_rent"
    JUST_SAY_NO = "just_say_no"  # refuse an action


ALL_COLORS: Tuple[PropertyColor, ...] = tuple(PropertyColor)

# Number of property cards needed for a complete set.
SET_REQUIREMENTS: Dict[PropertyColor, int] = {
    PropertyColor.BROWN: 2,
    PropertyColor.LIGHT_BLUE: 3,
    PropertyColor.PINK: 3,
    PropertyColor.ORANGE: 3,
    PropertyColor.RED: 3,
    PropertyColor.YELLOW: 3,
    PropertyColor.GREEN: 3,
    PropertyColor.DARK_BLUE: 2,
    PropertyColor.RAILROAD: 4,
    PropertyColor.UTILITY: 2,
}

# Rent by number of properties in the set, indexed by count - 1.
RENT_VALUES: Dict[PropertyColor, List[int]] = {
    PropertyColor.BROWN: [1, 2],
    PropertyColor.LIGHT_BLUE: [1, 2, 3],
    PropertyColor.PINK: [1, 2, 4],
    PropertyColor.ORANGE: [1, 3, 5],
    PropertyColor.RED: [2, 3, 6],
    PropertyColor.YELLOW: [2, 4, 6],
    PropertyColor.GREEN: [2, 4, 7],
    PropertyColor.DARK_BLUE: [3, 8],
    PropertyColor.RAILROAD: [1, 2, 3, 4],
    PropertyColor.UTILITY: [1, 2],
}


def _new_card_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Card:
    """Base class for every card. `value` is what the card is worth as money."""

    name: str
    value: int
    card_id: str = field(default_factory=_new_card_id)

    @property
    def card_type(self) -> CardType:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}('{self.name}', value={self.value})"


@dataclass(frozen=True, repr=False)
class PropertyCard(Card):
    """A property, or a wildcard property restricted to `wildcard_colors`."""

    color: PropertyColor = PropertyColor.BROWN
    is_wildcard: bool = False
    wildcard_colors: Tuple[PropertyColor, ...] = ()

    @property
    def card_type(self) -> CardType:
        return CardType.PROPERTY

    def can_occupy(self, color: PropertyColor) -> bool:
        """Check whether this card may sit in a set of the given colour."""
        if self.is_wildcard:
            return color in self.wildcard_colors
        return color == self.color


@dataclass(frozen=True, repr=False)
class MoneyCard(Card):
    """Plain money."""

    @property
    def card_type(self) -> CardType:
        return CardType.MONEY


@dataclass(frozen=True, repr=False)
class ActionCard(Card):
    """An action card."""

    action: ActionKind = ActionKind.PASS_GO

    @property
    def card_type(self) -> CardType:
        return CardType.ACTION


@dataclass(frozen=True, repr=False)
class RentCard(Card):
    """
    A rent card.

    Fixed-colour rents charge every opponent; wild rents charge a single
    opponent for any one colour.
    """

    colors: Tuple[PropertyColor, ...] = ()
    is_wild_rent: bool = False

    @property
    def card_type(self) -> CardType:
        return CardType.RENT


def is_action(card: Card, kind: ActionKind) -> bool:
    """Check whether a card is an action card of the given kind."""
    return isinstance(card, ActionCard) and card.action == kind


def _property(name: str, color: PropertyColor, value: int) -> PropertyCard:
    return PropertyCard(name=name, value=value, color=color)


def _wildcard(value: int, *colors: PropertyColor) -> PropertyCard:
    # The first listed colour is where the card lands by default.
    return PropertyCard(
        name="Wild Property",
        value=value,
        color=colors[0],
        is_wildcard=True,
        wildcard_colors=tuple(colors),
    )


def _money(value: int) -> MoneyCard:
    return MoneyCard(name=f"${value}M", value=value)


def _action(kind: ActionKind, name: str, value: int) -> ActionCard:
    return ActionCard(name=name, value=value, action=kind)


def _rent(value: int, *colors: PropertyColor, wild: bool = False) -> RentCard:
    name = "Wild Rent" if wild else "Rent ({})".format("/".join(c.value for c in colors))
    return RentCard(name=name, value=value, colors=tuple(colors), is_wild_rent=wild)


PROPERTY_NAMES: Dict[PropertyColor, Tuple[int, List[str]]] = {
    PropertyColor.BROWN: (1, ["Mediterranean Avenue", "Baltic Avenue"]),
    PropertyColor.LIGHT_BLUE: (1, ["Oriental Avenue", "Vermont Avenue", "Connecticut Avenue"]),
    PropertyColor.PINK: (2, ["St. Charles Place", "States Avenue", "Virginia Avenue"]),
    PropertyColor.ORANGE: (2, ["St. James Place", "Tennessee Avenue", "New York Avenue"]),
    PropertyColor.RED: (3, ["Kentucky Avenue", "Indiana Avenue", "Illinois Avenue"]),
    PropertyColor.YELLOW: (3, ["Atlantic Avenue", "Ventnor Avenue", "Marvin Gardens"]),
    PropertyColor.GREEN: (4, ["Pacific Avenue", "North Carolina Avenue", "Pennsylvania Avenue"]),
    PropertyColor.DARK_BLUE: (4, ["Park Place", "Boardwalk"]),
    PropertyColor.RAILROAD: (
        2,
        ["Reading Railroad", "Pennsylvania Railroad", "B&O Railroad", "Short Line"],
    ),
    PropertyColor.UTILITY: (2, ["Electric Company", "Water Works"]),
}

# denomination -> copies
MONEY_DENOMINATIONS: Dict[int, int] = {1: 7, 2: 6, 3: 4, 4: 3, 5: 3, 10: 1}

# kind -> (name, value, copies)
ACTION_CARDS: Dict[ActionKind, Tuple[str, int, int]] = {
    ActionKind.DEAL_BREAKER: ("Deal Breaker", 5, 2),
    ActionKind.JUST_SAY_NO: ("Just Say No", 4, 3),
    ActionKind.SLY_DEAL: ("Sly Deal", 3, 3),
    ActionKind.FORCED_DEAL: ("Forced Deal", 3, 3),
    ActionKind.DEBT_COLLECTOR: ("Debt Collector", 3, 3),
    ActionKind.BIRTHDAY: ("It's My Birthday", 2, 3),
    ActionKind.PASS_GO: ("Pass Go", 1, 10),
    ActionKind.HOUSE: ("House", 3, 3),
    ActionKind.HOTEL: ("Hotel", 4, 2),
    ActionKind.DOUBLE_RENT: ("Double The Rent", 1, 2),
}

RENT_PAIRS: List[Tuple[PropertyColor, PropertyColor]] = [
    (PropertyColor.BROWN, PropertyColor.LIGHT_BLUE),
    (PropertyColor.PINK, PropertyColor.ORANGE),
    (PropertyColor.RED, PropertyColor.YELLOW),
    (PropertyColor.GREEN, PropertyColor.DARK_BLUE),
    (PropertyColor.RAILROAD, PropertyColor.UTILITY),
]

DECK_SIZE = 110


def create_deck() -> List[Card]:
    """Create the full, unshuffled 110-card catalog with fresh card ids."""
    deck: List[Card] = []

    for color, (value, names) in PROPERTY_NAMES.items():
        for name in names:
            deck.append(_property(name, color, value))

    deck.append(_wildcard(1, PropertyColor.BROWN, PropertyColor.LIGHT_BLUE))
    deck.append(_wildcard(4, PropertyColor.LIGHT_BLUE, PropertyColor.RAILROAD))
    deck.append(_wildcard(2, PropertyColor.PINK, PropertyColor.ORANGE))
    deck.append(_wildcard(2, PropertyColor.PINK, PropertyColor.ORANGE))
    deck.append(_wildcard(3, PropertyColor.RED, PropertyColor.YELLOW))
    deck.append(_wildcard(3, PropertyColor.RED, PropertyColor.YELLOW))
    deck.append(_wildcard(4, PropertyColor.GREEN, PropertyColor.DARK_BLUE))
    deck.append(_wildcard(4, PropertyColor.GREEN, PropertyColor.RAILROAD))
    deck.append(_wildcard(2, PropertyColor.UTILITY, PropertyColor.RAILROAD))
    deck.append(_wildcard(0, *ALL_COLORS))
    deck.append(_wildcard(0, *ALL_COLORS))

    for value, copies in MONEY_DENOMINATIONS.items():
        deck.extend(_money(value) for _ in range(copies))

    for kind, (name, value, copies) in ACTION_CARDS.items():
        deck.extend(_action(kind, name, value) for _ in range(copies))

    for pair in RENT_PAIRS:
        deck.extend(_rent(1, *pair) for _ in range(2))
    deck.extend(_rent(3, *ALL_COLORS, wild=True) for _ in range(3))

    return deck


def shuffle_deck(cards: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Return a uniformly shuffled copy of `cards` (Fisher-Yates).

    Pass a seeded `random.Random` for reproducible order.
    """
    rng = rng or random.Random()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
