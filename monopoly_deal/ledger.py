"""
Property ledger: placing, moving and pricing a player's property sets.

All functions validate first and mutate only once every check has passed,
so a raised error leaves the player untouched.
"""

from typing import List, Optional, Tuple

from monopoly_deal.cards import (
    RENT_VALUES,
    ActionCard,
    ActionKind,
    Card,
    PropertyCard,
    PropertyColor,
)
from monopoly_deal.exceptions import LookupFailure, RuleViolation
from monopoly_deal.player import PlayerState, PropertySet


def _get_or_create_set(player: PlayerState, color: PropertyColor) -> PropertySet:
    prop_set = player.get_set(color)
    if prop_set is None:
        prop_set = PropertySet(color=color)
        player.properties.append(prop_set)
    return prop_set


def place_property(
    player: PlayerState, card: PropertyCard, color: Optional[PropertyColor] = None
) -> PropertySet:
    """
    Put a property card into the player's set of `color`.

    Defaults to the card's printed colour. Creates the set if needed.
    """
    color = color or card.color
    if not card.can_occupy(color):
        if card.is_wildcard:
            raise RuleViolation(f"This wildcard cannot be placed on {color.value}")
        raise RuleViolation(f"{card.name} is a {card.color.value} property")

    prop_set = _get_or_create_set(player, color)
    prop_set.cards.append(card)
    return prop_set


def prune_empty_sets(player: PlayerState) -> None:
    """
    Drop sets with no property cards left.

    A house or hotel stranded on an emptied set goes to the owner's bank.
    """
    kept: List[PropertySet] = []
    for prop_set in player.properties:
        if prop_set.cards:
            kept.append(prop_set)
        else:
            player.bank.extend(prop_set.modifiers())
    player.properties = kept


def relocate_wildcard(
    player: PlayerState, card_id: str, from_color: PropertyColor, to_color: PropertyColor
) -> PropertyCard:
    """Move a wildcard already on the table to another of its legal colours."""
    from_set = player.get_set(from_color)
    if from_set is None:
        raise LookupFailure("Source property set not found")

    card = from_set.find(card_id)
    if card is None:
        raise LookupFailure("Card not found in source set")
    if not card.is_wildcard:
        raise RuleViolation("Only wildcard properties can be rearranged")
    if from_color == to_color:
        raise RuleViolation("Wildcard is already in that set")
    if not card.can_occupy(to_color):
        raise RuleViolation("This wildcard cannot be placed on that color")

    from_set.cards.remove(card)
    _get_or_create_set(player, to_color).cards.append(card)
    prune_empty_sets(player)
    return card


def add_modifier(player: PlayerState, color: PropertyColor, card: ActionCard) -> PropertySet:
    """Attach a house or hotel card to a complete set."""
    if card.action not in (ActionKind.HOUSE, ActionKind.HOTEL):
        raise RuleViolation(f"{card.name} is not a house or hotel")

    prop_set = player.get_set(color)
    if prop_set is None or not prop_set.is_complete:
        raise RuleViolation("Set must be complete")

    if card.action == ActionKind.HOUSE:
        if prop_set.has_house:
            raise RuleViolation("Set already has a house")
        prop_set.house = card
    else:
        if not prop_set.has_house:
            raise RuleViolation("Must have a house first")
        if prop_set.has_hotel:
            raise RuleViolation("Set already has a hotel")
        prop_set.hotel = card
    return prop_set


def calculate_rent(prop_set: PropertySet, house_bonus: int = 3, hotel_bonus: int = 4) -> int:
    """
    Rent charged for a set.

    Base rent comes from the colour's table at `count - 1`, clamped to the
    last entry; house and hotel add a flat bonus on top.
    """
    if prop_set.property_count == 0:
        return 0

    table = RENT_VALUES[prop_set.color]
    rent = table[min(prop_set.property_count - 1, len(table) - 1)]

    if prop_set.has_house:
        rent += house_bonus
    if prop_set.has_hotel:
        rent += hotel_bonus
    return rent


def liquid_value(player: PlayerState) -> int:
    """Everything a player could hand over as payment: bank plus properties."""
    total = sum(card.value for card in player.bank)
    for prop_set in player.properties:
        total += sum(card.value for card in prop_set.cards)
    return total


def locate_payable(player: PlayerState, card_id: str) -> Tuple[Card, Optional[PropertySet]]:
    """
    Find a card the player can pay with.

    Returns the card and the set it sits in (None for bank cards).
    """
    card = player.find_in_bank(card_id)
    if card is not None:
        return card, None
    for prop_set in player.properties:
        prop = prop_set.find(card_id)
        if prop is not None:
            return prop, prop_set
    raise LookupFailure("Payment card not found in bank or properties")


def remove_property(player: PlayerState, color: PropertyColor, card_id: str) -> PropertyCard:
    """Take one property card off the table. Empty sets are pruned."""
    prop_set = player.get_set(color)
    if prop_set is None:
        raise LookupFailure(f"No {color.value} set")
    card = prop_set.find(card_id)
    if card is None:
        raise LookupFailure(f"Card not found in {color.value} set")

    prop_set.cards.remove(card)
    prune_empty_sets(player)
    return card


def take_set(player: PlayerState, color: PropertyColor) -> PropertySet:
    """Remove a whole set, modifiers included, from the player."""
    prop_set = player.get_set(color)
    if prop_set is None:
        raise LookupFailure(f"No {color.value} set")
    player.properties.remove(prop_set)
    return prop_set


def merge_set(player: PlayerState, incoming: PropertySet) -> PropertySet:
    """
    Give a whole set to the player.

    If the player already owns that colour the cards are combined; a house
    or hotel that would be doubled up goes to the bank instead.
    """
    existing = player.get_set(incoming.color)
    if existing is None:
        player.properties.append(incoming)
        return incoming

    existing.cards.extend(incoming.cards)
    for slot in ("house", "hotel"):
        card = getattr(incoming, slot)
        if card is None:
            continue
        if getattr(existing, slot) is None:
            setattr(existing, slot, card)
        else:
            player.bank.append(card)
    return existing
