"""
Pending actions: effects that wait on one or more other players.

A pending action is either single-target (one responder, who may start a
Just Say No chain with the initiator) or broadcast (every other player
answers once, independently). Payment and property transfers are
validated in full before any card moves.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from monopoly_deal.cards import ActionKind, Card, PropertyCard, PropertyColor, is_action
from monopoly_deal.exceptions import LookupFailure, RuleViolation, SequencingError
from monopoly_deal.ledger import (
    liquid_value,
    locate_payable,
    merge_set,
    place_property,
    prune_empty_sets,
    remove_property,
    take_set,
)
from monopoly_deal.player import PlayerState, PropertySet


class PendingKind(str, Enum):
    """What the pending action will do once it resolves."""

    BIRTHDAY = "birthday"
    DEBT_COLLECTOR = "debt_collector"
    RENT = "rent"
    SLY_DEAL = "sly_deal"
    FORCED_DEAL = "forced_deal"
    DEAL_BREAKER = "deal_breaker"


PENDING_KIND_FOR_ACTION: Dict[ActionKind, PendingKind] = {
    ActionKind.BIRTHDAY: PendingKind.BIRTHDAY,
    ActionKind.DEBT_COLLECTOR: PendingKind.DEBT_COLLECTOR,
    ActionKind.SLY_DEAL: PendingKind.SLY_DEAL,
    ActionKind.FORCED_DEAL: PendingKind.FORCED_DEAL,
    ActionKind.DEAL_BREAKER: PendingKind.DEAL_BREAKER,
}


@dataclass
class PendingAction:
    """
    The single in-flight action awaiting responses.

    `responded` is None for single-target actions and a set of player ids
    for broadcast ones. `refusals` counts Just Say No cards played in the
    current chain; the effect only lands when that count is even.
    """

    kind: PendingKind
    initiator_id: str
    card: Card
    target_id: Optional[str] = None
    target_color: Optional[PropertyColor] = None
    amount: Optional[int] = None
    can_refuse: bool = True
    responded: Optional[Set[str]] = None
    give_color: Optional[PropertyColor] = None
    give_card_id: Optional[str] = None
    refusals: int = 0

    @classmethod
    def broadcast(cls, kind: PendingKind, initiator_id: str, card: Card, amount: int) -> "PendingAction":
        return cls(kind=kind, initiator_id=initiator_id, card=card, amount=amount, responded=set())

    @property
    def is_broadcast(self) -> bool:
        return self.responded is not None

    @property
    def is_countered(self) -> bool:
        """True while the last refusal in the chain is still standing."""
        return self.refusals % 2 == 1

    def awaiting(self, players: Iterable[PlayerState]) -> List[str]:
        """Ids of players whose answer is still outstanding."""
        if not self.is_broadcast:
            return [self.target_id] if self.target_id is not None else []
        return [
            p.player_id
            for p in players
            if p.player_id != self.initiator_id and p.player_id not in self.responded
        ]

    def check_responder(self, player_id: str) -> None:
        """Raise unless `player_id` is allowed to answer right now."""
        if self.is_broadcast:
            if player_id == self.initiator_id:
                raise SequencingError("You cannot respond to your own action")
            if player_id in self.responded:
                raise SequencingError("You have already responded to this action")
        elif player_id != self.target_id:
            raise SequencingError("This action is not waiting on you")

    def all_responded(self, players: Iterable[PlayerState]) -> bool:
        return not self.awaiting(players)

    def swap_roles(self) -> None:
        self.initiator_id, self.target_id = self.target_id, self.initiator_id


def find_refusal(player: PlayerState) -> Optional[Card]:
    """First Just Say No card in the player's hand."""
    for card in player.hand:
        if is_action(card, ActionKind.JUST_SAY_NO):
            return card
    return None


def validate_payment(payer: PlayerState, card_ids: List[str], amount: int) -> List[Card]:
    """
    Check a payment offer and return the cards it names.

    A payer who is worth less than `amount` only has to hand over
    everything they have.
    """
    if len(set(card_ids)) != len(card_ids):
        raise RuleViolation("The same card was offered twice")

    cards = [locate_payable(payer, card_id)[0] for card_id in card_ids]
    total = liquid_value(payer)
    if total > 0:
        offered = sum(card.value for card in cards)
        required = min(amount, total)
        if offered < required:
            raise RuleViolation(f"Insufficient payment: offered {offered}, need {required}")
    return cards


def transfer_payment(payer: PlayerState, payee: PlayerState, card_ids: List[str]) -> None:
    """
    Move already-validated payment cards from payer to payee.

    Bank cards land in the payee's bank; properties keep their colour.
    """
    for card_id in card_ids:
        card, prop_set = locate_payable(payer, card_id)
        if prop_set is None:
            payer.bank.remove(card)
            payee.bank.append(card)
        else:
            prop_set.cards.remove(card)
            place_property(payee, card, prop_set.color)
    prune_empty_sets(payer)


def _surrendered_card(pending: PendingAction, responder: PlayerState, card_ids: List[str]) -> PropertyCard:
    if len(card_ids) != 1:
        raise RuleViolation("Choose exactly one property to give up")
    prop_set = responder.get_set(pending.target_color)
    card = prop_set.find(card_ids[0]) if prop_set else None
    if card is None:
        raise LookupFailure(f"Card not found in your {pending.target_color.value} set")
    return card


def validate_effect(
    pending: PendingAction, initiator: PlayerState, responder: PlayerState, card_ids: List[str]
) -> None:
    """Check that a steal/swap/break can still be carried out as requested."""
    if pending.kind in (PendingKind.SLY_DEAL, PendingKind.FORCED_DEAL):
        _surrendered_card(pending, responder, card_ids)
    if pending.kind == PendingKind.FORCED_DEAL:
        own_set = initiator.get_set(pending.give_color)
        if own_set is None or own_set.find(pending.give_card_id) is None:
            raise LookupFailure("The offered property is no longer available")
    if pending.kind == PendingKind.DEAL_BREAKER and responder.get_set(pending.target_color) is None:
        raise LookupFailure(f"No {pending.target_color.value} set to take")


def execute_effect(
    pending: PendingAction, initiator: PlayerState, responder: PlayerState, card_ids: List[str]
) -> None:
    """Carry out a validated steal, swap or deal breaker."""
    color = pending.target_color
    if pending.kind in (PendingKind.SLY_DEAL, PendingKind.FORCED_DEAL):
        taken = remove_property(responder, color, card_ids[0])
        if pending.kind == PendingKind.FORCED_DEAL:
            given = remove_property(initiator, pending.give_color, pending.give_card_id)
            place_property(responder, given, pending.give_color)
        place_property(initiator, taken, color)
    elif pending.kind == PendingKind.DEAL_BREAKER:
        stolen: PropertySet = take_set(responder, color)
        merge_set(initiator, stolen)
