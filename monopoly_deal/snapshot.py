"""
Public snapshot serialization of GameState.

Produces a per-viewer, JSON-friendly view of the match. Every hand except
the viewer's is reduced to face-down placeholders and the draw pile is
only reported by size.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from monopoly_deal.cards import ActionCard, Card, PropertyCard, RentCard
from monopoly_deal.game import GameState
from monopoly_deal.ledger import calculate_rent
from monopoly_deal.pending import PendingAction
from monopoly_deal.player import PlayerState

HIDDEN_CARD: Dict[str, Any] = {"card_id": "hidden", "card_type": "hidden", "name": "Hidden", "value": 0}


def serialize_card(card: Card) -> Dict[str, Any]:
    """Serialize one card with the fields relevant to its type."""
    data: Dict[str, Any] = {
        "card_id": card.card_id,
        "card_type": card.card_type.value,
        "name": card.name,
        "value": card.value,
    }
    if isinstance(card, PropertyCard):
        data["color"] = card.color.value
        data["is_wildcard"] = card.is_wildcard
        data["wildcard_colors"] = [c.value for c in card.wildcard_colors]
    elif isinstance(card, ActionCard):
        data["action"] = card.action.value
    elif isinstance(card, RentCard):
        data["colors"] = [c.value for c in card.colors]
        data["is_wild_rent"] = card.is_wild_rent
    return data


def _serialize_player(game: GameState, player: PlayerState, visible: bool) -> Dict[str, Any]:
    sets: List[Dict[str, Any]] = []
    for prop_set in player.properties:
        sets.append(
            {
                "color": prop_set.color.value,
                "cards": [serialize_card(c) for c in prop_set.cards],
                "has_house": prop_set.has_house,
                "has_hotel": prop_set.has_hotel,
                "is_complete": prop_set.is_complete,
                "rent": calculate_rent(prop_set, game.config.house_bonus, game.config.hotel_bonus),
            }
        )

    if visible:
        hand = [serialize_card(c) for c in player.hand]
    else:
        hand = [dict(HIDDEN_CARD) for _ in player.hand]

    return {
        "player_id": player.player_id,
        "name": player.name,
        "is_connected": player.is_connected,
        "hand": hand,
        "hand_count": len(player.hand),
        "bank": [serialize_card(c) for c in player.bank],
        "bank_total": sum(c.value for c in player.bank),
        "properties": sets,
    }


def serialize_pending(game: GameState, pending: Optional[PendingAction]) -> Optional[Dict[str, Any]]:
    if pending is None:
        return None
    return {
        "kind": pending.kind.value,
        "initiator_id": pending.initiator_id,
        "target_id": pending.target_id,
        "target_color": pending.target_color.value if pending.target_color else None,
        "amount": pending.amount,
        "card": serialize_card(pending.card),
        "can_refuse": pending.can_refuse,
        "is_broadcast": pending.is_broadcast,
        "responded": sorted(pending.responded) if pending.is_broadcast else None,
        "awaiting": pending.awaiting(game.players),
        "give_color": pending.give_color.value if pending.give_color else None,
        "give_card_id": pending.give_card_id,
        "refusals": pending.refusals,
    }


def serialize_snapshot(game: GameState, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """Serialize a GameState into a stable JSON dict as seen by `viewer_id`.

    The snapshot includes:
    - match and turn phase, current player, actions remaining, winner
    - players with public info; only the viewer's hand is face up
    - the pending action (if any)
    - draw pile size and the discard pile
    """
    current_id = game.get_current_player().player_id if game.players else None

    return {
        "game_id": game.game_id,
        "room_code": game.room_code,
        "phase": game.phase.value,
        "turn_phase": game.turn_phase.value,
        "turn_number": game.turn_number,
        "current_player_index": game.current_player_index,
        "current_player_id": current_id,
        "actions_remaining": game.actions_remaining,
        "winner": game.winner,
        "players": [
            _serialize_player(game, p, visible=p.player_id == viewer_id) for p in game.players
        ],
        "pending_action": serialize_pending(game, game.pending_action),
        "draw_pile_count": len(game.draw_pile),
        "discard_pile": [serialize_card(c) for c in game.discard_pile],
    }
