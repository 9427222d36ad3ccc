"""
High-level rules API for controlling game flow.
This module provides the public interface for game actions and legal move detection.
"""

from enum import Enum
from typing import Any, List, Optional

from monopoly_deal.cards import ActionKind, is_action
from monopoly_deal.exceptions import RuleViolation
from monopoly_deal.game import GameState, MatchPhase, TurnPhase
from monopoly_deal.targets import ActionResponse


class ActionType(Enum):
    """Types of actions a player can take."""

    DRAW_CARDS = "draw_cards"
    PLAY_CARD = "play_card"
    RESPOND_TO_ACTION = "respond_to_action"
    DISCARD_CARDS = "discard_cards"
    REARRANGE_PROPERTY = "rearrange_property"
    END_TURN = "end_turn"


class Action:
    """Represents a game action that can be taken."""

    def __init__(self, action_type: ActionType, **params: Any):
        self.action_type = action_type
        self.params = params

    def __repr__(self) -> str:
        return f"Action({self.action_type.value}, {self.params})"


# Cards that are never playable on their own.
_RESPONSE_ONLY = (ActionKind.JUST_SAY_NO, ActionKind.DOUBLE_RENT)


def get_legal_actions(game_state: GameState, player_id: str) -> List[Action]:
    """
    Get the actions available to a player right now.

    Card plays are listed per card without their targets; whether a given
    target is acceptable is only known once `apply_action` validates it.
    """
    if game_state.phase != MatchPhase.PLAYING:
        return []

    player = game_state.get_player(player_id)
    actions: List[Action] = []

    # Responding takes priority: it is the only thing anyone can do.
    pending = game_state.pending_action
    if pending is not None:
        if player_id in pending.awaiting(game_state.players):
            actions.append(Action(ActionType.RESPOND_TO_ACTION, kind=pending.kind.value))
        return actions

    if game_state.get_current_player() is not player:
        return actions

    phase = game_state.turn_phase
    if phase == TurnPhase.DRAW:
        actions.append(Action(ActionType.DRAW_CARDS))
        return actions

    if phase == TurnPhase.DISCARD:
        excess = len(player.hand) - game_state.config.hand_limit
        actions.append(Action(ActionType.DISCARD_CARDS, count=excess))
        return actions

    if phase == TurnPhase.ACTION and game_state.actions_remaining > 0:
        for card in player.hand:
            if any(is_action(card, kind) for kind in _RESPONSE_ONLY):
                continue
            actions.append(Action(ActionType.PLAY_CARD, card_id=card.card_id))

    for prop_set in player.properties:
        for card in prop_set.cards:
            if card.is_wildcard:
                for color in card.wildcard_colors:
                    if color != prop_set.color:
                        actions.append(
                            Action(
                                ActionType.REARRANGE_PROPERTY,
                                card_id=card.card_id,
                                from_color=prop_set.color,
                                to_color=color,
                            )
                        )

    actions.append(Action(ActionType.END_TURN))
    return actions


def apply_action(game_state: GameState, action: Action, player_id: Optional[str] = None) -> Any:
    """
    Apply an action to the game state.

    This is the main interface for executing moves. Failures propagate as
    `MonopolyDealError` subclasses and leave the state unchanged.

    Args:
        game_state: Current game state
        action: Action to apply
        player_id: Player executing the action (defaults to current player)

    Returns:
        The drawn cards for DRAW_CARDS, otherwise None
    """
    if player_id is None:
        player_id = game_state.get_current_player().player_id
    params = action.params

    if action.action_type == ActionType.DRAW_CARDS:
        return game_state.draw_cards(player_id)

    elif action.action_type == ActionType.PLAY_CARD:
        game_state.play_card(player_id, params["card_id"], params.get("target"))

    elif action.action_type == ActionType.RESPOND_TO_ACTION:
        response = params.get("response") or ActionResponse()
        game_state.respond_to_action(player_id, response)

    elif action.action_type == ActionType.DISCARD_CARDS:
        game_state.discard_cards(player_id, list(params.get("card_ids", [])))

    elif action.action_type == ActionType.REARRANGE_PROPERTY:
        game_state.rearrange_property(
            player_id, params["card_id"], params["from_color"], params["to_color"]
        )

    elif action.action_type == ActionType.END_TURN:
        game_state.end_turn_early(player_id)

    else:
        raise RuleViolation(f"Unknown action: {action.action_type}")

    return None
