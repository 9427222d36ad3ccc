"""
Main game engine and state management.
"""

import random
import uuid
from enum import Enum
from typing import Any, List, Optional, Tuple

from monopoly_deal.cards import (
    ActionCard,
    ActionKind,
    Card,
    MoneyCard,
    PropertyCard,
    PropertyColor,
    RentCard,
    create_deck,
    is_action,
    shuffle_deck,
)
from monopoly_deal.config import GameConfig
from monopoly_deal.exceptions import LookupFailure, RuleViolation, SequencingError
from monopoly_deal.ledger import add_modifier, calculate_rent, place_property, relocate_wildcard
from monopoly_deal.pending import (
    PENDING_KIND_FOR_ACTION,
    PendingAction,
    PendingKind,
    execute_effect,
    find_refusal,
    transfer_payment,
    validate_effect,
    validate_payment,
)
from monopoly_deal.player import PlayerState
from monopoly_deal.targets import (
    ActionResponse,
    AsBank,
    ChargeRent,
    ChooseColor,
    ChoosePlayer,
    PlayTarget,
    StealOne,
    StealSet,
    Swap,
)


class MatchPhase(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class TurnPhase(str, Enum):
    DRAW = "draw"
    ACTION = "action"
    RESPONDING = "responding"
    DISCARD = "discard"
    FINISHING = "finishing"


class GameState:
    """
    Represents the complete state of a Monopoly Deal match.
    This is the main interface for the game engine.

    Every public operation either completes and leaves the state
    consistent, or raises a `MonopolyDealError` before touching anything.
    Callers must serialize access to a single instance.
    """

    def __init__(self, room_code: str, config: Optional[GameConfig] = None):
        self.config = config or GameConfig()
        self.room_code = room_code
        self.game_id = uuid.uuid4().hex

        self.rng = random.Random(self.config.seed)

        # The fixed set of cards this match is played with.
        self.catalog: Tuple[Card, ...] = tuple(create_deck())

        self.players: List[PlayerState] = []
        self.current_player_index = 0
        self.draw_pile: List[Card] = shuffle_deck(list(self.catalog), self.rng)
        self.discard_pile: List[Card] = []

        self.phase = MatchPhase.WAITING
        self.turn_phase = TurnPhase.DRAW
        self.actions_remaining = self.config.actions_per_turn
        self.pending_action: Optional[PendingAction] = None
        self.winner: Optional[str] = None
        self.turn_number = 0

    # === PARTICIPANTS ===

    def get_player(self, player_id: str) -> PlayerState:
        for player in self.players:
            if player.player_id == player_id:
                return player
        raise LookupFailure("Player not found")

    def get_current_player(self) -> PlayerState:
        """Get the player whose turn it is."""
        return self.players[self.current_player_index]

    def add_player(self, name: str, connection: Any = None) -> PlayerState:
        """Seat a new participant. Only possible before the match starts."""
        if self.phase != MatchPhase.WAITING:
            raise SequencingError("Game already in progress")
        if len(self.players) >= self.config.max_players:
            raise RuleViolation("Room is full")

        player = PlayerState(name, connection)
        self.players.append(player)
        return player

    def remove_player(self, player_id: str) -> None:
        """Remove a participant from a match that has not started yet."""
        player = self.get_player(player_id)
        if self.phase != MatchPhase.WAITING:
            raise SequencingError("Players cannot leave a match in progress")

        self.players.remove(player)
        if self.current_player_index >= len(self.players):
            self.current_player_index = 0

    def disconnect_player(self, player_id: str) -> None:
        """
        Handle a participant dropping out.

        Before the match they are removed; during it they keep their seat
        and cards and are only flagged as disconnected.
        """
        if self.phase == MatchPhase.WAITING:
            self.remove_player(player_id)
            return
        player = self.get_player(player_id)
        player.is_connected = False
        player.connection = None

    def reconnect_player(self, name: str, connection: Any = None) -> PlayerState:
        """Re-attach a disconnected participant to a started match by name."""
        for player in self.players:
            if player.name == name and not player.is_connected:
                return self.resume_player(player.player_id, connection)
        raise LookupFailure("No disconnected player with that name")

    def resume_player(self, player_id: str, connection: Any = None) -> PlayerState:
        player = self.get_player(player_id)
        player.is_connected = True
        player.connection = connection
        return player

    # === MATCH LIFECYCLE ===

    def start(self) -> None:
        """Shuffle the full catalog and deal a hand to every participant."""
        if self.phase != MatchPhase.WAITING:
            raise SequencingError("Game has already started")
        count = len(self.players)
        if count < self.config.min_players:
            raise RuleViolation(f"Need at least {self.config.min_players} players to start")
        if count > self.config.max_players:
            raise RuleViolation(f"Maximum {self.config.max_players} players allowed")

        self.draw_pile = shuffle_deck(list(self.catalog), self.rng)
        self.discard_pile = []
        self.phase = MatchPhase.PLAYING
        self.turn_phase = TurnPhase.DRAW
        self.current_player_index = 0
        self.actions_remaining = self.config.actions_per_turn
        self.pending_action = None
        self.winner = None
        self.turn_number = 0

        for player in self.players:
            player.hand = []
            player.bank = []
            player.properties = []
            for _ in range(self.config.deal_size):
                player.hand.append(self.draw_pile.pop())

    def _require_playing(self) -> None:
        if self.phase != MatchPhase.PLAYING:
            raise SequencingError("Game is not in progress")

    def _require_turn(self, player_id: str) -> PlayerState:
        self._require_playing()
        player = self.get_player(player_id)
        if self.get_current_player() is not player:
            raise SequencingError("Not your turn")
        return player

    # === DRAWING ===

    def _draw_into(self, player: PlayerState, count: int) -> List[Card]:
        """Draw up to `count` cards, recycling the discard pile when needed."""
        drawn: List[Card] = []
        for _ in range(count):
            if not self.draw_pile:
                if not self.discard_pile:
                    break
                self.draw_pile = shuffle_deck(self.discard_pile, self.rng)
                self.discard_pile = []
            card = self.draw_pile.pop()
            player.hand.append(card)
            drawn.append(card)
        return drawn

    def draw_cards(self, player_id: str) -> List[Card]:
        """Start-of-turn draw: five cards on an empty hand, otherwise two."""
        player = self._require_turn(player_id)
        if self.turn_phase != TurnPhase.DRAW:
            raise SequencingError("Cannot draw cards now")

        count = self.config.empty_hand_draw_count if not player.hand else self.config.draw_count
        drawn = self._draw_into(player, count)
        self.turn_phase = TurnPhase.ACTION
        return drawn

    # === PLAYING CARDS ===

    def play_card(self, player_id: str, card_id: str, target: Optional[PlayTarget] = None) -> None:
        """
        Play a card from hand, spending one action.

        The target record depends on the card; see `monopoly_deal.targets`.
        """
        player = self._require_turn(player_id)
        if self.turn_phase != TurnPhase.ACTION:
            raise SequencingError("Cannot play cards now")
        if self.actions_remaining <= 0:
            raise SequencingError("No actions remaining")

        card = player.find_in_hand(card_id)
        if card is None:
            raise LookupFailure("Card not in hand")

        if isinstance(target, AsBank) or isinstance(card, MoneyCard):
            actions_used = self._play_to_bank(player, card)
        elif isinstance(card, PropertyCard):
            actions_used = self._play_property(player, card, target)
        elif isinstance(card, ActionCard):
            actions_used = self._play_action(player, card, target)
        elif isinstance(card, RentCard):
            actions_used = self._play_rent(player, card, target)
        else:
            raise RuleViolation(f"Cannot play {card.name}")

        self.actions_remaining -= actions_used
        self.check_winner()

        if self.pending_action is not None:
            self.turn_phase = TurnPhase.RESPONDING
        elif self.actions_remaining <= 0:
            self._finish_play(player)

    def _play_to_bank(self, player: PlayerState, card: Card) -> int:
        if isinstance(card, PropertyCard):
            raise RuleViolation("Properties cannot be banked")
        player.hand.remove(card)
        player.bank.append(card)
        return 1

    def _play_property(self, player: PlayerState, card: PropertyCard, target: Optional[PlayTarget]) -> int:
        color = None
        if isinstance(target, ChooseColor):
            color = target.color
        elif target is not None:
            raise RuleViolation("A property can only be given a colour")

        place_property(player, card, color)
        player.hand.remove(card)
        return 1

    def _opponent(self, player: PlayerState, opponent_id: str) -> PlayerState:
        opponent = self.get_player(opponent_id)
        if opponent is player:
            raise RuleViolation("You cannot target yourself")
        return opponent

    def _play_action(self, player: PlayerState, card: ActionCard, target: Optional[PlayTarget]) -> int:
        kind = card.action

        if kind == ActionKind.DOUBLE_RENT:
            raise RuleViolation("Double The Rent must be played with a Rent card")
        if kind == ActionKind.JUST_SAY_NO:
            raise RuleViolation("Just Say No can only be played in response")

        if kind in (ActionKind.HOUSE, ActionKind.HOTEL):
            if not isinstance(target, ChooseColor):
                raise RuleViolation("Must select a property set")
            add_modifier(player, target.color, card)
            player.hand.remove(card)
            return 1

        if kind == ActionKind.PASS_GO:
            player.hand.remove(card)
            self.discard_pile.append(card)
            self._draw_into(player, self.config.draw_count)
            return 1

        pending_kind = PENDING_KIND_FOR_ACTION[kind]
        if kind == ActionKind.BIRTHDAY:
            pending = PendingAction.broadcast(
                pending_kind, player.player_id, card, self.config.birthday_amount
            )
        elif kind == ActionKind.DEBT_COLLECTOR:
            if not isinstance(target, ChoosePlayer):
                raise RuleViolation("Must select a player")
            opponent = self._opponent(player, target.player_id)
            pending = PendingAction(
                kind=pending_kind,
                initiator_id=player.player_id,
                card=card,
                target_id=opponent.player_id,
                amount=self.config.debt_collector_amount,
            )
        else:
            pending = self._property_steal(player, card, pending_kind, target)

        player.hand.remove(card)
        self.discard_pile.append(card)
        self.pending_action = pending
        return 1

    def _property_steal(
        self, player: PlayerState, card: ActionCard, kind: PendingKind, target: Optional[PlayTarget]
    ) -> PendingAction:
        """Validate a sly deal, forced deal or deal breaker and build its pending action."""
        expected = {
            PendingKind.SLY_DEAL: StealOne,
            PendingKind.FORCED_DEAL: Swap,
            PendingKind.DEAL_BREAKER: StealSet,
        }[kind]
        if not isinstance(target, expected):
            raise RuleViolation("Must select a player and property")

        opponent = self._opponent(player, target.player_id)
        their_set = opponent.get_set(target.color)
        if their_set is None:
            raise RuleViolation(f"{opponent.name} has no {target.color.value} properties")

        pending = PendingAction(
            kind=kind,
            initiator_id=player.player_id,
            card=card,
            target_id=opponent.player_id,
            target_color=target.color,
        )

        if kind == PendingKind.DEAL_BREAKER:
            if not their_set.is_complete:
                raise RuleViolation("Can only steal complete sets")
            return pending

        if their_set.is_complete:
            raise RuleViolation("Cannot take a property from a complete set")

        if kind == PendingKind.FORCED_DEAL:
            own_set = player.get_set(target.give_color)
            if own_set is None or own_set.find(target.give_card_id) is None:
                raise LookupFailure("Offered property not found in your sets")
            if own_set.is_complete:
                raise RuleViolation("Cannot trade away a property from a complete set")
            pending.give_color = target.give_color
            pending.give_card_id = target.give_card_id

        return pending

    def _play_rent(self, player: PlayerState, card: RentCard, target: Optional[PlayTarget]) -> int:
        if not isinstance(target, ChargeRent):
            raise RuleViolation("Must choose a colour to charge rent for")
        if target.color not in card.colors:
            raise RuleViolation(f"{card.name} cannot charge rent for {target.color.value}")

        prop_set = player.get_set(target.color)
        if prop_set is None:
            raise RuleViolation("You need a matching property to charge rent")

        amount = calculate_rent(prop_set, self.config.house_bonus, self.config.hotel_bonus)
        actions_used = 1

        double_card = None
        if target.double_rent_card_id is not None:
            double_card = player.find_in_hand(target.double_rent_card_id)
            if double_card is None:
                raise LookupFailure("Double The Rent card not in hand")
            if not is_action(double_card, ActionKind.DOUBLE_RENT):
                raise RuleViolation(f"{double_card.name} is not Double The Rent")
            if self.actions_remaining < 2:
                raise RuleViolation("Double The Rent needs a second action")
            amount *= 2
            actions_used = 2

        if card.is_wild_rent:
            if target.player_id is None:
                raise RuleViolation("Must select a player for wild rent")
            opponent = self._opponent(player, target.player_id)
            pending = PendingAction(
                kind=PendingKind.RENT,
                initiator_id=player.player_id,
                card=card,
                target_id=opponent.player_id,
                target_color=target.color,
                amount=amount,
            )
        else:
            pending = PendingAction.broadcast(PendingKind.RENT, player.player_id, card, amount)
            pending.target_color = target.color

        for played in (card, double_card):
            if played is not None:
                player.hand.remove(played)
                self.discard_pile.append(played)
        self.pending_action = pending
        return actions_used

    # === RESPONDING ===

    def respond_to_action(self, player_id: str, response: ActionResponse) -> None:
        """
        Answer the pending action.

        Resolution order: a refusal card first, then payment, then the
        steal/swap/break effect. Broadcast actions stay pending until every
        other player has answered.
        """
        self._require_playing()
        pending = self.pending_action
        if pending is None:
            raise SequencingError("No pending action")

        player = self.get_player(player_id)
        pending.check_responder(player_id)

        if response.use_refusal:
            self._refuse(pending, player)
            return

        initiator = self.get_player(pending.initiator_id)

        if pending.is_countered:
            # The original initiator declined to answer the refusal.
            self._clear_pending()
            return

        if not response.accept:
            raise RuleViolation("You must pay or play Just Say No")

        if pending.amount is not None:
            validate_payment(player, response.payment_card_ids, pending.amount)
        if not pending.is_broadcast:
            validate_effect(pending, initiator, player, response.surrender_card_ids)

        if pending.amount is not None:
            transfer_payment(player, initiator, response.payment_card_ids)
        if not pending.is_broadcast:
            execute_effect(pending, initiator, player, response.surrender_card_ids)

        self.check_winner()
        self._mark_answered(pending, player)

    def _refuse(self, pending: PendingAction, player: PlayerState) -> None:
        if not pending.can_refuse:
            raise RuleViolation("This action can no longer be refused")
        refusal = find_refusal(player)
        if refusal is None:
            raise RuleViolation("No Just Say No card")

        player.hand.remove(refusal)
        self.discard_pile.append(refusal)

        if pending.is_broadcast:
            self._mark_answered(pending, player)
            return

        pending.refusals += 1
        pending.swap_roles()
        if pending.is_countered and find_refusal(self.get_player(pending.target_id)) is None:
            # Nobody can answer this refusal.
            self._clear_pending()

    def _mark_answered(self, pending: PendingAction, player: PlayerState) -> None:
        if pending.is_broadcast:
            pending.responded.add(player.player_id)
            if not pending.all_responded(self.players):
                return
        self._clear_pending()

    def _clear_pending(self) -> None:
        self.pending_action = None
        current = self.get_current_player()
        if self.actions_remaining <= 0:
            self._finish_play(current)
        else:
            self.turn_phase = TurnPhase.ACTION

    # === END OF TURN ===

    def _finish_play(self, player: PlayerState) -> None:
        if len(player.hand) > self.config.hand_limit:
            self.turn_phase = TurnPhase.DISCARD
        else:
            self.turn_phase = TurnPhase.FINISHING

    def _advance_turn(self) -> None:
        self.current_player_index = (self.current_player_index + 1) % len(self.players)
        self.turn_phase = TurnPhase.DRAW
        self.actions_remaining = self.config.actions_per_turn
        self.turn_number += 1

    def discard_cards(self, player_id: str, card_ids: List[str]) -> None:
        """Discard down to the hand limit, then pass the turn."""
        player = self._require_turn(player_id)
        if self.turn_phase != TurnPhase.DISCARD:
            raise SequencingError("Not in discard phase")

        excess = len(player.hand) - self.config.hand_limit
        if len(card_ids) != excess:
            raise RuleViolation(f"Must discard exactly {excess} cards")
        if len(set(card_ids)) != len(card_ids):
            raise RuleViolation("The same card was listed twice")

        cards = []
        for card_id in card_ids:
            card = player.find_in_hand(card_id)
            if card is None:
                raise LookupFailure("Card not in hand")
            cards.append(card)

        for card in cards:
            player.hand.remove(card)
            self.discard_pile.append(card)
        self._advance_turn()

    def end_turn_early(self, player_id: str) -> None:
        """End the turn with actions to spare, or confirm the end after all three."""
        player = self._require_turn(player_id)
        if self.pending_action is not None:
            raise SequencingError("Must resolve pending action first")
        if self.turn_phase not in (TurnPhase.ACTION, TurnPhase.FINISHING):
            raise SequencingError("Cannot end turn now")

        if len(player.hand) > self.config.hand_limit:
            self.turn_phase = TurnPhase.DISCARD
        else:
            self._advance_turn()

    # === REARRANGING ===

    def rearrange_property(
        self, player_id: str, card_id: str, from_color: PropertyColor, to_color: PropertyColor
    ) -> None:
        """Move one of your wildcards to another legal colour. Costs no action."""
        player = self._require_turn(player_id)
        if self.pending_action is not None:
            raise SequencingError("Must resolve pending action first")
        if self.turn_phase not in (TurnPhase.ACTION, TurnPhase.FINISHING):
            raise SequencingError("Cannot rearrange now")

        relocate_wildcard(player, card_id, from_color, to_color)
        self.check_winner()

    # === WINNING ===

    def check_winner(self) -> Optional[str]:
        """Record the first player, in seat order, holding enough complete sets."""
        if self.winner is not None:
            return self.winner
        for player in self.players:
            if len(player.complete_sets()) >= self.config.sets_to_win:
                self.winner = player.player_id
                self.phase = MatchPhase.FINISHED
                return self.winner
        return None

    # === INTROSPECTION ===

    def all_cards(self) -> List[Card]:
        """Every card in the match, wherever it currently is."""
        cards: List[Card] = [*self.draw_pile, *self.discard_pile]
        for player in self.players:
            cards.extend(player.all_cards())
        return cards

    def __repr__(self) -> str:
        return (
            f"GameState(room='{self.room_code}', phase={self.phase.value}, "
            f"turn_phase={self.turn_phase.value}, players={len(self.players)})"
        )


def create_game(room_code: str, config: Optional[GameConfig] = None) -> GameState:
    """Create a new, empty match waiting for players."""
    return GameState(room_code, config)
