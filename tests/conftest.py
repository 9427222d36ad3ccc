"""Shared test fixtures for Monopoly Deal tests."""

from typing import Callable, List

import pytest

from monopoly_deal import GameConfig, GameState, TurnPhase, create_game
from monopoly_deal.cards import ActionKind, Card, MoneyCard, PropertyCard, PropertyColor, RentCard, is_action
from monopoly_deal.ledger import place_property
from monopoly_deal.player import PlayerState


class Table:
    """
    Arranges specific catalog cards for a started game.

    Cards are always moved out of the draw or discard pile, never created,
    so the match still holds exactly its catalog.
    """

    def __init__(self, game: GameState):
        self.game = game

    @property
    def alice(self) -> PlayerState:
        return self.game.players[0]

    @property
    def bob(self) -> PlayerState:
        return self.game.players[1]

    @property
    def carol(self) -> PlayerState:
        return self.game.players[2]

    def take(self, predicate: Callable[[Card], bool]) -> Card:
        for pile in (self.game.draw_pile, self.game.discard_pile):
            for card in pile:
                if predicate(card):
                    pile.remove(card)
                    return card
        raise LookupError("No matching card left in the piles")

    def give(self, player: PlayerState, predicate: Callable[[Card], bool]) -> Card:
        card = self.take(predicate)
        player.hand.append(card)
        return card

    def give_action(self, player: PlayerState, kind: ActionKind) -> Card:
        return self.give(player, lambda c: is_action(c, kind))

    def give_money(self, player: PlayerState, value: int) -> Card:
        return self.give(player, lambda c: isinstance(c, MoneyCard) and c.value == value)

    def give_property(self, player: PlayerState, color: PropertyColor) -> Card:
        return self.give(player, lambda c: _plain_property(c, color))

    def give_rent(self, player: PlayerState, color: PropertyColor, wild: bool = False) -> Card:
        return self.give(
            player,
            lambda c: isinstance(c, RentCard) and c.is_wild_rent == wild and color in c.colors,
        )

    def bank(self, player: PlayerState, *values: int) -> List[Card]:
        cards = []
        for value in values:
            card = self.take(lambda c, v=value: isinstance(c, MoneyCard) and c.value == v)
            player.bank.append(card)
            cards.append(card)
        return cards

    def place(self, player: PlayerState, color: PropertyColor, count: int) -> List[PropertyCard]:
        """Put `count` printed properties of `color` on the table for `player`."""
        cards = []
        for _ in range(count):
            card = self.take(lambda c: _plain_property(c, color))
            place_property(player, card, color)
            cards.append(card)
        return cards

    def place_wild(self, player: PlayerState, color: PropertyColor) -> PropertyCard:
        card = self.take(
            lambda c: isinstance(c, PropertyCard) and c.is_wildcard and color in c.wildcard_colors
        )
        place_property(player, card, color)
        return card

    def empty_hands(self) -> None:
        for player in self.game.players:
            self.game.draw_pile.extend(player.hand)
            player.hand = []


def _plain_property(card: Card, color: PropertyColor) -> bool:
    return isinstance(card, PropertyCard) and not card.is_wildcard and card.color == color


def _seat(config: GameConfig, names: List[str]) -> GameState:
    game = create_game("TEST01", config)
    for name in names:
        game.add_player(name)
    return game


@pytest.fixture
def game_config():
    """Default game configuration with fixed seed for reproducibility."""
    return GameConfig(seed=42)


@pytest.fixture
def waiting_game(game_config):
    """Two seated players, not started yet."""
    return _seat(game_config, ["Alice", "Bob"])


@pytest.fixture
def two_player_game(game_config):
    """Started two-player game with fixed seed."""
    game = _seat(game_config, ["Alice", "Bob"])
    game.start()
    return game


@pytest.fixture
def three_player_game(game_config):
    """Started three-player game with fixed seed."""
    game = _seat(game_config, ["Alice", "Bob", "Carol"])
    game.start()
    return game


def _ready(game: GameState) -> Table:
    table = Table(game)
    table.empty_hands()
    game.turn_phase = TurnPhase.ACTION
    return table


@pytest.fixture
def table(two_player_game):
    """Two-player game, Alice to act, every hand empty."""
    return _ready(two_player_game)


@pytest.fixture
def table3(three_player_game):
    """Three-player game, Alice to act, every hand empty."""
    return _ready(three_player_game)
