"""
Game configuration settings.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class GameConfig:
    """Rule constants for a Monopoly Deal match."""

    actions_per_turn: int = 3
    hand_limit: int = 7
    deal_size: int = 5
    draw_count: int = 2
    empty_hand_draw_count: int = 5

    min_players: int = 2
    max_players: int = 5

    sets_to_win: int = 3

    house_bonus: int = 3
    hotel_bonus: int = 4

    birthday_amount: int = 2
    debt_collector_amount: int = 5

    # Only used to make shuffles reproducible in tests.
    seed: Optional[int] = None
