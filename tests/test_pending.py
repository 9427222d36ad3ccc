"""
Tests for actions that wait on other players: payments, steals and Just Say No.
"""

import pytest

from monopoly_deal import TurnPhase
from monopoly_deal.cards import ActionKind, PropertyColor
from monopoly_deal.exceptions import LookupFailure, RuleViolation, SequencingError
from monopoly_deal.pending import PendingKind
from monopoly_deal.targets import ActionResponse, ChargeRent, ChoosePlayer, StealOne, StealSet, Swap


def _pay(*cards):
    return ActionResponse(payment_card_ids=[c.card_id for c in cards])


REFUSE = ActionResponse(use_refusal=True)


def _debt_collector(table):
    card = table.give_action(table.alice, ActionKind.DEBT_COLLECTOR)
    table.game.play_card(table.alice.player_id, card.card_id, ChoosePlayer(table.bob.player_id))
    return card


# ---- Debt collector and payment ----


def test_debt_collector_creates_pending(table):
    game = table.game
    card = _debt_collector(table)

    pending = game.pending_action
    assert pending.kind == PendingKind.DEBT_COLLECTOR
    assert pending.target_id == table.bob.player_id
    assert pending.amount == 5
    assert game.turn_phase == TurnPhase.RESPONDING
    assert game.actions_remaining == 2
    assert card in game.discard_pile


def test_debt_collector_paid_in_full(table):
    game = table.game
    five = table.bank(table.bob, 5)[0]
    _debt_collector(table)

    game.respond_to_action(table.bob.player_id, _pay(five))

    assert table.alice.bank == [five]
    assert table.bob.bank == []
    assert game.pending_action is None
    assert game.turn_phase == TurnPhase.ACTION


def test_cannot_target_yourself(table):
    card = table.give_action(table.alice, ActionKind.DEBT_COLLECTOR)

    with pytest.raises(RuleViolation):
        table.game.play_card(table.alice.player_id, card.card_id, ChoosePlayer(table.alice.player_id))
    assert card in table.alice.hand


def test_partial_payment_must_hand_over_everything(table):
    game = table.game
    one, two = table.bank(table.bob, 1, 2)
    _debt_collector(table)

    with pytest.raises(RuleViolation):
        game.respond_to_action(table.bob.player_id, _pay(two))
    assert table.bob.bank == [one, two]
    assert game.pending_action is not None

    game.respond_to_action(table.bob.player_id, _pay(one, two))
    assert table.alice.bank == [one, two]
    assert game.pending_action is None


def test_broke_player_pays_nothing(table):
    _debt_collector(table)

    table.game.respond_to_action(table.bob.player_id, ActionResponse())

    assert table.game.pending_action is None
    assert table.alice.bank == []


def test_duplicate_payment_card_rejected(table):
    five = table.bank(table.bob, 5)[0]
    _debt_collector(table)

    with pytest.raises(RuleViolation):
        table.game.respond_to_action(table.bob.player_id, _pay(five, five))
    assert table.bob.bank == [five]


def test_payment_with_property_keeps_color(table):
    game = table.game
    green = table.place(table.bob, PropertyColor.GREEN, 2)
    _debt_collector(table)

    game.respond_to_action(table.bob.player_id, _pay(*green))

    assert table.bob.get_set(PropertyColor.GREEN) is None
    assert table.alice.get_set(PropertyColor.GREEN).cards == green


def test_paid_wildcard_keeps_the_color_it_sat_in(table):
    game = table.game
    table.place(table.alice, PropertyColor.PINK, 1)
    wild = table.place_wild(table.bob, PropertyColor.ORANGE)
    _debt_collector(table)

    game.respond_to_action(table.bob.player_id, _pay(wild))

    assert table.alice.get_set(PropertyColor.ORANGE).cards == [wild]
    assert wild not in table.alice.get_set(PropertyColor.PINK).cards


def test_only_the_target_may_respond(table3):
    game = table3.game
    card = table3.give_action(table3.alice, ActionKind.DEBT_COLLECTOR)
    game.play_card(table3.alice.player_id, card.card_id, ChoosePlayer(table3.bob.player_id))

    with pytest.raises(SequencingError):
        game.respond_to_action(table3.carol.player_id, ActionResponse())
    with pytest.raises(SequencingError):
        game.respond_to_action(table3.alice.player_id, ActionResponse())


def test_decline_without_refusal_is_rejected(table):
    _debt_collector(table)

    with pytest.raises(RuleViolation):
        table.game.respond_to_action(table.bob.player_id, ActionResponse(accept=False))
    assert table.game.pending_action is not None


def test_no_playing_while_pending(table):
    game = table.game
    money = table.give_money(table.alice, 1)
    _debt_collector(table)

    with pytest.raises(SequencingError):
        game.play_card(table.alice.player_id, money.card_id)
    with pytest.raises(SequencingError):
        game.end_turn_early(table.alice.player_id)


def test_respond_without_pending(table):
    with pytest.raises(SequencingError):
        table.game.respond_to_action(table.bob.player_id, ActionResponse())


def test_last_action_resolves_to_finishing(table):
    game = table.game
    game.actions_remaining = 1
    _debt_collector(table)

    game.respond_to_action(table.bob.player_id, ActionResponse())

    assert game.turn_phase == TurnPhase.FINISHING


# ---- Broadcast: birthday and rent ----


def test_birthday_collects_from_everyone(table3):
    game = table3.game
    bob_two = table3.bank(table3.bob, 2)[0]
    carol_two = table3.bank(table3.carol, 2)[0]
    card = table3.give_action(table3.alice, ActionKind.BIRTHDAY)

    game.play_card(table3.alice.player_id, card.card_id)
    pending = game.pending_action
    assert pending.is_broadcast
    assert pending.amount == 2

    game.respond_to_action(table3.bob.player_id, _pay(bob_two))
    assert game.pending_action is pending
    with pytest.raises(SequencingError):
        game.respond_to_action(table3.bob.player_id, ActionResponse())

    game.respond_to_action(table3.carol.player_id, _pay(carol_two))
    assert game.pending_action is None
    assert table3.alice.bank == [bob_two, carol_two]


def test_broadcast_refusal_only_covers_the_refuser(table3):
    game = table3.game
    table3.bank(table3.bob, 2)
    carol_two = table3.bank(table3.carol, 2)[0]
    table3.give_action(table3.bob, ActionKind.JUST_SAY_NO)
    card = table3.give_action(table3.alice, ActionKind.BIRTHDAY)
    game.play_card(table3.alice.player_id, card.card_id)

    game.respond_to_action(table3.bob.player_id, REFUSE)
    assert game.pending_action is not None

    game.respond_to_action(table3.carol.player_id, _pay(carol_two))
    assert table3.alice.bank == [carol_two]
    assert len(table3.bob.bank) == 1
    assert game.pending_action is None


def test_rent_charges_every_opponent(table3):
    game = table3.game
    table3.place(table3.alice, PropertyColor.BROWN, 2)
    rent = table3.give_rent(table3.alice, PropertyColor.BROWN)

    game.play_card(table3.alice.player_id, rent.card_id, ChargeRent(PropertyColor.BROWN))

    pending = game.pending_action
    assert pending.kind == PendingKind.RENT
    assert pending.amount == 2
    assert sorted(pending.awaiting(game.players)) == sorted(
        [table3.bob.player_id, table3.carol.player_id]
    )
    assert rent in game.discard_pile


def test_rent_needs_a_matching_set(table):
    rent = table.give_rent(table.alice, PropertyColor.BROWN)

    with pytest.raises(RuleViolation):
        table.game.play_card(table.alice.player_id, rent.card_id, ChargeRent(PropertyColor.BROWN))
    table.place(table.alice, PropertyColor.GREEN, 1)
    with pytest.raises(RuleViolation):
        table.game.play_card(table.alice.player_id, rent.card_id, ChargeRent(PropertyColor.GREEN))
    assert rent in table.alice.hand


def test_wild_rent_targets_one_player(table3):
    game = table3.game
    table3.place(table3.alice, PropertyColor.GREEN, 3)
    rent = table3.give_rent(table3.alice, PropertyColor.GREEN, wild=True)

    with pytest.raises(RuleViolation):
        game.play_card(table3.alice.player_id, rent.card_id, ChargeRent(PropertyColor.GREEN))

    game.play_card(
        table3.alice.player_id, rent.card_id, ChargeRent(PropertyColor.GREEN, table3.carol.player_id)
    )
    pending = game.pending_action
    assert not pending.is_broadcast
    assert pending.target_id == table3.carol.player_id
    assert pending.amount == 7


def test_double_rent(table):
    game = table.game
    table.place(table.alice, PropertyColor.DARK_BLUE, 1)
    rent = table.give_rent(table.alice, PropertyColor.DARK_BLUE)
    double = table.give_action(table.alice, ActionKind.DOUBLE_RENT)

    game.play_card(
        table.alice.player_id,
        rent.card_id,
        ChargeRent(PropertyColor.DARK_BLUE, double_rent_card_id=double.card_id),
    )

    assert game.pending_action.amount == 6
    assert game.actions_remaining == 1
    assert rent in game.discard_pile and double in game.discard_pile
    assert table.alice.hand == []


def test_double_rent_needs_two_actions(table):
    game = table.game
    game.actions_remaining = 1
    table.place(table.alice, PropertyColor.DARK_BLUE, 1)
    rent = table.give_rent(table.alice, PropertyColor.DARK_BLUE)
    double = table.give_action(table.alice, ActionKind.DOUBLE_RENT)

    with pytest.raises(RuleViolation):
        game.play_card(
            table.alice.player_id,
            rent.card_id,
            ChargeRent(PropertyColor.DARK_BLUE, double_rent_card_id=double.card_id),
        )
    assert len(table.alice.hand) == 2
    assert game.pending_action is None


@pytest.mark.parametrize("kind", [ActionKind.DOUBLE_RENT, ActionKind.JUST_SAY_NO])
def test_response_only_cards_cannot_be_played_alone(table, kind):
    card = table.give_action(table.alice, kind)

    with pytest.raises(RuleViolation):
        table.game.play_card(table.alice.player_id, card.card_id)
    assert card in table.alice.hand
    assert table.game.actions_remaining == 3


# ---- Just Say No chains ----


def test_refusal_without_counter_cancels(table):
    game = table.game
    five = table.bank(table.bob, 5)[0]
    no = table.give_action(table.bob, ActionKind.JUST_SAY_NO)
    _debt_collector(table)

    game.respond_to_action(table.bob.player_id, REFUSE)

    assert game.pending_action is None
    assert table.bob.bank == [five]
    assert no in game.discard_pile
    assert game.turn_phase == TurnPhase.ACTION


def test_refusal_needs_a_card(table):
    _debt_collector(table)

    with pytest.raises(RuleViolation):
        table.game.respond_to_action(table.bob.player_id, REFUSE)


def test_counter_refusal_restores_the_action(table):
    game = table.game
    five = table.bank(table.bob, 5)[0]
    table.give_action(table.bob, ActionKind.JUST_SAY_NO)
    table.give_action(table.alice, ActionKind.JUST_SAY_NO)
    _debt_collector(table)

    game.respond_to_action(table.bob.player_id, REFUSE)
    pending = game.pending_action
    assert pending is not None
    assert pending.awaiting(game.players) == [table.alice.player_id]

    game.respond_to_action(table.alice.player_id, REFUSE)
    assert pending.awaiting(game.players) == [table.bob.player_id]
    assert pending.refusals == 2

    game.respond_to_action(table.bob.player_id, _pay(five))
    assert table.alice.bank == [five]
    assert game.pending_action is None


def test_initiator_may_let_the_refusal_stand(table):
    game = table.game
    table.bank(table.bob, 5)
    table.give_action(table.bob, ActionKind.JUST_SAY_NO)
    alice_no = table.give_action(table.alice, ActionKind.JUST_SAY_NO)
    _debt_collector(table)

    game.respond_to_action(table.bob.player_id, REFUSE)
    game.respond_to_action(table.alice.player_id, ActionResponse(accept=False))

    assert game.pending_action is None
    assert alice_no in table.alice.hand
    assert table.alice.bank == []


def test_three_refusals_cancel(table):
    game = table.game
    table.bank(table.bob, 5)
    table.give_action(table.bob, ActionKind.JUST_SAY_NO)
    table.give_action(table.bob, ActionKind.JUST_SAY_NO)
    table.give_action(table.alice, ActionKind.JUST_SAY_NO)
    _debt_collector(table)

    game.respond_to_action(table.bob.player_id, REFUSE)
    game.respond_to_action(table.alice.player_id, REFUSE)
    game.respond_to_action(table.bob.player_id, REFUSE)

    # Alice has nothing left to answer with.
    assert game.pending_action is None
    assert table.alice.bank == []


# ---- Property steals ----


def test_sly_deal(table):
    game = table.game
    orange = table.place(table.bob, PropertyColor.ORANGE, 2)
    card = table.give_action(table.alice, ActionKind.SLY_DEAL)

    game.play_card(table.alice.player_id, card.card_id, StealOne(table.bob.player_id, PropertyColor.ORANGE))
    game.respond_to_action(
        table.bob.player_id, ActionResponse(surrender_card_ids=[orange[0].card_id])
    )

    assert table.alice.get_set(PropertyColor.ORANGE).cards == [orange[0]]
    assert table.bob.get_set(PropertyColor.ORANGE).cards == [orange[1]]


def test_sly_deal_surrender_must_come_from_target_set(table):
    game = table.game
    table.place(table.bob, PropertyColor.ORANGE, 1)
    red = table.place(table.bob, PropertyColor.RED, 1)
    card = table.give_action(table.alice, ActionKind.SLY_DEAL)
    game.play_card(table.alice.player_id, card.card_id, StealOne(table.bob.player_id, PropertyColor.ORANGE))

    with pytest.raises(LookupFailure):
        game.respond_to_action(table.bob.player_id, ActionResponse(surrender_card_ids=[red[0].card_id]))
    with pytest.raises(RuleViolation):
        game.respond_to_action(table.bob.player_id, ActionResponse())
    assert game.pending_action is not None


def test_sly_deal_cannot_break_a_complete_set(table):
    table.place(table.bob, PropertyColor.DARK_BLUE, 2)
    card = table.give_action(table.alice, ActionKind.SLY_DEAL)

    with pytest.raises(RuleViolation):
        table.game.play_card(
            table.alice.player_id, card.card_id, StealOne(table.bob.player_id, PropertyColor.DARK_BLUE)
        )
    assert card in table.alice.hand


def test_sly_deal_needs_target_set(table):
    card = table.give_action(table.alice, ActionKind.SLY_DEAL)

    with pytest.raises(RuleViolation):
        table.game.play_card(
            table.alice.player_id, card.card_id, StealOne(table.bob.player_id, PropertyColor.RED)
        )


def test_forced_deal_swaps(table):
    game = table.game
    brown = table.place(table.alice, PropertyColor.BROWN, 1)[0]
    orange = table.place(table.bob, PropertyColor.ORANGE, 1)[0]
    card = table.give_action(table.alice, ActionKind.FORCED_DEAL)

    game.play_card(
        table.alice.player_id,
        card.card_id,
        Swap(table.bob.player_id, PropertyColor.ORANGE, PropertyColor.BROWN, brown.card_id),
    )
    game.respond_to_action(table.bob.player_id, ActionResponse(surrender_card_ids=[orange.card_id]))

    assert table.alice.get_set(PropertyColor.ORANGE).cards == [orange]
    assert table.alice.get_set(PropertyColor.BROWN) is None
    assert table.bob.get_set(PropertyColor.BROWN).cards == [brown]
    assert table.bob.get_set(PropertyColor.ORANGE) is None


def test_forced_deal_requires_own_property(table):
    table.place(table.bob, PropertyColor.ORANGE, 1)
    card = table.give_action(table.alice, ActionKind.FORCED_DEAL)

    with pytest.raises(LookupFailure):
        table.game.play_card(
            table.alice.player_id,
            card.card_id,
            Swap(table.bob.player_id, PropertyColor.ORANGE, PropertyColor.BROWN, "missing"),
        )


def test_deal_breaker_takes_whole_set(table):
    game = table.game
    blues = table.place(table.bob, PropertyColor.DARK_BLUE, 2)
    house = table.take(lambda c: getattr(c, "action", None) == ActionKind.HOUSE)
    table.bob.get_set(PropertyColor.DARK_BLUE).house = house
    card = table.give_action(table.alice, ActionKind.DEAL_BREAKER)

    game.play_card(table.alice.player_id, card.card_id, StealSet(table.bob.player_id, PropertyColor.DARK_BLUE))
    game.respond_to_action(table.bob.player_id, ActionResponse())

    stolen = table.alice.get_set(PropertyColor.DARK_BLUE)
    assert stolen.cards == blues
    assert stolen.house is house
    assert table.bob.properties == []


def test_deal_breaker_needs_complete_set(table):
    table.place(table.bob, PropertyColor.GREEN, 2)
    card = table.give_action(table.alice, ActionKind.DEAL_BREAKER)

    with pytest.raises(RuleViolation):
        table.game.play_card(
            table.alice.player_id, card.card_id, StealSet(table.bob.player_id, PropertyColor.GREEN)
        )
