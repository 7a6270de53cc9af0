import random

from holdem.game import new_game
from holdem.models import ActionType, BettingRound, PolicyProfile
from holdem.policy import choose_action

from .helpers import total_chips

ROUND_INDEX = {round_: idx for idx, round_ in enumerate(BettingRound)}


def apply(game, action, amount):
    if action == ActionType.FOLD:
        return game.fold()
    if action == ActionType.CHECK:
        return game.check()
    if action == ActionType.CALL:
        return game.call()
    if action == ActionType.BET:
        return game.bet(amount)
    return game.raise_(amount)


def test_policy_tables_conserve_chips_over_many_hands():
    rng = random.Random(1_234)
    names = [f"Stress{idx}" for idx in range(6)]
    policies = {name: PolicyProfile(rng.randint(0, 100), rng.randint(0, 100)) for name in names}
    game = new_game(names, 500, 10, policies=policies, seed=99)
    table_total = total_chips(game)
    hands_played = 0

    for _ in range(400):
        if not game.can_start_hand():
            break
        game.start_new_round()
        hands_played += 1
        last_round = ROUND_INDEX[game.current_round()]
        last_board = len(game.community_cards())

        while not game.is_hand_complete():
            state = game.decision_state()
            actor = game.current_player()
            assert state is not None and actor is not None
            action, amount = choose_action(state, actor.policy, rng)
            assert action in state.legal
            assert apply(game, action, amount), f"policy produced a rejected {action}"

            assert total_chips(game) == table_total
            assert ROUND_INDEX[game.current_round()] >= last_round
            assert len(game.community_cards()) >= last_board
            last_round = ROUND_INDEX[game.current_round()]
            last_board = len(game.community_cards())

        assert game.pot() == 0
        assert all(participant.chips >= 0 for participant in game.participants())

    assert hands_played >= 10
    assert sum(participant.chips for participant in game.participants()) == table_total


def test_many_passive_hands_round_robin():
    game = new_game([f"P{idx}" for idx in range(5)], 2_000, 20, seed=7)
    for _ in range(200):
        game.start_new_round()
        while not game.is_hand_complete():
            if ActionType.CHECK in game.legal_actions():
                game.check()
            else:
                game.call()
        assert total_chips(game) == 10_000
    assert game.hand_number == 200
