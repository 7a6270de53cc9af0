from holdem.models import ActionType, BettingRound

from .helpers import create_game, create_game_with_stacks, stack_deck, stacked_deck, total_chips


def test_multiple_raises_update_last_raise_and_last_bettor():
    game = create_game(players=3, starting_chips=500)
    game.start_new_round()

    assert game.raise_(40)  # Player0 calls 20 and adds 40
    assert game.max_bet() == 60
    assert game.last_raise_amount == 40
    assert game.last_bettor == 0

    assert game.raise_(5)  # floored to the table minimum
    assert game.max_bet() == 80
    assert game.last_raise_amount == 20
    assert game.last_bettor == 1
    assert game.hand_log()[-1] == {"ev": "RAISE", "name": "Player1", "amount": 70}

    assert game.current_player().name == "Player2"
    assert game.legal_actions() == (ActionType.FOLD, ActionType.CALL, ActionType.RAISE)


def test_raise_reopens_action_for_players_who_already_called():
    game = create_game(players=3)
    game.start_new_round()
    assert game.call()  # Player0
    assert game.call()  # Player1
    assert game.raise_(20)  # big blind uses the option

    assert game.current_round() == BettingRound.PRE_FLOP
    assert game.current_player().name == "Player0"
    assert game.call()
    assert game.call()
    assert game.current_round() == BettingRound.FLOP
    assert game.pot() == 120


def test_multiway_all_ins_build_layered_pots(monkeypatch):
    deck = stacked_deck(
        [("Ah", "Ad"), ("Kh", "Kd"), ("Qh", "Qd")],
        ["2c", "7d", "9s", "Jc", "4s"],
    )
    stack_deck(monkeypatch, deck)
    game = create_game_with_stacks([100, 300, 500])
    game.start_new_round()

    assert game.raise_(1_000)  # Player0 all-in for 100
    assert game.raise_(1_000)  # Player1 all-in for 300
    assert ActionType.CALL in game.legal_actions()
    assert game.call()  # Player2 covers both

    assert game.is_hand_complete()
    assert len(game.community_cards()) == 5
    chips = {p.name: p.chips for p in game.participants()}
    # Main pot 300 to aces, side pot 400 to kings, the rest stays with Player2.
    assert chips == {"Player0": 300, "Player1": 400, "Player2": 200}
    assert total_chips(game) == 900
    awards = [event for event in game.hand_log() if event["ev"] == "POT_AWARD"]
    assert sorted(event["amount"] for event in awards) == [300, 400]
