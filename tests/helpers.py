from __future__ import annotations

import itertools
from typing import List, Optional, Sequence, Tuple

from holdem.cards import RANK_LABEL, Card, Suit, parse_cards
from holdem.game import Game, new_game
from holdem.models import ActionType, Participant


def create_game(
    *,
    players: int = 3,
    starting_chips: int = 1_000,
    min_bet: int = 20,
    seed: Optional[int] = 42,
) -> Game:
    """Instantiate a game with a populated table."""
    return new_game([f"Player{idx}" for idx in range(players)], starting_chips, min_bet, seed=seed)


def create_game_with_stacks(stacks: Sequence[int], min_bet: int = 20) -> Game:
    participants = [Participant(name=f"Player{idx}", chips=chips) for idx, chips in enumerate(stacks)]
    return Game(participants, min_bet)


def stacked_deck(hole_cards: Sequence[Tuple[str, str]], board: Sequence[str], dealer: int = 0) -> List[Card]:
    """Arrange a deck so each seat gets ``hole_cards[seat]`` and the board runs out as given.

    Mirrors the deal: one card at a time starting left of the dealer, then a
    burn before the flop, the turn and the river.
    """
    size = len(hole_cards)
    order = [(dealer + step) % size for step in range(1, size + 1)]
    labels = [hole_cards[seat][0] for seat in order] + [hole_cards[seat][1] for seat in order]
    chosen = parse_cards(labels)
    flop, turn, river = parse_cards(board[:3]), parse_cards(board[3:4]), parse_cards(board[4:5])

    used = set(chosen + flop + turn + river)
    spare = [Card(rank, suit) for suit in Suit for rank in RANK_LABEL if Card(rank, suit) not in used]
    deck = list(chosen)
    for street in (flop, turn, river):
        deck.append(spare.pop())
        deck.extend(street)
    return deck + spare


def stack_deck(monkeypatch, deck: Sequence[Card]) -> None:
    monkeypatch.setattr("holdem.cards.build_deck", lambda rng=None: list(deck))


def total_chips(game: Game) -> int:
    return game.pot() + sum(participant.chips for participant in game.participants())


def passive_action(game: Game) -> bool:
    legal = game.legal_actions()
    if ActionType.CHECK in legal:
        return game.check()
    if ActionType.CALL in legal:
        return game.call()
    return game.fold()


def auto_complete_hand(game: Game) -> None:
    """Advance the current hand with check/call until it is decided."""
    while not game.is_hand_complete():
        assert game.current_player() is not None
        assert passive_action(game)


# Reference evaluator: best of every five-card subset, scored independently.


def reference_score(cards: Sequence[Card]) -> Tuple[int, List[int]]:
    return max(_score_five(combo) for combo in itertools.combinations(cards, 5))


def _score_five(cards: Sequence[Card]) -> Tuple[int, List[int]]:
    ranks = sorted((card.rank for card in cards), reverse=True)
    counts = {rank: ranks.count(rank) for rank in set(ranks)}
    grouped = sorted(counts, key=lambda rank: (counts[rank], rank), reverse=True)
    shape = sorted(counts.values(), reverse=True)
    flush = len({card.suit for card in cards}) == 1

    high = None
    if len(counts) == 5:
        if ranks[0] - ranks[4] == 4:
            high = ranks[0]
        elif ranks == [14, 5, 4, 3, 2]:
            high = 5

    if high and flush:
        return (9 if high == 14 else 8, [high])
    if shape[0] == 4:
        return (7, grouped)
    if shape == [3, 2]:
        return (6, grouped)
    if flush:
        return (5, ranks)
    if high:
        return (4, [high])
    if shape[0] == 3:
        return (3, grouped)
    if shape == [2, 2, 1]:
        return (2, grouped)
    if shape[0] == 2:
        return (1, grouped)
    return (0, ranks)
