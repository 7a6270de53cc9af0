from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

RANKS = "23456789TJQKA"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS, start=2)}
RANK_LABEL = {value: rank for rank, value in RANK_VALUE.items()}
RANK_NAMES = {11: "Jack", 12: "Queen", 13: "King", 14: "Ace"}


class Suit(str, Enum):
    HEARTS = "h"
    DIAMONDS = "d"
    CLUBS = "c"
    SPADES = "s"


SUITS = "".join(suit.value for suit in Suit)


@dataclass(frozen=True, order=True)
class Card:
    rank: int
    suit: Suit

    def __post_init__(self) -> None:
        if not isinstance(self.rank, int) or self.rank not in RANK_LABEL:
            raise ValueError(f"Invalid rank: {self.rank}")
        if not isinstance(self.suit, Suit):
            try:
                object.__setattr__(self, "suit", Suit(self.suit))
            except ValueError:
                raise ValueError(f"Invalid suit: {self.suit}") from None

    @property
    def label(self) -> str:
        return f"{RANK_LABEL[self.rank]}{self.suit.value}"

    @property
    def name(self) -> str:
        rank_name = RANK_NAMES.get(self.rank, str(self.rank))
        return f"{rank_name} of {self.suit.name.capitalize()}"

    def __str__(self) -> str:
        return self.label


def parse_label(label: str) -> Card:
    if len(label) != 2:
        raise ValueError(f"Invalid card label: {label}")
    rank = RANK_VALUE.get(label[0].upper())
    if rank is None:
        raise ValueError(f"Invalid rank: {label[0]}")
    return Card(rank, label[1].lower())  # type: ignore[arg-type]


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]


def cards_to_labels(cards: Sequence[Card]) -> List[str]:
    return [card.label for card in cards]


def build_deck(rng: Optional[random.Random] = None) -> List[Card]:
    """Return the 52 distinct cards in a uniformly shuffled order."""
    rng = rng or random.Random()
    deck = [Card(rank, suit) for suit in Suit for rank in RANK_LABEL]
    rng.shuffle(deck)
    return deck


def deal(deck: List[Card], count: int) -> List[Card]:
    if len(deck) < count:
        raise RuntimeError("Deck exhausted: not enough cards left to deal")
    cards = deck[:count]
    del deck[:count]
    return cards


class Deck:
    """The 52-card deck for one hand; draws come off the front without replacement."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._cards: List[Card] = []
        self.reset()

    def reset(self) -> None:
        self._cards = build_deck(self._rng)

    def draw(self) -> Card:
        return deal(self._cards, 1)[0]

    def draw_many(self, count: int) -> List[Card]:
        return deal(self._cards, count)

    def burn(self) -> None:
        self.draw()

    @property
    def remaining(self) -> int:
        return len(self._cards)

    def __len__(self) -> int:
        return len(self._cards)
