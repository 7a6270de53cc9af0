from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import Card, Suit

# Hand ranking for Texas Hold'em: the best five cards out of hole + community.


class HandCategory(IntEnum):
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title().replace(" Of A ", " of a ")


@dataclass(frozen=True)
class HandResult:
    category: HandCategory
    tie_break_cards: Tuple[Card, ...]

    @property
    def ranks(self) -> Tuple[int, ...]:
        return tuple(card.rank for card in self.tie_break_cards)

    @property
    def key(self) -> Tuple[int, Tuple[int, ...]]:
        """Sort key consistent with :func:`compare`."""
        return int(self.category), self.ranks

    def __str__(self) -> str:
        return f"{self.category.label} [{' '.join(card.label for card in self.tie_break_cards)}]"


def evaluate(hole: Sequence[Card], community: Sequence[Card] = ()) -> HandResult:
    """Rank the best five-card hand available from the hole and community cards.

    Categories are tried from strongest to weakest and the first match wins.
    Decisive groups (quads, trips, pairs) come first in ``tie_break_cards``,
    kickers after, each by rank descending. A wheel straight lists the ace last.
    """
    if len(hole) != 2:
        raise ValueError(f"Expected 2 hole cards, got {len(hole)}")
    if len(community) > 5:
        raise ValueError(f"At most 5 community cards allowed, got {len(community)}")
    cards = list(hole) + list(community)
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards in hand")
    return evaluate_cards(cards)


def evaluate_cards(cards: Sequence[Card]) -> HandResult:
    ordered = sorted(cards, key=lambda card: card.rank, reverse=True)

    by_suit: Dict[Suit, List[Card]] = defaultdict(list)
    by_rank: Dict[int, List[Card]] = defaultdict(list)
    for card in ordered:
        by_suit[card.suit].append(card)
        by_rank[card.rank].append(card)

    flush_cards: Optional[List[Card]] = None
    for suited in by_suit.values():
        if len(suited) >= 5:
            flush_cards = suited
            break

    if flush_cards:
        straight_flush = _find_straight(flush_cards)
        if straight_flush:
            if straight_flush[0].rank == 14:
                return HandResult(HandCategory.ROYAL_FLUSH, tuple(straight_flush))
            return HandResult(HandCategory.STRAIGHT_FLUSH, tuple(straight_flush))

    # Groups ordered by size, then rank.
    groups = sorted(by_rank.values(), key=lambda group: (len(group), group[0].rank), reverse=True)

    if len(groups[0]) == 4:
        quads = groups[0]
        return HandResult(HandCategory.FOUR_OF_A_KIND, tuple(quads + _kickers(ordered, quads, 1)))

    trips = [group for group in groups if len(group) >= 3]
    if trips:
        top = trips[0]
        pairs = [group for group in groups if group is not top and len(group) >= 2]
        if pairs:
            best_pair = max(pairs, key=lambda group: group[0].rank)
            return HandResult(HandCategory.FULL_HOUSE, tuple(top[:3] + best_pair[:2]))

    if flush_cards:
        return HandResult(HandCategory.FLUSH, tuple(flush_cards[:5]))

    straight = _find_straight(ordered)
    if straight:
        return HandResult(HandCategory.STRAIGHT, tuple(straight))

    if trips:
        top = trips[0][:3]
        return HandResult(HandCategory.THREE_OF_A_KIND, tuple(top + _kickers(ordered, top, 2)))

    pairs = [group for group in groups if len(group) == 2]
    if len(pairs) >= 2:
        used = pairs[0] + pairs[1]
        return HandResult(HandCategory.TWO_PAIR, tuple(used + _kickers(ordered, used, 1)))
    if pairs:
        return HandResult(HandCategory.ONE_PAIR, tuple(pairs[0] + _kickers(ordered, pairs[0], 3)))

    return HandResult(HandCategory.HIGH_CARD, tuple(ordered[:5]))


def compare(a: HandResult, b: HandResult) -> int:
    """Return 1 if ``a`` beats ``b``, -1 if it loses and 0 on an exact tie."""
    if a.category != b.category:
        return 1 if a.category > b.category else -1
    for left, right in zip(a.tie_break_cards, b.tie_break_cards):
        if left.rank != right.rank:
            return 1 if left.rank > right.rank else -1
    return 0


def describe(result: HandResult) -> str:
    return result.category.label


def _kickers(ordered: Sequence[Card], used: Sequence[Card], count: int) -> List[Card]:
    return [card for card in ordered if card not in used][:count]


def _find_straight(cards: Sequence[Card]) -> Optional[List[Card]]:
    # One card per rank, highest first.
    distinct: Dict[int, Card] = {}
    for card in sorted(cards, key=lambda c: c.rank, reverse=True):
        distinct.setdefault(card.rank, card)

    for high in range(14, 5, -1):
        if all(rank in distinct for rank in range(high, high - 5, -1)):
            return [distinct[rank] for rank in range(high, high - 5, -1)]
    if all(rank in distinct for rank in (14, 5, 4, 3, 2)):  # Ace low
        return [distinct[5], distinct[4], distinct[3], distinct[2], distinct[14]]
    return None
