from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .cards import Card
from .evaluator import HandResult


class BettingRound(str, Enum):
    PRE_FLOP = "PRE_FLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"


ROUND_ORDER = list(BettingRound)


class ActionType(str, Enum):
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    BET = "BET"
    RAISE = "RAISE"


@dataclass
class TableConfig:
    starting_chips: int = 1_000
    min_bet: int = 20
    action_delay_ms: int = 1_000
    seed: Optional[int] = None


@dataclass(frozen=True)
class PolicyProfile:
    """Personality of a policy-driven participant. Never affects legality."""

    aggressiveness: int = 50
    tightness: int = 50

    def __post_init__(self) -> None:
        for label, value in (("aggressiveness", self.aggressiveness), ("tightness", self.tightness)):
            if not 0 <= value <= 100:
                raise ValueError(f"{label} must be between 0 and 100, got {value}")


@dataclass
class Participant:
    name: str
    chips: int
    hole_cards: List[Card] = field(default_factory=list)
    current_bet: int = 0
    total_in_pot: int = 0
    folded: bool = False
    is_dealer: bool = False
    sitting_out: bool = False
    policy: Optional[PolicyProfile] = None

    @property
    def is_policy_driven(self) -> bool:
        return self.policy is not None

    @property
    def all_in(self) -> bool:
        return self.chips == 0 and not self.folded and not self.sitting_out

    @property
    def can_act(self) -> bool:
        return not self.folded and self.chips > 0

    def reset_for_hand(self) -> None:
        self.hole_cards.clear()
        self.current_bet = 0
        self.total_in_pot = 0
        self.is_dealer = False
        # Busted seats sit the hand out and count as folded.
        self.sitting_out = self.chips == 0
        self.folded = self.sitting_out

    def reset_for_round(self) -> None:
        self.current_bet = 0

    def commit(self, amount: int) -> int:
        """Move up to ``amount`` chips into the pot; returns what was actually committed."""
        amount = max(0, min(amount, self.chips))
        self.chips -= amount
        self.current_bet += amount
        self.total_in_pot += amount
        return amount

    def add_chips(self, amount: int) -> None:
        if amount > 0:
            self.chips += amount

    def snapshot(self) -> "ParticipantSnapshot":
        return ParticipantSnapshot(
            name=self.name,
            chips=self.chips,
            hole_cards=tuple(self.hole_cards),
            current_bet=self.current_bet,
            folded=self.folded,
            is_dealer=self.is_dealer,
            all_in=self.all_in,
            sitting_out=self.sitting_out,
            policy=self.policy,
        )


@dataclass(frozen=True)
class ParticipantSnapshot:
    name: str
    chips: int
    hole_cards: Tuple[Card, ...]
    current_bet: int
    folded: bool
    is_dealer: bool
    all_in: bool
    sitting_out: bool
    policy: Optional[PolicyProfile]

    @property
    def is_policy_driven(self) -> bool:
        return self.policy is not None


@dataclass(frozen=True)
class ShowdownResult:
    name: str
    amount: int
    hand: Optional[HandResult] = None


@dataclass(frozen=True)
class DecisionState:
    # Everything the acting participant is allowed to see when choosing a move.
    name: str
    round: BettingRound
    hole_cards: Tuple[Card, ...]
    community: Tuple[Card, ...]
    pot: int
    max_bet: int
    current_bet: int
    chips: int
    min_bet: int
    legal: Tuple[ActionType, ...]

    @property
    def to_call(self) -> int:
        return min(max(self.max_bet - self.current_bet, 0), self.chips)
