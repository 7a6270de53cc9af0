from __future__ import annotations

import random
from typing import Optional, Sequence, Tuple

from .cards import Card
from .evaluator import HandCategory, evaluate
from .models import ActionType, DecisionState, PolicyProfile

_RNG = random.Random()

# Post-flop strength by made hand. High card and one pair get a small bump
# from their top rank inside the band.
_CATEGORY_STRENGTH = {
    HandCategory.ROYAL_FLUSH: 1.0,
    HandCategory.STRAIGHT_FLUSH: 0.95,
    HandCategory.FOUR_OF_A_KIND: 0.9,
    HandCategory.FULL_HOUSE: 0.85,
    HandCategory.FLUSH: 0.75,
    HandCategory.STRAIGHT: 0.65,
    HandCategory.THREE_OF_A_KIND: 0.55,
    HandCategory.TWO_PAIR: 0.45,
    HandCategory.ONE_PAIR: 0.25,
    HandCategory.HIGH_CARD: 0.1,
}
_NOISE = 0.05


def preflop_strength(hole: Sequence[Card]) -> float:
    """Rough 0..1 score for two hole cards. Unpaired hands never exceed 0.5."""
    if len(hole) < 2:
        return 0.0
    high, low = sorted((card.rank for card in hole), reverse=True)
    if high == low:
        return 0.5 + (high - 2) / 12 * 0.5  # 22 = 0.5, AA = 1.0

    score = (high + low - 5) / 22 * 0.3
    gap = high - low
    if gap == 1:
        score += 0.06
    elif gap == 2:
        score += 0.03
    if hole[0].suit == hole[1].suit:
        score += 0.06
    if low >= 10:
        score += 0.08
    return min(score, 0.5)


def hand_strength(hole: Sequence[Card], community: Sequence[Card]) -> float:
    if not community:
        return preflop_strength(hole)
    result = evaluate(hole, community)
    base = _CATEGORY_STRENGTH[result.category]
    if result.category in (HandCategory.HIGH_CARD, HandCategory.ONE_PAIR):
        base += (result.tie_break_cards[0].rank - 2) / 12 * 0.1
    return base


def decide_action(
    state: DecisionState,
    profile: PolicyProfile,
    rng: Optional[random.Random] = None,
) -> ActionType:
    """Pick one of ``state.legal``; never returns an action the engine would refuse."""
    rng = rng or _RNG
    legal = state.legal
    if not legal:
        raise ValueError("No legal actions to choose from")

    strength = _perturbed_strength(state, rng)
    to_call = state.to_call
    pot_odds = to_call / (state.pot + to_call) if to_call else 0.0

    fold_threshold = 0.1 + profile.tightness / 100 * 0.25
    raise_threshold = 0.8 - profile.aggressiveness / 100 * 0.4

    if to_call == 0:
        if strength >= raise_threshold:
            if ActionType.BET in legal:
                return ActionType.BET
            if ActionType.RAISE in legal:
                return ActionType.RAISE
        return ActionType.CHECK if ActionType.CHECK in legal else fallback_action(legal)

    if strength < max(fold_threshold, pot_odds * (1 - profile.aggressiveness / 200)):
        return ActionType.FOLD
    if strength >= raise_threshold and ActionType.RAISE in legal:
        return ActionType.RAISE
    if ActionType.CALL in legal:
        return ActionType.CALL
    return fallback_action(legal)


def decide_amount(
    state: DecisionState,
    profile: PolicyProfile,
    strength: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> int:
    """Size a bet, or the raise on top of the call, from pot, strength and aggressiveness."""
    rng = rng or _RNG
    if strength is None:
        strength = hand_strength(state.hole_cards, state.community)

    pot = max(state.pot, state.min_bet)
    fraction = (0.3 + 0.5 * strength) * (0.5 + profile.aggressiveness / 100)
    amount = int(pot * fraction * rng.uniform(0.85, 1.15))

    available = max(state.chips - state.to_call, 1)
    return max(1, min(max(amount, state.min_bet), available))


def choose_action(
    state: DecisionState,
    profile: PolicyProfile,
    rng: Optional[random.Random] = None,
) -> Tuple[ActionType, Optional[int]]:
    rng = rng or _RNG
    action = decide_action(state, profile, rng)
    if action in (ActionType.BET, ActionType.RAISE):
        return action, decide_amount(state, profile, rng=rng)
    return action, None


def fallback_action(legal: Sequence[ActionType]) -> ActionType:
    """Safest legal move: check, then fold."""
    if ActionType.CHECK in legal:
        return ActionType.CHECK
    return ActionType.FOLD


def _perturbed_strength(state: DecisionState, rng: random.Random) -> float:
    strength = hand_strength(state.hole_cards, state.community)
    return min(1.0, max(0.0, strength + rng.uniform(-_NOISE, _NOISE)))
