"""Texas Hold'em rules engine: cards, hand evaluation, betting and the bot policy."""

from .cards import RANKS, SUITS, Card, Deck, Suit, build_deck, deal, parse_cards
from .evaluator import HandCategory, HandResult, compare, describe, evaluate
from .game import Game, game_from_config, new_game
from .models import (
    ActionType,
    BettingRound,
    DecisionState,
    Participant,
    ParticipantSnapshot,
    PolicyProfile,
    ShowdownResult,
    TableConfig,
)
from .policy import choose_action, decide_action, decide_amount, hand_strength

__all__ = [
    "Card",
    "Deck",
    "RANKS",
    "SUITS",
    "Suit",
    "build_deck",
    "deal",
    "parse_cards",
    "HandCategory",
    "HandResult",
    "compare",
    "describe",
    "evaluate",
    "Game",
    "game_from_config",
    "new_game",
    "ActionType",
    "BettingRound",
    "DecisionState",
    "Participant",
    "ParticipantSnapshot",
    "PolicyProfile",
    "ShowdownResult",
    "TableConfig",
    "choose_action",
    "decide_action",
    "decide_amount",
    "hand_strength",
]
