from __future__ import annotations

import logging
import random
from collections import defaultdict
from functools import cmp_to_key
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from .cards import Card, Deck, cards_to_labels
from .evaluator import HandResult, compare, describe, evaluate
from .models import (
    ROUND_ORDER,
    ActionType,
    BettingRound,
    DecisionState,
    Participant,
    ParticipantSnapshot,
    PolicyProfile,
    ShowdownResult,
    TableConfig,
)

LOGGER = logging.getLogger("holdem_engine")

# Two hole cards each plus three burns and five board cards must fit in one deck.
MAX_PARTICIPANTS = (52 - 8) // 2

# Game keeps all table state in memory. Nothing here schedules, sleeps or does
# I/O: only poker rules, chip accounting and betting order.


class Game:
    """Texas Hold'em betting engine for one table session.

    Mutators (``fold``, ``check``, ``call``, ``bet``, ``raise_``) act for the
    current player and return ``False`` without touching any state when the
    action is illegal. Accessors hand out snapshots, never live lists.
    """

    def __init__(
        self,
        participants: Sequence[Participant],
        min_bet: int,
        rng: Optional[random.Random] = None,
    ) -> None:
        if len(participants) < 2:
            raise ValueError("A game needs at least 2 participants")
        if len(participants) > MAX_PARTICIPANTS:
            raise ValueError(f"A game seats at most {MAX_PARTICIPANTS} participants")
        names = [participant.name for participant in participants]
        if any(not name or not name.strip() for name in names):
            raise ValueError("Participant names must not be blank")
        if len(set(names)) != len(names):
            raise ValueError("Participant names must be unique")
        if any(participant.chips <= 0 for participant in participants):
            raise ValueError("Starting chips must be positive")
        if not isinstance(min_bet, int) or min_bet <= 0:
            raise ValueError("Minimum bet must be a positive integer")

        self.min_bet = min_bet
        self._participants: List[Participant] = list(participants)
        self._rng = rng or random.Random()
        self._deck = Deck(self._rng)
        self._community: List[Card] = []
        self._pot = 0
        self._round = BettingRound.PRE_FLOP
        self._pending: Set[int] = set()
        self._events: List[Dict[str, object]] = []
        self._results: Tuple[ShowdownResult, ...] = ()
        self._last_pot_won = 0

        self.hand_number = 0
        self.dealer_index: Optional[int] = None
        self.current_player_index = 0
        self.last_bettor: Optional[int] = None
        self.last_raise_amount = 0

    # Hand lifecycle --------------------------------------------------

    def can_start_hand(self) -> bool:
        return sum(1 for participant in self._participants if participant.chips > 0) >= 2

    def is_match_over(self) -> bool:
        return not self.can_start_hand()

    def is_hand_complete(self) -> bool:
        return self.hand_number > 0 and self._round == BettingRound.SHOWDOWN

    def start_new_round(self) -> None:
        if self.hand_number > 0 and not self.is_hand_complete():
            self._return_committed_chips()
        if not self.can_start_hand():
            raise RuntimeError("Not enough players with chips to start a hand")

        for participant in self._participants:
            participant.reset_for_hand()

        self._deck.reset()
        self._community.clear()
        self._pot = 0
        self._round = BettingRound.PRE_FLOP
        self._pending.clear()
        self._events = []
        self._results = ()
        self.last_bettor = None
        self.last_raise_amount = 0
        self.hand_number += 1

        # Move button
        if self.dealer_index is None:
            self.dealer_index = self._next_index(-1, self._is_seated)
        else:
            self.dealer_index = self._next_index(self.dealer_index, self._is_seated)
        assert self.dealer_index is not None
        self._participants[self.dealer_index].is_dealer = True

        LOGGER.debug(
            "Hand %s starting; dealer=%s",
            self.hand_number,
            self._participants[self.dealer_index].name,
        )

        self._deal_hole_cards()
        big_blind = self._post_blinds()

        first = self._next_index(big_blind, self._can_act)
        if not self._open_betting(first):
            self._finish_betting_round()

    def _return_committed_chips(self) -> None:
        # Stakes of an abandoned hand go back to their owners.
        for participant in self._participants:
            participant.add_chips(participant.total_in_pot)
            participant.total_in_pot = 0
            participant.current_bet = 0
        LOGGER.info("Hand %s abandoned; returned %s chips from the pot", self.hand_number, self._pot)
        self._pot = 0

    def _deal_hole_cards(self) -> None:
        assert self.dealer_index is not None
        ordered = self._seats_from(self.dealer_index + 1, self._is_seated)
        for _ in range(2):
            for idx in ordered:
                self._participants[idx].hole_cards.append(self._deck.draw())

    def _post_blinds(self) -> int:
        assert self.dealer_index is not None
        sb_idx = self._next_index(self.dealer_index, self._is_seated)
        assert sb_idx is not None
        bb_idx = self._next_index(sb_idx, self._is_seated)
        assert bb_idx is not None

        # Short stacks post what they have and are all-in for less.
        sb_posted = self._commit(sb_idx, self.min_bet // 2)
        bb_posted = self._commit(bb_idx, self.min_bet)

        self.last_bettor = bb_idx
        self.last_raise_amount = bb_posted
        self._events.append(
            {
                "ev": "POST_BLINDS",
                "sb": self._participants[sb_idx].name,
                "bb": self._participants[bb_idx].name,
                "sb_amount": sb_posted,
                "bb_amount": bb_posted,
            }
        )
        return bb_idx

    def _open_betting(self, first: Optional[int]) -> bool:
        """Arm the pending set for a betting round; False when nobody can bet."""
        actionable = [idx for idx in range(len(self._participants)) if self._can_act(idx)]
        max_bet = self.max_bet()
        if len(actionable) < 2 and all(self._participants[idx].current_bet >= max_bet for idx in actionable):
            self._pending = set()
            return False
        self._pending = set(actionable)
        assert first is not None
        self.current_player_index = first
        return True

    def _finish_betting_round(self) -> None:
        # Exactly one reveal per transition; keeps going while nobody can bet.
        while True:
            if self._round == BettingRound.RIVER:
                self._round = BettingRound.SHOWDOWN
                self._resolve_showdown()
                return

            for participant in self._participants:
                participant.reset_for_round()
            self.last_bettor = None
            self.last_raise_amount = 0

            self._round = ROUND_ORDER[ROUND_ORDER.index(self._round) + 1]
            self._deck.burn()
            cards = self._deck.draw_many(3 if self._round == BettingRound.FLOP else 1)
            self._community.extend(cards)
            self._events.append({"ev": self._round.value, "cards": cards_to_labels(cards)})
            LOGGER.debug("Hand %s: %s %s", self.hand_number, self._round.value, cards_to_labels(cards))

            assert self.dealer_index is not None
            first = self._next_index(self.dealer_index, self._can_act)
            if self._open_betting(first):
                return

    # Action handling -------------------------------------------------

    def legal_actions(self) -> Tuple[ActionType, ...]:
        actor = self._actor()
        if actor is None:
            return ()
        max_bet = self.max_bet()
        owed = max_bet - actor.current_bet
        legal = [ActionType.FOLD, ActionType.CHECK if owed <= 0 else ActionType.CALL]
        if max_bet == 0:
            legal.append(ActionType.BET)
        elif actor.chips > owed:
            legal.append(ActionType.RAISE)
        return tuple(legal)

    def fold(self) -> bool:
        actor = self._actor()
        if actor is None:
            return self._reject(ActionType.FOLD, "no hand in progress")
        idx = self.current_player_index
        actor.folded = True
        self._pending.discard(idx)
        self._record(ActionType.FOLD, idx)

        if self.active_participant_count() == 1:
            self._award_uncontested()
            return True
        self._after_action(idx)
        return True

    def check(self) -> bool:
        actor = self._actor()
        if actor is None:
            return self._reject(ActionType.CHECK, "no hand in progress")
        if actor.current_bet < self.max_bet():
            return self._reject(ActionType.CHECK, "facing a bet")
        idx = self.current_player_index
        self._pending.discard(idx)
        self._record(ActionType.CHECK, idx)
        self._after_action(idx)
        return True

    def call(self) -> bool:
        actor = self._actor()
        if actor is None:
            return self._reject(ActionType.CALL, "no hand in progress")
        amount = min(self.max_bet() - actor.current_bet, actor.chips)
        if amount <= 0:
            return self.check()
        idx = self.current_player_index
        committed = self._commit(idx, amount)
        self._pending.discard(idx)
        self._record(ActionType.CALL, idx, committed)
        self._after_action(idx)
        return True

    def bet(self, amount: int) -> bool:
        actor = self._actor()
        if actor is None:
            return self._reject(ActionType.BET, "no hand in progress")
        if not _is_chip_amount(amount):
            return self._reject(ActionType.BET, f"invalid amount {amount!r}")
        if self.max_bet() > 0:
            return self._reject(ActionType.BET, "a bet is already open; raise instead")

        amount = min(max(amount, self.min_bet), actor.chips)
        idx = self.current_player_index
        committed = self._commit(idx, amount)
        self.last_bettor = idx
        self.last_raise_amount = committed
        self._reopen_action(idx)
        self._record(ActionType.BET, idx, committed)
        self._after_action(idx)
        return True

    def raise_(self, amount: int) -> bool:
        """Call the open bet and add ``amount`` (at least the minimum bet) on top."""
        actor = self._actor()
        if actor is None:
            return self._reject(ActionType.RAISE, "no hand in progress")
        if not _is_chip_amount(amount):
            return self._reject(ActionType.RAISE, f"invalid amount {amount!r}")
        max_bet = self.max_bet()
        if max_bet == 0:
            return self._reject(ActionType.RAISE, "nothing to raise; bet instead")

        call_amount = max_bet - actor.current_bet
        raise_amount = max(amount, self.min_bet)
        total = min(call_amount + raise_amount, actor.chips)
        if total <= call_amount:
            return self._reject(ActionType.RAISE, "not enough chips to raise")

        idx = self.current_player_index
        self._commit(idx, total)
        self.last_bettor = idx
        self.last_raise_amount = total - call_amount
        self._reopen_action(idx)
        self._record(ActionType.RAISE, idx, total)
        self._after_action(idx)
        return True

    def _actor(self) -> Optional[Participant]:
        if self.hand_number == 0 or self._round == BettingRound.SHOWDOWN or not self._pending:
            return None
        return self._participants[self.current_player_index]

    def _reject(self, action: ActionType, reason: str) -> bool:
        LOGGER.debug("Rejected %s in hand %s: %s", action.value, self.hand_number, reason)
        return False

    def _reopen_action(self, aggressor: int) -> None:
        self._pending = {
            idx for idx in range(len(self._participants)) if idx != aggressor and self._can_act(idx)
        }

    def _after_action(self, idx: int) -> None:
        if not self._pending:
            self._finish_betting_round()
            return
        nxt = self._next_index(idx, lambda seat: seat in self._pending)
        assert nxt is not None
        self.current_player_index = nxt

    def _commit(self, idx: int, amount: int) -> int:
        committed = self._participants[idx].commit(amount)
        self._pot += committed
        return committed

    def _record(self, action: ActionType, idx: int, amount: Optional[int] = None) -> None:
        event: Dict[str, object] = {"ev": action.value, "name": self._participants[idx].name}
        if amount is not None:
            event["amount"] = amount
        self._events.append(event)
        LOGGER.debug("Hand %s: %s %s %s", self.hand_number, event["name"], action.value, amount or "")

    # Showdown --------------------------------------------------------

    def _award_uncontested(self) -> None:
        winner_idx = next(idx for idx, participant in enumerate(self._participants) if not participant.folded)
        winner = self._participants[winner_idx]
        amount = self._pot
        winner.add_chips(amount)
        self._last_pot_won = amount
        self._pot = 0
        self._results = (ShowdownResult(winner.name, amount),)
        self._events.append({"ev": "POT_AWARD", "name": winner.name, "amount": amount})
        self._close_hand()
        LOGGER.info("Hand %s: %s wins %s uncontested", self.hand_number, winner.name, amount)

    def _resolve_showdown(self) -> None:
        contenders = [idx for idx, participant in enumerate(self._participants) if not participant.folded]
        if len(contenders) == 1:
            self._award_uncontested()
            return

        hands: Dict[int, HandResult] = {}
        for idx in contenders:
            participant = self._participants[idx]
            hands[idx] = evaluate(participant.hole_cards, self._community)
            self._events.append(
                {
                    "ev": "SHOWDOWN",
                    "name": participant.name,
                    "hand": cards_to_labels(participant.hole_cards),
                    "board": cards_to_labels(self._community),
                    "rank": describe(hands[idx]),
                }
            )

        payouts: Dict[int, int] = defaultdict(int)
        total = self._pot
        for pot_value, eligible in self._build_pots():
            # Chips nobody still in the hand can claim go to the best remaining hand.
            contestants = eligible or contenders
            best = max((hands[idx] for idx in contestants), key=cmp_to_key(compare))
            winners = self._dealer_order([idx for idx in contestants if compare(hands[idx], best) == 0])
            share, remainder = divmod(pot_value, len(winners))
            for position, idx in enumerate(winners):
                payouts[idx] += share + (1 if position < remainder else 0)

        for idx, amount in payouts.items():
            winner = self._participants[idx]
            winner.add_chips(amount)
            self._events.append({"ev": "POT_AWARD", "name": winner.name, "amount": amount})
            LOGGER.info(
                "Hand %s: %s wins %s with %s",
                self.hand_number,
                winner.name,
                amount,
                describe(hands[idx]),
            )

        self._last_pot_won = total
        self._pot = 0
        self._results = tuple(
            ShowdownResult(self._participants[idx].name, payouts.get(idx, 0), hands[idx]) for idx in contenders
        )
        self._close_hand()

    def _build_pots(self) -> List[Tuple[int, List[int]]]:
        # Layer the pot by contribution so an all-in only wins what it matched.
        remaining: Dict[int, int] = {
            idx: participant.total_in_pot
            for idx, participant in enumerate(self._participants)
            if participant.total_in_pot > 0
        }

        pots: List[Tuple[int, List[int]]] = []
        while True:
            active = [idx for idx, amount in remaining.items() if amount > 0]
            if not active:
                break
            layer = min(remaining[idx] for idx in active)
            for idx in active:
                remaining[idx] -= layer
            contenders = [idx for idx in active if not self._participants[idx].folded]
            pots.append((layer * len(active), contenders))
        return pots

    def _dealer_order(self, seats: Sequence[int]) -> List[int]:
        assert self.dealer_index is not None
        size = len(self._participants)
        return sorted(seats, key=lambda idx: (idx - self.dealer_index - 1) % size)

    def _close_hand(self) -> None:
        self._round = BettingRound.SHOWDOWN
        self._pending.clear()
        for participant in self._participants:
            participant.reset_for_round()

    # Seat helpers ----------------------------------------------------

    def _is_seated(self, idx: int) -> bool:
        return not self._participants[idx].sitting_out

    def _can_act(self, idx: int) -> bool:
        return self._participants[idx].can_act

    def _next_index(self, start: int, predicate: Callable[[int], bool]) -> Optional[int]:
        # Bounded circular scan so a table with one live seat never spins.
        size = len(self._participants)
        for step in range(1, size + 1):
            idx = (start + step) % size
            if predicate(idx):
                return idx
        return None

    def _seats_from(self, start: int, predicate: Callable[[int], bool]) -> List[int]:
        size = len(self._participants)
        return [(start + step) % size for step in range(size) if predicate((start + step) % size)]

    # Accessors -------------------------------------------------------

    def current_player(self) -> Optional[ParticipantSnapshot]:
        actor = self._actor()
        return actor.snapshot() if actor else None

    def active_participant_count(self) -> int:
        return sum(1 for participant in self._participants if not participant.folded)

    def max_bet(self) -> int:
        return max(participant.current_bet for participant in self._participants)

    def community_cards(self) -> Tuple[Card, ...]:
        return tuple(self._community)

    def current_round(self) -> BettingRound:
        return self._round

    def pot(self) -> int:
        return self._pot

    def participants(self) -> Tuple[ParticipantSnapshot, ...]:
        return tuple(participant.snapshot() for participant in self._participants)

    def last_pot_won(self) -> int:
        return self._last_pot_won

    def last_results(self) -> Tuple[ShowdownResult, ...]:
        return self._results

    def hand_log(self) -> List[Dict[str, object]]:
        return [dict(event) for event in self._events]

    def decision_state(self) -> Optional[DecisionState]:
        actor = self._actor()
        if actor is None:
            return None
        return DecisionState(
            name=actor.name,
            round=self._round,
            hole_cards=tuple(actor.hole_cards),
            community=tuple(self._community),
            pot=self._pot,
            max_bet=self.max_bet(),
            current_bet=actor.current_bet,
            chips=actor.chips,
            min_bet=self.min_bet,
            legal=self.legal_actions(),
        )


def _is_chip_amount(amount: object) -> bool:
    return isinstance(amount, int) and not isinstance(amount, bool) and amount > 0


def new_game(
    participant_names: Sequence[str],
    starting_chips: int,
    min_bet: int,
    policies: Optional[Mapping[str, PolicyProfile]] = None,
    seed: Optional[int] = None,
) -> Game:
    """Build a table; names listed in ``policies`` are driven by the decision policy."""
    if not isinstance(starting_chips, int) or starting_chips <= 0:
        raise ValueError("Starting chips must be positive")
    policies = dict(policies or {})
    unknown = set(policies) - set(participant_names)
    if unknown:
        raise ValueError(f"Policies given for unknown participants: {sorted(unknown)}")
    participants = [
        Participant(name=name, chips=starting_chips, policy=policies.get(name)) for name in participant_names
    ]
    return Game(participants, min_bet, rng=random.Random(seed))


def game_from_config(
    participant_names: Sequence[str],
    config: TableConfig,
    policies: Optional[Mapping[str, PolicyProfile]] = None,
) -> Game:
    return new_game(participant_names, config.starting_chips, config.min_bet, policies=policies, seed=config.seed)
