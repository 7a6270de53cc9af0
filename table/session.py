from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from holdem.game import Game
from holdem.models import ActionType, ShowdownResult
from holdem.policy import choose_action, fallback_action

LOGGER = logging.getLogger("holdem_table")

# TableSession drives one Game: it starts hands, runs policy-driven seats after
# a delay and takes human actions. The Game itself never waits on anything.


class TableError(Exception):
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


@dataclass(frozen=True)
class ActionToken:
    # Identifies one turn; a delayed action only applies while its token is current.
    hand_number: int
    actor_index: int
    sequence: int


@dataclass
class PendingAction:
    token: ActionToken
    timer_task: Optional[asyncio.Task] = None


def parse_amount(value: Union[int, str, None]) -> int:
    """Turn a human-entered chip amount into an int or raise ``TableError``."""
    if isinstance(value, bool):
        value = None
    if isinstance(value, str):
        text = value.strip()
        value = int(text) if text.isdigit() else None
    if not isinstance(value, int) or value <= 0:
        raise TableError("INVALID_AMOUNT", "Bet amount must be a positive whole number of chips")
    return value


class TableSession:
    """Hosts one table: one Game, any mix of human and policy-driven seats.

    Policy turns run as asyncio tasks, so with policy seats in play the session
    is driven from inside a running event loop.
    """

    def __init__(self, game: Game, action_delay_ms: int = 1_000, rng: Optional[random.Random] = None) -> None:
        if action_delay_ms < 0:
            raise ValueError("action_delay_ms must not be negative")
        self.game = game
        self.action_delay_ms = action_delay_ms
        self.pending_action: Optional[PendingAction] = None
        self._rng = rng or random.Random()
        self._sequence = 0

    # Turn tokens -----------------------------------------------------

    def current_token(self) -> Optional[ActionToken]:
        if self.game.current_player() is None:
            return None
        return ActionToken(self.game.hand_number, self.game.current_player_index, self._sequence)

    def is_current(self, token: ActionToken) -> bool:
        return self.current_token() == token

    # Hand flow -------------------------------------------------------

    def start_hand(self) -> None:
        self._require_event_loop(any(p.is_policy_driven for p in self.game.participants()))
        self._cancel_pending()
        self.game.start_new_round()
        self._sequence += 1
        LOGGER.info(
            "Hand %s started; dealer=%s stacks=%s",
            self.game.hand_number,
            self._dealer_name(),
            {p.name: p.chips for p in self.game.participants()},
        )
        self._after_action()

    def schedule_policy_action(self) -> Optional[PendingAction]:
        """Queue the current policy seat's move to fire after the configured delay."""
        actor = self.game.current_player()
        token = self.current_token()
        if actor is None or token is None or not actor.is_policy_driven:
            return None
        pending = PendingAction(token=token)
        pending.timer_task = asyncio.get_running_loop().create_task(self._delayed_policy_action(token))
        self.pending_action = pending
        return pending

    async def _delayed_policy_action(self, token: ActionToken) -> None:
        await asyncio.sleep(self.action_delay_ms / 1000)
        if not self.is_current(token):
            LOGGER.debug("Discarding stale policy action for hand %s seat %s", token.hand_number, token.actor_index)
            return
        self.pending_action = None
        self.apply_policy_action()
        self._after_action()

    def apply_policy_action(self) -> Tuple[ActionType, Optional[int]]:
        actor = self.game.current_player()
        state = self.game.decision_state()
        if actor is None or state is None or actor.policy is None:
            raise RuntimeError("No policy-driven participant is due to act")

        action, amount = choose_action(state, actor.policy, self._rng)
        if self._apply(action, amount):
            return action, amount

        LOGGER.warning("Policy chose illegal %s (%s) for %s; falling back", action.value, amount, actor.name)
        action = fallback_action(state.legal)
        if not self._apply(action, None):
            action = ActionType.FOLD
            self._apply(action, None)
        return action, None

    def submit_human_action(self, action: Union[ActionType, str], amount: Union[int, str, None] = None) -> None:
        actor = self.game.current_player()
        if actor is None:
            raise TableError("HAND_OVER", "No hand in progress")
        if actor.is_policy_driven:
            raise TableError("NOT_YOUR_TURN", f"It is {actor.name}'s turn")
        self._require_event_loop(any(p.is_policy_driven and not p.folded for p in self.game.participants()))

        try:
            action = ActionType(action.upper() if isinstance(action, str) else action)
        except ValueError:
            raise TableError("ILLEGAL_ACTION", f"Unknown action: {action}") from None

        chips: Optional[int] = None
        if action in (ActionType.BET, ActionType.RAISE):
            chips = parse_amount(amount)

        if not self._apply(action, chips):
            raise TableError("ILLEGAL_ACTION", f"{action.value.capitalize()} is not allowed right now")
        self._after_action()

    def _apply(self, action: ActionType, amount: Optional[int]) -> bool:
        if action == ActionType.FOLD:
            return self.game.fold()
        if action == ActionType.CHECK:
            return self.game.check()
        if action == ActionType.CALL:
            return self.game.call()
        if action == ActionType.BET:
            return amount is not None and self.game.bet(amount)
        if action == ActionType.RAISE:
            return amount is not None and self.game.raise_(amount)
        raise ValueError(f"Unsupported action {action}")

    def _after_action(self) -> None:
        self._sequence += 1
        if self.game.is_hand_complete():
            self.pending_action = None
            for result in self.game.last_results():
                LOGGER.info(
                    "Hand %s: %s %s%s",
                    self.game.hand_number,
                    result.name,
                    f"wins {result.amount}" if result.amount else "loses",
                    f" ({result.hand})" if result.hand else "",
                )
            return
        self.schedule_policy_action()

    def _require_event_loop(self, policy_seats: bool) -> None:
        # Policy turns run as tasks, so check for a loop before the game changes.
        if not policy_seats:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            raise RuntimeError("TableSession must be driven from a running event loop when policy seats play") from None

    def _cancel_pending(self) -> None:
        if self.pending_action and self.pending_action.timer_task:
            self.pending_action.timer_task.cancel()
        self.pending_action = None

    def _dealer_name(self) -> Optional[str]:
        return next((p.name for p in self.game.participants() if p.is_dealer), None)

    # Policy-only play ------------------------------------------------

    async def play_hand(self) -> Tuple[ShowdownResult, ...]:
        """Play one hand to completion; every seat that acts must be policy-driven."""
        self.start_hand()
        while not self.game.is_hand_complete():
            pending = self.pending_action
            if pending is None or pending.timer_task is None:
                actor = self.game.current_player()
                raise RuntimeError(f"Hand stalled waiting on {actor.name if actor else 'nobody'}")
            await pending.timer_task
        return self.game.last_results()

    async def run_hands(self, count: int) -> List[Tuple[ShowdownResult, ...]]:
        results = []
        for _ in range(count):
            if self.game.is_match_over():
                LOGGER.info("Match over after %s hands", self.game.hand_number)
                break
            results.append(await self.play_hand())
        return results
