import argparse
import asyncio
import logging
import random

from holdem.game import game_from_config
from holdem.models import PolicyProfile, TableConfig

from .session import TableSession


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a policy-only Texas Hold'em table")
    parser.add_argument("--players", type=int, default=4)
    parser.add_argument("--starting-chips", type=int, default=1_000)
    parser.add_argument("--min-bet", type=int, default=20)
    parser.add_argument("--hands", type=int, default=50)
    parser.add_argument("--delay-ms", type=int, default=0, help="Pause before each policy action (milliseconds)")
    parser.add_argument("--seed", type=int, default=None, help="Seed shuffles and personalities for a repeatable run")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = TableConfig(
        starting_chips=args.starting_chips,
        min_bet=args.min_bet,
        action_delay_ms=args.delay_ms,
        seed=args.seed,
    )
    rng = random.Random(args.seed)
    names = [f"Bot{idx + 1}" for idx in range(args.players)]
    policies = {name: PolicyProfile(rng.randint(0, 100), rng.randint(0, 100)) for name in names}

    session = TableSession(game_from_config(names, config, policies), action_delay_ms=config.action_delay_ms, rng=rng)
    asyncio.run(session.run_hands(args.hands))

    for participant in session.game.participants():
        logging.getLogger("holdem_table").info("%s finished with %s chips", participant.name, participant.chips)


if __name__ == "__main__":
    main()
