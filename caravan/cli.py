"""
Caravan CLI - Command-line interface for the engine.

Usage:
    caravan simulate [--players N] [--seed S]   Play an all-automa match
    caravan replay <actions_file>               Replay a recorded match
    caravan serve [--host H] [--port P]         Run the HTTP API
"""

import argparse
import json
import logging
import os
import sys

from .engine_core.action import action_from_dict
from .engine_core.errors import EngineError
from .session import SessionManager

logger = logging.getLogger(__name__)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Caravan - Crystal-Trading Card Game Engine",
        prog="caravan",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("CARAVAN_LOG_LEVEL", "WARNING"),
        help="Logging level (default: CARAVAN_LOG_LEVEL or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play an all-automa match")
    simulate_parser.add_argument("--players", type=int, default=2, help="Number of seats (2-5)")
    simulate_parser.add_argument("--seed", type=int, default=None, help="RNG seed")
    simulate_parser.add_argument("--policy", default="greedy", help="greedy, random or first_legal")
    simulate_parser.add_argument("--max-rounds", type=int, default=200, help="Stop after this round")
    simulate_parser.add_argument("--json", action="store_true", help="Print the final state as JSON")

    # Replay command
    replay_parser = subparsers.add_parser("replay", help="Replay a recorded match")
    replay_parser.add_argument("actions_file", help="JSON file with num_players, seed and actions")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "replay":
        cmd_replay(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_simulate(args):
    """Play a match where every seat is an automa."""
    manager = SessionManager()
    try:
        session = manager.create_session(
            num_players=args.players,
            num_humans=0,
            seed=args.seed,
            bot_policy=args.policy,
        )
    except EngineError as e:
        print(f"Error: {e}")
        sys.exit(1)

    state = session.game_state
    while not state.game_over and state.round <= args.max_rounds:
        if not session.run_automa():
            break

    if args.json:
        print(json.dumps(state.snapshot(), indent=2))
        return

    print(f"Seed: {state.seed}")
    print(f"Rounds: {state.round}, actions: {len(state.action_history)}")
    for player in state.players:
        print(f"  {player} -> {player.get_final_points(state.cards)} points")

    if state.game_over:
        winner = state.winner_player
        print(f"Winner: {winner.name} with {winner.get_final_points(state.cards)} points")
    else:
        print(f"No winner after {args.max_rounds} rounds")
        sys.exit(2)


def cmd_replay(args):
    """
    Replay a recorded match.

    The file holds {"num_players": N, "seed": S, "actions": [...]} with
    actions in their JSON mapping. Every seat is driven from the file.
    """
    try:
        with open(args.actions_file, "r", encoding="utf-8") as f:
            record = json.load(f)
    except FileNotFoundError:
        print(f"Error: File not found: {args.actions_file}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {args.actions_file}: {e}")
        sys.exit(1)

    num_players = int(record.get("num_players", 2))
    manager = SessionManager()
    try:
        session = manager.create_session(
            num_players=num_players,
            num_humans=num_players,
            seed=int(record["seed"]),
        )
        actions = [action_from_dict(data) for data in record.get("actions", [])]
    except (EngineError, KeyError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    for step, action in enumerate(actions, start=1):
        for result in session.execute(action):
            if not result.success:
                print(f"Step {step}: {action.kind} rejected: {', '.join(result.errors)}")
                sys.exit(1)
            for change in result.changes:
                print(f"Step {step}: {change}")

    state = session.game_state
    print(f"Replayed {len(actions)} actions, round {state.round}")
    if state.game_over:
        winner = state.winner_player
        print(f"Winner: {winner.name} with {winner.get_final_points(state.cards)} points")


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    logger.info("Serving Caravan API on %s:%d", args.host, args.port)
    uvicorn.run("caravan.api.app:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
