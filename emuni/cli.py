"""
EmUni CLI - Command-line interface for the engine.

Usage:
    emuni play [--seed N] [--bot NAME]          Play against the AI in the terminal
    emuni simulate [--games N] [--seed N]       Bot-vs-bot statistics
    emuni deck                                  Show the deck composition
    emuni serve [--host H] [--port P]           Run the REST API
"""

import argparse
import logging
import os
import sys

from .bots import POLICIES, create_policy
from .engine_core.cards import Card, Position, build_deck, deck_composition
from .engine_core.constants import HAND_LIMIT
from .engine_core.rules import legal_moves
from .engine_core.state import Side
from .exceptions import UnknownBotError

LOG_LEVEL = os.getenv("EMUNI_LOG_LEVEL", "WARNING")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="EmUni - Bridge the incompatible",
        prog="emuni",
    )
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (default: %(default)s)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    play_parser = subparsers.add_parser("play", help="Play against the AI")
    play_parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")
    play_parser.add_argument("--bot", default=None, choices=sorted(POLICIES), help="AI policy")

    sim_parser = subparsers.add_parser("simulate", help="Run bot-vs-bot games")
    sim_parser.add_argument("--games", type=int, default=100, help="Number of games")
    sim_parser.add_argument("--seed", type=int, default=0, help="Seed of the first game")
    sim_parser.add_argument("--player-bot", default="random", choices=sorted(POLICIES),
                            help="Policy in the human seat")
    sim_parser.add_argument("--ai-bot", default="medium", choices=sorted(POLICIES),
                            help="Policy in the AI seat")

    subparsers.add_parser("deck", help="Show the deck composition")

    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "deck":
        cmd_deck(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def _format_card(card: Card) -> str:
    return f"{card.name} [{card.card_type.value}]"


def _print_table(state) -> None:
    chain = " - ".join(c.name for c in state.chain) or "(empty)"
    print(f"\nTurn {state.turn_count} | Deck: {state.deck_size} | AI hand: {len(state.ai_hand)}")
    print(f"Chain: {chain}")
    print("Your hand:")
    for i, card in enumerate(state.player_hand, start=1):
        print(f"  {i}. {_format_card(card)}")


def _pick_cards(prompt: str, hand, count: int) -> list[str] | None:
    raw = input(prompt).split()
    try:
        indices = [int(x) - 1 for x in raw]
    except ValueError:
        return None
    if len(indices) != count or any(i < 0 or i >= len(hand) for i in indices):
        return None
    return [hand[i].card_id for i in indices]


def cmd_play(args):
    """Interactive game against the AI."""
    from .session import GameLoop, LoopState, SessionManager

    manager = SessionManager()
    try:
        session = manager.create_session(seed=args.seed, bot=args.bot)
    except UnknownBotError as e:
        print(f"Error: {e}")
        sys.exit(1)

    loop = GameLoop(session)
    print(f"EmUni - seed {session.seed}, opponent: {session.bot_name}")
    print("Commands: <card#> l|r to play, p to pass, q to quit")

    while loop.state != LoopState.GAME_OVER:
        state = session.game_state

        if loop.state == LoopState.WAITING_UNIFY:
            answer = input("UNIFY! Draw 2 extra cards? [y/n] ").strip().lower()
            result = loop.resolve_unify(answer.startswith("y"))
        elif loop.state == LoopState.WAITING_DISCARD:
            _print_table(state)
            ids = _pick_cards(
                f"Hand limit is {HAND_LIMIT}. Pick {state.discards_required} card(s) to discard: ",
                state.player_hand, state.discards_required,
            )
            if ids is None:
                print("Enter card numbers from your hand.")
                continue
            result = loop.discard(ids)
        else:
            _print_table(state)
            if not legal_moves(state.player_hand, state.chain, state.locked_end):
                print("(no legal moves - you can only pass)")
            command = input("> ").strip().lower().split()
            if not command:
                continue
            if command[0] == "q":
                manager.end_session(session.session_id, reason="user_quit")
                print("Bye.")
                return
            if command[0] == "p":
                result = loop.pass_turn()
            else:
                try:
                    card = state.player_hand[int(command[0]) - 1]
                    position = Position.LEFT if command[1].startswith("l") else Position.RIGHT
                except (ValueError, IndexError):
                    print("Usage: <card#> l|r")
                    continue
                result = loop.play(card.card_id, position)

        for line in result.state_changes + result.ai_actions:
            print(f"  {line}")
        if not result.success:
            print(f"  Illegal: {'; '.join(result.errors)}")

    state = session.game_state
    if state.winner is None:
        print("\nDeadlock - both sides passed. Nobody wins.")
    elif state.winner == Side.PLAYER:
        print("\nYou emptied your hand. You win!")
    else:
        print("\nThe AI emptied its hand. AI wins.")
    manager.end_session(session.session_id)


def cmd_simulate(args):
    """Bot-vs-bot statistics."""
    from .session import simulate

    summary = simulate(
        games=args.games,
        player_policy_factory=lambda seed: create_policy(args.player_bot, seed=seed),
        ai_policy_factory=lambda seed: create_policy(args.ai_bot, seed=seed + 1),
        seed=args.seed,
    )

    print(f"Games: {summary.games} ({args.player_bot} vs {args.ai_bot})")
    print(f"Player wins: {summary.player_wins}")
    print(f"AI wins: {summary.ai_wins}")
    print(f"Deadlocks: {summary.deadlocks}")
    print(f"Average turns: {summary.average_turns:.1f}")
    print(f"UNIFY accepted/declined: {summary.unify_accepted}/{summary.unify_declined}")


def cmd_deck(args):
    """Show the deck composition."""
    deck = build_deck()
    print(f"Deck: {len(deck)} cards")
    for key, count in sorted(deck_composition(deck).items()):
        indent = "    " if ":" in key else "  "
        print(f"{indent}{key}: {count}")


def cmd_serve(args):
    """Run the REST API with uvicorn."""
    import uvicorn

    uvicorn.run("emuni.api.app:create_app", host=args.host, port=args.port, factory=True)


if __name__ == "__main__":
    main()
